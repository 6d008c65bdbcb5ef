"""Session control for lox: runs source text through the scanner, parser, resolver and interpreter, either for a
script file or for lines typed into the shell.
"""

from termcolor import colored

from lox.core.interpreter import Interpreter
from lox.core.parser import Parser
from lox.core.printer import AstPrinter
from lox.core.resolver import Resolver
from lox.core.scanner import Scanner
from lox.lang.error import SyntaxException, UsageException


class Session:
    """Governs a lox session. One interpreter serves every run, so globals defined by one shell line are visible to
    the next.
    """
    HEADER = "yellow"

    def __init__(self, error_handler, cmd_line=False, verbose=False, output=None):
        self.error_handler = error_handler
        self.cmd_line = cmd_line  # whether or not in command-line (shell) mode
        self.verbose = verbose    # whether or not to show the AST before running

        self.interpreter = Interpreter(error_handler, output)

        if self.cmd_line:
            self.error_handler.fatal = False

    def run_file(self, path):
        """Reads path and runs it as a script."""
        try:
            with open(path, "r", encoding="utf-8") as file:
                source = file.read()
        except OSError:
            raise UsageException(f"'{path}' could not be opened")

        self.run(source)

    def run(self, source):
        """Runs source. Nothing is executed if a syntax or resolving error was reported."""
        tokens = Scanner(source, self.error_handler).scan_tokens()
        parser = Parser(tokens, self.error_handler)

        expr = None
        if self.cmd_line:
            try:
                statements, expr = parser.parse_repl()
            except SyntaxException as error:
                self.error_handler.report(error)
                return
        else:
            statements = parser.parse()

        if self.verbose:
            self.show_ast(statements, expr)

        if self.error_handler.had_syntax_error:
            return

        resolver = Resolver(self.interpreter, self.error_handler)
        resolver.resolve(statements)
        if expr is not None:
            resolver.resolve(expr)

        if self.error_handler.had_syntax_error:
            return

        if self.verbose:
            self.interpreter.write(colored("[Output]", Session.HEADER))

        if statements:
            self.interpreter.interpret(statements)
        if expr is not None and not self.error_handler.had_runtime_error:
            self.interpreter.interpret(expr)

    def show_ast(self, statements, expr):
        """Prints the tree as S-expressions, followed by a blank line."""
        printer = AstPrinter()

        self.interpreter.write(colored("[AST]", Session.HEADER))
        if statements:
            self.interpreter.write(printer.stringify(statements))
        if expr is not None:
            self.interpreter.write(printer.stringify(expr))
        self.interpreter.write("")
