"""Error handling for the lox language. Only LoxExceptions should be encountered during a run: if another type of error
makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Every stage reports into one ErrorHandler, which also keeps the "had error" flags the host uses to pick an exit code.
"""

import sys

from termcolor import colored


class LoxException(Exception):
    """Templates an error message so that it can be reported by ErrorHandler. Subclasses set name and header."""
    name = "Error"

    def __init__(self, msg):
        super().__init__(msg)
        self.msg = msg

    def header(self):
        """Text shown in square brackets in front of the message."""
        return self.name


class SyntaxException(LoxException):
    """Malformed source found by the scanner or the parser. where is the offending lexeme, or 'end'."""
    name = "SyntaxError"

    def __init__(self, msg, line=None, where=None):
        super().__init__(msg)
        self.line = line
        self.where = where

    def header(self):
        if self.line is None:
            return self.name

        header = f"{self.name} (line {self.line}"
        if self.where:
            header += f" at {self.where}"
        return header + ")"


class ResolvingException(SyntaxException):
    """Static error found by the resolver. Counts as a syntax error when picking the exit code."""
    name = "ResolvingError"


class RuntimeException(LoxException):
    """Error raised while a program runs. token locates the error in the source."""
    name = "RuntimeError"

    def __init__(self, msg, token=None):
        super().__init__(msg)
        self.token = token

    def header(self):
        if self.token is None:
            return self.name
        return f"{self.name} (line {self.token.line})"


class UsageException(LoxException):
    """Host-level misuse: bad command line arguments, unreadable script file."""
    name = "UsageError"


class ErrorHandler:
    """Diagnostics sink for every stage. Also a context manager that turns escaping Python errors into lox errors."""
    ERROR = "red"

    EXIT_OK = 0
    EXIT_USAGE = 64
    EXIT_SYNTAX = 65
    EXIT_RUNTIME = 70

    def __init__(self, fatal=True, stream=None):
        self.fatal = fatal
        self.stream = stream  # defaults to sys.stderr, looked up on every report
        self.errors = []

        self.had_usage_error = False
        self.had_syntax_error = False
        self.had_runtime_error = False

    @property
    def exit_code(self):
        """Process exit code for the errors seen so far."""
        if self.had_usage_error:
            return ErrorHandler.EXIT_USAGE
        if self.had_syntax_error:
            return ErrorHandler.EXIT_SYNTAX
        if self.had_runtime_error:
            return ErrorHandler.EXIT_RUNTIME
        return ErrorHandler.EXIT_OK

    def report(self, error, internal=False):
        """Prints error and records its kind."""
        error_msg = ""
        if internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])
        error_msg += colored(f"[{error.header()}]", ErrorHandler.ERROR, attrs=["bold"]) + " " + error.msg

        print(error_msg, file=self.stream if self.stream is not None else sys.stderr)
        self.errors.append(error)

        if isinstance(error, RuntimeException):
            self.had_runtime_error = True
        elif isinstance(error, SyntaxException):
            self.had_syntax_error = True
        elif isinstance(error, UsageException):
            self.had_usage_error = True

    def reset(self):
        """Forgets syntax and runtime errors. Called by the shell after every line."""
        self.had_syntax_error = False
        self.had_runtime_error = False
        self.errors = []

    def throw(self, error, internal=False):
        """Reports error, then exits if this handler is fatal."""
        self.report(error, internal)
        if self.fatal:
            sys.exit(self.exit_code or 1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is None:
            return False
        elif exc_type is KeyboardInterrupt:
            self.throw(LoxException("keyboard interrupt"))
        elif issubclass(exc_type, SystemExit):
            do_exit = True
        elif issubclass(exc_type, RecursionError):
            self.throw(RuntimeException("maximum recursion depth exceeded"))
        elif issubclass(exc_type, LoxException):
            self.throw(exc_val)
        else:
            self.throw(LoxException(f"unknown error: '{exc_type.__name__}: {exc_val}'"), internal=True)
            do_exit = True

        return not do_exit
