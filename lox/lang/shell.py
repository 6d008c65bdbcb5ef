"""Handles interactive/command-line mode for the lox interpreter. Uses cmd as backend."""

import cmd

from termcolor import colored

VERSION = "lox 0.1.0"
PROMPT = "cyan"


class Shell(cmd.Cmd):
    """Lox interpreter shell. A line that leaves a brace, paren or string open is continued on the next line."""
    intro = colored(VERSION, PROMPT) + "\nType 'help' for more information, 'exit' to quit."
    prompt = colored("[lox]>", PROMPT) + " "
    secondary_prompt = colored("  ...", PROMPT) + " "  # used for line continuations
    _tmp_prompt = prompt                               # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    @staticmethod
    def is_open(source):
        """Whether source ends inside a string, or with more opening than closing braces/parens."""
        depth = 0
        in_string = False
        idx = 0
        while idx < len(source):
            char = source[idx]
            if in_string:
                in_string = char != "\""
            elif char == "\"":
                in_string = True
            elif source.startswith("//", idx):
                newline = source.find("\n", idx)
                idx = len(source) if newline == -1 else newline
                continue
            elif char in "({":
                depth += 1
            elif char in ")}":
                depth -= 1
            idx += 1
        return in_string or depth > 0

    def default(self, line):
        """Executes arbitrary lox source."""
        source = self._tmp_line + line

        if Shell.is_open(source):
            self._tmp_line = source + "\n"
            self.prompt = self.secondary_prompt
            return

        self._tmp_line = ""
        self.prompt = self._tmp_prompt

        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            self.sess.run(source)
        self.sess.error_handler.reset()

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the lox interpreter!\n\n"
              "Type statements ending with ';' to run them, or a bare expression to see its value. \n"
              "Definitions stay around for the rest of the session: try typing \n"
              "'fun sq(x) { return x * x; }' and then 'sq(4)'.\n\n"
              "Type 'exit' or press Ctrl-D to quit.")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        print(colored("Bye!", PROMPT))
        return True
