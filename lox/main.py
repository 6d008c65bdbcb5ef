"""Runs lox scripts, or the interactive shell when no script is given. Called from the lox executable script.

Exit codes: 0 clean, 64 usage error, 65 syntax or resolving error, 70 runtime error.
"""

import argparse
import sys

from lox.lang.error import ErrorHandler, UsageException
from lox.lang.session import Session
from lox.lang.shell import Shell, VERSION


class ArgumentParser(argparse.ArgumentParser):
    """Reports bad arguments as a lox usage error (exit 64) instead of argparse's exit 2."""

    def error(self, message):
        self.print_usage(sys.stderr)
        raise UsageException(message)


def build_parser():
    parser = ArgumentParser(prog="lox", description="Tree-walk interpreter for the lox scripting language.")
    parser.add_argument("script", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--verbose", help="show the AST before running", action="store_true")
    parser.add_argument("-v", "--version", action="version", version=VERSION)
    return parser


def main(argv=None):
    """Runs lox interpreter. Called from lox executable script."""
    with ErrorHandler() as error_handler:
        args = build_parser().parse_args(argv)

        if args.script is not None:
            sess = Session(error_handler, verbose=args.verbose)
            sess.run_file(args.script)
            sys.exit(error_handler.exit_code)

        else:
            Shell(Session(error_handler, cmd_line=True, verbose=args.verbose)).cmdloop()


if __name__ == "__main__":
    main()
