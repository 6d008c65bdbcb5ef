import io
import unittest

from lox.core.scanner import Token, TokenKind
from lox.lang.error import (ErrorHandler, LoxException, ResolvingException, RuntimeException, SyntaxException,
                            UsageException)


def handler(fatal=False):
    return ErrorHandler(fatal=fatal, stream=io.StringIO())


class ExceptionTestCase(unittest.TestCase):

    def test_header(self):
        token = Token(TokenKind.MINUS, "-", None, 7)
        cases = {
            SyntaxException("msg", 3, "'x'"): "SyntaxError (line 3 at 'x')",
            SyntaxException("msg", 3): "SyntaxError (line 3)",
            SyntaxException("msg"): "SyntaxError",
            ResolvingException("msg", 1, "end"): "ResolvingError (line 1 at end)",
            RuntimeException("msg", token): "RuntimeError (line 7)",
            RuntimeException("msg"): "RuntimeError",
            UsageException("msg"): "UsageError",
        }
        for error, expected in cases.items():
            self.assertEqual(expected, error.header())


class ErrorHandlerTestCase(unittest.TestCase):

    def test_report(self):
        error_handler = handler()
        error_handler.report(SyntaxException("Expect expression", 2, "';'"))

        printed = error_handler.stream.getvalue()
        self.assertIn("SyntaxError (line 2 at ';')", printed)
        self.assertIn("Expect expression", printed)
        self.assertTrue(error_handler.had_syntax_error)
        self.assertFalse(error_handler.had_runtime_error)

    def test_exit_code(self):
        cases = [
            ([], ErrorHandler.EXIT_OK),
            ([RuntimeException("x")], ErrorHandler.EXIT_RUNTIME),
            ([ResolvingException("x")], ErrorHandler.EXIT_SYNTAX),
            ([RuntimeException("x"), SyntaxException("x")], ErrorHandler.EXIT_SYNTAX),
            ([SyntaxException("x"), UsageException("x")], ErrorHandler.EXIT_USAGE),
        ]
        for errors, expected in cases:
            error_handler = handler()
            for error in errors:
                error_handler.report(error)
            self.assertEqual(expected, error_handler.exit_code, errors)

    def test_reset(self):
        error_handler = handler()
        error_handler.report(SyntaxException("x"))
        error_handler.report(RuntimeException("x"))
        error_handler.reset()

        self.assertFalse(error_handler.had_syntax_error)
        self.assertFalse(error_handler.had_runtime_error)
        self.assertEqual([], error_handler.errors)
        self.assertEqual(ErrorHandler.EXIT_OK, error_handler.exit_code)

    def test_context_manager(self):
        with handler() as error_handler:
            raise RuntimeException("boom")
        self.assertTrue(error_handler.had_runtime_error)

        with handler() as error_handler:
            raise RecursionError()
        self.assertEqual(["maximum recursion depth exceeded"], [error.msg for error in error_handler.errors])

        with handler() as error_handler:
            raise KeyboardInterrupt()
        self.assertEqual(["keyboard interrupt"], [error.msg for error in error_handler.errors])
        self.assertEqual(ErrorHandler.EXIT_OK, error_handler.exit_code)

    def test_context_manager_fatal(self):
        with self.assertRaises(SystemExit) as context:
            with handler(fatal=True):
                raise UsageException("bad")
        self.assertEqual(ErrorHandler.EXIT_USAGE, context.exception.code)

        with self.assertRaises(SystemExit) as context:
            with handler(fatal=True):
                raise LoxException("keyboard interrupt")
        self.assertEqual(1, context.exception.code)

    def test_internal_errors_propagate(self):
        error_handler = handler()
        with self.assertRaises(ValueError):
            with error_handler:
                raise ValueError("oops")

        self.assertIn("[internal]", error_handler.stream.getvalue())
        self.assertIn("unknown error: 'ValueError: oops'", error_handler.stream.getvalue())


if __name__ == '__main__':
    unittest.main()
