import io
import unittest

from lox.core.interpreter import Interpreter
from lox.core.parser import Parser
from lox.core.resolver import Resolver
from lox.core.scanner import Scanner
from lox.lang.error import ErrorHandler, ResolvingException


def resolve(source):
    handler = ErrorHandler(fatal=False, stream=io.StringIO())
    statements = Parser(Scanner(source, handler).scan_tokens(), handler).parse()
    assert not handler.errors, [error.msg for error in handler.errors]

    interpreter = Interpreter(handler, io.StringIO())
    Resolver(interpreter, handler).resolve(statements)
    return statements, interpreter, handler


def messages(source):
    __, __, handler = resolve(source)
    return [error.msg for error in handler.errors]


class ResolverTestCase(unittest.TestCase):

    def test_globals_are_unresolved(self):
        statements, interpreter, __ = resolve("var a = 1; { var b = a; print b; }")
        block = statements[1]

        self.assertNotIn(block.statements[0].initializer, interpreter.locals)
        self.assertEqual(0, interpreter.locals[block.statements[1].expression])

    def test_distances(self):
        statements, interpreter, __ = resolve("{ var a = 1; fun f() { print a; } }")
        function = statements[0].statements[1]
        self.assertEqual(1, interpreter.locals[function.body[0].expression])

        statements, interpreter, __ = resolve("fun f(a) { { print a; } }")
        inner = statements[0].body[0]
        self.assertEqual(1, interpreter.locals[inner.statements[0].expression])

        statements, interpreter, __ = resolve("{ var a = 1; { var b; b = a; } }")
        assign = statements[0].statements[1].statements[1].expression
        self.assertEqual(0, interpreter.locals[assign])
        self.assertEqual(1, interpreter.locals[assign.value])

    def test_innermost_declaration_wins(self):
        statements, interpreter, __ = resolve("{ var a = 1; { var a = 2; print a; } }")
        inner = statements[0].statements[1]
        self.assertEqual(0, interpreter.locals[inner.statements[1].expression])

    def test_this_and_super(self):
        statements, interpreter, handler = resolve("class A {} class B < A { m() { return super.m() + this.x; } }")
        self.assertFalse(handler.errors)

        method = statements[1].methods[0]
        call, get = method.body[0].value.left, method.body[0].value.right
        self.assertEqual(2, interpreter.locals[call.callee])   # function scope, `this` scope, `super` scope
        self.assertEqual(1, interpreter.locals[get.object])

    def test_errors(self):
        should_raise = {
            "{ var a = 1; var a = 2; }": "Already a variable with this name in this scope",
            "fun f(a) { var a; }": "Already a variable with this name in this scope",
            "fun f(a, a) {}": "Already a variable with this name in this scope",
            "{ var a = a; }": "Can't read local variable in its own initializer",
            "return 1;": "Can't return from top-level code",
            "class A { init() { return 1; } }": "Can't return a value from an initializer",
            "print this;": "Can't use 'this' outside of a class",
            "fun f() { return this; }": "Can't use 'this' outside of a class",
            "class A < A {}": "A class can't inherit from itself",
            "super.m();": "Can't use 'super' outside of a class",
            "class A { m() { super.m(); } }": "Can't use 'super' in a class with no superclass",
        }
        for case, msg in should_raise.items():
            __, __, handler = resolve(case)
            self.assertEqual([msg], [error.msg for error in handler.errors], case)
            self.assertIsInstance(handler.errors[0], ResolvingException, case)
            self.assertTrue(handler.had_syntax_error, case)

        should_pass = [
            "var a = 1; var a = 2;",
            "var a = a;",
            "{ var a = 1; { var a = 2; } }",
            "class A { init() { return; } }",
            "class A { m() { return 1; } }",
            "fun f() { return g(); } fun g() { return 1; }",
            "fun f() { fun g() { return f; } }",
            "class A { m() { fun g() { return this; } } }",
        ]
        for case in should_pass:
            self.assertEqual([], messages(case), case)

    def test_errors_do_not_stop_traversal(self):
        self.assertEqual(["Already a variable with this name in this scope",
                          "Already a variable with this name in this scope",
                          "Can't return from top-level code"],
                         messages("{ var a = 1; var a = 2; var a = 3; } return;"))


if __name__ == '__main__':
    unittest.main()
