import io
import unittest

from lox.core import ast
from lox.core.interpreter import Interpreter
from lox.core.scanner import Token, TokenKind
from lox.lang.error import ErrorHandler
from lox.lang.session import Session


def run(source, cmd_line=False):
    """Runs source in a fresh session. Returns (printed output, error handler)."""
    output = io.StringIO()
    handler = ErrorHandler(fatal=False, stream=io.StringIO())
    Session(handler, cmd_line=cmd_line, output=output).run(source)
    return output.getvalue(), handler


class InterpreterTestCase(unittest.TestCase):

    def assertPrints(self, expected, source):
        output, handler = run(source)
        self.assertEqual([], [error.msg for error in handler.errors], source)
        self.assertEqual(expected, output, source)

    def assertRuntimeError(self, msg, source, printed=""):
        output, handler = run(source)
        self.assertEqual([msg], [error.msg for error in handler.errors], source)
        self.assertTrue(handler.had_runtime_error, source)
        self.assertEqual(printed, output, source)

    def test_arithmetic(self):
        cases = {
            "print 2 + 3 * 4;": "14\n",
            "print (2 + 3) * 4;": "20\n",
            "print 10 / 4;": "2.5\n",
            "print 1 - 2 - 3;": "-4\n",
            "print -3;": "-3\n",
            "print 1.5 + 1.5;": "3\n",
            "print 0.1 + 0.2;": "0.30000000000000004\n",
            "print 1 / 0;": "inf\n",
            "print -1 / 0;": "-inf\n",
            "print 0 / 0;": "nan\n",
            "print -0;": "0\n",
            "print 10000000000000000;": "10000000000000000\n",
            "print 0.00001;": "0.00001\n",
            "print 0.0000001;": "1e-7\n",
            "print 123.456;": "123.456\n",
            "print 1000000000000000000000;": "1e+21\n",
            "print 1.5 * 1000000000000000000000;": "1.5e+21\n",
            "print 1 / 3;": "0.3333333333333333\n",
            "fun fact(n) { if (n <= 1) return 1; return n * fact(n - 1); } print fact(20);": "2432902008176640000\n",
            "print 3 > 2; print 2 >= 3; print 1 < 1; print 1 <= 1;": "true\nfalse\nfalse\ntrue\n",
        }
        for case, expected in cases.items():
            self.assertPrints(expected, case)

    def test_strings(self):
        self.assertPrints("ab\n", "print \"a\" + \"b\";")
        self.assertPrints("multi\nline\n", "print \"multi\nline\";")
        self.assertRuntimeError("Operands must be two numbers or two strings", "print \"a\" + 1;")
        self.assertRuntimeError("Operands must be two numbers or two strings", "print 1 + \"a\";")
        self.assertRuntimeError("Operands must be numbers", "print \"a\" < \"b\";")
        self.assertRuntimeError("Operands must be numbers", "print \"a\" * 2;")
        self.assertRuntimeError("Operand must be a number", "print -\"a\";")

    def test_truthiness(self):
        self.assertPrints("true\nfalse\nfalse\nfalse\ntrue\n", "print !nil; print !0; print !\"\"; print !true; print !false;")
        self.assertPrints("yes\n", "if (0) print \"yes\"; else print \"no\";")
        self.assertPrints("no\n", "if (nil) print \"yes\"; else print \"no\";")

    def test_equality(self):
        cases = {
            "print nil == nil;": "true\n",
            "print nil == false;": "false\n",
            "print 1 == 1;": "true\n",
            "print \"a\" == \"a\";": "true\n",
            "print true == 1;": "false\n",
            "print 0 == false;": "false\n",
            "print \"1\" == 1;": "false\n",
            "print 1 != 2;": "true\n",
            "fun f() {} print f == f;": "true\n",
            "class A {} print A() == A();": "false\n",
        }
        for case, expected in cases.items():
            self.assertPrints(expected, case)

    def test_logical(self):
        source = """
            var called = false;
            fun sideEffect() { called = true; return true; }
            print false and sideEffect();
            print true or sideEffect();
            print called;
        """
        self.assertPrints("false\ntrue\nfalse\n", source)
        self.assertPrints("x\n2\nnil\n1\n", "print nil or \"x\"; print 1 and 2; print nil and 1; print 1 or 2;")

    def test_variables(self):
        self.assertPrints("nil\n2\n", "var a; print a; a = 2; print a;")
        self.assertPrints("3\n3\n", "var a; var b; a = b = 3; print a; print b;")
        self.assertPrints("1\n", "fun f() { return g(); } fun g() { return 1; } print f();")
        self.assertRuntimeError("Undefined variable 'x'", "print x;")
        self.assertRuntimeError("Undefined variable 'x'", "x = 1;")

    def test_control_flow(self):
        self.assertPrints("0\n1\n", "var i = 0; while (i < 2) { print i; i = i + 1; }")
        self.assertPrints("0\n1\n2\n", "for (var i = 0; i < 3; i = i + 1) print i;")
        self.assertRuntimeError("Undefined variable 'i'", "for (var i = 0; i < 3; i = i + 1) print i; print i;",
                                printed="0\n1\n2\n")
        self.assertPrints("1\n", "var i = 0; for (; i < 1;) i = i + 1; print i;")

    def test_functions(self):
        source = """
            fun fib(n) { if (n < 2) return n; return fib(n - 1) + fib(n - 2); }
            print fib(10);
        """
        self.assertPrints("55\n", source)
        self.assertPrints("nil\nnil\n", "fun f() { return; } fun g() {} print f(); print g();")
        self.assertPrints("7\n", "fun f() { while (true) { for (;;) { return 7; } } } print f();")
        self.assertPrints("<fun f>\n<native fun 'clock'>\n", "fun f() {} print f; print clock;")
        self.assertPrints("true\n", "print clock() > 0;")

    def test_call_errors(self):
        self.assertRuntimeError("Expected 0 arguments but got 1", "fun f() {} f(1);")
        self.assertRuntimeError("Expected 2 arguments but got 1", "fun f(a, b) {} f(1);")
        self.assertRuntimeError("Can only call functions and classes", "\"str\"();")
        self.assertRuntimeError("Can only call functions and classes", "var a = nil; a();")

        # arguments are checked before the body runs
        self.assertRuntimeError("Expected 0 arguments but got 1", "fun f() { print 1; } f(2);")

    def test_closures(self):
        source = """
            fun makeCounter() {
                var i = 0;
                fun count() { i = i + 1; print i; }
                return count;
            }
            var counter = makeCounter();
            counter(); counter(); counter();
            var other = makeCounter();
            other();
        """
        self.assertPrints("1\n2\n3\n1\n", source)
        self.assertPrints("kept\n", "var f; { var x = \"kept\"; fun g() { print x; } f = g; } f();")

    def test_lexical_scope(self):
        source = """
            var a = "global";
            {
                fun f() { print a; }
                f();
                var a = "local";
                f();
            }
        """
        self.assertPrints("global\nglobal\n", source)

    def test_static_errors_withhold_execution(self):
        output, handler = run("print 1; { var a = a; }")
        self.assertEqual("", output)
        self.assertTrue(handler.had_syntax_error)
        self.assertFalse(handler.had_runtime_error)
        self.assertEqual(ErrorHandler.EXIT_SYNTAX, handler.exit_code)

    def test_runtime_error_halts(self):
        self.assertRuntimeError("Operand must be a number", "print 1; print -\"a\"; print 2;", printed="1\n")

    def test_classes(self):
        source = """
            class A {
                method() { return "A"; }
                other() { return "A other"; }
            }
            class B < A {
                method() { return "B"; }
                test() { return super.method(); }
            }
            var b = B();
            print b.method();
            print b.other();
            print b.test();
            print B;
            print b;
        """
        self.assertPrints("B\nA other\nA\n<class B>\n<instance of class B>\n", source)

    def test_super_binds_to_defining_class(self):
        source = """
            class A { name() { return "A"; } }
            class B < A { name() { return "B" + super.name(); } }
            class C < B { name() { return "C" + super.name(); } }
            print C().name();
        """
        self.assertPrints("CBA\n", source)

    def test_initializers(self):
        source = """
            class P {
                init(x) { this.x = x; return; }
            }
            var p = P(3);
            print p.x;
            print p.init(4) == p;
            print p.x;
        """
        self.assertPrints("3\ntrue\n4\n", source)
        self.assertPrints("1\n", "class A { init(a) { this.a = a; } } class B < A {} print B(1).a;")
        self.assertRuntimeError("Expected 2 arguments but got 1", "class A { init(a, b) {} } A(1);")
        self.assertRuntimeError("Expected 0 arguments but got 1", "class A {} A(1);")

    def test_fields_and_methods(self):
        source = """
            class C {
                init() { this.n = 1; }
                get() { return this.n; }
            }
            var c = C();
            var m = c.get;
            c.n = 2;
            print m();
            c.get = "field";
            print c.get;
        """
        self.assertPrints("2\nfield\n", source)
        self.assertRuntimeError("Only class instances have properties", "var a = 1; print a.x;")
        self.assertRuntimeError("Only class instances have fields", "var a = 1; a.x = 2;")
        self.assertRuntimeError("Undefined property 'x'", "class A {} print A().x;")
        self.assertRuntimeError("Undefined property 'm'", "class A {} class B < A { m() { return super.m(); } } B().m();")
        self.assertRuntimeError("Superclass must be a class", "var NotClass = 1; class A < NotClass {}")

    def test_repl_expression(self):
        output, handler = run("1 + 2", cmd_line=True)
        self.assertEqual("3\n", output)

        output, handler = run("var a = \"x\"; a + \"y\"", cmd_line=True)
        self.assertEqual("xy\n", output)

    def test_escaped_return_is_internal_error(self):
        # the resolver rejects this, so build the tree by hand
        handler = ErrorHandler(fatal=False, stream=io.StringIO())
        output = io.StringIO()
        keyword = Token(TokenKind.RETURN, "return", None, 1)
        statements = [ast.Return(keyword, ast.Literal(1.0)), ast.Print(ast.Literal(2.0))]
        Interpreter(handler, output).interpret(statements)
        self.assertEqual(["return signal escaped the outermost call frame"], [error.msg for error in handler.errors])
        self.assertTrue(handler.had_runtime_error)
        self.assertIn("[internal]", handler.stream.getvalue())
        self.assertEqual("", output.getvalue())


if __name__ == '__main__':
    unittest.main()
