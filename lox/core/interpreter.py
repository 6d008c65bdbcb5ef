"""Tree-walking interpreter for lox.

Basic program flow (see lox/lang/session.py):
    1. Scanner: turns source text into tokens
    2. Parser: builds statements (and, in the shell, a trailing expression) by recursive descent
    3. Resolver: walks the tree once to compute the scope distance of every local variable reference
    4. Interpreter: walks the tree again, evaluating against a chain of environments

Statements do not use exceptions for `return`: executing a statement gives back None, or a ReturnSignal that every
enclosing statement passes up unchanged until a function call consumes it.
"""

import math
import sys

from lox.core import ast
from lox.core.environment import Environment
from lox.core.runtime import NATIVES, LoxCallable, LoxClass, LoxFunction, LoxInstance, ReturnSignal, stringify
from lox.core.scanner import TokenKind
from lox.lang.error import RuntimeException


def is_truthy(value):
    """Only nil and false are falsy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(left, right):
    """Value equality for nil, booleans, numbers and strings, identity for everything else. Values of different types
    are never equal (in particular true != 1).
    """
    if left is None and right is None:
        return True
    if left is None or right is None:
        return False
    if isinstance(left, (bool, float, str)):
        return type(left) is type(right) and left == right
    return left is right


def divide(left, right):
    """IEEE division: dividing by zero gives an infinity, or nan for 0/0."""
    if right == 0:
        if left == 0 or math.isnan(left):
            return math.nan
        return math.copysign(math.inf, left) * math.copysign(1.0, right)
    return left / right


class Interpreter(ast.ExprVisitor, ast.StmtVisitor):
    """Evaluates resolved trees. The global environment, and anything defined in it, lives as long as the interpreter,
    so one interpreter can serve many shell lines.
    """

    def __init__(self, error_handler, output=None):
        self.error_handler = error_handler
        self.output = output  # defaults to sys.stdout, looked up on every print

        self.globals = Environment()
        self.environment = self.globals
        self.locals = {}  # resolved expr node: scope distance

        for native in NATIVES:
            self.globals.define(native.name, native)

    def interpret(self, target):
        """Executes a list of statements, or evaluates an expression and prints its value. The first runtime error
        stops execution and is reported, not raised.
        """
        try:
            if isinstance(target, ast.Expr):
                self.write(stringify(self.evaluate(target)))
            else:
                for statement in target:
                    if self.execute(statement) is not None:
                        error = RuntimeException("return signal escaped the outermost call frame")
                        self.error_handler.report(error, internal=True)
                        return
        except RuntimeException as error:
            self.error_handler.report(error)

    def resolve(self, expr, depth):
        """Called by the resolver: expr refers to a variable declared depth environments out."""
        self.locals[expr] = depth

    def write(self, text):
        print(text, file=self.output if self.output is not None else sys.stdout)

    def evaluate(self, expr):
        return expr.accept(self)

    def execute(self, stmt):
        """Returns None, or a ReturnSignal if stmt ran `return`."""
        return stmt.accept(self)

    def execute_block(self, statements, environment):
        """Executes statements in environment, then restores the current environment no matter how the block ends."""
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                completion = self.execute(statement)
                if completion is not None:
                    return completion
        finally:
            self.environment = previous
        return None

    def look_up_variable(self, name, expr):
        distance = self.locals.get(expr)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    @staticmethod
    def check_number_operand(operator, operand):
        if not isinstance(operand, float):
            raise RuntimeException("Operand must be a number", operator)

    @staticmethod
    def check_number_operands(operator, left, right):
        if not isinstance(left, float) or not isinstance(right, float):
            raise RuntimeException("Operands must be numbers", operator)

    # expressions

    def visit_assign_expr(self, expr):
        value = self.evaluate(expr.value)

        distance = self.locals.get(expr)
        if distance is not None:
            self.environment.assign_at(distance, expr.name, value)
        else:
            self.globals.assign(expr.name, value)

        return value

    def visit_binary_expr(self, expr):
        left = self.evaluate(expr.left)
        right = self.evaluate(expr.right)
        operator = expr.operator
        kind = operator.kind

        if kind is TokenKind.EQUAL_EQUAL:
            return is_equal(left, right)
        if kind is TokenKind.BANG_EQUAL:
            return not is_equal(left, right)

        if kind is TokenKind.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise RuntimeException("Operands must be two numbers or two strings", operator)

        self.check_number_operands(operator, left, right)
        if kind is TokenKind.MINUS:
            return left - right
        if kind is TokenKind.STAR:
            return left * right
        if kind is TokenKind.SLASH:
            return divide(left, right)
        if kind is TokenKind.GREATER:
            return left > right
        if kind is TokenKind.GREATER_EQUAL:
            return left >= right
        if kind is TokenKind.LESS:
            return left < right
        if kind is TokenKind.LESS_EQUAL:
            return left <= right

        raise RuntimeException(f"Unknown binary operator '{operator.lexeme}'", operator)

    def visit_call_expr(self, expr):
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(argument) for argument in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise RuntimeException("Can only call functions and classes", expr.paren)

        if len(arguments) != callee.arity():
            raise RuntimeException(f"Expected {callee.arity()} arguments but got {len(arguments)}", expr.paren)

        return callee.call(self, arguments)

    def visit_get_expr(self, expr):
        instance = self.evaluate(expr.object)
        if isinstance(instance, LoxInstance):
            return instance.get(expr.name)

        raise RuntimeException("Only class instances have properties", expr.name)

    def visit_grouping_expr(self, expr):
        return self.evaluate(expr.expression)

    def visit_literal_expr(self, expr):
        return expr.value

    def visit_logical_expr(self, expr):
        left = self.evaluate(expr.left)

        if expr.operator.kind is TokenKind.OR:
            if is_truthy(left):
                return left
        elif not is_truthy(left):
            return left

        return self.evaluate(expr.right)

    def visit_set_expr(self, expr):
        instance = self.evaluate(expr.object)
        if not isinstance(instance, LoxInstance):
            raise RuntimeException("Only class instances have fields", expr.name)

        value = self.evaluate(expr.value)
        instance.set(expr.name, value)
        return value

    def visit_super_expr(self, expr):
        distance = self.locals[expr]
        superclass = self.environment.get_at(distance, "super")
        instance = self.environment.get_at(distance - 1, "this")  # `this` is always one scope inside `super`

        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise RuntimeException(f"Undefined property '{expr.method.lexeme}'", expr.method)

        return method.bind(instance)

    def visit_this_expr(self, expr):
        return self.look_up_variable(expr.keyword, expr)

    def visit_unary_expr(self, expr):
        right = self.evaluate(expr.right)

        if expr.operator.kind is TokenKind.BANG:
            return not is_truthy(right)

        self.check_number_operand(expr.operator, right)
        return -right

    def visit_variable_expr(self, expr):
        return self.look_up_variable(expr.name, expr)

    # statements

    def visit_block_stmt(self, stmt):
        return self.execute_block(stmt.statements, Environment(self.environment))

    def visit_class_stmt(self, stmt):
        superclass = None
        if stmt.superclass is not None:
            superclass = self.evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise RuntimeException("Superclass must be a class", stmt.superclass.name)

        self.environment.define(stmt.name.lexeme, None)

        method_closure = self.environment
        if superclass is not None:
            method_closure = Environment(self.environment)
            method_closure.define("super", superclass)

        methods = {}
        for method in stmt.methods:
            is_initializer = method.name.lexeme == LoxClass.INITIALIZER
            methods[method.name.lexeme] = LoxFunction(method, method_closure, is_initializer)

        self.environment.assign(stmt.name, LoxClass(stmt.name.lexeme, superclass, methods))

    def visit_expression_stmt(self, stmt):
        self.evaluate(stmt.expression)

    def visit_function_stmt(self, stmt):
        self.environment.define(stmt.name.lexeme, LoxFunction(stmt, self.environment))

    def visit_if_stmt(self, stmt):
        if is_truthy(self.evaluate(stmt.condition)):
            return self.execute(stmt.then_branch)
        elif stmt.else_branch is not None:
            return self.execute(stmt.else_branch)
        return None

    def visit_print_stmt(self, stmt):
        self.write(stringify(self.evaluate(stmt.expression)))

    def visit_return_stmt(self, stmt):
        value = None
        if stmt.value is not None:
            value = self.evaluate(stmt.value)
        return ReturnSignal(value)

    def visit_var_stmt(self, stmt):
        value = None
        if stmt.initializer is not None:
            value = self.evaluate(stmt.initializer)

        self.environment.define(stmt.name.lexeme, value)

    def visit_while_stmt(self, stmt):
        while is_truthy(self.evaluate(stmt.condition)):
            completion = self.execute(stmt.body)
            if completion is not None:
                return completion
        return None
