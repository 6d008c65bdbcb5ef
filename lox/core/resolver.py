"""Static scope resolution for lox. Walks the tree once, between parsing and interpreting, and tells the interpreter
how many environments separate every local variable reference from its declaration.

Globals are never put in a scope: a reference that is not found in any enclosing block is left unresolved and
looked up in the global environment at run time, so globals may be used before they are declared textually.
"""

from enum import Enum, auto

from lox.core import ast
from lox.lang.error import ResolvingException


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    INITIALIZER = auto()
    METHOD = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()  # class with a superclass, where `super` is allowed


class Resolver(ast.ExprVisitor, ast.StmtVisitor):
    """Feeds scope distances to interpreter.resolve and reports static errors to error_handler. Errors never stop the
    traversal.
    """

    def __init__(self, interpreter, error_handler):
        self.interpreter = interpreter
        self.error_handler = error_handler

        self.scopes = []  # innermost last; name: whether its initializer has finished
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve(self, target):
        """Resolves a statement, an expression, or a list of statements."""
        if isinstance(target, (list, tuple)):
            for statement in target:
                statement.accept(self)
        else:
            target.accept(self)

    def report(self, token, msg):
        self.error_handler.report(ResolvingException(msg, token.line, f"'{token.lexeme}'"))

    def begin_scope(self):
        self.scopes.append({})

    def end_scope(self):
        self.scopes.pop()

    def declare(self, name):
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.report(name, "Already a variable with this name in this scope")
        scope[name.lexeme] = False

    def define(self, name):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr, name):
        """Records the distance to the innermost scope declaring name. Unresolved means global."""
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.interpreter.resolve(expr, depth)
                return

    def resolve_function(self, function, function_type):
        enclosing_function = self.current_function
        self.current_function = function_type

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()

        self.current_function = enclosing_function

    # statements

    def visit_block_stmt(self, stmt):
        self.begin_scope()
        self.resolve(stmt.statements)
        self.end_scope()

    def visit_class_stmt(self, stmt):
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.declare(stmt.name)
        self.define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self.report(stmt.superclass.name, "A class can't inherit from itself")

            self.current_class = ClassType.SUBCLASS
            self.resolve(stmt.superclass)

            self.begin_scope()
            self.scopes[-1]["super"] = True

        self.begin_scope()
        self.scopes[-1]["this"] = True

        for method in stmt.methods:
            if method.name.lexeme == "init":
                function_type = FunctionType.INITIALIZER
            else:
                function_type = FunctionType.METHOD
            self.resolve_function(method, function_type)

        self.end_scope()
        if stmt.superclass is not None:
            self.end_scope()

        self.current_class = enclosing_class

    def visit_expression_stmt(self, stmt):
        self.resolve(stmt.expression)

    def visit_function_stmt(self, stmt):
        # defined before the body is resolved, so the function can refer to itself
        self.declare(stmt.name)
        self.define(stmt.name)

        self.resolve_function(stmt, FunctionType.FUNCTION)

    def visit_if_stmt(self, stmt):
        self.resolve(stmt.condition)
        self.resolve(stmt.then_branch)
        if stmt.else_branch is not None:
            self.resolve(stmt.else_branch)

    def visit_print_stmt(self, stmt):
        self.resolve(stmt.expression)

    def visit_return_stmt(self, stmt):
        if self.current_function is FunctionType.NONE:
            self.report(stmt.keyword, "Can't return from top-level code")

        if stmt.value is not None:
            if self.current_function is FunctionType.INITIALIZER:
                self.report(stmt.keyword, "Can't return a value from an initializer")
            self.resolve(stmt.value)

    def visit_var_stmt(self, stmt):
        self.declare(stmt.name)
        if stmt.initializer is not None:
            self.resolve(stmt.initializer)
        self.define(stmt.name)

    def visit_while_stmt(self, stmt):
        self.resolve(stmt.condition)
        self.resolve(stmt.body)

    # expressions

    def visit_assign_expr(self, expr):
        self.resolve(expr.value)
        self.resolve_local(expr, expr.name)

    def visit_binary_expr(self, expr):
        self.resolve(expr.left)
        self.resolve(expr.right)

    def visit_call_expr(self, expr):
        self.resolve(expr.callee)
        for argument in expr.arguments:
            self.resolve(argument)

    def visit_get_expr(self, expr):
        # properties are looked up dynamically, only the object is resolved
        self.resolve(expr.object)

    def visit_grouping_expr(self, expr):
        self.resolve(expr.expression)

    def visit_literal_expr(self, expr):
        pass

    def visit_logical_expr(self, expr):
        self.resolve(expr.left)
        self.resolve(expr.right)

    def visit_set_expr(self, expr):
        self.resolve(expr.value)
        self.resolve(expr.object)

    def visit_super_expr(self, expr):
        if self.current_class is ClassType.NONE:
            self.report(expr.keyword, "Can't use 'super' outside of a class")
        elif self.current_class is not ClassType.SUBCLASS:
            self.report(expr.keyword, "Can't use 'super' in a class with no superclass")

        self.resolve_local(expr, expr.keyword)

    def visit_this_expr(self, expr):
        if self.current_class is ClassType.NONE:
            self.report(expr.keyword, "Can't use 'this' outside of a class")
            return

        self.resolve_local(expr, expr.keyword)

    def visit_unary_expr(self, expr):
        self.resolve(expr.right)

    def visit_variable_expr(self, expr):
        if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
            self.report(expr.name, "Can't read local variable in its own initializer")

        self.resolve_local(expr, expr.name)
