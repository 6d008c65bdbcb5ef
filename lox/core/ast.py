"""Abstract syntax tree for lox, produced once by the parser and never mutated afterwards.

There are two families of nodes, expressions and statements. Every pass over the tree (printer, resolver,
interpreter) subclasses both ExprVisitor and StmtVisitor. Their visit methods are abstract, so a pass that misses a
node kind cannot be instantiated.

Nodes compare and hash by identity (eq=False): the resolver keys its side-table on the node itself.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from lox.core.scanner import Token


class ExprVisitor(ABC):

    @abstractmethod
    def visit_binary_expr(self, expr): ...

    @abstractmethod
    def visit_grouping_expr(self, expr): ...

    @abstractmethod
    def visit_literal_expr(self, expr): ...

    @abstractmethod
    def visit_unary_expr(self, expr): ...

    @abstractmethod
    def visit_variable_expr(self, expr): ...

    @abstractmethod
    def visit_assign_expr(self, expr): ...

    @abstractmethod
    def visit_logical_expr(self, expr): ...

    @abstractmethod
    def visit_call_expr(self, expr): ...

    @abstractmethod
    def visit_get_expr(self, expr): ...

    @abstractmethod
    def visit_set_expr(self, expr): ...

    @abstractmethod
    def visit_this_expr(self, expr): ...

    @abstractmethod
    def visit_super_expr(self, expr): ...


class StmtVisitor(ABC):

    @abstractmethod
    def visit_expression_stmt(self, stmt): ...

    @abstractmethod
    def visit_print_stmt(self, stmt): ...

    @abstractmethod
    def visit_var_stmt(self, stmt): ...

    @abstractmethod
    def visit_block_stmt(self, stmt): ...

    @abstractmethod
    def visit_if_stmt(self, stmt): ...

    @abstractmethod
    def visit_while_stmt(self, stmt): ...

    @abstractmethod
    def visit_function_stmt(self, stmt): ...

    @abstractmethod
    def visit_return_stmt(self, stmt): ...

    @abstractmethod
    def visit_class_stmt(self, stmt): ...


class Expr(ABC):
    """Superclass of all expression nodes."""

    @abstractmethod
    def accept(self, visitor):
        """Dispatches to the visit method of visitor for this node kind."""


class Stmt(ABC):
    """Superclass of all statement nodes."""

    @abstractmethod
    def accept(self, visitor):
        """Dispatches to the visit method of visitor for this node kind."""


# expressions

@dataclass(frozen=True, eq=False)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr

    def accept(self, visitor):
        return visitor.visit_binary_expr(self)


@dataclass(frozen=True, eq=False)
class Grouping(Expr):
    expression: Expr

    def accept(self, visitor):
        return visitor.visit_grouping_expr(self)


@dataclass(frozen=True, eq=False)
class Literal(Expr):
    value: object

    def accept(self, visitor):
        return visitor.visit_literal_expr(self)


@dataclass(frozen=True, eq=False)
class Unary(Expr):
    operator: Token
    right: Expr

    def accept(self, visitor):
        return visitor.visit_unary_expr(self)


@dataclass(frozen=True, eq=False)
class Variable(Expr):
    name: Token

    def accept(self, visitor):
        return visitor.visit_variable_expr(self)


@dataclass(frozen=True, eq=False)
class Assign(Expr):
    name: Token
    value: Expr

    def accept(self, visitor):
        return visitor.visit_assign_expr(self)


@dataclass(frozen=True, eq=False)
class Logical(Expr):
    left: Expr
    operator: Token
    right: Expr

    def accept(self, visitor):
        return visitor.visit_logical_expr(self)


@dataclass(frozen=True, eq=False)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, locates runtime errors
    arguments: tuple

    def accept(self, visitor):
        return visitor.visit_call_expr(self)


@dataclass(frozen=True, eq=False)
class Get(Expr):
    object: Expr
    name: Token

    def accept(self, visitor):
        return visitor.visit_get_expr(self)


@dataclass(frozen=True, eq=False)
class Set(Expr):
    object: Expr
    name: Token
    value: Expr

    def accept(self, visitor):
        return visitor.visit_set_expr(self)


@dataclass(frozen=True, eq=False)
class This(Expr):
    keyword: Token

    def accept(self, visitor):
        return visitor.visit_this_expr(self)


@dataclass(frozen=True, eq=False)
class Super(Expr):
    keyword: Token
    method: Token

    def accept(self, visitor):
        return visitor.visit_super_expr(self)


# statements

@dataclass(frozen=True, eq=False)
class Expression(Stmt):
    expression: Expr

    def accept(self, visitor):
        return visitor.visit_expression_stmt(self)


@dataclass(frozen=True, eq=False)
class Print(Stmt):
    expression: Expr

    def accept(self, visitor):
        return visitor.visit_print_stmt(self)


@dataclass(frozen=True, eq=False)
class Var(Stmt):
    name: Token
    initializer: Expr = None

    def accept(self, visitor):
        return visitor.visit_var_stmt(self)


@dataclass(frozen=True, eq=False)
class Block(Stmt):
    statements: tuple

    def accept(self, visitor):
        return visitor.visit_block_stmt(self)


@dataclass(frozen=True, eq=False)
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Stmt = None

    def accept(self, visitor):
        return visitor.visit_if_stmt(self)


@dataclass(frozen=True, eq=False)
class While(Stmt):
    condition: Expr
    body: Stmt

    def accept(self, visitor):
        return visitor.visit_while_stmt(self)


@dataclass(frozen=True, eq=False)
class Function(Stmt):
    name: Token
    params: tuple
    body: tuple  # statements, sharing one scope with params

    def accept(self, visitor):
        return visitor.visit_function_stmt(self)


@dataclass(frozen=True, eq=False)
class Return(Stmt):
    keyword: Token
    value: Expr = None

    def accept(self, visitor):
        return visitor.visit_return_stmt(self)


@dataclass(frozen=True, eq=False)
class Class(Stmt):
    name: Token
    superclass: Variable
    methods: tuple

    def accept(self, visitor):
        return visitor.visit_class_stmt(self)
