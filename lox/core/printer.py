"""Renders trees as parenthesized S-expressions, for --verbose display only. The output is not lox source and is not
meant to be parsed back.

```
print 1 + 2 * 3;          =>  (print (+ 1 (* 2 3)))
{ var a = "x"; a = nil; } =>  (block
                                (var a "x")
                                (expression (assign a nil)))
```
"""

from lox.core import ast
from lox.core.runtime import stringify

INDENT = "  "


class AstPrinter(ast.ExprVisitor, ast.StmtVisitor):

    def stringify(self, target):
        """Renders a statement, an expression, or a list of statements (one per line)."""
        if isinstance(target, (list, tuple)):
            return "\n".join(statement.accept(self) for statement in target)
        return target.accept(self)

    def parenthesize(self, name, *parts):
        """(name part...), where parts are nodes, tokens or plain strings."""
        result = f"({name}"
        for part in parts:
            result += " " + self.render(part)
        return result + ")"

    def render(self, part):
        if isinstance(part, (ast.Expr, ast.Stmt)):
            return part.accept(self)
        if isinstance(part, str):
            return part
        return part.lexeme

    @staticmethod
    def indent(lines):
        return "\n".join(INDENT + line for line in lines.split("\n"))

    def nested(self, header, *children):
        """Multi-line form: header on the first line, one indented child per line, closing paren on the last."""
        result = f"({header}"
        for child in children:
            result += "\n" + self.indent(self.stringify(child))
        return result + ")"

    # expressions

    def visit_assign_expr(self, expr):
        return self.parenthesize("assign", expr.name, expr.value)

    def visit_binary_expr(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_call_expr(self, expr):
        return self.parenthesize("call", expr.callee, *expr.arguments)

    def visit_get_expr(self, expr):
        return self.parenthesize("get", expr.object, expr.name)

    def visit_grouping_expr(self, expr):
        return self.parenthesize("group", expr.expression)

    def visit_literal_expr(self, expr):
        if isinstance(expr.value, str):
            return f"\"{expr.value}\""
        return stringify(expr.value)

    def visit_logical_expr(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)

    def visit_set_expr(self, expr):
        return self.parenthesize("set", expr.object, expr.name, expr.value)

    def visit_super_expr(self, expr):
        return self.parenthesize("super", expr.method)

    def visit_this_expr(self, expr):
        return "this"

    def visit_unary_expr(self, expr):
        return self.parenthesize(expr.operator.lexeme, expr.right)

    def visit_variable_expr(self, expr):
        return expr.name.lexeme

    # statements

    def visit_block_stmt(self, stmt):
        return self.nested("block", *stmt.statements)

    def visit_class_stmt(self, stmt):
        header = f"class {stmt.name.lexeme}"
        if stmt.superclass is not None:
            header += f" < {stmt.superclass.name.lexeme}"
        return self.nested(header, *stmt.methods)

    def visit_expression_stmt(self, stmt):
        return self.parenthesize("expression", stmt.expression)

    def visit_function_stmt(self, stmt):
        params = " ".join(param.lexeme for param in stmt.params)
        return self.nested(f"fun {stmt.name.lexeme} ({params})", *stmt.body)

    def visit_if_stmt(self, stmt):
        branches = [stmt.then_branch]
        if stmt.else_branch is not None:
            branches.append(stmt.else_branch)
        return self.nested(f"if {self.stringify(stmt.condition)}", *branches)

    def visit_print_stmt(self, stmt):
        return self.parenthesize("print", stmt.expression)

    def visit_return_stmt(self, stmt):
        if stmt.value is None:
            return "(return)"
        return self.parenthesize("return", stmt.value)

    def visit_var_stmt(self, stmt):
        if stmt.initializer is None:
            return self.parenthesize("var", stmt.name)
        return self.parenthesize("var", stmt.name, stmt.initializer)

    def visit_while_stmt(self, stmt):
        return self.nested(f"while {self.stringify(stmt.condition)}", stmt.body)
