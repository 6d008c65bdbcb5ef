"""Recursive-descent parser for lox. One method per grammar rule, lowest precedence first:

```
<program>     ::= <declaration>* EOF
<declaration> ::= <class_decl> | <fun_decl> | <var_decl> | <statement>
<class_decl>  ::= "class" IDENTIFIER ( "<" IDENTIFIER )? "{" <function>* "}"
<fun_decl>    ::= "fun" <function>
<function>    ::= IDENTIFIER "(" ( IDENTIFIER ( "," IDENTIFIER )* )? ")" <block>
<var_decl>    ::= "var" IDENTIFIER ( "=" <expression> )? ";"
<statement>   ::= <expr_stmt> | <for_stmt> | <if_stmt> | <print_stmt> | <return_stmt> | <while_stmt> | <block>

<expression>  ::= <assignment>
<assignment>  ::= ( <call> "." )? IDENTIFIER "=" <assignment> | <logic_or>
<logic_or>    ::= <logic_and> ( "or" <logic_and> )*
<logic_and>   ::= <equality> ( "and" <equality> )*
<equality>    ::= <comparison> ( ( "!=" | "==" ) <comparison> )*
<comparison>  ::= <term> ( ( ">" | ">=" | "<" | "<=" ) <term> )*
<term>        ::= <factor> ( ( "-" | "+" ) <factor> )*
<factor>      ::= <unary> ( ( "/" | "*" ) <unary> )*
<unary>       ::= ( "!" | "-" ) <unary> | <call>
<call>        ::= <primary> ( "(" <arguments>? ")" | "." IDENTIFIER )*
<primary>     ::= "true" | "false" | "nil" | "this" | NUMBER | STRING | IDENTIFIER | "(" <expression> ")"
                | "super" "." IDENTIFIER
```

A syntax error inside a declaration is reported, then the parser skips to the next statement boundary and carries on,
so one mistake costs one statement.
"""

from lox.core import ast
from lox.core.scanner import TokenKind
from lox.lang.error import SyntaxException

MAX_ARGS = 255

# tokens that start a new declaration, used to resynchronize after an error
STATEMENT_STARTS = {
    TokenKind.CLASS,
    TokenKind.FUN,
    TokenKind.VAR,
    TokenKind.FOR,
    TokenKind.IF,
    TokenKind.WHILE,
    TokenKind.PRINT,
    TokenKind.RETURN,
}


class Parser:
    """Turns a list of Tokens into statements (script mode) or statements plus a trailing expression (REPL mode)."""

    def __init__(self, tokens, error_handler):
        self.tokens = tokens
        self.error_handler = error_handler
        self.current = 0
        self.deferred = None  # errors held back while a parse may still be rewound

    def parse(self):
        """Parses a whole script. Errors are reported, never raised."""
        statements = []
        while not self.is_at_end():
            try:
                statements.append(self.declaration())
            except SyntaxException as error:
                self.error_handler.report(error)
                self.synchronize()
        return statements

    def parse_repl(self):
        """Parses zero or more statements, optionally followed by a bare expression with no trailing ';'. Returns
        (statements, expression or None). Raises SyntaxException if the remainder is not a single expression either.
        """
        statements = []
        cursor = self.current  # end of the last complete statement
        self.deferred = []
        try:
            while not self.is_at_end():
                statements.append(self.declaration())
                cursor = self.current
                self.flush()
            return statements, None
        except SyntaxException:
            # the expression pass below sees the same tokens again
            self.current = cursor
        finally:
            self.deferred = None

        expr = self.expression()
        if not self.is_at_end():
            raise self.error(self.peek(), "Expect end of expression")
        return statements, expr

    def report(self, error):
        """Reports an error that does not stop parsing."""
        if self.deferred is None:
            self.error_handler.report(error)
        else:
            self.deferred.append(error)

    def flush(self):
        for error in self.deferred:
            self.error_handler.report(error)
        self.deferred = []

    # token helpers

    def is_at_end(self):
        return self.peek().kind is TokenKind.EOF

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]

    def advance(self):
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def check(self, kind):
        if self.is_at_end():
            return False
        return self.peek().kind is kind

    def match(self, *kinds):
        """Consumes the next token if it is any of kinds."""
        for kind in kinds:
            if self.check(kind):
                self.advance()
                return True
        return False

    def consume(self, kind, msg):
        if self.check(kind):
            return self.advance()
        raise self.error(self.peek(), msg)

    @staticmethod
    def error(token, msg):
        """Returns (does not raise) a SyntaxException located at token."""
        if token.kind is TokenKind.EOF:
            return SyntaxException(msg, token.line, "end")
        return SyntaxException(msg, token.line, f"'{token.lexeme}'")

    def synchronize(self):
        """Discards tokens until the start of the next statement."""
        self.advance()

        while not self.is_at_end():
            if self.previous().kind is TokenKind.SEMICOLON:
                return
            if self.peek().kind in STATEMENT_STARTS:
                return
            self.advance()

    # declarations

    def declaration(self):
        if self.match(TokenKind.CLASS):
            return self.class_declaration()
        if self.match(TokenKind.FUN):
            return self.function("function")
        if self.match(TokenKind.VAR):
            return self.var_declaration()
        return self.statement()

    def class_declaration(self):
        name = self.consume(TokenKind.IDENTIFIER, "Expect class name")

        superclass = None
        if self.match(TokenKind.LESS):
            self.consume(TokenKind.IDENTIFIER, "Expect superclass name")
            superclass = ast.Variable(self.previous())

        self.consume(TokenKind.LEFT_BRACE, "Expect '{' before class body")

        methods = []
        while not self.check(TokenKind.RIGHT_BRACE) and not self.is_at_end():
            methods.append(self.function("method"))

        self.consume(TokenKind.RIGHT_BRACE, "Expect '}' after class body")
        return ast.Class(name, superclass, tuple(methods))

    def function(self, kind):
        """Parses a function or method declaration (the "fun" keyword, if any, is already consumed)."""
        name = self.consume(TokenKind.IDENTIFIER, f"Expect {kind} name")
        self.consume(TokenKind.LEFT_PAREN, f"Expect '(' after {kind} name")

        params = []
        if not self.check(TokenKind.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGS:
                    self.report(self.error(self.peek(), f"Can't have more than {MAX_ARGS} parameters"))
                params.append(self.consume(TokenKind.IDENTIFIER, "Expect parameter name"))
                if not self.match(TokenKind.COMMA):
                    break
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after parameters")

        self.consume(TokenKind.LEFT_BRACE, f"Expect '{{' before {kind} body")
        body = self.block()
        return ast.Function(name, tuple(params), tuple(body))

    def var_declaration(self):
        name = self.consume(TokenKind.IDENTIFIER, "Expect variable name")

        initializer = None
        if self.match(TokenKind.EQUAL):
            initializer = self.expression()

        self.consume(TokenKind.SEMICOLON, "Expect ';' after variable declaration")
        return ast.Var(name, initializer)

    # statements

    def statement(self):
        if self.match(TokenKind.PRINT):
            return self.print_statement()
        if self.match(TokenKind.RETURN):
            return self.return_statement()
        if self.match(TokenKind.LEFT_BRACE):
            return ast.Block(tuple(self.block()))
        if self.match(TokenKind.IF):
            return self.if_statement()
        if self.match(TokenKind.WHILE):
            return self.while_statement()
        if self.match(TokenKind.FOR):
            return self.for_statement()
        return self.expression_statement()

    def print_statement(self):
        value = self.expression()
        self.consume(TokenKind.SEMICOLON, "Expect ';' after value")
        return ast.Print(value)

    def return_statement(self):
        keyword = self.previous()

        value = None
        if not self.check(TokenKind.SEMICOLON):
            value = self.expression()

        self.consume(TokenKind.SEMICOLON, "Expect ';' after return value")
        return ast.Return(keyword, value)

    def expression_statement(self):
        expr = self.expression()
        self.consume(TokenKind.SEMICOLON, "Expect ';' after expression")
        return ast.Expression(expr)

    def block(self):
        """Parses declarations up to the closing brace (the opening brace is already consumed)."""
        statements = []
        while not self.check(TokenKind.RIGHT_BRACE) and not self.is_at_end():
            statements.append(self.declaration())

        self.consume(TokenKind.RIGHT_BRACE, "Expect '}' after block")
        return statements

    def if_statement(self):
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'if'")
        condition = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after if condition")

        then_branch = self.statement()
        else_branch = None
        if self.match(TokenKind.ELSE):
            else_branch = self.statement()

        return ast.If(condition, then_branch, else_branch)

    def while_statement(self):
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'while'")
        condition = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after while condition")

        return ast.While(condition, self.statement())

    def for_statement(self):
        """There is no for node: the loop is desugared into

        { <initializer>; while (<condition> or true) { <body>; <increment>; } }
        """
        self.consume(TokenKind.LEFT_PAREN, "Expect '(' after 'for'")

        if self.match(TokenKind.SEMICOLON):
            initializer = None
        elif self.match(TokenKind.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenKind.SEMICOLON):
            condition = self.expression()
        self.consume(TokenKind.SEMICOLON, "Expect ';' after loop condition")

        increment = None
        if not self.check(TokenKind.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after for clauses")

        body = self.statement()

        if increment is not None:
            body = ast.Block((body, ast.Expression(increment)))
        if condition is None:
            condition = ast.Literal(True)
        body = ast.While(condition, body)
        if initializer is not None:
            body = ast.Block((initializer, body))

        return body

    # expressions

    def expression(self):
        return self.assignment()

    def assignment(self):
        expr = self.logical_or()

        if self.match(TokenKind.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, ast.Variable):
                return ast.Assign(expr.name, value)
            elif isinstance(expr, ast.Get):
                return ast.Set(expr.object, expr.name, value)

            self.report(self.error(equals, "Invalid assignment target"))

        return expr

    def logical_or(self):
        expr = self.logical_and()

        while self.match(TokenKind.OR):
            operator = self.previous()
            expr = ast.Logical(expr, operator, self.logical_and())

        return expr

    def logical_and(self):
        expr = self.equality()

        while self.match(TokenKind.AND):
            operator = self.previous()
            expr = ast.Logical(expr, operator, self.equality())

        return expr

    def equality(self):
        expr = self.comparison()

        while self.match(TokenKind.BANG_EQUAL, TokenKind.EQUAL_EQUAL):
            operator = self.previous()
            expr = ast.Binary(expr, operator, self.comparison())

        return expr

    def comparison(self):
        expr = self.term()

        while self.match(TokenKind.GREATER, TokenKind.GREATER_EQUAL, TokenKind.LESS, TokenKind.LESS_EQUAL):
            operator = self.previous()
            expr = ast.Binary(expr, operator, self.term())

        return expr

    def term(self):
        expr = self.factor()

        while self.match(TokenKind.MINUS, TokenKind.PLUS):
            operator = self.previous()
            expr = ast.Binary(expr, operator, self.factor())

        return expr

    def factor(self):
        expr = self.unary()

        while self.match(TokenKind.SLASH, TokenKind.STAR):
            operator = self.previous()
            expr = ast.Binary(expr, operator, self.unary())

        return expr

    def unary(self):
        if self.match(TokenKind.BANG, TokenKind.MINUS):
            operator = self.previous()
            return ast.Unary(operator, self.unary())

        return self.call()

    def call(self):
        expr = self.primary()

        while True:
            if self.match(TokenKind.LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(TokenKind.DOT):
                name = self.consume(TokenKind.IDENTIFIER, "Expect property name after '.'")
                expr = ast.Get(expr, name)
            else:
                break

        return expr

    def finish_call(self, callee):
        arguments = []
        if not self.check(TokenKind.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGS:
                    self.report(self.error(self.peek(), f"Can't have more than {MAX_ARGS} args"))
                arguments.append(self.expression())
                if not self.match(TokenKind.COMMA):
                    break

        paren = self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after arguments")
        return ast.Call(callee, paren, tuple(arguments))

    def primary(self):
        if self.match(TokenKind.FALSE):
            return ast.Literal(False)
        if self.match(TokenKind.TRUE):
            return ast.Literal(True)
        if self.match(TokenKind.NIL):
            return ast.Literal(None)

        if self.match(TokenKind.NUMBER, TokenKind.STRING):
            return ast.Literal(self.previous().literal)

        if self.match(TokenKind.THIS):
            return ast.This(self.previous())

        if self.match(TokenKind.SUPER):
            keyword = self.previous()
            self.consume(TokenKind.DOT, "Expect '.' after 'super'")
            method = self.consume(TokenKind.IDENTIFIER, "Expect superclass method name")
            return ast.Super(keyword, method)

        if self.match(TokenKind.IDENTIFIER):
            return ast.Variable(self.previous())

        if self.match(TokenKind.LEFT_PAREN):
            expr = self.expression()
            self.consume(TokenKind.RIGHT_PAREN, "Expect ')' after expression")
            return ast.Grouping(expr)

        raise self.error(self.peek(), "Expect expression")
