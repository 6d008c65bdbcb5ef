"""Scope chain for the interpreter. Environments are shared: a closure keeps the environment it was defined in alive
for as long as the closure itself is reachable.
"""

from lox.lang.error import RuntimeException


class Environment:
    """Mapping of names to values, plus a link to the enclosing environment (None for globals)."""

    def __init__(self, enclosing=None):
        self.values = {}
        self.enclosing = enclosing

    def define(self, name, value):
        """Binds name in this environment, replacing any previous binding."""
        self.values[name] = value

    def get(self, name):
        """Looks name (a Token) up along the whole chain."""
        if name.lexeme in self.values:
            return self.values[name.lexeme]
        if self.enclosing is not None:
            return self.enclosing.get(name)

        raise RuntimeException(f"Undefined variable '{name.lexeme}'", name)

    def assign(self, name, value):
        """Rebinds an existing name (a Token) along the whole chain. Never creates a binding."""
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
        elif self.enclosing is not None:
            self.enclosing.assign(name, value)
        else:
            raise RuntimeException(f"Undefined variable '{name.lexeme}'", name)

    def ancestor(self, distance):
        """Environment distance links up the chain. distance comes from the resolver, so the chain is long enough."""
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance, name):
        """Value of name (a str) in the environment distance links up."""
        return self.ancestor(distance).values[name]

    def assign_at(self, distance, name, value):
        """Rebinds name (a Token) in the environment distance links up."""
        self.ancestor(distance).values[name.lexeme] = value

    def __repr__(self):
        return f"Environment(values={self.values}, enclosing={'...' if self.enclosing else None})"
