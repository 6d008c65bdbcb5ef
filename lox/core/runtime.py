"""Runtime values of lox that have no direct Python counterpart: callables, classes and instances.

nil, booleans, numbers and strings are represented by None, bool, float and str.
"""

import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from lox.core.environment import Environment
from lox.lang.error import RuntimeException


def stringify(value):
    """Display form of a lox value, as used by print and the shell."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    return str(value)


def format_number(value):
    """Shortest round-tripping decimal form of value. Integral values below 1e21 print as plain integers (-0 as 0),
    and exponent form is used only for magnitudes under 1e-6 or from 1e21 up, with an unpadded exponent.
    """
    if math.isinf(value) or math.isnan(value):
        return repr(value)
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))

    sign = "-" if value < 0 else ""
    _, digits, exponent = Decimal(repr(abs(value))).normalize().as_tuple()
    digits = "".join(map(str, digits))
    point = len(digits) + exponent  # decimal point position relative to the first digit

    if 0 < point <= 21:
        text = digits[:point] + "." + digits[point:]
    elif -6 < point <= 0:
        text = "0." + "0" * -point + digits
    else:
        mantissa = digits[0] + ("." + digits[1:] if len(digits) > 1 else "")
        text = f"{mantissa}e{'+' if point > 0 else '-'}{abs(point - 1)}"
    return sign + text


@dataclass(frozen=True)
class ReturnSignal:
    """Completion of a statement that ran `return`. Passed back up through statement execution (never raised) until
    the nearest function call consumes it.
    """
    value: object


class LoxCallable(ABC):
    """Anything that can appear to the left of a call: native functions, lox functions and classes."""

    @abstractmethod
    def arity(self):
        """Number of arguments this callable expects."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Calls with arguments, whose count has already been checked against arity."""


class NativeFunction(LoxCallable):
    """Function implemented in Python. function receives the interpreter and the list of arguments."""

    def __init__(self, name, arity, function):
        self.name = name
        self._arity = arity
        self.function = function

    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.function(interpreter, arguments)

    def __str__(self):
        return f"<native fun '{self.name}'>"


def clock(interpreter, arguments):
    """Seconds since the epoch."""
    return time.time()


NATIVES = [NativeFunction("clock", 0, clock)]


class LoxFunction(LoxCallable):
    """Function or method declared in lox, closing over the environment it was declared in."""

    def __init__(self, declaration, closure, is_initializer=False):
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        completion = interpreter.execute_block(self.declaration.body, environment)

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if completion is not None:
            return completion.value
        return None

    def bind(self, instance):
        """Returns this method with `this` bound to instance."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.declaration, environment, self.is_initializer)

    def __str__(self):
        return f"<fun {self.declaration.name.lexeme}>"


class LoxClass(LoxCallable):
    """Calling a class creates an instance and runs its `init` method, if there is one."""
    INITIALIZER = "init"

    def __init__(self, name, superclass, methods):
        self.name = name
        self.superclass = superclass
        self.methods = methods

    def find_method(self, name):
        """Looks name up in this class, then along the superclass chain. Returns None if not found."""
        if name in self.methods:
            return self.methods[name]
        if self.superclass is not None:
            return self.superclass.find_method(name)
        return None

    def arity(self):
        initializer = self.find_method(LoxClass.INITIALIZER)
        if initializer is None:
            return 0
        return initializer.arity()

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)

        initializer = self.find_method(LoxClass.INITIALIZER)
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)

        return instance

    def __str__(self):
        return f"<class {self.name}>"


class LoxInstance:
    """Instance of a LoxClass with its own, open set of fields."""

    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name):
        """Field named name (a Token), else a method bound to this instance. Fields shadow methods."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise RuntimeException(f"Undefined property '{name.lexeme}'", name)

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"<instance of class {self.klass.name}>"
