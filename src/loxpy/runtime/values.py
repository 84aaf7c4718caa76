"""
Runtime values for the loxpy interpreter.

Lox values are plain Python objects:
    nil     -> None
    boolean -> bool
    number  -> float
    string  -> str
    callable-> LoxCallable (user functions and builtins)

This module holds the operations every evaluator rule relies on
(truthiness, equality, printing) plus the callable protocol and the
control-flow signals threaded through statement execution.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, List, TYPE_CHECKING

from ..ast import FunctionDef
from .environment import Environment

if TYPE_CHECKING:
    from .interpreter import Interpreter


def is_truthy(value: Any) -> bool:
    """nil and false are falsy; everything else (0 and "" included) is truthy."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a: Any, b: Any) -> bool:
    """Lox equality: values of different types are never equal."""
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    # bool is a subclass of int in Python; true must not equal 1
    if type(a) is not type(b):
        return False
    return a == b


def stringify(value: Any) -> str:
    """Format a value the way 'print' shows it."""
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        text = repr(value)
        if text.endswith(".0"):
            text = text[:-2]
        return text
    return str(value)


# =============================================================================
# Control-flow signals
# =============================================================================

class BreakSignal:
    """Returned by statement execution when a 'break' unwinds a loop."""

    def __repr__(self) -> str:
        return "BREAK"


BREAK = BreakSignal()


@dataclass
class ReturnSignal:
    """Returned by statement execution when a 'return' unwinds a function body."""
    value: Any = None


# =============================================================================
# Callables
# =============================================================================

class LoxCallable(ABC):
    """Anything that can appear as the callee of a call expression."""

    @abstractmethod
    def arity(self) -> int:
        """Number of arguments the callable expects."""

    @abstractmethod
    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        """Invoke with already-evaluated arguments."""


class LoxFunction(LoxCallable):
    """A user-defined function closing over its defining environment."""

    def __init__(self, declaration: FunctionDef, closure: Environment):
        self.declaration = declaration
        self.closure = closure

    @property
    def name(self) -> str:
        return self.declaration.name.lexeme

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        environment = Environment(self.closure)
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        signal = interpreter.execute_block(self.declaration.body, environment)
        if isinstance(signal, ReturnSignal):
            return signal.value
        return None

    def __str__(self) -> str:
        return f"<fn {self.name}>"

    def __repr__(self) -> str:
        return f"LoxFunction({self.name!r}, arity={self.arity()})"
