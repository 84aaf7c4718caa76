"""
Built-in function registry for the loxpy interpreter.

Builtins are defined in the global environment before any user code runs.
"""

import time
from typing import Any, Callable, Dict, List, Optional, TYPE_CHECKING

from .values import LoxCallable

if TYPE_CHECKING:
    from .environment import Environment
    from .interpreter import Interpreter


class BuiltinFunction(LoxCallable):
    """A native function implemented in Python."""

    def __init__(self, name: str, arity: int, implementation: Callable[..., Any], doc: str = ""):
        self.name = name
        self._arity = arity
        self.implementation = implementation
        self.doc = doc

    def arity(self) -> int:
        return self._arity

    def call(self, interpreter: "Interpreter", arguments: List[Any]) -> Any:
        return self.implementation(*arguments)

    def __str__(self) -> str:
        return "<native fn>"

    def __repr__(self) -> str:
        return f"BuiltinFunction({self.name!r}, arity={self._arity})"


class BuiltinRegistry:
    """
    Registry of all built-in functions.

    Functions are registered by name and installed into an environment.
    """

    def __init__(self):
        self._functions: Dict[str, BuiltinFunction] = {}
        self._register_all()

    def get_function(self, name: str) -> Optional[BuiltinFunction]:
        """Look up a function by name."""
        return self._functions.get(name)

    def register(self, func: BuiltinFunction) -> None:
        """Register a function."""
        self._functions[func.name] = func

    def names(self) -> List[str]:
        return sorted(self._functions)

    def install(self, environment: "Environment") -> None:
        """Define every registered builtin in the given environment."""
        for name, func in self._functions.items():
            environment.define(name, func)

    def _register_all(self) -> None:
        """Register all built-in functions."""
        self.register(BuiltinFunction(
            "clock", 0, lambda: float(time.time()),
            doc="Seconds since the epoch, as a number.",
        ))


_registry: Optional[BuiltinRegistry] = None


def get_builtin_registry() -> BuiltinRegistry:
    """Get the shared builtin registry."""
    global _registry
    if _registry is None:
        _registry = BuiltinRegistry()
    return _registry
