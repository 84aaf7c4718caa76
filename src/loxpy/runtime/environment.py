"""
Variable environments for the loxpy interpreter.

Environments form a chain via the `enclosing` field for lexical scoping; the
chain is rooted at the global environment. A closure keeps the environment it
was defined in alive after the defining block has exited.
"""

from typing import Any, Dict, Optional

from ..errors import LoxRuntimeError
from ..tokens import Token


class _Uninitialized:
    """Type of the UNINITIALIZED sentinel."""

    def __repr__(self) -> str:
        return "UNINITIALIZED"


# Marks a declared-but-unassigned variable. Distinct from nil (None):
# reading it is an error.
UNINITIALIZED = _Uninitialized()


class Environment:
    """
    A single scope containing variable bindings.

    Lookup and assignment walk outward one `enclosing` link at a time.
    """

    def __init__(self, enclosing: Optional["Environment"] = None):
        self.enclosing = enclosing
        self.values: Dict[str, Any] = {}

    @property
    def is_global(self) -> bool:
        return self.enclosing is None

    def define_uninitialized(self, name: str) -> None:
        """Declare a variable in this scope without giving it a value."""
        self.values[name] = UNINITIALIZED

    def define(self, name: str, value: Any) -> None:
        """Bind a variable in this scope, replacing any binding of the same name here."""
        self.values[name] = value

    def get(self, name: Token) -> Any:
        """Look up a variable in this scope or enclosing scopes."""
        if name.lexeme in self.values:
            value = self.values[name.lexeme]
            if value is UNINITIALIZED:
                raise LoxRuntimeError(name, f"Variable '{name.lexeme}' is not initialized.")
            return value

        if self.enclosing is not None:
            return self.enclosing.get(name)

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name: Token, value: Any) -> None:
        """
        Update an existing variable.

        Rebinds the innermost scope where the name is bound; never creates
        a new binding.
        """
        if name.lexeme in self.values:
            self.values[name.lexeme] = value
            return

        if self.enclosing is not None:
            self.enclosing.assign(name, value)
            return

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def __repr__(self) -> str:
        depth = 0
        env = self.enclosing
        while env is not None:
            depth += 1
            env = env.enclosing
        return f"Environment(depth={depth}, names={sorted(self.values)})"
