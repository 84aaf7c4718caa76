"""
loxpy Runtime - Tree-walking interpreter for Lox programs.

This module provides:
- Interpreter: Executes parsed statements and expressions
- Environment: Lexically chained variable scopes
- Values: Truthiness, equality, printing and the callable protocol
- BuiltinRegistry: Native functions defined in the global scope
"""

from .environment import (
    Environment,
    UNINITIALIZED,
)

from .values import (
    is_truthy,
    is_equal,
    stringify,
    BREAK,
    BreakSignal,
    ReturnSignal,
    LoxCallable,
    LoxFunction,
)

from .builtins import (
    BuiltinFunction,
    BuiltinRegistry,
    get_builtin_registry,
)

from .interpreter import (
    Interpreter,
)

__all__ = [
    # Environment
    'Environment',
    'UNINITIALIZED',

    # Values
    'is_truthy',
    'is_equal',
    'stringify',
    'BREAK',
    'BreakSignal',
    'ReturnSignal',
    'LoxCallable',
    'LoxFunction',

    # Builtins
    'BuiltinFunction',
    'BuiltinRegistry',
    'get_builtin_registry',

    # Interpreter
    'Interpreter',
]
