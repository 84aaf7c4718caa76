"""
Diagnostics and fault types for loxpy.

Two fault kinds exist:
- Syntax faults, reported by the lexer and parser. The parser recovers from
  them locally, so many can be collected in one pass.
- Runtime faults, raised by the interpreter as LoxRuntimeError and caught at
  the top of one interpret call.

Diagnostics are collected in a DiagnosticCollector; a reporter attached to the
collector is the diagnostics sink that writes them out.
"""

import sys
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, TextIO

from termcolor import colored

from .tokens import Token, TokenType


class DiagnosticKind(Enum):
    """Kinds of diagnostics."""
    SYNTAX = "syntax"
    RUNTIME = "runtime"


@dataclass
class Diagnostic:
    """A single diagnostic message."""
    kind: DiagnosticKind
    message: str
    line: int
    where: str = ""     # " at end", " at 'x'" or "" (syntax errors only)

    def format(self) -> str:
        """Format the diagnostic for display."""
        if self.kind == DiagnosticKind.RUNTIME:
            return f"{self.message}\n[line {self.line}]"
        return f"[line {self.line}] Error{self.where}: {self.message}"

    def to_json(self) -> dict:
        """Convert to JSON-serializable dict for tooling integration."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "line": self.line,
            "where": self.where,
        }


class LoxError(Exception):
    """Base exception for loxpy faults."""

    def __init__(self, diagnostic: Diagnostic):
        self.diagnostic = diagnostic
        super().__init__(diagnostic.message)

    def __str__(self) -> str:
        return self.diagnostic.format()


class ParseError(LoxError):
    """Unrecoverable syntax error; unwinds the parser to the next statement boundary."""
    pass


class LoxRuntimeError(LoxError):
    """Error during evaluation. Carries the offending token for line reporting."""

    def __init__(self, token: Token, message: str):
        self.token = token
        super().__init__(Diagnostic(
            kind=DiagnosticKind.RUNTIME,
            message=message,
            line=token.line,
        ))


def _where(token: Token) -> str:
    if token.type == TokenType.EOF:
        return " at end"
    return f" at '{token.lexeme}'"


def syntax_error(token: Token, message: str) -> ParseError:
    """Syntax error located at a token."""
    diag = Diagnostic(
        kind=DiagnosticKind.SYNTAX,
        message=message,
        line=token.line,
        where=_where(token),
    )
    return ParseError(diag)


def lexical_error(line: int, message: str) -> Diagnostic:
    """Syntax error located only by line (lexer errors have no token yet)."""
    return Diagnostic(kind=DiagnosticKind.SYNTAX, message=message, line=line)


class ConsoleReporter:
    """Diagnostics sink writing formatted diagnostics to a text stream.

    Color is only used when the stream is a terminal.
    """

    def __init__(self, stream: Optional[TextIO] = None, color: bool = False):
        self.stream = stream if stream is not None else sys.stderr
        self.color = color and self.stream.isatty()

    def report(self, diagnostic: Diagnostic) -> None:
        text = diagnostic.format()
        if self.color:
            text = colored(text, "red", attrs=["bold"])
        print(text, file=self.stream)


class DiagnosticCollector:
    """Collects diagnostics, optionally forwarding each one to a reporter."""

    def __init__(self, reporter: Optional[ConsoleReporter] = None):
        self.diagnostics: List[Diagnostic] = []
        self.reporter = reporter

    def add(self, diagnostic: Diagnostic) -> None:
        """Add a diagnostic."""
        self.diagnostics.append(diagnostic)
        if self.reporter is not None:
            self.reporter.report(diagnostic)

    def add_error(self, error: LoxError) -> None:
        """Add an error exception as a diagnostic."""
        self.add(error.diagnostic)

    def clear(self) -> None:
        self.diagnostics.clear()

    @property
    def error_count(self) -> int:
        return len(self.diagnostics)

    @property
    def has_errors(self) -> bool:
        return bool(self.diagnostics)

    @property
    def has_syntax_errors(self) -> bool:
        return any(d.kind == DiagnosticKind.SYNTAX for d in self.diagnostics)

    @property
    def has_runtime_errors(self) -> bool:
        return any(d.kind == DiagnosticKind.RUNTIME for d in self.diagnostics)

    @property
    def messages(self) -> List[str]:
        """The bare messages, in report order."""
        return [d.message for d in self.diagnostics]

    def format_all(self) -> str:
        """Format all diagnostics for display."""
        return "\n".join(d.format() for d in self.diagnostics)

    def to_json(self) -> dict:
        """Convert all diagnostics to JSON format."""
        return {
            "diagnostics": [d.to_json() for d in self.diagnostics],
            "error_count": self.error_count,
        }
