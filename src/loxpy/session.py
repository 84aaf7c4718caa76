"""
Execution session: one interpreter plus the error state of the run.

A Session replaces process-wide "had error" flags. Scripts go through run()
or run_file(); the interactive shell feeds each complete chunk to run_chunk().
"""

import sys
from pathlib import Path
from typing import List, Optional, TextIO

from .ast import Statement
from .errors import ConsoleReporter, DiagnosticCollector
from .lexer import tokenize
from .parser import Parser
from .runtime import Interpreter
from .tokens import is_statement_start


# Exit codes (sysexits.h)
EXIT_OK = 0
EXIT_USAGE = 64
EXIT_DATA_ERROR = 65
EXIT_SOFTWARE = 70


class Session:
    """Lexes, parses and interprets source text against persistent globals."""

    def __init__(self, out: Optional[TextIO] = None, err: Optional[TextIO] = None,
                 color: bool = False):
        self.out = out if out is not None else sys.stdout
        self.err = err if err is not None else sys.stderr
        self.diagnostics = DiagnosticCollector(ConsoleReporter(self.err, color=color))
        self.interpreter = Interpreter(out=self.out, diagnostics=self.diagnostics)

    @property
    def had_error(self) -> bool:
        """True once a syntax error has been reported since the last reset()."""
        return self.diagnostics.has_syntax_errors

    @property
    def had_runtime_error(self) -> bool:
        return self.diagnostics.has_runtime_errors

    def reset(self) -> None:
        """Forget reported errors; global variables are kept."""
        self.diagnostics.clear()

    def parse(self, source: str) -> List[Statement]:
        """Lex and parse a program, reporting syntax errors."""
        tokens = tokenize(source, self.diagnostics)
        return Parser(tokens, self.diagnostics).parse()

    def run(self, source: str) -> None:
        """Run a whole program. Nothing executes if any syntax error was reported."""
        statements = self.parse(source)
        if self.had_error:
            return
        self.interpreter.interpret(statements)

    def run_chunk(self, source: str) -> None:
        """
        Run one chunk of interactive input.

        A chunk that starts like a statement is run as statements. Anything
        else is first tried as a bare expression whose value is printed; if it
        does not parse as one, it is run as statements so that errors are
        reported against statement syntax.
        """
        tokens = tokenize(source, self.diagnostics)
        if self.had_error or len(tokens) <= 1:
            return

        if not is_statement_start(tokens[0].type):
            # Failed attempts are not reported; the statement parse reports instead
            attempt = Parser(tokens, DiagnosticCollector())
            expr = attempt.parse_expression()
            if expr is not None:
                self.interpreter.interpret_expression(expr)
                return

        statements = Parser(tokens, self.diagnostics).parse()
        if self.had_error:
            return
        self.interpreter.interpret(statements)

    def run_file(self, path) -> int:
        """Run a script file and return the process exit code."""
        source = Path(path).read_text()
        self.run(source)
        return self.exit_code()

    def exit_code(self) -> int:
        if self.had_error:
            return EXIT_DATA_ERROR
        if self.had_runtime_error:
            return EXIT_SOFTWARE
        return EXIT_OK
