#!/usr/bin/env python3
"""
CLI for the loxpy interpreter.

Usage:
    python -m loxpy                  # interactive prompt
    python -m loxpy SCRIPT.lox       # run a script
    python -m loxpy --check SCRIPT.lox
    python -m loxpy --print-ast lisp SCRIPT.lox

Exit codes follow sysexits.h: 64 for bad usage, 65 when the script has
syntax errors, 70 when it stopped on a runtime error.
"""

import argparse
import sys
from pathlib import Path

from .session import Session, EXIT_OK, EXIT_USAGE, EXIT_DATA_ERROR, EXIT_SOFTWARE


class UsageArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that exits with the usage code instead of 2."""

    def error(self, message):
        self.print_usage(sys.stderr)
        print(f"{self.prog}: error: {message}", file=sys.stderr)
        sys.exit(EXIT_USAGE)


def cmd_print_ast(session: Session, source: str, notation: str) -> int:
    """Print the parsed program instead of running it."""
    from .printer import AstPrinter, RpnPrinter

    statements = session.parse(source)
    if session.had_error:
        return EXIT_DATA_ERROR

    printer = AstPrinter() if notation == 'lisp' else RpnPrinter()
    try:
        for stmt in statements:
            print(printer.print(stmt), file=session.out)
    except NotImplementedError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_SOFTWARE
    except RecursionError:
        print("Error: Tree too deep to print.", file=sys.stderr)
        return EXIT_SOFTWARE
    return EXIT_OK


def cmd_check(session: Session, source: str) -> int:
    """Parse only, reporting syntax errors."""
    session.parse(source)
    return session.exit_code()


def cmd_repl(session: Session) -> int:
    from .shell import Shell

    Shell(session).cmdloop()
    return EXIT_OK


def main(argv=None):
    parser = UsageArgumentParser(
        prog='loxpy',
        description='Tree-walking interpreter for the Lox language',
    )
    parser.add_argument('script', nargs='*', help='Lox source file (omit for a prompt)')
    parser.add_argument('--check', action='store_true',
                        help='Parse only and report syntax errors')
    parser.add_argument('--print-ast', choices=['lisp', 'rpn'], metavar='{lisp,rpn}',
                        help='Print the syntax tree instead of running')
    parser.add_argument('--no-color', action='store_true',
                        help='Do not color diagnostics')

    args = parser.parse_args(argv)

    if len(args.script) > 1:
        print("Usage: loxpy [script]", file=sys.stderr)
        return EXIT_USAGE

    session = Session(color=not args.no_color)

    if not args.script:
        if args.check or args.print_ast:
            print("Usage: loxpy [script]", file=sys.stderr)
            return EXIT_USAGE
        return cmd_repl(session)

    source_path = Path(args.script[0])
    if not source_path.is_file():
        print(f"Error: File not found: {source_path}", file=sys.stderr)
        return EXIT_USAGE

    if args.print_ast:
        return cmd_print_ast(session, source_path.read_text(), args.print_ast)
    if args.check:
        return cmd_check(session, source_path.read_text())

    return session.run_file(source_path)


if __name__ == '__main__':
    sys.exit(main())
