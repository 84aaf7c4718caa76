"""
loxpy - a tree-walking interpreter for the Lox language.

This module provides:
- Lexer: Tokenizes Lox source code
- Parser: Builds an AST from tokens, recovering from syntax errors
- Interpreter: Executes the AST against lexically scoped environments
- Printers: Lisp-style and reverse Polish renderings of the AST
- Session: Runs scripts and interactive chunks with persistent globals

Usage:
    from loxpy import tokenize, parse, Interpreter, DiagnosticCollector

    diagnostics = DiagnosticCollector()
    statements = parse(tokenize('var a = 1; print a + 2;', diagnostics), diagnostics)
    if not diagnostics.has_errors:
        Interpreter(diagnostics=diagnostics).interpret(statements)
"""

from .tokens import (
    Token,
    TokenType,
    KEYWORDS,
    is_statement_start,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .parser import (
    Parser,
    parse,
    parse_expression,
)

from .ast import (
    # Base
    AstNode,
    AstVisitor,
    # Expressions
    Expression,
    Literal,
    Grouping,
    UnaryOp,
    BinaryOp,
    ConditionalExpr,
    Variable,
    Assign,
    LogicalOp,
    Call,
    # Statements
    Statement,
    ExpressionStatement,
    PrintStatement,
    VarDecl,
    Block,
    IfStatement,
    WhileStatement,
    BreakStatement,
    ReturnStatement,
    FunctionDef,
)

from .errors import (
    Diagnostic,
    DiagnosticKind,
    DiagnosticCollector,
    ConsoleReporter,
    LoxError,
    ParseError,
    LoxRuntimeError,
)

from .runtime import (
    Interpreter,
    Environment,
    LoxFunction,
    stringify,
)

from .printer import (
    AstPrinter,
    RpnPrinter,
)

from .session import Session

__all__ = [
    # Tokens
    'Token',
    'TokenType',
    'KEYWORDS',
    'is_statement_start',

    # Lexer
    'Lexer',
    'tokenize',

    # Parser
    'Parser',
    'parse',
    'parse_expression',

    # AST
    'AstNode',
    'AstVisitor',
    'Expression',
    'Literal',
    'Grouping',
    'UnaryOp',
    'BinaryOp',
    'ConditionalExpr',
    'Variable',
    'Assign',
    'LogicalOp',
    'Call',
    'Statement',
    'ExpressionStatement',
    'PrintStatement',
    'VarDecl',
    'Block',
    'IfStatement',
    'WhileStatement',
    'BreakStatement',
    'ReturnStatement',
    'FunctionDef',

    # Errors
    'Diagnostic',
    'DiagnosticKind',
    'DiagnosticCollector',
    'ConsoleReporter',
    'LoxError',
    'ParseError',
    'LoxRuntimeError',

    # Runtime
    'Interpreter',
    'Environment',
    'LoxFunction',
    'stringify',

    # Printers
    'AstPrinter',
    'RpnPrinter',

    # Session
    'Session',
]
