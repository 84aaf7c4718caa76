"""
Token types for the loxpy lexer.

The token set is the contract between the lexer and the parser: every
operator, keyword and literal category the grammar matches against.
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Any, Optional


class TokenType(Enum):
    """All token types recognized by the lexer."""

    # --- Single-character tokens ---
    LEFT_PAREN = auto()         # (
    RIGHT_PAREN = auto()        # )
    LEFT_BRACE = auto()         # {
    RIGHT_BRACE = auto()        # }
    COMMA = auto()              # ,
    DOT = auto()                # .
    MINUS = auto()              # -
    PLUS = auto()               # +
    SEMICOLON = auto()          # ;
    SLASH = auto()              # /
    STAR = auto()               # *
    QUESTION = auto()           # ? (conditional)
    COLON = auto()              # : (conditional)

    # --- One or two character tokens ---
    BANG = auto()               # !
    BANG_EQUAL = auto()         # !=
    EQUAL = auto()              # =
    EQUAL_EQUAL = auto()        # ==
    GREATER = auto()            # >
    GREATER_EQUAL = auto()      # >=
    LESS = auto()               # <
    LESS_EQUAL = auto()         # <=

    # --- Literals ---
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()

    # --- Keywords ---
    AND = auto()
    BREAK = auto()
    ELSE = auto()
    FALSE = auto()
    FOR = auto()
    FUN = auto()
    IF = auto()
    NIL = auto()
    OR = auto()
    PRINT = auto()
    RETURN = auto()
    TRUE = auto()
    VAR = auto()
    WHILE = auto()

    # --- Special ---
    EOF = auto()                # end of input


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    type: TokenType
    lexeme: str             # The original source text
    literal: Any = None     # Parsed value for NUMBER (float) and STRING (str)
    line: int = 1           # 1-indexed source line

    def __str__(self) -> str:
        if self.type in (TokenType.NUMBER, TokenType.STRING, TokenType.IDENTIFIER):
            return f"{self.type.name}({self.lexeme})"
        return self.type.name


KEYWORDS: dict[str, TokenType] = {
    "and": TokenType.AND,
    "break": TokenType.BREAK,
    "else": TokenType.ELSE,
    "false": TokenType.FALSE,
    "for": TokenType.FOR,
    "fun": TokenType.FUN,
    "if": TokenType.IF,
    "nil": TokenType.NIL,
    "or": TokenType.OR,
    "print": TokenType.PRINT,
    "return": TokenType.RETURN,
    "true": TokenType.TRUE,
    "var": TokenType.VAR,
    "while": TokenType.WHILE,
}


# Keywords that begin a statement; the parser resynchronizes on these and the
# interactive session skips expression mode when a chunk starts with one.
STATEMENT_KEYWORDS: frozenset[TokenType] = frozenset({
    TokenType.FUN,
    TokenType.VAR,
    TokenType.FOR,
    TokenType.IF,
    TokenType.WHILE,
    TokenType.PRINT,
    TokenType.RETURN,
    TokenType.BREAK,
})


def is_statement_start(token_type: TokenType) -> bool:
    """Check if a token type can only begin a statement (never an expression)."""
    return token_type in STATEMENT_KEYWORDS or token_type == TokenType.LEFT_BRACE


def keyword_type(text: str) -> Optional[TokenType]:
    """Get the keyword token type for an identifier-like word, if any."""
    return KEYWORDS.get(text)
