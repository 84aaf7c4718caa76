"""
Lexer for loxpy.

Converts source text into a stream of tokens for the parser.
Supports:
- Single-line comments (//)
- Nestable multi-line comments (/* */)
- String literals (may span lines, no escape sequences)
- Number literals (integer or decimal, stored as float)
- Keywords, identifiers, operators and the ?: conditional punctuation

Lexical errors are reported to the diagnostics collector and scanning
continues, so a single pass reports every bad character.
"""

from typing import Iterator, List, Optional

from .tokens import Token, TokenType, keyword_type
from .errors import DiagnosticCollector, lexical_error


SINGLE_CHAR_TOKENS = {
    '(': TokenType.LEFT_PAREN,
    ')': TokenType.RIGHT_PAREN,
    '{': TokenType.LEFT_BRACE,
    '}': TokenType.RIGHT_BRACE,
    ',': TokenType.COMMA,
    '.': TokenType.DOT,
    '-': TokenType.MINUS,
    '+': TokenType.PLUS,
    ';': TokenType.SEMICOLON,
    '*': TokenType.STAR,
    '?': TokenType.QUESTION,
    ':': TokenType.COLON,
}

# char -> (type if followed by '=', type otherwise)
EQUAL_SUFFIX_TOKENS = {
    '!': (TokenType.BANG_EQUAL, TokenType.BANG),
    '=': (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    '<': (TokenType.LESS_EQUAL, TokenType.LESS),
    '>': (TokenType.GREATER_EQUAL, TokenType.GREATER),
}


class Lexer:
    """
    Tokenizer for loxpy source.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()

    Or for streaming:
        lexer = Lexer(source_code)
        for token in lexer:
            process(token)
    """

    def __init__(self, source: str, diagnostics: Optional[DiagnosticCollector] = None):
        self.source = source
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticCollector()
        self.start = 0          # Start of the lexeme being scanned
        self.pos = 0            # Current position in source
        self.line = 1           # Current line (1-indexed)

    def _peek(self, offset: int = 0) -> str:
        """Look at character at current position + offset without consuming."""
        idx = self.pos + offset
        if idx >= len(self.source):
            return '\0'
        return self.source[idx]

    def _advance(self) -> str:
        """Consume and return current character."""
        if self.pos >= len(self.source):
            return '\0'
        ch = self.source[self.pos]
        self.pos += 1
        if ch == '\n':
            self.line += 1
        return ch

    def _match(self, expected: str) -> bool:
        """Consume character if it matches expected."""
        if self._is_at_end() or self._peek() != expected:
            return False
        self._advance()
        return True

    def _is_at_end(self) -> bool:
        """Check if we've reached end of source."""
        return self.pos >= len(self.source)

    def _error(self, message: str, line: Optional[int] = None) -> None:
        self.diagnostics.add(lexical_error(line if line is not None else self.line, message))

    def _make_token(self, token_type: TokenType, literal=None, line: Optional[int] = None) -> Token:
        """Create a token for the lexeme between start and the current position."""
        lexeme = self.source[self.start:self.pos]
        return Token(token_type, lexeme, literal, line if line is not None else self.line)

    def _skip_comment(self) -> None:
        """Skip a single-line comment (// to end of line)."""
        while self._peek() != '\n' and not self._is_at_end():
            self._advance()

    def _skip_multiline_comment(self) -> None:
        """Skip /* ... */ comment. The opening '/*' is already consumed."""
        start_line = self.line
        depth = 1  # Support nested comments

        while not self._is_at_end() and depth > 0:
            if self._peek() == '/' and self._peek(1) == '*':
                self._advance()
                self._advance()
                depth += 1
            elif self._peek() == '*' and self._peek(1) == '/':
                self._advance()
                self._advance()
                depth -= 1
            else:
                self._advance()

        if depth > 0:
            self._error("Unterminated block comment.", start_line)

    def _scan_string(self) -> Optional[Token]:
        """Scan a string literal. The opening quote is already consumed."""
        start_line = self.line
        while self._peek() != '"' and not self._is_at_end():
            self._advance()

        if self._is_at_end():
            self._error("Unterminated string.")
            return None

        self._advance()  # closing quote
        value = self.source[self.start + 1:self.pos - 1]
        # Strings may span lines; the token belongs to the line it starts on
        return self._make_token(TokenType.STRING, value, start_line)

    def _scan_number(self) -> Token:
        """Scan a number literal (digits with an optional fractional part)."""
        while _is_digit(self._peek()):
            self._advance()

        # A trailing '.' without digits is not part of the number
        if self._peek() == '.' and _is_digit(self._peek(1)):
            self._advance()  # consume '.'
            while _is_digit(self._peek()):
                self._advance()

        return self._make_token(TokenType.NUMBER, float(self.source[self.start:self.pos]))

    def _scan_identifier_or_keyword(self) -> Token:
        """Scan an identifier or keyword."""
        while _is_alnum(self._peek()):
            self._advance()

        text = self.source[self.start:self.pos]
        token_type = keyword_type(text) or TokenType.IDENTIFIER
        return self._make_token(token_type)

    def _scan_token(self) -> Optional[Token]:
        """Scan a single token; returns None for skipped input."""
        ch = self._advance()

        if ch in SINGLE_CHAR_TOKENS:
            return self._make_token(SINGLE_CHAR_TOKENS[ch])

        if ch in EQUAL_SUFFIX_TOKENS:
            with_equal, without = EQUAL_SUFFIX_TOKENS[ch]
            return self._make_token(with_equal if self._match('=') else without)

        if ch == '/':
            if self._match('/'):
                self._skip_comment()
                return None
            if self._match('*'):
                self._skip_multiline_comment()
                return None
            return self._make_token(TokenType.SLASH)

        if ch in ' \r\t\n':
            return None

        if ch == '"':
            return self._scan_string()

        if _is_digit(ch):
            return self._scan_number()

        if _is_alpha(ch):
            return self._scan_identifier_or_keyword()

        self._error("Unexpected character.")
        return None

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source and return list of tokens."""
        return list(self)

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens; the last token is always EOF."""
        while not self._is_at_end():
            self.start = self.pos
            token = self._scan_token()
            if token is not None:
                yield token
        yield Token(TokenType.EOF, "", None, self.line)


def _is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


def _is_alpha(ch: str) -> bool:
    return ('a' <= ch <= 'z') or ('A' <= ch <= 'Z') or ch == '_'


def _is_alnum(ch: str) -> bool:
    return _is_alpha(ch) or _is_digit(ch)


def tokenize(source: str, diagnostics: Optional[DiagnosticCollector] = None) -> List[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: The source code to tokenize
        diagnostics: Optional collector receiving lexical errors

    Returns:
        List of tokens, ending with EOF
    """
    lexer = Lexer(source, diagnostics)
    return lexer.tokenize()
