"""
Unit tests for the loxpy lexer.
"""

import textwrap

from loxpy import tokenize, Lexer, TokenType, DiagnosticCollector


def types_of(source):
    return [t.type for t in tokenize(source)]


class TestLexerBasics:
    """Test basic lexer functionality."""

    def test_empty_source(self):
        """Empty source produces only EOF."""
        tokens = tokenize("")
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF

    def test_whitespace_only(self):
        assert types_of("  \t\r\n  ") == [TokenType.EOF]

    def test_var_declaration(self):
        assert types_of("var x = 42;") == [
            TokenType.VAR,
            TokenType.IDENTIFIER,
            TokenType.EQUAL,
            TokenType.NUMBER,
            TokenType.SEMICOLON,
            TokenType.EOF,
        ]

    def test_identifier_lexeme(self):
        tokens = tokenize("foo_bar2")
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].lexeme == "foo_bar2"

    def test_keywords(self):
        source = "and break else false for fun if nil or print return true var while"
        assert types_of(source)[:-1] == [
            TokenType.AND, TokenType.BREAK, TokenType.ELSE, TokenType.FALSE,
            TokenType.FOR, TokenType.FUN, TokenType.IF, TokenType.NIL,
            TokenType.OR, TokenType.PRINT, TokenType.RETURN, TokenType.TRUE,
            TokenType.VAR, TokenType.WHILE,
        ]

    def test_keyword_prefix_is_identifier(self):
        """A keyword followed by more letters is an identifier."""
        assert types_of("variable orchid")[:-1] == [TokenType.IDENTIFIER, TokenType.IDENTIFIER]

    def test_streaming(self):
        """The lexer can be iterated directly."""
        tokens = list(Lexer("1 + 2"))
        assert [t.type for t in tokens] == [
            TokenType.NUMBER, TokenType.PLUS, TokenType.NUMBER, TokenType.EOF,
        ]


class TestOperators:
    """Test operator and punctuation tokens."""

    def test_single_char(self):
        assert types_of("(){},.-+;*/?:")[:-1] == [
            TokenType.LEFT_PAREN, TokenType.RIGHT_PAREN,
            TokenType.LEFT_BRACE, TokenType.RIGHT_BRACE,
            TokenType.COMMA, TokenType.DOT, TokenType.MINUS, TokenType.PLUS,
            TokenType.SEMICOLON, TokenType.STAR, TokenType.SLASH,
            TokenType.QUESTION, TokenType.COLON,
        ]

    def test_two_char(self):
        assert types_of("! != = == < <= > >=")[:-1] == [
            TokenType.BANG, TokenType.BANG_EQUAL,
            TokenType.EQUAL, TokenType.EQUAL_EQUAL,
            TokenType.LESS, TokenType.LESS_EQUAL,
            TokenType.GREATER, TokenType.GREATER_EQUAL,
        ]

    def test_no_space_needed(self):
        assert types_of("a<=b")[:-1] == [
            TokenType.IDENTIFIER, TokenType.LESS_EQUAL, TokenType.IDENTIFIER,
        ]


class TestLiterals:
    """Test number and string literals."""

    def test_integer_is_float(self):
        token = tokenize("123")[0]
        assert token.type == TokenType.NUMBER
        assert token.literal == 123.0
        assert isinstance(token.literal, float)

    def test_decimal(self):
        token = tokenize("45.67")[0]
        assert token.literal == 45.67
        assert token.lexeme == "45.67"

    def test_trailing_dot_not_part_of_number(self):
        assert types_of("12.")[:-1] == [TokenType.NUMBER, TokenType.DOT]

    def test_string(self):
        token = tokenize('"hello world"')[0]
        assert token.type == TokenType.STRING
        assert token.literal == "hello world"
        assert token.lexeme == '"hello world"'

    def test_multiline_string_keeps_start_line(self):
        tokens = tokenize('"one\ntwo" x')
        assert tokens[0].literal == "one\ntwo"
        assert tokens[0].line == 1
        assert tokens[1].line == 2


class TestComments:
    """Test comment handling."""

    def test_line_comment(self):
        assert types_of("1 // ignored\n2")[:-1] == [TokenType.NUMBER, TokenType.NUMBER]

    def test_block_comment(self):
        assert types_of("1 /* ignored */ 2")[:-1] == [TokenType.NUMBER, TokenType.NUMBER]

    def test_nested_block_comment(self):
        assert types_of("/* outer /* inner */ still */ 3")[:-1] == [TokenType.NUMBER]

    def test_block_comment_counts_lines(self):
        tokens = tokenize("/* a\nb\n*/ x")
        assert tokens[0].line == 3


class TestLineTracking:
    """Test line numbers on tokens."""

    def test_lines(self):
        source = textwrap.dedent("""\
            var a = 1;
            print a;

            a = 2;
        """)
        lines = {t.lexeme: t.line for t in tokenize(source) if t.type != TokenType.EOF}
        assert lines["var"] == 1
        assert lines["print"] == 2
        assert lines["2"] == 4

    def test_eof_line(self):
        tokens = tokenize("1\n2\n")
        assert tokens[-1].line == 3


class TestLexerErrors:
    """Test lexical error reporting."""

    def test_unexpected_character(self):
        diagnostics = DiagnosticCollector()
        tokens = tokenize("1 @ 2", diagnostics)
        assert diagnostics.messages == ["Unexpected character."]
        assert diagnostics.diagnostics[0].format() == "[line 1] Error: Unexpected character."
        # Scanning continues past the bad character
        assert [t.type for t in tokens] == [TokenType.NUMBER, TokenType.NUMBER, TokenType.EOF]

    def test_every_bad_character_reported(self):
        diagnostics = DiagnosticCollector()
        tokenize("@\n#", diagnostics)
        assert diagnostics.error_count == 2
        assert [d.line for d in diagnostics.diagnostics] == [1, 2]

    def test_unterminated_string(self):
        diagnostics = DiagnosticCollector()
        tokens = tokenize('"abc', diagnostics)
        assert diagnostics.messages == ["Unterminated string."]
        assert [t.type for t in tokens] == [TokenType.EOF]

    def test_unterminated_block_comment(self):
        diagnostics = DiagnosticCollector()
        tokenize("/* never closed", diagnostics)
        assert diagnostics.messages == ["Unterminated block comment."]
        assert diagnostics.has_syntax_errors

    def test_diagnostics_as_json(self):
        diagnostics = DiagnosticCollector()
        tokenize("\n$", diagnostics)
        assert diagnostics.to_json() == {
            "diagnostics": [{
                "kind": "syntax",
                "message": "Unexpected character.",
                "line": 2,
                "where": "",
            }],
            "error_count": 1,
        }
