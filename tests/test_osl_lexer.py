"""
Unit tests for the OSL lexer.
"""

from oslcanvas.lang import tokenize, Lexer, Token, TokenKind


def kinds(source):
    return [t.kind for t in tokenize(source)]


class TestLexerBasics:
    """Test basic lexer functionality."""

    def test_empty_source(self):
        """Empty source is one empty line."""
        assert tokenize("") == [Token(TokenKind.NEWLINE)]

    def test_simple_assignment(self):
        """Assignment with an operator expression."""
        assert tokenize("x = 1 + 2") == [
            Token(TokenKind.IDENT, "x"),
            Token(TokenKind.OP, "="),
            Token(TokenKind.NUMBER, 1),
            Token(TokenKind.OP, "+"),
            Token(TokenKind.NUMBER, 2),
            Token(TokenKind.NEWLINE),
        ]

    def test_comment_only_line(self):
        """A comment-only line yields a single NEWLINE."""
        assert tokenize("// nothing to see") == [Token(TokenKind.NEWLINE)]

    def test_trailing_comment(self):
        """Comments end the line's tokens."""
        assert kinds("x = 1 // note") == [
            TokenKind.IDENT, TokenKind.OP, TokenKind.NUMBER, TokenKind.NEWLINE,
        ]

    def test_one_newline_per_line(self):
        """Blank lines still produce their NEWLINE."""
        assert kinds("a\n\nb") == [
            TokenKind.IDENT, TokenKind.NEWLINE,
            TokenKind.NEWLINE,
            TokenKind.IDENT, TokenKind.NEWLINE,
        ]

    def test_crlf_line_endings(self):
        """CRLF splits lines the same way as LF."""
        assert tokenize("a\r\nb") == tokenize("a\nb")

    def test_line_numbers(self):
        """Tokens remember their 1-indexed source line."""
        tokens = tokenize("a\nb")
        assert tokens[0].line == 1
        assert tokens[2].line == 2

    def test_tabs_and_indentation(self):
        """Leading whitespace and tabs are insignificant."""
        assert tokenize("\t  text \t\"hi\"") == tokenize('text "hi"')

    def test_streaming(self):
        """Iterating the lexer matches tokenize()."""
        source = 'x = 1\ntext "a"'
        assert list(Lexer(source)) == tokenize(source)

    def test_deterministic(self):
        """Lexing the same source twice gives equal streams."""
        source = 'score = 5\nif score ( text "win" )'
        assert tokenize(source) == tokenize(source)


class TestLexerLiterals:
    """Test literal and name tokens."""

    def test_string_escapes(self):
        """JSON escape sequences are decoded."""
        tokens = tokenize(r'"a\nb \"q\""')
        assert tokens[0] == Token(TokenKind.STRING, 'a\nb "q"')

    def test_bad_string_escape_keeps_raw_text(self):
        """Invalid escapes fall back to the raw inner text."""
        tokens = tokenize(r'"a\qb"')
        assert tokens[0] == Token(TokenKind.STRING, r'a\qb')

    def test_integer_and_decimal(self):
        """Numbers without a fraction are ints."""
        tokens = tokenize("42 3.5")
        assert tokens[0].value == 42
        assert isinstance(tokens[0].value, int)
        assert tokens[1].value == 3.5

    def test_negative_number_is_operator(self):
        """A leading minus is an operator token."""
        assert tokenize("-1")[:2] == [Token(TokenKind.OP, "-"), Token(TokenKind.NUMBER, 1)]

    def test_dotted_identifier(self):
        """Dots inside a name stay in one identifier."""
        assert tokenize("window.width")[0] == Token(TokenKind.IDENT, "window.width")

    def test_spaced_dot(self):
        """A free-standing dot is its own token."""
        assert kinds("a . b")[:3] == [TokenKind.IDENT, TokenKind.DOT, TokenKind.IDENT]

    def test_color_literal(self):
        """Hex colors are color literals."""
        tokens = tokenize("c #ff00ff")
        assert tokens[1] == Token(TokenKind.COLOR, "#ff00ff")

    def test_structural_tokens(self):
        """Parens and colons carry no value."""
        assert kinds("( ) :")[:3] == [TokenKind.LPAREN, TokenKind.RPAREN, TokenKind.COLON]

    def test_unknown_character_is_symbol(self):
        """Unrecognized characters never fail the lexer."""
        tokens = tokenize("a @ b")
        assert tokens[1] == Token(TokenKind.SYMBOL, "@")

    def test_number_then_name(self):
        """A unit suffix splits off as an identifier."""
        assert tokenize("5px")[:2] == [Token(TokenKind.NUMBER, 5), Token(TokenKind.IDENT, "px")]

    def test_long_integer_is_float(self):
        """Integers past 15 digits read as floats, overflowing to infinity."""
        assert tokenize("1234567890123456")[0] == Token(TokenKind.NUMBER, 1234567890123456.0)
        assert tokenize("x = " + "9" * 5000)[2] == Token(TokenKind.NUMBER, float("inf"))

    def test_token_text(self):
        assert Token(TokenKind.NUMBER, 2.0).text() == "2"
        assert Token(TokenKind.NUMBER, 2.5).text() == "2.5"
        assert Token(TokenKind.NUMBER, float("inf")).text() == "Infinity"
        assert Token(TokenKind.COLOR, "#f00").text() == "#f00"
        assert Token(TokenKind.LPAREN).text() == "LPAREN"
