"""
Lexer for OSL.

Converts source text into a flat stream of tokens for the parser.
Supports:
- One NEWLINE token per source line (blank lines included)
- Line comments (//)
- Double-quoted strings with JSON escape sequences
- Dotted identifiers as single tokens (window.width)
- Integer and decimal numbers (integers past 15 digits are read as floats)
- Hex color literals (#rgb .. #rrggbbaa)
- A catch-all SYMBOL token, so lexing never fails
"""

import json
import re
from typing import Iterator, List

from .tokens import Token, TokenKind, number_value


# One alternative per token kind, tried in priority order.
TOKEN_RE = re.compile(
    r'\s*(?:'
    r'(?P<comment>//.*$)'
    r'|(?P<string>"(?:\\.|[^"])*")'
    r'|(?P<ident>[A-Za-z_][A-Za-z0-9_.]*)'
    r'|(?P<number>\d+(?:\.\d+)?)'
    r'|(?P<colon>:)'
    r'|(?P<lparen>\()'
    r'|(?P<rparen>\))'
    r'|(?P<op>[+\-*/=])'
    r'|(?P<color>#[0-9A-Fa-f]{3,8})'
    r'|(?P<dot>\.)'
    r'|(?P<symbol>.)'
    r')'
)

LINE_SPLIT_RE = re.compile(r'\r?\n')

_SIMPLE_KINDS = {
    'colon': TokenKind.COLON,
    'lparen': TokenKind.LPAREN,
    'rparen': TokenKind.RPAREN,
    'dot': TokenKind.DOT,
}


def _string_value(literal: str) -> str:
    """Decode a quoted string literal, keeping the raw text if the escapes are bad."""
    try:
        return json.loads(literal)
    except ValueError:
        return literal[1:-1]


class Lexer:
    """
    Line-oriented tokenizer for OSL.

    Usage:
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()

    Or for streaming:
        for token in Lexer(source_code):
            process(token)
    """

    def __init__(self, source: str):
        self.source = source or ''

    def _scan_line(self, line: str, line_no: int) -> Iterator[Token]:
        """Scan a single (already trimmed) line, without its NEWLINE."""
        pos = 0
        while pos < len(line):
            m = TOKEN_RE.match(line, pos)
            if m is None or m.end() == pos:
                break
            pos = m.end()
            group = m.lastgroup
            text = m.group(group)
            if group == 'comment':
                break
            elif group == 'string':
                yield Token(TokenKind.STRING, _string_value(text), line_no)
            elif group == 'ident':
                yield Token(TokenKind.IDENT, text, line_no)
            elif group == 'number':
                yield Token(TokenKind.NUMBER, number_value(text), line_no)
            elif group == 'op':
                yield Token(TokenKind.OP, text, line_no)
            elif group == 'color':
                yield Token(TokenKind.COLOR, text, line_no)
            elif group == 'symbol':
                yield Token(TokenKind.SYMBOL, text, line_no)
            else:
                yield Token(_SIMPLE_KINDS[group], None, line_no)

    def __iter__(self) -> Iterator[Token]:
        """Iterate over tokens."""
        for index, raw_line in enumerate(LINE_SPLIT_RE.split(self.source)):
            line_no = index + 1
            line = raw_line.replace('\t', ' ').strip()
            yield from self._scan_line(line, line_no)
            yield Token(TokenKind.NEWLINE, None, line_no)

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source, returning a list of tokens."""
        return list(self)


def tokenize(source: str) -> List[Token]:
    """
    Convenience function to tokenize source code.

    Args:
        source: The OSL source code to tokenize

    Returns:
        List of tokens, ending with the NEWLINE of the last line
    """
    return Lexer(source).tokenize()
