"""
Token types for the OSL lexer.

OSL is line oriented: every source line contributes its tokens followed by
exactly one NEWLINE token, which is the only statement separator.
"""

import math
from enum import Enum, auto
from dataclasses import dataclass, field
from typing import Any, Optional, Union

# Integer numerals past this many digits are read as floats.
MAX_INT_DIGITS = 15


class TokenKind(Enum):
    """All token kinds produced by the OSL lexer."""

    NEWLINE = auto()            # end of a source line
    IDENT = auto()              # foo, window.width (dots are part of the name)
    STRING = auto()             # "hello\n"
    NUMBER = auto()             # 42, 3.5
    COLON = auto()              # : (labels and style suffixes)
    LPAREN = auto()             # (
    RPAREN = auto()             # )
    OP = auto()                 # + - * / =
    COLOR = auto()              # #fff, #ff00ff80
    DOT = auto()                # . on its own
    SYMBOL = auto()             # any other single character


# Tokens that carry a payload. The others are structural.
VALUED_KINDS = frozenset({
    TokenKind.IDENT,
    TokenKind.STRING,
    TokenKind.NUMBER,
    TokenKind.OP,
    TokenKind.COLOR,
    TokenKind.SYMBOL,
})


@dataclass(frozen=True)
class Token:
    """A single token from the lexer."""
    kind: TokenKind
    value: Any = None       # str for names/strings/ops, int or float for numbers
    line: int = field(default=0, compare=False)  # 1-indexed source line

    def __str__(self) -> str:
        if self.kind in VALUED_KINDS:
            return f"{self.kind.name}({self.value!r})"
        return self.kind.name

    def is_ident(self, name: Optional[str] = None) -> bool:
        """Check for an identifier, optionally with a specific name."""
        if self.kind != TokenKind.IDENT:
            return False
        return name is None or self.value == name

    def is_op(self, op: Optional[str] = None) -> bool:
        """Check for an operator, optionally a specific one."""
        if self.kind != TokenKind.OP:
            return False
        return op is None or self.value == op

    def text(self) -> str:
        """Value as source-like text; the kind name for structural tokens."""
        if self.value is None:
            return self.kind.name
        if isinstance(self.value, float):
            if math.isinf(self.value):
                return "Infinity" if self.value > 0 else "-Infinity"
            if self.value.is_integer() and abs(self.value) < 1e21:
                return str(int(self.value))
            return repr(self.value)
        return str(self.value)


def number_value(digits: str) -> Union[int, float]:
    """Read an unsigned decimal numeral; long integers become floats (inf past range)."""
    if '.' in digits or 'e' in digits or 'E' in digits:
        return float(digits)
    if len(digits.lstrip('+-')) > MAX_INT_DIGITS:
        return float(digits)
    return int(digits)
