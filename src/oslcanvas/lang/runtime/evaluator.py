"""
Token-slice expression evaluator for OSL.

There is no expression tree and no operator precedence: a slice is split at
its first operator and both halves are evaluated recursively. Scripts rely
on these exact rules, including the bare-word fallback where an unset
identifier evaluates to its own name.
"""

import math
from typing import List

from ..tokens import Token, TokenKind
from .store import VariableStore
from .values import Value, add, arithmetic, to_display, to_number

LITERAL_KINDS = (TokenKind.NUMBER, TokenKind.STRING, TokenKind.COLOR)

TRIG_FUNCTIONS = {
    'sin': math.sin,
    'cos': math.cos,
    'tan': math.tan,
}


class Evaluator:
    """Evaluates token slices against a VariableStore."""

    def __init__(self, store: VariableStore):
        self.store = store

    def evaluate(self, tokens: List[Token]) -> Value:
        """Evaluate a token slice to a value. Never raises."""
        if not tokens:
            return None

        if len(tokens) == 1:
            token = tokens[0]
            if token.kind in LITERAL_KINDS:
                return token.value
            if token.kind == TokenKind.IDENT:
                return self._identifier(token.value)

        for i, token in enumerate(tokens):
            if token.kind == TokenKind.OP:
                left = self.evaluate(tokens[:i])
                right = self.evaluate(tokens[i + 1:])
                if token.value == '=':
                    return right
                return arithmetic(token.value, left, right)

        if (len(tokens) >= 3 and tokens[0].kind == TokenKind.IDENT
                and tokens[1].kind == TokenKind.DOT
                and tokens[2].kind == TokenKind.IDENT):
            return self._dotted(tokens)

        values = [self._scalar(t) for t in tokens]
        if any(isinstance(v, str) for v in values):
            return ''.join(v if isinstance(v, str) else _text(v) for v in values)
        total = 0
        for v in values:
            total = add(total, v)
        return total

    def _identifier(self, name: str) -> Value:
        if '.' in name:
            return self._dotted_name(name)
        if name == 'true':
            return True
        if name == 'false':
            return False
        if name in self.store:
            return self.store[name]
        return name

    def _dotted(self, tokens: List[Token]) -> Value:
        """``a . b . c`` written with spaces: rebuild the dotted name."""
        name = ''.join(
            str(t.value) if t.kind == TokenKind.IDENT else '.'
            for t in tokens
            if t.kind in (TokenKind.IDENT, TokenKind.DOT)
        )
        return self._dotted_name(name)

    def _dotted_name(self, name: str) -> Value:
        """Path lookup, plus the ``.len`` suffix and ``direction.sin|cos|tan`` helpers."""
        if name.endswith('.len'):
            base = self.store.get(name[:-4])
            if isinstance(base, (str, list)):
                return len(base)
            return 0
        if name.startswith('direction.'):
            fn = TRIG_FUNCTIONS.get(name.split('.')[1])
            if fn is not None:
                degrees = to_number(self.store['direction'])
                if not math.isfinite(degrees):
                    return math.nan
                return fn(math.radians(degrees))
        return self.store.get(name)

    def _scalar(self, token: Token) -> Value:
        if token.kind in LITERAL_KINDS:
            return token.value
        if token.kind == TokenKind.IDENT:
            name = str(token.value)
            if name in self.store:
                return self.store[name]
            return name
        return ''


def _text(v: Value) -> str:
    return "" if v is None else to_display(v)


def evaluate(tokens: List[Token], store: VariableStore) -> Value:
    """Convenience function: evaluate a token slice against a store."""
    return Evaluator(store).evaluate(tokens)
