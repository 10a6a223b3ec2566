"""
Recovering line parser for OSL.

Converts a token stream into a Program: an ordered list of statements plus
a label index. Each line is classified by its leading tokens. Lines that
fit no statement form are skipped up to the next NEWLINE, so parsing never
raises.
"""

import logging
from typing import Dict, List, Optional

from .tokens import Token, TokenKind
from .ast import Assign, Call, If, Goto, Import, Label, Program, Statement

logger = logging.getLogger(__name__)


class Parser:
    """
    Single forward pass parser with a cursor.

    Usage:
        parser = Parser(tokens)
        program = parser.parse_program()

    Line forms, tried in order:
        import "name"
        name:
        if cond ( body ) [else ( body )]
        goto x y
        path = expr
        command arg arg ... [: style]
    """

    def __init__(self, tokens: List[Token]):
        self.tokens = tokens
        self.pos = 0

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _peek(self, offset: int = 0) -> Optional[Token]:
        """Peek at token at current position + offset, None past the end."""
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return None
        return self.tokens[idx]

    def _advance(self) -> Optional[Token]:
        """Consume and return current token."""
        token = self._peek()
        if token is not None:
            self.pos += 1
        return token

    def _check(self, kind: TokenKind) -> bool:
        token = self._peek()
        return token is not None and token.kind == kind

    def _at_line_end(self) -> bool:
        token = self._peek()
        return token is None or token.kind == TokenKind.NEWLINE

    def _skip_to_line_end(self) -> None:
        """Skip tokens up to (not including) the next NEWLINE."""
        while not self._at_line_end():
            self._advance()

    def _rest_of_line(self) -> List[Token]:
        tokens = []
        while not self._at_line_end():
            tokens.append(self._advance())
        return tokens

    def _paren_group(self) -> List[Token]:
        """
        Collect tokens after an opening paren up to its matching close paren.

        Nested parens are kept; the closing paren is consumed but not
        returned. Newlines inside the group are kept.
        """
        self._advance()  # consume '('
        group = []
        depth = 1
        while self._peek() is not None and depth > 0:
            token = self._advance()
            if token.kind == TokenKind.LPAREN:
                depth += 1
            elif token.kind == TokenKind.RPAREN:
                depth -= 1
                if depth == 0:
                    break
            group.append(token)
        return group

    # =========================================================================
    # Statements
    # =========================================================================

    def parse_program(self) -> Program:
        """Parse all tokens and index the labels."""
        statements = self.parse_statements()
        return Program(statements, index_labels(statements))

    def parse_statements(self) -> List[Statement]:
        """Parse all tokens into a statement list."""
        statements: List[Statement] = []
        while self._peek() is not None:
            token = self._peek()
            if token.kind == TokenKind.NEWLINE:
                self._advance()
                continue

            if token.is_ident('import'):
                stmt = self._parse_import()
            elif token.kind == TokenKind.IDENT and self._peek(1) is not None \
                    and self._peek(1).kind == TokenKind.COLON:
                stmt = self._parse_label()
            elif token.is_ident('if'):
                stmt = self._parse_if()
            elif token.is_ident('goto'):
                self._advance()
                stmt = Goto(self._rest_of_line())
            elif token.kind == TokenKind.IDENT:
                stmt = self._parse_assign_or_call()
            else:
                logger.debug("skipping line %d starting with %s", token.line, token)
                self._skip_to_line_end()
                self._advance()  # newline
                continue

            if stmt is not None:
                statements.append(stmt)
        return statements

    def _parse_import(self) -> Optional[Import]:
        self._advance()  # 'import'
        stmt = None
        if not self._at_line_end():
            name = self._advance()
            if name.kind == TokenKind.STRING:
                stmt = Import(str(name.value))
        self._skip_to_line_end()
        return stmt

    def _parse_label(self) -> Label:
        name = self._advance()
        self._advance()  # ':'
        self._skip_to_line_end()
        return Label(str(name.value))

    def _parse_if(self) -> Optional[If]:
        start = self._advance()  # 'if'
        cond = []
        while not self._at_line_end() and not self._check(TokenKind.LPAREN):
            cond.append(self._advance())

        if not self._check(TokenKind.LPAREN):
            logger.debug("dropping 'if' without body on line %d", start.line)
            self._skip_to_line_end()
            return None

        body = self._paren_group()

        # 'else' may follow the closing paren after blank lines
        else_body = None
        while self._check(TokenKind.NEWLINE):
            self._advance()
        token = self._peek()
        if token is not None and token.is_ident('else'):
            self._advance()
            if self._check(TokenKind.LPAREN):
                else_body = self._paren_group()

        return If(
            cond=cond,
            body=body,
            else_body=else_body,
            then_statements=Parser(body).parse_statements(),
            else_statements=Parser(else_body).parse_statements() if else_body is not None else [],
        )

    def _parse_assign_or_call(self) -> Statement:
        line = self._rest_of_line()

        eq_idx = next((k for k, t in enumerate(line) if t.is_op('=')), -1)
        if eq_idx >= 1:
            parts = []
            for t in line[:eq_idx]:
                if t.kind == TokenKind.IDENT:
                    parts.append(str(t.value))
                elif t.kind == TokenKind.DOT:
                    parts.append('.')
            path = ''.join(parts)
            if path.endswith('.'):
                path = path[:-1]
            return Assign(path, line[eq_idx + 1:])

        name = line[0]
        args = []
        style = None
        for k in range(1, len(line)):
            token = line[k]
            if token.kind == TokenKind.COLON:
                style = ' '.join(t.text() for t in line[k + 1:])
                break
            args.append(token)
        return Call(str(name.value), args, style)


def index_labels(statements: List[Statement]) -> Dict[str, int]:
    """Map each label name to its statement index (later duplicates win)."""
    labels = {}
    for i, stmt in enumerate(statements):
        if isinstance(stmt, Label):
            labels[stmt.name] = i
    return labels


def parse(tokens: List[Token]) -> Program:
    """
    Convenience function to parse a token list.

    Args:
        tokens: Tokens from the lexer

    Returns:
        Program with statements and label index
    """
    return Parser(tokens).parse_program()
