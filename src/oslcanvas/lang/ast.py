"""
Statement node definitions for OSL.

OSL statements keep their expressions as raw token slices: the evaluator
works directly on tokens, so there is no expression tree. Each statement
kind is its own dataclass and ``Statement`` is the closed union of them.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .tokens import Token


@dataclass
class Assign:
    """``path = expr``; path may be dotted (``player.x = 5``)."""
    path: str
    expr: List[Token]


@dataclass
class Call:
    """A builtin command line: ``name arg arg ... [: style]``."""
    name: str
    args: List[Token]
    style: Optional[str] = None


@dataclass
class If:
    """
    ``if cond ( body ) [else ( else_body )]``.

    The raw token slices are kept alongside the sub-statements parsed from
    them at build time.
    """
    cond: List[Token]
    body: List[Token]
    else_body: Optional[List[Token]] = None
    then_statements: List["Statement"] = field(default_factory=list)
    else_statements: List["Statement"] = field(default_factory=list)


@dataclass
class Goto:
    """``goto x y``; sets the render origin, it does not jump."""
    parts: List[Token]


@dataclass
class Import:
    """``import "name"``; a marker with no runtime effect."""
    module: str


@dataclass
class Label:
    """``name:``; recorded in the label index."""
    name: str


Statement = Union[Assign, Call, If, Goto, Import, Label]


@dataclass
class Program:
    """A parsed OSL program: ordered statements plus the label index."""
    statements: List[Statement] = field(default_factory=list)
    labels: Dict[str, int] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.statements)


def format_statement(stmt: Statement) -> str:
    """One-line human readable rendering of a statement (used by the CLI)."""
    def toks(ts: List[Token]) -> str:
        return " ".join(str(t) for t in ts)

    if isinstance(stmt, Assign):
        return f"ASSIGN {stmt.path} = {toks(stmt.expr)}"
    elif isinstance(stmt, Call):
        suffix = f" : {stmt.style}" if stmt.style is not None else ""
        return f"CALL {stmt.name} {toks(stmt.args)}{suffix}".rstrip()
    elif isinstance(stmt, If):
        text = f"IF {toks(stmt.cond)} ( {toks(stmt.body)} )"
        if stmt.else_body is not None:
            text += f" ELSE ( {toks(stmt.else_body)} )"
        return text
    elif isinstance(stmt, Goto):
        return f"GOTO {toks(stmt.parts)}"
    elif isinstance(stmt, Import):
        return f"IMPORT {stmt.module!r}"
    elif isinstance(stmt, Label):
        return f"LABEL {stmt.name}"
    raise TypeError(f"Unknown statement type: {type(stmt).__name__}")
