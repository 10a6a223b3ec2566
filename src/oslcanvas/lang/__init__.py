"""
OSL language: lexer, parser and runtime.

Usage:
    from oslcanvas.lang import tokenize, parse, Runtime
    from oslcanvas.surface import RecordingSurface

    tokens = tokenize('score = 5\ntext "score: " score 24')
    program = parse(tokens)

    # Or run it, one statement pass per frame
    runtime = Runtime(RecordingSurface(), source)
    runtime.start()
"""

from .tokens import (
    Token,
    TokenKind,
)

from .lexer import (
    Lexer,
    tokenize,
)

from .parser import (
    Parser,
    parse,
)

from .ast import (
    Assign,
    Call,
    If,
    Goto,
    Import,
    Label,
    Statement,
    Program,
    format_statement,
)

from .errors import (
    OslError,
    SurfaceUnavailableError,
    ResourceLoadError,
)

from .runtime import (
    Runtime,
    RunnerOptions,
    VariableStore,
    Evaluator,
)

__all__ = [
    # Tokens
    'Token',
    'TokenKind',
    # Lexer/parser
    'Lexer',
    'tokenize',
    'Parser',
    'parse',
    # Statements
    'Assign',
    'Call',
    'If',
    'Goto',
    'Import',
    'Label',
    'Statement',
    'Program',
    'format_statement',
    # Errors
    'OslError',
    'SurfaceUnavailableError',
    'ResourceLoadError',
    # Runtime
    'Runtime',
    'RunnerOptions',
    'VariableStore',
    'Evaluator',
]
