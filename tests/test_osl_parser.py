"""
Unit tests for the OSL parser.
"""

import textwrap

from oslcanvas.lang import (
    tokenize, parse, Parser, Token, TokenKind,
    Assign, Call, If, Goto, Import, Label, format_statement,
)


def parse_source(source: str):
    """Helper to tokenize and parse dedented source."""
    return parse(tokenize(textwrap.dedent(source)))


def statements(source: str):
    return parse_source(source).statements


class TestStatementForms:
    """Test each line form."""

    def test_empty_program(self):
        """Empty source has no statements or labels."""
        program = parse_source("")
        assert program.statements == []
        assert program.labels == {}

    def test_assignment(self):
        assert statements("score = 5") == [Assign("score", [Token(TokenKind.NUMBER, 5)])]

    def test_dotted_assignment(self):
        """Dotted targets, with or without spaces around the dots."""
        assert statements("player.x = 3")[0].path == "player.x"
        assert statements("player . x = 3")[0].path == "player.x"

    def test_assignment_keeps_expression_tokens(self):
        stmt = statements("total = a + 1")[0]
        assert [t.value for t in stmt.expr] == ["a", "+", 1]

    def test_call(self):
        assert statements('text "hi" 24') == [
            Call("text", [Token(TokenKind.STRING, "hi"), Token(TokenKind.NUMBER, 24)])
        ]

    def test_call_without_args(self):
        assert statements("getGamepads") == [Call("getGamepads", [])]

    def test_call_style_suffix(self):
        """Words after a colon become the style suffix."""
        stmt = statements('text "hi" : bold #f00')[0]
        assert stmt.args == [Token(TokenKind.STRING, "hi")]
        assert stmt.style == "bold #f00"

    def test_style_suffix_numbers_and_structure(self):
        stmt = statements('text "hi" : 2.0 ( x')[0]
        assert stmt.style == "2 LPAREN x"

    def test_label(self):
        program = parse_source("main:\ntext \"a\"")
        assert program.statements[0] == Label("main")
        assert program.labels == {"main": 0}

    def test_duplicate_label_last_wins(self):
        program = parse_source("loop:\nx = 1\nloop:")
        assert program.labels == {"loop": 2}

    def test_import(self):
        assert statements('import "ui"') == [Import("ui")]

    def test_import_without_name(self):
        """A bare import is dropped and does not swallow the next line."""
        assert statements("import\nx = 1") == [Assign("x", [Token(TokenKind.NUMBER, 1)])]

    def test_goto(self):
        assert statements("goto 10 20") == [
            Goto([Token(TokenKind.NUMBER, 10), Token(TokenKind.NUMBER, 20)])
        ]


class TestIfStatements:
    """Test if/else parsing."""

    def test_if_else_one_line(self):
        stmt = statements('if score ( text "win" ) else ( text "lose" )')[0]
        assert isinstance(stmt, If)
        assert stmt.cond == [Token(TokenKind.IDENT, "score")]
        assert stmt.then_statements == [Call("text", [Token(TokenKind.STRING, "win")])]
        assert stmt.else_statements == [Call("text", [Token(TokenKind.STRING, "lose")])]

    def test_if_without_else(self):
        stmt = statements("if x ( a = 1 )")[0]
        assert stmt.else_body is None
        assert stmt.else_statements == []
        assert stmt.then_statements == [Assign("a", [Token(TokenKind.NUMBER, 1)])]

    def test_multiline_bodies(self):
        source = """\
            if x (
              text "a"
              y = 2
            ) else (
              text "b"
            )
            z = 3
        """
        stmts = statements(source)
        assert len(stmts) == 2
        assert [type(s) for s in stmts[0].then_statements] == [Call, Assign]
        assert stmts[0].else_statements == [Call("text", [Token(TokenKind.STRING, "b")])]
        assert stmts[1].path == "z"

    def test_else_after_blank_line(self):
        stmt = statements("if x ( a = 1 )\n\nelse ( a = 2 )")[0]
        assert stmt.else_statements == [Assign("a", [Token(TokenKind.NUMBER, 2)])]

    def test_nested_parens_in_body(self):
        stmt = statements("if x ( text (1) )")[0]
        assert [t.kind for t in stmt.body] == [
            TokenKind.IDENT, TokenKind.LPAREN, TokenKind.NUMBER, TokenKind.RPAREN,
        ]

    def test_if_without_body_is_dropped(self):
        assert statements("if x\ny = 1") == [Assign("y", [Token(TokenKind.NUMBER, 1)])]


class TestRecovery:
    """Malformed lines are skipped, never raised."""

    def test_line_starting_with_number(self):
        assert statements("5 + 5\nx = 1") == [Assign("x", [Token(TokenKind.NUMBER, 1)])]

    def test_line_starting_with_operator(self):
        assert statements("= 5") == []

    def test_unbalanced_paren(self):
        """An unclosed body runs to the end of input."""
        stmt = statements("if x ( text \"a\"")[0]
        assert stmt.then_statements == [Call("text", [Token(TokenKind.STRING, "a")])]

    def test_rebuild_is_deterministic(self):
        source = 'main:\nscore = 5\nif score ( text "win" ) else ( text "lose" )\ngoto 1 2'
        assert parse_source(source) == parse_source(source)

    def test_parser_class(self):
        """Parser.parse_statements skips labels indexing."""
        stmts = Parser(tokenize("a:\nb = 1")).parse_statements()
        assert [type(s) for s in stmts] == [Label, Assign]


class TestFormatting:
    """Test the CLI statement rendering."""

    def test_format_statements(self):
        stmts = statements('x = 1\ntext "hi" : bold\ngoto 1 2\nimport "m"\nmain:')
        assert [format_statement(s) for s in stmts] == [
            "ASSIGN x = NUMBER(1)",
            "CALL text STRING('hi') : bold",
            "GOTO NUMBER(1) NUMBER(2)",
            "IMPORT 'm'",
            "LABEL main",
        ]
