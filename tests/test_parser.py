import pytest
from hypothesis import given
from hypothesis import strategies as st

from ember.ember_ast import Add, Assign, Div, Expr, IntegerLiteral, Mul, Print, Program, Sub, Var
from ember.ember_constants import (
    MAX_NESTING_DEPTH,
    MSG_EXPECTED_RPAREN,
    MSG_EXPECTED_SEMI,
    MSG_INVALID_ASSIGN_TARGET,
    MSG_TOO_DEEP,
    MSG_UNEXPECTED_EOF,
    MSG_UNEXPECTED_TOKEN,
)
from ember.ember_errors import (
    INTEGER_OVERFLOW,
    UNEXPECTED_CHARACTER,
    UNTERMINATED_COMMENT,
    EmberError,
    LexError,
    ParseError,
)
from ember.ember_lexer import Lexer, Span, Token
from ember.ember_parser import Parser, parse


def dump(source: str) -> list[str]:
    return parse(source).dump()


def parse_error(source: str) -> ParseError:
    with pytest.raises(ParseError) as excinfo:
        parse(source)
    return excinfo.value


@pytest.mark.parametrize(
    "source,expected",
    [
        ("print 1 + 2;", ["Print(Add(Literal(1), Literal(2)))"]),
        ("1 + 2 * 3;", ["Add(Literal(1), Mul(Literal(2), Literal(3)))"]),
        ("1 * 2 + 3;", ["Add(Mul(Literal(1), Literal(2)), Literal(3))"]),
        ("1 - 2 - 3;", ["Sub(Sub(Literal(1), Literal(2)), Literal(3))"]),
        ("8 / 4 / 2;", ["Div(Div(Literal(8), Literal(4)), Literal(2))"]),
        ("(1 + 2) * 3;", ["Mul(Add(Literal(1), Literal(2)), Literal(3))"]),
        ("1 - (2 - 3);", ["Sub(Literal(1), Sub(Literal(2), Literal(3)))"]),
        ("((x));", ["Var(x)"]),
        ("x = y = 1;", ["Assign(x, Assign(y, Literal(1)))"]),
        ("print x = 1;", ["Print(Assign(x, Literal(1)))"]),
        ("print print 1;", ["Print(Print(Literal(1)))"]),
        ("x = print 1;", ["Assign(x, Print(Literal(1)))"]),
        ("(x = 2) * 3;", ["Mul(Assign(x, Literal(2)), Literal(3))"]),
        ("a * b / c - d;", ["Sub(Div(Mul(Var(a), Var(b)), Var(c)), Var(d))"]),
    ],
)
def test_parse_shapes(source: str, expected: list[str]) -> None:
    assert dump(source) == expected


def test_end_to_end_nodes() -> None:
    program = parse("print 1 + 2;")
    assert len(program) == 1
    stmt = program.stmts[0]
    assert isinstance(stmt.node, Print)
    inner = stmt.node.expr
    assert isinstance(inner.node, Add)
    assert inner.node.lhs.node == IntegerLiteral(1)
    assert inner.node.rhs.node == IntegerLiteral(2)


def test_statements_in_source_order() -> None:
    assert dump("a = 1; b = 2;\nprint a + b;") == [
        "Assign(a, Literal(1))",
        "Assign(b, Literal(2))",
        "Print(Add(Var(a), Var(b)))",
    ]


@pytest.mark.parametrize("source", ["", "   ", "// only a comment", "/* x */\n"])
def test_empty_program(source: str) -> None:
    assert parse(source) == Program(())


def test_statement_spans() -> None:
    program = parse("print 1 + 2;")
    stmt = program.stmts[0]
    assert stmt.span == Span(0, 11)
    assert stmt.node.expr.span == Span(6, 11)  # type: ignore[union-attr]


def test_assign_span_runs_from_identifier() -> None:
    stmt = parse("  total = 4 * 5 ;").stmts[0]
    assert stmt.span == Span(2, 15)
    assert isinstance(stmt.node, Assign)
    assert stmt.node.expr.span == Span(10, 15)


def test_parentheses_are_transparent() -> None:
    stmt = parse("(1);").stmts[0]
    assert stmt == Expr(Span(1, 2), IntegerLiteral(1))
    assert parse("x = (1);").stmts[0].span == Span(0, 6)


def test_parser_accepts_raw_token_pairs() -> None:
    tokens = [
        (Token("IDENT", "x"), Span(0, 1)),
        (Token("EQUALS"), Span(2, 3)),
        (Token("INTEGER", 7), Span(4, 5)),
        (Token("SEMI"), Span(5, 6)),
    ]
    program = Parser(tokens).parse()
    assert program.stmts == (
        Expr(Span(0, 5), Assign("x", Expr(Span(4, 5), IntegerLiteral(7)))),
    )


def test_parser_consumes_a_lexer() -> None:
    program = Parser(Lexer("a;")).parse()
    assert program.stmts == (Expr(Span(0, 1), Var("a")),)


# Syntax errors


def test_assign_to_integer_blames_integer() -> None:
    err = parse_error("1 = y;")
    assert err.token == Token("INTEGER", 1)
    assert err.span == Span(0, 1)
    assert err.message == MSG_INVALID_ASSIGN_TARGET


def test_assign_to_expression_blames_its_first_token() -> None:
    err = parse_error("x + 1 = 2;")
    assert err.token == Token("IDENT", "x")
    assert err.message == MSG_INVALID_ASSIGN_TARGET

    err = parse_error("(x) = 2;")
    assert err.token == Token("LPAREN")
    assert err.span == Span(0, 1)


def test_leading_operators() -> None:
    err = parse_error("+ + ;")
    assert err.token == Token("PLUS")
    assert err.span == Span(0, 1)
    assert err.message == MSG_UNEXPECTED_TOKEN


def test_missing_semicolon_at_end() -> None:
    err = parse_error("print 1")
    assert err.token is None
    assert err.span is None
    assert err.at_eof
    assert err.message == MSG_UNEXPECTED_EOF


def test_missing_semicolon_between_statements() -> None:
    err = parse_error("1 2;")
    assert err.token == Token("INTEGER", 2)
    assert err.span == Span(2, 3)
    assert err.message == MSG_EXPECTED_SEMI


def test_dangling_operator() -> None:
    err = parse_error("1 +")
    assert err.at_eof
    err = parse_error("1 +;")
    assert err.token == Token("SEMI")
    assert err.message == MSG_UNEXPECTED_TOKEN


def test_unclosed_paren() -> None:
    err = parse_error("(1;")
    assert err.token == Token("SEMI")
    assert err.message == MSG_EXPECTED_RPAREN
    assert parse_error("(1").at_eof


def test_empty_statement_is_an_error() -> None:
    err = parse_error(";")
    assert err.token == Token("SEMI")
    assert err.message == MSG_UNEXPECTED_TOKEN


@pytest.mark.parametrize(
    "source",
    [
        "1 < 2;",
        "1 >= 2;",
        "a == b;",
        "a != b;",
        "true;",
        "false;",
        '"text";',
        "[1];",
        "{};",
        "typeof x;",
        "env;",
        "x.y;",
        "!x;",
        "1, 2;",
        "-1;",
        "print;",
        "print = 1;",
    ],
)
def test_tokens_without_productions_are_syntax_errors(source: str) -> None:
    with pytest.raises(ParseError):
        parse(source)


def test_parse_error_is_syntax_error() -> None:
    with pytest.raises(SyntaxError):
        parse("1 = 2;")


# Lexical errors pass through untouched


@pytest.mark.parametrize(
    "source,kind",
    [
        ("x = 1 + #;", UNEXPECTED_CHARACTER),
        ("x = 2147483648;", INTEGER_OVERFLOW),
        ("x = 1; /* never closed", UNTERMINATED_COMMENT),
    ],
)
def test_lexical_errors_are_distinct_from_syntax_errors(source: str, kind: str) -> None:
    with pytest.raises(LexError) as excinfo:
        parse(source)
    assert excinfo.value.kind == kind
    assert not isinstance(excinfo.value, ParseError)


def test_parse_respects_size_limit() -> None:
    with pytest.raises(ValueError):
        parse("x = 1;", max_bytes=3)


# Nesting depth


def test_deep_parentheses_raise_parse_error() -> None:
    depth = 2000
    err = parse_error("(" * depth + "1" + ")" * depth + ";")
    assert err.message == MSG_TOO_DEEP
    assert err.token == Token("LPAREN")
    assert err.span == Span(MAX_NESTING_DEPTH, MAX_NESTING_DEPTH + 1)


def test_long_print_chain_raises_parse_error() -> None:
    err = parse_error("print " * 2000 + "1;")
    assert err.message == MSG_TOO_DEEP
    assert err.token == Token("PRINT")


def test_too_deep_is_an_ember_error() -> None:
    with pytest.raises(EmberError):
        parse("x = " * 2000 + "1;")


def test_nesting_just_under_the_limit_parses() -> None:
    depth = MAX_NESTING_DEPTH - 1
    (stmt,) = parse("(" * depth + "1" + ")" * depth + ";").stmts
    assert stmt.node == IntegerLiteral(1)
    (stmt,) = parse("print " * depth + "1;").stmts
    for _ in range(depth):
        assert isinstance(stmt.node, Print)
        stmt = stmt.node.expr
    assert stmt.node == IntegerLiteral(1)


def test_parser_max_depth_override() -> None:
    assert Parser(Lexer("(1);"), max_depth=2).parse().dump() == ["Literal(1)"]
    with pytest.raises(ParseError) as excinfo:
        Parser(Lexer("((1));"), max_depth=2).parse()
    assert excinfo.value.message == MSG_TOO_DEEP
    assert excinfo.value.token == Token("INTEGER", 1)
    assert excinfo.value.span == Span(2, 3)


def test_depth_resets_between_statements() -> None:
    depth = MAX_NESTING_DEPTH - 1
    nested = "(" * depth + "1" + ")" * depth + ";"
    assert len(parse(nested * 3).stmts) == 3


# Property tests


@st.composite  # type: ignore[misc]
def arithmetic(draw: st.DrawFn, depth: int = 0) -> str:
    if depth >= 3 or draw(st.booleans()):
        return str(draw(st.integers(min_value=0, max_value=50)))
    lhs = draw(arithmetic(depth + 1))
    rhs = draw(arithmetic(depth + 1))
    op = draw(st.sampled_from(["+", "-", "*"]))
    text = f"{lhs} {op} {rhs}"
    return f"({text})" if draw(st.booleans()) else text


def evaluate(expr: Expr) -> int:
    node = expr.node
    if isinstance(node, IntegerLiteral):
        return node.value
    if isinstance(node, Add):
        return evaluate(node.lhs) + evaluate(node.rhs)
    if isinstance(node, Sub):
        return evaluate(node.lhs) - evaluate(node.rhs)
    if isinstance(node, Mul):
        return evaluate(node.lhs) * evaluate(node.rhs)
    raise AssertionError(f"unexpected node {node!r}")


@given(arithmetic())  # type: ignore[misc]
def test_precedence_and_associativity_match_python(source: str) -> None:
    (stmt,) = parse(source + ";").stmts
    assert evaluate(stmt) == eval(source)  # nosec B307


@given(arithmetic())  # type: ignore[misc]
def test_parent_spans_cover_children(source: str) -> None:
    (stmt,) = parse(f"print {source};").stmts
    assert stmt.span.lo == 0
    for expr in stmt.walk():
        for child in expr.children():
            assert expr.span.lo <= child.span.lo
            assert child.span.hi <= expr.span.hi


@given(
    st.lists(
        st.from_regex(r"[a-z_][a-z0-9_]{0,5}", fullmatch=True).filter(
            lambda name: name not in {"print", "typeof", "env", "true", "false"}
        ),
        min_size=1,
        max_size=5,
    )
)  # type: ignore[misc]
def test_assignment_chains_nest_to_the_right(names: list[str]) -> None:
    source = " = ".join(names) + " = 0;"
    (stmt,) = parse(source).stmts
    for name in names:
        assert isinstance(stmt.node, Assign)
        assert stmt.node.name == name
        stmt = stmt.node.expr
    assert stmt.node == IntegerLiteral(0)


def test_div_node_type() -> None:
    (stmt,) = parse("a / 2;").stmts
    assert stmt.node == Div(Expr(Span(0, 1), Var("a")), Expr(Span(4, 5), IntegerLiteral(2)))
    assert isinstance(parse("a - 2;").stmts[0].node, Sub)
    assert isinstance(parse("a * 2;").stmts[0].node, Mul)
