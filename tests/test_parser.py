import pytest

from Interpreter.astprinter import format_ast
from Interpreter.errors import ParseError
from Interpreter.lexer import tokenize
from Interpreter.parser import (
    Assignment,
    BinaryExpr,
    FunctionCall,
    Goto,
    Label,
    Literal,
    Spawn,
    UnaryExpr,
    Variable,
    parse,
)


def parse_source(source):
    return parse(tokenize(source))


def expr_of(source):
    program = parse_source(f"Spawn(0, 0)\nv <- {source}")
    return program.statements[1].expr


def test_statement_kinds():
    program = parse_source(
        "\n\nSpawn(1, -2)\n"
        "n <- 3\n"
        "loop\n"
        "DrawLine(1, 0, n)\n"
        "GoTo[loop](n > 0)\n"
        "GetActualX()\n"
    )
    stmts = program.statements
    assert [type(s) for s in stmts] == [Spawn, Assignment, Label, FunctionCall, Goto, FunctionCall]
    assert (stmts[0].x, stmts[0].y, stmts[0].line) == (1, -2, 3)
    assert stmts[2].name == "loop"
    assert stmts[4].target_label == "loop"
    assert isinstance(stmts[4].condition, BinaryExpr)
    assert stmts[5].name == "GetActualX" and stmts[5].args == []


def test_precedence_mul_over_add():
    e = expr_of("1 + 2 * 3")
    assert e.op == "+"
    assert isinstance(e.right, BinaryExpr) and e.right.op == "*"


def test_additive_is_left_associative():
    e = expr_of("10 - 3 - 2")
    assert e.op == "-"
    assert isinstance(e.left, BinaryExpr)
    assert e.right.value == 2


def test_power_is_right_associative():
    e = expr_of("2 ** 3 ** 2")
    assert e.op == "**"
    assert e.left.value == 2
    assert isinstance(e.right, BinaryExpr) and e.right.op == "**"


def test_logical_precedence():
    e = expr_of("a || b && c")
    assert e.op == "||"
    assert e.right.op == "&&"


def test_comparison_binds_looser_than_arithmetic():
    e = expr_of("1 + 1 == 2")
    assert e.op == "=="
    assert e.left.op == "+"


def test_comparison_does_not_chain():
    with pytest.raises(ParseError):
        parse_source("Spawn(0, 0)\nv <- 1 < 2 < 3")


def test_unary_and_parentheses():
    e = expr_of("-(1 + 2)")
    assert isinstance(e, UnaryExpr) and e.op == "-"
    assert isinstance(e.operand, BinaryExpr)


def test_literals_and_calls_in_expressions():
    e = expr_of('IsBrushColor("Red") && true')
    assert isinstance(e.left, FunctionCall)
    assert e.left.args[0].value == "Red"
    assert isinstance(e.right, Literal) and e.right.value is True
    assert isinstance(expr_of("count"), Variable)


def test_empty_program_is_a_parse_error():
    with pytest.raises(ParseError) as info:
        parse_source("\n\n\n")
    assert "empty" in info.value.message


def test_number_out_of_range():
    with pytest.raises(ParseError) as info:
        parse_source("Spawn(0, 0)\nv <- 99999999999")
    assert "99999999999" in info.value.message


def test_bad_statement_start():
    with pytest.raises(ParseError) as info:
        parse_source("Spawn(0, 0)\n(1)")
    assert info.value.line == 2


def test_identifier_followed_by_junk():
    with pytest.raises(ParseError):
        parse_source("Spawn(0, 0)\nfoo 3")


def test_two_statements_on_one_line():
    with pytest.raises(ParseError) as info:
        parse_source("Spawn(0, 0) Fill()")
    assert "end of line" in info.value.message


def test_missing_paren_reports_position():
    with pytest.raises(ParseError) as info:
        parse_source("Spawn(0, 0)\nDrawLine(1, 0, 3")
    assert info.value.line == 2


def test_format_ast():
    program = parse_source('Spawn(0, 0)\nColor("Red")\nx <- -1 + 2\nend\nGoTo[end](true)')
    text = format_ast(program)
    assert text.splitlines() == [
        "Program:",
        "  Spawn(x=0, y=0)",
        "  Call Color(",
        '    Literal: "Red"',
        "  )",
        "  Assign x <-",
        "    Binary (+)",
        "      Unary (-)",
        "        Literal: 1",
        "      Literal: 2",
        "  Label: end",
        "  GoTo [end] if:",
        "    Literal: true",
    ]
