from Interpreter.lexer import tokenize
from Interpreter.parser import Program, parse
from Interpreter.semantic import FUNCTION_SIGNATURES, analyze


def errors_for(source):
    return analyze(parse(tokenize(source)))


def messages(source):
    return [e.message for e in errors_for(source)]


def test_valid_program_has_no_errors():
    source = (
        "Spawn(0, 0)\n"
        'Color("Blue")\n'
        "n <- 5\n"
        "loop\n"
        "DrawLine(1, 0, 1)\n"
        "n <- n - 1\n"
        "GoTo[loop](n > 0)\n"
        "done <- IsBrushColor(\"Blue\") && GetActualX() >= 5\n"
    )
    assert errors_for(source) == []


def test_two_independent_defects_are_both_reported():
    errors = errors_for("Spawn(0, 0)\nDrawLine(1, 0, missing)\nColor(5)")
    assert len(errors) == 2
    assert "missing" in errors[0].message
    assert errors[0].line == 2
    assert "Argument 1 of 'Color' must be String, got Int" == errors[1].message
    assert errors[1].line == 3


def test_error_type_suppresses_cascades():
    # one undeclared variable deep inside an expression gives one error
    assert len(errors_for("Spawn(0, 0)\nx <- (y + 1) * 2 == 4")) == 1


def test_empty_program_short_circuits():
    errors = analyze(Program([]))
    assert len(errors) == 1
    assert "empty" in errors[0].message


def test_missing_spawn():
    assert messages("x <- 1") == ["Every program must start with 'Spawn'"]


def test_spawn_not_first_and_repeated():
    msgs = messages("x <- 1\nSpawn(0, 0)\nSpawn(1, 1)")
    assert msgs == [
        "'Spawn' must be the first instruction",
        "Only one 'Spawn' instruction is allowed",
    ]


def test_duplicate_and_missing_labels():
    msgs = messages("Spawn(0, 0)\nhere\nhere\nGoTo[there](true)")
    assert "Label 'here' is already defined" in msgs
    assert "Label 'there' is not defined" in msgs
    assert len(msgs) == 2


def test_forward_goto_is_allowed():
    assert errors_for("Spawn(0, 0)\nGoTo[end](true)\nFill()\nend") == []


def test_goto_condition_must_be_bool():
    msgs = messages("Spawn(0, 0)\nl\nGoTo[l](1)")
    assert msgs == ["The 'GoTo' condition must be Bool, got Int"]


def test_argument_count_mismatch():
    msgs = messages("Spawn(0, 0)\nDrawLine(1, 0)")
    assert msgs == ["'DrawLine' expects 3 arguments but got 2"]


def test_argument_index_is_one_based():
    msgs = messages('Spawn(0, 0)\nDrawRectangle(1, 0, 2, "wide", 3)')
    assert msgs == ["Argument 4 of 'DrawRectangle' must be Int, got String"]


def test_operator_type_rules():
    assert messages('Spawn(0, 0)\nx <- 1 + "a"') == ["Operator '+' is invalid between Int and String"]
    assert messages("Spawn(0, 0)\nx <- 1 == true") == ["Cannot compare Int with Bool using '=='"]
    assert len(messages("Spawn(0, 0)\nx <- 1 && true")) == 1
    assert messages("Spawn(0, 0)\nx <- -true") == ["Unary '-' requires Int, got Bool"]
    assert messages('Spawn(0, 0)\nx <- "a" == "b"') == []


def test_ordering_needs_int_operands():
    assert messages('Spawn(0, 0)\nb <- "a" < "b"') == ["Operator '<' requires Int operands, got String"]
    assert messages("Spawn(0, 0)\nb <- true >= false") == ["Operator '>=' requires Int operands, got Bool"]
    assert messages("Spawn(0, 0)\nb <- true == false") == []
    assert messages("Spawn(0, 0)\nb <- 1 < 2") == []


def test_assignment_overwrites_type():
    # the last assignment decides the type seen by later uses
    msgs = messages('Spawn(0, 0)\nx <- 1\nx <- "Red"\nColor(x)')
    assert msgs == []


def test_command_in_expression():
    msgs = messages("Spawn(0, 0)\nx <- Fill()")
    assert msgs == ["'Fill' does not return a value"]


def test_query_as_statement_is_allowed():
    assert errors_for("Spawn(0, 0)\nGetCanvasSize()") == []


def test_signature_table_covers_every_callable():
    assert set(FUNCTION_SIGNATURES) == {
        "Color",
        "Size",
        "DrawLine",
        "DrawCircle",
        "DrawRectangle",
        "Fill",
        "SetCursor",
        "GetActualX",
        "GetActualY",
        "GetCanvasSize",
        "GetColorCount",
        "IsBrushColor",
        "IsBrushSize",
        "IsCanvasColor",
    }
