"""Pytest-based AiScript printer and parser tests.

Input is AiScript source; expected is the exact text the printer produces
for the parsed tree, or `error: <message>` for source the parser rejects.
"""

from pathlib import Path

import pytest

from cases import discover
from tsais.aiscript import ParseError, TokenizeError, emit, parse
from tsais.aiscript.ast import (
    AArr,
    ABinaryOp,
    ABlock,
    ADef,
    AIdent,
    AIf,
    ANull,
    ANum,
    AObj,
    AStr,
    ATmpl,
    AUnaryOp,
    to_dict,
)

AISCRIPT_DIR = Path(__file__).parent / "02_aiscript"


def pytest_generate_tests(metafunc):
    """Parametrize tests over aiscript test files."""
    if "ais_input" in metafunc.fixturenames:
        params = [pytest.param(i, e, id=test_id) for test_id, i, e in discover(AISCRIPT_DIR)]
        metafunc.parametrize("ais_input,ais_expected", params)


def test_aiscript(ais_input: str, ais_expected: str):
    """Printing a parsed program gives the expected text and re-parses unchanged."""
    if ais_expected.startswith("error:"):
        expected_msg = ais_expected[6:].strip()
        with pytest.raises((ParseError, TokenizeError)) as exc:
            parse(ais_input)
        assert expected_msg in str(exc.value)
        return
    nodes = parse(ais_input)
    printed = emit(nodes)
    assert printed == ais_expected
    assert parse(printed) == nodes


def test_positions_ignored_by_equality():
    assert parse("let x = 1") == parse("\n\n   let   x =\n 1")


def test_round_trip_of_built_tree():
    tree = [
        ADef(AIdent("t"), ATmpl([AStr("a`b{c}\\"), AIdent("x")]), mutable=True),
        ADef(AIdent("o"), AObj({"key": ANum(1.0), "two words": AArr([ANull()])})),
        AObj({"if": AStr("\n\t\"")}),
        AIf(ABinaryOp("==", AIdent("a"), ANum(-2.5)), ABlock([]), else_=AUnaryOp("!", AIdent("b"))),
    ]
    assert parse(emit(tree)) == tree


def test_negative_number_is_parenthesized():
    assert emit([ADef(AIdent("n"), ANum(-1.0))]) == "let n = (-1)"


@pytest.mark.parametrize(
    "value,text",
    [
        (1.5e-7, "1.5e-7"),
        (1e-7, "1e-7"),
        (1.5e-5, "0.000015"),
        (1e-6, "0.000001"),
        (0.25, "0.25"),
        (1e16, "10000000000000000"),
        (1e21, "1e+21"),
        (1.5e22, "1.5e+22"),
        (-2.5e-8, "(-2.5e-8)"),
    ],
)
def test_number_layout(value: float, text: str):
    printed = emit([ADef(AIdent("n"), ANum(value))])
    assert printed == "let n = " + text
    assert parse(printed) == [ADef(AIdent("n"), ANum(value))]


def test_non_finite_number_is_rejected():
    with pytest.raises(ValueError):
        emit([ANum(float("inf"))])


def test_to_dict():
    assert to_dict(parse("let x = [1, y]")) == [
        {
            "kind": "Def",
            "dest": {"kind": "Ident", "name": "x", "line": 1},
            "expr": {
                "kind": "Arr",
                "items": [{"kind": "Num", "value": 1.0, "line": 1}, {"kind": "Ident", "name": "y", "line": 1}],
                "line": 1,
            },
            "mutable": False,
            "line": 1,
        }
    ]
