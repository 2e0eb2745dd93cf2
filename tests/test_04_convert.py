"""Pytest-based conversion tests.

Input is TypeScript; expected is AiScript source compared as a tree
(generated identifiers matched by order of first appearance), or
`error: <message>` / `error[<ErrorClass>]: <message>`.
"""

import copy
from dataclasses import fields
from pathlib import Path

import pytest

from cases import discover, normalize_generated
from tsais import convert, parse_aiscript, stringify
from tsais.aiscript.ast import ANode
from tsais.convert import Converter, ConvertError, ConvertPlugin, SemanticError, TypeViolation, UnsupportedSyntaxError
from tsais.convert.plugins import DEFAULT_PLUGINS
from tsais.frontend import ModuleResolutionError, SourceError
from tsais.frontend.ast import NumericLiteral

CONVERT_DIR = Path(__file__).parent / "04_convert"

ERRORS = (ConvertError, ModuleResolutionError, SourceError)


def pytest_generate_tests(metafunc):
    """Parametrize tests over conversion test files."""
    if "ts_input" in metafunc.fixturenames:
        params = [pytest.param(i, e, id=test_id) for test_id, i, e in discover(CONVERT_DIR)]
        metafunc.parametrize("ts_input,ais_expected", params)


def _split_error(expected: str) -> tuple[str | None, str]:
    head, _, msg = expected.partition(":")
    kind = None
    if head.startswith("error[") and head.endswith("]"):
        kind = head[6:-1]
    return kind, msg.strip()


def test_convert(ts_input: str, ais_expected: str):
    """Conversion gives the expected tree, or fails with the expected error."""
    if ais_expected.startswith("error"):
        kind, expected_msg = _split_error(ais_expected)
        with pytest.raises(ERRORS) as exc:
            convert(ts_input)
        assert expected_msg in str(exc.value)
        if kind is not None:
            assert type(exc.value).__name__ == kind
        return
    actual = normalize_generated(convert(ts_input))
    expected = normalize_generated(parse_aiscript(ais_expected))
    if actual != expected:
        pytest.fail(f"--- expected ---\n{ais_expected}\n--- got ---\n{stringify(actual)}")
    # printed output reads back as the same tree
    assert normalize_generated(parse_aiscript(stringify(actual))) == expected


def test_error_location():
    with pytest.raises(TypeViolation) as exc:
        convert('let ok = true;\nif ("text") {}\n', "cond.ts")
    err = exc.value
    assert err.file == "cond.ts"
    assert (err.line, err.col) == (2, 5)
    assert err.node is not None


def test_error_kinds():
    with pytest.raises(UnsupportedSyntaxError):
        convert("class A {}")
    with pytest.raises(SemanticError):
        convert("let x;")
    with pytest.raises(TypeViolation):
        convert("while (1) {}")


def test_generated_identifiers_are_per_engine():
    first = Converter().convert_source("const [a] = [1];")
    second = Converter().convert_source("const [b] = [2];")
    assert first[0].dest.name == "__gen_00001"
    assert second[0].dest.name == "__gen_00001"


def test_generated_identifier_counter_is_base36():
    engine = Converter()
    names = [engine.unique_identifier().name for _ in range(36)]
    assert names[0] == "__gen_00001"
    assert names[9] == "__gen_0000a"
    assert names[35] == "__gen_00010"


def test_plugin_order_is_first_match():
    """A plugin registered ahead of the defaults takes over its nodes."""

    def answer_plugin(ctx):
        def expression(expr):
            if isinstance(expr, NumericLiteral):
                return parse_aiscript("42")[0]
            return None

        return ConvertPlugin("answer", expression=expression)

    nodes = Converter([answer_plugin] + DEFAULT_PLUGINS).convert_source("let x = 1 + 2;")
    assert nodes == parse_aiscript("var x = 42 + 42")


def test_empty_plugin_list_converts_nothing():
    with pytest.raises(UnsupportedSyntaxError) as exc:
        Converter([]).convert_source("1;")
    assert "no conversion for ExpressionStatement" in str(exc.value)


def _node_ids(value: object, seen: list[int]) -> list[int]:
    if isinstance(value, ANode):
        seen.append(id(value))
        for f in fields(value):
            if f.name != "loc":
                _node_ids(getattr(value, f.name), seen)
    elif isinstance(value, list):
        for item in value:
            _node_ids(item, seen)
    elif isinstance(value, dict):
        for item in value.values():
            _node_ids(item, seen)
    return seen


@pytest.mark.parametrize(
    "source",
    [
        "const [a, b] = [1, 2];",
        "const o = { x: 1, y: 2 };\nconst { x, y } = o;",
        "const [[a, b], { c }] = [[1, 2], { c: 3 }];",
        "function f([a, b]: number[]) { return a + b }",
        "for (const [k, v] of [[1, 2]]) { k; v; }",
        "let a = 1;\nlet b = 2;\n[a, b] = [b, a];",
        "let xs = [1];\nfunction f() { return 0 }\nlet y = xs[f()]++;\nxs[f()] *= 2;",
    ],
)
def test_converted_tree_has_no_shared_nodes(source: str):
    ids = _node_ids(convert(source), [])
    assert len(ids) == len(set(ids))


def test_normalizing_twice_changes_nothing():
    nodes = normalize_generated(convert("const [a, b] = [1, 2];"))
    assert normalize_generated(copy.deepcopy(nodes)) == nodes
    expected = parse_aiscript("let __gen_00001 = [1, 2]\nlet a = __gen_00001[0]\nlet b = __gen_00001[1]")
    assert nodes == normalize_generated(expected)
