"""Pytest-based type oracle tests.

Input is a TypeScript program whose last statement is an expression
statement; expected is the printed type of that expression.
"""

from pathlib import Path

import pytest

from cases import discover
from tsais.frontend import Frontend, ModuleResolutionError, SourceError, is_assignable
from tsais.frontend.ast import ExpressionStatement
from tsais.frontend.types import ANY, NULL, NUMBER, STRING, ArrayOf, Literal, ObjectShape, Tuple, union

TYPES_DIR = Path(__file__).parent / "03_types"


def pytest_generate_tests(metafunc):
    """Parametrize tests over type test files."""
    if "type_input" in metafunc.fixturenames:
        params = [pytest.param(i, e, id=test_id) for test_id, i, e in discover(TYPES_DIR)]
        metafunc.parametrize("type_input,type_expected", params)


def test_types(type_input: str, type_expected: str):
    """The last expression statement infers to the expected type."""
    frontend = Frontend()
    sf = frontend.parse(type_input)
    last = sf.statements[-1]
    assert isinstance(last, ExpressionStatement)
    t = frontend.checker.type_of(last.expression)
    assert frontend.checker.type_to_string(t) == type_expected


@pytest.mark.parametrize(
    "t,kind,expected",
    [
        (NUMBER, "number", True),
        (Literal(1.0), "number", True),
        (Literal("a"), "number", False),
        (Literal(True), "boolean", True),
        (STRING, "array", False),
        (ArrayOf(NUMBER), "array", True),
        (ArrayOf(NUMBER), "object", True),
        (Tuple([NUMBER, STRING]), "array", True),
        (ObjectShape({"a": NUMBER}), "object", True),
        (ObjectShape({"a": NUMBER}), "array", False),
        (union([NUMBER, Literal(2.0)]), "number", True),
        (union([NUMBER, STRING]), "number", False),
        (ANY, "array", True),
        (NULL, "boolean", True),
    ],
)
def test_is_assignable(t, kind, expected):
    assert is_assignable(t, kind) is expected


def test_parse_error_is_located():
    with pytest.raises(SourceError) as exc:
        Frontend().parse("let x = ;", "broken.ts")
    assert exc.value.file == "broken.ts"
    assert exc.value.line == 1


def test_missing_import_target(write_tree):
    root = write_tree({"main.ts": 'import { a } from "./nowhere";\n'})
    frontend = Frontend(str(root))
    with pytest.raises(ModuleResolutionError) as exc:
        frontend.load_program(str(root / "main.ts"))
    assert "nowhere" in exc.value.msg


def test_missing_export(write_tree):
    root = write_tree(
        {
            "main.ts": 'import { missing } from "./lib";\n',
            "lib.ts": "export const present = 1;\n",
        }
    )
    frontend = Frontend(str(root))
    with pytest.raises(ModuleResolutionError) as exc:
        frontend.load_program(str(root / "main.ts"))
    assert "missing" in exc.value.msg


def test_resolution_candidates(write_tree):
    root = write_tree(
        {
            "main.ts": 'import { a } from "./pkg";\nimport { b } from "lib/b";\n',
            "pkg/index.ts": "export const a = 1;\n",
            "lib/b.ts": "export const b = 2;\n",
        }
    )
    frontend = Frontend(str(root))
    files = frontend.load_program(str(root / "main.ts"))
    names = [Path(sf.file_name).relative_to(root).as_posix() for sf in files]
    assert names == ["pkg/index.ts", "lib/b.ts", "main.ts"]


def test_imported_binding_type(write_tree):
    root = write_tree(
        {
            "main.ts": 'import { items } from "./data";\nitems;\n',
            "data.ts": 'export const items: string[] = ["a"];\n',
        }
    )
    frontend = Frontend(str(root))
    files = frontend.load_program(str(root / "main.ts"))
    last = files[-1].statements[-1]
    assert isinstance(last, ExpressionStatement)
    assert frontend.checker.type_to_string(frontend.checker.type_of(last.expression)) == "string[]"
