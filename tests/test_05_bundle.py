"""Bundler and module-scoped program tests.

Each test writes a small module tree under a temporary root. Bundled output
is compared as a tree against the single-file conversion of the program the
bundle should be equivalent to.
"""

from pathlib import Path

import pytest

from cases import normalize_generated
from tsais import BundleError, ModuleResolutionError, bundle, convert, convert_program, parse_aiscript
from tsais.bundler import RenameTable, SourceMap, SourceMapEntry
from tsais.bundler.bundler import Bundler
from tsais.frontend.names import Scope, Symbol

ENTRY = "entry.ts"


def _bundle(root: Path) -> list:
    return bundle(str(root / ENTRY), str(root))


def _bundle_error(root: Path) -> BundleError:
    with pytest.raises(BundleError) as exc:
        _bundle(root)
    return exc.value


# ── Linking ────────────────────────────────────────────────


def test_single_file(write_tree):
    root = write_tree(
        {
            ENTRY: """
const message = "Hello, World!";
const number = 42;
console.log(message, number);
""",
        }
    )
    assert _bundle(root) == convert('const message = "Hello, World!"; const number = 42; console.log(message, number);')


def test_named_imports(write_tree):
    root = write_tree(
        {
            ENTRY: """
import { PI, multiply } from './utils';

const radius = 5;
const area = multiply(PI, radius * radius);
console.log(area);
""",
            "utils.ts": """
export const PI = 3.14159;
export function multiply(a: number, b: number): number {
  return a * b;
}
""",
        }
    )
    expected = """
const PI = 3.14159;
function multiply(a: number, b: number): number {
  return a * b;
}
const radius = 5;
const area = multiply(PI, radius * radius);
console.log(area);
"""
    assert _bundle(root) == convert(expected)


def test_colliding_names_are_suffixed(write_tree):
    root = write_tree(
        {
            ENTRY: """
import { count as countA, increment } from './moduleA';
import { count as countB, decrement } from './moduleB';

const result = increment() + decrement();
console.log(countA, countB, result);
""",
            "moduleA.ts": """
export const count = 1;
export function increment() {
  return count + 1;
}
""",
            "moduleB.ts": """
export const count = 100;
export function decrement() {
  return count - 1;
}
""",
        }
    )
    expected = """
const count = 1;
function increment() {
  return count + 1;
}
const count$1 = 100;
function decrement() {
  return count$1 - 1;
}
const result = increment() + decrement();
console.log(count, count$1, result);
"""
    assert _bundle(root) == convert(expected)


def test_private_names_collide_with_exports(write_tree):
    root = write_tree(
        {
            ENTRY: """
import { count } from './a';
import { box } from './b';
const total = count + box.count;
""",
            "a.ts": "export const count = 1;\n",
            "b.ts": """
const count = 2;
export const box = { count };
""",
        }
    )
    expected = """
const count = 1;
const count$1 = 2;
const box = { count: count$1 };
const total = count + box.count;
"""
    assert _bundle(root) == convert(expected)


def test_import_chain_orders_dependencies_first(write_tree):
    root = write_tree(
        {
            ENTRY: """
import { MIDDLE_VALUE, getBase } from './middle';

const result = MIDDLE_VALUE + getBase();
console.log(result);
""",
            "middle.ts": """
import { BASE_VALUE } from './base';
export const MIDDLE_VALUE = BASE_VALUE * 2;
export function getBase() {
  return BASE_VALUE;
}
""",
            "base.ts": "export const BASE_VALUE = 10;\n",
        }
    )
    expected = """
const BASE_VALUE = 10;
const MIDDLE_VALUE = BASE_VALUE * 2;
function getBase() {
  return BASE_VALUE;
}
const result = MIDDLE_VALUE + getBase();
console.log(result);
"""
    assert _bundle(root) == convert(expected)


def test_exported_functions(write_tree):
    root = write_tree(
        {
            ENTRY: """
import { add, subtract } from './math';

const x = 10;
const y = 5;
const sum = add(x, y);
const diff = subtract(x, y);

console.log(sum, diff);
""",
            "math.ts": """
export function add(a: number, b: number): number {
  return a + b;
}

export function subtract(a: number, b: number): number {
  return a - b;
}
""",
        }
    )
    expected = """
function add(a: number, b: number): number {
  return a + b;
}
function subtract(a: number, b: number): number {
  return a - b;
}
const x = 10;
const y = 5;
const sum = add(x, y);
const diff = subtract(x, y);
console.log(sum, diff);
"""
    assert _bundle(root) == convert(expected)


def test_default_import_of_named_function(write_tree):
    root = write_tree(
        {
            ENTRY: 'import hello from "./greet";\nhello("a");\n',
            "greet.ts": 'export default function greet(name: string) {\n  return "hi " + name;\n}\n',
        }
    )
    expected = 'function greet(name: string) { return "hi " + name; }\ngreet("a");\n'
    assert _bundle(root) == convert(expected)


def test_default_export_expression(write_tree):
    root = write_tree(
        {
            ENTRY: 'import answer from "./answer";\nconst x = answer;\n',
            "answer.ts": "export default 40 + 2;\n",
        }
    )
    assert _bundle(root) == convert("const _default = 40 + 2;\nconst x = _default;\n")


def test_default_export_of_local(write_tree):
    root = write_tree(
        {
            ENTRY: 'import v from "./v";\nconst w = v;\n',
            "v.ts": "const value = 3;\nexport default value;\n",
        }
    )
    assert _bundle(root) == convert("const value = 3;\nconst w = value;\n")


def test_namespace_import_member(write_tree):
    root = write_tree(
        {
            ENTRY: 'import * as util from "./util";\nconst four = util.double(2);\n',
            "util.ts": "export function double(n: number) {\n  return n * 2;\n}\n",
        }
    )
    assert _bundle(root) == convert("function double(n: number) {\n  return n * 2;\n}\nconst four = double(2);\n")


def test_exported_destructuring(write_tree):
    root = write_tree(
        {
            ENTRY: 'import { a, b } from "./pair";\nconst s = a + b;\n',
            "pair.ts": "export const [a, b] = [1, 2];\n",
        }
    )
    actual = normalize_generated(_bundle(root))
    expected = normalize_generated(convert("const [a, b] = [1, 2];\nconst s = a + b;\n"))
    assert actual == expected


def test_import_cycle_is_tolerated(write_tree):
    root = write_tree(
        {
            ENTRY: 'import { fromB } from "./b";\nexport const fromA = 1;\nconst z = fromB;\n',
            "b.ts": 'import { fromA } from "./entry";\nexport const fromB = 2;\n',
        }
    )
    assert _bundle(root) == convert("const fromB = 2;\nconst fromA = 1;\nconst z = fromB;\n")


def test_type_imports_are_erased(write_tree):
    root = write_tree(
        {
            ENTRY: 'import { Point, origin } from "./geo";\nconst p: Point = origin;\n',
            "geo.ts": "export interface Point { x: number; y: number }\nexport const origin: Point = { x: 0, y: 0 };\n",
        }
    )
    assert _bundle(root) == parse_aiscript("let origin = {x: 0, y: 0}\nlet p = origin")


# ── Combined text and source map ───────────────────────────


def test_combined_source_and_source_map(write_tree):
    root = write_tree(
        {
            ENTRY: "import { a, f } from './lib';\nconst b = f();\n",
            "lib.ts": "export const a = 1;\nexport function f() {\n  return a;\n}\n",
        }
    )
    bundler = Bundler(str(root / ENTRY), str(root))
    bundler.bundle()
    assert "export" not in bundler.combined_source
    assert "import" not in bundler.combined_source
    assert "function f() {\n  return a;\n}" in bundler.combined_source
    lib = str(root / "lib.ts")
    entry = str(root / ENTRY)
    assert [(e.bundled_line, e.origin_file, e.origin_line, e.origin_column) for e in bundler.source_map.entries] == [
        (0, lib, 1, 1),
        (1, lib, 2, 1),
        (4, entry, 2, 1),
    ]


def test_processing_order(write_tree):
    root = write_tree(
        {
            ENTRY: 'import { b } from "./b";\nimport { c } from "./c";\nconst x = b + c;\n',
            "b.ts": 'import { c } from "./c";\nexport const b = c;\n',
            "c.ts": "export const c = 1;\n",
        }
    )
    bundler = Bundler(str(root / ENTRY), str(root))
    bundler.bundle()
    names = [Path(p).name for p in bundler.processing_order()]
    assert names == ["c.ts", "b.ts", ENTRY]


# ── Errors ─────────────────────────────────────────────────


def test_error_in_entry_is_remapped(write_tree):
    root = write_tree(
        {
            ENTRY: 'const x = 1;\nconst y = 2;\ntry {\n  console.log("in try");\n} catch (e) {\n  console.log("in catch");\n}\n',
        }
    )
    err = _bundle_error(root)
    assert Path(err.source_file).name == ENTRY
    assert (err.line, err.column) == (3, 1)
    assert err.msg.startswith("error converting statement: ")
    assert "TryStatement" in err.msg
    assert err.node is not None
    assert err.cause is not None


def test_error_inside_statement_keeps_line_offset(write_tree):
    root = write_tree(
        {
            ENTRY: "import { utility } from './utils';\nconst result = utility();\n",
            "utils.ts": """// Utils file comment
export function utility() {
  class UtilityClass {
    field = 42;
  }
  return "test";
}
""",
        }
    )
    err = _bundle_error(root)
    assert Path(err.source_file).name == "utils.ts"
    assert (err.line, err.column) == (3, 1)
    assert "no conversion for ClassDeclaration" in err.msg


def test_error_deep_in_import_chain(write_tree):
    root = write_tree(
        {
            ENTRY: "import { midLevel } from './middle';\nconst value = midLevel();\n",
            "middle.ts": "import { baseValue } from './base';\nexport function midLevel() {\n  return baseValue + 10;\n}\n",
            "base.ts": "const x = 1;\nconst y = 2;\nexport enum BaseEnum {\n  A, B, C\n}\nexport const baseValue = 42;\n",
        }
    )
    err = _bundle_error(root)
    assert Path(err.source_file).name == "base.ts"
    assert (err.line, err.column) == (3, 1)


def test_unsupported_function_in_module(write_tree):
    root = write_tree(
        {
            ENTRY: "import { asyncFunc } from './async';\nasyncFunc();\n",
            "async.ts": '// Async module\nexport async function asyncFunc() {\n  return "done";\n}\n',
        }
    )
    err = _bundle_error(root)
    assert Path(err.source_file).name == "async.ts"
    assert (err.line, err.column) == (2, 1)
    assert "async functions are not supported" in err.msg


def test_type_violation_is_remapped(write_tree):
    root = write_tree(
        {
            ENTRY: 'import { label } from "./label";\nif (label) {\n}\n',
            "label.ts": 'export const label = "x";\n',
        }
    )
    err = _bundle_error(root)
    assert Path(err.source_file).name == ENTRY
    assert err.line == 2
    assert "condition must be boolean" in err.msg


def test_parse_error_reports_file_coordinates(write_tree):
    root = write_tree(
        {
            ENTRY: 'import { a } from "./broken";\n',
            "broken.ts": "export const a = 1;\nlet x = ;\n",
        }
    )
    err = _bundle_error(root)
    assert Path(err.source_file).name == "broken.ts"
    assert err.line == 2
    assert not err.msg.startswith("error converting statement")


def test_missing_module(write_tree):
    root = write_tree({ENTRY: 'import { a } from "./nope";\n'})
    err = _bundle_error(root)
    assert Path(err.source_file).name == ENTRY
    assert (err.line, err.column) == (1, 1)
    assert "cannot find module './nope'" in err.msg
    assert isinstance(err.cause, ModuleResolutionError)


def test_missing_export(write_tree):
    root = write_tree(
        {
            ENTRY: 'import { b } from "./lib";\n',
            "lib.ts": "export const a = 1;\n",
        }
    )
    err = _bundle_error(root)
    assert "has no exported member 'b'" in err.msg


def test_re_export_is_rejected(write_tree):
    root = write_tree({ENTRY: 'export * from "./other";\n'})
    err = _bundle_error(root)
    assert err.msg == "re-exports are not supported"
    assert (err.line, err.column) == (1, 1)


def test_namespace_import_used_as_value(write_tree):
    root = write_tree(
        {
            ENTRY: 'import * as util from "./util";\nconst u = util;\n',
            "util.ts": "export const one = 1;\n",
        }
    )
    err = _bundle_error(root)
    assert "namespace import 'util'" in err.msg
    assert err.line == 2


# ── Rename table and source map ────────────────────────────


SCOPE = Scope("module", None, "unit.ts")


def _sym(name: str) -> Symbol:
    return Symbol(name, "const", None, None, SCOPE)


def test_rename_table_suffixes_per_name():
    table = RenameTable()
    a1, a2, a3, b1 = _sym("a"), _sym("a"), _sym("a"), _sym("b")
    assert table.register("a", a1) == "a"
    assert table.register("a", a2) == "a$1"
    assert table.register("b", b1) == "b"
    assert table.register("a", a3) == "a$2"
    assert table.register("a", a2) == "a$1"
    assert table.final_name(a3) == "a$2"
    assert len(table) == 4


def test_rename_table_skips_taken_suffixes():
    table = RenameTable()
    literal, first, second = _sym("a$1"), _sym("a"), _sym("a")
    assert table.register("a$1", literal) == "a$1"
    assert table.register("a", first) == "a"
    assert table.register("a", second) == "a$2"
    assert first in table
    assert _sym("a") not in table


def test_source_map_lookup():
    smap = SourceMap()
    smap.add(SourceMapEntry(0, "a.ts", 1, 1))
    smap.add(SourceMapEntry(1, "a.ts", 5, 3))
    smap.add(SourceMapEntry(4, "b.ts", 2, 1))
    assert smap.lookup(0) is None
    assert smap.lookup(1).origin_file == "a.ts"
    assert smap.lookup(1).origin_line == 1
    assert smap.lookup(2).origin_line == 5
    assert smap.lookup(4).origin_line == 5
    assert smap.lookup(5).origin_file == "b.ts"
    assert smap.origin(4) == ("a.ts", 7, 3)
    assert smap.origin(9) == ("b.ts", 6, 1)
    assert len(smap) == 3


def test_source_map_rejects_out_of_order_entries():
    smap = SourceMap()
    smap.add(SourceMapEntry(3, "a.ts", 1, 1))
    with pytest.raises(ValueError):
        smap.add(SourceMapEntry(2, "a.ts", 2, 1))


# ── Module-scoped programs ─────────────────────────────────


def test_program_wraps_modules(write_tree):
    root = write_tree(
        {
            "main.ts": 'import { a, f } from "./lib";\nconst b = f() + a;\n',
            "lib.ts": "export const a = 1;\nexport function f() { return a }\n",
        }
    )
    expected = """
let __gen_00001 = eval {
  let a = 1
  @f() { return a }
  ({a: a, f: f})
}
let a = __gen_00001.a
let f = __gen_00001.f
let b = f() + a
"""
    actual = normalize_generated(convert_program(str(root / "main.ts"), str(root)))
    assert actual == normalize_generated(parse_aiscript(expected))


def test_program_default_and_namespace_imports(write_tree):
    root = write_tree(
        {
            "main.ts": 'import g, * as lib from "./lib";\nconst x = g() + lib.n;\n',
            "lib.ts": "export const n = 1;\nexport default function g() { return 2 }\n",
        }
    )
    expected = """
let __gen_00001 = eval {
  let n = 1
  @g() { return 2 }
  ({n: n, default: g})
}
let g = __gen_00001.default
let lib = __gen_00001
let x = g() + lib.n
"""
    actual = normalize_generated(convert_program(str(root / "main.ts"), str(root)))
    assert actual == normalize_generated(parse_aiscript(expected))


def test_program_entry_exports_are_kept(write_tree):
    root = write_tree({"main.ts": "export const v = 1;\n"})
    assert convert_program(str(root / "main.ts"), str(root)) == parse_aiscript("let v = 1\n({v: v})")


def test_program_rejects_import_of_entry(write_tree):
    root = write_tree(
        {
            "main.ts": 'import { b } from "./lib";\nexport const a = b;\n',
            "lib.ts": 'import { a } from "./main";\nexport const b = 1;\n',
        }
    )
    with pytest.raises(ModuleResolutionError) as exc:
        convert_program(str(root / "main.ts"), str(root))
    assert "circular import of './main'" in exc.value.msg
    assert Path(exc.value.file).name == "lib.ts"
