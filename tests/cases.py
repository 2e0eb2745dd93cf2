"""Shared helpers for the data-driven suites.

A .tests file holds blocks of the form:

    === test name
    input lines
    ---
    expected lines
    ---
"""

from dataclasses import fields
from pathlib import Path

from tsais.aiscript.ast import AIdent, ANode
from tsais.convert.context import GEN_PREFIX


def parse_test_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse a .tests file into (name, input, expected) tuples."""
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            test_input = "\n".join(input_lines)
            expected = "\n".join(expected_lines).strip()
            result.append((test_name, test_input, expected))
        else:
            i += 1
    return result


def discover(directory: Path) -> list[tuple[str, str, str]]:
    """All cases under a directory as (test_id, input, expected)."""
    results: list[tuple[str, str, str]] = []
    for test_file in sorted(directory.glob("*.tests")):
        for name, input_code, expected in parse_test_file(test_file):
            results.append((f"{test_file.stem}/{name}", input_code, expected))
    return results


def normalize_generated(nodes: list[ANode]) -> list[ANode]:
    """Rename generated identifiers to __gen_1, __gen_2, ... by first appearance.

    Mutates and returns the tree.
    """
    names: dict[str, str] = {}
    renamed: set[str] = set()

    def visit(value: object) -> None:
        if isinstance(value, AIdent):
            if value.name.startswith(GEN_PREFIX) and value.name not in renamed:
                if value.name not in names:
                    names[value.name] = GEN_PREFIX + str(len(names) + 1)
                    renamed.add(names[value.name])
                value.name = names[value.name]
            return
        if isinstance(value, ANode):
            for f in fields(value):
                if f.name != "loc":
                    visit(getattr(value, f.name))
        elif isinstance(value, list):
            for item in value:
                visit(item)
        elif isinstance(value, dict):
            for item in value.values():
                visit(item)

    visit(nodes)
    return nodes
