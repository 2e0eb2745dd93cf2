"""Layout-preserving statement serializer.

A statement's text is its original source slice with renamed identifiers
rewritten in place and export modifiers cut out. Edits never add or remove
line breaks, so a line inside a statement keeps its offset from the
statement's first line.
"""

from __future__ import annotations

from ..frontend.ast import (
    ExportAssignment,
    FunctionDeclaration,
    Identifier,
    Node,
    ObjectBindingPattern,
    PropertyAccessExpression,
    ShorthandPropertyAssignment,
    SourceFile,
    Statement,
    TypeReference,
    child_nodes,
    modifiers_of,
)
from ..frontend.names import Symbol
from .records import ModuleRecord
from .rename import RenameTable

DEFAULT_EXPORT_NAME = "_default"

# (start offset, end offset, replacement)
Edit = tuple[int, int, str]


class SerializeError(Exception):
    """A statement that cannot be expressed in one flat scope."""

    def __init__(self, msg: str, node: Node):
        self.msg: str = msg
        self.node: Node = node
        self.line: int = node.span.line
        self.col: int = node.span.col
        super().__init__(msg + " at line " + str(self.line) + " col " + str(self.col))


def apply_edits(text: str, start: int, end: int, edits: list[Edit]) -> str:
    out: list[str] = []
    pos = start
    for e_start, e_end, replacement in sorted(edits, key=lambda e: e[0]):
        out.append(text[pos:e_start])
        out.append(replacement)
        pos = e_end
    out.append(text[pos:end])
    return "".join(out)


def _skip_blanks(text: str, pos: int) -> int:
    while pos < len(text) and (text[pos] == " " or text[pos] == "\t"):
        pos += 1
    return pos


def default_export_symbol(record: ModuleRecord) -> Symbol | None:
    sym = record.exports.get("default")
    if sym is None:
        return None
    origin = sym.resolve()
    return origin if isinstance(origin, Symbol) else None


def textual_name(sym: Symbol) -> str:
    """Name a binding is registered under; anonymous defaults get a fixed stem."""
    if sym.kind == "default":
        return DEFAULT_EXPORT_NAME
    return sym.name


class StatementSerializer:
    """Renders body statements against one rename table."""

    def __init__(self, table: RenameTable):
        self.table: RenameTable = table

    def statement_text(self, record: ModuleRecord, stmt: Statement) -> str:
        text = record.source_file.text
        start = stmt.span.start
        edits: list[Edit] = []
        for mod in modifiers_of(stmt):
            if mod.kind == "export" or mod.kind == "default":
                edits.append((mod.span.start, _skip_blanks(text, mod.span.end), ""))
        prefix = ""
        if isinstance(stmt, ExportAssignment):
            if not stmt.is_default:
                raise SerializeError("'export =' is not supported", stmt)
            prefix = "const " + self._default_name(record, stmt) + " = "
            start = stmt.expression.span.start
            self._collect(stmt.expression, edits)
        else:
            if isinstance(stmt, FunctionDeclaration) and stmt.name is None:
                prefix = "const " + self._default_name(record, stmt) + " = "
            self._collect(stmt, edits)
        return prefix + apply_edits(text, start, stmt.span.end, edits)

    def _default_name(self, record: ModuleRecord, stmt: Statement) -> str:
        sym = default_export_symbol(record)
        final = self.table.final_name(sym) if sym is not None else None
        if final is None:
            raise SerializeError("default export has no binding", stmt)
        return final

    # ── Identifier rewriting ────────────────────────────────

    def final_name(self, sym: Symbol | None) -> str | None:
        if sym is None:
            return None
        origin = sym.resolve()
        if not isinstance(origin, Symbol):
            return None
        return self.table.final_name(origin)

    def _namespace(self, ident: Identifier) -> SourceFile | None:
        if ident.symbol is None:
            return None
        origin = ident.symbol.resolve()
        return origin if isinstance(origin, SourceFile) else None

    def _rename(self, ident: Identifier, edits: list[Edit], keep_key: bool = False) -> None:
        if self._namespace(ident) is not None:
            raise SerializeError(
                "namespace import '" + ident.name + "' can only be used for member access when bundling", ident
            )
        final = self.final_name(ident.symbol)
        if final is None or final == ident.name:
            return
        replacement = ident.name + ": " + final if keep_key else final
        edits.append((ident.span.start, ident.span.end, replacement))

    def _collect(self, node: Node, edits: list[Edit]) -> None:
        if isinstance(node, Identifier):
            self._rename(node, edits)
            return
        if isinstance(node, PropertyAccessExpression) and isinstance(node.expression, Identifier):
            namespace = self._namespace(node.expression)
            if namespace is not None:
                edits.append((node.span.start, node.span.end, self._member(namespace, node)))
                return
        if isinstance(node, ShorthandPropertyAssignment):
            self._rename(node.name, edits, keep_key=True)
            if node.default is not None:
                self._collect(node.default, edits)
            return
        if isinstance(node, ObjectBindingPattern):
            for element in node.elements:
                if element.property_name is None and isinstance(element.name, Identifier):
                    self._rename(element.name, edits, keep_key=True)
                    if element.initializer is not None:
                        self._collect(element.initializer, edits)
                else:
                    self._collect(element, edits)
            return
        if isinstance(node, TypeReference):
            final = self.final_name(node.symbol)
            if final is not None and final != node.name and "." not in node.name:
                edits.append((node.span.start, node.span.start + len(node.name), final))
            for arg in node.args:
                self._collect(arg, edits)
            return
        for child in child_nodes(node):
            self._collect(child, edits)

    def _member(self, namespace: SourceFile, node: PropertyAccessExpression) -> str:
        name = node.name.name
        exported = namespace.exports.get(name)
        final = self.final_name(exported)
        if final is None:
            raise SerializeError("module has no exported member '" + name + "'", node.name)
        return final
