"""Module records — one file split into imports, exports and body statements."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..frontend.ast import (
    ExportAssignment,
    ExportDeclaration,
    FunctionDeclaration,
    Identifier,
    ImportDeclaration,
    InterfaceDeclaration,
    SourceFile,
    Statement,
    TypeAliasDeclaration,
    VariableStatement,
    has_modifier,
    modifiers_of,
)
from ..frontend.frontend import module_specifiers
from ..frontend.names import Symbol, binding_identifiers


@dataclass
class StatementContext:
    """Origin of one body statement, 1-based."""

    statement: Statement
    source_file: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int


@dataclass
class ImportBinding:
    local: str
    specifier: str
    imported: str  # export name, "default" or "*"
    symbol: Symbol


@dataclass
class ModuleRecord:
    file_path: str
    source_file: SourceFile
    exports: dict[str, Symbol] = field(default_factory=dict)
    imports: list[ImportBinding] = field(default_factory=list)
    statements: list[Statement] = field(default_factory=list)
    contexts: list[StatementContext] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)


def statement_context(stmt: Statement, file_path: str) -> StatementContext:
    span = stmt.span
    return StatementContext(stmt, file_path, span.line, span.col, span.end_line, span.end_col)


def analyze_module(source_file: SourceFile) -> ModuleRecord:
    """Split a bound file. Import and export declarations leave the body;
    `export default <expr>` stays because it still has a value to define."""
    record = ModuleRecord(source_file.file_name, source_file, dict(source_file.exports))
    record.dependencies = [spec for spec, _ in module_specifiers(source_file)]
    for sym in source_file.imports:
        record.imports.append(
            ImportBinding(sym.name, sym.module_specifier or "", sym.import_name or "", sym)
        )
    for stmt in source_file.statements:
        if isinstance(stmt, ImportDeclaration) or isinstance(stmt, ExportDeclaration):
            continue
        if isinstance(stmt, ExportAssignment) and stmt.is_default and _names_binding(stmt):
            continue
        record.statements.append(stmt)
        record.contexts.append(statement_context(stmt, source_file.file_name))
    return record


def _names_binding(stmt: ExportAssignment) -> bool:
    return isinstance(stmt.expression, Identifier) and stmt.expression.symbol is not None


def top_level_declarations(stmt: Statement) -> list[Symbol]:
    """Symbols a body statement declares at module scope. Ambient declarations
    name runtime globals and are never renamed."""
    result: list[Symbol] = []
    if has_modifier(modifiers_of(stmt), "declare"):
        return result
    if isinstance(stmt, VariableStatement):
        for decl in stmt.declaration_list.declarations:
            for ident in binding_identifiers(decl.name):
                if ident.symbol is not None:
                    result.append(ident.symbol)
    elif (
        isinstance(stmt, FunctionDeclaration)
        or isinstance(stmt, InterfaceDeclaration)
        or isinstance(stmt, TypeAliasDeclaration)
    ):
        if stmt.name is not None and stmt.name.symbol is not None:
            result.append(stmt.name.symbol)
    return result
