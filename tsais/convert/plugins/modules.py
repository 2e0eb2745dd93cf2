"""Imports and exports.

These plugins run first: the exports plugin strips `export`/`default`
modifiers and re-dispatches, so no later plugin ever sees export syntax.
"""

from __future__ import annotations

import dataclasses

from ...aiscript.ast import ADef, AIdent, ANode, AObj, AProp
from ...frontend.ast import (
    ExportAssignment,
    ExportDeclaration,
    FunctionDeclaration,
    Identifier,
    ImportDeclaration,
    InterfaceDeclaration,
    Node,
    TypeAliasDeclaration,
    VariableStatement,
    has_modifier,
    modifiers_of,
)
from ...frontend.names import Symbol, binding_identifiers
from ..context import ConvertContext, ConvertPlugin
from .functions import convert_function

_TYPE_KINDS = ("interface", "type", "typeparam")


def _is_type_binding(ident: Identifier) -> bool:
    sym = ident.symbol
    if sym is None:
        return False
    origin = sym.resolve()
    return isinstance(origin, Symbol) and origin.kind in _TYPE_KINDS


# ── Imports ────────────────────────────────────────────────


def imports_plugin(ctx: ConvertContext) -> ConvertPlugin:
    def statement(stmt: Node) -> list[ANode] | None:
        if not isinstance(stmt, ImportDeclaration):
            return None
        clause = stmt.import_clause
        if clause is None or clause.type_only:
            return []
        result: list[ANode] = []
        ref: AIdent | None = None

        def module() -> AIdent:
            nonlocal ref
            if ref is None:
                ref = ctx.module_ref(stmt.module_specifier.value, stmt)
            return AIdent(ref.name)

        if clause.name is not None and not _is_type_binding(clause.name):
            ctx.validate_name(clause.name.name, clause.name)
            result.append(ADef(AIdent(clause.name.name), AProp(module(), "default")))
        if clause.namespace is not None:
            ctx.validate_name(clause.namespace.name, clause.namespace)
            result.append(ADef(AIdent(clause.namespace.name), module()))
        for spec in clause.elements or []:
            if spec.type_only or _is_type_binding(spec.name):
                continue
            imported = spec.property_name if spec.property_name is not None else spec.name
            ctx.validate_name(spec.name.name, spec.name)
            result.append(ADef(AIdent(spec.name.name), AProp(module(), imported.name)))
        return result

    return ConvertPlugin("imports", statement=statement)


# ── Exports ────────────────────────────────────────────────


def exports_plugin(ctx: ConvertContext) -> ConvertPlugin:
    def export_list(stmt: ExportDeclaration) -> list[ANode]:
        if stmt.module_specifier is not None or stmt.elements is None:
            raise ctx.unsupported("re-exports are not supported", stmt)
        if stmt.type_only:
            return []
        for spec in stmt.elements:
            local = spec.property_name if spec.property_name is not None else spec.name
            if _is_type_binding(local):
                continue
            ctx.add_export(spec.name.name, local.name)
        return []

    def export_default(stmt: ExportAssignment) -> list[ANode]:
        if not stmt.is_default:
            raise ctx.unsupported("'export =' is not supported", stmt)
        if isinstance(stmt.expression, Identifier) and stmt.expression.name != "undefined":
            if not _is_type_binding(stmt.expression):
                ctx.add_export("default", stmt.expression.name)
            return []
        temp = ctx.unique_identifier()
        ctx.add_export("default", temp.name)
        return [ADef(temp, ctx.expression(stmt.expression), mutable=False)]

    def statement(stmt: Node) -> list[ANode] | None:
        if isinstance(stmt, ExportDeclaration):
            return export_list(stmt)
        if isinstance(stmt, ExportAssignment):
            return export_default(stmt)
        mods = modifiers_of(stmt)
        if not has_modifier(mods, "export"):
            return None
        if has_modifier(mods, "declare"):
            return []
        if isinstance(stmt, InterfaceDeclaration) or isinstance(stmt, TypeAliasDeclaration):
            return []
        is_default = has_modifier(mods, "default")
        if isinstance(stmt, FunctionDeclaration):
            if stmt.body is None:
                return []
            if stmt.name is None:
                temp = ctx.unique_identifier()
                ctx.add_export("default", temp.name)
                return [ADef(temp, convert_function(ctx, stmt, stmt.params, stmt.body), mutable=False)]
            ctx.add_export("default" if is_default else stmt.name.name, stmt.name.name)
        elif isinstance(stmt, VariableStatement):
            for decl in stmt.declaration_list.declarations:
                for ident in binding_identifiers(decl.name):
                    ctx.add_export(ident.name)
        stripped = [m for m in mods if m.kind != "export" and m.kind != "default"]
        return ctx.statement(dataclasses.replace(stmt, modifiers=stripped))

    return ConvertPlugin("exports", statement=statement)


def export_table(exports: dict[str, str]) -> ANode:
    """Object mapping each export name to the local binding it exposes."""
    return AObj({name: AIdent(local) for name, local in exports.items()})
