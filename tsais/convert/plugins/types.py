"""Type erasure: declarations vanish, casts pass their operand through."""

from __future__ import annotations

from ...aiscript.ast import AExpr, ANode
from ...frontend.ast import (
    AsExpression,
    InterfaceDeclaration,
    ModuleDeclaration,
    Node,
    NonNullExpression,
    SatisfiesExpression,
    TypeAliasDeclaration,
    has_modifier,
    modifiers_of,
)
from ..context import ConvertContext, ConvertPlugin


def types_plugin(ctx: ConvertContext) -> ConvertPlugin:
    def expression(expr: Node) -> AExpr | None:
        if isinstance(expr, AsExpression) or isinstance(expr, SatisfiesExpression):
            return ctx.expression(expr.expression)
        if isinstance(expr, NonNullExpression):
            return ctx.expression(expr.expression)
        return None

    def statement(stmt: Node) -> list[ANode] | None:
        if isinstance(stmt, TypeAliasDeclaration) or isinstance(stmt, InterfaceDeclaration):
            return []
        if has_modifier(modifiers_of(stmt), "declare"):
            return []
        if isinstance(stmt, ModuleDeclaration):
            raise ctx.unsupported("namespaces are not supported", stmt)
        return None

    return ConvertPlugin("types", expression=expression, statement=statement)
