"""Variable statements: `const` -> immutable `let`, `let`/`var` -> mutable `var`."""

from __future__ import annotations

from ...aiscript.ast import ADef, AIdent, ANode
from ...frontend.ast import Identifier, Node, VariableDeclarationList, VariableStatement, has_modifier
from ..context import ConvertContext, ConvertPlugin
from ..destructuring import expand_declaration


def convert_declarations(ctx: ConvertContext, decl_list: VariableDeclarationList) -> list[ANode]:
    mutable = decl_list.kind != "const"
    result: list[ANode] = []
    for decl in decl_list.declarations:
        if decl.initializer is None:
            raise ctx.semantic("variable declaration requires an initializer", decl)
        if isinstance(decl.name, Identifier):
            ctx.validate_name(decl.name.name, decl.name)
            result.append(ADef(AIdent(decl.name.name), ctx.expression(decl.initializer), mutable=mutable))
        else:
            result.extend(expand_declaration(ctx, decl.name, ctx.expression(decl.initializer), mutable))
    return result


def variables_plugin(ctx: ConvertContext) -> ConvertPlugin:
    def statement(stmt: Node) -> list[ANode] | None:
        if not isinstance(stmt, VariableStatement):
            return None
        if has_modifier(stmt.modifiers, "declare"):
            return []
        return convert_declarations(ctx, stmt.declaration_list)

    return ConvertPlugin("variables", statement=statement)
