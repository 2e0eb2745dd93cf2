"""Function declarations, arrow functions and function expressions."""

from __future__ import annotations

from ...aiscript.ast import ADef, AFn, AIdent, ANode, AParam, AReturn
from ...frontend.ast import (
    ArrowFunction,
    Block,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    Node,
    Parameter,
    has_modifier,
)
from ..context import ConvertContext, ConvertPlugin
from ..destructuring import binding_parameter


def convert_params(ctx: ConvertContext, params: list[Parameter]) -> tuple[list[AParam], list[ANode]]:
    """Output parameters plus the definitions destructured parameters expand to."""
    result: list[AParam] = []
    prologue: list[ANode] = []
    for param in params:
        if isinstance(param.name, Identifier) and param.name.name == "this":
            continue
        if param.rest:
            raise ctx.unsupported("rest parameters are not supported", param)
        default = ctx.expression(param.initializer) if param.initializer is not None else None
        if isinstance(param.name, Identifier):
            ctx.validate_name(param.name.name, param.name)
            dest = AIdent(param.name.name)
        else:
            dest, defs = binding_parameter(ctx, param.name, mutable=False)
            prologue.extend(defs)
        result.append(AParam(dest, optional=param.optional and default is None, default=default))
    return result, prologue


def convert_function(ctx: ConvertContext, node: Node, params: list[Parameter], body: Node) -> AFn:
    """Function literal for any function-like node. An expression body is returned."""
    if getattr(node, "is_async", False):
        raise ctx.unsupported("async functions are not supported", node)
    if getattr(node, "is_generator", False):
        raise ctx.unsupported("generator functions are not supported", node)
    out_params, children = convert_params(ctx, params)
    if isinstance(body, Block):
        children.extend(ctx.statements(body.statements))
    else:
        children.append(AReturn(ctx.expression(body)))
    return AFn(out_params, children)


def functions_plugin(ctx: ConvertContext) -> ConvertPlugin:
    def expression(expr: Node) -> AFn | None:
        if isinstance(expr, ArrowFunction) or isinstance(expr, FunctionExpression):
            return convert_function(ctx, expr, expr.params, expr.body)
        return None

    def statement(stmt: Node) -> list[ANode] | None:
        if not isinstance(stmt, FunctionDeclaration):
            return None
        # Overload signatures and ambient declarations have no body
        if stmt.body is None or has_modifier(stmt.modifiers, "declare"):
            return []
        if stmt.name is None:
            raise ctx.semantic("function declaration requires a name", stmt)
        ctx.validate_name(stmt.name.name, stmt.name)
        fn = convert_function(ctx, stmt, stmt.params, stmt.body)
        return [ADef(AIdent(stmt.name.name), fn, mutable=False)]

    return ConvertPlugin("functions", expression=expression, statement=statement)
