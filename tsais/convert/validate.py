"""Type-gated validators.

Each check asks the type oracle about a source expression and raises a
TypeViolation naming the required kind and the inferred type. `any` and
`unknown` always pass.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..frontend.ast import ArrayLiteralExpression, ElementAccessExpression, Node
from ..frontend.types import is_any_or_unknown, is_assignable, type_to_string

if TYPE_CHECKING:
    from .context import ConvertContext


def validate_condition(ctx: ConvertContext, expr: Node) -> None:
    t = ctx.checker.type_of(expr)
    if is_any_or_unknown(t) or is_assignable(t, "boolean"):
        return
    raise ctx.type_violation("condition must be boolean, got '" + type_to_string(t) + "'", expr)


def validate_iterable(ctx: ConvertContext, expr: Node) -> None:
    if isinstance(expr, ArrayLiteralExpression):
        return
    t = ctx.checker.type_of(expr)
    if is_any_or_unknown(t) or is_assignable(t, "array"):
        return
    raise ctx.type_violation("for-of source must be an array, got '" + type_to_string(t) + "'", expr)


def validate_element_access(ctx: ConvertContext, expr: ElementAccessExpression) -> None:
    """Arrays take number keys, objects take string keys, nothing else is indexable."""
    target = ctx.checker.type_of(expr.expression)
    if is_any_or_unknown(target):
        return
    key = ctx.checker.type_of(expr.argument)
    if is_assignable(target, "array"):
        if is_any_or_unknown(key) or is_assignable(key, "number"):
            return
        raise ctx.type_violation("array index must be number, got '" + type_to_string(key) + "'", expr.argument)
    if is_assignable(target, "object"):
        if is_any_or_unknown(key) or is_assignable(key, "string"):
            return
        raise ctx.type_violation("object index must be string, got '" + type_to_string(key) + "'", expr.argument)
    raise ctx.type_violation(
        "element access requires an array or object, got '" + type_to_string(target) + "'", expr.expression
    )
