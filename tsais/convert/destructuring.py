"""Binding expander — destructuring patterns -> flat definitions or assignments.

Array element i reads `source[i]`, object property k reads `source.k`, and a
nested pattern recurses with that access as its new source. Callers bind a
compound right-hand side to a generated identifier first (`bind_source`) so
every element reads the same evaluated value.
"""

from __future__ import annotations

import copy
import re
from typing import TYPE_CHECKING

from ..aiscript.ast import AAssign, ADef, AExpr, AIdent, AIndex, ANode, ANum, AProp, AStr
from ..frontend.ast import (
    ArrayBindingPattern,
    ArrayLiteralExpression,
    BinaryExpression,
    BindingElement,
    ElementAccessExpression,
    Identifier,
    Node,
    ObjectBindingPattern,
    ObjectLiteralExpression,
    OmittedExpression,
    ParenthesizedExpression,
    PropertyAccessExpression,
    PropertyAssignment,
    ShorthandPropertyAssignment,
)
from ..frontend.names import property_key

if TYPE_CHECKING:
    from .context import ConvertContext

_PLAIN_KEY = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def member(source: AExpr, key: str) -> AExpr:
    """`source.key`, or `source["key"]` when key is not a plain name."""
    if _PLAIN_KEY.match(key):
        return AProp(source, key)
    return AIndex(source, AStr(key))


def bind_source(ctx: ConvertContext, value: AExpr) -> tuple[AExpr, list[ANode]]:
    """Stable reference to `value` plus the definition that creates it, if any."""
    if isinstance(value, AIdent):
        return value, []
    temp = ctx.unique_identifier()
    return AIdent(temp.name), [ADef(temp, value, mutable=False)]


def is_pattern(name: Node) -> bool:
    return isinstance(name, ObjectBindingPattern) or isinstance(name, ArrayBindingPattern)


# ── Declarations ───────────────────────────────────────────


def expand_binding(ctx: ConvertContext, pattern: Node, source: AExpr, mutable: bool) -> list[ANode]:
    """Definitions for every name a binding pattern introduces."""
    if isinstance(pattern, Identifier):
        ctx.validate_name(pattern.name, pattern)
        return [ADef(AIdent(pattern.name), source, mutable=mutable)]
    result: list[ANode] = []
    if isinstance(pattern, ArrayBindingPattern):
        for i, element in enumerate(pattern.elements):
            if isinstance(element, OmittedExpression):
                continue
            assert isinstance(element, BindingElement)
            _check_element(ctx, element)
            result.extend(expand_binding(ctx, element.name, AIndex(copy.deepcopy(source), ANum(float(i))), mutable))
        return result
    if isinstance(pattern, ObjectBindingPattern):
        for element in pattern.elements:
            _check_element(ctx, element)
            key_node = element.property_name if element.property_name is not None else element.name
            key = property_key(key_node)
            if key is None:
                raise ctx.semantic("computed keys are not supported in destructuring", key_node)
            result.extend(expand_binding(ctx, element.name, member(copy.deepcopy(source), key), mutable))
        return result
    raise ctx.semantic("unsupported binding pattern " + type(pattern).__name__, pattern)


def _check_element(ctx: ConvertContext, element: BindingElement) -> None:
    if element.rest:
        raise ctx.semantic("rest elements are not supported in destructuring", element)
    if element.initializer is not None:
        raise ctx.semantic("default values are not supported in destructuring", element)


def expand_declaration(ctx: ConvertContext, pattern: Node, value: AExpr, mutable: bool) -> list[ANode]:
    """Bind `value` once, then expand the pattern against it."""
    source, result = bind_source(ctx, value)
    result.extend(expand_binding(ctx, pattern, source, mutable))
    return result


def binding_parameter(ctx: ConvertContext, pattern: Node, mutable: bool) -> tuple[AIdent, list[ANode]]:
    """Generated name standing in for a destructured parameter or loop variable."""
    temp = ctx.unique_identifier()
    return temp, expand_binding(ctx, pattern, AIdent(temp.name), mutable)


# ── Assignments ────────────────────────────────────────────


def expand_assignment(ctx: ConvertContext, target: Node, source: AExpr) -> list[ANode]:
    """Assignments for a destructuring assignment target such as `[a, b.c]`."""
    while isinstance(target, ParenthesizedExpression):
        target = target.expression
    if isinstance(target, ArrayLiteralExpression):
        result: list[ANode] = []
        for i, element in enumerate(target.elements):
            if isinstance(element, OmittedExpression):
                continue
            result.extend(expand_assignment(ctx, element, AIndex(copy.deepcopy(source), ANum(float(i)))))
        return result
    if isinstance(target, ObjectLiteralExpression):
        result = []
        for prop in target.properties:
            if isinstance(prop, ShorthandPropertyAssignment):
                if prop.default is not None:
                    raise ctx.semantic("default values are not supported in destructuring", prop)
                ctx.validate_name(prop.name.name, prop.name)
                result.append(AAssign(AIdent(prop.name.name), member(copy.deepcopy(source), prop.name.name)))
            elif isinstance(prop, PropertyAssignment):
                key = property_key(prop.name)
                if key is None:
                    raise ctx.semantic("computed keys are not supported in destructuring", prop.name)
                result.extend(expand_assignment(ctx, prop.initializer, member(copy.deepcopy(source), key)))
            else:
                raise ctx.semantic("unsupported destructuring target " + type(prop).__name__, prop)
        return result
    if isinstance(target, Identifier):
        ctx.validate_name(target.name, target)
        return [AAssign(AIdent(target.name), source)]
    if isinstance(target, PropertyAccessExpression) or isinstance(target, ElementAccessExpression):
        return [AAssign(ctx.expression(target), source)]
    if isinstance(target, BinaryExpression) and target.operator == "=":
        raise ctx.semantic("default values are not supported in destructuring", target)
    raise ctx.semantic("unsupported destructuring target " + type(target).__name__, target)
