"""Literals: numbers, strings, templates, booleans, arrays and objects."""

from __future__ import annotations

from ...aiscript.ast import AArr, ABool, AExpr, ANum, AObj, AStr, ATmpl
from ...frontend.ast import (
    ArrayLiteralExpression,
    BooleanLiteral,
    MethodDeclaration,
    NoSubstitutionTemplateLiteral,
    Node,
    NullLiteral,
    NumericLiteral,
    ObjectLiteralExpression,
    OmittedExpression,
    PropertyAssignment,
    ShorthandPropertyAssignment,
    SpreadAssignment,
    SpreadElement,
    StringLiteral,
    TemplateExpression,
)
from ...frontend.names import property_key
from ...frontend.parse import numeric_value
from ..context import ConvertContext, ConvertPlugin
from .functions import convert_function


def literals_plugin(ctx: ConvertContext) -> ConvertPlugin:
    def template(expr: TemplateExpression) -> ATmpl:
        parts: list[AExpr] = []
        if expr.head != "":
            parts.append(AStr(expr.head))
        for span in expr.spans:
            parts.append(ctx.expression(span.expression))
            if span.literal != "":
                parts.append(AStr(span.literal))
        return ATmpl(parts)

    def array(expr: ArrayLiteralExpression) -> AArr:
        items: list[AExpr] = []
        for element in expr.elements:
            if isinstance(element, SpreadElement):
                raise ctx.unsupported("spread elements are not supported", element)
            if isinstance(element, OmittedExpression):
                raise ctx.unsupported("array holes are not supported", element)
            items.append(ctx.expression(element))
        return AArr(items)

    def obj(expr: ObjectLiteralExpression) -> AObj:
        entries: dict[str, AExpr] = {}
        for prop in expr.properties:
            if isinstance(prop, SpreadAssignment):
                raise ctx.unsupported("object spread is not supported", prop)
            if isinstance(prop, ShorthandPropertyAssignment):
                if prop.default is not None:
                    raise ctx.unsupported("shorthand property defaults are not supported", prop)
                entries[prop.name.name] = ctx.expression(prop.name)
                continue
            if not isinstance(prop, PropertyAssignment) and not isinstance(prop, MethodDeclaration):
                raise ctx.unsupported("no conversion for " + type(prop).__name__, prop)
            key = property_key(prop.name)
            if key is None:
                raise ctx.unsupported("computed property names are not supported", prop)
            if isinstance(prop, PropertyAssignment):
                entries[key] = ctx.expression(prop.initializer)
                continue
            if prop.kind != "method":
                raise ctx.unsupported("accessors are not supported", prop)
            entries[key] = convert_function(ctx, prop, prop.params, prop.body)
        return AObj(entries)

    def expression(expr: Node) -> AExpr | None:
        if isinstance(expr, NumericLiteral):
            return ANum(numeric_value(expr.text))
        if isinstance(expr, StringLiteral):
            return AStr(expr.value)
        if isinstance(expr, BooleanLiteral):
            return ABool(expr.value)
        if isinstance(expr, NullLiteral):
            raise ctx.unsupported("null is not supported, use undefined instead", expr)
        if isinstance(expr, NoSubstitutionTemplateLiteral):
            return ATmpl([AStr(expr.text)])
        if isinstance(expr, TemplateExpression):
            return template(expr)
        if isinstance(expr, ArrayLiteralExpression):
            return array(expr)
        if isinstance(expr, ObjectLiteralExpression):
            return obj(expr)
        return None

    return ConvertPlugin("literals", expression=expression)
