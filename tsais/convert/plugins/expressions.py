"""Identifiers, operators, assignments, calls and member access."""

from __future__ import annotations

import copy

from ...aiscript.ast import (
    AAssign,
    ABinaryOp,
    ABlock,
    ABool,
    ACall,
    ADef,
    AExpr,
    AIdent,
    AIndex,
    ANode,
    ANull,
    ANum,
    AOpAssign,
    AProp,
    AStr,
    AUnaryOp,
)
from ...frontend.ast import (
    ArrayLiteralExpression,
    AwaitExpression,
    BinaryExpression,
    CallExpression,
    DeleteExpression,
    ElementAccessExpression,
    Identifier,
    NewExpression,
    Node,
    ObjectLiteralExpression,
    ParenthesizedExpression,
    PostfixUnaryExpression,
    PrefixUnaryExpression,
    PropertyAccessExpression,
    SpreadElement,
    TypeOfExpression,
    VoidExpression,
)
from ...frontend.names import Symbol
from ...frontend.prelude import PRELUDE_FILE
from ..context import ConvertContext, ConvertPlugin
from ..destructuring import bind_source, expand_assignment
from ..validate import validate_element_access

# Runtime namespaces whose members are addressed as `Ns:member`
NAMESPACES: set[str] = {
    "Core",
    "Math",
    "Util",
    "Json",
    "Date",
    "Uri",
    "Str",
    "Num",
    "Arr",
    "Obj",
    "Async",
    "Mk",
    "Ui",
    "Ui:C",
}

BINARY_OPS: dict[str, str] = {
    "==": "==",
    "===": "==",
    "!=": "!=",
    "!==": "!=",
    "<": "<",
    "<=": "<=",
    ">": ">",
    ">=": ">=",
    "&&": "&&",
    "||": "||",
    "+": "+",
    "-": "-",
    "*": "*",
    "/": "/",
    "%": "%",
    "**": "^",
}

# Compound assignments spelled `dest = (dest op value)`
EXPANDED_ASSIGN_OPS: dict[str, str] = {
    "*=": "*",
    "/=": "/",
    "%=": "%",
    "**=": "^",
    "&&=": "&&",
    "||=": "||",
}

ASSIGN_OPS: set[str] = {
    "=",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "**=",
    "&&=",
    "||=",
    "??=",
    "&=",
    "|=",
    "^=",
    "<<=",
    ">>=",
    ">>>=",
}


def _unwrap(expr: Node) -> Node:
    while isinstance(expr, ParenthesizedExpression):
        expr = expr.expression
    return expr


def _is_stable(expr: AExpr) -> bool:
    """Whether evaluating expr twice is the same as evaluating it once."""
    if isinstance(expr, AIdent) or isinstance(expr, ANum) or isinstance(expr, AStr):
        return True
    if isinstance(expr, AProp):
        return _is_stable(expr.target)
    return False


# ── Identifiers ────────────────────────────────────────────


def identifiers_plugin(ctx: ConvertContext) -> ConvertPlugin:
    def expression(expr: Node) -> AExpr | None:
        if isinstance(expr, Identifier):
            if expr.name == "undefined":
                return ANull()
            return AIdent(expr.name)
        if isinstance(expr, ParenthesizedExpression):
            return ctx.expression(expr.expression)
        return None

    def expression_statements(expr: Node) -> list[ANode] | None:
        if isinstance(expr, ParenthesizedExpression):
            return ctx.expression_statements(expr.expression)
        return None

    return ConvertPlugin("identifiers", expression=expression, expression_statements=expression_statements)


# ── Operators ──────────────────────────────────────────────


def operators_plugin(ctx: ConvertContext) -> ConvertPlugin:
    def assign_target(node: Node) -> AExpr:
        node = _unwrap(node)
        if isinstance(node, Identifier):
            ctx.validate_name(node.name, node)
            return AIdent(node.name)
        if isinstance(node, PropertyAccessExpression) or isinstance(node, ElementAccessExpression):
            return ctx.expression(node)
        raise ctx.semantic("invalid assignment target", node)

    def stable_target(node: Node) -> tuple[AExpr, list[ANode]]:
        """Assignment target safe to read and write, plus definitions binding its parts."""
        dest = assign_target(node)
        prelude: list[ANode] = []
        if isinstance(dest, AIndex):
            if not _is_stable(dest.target):
                dest.target, defs = bind_source(ctx, dest.target)
                prelude.extend(defs)
            if not _is_stable(dest.index):
                dest.index, defs = bind_source(ctx, dest.index)
                prelude.extend(defs)
        return dest, prelude

    def assignment(expr: BinaryExpression) -> list[ANode]:
        op = expr.operator
        left = _unwrap(expr.left)
        if op == "=" and (isinstance(left, ArrayLiteralExpression) or isinstance(left, ObjectLiteralExpression)):
            source, result = bind_source(ctx, ctx.expression(expr.right))
            result.extend(expand_assignment(ctx, left, source))
            return result
        if op in EXPANDED_ASSIGN_OPS:
            dest, result = stable_target(left)
            value = ctx.expression(expr.right)
            result.append(AAssign(dest, ABinaryOp(EXPANDED_ASSIGN_OPS[op], copy.deepcopy(dest), value)))
            return result
        dest = assign_target(left)
        value = ctx.expression(expr.right)
        if op == "=":
            return [AAssign(dest, value)]
        if op == "+=" or op == "-=":
            return [AOpAssign(op, dest, value)]
        raise ctx.unsupported("operator '" + op + "' is not supported", expr)

    def update(operand: Node, operator: str) -> AOpAssign:
        op = "+=" if operator == "++" else "-="
        return AOpAssign(op, assign_target(operand), ANum(1.0))

    def update_expression(expr: PrefixUnaryExpression | PostfixUnaryExpression) -> ABlock:
        dest, result = stable_target(expr.operand)
        temp = ctx.unique_identifier()
        op = "+=" if expr.operator == "++" else "-="
        change = AOpAssign(op, dest, ANum(1.0))
        capture = ADef(temp, copy.deepcopy(dest), mutable=False)
        if isinstance(expr, PrefixUnaryExpression):
            result.extend([change, capture, AIdent(temp.name)])
        else:
            result.extend([capture, change, AIdent(temp.name)])
        return ABlock(result)

    def prefix(expr: PrefixUnaryExpression) -> AExpr:
        op = expr.operator
        if op == "++" or op == "--":
            return update_expression(expr)
        if op == "!":
            operand = ctx.expression(expr.operand)
            if isinstance(operand, ABool):
                return ABool(not operand.value)
            return AUnaryOp("!", operand)
        if op == "-" or op == "+":
            operand = ctx.expression(expr.operand)
            if isinstance(operand, ANum):
                return ANum(-operand.value if op == "-" else operand.value)
            return AUnaryOp(op, operand)
        raise ctx.unsupported("operator '" + op + "' is not supported", expr)

    def binary(expr: BinaryExpression) -> AExpr:
        op = expr.operator
        if op in ASSIGN_OPS:
            raise ctx.unsupported("assignment cannot be used as an expression", expr)
        mapped = BINARY_OPS.get(op)
        if mapped is None:
            raise ctx.unsupported("operator '" + op + "' is not supported", expr)
        return ABinaryOp(mapped, ctx.expression(expr.left), ctx.expression(expr.right))

    def expression(expr: Node) -> AExpr | None:
        if isinstance(expr, BinaryExpression):
            return binary(expr)
        if isinstance(expr, PrefixUnaryExpression):
            return prefix(expr)
        if isinstance(expr, PostfixUnaryExpression):
            return update_expression(expr)
        if isinstance(expr, TypeOfExpression):
            raise ctx.unsupported("'typeof' is not supported", expr)
        if isinstance(expr, VoidExpression):
            raise ctx.unsupported("'void' is not supported", expr)
        if isinstance(expr, DeleteExpression):
            raise ctx.unsupported("'delete' is not supported", expr)
        if isinstance(expr, AwaitExpression):
            raise ctx.unsupported("'await' is not supported", expr)
        return None

    def expression_statements(expr: Node) -> list[ANode] | None:
        expr = _unwrap(expr)
        if isinstance(expr, BinaryExpression) and expr.operator in ASSIGN_OPS:
            return assignment(expr)
        if isinstance(expr, PrefixUnaryExpression) and (expr.operator == "++" or expr.operator == "--"):
            return [update(expr.operand, expr.operator)]
        if isinstance(expr, PostfixUnaryExpression):
            return [update(expr.operand, expr.operator)]
        return None

    return ConvertPlugin("operators", expression=expression, expression_statements=expression_statements)


# ── Calls and member access ────────────────────────────────


def _is_runtime_name(ident: Identifier) -> bool:
    """True unless user code shadows the name."""
    sym = ident.symbol
    if sym is None:
        return True
    origin = sym.resolve()
    return isinstance(origin, Symbol) and origin.file_name == PRELUDE_FILE


def access_plugin(ctx: ConvertContext) -> ConvertPlugin:
    def call(expr: CallExpression) -> ACall:
        if expr.optional:
            raise ctx.unsupported("optional chaining is not supported", expr)
        args: list[AExpr] = []
        for arg in expr.arguments:
            if isinstance(arg, SpreadElement):
                raise ctx.unsupported("spread arguments are not supported", arg)
            args.append(ctx.expression(arg))
        return ACall(ctx.expression(expr.expression), args)

    def prop(expr: PropertyAccessExpression) -> AExpr:
        if expr.optional:
            raise ctx.unsupported("optional chaining is not supported", expr)
        inner = _unwrap(expr.expression)
        target = ctx.expression(inner)
        if isinstance(target, AIdent) and target.name in NAMESPACES:
            root = inner
            while isinstance(root, PropertyAccessExpression):
                root = root.expression
            if isinstance(root, Identifier) and _is_runtime_name(root):
                return AIdent(target.name + ":" + expr.name.name)
        return AProp(target, expr.name.name)

    def element(expr: ElementAccessExpression) -> AIndex:
        if expr.optional:
            raise ctx.unsupported("optional chaining is not supported", expr)
        validate_element_access(ctx, expr)
        return AIndex(ctx.expression(expr.expression), ctx.expression(expr.argument))

    def expression(expr: Node) -> AExpr | None:
        if isinstance(expr, CallExpression):
            return call(expr)
        if isinstance(expr, PropertyAccessExpression):
            return prop(expr)
        if isinstance(expr, ElementAccessExpression):
            return element(expr)
        if isinstance(expr, NewExpression):
            raise ctx.unsupported("'new' is not supported", expr)
        return None

    return ConvertPlugin("access", expression=expression)
