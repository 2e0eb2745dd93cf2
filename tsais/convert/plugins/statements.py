"""Plain statements: expression statements, blocks, return, break, continue."""

from __future__ import annotations

from ...aiscript.ast import ABlock, ABreak, AContinue, ANode, ANull, AReturn
from ...frontend.ast import (
    Block,
    BreakStatement,
    ContinueStatement,
    EmptyStatement,
    ExpressionStatement,
    LabeledStatement,
    Node,
    ReturnStatement,
)
from ..context import ConvertContext, ConvertPlugin


def statements_plugin(ctx: ConvertContext) -> ConvertPlugin:
    def statement(stmt: Node) -> list[ANode] | None:
        if isinstance(stmt, ExpressionStatement):
            return ctx.expression_statements(stmt.expression)
        if isinstance(stmt, Block):
            return [ABlock(ctx.statements(stmt.statements))]
        if isinstance(stmt, EmptyStatement):
            return []
        if isinstance(stmt, ReturnStatement):
            if stmt.expression is None:
                return [AReturn(ANull())]
            return [AReturn(ctx.expression(stmt.expression))]
        if isinstance(stmt, LabeledStatement):
            raise ctx.unsupported("labels are not supported", stmt)
        if isinstance(stmt, BreakStatement) or isinstance(stmt, ContinueStatement):
            if stmt.label is not None:
                raise ctx.unsupported("labels are not supported", stmt)
            return [ABreak() if isinstance(stmt, BreakStatement) else AContinue()]
        return None

    return ConvertPlugin("statements", statement=statement)
