"""Control flow: if, ternary, loops, for-of and switch.

Every loop becomes a single unconditional `loop` guarded by
`if (!cond) break`. A `for` initializer and any generated flag live in a
block wrapped around the loop so they stay scoped to it.
"""

from __future__ import annotations

from ...aiscript.ast import (
    AAssign,
    ABinaryOp,
    ABlock,
    ABool,
    ABreak,
    ADef,
    AEach,
    AElif,
    AExpr,
    AIdent,
    AIf,
    ALoop,
    ANode,
    ANull,
    AUnaryOp,
)
from ...frontend.ast import (
    ArrowFunction,
    Block,
    BreakStatement,
    CaseClause,
    ConditionalExpression,
    ContinueStatement,
    DoStatement,
    ForInStatement,
    ForOfStatement,
    ForStatement,
    FunctionDeclaration,
    FunctionExpression,
    Identifier,
    IfStatement,
    MethodDeclaration,
    Node,
    ReturnStatement,
    SwitchStatement,
    VariableDeclarationList,
    WhileStatement,
    child_nodes,
)
from ..context import ConvertContext, ConvertPlugin
from ..destructuring import binding_parameter
from ..validate import validate_condition, validate_iterable
from .variables import convert_declarations

LOOPS = (ForStatement, ForOfStatement, ForInStatement, WhileStatement, DoStatement)
FUNCTIONS = (FunctionDeclaration, FunctionExpression, ArrowFunction, MethodDeclaration)


def has_jump(nodes: list[Node], kind: type, crossing: tuple[type, ...]) -> bool:
    """Whether an unlabeled jump of `kind` in nodes targets the enclosing construct.

    Jumps inside functions or inside a nested `crossing` construct belong to
    that construct and are not counted.
    """
    for node in nodes:
        if isinstance(node, kind) and getattr(node, "label", None) is None:
            return True
        if isinstance(node, FUNCTIONS) or isinstance(node, crossing):
            continue
        if has_jump(child_nodes(node), kind, crossing):
            return True
    return False


def _block(nodes: list[ANode]) -> ANode:
    if len(nodes) == 1:
        return nodes[0]
    return ABlock(nodes)


def control_plugin(ctx: ConvertContext) -> ConvertPlugin:
    # ── Conditionals ───────────────────────────────────────

    def condition(expr: Node) -> AExpr:
        validate_condition(ctx, expr)
        return ctx.expression(expr)

    def branch(stmt: Node) -> ANode:
        nodes = ctx.statement(stmt)
        if len(nodes) == 0:
            return ANull()
        return _block(nodes)

    def if_statement(stmt: IfStatement) -> list[ANode]:
        node = AIf(condition(stmt.expression), branch(stmt.then_statement))
        tail = stmt.else_statement
        while isinstance(tail, IfStatement):
            node.elseif.append(AElif(condition(tail.expression), branch(tail.then_statement)))
            tail = tail.else_statement
        if tail is not None:
            node.else_ = branch(tail)
        return [node]

    def conditional(expr: ConditionalExpression) -> AIf:
        node = AIf(condition(expr.condition), ctx.expression(expr.when_true))
        tail = expr.when_false
        while isinstance(tail, ConditionalExpression):
            node.elseif.append(AElif(condition(tail.condition), ctx.expression(tail.when_true)))
            tail = tail.when_false
        node.else_ = ctx.expression(tail)
        return node

    # ── Loops ──────────────────────────────────────────────

    def guard(expr: Node) -> list[ANode]:
        cond = condition(expr)
        if isinstance(cond, ABool) and cond.value:
            return []
        return [AIf(AUnaryOp("!", cond), ABreak())]

    def body_of(stmt: Node) -> list[ANode]:
        if isinstance(stmt, Block):
            return ctx.statements(stmt.statements)
        return ctx.statement(stmt)

    def first_pass_switch(flag: AIdent, otherwise: list[ANode]) -> AIf:
        """`if flag { flag = false } else { ... }` at the top of a loop body."""
        return AIf(
            AIdent(flag.name),
            ABlock([AAssign(AIdent(flag.name), ABool(False))]),
            else_=ABlock(otherwise),
        )

    def for_statement(stmt: ForStatement) -> list[ANode]:
        prologue: list[ANode] = []
        init = stmt.initializer
        if isinstance(init, VariableDeclarationList):
            prologue.extend(convert_declarations(ctx, init))
        elif init is not None:
            prologue.extend(ctx.expression_statements(init))
        check = guard(stmt.condition) if stmt.condition is not None else []
        body = body_of(stmt.statement)
        step = ctx.expression_statements(stmt.incrementor) if stmt.incrementor is not None else []
        if len(step) > 0 and has_jump([stmt.statement], ContinueStatement, LOOPS):
            flag = ctx.unique_identifier()
            prologue.append(ADef(flag, ABool(True), mutable=True))
            loop = ALoop([first_pass_switch(flag, step)] + check + body)
        else:
            loop = ALoop(check + body + step)
        if len(prologue) == 0:
            return [loop]
        return [ABlock(prologue + [loop])]

    def while_statement(stmt: WhileStatement) -> list[ANode]:
        check = guard(stmt.expression)
        return [ALoop(check + body_of(stmt.statement))]

    def do_statement(stmt: DoStatement) -> list[ANode]:
        body = body_of(stmt.statement)
        check = guard(stmt.expression)
        if len(check) > 0 and has_jump([stmt.statement], ContinueStatement, LOOPS):
            flag = ctx.unique_identifier()
            loop = ALoop([first_pass_switch(flag, check)] + body)
            return [ABlock([ADef(flag, ABool(True), mutable=True), loop])]
        return [ALoop(body + check)]

    def for_of(stmt: ForOfStatement) -> list[ANode]:
        if stmt.is_await:
            raise ctx.unsupported("'for await' is not supported", stmt)
        init = stmt.initializer
        if not isinstance(init, VariableDeclarationList) or len(init.declarations) != 1:
            raise ctx.semantic("for-of requires a single variable declaration", init)
        validate_iterable(ctx, stmt.expression)
        items = ctx.expression(stmt.expression)
        name = init.declarations[0].name
        body: list[ANode] = []
        if isinstance(name, Identifier):
            ctx.validate_name(name.name, name)
            var = AIdent(name.name)
        else:
            var, defs = binding_parameter(ctx, name, mutable=init.kind != "const")
            body.extend(defs)
        body.extend(body_of(stmt.statement))
        return [AEach(var, items, body[0] if len(body) == 1 else ABlock(body))]

    # ── Switch ─────────────────────────────────────────────

    def case_body(clause: Node, statements: list[Node]) -> list[ANode]:
        stmts = list(statements)
        while len(stmts) > 0 and isinstance(stmts[-1], Block):
            stmts = stmts[:-1] + list(stmts[-1].statements)
        out: list[ANode] = []
        for s in stmts:
            if isinstance(s, BreakStatement):
                if s.label is not None:
                    raise ctx.unsupported("labels are not supported", s)
                return out
            if isinstance(s, ReturnStatement):
                out.extend(ctx.statement(s))
                return out
            if has_jump([s], BreakStatement, LOOPS + (SwitchStatement,)):
                raise ctx.semantic("break inside a case body is not supported", s)
            out.extend(ctx.statement(s))
        raise ctx.semantic("case must end in break or return", clause)

    def switch(stmt: SwitchStatement) -> list[ANode]:
        subject = ctx.expression(stmt.expression)
        temp = ctx.unique_identifier()
        result: list[ANode] = [ADef(temp, subject, mutable=False)]
        branches: list[tuple[AExpr, ABlock]] = []
        default: list[ANode] | None = None
        pending: list[AExpr] = []
        for i, clause in enumerate(stmt.clauses):
            if isinstance(clause, CaseClause):
                pending.append(ABinaryOp("==", AIdent(temp.name), ctx.expression(clause.expression)))
                if len(clause.statements) == 0:
                    continue
                cond = pending[0]
                for extra in pending[1:]:
                    cond = ABinaryOp("||", cond, extra)
                branches.append((cond, ABlock(case_body(clause, clause.statements))))
                pending = []
                continue
            pending = []
            if len(clause.statements) == 0 and i < len(stmt.clauses) - 1:
                raise ctx.semantic("case must end in break or return", clause)
            default = case_body(clause, clause.statements) if len(clause.statements) > 0 else []
        if len(branches) == 0:
            return result + (default or [])
        first_cond, first_body = branches[0]
        node = AIf(first_cond, first_body)
        for cond, body in branches[1:]:
            node.elseif.append(AElif(cond, body))
        if default:
            node.else_ = ABlock(default)
        result.append(node)
        return result

    # ── Dispatch ───────────────────────────────────────────

    def expression(expr: Node) -> AExpr | None:
        if isinstance(expr, ConditionalExpression):
            return conditional(expr)
        return None

    def statement(stmt: Node) -> list[ANode] | None:
        if isinstance(stmt, IfStatement):
            return if_statement(stmt)
        if isinstance(stmt, ForStatement):
            return for_statement(stmt)
        if isinstance(stmt, WhileStatement):
            return while_statement(stmt)
        if isinstance(stmt, DoStatement):
            return do_statement(stmt)
        if isinstance(stmt, ForOfStatement):
            return for_of(stmt)
        if isinstance(stmt, ForInStatement):
            raise ctx.unsupported("'for-in' is not supported, use for-of over Obj.keys", stmt)
        if isinstance(stmt, SwitchStatement):
            return switch(stmt)
        return None

    return ConvertPlugin("control", expression=expression, statement=statement)
