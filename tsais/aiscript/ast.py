"""AiScript AST — output-language node definitions.

Every node carries a `loc` span that is excluded from equality, so two trees
built from different sources compare equal when their shape and values do.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields


# ============================================================
# POSITION
# ============================================================


@dataclass
class Loc:
    """Source span, 1-indexed. Zero means "no position" (generated node)."""

    line: int = 0
    col: int = 0
    end_line: int = 0
    end_col: int = 0


def _loc() -> Loc:
    return field(default_factory=Loc, compare=False, kw_only=True, repr=False)


# ============================================================
# BASE
# ============================================================


@dataclass
class ANode:
    """Base for every output node."""

    loc: Loc = _loc()


@dataclass
class AExpr(ANode):
    """Base for nodes valid in expression position."""


@dataclass
class AStmt(ANode):
    """Base for nodes valid only in statement position."""


# ============================================================
# LITERALS
# ============================================================


@dataclass
class ANum(AExpr):
    value: float


@dataclass
class AStr(AExpr):
    value: str


@dataclass
class ABool(AExpr):
    value: bool


@dataclass
class ANull(AExpr):
    pass


@dataclass
class ATmpl(AExpr):
    """`text{expr}text` — parts alternate freely between AStr and expressions."""

    parts: list[AExpr]


@dataclass
class AArr(AExpr):
    items: list[AExpr]


@dataclass
class AObj(AExpr):
    """Ordered key/value pairs; keys unique, insertion order significant."""

    entries: dict[str, AExpr]


# ============================================================
# NAMES / ACCESS / CALLS
# ============================================================


@dataclass
class AIdent(AExpr):
    """Variable reference; namespaced names keep their colons (`Math:abs`)."""

    name: str


@dataclass
class AProp(AExpr):
    target: AExpr
    name: str


@dataclass
class AIndex(AExpr):
    target: AExpr
    index: AExpr


@dataclass
class ACall(AExpr):
    target: AExpr
    args: list[AExpr]


# ============================================================
# OPERATORS
# ============================================================


@dataclass
class AUnaryOp(AExpr):
    """op: `!`, `+`, `-`."""

    op: str
    operand: AExpr


@dataclass
class ABinaryOp(AExpr):
    """op: `+ - * / % ^ == != < <= > >= && ||`."""

    op: str
    left: AExpr
    right: AExpr


# ============================================================
# FUNCTIONS
# ============================================================


@dataclass
class AParam(ANode):
    dest: AIdent
    optional: bool = False
    default: AExpr | None = None


@dataclass
class AFn(AExpr):
    params: list[AParam]
    children: list[ANode]


# ============================================================
# CONTROL FORMS
# ============================================================


@dataclass
class AElif(ANode):
    cond: AExpr
    then: ANode


@dataclass
class AIf(AExpr):
    cond: AExpr
    then: ANode
    elseif: list[AElif] = field(default_factory=list)
    else_: ANode | None = None


@dataclass
class AMatchCase(ANode):
    q: AExpr
    a: ANode


@dataclass
class AMatch(AExpr):
    about: AExpr
    cases: list[AMatchCase]
    default: ANode | None = None


@dataclass
class ABlock(AExpr):
    """Scoped statement list; its value is the value of the last statement."""

    statements: list[ANode]


@dataclass
class ALoop(AStmt):
    statements: list[ANode]


@dataclass
class AEach(AStmt):
    var: AIdent
    items: AExpr
    body: ANode


# ============================================================
# DEFINITIONS / ASSIGNMENT / JUMPS
# ============================================================


@dataclass
class ADef(AStmt):
    """`let` (immutable) or `var` (mutable) definition."""

    dest: AIdent
    expr: AExpr
    mutable: bool = False


@dataclass
class AAssign(AStmt):
    dest: AExpr
    expr: AExpr


@dataclass
class AOpAssign(AStmt):
    """op: `+=` or `-=`."""

    op: str
    dest: AExpr
    expr: AExpr


@dataclass
class AReturn(AStmt):
    expr: AExpr


@dataclass
class ABreak(AStmt):
    pass


@dataclass
class AContinue(AStmt):
    pass


# ============================================================
# SERIALIZATION
# ============================================================


def to_dict(value: object) -> object:
    """Node tree -> JSON-ready dicts; `kind` is the node class name minus its `A`."""
    if isinstance(value, ANode):
        result: dict[str, object] = {"kind": type(value).__name__[1:]}
        for f in fields(value):
            if f.name == "loc":
                continue
            result[f.name] = to_dict(getattr(value, f.name))
        if value.loc.line > 0:
            result["line"] = value.loc.line
        return result
    if isinstance(value, list):
        return [to_dict(v) for v in value]
    if isinstance(value, tuple):
        return [to_dict(v) for v in value]
    if isinstance(value, dict):
        return {k: to_dict(v) for k, v in value.items()}
    return value
