"""AiScript emitter — renders output nodes as AiScript source text.

Total over `aiscript/ast.py`; the parser in `aiscript/parse.py` reads every
form written here back into an equal tree.
"""

from __future__ import annotations

import math

from .ast import (
    AArr,
    AAssign,
    ABinaryOp,
    ABlock,
    ABool,
    ABreak,
    ACall,
    AContinue,
    ADef,
    AEach,
    AFn,
    AIdent,
    AIf,
    AIndex,
    ALoop,
    AMatch,
    ANode,
    ANull,
    ANum,
    AObj,
    AOpAssign,
    AParam,
    AProp,
    AReturn,
    AStr,
    ATmpl,
    AUnaryOp,
)
from .tokens import KEYWORDS


def to_source(nodes: list[ANode]) -> str:
    """Render a list of top-level nodes as AiScript source."""
    return _Emitter().emit_program(nodes)


def _is_plain_key(key: str) -> bool:
    if key == "" or key in KEYWORDS:
        return False
    if not (key[0].isalpha() or key[0] == "_"):
        return False
    for c in key:
        if not (c.isalnum() or c == "_"):
            return False
    return key.isascii()


def _quote(s: str) -> str:
    out: list[str] = ['"']
    for c in s:
        if c == "\\":
            out.append("\\\\")
        elif c == '"':
            out.append('\\"')
        elif c == "\n":
            out.append("\\n")
        elif c == "\r":
            out.append("\\r")
        elif c == "\t":
            out.append("\\t")
        else:
            out.append(c)
    out.append('"')
    return "".join(out)


def _template_text(s: str) -> str:
    out: list[str] = []
    for c in s:
        if c == "\\" or c == "`" or c == "{":
            out.append("\\")
        out.append(c)
    return "".join(out)


def _number(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        raise ValueError("cannot render non-finite number " + repr(value))
    text = _number_text(abs(value))
    if value < 0:
        return "(-" + text + ")"
    return text


def _number_text(magnitude: float) -> str:
    """Shortest round-trip digits, laid out the way JavaScript prints numbers."""
    if magnitude.is_integer() and magnitude < 1e21:
        return str(int(magnitude))
    text = repr(magnitude)
    if "e" not in text:
        return text
    mantissa, exp = text.split("e")
    exponent = int(exp)
    # Positional down to 1e-6, exponent form below
    if -7 < exponent < 0:
        return "0." + "0" * (-exponent - 1) + mantissa.replace(".", "")
    return mantissa + "e" + ("+" if exponent > 0 else "-") + str(abs(exponent))


class _Emitter:
    _INDENT: str = "  "

    _BIN_OPS: set[str] = {
        "+",
        "-",
        "*",
        "/",
        "%",
        "^",
        "==",
        "!=",
        "<",
        "<=",
        ">",
        ">=",
        "&&",
        "||",
    }

    # ── Public ──────────────────────────────────────────────

    def emit_program(self, nodes: list[ANode]) -> str:
        lines: list[str] = []
        for node in nodes:
            lines.append(self._statement(node, 0))
        return "\n".join(lines)

    # ── Statement position ──────────────────────────────────

    def _statement(self, node: ANode, level: int) -> str:
        """Statement position: objects need parens so they don't read as blocks."""
        if isinstance(node, AObj):
            return "(" + self._expr(node, level) + ")"
        return self._expr(node, level)

    def _body(self, node: ANode, level: int) -> str:
        """Body of if/elif/else/each/case: blocks render bare."""
        if isinstance(node, ABlock):
            return self._block(node.statements, level)
        return self._statement(node, level)

    def _block(self, statements: list[ANode], level: int) -> str:
        if len(statements) == 0:
            return "{}"
        pad = self._INDENT * (level + 1)
        lines: list[str] = []
        for stmt in statements:
            lines.append(pad + self._statement(stmt, level + 1))
        return "{\n" + "\n".join(lines) + "\n" + self._INDENT * level + "}"

    # ── Nodes ───────────────────────────────────────────────

    def _expr(self, node: ANode, level: int) -> str:
        if isinstance(node, ANum):
            return _number(node.value)
        if isinstance(node, AStr):
            return _quote(node.value)
        if isinstance(node, ABool):
            return "true" if node.value else "false"
        if isinstance(node, ANull):
            return "null"
        if isinstance(node, AIdent):
            return node.name
        if isinstance(node, ATmpl):
            return self._template(node, level)
        if isinstance(node, AArr):
            return self._array(node, level)
        if isinstance(node, AObj):
            return self._object(node, level)
        if isinstance(node, AProp):
            return self._expr(node.target, level) + "." + node.name
        if isinstance(node, AIndex):
            return self._expr(node.target, level) + "[" + self._expr(node.index, level) + "]"
        if isinstance(node, ACall):
            args: list[str] = []
            for arg in node.args:
                args.append(self._expr(arg, level))
            return self._expr(node.target, level) + "(" + ", ".join(args) + ")"
        if isinstance(node, AUnaryOp):
            return "(" + node.op + self._expr(node.operand, level) + ")"
        if isinstance(node, ABinaryOp):
            if node.op not in self._BIN_OPS:
                raise ValueError("unknown binary operator " + node.op)
            left = self._expr(node.left, level)
            right = self._expr(node.right, level)
            return "(" + left + " " + node.op + " " + right + ")"
        if isinstance(node, AFn):
            return "@(" + self._params(node.params, level) + ") " + self._block(node.children, level)
        if isinstance(node, ABlock):
            return "eval " + self._block(node.statements, level)
        if isinstance(node, AIf):
            return self._if(node, level)
        if isinstance(node, AMatch):
            return self._match(node, level)
        if isinstance(node, ALoop):
            return self._loop(node, level)
        if isinstance(node, AEach):
            return (
                "each let "
                + node.var.name
                + ", "
                + self._expr(node.items, level)
                + " "
                + self._body(node.body, level)
            )
        if isinstance(node, ADef):
            return self._def(node, level)
        if isinstance(node, AAssign):
            return self._expr(node.dest, level) + " = " + self._expr(node.expr, level)
        if isinstance(node, AOpAssign):
            return self._expr(node.dest, level) + " " + node.op + " " + self._expr(node.expr, level)
        if isinstance(node, AReturn):
            return "return " + self._expr(node.expr, level)
        if isinstance(node, ABreak):
            return "break"
        if isinstance(node, AContinue):
            return "continue"
        raise TypeError("unhandled node type " + type(node).__name__)

    def _def(self, node: ADef, level: int) -> str:
        if isinstance(node.expr, AFn) and not node.mutable:
            fn = node.expr
            return (
                "@"
                + node.dest.name
                + "("
                + self._params(fn.params, level)
                + ") "
                + self._block(fn.children, level)
            )
        keyword = "var " if node.mutable else "let "
        return keyword + node.dest.name + " = " + self._expr(node.expr, level)

    def _params(self, params: list[AParam], level: int) -> str:
        parts: list[str] = []
        for param in params:
            text = param.dest.name
            if param.optional:
                text += "?"
            if param.default is not None:
                text += " = " + self._expr(param.default, level)
            parts.append(text)
        return ", ".join(parts)

    def _if(self, node: AIf, level: int) -> str:
        text = "if " + self._expr(node.cond, level) + " " + self._body(node.then, level)
        for branch in node.elseif:
            text += " elif " + self._expr(branch.cond, level) + " " + self._body(branch.then, level)
        if node.else_ is not None:
            text += " else " + self._body(node.else_, level)
        return text

    def _match(self, node: AMatch, level: int) -> str:
        pad = self._INDENT * (level + 1)
        arms: list[str] = []
        for case in node.cases:
            arms.append(
                pad
                + "case "
                + self._expr(case.q, level + 1)
                + " => "
                + self._body(case.a, level + 1)
            )
        if node.default is not None:
            arms.append(pad + "default => " + self._body(node.default, level + 1))
        head = "match (" + self._expr(node.about, level) + ") "
        if len(arms) == 0:
            return head + "{}"
        return head + "{\n" + ",\n".join(arms) + "\n" + self._INDENT * level + "}"

    def _loop(self, node: ALoop, level: int) -> str:
        if len(node.statements) == 0:
            return "loop {}"
        if len(node.statements) == 1:
            single = self._statement(node.statements[0], level + 1)
            if "\n" not in single:
                return "loop { " + single + " }"
        return "loop " + self._block(node.statements, level)

    def _template(self, node: ATmpl, level: int) -> str:
        out: list[str] = ["`"]
        for part in node.parts:
            if isinstance(part, AStr):
                out.append(_template_text(part.value))
            else:
                out.append("{" + self._expr(part, level) + "}")
        out.append("`")
        return "".join(out)

    def _array(self, node: AArr, level: int) -> str:
        items: list[str] = []
        for item in node.items:
            items.append(self._expr(item, level + 1))
        multiline = False
        for item_text in items:
            if "\n" in item_text:
                multiline = True
        if not multiline:
            return "[" + ", ".join(items) + "]"
        pad = self._INDENT * (level + 1)
        return "[\n" + ",\n".join(pad + t for t in items) + "\n" + self._INDENT * level + "]"

    def _object(self, node: AObj, level: int) -> str:
        if len(node.entries) == 0:
            return "{}"
        entries: list[str] = []
        multiline = False
        for key, value in node.entries.items():
            key_text = key if _is_plain_key(key) else _quote(key)
            value_text = self._expr(value, level + 1)
            if "\n" in value_text:
                multiline = True
            entries.append(key_text + ": " + value_text)
        if not multiline:
            return "{" + ", ".join(entries) + "}"
        pad = self._INDENT * (level + 1)
        return "{\n" + ",\n".join(pad + e for e in entries) + "\n" + self._INDENT * level + "}"
