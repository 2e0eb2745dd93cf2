"""Conversion context — plugin records, errors and the services plugins share."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from ..aiscript.ast import AExpr, AIdent, ANode, Loc
from ..frontend.ast import Node, SourceFile
from ..frontend.frontend import ModuleResolutionError

if TYPE_CHECKING:
    from ..frontend.checker import TypeChecker
    from .engine import Converter

GEN_PREFIX = "__gen_"

# Names the output language reserves, including words held for future syntax
RESERVED_WORDS: set[str] = {
    "null",
    "true",
    "false",
    "each",
    "for",
    "loop",
    "do",
    "while",
    "break",
    "continue",
    "match",
    "case",
    "default",
    "if",
    "elif",
    "else",
    "return",
    "eval",
    "var",
    "let",
    "exists",
    "as",
    "async",
    "attr",
    "attribute",
    "await",
    "catch",
    "class",
    "component",
    "constructor",
    "dictionary",
    "enum",
    "export",
    "finally",
    "fn",
    "hash",
    "in",
    "interface",
    "out",
    "private",
    "public",
    "ref",
    "static",
    "struct",
    "table",
    "this",
    "throw",
    "trait",
    "try",
    "undefined",
    "use",
    "using",
    "when",
    "yield",
    "import",
    "is",
    "meta",
    "module",
    "namespace",
    "new",
}


# ============================================================
# ERRORS
# ============================================================


class ConvertError(Exception):
    """Conversion failure bound to a source node."""

    def __init__(self, msg: str, node: Node | None, file: str = ""):
        self.msg: str = msg
        self.node: Node | None = node
        self.file: str = file
        self.line: int = node.span.line if node is not None else 0
        self.col: int = node.span.col if node is not None else 0
        self.end_line: int = node.span.end_line if node is not None else 0
        self.end_col: int = node.span.end_col if node is not None else 0
        super().__init__(msg + " at line " + str(self.line) + " col " + str(self.col))


class UnsupportedSyntaxError(ConvertError):
    """No plugin converts the construct, or a plugin rejects it outright."""


class SemanticError(ConvertError):
    """Reserved name, missing initializer, fallthrough, unsupported pattern shape."""


class TypeViolation(ConvertError):
    """A type-gated construct received a value of the wrong type."""


# ============================================================
# PLUGINS
# ============================================================


@dataclass
class ConvertPlugin:
    """Capability record: up to three optional converters.

    Each returns None to decline the node. Any other result, including an
    empty list, is final.
    """

    name: str
    expression: Callable[[Node], AExpr | None] | None = None
    expression_statements: Callable[[Node], list[ANode] | None] | None = None
    statement: Callable[[Node], list[ANode] | None] | None = None


PluginFactory = Callable[["ConvertContext"], ConvertPlugin]


@dataclass
class ModuleResult:
    """Converted module body plus its export table (export name -> local name)."""

    statements: list[ANode]
    exports: dict[str, str] = field(default_factory=dict)


ModuleRefResolver = Callable[[str, Node], AIdent]


def base36(n: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    if n == 0:
        return "0"
    out: list[str] = []
    while n > 0:
        n, r = divmod(n, 36)
        out.append(digits[r])
    return "".join(reversed(out))


def node_loc(node: Node) -> Loc:
    span = node.span
    return Loc(span.line, span.col, span.end_line, span.end_col)


# ============================================================
# CONTEXT
# ============================================================


class ConvertContext:
    """Services handed to plugins while one module is converted."""

    def __init__(
        self,
        engine: Converter,
        source_file: SourceFile,
        checker: TypeChecker,
        factories: list[PluginFactory],
        module_ref: ModuleRefResolver | None = None,
    ):
        self.engine: Converter = engine
        self.source_file: SourceFile = source_file
        self.checker: TypeChecker = checker
        self.exports: dict[str, str] = {}
        self._module_ref: ModuleRefResolver | None = module_ref
        self.plugins: list[ConvertPlugin] = [factory(self) for factory in factories]

    # ── Dispatch ────────────────────────────────────────────

    def expression(self, expr: Node) -> AExpr:
        """Convert a node that must produce an output expression."""
        for plugin in self.plugins:
            if plugin.expression is None:
                continue
            result = plugin.expression(expr)
            if result is not None:
                _stamp(result, expr)
                return result
        raise self.unsupported("no conversion for " + type(expr).__name__, expr)

    def expression_statements(self, expr: Node) -> list[ANode]:
        """Convert an expression in statement position."""
        for plugin in self.plugins:
            if plugin.expression_statements is not None:
                result = plugin.expression_statements(expr)
                if result is not None:
                    for node in result:
                        _stamp(node, expr)
                    return result
            if plugin.expression is not None:
                single = plugin.expression(expr)
                if single is not None:
                    _stamp(single, expr)
                    return [single]
        raise self.unsupported("no conversion for " + type(expr).__name__, expr)

    def statement(self, stmt: Node) -> list[ANode]:
        for plugin in self.plugins:
            if plugin.statement is None:
                continue
            result = plugin.statement(stmt)
            if result is not None:
                for node in result:
                    _stamp(node, stmt)
                return result
        raise self.unsupported("no conversion for " + type(stmt).__name__, stmt)

    def statements(self, stmts: list[Node]) -> list[ANode]:
        out: list[ANode] = []
        for stmt in stmts:
            out.extend(self.statement(stmt))
        return out

    # ── Services ────────────────────────────────────────────

    def unique_identifier(self) -> AIdent:
        return self.engine.unique_identifier()

    def validate_name(self, name: str, node: Node) -> None:
        if name in RESERVED_WORDS:
            raise self.semantic("'" + name + "' is a reserved word and cannot be used as a name", node)

    def module_ref(self, specifier: str, node: Node) -> AIdent:
        """Identifier holding the export table of the module `specifier` names."""
        if self._module_ref is None:
            raise ModuleResolutionError(
                "cannot import '" + specifier + "' when converting a single source",
                self.source_file.file_name,
                node.span.line,
                node.span.col,
            )
        return self._module_ref(specifier, node)

    def add_export(self, name: str, local: str | None = None) -> None:
        self.exports[name] = local if local is not None else name

    # ── Errors ──────────────────────────────────────────────

    def unsupported(self, msg: str, node: Node) -> UnsupportedSyntaxError:
        return UnsupportedSyntaxError(msg, node, self.source_file.file_name)

    def semantic(self, msg: str, node: Node) -> SemanticError:
        return SemanticError(msg, node, self.source_file.file_name)

    def type_violation(self, msg: str, node: Node) -> TypeViolation:
        return TypeViolation(msg, node, self.source_file.file_name)


def _stamp(result: ANode, node: Node) -> None:
    """Give a converted node the source span of its origin unless it has one."""
    if result.loc.line == 0:
        result.loc = node_loc(node)
