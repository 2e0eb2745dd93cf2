"""TypeScript AST — parse-time node definitions.

Node class names follow tsc's syntax kinds so diagnostics
such as "no conversion for ClassDeclaration" read naturally. Nodes compare by
identity: the binder and the type checker key their tables on node objects.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .names import Scope, Symbol


# ============================================================
# POSITION
# ============================================================


@dataclass
class Span:
    """Offsets into the file text plus 1-indexed start/end line and column."""

    start: int
    end: int
    line: int
    col: int
    end_line: int
    end_col: int


# ============================================================
# BASE
# ============================================================


@dataclass(eq=False)
class Node:
    span: Span


@dataclass(eq=False)
class Modifier(Node):
    """export, default, declare, async, const (enum), readonly, ..."""

    kind: str


# ============================================================
# TYPES
# ============================================================


@dataclass(eq=False)
class TypeNode(Node):
    """Base for all type annotations."""


@dataclass(eq=False)
class KeywordType(TypeNode):
    """number, string, boolean, any, unknown, void, never, undefined, null, object, ..."""

    name: str


@dataclass(eq=False)
class TypeReference(TypeNode):
    """Foo, Ns.Foo, Array<T>. `symbol` is filled in by the binder."""

    name: str
    args: list[TypeNode]
    symbol: Symbol | None = field(default=None, repr=False)


@dataclass(eq=False)
class ArrayType(TypeNode):
    element: TypeNode


@dataclass(eq=False)
class TupleType(TypeNode):
    elements: list[TypeNode]


@dataclass(eq=False)
class UnionType(TypeNode):
    types: list[TypeNode]


@dataclass(eq=False)
class IntersectionType(TypeNode):
    types: list[TypeNode]


@dataclass(eq=False)
class FunctionType(TypeNode):
    params: list[Parameter]
    return_type: TypeNode


@dataclass(eq=False)
class TypeLiteral(TypeNode):
    members: list[Node]


@dataclass(eq=False)
class PropertySignature(Node):
    name: str
    optional: bool
    type: TypeNode | None


@dataclass(eq=False)
class MethodSignature(Node):
    name: str
    optional: bool
    params: list[Parameter]
    return_type: TypeNode | None


@dataclass(eq=False)
class IndexSignature(Node):
    key_type: TypeNode
    type: TypeNode


@dataclass(eq=False)
class LiteralType(TypeNode):
    """"a", 1, -1, true, false."""

    value: str | float | bool


@dataclass(eq=False)
class TypeOperator(TypeNode):
    """keyof T, readonly T."""

    operator: str
    type: TypeNode


@dataclass(eq=False)
class IndexedAccessType(TypeNode):
    object_type: TypeNode
    index_type: TypeNode


@dataclass(eq=False)
class TypeQuery(TypeNode):
    """typeof x — `expression` is an Identifier or property access chain."""

    expression: Expression


@dataclass(eq=False)
class TypeParameter(Node):
    name: Identifier
    constraint: TypeNode | None
    default: TypeNode | None


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass(eq=False)
class Expression(Node):
    """Base for all expressions."""


@dataclass(eq=False)
class Identifier(Expression):
    """Name in any position. `symbol` is set by the binder on declarations and references."""

    name: str
    symbol: Symbol | None = field(default=None, repr=False)


@dataclass(eq=False)
class NumericLiteral(Expression):
    """`text` is the literal as written (`0x1f`, `1_000`, `1e3`)."""

    text: str


@dataclass(eq=False)
class StringLiteral(Expression):
    value: str


@dataclass(eq=False)
class NoSubstitutionTemplateLiteral(Expression):
    text: str


@dataclass(eq=False)
class TemplateSpan(Node):
    expression: Expression
    literal: str


@dataclass(eq=False)
class TemplateExpression(Expression):
    head: str
    spans: list[TemplateSpan]


@dataclass(eq=False)
class BooleanLiteral(Expression):
    value: bool


@dataclass(eq=False)
class NullLiteral(Expression):
    pass


@dataclass(eq=False)
class ThisExpression(Expression):
    pass


@dataclass(eq=False)
class OmittedExpression(Expression):
    """Hole in an array literal or array pattern."""


@dataclass(eq=False)
class SpreadElement(Expression):
    expression: Expression


@dataclass(eq=False)
class ArrayLiteralExpression(Expression):
    elements: list[Expression]


@dataclass(eq=False)
class ComputedPropertyName(Node):
    expression: Expression


# Identifier | StringLiteral | NumericLiteral | ComputedPropertyName
PropertyName = Node


@dataclass(eq=False)
class PropertyAssignment(Node):
    name: PropertyName
    initializer: Expression


@dataclass(eq=False)
class ShorthandPropertyAssignment(Node):
    """`{ x }`; `{ x = 1 }` only appears in destructuring assignment targets."""

    name: Identifier
    default: Expression | None = None


@dataclass(eq=False)
class SpreadAssignment(Node):
    expression: Expression


@dataclass(eq=False)
class MethodDeclaration(Node):
    """Object-literal method; kind is "method", "get" or "set"."""

    name: PropertyName
    params: list[Parameter]
    body: Block
    return_type: TypeNode | None
    kind: str = "method"
    is_async: bool = False
    is_generator: bool = False


@dataclass(eq=False)
class ObjectLiteralExpression(Expression):
    properties: list[Node]


@dataclass(eq=False)
class ParenthesizedExpression(Expression):
    expression: Expression


@dataclass(eq=False)
class CallExpression(Expression):
    expression: Expression
    arguments: list[Expression]
    optional: bool = False


@dataclass(eq=False)
class NewExpression(Expression):
    expression: Expression
    arguments: list[Expression]


@dataclass(eq=False)
class PropertyAccessExpression(Expression):
    """`name` is a property key, never bound to a symbol."""

    expression: Expression
    name: Identifier
    optional: bool = False


@dataclass(eq=False)
class ElementAccessExpression(Expression):
    expression: Expression
    argument: Expression
    optional: bool = False


@dataclass(eq=False)
class PrefixUnaryExpression(Expression):
    """! - + ~ ++ --"""

    operator: str
    operand: Expression


@dataclass(eq=False)
class PostfixUnaryExpression(Expression):
    """++ --"""

    operand: Expression
    operator: str


@dataclass(eq=False)
class BinaryExpression(Expression):
    """Arithmetic, comparison, logical, assignment and comma operators."""

    left: Expression
    operator: str
    right: Expression


@dataclass(eq=False)
class ConditionalExpression(Expression):
    condition: Expression
    when_true: Expression
    when_false: Expression


@dataclass(eq=False)
class ArrowFunction(Expression):
    """`body` is a Block or an Expression."""

    params: list[Parameter]
    body: Node
    return_type: TypeNode | None
    type_params: list[TypeParameter] = field(default_factory=list)
    is_async: bool = False


@dataclass(eq=False)
class FunctionExpression(Expression):
    name: Identifier | None
    params: list[Parameter]
    body: Block
    return_type: TypeNode | None
    type_params: list[TypeParameter] = field(default_factory=list)
    is_async: bool = False
    is_generator: bool = False


@dataclass(eq=False)
class AsExpression(Expression):
    expression: Expression
    type: TypeNode


@dataclass(eq=False)
class SatisfiesExpression(Expression):
    expression: Expression
    type: TypeNode


@dataclass(eq=False)
class NonNullExpression(Expression):
    expression: Expression


@dataclass(eq=False)
class TypeOfExpression(Expression):
    expression: Expression


@dataclass(eq=False)
class VoidExpression(Expression):
    expression: Expression


@dataclass(eq=False)
class DeleteExpression(Expression):
    expression: Expression


@dataclass(eq=False)
class AwaitExpression(Expression):
    expression: Expression


# ============================================================
# BINDING PATTERNS
# ============================================================


@dataclass(eq=False)
class BindingElement(Node):
    """Element of a pattern. `property_name` is the key in `{ key: name }`."""

    property_name: PropertyName | None
    name: BindingName
    initializer: Expression | None = None
    rest: bool = False


@dataclass(eq=False)
class ObjectBindingPattern(Node):
    elements: list[BindingElement]


@dataclass(eq=False)
class ArrayBindingPattern(Node):
    """Elements are BindingElement or OmittedExpression (holes)."""

    elements: list[Node]


# Identifier | ObjectBindingPattern | ArrayBindingPattern
BindingName = Node


@dataclass(eq=False)
class Parameter(Node):
    name: BindingName
    type: TypeNode | None = None
    initializer: Expression | None = None
    optional: bool = False
    rest: bool = False


# ============================================================
# STATEMENTS
# ============================================================


@dataclass(eq=False)
class Statement(Node):
    """Base for all statements."""


@dataclass(eq=False)
class Block(Statement):
    statements: list[Statement]


@dataclass(eq=False)
class EmptyStatement(Statement):
    pass


@dataclass(eq=False)
class ExpressionStatement(Statement):
    expression: Expression


@dataclass(eq=False)
class VariableDeclaration(Node):
    name: BindingName
    type: TypeNode | None
    initializer: Expression | None


@dataclass(eq=False)
class VariableDeclarationList(Node):
    """kind: "const", "let" or "var"."""

    kind: str
    declarations: list[VariableDeclaration]


@dataclass(eq=False)
class VariableStatement(Statement):
    modifiers: list[Modifier]
    declaration_list: VariableDeclarationList


@dataclass(eq=False)
class FunctionDeclaration(Statement):
    """`body` is None for overload signatures and `declare function`."""

    modifiers: list[Modifier]
    name: Identifier | None
    params: list[Parameter]
    body: Block | None
    return_type: TypeNode | None
    type_params: list[TypeParameter] = field(default_factory=list)
    is_async: bool = False
    is_generator: bool = False


@dataclass(eq=False)
class ClassDeclaration(Statement):
    """Classes are recognised only so they can be rejected; members are skipped."""

    modifiers: list[Modifier]
    name: Identifier | None


@dataclass(eq=False)
class EnumMember(Node):
    name: PropertyName
    initializer: Expression | None


@dataclass(eq=False)
class EnumDeclaration(Statement):
    modifiers: list[Modifier]
    name: Identifier
    members: list[EnumMember]


@dataclass(eq=False)
class InterfaceDeclaration(Statement):
    modifiers: list[Modifier]
    name: Identifier
    type_params: list[TypeParameter]
    heritage: list[TypeReference]
    members: list[Node]


@dataclass(eq=False)
class TypeAliasDeclaration(Statement):
    modifiers: list[Modifier]
    name: Identifier
    type_params: list[TypeParameter]
    type: TypeNode


@dataclass(eq=False)
class ModuleDeclaration(Statement):
    """`namespace A { ... }` / `declare namespace A { ... }`."""

    modifiers: list[Modifier]
    name: Identifier
    statements: list[Statement]
    scope: Scope | None = field(default=None, repr=False)


@dataclass(eq=False)
class ImportSpecifier(Node):
    """`{ property_name as name }`; property_name is None without `as`."""

    property_name: Identifier | None
    name: Identifier
    type_only: bool = False


@dataclass(eq=False)
class ImportClause(Node):
    name: Identifier | None
    namespace: Identifier | None
    elements: list[ImportSpecifier] | None
    type_only: bool = False


@dataclass(eq=False)
class ImportDeclaration(Statement):
    """`import_clause` is None for side-effect imports (`import "./x"`)."""

    import_clause: ImportClause | None
    module_specifier: StringLiteral


@dataclass(eq=False)
class ExportSpecifier(Node):
    property_name: Identifier | None
    name: Identifier


@dataclass(eq=False)
class ExportDeclaration(Statement):
    """`export { a, b as c }`, `export { x } from "m"`, `export * from "m"`.

    `elements` is None for `export *`.
    """

    elements: list[ExportSpecifier] | None
    module_specifier: StringLiteral | None
    type_only: bool = False


@dataclass(eq=False)
class ExportAssignment(Statement):
    """`export default expr` (is_default) or `export = expr`."""

    expression: Expression
    is_default: bool = True


@dataclass(eq=False)
class IfStatement(Statement):
    expression: Expression
    then_statement: Statement
    else_statement: Statement | None


@dataclass(eq=False)
class DoStatement(Statement):
    statement: Statement
    expression: Expression


@dataclass(eq=False)
class WhileStatement(Statement):
    expression: Expression
    statement: Statement


@dataclass(eq=False)
class ForStatement(Statement):
    """`initializer` is a VariableDeclarationList, an Expression, or None."""

    initializer: Node | None
    condition: Expression | None
    incrementor: Expression | None
    statement: Statement


@dataclass(eq=False)
class ForOfStatement(Statement):
    initializer: Node
    expression: Expression
    statement: Statement
    is_await: bool = False


@dataclass(eq=False)
class ForInStatement(Statement):
    initializer: Node
    expression: Expression
    statement: Statement


@dataclass(eq=False)
class ContinueStatement(Statement):
    label: Identifier | None


@dataclass(eq=False)
class BreakStatement(Statement):
    label: Identifier | None


@dataclass(eq=False)
class ReturnStatement(Statement):
    expression: Expression | None


@dataclass(eq=False)
class CaseClause(Node):
    expression: Expression
    statements: list[Statement]


@dataclass(eq=False)
class DefaultClause(Node):
    statements: list[Statement]


@dataclass(eq=False)
class SwitchStatement(Statement):
    """Clauses are CaseClause or DefaultClause in source order."""

    expression: Expression
    clauses: list[Node]


@dataclass(eq=False)
class ThrowStatement(Statement):
    expression: Expression


@dataclass(eq=False)
class CatchClause(Node):
    variable: BindingName | None
    block: Block


@dataclass(eq=False)
class TryStatement(Statement):
    try_block: Block
    catch_clause: CatchClause | None
    finally_block: Block | None


@dataclass(eq=False)
class LabeledStatement(Statement):
    label: Identifier
    statement: Statement


# ============================================================
# SOURCE FILE
# ============================================================


@dataclass(eq=False)
class SourceFile(Node):
    """A parsed file. Binder results are attached after `bind_file`."""

    file_name: str
    text: str
    statements: list[Statement]
    scope: Scope | None = field(default=None, repr=False)
    exports: dict[str, Symbol] = field(default_factory=dict, repr=False)
    imports: list[Symbol] = field(default_factory=list, repr=False)


# ============================================================
# HELPERS
# ============================================================


def has_modifier(modifiers: list[Modifier], kind: str) -> bool:
    for mod in modifiers:
        if mod.kind == kind:
            return True
    return False


def modifiers_of(node: Node) -> list[Modifier]:
    """The modifier list of a declaration statement, or [] for other nodes."""
    mods = getattr(node, "modifiers", None)
    if mods is None:
        return []
    return mods


def child_nodes(node: Node) -> list[Node]:
    """Direct syntax children of a node, in field order."""
    out: list[Node] = []
    for f in fields(node):
        value = getattr(node, f.name)
        if isinstance(value, Node):
            out.append(value)
        elif isinstance(value, list):
            for item in value:
                if isinstance(item, Node):
                    out.append(item)
    return out
