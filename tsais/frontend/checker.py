"""Type oracle — infers expression types over bound source files.

Inference is deliberately shallow: declared annotations win, initializers
and returned expressions are used otherwise, and anything the checker cannot
see through (generics, classes, unresolved names) is `any`.
"""

from __future__ import annotations

from .ast import (
    ArrayLiteralExpression,
    ArrayType,
    ArrowFunction,
    AsExpression,
    AwaitExpression,
    BinaryExpression,
    Block,
    BooleanLiteral,
    CallExpression,
    CaseClause,
    ConditionalExpression,
    DefaultClause,
    DeleteExpression,
    DoStatement,
    ElementAccessExpression,
    ExportAssignment,
    ForInStatement,
    ForOfStatement,
    ForStatement,
    FunctionDeclaration,
    FunctionExpression,
    FunctionType,
    Identifier,
    IfStatement,
    IndexedAccessType,
    IndexSignature,
    InterfaceDeclaration,
    IntersectionType,
    KeywordType,
    LabeledStatement,
    LiteralType,
    MethodDeclaration,
    MethodSignature,
    NewExpression,
    NoSubstitutionTemplateLiteral,
    Node,
    NonNullExpression,
    NullLiteral,
    NumericLiteral,
    ObjectLiteralExpression,
    Parameter,
    ParenthesizedExpression,
    PostfixUnaryExpression,
    PrefixUnaryExpression,
    PropertyAccessExpression,
    PropertyAssignment,
    PropertySignature,
    ReturnStatement,
    SatisfiesExpression,
    ShorthandPropertyAssignment,
    SourceFile,
    SpreadAssignment,
    SpreadElement,
    StringLiteral,
    SwitchStatement,
    TemplateExpression,
    TryStatement,
    TupleType,
    TypeAliasDeclaration,
    TypeLiteral,
    TypeNode,
    TypeOfExpression,
    TypeOperator,
    TypeQuery,
    TypeReference,
    UnionType,
    VariableDeclaration,
    VoidExpression,
    WhileStatement,
)
from .names import Symbol, property_key
from .parse import numeric_value
from .types import (
    ANY,
    BOOLEAN,
    NEVER,
    NULL,
    NUMBER,
    PRIMITIVES,
    STRING,
    UNDEFINED,
    UNKNOWN,
    VOID,
    ArrayOf,
    FunctionSig,
    Literal,
    ObjectShape,
    Primitive,
    Tuple,
    Type,
    Union,
    is_assignable,
    remove_nullish,
    type_to_string,
    union,
    widen,
)

ARITHMETIC_OPS: set[str] = {
    "-",
    "*",
    "/",
    "%",
    "**",
    "|",
    "&",
    "^",
    "<<",
    ">>",
    ">>>",
    "-=",
    "*=",
    "/=",
    "%=",
    "**=",
    "|=",
    "&=",
    "^=",
    "<<=",
    ">>=",
    ">>>=",
}

BOOLEAN_OPS: set[str] = {
    "==",
    "!=",
    "===",
    "!==",
    "<",
    ">",
    "<=",
    ">=",
    "in",
    "instanceof",
}

TypeEnv = dict[str, Type]


class TypeChecker:
    """Answers type queries for nodes of bound source files."""

    def __init__(self, prelude: SourceFile):
        self.prelude: SourceFile = prelude
        self._expr_types: dict[Node, Type] = {}
        self._symbol_types: dict[Symbol, Type] = {}
        self._resolving: set[Symbol] = set()
        self._interfaces: dict[tuple[Symbol, str], ObjectShape] = {}

    # ── Public ──────────────────────────────────────────────

    def type_of(self, expr: Node) -> Type:
        """Inferred type of an expression."""
        cached = self._expr_types.get(expr)
        if cached is not None:
            return cached
        t = self._infer(expr)
        self._expr_types[expr] = t
        return t

    def is_assignable(self, t: Type, kind: str) -> bool:
        return is_assignable(t, kind)

    def type_to_string(self, t: Type) -> str:
        return type_to_string(t)

    def symbol_type(self, sym: Symbol) -> Type:
        """Declared or inferred type of a value binding."""
        cached = self._symbol_types.get(sym)
        if cached is not None:
            return cached
        if sym in self._resolving:
            return ANY
        self._resolving.add(sym)
        try:
            t = self._infer_symbol(sym)
        finally:
            self._resolving.discard(sym)
        self._symbol_types[sym] = t
        return t

    # ── Symbols ─────────────────────────────────────────────

    def _infer_symbol(self, sym: Symbol) -> Type:
        if sym.kind == "import":
            target = sym.target
            if isinstance(target, SourceFile):
                return self._module_shape(target)
            if isinstance(target, Symbol):
                return self.symbol_type(target)
            return ANY
        if sym.kind in ("const", "let", "var"):
            decl = sym.declaration
            if not isinstance(decl, VariableDeclaration):
                return ANY
            if decl.type is not None:
                root = self.type_from_node(decl.type)
            elif sym.iterated is not None:
                root = self.iterated_element(self.type_of(sym.iterated))
            elif decl.initializer is not None:
                root = self.type_of(decl.initializer)
                if sym.kind != "const":
                    root = widen(root)
            else:
                root = ANY
            return self._follow_path(root, sym.binding_path)
        if sym.kind == "parameter":
            param = sym.declaration
            if not isinstance(param, Parameter):
                return ANY
            if param.type is not None:
                root = self.type_from_node(param.type)
            elif param.initializer is not None:
                root = widen(self.type_of(param.initializer))
            else:
                root = ANY
            return self._follow_path(root, sym.binding_path)
        if sym.kind == "function":
            decl = sym.declaration
            if isinstance(decl, FunctionDeclaration):
                return self._signature(decl.params, decl.return_type, decl.body)
            return ANY
        if sym.kind == "namespace":
            return self._namespace_shape(sym)
        if sym.kind == "default":
            decl = sym.declaration
            if isinstance(decl, ExportAssignment):
                return self.type_of(decl.expression)
            if isinstance(decl, FunctionDeclaration):
                return self._signature(decl.params, decl.return_type, decl.body)
        return ANY

    def _follow_path(self, t: Type, path: list[tuple[str, str | int]]) -> Type:
        for step, key in path:
            if step == "prop":
                t = self._property_type(t, str(key))
            elif step == "index":
                t = self._indexed_type(t, key if isinstance(key, int) else None)
            elif step == "rest":
                if not (isinstance(t, ArrayOf) or isinstance(t, Tuple)):
                    t = ANY
        return t

    def _namespace_shape(self, sym: Symbol) -> ObjectShape:
        def load(shape: ObjectShape) -> None:
            properties: dict[str, Type] = {}
            if sym.members is not None:
                for name, member in sym.members.values.items():
                    properties[name] = self.symbol_type(member)
            shape.set_members(properties, None)

        return ObjectShape(name="typeof " + sym.name, loader=load)

    def _module_shape(self, source_file: SourceFile) -> ObjectShape:
        def load(shape: ObjectShape) -> None:
            properties: dict[str, Type] = {}
            for name, member in source_file.exports.items():
                if member.kind not in ("interface", "type", "typeparam"):
                    properties[name] = self.symbol_type(member)
            shape.set_members(properties, None)

        return ObjectShape(name='typeof import("' + source_file.file_name + '")', loader=load)

    def _signature(
        self,
        params: list[Parameter],
        return_type: TypeNode | None,
        body: Node | None,
        env: TypeEnv | None = None,
    ) -> FunctionSig:
        param_types: list[tuple[str, Type]] = []
        for param in params:
            name = param.name.name if isinstance(param.name, Identifier) else "__" + str(len(param_types))
            if name == "this":
                continue
            if param.type is not None:
                t = self.type_from_node(param.type, env)
            elif param.initializer is not None:
                t = widen(self.type_of(param.initializer))
            else:
                t = ANY
            param_types.append((name, t))
        if return_type is not None:
            ret = self.type_from_node(return_type, env)
        elif body is None:
            ret = ANY
        elif isinstance(body, Block):
            ret = self._infer_return(body)
        else:
            ret = widen(self.type_of(body))
        return FunctionSig(param_types, ret)

    def _infer_return(self, body: Block) -> Type:
        returns: list[ReturnStatement] = []
        _collect_returns(body, returns)
        if len(returns) == 0:
            return VOID
        types: list[Type] = []
        for ret in returns:
            if ret.expression is None:
                types.append(VOID)
            else:
                types.append(widen(self.type_of(ret.expression)))
        return union(types)

    # ── Type Nodes ──────────────────────────────────────────

    def type_from_node(self, node: TypeNode, env: TypeEnv | None = None) -> Type:
        """Resolve a type annotation. `env` binds generic parameters by name."""
        if isinstance(node, KeywordType):
            return PRIMITIVES.get(node.name, ANY)
        if isinstance(node, LiteralType):
            return Literal(node.value)
        if isinstance(node, ArrayType):
            return ArrayOf(self.type_from_node(node.element, env))
        if isinstance(node, TupleType):
            return Tuple([self.type_from_node(e, env) for e in node.elements])
        if isinstance(node, UnionType):
            return union([self.type_from_node(t, env) for t in node.types])
        if isinstance(node, IntersectionType):
            return self._intersection([self.type_from_node(t, env) for t in node.types])
        if isinstance(node, FunctionType):
            return self._signature(node.params, node.return_type, None, env)
        if isinstance(node, TypeLiteral):
            return self._shape_from_members(node.members, env, None)
        if isinstance(node, TypeOperator):
            if node.operator == "keyof":
                return STRING
            return self.type_from_node(node.type, env)
        if isinstance(node, IndexedAccessType):
            return ANY
        if isinstance(node, TypeQuery):
            return self.type_of(node.expression)
        if isinstance(node, TypeReference):
            return self._reference(node, env)
        return ANY

    def _reference(self, node: TypeReference, env: TypeEnv | None) -> Type:
        if env is not None and node.name in env:
            return env[node.name]
        args = [self.type_from_node(a, env) for a in node.args]
        if node.name in ("Array", "ReadonlyArray") and len(args) == 1:
            return ArrayOf(args[0])
        sym = node.symbol
        if sym is None:
            return ANY
        origin = sym.resolve()
        if not isinstance(origin, Symbol):
            return ANY
        return self._named_type(origin, args)

    def _named_type(self, sym: Symbol, args: list[Type]) -> Type:
        if sym.kind == "interface":
            return self._interface_shape(sym, args)
        if sym.kind == "type":
            decl = sym.declaration
            if not isinstance(decl, TypeAliasDeclaration):
                return ANY
            if sym in self._resolving:
                return ANY
            self._resolving.add(sym)
            try:
                env = _bind_params([p.name.name for p in decl.type_params], args)
                t = self.type_from_node(decl.type, env)
            finally:
                self._resolving.discard(sym)
            if isinstance(t, ObjectShape) and t.name is None:
                t.name = sym.name
            return t
        return ANY

    def _interface_shape(self, sym: Symbol, args: list[Type]) -> ObjectShape:
        key = (sym, ", ".join(type_to_string(a) for a in args))
        cached = self._interfaces.get(key)
        if cached is not None:
            return cached
        decls = [d for d in sym.declarations if isinstance(d, InterfaceDeclaration)]
        param_names: list[str] = []
        if len(decls) > 0:
            param_names = [p.name.name for p in decls[0].type_params]
        env = _bind_params(param_names, args)

        def load(shape: ObjectShape) -> None:
            properties: dict[str, Type] = {}
            index: Type | None = None
            for decl in decls:
                for ref in decl.heritage:
                    base = self.type_from_node(ref, env)
                    if isinstance(base, ObjectShape):
                        properties.update(base.properties)
                        if base.index is not None:
                            index = base.index
                member_shape = self._shape_from_members(decl.members, env, None)
                properties.update(member_shape.properties)
                if member_shape.index is not None:
                    index = member_shape.index
            shape.set_members(properties, index)

        name = sym.name
        if len(args) > 0:
            name += "<" + key[1] + ">"
        shape = ObjectShape(name=name, loader=load)
        self._interfaces[key] = shape
        return shape

    def _shape_from_members(self, members: list[Node], env: TypeEnv | None, name: str | None) -> ObjectShape:
        properties: dict[str, Type] = {}
        index: Type | None = None
        for member in members:
            if isinstance(member, PropertySignature):
                if member.type is None:
                    properties[member.name] = ANY
                else:
                    properties[member.name] = self.type_from_node(member.type, env)
            elif isinstance(member, MethodSignature):
                if member.name not in properties:
                    properties[member.name] = self._signature(member.params, member.return_type, None, env)
            elif isinstance(member, IndexSignature):
                key_type = self.type_from_node(member.key_type, env)
                if key_type is STRING:
                    index = self.type_from_node(member.type, env)
        return ObjectShape(properties, index, name)

    def _intersection(self, types: list[Type]) -> Type:
        properties: dict[str, Type] = {}
        index: Type | None = None
        for t in types:
            if not isinstance(t, ObjectShape):
                return t if len(types) == 1 else ANY
            properties.update(t.properties)
            if t.index is not None:
                index = t.index
        return ObjectShape(properties, index)

    # ── Member Access ───────────────────────────────────────

    def _builtin_interface(self, name: str, args: list[Type]) -> ObjectShape | None:
        scope = self.prelude.scope
        if scope is None:
            return None
        sym = scope.types.get(name)
        if sym is None or sym.kind != "interface":
            return None
        return self._interface_shape(sym, args)

    def _property_type(self, t: Type, name: str) -> Type:
        if t is ANY or t is UNKNOWN:
            return ANY
        if isinstance(t, Union):
            members = [m for m in t.members if m is not NULL and m is not UNDEFINED]
            return union([self._property_type(m, name) for m in members])
        if isinstance(t, ArrayOf) or isinstance(t, Tuple):
            element = t.element if isinstance(t, ArrayOf) else union(t.elements)
            shape = self._builtin_interface("Array", [element])
        elif (isinstance(t, Literal) and isinstance(t.value, str)) or t is STRING:
            shape = self._builtin_interface("String", [])
        elif (isinstance(t, Literal) and isinstance(t.value, float)) or t is NUMBER:
            shape = self._builtin_interface("Number", [])
        elif isinstance(t, ObjectShape):
            shape = t
        else:
            return ANY
        if shape is None:
            return ANY
        found = shape.properties.get(name)
        if found is not None:
            return found
        if shape.index is not None:
            return shape.index
        return ANY

    def _indexed_type(self, t: Type, index: int | None) -> Type:
        if isinstance(t, ArrayOf):
            return t.element
        if isinstance(t, Tuple):
            if index is not None and 0 <= index < len(t.elements):
                return t.elements[index]
            return union(t.elements)
        if isinstance(t, Union):
            members = [m for m in t.members if m is not NULL and m is not UNDEFINED]
            return union([self._indexed_type(m, index) for m in members])
        if t is STRING or (isinstance(t, Literal) and isinstance(t.value, str)):
            return STRING
        return ANY

    def iterated_element(self, t: Type) -> Type:
        """Element type produced by iterating a value of type t."""
        return self._indexed_type(t, None)

    def _element_access_type(self, expr: ElementAccessExpression) -> Type:
        target = self.type_of(expr.expression)
        key = self.type_of(expr.argument)
        if isinstance(key, Literal) and isinstance(key.value, str):
            if isinstance(target, ObjectShape) or isinstance(target, Union):
                return self._property_type(target, key.value)
        if isinstance(target, ObjectShape):
            if target.index is not None:
                return target.index
            return ANY
        index: int | None = None
        if isinstance(key, Literal) and isinstance(key.value, float) and key.value.is_integer():
            index = int(key.value)
        return self._indexed_type(target, index)

    # ── Expressions ─────────────────────────────────────────

    def _infer(self, expr: Node) -> Type:
        if isinstance(expr, NumericLiteral):
            return Literal(numeric_value(expr.text))
        if isinstance(expr, StringLiteral):
            return Literal(expr.value)
        if isinstance(expr, NoSubstitutionTemplateLiteral):
            return Literal(expr.text)
        if isinstance(expr, TemplateExpression):
            return STRING
        if isinstance(expr, BooleanLiteral):
            return Literal(expr.value)
        if isinstance(expr, NullLiteral):
            return NULL
        if isinstance(expr, Identifier):
            return self._identifier_type(expr)
        if isinstance(expr, ParenthesizedExpression) or isinstance(expr, SatisfiesExpression):
            return self.type_of(expr.expression)
        if isinstance(expr, AsExpression):
            if isinstance(expr.type, TypeReference) and expr.type.name == "const":
                return self.type_of(expr.expression)
            return self.type_from_node(expr.type)
        if isinstance(expr, NonNullExpression):
            return remove_nullish(self.type_of(expr.expression))
        if isinstance(expr, AwaitExpression):
            return self.type_of(expr.expression)
        if isinstance(expr, TypeOfExpression):
            return STRING
        if isinstance(expr, VoidExpression):
            return UNDEFINED
        if isinstance(expr, DeleteExpression):
            return BOOLEAN
        if isinstance(expr, PrefixUnaryExpression):
            return self._prefix_type(expr)
        if isinstance(expr, PostfixUnaryExpression):
            return NUMBER
        if isinstance(expr, BinaryExpression):
            return self._binary_type(expr)
        if isinstance(expr, ConditionalExpression):
            return union([self.type_of(expr.when_true), self.type_of(expr.when_false)])
        if isinstance(expr, CallExpression):
            return self._call_type(self.type_of(expr.expression))
        if isinstance(expr, NewExpression):
            return ANY
        if isinstance(expr, PropertyAccessExpression):
            return self._property_type(self.type_of(expr.expression), expr.name.name)
        if isinstance(expr, ElementAccessExpression):
            return self._element_access_type(expr)
        if isinstance(expr, ArrowFunction):
            return self._signature(expr.params, expr.return_type, expr.body)
        if isinstance(expr, FunctionExpression):
            return self._signature(expr.params, expr.return_type, expr.body)
        if isinstance(expr, ArrayLiteralExpression):
            return self._array_literal_type(expr)
        if isinstance(expr, ObjectLiteralExpression):
            return self._object_literal_type(expr)
        if isinstance(expr, SpreadElement):
            return self.type_of(expr.expression)
        return ANY

    def _identifier_type(self, expr: Identifier) -> Type:
        if expr.symbol is not None:
            return self.symbol_type(expr.symbol)
        if expr.name == "undefined":
            return UNDEFINED
        if expr.name == "NaN" or expr.name == "Infinity":
            return NUMBER
        return ANY

    def _prefix_type(self, expr: PrefixUnaryExpression) -> Type:
        if expr.operator == "!":
            return BOOLEAN
        if expr.operator in ("-", "+") and isinstance(expr.operand, NumericLiteral):
            value = numeric_value(expr.operand.text)
            return Literal(-value if expr.operator == "-" else value)
        return NUMBER

    def _binary_type(self, expr: BinaryExpression) -> Type:
        op = expr.operator
        if op == "=" or op == ",":
            return self.type_of(expr.right)
        if op in BOOLEAN_OPS:
            return BOOLEAN
        if op in ARITHMETIC_OPS:
            return NUMBER
        left = self.type_of(expr.left)
        right = self.type_of(expr.right)
        if op == "+" or op == "+=":
            if left is ANY or right is ANY:
                return ANY
            left_string = is_assignable(left, "string") and left is not NEVER
            right_string = is_assignable(right, "string") and right is not NEVER
            if (left_string and not _is_nullish(left)) or (right_string and not _is_nullish(right)):
                return STRING
            if is_assignable(left, "number") and is_assignable(right, "number"):
                return NUMBER
            return ANY
        if op == "&&" or op == "&&=":
            if _is_boolean_like(left) and _is_boolean_like(right):
                return BOOLEAN
            return union([left, right])
        if op == "||" or op == "||=":
            return union([remove_nullish(left), right])
        if op == "??" or op == "??=":
            return union([remove_nullish(left), right])
        return ANY

    def _call_type(self, callee: Type) -> Type:
        if isinstance(callee, FunctionSig):
            return callee.ret
        if isinstance(callee, Union):
            rets: list[Type] = []
            for member in callee.members:
                if isinstance(member, FunctionSig):
                    rets.append(member.ret)
                elif member is not NULL and member is not UNDEFINED:
                    return ANY
            return union(rets)
        return ANY

    def _array_literal_type(self, expr: ArrayLiteralExpression) -> Type:
        elements: list[Type] = []
        for element in expr.elements:
            if isinstance(element, SpreadElement):
                elements.append(self.iterated_element(self.type_of(element.expression)))
            else:
                elements.append(widen(self.type_of(element)))
        if len(elements) == 0:
            return ArrayOf(ANY)
        return ArrayOf(union(elements))

    def _object_literal_type(self, expr: ObjectLiteralExpression) -> Type:
        properties: dict[str, Type] = {}
        for prop in expr.properties:
            if isinstance(prop, PropertyAssignment):
                key = property_key(prop.name)
                if key is not None:
                    properties[key] = widen(self.type_of(prop.initializer))
            elif isinstance(prop, ShorthandPropertyAssignment):
                properties[prop.name.name] = widen(self.type_of(prop.name))
            elif isinstance(prop, MethodDeclaration):
                key = property_key(prop.name)
                if key is not None:
                    properties[key] = self._signature(prop.params, prop.return_type, prop.body)
            elif isinstance(prop, SpreadAssignment):
                spread = self.type_of(prop.expression)
                if isinstance(spread, ObjectShape):
                    properties.update(spread.properties)
        return ObjectShape(properties)


def _bind_params(names: list[str], args: list[Type]) -> TypeEnv:
    env: TypeEnv = {}
    i = 0
    while i < len(names):
        env[names[i]] = args[i] if i < len(args) else ANY
        i += 1
    return env


def _is_nullish(t: Type) -> bool:
    return t is NULL or t is UNDEFINED


def _is_boolean_like(t: Type) -> bool:
    if isinstance(t, Literal):
        return isinstance(t.value, bool)
    if isinstance(t, Primitive):
        return t is BOOLEAN
    if isinstance(t, Union):
        return all(_is_boolean_like(m) for m in t.members)
    return False


def _collect_returns(node: Node, out: list[ReturnStatement]) -> None:
    """Return statements of a function body, not descending into nested functions."""
    if isinstance(node, ReturnStatement):
        out.append(node)
    elif isinstance(node, Block):
        for stmt in node.statements:
            _collect_returns(stmt, out)
    elif isinstance(node, IfStatement):
        _collect_returns(node.then_statement, out)
        if node.else_statement is not None:
            _collect_returns(node.else_statement, out)
    elif (
        isinstance(node, ForStatement)
        or isinstance(node, ForOfStatement)
        or isinstance(node, ForInStatement)
        or isinstance(node, WhileStatement)
        or isinstance(node, DoStatement)
        or isinstance(node, LabeledStatement)
    ):
        _collect_returns(node.statement, out)
    elif isinstance(node, SwitchStatement):
        for clause in node.clauses:
            if isinstance(clause, CaseClause) or isinstance(clause, DefaultClause):
                for stmt in clause.statements:
                    _collect_returns(stmt, out)
    elif isinstance(node, TryStatement):
        _collect_returns(node.try_block, out)
        if node.catch_clause is not None:
            _collect_returns(node.catch_clause.block, out)
        if node.finally_block is not None:
            _collect_returns(node.finally_block, out)
