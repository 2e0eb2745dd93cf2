"""Scope analysis and name binding.

Builds nested scopes for a parsed SourceFile, creates one Symbol per
declaration and attaches the resolved Symbol to every identifier reference.
Symbols are the binding identities the bundler renames: two identifiers
refer to the same variable exactly when they carry the same Symbol object.

Scoping: global (the ambient prelude) → module → function → block. `var`
declarations hoist to the nearest function scope; `let`, `const`, classes,
enums and block-level functions stay in the block that declares them. Types
and values live in separate tables of the same scope.
"""

from __future__ import annotations

from .ast import (
    ArrayBindingPattern,
    ArrayLiteralExpression,
    ArrayType,
    ArrowFunction,
    AsExpression,
    AwaitExpression,
    BinaryExpression,
    BindingElement,
    Block,
    CallExpression,
    CaseClause,
    ClassDeclaration,
    ComputedPropertyName,
    ConditionalExpression,
    DefaultClause,
    DeleteExpression,
    DoStatement,
    ElementAccessExpression,
    EnumDeclaration,
    ExportAssignment,
    ExportDeclaration,
    Expression,
    ExpressionStatement,
    ForInStatement,
    ForOfStatement,
    ForStatement,
    FunctionDeclaration,
    FunctionExpression,
    FunctionType,
    Identifier,
    IfStatement,
    ImportDeclaration,
    IndexedAccessType,
    IndexSignature,
    InterfaceDeclaration,
    IntersectionType,
    LabeledStatement,
    MethodDeclaration,
    MethodSignature,
    ModuleDeclaration,
    NewExpression,
    Node,
    NonNullExpression,
    NumericLiteral,
    ObjectBindingPattern,
    ObjectLiteralExpression,
    OmittedExpression,
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
    Statement,
    StringLiteral,
    SwitchStatement,
    TemplateExpression,
    ThrowStatement,
    TryStatement,
    TupleType,
    TypeAliasDeclaration,
    TypeLiteral,
    TypeNode,
    TypeOfExpression,
    TypeOperator,
    TypeParameter,
    TypeQuery,
    TypeReference,
    UnionType,
    VariableDeclaration,
    VariableDeclarationList,
    VariableStatement,
    VoidExpression,
    WhileStatement,
    has_modifier,
    modifiers_of,
)
from .parse import numeric_value

# Kinds that may be declared more than once in one scope and merge
MERGEABLE: set[str] = {"var", "function", "namespace", "interface"}


class BindError(Exception):
    """Name binding error (duplicate declaration, unknown export)."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Symbol:
    """One declared binding.

    kind: "const" | "let" | "var" | "function" | "parameter" | "catch" |
    "class" | "enum" | "namespace" | "interface" | "type" | "typeparam" |
    "import" | "default".
    """

    def __init__(self, name: str, kind: str, declaration: Node, node: Identifier | None, scope: Scope):
        self.name: str = name
        self.kind: str = kind
        self.declaration: Node = declaration
        self.declarations: list[Node] = [declaration]
        self.node: Identifier | None = node
        self.scope: Scope = scope
        # Destructured bindings: steps from the declaration's value to this name
        self.binding_path: list[tuple[str, str | int]] = []
        # for-of / for-in loop variables: the iterated expression
        self.iterated: Expression | None = None
        # Namespaces: the scope holding their members
        self.members: Scope | None = None
        # Imports: specifier text, imported name ("default", "*" or an export name)
        self.module_specifier: str | None = None
        self.import_name: str | None = None
        # Imports after linking: the exporting module's Symbol, or the SourceFile for "*"
        self.target: Symbol | SourceFile | None = None

    @property
    def file_name(self) -> str:
        return self.scope.file_name

    def resolve(self) -> Symbol | SourceFile:
        """Follow import links to the originating binding."""
        sym: Symbol = self
        seen: set[int] = set()
        while sym.kind == "import" and sym.target is not None and id(sym) not in seen:
            seen.add(id(sym))
            target = sym.target
            if isinstance(target, SourceFile):
                return target
            sym = target
        return sym

    def __repr__(self) -> str:
        return "Symbol(" + self.name + ", " + self.kind + ", " + self.scope.file_name + ")"


class Scope:
    """A lexical scope with separate value and type tables."""

    def __init__(self, kind: str, parent: Scope | None, file_name: str = ""):
        self.kind: str = kind  # "global" | "module" | "namespace" | "function" | "block"
        self.parent: Scope | None = parent
        self.file_name: str = file_name if file_name != "" or parent is None else parent.file_name
        self.values: dict[str, Symbol] = {}
        self.types: dict[str, Symbol] = {}

    def lookup_value(self, name: str) -> Symbol | None:
        scope: Scope | None = self
        while scope is not None:
            sym = scope.values.get(name)
            if sym is not None:
                return sym
            scope = scope.parent
        return None

    def lookup_type(self, name: str) -> Symbol | None:
        scope: Scope | None = self
        while scope is not None:
            sym = scope.types.get(name)
            if sym is not None:
                return sym
            scope = scope.parent
        return None

    def function_scope(self) -> Scope:
        """Nearest scope that receives hoisted `var` declarations."""
        scope: Scope = self
        while scope.kind == "block" and scope.parent is not None:
            scope = scope.parent
        return scope

    def __repr__(self) -> str:
        return "Scope(" + self.kind + ", " + str(sorted(self.values)) + ")"


def binding_identifiers(name: Node) -> list[Identifier]:
    """Every identifier bound by a binding name, in source order."""
    result: list[Identifier] = []
    if isinstance(name, Identifier):
        result.append(name)
    elif isinstance(name, ObjectBindingPattern) or isinstance(name, ArrayBindingPattern):
        for element in name.elements:
            if isinstance(element, BindingElement):
                result.extend(binding_identifiers(element.name))
    return result


def property_key(name: Node) -> str | None:
    """Text of a non-computed property name."""
    if isinstance(name, Identifier):
        return name.name
    if isinstance(name, StringLiteral):
        return name.value
    if isinstance(name, NumericLiteral):
        value = numeric_value(name.text)
        if value.is_integer():
            return str(int(value))
        return repr(value)
    return None


class Binder:
    """Binds one SourceFile against a parent (global) scope."""

    def __init__(self, source_file: SourceFile, parent: Scope | None):
        self.source_file: SourceFile = source_file
        kind = "module" if parent is not None else "global"
        self.module_scope: Scope = Scope(kind, parent, source_file.file_name)

    def error(self, node: Node, msg: str) -> BindError:
        return BindError(msg, node.span.line, node.span.col)

    def bind(self) -> SourceFile:
        """Main entry point: hoist, resolve references, build the export table."""
        sf = self.source_file
        sf.scope = self.module_scope
        self._hoist_vars(sf.statements, self.module_scope)
        self._hoist(sf.statements, self.module_scope)
        for stmt in sf.statements:
            self._visit_statement(stmt, self.module_scope)
        self._collect_exports()
        return sf

    # ── Declarations ─────────────────────────────────────────

    def _declare(
        self,
        table: dict[str, Symbol],
        scope: Scope,
        ident: Identifier,
        kind: str,
        decl: Node,
    ) -> Symbol:
        existing = table.get(ident.name)
        if existing is not None:
            if (existing.kind == kind and kind in MERGEABLE) or (
                existing.kind == "parameter" and kind == "var"
            ):
                if decl not in existing.declarations:
                    existing.declarations.append(decl)
                ident.symbol = existing
                return existing
            line = existing.node.span.line if existing.node is not None else 0
            raise self.error(
                ident, "'" + ident.name + "' already declared at line " + str(line)
            )
        sym = Symbol(ident.name, kind, decl, ident, scope)
        table[ident.name] = sym
        ident.symbol = sym
        return sym

    def _declare_binding(
        self,
        name: Node,
        scope: Scope,
        kind: str,
        decl: Node,
        path: list[tuple[str, str | int]],
        iterated: Expression | None,
    ) -> None:
        if isinstance(name, Identifier):
            sym = self._declare(scope.values, scope, name, kind, decl)
            sym.binding_path = path
            sym.iterated = iterated
            return
        if isinstance(name, ObjectBindingPattern):
            for element in name.elements:
                if element.rest:
                    step: tuple[str, str | int] = ("rest", "")
                else:
                    key_node = element.property_name if element.property_name is not None else element.name
                    key = property_key(key_node)
                    step = ("prop", key if key is not None else "")
                self._declare_binding(element.name, scope, kind, decl, path + [step], iterated)
            return
        if isinstance(name, ArrayBindingPattern):
            index = 0
            while index < len(name.elements):
                element = name.elements[index]
                if isinstance(element, BindingElement):
                    kind_step = "rest" if element.rest else "index"
                    self._declare_binding(
                        element.name, scope, kind, decl, path + [(kind_step, index)], iterated
                    )
                index += 1

    def _hoist(self, statements: list[Statement], scope: Scope) -> None:
        """Declare the block-scoped names of one statement list."""
        for stmt in statements:
            if isinstance(stmt, VariableStatement):
                decl_list = stmt.declaration_list
                if decl_list.kind != "var":
                    for decl in decl_list.declarations:
                        self._declare_binding(decl.name, scope, decl_list.kind, decl, [], None)
            elif isinstance(stmt, FunctionDeclaration):
                if stmt.name is not None:
                    self._declare(scope.values, scope, stmt.name, "function", stmt)
            elif isinstance(stmt, ClassDeclaration):
                if stmt.name is not None:
                    sym = self._declare(scope.values, scope, stmt.name, "class", stmt)
                    scope.types[stmt.name.name] = sym
            elif isinstance(stmt, EnumDeclaration):
                sym = self._declare(scope.values, scope, stmt.name, "enum", stmt)
                scope.types[stmt.name.name] = sym
            elif isinstance(stmt, InterfaceDeclaration):
                self._declare(scope.types, scope, stmt.name, "interface", stmt)
            elif isinstance(stmt, TypeAliasDeclaration):
                self._declare(scope.types, scope, stmt.name, "type", stmt)
            elif isinstance(stmt, ModuleDeclaration):
                sym = self._declare(scope.values, scope, stmt.name, "namespace", stmt)
                if sym.members is None:
                    sym.members = Scope("namespace", scope)
                stmt.scope = sym.members
            elif isinstance(stmt, ImportDeclaration):
                self._hoist_import(stmt, scope)

    def _hoist_import(self, stmt: ImportDeclaration, scope: Scope) -> None:
        clause = stmt.import_clause
        if clause is None:
            return
        bindings: list[tuple[Identifier, str]] = []
        if clause.name is not None:
            bindings.append((clause.name, "default"))
        if clause.namespace is not None:
            bindings.append((clause.namespace, "*"))
        if clause.elements is not None:
            for spec in clause.elements:
                imported = spec.property_name if spec.property_name is not None else spec.name
                bindings.append((spec.name, imported.name))
        for ident, imported_name in bindings:
            sym = self._declare(scope.values, scope, ident, "import", stmt)
            scope.types[ident.name] = sym
            sym.module_specifier = stmt.module_specifier.value
            sym.import_name = imported_name
            self.source_file.imports.append(sym)

    def _hoist_vars(self, statements: list[Statement], scope: Scope) -> None:
        """Declare every `var` reachable without crossing a function boundary."""
        for stmt in statements:
            self._hoist_vars_in(stmt, scope)

    def _hoist_vars_in(self, stmt: Node, scope: Scope) -> None:
        if isinstance(stmt, VariableStatement):
            self._hoist_var_list(stmt.declaration_list, scope, None)
        elif isinstance(stmt, Block):
            self._hoist_vars(stmt.statements, scope)
        elif isinstance(stmt, IfStatement):
            self._hoist_vars_in(stmt.then_statement, scope)
            if stmt.else_statement is not None:
                self._hoist_vars_in(stmt.else_statement, scope)
        elif isinstance(stmt, ForStatement):
            if isinstance(stmt.initializer, VariableDeclarationList):
                self._hoist_var_list(stmt.initializer, scope, None)
            self._hoist_vars_in(stmt.statement, scope)
        elif isinstance(stmt, ForOfStatement) or isinstance(stmt, ForInStatement):
            if isinstance(stmt.initializer, VariableDeclarationList):
                self._hoist_var_list(stmt.initializer, scope, stmt.expression)
            self._hoist_vars_in(stmt.statement, scope)
        elif isinstance(stmt, WhileStatement) or isinstance(stmt, DoStatement):
            self._hoist_vars_in(stmt.statement, scope)
        elif isinstance(stmt, LabeledStatement):
            self._hoist_vars_in(stmt.statement, scope)
        elif isinstance(stmt, SwitchStatement):
            for clause in stmt.clauses:
                if isinstance(clause, CaseClause) or isinstance(clause, DefaultClause):
                    self._hoist_vars(clause.statements, scope)
        elif isinstance(stmt, TryStatement):
            self._hoist_vars(stmt.try_block.statements, scope)
            if stmt.catch_clause is not None:
                self._hoist_vars(stmt.catch_clause.block.statements, scope)
            if stmt.finally_block is not None:
                self._hoist_vars(stmt.finally_block.statements, scope)

    def _hoist_var_list(
        self, decl_list: VariableDeclarationList, scope: Scope, iterated: Expression | None
    ) -> None:
        if decl_list.kind != "var":
            return
        for decl in decl_list.declarations:
            self._declare_binding(decl.name, scope, "var", decl, [], iterated)

    def _declare_type_params(self, params: list[TypeParameter], scope: Scope) -> None:
        for param in params:
            self._declare(scope.types, scope, param.name, "typeparam", param)
        for param in params:
            if param.constraint is not None:
                self._visit_type(param.constraint, scope)
            if param.default is not None:
                self._visit_type(param.default, scope)

    # ── Statements ───────────────────────────────────────────

    def _visit_statements(self, statements: list[Statement], scope: Scope) -> None:
        for stmt in statements:
            self._visit_statement(stmt, scope)

    def _visit_block(self, block: Block, parent: Scope) -> None:
        scope = Scope("block", parent)
        self._hoist(block.statements, scope)
        self._visit_statements(block.statements, scope)

    def _visit_body(self, stmt: Statement, scope: Scope) -> None:
        if isinstance(stmt, Block):
            self._visit_block(stmt, scope)
        else:
            self._visit_statement(stmt, scope)

    def _visit_statement(self, stmt: Statement, scope: Scope) -> None:
        if isinstance(stmt, VariableStatement):
            self._visit_declaration_list(stmt.declaration_list, scope)
        elif isinstance(stmt, FunctionDeclaration):
            self._visit_function(stmt.type_params, stmt.params, stmt.body, stmt.return_type, scope, None)
        elif isinstance(stmt, ClassDeclaration):
            pass
        elif isinstance(stmt, EnumDeclaration):
            for member in stmt.members:
                if member.initializer is not None:
                    self._visit_expression(member.initializer, scope)
        elif isinstance(stmt, InterfaceDeclaration):
            type_scope = Scope("block", scope)
            self._declare_type_params(stmt.type_params, type_scope)
            for ref in stmt.heritage:
                self._visit_type(ref, type_scope)
            self._visit_type_members(stmt.members, type_scope)
        elif isinstance(stmt, TypeAliasDeclaration):
            type_scope = Scope("block", scope)
            self._declare_type_params(stmt.type_params, type_scope)
            self._visit_type(stmt.type, type_scope)
        elif isinstance(stmt, ModuleDeclaration):
            members = stmt.scope if stmt.scope is not None else Scope("namespace", scope)
            self._hoist_vars(stmt.statements, members)
            self._hoist(stmt.statements, members)
            self._visit_statements(stmt.statements, members)
        elif isinstance(stmt, ImportDeclaration) or isinstance(stmt, ExportDeclaration):
            pass
        elif isinstance(stmt, ExportAssignment):
            self._visit_expression(stmt.expression, scope)
        elif isinstance(stmt, Block):
            self._visit_block(stmt, scope)
        elif isinstance(stmt, ExpressionStatement):
            self._visit_expression(stmt.expression, scope)
        elif isinstance(stmt, ReturnStatement):
            if stmt.expression is not None:
                self._visit_expression(stmt.expression, scope)
        elif isinstance(stmt, ThrowStatement):
            self._visit_expression(stmt.expression, scope)
        elif isinstance(stmt, IfStatement):
            self._visit_expression(stmt.expression, scope)
            self._visit_body(stmt.then_statement, scope)
            if stmt.else_statement is not None:
                self._visit_body(stmt.else_statement, scope)
        elif isinstance(stmt, WhileStatement):
            self._visit_expression(stmt.expression, scope)
            self._visit_body(stmt.statement, scope)
        elif isinstance(stmt, DoStatement):
            self._visit_body(stmt.statement, scope)
            self._visit_expression(stmt.expression, scope)
        elif isinstance(stmt, ForStatement):
            loop_scope = Scope("block", scope)
            init = stmt.initializer
            if isinstance(init, VariableDeclarationList):
                if init.kind != "var":
                    for decl in init.declarations:
                        self._declare_binding(decl.name, loop_scope, init.kind, decl, [], None)
                self._visit_declaration_list(init, loop_scope)
            elif isinstance(init, Expression):
                self._visit_expression(init, loop_scope)
            if stmt.condition is not None:
                self._visit_expression(stmt.condition, loop_scope)
            if stmt.incrementor is not None:
                self._visit_expression(stmt.incrementor, loop_scope)
            self._visit_body(stmt.statement, loop_scope)
        elif isinstance(stmt, ForOfStatement) or isinstance(stmt, ForInStatement):
            self._visit_expression(stmt.expression, scope)
            loop_scope = Scope("block", scope)
            init = stmt.initializer
            if isinstance(init, VariableDeclarationList):
                if init.kind != "var":
                    for decl in init.declarations:
                        self._declare_binding(decl.name, loop_scope, init.kind, decl, [], stmt.expression)
                self._visit_declaration_list(init, loop_scope)
            elif isinstance(init, Expression):
                self._visit_expression(init, loop_scope)
            self._visit_body(stmt.statement, loop_scope)
        elif isinstance(stmt, SwitchStatement):
            self._visit_expression(stmt.expression, scope)
            case_scope = Scope("block", scope)
            for clause in stmt.clauses:
                if isinstance(clause, CaseClause) or isinstance(clause, DefaultClause):
                    self._hoist(clause.statements, case_scope)
            for clause in stmt.clauses:
                if isinstance(clause, CaseClause):
                    self._visit_expression(clause.expression, case_scope)
                    self._visit_statements(clause.statements, case_scope)
                elif isinstance(clause, DefaultClause):
                    self._visit_statements(clause.statements, case_scope)
        elif isinstance(stmt, TryStatement):
            self._visit_block(stmt.try_block, scope)
            if stmt.catch_clause is not None:
                catch_scope = Scope("block", scope)
                if stmt.catch_clause.variable is not None:
                    self._declare_binding(
                        stmt.catch_clause.variable, catch_scope, "catch", stmt.catch_clause, [], None
                    )
                self._visit_block(stmt.catch_clause.block, catch_scope)
            if stmt.finally_block is not None:
                self._visit_block(stmt.finally_block, scope)
        elif isinstance(stmt, LabeledStatement):
            self._visit_statement(stmt.statement, scope)

    def _visit_declaration_list(self, decl_list: VariableDeclarationList, scope: Scope) -> None:
        for decl in decl_list.declarations:
            self._visit_declaration(decl, scope)

    def _visit_declaration(self, decl: VariableDeclaration, scope: Scope) -> None:
        if decl.type is not None:
            self._visit_type(decl.type, scope)
        self._visit_pattern_defaults(decl.name, scope)
        if decl.initializer is not None:
            self._visit_expression(decl.initializer, scope)

    def _visit_pattern_defaults(self, name: Node, scope: Scope) -> None:
        if isinstance(name, ObjectBindingPattern) or isinstance(name, ArrayBindingPattern):
            for element in name.elements:
                if isinstance(element, BindingElement):
                    if isinstance(element.property_name, ComputedPropertyName):
                        self._visit_expression(element.property_name.expression, scope)
                    if element.initializer is not None:
                        self._visit_expression(element.initializer, scope)
                    self._visit_pattern_defaults(element.name, scope)

    def _visit_function(
        self,
        type_params: list[TypeParameter],
        params: list[Parameter],
        body: Node | None,
        return_type: TypeNode | None,
        scope: Scope,
        self_name: Identifier | None,
    ) -> None:
        fn_scope = Scope("function", scope)
        if self_name is not None:
            self._declare(fn_scope.values, fn_scope, self_name, "function", self_name)
        self._declare_type_params(type_params, fn_scope)
        for param in params:
            if isinstance(param.name, Identifier) and param.name.name == "this":
                continue
            self._declare_binding(param.name, fn_scope, "parameter", param, [], None)
        for param in params:
            if param.type is not None:
                self._visit_type(param.type, fn_scope)
            self._visit_pattern_defaults(param.name, fn_scope)
            if param.initializer is not None:
                self._visit_expression(param.initializer, fn_scope)
        if return_type is not None:
            self._visit_type(return_type, fn_scope)
        if isinstance(body, Block):
            self._hoist_vars(body.statements, fn_scope)
            self._hoist(body.statements, fn_scope)
            self._visit_statements(body.statements, fn_scope)
        elif isinstance(body, Expression):
            self._visit_expression(body, fn_scope)

    # ── Expressions ──────────────────────────────────────────

    def _visit_expression(self, expr: Node, scope: Scope) -> None:
        if isinstance(expr, Identifier):
            expr.symbol = scope.lookup_value(expr.name)
        elif isinstance(expr, PropertyAccessExpression):
            self._visit_expression(expr.expression, scope)
        elif isinstance(expr, ElementAccessExpression):
            self._visit_expression(expr.expression, scope)
            self._visit_expression(expr.argument, scope)
        elif isinstance(expr, CallExpression) or isinstance(expr, NewExpression):
            self._visit_expression(expr.expression, scope)
            for arg in expr.arguments:
                self._visit_expression(arg, scope)
        elif isinstance(expr, BinaryExpression):
            self._visit_expression(expr.left, scope)
            self._visit_expression(expr.right, scope)
        elif isinstance(expr, ConditionalExpression):
            self._visit_expression(expr.condition, scope)
            self._visit_expression(expr.when_true, scope)
            self._visit_expression(expr.when_false, scope)
        elif isinstance(expr, PrefixUnaryExpression) or isinstance(expr, PostfixUnaryExpression):
            self._visit_expression(expr.operand, scope)
        elif (
            isinstance(expr, ParenthesizedExpression)
            or isinstance(expr, SpreadElement)
            or isinstance(expr, NonNullExpression)
            or isinstance(expr, TypeOfExpression)
            or isinstance(expr, VoidExpression)
            or isinstance(expr, DeleteExpression)
            or isinstance(expr, AwaitExpression)
        ):
            self._visit_expression(expr.expression, scope)
        elif isinstance(expr, AsExpression) or isinstance(expr, SatisfiesExpression):
            self._visit_expression(expr.expression, scope)
            if not (isinstance(expr.type, TypeReference) and expr.type.name == "const"):
                self._visit_type(expr.type, scope)
        elif isinstance(expr, ArrowFunction):
            self._visit_function(expr.type_params, expr.params, expr.body, expr.return_type, scope, None)
        elif isinstance(expr, FunctionExpression):
            self._visit_function(expr.type_params, expr.params, expr.body, expr.return_type, scope, expr.name)
        elif isinstance(expr, ArrayLiteralExpression):
            for element in expr.elements:
                self._visit_expression(element, scope)
        elif isinstance(expr, ObjectLiteralExpression):
            for prop in expr.properties:
                self._visit_object_member(prop, scope)
        elif isinstance(expr, TemplateExpression):
            for span in expr.spans:
                self._visit_expression(span.expression, scope)
        elif isinstance(expr, OmittedExpression):
            pass

    def _visit_object_member(self, prop: Node, scope: Scope) -> None:
        if isinstance(prop, PropertyAssignment):
            if isinstance(prop.name, ComputedPropertyName):
                self._visit_expression(prop.name.expression, scope)
            self._visit_expression(prop.initializer, scope)
        elif isinstance(prop, ShorthandPropertyAssignment):
            prop.name.symbol = scope.lookup_value(prop.name.name)
            if prop.default is not None:
                self._visit_expression(prop.default, scope)
        elif isinstance(prop, SpreadAssignment):
            self._visit_expression(prop.expression, scope)
        elif isinstance(prop, MethodDeclaration):
            if isinstance(prop.name, ComputedPropertyName):
                self._visit_expression(prop.name.expression, scope)
            self._visit_function([], prop.params, prop.body, prop.return_type, scope, None)

    # ── Types ────────────────────────────────────────────────

    def _resolve_type_name(self, name: str, scope: Scope) -> Symbol | None:
        """Resolve `Foo` in type space, `Ns.Foo` through namespace members."""
        parts = name.split(".")
        if len(parts) == 1:
            return scope.lookup_type(name)
        sym = scope.lookup_value(parts[0])
        for part in parts[1:]:
            if sym is None or sym.members is None:
                return None
            member = sym.members.types.get(part)
            if member is None:
                member = sym.members.values.get(part)
            sym = member
        return sym

    def _visit_type(self, t: Node, scope: Scope) -> None:
        if isinstance(t, TypeReference):
            t.symbol = self._resolve_type_name(t.name, scope)
            for arg in t.args:
                self._visit_type(arg, scope)
        elif isinstance(t, ArrayType):
            self._visit_type(t.element, scope)
        elif isinstance(t, TupleType):
            for element in t.elements:
                self._visit_type(element, scope)
        elif isinstance(t, UnionType) or isinstance(t, IntersectionType):
            for member in t.types:
                self._visit_type(member, scope)
        elif isinstance(t, TypeOperator):
            self._visit_type(t.type, scope)
        elif isinstance(t, IndexedAccessType):
            self._visit_type(t.object_type, scope)
            self._visit_type(t.index_type, scope)
        elif isinstance(t, FunctionType):
            for param in t.params:
                if param.type is not None:
                    self._visit_type(param.type, scope)
            self._visit_type(t.return_type, scope)
        elif isinstance(t, TypeLiteral):
            self._visit_type_members(t.members, scope)
        elif isinstance(t, TypeQuery):
            self._visit_expression(t.expression, scope)

    def _visit_type_members(self, members: list[Node], scope: Scope) -> None:
        for member in members:
            if isinstance(member, PropertySignature):
                if member.type is not None:
                    self._visit_type(member.type, scope)
            elif isinstance(member, MethodSignature):
                for param in member.params:
                    if param.type is not None:
                        self._visit_type(param.type, scope)
                if member.return_type is not None:
                    self._visit_type(member.return_type, scope)
            elif isinstance(member, IndexSignature):
                self._visit_type(member.key_type, scope)
                self._visit_type(member.type, scope)

    # ── Exports ──────────────────────────────────────────────

    def _collect_exports(self) -> None:
        sf = self.source_file
        scope = self.module_scope
        for stmt in sf.statements:
            if isinstance(stmt, ExportDeclaration):
                if stmt.module_specifier is not None or stmt.elements is None:
                    continue
                for spec in stmt.elements:
                    local = spec.property_name if spec.property_name is not None else spec.name
                    sym = scope.values.get(local.name)
                    if sym is None:
                        sym = scope.types.get(local.name)
                    if sym is None:
                        raise self.error(local, "cannot find name '" + local.name + "' to export")
                    local.symbol = sym
                    sf.exports[spec.name.name] = sym
                continue
            if isinstance(stmt, ExportAssignment):
                if not stmt.is_default:
                    continue
                expr = stmt.expression
                if isinstance(expr, Identifier) and expr.symbol is not None:
                    sf.exports["default"] = expr.symbol
                else:
                    sf.exports["default"] = Symbol("default", "default", stmt, None, scope)
                continue
            mods = modifiers_of(stmt)
            if not has_modifier(mods, "export"):
                continue
            is_default = has_modifier(mods, "default")
            if isinstance(stmt, VariableStatement):
                for decl in stmt.declaration_list.declarations:
                    for ident in binding_identifiers(decl.name):
                        if ident.symbol is not None:
                            sf.exports[ident.name] = ident.symbol
            elif isinstance(stmt, FunctionDeclaration) or isinstance(stmt, ClassDeclaration):
                if stmt.name is None:
                    sf.exports["default"] = Symbol("default", "default", stmt, None, scope)
                elif stmt.name.symbol is not None:
                    sf.exports["default" if is_default else stmt.name.name] = stmt.name.symbol
            elif (
                isinstance(stmt, EnumDeclaration)
                or isinstance(stmt, InterfaceDeclaration)
                or isinstance(stmt, TypeAliasDeclaration)
                or isinstance(stmt, ModuleDeclaration)
            ):
                if stmt.name.symbol is not None:
                    sf.exports["default" if is_default else stmt.name.name] = stmt.name.symbol


def bind_file(source_file: SourceFile, parent: Scope | None) -> SourceFile:
    """Bind a parsed file. `parent` is the global scope (None for the prelude itself)."""
    return Binder(source_file, parent).bind()
