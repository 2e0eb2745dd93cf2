"""TypeScript parser — recursive descent producing the frontend AST.

Statement termination is lenient: `;` is consumed when present but never
required. Restricted productions (`return`, `break`/`continue` labels,
postfix `++`/`--`, `as`, non-null `!`) honour line breaks.
"""

from __future__ import annotations

from typing import Callable, TypeVar

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
    BooleanLiteral,
    BreakStatement,
    CallExpression,
    CaseClause,
    CatchClause,
    ClassDeclaration,
    ComputedPropertyName,
    ConditionalExpression,
    ContinueStatement,
    DefaultClause,
    DeleteExpression,
    DoStatement,
    ElementAccessExpression,
    EmptyStatement,
    EnumDeclaration,
    EnumMember,
    ExportAssignment,
    ExportDeclaration,
    ExportSpecifier,
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
    ImportClause,
    ImportDeclaration,
    ImportSpecifier,
    IndexedAccessType,
    IndexSignature,
    InterfaceDeclaration,
    IntersectionType,
    KeywordType,
    LabeledStatement,
    LiteralType,
    MethodDeclaration,
    MethodSignature,
    Modifier,
    ModuleDeclaration,
    NewExpression,
    NoSubstitutionTemplateLiteral,
    Node,
    NonNullExpression,
    NullLiteral,
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
    Span,
    SpreadAssignment,
    SpreadElement,
    Statement,
    StringLiteral,
    SwitchStatement,
    TemplateExpression,
    TemplateSpan,
    ThisExpression,
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
)
from .tokens import (
    RESERVED,
    TK_EOF,
    TK_IDENT,
    TK_NUM,
    TK_OP,
    TK_STRING,
    TK_TEMPLATE,
    Token,
    tokenize,
)

T = TypeVar("T")

BINARY_PREC: dict[str, int] = {
    "??": 1,
    "||": 2,
    "&&": 3,
    "|": 4,
    "^": 5,
    "&": 6,
    "==": 7,
    "!=": 7,
    "===": 7,
    "!==": 7,
    "<": 8,
    ">": 8,
    "<=": 8,
    ">=": 8,
    "instanceof": 8,
    "in": 8,
    "<<": 9,
    ">>": 9,
    ">>>": 9,
    "+": 10,
    "-": 10,
    "*": 11,
    "/": 11,
    "%": 11,
    "**": 12,
}

RELATIONAL_PREC = 8

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
    "<<=",
    ">>=",
    ">>>=",
    "&=",
    "|=",
    "^=",
}

TYPE_KEYWORDS: set[str] = {
    "any",
    "unknown",
    "never",
    "void",
    "undefined",
    "null",
    "number",
    "string",
    "boolean",
    "object",
    "symbol",
    "bigint",
}

# A statement keyword right after `=>` is parsed as a one-statement block body
ARROW_STATEMENT_KEYWORDS: set[str] = {
    "if",
    "for",
    "while",
    "do",
    "switch",
    "return",
    "throw",
    "try",
    "var",
    "const",
    "break",
    "continue",
}

DECLARATION_KEYWORDS: set[str] = {
    "const",
    "let",
    "var",
    "function",
    "class",
    "enum",
    "interface",
    "type",
    "namespace",
    "module",
    "global",
    "abstract",
    "async",
}


class ParseError(Exception):
    """Parse error with location info."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


def numeric_value(text: str) -> float:
    """Value of a numeric literal as written: hex, binary, octal, separators, exponents."""
    clean = text.replace("_", "")
    lower = clean.lower()
    if lower.startswith("0x"):
        return float(int(clean[2:], 16))
    if lower.startswith("0b"):
        return float(int(clean[2:], 2))
    if lower.startswith("0o"):
        return float(int(clean[2:], 8))
    if len(clean) > 1 and clean[0] == "0" and clean.isdigit() and "8" not in clean and "9" not in clean:
        return float(int(clean, 8))
    return float(clean)


class Parser:
    """Recursive descent parser for the TypeScript subset."""

    def __init__(self, tokens: list[Token]):
        self.tokens: list[Token] = tokens
        self.pos: int = 0
        self._no_in: bool = False

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[len(self.tokens) - 1]
        return self.tokens[idx]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if tok.type != TK_EOF:
            self.pos += 1
        return tok

    def at(self, value: str) -> bool:
        tok = self.current()
        return tok.value == value and (tok.type == TK_OP or tok.type == TK_IDENT)

    def at_type(self, type_: str) -> bool:
        return self.current().type == type_

    def expect(self, value: str) -> Token:
        if not self.at(value):
            raise self.error("expected '" + value + "', got " + self._describe(self.current()))
        return self.advance()

    def expect_ident(self) -> Token:
        tok = self.current()
        if tok.type != TK_IDENT or tok.value in RESERVED:
            raise self.error("expected identifier, got " + self._describe(tok))
        return self.advance()

    def error(self, msg: str) -> ParseError:
        tok = self.current()
        return ParseError(msg, tok.line, tok.col)

    def _describe(self, tok: Token) -> str:
        if tok.type == TK_EOF:
            return "end of input"
        if tok.type == TK_STRING:
            return "string literal"
        if tok.type == TK_TEMPLATE:
            return "template literal"
        return "'" + tok.value + "'"

    def _span(self, start: Token | Span) -> Span:
        """Span from `start` to the end of the last consumed token."""
        end = self.tokens[self.pos - 1] if self.pos > 0 else self.tokens[0]
        if end.end < start.start:
            end_offset, end_line, end_col = start.start, start.line, start.col
        else:
            end_offset, end_line, end_col = end.end, end.end_line, end.end_col
        return Span(start.start, end_offset, start.line, start.col, end_line, end_col)

    def _token_span(self, tok: Token) -> Span:
        return Span(tok.start, tok.end, tok.line, tok.col, tok.end_line, tok.end_col)

    def _semicolon(self) -> None:
        if self.at(";"):
            self.advance()

    def _is_identifier(self, tok: Token) -> bool:
        return tok.type == TK_IDENT and tok.value not in RESERVED

    def _speculate(self, fn: Callable[[], T]) -> T | None:
        """Run fn; on ParseError rewind and return None."""
        saved = self.pos
        saved_no_in = self._no_in
        try:
            return fn()
        except ParseError:
            self.pos = saved
            self._no_in = saved_no_in
            return None

    def _with_in(self, fn: Callable[[], T]) -> T:
        """Run fn with the `in` operator allowed (inside brackets and bodies)."""
        saved = self._no_in
        self._no_in = False
        try:
            return fn()
        finally:
            self._no_in = saved

    def _skip_balanced(self, open_: str, close: str) -> None:
        """Skip from an opening bracket to its matching close."""
        self.expect(open_)
        depth = 1
        while depth > 0:
            if self.at_type(TK_EOF):
                raise self.error("expected '" + close + "'")
            if self.at(open_):
                depth += 1
            elif self.at(close):
                depth -= 1
            self.advance()

    def _expect_close_angle(self) -> None:
        """Consume one `>`, splitting `>>`, `>>>`, `>=` and friends."""
        tok = self.current()
        if tok.type == TK_OP and tok.value == ">":
            self.advance()
            return
        if tok.type == TK_OP and tok.value.startswith(">") and len(tok.value) > 1:
            tok.value = tok.value[1:]
            tok.start += 1
            tok.col += 1
            return
        raise self.error("expected '>', got " + self._describe(tok))

    # ── Names ────────────────────────────────────────────────

    def _identifier(self) -> Identifier:
        tok = self.expect_ident()
        return Identifier(self._token_span(tok), tok.value)

    def _identifier_name(self) -> Identifier:
        """Any word, reserved or not (property keys, `export { default }`)."""
        tok = self.current()
        if tok.type != TK_IDENT:
            raise self.error("expected identifier, got " + self._describe(tok))
        self.advance()
        return Identifier(self._token_span(tok), tok.value)

    def _property_name(self) -> Node:
        tok = self.current()
        if tok.type == TK_STRING:
            self.advance()
            return StringLiteral(self._token_span(tok), tok.value)
        if tok.type == TK_NUM:
            self.advance()
            return NumericLiteral(self._token_span(tok), tok.value)
        if self.at("["):
            self.advance()
            expr = self._with_in(self.parse_assignment)
            self.expect("]")
            return ComputedPropertyName(self._span(tok), expr)
        return self._identifier_name()

    # ── Top Level ────────────────────────────────────────────

    def parse_source_file(self, text: str, file_name: str) -> SourceFile:
        statements: list[Statement] = []
        while not self.at_type(TK_EOF):
            statements.append(self.parse_statement())
        eof = self.current()
        span = Span(0, len(text), 1, 1, eof.line, eof.col)
        return SourceFile(span, file_name, text, statements)

    # ── Statements ───────────────────────────────────────────

    def parse_statement(self) -> Statement:
        start = self.current()
        if self.at("export"):
            return self._export_statement()
        if self.at("import") and not (self.peek(1).value in ("(", ".")):
            return self._import_declaration()
        modifiers = self._declaration_modifiers()
        return self._declaration_or_statement(start, modifiers)

    def _declaration_modifiers(self) -> list[Modifier]:
        modifiers: list[Modifier] = []
        while True:
            tok = self.current()
            nxt = self.peek(1)
            if tok.type != TK_IDENT or nxt.newline_before:
                return modifiers
            if tok.value == "declare" and nxt.value in DECLARATION_KEYWORDS:
                pass
            elif tok.value == "async" and nxt.value == "function":
                pass
            elif tok.value == "abstract" and nxt.value == "class":
                pass
            elif tok.value == "const" and nxt.value == "enum":
                pass
            else:
                return modifiers
            self.advance()
            modifiers.append(Modifier(self._token_span(tok), tok.value))

    def _export_statement(self) -> Statement:
        start = self.current()
        export_tok = self.advance()
        export_mod = Modifier(self._token_span(export_tok), "export")
        if self.at("{") or self.at("*"):
            return self._export_declaration(start, False)
        if self.at("type") and self.peek(1).value in ("{", "*"):
            self.advance()
            return self._export_declaration(start, True)
        if self.at("="):
            self.advance()
            expr = self.parse_assignment()
            self._semicolon()
            return ExportAssignment(self._span(start), expr, False)
        if self.at("default"):
            default_tok = self.advance()
            default_mod = Modifier(self._token_span(default_tok), "default")
            if (
                self.at("function")
                or self.at("class")
                or self.at("abstract")
                or self.at("interface")
                or (self.at("async") and self.peek(1).value == "function")
            ):
                modifiers = [export_mod, default_mod] + self._declaration_modifiers()
                return self._declaration_or_statement(start, modifiers)
            expr = self.parse_assignment()
            self._semicolon()
            return ExportAssignment(self._span(start), expr, True)
        if self.at("import"):
            raise self.error("'export import' is not supported")
        modifiers = [export_mod] + self._declaration_modifiers()
        return self._declaration_or_statement(start, modifiers)

    def _export_declaration(self, start: Token, type_only: bool) -> ExportDeclaration:
        """ExportDeclaration = '{' Specifier ( ',' Specifier )* '}' ( 'from' String )?
        | '*' ( 'as' Ident )? 'from' String"""
        if self.at("*"):
            self.advance()
            if self.at("as"):
                self.advance()
                self._identifier_name()
            self.expect("from")
            spec = self._module_specifier()
            self._semicolon()
            return ExportDeclaration(self._span(start), None, spec, type_only)
        self.expect("{")
        elements: list[ExportSpecifier] = []
        while not self.at("}"):
            spec_start = self.current()
            if self.at("type") and self.peek(1).type == TK_IDENT and self.peek(1).value != "as":
                self.advance()
            name = self._identifier_name()
            property_name: Identifier | None = None
            if self.at("as"):
                self.advance()
                property_name = name
                name = self._identifier_name()
            elements.append(ExportSpecifier(self._span(spec_start), property_name, name))
            if not self.at(","):
                break
            self.advance()
        self.expect("}")
        module_spec: StringLiteral | None = None
        if self.at("from"):
            self.advance()
            module_spec = self._module_specifier()
        self._semicolon()
        return ExportDeclaration(self._span(start), elements, module_spec, type_only)

    def _module_specifier(self) -> StringLiteral:
        tok = self.current()
        if tok.type != TK_STRING:
            raise self.error("expected module specifier, got " + self._describe(tok))
        self.advance()
        return StringLiteral(self._token_span(tok), tok.value)

    def _import_declaration(self) -> ImportDeclaration:
        """Import = 'import' ( Clause 'from' )? String"""
        start = self.expect("import")
        if self.at_type(TK_STRING):
            spec = self._module_specifier()
            self._semicolon()
            return ImportDeclaration(self._span(start), None, spec)
        clause_start = self.current()
        type_only = False
        if self.at("type"):
            nxt = self.peek(1)
            if nxt.value in ("{", "*") or (nxt.type == TK_IDENT and nxt.value != "from"):
                self.advance()
                type_only = True
        name: Identifier | None = None
        namespace: Identifier | None = None
        elements: list[ImportSpecifier] | None = None
        if self.at_type(TK_IDENT) and not self.at("from"):
            name = self._identifier()
            if self.at("="):
                raise self.error("'import = require()' is not supported")
            if self.at(","):
                self.advance()
        elif self.at("from") and self.peek(1).value == "from":
            name = self._identifier_name()
        if self.at("*"):
            self.advance()
            self.expect("as")
            namespace = self._identifier()
        elif self.at("{"):
            elements = self._import_specifiers()
        clause = ImportClause(self._span(clause_start), name, namespace, elements, type_only)
        self.expect("from")
        spec = self._module_specifier()
        if (self.at("with") or self.at("assert")) and not self.current().newline_before:
            self.advance()
            self._skip_balanced("{", "}")
        self._semicolon()
        return ImportDeclaration(self._span(start), clause, spec)

    def _import_specifiers(self) -> list[ImportSpecifier]:
        self.expect("{")
        specs: list[ImportSpecifier] = []
        while not self.at("}"):
            spec_start = self.current()
            type_only = False
            if self.at("type") and self.peek(1).type == TK_IDENT and self.peek(1).value != "as":
                self.advance()
                type_only = True
            imported = self._identifier_name()
            if self.at("as"):
                self.advance()
                local = self._identifier()
                specs.append(ImportSpecifier(self._span(spec_start), imported, local, type_only))
            else:
                if imported.name in RESERVED:
                    raise ParseError(
                        "expected identifier, got '" + imported.name + "'",
                        imported.span.line,
                        imported.span.col,
                    )
                specs.append(ImportSpecifier(self._span(spec_start), None, imported, type_only))
            if not self.at(","):
                break
            self.advance()
        self.expect("}")
        return specs

    def _declaration_or_statement(self, start: Token, modifiers: list[Modifier]) -> Statement:
        tok = self.current()
        nxt = self.peek(1)
        if self.at("const") or self.at("var"):
            return self._variable_statement(start, modifiers)
        if self.at("let") and (nxt.type == TK_IDENT or nxt.value in ("[", "{")):
            return self._variable_statement(start, modifiers)
        if self.at("function"):
            return self._function_declaration(start, modifiers)
        if self.at("class"):
            return self._class_declaration(start, modifiers)
        if self.at("enum"):
            return self._enum_declaration(start, modifiers)
        if self.at("interface") and nxt.type == TK_IDENT and not nxt.newline_before:
            return self._interface_declaration(start, modifiers)
        if self.at("type") and self._is_identifier(nxt) and not nxt.newline_before:
            return self._type_alias_declaration(start, modifiers)
        if (self.at("namespace") or self.at("module")) and not nxt.newline_before:
            if nxt.type == TK_IDENT or nxt.type == TK_STRING:
                return self._module_declaration(start, modifiers)
        if self.at("global") and nxt.value == "{":
            return self._module_declaration(start, modifiers)
        if len(modifiers) > 0:
            raise ParseError("declaration expected", tok.line, tok.col)
        return self._statement()

    def _statement(self) -> Statement:
        start = self.current()
        if self.at("{"):
            return self.parse_block()
        if self.at(";"):
            self.advance()
            return EmptyStatement(self._span(start))
        if self.at("if"):
            return self._if_statement()
        if self.at("for"):
            return self._for_statement()
        if self.at("while"):
            self.advance()
            self.expect("(")
            cond = self._with_in(self.parse_expression)
            self.expect(")")
            body = self.parse_statement()
            return WhileStatement(self._span(start), cond, body)
        if self.at("do"):
            self.advance()
            body = self.parse_statement()
            self.expect("while")
            self.expect("(")
            cond = self._with_in(self.parse_expression)
            self.expect(")")
            self._semicolon()
            return DoStatement(self._span(start), body, cond)
        if self.at("switch"):
            return self._switch_statement()
        if self.at("return"):
            self.advance()
            value: Expression | None = None
            if not self._at_statement_end():
                value = self.parse_expression()
            self._semicolon()
            return ReturnStatement(self._span(start), value)
        if self.at("break") or self.at("continue"):
            self.advance()
            label: Identifier | None = None
            if self._is_identifier(self.current()) and not self.current().newline_before:
                label = self._identifier()
            self._semicolon()
            if start.value == "break":
                return BreakStatement(self._span(start), label)
            return ContinueStatement(self._span(start), label)
        if self.at("throw"):
            self.advance()
            value = self.parse_expression()
            self._semicolon()
            return ThrowStatement(self._span(start), value)
        if self.at("try"):
            return self._try_statement()
        if self._is_identifier(start) and self.peek(1).value == ":" and self.peek(1).type == TK_OP:
            label = self._identifier()
            self.expect(":")
            body = self.parse_statement()
            return LabeledStatement(self._span(start), label, body)
        expr = self.parse_expression()
        self._semicolon()
        return ExpressionStatement(self._span(start), expr)

    def _at_statement_end(self) -> bool:
        tok = self.current()
        return tok.newline_before or tok.type == TK_EOF or self.at(";") or self.at("}")

    def parse_block(self) -> Block:
        """Block = '{' Statement* '}'"""
        start = self.expect("{")
        statements: list[Statement] = []
        saved = self._no_in
        self._no_in = False
        while not self.at("}"):
            if self.at_type(TK_EOF):
                raise self.error("expected '}', got end of input")
            statements.append(self.parse_statement())
        self._no_in = saved
        self.expect("}")
        return Block(self._span(start), statements)

    def _variable_statement(self, start: Token, modifiers: list[Modifier]) -> VariableStatement:
        decl_list = self._variable_declaration_list()
        self._semicolon()
        return VariableStatement(self._span(start), modifiers, decl_list)

    def _variable_declaration_list(self) -> VariableDeclarationList:
        """DeclList = ('const'|'let'|'var') Decl ( ',' Decl )*"""
        kind_tok = self.advance()
        declarations: list[VariableDeclaration] = []
        while True:
            decl_start = self.current()
            name = self._binding_name()
            if self.at("!"):
                self.advance()
            type_: TypeNode | None = None
            if self.at(":"):
                self.advance()
                type_ = self.parse_type()
            init: Expression | None = None
            if self.at("="):
                self.advance()
                init = self.parse_assignment()
            declarations.append(VariableDeclaration(self._span(decl_start), name, type_, init))
            if not self.at(","):
                break
            self.advance()
        return VariableDeclarationList(self._span(kind_tok), kind_tok.value, declarations)

    def _function_declaration(self, start: Token, modifiers: list[Modifier]) -> FunctionDeclaration:
        self.expect("function")
        is_generator = False
        if self.at("*"):
            self.advance()
            is_generator = True
        name: Identifier | None = None
        if not self.at("(") and not self.at("<"):
            name = self._identifier()
        type_params = self._type_parameters() if self.at("<") else []
        params = self._parameters()
        return_type = self._return_type()
        body: Block | None = None
        if self.at("{"):
            body = self.parse_block()
        else:
            self._semicolon()
        is_async = False
        for mod in modifiers:
            if mod.kind == "async":
                is_async = True
        return FunctionDeclaration(
            self._span(start),
            modifiers,
            name,
            params,
            body,
            return_type,
            type_params,
            is_async,
            is_generator,
        )

    def _class_declaration(self, start: Token, modifiers: list[Modifier]) -> ClassDeclaration:
        self.expect("class")
        name: Identifier | None = None
        if self._is_identifier(self.current()) and not self.at("extends") and not self.at("implements"):
            name = self._identifier()
        while not self.at("{"):
            if self.at_type(TK_EOF):
                raise self.error("expected '{', got end of input")
            self.advance()
        self._skip_balanced("{", "}")
        return ClassDeclaration(self._span(start), modifiers, name)

    def _enum_declaration(self, start: Token, modifiers: list[Modifier]) -> EnumDeclaration:
        self.expect("enum")
        name = self._identifier()
        self.expect("{")
        members: list[EnumMember] = []
        while not self.at("}"):
            member_start = self.current()
            member_name = self._property_name()
            init: Expression | None = None
            if self.at("="):
                self.advance()
                init = self.parse_assignment()
            members.append(EnumMember(self._span(member_start), member_name, init))
            if not self.at(","):
                break
            self.advance()
        self.expect("}")
        return EnumDeclaration(self._span(start), modifiers, name, members)

    def _interface_declaration(self, start: Token, modifiers: list[Modifier]) -> InterfaceDeclaration:
        self.expect("interface")
        name = self._identifier()
        type_params = self._type_parameters() if self.at("<") else []
        heritage: list[TypeReference] = []
        if self.at("extends"):
            self.advance()
            while True:
                ref = self._primary_type()
                if not isinstance(ref, TypeReference):
                    raise ParseError("expected interface name", ref.span.line, ref.span.col)
                heritage.append(ref)
                if not self.at(","):
                    break
                self.advance()
        members = self._type_members()
        return InterfaceDeclaration(self._span(start), modifiers, name, type_params, heritage, members)

    def _type_alias_declaration(self, start: Token, modifiers: list[Modifier]) -> TypeAliasDeclaration:
        self.expect("type")
        name = self._identifier()
        type_params = self._type_parameters() if self.at("<") else []
        self.expect("=")
        type_ = self.parse_type()
        self._semicolon()
        return TypeAliasDeclaration(self._span(start), modifiers, name, type_params, type_)

    def _module_declaration(self, start: Token, modifiers: list[Modifier]) -> ModuleDeclaration:
        keyword = self.advance()
        if keyword.value == "global":
            name = Identifier(self._token_span(keyword), "global")
        elif self.at_type(TK_STRING):
            tok = self.advance()
            name = Identifier(self._token_span(tok), tok.value)
        else:
            name = self._identifier()
            while self.at("."):
                self.advance()
                part = self._identifier()
                name = Identifier(self._span(name.span), name.name + "." + part.name)
        self.expect("{")
        statements: list[Statement] = []
        while not self.at("}"):
            if self.at_type(TK_EOF):
                raise self.error("expected '}', got end of input")
            statements.append(self.parse_statement())
        self.expect("}")
        return ModuleDeclaration(self._span(start), modifiers, name, statements)

    def _if_statement(self) -> IfStatement:
        start = self.expect("if")
        self.expect("(")
        cond = self._with_in(self.parse_expression)
        self.expect(")")
        then = self.parse_statement()
        else_: Statement | None = None
        if self.at("else"):
            self.advance()
            else_ = self.parse_statement()
        return IfStatement(self._span(start), cond, then, else_)

    def _for_statement(self) -> Statement:
        """For = 'for' '(' Init? ';' Cond? ';' Incr? ')' Stmt
        | 'for' '(' Decl ('of'|'in') Expr ')' Stmt"""
        start = self.expect("for")
        is_await = False
        if self.at("await"):
            self.advance()
            is_await = True
        self.expect("(")
        init: Node | None = None
        saved = self._no_in
        self._no_in = True
        if self.at(";"):
            init = None
        elif self.at("const") or self.at("var") or (
            self.at("let") and (self.peek(1).type == TK_IDENT or self.peek(1).value in ("[", "{"))
        ):
            init = self._variable_declaration_list()
        else:
            init = self.parse_expression()
        self._no_in = saved
        if init is not None and self.at("of"):
            self.advance()
            iterable = self._with_in(self.parse_assignment)
            self.expect(")")
            body = self.parse_statement()
            return ForOfStatement(self._span(start), init, iterable, body, is_await)
        if init is not None and self.at("in"):
            self.advance()
            obj = self._with_in(self.parse_expression)
            self.expect(")")
            body = self.parse_statement()
            return ForInStatement(self._span(start), init, obj, body)
        self.expect(";")
        cond: Expression | None = None
        if not self.at(";"):
            cond = self._with_in(self.parse_expression)
        self.expect(";")
        incr: Expression | None = None
        if not self.at(")"):
            incr = self._with_in(self.parse_expression)
        self.expect(")")
        body = self.parse_statement()
        return ForStatement(self._span(start), init, cond, incr, body)

    def _switch_statement(self) -> SwitchStatement:
        start = self.expect("switch")
        self.expect("(")
        subject = self._with_in(self.parse_expression)
        self.expect(")")
        self.expect("{")
        clauses: list[Node] = []
        while not self.at("}"):
            clause_start = self.current()
            test: Expression | None = None
            if self.at("case"):
                self.advance()
                test = self._with_in(self.parse_expression)
            elif self.at("default"):
                self.advance()
            else:
                raise self.error("expected 'case' or 'default', got " + self._describe(clause_start))
            self.expect(":")
            body: list[Statement] = []
            while not (self.at("case") or self.at("default") or self.at("}")):
                if self.at_type(TK_EOF):
                    raise self.error("expected '}', got end of input")
                body.append(self.parse_statement())
            if test is None:
                clauses.append(DefaultClause(self._span(clause_start), body))
            else:
                clauses.append(CaseClause(self._span(clause_start), test, body))
        self.expect("}")
        return SwitchStatement(self._span(start), subject, clauses)

    def _try_statement(self) -> TryStatement:
        start = self.expect("try")
        block = self.parse_block()
        catch: CatchClause | None = None
        finally_: Block | None = None
        if self.at("catch"):
            catch_start = self.advance()
            variable: Node | None = None
            if self.at("("):
                self.advance()
                variable = self._binding_name()
                if self.at(":"):
                    self.advance()
                    self.parse_type()
                self.expect(")")
            catch = CatchClause(self._span(catch_start), variable, self.parse_block())
        if self.at("finally"):
            self.advance()
            finally_ = self.parse_block()
        if catch is None and finally_ is None:
            raise self.error("expected 'catch' or 'finally'")
        return TryStatement(self._span(start), block, catch, finally_)

    # ── Functions ────────────────────────────────────────────

    def _parameters(self) -> list[Parameter]:
        """Params = '(' ( Param ( ',' Param )* ','? )? ')'"""
        self.expect("(")
        params: list[Parameter] = []
        while not self.at(")"):
            start = self.current()
            while self.current().value in ("public", "private", "protected", "readonly") and (
                self._is_identifier(self.peek(1)) or self.peek(1).value in ("{", "[")
            ):
                self.advance()
            rest = False
            if self.at("..."):
                self.advance()
                rest = True
            if self.at("this"):
                name: Node = Identifier(self._token_span(self.advance()), "this")
            else:
                name = self._binding_name()
            optional = False
            if self.at("?"):
                self.advance()
                optional = True
            type_: TypeNode | None = None
            if self.at(":"):
                self.advance()
                type_ = self.parse_type()
            init: Expression | None = None
            if self.at("="):
                self.advance()
                init = self._with_in(self.parse_assignment)
            params.append(Parameter(self._span(start), name, type_, init, optional, rest))
            if not self.at(","):
                break
            self.advance()
        self.expect(")")
        return params

    def _return_type(self) -> TypeNode | None:
        if not self.at(":"):
            return None
        self.advance()
        return self._type_or_predicate()

    def _type_or_predicate(self) -> TypeNode:
        """Type predicates (`x is T`, `asserts x`) read as boolean."""
        start = self.current()
        if self.at("asserts") and self._is_identifier(self.peek(1)) or self.at("asserts") and self.peek(1).value == "this":
            self.advance()
            self.advance()
            if self.at("is"):
                self.advance()
                self.parse_type()
            return KeywordType(self._span(start), "void")
        if (start.type == TK_IDENT) and self.peek(1).value == "is" and not self.peek(1).newline_before:
            self.advance()
            self.advance()
            self.parse_type()
            return KeywordType(self._span(start), "boolean")
        return self.parse_type()

    def _function_body(self) -> Block:
        return self._with_in(self.parse_block)

    # ── Binding Patterns ─────────────────────────────────────

    def _binding_name(self) -> Node:
        if self.at("{"):
            return self._object_binding_pattern()
        if self.at("["):
            return self._array_binding_pattern()
        return self._identifier()

    def _object_binding_pattern(self) -> ObjectBindingPattern:
        start = self.expect("{")
        elements: list[BindingElement] = []
        while not self.at("}"):
            elem_start = self.current()
            if self.at("..."):
                self.advance()
                name = self._identifier()
                elements.append(BindingElement(self._span(elem_start), None, name, None, True))
            else:
                key = self._property_name()
                property_name: Node | None = None
                if self.at(":"):
                    self.advance()
                    property_name = key
                    target = self._binding_name()
                else:
                    if not isinstance(key, Identifier) or key.name in RESERVED:
                        raise ParseError("expected ':' after property name", key.span.line, key.span.col)
                    target = key
                init: Expression | None = None
                if self.at("="):
                    self.advance()
                    init = self._with_in(self.parse_assignment)
                elements.append(BindingElement(self._span(elem_start), property_name, target, init))
            if not self.at(","):
                break
            self.advance()
        self.expect("}")
        return ObjectBindingPattern(self._span(start), elements)

    def _array_binding_pattern(self) -> ArrayBindingPattern:
        start = self.expect("[")
        elements: list[Node] = []
        while not self.at("]"):
            elem_start = self.current()
            if self.at(","):
                self.advance()
                elements.append(OmittedExpression(self._token_span(elem_start)))
                continue
            rest = False
            if self.at("..."):
                self.advance()
                rest = True
            name = self._binding_name()
            init: Expression | None = None
            if self.at("="):
                self.advance()
                init = self._with_in(self.parse_assignment)
            elements.append(BindingElement(self._span(elem_start), None, name, init, rest))
            if not self.at(","):
                break
            self.advance()
        self.expect("]")
        return ArrayBindingPattern(self._span(start), elements)

    # ── Expressions ──────────────────────────────────────────

    def parse_expression(self) -> Expression:
        """Expr = Assign ( ',' Assign )*"""
        start = self.current()
        expr = self.parse_assignment()
        while self.at(","):
            self.advance()
            right = self.parse_assignment()
            expr = BinaryExpression(self._span(start), expr, ",", right)
        return expr

    def parse_assignment(self) -> Expression:
        """Assign = Arrow | Conditional ( AssignOp Assign )?"""
        arrow = self._try_arrow_function()
        if arrow is not None:
            return arrow
        start = self.current()
        left = self._conditional()
        tok = self.current()
        if tok.type == TK_OP and tok.value in ASSIGN_OPS:
            self.advance()
            right = self.parse_assignment()
            return BinaryExpression(self._span(start), left, tok.value, right)
        return left

    def _conditional(self) -> Expression:
        """Conditional = Binary ( '?' Assign ':' Assign )?"""
        start = self.current()
        cond = self._binary(1)
        if not self.at("?"):
            return cond
        self.advance()
        when_true = self._with_in(self.parse_assignment)
        self.expect(":")
        when_false = self.parse_assignment()
        return ConditionalExpression(self._span(start), cond, when_true, when_false)

    def _binary(self, min_prec: int) -> Expression:
        """Precedence climbing over BINARY_PREC; `**` is right-associative."""
        start = self.current()
        left = self._unary()
        while True:
            tok = self.current()
            if (
                tok.type == TK_IDENT
                and tok.value in ("as", "satisfies")
                and not tok.newline_before
                and RELATIONAL_PREC >= min_prec
            ):
                self.advance()
                if self.at("const"):
                    const_tok = self.advance()
                    type_: TypeNode = TypeReference(self._token_span(const_tok), "const", [])
                else:
                    type_ = self.parse_type()
                if tok.value == "as":
                    left = AsExpression(self._span(start), left, type_)
                else:
                    left = SatisfiesExpression(self._span(start), left, type_)
                continue
            if tok.type not in (TK_OP, TK_IDENT) or tok.value not in BINARY_PREC:
                break
            prec = BINARY_PREC[tok.value]
            if prec < min_prec:
                break
            if tok.value == "in" and self._no_in:
                break
            self.advance()
            if tok.value == "**":
                right = self._binary(prec)
            else:
                right = self._binary(prec + 1)
            left = BinaryExpression(self._span(start), left, tok.value, right)
        return left

    def _unary(self) -> Expression:
        """Unary = ( '!' | '-' | '+' | '~' | '++' | '--' | typeof | void | delete | await ) Unary | Postfix"""
        start = self.current()
        if start.type == TK_OP and start.value in ("!", "-", "+", "~", "++", "--"):
            self.advance()
            operand = self._unary()
            return PrefixUnaryExpression(self._span(start), start.value, operand)
        if self.at("typeof"):
            self.advance()
            return TypeOfExpression(self._span(start), self._unary())
        if self.at("void"):
            self.advance()
            return VoidExpression(self._span(start), self._unary())
        if self.at("delete"):
            self.advance()
            return DeleteExpression(self._span(start), self._unary())
        if self.at("await") and self._starts_operand(self.peek(1)):
            self.advance()
            return AwaitExpression(self._span(start), self._unary())
        if self.at("<"):
            raise self.error("angle-bracket type assertions are not supported; use 'as'")
        expr = self._left_hand_side()
        tok = self.current()
        if tok.type == TK_OP and tok.value in ("++", "--") and not tok.newline_before:
            self.advance()
            return PostfixUnaryExpression(self._span(start), expr, tok.value)
        return expr

    def _starts_operand(self, tok: Token) -> bool:
        if tok.newline_before or tok.type == TK_EOF:
            return False
        if tok.type == TK_OP:
            return tok.value in ("(", "[", "{", "!", "-", "+", "~", "++", "--")
        if tok.type == TK_IDENT and tok.value in ("in", "instanceof", "as", "satisfies", "of"):
            return False
        return True

    def _left_hand_side(self) -> Expression:
        """LHS = ( 'new' Member Args? | Primary ) ( '.' Name | '?.' ... | '[' Expr ']' | Args | '!' )*"""
        start = self.current()
        if self.at("new"):
            expr = self._new_expression()
        else:
            expr = self.parse_primary()
        while True:
            tok = self.current()
            if self.at("."):
                self.advance()
                name = self._identifier_name()
                expr = PropertyAccessExpression(self._span(start), expr, name)
            elif self.at("?."):
                self.advance()
                if self.at("("):
                    args = self._arguments()
                    expr = CallExpression(self._span(start), expr, args, True)
                elif self.at("["):
                    self.advance()
                    index = self._with_in(self.parse_expression)
                    self.expect("]")
                    expr = ElementAccessExpression(self._span(start), expr, index, True)
                else:
                    name = self._identifier_name()
                    expr = PropertyAccessExpression(self._span(start), expr, name, True)
            elif self.at("["):
                self.advance()
                index = self._with_in(self.parse_expression)
                self.expect("]")
                expr = ElementAccessExpression(self._span(start), expr, index)
            elif self.at("("):
                args = self._arguments()
                expr = CallExpression(self._span(start), expr, args)
            elif self.at("!") and not tok.newline_before:
                self.advance()
                expr = NonNullExpression(self._span(start), expr)
            elif tok.type == TK_TEMPLATE:
                raise self.error("tagged templates are not supported")
            else:
                return expr

    def _new_expression(self) -> Expression:
        start = self.expect("new")
        if self.at("."):
            raise self.error("'new.target' is not supported")
        if self.at("new"):
            callee = self._new_expression()
        else:
            callee = self.parse_primary()
        while self.at(".") or self.at("["):
            if self.at("."):
                self.advance()
                name = self._identifier_name()
                callee = PropertyAccessExpression(self._span(start), callee, name)
            else:
                self.advance()
                index = self._with_in(self.parse_expression)
                self.expect("]")
                callee = ElementAccessExpression(self._span(start), callee, index)
        args: list[Expression] = []
        if self.at("("):
            args = self._arguments()
        return NewExpression(self._span(start), callee, args)

    def _arguments(self) -> list[Expression]:
        self.expect("(")
        args: list[Expression] = []
        saved = self._no_in
        self._no_in = False
        while not self.at(")"):
            if self.at("..."):
                spread_start = self.advance()
                inner = self.parse_assignment()
                args.append(SpreadElement(self._span(spread_start), inner))
            else:
                args.append(self.parse_assignment())
            if not self.at(","):
                break
            self.advance()
        self._no_in = saved
        self.expect(")")
        return args

    def parse_primary(self) -> Expression:
        tok = self.current()
        if tok.type == TK_NUM:
            self.advance()
            return NumericLiteral(self._token_span(tok), tok.value)
        if tok.type == TK_STRING:
            self.advance()
            return StringLiteral(self._token_span(tok), tok.value)
        if tok.type == TK_TEMPLATE:
            self.advance()
            return self._template(tok)
        if self.at("true") or self.at("false"):
            self.advance()
            return BooleanLiteral(self._token_span(tok), tok.value == "true")
        if self.at("null"):
            self.advance()
            return NullLiteral(self._token_span(tok))
        if self.at("this"):
            self.advance()
            return ThisExpression(self._token_span(tok))
        if self.at("function"):
            return self._function_expression(tok, False)
        if self.at("async") and self.peek(1).value == "function" and not self.peek(1).newline_before:
            self.advance()
            return self._function_expression(tok, True)
        if self.at("class"):
            raise self.error("class expressions are not supported")
        if self.at("("):
            self.advance()
            inner = self._with_in(self.parse_expression)
            self.expect(")")
            return ParenthesizedExpression(self._span(tok), inner)
        if self.at("["):
            return self._array_literal()
        if self.at("{"):
            return self._object_literal()
        if tok.type == TK_IDENT and tok.value not in RESERVED:
            self.advance()
            return Identifier(self._token_span(tok), tok.value)
        raise self.error("expression expected, got " + self._describe(tok))

    def _template(self, tok: Token) -> Expression:
        span = self._token_span(tok)
        parts = tok.parts
        if len(parts) == 1:
            text = parts[0]
            assert isinstance(text, str)
            return NoSubstitutionTemplateLiteral(span, text)
        head = parts[0]
        assert isinstance(head, str)
        spans: list[TemplateSpan] = []
        i = 1
        while i < len(parts):
            sub_tokens = parts[i]
            literal = parts[i + 1]
            assert isinstance(sub_tokens, list) and isinstance(literal, str)
            sub = Parser(sub_tokens)
            if sub.at_type(TK_EOF):
                raise sub.error("expression expected in template substitution")
            expr = sub.parse_expression()
            if not sub.at_type(TK_EOF):
                raise sub.error("expected '}', got " + sub._describe(sub.current()))
            spans.append(TemplateSpan(expr.span, expr, literal))
            i += 2
        return TemplateExpression(span, head, spans)

    def _array_literal(self) -> ArrayLiteralExpression:
        start = self.expect("[")
        elements: list[Expression] = []
        saved = self._no_in
        self._no_in = False
        while not self.at("]"):
            elem_start = self.current()
            if self.at(","):
                self.advance()
                elements.append(OmittedExpression(self._token_span(elem_start)))
                continue
            if self.at("..."):
                self.advance()
                inner = self.parse_assignment()
                elements.append(SpreadElement(self._span(elem_start), inner))
            else:
                elements.append(self.parse_assignment())
            if not self.at(","):
                break
            self.advance()
        self._no_in = saved
        self.expect("]")
        return ArrayLiteralExpression(self._span(start), elements)

    def _object_literal(self) -> ObjectLiteralExpression:
        start = self.expect("{")
        properties: list[Node] = []
        saved = self._no_in
        self._no_in = False
        while not self.at("}"):
            properties.append(self._object_member())
            if not self.at(","):
                break
            self.advance()
        self._no_in = saved
        self.expect("}")
        return ObjectLiteralExpression(self._span(start), properties)

    def _object_member(self) -> Node:
        start = self.current()
        if self.at("..."):
            self.advance()
            return SpreadAssignment(self._span(start), self.parse_assignment())
        kind = "method"
        is_async = False
        is_generator = False
        nxt = self.peek(1)
        starts_name = nxt.type in (TK_IDENT, TK_STRING, TK_NUM) or nxt.value == "["
        if (self.at("get") or self.at("set")) and starts_name:
            kind = self.advance().value
        elif self.at("async") and (starts_name or nxt.value == "*") and not nxt.newline_before:
            self.advance()
            is_async = True
        if self.at("*"):
            self.advance()
            is_generator = True
        name = self._property_name()
        if self.at("(") or self.at("<"):
            if self.at("<"):
                self._type_parameters()
            params = self._parameters()
            return_type = self._return_type()
            body = self._function_body()
            return MethodDeclaration(
                self._span(start), name, params, body, return_type, kind, is_async, is_generator
            )
        if kind != "method" or is_async or is_generator:
            raise self.error("expected '('")
        if self.at(":"):
            self.advance()
            value = self.parse_assignment()
            return PropertyAssignment(self._span(start), name, value)
        if not isinstance(name, Identifier) or name.name in RESERVED:
            raise self.error("expected ':'")
        default: Expression | None = None
        if self.at("="):
            self.advance()
            default = self.parse_assignment()
        return ShorthandPropertyAssignment(self._span(start), name, default)

    def _function_expression(self, start: Token, is_async: bool) -> FunctionExpression:
        self.expect("function")
        is_generator = False
        if self.at("*"):
            self.advance()
            is_generator = True
        name: Identifier | None = None
        if self._is_identifier(self.current()):
            name = self._identifier()
        type_params = self._type_parameters() if self.at("<") else []
        params = self._parameters()
        return_type = self._return_type()
        body = self._function_body()
        return FunctionExpression(
            self._span(start), name, params, body, return_type, type_params, is_async, is_generator
        )

    # ── Arrow Functions ──────────────────────────────────────

    def _try_arrow_function(self) -> ArrowFunction | None:
        """Arrow = 'async'? ( Ident | TypeParams? Params ( ':' Type )? ) '=>' Body

        The parenthesised head is parsed speculatively; the parser commits
        once `=>` is seen.
        """
        start = self.current()
        saved = self.pos
        is_async = False
        if self.at("async") and not self.peek(1).newline_before:
            nxt = self.peek(1)
            if (self._is_identifier(nxt) and self.peek(2).value == "=>") or nxt.value in ("(", "<"):
                self.advance()
                is_async = True
        tok = self.current()
        type_params: list[TypeParameter] = []
        return_type: TypeNode | None = None
        if self._is_identifier(tok) and self.peek(1).value == "=>" and self.peek(1).type == TK_OP:
            name = self._identifier()
            params = [Parameter(name.span, name)]
        elif self.at("(") or self.at("<"):
            head = self._speculate(self._arrow_head)
            if head is None:
                self.pos = saved
                return None
            type_params, params, return_type = head
        else:
            self.pos = saved
            return None
        if self.current().newline_before:
            raise self.error("line break not allowed before '=>'")
        self.expect("=>")
        body = self._arrow_body()
        return ArrowFunction(self._span(start), params, body, return_type, type_params, is_async)

    def _arrow_head(self) -> tuple[list[TypeParameter], list[Parameter], TypeNode | None]:
        type_params = self._type_parameters() if self.at("<") else []
        params = self._parameters()
        return_type = self._return_type()
        if not self.at("=>"):
            raise self.error("expected '=>'")
        return type_params, params, return_type

    def _arrow_body(self) -> Node:
        if self.at("{"):
            return self._function_body()
        tok = self.current()
        if tok.type == TK_IDENT and tok.value in ARROW_STATEMENT_KEYWORDS:
            stmt = self._with_in(self.parse_statement)
            return Block(stmt.span, [stmt])
        return self.parse_assignment()

    # ── Types ────────────────────────────────────────────────

    def parse_type(self) -> TypeNode:
        """Type = FunctionType | Union"""
        start = self.current()
        if self.at("(") or self.at("<"):
            head = self._speculate(self._function_type_head)
            if head is not None:
                self.expect("=>")
                ret = self._type_or_predicate()
                return FunctionType(self._span(start), head, ret)
        if self.at("new") or (self.at("abstract") and self.peek(1).value == "new"):
            if self.at("abstract"):
                self.advance()
            self.advance()
            params = self._function_type_head()
            self.expect("=>")
            ret = self.parse_type()
            return FunctionType(self._span(start), params, ret)
        return self._union_type()

    def _function_type_head(self) -> list[Parameter]:
        if self.at("<"):
            self._type_parameters()
        params = self._parameters()
        if not self.at("=>"):
            raise self.error("expected '=>'")
        return params

    def _union_type(self) -> TypeNode:
        start = self.current()
        if self.at("|"):
            self.advance()
        types = [self._intersection_type()]
        while self.at("|"):
            self.advance()
            types.append(self._intersection_type())
        if len(types) == 1:
            return types[0]
        return UnionType(self._span(start), types)

    def _intersection_type(self) -> TypeNode:
        start = self.current()
        if self.at("&"):
            self.advance()
        types = [self._type_operator()]
        while self.at("&"):
            self.advance()
            types.append(self._type_operator())
        if len(types) == 1:
            return types[0]
        return IntersectionType(self._span(start), types)

    def _type_operator(self) -> TypeNode:
        start = self.current()
        if (self.at("keyof") or self.at("readonly") or self.at("unique")) and not self.peek(1).value in (
            ")",
            ",",
            ";",
            "]",
            "=",
            ">",
            "|",
            "&",
        ):
            self.advance()
            inner = self._type_operator()
            return TypeOperator(self._span(start), start.value, inner)
        return self._postfix_type()

    def _postfix_type(self) -> TypeNode:
        start = self.current()
        t = self._primary_type()
        while self.at("[") and not self.current().newline_before:
            self.advance()
            if self.at("]"):
                self.advance()
                t = ArrayType(self._span(start), t)
            else:
                index = self.parse_type()
                self.expect("]")
                t = IndexedAccessType(self._span(start), t, index)
        return t

    def _primary_type(self) -> TypeNode:
        tok = self.current()
        if tok.type == TK_STRING:
            self.advance()
            return LiteralType(self._token_span(tok), tok.value)
        if tok.type == TK_NUM:
            self.advance()
            return LiteralType(self._token_span(tok), numeric_value(tok.value))
        if self.at("-") and self.peek(1).type == TK_NUM:
            self.advance()
            num = self.advance()
            return LiteralType(self._span(tok), -numeric_value(num.value))
        if self.at("true") or self.at("false"):
            self.advance()
            return LiteralType(self._token_span(tok), tok.value == "true")
        if tok.type == TK_TEMPLATE:
            self.advance()
            return KeywordType(self._token_span(tok), "string")
        if self.at("{"):
            return self._type_literal()
        if self.at("["):
            return self._tuple_type()
        if self.at("("):
            self.advance()
            inner = self.parse_type()
            self.expect(")")
            return inner
        if self.at("typeof"):
            self.advance()
            expr: Expression = self._identifier()
            while self.at("."):
                self.advance()
                name = self._identifier_name()
                expr = PropertyAccessExpression(self._span(tok), expr, name)
            return TypeQuery(self._span(tok), expr)
        if self.at("this"):
            self.advance()
            return KeywordType(self._token_span(tok), "any")
        if tok.type == TK_IDENT and tok.value in TYPE_KEYWORDS and self.peek(1).value != ".":
            self.advance()
            return KeywordType(self._token_span(tok), tok.value)
        if tok.type == TK_IDENT:
            self.advance()
            name = tok.value
            while self.at("."):
                self.advance()
                name += "." + self._identifier_name().name
            args: list[TypeNode] = []
            if self.at("<") and not self.current().newline_before:
                args = self._type_arguments()
            return TypeReference(self._span(tok), name, args)
        raise self.error("type expected, got " + self._describe(tok))

    def _type_arguments(self) -> list[TypeNode]:
        self.expect("<")
        args: list[TypeNode] = []
        while True:
            args.append(self.parse_type())
            if not self.at(","):
                break
            self.advance()
        self._expect_close_angle()
        return args

    def _type_parameters(self) -> list[TypeParameter]:
        self.expect("<")
        params: list[TypeParameter] = []
        while True:
            start = self.current()
            if (self.at("const") or self.at("in") or self.at("out")) and self._is_identifier(self.peek(1)):
                self.advance()
            name = self._identifier()
            constraint: TypeNode | None = None
            if self.at("extends"):
                self.advance()
                constraint = self.parse_type()
            default: TypeNode | None = None
            if self.at("="):
                self.advance()
                default = self.parse_type()
            params.append(TypeParameter(self._span(start), name, constraint, default))
            if not self.at(","):
                break
            self.advance()
        self._expect_close_angle()
        return params

    def _tuple_type(self) -> TupleType:
        start = self.expect("[")
        elements: list[TypeNode] = []
        while not self.at("]"):
            if self.at("..."):
                self.advance()
            if self.current().type == TK_IDENT and self.peek(1).value in (":", "?") and (
                self.peek(1).value == ":" or self.peek(2).value == ":"
            ):
                self.advance()
                if self.at("?"):
                    self.advance()
                self.expect(":")
            elements.append(self.parse_type())
            if self.at("?"):
                self.advance()
            if not self.at(","):
                break
            self.advance()
        self.expect("]")
        return TupleType(self._span(start), elements)

    def _type_literal(self) -> TypeNode:
        start = self.current()
        if self._at_mapped_type():
            self._skip_balanced("{", "}")
            return KeywordType(self._span(start), "any")
        members = self._type_members()
        return TypeLiteral(self._span(start), members)

    def _at_mapped_type(self) -> bool:
        offset = 1
        if self.peek(offset).value in ("+", "-"):
            offset += 1
        if self.peek(offset).value == "readonly":
            offset += 1
        return (
            self.peek(offset).value == "["
            and self.peek(offset + 1).type == TK_IDENT
            and self.peek(offset + 2).value == "in"
        )

    def _type_members(self) -> list[Node]:
        """Members = '{' ( Member ( ';' | ',' )? )* '}'"""
        self.expect("{")
        members: list[Node] = []
        while not self.at("}"):
            if self.at_type(TK_EOF):
                raise self.error("expected '}', got end of input")
            member = self._type_member()
            if member is not None:
                members.append(member)
            while self.at(";") or self.at(","):
                self.advance()
        self.expect("}")
        return members

    def _type_member(self) -> Node | None:
        start = self.current()
        if self.at("(") or self.at("<"):
            if self.at("<"):
                self._type_parameters()
            self._parameters()
            self._return_type()
            return None
        if self.at("new") and self.peek(1).value in ("(", "<"):
            self.advance()
            if self.at("<"):
                self._type_parameters()
            self._parameters()
            self._return_type()
            return None
        if self.at("readonly") and self.peek(1).value not in (":", "?", "(", ";", ",", "}"):
            self.advance()
        if (self.at("get") or self.at("set")) and self.peek(1).type == TK_IDENT and self.peek(2).value == "(":
            self.advance()
        if self.at("[") and self._is_identifier(self.peek(1)) and self.peek(2).value == ":":
            self.advance()
            self.advance()
            self.advance()
            key_type = self.parse_type()
            self.expect("]")
            self.expect(":")
            value_type = self.parse_type()
            return IndexSignature(self._span(start), key_type, value_type)
        if self.at("["):
            self._skip_balanced("[", "]")
            name = ""
        else:
            key = self._property_name()
            if isinstance(key, Identifier):
                name = key.name
            elif isinstance(key, StringLiteral):
                name = key.value
            elif isinstance(key, NumericLiteral):
                name = key.text
            else:
                name = ""
        optional = False
        if self.at("?"):
            self.advance()
            optional = True
        if self.at("(") or self.at("<"):
            if self.at("<"):
                self._type_parameters()
            params = self._parameters()
            return_type = self._return_type()
            return MethodSignature(self._span(start), name, optional, params, return_type)
        type_: TypeNode | None = None
        if self.at(":"):
            self.advance()
            type_ = self.parse_type()
        return PropertySignature(self._span(start), name, optional, type_)


def parse_source(text: str, file_name: str = "main.ts") -> SourceFile:
    """Parse TypeScript source text into an unbound SourceFile."""
    return Parser(tokenize(text)).parse_source_file(text, file_name)
