"""AiScript parser — recursive descent over the forms the emitter produces."""

from __future__ import annotations

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
    AElif,
    AExpr,
    AFn,
    AIdent,
    AIf,
    AIndex,
    ALoop,
    AMatch,
    AMatchCase,
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
    Loc,
)
from .tokens import TK_EOF, TK_IDENT, TK_NUM, TK_STRING, TK_TEMPLATE, Token, tokenize

COMPARE_OPS: set[str] = {"<", "<=", ">", ">="}


class ParseError(Exception):
    """Parse error with location info."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Parser:
    """Recursive descent parser for AiScript."""

    def __init__(self, tokens: list[Token]):
        self.tokens: list[Token] = tokens
        self.pos: int = 0

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
        self.pos += 1
        return tok

    def at(self, value: str) -> bool:
        tok = self.current()
        return tok.value == value and tok.type not in (TK_STRING, TK_TEMPLATE)

    def at_type(self, type_: str) -> bool:
        return self.current().type == type_

    def expect(self, value: str) -> Token:
        if not self.at(value):
            raise self.error("expected '" + value + "', got '" + self.current().value + "'")
        return self.advance()

    def expect_ident(self) -> Token:
        tok = self.current()
        if tok.type != TK_IDENT:
            raise self.error("expected identifier, got '" + tok.value + "'")
        return self.advance()

    def error(self, msg: str) -> ParseError:
        tok = self.current()
        return ParseError(msg, tok.line, tok.col)

    def _loc(self) -> Loc:
        tok = self.current()
        return Loc(tok.line, tok.col)

    def _skip_separators(self) -> None:
        while self.at(";") or self.at(","):
            self.advance()

    # ── Top Level ────────────────────────────────────────────

    def parse_program(self) -> list[ANode]:
        body: list[ANode] = []
        self._skip_separators()
        while not self.at_type(TK_EOF):
            body.append(self.parse_statement())
            self._skip_separators()
        return body

    def parse_block(self) -> list[ANode]:
        """Block = '{' ( Statement ( ';' )? )* '}'"""
        self.expect("{")
        body: list[ANode] = []
        self._skip_separators()
        while not self.at("}"):
            if self.at_type(TK_EOF):
                raise self.error("unterminated block")
            body.append(self.parse_statement())
            self._skip_separators()
        self.expect("}")
        return body

    # ── Statements ───────────────────────────────────────────

    def parse_statement(self) -> ANode:
        tok = self.current()
        if tok.type == TK_IDENT or tok.type == TK_STRING or tok.type == TK_TEMPLATE:
            return self.parse_expr_statement()
        if tok.value == "let" or tok.value == "var":
            return self.parse_def()
        if tok.value == "@" and self.peek(1).type == TK_IDENT:
            return self.parse_fn_def()
        if tok.value == "return":
            loc = self._loc()
            self.advance()
            if self._at_statement_end():
                return AReturn(ANull(loc=loc), loc=loc)
            return AReturn(self.parse_expr(), loc=loc)
        if tok.value == "break":
            self.advance()
            return ABreak(loc=Loc(tok.line, tok.col))
        if tok.value == "continue":
            self.advance()
            return AContinue(loc=Loc(tok.line, tok.col))
        if tok.value == "loop":
            loc = self._loc()
            self.advance()
            return ALoop(self.parse_block(), loc=loc)
        if tok.value == "each":
            return self.parse_each()
        if tok.value == "{":
            loc = self._loc()
            return ABlock(self.parse_block(), loc=loc)
        return self.parse_expr_statement()

    def _at_statement_end(self) -> bool:
        tok = self.current()
        return tok.type == TK_EOF or tok.newline_before or self.at(";") or self.at("}")

    def parse_def(self) -> ADef:
        """Def = ( 'let' | 'var' ) IDENT '=' Expr"""
        loc = self._loc()
        mutable = self.advance().value == "var"
        name = self.expect_ident()
        self.expect("=")
        value = self.parse_expr()
        return ADef(AIdent(name.value, loc=Loc(name.line, name.col)), value, mutable, loc=loc)

    def parse_fn_def(self) -> ADef:
        """FnDef = '@' IDENT '(' Params ')' Block"""
        loc = self._loc()
        self.expect("@")
        name = self.expect_ident()
        params = self.parse_params()
        body = self.parse_block()
        fn = AFn(params, body, loc=loc)
        return ADef(AIdent(name.value, loc=Loc(name.line, name.col)), fn, False, loc=loc)

    def parse_each(self) -> AEach:
        """Each = 'each' 'let' IDENT ',' Expr Body"""
        loc = self._loc()
        self.expect("each")
        self.expect("let")
        name = self.expect_ident()
        self.expect(",")
        items = self.parse_expr()
        body = self.parse_body()
        return AEach(AIdent(name.value, loc=Loc(name.line, name.col)), items, body, loc=loc)

    def parse_expr_statement(self) -> ANode:
        """ExprStatement = Expr ( ( '=' | '+=' | '-=' ) Expr )?"""
        loc = self._loc()
        expr = self.parse_expr()
        if self.at("="):
            self.advance()
            return AAssign(expr, self.parse_expr(), loc=loc)
        if self.at("+=") or self.at("-="):
            op = self.advance().value
            return AOpAssign(op, expr, self.parse_expr(), loc=loc)
        return expr

    def parse_body(self) -> ANode:
        """Body of if/elif/else/each/case: a bare block or a single statement."""
        if self.at("{"):
            loc = self._loc()
            return ABlock(self.parse_block(), loc=loc)
        return self.parse_statement()

    # ── Expressions ──────────────────────────────────────────

    def parse_expr(self) -> AExpr:
        return self.parse_or()

    def parse_or(self) -> AExpr:
        """Or = And ( '||' And )*"""
        left = self.parse_and()
        while self.at("||"):
            self.advance()
            left = ABinaryOp("||", left, self.parse_and(), loc=left.loc)
        return left

    def parse_and(self) -> AExpr:
        """And = Equality ( '&&' Equality )*"""
        left = self.parse_equality()
        while self.at("&&"):
            self.advance()
            left = ABinaryOp("&&", left, self.parse_equality(), loc=left.loc)
        return left

    def parse_equality(self) -> AExpr:
        """Equality = Compare ( ( '==' | '!=' ) Compare )*"""
        left = self.parse_compare()
        while self.at("==") or self.at("!="):
            op = self.advance().value
            left = ABinaryOp(op, left, self.parse_compare(), loc=left.loc)
        return left

    def parse_compare(self) -> AExpr:
        """Compare = Sum ( CompOp Sum )*"""
        left = self.parse_sum()
        while self.current().value in COMPARE_OPS and not self.at_type(TK_STRING):
            op = self.advance().value
            left = ABinaryOp(op, left, self.parse_sum(), loc=left.loc)
        return left

    def parse_sum(self) -> AExpr:
        """Sum = Product ( ( '+' | '-' ) Product )*"""
        left = self.parse_product()
        # A sign at the start of a line begins the next statement
        while (self.at("+") or self.at("-")) and not self.current().newline_before:
            op = self.advance().value
            left = ABinaryOp(op, left, self.parse_product(), loc=left.loc)
        return left

    def parse_product(self) -> AExpr:
        """Product = Pow ( ( '*' | '/' | '%' ) Pow )*"""
        left = self.parse_pow()
        while self.at("*") or self.at("/") or self.at("%"):
            op = self.advance().value
            left = ABinaryOp(op, left, self.parse_pow(), loc=left.loc)
        return left

    def parse_pow(self) -> AExpr:
        """Pow = Unary ( '^' Pow )?"""
        left = self.parse_unary()
        if self.at("^"):
            self.advance()
            return ABinaryOp("^", left, self.parse_pow(), loc=left.loc)
        return left

    def parse_unary(self) -> AExpr:
        """Unary = ( '!' | '+' | '-' ) Unary | Postfix"""
        if self.at("!") or self.at("+") or self.at("-"):
            loc = self._loc()
            op = self.advance().value
            if op != "!" and self.at_type(TK_NUM):
                value = float(self.advance().value)
                return ANum(-value if op == "-" else value, loc=loc)
            return AUnaryOp(op, self.parse_unary(), loc=loc)
        return self.parse_postfix()

    def parse_postfix(self) -> AExpr:
        """Postfix = Primary ( '.' IDENT | '[' Expr ']' | '(' Args ')' )*"""
        expr = self.parse_primary()
        while True:
            tok = self.current()
            if self.at("."):
                self.advance()
                name = self.advance()
                if name.type != TK_IDENT and not name.value.isidentifier():
                    raise ParseError("expected property name", name.line, name.col)
                expr = AProp(expr, name.value, loc=expr.loc)
            elif self.at("[") and not tok.space_before:
                self.advance()
                index = self.parse_expr()
                self.expect("]")
                expr = AIndex(expr, index, loc=expr.loc)
            elif self.at("(") and not tok.space_before:
                self.advance()
                args: list[AExpr] = []
                self._skip_commas()
                while not self.at(")"):
                    args.append(self.parse_expr())
                    self._skip_commas()
                self.expect(")")
                expr = ACall(expr, args, loc=expr.loc)
            else:
                break
        return expr

    def _skip_commas(self) -> None:
        while self.at(","):
            self.advance()

    def parse_primary(self) -> AExpr:
        tok = self.current()
        loc = self._loc()
        if tok.type == TK_NUM:
            self.advance()
            return ANum(float(tok.value), loc=loc)
        if tok.type == TK_STRING:
            self.advance()
            return AStr(tok.value, loc=loc)
        if tok.type == TK_TEMPLATE:
            self.advance()
            return self._template(tok)
        if tok.type == TK_IDENT:
            self.advance()
            return AIdent(tok.value, loc=loc)
        if tok.value == "true" or tok.value == "false":
            self.advance()
            return ABool(tok.value == "true", loc=loc)
        if tok.value == "null":
            self.advance()
            return ANull(loc=loc)
        if tok.value == "eval":
            self.advance()
            return ABlock(self.parse_block(), loc=loc)
        if tok.value == "if":
            return self.parse_if()
        if tok.value == "match":
            return self.parse_match()
        if tok.value == "@":
            self.advance()
            params = self.parse_params()
            return AFn(params, self.parse_block(), loc=loc)
        if tok.value == "(":
            self.advance()
            inner = self.parse_expr()
            self.expect(")")
            return inner
        if tok.value == "[":
            return self.parse_array()
        if tok.value == "{":
            return self.parse_object()
        raise self.error("expected expression, got '" + tok.value + "'")

    def parse_if(self) -> AIf:
        """If = 'if' Expr Body ( 'elif' Expr Body )* ( 'else' Body )?"""
        loc = self._loc()
        self.expect("if")
        cond = self.parse_expr()
        then = self.parse_body()
        elseif: list[AElif] = []
        while self.at("elif"):
            elif_loc = self._loc()
            self.advance()
            elif_cond = self.parse_expr()
            elseif.append(AElif(elif_cond, self.parse_body(), loc=elif_loc))
        else_: ANode | None = None
        if self.at("else"):
            self.advance()
            else_ = self.parse_body()
        return AIf(cond, then, elseif, else_, loc=loc)

    def parse_match(self) -> AMatch:
        """Match = 'match' Expr '{' ( 'case' Expr '=>' Body )* ( 'default' '=>' Body )? '}'"""
        loc = self._loc()
        self.expect("match")
        about = self.parse_expr()
        self.expect("{")
        cases: list[AMatchCase] = []
        default: ANode | None = None
        self._skip_separators()
        while self.at("case"):
            case_loc = self._loc()
            self.advance()
            q = self.parse_expr()
            self.expect("=>")
            cases.append(AMatchCase(q, self.parse_body(), loc=case_loc))
            self._skip_separators()
        if self.at("default"):
            self.advance()
            self.expect("=>")
            default = self.parse_body()
            self._skip_separators()
        self.expect("}")
        return AMatch(about, cases, default, loc=loc)

    def parse_params(self) -> list[AParam]:
        """Params = '(' ( IDENT '?'? ( '=' Expr )? ( ',' ... )* )? ')'"""
        self.expect("(")
        params: list[AParam] = []
        while not self.at(")"):
            name = self.expect_ident()
            ident = AIdent(name.value, loc=Loc(name.line, name.col))
            optional = False
            default: AExpr | None = None
            if self.at("?"):
                self.advance()
                optional = True
            if self.at("="):
                self.advance()
                default = self.parse_expr()
            params.append(AParam(ident, optional, default, loc=ident.loc))
            if not self.at(")"):
                self.expect(",")
        self.expect(")")
        return params

    def parse_array(self) -> AArr:
        loc = self._loc()
        self.expect("[")
        items: list[AExpr] = []
        self._skip_commas()
        while not self.at("]"):
            items.append(self.parse_expr())
            self._skip_commas()
        self.expect("]")
        return AArr(items, loc=loc)

    def parse_object(self) -> AObj:
        loc = self._loc()
        self.expect("{")
        entries: dict[str, AExpr] = {}
        self._skip_separators()
        while not self.at("}"):
            key = self.advance()
            if key.type == TK_EOF:
                raise self.error("unterminated object literal")
            self.expect(":")
            entries[key.value] = self.parse_expr()
            self._skip_separators()
        self.expect("}")
        return AObj(entries, loc=loc)

    def _template(self, tok: Token) -> ATmpl:
        parts: list[AExpr] = []
        for part in tok.parts:
            if isinstance(part, str):
                parts.append(AStr(part, loc=Loc(tok.line, tok.col)))
                continue
            source, line, col = part
            sub = Parser(tokenize(source, line, col))
            expr = sub.parse_expr()
            if not sub.at_type(TK_EOF):
                raise sub.error("unexpected token in template interpolation")
            parts.append(expr)
        if len(parts) == 0:
            parts.append(AStr("", loc=Loc(tok.line, tok.col)))
        return ATmpl(parts, loc=Loc(tok.line, tok.col))
