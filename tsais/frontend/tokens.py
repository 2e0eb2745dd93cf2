"""TypeScript tokenizer — lexes source into a flat token list with offsets."""

from __future__ import annotations


# Token type constants
TK_NUM = "NUM"
TK_STRING = "STRING"
TK_TEMPLATE = "TEMPLATE"
TK_IDENT = "IDENT"
TK_OP = "OP"
TK_EOF = "EOF"

# Words that can never be identifiers. Contextual keywords (type, as, of,
# declare, namespace, from, async, ...) lex as identifiers too and are
# recognised by the parser where they matter.
RESERVED: set[str] = {
    "break",
    "case",
    "catch",
    "class",
    "const",
    "continue",
    "debugger",
    "default",
    "delete",
    "do",
    "else",
    "enum",
    "export",
    "extends",
    "false",
    "finally",
    "for",
    "function",
    "if",
    "import",
    "in",
    "instanceof",
    "new",
    "null",
    "return",
    "super",
    "switch",
    "this",
    "throw",
    "true",
    "try",
    "typeof",
    "var",
    "void",
    "while",
    "with",
}

# Multi-character operators, sorted by length descending for greedy matching
MULTI_OPS: list[str] = [
    ">>>=",
    "...",
    "===",
    "!==",
    "**=",
    "&&=",
    "||=",
    "??=",
    "<<=",
    ">>=",
    ">>>",
    "=>",
    "==",
    "!=",
    "<=",
    ">=",
    "&&",
    "||",
    "??",
    "?.",
    "++",
    "--",
    "+=",
    "-=",
    "*=",
    "/=",
    "%=",
    "&=",
    "|=",
    "^=",
    "**",
    "<<",
    ">>",
]

SINGLE_OPS: set[str] = {
    "+",
    "-",
    "*",
    "/",
    "%",
    "&",
    "|",
    "^",
    "~",
    "!",
    "<",
    ">",
    "=",
    "(",
    ")",
    "[",
    "]",
    "{",
    "}",
    ",",
    ":",
    ";",
    ".",
    "?",
    "@",
}

ESCAPE_MAP: dict[str, str] = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "b": "\b",
    "f": "\f",
    "v": "\v",
    "0": "\0",
}


class TokenizeError(Exception):
    """Error during tokenization."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Token:
    """A token with type, value, and source span.

    `start`/`end` are character offsets into the file text; `line`/`col` and
    `end_line`/`end_col` are 1-based. Template tokens keep their cooked text
    pieces and the token lists of their `${...}` substitutions in `parts`.
    """

    def __init__(self, type_: str, value: str, start: int, line: int, col: int):
        self.type: str = type_
        self.value: str = value
        self.start: int = start
        self.end: int = start
        self.line: int = line
        self.col: int = col
        self.end_line: int = line
        self.end_col: int = col
        self.newline_before: bool = False
        self.parts: list[str | list[Token]] = []

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.value)
            + ", "
            + str(self.line)
            + ", "
            + str(self.col)
            + ")"
        )


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_hex(c: str) -> bool:
    return (c >= "0" and c <= "9") or (c >= "a" and c <= "f") or (c >= "A" and c <= "F")


def _is_ident_start(c: str) -> bool:
    return c == "_" or c == "$" or c.isalpha()


def _is_ident_part(c: str) -> bool:
    return _is_ident_start(c) or _is_digit(c)


class _Lexer:
    """Cursor over the source that keeps line/column in step with the offset."""

    def __init__(self, source: str, pos: int, end: int, line: int, col: int):
        self.source: str = source
        self.pos: int = pos
        self.end: int = end
        self.line: int = line
        self.col: int = col

    def char(self, offset: int = 0) -> str:
        idx = self.pos + offset
        if idx >= self.end:
            return ""
        return self.source[idx]

    def bump(self, count: int = 1) -> None:
        i = 0
        while i < count and self.pos < self.end:
            if self.source[self.pos] == "\n":
                self.line += 1
                self.col = 1
            else:
                self.col += 1
            self.pos += 1
            i += 1

    def error(self, msg: str) -> TokenizeError:
        return TokenizeError(msg, self.line, self.col)

    # ── Pieces ──────────────────────────────────────────────

    def skip_trivia(self) -> bool:
        """Skip whitespace and comments. Returns True if a newline was crossed."""
        newline = False
        while self.pos < self.end:
            c = self.char()
            if c == "\n":
                newline = True
                self.bump()
            elif c == " " or c == "\t" or c == "\r" or c == "﻿":
                self.bump()
            elif c == "/" and self.char(1) == "/":
                while self.pos < self.end and self.char() != "\n":
                    self.bump()
            elif c == "/" and self.char(1) == "*":
                start_line, start_col = self.line, self.col
                self.bump(2)
                while self.pos < self.end and not (self.char() == "*" and self.char(1) == "/"):
                    if self.char() == "\n":
                        newline = True
                    self.bump()
                if self.pos >= self.end:
                    raise TokenizeError("unterminated comment", start_line, start_col)
                self.bump(2)
            else:
                break
        return newline

    def read_escape(self) -> str:
        """Read the escape after a backslash (cursor on the escaped char)."""
        c = self.char()
        if c == "":
            raise self.error("unexpected end of input in escape")
        if c in ESCAPE_MAP and not (c == "0" and _is_digit(self.char(1))):
            self.bump()
            return ESCAPE_MAP[c]
        if c == "x":
            digits = self.char(1) + self.char(2)
            if len(digits) != 2 or not _is_hex(digits[0]) or not _is_hex(digits[1]):
                raise self.error("invalid hex escape")
            self.bump(3)
            return chr(int(digits, 16))
        if c == "u":
            if self.char(1) == "{":
                close = self.source.find("}", self.pos, self.end)
                if close < 0:
                    raise self.error("invalid unicode escape")
                digits = self.source[self.pos + 2 : close]
                self.bump(close - self.pos + 1)
            else:
                digits = self.source[self.pos + 1 : self.pos + 5]
                self.bump(5)
            if digits == "" or not all(_is_hex(d) for d in digits):
                raise self.error("invalid unicode escape")
            return chr(int(digits, 16))
        if c == "\r" and self.char(1) == "\n":
            self.bump(2)
            return ""
        if c == "\n":
            self.bump()
            return ""
        self.bump()
        return c

    def read_number(self) -> str:
        start = self.pos
        if self.char() == "0" and self.char(1) in ("x", "X", "b", "B", "o", "O"):
            self.bump(2)
            while _is_hex(self.char()) or self.char() == "_":
                self.bump()
        else:
            while _is_digit(self.char()) or self.char() == "_":
                self.bump()
            if self.char() == "." and _is_digit(self.char(1)):
                self.bump()
                while _is_digit(self.char()) or self.char() == "_":
                    self.bump()
            elif self.char() == "." and not _is_ident_start(self.char(1)):
                self.bump()
            if self.char() in ("e", "E"):
                self.bump()
                if self.char() in ("+", "-"):
                    self.bump()
                if not _is_digit(self.char()):
                    raise self.error("invalid number exponent")
                while _is_digit(self.char()):
                    self.bump()
        if self.char() == "n":
            raise self.error("bigint literals are not supported")
        return self.source[start : self.pos]

    def read_string(self, quote: str) -> str:
        start_line, start_col = self.line, self.col
        self.bump()
        chars: list[str] = []
        while True:
            c = self.char()
            if c == "" or c == "\n":
                raise TokenizeError("unterminated string literal", start_line, start_col)
            if c == quote:
                self.bump()
                break
            if c == "\\":
                self.bump()
                chars.append(self.read_escape())
                continue
            chars.append(c)
            self.bump()
        return "".join(chars)

    def read_template(self, tok: Token) -> None:
        start_line, start_col = self.line, self.col
        self.bump()
        text: list[str] = []
        while True:
            c = self.char()
            if c == "":
                raise TokenizeError("unterminated template literal", start_line, start_col)
            if c == "`":
                self.bump()
                break
            if c == "\\":
                self.bump()
                text.append(self.read_escape())
                continue
            if c == "$" and self.char(1) == "{":
                tok.parts.append("".join(text))
                text = []
                self.bump(2)
                close = self.find_substitution_end()
                sub = _Lexer(self.source, self.pos, close, self.line, self.col)
                tok.parts.append(sub.tokenize())
                self.line, self.col = sub.line, sub.col
                self.pos = close
                self.bump()
                continue
            text.append(c)
            self.bump()
        tok.parts.append("".join(text))

    def find_substitution_end(self) -> int:
        """Offset of the `}` that closes the substitution starting at the cursor."""
        scan = _Lexer(self.source, self.pos, self.end, self.line, self.col)
        depth = 0
        while True:
            scan.skip_trivia()
            c = scan.char()
            if c == "":
                raise TokenizeError("unterminated template substitution", self.line, self.col)
            if c == '"' or c == "'":
                scan.read_string(c)
            elif c == "`":
                scan.read_template(Token(TK_TEMPLATE, "", scan.pos, scan.line, scan.col))
            elif c == "{":
                depth += 1
                scan.bump()
            elif c == "}":
                if depth == 0:
                    return scan.pos
                depth -= 1
                scan.bump()
            else:
                scan.bump()

    # ── Driver ──────────────────────────────────────────────

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        while True:
            newline = self.skip_trivia()
            start = self.pos
            line = self.line
            col = self.col
            if self.pos >= self.end:
                eof = Token(TK_EOF, "", start, line, col)
                eof.newline_before = newline
                tokens.append(eof)
                return tokens
            c = self.char()
            if _is_digit(c) or (c == "." and _is_digit(self.char(1))):
                tok = Token(TK_NUM, self.read_number(), start, line, col)
            elif c == '"' or c == "'":
                tok = Token(TK_STRING, self.read_string(c), start, line, col)
            elif c == "`":
                tok = Token(TK_TEMPLATE, "", start, line, col)
                self.read_template(tok)
            elif _is_ident_start(c) or c == "\\":
                while _is_ident_part(self.char()):
                    self.bump()
                tok = Token(TK_IDENT, self.source[start : self.pos], start, line, col)
            else:
                matched = ""
                for op in MULTI_OPS:
                    if self.source.startswith(op, self.pos) and self.pos + len(op) <= self.end:
                        matched = op
                        break
                if matched == "?." and _is_digit(self.char(2)):
                    matched = "?"
                if matched == "" and c in SINGLE_OPS:
                    matched = c
                if matched == "":
                    raise self.error("unexpected character '" + c + "'")
                self.bump(len(matched))
                tok = Token(TK_OP, matched, start, line, col)
            tok.end = self.pos
            tok.end_line = self.line
            tok.end_col = self.col
            if tok.type == TK_TEMPLATE:
                tok.value = self.source[start : self.pos]
            tok.newline_before = newline
            tokens.append(tok)


def tokenize(source: str) -> list[Token]:
    """Tokenize TypeScript source into a flat list ending with TK_EOF."""
    return _Lexer(source, 0, len(source), 1, 1).tokenize()
