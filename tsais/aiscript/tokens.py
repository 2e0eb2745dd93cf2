"""AiScript tokenizer — lexes output-language source into a flat token list."""

from __future__ import annotations


# Token type constants
TK_NUM = "NUM"
TK_STRING = "STRING"
TK_TEMPLATE = "TEMPLATE"
TK_IDENT = "IDENT"
TK_OP = "OP"
TK_EOF = "EOF"

KEYWORDS: set[str] = {
    "break",
    "case",
    "continue",
    "default",
    "each",
    "elif",
    "else",
    "eval",
    "false",
    "if",
    "let",
    "loop",
    "match",
    "null",
    "return",
    "true",
    "var",
}

# Multi-character operators, sorted by length descending for greedy matching
MULTI_OPS: list[str] = [
    "=>",
    "&&",
    "||",
    "<=",
    ">=",
    "==",
    "!=",
    "+=",
    "-=",
]

SINGLE_OPS: set[str] = {
    "+",
    "-",
    "*",
    "/",
    "%",
    "^",
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
}


class TokenizeError(Exception):
    """Error during tokenization."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))


class Token:
    """A token with type, value, and position.

    Template tokens carry their pieces in `parts`: plain strings for text and
    `(source, line, col)` tuples for `{...}` interpolations.
    """

    def __init__(self, type_: str, value: str, line: int, col: int):
        self.type: str = type_
        self.value: str = value
        self.line: int = line
        self.col: int = col
        self.newline_before: bool = False
        self.space_before: bool = False
        self.parts: list[str | tuple[str, int, int]] = []

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


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_" or c == "$"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def _read_escape(c: str) -> str:
    if c in ESCAPE_MAP:
        return ESCAPE_MAP[c]
    return c


def tokenize(source: str, line: int = 1, col: int = 1) -> list[Token]:
    """Tokenize AiScript source into a flat list ending with TK_EOF."""
    tokens: list[Token] = []
    pos = 0
    length = len(source)
    saw_newline = False
    saw_space = False

    while pos < length:
        c = source[pos]

        # Newlines
        if c == "\n":
            pos += 1
            line += 1
            col = 1
            saw_newline = True
            saw_space = True
            continue

        # Whitespace
        if c == " " or c == "\t" or c == "\r":
            pos += 1
            col += 1
            saw_space = True
            continue

        # Comments: // and /* */
        if c == "/" and pos + 1 < length and source[pos + 1] == "/":
            while pos < length and source[pos] != "\n":
                pos += 1
            continue
        if c == "/" and pos + 1 < length and source[pos + 1] == "*":
            end = source.find("*/", pos + 2)
            if end < 0:
                raise TokenizeError("unterminated comment", line, col)
            while pos < end + 2:
                if source[pos] == "\n":
                    line += 1
                    col = 1
                    saw_newline = True
                else:
                    col += 1
                pos += 1
            saw_space = True
            continue

        start_line = line
        start_col = col
        tok: Token

        # Number
        if _is_digit(c):
            start = pos
            while pos < length and _is_digit(source[pos]):
                pos += 1
            if pos + 1 < length and source[pos] == "." and _is_digit(source[pos + 1]):
                pos += 1
                while pos < length and _is_digit(source[pos]):
                    pos += 1
            if pos < length and (source[pos] == "e" or source[pos] == "E"):
                pos += 1
                if pos < length and (source[pos] == "+" or source[pos] == "-"):
                    pos += 1
                if pos >= length or not _is_digit(source[pos]):
                    raise TokenizeError("invalid number exponent", start_line, start_col)
                while pos < length and _is_digit(source[pos]):
                    pos += 1
            col += pos - start
            tok = Token(TK_NUM, source[start:pos], start_line, start_col)

        # String literal: "..." or '...'
        elif c == '"' or c == "'":
            quote = c
            pos += 1
            col += 1
            chars: list[str] = []
            while pos < length and source[pos] != quote:
                ch = source[pos]
                if ch == "\\":
                    if pos + 1 >= length:
                        raise TokenizeError("unterminated string literal", start_line, start_col)
                    chars.append(_read_escape(source[pos + 1]))
                    pos += 2
                    col += 2
                    continue
                if ch == "\n":
                    line += 1
                    col = 0
                chars.append(ch)
                pos += 1
                col += 1
            if pos >= length:
                raise TokenizeError("unterminated string literal", start_line, start_col)
            pos += 1
            col += 1
            tok = Token(TK_STRING, "".join(chars), start_line, start_col)

        # Template literal: `text{expr}text`
        elif c == "`":
            pos += 1
            col += 1
            tok = Token(TK_TEMPLATE, "`", start_line, start_col)
            text: list[str] = []
            while True:
                if pos >= length:
                    raise TokenizeError("unterminated template literal", start_line, start_col)
                ch = source[pos]
                if ch == "`":
                    pos += 1
                    col += 1
                    break
                if ch == "\\":
                    if pos + 1 >= length:
                        raise TokenizeError("unterminated template literal", start_line, start_col)
                    text.append(source[pos + 1])
                    pos += 2
                    col += 2
                    continue
                if ch == "{":
                    if len(text) > 0:
                        tok.parts.append("".join(text))
                        text = []
                    pos += 1
                    col += 1
                    expr_line = line
                    expr_col = col
                    expr_start = pos
                    pos = _skip_interpolation(source, pos, start_line, start_col)
                    for skipped in source[expr_start:pos]:
                        if skipped == "\n":
                            line += 1
                            col = 1
                        else:
                            col += 1
                    tok.parts.append((source[expr_start:pos], expr_line, expr_col))
                    pos += 1
                    col += 1
                    continue
                if ch == "\n":
                    line += 1
                    col = 0
                text.append(ch)
                pos += 1
                col += 1
            if len(text) > 0:
                tok.parts.append("".join(text))

        # Identifier, keyword, or namespaced identifier (Ns:member)
        elif _is_alpha(c):
            start = pos
            while pos < length and _is_alnum(source[pos]):
                pos += 1
            while (
                pos + 1 < length
                and source[pos] == ":"
                and _is_alpha(source[pos + 1])
                and source[start:pos] not in KEYWORDS
            ):
                pos += 1
                while pos < length and _is_alnum(source[pos]):
                    pos += 1
            word = source[start:pos]
            col += pos - start
            if word in KEYWORDS:
                tok = Token(TK_OP, word, start_line, start_col)
            else:
                tok = Token(TK_IDENT, word, start_line, start_col)

        else:
            matched = ""
            for op in MULTI_OPS:
                if source.startswith(op, pos):
                    matched = op
                    break
            if matched == "" and c in SINGLE_OPS:
                matched = c
            if matched == "":
                raise TokenizeError("unexpected character '" + c + "'", line, col)
            pos += len(matched)
            col += len(matched)
            tok = Token(TK_OP, matched, start_line, start_col)

        tok.newline_before = saw_newline
        tok.space_before = saw_space
        saw_newline = False
        saw_space = False
        tokens.append(tok)

    eof = Token(TK_EOF, "", line, col)
    eof.newline_before = saw_newline
    tokens.append(eof)
    return tokens


def _skip_interpolation(source: str, pos: int, line: int, col: int) -> int:
    """Return the index of the `}` closing an interpolation that starts at pos."""
    depth = 0
    length = len(source)
    while pos < length:
        c = source[pos]
        if c == '"' or c == "'":
            pos += 1
            while pos < length and source[pos] != c:
                if source[pos] == "\\":
                    pos += 1
                pos += 1
        elif c == "`":
            pos += 1
            while pos < length and source[pos] != "`":
                if source[pos] == "\\":
                    pos += 1
                pos += 1
        elif c == "{":
            depth += 1
        elif c == "}":
            if depth == 0:
                return pos
            depth -= 1
        pos += 1
    raise TokenizeError("unterminated template interpolation", line, col)
