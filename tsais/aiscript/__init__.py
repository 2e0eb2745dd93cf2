"""AiScript output language — node tree, parser and emitter."""

from __future__ import annotations

from .ast import ANode
from .emit import to_source
from .parse import ParseError as ParseError, Parser
from .tokens import TokenizeError as TokenizeError, tokenize


def parse(source: str) -> list[ANode]:
    """Parse AiScript source into a list of top-level nodes."""
    return Parser(tokenize(source)).parse_program()


def emit(nodes: list[ANode]) -> str:
    """Render top-level nodes as AiScript source."""
    return to_source(nodes)
