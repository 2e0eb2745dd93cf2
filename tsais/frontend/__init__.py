"""Frontend package - TypeScript subset source -> bound SourceFiles and types."""

from .ast import SourceFile
from .checker import TypeChecker
from .frontend import Frontend, ModuleResolutionError, SourceError, module_specifiers
from .names import BindError, Scope, Symbol
from .parse import ParseError, parse_source
from .tokens import TokenizeError, tokenize
from .types import Type, is_assignable, type_to_string

__all__ = [
    "BindError",
    "Frontend",
    "ModuleResolutionError",
    "ParseError",
    "Scope",
    "SourceError",
    "SourceFile",
    "Symbol",
    "TokenizeError",
    "Type",
    "TypeChecker",
    "is_assignable",
    "module_specifiers",
    "parse_source",
    "tokenize",
    "type_to_string",
]
