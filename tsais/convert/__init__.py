"""Conversion engine package — TypeScript subset -> AiScript node tree."""

from .context import (
    RESERVED_WORDS,
    ConvertContext,
    ConvertError,
    ConvertPlugin,
    ModuleResult,
    PluginFactory,
    SemanticError,
    TypeViolation,
    UnsupportedSyntaxError,
)
from .engine import Converter
from .plugins import DEFAULT_PLUGINS

__all__ = [
    "DEFAULT_PLUGINS",
    "RESERVED_WORDS",
    "ConvertContext",
    "ConvertError",
    "ConvertPlugin",
    "Converter",
    "ModuleResult",
    "PluginFactory",
    "SemanticError",
    "TypeViolation",
    "UnsupportedSyntaxError",
]
