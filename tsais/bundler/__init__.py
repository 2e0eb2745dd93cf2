"""Bundler package — multi-file programs -> one flat AiScript scope."""

from .bundler import BUNDLE_FILE, BundleError, Bundler
from .records import ModuleRecord, StatementContext, analyze_module
from .rename import RenameTable
from .sourcemap import SourceMap, SourceMapEntry

__all__ = [
    "BUNDLE_FILE",
    "BundleError",
    "Bundler",
    "ModuleRecord",
    "RenameTable",
    "SourceMap",
    "SourceMapEntry",
    "StatementContext",
    "analyze_module",
]
