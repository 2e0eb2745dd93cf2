"""tsais — TypeScript subset to AiScript transpiler."""

from __future__ import annotations

from . import aiscript
from .aiscript.ast import ANode
from .bundler import BundleError, Bundler
from .convert import ConvertError, Converter, PluginFactory
from .frontend import Frontend, ModuleResolutionError, SourceError

__all__ = [
    "ANode",
    "BundleError",
    "ConvertError",
    "ModuleResolutionError",
    "SourceError",
    "bundle",
    "convert",
    "convert_program",
    "parse_aiscript",
    "stringify",
]


def convert(source: str, file_name: str = "main.ts", plugins: list[PluginFactory] | None = None) -> list[ANode]:
    """Convert one self-contained source text; imports are rejected."""
    return Converter(plugins).convert_source(source, file_name)


def convert_program(
    entry_file: str, root_dir: str | None = None, plugins: list[PluginFactory] | None = None
) -> list[ANode]:
    """Convert an entry file and its imports, one scope per imported module."""
    return Converter(plugins, Frontend(root_dir)).convert_program(entry_file)


def bundle(entry_file: str, root_dir: str | None = None, plugins: list[PluginFactory] | None = None) -> list[ANode]:
    """Flatten an entry file and its imports into one scope and convert it."""
    return Bundler(entry_file, root_dir, plugins).bundle()


def stringify(nodes: list[ANode]) -> str:
    return aiscript.emit(nodes)


def parse_aiscript(source: str) -> list[ANode]:
    return aiscript.parse(source)
