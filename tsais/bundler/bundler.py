"""Bundler — flattens a module graph into one scope and converts it once.

Phases:
1. discover: depth-first from the entry, one ModuleRecord per file
2. rename: exports first, then other top-level declarations, in discovery order
3. order: dependencies before dependents
4. combine: serialize every body statement, recording a source-map entry each
5. convert: parse and convert the combined text as a single file
Failures in phase 5 are mapped back to the file and line they came from.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, TypeVar

from ..aiscript.ast import ANode
from ..convert.context import ConvertError, PluginFactory
from ..convert.engine import Converter
from ..frontend.ast import ExportDeclaration, Node, SourceFile
from ..frontend.frontend import Frontend, ModuleResolutionError, SourceError, module_specifiers
from ..frontend.names import Symbol
from .records import ModuleRecord, analyze_module, top_level_declarations
from .rename import RenameTable
from .serialize import SerializeError, StatementSerializer, textual_name
from .sourcemap import SourceMap, SourceMapEntry

logger = logging.getLogger(__name__)

BUNDLE_FILE = "<bundle>"

T = TypeVar("T")


class BundleError(Exception):
    """Bundling failure located in an original source file."""

    def __init__(
        self,
        msg: str,
        source_file: str,
        line: int,
        column: int,
        node: Node | None = None,
        cause: Exception | None = None,
    ):
        self.msg: str = msg
        self.source_file: str = source_file
        self.line: int = line
        self.column: int = column
        self.node: Node | None = node
        self.cause: Exception | None = cause
        super().__init__(msg + " at " + source_file + ":" + str(line) + ":" + str(column))


class Bundler:
    """One bundle of one entry file. Not reusable across entries."""

    def __init__(self, entry_file: str, root_dir: str | None = None, plugins: list[PluginFactory] | None = None):
        self.entry_file: str = os.path.normpath(os.path.abspath(entry_file))
        self.frontend: Frontend = Frontend(root_dir)
        self.converter: Converter = Converter(plugins, self.frontend)
        self.modules: dict[str, ModuleRecord] = {}
        self.resolved: dict[tuple[str, str], str] = {}
        self.table: RenameTable = RenameTable()
        self.source_map: SourceMap = SourceMap()
        self.combined_source: str = ""

    def bundle(self) -> list[ANode]:
        self._discover()
        self._rename()
        order = self.processing_order()
        self.combined_source = self._combine(order)
        nodes = self._convert()
        logger.debug("bundled %d modules into %d statements", len(self.modules), len(nodes))
        return nodes

    # ── Discovery ───────────────────────────────────────────

    def _discover(self) -> None:
        analyzing: set[str] = set()

        def analyze(path: str) -> None:
            if path in self.modules or path in analyzing:
                return
            analyzing.add(path)
            sf = self._guard(lambda: self.frontend.load(path))
            self._check_module(sf)
            self.modules[path] = analyze_module(sf)
            for spec, decl in module_specifiers(sf):
                target = self._guard(lambda: self.frontend.resolve_import(sf, spec, decl))
                self.resolved[(path, spec)] = target
                analyze(target)
            self._guard(lambda: self.frontend.link(sf))
            analyzing.discard(path)

        analyze(self.entry_file)
        logger.debug("discovered %d modules from %s", len(self.modules), self.entry_file)

    def _check_module(self, sf: SourceFile) -> None:
        for stmt in sf.statements:
            if isinstance(stmt, ExportDeclaration) and (stmt.module_specifier is not None or stmt.elements is None):
                raise BundleError("re-exports are not supported", sf.file_name, stmt.span.line, stmt.span.col, stmt)

    def _guard(self, fn: Callable[[], T]) -> T:
        """Run a frontend step, turning its errors into BundleErrors."""
        try:
            return fn()
        except (SourceError, ModuleResolutionError) as e:
            raise BundleError(e.msg, e.file, e.line, e.col, None, e) from e

    # ── Renaming and ordering ───────────────────────────────

    def _rename(self) -> None:
        for record in self.modules.values():
            for sym in record.exports.values():
                origin = sym.resolve()
                if isinstance(origin, Symbol):
                    self.table.register(textual_name(origin), origin)
            for stmt in record.statements:
                for sym in top_level_declarations(stmt):
                    self.table.register(sym.name, sym)
        logger.debug("rename table holds %d bindings", len(self.table))

    def processing_order(self) -> list[str]:
        """Module paths with every dependency ahead of its dependents."""
        visited: set[str] = set()
        order: list[str] = []

        def visit(path: str) -> None:
            if path in visited:
                return
            visited.add(path)
            record = self.modules[path]
            for spec in record.dependencies:
                target = self.resolved.get((path, spec))
                if target is not None and target in self.modules:
                    visit(target)
            order.append(path)

        for path in self.modules:
            visit(path)
        return order

    # ── Combination and conversion ──────────────────────────

    def _combine(self, order: list[str]) -> str:
        serializer = StatementSerializer(self.table)
        pieces: list[str] = []
        line = 0
        for path in order:
            record = self.modules[path]
            for stmt, context in zip(record.statements, record.contexts):
                try:
                    text = serializer.statement_text(record, stmt)
                except SerializeError as e:
                    raise BundleError(e.msg, record.file_path, e.line, e.col, e.node, e) from e
                self.source_map.add(
                    SourceMapEntry(line, context.source_file, context.start_line, context.start_column, stmt)
                )
                pieces.append(text + ";\n")
                line += text.count("\n") + 1
        return "".join(pieces)

    def _convert(self) -> list[ANode]:
        try:
            sf = self.frontend.parse(self.combined_source, BUNDLE_FILE)
            return self.converter.convert_module(sf).statements
        except SourceError as e:
            raise self._remap(e.msg, e.line, e.col, e) from e
        except ConvertError as e:
            raise self._remap(e.msg, e.line, e.col, e) from e
        except ModuleResolutionError as e:
            raise self._remap(e.msg, e.line, e.col, e) from e

    def _remap(self, msg: str, line: int, col: int, cause: Exception) -> BundleError:
        entry = self.source_map.lookup(line)
        if entry is None:
            return BundleError(msg, BUNDLE_FILE, line, col, None, cause)
        origin_line = entry.origin_line + (line - entry.bundled_line) - 1
        return BundleError(
            "error converting statement: " + msg,
            entry.origin_file,
            origin_line,
            entry.origin_column,
            entry.statement,
            cause,
        )
