"""Frontend: source files -> bound, linked SourceFiles plus a type oracle.

Owns the per-compile file cache. Files are parsed and bound against the
ambient prelude exactly once; import Symbols are then linked to the Symbols
exported by the files they name.
"""

from __future__ import annotations

import logging
import os

from .ast import ImportDeclaration, Node, SourceFile
from .checker import TypeChecker
from .names import BindError, Symbol, bind_file
from .parse import ParseError, parse_source
from .prelude import load_prelude
from .tokens import TokenizeError

logger = logging.getLogger(__name__)

# Extensions tried, in order, after the bare specifier
RESOLVE_SUFFIXES: list[str] = ["", ".ts", ".js", "/index.ts", "/index.js"]


class SourceError(Exception):
    """Tokenize, parse or bind failure, located in a file."""

    def __init__(self, msg: str, file: str, line: int, col: int):
        self.msg: str = msg
        self.file: str = file
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at " + file + ":" + str(line) + ":" + str(col))


class ModuleResolutionError(Exception):
    """Unresolvable import path or import of a name the module does not export."""

    def __init__(self, msg: str, file: str, line: int, col: int):
        self.msg: str = msg
        self.file: str = file
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at " + file + ":" + str(line) + ":" + str(col))


def module_specifiers(source_file: SourceFile) -> list[tuple[str, ImportDeclaration]]:
    """Import specifiers of a file in source order, first occurrence only."""
    seen: set[str] = set()
    result: list[tuple[str, ImportDeclaration]] = []
    for stmt in source_file.statements:
        if isinstance(stmt, ImportDeclaration):
            spec = stmt.module_specifier.value
            if spec not in seen:
                seen.add(spec)
                result.append((spec, stmt))
    return result


class Frontend:
    """Parses, binds, resolves and links source files for one compile."""

    def __init__(self, root_dir: str | None = None):
        self.root_dir: str = os.path.abspath(root_dir if root_dir is not None else os.getcwd())
        self.prelude: SourceFile = load_prelude()
        self.checker: TypeChecker = TypeChecker(self.prelude)
        self._files: dict[str, SourceFile] = {}

    # ── Files ───────────────────────────────────────────────

    def parse(self, text: str, file_name: str = "main.ts") -> SourceFile:
        """Parse and bind in-memory text. Registered under file_name."""
        try:
            sf = bind_file(parse_source(text, file_name), self.prelude.scope)
        except (TokenizeError, ParseError, BindError) as e:
            raise SourceError(e.msg, file_name, e.line, e.col) from e
        self._files[file_name] = sf
        return sf

    def load(self, path: str) -> SourceFile:
        """Read, parse and bind a file; cached by canonical path."""
        path = os.path.normpath(os.path.abspath(path))
        cached = self._files.get(path)
        if cached is not None:
            return cached
        try:
            with open(path, encoding="utf-8") as f:
                text = f.read()
        except OSError as e:
            raise ModuleResolutionError("cannot read file: " + str(e.strerror), path, 1, 1) from e
        logger.debug("loaded module %s", path)
        return self.parse(text, path)

    def file(self, path: str) -> SourceFile | None:
        return self._files.get(os.path.normpath(os.path.abspath(path)))

    # ── Resolution ──────────────────────────────────────────

    def resolve_import(self, importer: SourceFile, specifier: str, node: Node | None = None) -> str:
        """Canonical path of the file `specifier` names when imported from `importer`."""
        if specifier.startswith("./") or specifier.startswith("../"):
            base_dir = os.path.dirname(os.path.abspath(importer.file_name))
        else:
            base_dir = self.root_dir
        base = os.path.normpath(os.path.join(base_dir, specifier))
        for suffix in RESOLVE_SUFFIXES:
            candidate = base + suffix
            if os.path.isfile(candidate):
                return candidate
        line = node.span.line if node is not None else 1
        col = node.span.col if node is not None else 1
        raise ModuleResolutionError("cannot find module '" + specifier + "'", importer.file_name, line, col)

    def link(self, source_file: SourceFile) -> None:
        """Point every import Symbol of a file at the binding it names."""
        for sym in source_file.imports:
            if sym.target is not None:
                continue
            path = self.resolve_import(source_file, sym.module_specifier or "", sym.declaration)
            target = self.load(path)
            if sym.import_name == "*":
                sym.target = target
                continue
            name = sym.import_name or ""
            exported = target.exports.get(name)
            if exported is None:
                node = sym.node if sym.node is not None else sym.declaration
                raise ModuleResolutionError(
                    "module '" + (sym.module_specifier or "") + "' has no exported member '" + name + "'",
                    source_file.file_name,
                    node.span.line,
                    node.span.col,
                )
            sym.target = exported

    def load_program(self, entry_path: str) -> list[SourceFile]:
        """Entry file and everything it imports, dependencies before dependents.

        Files already being visited are skipped, so import cycles terminate
        without any particular order among their members.
        """
        order: list[SourceFile] = []
        visiting: set[str] = set()
        done: set[str] = set()

        def visit(path: str) -> None:
            if path in done or path in visiting:
                return
            visiting.add(path)
            sf = self.load(path)
            for spec, decl in module_specifiers(sf):
                visit(self.resolve_import(sf, spec, decl))
            self.link(sf)
            visiting.discard(path)
            done.add(path)
            order.append(sf)

        visit(os.path.normpath(os.path.abspath(entry_path)))
        logger.debug("loaded program of %d files from %s", len(order), entry_path)
        return order

    def origin(self, sym: Symbol) -> Symbol | SourceFile:
        """The binding an identifier ultimately refers to, across imports."""
        return sym.resolve()
