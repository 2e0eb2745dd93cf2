"""Conversion engine — bound SourceFiles -> AiScript node lists.

One Converter owns one generated-identifier counter, so independent compiles
never share names or state.
"""

from __future__ import annotations

import logging

from ..aiscript.ast import ABlock, ADef, AIdent, ANode
from ..frontend.ast import Node, SourceFile
from ..frontend.frontend import Frontend, ModuleResolutionError
from .context import GEN_PREFIX, ConvertContext, ModuleRefResolver, ModuleResult, PluginFactory, base36
from .plugins import DEFAULT_PLUGINS, export_table

logger = logging.getLogger(__name__)


class Converter:
    """Drives the plugin list over whole modules and programs."""

    def __init__(self, plugins: list[PluginFactory] | None = None, frontend: Frontend | None = None):
        self.plugins: list[PluginFactory] = list(plugins) if plugins is not None else list(DEFAULT_PLUGINS)
        self.frontend: Frontend = frontend if frontend is not None else Frontend()
        self._counter: int = 0

    def unique_identifier(self) -> AIdent:
        self._counter += 1
        return AIdent(GEN_PREFIX + base36(self._counter).rjust(5, "0"))

    # ── Modules ─────────────────────────────────────────────

    def convert_module(self, source_file: SourceFile, module_ref: ModuleRefResolver | None = None) -> ModuleResult:
        """Convert one file's statements; imports go through `module_ref`."""
        logger.debug("converting module %s", source_file.file_name)
        ctx = ConvertContext(self, source_file, self.frontend.checker, self.plugins, module_ref)
        statements = ctx.statements(source_file.statements)
        logger.debug(
            "converted %s: %d statements, %d exports",
            source_file.file_name,
            len(statements),
            len(ctx.exports),
        )
        return ModuleResult(statements, dict(ctx.exports))

    def convert_source(self, text: str, file_name: str = "main.ts") -> list[ANode]:
        """Single-source form. A non-empty export table is appended as an object."""
        result = self.convert_module(self.frontend.parse(text, file_name))
        if len(result.exports) > 0:
            return result.statements + [export_table(result.exports)]
        return result.statements

    # ── Programs ────────────────────────────────────────────

    def convert_program(self, entry_path: str) -> list[ANode]:
        """Entry file plus its imports, each non-entry module in its own scope.

        Every imported module becomes `let <id> = eval { ...; {exports} }`
        ahead of the modules that import it; the entry module's statements
        follow at top level.
        """
        files = self.frontend.load_program(entry_path)
        entry = files[-1]
        ids: dict[str, AIdent] = {}
        for sf in files[:-1]:
            ids[sf.file_name] = self.unique_identifier()
        out: list[ANode] = []
        for sf in files:
            result = self.convert_module(sf, self._resolver(sf, ids))
            if sf is entry:
                out.extend(result.statements)
                if len(result.exports) > 0:
                    out.append(export_table(result.exports))
                continue
            body = list(result.statements)
            if len(result.exports) > 0:
                body.append(export_table(result.exports))
            out.append(ADef(ids[sf.file_name], ABlock(body), mutable=False))
        logger.debug("converted program of %d modules from %s", len(files), entry_path)
        return out

    def _resolver(self, importer: SourceFile, ids: dict[str, AIdent]) -> ModuleRefResolver:
        def module_ref(specifier: str, node: Node) -> AIdent:
            path = self.frontend.resolve_import(importer, specifier, node)
            ident = ids.get(path)
            if ident is None:
                raise ModuleResolutionError(
                    "circular import of '" + specifier + "' is not supported",
                    importer.file_name,
                    node.span.line,
                    node.span.col,
                )
            return AIdent(ident.name)

        return module_ref
