"""Rename table — binding identity -> final top-level name.

The first binding registered under a textual name keeps it; later distinct
bindings get `name$1`, `name$2`, ... counted per textual name. A suffix that
is already taken is skipped, so no two bindings ever share a final name.
"""

from __future__ import annotations

import logging

from ..frontend.names import Symbol

logger = logging.getLogger(__name__)


class RenameTable:
    def __init__(self) -> None:
        self._names: dict[Symbol, str] = {}
        self._counters: dict[str, int] = {}
        self._taken: set[str] = set()

    def register(self, name: str, symbol: Symbol) -> str:
        """Final name for a binding, assigning one on first sight."""
        existing = self._names.get(symbol)
        if existing is not None:
            return existing
        count = self._counters.get(name, 0)
        final = name if count == 0 else name + "$" + str(count)
        while final in self._taken:
            count += 1
            final = name + "$" + str(count)
        self._counters[name] = count + 1
        self._taken.add(final)
        self._names[symbol] = final
        if final != name:
            logger.debug("renamed %s -> %s", name, final)
        return final

    def final_name(self, symbol: Symbol) -> str | None:
        return self._names.get(symbol)

    def __contains__(self, symbol: Symbol) -> bool:
        return symbol in self._names

    def __len__(self) -> int:
        return len(self._names)
