"""Source map — combined-text lines back to the files they came from."""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field

from ..frontend.ast import Statement


@dataclass
class SourceMapEntry:
    """`bundled_line` is the zero-based line where the statement starts."""

    bundled_line: int
    origin_file: str
    origin_line: int
    origin_column: int
    statement: Statement | None = field(default=None, compare=False, repr=False)


class SourceMap:
    def __init__(self) -> None:
        self.entries: list[SourceMapEntry] = []
        self._lines: list[int] = []

    def add(self, entry: SourceMapEntry) -> None:
        if len(self._lines) > 0 and entry.bundled_line < self._lines[-1]:
            raise ValueError("source map entries must be added in line order")
        self.entries.append(entry)
        self._lines.append(entry.bundled_line)

    def lookup(self, line: int) -> SourceMapEntry | None:
        """Entry of the statement holding 1-based combined line `line`."""
        i = bisect.bisect_left(self._lines, line)
        if i == 0:
            return None
        return self.entries[i - 1]

    def origin(self, line: int) -> tuple[str, int, int] | None:
        """(file, line, column) a combined-text line maps back to."""
        entry = self.lookup(line)
        if entry is None:
            return None
        return entry.origin_file, entry.origin_line + (line - entry.bundled_line) - 1, entry.origin_column

    def __len__(self) -> int:
        return len(self.entries)
