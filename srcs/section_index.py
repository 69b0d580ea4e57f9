"""
section_index.py

Per-file section tables read from `objdump -h`, used to turn a file
offset into a (section, section-relative offset) pair for addr2line.
"""

import re
from bisect import bisect_right
from typing import Callable, Optional

from tool_runner import ToolError, objdump_sections
from type_defs import Section

# Example row:
#   12 .text         00001b52  0000000000001100  0000000000001100  00001100  2**4
SECTION_ROW_PATTERN = re.compile(
    r"^\s*\d+\s+(\S+)\s+([0-9a-fA-F]+)\s+[0-9a-fA-F]+\s+[0-9a-fA-F]+\s+([0-9a-fA-F]+)"
)


def parse_section_table(output: str) -> list[Section]:
    """
    Extract sections from `objdump -h` output.

    Only the name, size and file-offset columns are used; flag lines
    ("CONTENTS, ALLOC, ...") and headers are ignored.

    Returns:
        Sections sorted by starting file offset.
    """
    sections: list[Section] = []
    for line in output.splitlines():
        match = SECTION_ROW_PATTERN.match(line)
        if not match:
            continue

        size = int(match.group(2), 16)
        file_offset = int(match.group(3), 16)
        sections.append({
            "start": file_offset,
            "end": file_offset + size,
            "name": match.group(1),
        })

    sections.sort(key=lambda s: s["start"])
    return sections


class SectionIndex:
    """Lazily loaded, cached section tables keyed by file path."""

    def __init__(self, objdump: str, timeout: float = 10.0,
                 dump: Callable[..., str] = objdump_sections):
        self._objdump = objdump
        self._timeout = timeout
        self._dump = dump
        self._tables: dict[str, tuple[list[Section], list[int]]] = {}
        self.failures: dict[str, str] = {}

    def _load(self, file: str) -> tuple[list[Section], list[int]]:
        table = self._tables.get(file)
        if table is not None:
            return table

        try:
            sections = parse_section_table(
                self._dump(self._objdump, file, timeout=self._timeout)
            )
        except ToolError as e:
            # Unreadable file: remember the reason, resolve without sections
            self.failures[file] = str(e)
            sections = []

        table = (sections, [s["start"] for s in sections])
        self._tables[file] = table
        return table

    def sections_for(self, file: str) -> list[Section]:
        """Return the sorted section table of a file, dumping it on first use."""
        return self._load(file)[0]

    def lookup(self, file: str, file_offset: int) -> Optional[Section]:
        """
        Find the section of `file` containing a file offset.

        Returns:
            The matching section, or None if no section covers the offset.
        """
        sections, starts = self._load(file)
        i = bisect_right(starts, file_offset) - 1
        if i >= 0 and file_offset < sections[i]["end"]:
            return sections[i]
        return None
