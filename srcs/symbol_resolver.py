"""
symbol_resolver.py

Turns raw return addresses from the allocator log into
"token: function (file:line)" text.

Resolution order for one address:
1. addr2line against the primary binary (if one was given)
2. segment map -> file offset -> section -> addr2line against the
   mapped file, for code living in shared libraries

Every distinct address is resolved once per run.
"""

import re
from typing import Callable, Optional

from log_parser import parse_pointer
from section_index import SectionIndex
from segment_table import SegmentTable
from tool_runner import ToolError, addr2line
from type_defs import ResolvedSymbol

UNKNOWN_FUNCTION = "??"
UNKNOWN_LOCATION = "0"
ELLIPSIS = "..."

MAX_LOCATION_WIDTH = 28
KEPT_LOCATION_TAIL = 25

PARENT_DIRS_PATTERN = re.compile(r"^(?:\.\./)+")


def shorten_location(location: str) -> str:
    """
    Keep a "file:line" location short enough for one report line.

    Example:
        >>> shorten_location("../../src/allocators/arena/arena_alloc.c:120")
        '...s/arena/arena_alloc.c:120'
    """
    location = PARENT_DIRS_PATTERN.sub("", location)
    if len(location) > MAX_LOCATION_WIDTH:
        location = ELLIPSIS + location[-KEPT_LOCATION_TAIL:]
    return location


class SymbolResolver:
    """Address-to-symbol cache backed by addr2line and the segment map."""

    def __init__(self, segments: SegmentTable,
                 sections: Optional[SectionIndex] = None,
                 binary: Optional[str] = None,
                 addr2line_tool: Optional[str] = None,
                 timeout: float = 10.0,
                 query: Callable[..., tuple[str, str]] = addr2line):
        self._segments = segments
        self._sections = sections
        self._binary = binary
        self._tool = addr2line_tool
        self._timeout = timeout
        self._query = query
        self._cache: dict[int, ResolvedSymbol] = {}
        self.failures = 0

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def _ask(self, binary: str, address: int,
             section: Optional[str] = None) -> tuple[str, str]:
        try:
            return self._query(self._tool, binary, address,
                               section=section, timeout=self._timeout)
        except ToolError:
            self.failures += 1
            return UNKNOWN_FUNCTION, UNKNOWN_LOCATION

    def _resolve_mapped(self, pc: int) -> tuple[str, str]:
        """Resolve an address through the segment map and section table."""
        segment = self._segments.lookup(pc)
        if segment is None or not segment["file"]:
            return UNKNOWN_FUNCTION, UNKNOWN_LOCATION

        file_offset = pc - segment["start"] + segment["page_offset"]

        section = None
        if self._sections is not None:
            section = self._sections.lookup(segment["file"], file_offset)

        if section is None:
            return self._ask(segment["file"], file_offset)

        return self._ask(segment["file"], file_offset - section["start"],
                         section=section["name"])

    def lookup(self, token: str) -> ResolvedSymbol:
        """
        Resolve one address token, consulting the cache first.

        Args:
            token: Address exactly as written in the log ("0x4005d0",
                   "4005d0" or "(nil)").

        Returns:
            Rendered text and whether a function name was found.
        """
        try:
            pc = parse_pointer(token)
        except ValueError:
            return {"text": f"{token}: {UNKNOWN_FUNCTION} ({UNKNOWN_LOCATION})",
                    "known": False}

        cached = self._cache.get(pc)
        if cached is not None:
            return cached

        if self._tool is None:
            # No addr2line at all: fall back to raw addresses
            symbol: ResolvedSymbol = {"text": token, "known": True}
            self._cache[pc] = symbol
            return symbol

        function, location = UNKNOWN_FUNCTION, UNKNOWN_LOCATION
        if self._binary:
            function, location = self._ask(self._binary, pc)

        if function == UNKNOWN_FUNCTION:
            function, location = self._resolve_mapped(pc)

        symbol = {
            "text": f"{token}: {function} ({shorten_location(location)})",
            "known": function != UNKNOWN_FUNCTION,
        }
        self._cache[pc] = symbol
        return symbol

    def resolve(self, token: str) -> str:
        """Return the rendered text of one address token."""
        return self.lookup(token)["text"]

    def resolve_frames(self, call_stack: list[str]) -> list[str]:
        """Render every frame of a call stack, one string per frame."""
        return [self.resolve(token) for token in call_stack]

    def resolve_stack(self, raw_stack) -> tuple[str, ...]:
        """
        Build the grouping signature of a call stack.

        Each run of consecutive unresolvable frames collapses into a single
        "..." so stacks differing only in unknown frames group together.

        Args:
            raw_stack: Space-separated address text, or an already split list.

        Returns:
            Hashable signature.
        """
        tokens = raw_stack.split() if isinstance(raw_stack, str) else raw_stack

        signature: list[str] = []
        for token in tokens:
            symbol = self.lookup(token)
            if symbol["known"]:
                signature.append(symbol["text"])
            elif not signature or signature[-1] != ELLIPSIS:
                signature.append(ELLIPSIS)

        return tuple(signature)
