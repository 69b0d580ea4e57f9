"""
segment_table.py

Table of the binary images mapped into the traced process.

Segments are kept pairwise disjoint and sorted by start address so a
program counter can be mapped back to its file with a binary search.
A newly mapped segment always wins over whatever it overlaps.
"""

from bisect import bisect_right
from typing import Iterator, Optional

from type_defs import Segment


class SegmentTable:
    """Sorted set of disjoint virtual-address ranges."""

    def __init__(self):
        self._segments: list[Segment] = []
        self._starts: list[int] = []

    def __len__(self) -> int:
        return len(self._segments)

    def __iter__(self) -> Iterator[Segment]:
        return iter(self._segments)

    def insert(self, start: int, end: int, page_offset: int, file: str) -> Segment:
        """
        Map a new segment, clipping or evicting whatever it overlaps.

        Existing segments are processed in table order:
        - fully covered by [start, end): removed
        - low end overlapped: start moved up to `end`, page offset advanced
        - high end overlapped, or new range strictly inside: end cut to `start`

        Args:
            start: First mapped address.
            end: One past the last mapped address.
            page_offset: File offset backing `start`.
            file: Backing file path, "" for anonymous memory.

        Returns:
            The inserted segment.

        Raises:
            ValueError: If the range is empty or inverted.
        """
        if start >= end:
            raise ValueError(f"empty segment range {start:#x}-{end:#x}")

        kept = []
        for segment in self._segments:
            if segment["end"] <= start or segment["start"] >= end:
                kept.append(segment)
                continue

            if start <= segment["start"] and end >= segment["end"]:
                continue

            segment = segment.copy()
            if start <= segment["start"]:
                # Low end overlapped
                clipped = end - segment["start"]
                segment["start"] = end
                segment["page_offset"] += clipped
            else:
                segment["end"] = start

            kept.append(segment)

        new_segment: Segment = {
            "start": start,
            "end": end,
            "page_offset": page_offset,
            "file": file,
        }
        kept.append(new_segment)
        kept.sort(key=lambda s: s["start"])

        self._segments = kept
        self._starts = [s["start"] for s in kept]
        return new_segment

    def lookup(self, address: int) -> Optional[Segment]:
        """
        Find the segment containing an address.

        Returns:
            The matching segment, or None if the address is unmapped.
        """
        i = bisect_right(self._starts, address) - 1
        if i >= 0 and address < self._segments[i]["end"]:
            return self._segments[i]
        return None
