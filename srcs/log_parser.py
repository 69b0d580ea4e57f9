"""
Allocator log parser module.

Turns each line of an instrumented-allocator event log into a tagged
record dictionary. Lines matching no known shape become "syntax" records
so the caller can report them and carry on.
"""

import re
from typing import Iterable, Iterator, Optional

from type_defs import LogRecord

# Hex literal with optional 0x prefix, or the "(nil)" null pointer
PTR = r"(?:0[xX])?[0-9a-fA-F]+|\(nil\)"

MALLOC_PATTERN = re.compile(
    rf"^malloc\((\d+)\)\s*->\s*({PTR})\s*:(.*)$"
)
CLAIM_PATTERN = re.compile(
    rf"^claim\(({PTR})\)\s*:(.*)$"
)
REALLOC_PATTERN = re.compile(
    rf"^realloc\(({PTR}),\s*(\d+)\)\s*->\s*({PTR})\s*:(.*)$"
)
FREE_PATTERN = re.compile(
    rf"^free\(({PTR})\)\s*:(.*)$"
)
# Example: "segment: 7f00a000-7f00b000 00001000 r-xp /usr/lib/libfoo.so"
SEGMENT_PATTERN = re.compile(
    rf"^segment:\s*({PTR})-({PTR})\s+({PTR})\s+(\S{{4}})(?:\s+(.*))?$"
)


def parse_pointer(token: str) -> int:
    """
    Convert a pointer literal to an integer.

    Args:
        token: Hex literal, with or without 0x, or "(nil)".

    Returns:
        Numeric address; "(nil)" is 0.

    Raises:
        ValueError: If the token is not a pointer literal.
    """
    if token == "(nil)":
        return 0
    return int(token, 16)


def split_stack(text: str) -> list[str]:
    """Split a space-separated return-address list into raw tokens."""
    return text.split()


def parse_line(line_number: int, text: str) -> Optional[LogRecord]:
    """
    Parse one log line.

    Args:
        line_number: 1-based position of the line in the log.
        text: Line content (trailing newline allowed).

    Returns:
        Record dictionary tagged by its "kind" key, or None for blank lines.

    Example:
        >>> parse_line(1, "malloc(16) -> 0x1000:0x10")["kind"]
        'malloc'
    """
    text = text.rstrip("\r\n")
    if not text.strip():
        return None

    match = MALLOC_PATTERN.match(text)
    if match:
        return {
            "kind": "malloc",
            "line": line_number,
            "size": int(match.group(1)),
            "address": parse_pointer(match.group(2)),
            "call_stack": split_stack(match.group(3)),
        }

    match = CLAIM_PATTERN.match(text)
    if match:
        return {
            "kind": "claim",
            "line": line_number,
            "address": parse_pointer(match.group(1)),
            "call_stack": split_stack(match.group(2)),
        }

    match = REALLOC_PATTERN.match(text)
    if match:
        return {
            "kind": "realloc",
            "line": line_number,
            "old_address": parse_pointer(match.group(1)),
            "size": int(match.group(2)),
            "address": parse_pointer(match.group(3)),
            "call_stack": split_stack(match.group(4)),
        }

    match = FREE_PATTERN.match(text)
    if match:
        return {
            "kind": "free",
            "line": line_number,
            "address": parse_pointer(match.group(1)),
            "call_stack": split_stack(match.group(2)),
        }

    match = SEGMENT_PATTERN.match(text)
    if match:
        return {
            "kind": "segment",
            "line": line_number,
            "start": parse_pointer(match.group(1)),
            "end": parse_pointer(match.group(2)),
            "page_offset": parse_pointer(match.group(3)),
            "perms": match.group(4),
            "file": (match.group(5) or "").strip(),
        }

    return {"kind": "syntax", "line": line_number, "text": text}


def parse_log(lines: Iterable[str]) -> Iterator[LogRecord]:
    """
    Parse a whole log lazily, numbering lines from 1.

    Blank lines are skipped but still counted.
    """
    for line_number, text in enumerate(lines, start=1):
        record = parse_line(line_number, text)
        if record is not None:
            yield record
