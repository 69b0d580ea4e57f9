"""
Type definitions for Mex

Central repository for all TypedDict structures used across the project.
Ensures type consistency and provides IDE autocompletion support.
"""

from typing import Literal, TypedDict, Union


# =============================================================================
# ALLOCATION TRACKING TYPES
# =============================================================================

class Block(TypedDict):
    """One allocation currently tracked by the allocator log."""
    base: int
    size: int
    origin_line: int
    call_stack: list[str]


class Anomaly(TypedDict):
    """Consistency problem detected while replaying allocator events."""
    kind: str
    line: int
    address: int
    call_stack: list[str]
    blocks: list[Block]


# =============================================================================
# ADDRESS RESOLUTION TYPES
# =============================================================================

class Segment(TypedDict):
    """Mapped region of a binary image, half-open [start, end)."""
    start: int
    end: int
    page_offset: int
    file: str


class Section(TypedDict):
    """Named file-offset range of a binary, as listed by objdump -h."""
    start: int
    end: int
    name: str


class ResolvedSymbol(TypedDict):
    """Cached rendering of a single return address."""
    text: str
    known: bool


# =============================================================================
# LOG RECORD TYPES
# =============================================================================

class MallocRecord(TypedDict):
    kind: Literal["malloc"]
    line: int
    size: int
    address: int
    call_stack: list[str]


class ClaimRecord(TypedDict):
    kind: Literal["claim"]
    line: int
    address: int
    call_stack: list[str]


class ReallocRecord(TypedDict):
    kind: Literal["realloc"]
    line: int
    old_address: int
    size: int
    address: int
    call_stack: list[str]


class FreeRecord(TypedDict):
    kind: Literal["free"]
    line: int
    address: int
    call_stack: list[str]


class SegmentRecord(TypedDict):
    kind: Literal["segment"]
    line: int
    start: int
    end: int
    page_offset: int
    perms: str
    file: str


class SyntaxErrorRecord(TypedDict):
    """Line that matched none of the known record shapes."""
    kind: Literal["syntax"]
    line: int
    text: str


LogRecord = Union[
    MallocRecord, ClaimRecord, ReallocRecord,
    FreeRecord, SegmentRecord, SyntaxErrorRecord,
]


# =============================================================================
# REPORT TYPES
# =============================================================================

class LeakGroup(TypedDict):
    """Leaked blocks sharing the same normalized call-stack signature."""
    signature: tuple[str, ...]
    bytes: int
    block_count: int
    listed: list[Block]
    unlisted: int
    frames: list[str]


class LeakReport(TypedDict):
    """End-of-run summary of all blocks that were never freed."""
    total_bytes: int
    total_blocks: int
    groups: list[LeakGroup]


class Settings(TypedDict):
    """Runtime configuration loaded from the environment."""
    addr2line: str
    objdump: str
    tool_timeout: float
    max_listed: int
