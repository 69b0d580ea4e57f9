"""
block_tracker.py

Replays allocator events to reconstruct the set of live blocks.

Inconsistent events (double allocation of a live address, claim or free
of an address nobody owns) are reported to the listener as soon as they
are seen; the tracker keeps going with its best reconstruction.
"""

from typing import Callable, Iterator, Optional

from type_defs import Anomaly, Block

IN_USE_ALLOCATION = "in_use_allocation"
BAD_CLAIM = "bad_claim"
BAD_FREE = "bad_free"

ANOMALY_MESSAGES = {
    IN_USE_ALLOCATION: "in-use address returned by allocator",
    BAD_CLAIM: "claim asserted on not-in-use block",
    BAD_FREE: "bad free of not-allocated address",
}


def _snapshot(block: Block) -> Block:
    """Copy a block so later claims do not rewrite past reports."""
    return {**block, "call_stack": list(block["call_stack"])}


class BlockTracker:
    """Live blocks keyed by base address."""

    def __init__(self, on_anomaly: Optional[Callable[[Anomaly], None]] = None):
        self.blocks: dict[int, Block] = {}
        self.anomalies: list[Anomaly] = []
        self._on_anomaly = on_anomaly

    def __len__(self) -> int:
        return len(self.blocks)

    def __contains__(self, base: int) -> bool:
        return base in self.blocks

    def get(self, base: int) -> Optional[Block]:
        return self.blocks.get(base)

    def live_blocks(self) -> Iterator[Block]:
        """Iterate over live blocks in allocation order."""
        return iter(self.blocks.values())

    def _report(self, kind: str, line: int, address: int,
                call_stack: list[str], blocks: list[Block]) -> None:
        anomaly: Anomaly = {
            "kind": kind,
            "line": line,
            "address": address,
            "call_stack": list(call_stack),
            "blocks": [_snapshot(block) for block in blocks],
        }
        self.anomalies.append(anomaly)
        if self._on_anomaly is not None:
            self._on_anomaly(anomaly)

    def allocate(self, line: int, base: int, size: int, call_stack: list[str]) -> None:
        """
        Record a block returned by the allocator.

        A base that is already live means the allocator handed out memory
        still in use (or a free went unlogged). Both blocks are reported and
        the new one replaces the old.
        """
        if not base:
            return

        block: Block = {
            "base": base,
            "size": size,
            "origin_line": line,
            "call_stack": list(call_stack),
        }

        previous = self.blocks.get(base)
        if previous is not None:
            self._report(IN_USE_ALLOCATION, line, base, call_stack, [previous, block])

        self.blocks[base] = block

    def claim(self, line: int, base: int, call_stack: list[str]) -> None:
        """Move ownership of a live block to a new call site, keeping its size."""
        if not base:
            return

        block = self.blocks.get(base)
        if block is None:
            self._report(BAD_CLAIM, line, base, call_stack, [])
            return

        block["origin_line"] = line
        block["call_stack"] = list(call_stack)

    def free(self, line: int, base: int, call_stack: list[str]) -> None:
        """Release a live block; unknown addresses are reported."""
        if not base:
            return

        if self.blocks.pop(base, None) is None:
            self._report(BAD_FREE, line, base, call_stack, [])

    def realloc(self, line: int, old_base: int, new_base: int,
                new_size: int, call_stack: list[str]) -> None:
        """Free the old block, then allocate the new one, in that order."""
        self.free(line, old_base, call_stack)
        self.allocate(line, new_base, new_size, call_stack)
