"""
leak_reporter.py

Groups the blocks still live at end of run by allocation site.
"""

from typing import Iterable

from symbol_resolver import SymbolResolver
from type_defs import Block, LeakGroup, LeakReport

DEFAULT_MAX_LISTED = 6


def build_leak_report(blocks: Iterable[Block], resolver: SymbolResolver,
                      max_listed: int = DEFAULT_MAX_LISTED) -> LeakReport:
    """
    Summarize leaked blocks, grouped by normalized call-stack signature.

    Groups come out largest first (by block count); equal-sized groups
    keep the order in which their first block was encountered. Inside a
    group, blocks are ordered by the log line that allocated or last
    claimed them.

    Args:
        blocks: Blocks still live when the log ended.
        resolver: Symbol resolver used for signatures and frames.
        max_listed: How many blocks to list per group.

    Returns:
        Report with totals and groups; no groups when nothing leaked.
    """
    blocks = list(blocks)
    report: LeakReport = {
        "total_bytes": sum(block["size"] for block in blocks),
        "total_blocks": len(blocks),
        "groups": [],
    }

    if not blocks:
        return report

    # dict keeps first-seen order, which the stable sort below preserves
    by_signature: dict[tuple[str, ...], list[Block]] = {}
    for block in blocks:
        signature = resolver.resolve_stack(block["call_stack"])
        by_signature.setdefault(signature, []).append(block)

    ordered = sorted(by_signature.items(), key=lambda item: len(item[1]), reverse=True)

    for signature, members in ordered:
        members.sort(key=lambda b: (b["origin_line"], b["base"]))
        group: LeakGroup = {
            "signature": signature,
            "bytes": sum(b["size"] for b in members),
            "block_count": len(members),
            "listed": members[:max_listed],
            "unlisted": max(0, len(members) - max_listed),
            "frames": resolver.resolve_frames(members[0]["call_stack"]),
        }
        report["groups"].append(group)

    return report
