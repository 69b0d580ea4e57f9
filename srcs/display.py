"""
Display Module for Mex

Formats and displays diagnostics and the leak summary in the terminal.
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape

from colors import (
    GREEN, DARK_GREEN, LIGHT_YELLOW, DARK_YELLOW,
    DARK_PINK, RED, GRAY
)
from type_defs import Anomaly, Block, LeakGroup, LeakReport

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)

USAGE = """Usage: mex [binary] < events.log

Reads an allocator event log on standard input and reports blocks that
were never freed, grouped by allocation site.

  binary      executable used for direct addr2line lookups (optional)
  -q, --quiet hide tool availability notes and the closing recap
  -h, --help  show this help
"""


def format_address(address: int) -> str:
    """Render an address zero-padded to at least 8 hex digits."""
    return f"0x{address:08x}"


def print_error(message: str) -> None:
    """Display a formatted error message on stderr."""
    err_console.print(f"\n[{RED}]Error: {escape(message)}[/]\n")


def print_warning(message: str) -> None:
    """Display a warning on stderr."""
    err_console.print(f"[{DARK_YELLOW}]Warning: {escape(message)}[/]")


def print_note(message: str) -> None:
    err_console.print(f"[{GRAY}]{escape(message)}[/]")


def display_usage(out: Optional[Console] = None) -> None:
    (out or console).print(escape(USAGE), end="")


def _describe_block(block: Block) -> str:
    return (
        f"{block['size']} bytes at {format_address(block['base'])} "
        f"from line {block['origin_line']}"
    )


def _print_raw_stack(out: Console, call_stack: list[str], indent: str) -> None:
    if not call_stack:
        out.print(f"{indent}[{GRAY}](no call stack)[/]")
        return
    out.print(f"{indent}[{GRAY}]{escape(' '.join(call_stack))}[/]")


def display_syntax_error(line: int, text: str, out: Optional[Console] = None) -> None:
    """Report a log line that matched no record shape."""
    out = out or console
    out.print(f"[{RED}]line {line}: syntax error:[/] {escape(text)}")


def display_anomaly(anomaly: Anomaly, message: str, out: Optional[Console] = None) -> None:
    """
    Report one allocator inconsistency as soon as it is detected.

    Call stacks are printed raw: the segment map may still be incomplete
    at this point of the log.

    Args:
        anomaly: Anomaly raised by the block tracker.
        message: Human-readable description of the anomaly kind.
        out: Console to print to (stdout by default).
    """
    out = out or console

    out.print(
        f"[{DARK_PINK}]line {anomaly['line']}: {message} "
        f"{format_address(anomaly['address'])}[/]"
    )

    if not anomaly["blocks"]:
        _print_raw_stack(out, anomaly["call_stack"], "    ")
        return

    labels = ["previous", "new"]
    for label, block in zip(labels, anomaly["blocks"]):
        out.print(f"  [{LIGHT_YELLOW}]{label}: {_describe_block(block)}[/]")
        _print_raw_stack(out, block["call_stack"], "      ")


def _display_group(group: LeakGroup, number: int, total: int, out: Console) -> None:
    out.print(
        f"[{DARK_YELLOW}]{group['bytes']} bytes in {group['block_count']} blocks[/] "
        f"[{GRAY}](site {number} / {total})[/]"
    )

    for block in group["listed"]:
        out.print(f"    [{LIGHT_YELLOW}]{_describe_block(block)}[/]")

    if group["unlisted"]:
        out.print(f"    [{GRAY}]... and {group['unlisted']} more blocks[/]")

    out.print(f"  [{GREEN}]allocated at:[/]")
    if not group["frames"]:
        out.print(f"    [{GRAY}](no call stack)[/]")
    for frame in group["frames"]:
        out.print(f"    {escape(frame)}")


def display_leak_report(report: LeakReport, out: Optional[Console] = None) -> None:
    """
    Display the end-of-run leak summary.

    Nothing is printed when no block leaked.
    """
    out = out or console

    if not report["total_blocks"]:
        return

    groups = report["groups"]
    summary = (
        f"{report['total_bytes']} bytes in {report['total_blocks']} blocks "
        f"leaked from {len(groups)} sites"
    )
    separator = "―" * len(summary)

    out.print()
    out.print(f"[{GREEN}]• Leak Summary[/]")
    out.print(f"[{DARK_GREEN}]{separator}[/]")
    out.print(f"[{DARK_YELLOW}]{summary}[/]")
    out.print(f"[{DARK_GREEN}]{separator}[/]")

    for number, group in enumerate(groups, 1):
        out.print()
        _display_group(group, number, len(groups), out)


def display_run_summary(records: int, syntax_errors: int, anomalies: int,
                        leaked_blocks: int, out: Optional[Console] = None) -> None:
    """Print a one-line recap of the run on stderr."""
    out = out or err_console
    out.print(
        f"[{GRAY}]{records} records, {syntax_errors} syntax errors, "
        f"{anomalies} anomalies, {leaked_blocks} leaked blocks[/]"
    )
