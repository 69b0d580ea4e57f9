#!/usr/bin/env python3
"""
Mex - Malloc-log Error eXplorer
Command-line tool for finding leaks in instrumented allocator logs.

Usage: mex [binary] < events.log
"""

import os
import sys
from typing import Optional

from analyzer import AnalysisResult, LogAnalyzer
from display import (
    display_anomaly, display_leak_report, display_run_summary,
    display_syntax_error, display_usage, err_console, print_error, print_note
)
from settings import load_settings
from tool_runner import ToolNotFoundError, find_tool
from type_defs import Settings

# Return codes
SUCCESS = 0
ERROR = 1


class UsageError(Exception):
    """Raised when the command line cannot be honoured."""

    pass


def _parse_command_line(argv: list[str]) -> tuple[Optional[str], bool, bool]:
    """
    Parse the arguments of the command line.

    Returns:
        Tuple: (binary or None, help requested, quiet)

    Raises:
        UsageError: On unknown options, extra arguments or a missing binary.
    """
    positional = []
    show_help = False
    quiet = False

    for arg in argv:
        if arg in ("-h", "--help"):
            show_help = True
        elif arg in ("-q", "--quiet"):
            quiet = True
        elif arg.startswith("-") and arg != "-":
            raise UsageError(f"unknown option '{arg}'")
        else:
            positional.append(arg)

    if show_help:
        return None, True, quiet

    if len(positional) > 1:
        raise UsageError("expected at most one binary argument")

    binary = positional[0] if positional else None
    if binary is not None and not os.path.isfile(binary):
        raise UsageError(f"binary '{binary}' does not exist")

    return binary, False, quiet


def _locate_tools(settings: Settings, binary: Optional[str],
                  quiet: bool) -> tuple[Optional[str], Optional[str]]:
    """
    Find addr2line and objdump, noting what degrades when one is missing.

    Returns:
        (addr2line path or None, objdump path or None)
    """
    try:
        addr2line_tool = find_tool(settings["addr2line"])
    except ToolNotFoundError as e:
        addr2line_tool = None
        if not quiet:
            print_note(f"{e} Call stacks are printed as raw addresses.")

    try:
        objdump_tool = find_tool(settings["objdump"])
    except ToolNotFoundError as e:
        objdump_tool = None
        if addr2line_tool and not quiet:
            print_note(f"{e} Shared library addresses are resolved without sections.")

    if binary is None and addr2line_tool and not quiet:
        print_note("No binary given: resolving through the segment map only.")

    return addr2line_tool, objdump_tool


def run_analysis(stream, binary: Optional[str], settings: Settings,
                 quiet: bool = False) -> AnalysisResult:
    """
    Analyze an event log and print diagnostics and the leak summary.

    Args:
        stream: Iterable of log lines (usually sys.stdin).
        binary: Primary executable, or None.
        settings: Loaded configuration.
        quiet: Hide notes and the closing recap.

    Returns:
        The analysis result.
    """
    addr2line_tool, objdump_tool = _locate_tools(settings, binary, quiet)

    analyzer = LogAnalyzer(
        binary=binary,
        addr2line_tool=addr2line_tool,
        objdump_tool=objdump_tool,
        timeout=settings["tool_timeout"],
        max_listed=settings["max_listed"],
        on_anomaly=display_anomaly,
        on_syntax_error=display_syntax_error,
    )

    result = analyzer.run(stream)
    display_leak_report(result["report"])

    if not quiet:
        display_run_summary(
            result["records"], result["syntax_errors"],
            len(result["anomalies"]), result["report"]["total_blocks"]
        )

    return result


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point of Mex.

    Returns:
        0 on success, 1 on error
    """
    if argv is None:
        argv = sys.argv[1:]

    try:
        binary, show_help, quiet = _parse_command_line(argv)
    except UsageError as e:
        print_error(str(e))
        display_usage(err_console)
        return ERROR

    if show_help:
        display_usage()
        return SUCCESS

    if hasattr(sys.stdin, "reconfigure"):
        # Undecodable bytes become syntax errors instead of aborting the run
        sys.stdin.reconfigure(errors="replace")

    try:
        settings = load_settings()
        run_analysis(sys.stdin, binary, settings, quiet=quiet)

    except KeyboardInterrupt:
        print_error("Analysis interrupted by user.")
        return ERROR

    return SUCCESS


if __name__ == "__main__":
    sys.exit(main())
