"""
analyzer.py

Drives one analysis run: parses the log, dispatches each record to the
segment table or the block tracker, then builds the leak report.
"""

from typing import Callable, Iterable, Optional, TypedDict

from block_tracker import ANOMALY_MESSAGES, BlockTracker
from leak_reporter import DEFAULT_MAX_LISTED, build_leak_report
from log_parser import parse_log
from section_index import SectionIndex
from segment_table import SegmentTable
from symbol_resolver import SymbolResolver
from type_defs import Anomaly, LeakReport, LogRecord


class AnalysisResult(TypedDict):
    """Outcome of a complete run over one log."""
    report: LeakReport
    anomalies: list[Anomaly]
    syntax_errors: int
    records: int


class LogAnalyzer:
    """
    Owns the per-run state: block tracker, segment table and resolver caches.

    Args:
        binary: Primary executable for direct addr2line lookups.
        addr2line_tool: Path to addr2line, None when unavailable.
        objdump_tool: Path to objdump, None when unavailable.
        timeout: Seconds allowed per tool invocation.
        max_listed: Blocks listed per leak group.
        on_anomaly: Called with (anomaly, message) as soon as one is detected.
        on_syntax_error: Called with (line, text) for unparsable lines.
    """

    def __init__(self, binary: Optional[str] = None,
                 addr2line_tool: Optional[str] = None,
                 objdump_tool: Optional[str] = None,
                 timeout: float = 10.0,
                 max_listed: int = DEFAULT_MAX_LISTED,
                 on_anomaly: Optional[Callable[[Anomaly, str], None]] = None,
                 on_syntax_error: Optional[Callable[[int, str], None]] = None):
        self.segments = SegmentTable()
        self.sections = SectionIndex(objdump_tool, timeout) if objdump_tool else None
        self.resolver = SymbolResolver(
            self.segments,
            sections=self.sections,
            binary=binary,
            addr2line_tool=addr2line_tool,
            timeout=timeout,
        )
        self.tracker = BlockTracker(on_anomaly=self._anomaly)
        self.max_listed = max_listed
        self.syntax_errors = 0
        self.records = 0
        self._on_anomaly = on_anomaly
        self._on_syntax_error = on_syntax_error

    def _anomaly(self, anomaly: Anomaly) -> None:
        if self._on_anomaly is not None:
            self._on_anomaly(anomaly, ANOMALY_MESSAGES[anomaly["kind"]])

    def _syntax_error(self, line: int, text: str) -> None:
        self.syntax_errors += 1
        if self._on_syntax_error is not None:
            self._on_syntax_error(line, text)

    def feed(self, record: LogRecord) -> None:
        """Apply one parsed record."""
        self.records += 1
        kind = record["kind"]

        if kind == "malloc":
            self.tracker.allocate(record["line"], record["address"],
                                  record["size"], record["call_stack"])
        elif kind == "claim":
            self.tracker.claim(record["line"], record["address"], record["call_stack"])
        elif kind == "realloc":
            self.tracker.realloc(record["line"], record["old_address"], record["address"],
                                 record["size"], record["call_stack"])
        elif kind == "free":
            self.tracker.free(record["line"], record["address"], record["call_stack"])
        elif kind == "segment":
            try:
                self.segments.insert(record["start"], record["end"],
                                     record["page_offset"], record["file"])
            except ValueError as e:
                self._syntax_error(record["line"], str(e))
        else:
            self._syntax_error(record["line"], record["text"])

    def finish(self) -> AnalysisResult:
        """Build the leak report from the blocks still live."""
        report = build_leak_report(self.tracker.live_blocks(), self.resolver,
                                   max_listed=self.max_listed)
        return {
            "report": report,
            "anomalies": list(self.tracker.anomalies),
            "syntax_errors": self.syntax_errors,
            "records": self.records,
        }

    def run(self, lines: Iterable[str]) -> AnalysisResult:
        """Process a whole log in order and return the result."""
        for record in parse_log(lines):
            self.feed(record)
        return self.finish()
