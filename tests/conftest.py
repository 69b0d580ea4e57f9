import io

import pytest
from rich.console import Console


@pytest.fixture
def recording_console():
    """Plain-text console whose output can be read back with .file.getvalue()."""
    return Console(file=io.StringIO(), width=200, color_system=None, highlight=False)


class FakeAddr2Line:
    """Stands in for tool_runner.addr2line with a fixed symbol table."""

    def __init__(self, symbols=None):
        # (binary, address, section) -> (function, location)
        self.symbols = symbols or {}
        self.calls = []

    def __call__(self, tool, binary, address, section=None, timeout=10.0):
        self.calls.append((binary, address, section))
        return self.symbols.get((binary, address, section), ("??", "??:0"))


@pytest.fixture
def fake_addr2line():
    return FakeAddr2Line()
