"""
External tool execution module.

Locates and runs the binutils helpers used for symbol resolution.

Features:
- Locate tools on the executable search path
- Run addr2line against a binary (optionally scoped to a section)
- Dump the section header table of a binary with objdump -h
- Turn every failure into a single ToolError the caller can degrade on
"""

import shutil
import subprocess
from typing import Optional


class ToolError(Exception):
    """Raised when an external tool fails or produces unusable output."""

    pass


class ToolNotFoundError(Exception):
    """Raised when a tool cannot be found on the search path."""

    pass


def find_tool(name: str) -> str:
    """
    Locate a tool on the executable search path.

    Args:
        name: Tool name (e.g. "addr2line") or explicit path.

    Returns:
        Full path to the executable.

    Raises:
        ToolNotFoundError: If no executable with this name is found.
    """
    path = shutil.which(name)
    if path is None:
        raise ToolNotFoundError(f"'{name}' was not found in PATH.")
    return path


def run_tool(command: list[str], timeout: float) -> str:
    """
    Run a tool and return its standard output.

    Args:
        command: Complete argument vector, tool first.
        timeout: Seconds before the invocation is abandoned.

    Returns:
        Captured stdout.

    Raises:
        ToolError: On timeout, launch failure or non-zero exit status.
    """
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout
        )
    except subprocess.TimeoutExpired:
        raise ToolError(
            f"'{command[0]}' exceeded {timeout:g} second timeout."
        )
    except OSError as e:
        raise ToolError(f"Could not run '{command[0]}': {e}")

    if result.returncode != 0:
        raise ToolError(
            f"'{command[0]}' exited with status {result.returncode}: "
            f"{result.stderr.strip()}"
        )

    return result.stdout


def addr2line(tool: str, binary: str, address: int,
              section: Optional[str] = None, timeout: float = 10.0) -> tuple[str, str]:
    """
    Ask addr2line for the function and location of one address.

    Runs: <tool> -fe <binary> --demangle [--section=<name>] 0x<address>

    Args:
        tool: Path to addr2line.
        binary: File holding the code and debug info.
        address: Address (or section-relative offset when section is given).
        section: Optional section name the address is relative to.
        timeout: Seconds allowed for the invocation.

    Returns:
        (function, location) as printed by the tool; "??" marks unknowns.

    Raises:
        ToolError: If the tool fails or does not print two lines.
    """
    command = [tool, "-fe", binary, "--demangle"]
    if section:
        command.append(f"--section={section}")
    command.append(hex(address))

    lines = run_tool(command, timeout).splitlines()
    if len(lines) < 2:
        raise ToolError(f"Unexpected addr2line output for {hex(address)}")

    return lines[0].strip(), lines[1].strip()


def objdump_sections(tool: str, file: str, timeout: float = 10.0) -> str:
    """
    Dump the section header table of a binary.

    Args:
        tool: Path to objdump.
        file: Binary to inspect.
        timeout: Seconds allowed for the invocation.

    Returns:
        Raw `objdump -h` output.
    """
    return run_tool([tool, "-h", file], timeout)
