"""
Configuration module for Mex.

Reads tool names and reporting limits from the environment, after loading
an optional .env file from the working directory.
"""

import math
import os

from dotenv import find_dotenv, load_dotenv

from display import print_warning
from type_defs import Settings

DEFAULT_ADDR2LINE = "addr2line"
DEFAULT_OBJDUMP = "objdump"
DEFAULT_TOOL_TIMEOUT = 10.0
DEFAULT_MAX_LISTED = 6


def _read_number(name: str, default, convert):
    """Read a positive number from the environment, or fall back to default."""
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default

    try:
        value = convert(raw.strip())
    except ValueError:
        print_warning(f"{name}={raw!r} is not a number, using {default}")
        return default

    if not math.isfinite(value) or value <= 0:
        print_warning(f"{name} must be a positive finite number, using {default}")
        return default

    return value


def load_settings() -> Settings:
    """
    Build the runtime settings.

    Environment variables:
        MEX_ADDR2LINE: address-to-line tool name or path.
        MEX_OBJDUMP: section-listing tool name or path.
        MEX_TOOL_TIMEOUT: seconds allowed per tool invocation.
        MEX_MAX_LISTED: blocks listed per leak group.

    Returns:
        Settings dictionary with defaults applied.
    """
    load_dotenv(find_dotenv(usecwd=True))

    return {
        "addr2line": os.environ.get("MEX_ADDR2LINE") or DEFAULT_ADDR2LINE,
        "objdump": os.environ.get("MEX_OBJDUMP") or DEFAULT_OBJDUMP,
        "tool_timeout": _read_number("MEX_TOOL_TIMEOUT", DEFAULT_TOOL_TIMEOUT, float),
        "max_listed": _read_number("MEX_MAX_LISTED", DEFAULT_MAX_LISTED, int),
    }
