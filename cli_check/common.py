"""
Common utilities shared across cli_check modules.
"""

from __future__ import annotations

import os
import sys
from typing import TextIO


def env_flag(name: str, default: bool = True) -> bool:
    """Read a "0"/"1" style toggle from the environment."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() not in ("0", "false", "no", "off", "")


def use_color(stream: TextIO | None = None) -> bool:
    """
    Decide whether ANSI colors should be written to a stream.

    Colors are off when NO_COLOR is set, when CLI_CHECK_COLOR=0, or when
    the stream is not a terminal.
    """
    if os.environ.get("NO_COLOR"):
        return False
    if not env_flag("CLI_CHECK_COLOR"):
        return False
    stream = stream or sys.stdout
    isatty = getattr(stream, "isatty", None)
    return bool(isatty and isatty())


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log verbose message using structured logging.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or os.environ.get("CLI_CHECK_DEBUG", "0") == "1":
        from .logging_config import get_logger
        get_logger().debug(msg)
