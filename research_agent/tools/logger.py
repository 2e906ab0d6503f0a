"""Logging configuration for research_agent."""

import logging
import os
import sys
from typing import Optional, Union

_QUIET_LOGGERS = ("httpx", "httpcore", "openai", "urllib3", "langgraph")


def resolve_level(value: Optional[Union[str, int]], default: int = logging.INFO) -> int:
    """Turn ``"debug"``, ``"WARNING"`` or ``10`` into a logging level."""
    if value is None or value == "":
        return default
    if isinstance(value, int):
        return value
    if value.strip().isdigit():
        return int(value)
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(level: Optional[Union[str, int]] = None, format_string: Optional[str] = None) -> None:
    """Configure the root logger for the CLI.

    Args:
        level: Logging level; falls back to ``LOG_LEVEL`` and then INFO.
        format_string: Custom format string. If None, uses default.

    Logs go to stderr so that ``--json`` output on stdout stays parseable.
    """
    if format_string is None:
        format_string = "[%(levelname)s] %(message)s"

    logging.basicConfig(
        level=resolve_level(level if level is not None else os.getenv("LOG_LEVEL")),
        format=format_string,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
