"""Logging setup. All output goes to stderr; stdout carries the MCP stream."""
from __future__ import annotations
import logging
import sys

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "ERROR": logging.ERROR,
}

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger once for the server process."""
    logging.basicConfig(
        level=_LEVELS.get(level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )
    # requests/urllib3 debug output would echo bearer headers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
