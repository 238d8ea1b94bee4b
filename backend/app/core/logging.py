"""Logging setup for the Memo Ledger backend.

Everything logs under the ``memoledger`` logger tree to stdout. Set
``LOG_LEVEL`` (``DEBUG``, ``INFO``, ...) to change verbosity.
"""

from __future__ import annotations

import logging
import os
import sys
import time
from typing import Any

ROOT_LOGGER = "memoledger"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(funcName)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_level(value: str | int | None) -> int:
    """Turn ``"debug"``, ``"20"`` or ``20`` into a logging level, defaulting to INFO."""
    if isinstance(value, int):
        return value
    text = (value or "").strip()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper()) if text else logging.INFO
    return level if isinstance(level, int) else logging.INFO


def setup_logging(level: str | int | None = None) -> logging.Logger:
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(resolve_level(level if level is not None else os.getenv("LOG_LEVEL")))

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    return logging.getLogger(name)


def mask_secret(value: str | None, visible: int = 8) -> str:
    """Return a printable prefix of a secret, e.g. ``preprodA...``."""
    if not value:
        return "<unset>"
    return f"{value[:visible]}..."


def short_address(address: str, head: int = 12, tail: int = 6) -> str:
    """Shorten a bech32 address for log lines: ``addr_test1qz...x7l8f9``."""
    if len(address) <= head + tail + 3:
        return address
    return f"{address[:head]}...{address[-tail:]}"


def _format_context(context: dict[str, Any]) -> str:
    parts = []
    for key, value in context.items():
        if isinstance(value, str) and value.startswith("addr"):
            value = short_address(value)
        parts.append(f"{key}={value}")
    return " ".join(parts)


class LogContext:
    """Log the start, end and duration of a multi-step operation.

    The keyword context is rendered into the message itself, since the
    stdout formatter does not print ``extra`` fields.
    """

    def __init__(self, logger: logging.Logger, operation: str, **context: Any) -> None:
        self.logger = logger
        self.operation = operation
        self.context = context
        self._started = 0.0

    @property
    def label(self) -> str:
        rendered = _format_context(self.context)
        return f"{self.operation} [{rendered}]" if rendered else self.operation

    def __enter__(self) -> "LogContext":
        self._started = time.perf_counter()
        self.logger.info(f"Starting {self.label}")
        return self

    def __exit__(self, exc_type: type | None, exc_val: BaseException | None, exc_tb: Any) -> bool:
        elapsed_ms = (time.perf_counter() - self._started) * 1000
        if exc_type is not None:
            self.logger.error(
                f"Failed {self.label} after {elapsed_ms:.0f}ms: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb),
            )
        else:
            self.logger.info(f"Completed {self.label} in {elapsed_ms:.0f}ms")
        return False


logger = setup_logging()
