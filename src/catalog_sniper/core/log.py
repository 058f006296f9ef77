from __future__ import annotations

import logging
import sys
import time
from typing import IO

LOG_FORMAT = "[%(asctime)s] %(message)s"


class UTCIsoFormatter(logging.Formatter):
    """Render `asctime` as an ISO-8601 UTC timestamp, e.g. 2026-01-02T03:04:05.678Z."""

    converter = time.gmtime

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        ct = self.converter(record.created)
        return "%s.%03dZ" % (time.strftime("%Y-%m-%dT%H:%M:%S", ct), record.msecs)


def build_handler(stream: IO[str] | None = None) -> logging.Handler:
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(UTCIsoFormatter(LOG_FORMAT))
    return handler


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        handlers=[build_handler()],
    )


def get_logger(name: str = "catalog_sniper") -> logging.Logger:
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)
