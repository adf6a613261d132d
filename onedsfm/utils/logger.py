"""Utilities for logging.

MFAS runs for many projection directions are spread over dask workers, so every log line carries the identity of the
process that emitted it.
"""

import logging
import socket
import sys
from datetime import datetime, timezone
from logging import LoggerAdapter
from typing import Optional

from dask import distributed

LOGGER_NAME = "onedsfm"
LOG_FORMAT = "%(asctime)s [%(worker_id)s] [%(filename)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Set once per process, on the first log call.
_WORKER_ID_CACHE: Optional[str] = None


def _detect_worker_id() -> str:
    """Returns "hostname(port)" inside a dask worker, and "hostname-main" otherwise."""
    hostname = socket.gethostname()
    try:
        worker = distributed.get_worker()
    except ValueError:
        # Not running inside a dask worker.
        return f"{hostname}-main"

    port = worker.address.split(":")[-1]
    return f"{hostname}({port})"


def get_worker_id() -> str:
    """Returns the cached worker identity of the current process."""
    global _WORKER_ID_CACHE

    if _WORKER_ID_CACHE is None:
        _WORKER_ID_CACHE = _detect_worker_id()
    return _WORKER_ID_CACHE


class WorkerAwareAdapter(LoggerAdapter):
    """LoggerAdapter that injects the worker identity into every LogRecord.

    The worker is detected lazily on the first log call, since the dask worker context is not available yet when
    modules are imported.
    """

    def __init__(self, logger: logging.Logger) -> None:
        super().__init__(logger, {})

    def process(self, msg, kwargs):
        kwargs.setdefault("extra", {})["worker_id"] = get_worker_id()
        return msg, kwargs


class UTCFormatter(logging.Formatter):
    """Formatter with UTC timestamps."""

    def formatTime(self, record, datefmt=None):
        dt = datetime.fromtimestamp(record.created, tz=timezone.utc)
        return dt.strftime(datefmt or DATE_FORMAT)


def get_logger() -> LoggerAdapter:
    """Gets the package logger, writing to stdout.

    Log format:
        "2025-10-28 00:00:45 [hornet(40665)] [mfas.py] INFO: message"

    Returns:
        Logger adapter which adds the worker identity to the records.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(UTCFormatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)

    return WorkerAwareAdapter(logger)
