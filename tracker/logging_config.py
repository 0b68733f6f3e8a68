"""
Logging setup for the tracking service.
Console and file sinks via loguru; request-scoped messages go through RequestLogger.
"""

import sys
import uuid
from pathlib import Path
from typing import Optional
from loguru import logger

from tracker.config import TrackerConfig


CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[request_id]:.8}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[request_id]:.8} | {name}:{line} | {message}"


def _add_file_sink(path: Path, level: str, retention: str) -> None:
    logger.add(
        str(path),
        format=FILE_FORMAT,
        level=level,
        rotation="10 MB",
        retention=retention,
        compression="zip",
        enqueue=True,
    )


def setup_logging(config: TrackerConfig, console: bool = True) -> None:
    """
    Install the tracker's log sinks.

    LOG_FILE unset means console only. With a file, carrier and storefront
    failures also land in a separate `<name>-errors.log` next to it.
    """
    logger.remove()
    logger.configure(extra={"request_id": "-"})

    if console:
        logger.add(sys.stdout, format=CONSOLE_FORMAT, level=config.log_level, colorize=True)

    if not config.log_file:
        logger.info(f"Tracker logging at {config.log_level} (console only)")
        return

    log_path = Path(config.log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    _add_file_sink(log_path, config.log_level, "30 days")
    _add_file_sink(log_path.with_name(f"{log_path.stem}-errors.log"), "ERROR", "60 days")

    logger.info(f"Tracker logging at {config.log_level} -> {log_path}")


class RequestLogger:
    """Context logger for a single tracking request."""

    def __init__(self, query: str, request_id: Optional[str] = None):
        self.request_id = request_id or uuid.uuid4().hex
        self.query = query
        self._logger = logger.bind(request_id=self.request_id, query=query)

    def _prefix(self, message: str) -> str:
        return f"[Req:{self.request_id[:8]}] {message}"

    def info(self, message: str, **kwargs):
        self._logger.info(self._prefix(message), **kwargs)

    def debug(self, message: str, **kwargs):
        self._logger.debug(self._prefix(message), **kwargs)

    def warning(self, message: str, **kwargs):
        self._logger.warning(self._prefix(message), **kwargs)

    def error(self, message: str, **kwargs):
        self._logger.error(self._prefix(message), **kwargs)

    def exception(self, message: str, **kwargs):
        self._logger.exception(self._prefix(message), **kwargs)
