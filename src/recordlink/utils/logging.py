"""loguru setup shared by the CLI and the matching engines."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from time import perf_counter
from typing import TYPE_CHECKING, Any, Dict, Iterator

from loguru import logger

if TYPE_CHECKING:  # pragma: no cover
    from ..config.settings import Settings

_CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[run_id]}</cyan>:<magenta>{extra[step]}</magenta> | "
    "{message}"
)
_DEBUG_FORMAT = _CONSOLE_FORMAT + " | {extra}"


def configure_logging(settings: "Settings | None" = None, level: str | None = None) -> None:
    """Send records to stderr and to a JSON-lines file under ``settings.log_dir``.

    Engine counters travel as ``extra`` fields; the console shows them only at
    DEBUG, the file sink always keeps them.
    """

    from ..config.settings import get_settings

    cfg = settings or get_settings()
    resolved_level = (level or cfg.log_level).upper()
    log_path = cfg.log_file
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.configure(extra={"run_id": "-", "step": "-"})
    logger.add(
        sys.stderr,
        level=resolved_level,
        backtrace=False,
        diagnose=False,
        format=_DEBUG_FORMAT if resolved_level == "DEBUG" else _CONSOLE_FORMAT,
    )
    logger.add(log_path, level=resolved_level, serialize=True, rotation="10 MB", retention=5)


def get_logger(**context: Any):
    return logger.bind(**context)


@contextmanager
def logging_context(**context: Any):
    """Bind ``run_id``/``step`` style fields for everything logged inside the block."""

    with logger.contextualize(**context):
        yield logger


@contextmanager
def log_timing(step: str, *, logger_=logger) -> Iterator[Dict[str, Any]]:
    """Time a block and log it with whatever counters the block records.

    >>> with log_timing("load:left.csv") as counters:
    ...     counters["records"] = 3
    """

    counters: Dict[str, Any] = {}
    start = perf_counter()
    try:
        yield counters
    finally:
        logger_.info(f"Finished {step}", seconds=round(perf_counter() - start, 3), **counters)


__all__ = ["configure_logging", "get_logger", "logging_context", "log_timing"]
