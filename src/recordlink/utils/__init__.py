"""Utility helpers shared across recordlink modules."""

from .helpers import (
    chunked,
    ensure_directory,
    ordered_intersection,
    ordered_union,
    serialize_json,
)
from .logging import configure_logging, get_logger, log_timing, logging_context

__all__ = [
    "configure_logging",
    "get_logger",
    "log_timing",
    "logging_context",
    "chunked",
    "ensure_directory",
    "ordered_intersection",
    "ordered_union",
    "serialize_json",
]
