"""Exception hierarchy raised by the matching and deduplication engines."""

from __future__ import annotations


class RecordLinkError(Exception):
    """Base exception for record linkage failures."""


class ConfigurationError(RecordLinkError, ValueError):
    """Raised when rules, stores, or criteria are missing or invalid."""


class TypeMismatchError(RecordLinkError, TypeError):
    """Raised when two values of different types are compared."""


class UnsupportedTypeError(RecordLinkError, TypeError):
    """Raised when no fuzzy comparator is registered for a value type."""


class InvalidArgumentError(RecordLinkError, ValueError):
    """Raised when a comparator receives an invalid option."""


class MatchingInvariantError(RecordLinkError, RuntimeError):
    """Raised when conflict resolution fails to converge within its pass bound."""


__all__ = [
    "RecordLinkError",
    "ConfigurationError",
    "TypeMismatchError",
    "UnsupportedTypeError",
    "InvalidArgumentError",
    "MatchingInvariantError",
]
