"""Record linkage and deduplication over pluggable record stores."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("recordlink")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0.1.0"

from .config.settings import Settings, get_settings
from .deduplication import Deduplicator
from .entities import AttributePair, AttributeReader, Candidate, Match
from .exceptions import (
    ConfigurationError,
    InvalidArgumentError,
    MatchingInvariantError,
    RecordLinkError,
    TypeMismatchError,
    UnsupportedTypeError,
)
from .index import HashIndex, RedisIndex, create_index
from .matching import Matcher, RuleSet
from .similarity import SimilarityRegistry, compare_values, default_registry
from .stores import QueryStore, RecordStore, SequenceStore

__all__ = [
    "__version__",
    "Settings",
    "get_settings",
    "Matcher",
    "RuleSet",
    "Deduplicator",
    "AttributePair",
    "AttributeReader",
    "Candidate",
    "Match",
    "HashIndex",
    "RedisIndex",
    "create_index",
    "RecordStore",
    "SequenceStore",
    "QueryStore",
    "SimilarityRegistry",
    "compare_values",
    "default_registry",
    "RecordLinkError",
    "ConfigurationError",
    "TypeMismatchError",
    "UnsupportedTypeError",
    "InvalidArgumentError",
    "MatchingInvariantError",
]
