"""Similarity functions and the comparator registry."""

from .comparators import (
    DEFAULT_DAYS_SCALE,
    date_similarity,
    name_similarity,
    raw_similarity,
    string_similarity,
    tokenize,
)
from .registry import (
    SimilarityRegistry,
    build_registry,
    compare_values,
    default_registry,
)

__all__ = [
    "DEFAULT_DAYS_SCALE",
    "date_similarity",
    "name_similarity",
    "raw_similarity",
    "string_similarity",
    "tokenize",
    "SimilarityRegistry",
    "build_registry",
    "compare_values",
    "default_registry",
]
