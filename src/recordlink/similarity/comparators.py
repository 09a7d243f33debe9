"""Built-in fuzzy comparators for strings and dates.

Every comparator returns a score in ``[0.0, 1.0]`` where ``1.0`` means the two
values are considered identical.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from functools import lru_cache
from typing import List

import jellyfish

from ..exceptions import InvalidArgumentError

DEFAULT_DAYS_SCALE = 30
_SECONDS_PER_DAY = 86_400.0
_TOKEN_SPLIT_RE = re.compile(r"\s+")


def _day_delta(left: date, right: date) -> float:
    if isinstance(left, datetime) and isinstance(right, datetime):
        return abs((left - right).total_seconds()) / _SECONDS_PER_DAY
    return float(abs((left - right).days))


def date_similarity(left: date, right: date, days_scale: int = DEFAULT_DAYS_SCALE) -> float:
    """Score two dates on a linear scale that reaches zero at ``days_scale`` days apart."""

    if isinstance(days_scale, bool) or not isinstance(days_scale, int):
        raise InvalidArgumentError("days_scale must be a whole number")
    if days_scale <= 0:
        raise InvalidArgumentError("days_scale must be positive")

    scale = float(days_scale)
    delta = _day_delta(left, right)
    if delta >= scale:
        return 0.0
    return (scale - delta) / scale


@lru_cache(maxsize=4096)
def raw_similarity(left: str, right: str) -> float:
    """Case-insensitive Levenshtein similarity normalised by the average length."""

    distance = jellyfish.levenshtein_distance(left.lower(), right.lower())
    if distance == 0:
        return 1.0
    avg_len = (len(left) + len(right)) / 2.0
    if distance > avg_len:
        return 0.0
    return (avg_len - distance) / avg_len


def tokenize(text: str) -> List[str]:
    """Split a name into tokens.

    Commas become separators, periods are stripped, and single-character tokens
    (initials, stray punctuation) are discarded.
    """

    cleaned = text.replace(",", " ").replace(".", "")
    return [token for token in _TOKEN_SPLIT_RE.split(cleaned.strip()) if len(token) > 1]


def name_similarity(left: str, right: str) -> float:
    """Order-insensitive similarity of two personal or company names."""

    if not left or not right:
        return 0.0
    if left == right:
        return 1.0

    left_tokens, right_tokens = tokenize(left), tokenize(right)
    avg_tokens = (len(left_tokens) + len(right_tokens)) / 2.0
    if avg_tokens == 0:
        return 0.0

    total = sum(raw_similarity(l_token, r_token) for l_token in left_tokens for r_token in right_tokens)
    return min(total / avg_tokens, 1.0)


def string_similarity(left: str, right: str, comparison: str | None = None) -> float:
    """Dispatch between raw edit-distance and name-aware string similarity."""

    if comparison == "name":
        return name_similarity(left, right)
    return raw_similarity(left, right)


__all__ = [
    "DEFAULT_DAYS_SCALE",
    "date_similarity",
    "raw_similarity",
    "tokenize",
    "name_similarity",
    "string_similarity",
]
