"""Policy models governing matching, deduplication, and index behaviour."""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any, Literal, Mapping, MutableMapping, Sequence

import yaml
from pydantic import BaseModel, Field


class MatchingPolicy(BaseModel):
    """Controls for the two-sided Matcher."""

    min_score: float = Field(
        default=1.0,
        ge=0.0,
        description="Minimum pair score a candidate must reach to be considered a match.",
    )
    max_resolution_passes: int = Field(
        default=10_000,
        ge=1,
        description="Upper bound on loser re-evaluation passes before the run is aborted.",
    )
    progress_log_interval: int = Field(
        default=100,
        ge=1,
        description="Emit a progress log line every N left records.",
    )


class DeduplicationPolicy(BaseModel):
    """Controls for the single-store Deduplicator."""

    progress_log_interval: int = Field(
        default=100,
        ge=1,
        description="Emit a progress log line every N records.",
    )


class IndexPolicy(BaseModel):
    """Selects and configures the attribute index backend."""

    backend: Literal["memory", "redis"] = Field(default="memory")
    redis_url: str = Field(
        default="redis://localhost:6379/8",
        description="Connection URL used when the redis backend is selected.",
    )
    namespace: str = Field(
        default="recordlink",
        min_length=1,
        description="Key prefix isolating index entries inside the Redis database.",
    )


class SimilarityPolicy(BaseModel):
    """Defaults applied by the built-in fuzzy comparators."""

    days_scale: int = Field(
        default=30,
        ge=1,
        description="Linear decay window, in days, of the fuzzy date comparator.",
    )


class StorePolicy(BaseModel):
    """Settings for query-backed record stores."""

    batch_size: int = Field(
        default=1000,
        ge=1,
        description="Number of rows fetched per round trip when streaming query results.",
    )


class Policies(BaseModel):
    """Root policy container."""

    matching: MatchingPolicy = Field(default_factory=MatchingPolicy)
    deduplication: DeduplicationPolicy = Field(default_factory=DeduplicationPolicy)
    index: IndexPolicy = Field(default_factory=IndexPolicy)
    similarity: SimilarityPolicy = Field(default_factory=SimilarityPolicy)
    store: StorePolicy = Field(default_factory=StorePolicy)


def _ensure_nested_mapping(
    cursor: MutableMapping[str, Any], part: str, full_path: Sequence[str]
) -> MutableMapping[str, Any]:
    existing = cursor.get(part)
    if existing is None:
        next_cursor: MutableMapping[str, Any] = {}
        cursor[part] = next_cursor
        return next_cursor
    if not isinstance(existing, MutableMapping):
        raise ValueError(
            f"Cannot override policy path '{'/'.join(full_path)}' because segment "
            f"'{part}' resolves to a non-mapping value"
        )
    return existing


def _resolve_env_overrides(raw: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Apply RECORDLINK_POLICY__ environment variable overrides.

    ``RECORDLINK_POLICY__MATCHING__MIN_SCORE=2.0`` sets ``matching.min_score``.
    Values are JSON-decoded when possible, otherwise kept as raw strings.
    """

    prefix = "RECORDLINK_POLICY__"
    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        parts = [segment.lower() for segment in key[len(prefix) :].split("__") if segment]
        if not parts:
            continue
        cursor: MutableMapping[str, Any] = raw
        for index, part in enumerate(parts[:-1], start=1):
            cursor = _ensure_nested_mapping(cursor, part, parts[: index + 1])
        try:
            parsed = json.loads(value)
        except (TypeError, json.JSONDecodeError):
            parsed = value
        cursor[parts[-1]] = parsed
    return raw


def load_policies(source: os.PathLike[str] | str | Mapping[str, Any]) -> Policies:
    """Load policies from a mapping or YAML file with environment overrides."""

    if isinstance(source, Mapping):
        raw: MutableMapping[str, Any] = copy.deepcopy(dict(source))
    else:
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Policy file not found: {path}")
        with path.open("r", encoding="utf-8") as handle:
            loaded = yaml.safe_load(handle)
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, MutableMapping):
            raise ValueError(f"Policy file '{path}' must contain a mapping at the top level")
        raw = dict(loaded)
    hydrated = _resolve_env_overrides(raw)
    return Policies.model_validate(hydrated)


__all__ = [
    "Policies",
    "load_policies",
    "MatchingPolicy",
    "DeduplicationPolicy",
    "IndexPolicy",
    "SimilarityPolicy",
    "StorePolicy",
]
