"""Record file loading and result export helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterator, List

import polars as pl

from .utils import get_logger

if TYPE_CHECKING:  # pragma: no cover
    from .deduplication import Deduplicator
    from .matching import Matcher

_LOGGER = get_logger(module=__name__)

SUPPORTED_SUFFIXES = (".csv", ".jsonl", ".json")


def _iter_jsonl(path: Path) -> Iterator[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as handle:
        for line_number, line in enumerate(handle, start=1):
            if not line.strip():
                continue
            payload = json.loads(line)
            if not isinstance(payload, dict):
                raise ValueError(f"{path}:{line_number} is not a JSON object")
            yield payload


def load_records(path: str | Path) -> List[Dict[str, Any]]:
    """Load records from a CSV, JSON Lines, or JSON array file.

    CSV columns that look like dates are parsed into ``date`` values and empty
    cells become ``None``.
    """

    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"Record file not found: {source}")

    suffix = source.suffix.lower()
    if suffix == ".csv":
        records = pl.read_csv(source, try_parse_dates=True).to_dicts()
    elif suffix == ".jsonl":
        records = list(_iter_jsonl(source))
    elif suffix == ".json":
        with source.open("r", encoding="utf-8") as handle:
            loaded = json.load(handle)
        if not isinstance(loaded, list) or not all(isinstance(item, dict) for item in loaded):
            raise ValueError(f"{source} must contain a JSON array of objects")
        records = loaded
    else:
        raise ValueError(
            f"Unsupported record file type '{source.suffix}'; expected one of {', '.join(SUPPORTED_SUFFIXES)}"
        )

    _LOGGER.debug("Loaded records", path=str(source), records=len(records))
    return records


def match_payload(matcher: "Matcher") -> Dict[str, Any]:
    """Summarise a finished matching run as JSON-serialisable data."""

    return {
        "matches": [match.to_dict() for match in matcher.matches()],
        "left_exceptions": matcher.left_exceptions(),
        "right_exceptions": matcher.right_exceptions(),
        "stats": dict(matcher.stats),
    }


def groups_payload(deduplicator: "Deduplicator") -> Dict[str, Any]:
    """Summarise a finished deduplication run as JSON-serialisable data."""

    return {
        "groups": [list(group) for group in deduplicator.groups],
        "stats": dict(deduplicator.stats),
    }


__all__ = ["SUPPORTED_SUFFIXES", "load_records", "match_payload", "groups_payload"]
