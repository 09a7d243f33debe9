"""General-purpose helpers shared by the engines and the CLI."""

from __future__ import annotations

import itertools
import json
from datetime import date
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, TypeVar

from .logging import get_logger

T = TypeVar("T")

_LOGGER = get_logger(module=__name__)


def ensure_directory(path: Path | str) -> Path:
    """Ensure that a directory exists and return the resolved Path."""

    target = Path(path)
    target.mkdir(parents=True, exist_ok=True)
    return target.resolve()


def _json_default(value: object) -> object:
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def serialize_json(data: object, destination: Path | str, *, indent: int = 2) -> Path:
    """Serialize data to JSON with deterministic ordering."""

    dest_path = Path(destination)
    ensure_directory(dest_path.parent)
    dest_path.write_text(
        json.dumps(data, indent=indent, sort_keys=True, ensure_ascii=False, default=_json_default) + "\n",
        encoding="utf-8",
    )
    _LOGGER.debug("Serialized JSON", path=str(dest_path), size=dest_path.stat().st_size)
    return dest_path


def ordered_union(*sequences: Sequence[T] | None) -> List[T]:
    """Merge sequences keeping the first occurrence of every item."""

    seen: set = set()
    merged: List[T] = []
    for sequence in sequences:
        if not sequence:
            continue
        for item in sequence:
            if item in seen:
                continue
            seen.add(item)
            merged.append(item)
    return merged


def ordered_intersection(left: Sequence[T], right: Sequence[T]) -> List[T]:
    """Intersect two sequences, preserving the order of ``left``."""

    keep = set(right)
    return [item for item in left if item in keep]


def chunked(iterable: Iterable[T], size: int) -> Iterable[List[T]]:
    """Yield chunks of a given size from the input iterable."""

    if size <= 0:
        raise ValueError("size must be positive")

    iterator: Iterator[T] = iter(iterable)
    while True:
        batch = list(itertools.islice(iterator, size))
        if not batch:
            break
        yield batch


__all__ = [
    "ensure_directory",
    "serialize_json",
    "ordered_union",
    "ordered_intersection",
    "chunked",
]
