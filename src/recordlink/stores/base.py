"""Contract for the record sources consumed by the matching engines."""

from __future__ import annotations

from typing import Any, Hashable, Iterator, Protocol, Tuple, runtime_checkable


@runtime_checkable
class RecordStore(Protocol):
    """A finite, restartable source of ``(record_id, record)`` pairs."""

    def iter_records(self) -> Iterator[Tuple[Hashable, Any]]:
        ...

    def find(self, record_id: Hashable) -> Any:
        ...


__all__ = ["RecordStore"]
