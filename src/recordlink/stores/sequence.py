"""Store over an in-memory sequence where the position is the record id."""

from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Tuple


class SequenceStore:
    """Wrap a list of records, exposing each record under its position.

    ``find`` accepts negative positions, counting from the end.
    """

    def __init__(self, records: Iterable[Any]) -> None:
        self._records: List[Any] = list(records)

    def iter_records(self) -> Iterator[Tuple[int, Any]]:
        return iter(enumerate(self._records))

    def find(self, record_id: int) -> Any:
        return self._records[record_id]

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return f"SequenceStore(records={len(self._records)})"


__all__ = ["SequenceStore"]
