"""Interface shared by attribute index backends."""

from __future__ import annotations

from typing import Any, Hashable, List, Optional, Protocol, runtime_checkable


@runtime_checkable
class AttributeIndex(Protocol):
    """Maps ``(attribute, value)`` to the ids of records holding that value.

    ``get`` returns ``None`` when nothing was indexed under the key, which
    callers treat as "no candidates". ``None`` values are never stored.
    """

    def put(self, attribute: str, value: Any, record_id: Hashable) -> None:
        ...

    def get(self, attribute: str, value: Any) -> Optional[List[Hashable]]:
        ...

    def reset(self) -> None:
        ...


__all__ = ["AttributeIndex"]
