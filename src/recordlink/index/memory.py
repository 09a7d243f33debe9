"""In-process attribute index backed by nested dictionaries."""

from __future__ import annotations

from typing import Any, Dict, Hashable, List, Optional, Tuple


def _value_key(value: Any) -> Tuple[type, Any]:
    # 25 and 25.0 (or True and 1) hash alike; the type keeps them apart.
    return type(value), value


class HashIndex:
    """Attribute index held entirely in memory."""

    def __init__(self) -> None:
        self._entries: Dict[str, Dict[Tuple[type, Any], List[Hashable]]] = {}

    def put(self, attribute: str, value: Any, record_id: Hashable) -> None:
        if value is None:
            return
        self._entries.setdefault(attribute, {}).setdefault(_value_key(value), []).append(record_id)

    def get(self, attribute: str, value: Any) -> Optional[List[Hashable]]:
        if value is None:
            return None
        ids = self._entries.get(attribute, {}).get(_value_key(value))
        if not ids:
            return None
        return list(ids)

    def reset(self) -> None:
        self._entries.clear()


__all__ = ["HashIndex"]
