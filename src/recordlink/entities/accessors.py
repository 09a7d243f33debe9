"""Read logical attributes from heterogeneous record types."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional

Extractor = Callable[[Any], Any]


class AttributeReader:
    """Resolve attribute names against records.

    Mappings are read with ``record.get(name)`` and any other object with
    ``getattr``; a missing attribute reads as ``None``. Extractors registered
    in ``accessors`` take precedence for their attribute name.
    """

    def __init__(self, accessors: Optional[Mapping[str, Extractor]] = None) -> None:
        self._accessors: Dict[str, Extractor] = dict(accessors or {})

    def register(self, name: str, extractor: Extractor) -> None:
        self._accessors[name] = extractor

    def read(self, record: Any, name: str) -> Any:
        extractor = self._accessors.get(name)
        if extractor is not None:
            return extractor(record)
        if isinstance(record, Mapping):
            return record.get(name)
        return getattr(record, name, None)

    __call__ = read


__all__ = ["AttributeReader", "Extractor"]
