"""Rule and result value objects shared by the matching engines."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Hashable

from ..exceptions import ConfigurationError


@dataclass(frozen=True)
class AttributePair:
    """A weighted pairing of a left attribute with a right attribute.

    ``options`` are forwarded to the fuzzy comparator, for example
    ``{"comparison": "name"}`` for strings or ``{"days_scale": 60}`` for dates.
    """

    left_attr: str
    right_attr: str
    weight: float = 1.0
    is_fuzzy: bool = False
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.left_attr or not self.right_attr:
            raise ConfigurationError("Attribute pairs must name both a left and a right attribute")
        if not self.weight > 0:
            raise ConfigurationError(
                f"Weight for {self.left_attr} -> {self.right_attr} must be positive, got {self.weight}"
            )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Candidate:
    """A scored right-hand record proposed for a left record."""

    record_id: Hashable
    record: Any
    score: float


@dataclass(frozen=True)
class Match:
    """A final left/right assignment produced by a matching run."""

    left_id: Hashable
    left_record: Any
    right_id: Hashable
    right_record: Any
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"left_id": self.left_id, "right_id": self.right_id, "score": self.score}


__all__ = ["AttributePair", "Candidate", "Match"]
