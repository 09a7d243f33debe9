"""Type-keyed registry of fuzzy comparators and the comparison dispatcher."""

from __future__ import annotations

from datetime import date
from typing import Any, Callable, Dict, Optional

from ..exceptions import TypeMismatchError, UnsupportedTypeError
from .comparators import DEFAULT_DAYS_SCALE, date_similarity, string_similarity

Comparator = Callable[..., float]


class SimilarityRegistry:
    """Maps value types to fuzzy comparators.

    Lookups walk the value's MRO, so a comparator registered for ``date`` also
    serves ``datetime`` values. Default options are merged underneath the
    per-call options of :meth:`compare`.
    """

    def __init__(self) -> None:
        self._comparators: Dict[type, Comparator] = {}
        self._defaults: Dict[type, Dict[str, Any]] = {}

    def register(self, value_type: type, comparator: Comparator, **defaults: Any) -> None:
        self._comparators[value_type] = comparator
        self._defaults[value_type] = dict(defaults)

    def lookup(self, value_type: type) -> Optional[tuple[Comparator, Dict[str, Any]]]:
        for klass in value_type.__mro__:
            comparator = self._comparators.get(klass)
            if comparator is not None:
                return comparator, self._defaults[klass]
        return None

    def supports(self, value_type: type) -> bool:
        return self.lookup(value_type) is not None

    def compare(self, left: Any, right: Any, **options: Any) -> float:
        found = self.lookup(type(left))
        if found is None:
            raise UnsupportedTypeError(
                f"Cannot calculate fuzzy comparison for type {type(left).__name__}"
            )
        comparator, defaults = found
        return comparator(left, right, **{**defaults, **options})


def build_registry(days_scale: int = DEFAULT_DAYS_SCALE) -> SimilarityRegistry:
    """Return a registry holding the built-in string and date comparators."""

    registry = SimilarityRegistry()
    registry.register(str, string_similarity)
    registry.register(date, date_similarity, days_scale=days_scale)
    return registry


default_registry = build_registry()


def compare_values(
    left: Any,
    right: Any,
    fuzzy: bool = False,
    *,
    registry: SimilarityRegistry | None = None,
    **options: Any,
) -> float:
    """Compare two values, returning a similarity between 0.0 and 1.0.

    A missing value on either side scores ``0.0``. Values of different types
    cannot be compared. Without ``fuzzy`` the comparison is exact equality;
    with it, the comparator registered for the value type is used and
    ``options`` (e.g. ``comparison="name"`` or ``days_scale=60``) are passed on.
    """

    if left is None or right is None:
        return 0.0

    if type(left) is not type(right):
        raise TypeMismatchError(
            f"Cannot compare values of dissimilar type - left = {left!r}, right = {right!r}"
        )

    if fuzzy:
        return (registry or default_registry).compare(left, right, **options)
    return 1.0 if left == right else 0.0


__all__ = ["Comparator", "SimilarityRegistry", "build_registry", "default_registry", "compare_values"]
