"""Declarative rule set describing how two record collections are matched."""

from __future__ import annotations

from typing import Any, Callable, List

from ..entities import AttributePair

ScoreFunction = Callable[[Any, Any], float]
FilterFunction = Callable[[Any, Any], bool]


class RuleSet:
    """Chainable builder collecting join, compare, custom, and filter rules.

    Join rules select candidates through the index and contribute an exact
    comparison to the score. Compare rules only adjust the score of
    candidates found by join rules. Custom functions add their return value;
    a filter returning a falsy value zeroes the score of the pair.
    """

    def __init__(self, min_score: float = 1.0) -> None:
        self.join_rules: List[AttributePair] = []
        self.compare_rules: List[AttributePair] = []
        self.custom_functions: List[ScoreFunction] = []
        self.filter_functions: List[FilterFunction] = []
        self.min_score = min_score

    def join(self, left_attr: str, right_attr: str, weight: float = 1.0) -> "RuleSet":
        self.join_rules.append(AttributePair(left_attr=left_attr, right_attr=right_attr, weight=weight))
        return self

    def compare(
        self,
        left_attr: str,
        right_attr: str,
        weight: float = 1.0,
        fuzzy: bool = False,
        **options: Any,
    ) -> "RuleSet":
        self.compare_rules.append(
            AttributePair(
                left_attr=left_attr,
                right_attr=right_attr,
                weight=weight,
                is_fuzzy=fuzzy,
                options=options,
            )
        )
        return self

    def custom(self, function: ScoreFunction) -> "RuleSet":
        self.custom_functions.append(function)
        return self

    def filter(self, function: FilterFunction) -> "RuleSet":
        self.filter_functions.append(function)
        return self

    def describe(self) -> dict[str, Any]:
        return {
            "join": [rule.to_dict() for rule in self.join_rules],
            "compare": [rule.to_dict() for rule in self.compare_rules],
            "custom": len(self.custom_functions),
            "filter": len(self.filter_functions),
            "min_score": self.min_score,
        }


__all__ = ["RuleSet", "ScoreFunction", "FilterFunction"]
