"""Two-sided record matching."""

from .matcher import Matcher, ProgressCallback
from .rules import FilterFunction, RuleSet, ScoreFunction

__all__ = ["Matcher", "ProgressCallback", "RuleSet", "ScoreFunction", "FilterFunction"]
