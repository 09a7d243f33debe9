"""Two-sided record matcher with score-based conflict resolution."""

from __future__ import annotations

from collections import deque
from time import perf_counter
from typing import Any, Callable, Deque, Dict, Hashable, List, Mapping, Optional, Tuple

from ..config.policies import MatchingPolicy
from ..entities import AttributeReader, Candidate, Match
from ..exceptions import ConfigurationError, MatchingInvariantError
from ..index import AttributeIndex, HashIndex
from ..similarity import SimilarityRegistry, compare_values, default_registry
from ..stores import RecordStore
from ..utils import get_logger, ordered_union
from .rules import FilterFunction, RuleSet, ScoreFunction

_LOGGER = get_logger(module=__name__)

ProgressCallback = Callable[[Any], None]


class Matcher:
    """Pair each left record with at most one right record.

    Right records are indexed on the right-hand attributes of the join rules.
    Every left record is scored against the union of the right records that
    share a join value with it, and claims its best-scoring candidate that is
    either unclaimed or held by a left record with a strictly lower score. A
    displaced left record goes to a loser queue and is re-evaluated once the
    left store has been walked; the queue is drained pass by pass until empty.

    Assignments are keyed by store id, so equal-valued records remain distinct.
    """

    def __init__(
        self,
        left_store: Optional[RecordStore] = None,
        right_store: Optional[RecordStore] = None,
        *,
        rules: Optional[RuleSet] = None,
        min_score: Optional[float] = None,
        index: Optional[AttributeIndex] = None,
        policy: Optional[MatchingPolicy] = None,
        accessors: AttributeReader | Mapping[str, Callable[[Any], Any]] | None = None,
        registry: Optional[SimilarityRegistry] = None,
    ) -> None:
        self.left_store = left_store
        self.right_store = right_store
        self.policy = policy or MatchingPolicy()
        self.rules = rules or RuleSet(min_score=self.policy.min_score)
        if min_score is not None:
            self.rules.min_score = min_score
        self.right_index: AttributeIndex = index if index is not None else HashIndex()
        self.reader = accessors if isinstance(accessors, AttributeReader) else AttributeReader(accessors)
        self.registry = registry or default_registry
        self.stats: Dict[str, object] = {}
        self._reset_run_state()

    # ------------------------------------------------------------------
    # Rule declaration
    # ------------------------------------------------------------------
    def join(self, left_attr: str, right_attr: str, weight: float = 1.0) -> "Matcher":
        self.rules.join(left_attr, right_attr, weight)
        return self

    def compare(
        self,
        left_attr: str,
        right_attr: str,
        weight: float = 1.0,
        fuzzy: bool = False,
        **options: Any,
    ) -> "Matcher":
        self.rules.compare(left_attr, right_attr, weight, fuzzy, **options)
        return self

    def custom(self, function: ScoreFunction) -> "Matcher":
        self.rules.custom(function)
        return self

    def filter(self, function: FilterFunction) -> "Matcher":
        self.rules.filter(function)
        return self

    @property
    def min_score(self) -> float:
        return self.rules.min_score

    @min_score.setter
    def min_score(self, value: float) -> None:
        self.rules.min_score = value

    # ------------------------------------------------------------------
    # Run state
    # ------------------------------------------------------------------
    def _reset_run_state(self) -> None:
        self.right_matches: Dict[Hashable, Match] = {}
        self.left_matches: Dict[Hashable, Match] = {}
        self._losers: Deque[Tuple[Hashable, Any]] = deque()
        self._left_exceptions: Optional[List[Any]] = None
        self._right_exceptions: Optional[List[Any]] = None
        self.stats = {
            "left_records": 0,
            "candidates_scored": 0,
            "evictions": 0,
            "resolution_passes": 0,
            "matches": 0,
        }

    def _require_stores(self) -> None:
        if self.left_store is None or self.right_store is None:
            raise ConfigurationError("Matcher requires both a left store and a right store")

    # ------------------------------------------------------------------
    # Indexing and scoring
    # ------------------------------------------------------------------
    def index_right_objects(self) -> None:
        """Index every right record on the right attribute of each join rule."""

        if not self.rules.join_rules:
            raise ConfigurationError("Matcher requires at least one join rule")
        if self.right_store is None:
            raise ConfigurationError("Matcher requires a right store to index")

        indexed = 0
        for right_id, right_record in self.right_store.iter_records():
            for rule in self.rules.join_rules:
                self.right_index.put(rule.right_attr, self.reader.read(right_record, rule.right_attr), right_id)
            indexed += 1
        _LOGGER.debug("Indexed right records", records=indexed, join_rules=len(self.rules.join_rules))

    def find_potential_matches(self, left_record: Any) -> List[Tuple[Hashable, Any]]:
        """Return the right records sharing at least one join value with ``left_record``."""

        id_lists = []
        for rule in self.rules.join_rules:
            left_value = self.reader.read(left_record, rule.left_attr)
            if left_value is None or left_value == "":
                continue
            id_lists.append(self.right_index.get(rule.right_attr, left_value))
        return [(right_id, self.right_store.find(right_id)) for right_id in ordered_union(*id_lists)]

    def score_pair(self, left_record: Any, right_record: Any) -> float:
        read = self.reader.read
        score = 0.0
        for rule in self.rules.join_rules:
            score += rule.weight * compare_values(
                read(left_record, rule.left_attr),
                read(right_record, rule.right_attr),
                registry=self.registry,
            )
        for rule in self.rules.compare_rules:
            score += rule.weight * compare_values(
                read(left_record, rule.left_attr),
                read(right_record, rule.right_attr),
                rule.is_fuzzy,
                registry=self.registry,
                **rule.options,
            )
        for function in self.rules.custom_functions:
            score += function(left_record, right_record)
        for function in self.rules.filter_functions:
            if not function(left_record, right_record):
                score = 0.0
        return score

    def find_matches(self, left_record: Any) -> List[Candidate]:
        """Score the potential matches of ``left_record``, best first."""

        ranked: List[Candidate] = []
        for right_id, right_record in self.find_potential_matches(left_record):
            score = self.score_pair(left_record, right_record)
            self.stats["candidates_scored"] += 1
            if score >= self.rules.min_score:
                ranked.append(Candidate(record_id=right_id, record=right_record, score=score))
        ranked.sort(key=lambda candidate: candidate.score, reverse=True)
        return ranked

    def pair_matches(self, left_id: Hashable, left_record: Any, ranked: List[Candidate]) -> bool:
        """Assign ``left_record`` to the first candidate it can claim.

        Returns ``True`` when an assignment was made. A claim displacing another
        left record queues that record for re-evaluation.
        """

        for candidate in ranked:
            current = self.right_matches.get(candidate.record_id)
            if current is not None and candidate.score <= current.score:
                continue
            if current is not None:
                self._losers.append((current.left_id, current.left_record))
                self.stats["evictions"] += 1
                _LOGGER.debug(
                    "Evicted weaker match",
                    right_id=candidate.record_id,
                    evicted=current.left_id,
                    winner=left_id,
                    score=candidate.score,
                )
            self.right_matches[candidate.record_id] = Match(
                left_id=left_id,
                left_record=left_record,
                right_id=candidate.record_id,
                right_record=candidate.record,
                score=candidate.score,
            )
            return True
        return False

    def _evaluate_losers(self) -> None:
        passes = 0
        while self._losers:
            passes += 1
            if passes > self.policy.max_resolution_passes:
                raise MatchingInvariantError(
                    f"Loser re-evaluation did not settle within {self.policy.max_resolution_passes} passes"
                )
            queue, self._losers = self._losers, deque()
            for left_id, left_record in queue:
                self.pair_matches(left_id, left_record, self.find_matches(left_record))
        self.stats["resolution_passes"] = passes

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------
    def match(self, progress: Optional[ProgressCallback] = None) -> List[Match]:
        """Run the matcher over both stores and return the final matches."""

        self._require_stores()
        start_time = perf_counter()
        self._reset_run_state()
        self.right_index.reset()
        _LOGGER.info(
            "Matching run started",
            join_rules=len(self.rules.join_rules),
            compare_rules=len(self.rules.compare_rules),
            min_score=self.rules.min_score,
        )

        self.index_right_objects()

        interval = self.policy.progress_log_interval
        for left_id, left_record in self.left_store.iter_records():
            if progress is not None:
                progress(left_record)
            self.pair_matches(left_id, left_record, self.find_matches(left_record))
            self.stats["left_records"] += 1
            if self.stats["left_records"] % interval == 0:
                _LOGGER.debug("Matching progress", left_records=self.stats["left_records"])

        self._evaluate_losers()

        self.left_matches = {match.left_id: match for match in self.right_matches.values()}
        self.stats["matches"] = len(self.left_matches)
        self.stats["elapsed_seconds"] = perf_counter() - start_time
        _LOGGER.info("Matching run finished", **self.stats)
        return self.matches()

    def matches(self) -> List[Match]:
        return list(self.left_matches.values())

    def left_exceptions(self) -> List[Any]:
        """Left records without a final match."""

        if self._left_exceptions is None:
            self._require_stores()
            self._left_exceptions = [
                record for record_id, record in self.left_store.iter_records() if record_id not in self.left_matches
            ]
        return self._left_exceptions

    def right_exceptions(self) -> List[Any]:
        """Right records no left record was matched to."""

        if self._right_exceptions is None:
            self._require_stores()
            self._right_exceptions = [
                record
                for record_id, record in self.right_store.iter_records()
                if record_id not in self.right_matches
            ]
        return self._right_exceptions


__all__ = ["Matcher", "ProgressCallback"]
