"""Single-store deduplication by attribute-equality criteria."""

from __future__ import annotations

from time import perf_counter
from typing import Any, Callable, Dict, Hashable, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..config.policies import DeduplicationPolicy
from ..entities import AttributeReader
from ..exceptions import ConfigurationError
from ..index import AttributeIndex, HashIndex
from ..stores import RecordStore
from ..utils import get_logger, ordered_intersection, ordered_union

_LOGGER = get_logger(module=__name__)

ProgressCallback = Callable[[Any], None]


class Deduplicator:
    """Cluster the records of one store into groups of duplicates.

    Each criteria group is a list of attribute names that must all be equal
    for two records to be linked. Records linked through any criteria group
    end up in the same group, merging groups where needed, so the result is
    the set of connected components of those links. Records whose criteria
    values are all missing are collected into a trailing catch-all group.
    """

    def __init__(
        self,
        store: Optional[RecordStore],
        *,
        index: Optional[AttributeIndex] = None,
        policy: Optional[DeduplicationPolicy] = None,
        accessors: AttributeReader | Mapping[str, Callable[[Any], Any]] | None = None,
    ) -> None:
        if store is None:
            raise ConfigurationError("Deduplicator requires a store")
        self.store = store
        self.index: AttributeIndex = index if index is not None else HashIndex()
        self.policy = policy or DeduplicationPolicy()
        self.reader = accessors if isinstance(accessors, AttributeReader) else AttributeReader(accessors)
        self.criteria: List[List[str]] = []
        self.groups: List[List[Hashable]] = []
        self.grouped: Dict[Hashable, int] = {}
        self.stats: Dict[str, object] = {}
        self._nil_group: List[Hashable] = []

    def match_attrs(self, attrs: str | Sequence[str]) -> "Deduplicator":
        """Append a criteria group; a single attribute name becomes a one-item group."""

        group = [attrs] if isinstance(attrs, str) else list(attrs)
        if not group:
            raise ConfigurationError("Criteria groups must name at least one attribute")
        self.criteria.append(group)
        return self

    @property
    def unique_attrs(self) -> List[str]:
        return ordered_union(*self.criteria)

    def create_index(self) -> None:
        if not self.criteria:
            raise ConfigurationError("Deduplicator requires at least one match attribute")
        attrs = self.unique_attrs
        for record_id, record in self.store.iter_records():
            for attr in attrs:
                self.index.put(attr, self.reader.read(record, attr), record_id)

    def _candidates(self, record: Any, attrs: Sequence[str]) -> Optional[List[Hashable]]:
        found: Optional[List[Hashable]] = None
        for attr in attrs:
            value = self.reader.read(record, attr)
            if value is None:
                continue
            ids = self.index.get(attr, value) or []
            found = ids if found is None else ordered_intersection(found, ids)
        return found

    def _assign(self, candidates: Sequence[Hashable]) -> None:
        owners: List[int] = ordered_union([self.grouped[cid] for cid in candidates if cid in self.grouped])

        if not owners:
            self.groups.append(list(candidates))
            position = len(self.groups) - 1
            for cid in candidates:
                self.grouped[cid] = position
            return

        target = self.groups[owners[0]]
        folded = owners[1:]
        for position in folded:
            target.extend(self.groups[position])
        for position in sorted(folded, reverse=True):
            del self.groups[position]
        if folded:
            self.stats["merges"] += 1
            _LOGGER.debug("Merged duplicate groups", target=owners[0], folded=folded)

        target.extend(cid for cid in candidates if cid not in self.grouped)

        for position in range(min(owners), len(self.groups)):
            for cid in self.groups[position]:
                self.grouped[cid] = position

    def deduplicate(self, progress: Optional[ProgressCallback] = None) -> List[List[Hashable]]:
        """Group the records of the store and return ``groups``."""

        start_time = perf_counter()
        self.groups = []
        self.grouped = {}
        self._nil_group = []
        self.stats = {"records": 0, "merges": 0}
        self.index.reset()
        _LOGGER.info("Deduplication run started", criteria=self.criteria)

        self.create_index()

        single_group = len(self.criteria) == 1
        interval = self.policy.progress_log_interval
        for record_id, record in self.store.iter_records():
            if progress is not None:
                progress(record)
            self.stats["records"] += 1
            if self.stats["records"] % interval == 0:
                _LOGGER.debug("Deduplication progress", records=self.stats["records"])

            if single_group and record_id in self.grouped:
                continue

            nil_candidate = False
            for attrs in self.criteria:
                candidates = self._candidates(record, attrs)
                if candidates is None:
                    nil_candidate = True
                    continue
                self._assign(candidates)

            if nil_candidate and record_id not in self.grouped and record_id not in self._nil_group:
                self._nil_group.append(record_id)

        if self._nil_group:
            self.groups.append(self._nil_group)
            for record_id in self._nil_group:
                self.grouped[record_id] = len(self.groups) - 1

        self.stats["groups"] = len(self.groups)
        self.stats["nil_group_size"] = len(self._nil_group)
        self.stats["elapsed_seconds"] = perf_counter() - start_time
        _LOGGER.info("Deduplication run finished", **self.stats)
        return self.groups

    def each_with_groups(self) -> Iterator[Tuple[Any, int, int]]:
        """Yield ``(record, group_index, index_within_group)`` in group order."""

        for group_index, group in enumerate(self.groups):
            for member_index, record_id in enumerate(group):
                yield self.store.find(record_id), group_index, member_index


__all__ = ["Deduplicator", "ProgressCallback"]
