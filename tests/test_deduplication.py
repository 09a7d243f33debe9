"""Tests for the single-store Deduplicator."""

from __future__ import annotations

from datetime import date
from types import SimpleNamespace

import pytest

from conftest import FakeRedis
from recordlink.deduplication import Deduplicator
from recordlink.exceptions import ConfigurationError
from recordlink.index import RedisIndex
from recordlink.stores import SequenceStore


def _txn(mid, esn, act_date, nilly=None) -> SimpleNamespace:
    return SimpleNamespace(mid=mid, esn=esn, act_date=act_date, nilly=nilly)


@pytest.fixture()
def store() -> SequenceStore:
    return SequenceStore(
        [
            _txn("7275554444", "11111111111", date(2011, 1, 1)),
            _txn("7275554444", "22222222222", date(2011, 1, 2)),
            _txn("8135552222", "22222222222", date(2011, 1, 3)),
            _txn("8135552222", "22222222222", date(2011, 1, 2)),
        ]
    )


@pytest.fixture()
def larger_store(store: SequenceStore) -> SequenceStore:
    records = [store.find(position) for position in range(len(store))]
    # a hybrid of the first two records
    records.append(_txn("7275554444", "11111111111", date(2011, 1, 2)))
    return SequenceStore(records)


def _deduplicate(store: SequenceStore, *criteria) -> Deduplicator:
    deduplicator = Deduplicator(store)
    for group in criteria:
        deduplicator.match_attrs(group)
    deduplicator.deduplicate()
    return deduplicator


def test_store_is_required() -> None:
    with pytest.raises(ConfigurationError):
        Deduplicator(None)


def test_criteria_groups_are_normalised(store: SequenceStore) -> None:
    deduplicator = Deduplicator(store).match_attrs("mid").match_attrs(["act_date", "mid", "esn"])

    assert deduplicator.criteria == [["mid"], ["act_date", "mid", "esn"]]
    assert deduplicator.unique_attrs == ["mid", "act_date", "esn"]
    with pytest.raises(ConfigurationError):
        deduplicator.match_attrs([])


def test_create_index_requires_criteria(store: SequenceStore) -> None:
    with pytest.raises(ConfigurationError):
        Deduplicator(store).create_index()


def test_create_index_indexes_store_values(store: SequenceStore) -> None:
    deduplicator = Deduplicator(store).match_attrs("mid")
    deduplicator.create_index()

    assert deduplicator.index.get("mid", "7275554444") == [0, 1]
    assert deduplicator.index.get("mid", "8135552222") == [2, 3]
    assert deduplicator.index.get("mid", "2055558888") is None


def test_single_key_groups(store: SequenceStore) -> None:
    deduplicator = _deduplicate(store, "mid")
    assert deduplicator.groups == [[0, 1], [2, 3]]
    assert deduplicator.grouped == {0: 0, 1: 0, 2: 1, 3: 1}


def test_single_key_with_uneven_groups(store: SequenceStore) -> None:
    deduplicator = _deduplicate(store, "esn")
    assert [len(group) for group in deduplicator.groups] == [1, 3]


def test_single_key_on_dates(store: SequenceStore) -> None:
    assert len(_deduplicate(store, "act_date").groups) == 3


def test_all_nil_values_form_one_group(store: SequenceStore) -> None:
    deduplicator = _deduplicate(store, "nilly")
    assert deduplicator.groups == [[0, 1, 2, 3]]
    assert deduplicator.stats["nil_group_size"] == 4


def test_nil_attributes_are_ignored_within_a_group(store: SequenceStore) -> None:
    assert len(_deduplicate(store, ["mid", "nilly"]).groups) == 2


def test_multiple_attributes_must_all_agree(store: SequenceStore) -> None:
    deduplicator = _deduplicate(store, ["esn", "act_date"])
    assert deduplicator.groups == [[0], [1, 3], [2]]


def test_groups_linked_by_different_criteria_are_merged(larger_store: SequenceStore) -> None:
    deduplicator = _deduplicate(larger_store, ["mid", "esn"], ["mid", "act_date"])

    assert deduplicator.groups == [[1, 0, 4], [2, 3]]
    assert deduplicator.grouped == {0: 0, 1: 0, 4: 0, 2: 1, 3: 1}
    assert deduplicator.stats["merges"] == 1


def test_each_with_groups_walks_groups_in_order(larger_store: SequenceStore) -> None:
    deduplicator = _deduplicate(larger_store, ["mid", "esn"], ["mid", "act_date"])

    rows = list(deduplicator.each_with_groups())

    assert sum(group_index for _, group_index, _ in rows) == 2
    assert sum(item_index for _, _, item_index in rows) == 4
    assert rows[0][0] is larger_store.find(1)
    assert list(deduplicator.each_with_groups()) == rows


def test_mixed_nil_records_join_the_trailing_group() -> None:
    store = SequenceStore(
        [
            {"email": "a@example.com", "phone": None},
            {"email": None, "phone": None},
            {"email": "a@example.com", "phone": "555"},
            {"email": None, "phone": "555"},
            {"email": None, "phone": None},
        ]
    )
    deduplicator = _deduplicate(store, "email", "phone")

    assert deduplicator.groups == [[0, 2, 3], [1, 4]]
    assert deduplicator.grouped[4] == 1


def test_groups_are_connected_components() -> None:
    store = SequenceStore(
        [
            {"email": "x", "phone": "1"},
            {"email": "y", "phone": "2"},
            {"email": "x", "phone": "2"},
            {"email": "z", "phone": "3"},
        ]
    )
    deduplicator = _deduplicate(store, "email", "phone")

    assert sorted(sorted(group) for group in deduplicator.groups) == [[0, 1, 2], [3]]
    members = [record_id for group in deduplicator.groups for record_id in group]
    assert sorted(members) == [0, 1, 2, 3]


def test_deduplicate_is_repeatable(larger_store: SequenceStore) -> None:
    deduplicator = Deduplicator(larger_store).match_attrs(["mid", "esn"]).match_attrs(["mid", "act_date"])
    first = [list(group) for group in deduplicator.deduplicate()]
    second = [list(group) for group in deduplicator.deduplicate()]
    assert first == second


def test_progress_callback_and_redis_index(store: SequenceStore, fake_redis: FakeRedis) -> None:
    seen = []
    deduplicator = Deduplicator(store, index=RedisIndex(fake_redis, namespace="dedupe"))
    deduplicator.match_attrs("mid")

    deduplicator.deduplicate(progress=seen.append)

    assert len(seen) == 4
    assert deduplicator.groups == [[0, 1], [2, 3]]
