"""Tests for the sequence and SQLAlchemy-backed record stores."""

from __future__ import annotations

from datetime import date
from typing import Iterator, Optional

import pytest
from sqlalchemy import Date, Integer, String, create_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from recordlink.config.policies import StorePolicy
from recordlink.deduplication import Deduplicator
from recordlink.stores import QueryStore, RecordStore, SequenceStore


class Base(DeclarativeBase):
    pass


class CellTxn(Base):
    __tablename__ = "cell_txns"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    mid: Mapped[str] = mapped_column(String(16))
    esn: Mapped[str] = mapped_column(String(16))
    act_date: Mapped[date] = mapped_column(Date)
    nilly: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)


@pytest.fixture()
def session() -> Iterator[Session]:
    engine = create_engine("sqlite://")
    Base.metadata.create_all(engine)
    with Session(engine) as db:
        db.add_all(
            [
                CellTxn(id=3, mid="8135552222", esn="22222222222", act_date=date(2011, 1, 3)),
                CellTxn(id=1, mid="7275554444", esn="11111111111", act_date=date(2011, 1, 1)),
                CellTxn(id=2, mid="7275554444", esn="22222222222", act_date=date(2011, 1, 2)),
                CellTxn(id=4, mid="8135552222", esn="22222222222", act_date=date(2011, 1, 2)),
            ]
        )
        db.commit()
        yield db
    engine.dispose()


def test_sequence_store_uses_positions_as_ids() -> None:
    store = SequenceStore(["a", "b", "c"])

    assert list(store.iter_records()) == [(0, "a"), (1, "b"), (2, "c")]
    assert list(store.iter_records()) == [(0, "a"), (1, "b"), (2, "c")]
    assert store.find(1) == "b"
    assert store.find(-1) == "c"
    assert len(store) == 3
    assert isinstance(store, RecordStore)


def test_query_store_iterates_in_primary_key_order(session: Session) -> None:
    store = QueryStore(session, CellTxn, batch_size=2)

    records = list(store.iter_records())

    assert [record_id for record_id, _ in records] == [1, 2, 3, 4]
    assert all(record.id == record_id for record_id, record in records)
    assert store.find(3).mid == "8135552222"
    assert store.find(99) is None


def test_query_store_accepts_expression_filters(session: Session) -> None:
    store = QueryStore(session, CellTxn, where=CellTxn.mid == "7275554444")
    assert [record_id for record_id, _ in store.iter_records()] == [1, 2]


def test_query_store_accepts_raw_sql_filters(session: Session) -> None:
    store = QueryStore(session, CellTxn, where="esn = '22222222222'")
    assert [record_id for record_id, _ in store.iter_records()] == [2, 3, 4]


def test_query_store_rejects_empty_batches(session: Session) -> None:
    with pytest.raises(ValueError):
        QueryStore(session, CellTxn, batch_size=0)


def test_query_store_from_policy(session: Session) -> None:
    store = QueryStore.from_policy(session, CellTxn, StorePolicy(batch_size=3), where=CellTxn.id > 2)
    assert store.batch_size == 3
    assert [record_id for record_id, _ in store.iter_records()] == [3, 4]


def test_deduplicator_runs_over_a_query_store(session: Session) -> None:
    deduplicator = Deduplicator(QueryStore(session, CellTxn)).match_attrs("mid")
    deduplicator.deduplicate()

    assert deduplicator.groups == [[1, 2], [3, 4]]
    assert {record.mid for record, group_index, _ in deduplicator.each_with_groups() if group_index == 1} == {"8135552222"}
