"""Shared fixtures for the recordlink test suite."""

from __future__ import annotations

import fnmatch
from datetime import date
from types import SimpleNamespace

import pytest


class FakeRedis:
    """Minimal in-memory stand-in for the redis-py client calls used by RedisIndex."""

    def __init__(self) -> None:
        self.lists: dict[str, list[str]] = {}

    def rpush(self, key: str, *values: str) -> int:
        self.lists.setdefault(key, []).extend(values)
        return len(self.lists[key])

    def lrange(self, key: str, start: int, end: int) -> list[str]:
        items = self.lists.get(key, [])
        stop = None if end == -1 else end + 1
        return list(items[start:stop])

    def scan_iter(self, match: str = "*"):
        for key in list(self.lists):
            if fnmatch.fnmatchcase(key, match):
                yield key

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.lists.pop(key, None) is not None:
                removed += 1
        return removed


@pytest.fixture()
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture()
def cell_transactions() -> dict[str, list[SimpleNamespace]]:
    """Left and right transactions; ``left_a`` shares esn, mid, and date with ``right_b``."""

    lefts = [
        SimpleNamespace(esn="11111111111", mid="7275551111", date=date(2010, 6, 1)),
        SimpleNamespace(esn="22222222222", mid="8135554444", date=date(2010, 6, 1)),
        SimpleNamespace(esn="33333333333", mid="7275551111", date=date(2010, 6, 15)),
    ]
    rights = [
        SimpleNamespace(esn="11111111111", mid="2015559999", date=date(2010, 6, 1)),
        SimpleNamespace(esn="11111111111", mid="7275551111", date=date(2010, 6, 1)),
        SimpleNamespace(esn="22222222222", mid="8135554444", date=date(2010, 6, 2)),
        SimpleNamespace(esn="44444444444", mid="7275551111", date=date(2010, 6, 14)),
    ]
    return {"lefts": lefts, "rights": rights}
