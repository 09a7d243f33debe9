"""End-to-end reconciliation of a ledger against a bank statement."""

from __future__ import annotations

from datetime import date

from recordlink.matching import Matcher
from recordlink.stores import SequenceStore


def _ledger() -> list[dict]:
    return [
        {"date": date(2012, 1, 1), "desc": "Basecamp", "amount": 25.0},
        {"date": date(2012, 1, 1), "desc": "Basecamp", "amount": 25.0},
        {"date": date(2012, 1, 2), "desc": "Github", "amount": 25.0},
    ]


def _bank() -> list[dict]:
    return [
        {"date": date(2012, 1, 1), "desc": "Basecamp (37 signals)", "amount": 25.0},
        {"date": date(2012, 1, 3), "desc": "Github", "amount": 25.0},
    ]


def test_ledger_reconciles_against_bank_statement() -> None:
    matcher = Matcher(SequenceStore(_ledger()), SequenceStore(_bank()), min_score=1.0)
    matcher.join("amount", "amount", 1.0).compare("date", "date", 0.2, fuzzy=True)

    matcher.match()

    assert len(matcher.left_matches) == 2
    assert len(matcher.left_exceptions()) == 1
    assert matcher.right_exceptions() == []
    assert {match.left_id: match.right_id for match in matcher.matches()} == {0: 0, 2: 1}


def test_duplicate_ledger_entry_is_reported_once() -> None:
    ledger = _ledger()
    matcher = Matcher(SequenceStore(ledger), SequenceStore(_bank()), min_score=1.0)
    matcher.join("amount", "amount", 1.0).compare("date", "date", 0.2, fuzzy=True)

    matcher.match()

    exceptions = matcher.left_exceptions()
    assert exceptions[0] is ledger[1]
    assert matcher.left_exceptions() is exceptions
