"""Tests for the transaction store."""

from datetime import date

import pytest

from transitoria_core.demo import demo_transactions
from transitoria_core.exceptions import DuplicateTransactionError, TransactionNotFound
from transitoria_core.models import (
    ClassificationResponse,
    RiskLevel,
    Transaction,
    TransactionStatus,
)
from transitoria_core.store import TransactionStore


@pytest.fixture
def store():
    return TransactionStore(demo_transactions())


@pytest.fixture
def response():
    return ClassificationResponse.from_payload(
        {
            "transactions": [
                {"id": "1", "analysis": "Huur Q1", "risk": "MEDIUM", "period": "2024-Q1", "category": "PREPAID"},
            ],
            "completeness": [
                {"description": "Huur april ontbreekt", "expectedPeriod": "2024-04", "confidence": 0.6}
            ],
        }
    )


class TestTransactionStoreReading:
    """Tests for read access."""

    def test_keeps_insertion_order(self, store):
        assert [t.id for t in store.transactions] == ["1", "2", "3", "4", "5", "6"]

    def test_get(self, store):
        assert store.get("5").relation == "Bank NL"

    def test_get_unknown_raises(self, store):
        with pytest.raises(TransactionNotFound) as exc_info:
            store.get("nope")
        assert exc_info.value.transaction_id == "nope"

    def test_container_protocol(self, store):
        assert len(store) == 6
        assert "3" in store
        assert "42" not in store
        assert [t.id for t in store] == [t.id for t in store.transactions]

    def test_counts(self, store):
        assert store.status_counts()[TransactionStatus.APPROVED] == 1
        assert store.status_counts()[TransactionStatus.PENDING] == 5
        assert store.risk_counts()[RiskLevel.HIGH] == 1

    def test_snapshot_is_detached(self, store):
        """A snapshot does not follow later mutations."""
        snapshot = store.snapshot()
        store.set_status("1", TransactionStatus.APPROVED)
        assert snapshot.transactions[0].status == TransactionStatus.PENDING
        assert snapshot.ids == frozenset({"1", "2", "3", "4", "5", "6"})


class TestTransactionStoreLoading:
    """Tests for adding and replacing transactions."""

    def test_add_transactions(self, store):
        added = store.add_transactions(
            [Transaction(id="7", date=date(2024, 4, 1), description="Huur april", amount="5000")]
        )
        assert added == 1
        assert store.transactions[-1].id == "7"

    def test_duplicate_id_rejects_whole_batch(self, store):
        """Either every transaction is added or none are."""
        batch = [
            Transaction(id="7", date=date(2024, 4, 1), amount="1"),
            Transaction(id="1", date=date(2024, 4, 1), amount="1"),
        ]
        with pytest.raises(DuplicateTransactionError) as exc_info:
            store.add_transactions(batch)
        assert exc_info.value.transaction_ids == ["1"]
        assert len(store) == 6
        assert "7" not in store

    def test_duplicate_within_batch_rejected(self, store):
        batch = [
            Transaction(id="8", date=date(2024, 4, 1), amount="1"),
            Transaction(id="8", date=date(2024, 4, 2), amount="2"),
        ]
        with pytest.raises(DuplicateTransactionError):
            store.add_transactions(batch)
        assert len(store) == 6

    def test_replace_clears_completeness(self, store, response):
        store.apply_classification(response)
        store.replace_transactions([Transaction(id="x", date=date(2024, 1, 1), amount="1")])
        assert [t.id for t in store.transactions] == ["x"]
        assert store.completeness_issues == ()

    def test_failed_replace_leaves_store_unchanged(self, store):
        batch = [
            Transaction(id="x", date=date(2024, 1, 1), amount="1"),
            Transaction(id="x", date=date(2024, 1, 1), amount="1"),
        ]
        with pytest.raises(DuplicateTransactionError):
            store.replace_transactions(batch)
        assert len(store) == 6


class TestApplyClassification:
    """Tests for merging classification runs."""

    def test_apply(self, store, response):
        assert store.apply_classification(response) is True
        txn = store.get("1")
        assert txn.risk_level == RiskLevel.MEDIUM
        assert txn.ai_analysis == "Huur Q1"
        assert [i.expected_period for i in store.completeness_issues] == ["2024-04"]

    def test_apply_keeps_amounts_and_ids(self, store, response):
        before = [(t.id, t.amount, t.date) for t in store.transactions]
        store.apply_classification(response)
        assert [(t.id, t.amount, t.date) for t in store.transactions] == before

    def test_apply_preserves_decisions_taken_meanwhile(self, store, response):
        """A decision taken while the call was in flight survives the merge."""
        batch_ids = store.ids
        store.set_status("1", TransactionStatus.CORRECTED)
        assert store.apply_classification(response, batch_ids=batch_ids)
        assert store.get("1").status == TransactionStatus.CORRECTED
        assert store.get("1").risk_level == RiskLevel.MEDIUM

    def test_stale_response_is_discarded(self, store, response):
        """A response for a different set of transactions is not applied."""
        batch_ids = store.ids
        store.add_transactions([Transaction(id="7", date=date(2024, 4, 1), amount="1")])
        before = store.transactions
        assert store.apply_classification(response, batch_ids=batch_ids) is False
        assert store.transactions == before
        assert store.completeness_issues == ()

    def test_empty_response_clears_completeness_only(self, store, response):
        store.apply_classification(response)
        before = store.transactions
        store.apply_classification(ClassificationResponse.empty())
        assert store.transactions == before
        assert store.completeness_issues == ()

    def test_apply_twice_is_idempotent(self, store, response):
        store.apply_classification(response)
        once = store.transactions
        store.apply_classification(response)
        assert store.transactions == once


class TestReviewFields:
    """Tests for status and manager comment updates."""

    def test_set_status(self, store):
        updated = store.set_status("2", TransactionStatus.APPROVED)
        assert updated.status == TransactionStatus.APPROVED
        assert store.get("2").status == TransactionStatus.APPROVED

    def test_set_status_unknown_id(self, store):
        with pytest.raises(TransactionNotFound):
            store.set_status("nope", TransactionStatus.APPROVED)

    def test_manager_comment(self, store):
        store.set_manager_comment("4", "  Navragen bij accountant ")
        assert store.get("4").manager_comment == "Navragen bij accountant"

    def test_blank_comment_clears(self, store):
        store.set_manager_comment("4", "Iets")
        store.set_manager_comment("4", "   ")
        assert store.get("4").manager_comment is None
