"""Tests for audit log models."""

from datetime import datetime, timedelta, timezone
import json

import pytest
from pydantic import ValidationError

from transitoria_core.models.audit import (
    AuditAction,
    AuditLog,
    AuditLogEntry,
)


def make_entry(transaction_id="1", action=AuditAction.APPROVE, timestamp=None) -> AuditLogEntry:
    kwargs = {"transaction_id": transaction_id, "action": action, "user": "J. de Vries"}
    if timestamp is not None:
        kwargs["timestamp"] = timestamp
    return AuditLogEntry(**kwargs)


class TestAuditLogEntry:
    """Tests for AuditLogEntry model."""

    def test_create_basic_entry(self):
        """Should create an entry with generated id and timestamp."""
        entry = make_entry()
        assert entry.id
        assert entry.transaction_id == "1"
        assert entry.action == AuditAction.APPROVE
        assert entry.details == ""

    def test_ids_are_unique(self):
        assert make_entry().id != make_entry().id

    def test_timestamp_is_utc(self):
        """Timestamp should be timezone-aware UTC."""
        entry = make_entry()
        assert entry.timestamp.tzinfo is not None

    def test_naive_timestamp_converted_to_utc(self):
        """Naive timestamps should be treated as UTC."""
        entry = make_entry(timestamp=datetime(2024, 1, 15, 10, 30))
        assert entry.timestamp.tzinfo == timezone.utc

    def test_is_frozen(self):
        entry = make_entry()
        with pytest.raises(ValidationError):
            entry.details = "changed"

    def test_unknown_action_rejected(self):
        with pytest.raises(ValidationError):
            AuditLogEntry(transaction_id="1", action="DELETE", user="x")

    def test_serializes_to_json(self):
        """Should serialize to JSON cleanly."""
        entry = make_entry(action=AuditAction.CORRECT)
        data = json.loads(entry.model_dump_json())
        assert data["action"] == "CORRECT"
        assert data["transaction_id"] == "1"


class TestAuditLog:
    """Tests for the append-only AuditLog."""

    @pytest.fixture
    def t0(self):
        return datetime(2024, 4, 2, 9, 0, tzinfo=timezone.utc)

    def test_empty_log(self):
        log = AuditLog()
        assert len(log) == 0
        assert log.last is None
        assert log.summary() == {"APPROVE": 0, "CORRECT": 0, "total": 0}

    def test_append_preserves_insertion_order(self, t0):
        log = AuditLog()
        first = log.append(make_entry("1", timestamp=t0))
        second = log.append(make_entry("2", timestamp=t0 + timedelta(seconds=5)))
        assert log.entries == (first, second)
        assert log.newest_first() == [second, first]
        assert log.last == second

    def test_for_transaction(self, t0):
        log = AuditLog()
        log.append(make_entry("1", timestamp=t0))
        log.append(make_entry("2", timestamp=t0))
        log.append(make_entry("1", AuditAction.CORRECT, timestamp=t0))
        assert [e.action for e in log.for_transaction("1")] == [AuditAction.APPROVE, AuditAction.CORRECT]

    def test_summary(self, t0):
        log = AuditLog()
        log.append(make_entry("1", timestamp=t0))
        log.append(make_entry("2", AuditAction.CORRECT, timestamp=t0))
        log.append(make_entry("3", timestamp=t0))
        assert log.summary() == {"APPROVE": 2, "CORRECT": 1, "total": 3}

    def test_timestamps_never_go_backwards(self, t0):
        """An entry stamped before its predecessor takes the predecessor's time."""
        log = AuditLog()
        log.append(make_entry("1", timestamp=t0))
        stored = log.append(make_entry("2", timestamp=t0 - timedelta(minutes=3)))
        assert stored.timestamp == t0
        assert stored.transaction_id == "2"

    def test_entries_is_a_snapshot(self, t0):
        """Earlier views are not affected by later appends."""
        log = AuditLog()
        log.append(make_entry("1", timestamp=t0))
        view = log.entries
        log.append(make_entry("2", timestamp=t0))
        assert len(view) == 1
        assert len(log) == 2

    def test_iteration(self, t0):
        log = AuditLog()
        log.append(make_entry("1", timestamp=t0))
        log.append(make_entry("2", timestamp=t0))
        assert [e.transaction_id for e in log] == ["1", "2"]
