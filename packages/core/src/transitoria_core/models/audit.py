"""Audit log models for review decisions.

Every approve/correct decision on a transaction is recorded as an
immutable AuditLogEntry in an append-only AuditLog.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Iterator, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _utc_now() -> datetime:
    """Return current UTC datetime with timezone info."""
    return datetime.now(timezone.utc)


def _new_entry_id() -> str:
    return uuid4().hex


class AuditAction(str, Enum):
    """Review decisions that produce an audit entry."""

    APPROVE = "APPROVE"
    CORRECT = "CORRECT"


class AuditLogEntry(BaseModel):
    """Immutable record of one review decision.

    Attributes:
        id: Unique identifier of the entry
        timestamp: When the decision was recorded (UTC)
        transaction_id: The transaction the decision applies to
        action: APPROVE or CORRECT
        user: Who made the decision
        details: Human-readable description of the decision
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_entry_id)
    timestamp: datetime = Field(default_factory=_utc_now)
    transaction_id: str
    action: AuditAction
    user: str
    details: str = ""

    def model_post_init(self, __context) -> None:
        """Ensure timestamp is timezone-aware."""
        if self.timestamp.tzinfo is None:
            object.__setattr__(
                self,
                'timestamp',
                self.timestamp.replace(tzinfo=timezone.utc)
            )


class AuditLog:
    """Append-only history of review decisions.

    Insertion order is the source of truth; ``newest_first()`` gives the
    presentation order. Entries are never edited or removed. Timestamps are
    kept non-decreasing in insertion order: an entry stamped earlier than its
    predecessor (clock skew) is re-stamped with the predecessor's timestamp.
    """

    def __init__(self) -> None:
        self._entries: list[AuditLogEntry] = []

    def append(self, entry: AuditLogEntry) -> AuditLogEntry:
        """Append an entry and return the entry as stored."""
        if self._entries and entry.timestamp < self._entries[-1].timestamp:
            entry = entry.model_copy(update={"timestamp": self._entries[-1].timestamp})
        self._entries.append(entry)
        return entry

    @property
    def entries(self) -> tuple[AuditLogEntry, ...]:
        """All entries in insertion order."""
        return tuple(self._entries)

    def newest_first(self) -> list[AuditLogEntry]:
        """All entries, most recent first."""
        return list(reversed(self._entries))

    def for_transaction(self, transaction_id: str) -> list[AuditLogEntry]:
        """Entries for one transaction, in insertion order."""
        return [e for e in self._entries if e.transaction_id == transaction_id]

    @property
    def last(self) -> Optional[AuditLogEntry]:
        """Most recent entry, if any."""
        return self._entries[-1] if self._entries else None

    def summary(self) -> dict[str, int]:
        """Number of entries per action, plus the total."""
        counts = {action.value: 0 for action in AuditAction}
        for entry in self._entries:
            counts[entry.action.value] += 1
        counts["total"] = len(self._entries)
        return counts

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[AuditLogEntry]:
        return iter(tuple(self._entries))
