"""Review workflow: approve/correct decisions with an audit trail.

State machine::

    PENDING --approve--> APPROVED
    PENDING --correct--> CORRECTED

APPROVED and CORRECTED are terminal review decisions. Deciding again on a
decided transaction is allowed: the new status replaces the old one and a
new audit entry is appended, so the log holds the full decision history.

Each decision is atomic: the transaction is looked up and the audit entry
built before anything is written, so a failed call leaves both the store
and the log untouched.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from .models import AuditAction, AuditLog, AuditLogEntry, TransactionStatus
from .store import TransactionStore

logger = structlog.get_logger()

DEFAULT_USER = "J. de Vries"

_TARGET_STATUS = {
    AuditAction.APPROVE: TransactionStatus.APPROVED,
    AuditAction.CORRECT: TransactionStatus.CORRECTED,
}

_DEFAULT_DETAILS = {
    "nl": {
        AuditAction.APPROVE: "Transactie goedgekeurd voor periode",
        AuditAction.CORRECT: "Markering voor correctie vereist",
    },
    "en": {
        AuditAction.APPROVE: "Transaction approved for period",
        AuditAction.CORRECT: "Marked for correction",
    },
}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReviewWorkflow:
    """Records review decisions against a transaction store.

    Args:
        store: The store whose transactions are reviewed.
        audit_log: Log to append to. A new one is created if omitted.
        user: Reviewer identity written to every entry.
        language: ``nl`` or ``en`` for the default entry details.
        clock: Timestamp source, injectable for tests.
    """

    def __init__(
        self,
        store: TransactionStore,
        audit_log: Optional[AuditLog] = None,
        user: str = DEFAULT_USER,
        language: str = "nl",
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self.store = store
        self.audit_log = audit_log if audit_log is not None else AuditLog()
        self.user = user
        self.language = language if language in _DEFAULT_DETAILS else "nl"
        self._clock = clock

    def approve(self, transaction_id: str, details: Optional[str] = None) -> AuditLogEntry:
        """Approve the period allocation of a transaction.

        Raises:
            TransactionNotFound: If the id is unknown. Nothing is recorded.
        """
        return self._decide(transaction_id, AuditAction.APPROVE, details)

    def correct(self, transaction_id: str, details: Optional[str] = None) -> AuditLogEntry:
        """Mark a transaction as needing a correction.

        Raises:
            TransactionNotFound: If the id is unknown. Nothing is recorded.
        """
        return self._decide(transaction_id, AuditAction.CORRECT, details)

    def history(self, transaction_id: str) -> list[AuditLogEntry]:
        """All decisions on one transaction, oldest first."""
        return self.audit_log.for_transaction(transaction_id)

    def _decide(
        self,
        transaction_id: str,
        action: AuditAction,
        details: Optional[str],
    ) -> AuditLogEntry:
        current = self.store.get(transaction_id)

        entry = AuditLogEntry(
            timestamp=self._clock(),
            transaction_id=transaction_id,
            action=action,
            user=self.user,
            details=details or _DEFAULT_DETAILS[self.language][action],
        )

        self.store.set_status(transaction_id, _TARGET_STATUS[action])
        entry = self.audit_log.append(entry)

        logger.info(
            "review_decision",
            transaction_id=transaction_id,
            action=action.value,
            previous_status=current.status.value,
            user=self.user,
        )
        return entry
