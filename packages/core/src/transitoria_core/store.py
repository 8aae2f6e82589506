"""The transaction store: single owner of review state.

All mutations (import, demo load, classification merge, status changes,
manager comments) go through ``TransactionStore``. Transactions are frozen
models, so every mutation swaps in new copies; ``transactions`` always
returns an immutable snapshot that readers may keep while the store moves on.
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

import structlog

from .exceptions import DuplicateTransactionError, TransactionNotFound
from .merger import merge_classifications
from .models import (
    ClassificationResponse,
    CompletenessIssue,
    RiskLevel,
    Transaction,
    TransactionStatus,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class StoreSnapshot:
    """Point-in-time view of the store."""

    transactions: tuple[Transaction, ...]
    completeness_issues: tuple[CompletenessIssue, ...] = ()
    ids: frozenset[str] = field(default_factory=frozenset)


class TransactionStore:
    """Canonical list of transactions, keyed by id, in insertion order."""

    def __init__(self, transactions: Optional[Iterable[Transaction]] = None) -> None:
        self._order: list[str] = []
        self._by_id: dict[str, Transaction] = {}
        self._completeness: tuple[CompletenessIssue, ...] = ()
        if transactions is not None:
            self.add_transactions(transactions)

    # -- reading ---------------------------------------------------------

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        """All transactions in insertion order."""
        return tuple(self._by_id[tid] for tid in self._order)

    @property
    def completeness_issues(self) -> tuple[CompletenessIssue, ...]:
        """Gaps reported by the latest classification run."""
        return self._completeness

    @property
    def ids(self) -> frozenset[str]:
        return frozenset(self._order)

    def get(self, transaction_id: str) -> Transaction:
        """Look up a transaction.

        Raises:
            TransactionNotFound: If no transaction has this id.
        """
        try:
            return self._by_id[transaction_id]
        except KeyError:
            raise TransactionNotFound(transaction_id) from None

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(
            transactions=self.transactions,
            completeness_issues=self._completeness,
            ids=self.ids,
        )

    def status_counts(self) -> dict[TransactionStatus, int]:
        counts = Counter(t.status for t in self._by_id.values())
        return {status: counts.get(status, 0) for status in TransactionStatus}

    def risk_counts(self) -> dict[RiskLevel, int]:
        counts = Counter(t.risk_level for t in self._by_id.values())
        return {level: counts.get(level, 0) for level in RiskLevel}

    def __contains__(self, transaction_id: object) -> bool:
        return transaction_id in self._by_id

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(self.transactions)

    # -- loading ---------------------------------------------------------

    def add_transactions(self, transactions: Iterable[Transaction]) -> int:
        """Append transactions.

        Either all are added or, when any id is already taken (in the store
        or within the batch), none are.

        Returns:
            Number of transactions added.

        Raises:
            DuplicateTransactionError: On id collisions.
        """
        batch = list(transactions)
        batch_ids = [t.id for t in batch]
        duplicates = sorted(
            {tid for tid in batch_ids if tid in self._by_id}
            | {tid for tid, n in Counter(batch_ids).items() if n > 1}
        )
        if duplicates:
            raise DuplicateTransactionError(duplicates)

        for txn in batch:
            self._order.append(txn.id)
            self._by_id[txn.id] = txn

        logger.info("transactions_added", count=len(batch), total=len(self._order))
        return len(batch)

    def replace_transactions(self, transactions: Iterable[Transaction]) -> int:
        """Replace the whole data set and clear completeness issues.

        Raises:
            DuplicateTransactionError: If the new set has duplicate ids; the
                store is left unchanged.
        """
        replacement = TransactionStore(transactions)
        self._order = replacement._order
        self._by_id = replacement._by_id
        self._completeness = ()
        logger.info("transactions_replaced", total=len(self._order))
        return len(self._order)

    # -- classification --------------------------------------------------

    def apply_classification(
        self,
        response: ClassificationResponse,
        batch_ids: Optional[Iterable[str]] = None,
    ) -> bool:
        """Merge a classification run into the store.

        Completeness issues are replaced wholesale. When ``batch_ids`` is
        given, the response is only applied if the store still holds exactly
        that set of transactions; otherwise it is stale and discarded.

        Returns:
            True if the response was applied, False if it was discarded.
        """
        if batch_ids is not None and frozenset(batch_ids) != self.ids:
            logger.warning(
                "classification_discarded_stale",
                batch_size=len(frozenset(batch_ids)),
                store_size=len(self._order),
            )
            return False

        merged = merge_classifications(self.transactions, response)
        self._by_id = {t.id: t for t in merged}
        self._completeness = tuple(response.completeness)

        logger.info(
            "classification_applied",
            classified=len(response.classifications),
            completeness_issues=len(self._completeness),
        )
        return True

    # -- review ----------------------------------------------------------

    def set_status(self, transaction_id: str, status: TransactionStatus) -> Transaction:
        """Set the workflow status of one transaction.

        Raises:
            TransactionNotFound: If no transaction has this id.
        """
        updated = self.get(transaction_id).model_copy(update={"status": status})
        self._by_id[transaction_id] = updated
        return updated

    def set_manager_comment(self, transaction_id: str, comment: Optional[str]) -> Transaction:
        """Attach (or clear, with None or blank text) a reviewer comment.

        Raises:
            TransactionNotFound: If no transaction has this id.
        """
        text = comment.strip() if comment else None
        updated = self.get(transaction_id).model_copy(update={"manager_comment": text or None})
        self._by_id[transaction_id] = updated
        return updated
