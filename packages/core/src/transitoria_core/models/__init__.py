"""Data models for transitoria-core.

This package provides:
- Ledger transactions and their review classification (transaction.py)
- Review decision audit log (audit.py)
- AI classification results and their JSON contract (classification.py)
"""

from transitoria_core.models.transaction import (
    CompletenessIssue,
    Direction,
    RiskLevel,
    Transaction,
    TransactionStatus,
    TransitoriaCategory,
    to_decimal,
)
from transitoria_core.models.audit import (
    AuditAction,
    AuditLog,
    AuditLogEntry,
)
from transitoria_core.models.classification import (
    ClassificationResponse,
    TransactionClassification,
)

__all__ = [
    # Enumerations
    "Direction",
    "RiskLevel",
    "TransactionStatus",
    "TransitoriaCategory",
    "AuditAction",
    # Transactions
    "Transaction",
    "CompletenessIssue",
    "to_decimal",
    # Audit log
    "AuditLogEntry",
    "AuditLog",
    # Classification
    "TransactionClassification",
    "ClassificationResponse",
]
