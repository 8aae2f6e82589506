"""Transitoria Core - Period allocation and review of ledger transactions."""

__version__ = "0.1.0"

from .aggregator import InvalidPeriodPolicy, TimeShiftSeries, build_time_shift
from .models import AuditLog, Transaction, TransactionStatus
from .periods import allocate, distribute, parse_period
from .store import TransactionStore
from .workflow import ReviewWorkflow

__all__ = [
    "InvalidPeriodPolicy",
    "TimeShiftSeries",
    "build_time_shift",
    "AuditLog",
    "Transaction",
    "TransactionStatus",
    "allocate",
    "distribute",
    "parse_period",
    "TransactionStore",
    "ReviewWorkflow",
]
