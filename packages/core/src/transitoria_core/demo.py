"""Demo ledger used by the dashboard's "load demo data" action."""

from .models import (
    Direction,
    RiskLevel,
    Transaction,
    TransactionStatus,
    TransitoriaCategory,
)

_DEMO_ROWS = [
    {
        "id": "1",
        "date": "2024-01-05",
        "description": "Huur Kantoor Q1 2024",
        "amount": "15000",
        "direction": Direction.DEBIT,
        "relation": "Vastgoed BV",
        "gl_account": "4000",
        "risk_level": RiskLevel.LOW,
        "allocated_period": "2024-Q1",
        "category": TransitoriaCategory.PREPAID,
        "status": TransactionStatus.PENDING,
    },
    {
        "id": "2",
        "date": "2023-12-20",
        "description": "Software Licenties 2024 (Jaar)",
        "amount": "12000",
        "direction": Direction.DEBIT,
        "relation": "TechSoft",
        "gl_account": "4500",
        "risk_level": RiskLevel.MEDIUM,
        "allocated_period": "2024-YEAR",
        "category": TransitoriaCategory.PREPAID,
        "status": TransactionStatus.PENDING,
    },
    {
        "id": "3",
        "date": "2024-01-15",
        "description": "Schoonmaak Januari",
        "amount": "500",
        "direction": Direction.DEBIT,
        "relation": "CleanPro",
        "gl_account": "4100",
        "risk_level": RiskLevel.LOW,
        "allocated_period": "2024-01",
        "category": TransitoriaCategory.STANDARD,
        "status": TransactionStatus.APPROVED,
    },
    {
        "id": "4",
        "date": "2024-03-01",
        "description": "Accountantkosten 2023 nabetaling",
        "amount": "2500",
        "direction": Direction.DEBIT,
        "relation": "AuditFirm",
        "gl_account": "4800",
        "risk_level": RiskLevel.HIGH,
        "allocated_period": "2023-YEAR",
        "category": TransitoriaCategory.CORRECTION,
        "status": TransactionStatus.PENDING,
    },
    {
        "id": "5",
        "date": "2024-02-28",
        "description": "Nog te ontvangen rente Q1",
        "amount": "450",
        "direction": Direction.CREDIT,
        "relation": "Bank NL",
        "gl_account": "8000",
        "risk_level": RiskLevel.LOW,
        "allocated_period": "2024-Q1",
        "category": TransitoriaCategory.ACCRUED,
        "status": TransactionStatus.PENDING,
    },
    {
        "id": "6",
        "date": "2024-02-15",
        "description": "Leaseautos Februari",
        "amount": "3200",
        "direction": Direction.DEBIT,
        "relation": "LeasePlan",
        "gl_account": "4200",
        "risk_level": RiskLevel.LOW,
        "allocated_period": "2024-02",
        "category": TransitoriaCategory.STANDARD,
        "status": TransactionStatus.PENDING,
    },
]

DEMO_YEAR = 2024


def demo_transactions() -> list[Transaction]:
    """A fresh copy of the six-line demo ledger (reporting year 2024)."""
    return [Transaction(**row) for row in _DEMO_ROWS]
