"""Ledger transaction models for period-allocation review.

This module provides the records the review engine works on:
- Posted general-ledger lines under review (Transaction)
- Their transitoria classification (category, risk, allocated period)
- Their workflow status
- Suggested missing recurring entries (CompletenessIssue)
"""

import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator


class Direction(str, Enum):
    """Side of the ledger a line was posted on. Display only."""

    DEBIT = "DEBIT"
    CREDIT = "CREDIT"


class TransactionStatus(str, Enum):
    """Review workflow state of a transaction."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    CORRECTED = "CORRECTED"

    @property
    def is_terminal(self) -> bool:
        """APPROVED and CORRECTED are final review decisions."""
        return self is not TransactionStatus.PENDING


class RiskLevel(str, Enum):
    """Cutoff risk of a transaction."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @classmethod
    def parse(cls, value: Any) -> Optional["RiskLevel"]:
        """Return the matching level, or None for unknown input."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value.strip().upper())
        except ValueError:
            return None


class TransitoriaCategory(str, Enum):
    """Transitoria classification of a transaction.

    Prepaid expenses and accrued items need a period cutoff adjustment;
    standard items are recognised in the month they were booked.
    """

    PREPAID = "PREPAID"
    ACCRUED = "ACCRUED"
    STANDARD = "STANDARD"
    CORRECTION = "CORRECTION"
    UNKNOWN = "UNKNOWN"

    def label(self, language: str = "nl") -> str:
        """Display label in Dutch (``nl``) or English (``en``)."""
        dutch, english = _CATEGORY_LABELS[self]
        return english if language == "en" else dutch

    @classmethod
    def parse(cls, value: Any) -> "TransitoriaCategory":
        """Map a member name, value or display label onto a category.

        Anything unrecognised becomes UNKNOWN.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        return _CATEGORY_LOOKUP.get(value.strip().lower(), cls.UNKNOWN)


_CATEGORY_LABELS: dict[TransitoriaCategory, tuple[str, str]] = {
    TransitoriaCategory.PREPAID: ("Vooruitbetaalde kosten", "Prepaid expenses"),
    TransitoriaCategory.ACCRUED: ("Nog te ontvangen/betalen", "Accrued"),
    TransitoriaCategory.STANDARD: ("Regulier", "Standard"),
    TransitoriaCategory.CORRECTION: ("Correctie", "Correction"),
    TransitoriaCategory.UNKNOWN: ("Onbekend", "Unknown"),
}

_CATEGORY_LOOKUP: dict[str, TransitoriaCategory] = {}
for _category, _labels in _CATEGORY_LABELS.items():
    for _key in (_category.value, *_labels):
        _CATEGORY_LOOKUP[_key.lower()] = _category


def to_decimal(value: Any) -> Decimal:
    """Coerce str, int or float input to Decimal without binary artefacts.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal('0.1')``.

    Raises:
        ValueError: If the value is not a finite number.
    """
    if isinstance(value, bool):
        raise ValueError(f"Not a monetary amount: {value!r}")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as e:
            raise ValueError(f"Not a monetary amount: {value!r}") from e
    else:
        raise ValueError(f"Not a monetary amount: {value!r}")

    if not result.is_finite():
        raise ValueError(f"Not a monetary amount: {value!r}")
    return result


class Transaction(BaseModel):
    """A posted general-ledger line under review.

    The model is frozen: the posted ``amount`` never changes, and every
    classification or status change produces a new copy.
    """

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "id": "1",
                    "date": "2024-01-05",
                    "description": "Huur Kantoor Q1 2024",
                    "amount": "15000",
                    "direction": "DEBIT",
                    "relation": "Vastgoed BV",
                    "gl_account": "4000",
                    "allocated_period": "2024-Q1",
                    "category": "PREPAID",
                    "risk_level": "LOW",
                    "status": "PENDING",
                }
            ]
        },
    )

    id: str = Field(min_length=1, description="Stable unique identifier")
    date: datetime.date = Field(description="Date the transaction was booked")
    description: str = Field(default="", description="Ledger line description")
    amount: Decimal = Field(description="Posted amount in the ledger currency")
    direction: Direction = Field(
        default=Direction.DEBIT,
        description="Debit or credit side, used for display only",
    )
    relation: Optional[str] = Field(default=None, description="Counterparty")
    gl_account: Optional[str] = Field(default=None, description="General-ledger account")
    project_code: Optional[str] = Field(default=None, description="Project or cost centre")

    allocated_period: Optional[str] = Field(
        default=None,
        description="Period the amount belongs to: YYYY-MM, YYYY-Qn or YYYY-YEAR",
    )
    category: TransitoriaCategory = Field(
        default=TransitoriaCategory.UNKNOWN,
        description="Transitoria classification",
    )
    risk_level: RiskLevel = Field(default=RiskLevel.LOW, description="Cutoff risk")
    ai_analysis: Optional[str] = Field(
        default=None,
        description="Short rationale supplied by the classification agent",
    )

    status: TransactionStatus = Field(
        default=TransactionStatus.PENDING,
        description="Review workflow state",
    )
    manager_comment: Optional[str] = Field(default=None, description="Reviewer note")

    @computed_field
    @property
    def booked_month(self) -> str:
        """Month key (YYYY-MM) of the booking date."""
        return f"{self.date.year:04d}-{self.date.month:02d}"

    @field_validator("amount", mode="before")
    @classmethod
    def coerce_amount_to_decimal(cls, v):
        """Coerce string, int and float amounts to Decimal."""
        return to_decimal(v)

    @field_validator("allocated_period", mode="before")
    @classmethod
    def blank_period_is_none(cls, v):
        """Treat empty labels as unclassified."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("category", mode="before")
    @classmethod
    def parse_category(cls, v):
        """Accept display labels as well as member names."""
        return TransitoriaCategory.parse(v)

    @field_validator("direction", mode="before")
    @classmethod
    def normalize_direction(cls, v):
        if isinstance(v, str):
            return v.strip().upper()
        return v


class CompletenessIssue(BaseModel):
    """A recurring transaction that appears to be missing from the data set."""

    model_config = ConfigDict(frozen=True)

    description: str = Field(min_length=1, description="What seems to be missing")
    expected_period: str = Field(description="Period the entry was expected in")
    confidence: float = Field(
        default=0.0,
        description="Confidence of the suggestion (0.0 to 1.0)",
    )

    @field_validator("confidence", mode="before")
    @classmethod
    def clamp_confidence(cls, v):
        """Clamp to 0..1; non-numeric values become 0.0."""
        try:
            value = float(v)
        except (TypeError, ValueError):
            return 0.0
        if value != value:
            return 0.0
        return max(0.0, min(1.0, value))
