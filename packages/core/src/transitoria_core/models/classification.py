"""Classification results returned by the external AI collaborator.

The collaborator answers with a JSON object of the form::

    {
      "transactions": [
        {"id": "1", "analysis": "...", "risk": "LOW",
         "period": "2024-Q1", "category": "Vooruitbetaalde kosten"}
      ],
      "completeness": [
        {"description": "...", "expectedPeriod": "2024-03", "confidence": 0.9}
      ]
    }

``ClassificationResponse.from_payload`` validates that contract. Structural
problems reject the whole batch; value-level problems are repaired per field
so they never reach the store as free text.
"""

from typing import Any, Optional

import structlog
from pydantic import BaseModel, ConfigDict, Field

from ..exceptions import ClassificationUnavailable
from ..periods import is_valid_period, parse_period
from .transaction import CompletenessIssue, RiskLevel, TransitoriaCategory

logger = structlog.get_logger()


class TransactionClassification(BaseModel):
    """The AI verdict for one transaction.

    ``risk_level`` and ``allocated_period`` are None when the collaborator
    returned nothing usable; the merger then keeps the stored value.
    """

    model_config = ConfigDict(frozen=True)

    transaction_id: str = Field(min_length=1)
    analysis: Optional[str] = None
    risk_level: Optional[RiskLevel] = None
    allocated_period: Optional[str] = None
    category: TransitoriaCategory = TransitoriaCategory.UNKNOWN


class ClassificationResponse(BaseModel):
    """A complete classification run: per-transaction verdicts plus gaps."""

    model_config = ConfigDict(frozen=True)

    classifications: list[TransactionClassification] = Field(default_factory=list)
    completeness: list[CompletenessIssue] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when the run produced neither verdicts nor gaps."""
        return not self.classifications and not self.completeness

    def by_id(self) -> dict[str, TransactionClassification]:
        """Verdicts keyed by transaction id. Later duplicates win."""
        return {c.transaction_id: c for c in self.classifications}

    @classmethod
    def empty(cls) -> "ClassificationResponse":
        """No classifications and no completeness issues."""
        return cls()

    @classmethod
    def from_payload(cls, payload: Any) -> "ClassificationResponse":
        """Validate a decoded JSON payload.

        Raises:
            ClassificationUnavailable: If the payload is not an object, if
                ``transactions``/``completeness`` are present but not lists,
                or if a transaction item is not an object with an ``id``.
        """
        if not isinstance(payload, dict):
            raise ClassificationUnavailable(
                "Classification response is not a JSON object",
                operation="parse_response",
                details={"type": type(payload).__name__},
            )

        raw_transactions = _list_member(payload, "transactions")
        raw_completeness = _list_member(payload, "completeness")

        classifications = [
            _parse_classification(item, position)
            for position, item in enumerate(raw_transactions)
        ]

        completeness = []
        for position, item in enumerate(raw_completeness):
            issue = _parse_completeness_issue(item, position)
            if issue is not None:
                completeness.append(issue)

        return cls(classifications=classifications, completeness=completeness)


def _list_member(payload: dict, key: str) -> list:
    value = payload.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ClassificationUnavailable(
            f"'{key}' in classification response is not a list",
            operation="parse_response",
            details={"member": key, "type": type(value).__name__},
        )
    return value


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _parse_classification(item: Any, position: int) -> TransactionClassification:
    if not isinstance(item, dict):
        raise ClassificationUnavailable(
            "Transaction item in classification response is not an object",
            operation="parse_response",
            details={"position": position},
        )

    transaction_id = _text(item.get("id"))
    if transaction_id is None:
        raise ClassificationUnavailable(
            "Transaction item in classification response has no id",
            operation="parse_response",
            details={"position": position},
        )

    risk = RiskLevel.parse(item.get("risk"))
    if risk is None and item.get("risk") is not None:
        logger.warning(
            "classification_unknown_risk",
            transaction_id=transaction_id,
            risk=str(item.get("risk"))[:40],
        )

    period = _text(item.get("period"))
    if period is not None:
        if is_valid_period(period):
            period = parse_period(period).label
        else:
            logger.warning(
                "classification_invalid_period",
                transaction_id=transaction_id,
                period=period[:40],
            )
            period = None

    category = TransitoriaCategory.parse(item.get("category"))
    if category is TransitoriaCategory.UNKNOWN and _text(item.get("category")):
        logger.debug(
            "classification_unknown_category",
            transaction_id=transaction_id,
            category=str(item.get("category"))[:40],
        )

    return TransactionClassification(
        transaction_id=transaction_id,
        analysis=_text(item.get("analysis")),
        risk_level=risk,
        allocated_period=period,
        category=category,
    )


def _parse_completeness_issue(item: Any, position: int) -> Optional[CompletenessIssue]:
    if not isinstance(item, dict):
        logger.warning("completeness_item_not_object", position=position)
        return None

    description = _text(item.get("description"))
    expected = _text(item.get("expectedPeriod"))
    if description is None or expected is None or not is_valid_period(expected):
        logger.warning(
            "completeness_item_dropped",
            position=position,
            description=(description or "")[:60],
            expected_period=expected,
        )
        return None

    return CompletenessIssue(
        description=description,
        expected_period=parse_period(expected).label,
        confidence=item.get("confidence", 0.0),
    )
