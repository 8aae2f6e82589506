"""Merging AI classification results into transaction state.

The merge only ever writes the four AI-owned fields of a transaction:
``ai_analysis``, ``risk_level``, ``allocated_period`` and ``category``.
Everything a reviewer may have changed while the classification call was
in flight (status, manager comment) is carried over untouched.
"""

import json
import re
from typing import Any, Iterable, Optional

import structlog

from .exceptions import ClassificationUnavailable
from .models import ClassificationResponse, Transaction

logger = structlog.get_logger()

AI_OWNED_FIELDS = ("ai_analysis", "risk_level", "allocated_period", "category")

_FENCED_JSON_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL)
_EMBEDDED_JSON_RE = re.compile(r"\{[\s\S]*\}")


def _decode_json(text: str) -> Optional[Any]:
    """Decode JSON from model output, tolerating code fences and prose."""
    try:
        return json.loads(text.strip())
    except json.JSONDecodeError:
        pass

    match = _FENCED_JSON_RE.search(text)
    if match:
        try:
            return json.loads(match.group(1))
        except json.JSONDecodeError:
            pass

    match = _EMBEDDED_JSON_RE.search(text)
    if match:
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError:
            pass

    return None


def parse_classification_payload(payload: Any) -> ClassificationResponse:
    """Validate a decoded payload. See ``ClassificationResponse.from_payload``."""
    return ClassificationResponse.from_payload(payload)


def parse_classification_text(text: Optional[str]) -> ClassificationResponse:
    """Parse raw model output into a classification response.

    Raises:
        ClassificationUnavailable: If the text is empty, holds no JSON, or the
            JSON does not satisfy the response contract.
    """
    if not text or not text.strip():
        raise ClassificationUnavailable(
            "Empty classification response",
            operation="parse_response",
        )

    payload = _decode_json(text)
    if payload is None:
        raise ClassificationUnavailable(
            "Failed to parse JSON from classification response",
            operation="parse_response",
            details={"response_preview": text[:200]},
        )
    return ClassificationResponse.from_payload(payload)


def merge_classifications(
    transactions: Iterable[Transaction],
    response: ClassificationResponse,
) -> list[Transaction]:
    """Apply verdicts to transactions, returning the merged list.

    For each transaction with a verdict the AI-owned fields are overwritten;
    a verdict without a usable risk or period keeps the stored value.
    Transactions without a verdict are returned unchanged, in order.
    """
    verdicts = response.by_id()
    merged: list[Transaction] = []
    seen: set[str] = set()

    for txn in transactions:
        seen.add(txn.id)
        verdict = verdicts.get(txn.id)
        if verdict is None:
            merged.append(txn)
            continue

        merged.append(
            txn.model_copy(
                update={
                    "ai_analysis": verdict.analysis,
                    "risk_level": verdict.risk_level or txn.risk_level,
                    "allocated_period": verdict.allocated_period or txn.allocated_period,
                    "category": verdict.category,
                }
            )
        )

    unknown = [tid for tid in verdicts if tid not in seen]
    if unknown:
        logger.debug("classification_unknown_ids", transaction_ids=unknown)

    return merged
