"""Runs the classifier against the store and applies what comes back.

The store's id set is captured when the request is built. Review decisions
may be taken while the call is in flight; they only touch workflow fields
and are never reverted by the merge. If transactions were added, removed or
replaced in the meantime the response is stale and dropped.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

import structlog

from transitoria_core.models import ClassificationResponse
from transitoria_core.store import TransactionStore

from .interfaces import AgentProtocol, ClassificationBatch

logger = structlog.get_logger()


class AnalysisStatus(str, Enum):
    APPLIED = "applied"
    UNAVAILABLE = "unavailable"
    STALE = "stale"
    SKIPPED = "skipped"


@dataclass
class AnalysisOutcome:
    """What happened to one analysis run."""

    status: AnalysisStatus
    classified: int = 0
    completeness_issues: int = 0
    error: Optional[str] = None
    duration_ms: Optional[float] = None

    @property
    def applied(self) -> bool:
        return self.status is AnalysisStatus.APPLIED


async def run_analysis(
    store: TransactionStore,
    agent: AgentProtocol[ClassificationBatch, ClassificationResponse],
    *,
    enabled: bool = True,
) -> AnalysisOutcome:
    """Classify the current transactions and merge the verdicts.

    Args:
        store: The store to read from and merge into.
        agent: Classifier agent; its ``process`` must not raise.
        enabled: When False nothing is sent and the outcome is SKIPPED.

    Returns:
        AnalysisOutcome. The store is only modified when the status is
        APPLIED.
    """
    if not enabled:
        logger.info("analysis_skipped", reason="disabled")
        return AnalysisOutcome(status=AnalysisStatus.SKIPPED)

    snapshot = store.snapshot()
    if not snapshot.transactions:
        logger.info("analysis_skipped", reason="no_transactions")
        return AnalysisOutcome(status=AnalysisStatus.SKIPPED)

    batch = ClassificationBatch.from_transactions(snapshot.transactions)
    result = await agent.process(batch)

    if result.is_error or not isinstance(result.data, ClassificationResponse):
        logger.warning(
            "analysis_unavailable",
            error=result.error,
            status=result.status.value,
        )
        return AnalysisOutcome(
            status=AnalysisStatus.UNAVAILABLE,
            error=result.error or "Classifier returned no data",
            duration_ms=result.duration_ms,
        )

    response = result.data
    if not store.apply_classification(response, batch_ids=snapshot.ids):
        return AnalysisOutcome(status=AnalysisStatus.STALE, duration_ms=result.duration_ms)

    return AnalysisOutcome(
        status=AnalysisStatus.APPLIED,
        classified=len(response.classifications),
        completeness_issues=len(response.completeness),
        duration_ms=result.duration_ms,
    )
