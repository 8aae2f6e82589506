"""Tests for running the classifier against a store."""

import asyncio
from datetime import date

from transitoria_agents.analysis import AnalysisStatus, run_analysis
from transitoria_agents.interfaces import AgentResult
from transitoria_core.demo import demo_transactions
from transitoria_core.models import (
    ClassificationResponse,
    RiskLevel,
    Transaction,
    TransactionStatus,
)
from transitoria_core.store import TransactionStore
from transitoria_core.workflow import ReviewWorkflow

RESPONSE = ClassificationResponse.from_payload(
    {
        "transactions": [{"id": "2", "analysis": "Licentie over 2024 gespreid", "risk": "HIGH"}],
        "completeness": [
            {"description": "Leasekosten maart ontbreken", "expectedPeriod": "2024-03", "confidence": 0.7}
        ],
    }
)


class FakeAgent:
    """Agent returning a fixed result, optionally running a hook first."""

    def __init__(self, result, during=None):
        self.result = result
        self.during = during
        self.batches = []

    async def process(self, input_data):
        self.batches.append(input_data)
        if self.during is not None:
            self.during()
        return self.result

    def validate_input(self, input_data):
        return True


def analyse(store, agent, **kwargs):
    return asyncio.run(run_analysis(store, agent, **kwargs))


class TestRunAnalysis:
    """Tests for run_analysis."""

    def test_applied(self):
        store = TransactionStore(demo_transactions())
        agent = FakeAgent(AgentResult.success(RESPONSE))

        outcome = analyse(store, agent)

        assert outcome.status == AnalysisStatus.APPLIED
        assert outcome.applied
        assert outcome.classified == 1
        assert outcome.completeness_issues == 1
        assert store.get("2").risk_level == RiskLevel.HIGH
        assert store.get("2").ai_analysis == "Licentie over 2024 gespreid"
        assert len(store.completeness_issues) == 1
        assert agent.batches[0].batch_ids == store.ids

    def test_unavailable_leaves_store_untouched(self):
        store = TransactionStore(demo_transactions())
        before = store.transactions

        outcome = analyse(store, FakeAgent(AgentResult.failure("Classification request failed")))

        assert outcome.status == AnalysisStatus.UNAVAILABLE
        assert outcome.error == "Classification request failed"
        assert store.transactions == before
        assert store.completeness_issues == ()

    def test_success_without_data_is_unavailable(self):
        store = TransactionStore(demo_transactions())
        outcome = analyse(store, FakeAgent(AgentResult.success(None)))
        assert outcome.status == AnalysisStatus.UNAVAILABLE
        assert outcome.error == "Classifier returned no data"

    def test_stale_when_store_changes_in_flight(self):
        store = TransactionStore(demo_transactions())
        before = store.get("2")

        def add_line():
            store.add_transactions([Transaction(id="7", date=date(2024, 3, 5), amount="99")])

        outcome = analyse(store, FakeAgent(AgentResult.success(RESPONSE), during=add_line))

        assert outcome.status == AnalysisStatus.STALE
        assert store.get("2") == before
        assert store.completeness_issues == ()

    def test_decisions_in_flight_survive(self):
        store = TransactionStore(demo_transactions())
        workflow = ReviewWorkflow(store)

        outcome = analyse(
            store,
            FakeAgent(AgentResult.success(RESPONSE), during=lambda: workflow.approve("2")),
        )

        assert outcome.status == AnalysisStatus.APPLIED
        assert store.get("2").status == TransactionStatus.APPROVED
        assert store.get("2").risk_level == RiskLevel.HIGH

    def test_skipped_when_disabled(self):
        store = TransactionStore(demo_transactions())
        agent = FakeAgent(AgentResult.success(RESPONSE))

        outcome = analyse(store, agent, enabled=False)

        assert outcome.status == AnalysisStatus.SKIPPED
        assert agent.batches == []

    def test_skipped_when_empty(self):
        agent = FakeAgent(AgentResult.success(RESPONSE))
        outcome = analyse(TransactionStore(), agent)
        assert outcome.status == AnalysisStatus.SKIPPED
        assert agent.batches == []
