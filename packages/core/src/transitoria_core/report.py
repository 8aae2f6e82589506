"""Review report generation.

Renders the state of a review session as plain text or Markdown: status
and risk summary, the booked vs. allocated time-shift table, completeness
issues, the transaction list and the audit trail.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional

import structlog

from .aggregator import TimeShiftSeries
from .formatting import format_currency
from .models import AuditLog, RiskLevel, Transaction, TransactionStatus
from .store import TransactionStore

logger = structlog.get_logger()

_LABELS = {
    "nl": {
        "summary": "Samenvatting",
        "time_shift": "Tijdsverschuiving",
        "completeness": "Volledigheid",
        "transactions": "Transacties",
        "audit": "Audit Trail",
        "generated": "Gegenereerd",
        "decisions": "Beslissingen",
        "month": "Maand",
        "booked": "Geboekt",
        "allocated": "Toegerekend",
        "shift": "Verschil",
        "total": "Totaal",
        "invalid_period": "Ongeldige toerekeningsperiode",
        "no_issues": "Geen ontbrekende terugkerende posten gevonden.",
        "expected": "verwacht",
        "confidence": "zekerheid",
        "risk": "risico",
        "note": "Notitie",
        "no_transactions": "Geen transacties geladen.",
        "no_decisions": "Nog geen beoordelingen vastgelegd.",
    },
    "en": {
        "summary": "Summary",
        "time_shift": "Time Shift",
        "completeness": "Completeness",
        "transactions": "Transactions",
        "audit": "Audit Trail",
        "generated": "Generated",
        "decisions": "Decisions",
        "month": "Month",
        "booked": "Booked",
        "allocated": "Allocated",
        "shift": "Shift",
        "total": "Total",
        "invalid_period": "Invalid allocated period",
        "no_issues": "No missing recurring entries detected.",
        "expected": "expected",
        "confidence": "confidence",
        "risk": "risk",
        "note": "Note",
        "no_transactions": "No transactions loaded.",
        "no_decisions": "No review decisions recorded.",
    },
}


@dataclass
class ReportSection:
    """A section of the report."""
    title: str
    content: str


class ReviewReportGenerator:
    """
    Generate review reports for a transitoria session.

    Reports include:
    - Header with application name and generation time
    - Status and risk summary
    - Booked vs. allocated table per month
    - Completeness issues raised by the classifier
    - Transaction list with classification
    - Audit trail (newest first)
    """

    def __init__(
        self,
        app_name: str = "Transitoria Controle Tool",
        language: str = "nl",
        in_thousands: bool = False,
        show_ai_analysis: bool = True,
    ):
        self.app_name = app_name
        self.language = language if language in _LABELS else "nl"
        self.in_thousands = in_thousands
        self.show_ai_analysis = show_ai_analysis
        self._sections: list[ReportSection] = []

    def generate(
        self,
        store: TransactionStore,
        audit_log: AuditLog,
        series: Optional[TimeShiftSeries] = None,
        format: str = "text",
        generated_at: Optional[datetime] = None,
        transactions: Optional[Iterable[Transaction]] = None,
    ) -> str:
        """
        Generate a review report.

        Args:
            store: Transactions and completeness issues to report on
            audit_log: Review decisions
            series: Time-shift series; the section is omitted when None
            format: Output format ("text" or "markdown")
            generated_at: Timestamp printed in the header (defaults to now)
            transactions: Rows for the transaction list, e.g. a filtered view;
                defaults to every transaction in the store

        Returns:
            Formatted report string
        """
        self._sections = []

        self._add_header(generated_at or datetime.now(timezone.utc))
        self._add_summary(store, audit_log)
        if series is not None:
            self._add_time_shift(series)
        self._add_completeness(store)
        self._add_transactions(store.transactions if transactions is None else list(transactions))
        self._add_audit_trail(audit_log)

        logger.debug(
            "report_generated",
            format=format,
            sections=len(self._sections),
            transactions=len(store),
        )

        if format == "markdown":
            return self._format_markdown()
        return self._format_text()

    def _money(self, amount) -> str:
        return format_currency(amount, in_thousands=self.in_thousands, language=self.language)

    def _label(self, key: str) -> str:
        return _LABELS[self.language][key]

    def _add_header(self, generated_at: datetime) -> None:
        underline = "=" * len(self.app_name)
        content = f"""
{self.app_name}
{underline}

{self._label('generated')}: {generated_at.strftime('%Y-%m-%d %H:%M')} UTC
""".strip()
        self._sections.append(ReportSection(title="Header", content=content))

    def _add_summary(self, store: TransactionStore, audit_log: AuditLog) -> None:
        status_counts = store.status_counts()
        risk_counts = store.risk_counts()
        decisions = audit_log.summary()

        lines = [f"{self._label('transactions')}: {len(store)}", ""]
        for status in TransactionStatus:
            lines.append(f"  {status.value:<10} {status_counts.get(status, 0):>5}")
        lines.append("")
        for risk in RiskLevel:
            lines.append(f"  {risk.value:<10} {risk_counts.get(risk, 0):>5}")
        lines.append("")
        lines.append(
            f"{self._label('decisions')}: {decisions['total']} "
            f"(APPROVE {decisions['APPROVE']}, CORRECT {decisions['CORRECT']})"
        )

        self._sections.append(ReportSection(title=self._label("summary"), content="\n".join(lines)))

    def _add_time_shift(self, series: TimeShiftSeries) -> None:
        label = self._label
        header = (
            f"{label('month'):<10} {label('booked'):>14} "
            f"{label('allocated'):>14} {label('shift'):>14}"
        )
        lines = [header, "-" * len(header)]
        for point in series.points:
            lines.append(
                f"{point.month:<10} {self._money(point.booked):>14} "
                f"{self._money(point.allocated):>14} {self._money(point.shift):>14}"
            )
        lines.append("-" * len(header))
        lines.append(
            f"{label('total'):<10} {self._money(series.total_booked):>14} "
            f"{self._money(series.total_allocated):>14}"
        )
        if series.invalid_transaction_ids:
            lines.append("")
            lines.append(
                f"{label('invalid_period')}: " + ", ".join(series.invalid_transaction_ids)
            )

        self._sections.append(ReportSection(title=self._label("time_shift"), content="\n".join(lines)))

    def _add_completeness(self, store: TransactionStore) -> None:
        issues = store.completeness_issues
        if not issues:
            content = self._label("no_issues")
        else:
            content = "\n".join(
                f"- {issue.description} ({self._label('expected')} {issue.expected_period}, "
                f"{self._label('confidence')} {issue.confidence:.0%})"
                for issue in issues
            )
        self._sections.append(ReportSection(title=self._label("completeness"), content=content))

    def _add_transactions(self, transactions: Iterable[Transaction]) -> None:
        lines = []
        for txn in transactions:
            period = txn.allocated_period or "-"
            lines.append(
                f"[{txn.id}] {txn.date.isoformat()} {txn.description}"
            )
            lines.append(
                f"    {self._money(txn.amount)} {txn.direction.value} | "
                f"{txn.category.label(self.language)} | {period} | "
                f"{self._label('risk')} {txn.risk_level.value} | {txn.status.value}"
            )
            if self.show_ai_analysis and txn.ai_analysis:
                lines.append(f"    AI: {txn.ai_analysis}")
            if txn.manager_comment:
                lines.append(f"    {self._label('note')}: {txn.manager_comment}")

        content = "\n".join(lines) if lines else self._label("no_transactions")
        self._sections.append(ReportSection(title=self._label("transactions"), content=content))

    def _add_audit_trail(self, audit_log: AuditLog) -> None:
        entries = audit_log.newest_first()
        if not entries:
            content = self._label("no_decisions")
        else:
            content = "\n".join(
                f"{e.timestamp.strftime('%Y-%m-%d %H:%M:%S')}  {e.action.value:<8} "
                f"{e.transaction_id:<8} {e.user}: {e.details}"
                for e in entries
            )
        self._sections.append(ReportSection(title=self._label("audit"), content=content))

    def _format_text(self) -> str:
        """Format report as plain text."""
        output = []

        for section in self._sections:
            if section.title != "Header":
                output.append("")
                output.append("=" * 60)
                output.append(section.title.upper())
                output.append("=" * 60)

            output.append(section.content)

        output.append("")
        return "\n".join(output)

    def _format_markdown(self) -> str:
        """Format report as Markdown."""
        output = []

        for section in self._sections:
            if section.title == "Header":
                lines = section.content.splitlines()
                output.append(f"# {lines[0]}")
                output.extend(lines[2:])
            else:
                output.append(f"\n## {section.title}\n")
                output.append("```")
                output.append(section.content)
                output.append("```")

        output.append("")
        return "\n".join(output)
