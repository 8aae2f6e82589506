"""Command-line review session.

Loads a ledger export (or the demo ledger), optionally runs the AI
classification, records review decisions and prints the review report.

Usage:
    transitoria review ledger.csv
    transitoria review --demo --analyze --approve 1 --correct 4
    transitoria review export.xlsx --period 6M --exclude-small --format markdown
"""

import argparse
import asyncio
import sys
from datetime import date
from pathlib import Path
from typing import Optional, Sequence

import structlog

from transitoria_core.aggregator import build_time_shift
from transitoria_core.demo import DEMO_YEAR, demo_transactions
from transitoria_core.exceptions import ConfigurationError, TransitoriaError
from transitoria_core.filters import PeriodPreset, exclude_small_amounts, filter_by_period
from transitoria_core.importer import TransactionImporter
from transitoria_core.periods import year_horizon
from transitoria_core.report import ReviewReportGenerator
from transitoria_core.store import TransactionStore
from transitoria_core.workflow import ReviewWorkflow

from .analysis import AnalysisStatus, run_analysis
from .classifier import TransitoriaClassifierAgent
from .config import TransitoriaConfig
from .logging_setup import configure_logging

logger = structlog.get_logger()


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a date (YYYY-MM-DD): {value}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="transitoria",
        description="Review transitoria (prepaid and accrued items) in a ledger export",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Review the demo ledger with AI classification
  transitoria review --demo --analyze

  # Approve and flag transactions from an export
  transitoria review ledger.csv --approve 1 --approve 3 --correct 4
        """,
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Logging level (default: TRANSITORIA_LOG_LEVEL or INFO)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    review = subparsers.add_parser("review", help="Run a review session and print the report")
    source = review.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "file",
        nargs="?",
        type=str,
        help="CSV or XLSX ledger export",
    )
    source.add_argument(
        "--demo",
        action="store_true",
        help="Use the built-in demo ledger",
    )
    review.add_argument(
        "--analyze",
        action="store_true",
        help="Run the AI classification (requires ANTHROPIC_API_KEY)",
    )
    review.add_argument(
        "--year",
        type=int,
        default=None,
        help="Reporting year of the time-shift table (default: latest booking year)",
    )
    review.add_argument(
        "--exclude-small",
        action="store_true",
        help="Hide transactions below the small-amount threshold",
    )
    review.add_argument(
        "--period",
        type=str,
        choices=[p.value for p in PeriodPreset],
        default=None,
        help="Only show transactions booked in this period",
    )
    review.add_argument(
        "--start",
        type=_iso_date,
        default=None,
        help="Custom period start (YYYY-MM-DD); implies --period CUSTOM",
    )
    review.add_argument(
        "--end",
        type=_iso_date,
        default=None,
        help="Custom period end (YYYY-MM-DD); implies --period CUSTOM",
    )
    review.add_argument(
        "--approve",
        action="append",
        default=[],
        metavar="ID",
        help="Approve a transaction (repeatable)",
    )
    review.add_argument(
        "--correct",
        action="append",
        default=[],
        metavar="ID",
        help="Mark a transaction for correction (repeatable)",
    )
    review.add_argument(
        "--format",
        choices=["text", "markdown"],
        default="text",
        help="Report format (default: text)",
    )
    review.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write the report to this file instead of stdout",
    )
    return parser


def _run_review(args: argparse.Namespace, config: TransitoriaConfig) -> int:
    dashboard = config.dashboard

    if args.demo:
        transactions = demo_transactions()
    else:
        result = TransactionImporter().import_file(args.file)
        for skipped in result.skipped_rows:
            print(f"Skipped row {skipped.row}: {skipped.reason}", file=sys.stderr)
        transactions = result.transactions

    store = TransactionStore(transactions)

    if args.analyze:
        if not config.llm.enabled:
            print("AI analysis is disabled (TRANSITORIA_LLM_ENABLED=false)", file=sys.stderr)
        else:
            try:
                agent = TransitoriaClassifierAgent(config.llm)
            except ConfigurationError as e:
                print(f"AI analysis unavailable: {e}", file=sys.stderr)
            else:
                outcome = asyncio.run(run_analysis(store, agent))
                if outcome.status is AnalysisStatus.UNAVAILABLE:
                    print(f"AI analysis unavailable: {outcome.error}", file=sys.stderr)

    workflow = ReviewWorkflow(store, user=dashboard.user_name, language=dashboard.language)
    for transaction_id in args.approve:
        workflow.approve(transaction_id)
    for transaction_id in args.correct:
        workflow.correct(transaction_id)

    visible = list(store.transactions)
    if args.exclude_small:
        visible = exclude_small_amounts(visible, dashboard.small_amount_threshold)
    if args.period:
        visible = filter_by_period(visible, PeriodPreset(args.period), start=args.start, end=args.end)

    year = args.year or dashboard.reporting_year
    if year is None:
        year = DEMO_YEAR if args.demo or not transactions else max(t.date.year for t in transactions)
    series = build_time_shift(
        visible,
        year_horizon(year),
        on_invalid_period=dashboard.invalid_period_policy,
    )

    generator = ReviewReportGenerator(
        app_name=dashboard.app_name,
        language=dashboard.language,
        in_thousands=dashboard.currency_in_thousands,
        show_ai_analysis=dashboard.show_ai_analysis,
    )
    report = generator.generate(
        store,
        workflow.audit_log,
        series,
        format=args.format,
        transactions=visible,
    )

    if args.output:
        Path(args.output).write_text(report, encoding="utf-8")
        print(f"Report written to {args.output}", file=sys.stderr)
    else:
        print(report)
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point of the ``transitoria`` console script."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if getattr(args, "start", None) or getattr(args, "end", None):
        # Explicit bounds select the custom period.
        if args.period is None:
            args.period = PeriodPreset.CUSTOM.value
        elif args.period != PeriodPreset.CUSTOM.value:
            parser.error("--start/--end require --period CUSTOM")

    try:
        config = TransitoriaConfig()
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return 1

    configure_logging(args.log_level or ("DEBUG" if config.is_debug else config.log_level))

    try:
        return _run_review(args, config)
    except TransitoriaError as e:
        logger.debug("review_failed", error=e.message, details=e.details)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
