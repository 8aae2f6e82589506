"""Import of general-ledger exports (CSV and XLSX) into transactions.

Exports from Exact, AFAS, Twinfield and similar packages differ in column
names and number formats. Headers are matched case-insensitively against
English and Dutch aliases; amounts accept both ``1.234,56`` and
``1,234.56`` notation. CSV files are read as UTF-8 and fall back to
Windows-1252. Rows that cannot be read are skipped and reported, never
guessed; that includes a lone-dot amount such as ``1.234`` in a file that
otherwise uses decimal commas.
"""

import csv
import io
import re
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence, Union
from uuid import uuid4

import structlog
from openpyxl import load_workbook

from .exceptions import TransactionImportError
from .models import Direction, Transaction, TransactionStatus

logger = structlog.get_logger()

COLUMN_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id", "transaction_id", "boekstuk", "boekstuknummer", "regel_id"),
    "date": ("date", "datum", "boekdatum", "booking_date", "transactiedatum"),
    "description": ("description", "omschrijving", "beschrijving", "memo"),
    "amount": ("amount", "bedrag", "saldo", "value"),
    "direction": ("direction", "type", "debet/credit", "debit/credit", "d/c", "dc"),
    "relation": ("relation", "relatie", "crediteur", "debiteur", "counterparty"),
    "gl_account": ("gl_account", "glaccount", "grootboek", "grootboekrekening", "account"),
    "project_code": ("project_code", "projectcode", "project", "kostenplaats"),
    "allocated_period": ("allocated_period", "allocatedperiod", "periode", "period"),
}

REQUIRED_COLUMNS = ("date", "description", "amount")

_DEBIT_WORDS = {"d", "dr", "debit", "debet"}
_CREDIT_WORDS = {"c", "cr", "credit"}

_DATE_FORMATS = ("%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y", "%Y/%m/%d", "%d.%m.%Y")
_CURRENCY_TOKENS = ("€", "EUR", "eur", "\u00a0", " ")
_DECIMAL_COMMA = re.compile(r",\d{1,2}\)?-?$")
_LONE_DOT_THOUSANDS = re.compile(r"^\(?-?\d{1,3}\.\d{3}\)?-?$")


@dataclass
class SkippedRow:
    """A row that was left out of the import."""

    row: int
    reason: str


@dataclass
class ImportResult:
    """Result of importing one ledger export."""

    source: str
    transactions: list[Transaction] = field(default_factory=list)
    skipped_rows: list[SkippedRow] = field(default_factory=list)

    @property
    def imported_count(self) -> int:
        return len(self.transactions)

    @property
    def has_skipped_rows(self) -> bool:
        return len(self.skipped_rows) > 0


def _amount_text(value: Any) -> Optional[str]:
    """Amount cell text without currency markers or spaces."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    for token in _CURRENCY_TOKENS:
        text = text.replace(token, "")
    return text


def parse_amount(value: Any) -> Decimal:
    """Parse a ledger amount.

    Accepts numbers, and strings with currency symbols, thousands separators,
    either decimal separator and ``(12,50)`` negatives. With only commas, a
    single comma is the decimal separator; with only dots, a single dot is.

    Raises:
        ValueError: If no amount can be read.
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Not an amount: {value!r}")
    if isinstance(value, (int, float, Decimal)):
        return Decimal(str(value))

    text = _amount_text(value) or ""

    negative = False
    if text.startswith("(") and text.endswith(")"):
        negative = True
        text = text[1:-1]
    if text.endswith("-"):
        negative = True
        text = text[:-1]

    if "," in text and "." in text:
        if text.rfind(",") > text.rfind("."):
            text = text.replace(".", "").replace(",", ".")
        else:
            text = text.replace(",", "")
    elif "," in text:
        text = text.replace(",", ".") if text.count(",") == 1 else text.replace(",", "")
    elif text.count(".") > 1:
        text = text.replace(".", "")

    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Not an amount: {value!r}") from None
    if not amount.is_finite():
        raise ValueError(f"Not an amount: {value!r}")
    return -amount if negative else amount


def parse_date(value: Any) -> date:
    """Parse a booking date from text or a spreadsheet cell.

    Raises:
        ValueError: If the value is not a recognised date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        raise ValueError("Missing date")

    text = str(value).strip()
    if len(text) > 10 and text[10] in "T ":
        text = text[:10]
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"Not a date: {value!r}")


def parse_direction(value: Any, amount: Decimal) -> Direction:
    """Read D/C from the column, or from the amount sign when empty.

    Raises:
        ValueError: If the column holds something else.
    """
    text = str(value).strip().lower() if value is not None else ""
    if not text:
        return Direction.CREDIT if amount < 0 else Direction.DEBIT
    if text in _DEBIT_WORDS:
        return Direction.DEBIT
    if text in _CREDIT_WORDS:
        return Direction.CREDIT
    raise ValueError(f"Unknown debit/credit indicator: {value!r}")


def _cell_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    text = str(value).strip()
    return text or None


class TransactionImporter:
    """Reads ledger exports into PENDING transactions."""

    SUPPORTED_SUFFIXES = (".csv", ".xlsx")
    FALLBACK_ENCODING = "cp1252"

    def import_file(self, path: Union[str, Path]) -> ImportResult:
        """Import a CSV or XLSX export.

        Raises:
            TransactionImportError: If the file is missing, has an unsupported
                extension, or lacks a required column.
        """
        path = Path(path)
        if not path.is_file():
            raise TransactionImportError(f"File not found: {path}", source=str(path))

        suffix = path.suffix.lower()
        if suffix == ".csv":
            rows = self._read_csv(path)
        elif suffix == ".xlsx":
            rows = self._read_xlsx(path)
        else:
            raise TransactionImportError(
                f"Unsupported file type '{suffix}', expected one of {', '.join(self.SUPPORTED_SUFFIXES)}",
                source=str(path),
            )

        return self.import_rows(rows, source=path.name)

    def import_rows(self, rows: Iterable[Sequence[Any]], source: str = "rows") -> ImportResult:
        """Import tabular rows; the first row is the header.

        Raises:
            TransactionImportError: If the header lacks a required column.
        """
        iterator = iter(rows)
        header = next(iterator, None)
        if header is None:
            logger.info("import_empty", source=source)
            return ImportResult(source=source)

        columns = self._map_columns(header, source)
        result = ImportResult(source=source)
        parsed: list[tuple[int, Transaction, Optional[str]]] = []

        for row_number, row in enumerate(iterator, start=2):
            if all(_cell_text(cell) is None for cell in row):
                continue
            try:
                txn = self._parse_row(row, columns)
            except ValueError as e:
                result.skipped_rows.append(SkippedRow(row=row_number, reason=str(e)))
                logger.debug("import_row_skipped", source=source, row=row_number, error=str(e))
                continue
            amount_index = columns["amount"]
            raw = row[amount_index] if amount_index < len(row) else None
            parsed.append((row_number, txn, _amount_text(raw)))

        # In a decimal-comma file a lone "1.234" may be a thousands separator.
        decimal_commas = any(text and _DECIMAL_COMMA.search(text) for _, _, text in parsed)
        for row_number, txn, text in parsed:
            if decimal_commas and text and _LONE_DOT_THOUSANDS.match(text):
                reason = f"Ambiguous amount {text!r}: file uses decimal commas"
                result.skipped_rows.append(SkippedRow(row=row_number, reason=reason))
                logger.warning("import_ambiguous_amount", source=source, row=row_number, amount=text)
                continue
            result.transactions.append(txn)
        result.skipped_rows.sort(key=lambda s: s.row)

        logger.info(
            "import_completed",
            source=source,
            imported=result.imported_count,
            skipped=len(result.skipped_rows),
        )
        return result

    def _map_columns(self, header: Sequence[Any], source: str) -> dict[str, int]:
        normalized = [(_cell_text(h) or "").lower() for h in header]
        columns: dict[str, int] = {}
        for canonical, aliases in COLUMN_ALIASES.items():
            for index, name in enumerate(normalized):
                if name in aliases:
                    columns[canonical] = index
                    break

        missing = [c for c in REQUIRED_COLUMNS if c not in columns]
        if missing:
            raise TransactionImportError(
                f"Missing required column(s): {', '.join(missing)}",
                source=source,
                row=1,
                details={"header": [h for h in normalized if h]},
            )
        return columns

    def _parse_row(self, row: Sequence[Any], columns: dict[str, int]) -> Transaction:
        def cell(name: str) -> Any:
            index = columns.get(name)
            if index is None or index >= len(row):
                return None
            return row[index]

        amount = parse_amount(cell("amount"))
        return Transaction(
            id=_cell_text(cell("id")) or uuid4().hex,
            date=parse_date(cell("date")),
            description=_cell_text(cell("description")) or "",
            amount=amount,
            direction=parse_direction(cell("direction"), amount),
            relation=_cell_text(cell("relation")),
            gl_account=_cell_text(cell("gl_account")),
            project_code=_cell_text(cell("project_code")),
            allocated_period=_cell_text(cell("allocated_period")),
            status=TransactionStatus.PENDING,
        )

    def _read_csv(self, path: Path) -> list[list[str]]:
        raw = path.read_bytes()
        try:
            text = raw.decode("utf-8-sig")
        except UnicodeDecodeError:
            logger.info("import_encoding_fallback", source=path.name, encoding=self.FALLBACK_ENCODING)
            try:
                text = raw.decode(self.FALLBACK_ENCODING)
            except UnicodeDecodeError as e:
                raise TransactionImportError(
                    f"Cannot decode file as UTF-8 or {self.FALLBACK_ENCODING}",
                    source=str(path),
                    details={"position": e.start},
                ) from e

        # Decimal commas make data rows ambiguous; only the header is sniffed.
        header = text.partition("\n")[0]
        try:
            dialect = csv.Sniffer().sniff(header, delimiters=";\t,")
        except csv.Error:
            dialect = csv.excel
        return list(csv.reader(io.StringIO(text, newline=""), dialect))

    def _read_xlsx(self, path: Path) -> list[tuple]:
        try:
            workbook = load_workbook(path, read_only=True, data_only=True)
        except Exception as e:
            raise TransactionImportError(
                f"Cannot read workbook: {e}",
                source=str(path),
            ) from e
        try:
            sheet = workbook.worksheets[0]
            return [tuple(r) for r in sheet.iter_rows(values_only=True)]
        finally:
            workbook.close()
