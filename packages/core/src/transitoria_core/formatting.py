"""Currency display for dashboard tables and reports."""

from decimal import ROUND_HALF_UP, Decimal

from .models import to_decimal


def format_currency(amount, in_thousands: bool = False, language: str = "nl") -> str:
    """Render an amount in euros.

    Args:
        amount: Decimal, int, float or numeric string.
        in_thousands: Render a compact ``€ 15.0k`` form instead.
        language: ``nl`` (``€ 15.000``) or ``en`` (``€15,000``).

    Example:
        >>> format_currency(Decimal("15000"))
        '€ 15.000'
        >>> format_currency(Decimal("2500"), in_thousands=True)
        '€ 2.5k'
    """
    value = to_decimal(amount)

    if in_thousands:
        return f"€ {value / 1000:.1f}k"

    whole = value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    digits = f"{abs(whole):,.0f}"
    sign = "-" if whole < 0 else ""

    if language == "en":
        return f"{sign}€{digits}"
    return f"€ {sign}{digits.replace(',', '.')}"
