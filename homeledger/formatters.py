"""
Display Formatting

Amounts are shown Rupiah style: "Rp 1.000.000", "Rp 12.500,5".
Dot groups thousands, comma separates decimals, at most two fraction
digits. The prefix comes from AppSettings.currency_prefix.
"""

import re
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Union

from homeledger.config import get_settings


SHORT_DATE_FORMAT = "%d/%m/%Y"
LONG_DATE_FORMAT = "%d %B %Y"

_TWO_PLACES = Decimal("0.01")


def _to_decimal(amount: Any) -> Decimal:
    if isinstance(amount, Decimal):
        value = amount
    else:
        try:
            value = Decimal(str(amount))
        except (InvalidOperation, ValueError):
            return Decimal("0")
    return value if value.is_finite() else Decimal("0")


def format_currency(amount: Any, prefix: Optional[str] = None) -> str:
    """Format an amount; anything non-numeric formats as zero."""
    if prefix is None:
        prefix = get_settings().app.currency_prefix

    value = _to_decimal(amount).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):f}".partition(".")

    grouped = f"{int(whole):,}".replace(",", ".")
    fraction = fraction.rstrip("0")
    number = f"{grouped},{fraction}" if fraction else grouped

    return f"{prefix} {sign}{number}"


def parse_currency(text: Union[str, int, float, Decimal, None]) -> Decimal:
    """Inverse of format_currency; unparseable input gives 0."""
    if text is None:
        return Decimal("0")
    if isinstance(text, (int, float, Decimal)):
        return _to_decimal(text)

    cleaned = re.sub(r"^\s*[A-Za-z]+\.?\s*", "", text.strip())
    cleaned = cleaned.replace(" ", "").replace(".", "").replace(",", ".")
    return _to_decimal(cleaned)


def format_date(value: Union[date, datetime, str, None], style: str = "short") -> str:
    """
    Format a date as "short" (31/01/2024), "long" (31 January 2024), or
    with any strftime pattern. Empty input gives an empty string.
    """
    if not value:
        return ""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)

    if style == "short":
        pattern = SHORT_DATE_FORMAT
    elif style == "long":
        pattern = LONG_DATE_FORMAT
    else:
        pattern = style
    return value.strftime(pattern)
