# app/domain/services/formatting.py
"""
Currency and date presentation.

Display preferences are passed in explicitly as ``DisplaySettings``; nothing
here reads tenant state on its own.
"""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from app.core.config import settings as app_settings

CURRENCIES: dict[str, dict[str, str]] = {
    "INR": {"symbol": "₹", "name": "Indian Rupee", "locale": "en-IN"},
    "USD": {"symbol": "$", "name": "US Dollar", "locale": "en-US"},
}

_DATE_SEPARATORS = re.compile(r"[/\-.]")


@dataclass(frozen=True)
class DisplaySettings:
    currency: str = "INR"
    date_format: str = "DD/MM/YYYY"

    @classmethod
    def from_app_settings(cls) -> "DisplaySettings":
        return cls(
            currency=app_settings.DEFAULT_CURRENCY,
            date_format=app_settings.DEFAULT_DATE_FORMAT,
        )


def _currency_config(code: str) -> dict[str, str]:
    return CURRENCIES.get(code.upper(), CURRENCIES["INR"])


def _group_indian(digits: str) -> str:
    """12345678 -> 1,23,45,678 (lakh / crore grouping)."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs) + "," + tail


def format_currency(amount: Any, display: DisplaySettings) -> str:
    """
    Format an amount with the currency symbol and two decimals.

    INR uses Indian digit grouping, other currencies Western grouping.
    Returns an empty string for missing or non-numeric amounts.
    """
    if amount is None:
        return ""
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        return ""
    if not value.is_finite():
        return ""

    config = _currency_config(display.currency)
    text = f"{abs(value):.2f}"
    whole, fraction = text.split(".")
    if config["locale"] == "en-IN":
        whole = _group_indian(whole)
    else:
        whole = f"{int(whole):,}"

    sign = "-" if value < 0 else ""
    return f"{sign}{config['symbol']}{whole}.{fraction}"


def _field_order(date_format: str) -> list[str]:
    """``"DD/MM/YYYY"`` -> ``["D", "M", "Y"]``."""
    positions = {token: date_format.find(token * n) for token, n in (("D", 2), ("M", 2), ("Y", 4))}
    if any(pos < 0 for pos in positions.values()):
        return ["D", "M", "Y"]
    return sorted(positions, key=positions.get)


def format_date(iso: Any, display: DisplaySettings | None = None) -> str:
    """``YYYY-MM-DD`` -> the display format; other strings are returned unchanged."""
    if isinstance(iso, dt.date):
        iso = iso.isoformat()
    if not iso or not isinstance(iso, str):
        return ""
    parts = iso.split("-")
    if len(parts) != 3:
        return iso
    year, month, day = parts
    date_format = (display or DisplaySettings()).date_format
    return (
        date_format.replace("YYYY", year)
        .replace("MM", month.zfill(2))
        .replace("DD", day.zfill(2))
    )


def parse_date_input(
    text: str | None,
    display: DisplaySettings | None = None,
    today: dt.date | None = None,
) -> str | None:
    """
    Parse a typed date (``/``, ``-`` or ``.`` separated, fields in the display
    format's order) into an ISO string. Two-digit years take the current
    century. Invalid input -> None.
    """
    if not text or not isinstance(text, str):
        return None
    parts = _DATE_SEPARATORS.split(text.strip())
    if len(parts) != 3:
        return None
    fields = dict(zip(_field_order((display or DisplaySettings()).date_format), parts))
    year = fields["Y"]
    if len(year) == 2:
        century = str((today or dt.date.today()).year)[:2]
        year = century + year
    try:
        parsed = dt.date(int(year), int(fields["M"]), int(fields["D"]))
    except ValueError:
        return None
    return parsed.isoformat()
