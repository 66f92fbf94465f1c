"""Normalizer utility functions for tabular transaction data.

These functions provide a single place to handle the messy reality of
hand-made bookkeeping exports: numbers typed as text, decimal commas,
spreadsheet cells that come back as floats or datetimes, stray whitespace.

Every function returns None for a value that cannot be used, so the
parsers can drop the row instead of crashing.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from app.core.logging import get_logger

logger = get_logger(__name__)

# SIE dates are written as YYYYMMDD
SIE_DATE_FORMAT = "%Y%m%d"


def normalize_amount(value: Any) -> Optional[Decimal]:
    """Convert a cell or field value to a finite Decimal.

    Accepts ints, floats, Decimals and numeric strings. A string with a
    single decimal comma and no dot (``"150,50"``) is read as ``150.50``.

    Args:
        value: Raw amount from the source file.

    Returns:
        The amount as a Decimal, or None if it is missing, non-numeric,
        NaN or infinite.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float, Decimal)):
        raw = str(value)
    else:
        # thousands separators: plain and non-breaking spaces
        raw = str(value).strip().replace(" ", "").replace("\u00a0", "")
        if not raw:
            return None
        if raw.count(",") == 1 and "." not in raw:
            raw = raw.replace(",", ".")

    try:
        amount = Decimal(raw)
    except (InvalidOperation, ValueError):
        logger.debug("Non-numeric amount: %r", value)
        return None

    if not amount.is_finite():
        logger.debug("Non-finite amount: %r", value)
        return None
    return amount


def normalize_date_token(value: Any) -> Optional[str]:
    """Turn a date cell into the token written on the #VER line.

    Strings are kept as-is (trimmed); the date format is the caller's
    business. Spreadsheet ``date``/``datetime`` cells become YYYYMMDD.

    Args:
        value: Raw date from the source file.

    Returns:
        Date token, or None if empty.
    """
    if value is None:
        return None
    if isinstance(value, date):
        return value.strftime(SIE_DATE_FORMAT)
    token = _scalar_to_str(value)
    return token or None


def normalize_account(value: Any) -> Optional[str]:
    """Render an account code as text.

    Spreadsheets often store ``1910`` as the float ``1910.0``; integral
    numbers are written without the decimal part.

    Args:
        value: Raw account code from the source file.

    Returns:
        Account code string, or None if empty.
    """
    if value is None or isinstance(value, bool):
        return None
    account = _scalar_to_str(value)
    return account or None


def normalize_text(value: Any) -> str:
    """Strip a free-text field, mapping missing values to ``""``."""
    if value is None:
        return ""
    return str(value).strip()


def _scalar_to_str(value: Any) -> str:
    """Stringify a scalar cell, dropping ``.0`` from integral numbers."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, Decimal) and value.is_finite() and value == value.to_integral_value():
        return str(int(value))
    return str(value).strip()
