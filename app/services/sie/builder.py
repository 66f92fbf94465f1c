"""SIE document builder.

Accumulates the lines of a simplified SIE export and renders them once::

    #FLAGGA 0
    #PROGRAM "SIE Converter" 1.0
    #FORMAT PC8
    #GEN 2024-05-02 "System"
    #SIETYP 4
    #FNAMN "Acme"
    #RAR 0 20240101 20241231
    #VALUTA SEK
    #KONTO 1910 "Kassa"
    #VER 1 20240101 "Sale"
    {
    #TRANS 1910 {} 150.50
    }
    #END

Fiscal year and currency are fixed: the current calendar year and SEK.
"""

from __future__ import annotations

import re
from datetime import date
from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Optional, Union

from app.core.exceptions import DocumentFinalizedError

PROGRAM_NAME = "SIE Converter"
PROGRAM_VERSION = "1.0"
FILE_FORMAT = "PC8"
GENERATED_BY = "System"
CURRENCY = "SEK"
FISCAL_YEAR_INDEX = 0

_CENTS = Decimal("0.01")
_NON_NUMERIC_PREFIX = re.compile(r"^\D+")

Number = Union[Decimal, float, int]


def sie_type_number(sie_type: str) -> str:
    """Strip the non-numeric prefix from a format variant: ``sie4`` -> ``4``."""
    return _NON_NUMERIC_PREFIX.sub("", sie_type.strip())


def format_amount(amount: Number) -> str:
    """Render an amount in fixed point with exactly two decimals.

    Always uses ``.`` as the decimal separator and rounds half up.

    Raises:
        ValueError: If the amount is NaN or infinite.
    """
    value = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    if not value.is_finite():
        raise ValueError(f"Cannot render non-finite amount {amount!r}")
    with localcontext() as ctx:
        # room for every integer digit plus the two decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        rounded = value.quantize(_CENTS, rounding=ROUND_HALF_UP)
    return f"{rounded:f}"


def quote(text: str) -> str:
    """Wrap text in double quotes, backslash-escaping quotes and backslashes."""
    escaped = text.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class SieBuilder:
    """Append-only builder for one SIE document.

    The header is written on construction. ``add_account`` and
    ``add_transaction`` append in call order; ``build`` appends ``#END``
    and returns the text. A builder renders exactly once: any call after
    ``build`` raises ``DocumentFinalizedError``.

    Instances are not thread-safe; create one per conversion.
    """

    def __init__(
        self,
        sie_type: str = "sie4",
        encoding: str = "ISO-8859-1",
        company_name: str = "My Company",
        today: Optional[date] = None,
    ) -> None:
        self._sie_type = sie_type
        self._encoding = encoding
        self._company_name = company_name
        self._lines: list[str] = []
        self._finalized = False
        self._add_header(today or date.today())

    # ── Read-only state ──────────────────────────────────────────────

    @property
    def sie_type(self) -> str:
        return self._sie_type

    @property
    def encoding(self) -> str:
        return self._encoding

    @property
    def company_name(self) -> str:
        return self._company_name

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._lines)

    @property
    def finalized(self) -> bool:
        return self._finalized

    # ── Public API ───────────────────────────────────────────────────

    def add_account(self, account_number: str, account_name: str) -> None:
        """Declare an account in the chart. Duplicates are written as given."""
        self._append(f"#KONTO {account_number} {quote(account_name)}")

    def add_transaction(
        self,
        voucher_number: int,
        date: str,
        account_number: str,
        amount: Number,
        description: str = "",
    ) -> None:
        """Write a voucher holding a single transaction line.

        The account does not have to be declared with ``add_account``.
        """
        self._ensure_open()
        self._lines.extend(
            [
                f"#VER {voucher_number} {date} {quote(description)}",
                "{",
                f"#TRANS {account_number} {{}} {format_amount(amount)}",
                "}",
            ]
        )

    def build(self) -> str:
        """Append ``#END`` and return the document, one line per ``\\n``."""
        self._append("#END")
        self._finalized = True
        return "\n".join(self._lines)

    # ── Private helpers ──────────────────────────────────────────────

    def _add_header(self, today: date) -> None:
        year = today.year
        self._lines.extend(
            [
                "#FLAGGA 0",
                f"#PROGRAM {quote(PROGRAM_NAME)} {PROGRAM_VERSION}",
                f"#FORMAT {FILE_FORMAT}",
                f"#GEN {today.isoformat()} {quote(GENERATED_BY)}",
                f"#SIETYP {sie_type_number(self._sie_type)}",
                f"#FNAMN {quote(self._company_name)}",
                f"#RAR {FISCAL_YEAR_INDEX} {year}0101 {year}1231",
                f"#VALUTA {CURRENCY}",
            ]
        )

    def _append(self, line: str) -> None:
        self._ensure_open()
        self._lines.append(line)

    def _ensure_open(self) -> None:
        if self._finalized:
            raise DocumentFinalizedError(
                "SIE document has already been built",
                details={"sie_type": self._sie_type, "lines": len(self._lines)},
            )
