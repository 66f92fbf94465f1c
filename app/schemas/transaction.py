"""Pydantic schemas for parsed transaction records."""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class TransactionRecord(BaseModel):
    """One normalized row of the source file, ready for the SIE builder."""

    date: str = Field(
        ...,
        min_length=1,
        description="Date token exactly as supplied (YYYYMMDD for spreadsheet dates)",
    )
    account: str = Field(
        ...,
        min_length=1,
        description="Account code; not required to be declared in the chart",
    )
    amount: Decimal = Field(
        ...,
        allow_inf_nan=False,
        description="Signed amount, finite",
    )
    description: str = ""


class AccountEntry(BaseModel):
    """A chart-of-accounts declaration."""

    account_number: str
    account_name: str


class SkippedLine(BaseModel):
    """A source line or row dropped by the lenient parsers."""

    line_number: int = Field(..., description="1-based line or row number")
    reason: str
    raw: Optional[str] = None


class ParseResult(BaseModel):
    """Accepted records plus the lines that were dropped on the way."""

    records: list[TransactionRecord] = Field(default_factory=list)
    skipped: list[SkippedLine] = Field(default_factory=list)

    @property
    def records_parsed(self) -> int:
        return len(self.records)

    @property
    def records_skipped(self) -> int:
        return len(self.skipped)
