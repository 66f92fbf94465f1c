"""Pydantic schemas for conversion results and the SIE type catalogue."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ConversionResult(BaseModel):
    """A rendered SIE document plus what the caller needs to ship it."""

    content: str
    encoding: str = Field(
        ...,
        description="Charset label the caller should attach when transmitting",
    )
    filename: str
    vouchers_written: int
    lines_skipped: int


class SieTypeInfo(BaseModel):
    """Human-readable description of one SIE format variant."""

    name: str
    description: str
    encoding: str
