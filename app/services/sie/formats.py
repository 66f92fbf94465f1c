"""Catalogue of the SIE format variants offered by the converter."""

from __future__ import annotations

import re

from app.schemas.conversion import SieTypeInfo

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9_.-]")

SIE_TYPES: dict[str, SieTypeInfo] = {
    "sie1": SieTypeInfo(
        name="SIE 1",
        description="Utvecklingsformat (ANSI)",
        encoding="ISO-8859-1",
    ),
    "sie2": SieTypeInfo(
        name="SIE 2",
        description="Intern kontroll av bokföringsprogram",
        encoding="ISO-8859-1",
    ),
    "sie3": SieTypeInfo(
        name="SIE 3",
        description="För överföring till revisionsprogram",
        encoding="ISO-8859-1",
    ),
    "sie4": SieTypeInfo(
        name="SIE 4",
        description="För överföring mellan bokföringsprogram",
        encoding="ISO-8859-1",
    ),
    "sie5": SieTypeInfo(
        name="SIE 5/EU",
        description="EU-kompatibelt format",
        encoding="UTF-8",
    ),
}


def output_filename(sie_type: str) -> str:
    """Download name for a converted file, e.g. ``output_sie4.sie``."""
    return f"output_{_UNSAFE_FILENAME_CHARS.sub('', sie_type)}.sie"
