"""Headerless delimited-text parser (CSV with comma or semicolon)."""

from __future__ import annotations

import csv
from typing import List

from app.core.exceptions import FormatError
from app.core.logging import get_logger
from app.schemas.transaction import ParseResult, SkippedLine, TransactionRecord
from app.services.ingestion.base_parser import BaseParser
from app.services.ingestion.normalizer import normalize_amount, normalize_text

logger = get_logger(__name__)

MIN_FIELDS = 3


class CsvParser(BaseParser):
    """Parser for positional, headerless transaction files.

    Expected columns (by position, no header row)::

        date, account, amount[, description]

    The delimiter is detected per line: semicolon if the line contains one,
    otherwise comma. A file mixing both is read line by line without error,
    so a semicolon inside a comma-separated description shifts that line.
    """

    file_kind: str = "csv"

    def __init__(self, skip_header: bool = False) -> None:
        self.skip_header = skip_header

    def parse(self, file_content: bytes, filename: str) -> ParseResult:
        """Decode CSV bytes and parse them into TransactionRecords."""
        try:
            text = file_content.decode("utf-8-sig")  # handle BOM if present
        except UnicodeDecodeError as exc:
            raise FormatError(
                f"{filename} is not valid UTF-8 text",
                details={"filename": filename, "error": str(exc)},
            ) from exc

        result = self.parse_text(text)
        logger.info(
            "CSV parse complete for %s: %d records parsed, %d lines skipped",
            filename,
            result.records_parsed,
            result.records_skipped,
        )
        return result

    def parse_text(self, content: str) -> ParseResult:
        """Parse already-decoded delimited text.

        Blank lines are ignored. Lines that fail to parse are recorded in
        ``ParseResult.skipped`` and never raise.
        """
        result = ParseResult()
        header_pending = self.skip_header

        for line_num, line in enumerate(content.splitlines(), start=1):
            if not line.strip():
                continue

            if header_pending:
                header_pending = False
                result.skipped.append(
                    SkippedLine(line_number=line_num, reason="header row", raw=line)
                )
                continue

            try:
                record = self._parse_line(line)
            except ValueError as exc:
                logger.warning("Skipping CSV line %d: %s", line_num, exc)
                result.skipped.append(
                    SkippedLine(line_number=line_num, reason=str(exc), raw=line)
                )
                continue

            result.records.append(record)
            logger.debug(
                "Parsed CSV line %d: account=%s amount=%s",
                line_num,
                record.account,
                record.amount,
            )

        return result

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_line(line: str) -> TransactionRecord:
        """Convert one non-blank line into a TransactionRecord.

        Raises:
            ValueError: If the line has too few fields or an unusable value.
        """
        delimiter = ";" if ";" in line else ","
        try:
            fields = next(csv.reader([line], delimiter=delimiter))
        except csv.Error as exc:
            raise ValueError(f"unreadable line: {exc}") from exc

        if len(fields) < MIN_FIELDS:
            raise ValueError(
                f"expected at least {MIN_FIELDS} fields, got {len(fields)}"
            )

        date = fields[0].strip()
        account = fields[1].strip()
        if not date:
            raise ValueError("missing date")
        if not account:
            raise ValueError("missing account")

        amount = normalize_amount(fields[2])
        if amount is None:
            raise ValueError(f"non-numeric amount {fields[2].strip()!r}")

        description = normalize_text(fields[3]) if len(fields) > 3 else ""

        return TransactionRecord(
            date=date,
            account=account,
            amount=amount,
            description=description,
        )


def parse_delimited_text(content: str) -> List[TransactionRecord]:
    """Parse headerless delimited text, returning only the accepted records."""
    return CsvParser().parse_text(content).records
