"""Excel workbook parser (.xlsx via openpyxl, legacy .xls via xlrd)."""

from __future__ import annotations

import io
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

import openpyxl
import xlrd

from app.core.exceptions import FormatError
from app.core.logging import get_logger
from app.schemas.transaction import ParseResult, SkippedLine, TransactionRecord
from app.services.ingestion.base_parser import BaseParser
from app.services.ingestion.normalizer import (
    normalize_account,
    normalize_amount,
    normalize_date_token,
    normalize_text,
)

logger = get_logger(__name__)

REQUIRED_COLUMNS = ("Date", "Account", "Amount")


class SpreadsheetParser(BaseParser):
    """Parser for Excel workbooks with a header row.

    Only the first worksheet is read. Its first non-empty row holds the
    column names; the columns used are (case-sensitive)::

        Date | Account | Amount | Description (optional)

    Other columns are ignored.
    """

    file_kind: str = "spreadsheet"

    def parse(self, file_content: bytes, filename: str) -> ParseResult:
        """Read the first worksheet and parse its rows into TransactionRecords."""
        if Path(filename).suffix.lower() == ".xls":
            rows = read_xls_rows(file_content, filename)
        else:
            rows = read_xlsx_rows(file_content, filename)

        result = self.parse_rows(rows)
        logger.info(
            "Spreadsheet parse complete for %s: %d records parsed, %d rows skipped",
            filename,
            result.records_parsed,
            result.records_skipped,
        )
        return result

    def parse_rows(self, rows: Iterable[Mapping[str, Any]]) -> ParseResult:
        """Parse row mappings keyed by column name.

        A row needs truthy ``Date``, ``Account`` and ``Amount`` values;
        anything else is recorded as skipped, never raised.
        """
        result = ParseResult()

        for row_num, row in enumerate(rows, start=1):
            try:
                record = self._parse_row(row)
            except ValueError as exc:
                logger.warning("Skipping spreadsheet row %d: %s", row_num, exc)
                result.skipped.append(
                    SkippedLine(line_number=row_num, reason=str(exc), raw=_describe(row))
                )
                continue

            result.records.append(record)
            logger.debug(
                "Parsed spreadsheet row %d: account=%s amount=%s",
                row_num,
                record.account,
                record.amount,
            )

        return result

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _parse_row(row: Mapping[str, Any]) -> TransactionRecord:
        """Convert one row mapping into a TransactionRecord.

        Raises:
            ValueError: If a required column is missing, falsy or unusable.
        """
        missing = [col for col in REQUIRED_COLUMNS if not row.get(col)]
        if missing:
            raise ValueError(f"missing {', '.join(missing)}")

        date = normalize_date_token(row["Date"])
        account = normalize_account(row["Account"])
        amount = normalize_amount(row["Amount"])
        if date is None:
            raise ValueError("empty Date")
        if account is None:
            raise ValueError("empty Account")
        if amount is None:
            raise ValueError(f"non-numeric Amount {row['Amount']!r}")

        return TransactionRecord(
            date=date,
            account=account,
            amount=amount,
            description=normalize_text(row.get("Description")),
        )


def parse_row_objects(rows: Iterable[Mapping[str, Any]]) -> List[TransactionRecord]:
    """Parse spreadsheet-style row mappings, returning only the accepted records."""
    return SpreadsheetParser().parse_rows(rows).records


# ----------------------------------------------------------------------
# Workbook readers
# ----------------------------------------------------------------------


def read_xlsx_rows(file_content: bytes, filename: str = "upload.xlsx") -> List[Dict[str, Any]]:
    """Read the first worksheet of an .xlsx workbook as row dicts.

    Raises:
        FormatError: If the bytes are not a readable workbook.
    """
    try:
        wb = openpyxl.load_workbook(
            io.BytesIO(file_content), read_only=True, data_only=True
        )
    except Exception as exc:
        raise FormatError(
            f"{filename} is not a readable Excel workbook",
            details={"filename": filename, "error": str(exc)},
        ) from exc

    try:
        if not wb.worksheets:
            return []
        sheet = wb.worksheets[0]
        return _rows_to_dicts(sheet.iter_rows(values_only=True))
    finally:
        wb.close()


def read_xls_rows(file_content: bytes, filename: str = "upload.xls") -> List[Dict[str, Any]]:
    """Read the first sheet of a legacy .xls workbook as row dicts.

    Date cells are converted to ``datetime`` using the workbook's datemode.

    Raises:
        FormatError: If the bytes are not a readable workbook.
    """
    try:
        book = xlrd.open_workbook(file_contents=file_content)
    except Exception as exc:
        raise FormatError(
            f"{filename} is not a readable Excel workbook",
            details={"filename": filename, "error": str(exc)},
        ) from exc

    if book.nsheets == 0:
        return []
    sheet = book.sheet_by_index(0)

    def cell_value(cell: xlrd.sheet.Cell) -> Any:
        if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
            return None
        if cell.ctype == xlrd.XL_CELL_DATE:
            return xlrd.xldate_as_datetime(cell.value, book.datemode)
        return cell.value

    raw_rows = (
        tuple(cell_value(cell) for cell in sheet.row(idx)) for idx in range(sheet.nrows)
    )
    return _rows_to_dicts(raw_rows)


def _rows_to_dicts(raw_rows: Iterable[tuple]) -> List[Dict[str, Any]]:
    """Use the first non-empty row as headers and map the rest onto it.

    Empty cells are left out of the row dict and fully empty rows are
    dropped.
    """
    header: Optional[List[str]] = None
    rows: List[Dict[str, Any]] = []

    for values in raw_rows:
        if not any(_has_value(v) for v in values):
            continue
        if header is None:
            header = [str(v).strip() if v is not None else "" for v in values]
            continue

        row = {
            key: value
            for key, value in zip(header, values)
            if key and _has_value(value)
        }
        if row:
            rows.append(row)

    return rows


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _describe(row: Mapping[str, Any]) -> str:
    return ", ".join(f"{key}={value!r}" for key, value in row.items())
