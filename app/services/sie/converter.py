"""Conversion service: tabular source in, SIE document out.

Composes the ingestion parsers with ``SieBuilder``:
  1. Pick a parser by file extension.
  2. Parse the source into TransactionRecords (bad lines are dropped).
  3. Declare the chart of accounts.
  4. Write one voucher per record, numbered 1..N.
  5. Render the document.

The encoding label is carried through untouched; transcoding the text is
left to whoever transmits it.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Sequence

from app.core.exceptions import UnsupportedInputKind
from app.core.logging import get_logger
from app.schemas.conversion import ConversionResult
from app.schemas.transaction import AccountEntry, TransactionRecord
from app.services.ingestion.base_parser import BaseParser
from app.services.ingestion.csv_parser import CsvParser
from app.services.ingestion.spreadsheet_parser import SpreadsheetParser
from app.services.sie.builder import SieBuilder
from app.services.sie.formats import output_filename

logger = get_logger(__name__)

DEFAULT_SIE_TYPE = "sie4"
DEFAULT_ENCODING = "ISO-8859-1"
DEFAULT_COMPANY_NAME = "My Company"

# Starter chart of accounts written into every document
DEFAULT_CHART_OF_ACCOUNTS: tuple[AccountEntry, ...] = (
    AccountEntry(account_number="1910", account_name="Kassa"),
    AccountEntry(account_number="1930", account_name="Bank"),
    AccountEntry(account_number="3011", account_name="Försäljning"),
    AccountEntry(account_number="4010", account_name="Lokalhyra"),
)

SUPPORTED_EXTENSIONS: tuple[str, ...] = (".csv", ".xlsx", ".xls")


def get_parser(filename: str, skip_header: bool = False) -> BaseParser:
    """Return the parser registered for the file's extension.

    Raises:
        UnsupportedInputKind: If the extension has no parser.
    """
    suffix = Path(filename).suffix.lower()
    if suffix == ".csv":
        return CsvParser(skip_header=skip_header)
    if suffix in (".xlsx", ".xls"):
        return SpreadsheetParser()
    raise UnsupportedInputKind(
        f"File type '{suffix or filename}' is not supported. "
        f"Use one of: {', '.join(SUPPORTED_EXTENSIONS)}",
        details={"filename": filename, "extension": suffix},
    )


def build_document(
    records: Iterable[TransactionRecord],
    sie_type: str = DEFAULT_SIE_TYPE,
    encoding: str = DEFAULT_ENCODING,
    company_name: str = DEFAULT_COMPANY_NAME,
    accounts: Optional[Sequence[AccountEntry]] = None,
) -> str:
    """Render records as an SIE document, one voucher per record."""
    builder = SieBuilder(sie_type, encoding, company_name)

    chart = DEFAULT_CHART_OF_ACCOUNTS if accounts is None else accounts
    for account in chart:
        builder.add_account(account.account_number, account.account_name)

    for voucher_number, record in enumerate(records, start=1):
        builder.add_transaction(
            voucher_number,
            record.date,
            record.account,
            record.amount,
            record.description,
        )

    return builder.build()


def convert_csv(
    content: str,
    sie_type: str = DEFAULT_SIE_TYPE,
    encoding: str = DEFAULT_ENCODING,
    company_name: str = DEFAULT_COMPANY_NAME,
    accounts: Optional[Sequence[AccountEntry]] = None,
) -> str:
    """Convert headerless delimited text to an SIE document."""
    result = CsvParser().parse_text(content)
    return build_document(result.records, sie_type, encoding, company_name, accounts)


def convert_rows(
    rows: Iterable[Mapping[str, Any]],
    sie_type: str = DEFAULT_SIE_TYPE,
    encoding: str = DEFAULT_ENCODING,
    company_name: str = DEFAULT_COMPANY_NAME,
    accounts: Optional[Sequence[AccountEntry]] = None,
) -> str:
    """Convert spreadsheet-style row mappings to an SIE document."""
    result = SpreadsheetParser().parse_rows(rows)
    return build_document(result.records, sie_type, encoding, company_name, accounts)


def convert_upload(
    file_content: bytes,
    filename: str,
    sie_type: str = DEFAULT_SIE_TYPE,
    encoding: str = DEFAULT_ENCODING,
    company_name: str = DEFAULT_COMPANY_NAME,
    accounts: Optional[Sequence[AccountEntry]] = None,
    skip_header: bool = False,
) -> ConversionResult:
    """Convert an uploaded file, dispatching on its extension.

    Raises:
        UnsupportedInputKind: If the extension has no parser.
        FormatError: If the file cannot be read as tabular data.
    """
    parser = get_parser(filename, skip_header=skip_header)
    parsed = parser.parse(file_content, filename)

    content = build_document(parsed.records, sie_type, encoding, company_name, accounts)
    logger.info(
        "Converted %s to %s: vouchers=%d skipped=%d",
        filename,
        sie_type,
        parsed.records_parsed,
        parsed.records_skipped,
    )

    return ConversionResult(
        content=content,
        encoding=encoding,
        filename=output_filename(sie_type),
        vouchers_written=parsed.records_parsed,
        lines_skipped=parsed.records_skipped,
    )
