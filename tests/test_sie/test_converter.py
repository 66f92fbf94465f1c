"""Tests for the conversion service that ties parsers and builder together."""

from __future__ import annotations

from decimal import Decimal

import pytest

from app.core.exceptions import FormatError, UnsupportedInputKind
from app.schemas.transaction import AccountEntry, TransactionRecord
from app.services.ingestion.csv_parser import CsvParser
from app.services.ingestion.spreadsheet_parser import SpreadsheetParser
from app.services.sie.converter import (
    DEFAULT_CHART_OF_ACCOUNTS,
    build_document,
    convert_csv,
    convert_rows,
    convert_upload,
    get_parser,
)

HEADER_LINES = 8


def _voucher_blocks(document: str) -> list[list[str]]:
    """Split a rendered document into its 4-line #VER blocks."""
    lines = document.split("\n")
    return [lines[i : i + 4] for i, line in enumerate(lines) if line.startswith("#VER ")]


class TestGetParser:
    @pytest.mark.parametrize(
        "filename, parser_cls",
        [
            ("data.csv", CsvParser),
            ("DATA.CSV", CsvParser),
            ("book.xlsx", SpreadsheetParser),
            ("legacy.XLS", SpreadsheetParser),
        ],
    )
    def test_dispatch_by_extension(self, filename: str, parser_cls):
        assert isinstance(get_parser(filename), parser_cls)

    def test_skip_header_reaches_csv_parser(self):
        assert get_parser("data.csv", skip_header=True).skip_header is True

    @pytest.mark.parametrize("filename", ["report.pdf", "notes.txt", "noextension"])
    def test_unsupported_extension(self, filename: str):
        with pytest.raises(UnsupportedInputKind, match="not supported"):
            get_parser(filename)


class TestBuildDocument:
    def test_one_block_per_record_in_order(self):
        records = [
            TransactionRecord(date=f"2024010{i}", account="1910", amount=Decimal(i))
            for i in range(1, 6)
        ]
        blocks = _voucher_blocks(build_document(records))

        assert len(blocks) == 5
        assert [block[0].split()[1] for block in blocks] == ["1", "2", "3", "4", "5"]
        assert [block[0].split()[2] for block in blocks] == [r.date for r in records]
        for block in blocks:
            assert block[1] == "{"
            assert block[3] == "}"

    def test_default_chart_of_accounts(self):
        lines = build_document([]).split("\n")
        konto = [line for line in lines if line.startswith("#KONTO")]
        assert konto == [
            '#KONTO 1910 "Kassa"',
            '#KONTO 1930 "Bank"',
            '#KONTO 3011 "Försäljning"',
            '#KONTO 4010 "Lokalhyra"',
        ]
        assert len(DEFAULT_CHART_OF_ACCOUNTS) == 4

    def test_custom_chart_replaces_default(self):
        accounts = [AccountEntry(account_number="2440", account_name="Leverantörsskulder")]
        lines = build_document([], accounts=accounts).split("\n")
        assert [line for line in lines if line.startswith("#KONTO")] == [
            '#KONTO 2440 "Leverantörsskulder"'
        ]

    def test_empty_chart(self):
        lines = build_document([], accounts=[]).split("\n")
        assert len(lines) == HEADER_LINES + 1
        assert lines[-1] == "#END"


class TestConvertCsv:
    def test_end_to_end(self):
        document = convert_csv(
            "20240101;1910;150.5;Sale\n20240102;1930;-12.5\n",
            sie_type="sie4",
            company_name="Acme",
        )
        lines = document.split("\n")
        assert lines[4] == "#SIETYP 4"
        assert lines[5] == '#FNAMN "Acme"'
        assert _voucher_blocks(document) == [
            ['#VER 1 20240101 "Sale"', "{", "#TRANS 1910 {} 150.50", "}"],
            ['#VER 2 20240102 ""', "{", "#TRANS 1930 {} -12.50", "}"],
        ]
        assert lines[-1] == "#END"

    def test_very_large_amount_renders(self):
        document = convert_csv("2024-01-01;1910;1e30;Big\n")
        assert "#TRANS 1910 {} 1" + "0" * 30 + ".00" in document.split("\n")

    def test_voucher_numbers_skip_dropped_lines(self):
        """Dropped lines do not leave gaps in the voucher sequence."""
        document = convert_csv("20240101;1910;1\nbroken\n20240103;1910;3\n")
        assert [b[0].split()[1] for b in _voucher_blocks(document)] == ["1", "2"]


class TestConvertRows:
    def test_rows_become_vouchers(self):
        document = convert_rows(
            [
                {"Date": "20240101", "Account": 1910, "Amount": 100, "Description": "Kaffe"},
                {"Date": "20240102", "Account": 1930},
                {"Date": "20240103", "Account": 1930, "Amount": -40},
            ],
            sie_type="sie5",
        )
        assert "#SIETYP 5" in document.split("\n")
        assert _voucher_blocks(document) == [
            ['#VER 1 20240101 "Kaffe"', "{", "#TRANS 1910 {} 100.00", "}"],
            ['#VER 2 20240103 ""', "{", "#TRANS 1930 {} -40.00", "}"],
        ]


class TestConvertUpload:
    def test_csv_upload(self, sample_csv_bytes: bytes):
        result = convert_upload(
            sample_csv_bytes, "sample_transactions.csv", company_name="Acme"
        )
        assert result.filename == "output_sie4.sie"
        assert result.encoding == "ISO-8859-1"
        assert result.vouchers_written == 5
        assert result.lines_skipped == 2
        assert len(_voucher_blocks(result.content)) == 5

    def test_xlsx_upload(self, sample_xlsx_bytes: bytes):
        result = convert_upload(
            sample_xlsx_bytes, "transactions.xlsx", sie_type="sie5", encoding="UTF-8"
        )
        assert result.filename == "output_sie5.sie"
        assert result.encoding == "UTF-8"
        assert result.vouchers_written == 3
        assert "#TRANS 4010 {} -8500.00" in result.content

    def test_xls_upload(self, sample_xls_bytes: bytes):
        result = convert_upload(sample_xls_bytes, "sample_transactions.xls")
        assert result.vouchers_written == 2
        assert result.lines_skipped == 1
        assert '#VER 1 20240102 "Kontant"' in result.content.split("\n")

    def test_content_is_not_transcoded(self, sample_csv_bytes: bytes):
        result = convert_upload(sample_csv_bytes, "sample_transactions.csv")
        assert isinstance(result.content, str)
        assert '"Kontantförsäljning"' in result.content

    def test_unsupported_kind_fails_whole_request(self):
        with pytest.raises(UnsupportedInputKind) as exc_info:
            convert_upload(b"%PDF-1.4", "statement.pdf")
        assert exc_info.value.details["extension"] == ".pdf"

    def test_corrupt_spreadsheet_fails_whole_request(self):
        with pytest.raises(FormatError):
            convert_upload(b"not a workbook", "broken.xlsx")

    def test_filename_is_sanitized(self, sample_csv_bytes: bytes):
        result = convert_upload(sample_csv_bytes, "a.csv", sie_type='sie4"; x=y')
        assert result.filename == "output_sie4xy.sie"
