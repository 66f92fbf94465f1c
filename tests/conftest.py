"""Shared test fixtures for the SIE converter tests."""

from __future__ import annotations

import io
from datetime import datetime
from pathlib import Path

import openpyxl
import pytest
from fastapi.testclient import TestClient

from app.main import app

DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def make_xlsx(rows: list[list]) -> bytes:
    """Build an in-memory .xlsx workbook whose first sheet holds ``rows``."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Transactions"
    for row in rows:
        ws.append(row)
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def xlsx_factory():
    """Return the in-memory workbook builder."""
    return make_xlsx


@pytest.fixture
def sample_csv_bytes() -> bytes:
    with open(DATA_DIR / "sample_transactions.csv", "rb") as f:
        return f.read()


@pytest.fixture
def sample_xls_bytes() -> bytes:
    """Legacy BIFF8 workbook, first sheet "Transactions", dates in column A."""
    with open(DATA_DIR / "sample_transactions.xls", "rb") as f:
        return f.read()


@pytest.fixture
def sample_xlsx_bytes() -> bytes:
    return make_xlsx(
        [
            ["Date", "Account", "Amount", "Description"],
            [datetime(2024, 1, 2), 1910, 1500.0, "Kontantförsäljning"],
            ["20240103", "1930", -250.5, None],
            [datetime(2024, 1, 4), 3011, None, "Saknar belopp"],
            [None, None, None, None],
            ["20240105", 4010, "-8500,00", "Hyra januari"],
        ]
    )


@pytest.fixture
def client():
    """FastAPI test client."""
    with TestClient(app) as c:
        yield c
