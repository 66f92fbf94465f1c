"""Abstract base class for all tabular source parsers."""

from abc import ABC, abstractmethod

from app.schemas.transaction import ParseResult


class BaseParser(ABC):
    """Base interface that every source-format parser must implement.

    Each parser is responsible for:
    1. Reading raw file bytes in its container format (CSV, XLSX, XLS)
    2. Normalizing fields to our internal TransactionRecord schema
    3. Dropping malformed lines gracefully (skip + log, never crash)

    Only a source that cannot be read as tabular data at all raises
    ``FormatError``.
    """

    file_kind: str

    @abstractmethod
    def parse(self, file_content: bytes, filename: str) -> ParseResult:
        """Parse file content and return normalized transaction records.

        Args:
            file_content: Raw bytes of the uploaded file.
            filename: Original filename (used for logging and dispatch).

        Returns:
            A ParseResult with accepted records and skipped lines.
        """
        pass
