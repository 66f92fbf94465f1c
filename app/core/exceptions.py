"""Exceptions raised by the conversion core.

Malformed individual lines are never raised; parsers drop them and report
them in ``ParseResult.skipped``. Only whole-document failures surface here.
"""

from __future__ import annotations

from typing import Any, Optional


class SieConverterError(Exception):
    """Base exception for all conversion errors."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FormatError(SieConverterError):
    """Raised when a source file cannot be read as tabular data at all."""

    pass


class UnsupportedInputKind(SieConverterError):
    """Raised when no parser handles the uploaded file's extension."""

    pass


class DocumentFinalizedError(SieConverterError):
    """Raised when a builder is used after ``build()`` has rendered it."""

    pass
