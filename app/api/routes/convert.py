"""Conversion endpoints.

Accepts a CSV or Excel upload and returns it as an SIE text file, and
exposes the catalogue of supported SIE format variants.
"""

from __future__ import annotations

import codecs
from typing import Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile
from fastapi.responses import Response

from app.core.config import settings
from app.core.exceptions import FormatError, UnsupportedInputKind
from app.core.logging import get_logger
from app.schemas.conversion import SieTypeInfo
from app.services.sie.converter import convert_upload
from app.services.sie.formats import SIE_TYPES

logger = get_logger(__name__)

router = APIRouter()


@router.post("/convert", response_class=Response)
async def convert_file(
    file: Optional[UploadFile] = File(None, description="CSV, XLSX or XLS file"),
    sie_type: Optional[str] = Form(None, alias="sieType"),
    encoding: Optional[str] = Form(None),
    company_name: Optional[str] = Form(None, alias="companyName"),
) -> Response:
    """Convert an uploaded transaction file to an SIE document.

    The document is encoded with the requested charset (characters it
    cannot represent are replaced) and returned as a download.
    """
    if file is None:
        raise HTTPException(status_code=400, detail="No file was uploaded.")

    sie_type = sie_type or settings.default_sie_type
    encoding = encoding or settings.default_encoding
    company_name = company_name or settings.default_company_name

    try:
        codecs.lookup(encoding)
    except LookupError:
        raise HTTPException(status_code=400, detail=f"Unknown encoding '{encoding}'.")

    # one byte past the limit is enough to tell an oversized upload
    content = await file.read(settings.max_upload_bytes + 1)
    if not content:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")
    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Uploaded file exceeds {settings.max_upload_bytes} bytes.",
        )

    filename = file.filename or "unknown"
    logger.info(
        "Received upload: file=%s size=%d sie_type=%s encoding=%s",
        filename,
        len(content),
        sie_type,
        encoding,
    )

    try:
        result = convert_upload(
            content,
            filename,
            sie_type=sie_type,
            encoding=encoding,
            company_name=company_name,
            skip_header=settings.csv_skip_header,
        )
    except UnsupportedInputKind as exc:
        logger.warning("Rejected upload %s: %s", filename, exc.message)
        raise HTTPException(status_code=415, detail=exc.message)
    except FormatError as exc:
        logger.error("Conversion failed for %s: %s", filename, exc.message)
        raise HTTPException(status_code=422, detail=exc.message)

    return Response(
        content=result.content.encode(result.encoding, errors="replace"),
        media_type=f"text/plain; charset={result.encoding}",
        headers={
            "Content-Disposition": f'attachment; filename="{result.filename}"',
            "X-Vouchers-Written": str(result.vouchers_written),
            "X-Lines-Skipped": str(result.lines_skipped),
        },
    )


@router.get("/sie-spec", response_model=dict[str, SieTypeInfo])
def get_sie_spec() -> dict[str, SieTypeInfo]:
    """List the SIE format variants with their description and charset."""
    return SIE_TYPES
