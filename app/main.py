"""SIE Converter - Main Application."""

from fastapi import FastAPI

from app.api.routes import convert
from app.core.config import settings
from app.core.logging import setup_logging

# Configure logging before anything else
logger = setup_logging(settings.log_level)

# -- OpenAPI tag metadata for Swagger grouping --
tags_metadata = [
    {
        "name": "Health",
        "description": "Service health and readiness checks.",
    },
    {
        "name": "Conversion",
        "description": (
            "Upload a CSV or Excel transaction file and download it as an "
            "SIE bookkeeping file, or list the supported SIE variants."
        ),
    },
]


app = FastAPI(
    title="SIE Converter",
    description=(
        "## Tabular transactions to SIE\n\n"
        "Converts CSV and Excel transaction lists into a simplified SIE "
        "export (header, chart of accounts, one voucher per row).\n\n"
        "### Input formats\n"
        "| Format | Layout |\n"
        "|--------|--------|\n"
        "| **CSV** | `date,account,amount[,description]`, comma or semicolon, no header |\n"
        "| **XLSX / XLS** | first sheet, header row with `Date`, `Account`, `Amount`, `Description` |\n\n"
        "### Quick Start\n"
        "```bash\n"
        "curl -X POST /api/convert -F file=@transactions.csv "
        "-F sieType=sie4 -F companyName=Acme -o output_sie4.sie\n"
        "```\n"
    ),
    version="1.0.0",
    openapi_tags=tags_metadata,
    license_info={
        "name": "MIT",
    },
    docs_url="/docs",
    redoc_url="/redoc",
)

app.include_router(convert.router, prefix="/api", tags=["Conversion"])

logger.info("SIE Converter API ready - routes registered")


@app.get("/health", tags=["Health"])
def health_check():
    """Health check endpoint.

    Returns a simple JSON object confirming the service is running.
    Useful for load balancers and monitoring systems.
    """
    return {"status": "healthy", "service": "sie-converter"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.app_port)
