"""Main entrypoint and application factory for the budget intake API.

This module initializes the FastAPI application, configures logging, sets up the database, and exposes
the Scalar API reference endpoint for interactive OpenAPI documentation. It also includes the main
entrypoint for running the app with Uvicorn.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from scalar_fastapi import get_scalar_api_reference

from budget_intake import __version__
from budget_intake.api.routes import router
from budget_intake.core.db import init_db
from budget_intake.core.settings import get_settings
from budget_intake.core.utils import ROOT_LOGGER_NAME, ensure_dir, get_logger


# --- Logging Setup ---
def setup_logging() -> None:
    """Configure logging to file and console, and ensure the log directory exists."""
    log_file = Path(get_settings().log_file)
    ensure_dir(log_file.parent)
    logger = get_logger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.INFO)
    # Add file handler for persistent logs (not colorized)
    if not any(isinstance(h, logging.FileHandler) for h in logger.handlers):
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(file_handler)
    logger.propagate = False


setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Lifespan event handler creating the jobs, rules and score history tables."""
    _ = app  # Silence unused argument warning
    init_db()
    get_logger(f"{ROOT_LOGGER_NAME}.main").info("Database initialized")
    yield


app = FastAPI(
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    title="Budget Intake API",
    description="""
    The Budget Intake API turns bank statements and receipts into categorized budget records and scores
    the financial health of a budget.

    **Endpoints:**
    - `POST /statements/parse`: Parse statement text into signed, categorized transactions.
    - `POST /statements/budget-items`: Convert parsed transactions into pending budget items.
    - `POST /receipts/parse`: Parse the OCR text of a receipt.
    - `POST /receipts/duplicates`, `POST /receipts/duplicates/best`: Duplicate receipt detection.
    - `POST /receipts/export-csv`: Export receipts as CSV.
    - `GET /rules`, `PUT /rules`: Manage categorization rules.
    - `POST /health-score`, `GET /health-score/history`: Financial health score and its history.
    - `POST /documents/upload`: Upload a PDF, image or text document and start an ingestion job.
    - `GET /status/{{job_id}}`, `GET /download/{{job_id}}`: Job status and CSV output.
    - `GET /health`: Health check endpoint.
    - `GET /scalar`: Interactive Scalar OpenAPI documentation.
    """,
    version=__version__,
)
app.include_router(router)


@app.get("/scalar", include_in_schema=False)
async def scalar_docs() -> JSONResponse:
    """Return Scalar API reference."""
    return get_scalar_api_reference(openapi_url=app.openapi_url, title=app.title)


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run("main:app", host=settings.server_host, port=settings.server_port, reload=True)
