"""FastAPI endpoints for the budget intake API.

This module defines the routes for parsing statement and receipt text, checking receipts for
duplicates, exporting receipts, managing categorization rules, scoring a budget, and running
background ingestion jobs over uploaded documents.
"""

import io

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse

from budget_intake.api.dependencies import (
    get_app_settings,
    get_db_conn,
    get_file_service,
    get_history_store,
    get_rule_store,
)
from budget_intake.classifiers.engine import build_engine
from budget_intake.core.db import DBHelper
from budget_intake.core.models import (
    BestDuplicateRequest,
    BudgetEntry,
    BudgetItemsRequest,
    CategorizationRule,
    DocumentKind,
    DuplicateMatch,
    DuplicateRequest,
    DuplicateVerdict,
    ExportRequest,
    HealthScoreRequest,
    HealthScoreResponse,
    JobStatus,
    Receipt,
    ReceiptParseRequest,
    ScoreHistoryEntry,
    StatementParseRequest,
    StatementParseResult,
)
from budget_intake.core.settings import Settings
from budget_intake.core.utils import get_logger
from budget_intake.parsers.adapters import normalize_buckets, transactions_to_budget_items
from budget_intake.parsers.receipt_parser import apply_category_rules, parse_receipt_text
from budget_intake.parsers.statement_parser import parse_statement_text
from budget_intake.scoring.health_score import calculate_health_score
from budget_intake.scoring.history import append_score_history, history_entry
from budget_intake.scoring.totals import compute_totals
from budget_intake.services.duplicate_detector import best_duplicate_match, detect_duplicate
from budget_intake.services.extraction import detect_mime_kind
from budget_intake.services.file_service import FileService
from budget_intake.services.receipt_export import receipts_to_csv
from budget_intake.services.stores import HistoryStore, RuleStore
from budget_intake.workers.job_runner import run_job

router = APIRouter()
logger = get_logger("budget-intake.api")


@router.post(
    "/statements/parse",
    response_model=StatementParseResult,
    summary="Parse bank or card statement text",
    description=(
        "Parse pasted or extracted statement text into signed, categorized transactions.\n\n"
        "Lines may be tabular (columns separated by tabs or two or more spaces) or single-line "
        "(date, description and amounts run together). Header lines are skipped. Lines that cannot "
        "be parsed are reported in `errors`; the request never fails because of bad lines.\n\n"
        "**Body:** `{ text, year? }` where `year` completes the MM/DD dates (default: current year).\n\n"
        "**Response:** `{ transactions, errors, summary }`. Credits carry negative amounts."
    ),
    response_description="Parsed transactions, per-line errors and a summary.",
    responses={
        200: {
            "description": "Statement parsed.",
            "content": {
                "application/json": {
                    "example": {
                        "transactions": [
                            {
                                "id": "stmt-3f9a1c0d2b7e",
                                "date": "2024-05-03",
                                "merchant": "Starbucks Store",
                                "transactionType": "Purchase",
                                "amount": 6.45,
                                "categoryKey": "food",
                                "categoryLabel": "Food",
                                "rawLine": "05/03  Purchase authorized on 05/02 Starbucks Store  6.45",
                            }
                        ],
                        "errors": [],
                        "summary": {"totalTransactions": 1, "totalAmount": 6.45, "categories": ["Food"]},
                    }
                }
            },
        },
    },
)
async def parse_statement(
    body: StatementParseRequest,
    rules: RuleStore = Depends(get_rule_store),
    settings: Settings = Depends(get_app_settings),
) -> StatementParseResult:
    """Parse statement text with the stored categorization rules."""
    engine = build_engine(rules.load(), order=settings.classifier_order)
    return parse_statement_text(body.text, body.year or settings.fiscal_year, engine)


@router.post(
    "/statements/budget-items",
    response_model=list[BudgetEntry],
    summary="Convert parsed transactions into budget items",
    description=(
        "Turn transactions returned by `/statements/parse` into pending budget items, each paired "
        "with the bucket it belongs to. Estimated and actual cost are both the absolute amount."
    ),
    response_description="Budget items with their bucket keys.",
)
async def statement_budget_items(body: BudgetItemsRequest) -> list[BudgetEntry]:
    """Convert transactions into budget entries."""
    return transactions_to_budget_items(body.transactions)


@router.post(
    "/receipts/parse",
    response_model=Receipt,
    summary="Parse receipt text",
    description=(
        "Extract merchant, date, totals and line items from the OCR text of a single receipt and "
        "categorize it with the stored rules. `filename` is used as a fallback source of the merchant, "
        "date and total. `explicitCategory` forces the bucket when it names a known one."
    ),
    response_description="A categorized receipt.",
)
async def parse_receipt(body: ReceiptParseRequest, rules: RuleStore = Depends(get_rule_store)) -> Receipt:
    """Parse one receipt, applying an explicit category when given."""
    rule_list = rules.load()
    receipt = parse_receipt_text(body.text, body.filename, rules=rule_list)
    if body.explicit_category:
        receipt = apply_category_rules(receipt, rule_list, body.explicit_category)
    return receipt


@router.post(
    "/receipts/duplicates",
    response_model=DuplicateVerdict,
    summary="Compare two receipts",
    description=(
        "Classify `incoming` against `existing`: **exact** when merchant, date and total agree, "
        "**near** when merchant and total agree, otherwise no match. Totals match within the "
        "configured tolerance (default $0.50)."
    ),
    response_description="Duplicate verdict.",
    responses={
        200: {
            "description": "Verdict computed.",
            "content": {
                "application/json": {
                    "example": {
                        "exact": True,
                        "near": True,
                        "score": 1.0,
                        "reason": "Exact match (merchant, date, total)",
                    }
                }
            },
        },
    },
)
async def check_duplicate(
    body: DuplicateRequest, settings: Settings = Depends(get_app_settings)
) -> DuplicateVerdict:
    """Compare an incoming receipt against an existing one."""
    return detect_duplicate(body.existing, body.incoming, settings.duplicate_total_tolerance)


@router.post(
    "/receipts/duplicates/best",
    response_model=DuplicateMatch | None,
    summary="Find the strongest duplicate among stored receipts",
    description="Return the existing receipt that best matches `incoming` with its verdict, or null.",
    response_description="Best match or null.",
)
async def best_duplicate(
    body: BestDuplicateRequest, settings: Settings = Depends(get_app_settings)
) -> DuplicateMatch | None:
    """Find the best duplicate match in a list of receipts."""
    match = best_duplicate_match(body.existing, body.incoming, settings.duplicate_total_tolerance)
    if match is None:
        return None
    receipt, verdict = match
    return DuplicateMatch(receipt=receipt, verdict=verdict)


@router.post(
    "/receipts/export-csv",
    response_class=StreamingResponse,
    summary="Export receipts as CSV",
    description=(
        "Render receipts as CSV with the columns "
        "`merchant,date,currency,subtotal,tax,total,items_count,categories,items_json`."
    ),
    response_description="CSV file.",
    responses={200: {"description": "CSV file download.", "content": {"text/csv": {}}}},
)
async def export_receipts(body: ExportRequest) -> StreamingResponse:
    """Export receipts to CSV."""
    data = receipts_to_csv(body.receipts).encode("utf-8")
    return StreamingResponse(
        io.BytesIO(data),
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=receipts.csv"},
    )


@router.get(
    "/rules",
    response_model=list[CategorizationRule],
    summary="List categorization rules",
    description="Return the user's ordered categorization rule list.",
    response_description="Rules in evaluation order.",
)
async def list_rules(rules: RuleStore = Depends(get_rule_store)) -> list[CategorizationRule]:
    """Return the stored rules."""
    return rules.load()


@router.put(
    "/rules",
    response_model=list[CategorizationRule],
    summary="Replace categorization rules",
    description=(
        "Replace the whole rule list. Keyword rules are `{ match, category }`; merchant defaults are "
        "`{ merchant, defaultCategory }`. Order matters: the first matching keyword rule wins."
    ),
    response_description="The saved rules.",
)
async def replace_rules(
    body: list[CategorizationRule], rules: RuleStore = Depends(get_rule_store)
) -> list[CategorizationRule]:
    """Replace the stored rules."""
    return rules.replace(body)


@router.post(
    "/health-score",
    response_model=HealthScoreResponse,
    summary="Compute the financial health score of a budget",
    description=(
        "Normalize the budget rows, compute totals and the weighted 0-100 health score, then record "
        "today's score in the history log (one entry per day, trailing window).\n\n"
        "**Body:** `{ buckets: { <bucketKey>: [ <budget row>, ... ] } }`. Rows may use the current "
        "or the legacy (`actualSpent`) shape."
    ),
    response_description="Score result, totals and the updated history log.",
)
async def health_score(
    body: HealthScoreRequest,
    history: HistoryStore = Depends(get_history_store),
    settings: Settings = Depends(get_app_settings),
) -> HealthScoreResponse:
    """Score a budget and append the result to the history log."""
    buckets = normalize_buckets(body.buckets)
    totals = compute_totals(buckets)
    result = calculate_health_score(totals, buckets)
    log = append_score_history(
        history.load(), history_entry(result.overall_score), days=settings.score_history_days
    )
    history.save(log)
    return HealthScoreResponse(result=result, totals=totals, history=log)


@router.get(
    "/health-score/history",
    response_model=list[ScoreHistoryEntry],
    summary="Score history",
    description="Return the persisted score history log ordered by date.",
    response_description="History entries.",
)
async def health_score_history(history: HistoryStore = Depends(get_history_store)) -> list[ScoreHistoryEntry]:
    """Return the score history log."""
    return history.load()


@router.post(
    "/documents/upload",
    status_code=202,
    summary="Upload a statement or receipt and start an ingestion job",
    description=(
        "Upload a PDF, image or text file. The server stores it and starts a background job that "
        "extracts the text (pdfplumber for PDFs, Tesseract OCR for images), parses and categorizes "
        "it, and writes the result as CSV.\n\n"
        "**Request:**\n"
        "- Content-Type: multipart/form-data\n"
        "- Form field: `file`\n"
        "- Query: `kind` = `statement` (default) or `receipt`\n\n"
        "**Response:**\n"
        "- 202 Accepted: `{ 'job_id': '<uuid>' }`.\n"
        "- 400 Bad Request: If the file type is not supported."
    ),
    response_description="Job accepted. Returns job_id.",
    responses={
        202: {
            "description": "Job accepted. Returns job_id.",
            "content": {"application/json": {"example": {"job_id": "123e4567-e89b-12d3-a456-426614174000"}}},
        },
        400: {
            "description": "Unsupported file type.",
            "content": {"application/json": {"example": {"detail": "Unsupported file type"}}},
        },
    },
)
async def upload_document(
    background_tasks: BackgroundTasks,
    file: UploadFile,
    kind: DocumentKind = "statement",
    db: DBHelper = Depends(get_db_conn),
    file_service: FileService = Depends(get_file_service),
    settings: Settings = Depends(get_app_settings),
) -> JSONResponse:
    """Store an uploaded document and start an ingestion job."""
    filename = file.filename or ""
    logger.info(f"Received upload request: filename={filename}, kind={kind}")
    if detect_mime_kind(filename, file.content_type) == "unknown":
        logger.warning(f"Rejected file (unsupported type): {filename}")
        raise HTTPException(400, "Unsupported file type")
    try:
        data = await file.read()
        job_id, in_key, out_key = file_service.save_upload(filename, data)
        db.create_job(job_id, kind, in_key, out_key)
        background_tasks.add_task(
            run_job, job_id, kind, in_key, out_key, filename, file.content_type, file_service, settings
        )
        logger.info(f"Background job started: job_id={job_id}")
        return JSONResponse({"job_id": job_id}, status_code=202)
    except Exception:
        logger.exception("Error in upload_document")
        raise


@router.get(
    "/status/{job_id}",
    response_model=JobStatus,
    summary="Get ingestion job status",
    description=(
        "Check the status of an ingestion job by job_id.\n\n"
        "**Response:**\n"
        "- 200 OK: status (`pending`, `in_progress`, `completed`, `error`), kind, timestamps and any "
        "error or warning.\n"
        "- 404 Not Found: If the job_id does not exist."
    ),
    response_description="Job status and metadata.",
    responses={
        200: {
            "description": "Job found.",
            "content": {
                "application/json": {
                    "example": {
                        "status": "completed",
                        "kind": "statement",
                        "created_at": "2025-05-18T10:30:49Z",
                        "completed_at": "2025-05-18T10:31:10Z",
                        "error": None,
                    }
                }
            },
        },
        404: {
            "description": "Job not found.",
            "content": {"application/json": {"example": {"detail": "Job not found"}}},
        },
    },
)
async def get_status(job_id: str, db: DBHelper = Depends(get_db_conn)) -> dict:
    """Get the status of a job."""
    row = db.get_job_status(job_id)
    if not row:
        raise HTTPException(404, "Job not found")
    return row


@router.get(
    "/download/{job_id}",
    response_class=StreamingResponse,
    summary="Download the CSV output of a completed job",
    description=(
        "Download the CSV produced by a completed ingestion job.\n\n"
        "**Response:**\n"
        "- 200 OK: The CSV file as an attachment.\n"
        "- 404 Not Found: If the job is not complete or does not exist."
    ),
    response_description="CSV file.",
    responses={
        200: {"description": "CSV file download."},
        404: {
            "description": "Job not found or not complete.",
            "content": {"application/json": {"example": {"detail": "Job not found"}}},
        },
    },
)
async def download(
    job_id: str,
    db: DBHelper = Depends(get_db_conn),
    file_service: FileService = Depends(get_file_service),
) -> StreamingResponse:
    """Download the CSV output of a completed job."""
    out_key = db.get_job_output_path(job_id)
    if not out_key:
        raise HTTPException(404, "Job not found")
    try:
        data = file_service.get_file(out_key)
    except KeyError as exc:
        raise HTTPException(404, "Output file missing in storage") from exc
    return StreamingResponse(
        io.BytesIO(data),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=intake_{job_id}.csv"},
    )


@router.get(
    "/health",
    summary="Health check",
    description="Simple health check endpoint. Returns status ok.",
    response_description="Status ok.",
    responses={200: {"description": "API is healthy.", "content": {"application/json": {"example": {"status": "ok"}}}}},
)
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}

