"""Background job orchestration for document ingestion.

A job takes an uploaded statement or receipt, extracts its text, parses and categorizes it against
the stored rule list, and writes the result as CSV next to the upload.
"""

import asyncio

import pandas as pd

from budget_intake.classifiers.engine import build_engine
from budget_intake.core.db import DBHelper, get_db
from budget_intake.core.settings import Settings
from budget_intake.core.utils import get_logger
from budget_intake.parsers.receipt_parser import parse_receipt_text
from budget_intake.parsers.statement_parser import parse_statement_text
from budget_intake.services.extraction import extract_document_text
from budget_intake.services.file_service import FileService
from budget_intake.services.receipt_export import receipts_to_csv
from budget_intake.services.stores import RuleStore

logger = get_logger("budget-intake.worker")

TRANSACTION_COLUMNS = [
    "id",
    "date",
    "merchant",
    "transactionType",
    "amount",
    "categoryKey",
    "categoryLabel",
    "rawLine",
]


class JobRunner:
    """JobRunner executes ingestion jobs against a file service and the jobs table."""

    def __init__(self, file_service: FileService, settings: Settings, db: DBHelper | None = None) -> None:
        """Initialize JobRunner with storage, settings and a DB helper."""
        self.file_service = file_service
        self.settings = settings
        self.db = db or get_db()

    def _statement_csv(self, text: str, rules: list) -> tuple[str, str | None]:
        engine = build_engine(rules, order=self.settings.classifier_order)
        result = parse_statement_text(text, self.settings.fiscal_year, engine)
        rows = [t.model_dump(by_alias=True, mode="json") for t in result.transactions]
        logger.info(f"Statement parsed: {result.summary.total_transactions} transactions, {len(result.errors)} errors")
        note = f"{len(result.errors)} lines skipped" if result.errors else None
        return pd.DataFrame(rows, columns=TRANSACTION_COLUMNS).to_csv(index=False), note

    def _receipt_csv(self, text: str, filename: str, rules: list) -> str:
        engine = build_engine(rules, order=self.settings.classifier_order)
        receipt = parse_receipt_text(text, filename, engine=engine)
        return receipts_to_csv([receipt])

    def run_job(
        self, job_id: str, kind: str, input_key: str, output_key: str, filename: str, content_type: str | None
    ) -> None:
        """Run one ingestion job, recording completion or the failure on the job row."""
        logger.info(f"Starting job: {job_id} ({kind}), input: {input_key}, output: {output_key}")
        try:
            self.db.set_job_status(job_id, "in_progress")
            try:
                data = self.file_service.get_file(input_key)
                document = asyncio.run(
                    extract_document_text(
                        filename,
                        data,
                        content_type,
                        self.settings,
                        on_progress=lambda fraction: logger.debug(f"Job {job_id}: extracted {fraction:.0%} of pages"),
                    )
                )
                rules = RuleStore(self.db.session).load()
                note = document.warning
                if kind == "receipt":
                    output = self._receipt_csv(document.text, filename, rules)
                else:
                    output, skipped = self._statement_csv(document.text, rules)
                    note = note or skipped
                self.file_service.save_file(output_key, output)
                logger.info(f"Uploaded output CSV to {output_key}")
                self.db.set_job_status(job_id, "completed", error=note)
            except Exception as exc:
                logger.exception(f"Error processing job {job_id}")
                self.db.set_job_status(job_id, "error", error=str(exc))
        finally:
            self.db.close()


def run_job(
    job_id: str,
    kind: str,
    input_key: str,
    output_key: str,
    filename: str,
    content_type: str | None,
    file_service: FileService,
    settings: Settings,
) -> None:
    """Top-level function to run a job using JobRunner (for background tasks)."""
    runner = JobRunner(file_service, settings)
    runner.run_job(job_id, kind, input_key, output_key, filename, content_type)
