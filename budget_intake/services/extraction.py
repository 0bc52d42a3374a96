"""Text extraction adapter: uploaded statement/receipt files -> raw text.

PDFs go through pdfplumber, images through Tesseract (pytesseract + Pillow), and plain text is
decoded as-is. The blocking work runs in a worker thread so callers await it and may cancel the
awaiting task. ``extract_document_text`` is the boundary used by the rest of the service: it never
raises, and a failed extraction comes back as an empty document carrying a warning.
"""

import asyncio
import io
from collections.abc import Callable
from pathlib import Path

import pdfplumber
import pytesseract
from PIL import Image

from budget_intake.core.models import RawDocument
from budget_intake.core.settings import Settings, get_settings
from budget_intake.core.utils import get_logger

logger = get_logger("budget-intake.extraction")

EXTRACTION_FAILED = "could not extract text"
IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tif", ".tiff", ".webp"}
TEXT_SUFFIXES = {".txt", ".csv", ".text"}

ProgressCallback = Callable[[float], None]


class ExtractionError(RuntimeError):
    """The file could not be turned into text."""


def detect_mime_kind(filename: str, content_type: str | None = None) -> str:
    """Classify an upload as ``pdf``, ``image``, ``text`` or ``unknown``."""
    content_type = (content_type or "").lower()
    suffix = Path(filename or "").suffix.lower()
    if "pdf" in content_type or suffix == ".pdf":
        return "pdf"
    if content_type.startswith("image/") or suffix in IMAGE_SUFFIXES:
        return "image"
    if content_type.startswith("text/") or suffix in TEXT_SUFFIXES:
        return "text"
    return "unknown"


def pdf_to_text(data: bytes, max_pages: int, on_progress: ProgressCallback | None = None) -> str:
    """Extract the text layer of the first ``max_pages`` pages."""
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            pages = pdf.pages[:max_pages]
            chunks = []
            for index, page in enumerate(pages, start=1):
                chunks.append(page.extract_text() or "")
                if on_progress:
                    on_progress(index / len(pages))
    except Exception as exc:
        msg = f"PDF text extraction failed: {exc}"
        raise ExtractionError(msg) from exc
    return "\n".join(chunks)


def image_to_text(data: bytes, language: str = "eng", tesseract_cmd: str | None = None) -> str:
    """OCR an image with Tesseract."""
    if tesseract_cmd:
        pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
    try:
        with Image.open(io.BytesIO(data)) as image:
            return pytesseract.image_to_string(image, lang=language)
    except Exception as exc:
        msg = f"Image OCR failed: {exc}"
        raise ExtractionError(msg) from exc


def _extract_sync(
    data: bytes, mime_kind: str, settings: Settings, on_progress: ProgressCallback | None
) -> str:
    if mime_kind == "pdf":
        return pdf_to_text(data, settings.pdf_max_pages, on_progress)
    if mime_kind == "image":
        return image_to_text(data, settings.ocr_language, settings.tesseract_cmd)
    if mime_kind == "text":
        return data.decode("utf-8", errors="replace")
    msg = f"Unsupported document type: {mime_kind}"
    raise ExtractionError(msg)


async def extract_text(
    filename: str,
    data: bytes,
    content_type: str | None = None,
    settings: Settings | None = None,
    on_progress: ProgressCallback | None = None,
) -> RawDocument:
    """Extract text from a file; raises ExtractionError on failure."""
    settings = settings or get_settings()
    mime_kind = detect_mime_kind(filename, content_type)
    logger.info(f"Extracting text from '{filename}' ({mime_kind}, {len(data)} bytes)")
    text = await asyncio.to_thread(_extract_sync, data, mime_kind, settings, on_progress)
    return RawDocument(text=text, filename=filename, mime_kind=mime_kind)


async def extract_document_text(
    filename: str,
    data: bytes,
    content_type: str | None = None,
    settings: Settings | None = None,
    on_progress: ProgressCallback | None = None,
) -> RawDocument:
    """Extract text, degrading to an empty document with a warning when extraction fails."""
    try:
        document = await extract_text(filename, data, content_type, settings, on_progress)
    except ExtractionError as exc:
        logger.warning(f"{EXTRACTION_FAILED} from '{filename}': {exc}")
        return RawDocument(
            filename=filename, mime_kind=detect_mime_kind(filename, content_type), warning=EXTRACTION_FAILED
        )
    if not document.text.strip():
        logger.warning(f"{EXTRACTION_FAILED} from '{filename}': empty result")
        return document.model_copy(update={"warning": EXTRACTION_FAILED})
    return document
