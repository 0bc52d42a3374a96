"""Merchant, amount and date extraction heuristics.

Shared by the statement line parser and the standalone receipt-text parser. Statement text is
noisy in predictable ways (authorization dates, masked cards, reference numbers) and receipts print
their largest figure as the total, so both paths lean on the same regex toolkit.
"""

import re
from collections.abc import Sequence
from datetime import date

from budget_intake.classifiers.strategies import VendorTableClassifier
from budget_intake.classifiers.vendors import VENDOR_TABLE
from budget_intake.core.models import VendorEntry
from budget_intake.core.text import collapse_spaces, title_case
from budget_intake.core.utils import today_iso

UNKNOWN_MERCHANT = "Unknown Merchant"
DEFAULT_TRANSACTION_TYPE = "Purchase"
MERCHANT_MAX_WORDS = 5

# Checked in order; multi-word phrases precede the single words they contain.
TRANSACTION_KEYWORDS: tuple[str, ...] = (
    "recurring payment",
    "monthly service fee",
    "maintenance fee",
    "overdraft fee",
    "service fee",
    "purchase return",
    "purchase",
    "payment",
    "refund",
    "withdrawal",
    "deposit",
    "transfer",
    "atm",
    "debit",
    "credit",
    "zelle",
)
# Plural, past-tense and -ing forms ("Refunds", "Credited", "Transferred") count as the keyword.
INFLECTION = r"(?:s|es|d|[a-z]?ed|[a-z]?ing)?"


def keyword_pattern(keyword: str) -> re.Pattern[str]:
    """Whole-word pattern for a keyword, allowing inflected endings."""
    return re.compile(rf"\b{re.escape(keyword)}{INFLECTION}\b", re.IGNORECASE)


_KEYWORD_PATTERNS = [(kw, keyword_pattern(kw)) for kw in TRANSACTION_KEYWORDS]

_NOISE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"Authorized On \d{1,2}/\d{1,2}", re.IGNORECASE),
    re.compile(r"Posted On \d{1,2}/\d{1,2}", re.IGNORECASE),
    re.compile(r"(?:[X*]{4}[\s-]?){1,3}\d{4}", re.IGNORECASE),
    re.compile(r"\bCard\s+\d{4}\b", re.IGNORECASE),
    re.compile(r"\b(?=[A-Za-z]*\d)[A-Za-z0-9]{12,}\b"),
    re.compile(r"\(?\b\d{3}\)?[\s.-]?\d{3}-\d{4}\b"),
    re.compile(r"\bRef(?:erence)?\s*(?:#|No\.?|Number)\s*:?\s*\w+", re.IGNORECASE),
    re.compile(r"\bATM ID\s*\w+", re.IGNORECASE),
    re.compile(r"\b[A-Z]{2}\b(?!\w)"),
)

STATEMENT_AMOUNT_RE = re.compile(r"(?<![\d,.])((?:\d{1,3}(?:,\d{3})+|\d{1,10})\.\d{2})(?!\d)")
MONEY_RE = re.compile(r"(USD|US\$|\$)?\s*\(?(?<![\d,.])(-?(?:\d{1,3}(?:,\d{3})+|\d+)(\.\d{2})?)\)?(?!\d)")
TAX_RE = re.compile(r"\b(?:tax|vat)\b[:\s]+\$?\s*(\d+(?:\.\d{1,2})?)(?![\d.%])", re.IGNORECASE)
CAPITALIZED_PHRASE_RE = re.compile(r"\b([A-Z][A-Z&.\- ]{2,})\b")
_EXTENSION_RE = re.compile(r"\.[A-Za-z0-9]+$")
_HAS_LETTER_RE = re.compile(r"[A-Za-z]")

_MONTHS = {
    "january": 1, "jan": 1, "february": 2, "feb": 2, "march": 3, "mar": 3, "april": 4, "apr": 4,
    "may": 5, "june": 6, "jun": 6, "july": 7, "jul": 7, "august": 8, "aug": 8,
    "september": 9, "sept": 9, "sep": 9, "october": 10, "oct": 10, "november": 11, "nov": 11,
    "december": 12, "dec": 12,
}  # fmt: skip
ISO_DATE_RE = re.compile(r"(?<!\d)(20\d{2})[-_/.](0?[1-9]|1[0-2])[-_/.](0?[1-9]|[12]\d|3[01])(?!\d)")
US_DATE_RE = re.compile(r"(?<!\d)(0?[1-9]|1[0-2])[-/](0?[1-9]|[12]\d|3[01])[-/](20\d{2})(?!\d)")
MONTH_NAME_DATE_RE = re.compile(
    rf"\b({'|'.join(_MONTHS)})\.?\s+([0-3]?\d)(?:st|nd|rd|th)?,?\s+(20\d{{2}})\b",
    re.IGNORECASE,
)


def detect_transaction_type(text: str) -> tuple[str, str | None]:
    """Return the title-cased transaction type and the keyword that produced it."""
    for keyword, pattern in _KEYWORD_PATTERNS:
        if pattern.search(text):
            return title_case(keyword), keyword
    return DEFAULT_TRANSACTION_TYPE, None


def strip_statement_noise(text: str) -> str:
    """Remove authorization dates, card numbers, ids, phone numbers, state codes and references."""
    cleaned = text
    for pattern in _NOISE_PATTERNS:
        cleaned = pattern.sub(" ", cleaned)
    return collapse_spaces(cleaned)


def extract_merchant(text: str, type_keyword: str | None = None) -> str:
    """Isolate the merchant name from a statement description."""
    cleaned = strip_statement_noise(text)
    if type_keyword:
        cleaned = keyword_pattern(type_keyword).sub(" ", cleaned)
    words = [w for w in collapse_spaces(cleaned).split(" ") if len(w) > 1]
    return " ".join(words[:MERCHANT_MAX_WORDS]) or UNKNOWN_MERCHANT


def find_statement_amounts(text: str) -> list[float]:
    """Every positive two-decimal amount in the text, comma grouping allowed."""
    amounts = [float(m.group(1).replace(",", "")) for m in STATEMENT_AMOUNT_RE.finditer(text)]
    return [a for a in amounts if a > 0]


def remove_statement_amounts(text: str) -> str:
    """Drop amount tokens so they do not leak into the merchant name."""
    return collapse_spaces(STATEMENT_AMOUNT_RE.sub(" ", text))


def parse_money(token: str) -> float:
    """Convert a money token like ``(1,234.56)`` or ``-12.00`` to its absolute value."""
    cleaned = re.sub(r"[()$,\s-]|USD|US", "", token)
    try:
        return abs(float(cleaned))
    except ValueError:
        return 0.0


def find_money_values(source: str) -> list[float]:
    """Money-like tokens: a currency marker or exactly two fraction digits is required."""
    values = []
    for match in MONEY_RE.finditer(source):
        currency, number, fraction = match.groups()
        if not currency and not fraction:
            continue
        value = parse_money(number)
        if value > 0:
            values.append(value)
    return values


def find_receipt_total(text: str, filename: str = "") -> float:
    """The largest money value found in the filename and text, or 0."""
    values = find_money_values(f"{filename}\n{text}")
    return max(values) if values else 0.0


def find_tax(text: str) -> float:
    """The first amount labelled tax or VAT, or 0."""
    match = TAX_RE.search(text)
    return parse_money(match.group(1)) if match else 0.0


def _safe_iso(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def find_date(text: str, filename: str = "", today: date | None = None) -> str:
    """Find a date as ISO, US slash/dash or month-name form; default to today."""
    source = f"{filename}\n{text}"
    for match in ISO_DATE_RE.finditer(source):
        found = _safe_iso(int(match.group(1)), int(match.group(2)), int(match.group(3)))
        if found:
            return found
    for match in US_DATE_RE.finditer(source):
        found = _safe_iso(int(match.group(3)), int(match.group(1)), int(match.group(2)))
        if found:
            return found
    for match in MONTH_NAME_DATE_RE.finditer(source):
        month = _MONTHS[match.group(1).lower()]
        found = _safe_iso(int(match.group(3)), month, int(match.group(2)))
        if found:
            return found
    return today_iso(today)


def filename_stem(filename: str) -> str:
    """Filename without its extension."""
    return _EXTENSION_RE.sub("", filename or "")


def extract_receipt_merchant(text: str, filename: str = "", vendors: Sequence[VendorEntry] = VENDOR_TABLE) -> str:
    """Pick a receipt merchant: known vendor, then a capitalized phrase, then the first usable line."""
    stem = filename_stem(filename)
    source = strip_statement_noise(f"{text}\n{stem}")
    vendor = VendorTableClassifier(vendors).find_vendor(source)
    if vendor:
        return vendor.label
    for line in (text or "").splitlines():
        cleaned = strip_statement_noise(line)
        cap = CAPITALIZED_PHRASE_RE.search(cleaned)
        if cap:
            words = cap.group(1).split()[:MERCHANT_MAX_WORDS]
            return title_case(" ".join(words))
    for line in [*(text or "").splitlines(), stem.replace("_", " ")]:
        merchant = extract_merchant(remove_statement_amounts(line))
        if merchant != UNKNOWN_MERCHANT and _HAS_LETTER_RE.search(merchant):
            return merchant
    return UNKNOWN_MERCHANT
