"""Standalone receipt-text parsing: OCR text of one receipt -> a categorized Receipt."""

import re
from collections.abc import Sequence
from datetime import date

from budget_intake.classifiers.engine import CategorizationEngine, build_engine
from budget_intake.core.models import CategorizationRule, Receipt, ReceiptItem, ReceiptMeta
from budget_intake.core.text import collapse_spaces, normalize_merchant_name, slugify
from budget_intake.core.utils import get_logger, round_half_up, utcnow_iso
from budget_intake.parsers.extractor import (
    extract_receipt_merchant,
    find_date,
    find_receipt_total,
    find_tax,
)

logger = get_logger("budget-intake.receipts")

ITEM_LINE_RE = re.compile(r"^(?P<name>[A-Za-z][^$\d]*?)\s+\$?(?P<price>\d+\.\d{2})\s*[A-Z]?$")
NON_ITEM_RE = re.compile(
    r"\b(sub-?total|total|tax|vat|change|cash|balance|tender|visa|mastercard|amex|debit|credit|tip)\b",
    re.IGNORECASE,
)


def extract_line_items(text: str) -> list[ReceiptItem]:
    """Lines shaped like ``<name> <price>`` that are not totals, tax or tender lines."""
    items = []
    for raw_line in text.splitlines():
        line = collapse_spaces(raw_line)
        if not line or NON_ITEM_RE.search(line):
            continue
        match = ITEM_LINE_RE.match(line)
        if match:
            items.append(ReceiptItem(name=match.group("name").strip(), price=float(match.group("price"))))
    return items


def receipt_id(merchant: str, date_iso: str, total: float) -> str:
    """Deterministic id from merchant, date and total in cents."""
    return f"r-{slugify(merchant)}-{date_iso}-{int(round_half_up(total * 100))}"


def parse_receipt_text(
    text: object,
    filename: str = "",
    rules: Sequence[CategorizationRule] | None = None,
    engine: CategorizationEngine | None = None,
    today: date | None = None,
    source: str = "ocr",
) -> Receipt:
    """Extract merchant, date, totals and line items from receipt text and categorize the result.

    Empty or non-string text degrades to an "Unknown Merchant" receipt dated today with a zero total.
    """
    body = (text if isinstance(text, str) else "").replace("\r", "")
    filename = filename or ""
    engine = engine or build_engine(rules)

    merchant = extract_receipt_merchant(body, filename)
    date_iso = find_date(body, filename, today)
    total = find_receipt_total(body, filename)
    tax = find_tax(body)
    items = extract_line_items(body)

    category = engine.categorize_fields(merchant, item_text=" ".join(item.name for item in items))
    logger.info(f"Parsed receipt: merchant='{merchant}' date={date_iso} total={total:.2f} -> {category.key}")
    return Receipt(
        id=receipt_id(merchant, date_iso, total),
        merchant=merchant,
        date=date_iso,
        subtotal=round(max(0.0, total - tax), 2),
        tax=tax,
        total=total,
        items=items,
        meta=ReceiptMeta(created_at=utcnow_iso(), source=source),
        category_key=category.key,
        category_label=category.label,
    )


def apply_category_rules(
    receipt: Receipt, rules: Sequence[CategorizationRule], explicit_category: str | None = None
) -> Receipt:
    """Re-normalize the merchant and re-resolve the receipt's category against a rule list."""
    merchant = normalize_merchant_name(receipt.merchant)
    engine = build_engine(rules)
    category = engine.categorize_fields(
        merchant,
        item_text=" ".join(item.name for item in receipt.items),
        explicit_category=explicit_category,
    )
    return receipt.model_copy(
        update={"merchant": merchant, "category_key": category.key, "category_label": category.label}
    )
