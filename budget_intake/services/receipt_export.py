"""CSV export of receipts, one row per receipt."""

import json
from collections.abc import Iterable

import pandas as pd

from budget_intake.core.models import Receipt

CSV_COLUMNS = [
    "merchant",
    "date",
    "currency",
    "subtotal",
    "tax",
    "total",
    "items_count",
    "categories",
    "items_json",
]


def _categories(receipt: Receipt) -> str:
    """Unique lowercase item categories, pipe-delimited, in first-seen order."""
    cats = [item.category.lower() for item in receipt.items if item.category]
    return "|".join(dict.fromkeys(cats))


def receipt_row(receipt: Receipt) -> dict[str, object]:
    """Flatten a receipt into the export columns; money fields are fixed to 2 decimals."""
    items = [item.model_dump(by_alias=True) for item in receipt.items]
    return {
        "merchant": receipt.merchant,
        "date": receipt.date,
        "currency": receipt.currency or "USD",
        "subtotal": f"{receipt.subtotal:.2f}",
        "tax": f"{receipt.tax:.2f}",
        "total": f"{receipt.total:.2f}",
        "items_count": len(items),
        "categories": _categories(receipt),
        "items_json": json.dumps(items, separators=(",", ":")),
    }


def receipts_to_csv(receipts: Iterable[Receipt]) -> str:
    """Render receipts as CSV text; fields holding a comma, quote or newline are quoted."""
    data_frame = pd.DataFrame([receipt_row(r) for r in receipts], columns=CSV_COLUMNS)
    return data_frame.to_csv(index=False, lineterminator="\n").rstrip("\n")
