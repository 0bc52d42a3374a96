"""Tests for receipt CSV export."""

import csv
import io
import json

from budget_intake.core.models import Receipt, ReceiptItem, ReceiptMeta
from budget_intake.services.receipt_export import CSV_COLUMNS, receipts_to_csv


def _receipt() -> Receipt:
    return Receipt(
        id="r-1",
        merchant="Joe's Diner, LLC",
        date="2024-05-01",
        subtotal=10,
        tax=0.8,
        total=10.8,
        items=[
            ReceiptItem(name="Burger", category="Food", price=8),
            ReceiptItem(name="Soda", category="food", price=2),
            ReceiptItem(name="Mug", category="Gifts", price=0),
        ],
        meta=ReceiptMeta(created_at="2024-05-01T12:00:00+00:00"),
    )


def test_export_columns_and_formatting() -> None:
    """Money is fixed to two decimals, categories are de-duplicated and items are embedded as JSON."""
    text = receipts_to_csv([_receipt()])
    if text.endswith("\n"):
        msg = "Expected no trailing newline"
        raise AssertionError(msg)
    rows = list(csv.DictReader(io.StringIO(text)))
    if list(rows[0]) != CSV_COLUMNS:
        msg = f"Unexpected header: {list(rows[0])}"
        raise AssertionError(msg)
    row = rows[0]
    actual = (row["merchant"], row["subtotal"], row["tax"], row["total"], row["items_count"], row["categories"])
    expected = ("Joe's Diner, LLC", "10.00", "0.80", "10.80", "3", "food|gifts")
    if actual != expected:
        msg = f"Expected {expected}, got {actual}"
        raise AssertionError(msg)
    items = json.loads(row["items_json"])
    if [item["name"] for item in items] != ["Burger", "Soda", "Mug"] or " " in row["items_json"]:
        msg = f"Unexpected items_json: {row['items_json']}"
        raise AssertionError(msg)


def test_export_of_no_receipts_is_header_only() -> None:
    """An empty export still carries the header."""
    if receipts_to_csv([]) != ",".join(CSV_COLUMNS):
        msg = f"Unexpected empty export: {receipts_to_csv([])!r}"
        raise AssertionError(msg)
