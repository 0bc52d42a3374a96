"""Adapters at the ingestion boundary.

Budget rows reach the service in a few known shapes: the current one, a legacy one that stored the
actual amount as ``actualSpent``, and the single-item output of the scanning adapter. Each shape is
a model of its own; ``normalize_budget_row`` decides the shape once and converts it to a
``BudgetItem`` so nothing downstream needs per-field fallbacks.
"""

import math
import re
import uuid
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError, field_validator

from budget_intake.core.buckets import BucketKey, resolve_bucket_key
from budget_intake.core.models import BudgetEntry, BudgetItem, CamelModel, ItemStatus, Transaction
from budget_intake.core.utils import get_logger

logger = get_logger("budget-intake.adapters")

SUBSCRIPTION_RE = re.compile(r"subscription", re.IGNORECASE)
MONEY_MARKS_RE = re.compile(r"[$,\s()]|USD", re.IGNORECASE)


def _new_item_id() -> str:
    return f"item-{uuid.uuid4().hex[:12]}"


def parse_magnitude(value: object) -> float:
    """Read a money value such as ``1200``, ``"$1,200.00"`` or ``"(45.10)"`` as a non-negative amount.

    Blanks count as zero; unreadable values are logged and count as zero too.
    """
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        amount = abs(float(value if isinstance(value, int | float) else MONEY_MARKS_RE.sub("", str(value)) or 0))
    except (TypeError, ValueError):
        amount = math.nan
    if not math.isfinite(amount):
        logger.warning(f"Unreadable amount {value!r}, counting it as 0")
        return 0.0
    return amount


class _RowShape(CamelModel):
    """Fields every raw row shape shares."""

    id: str | None = None
    category: str = ""
    est_budget: float = 0.0
    due_date: str = ""

    @field_validator("est_budget", "actual_cost", "actual_spent", mode="before", check_fields=False)
    @classmethod
    def _magnitude(cls, value: object) -> float:
        """Money fields are stored as non-negative magnitudes."""
        return parse_magnitude(value)

    @field_validator("category", "due_date", mode="before")
    @classmethod
    def _text(cls, value: object) -> str:
        return "" if value is None else str(value)

    @field_validator("status", mode="before", check_fields=False)
    @classmethod
    def _status(cls, value: object) -> object:
        return value or "pending"


class CurrentBudgetRow(_RowShape):
    """The current budget row shape."""

    actual_cost: float = 0.0
    status: ItemStatus = "pending"
    archived: bool = False
    note: str | None = ""

    def to_budget_item(self) -> BudgetItem:
        """Convert to a BudgetItem."""
        return BudgetItem(
            id=self.id or _new_item_id(),
            category=self.category,
            est_budget=self.est_budget,
            actual_cost=self.actual_cost,
            due_date=self.due_date,
            status=self.status,
            archived=self.archived,
            note=self.note or "",
        )


class LegacyBudgetRow(_RowShape):
    """Older rows that recorded the actual amount as ``actualSpent``."""

    actual_spent: float = 0.0
    status: ItemStatus = "pending"
    note: str | None = ""

    def to_budget_item(self) -> BudgetItem:
        """Convert to a BudgetItem, renaming actualSpent to actualCost."""
        return BudgetItem(
            id=self.id or _new_item_id(),
            category=self.category,
            est_budget=self.est_budget,
            actual_cost=self.actual_spent,
            due_date=self.due_date,
            status=self.status,
            note=self.note or "",
        )


class ScannedItemRow(_RowShape):
    """A single item produced by the document scanning adapter."""

    category_key: str = BucketKey.MISC.value
    category_label: str = ""
    bank_source: str = ""

    def to_budget_item(self) -> BudgetItem:
        """Convert to a pending BudgetItem whose actual cost is the scanned amount."""
        return BudgetItem(
            id=self.id or _new_item_id(),
            category=self.category or self.category_label,
            est_budget=self.est_budget,
            actual_cost=self.est_budget,
            due_date=self.due_date,
        )


RowShape = CurrentBudgetRow | LegacyBudgetRow | ScannedItemRow


def detect_row_shape(row: Mapping[str, Any]) -> type[RowShape]:
    """Decide which known shape a raw row has."""
    has_actual_cost = "actualCost" in row or "actual_cost" in row
    if not has_actual_cost and ("actualSpent" in row or "actual_spent" in row):
        return LegacyBudgetRow
    if not has_actual_cost and ("categoryKey" in row or "category_key" in row):
        return ScannedItemRow
    return CurrentBudgetRow


def normalize_budget_row(row: Mapping[str, Any]) -> BudgetItem:
    """Validate a raw row against its detected shape and convert it to a BudgetItem."""
    shape = detect_row_shape(row)
    return shape.model_validate(dict(row)).to_budget_item()


def normalize_buckets(raw: Mapping[str, Iterable[Any]] | None) -> dict[BucketKey, list[BudgetItem]]:
    """Normalize a raw bucket map into every known bucket, moving subscription rows to their bucket.

    Unknown bucket keys and rows that are not mappings are dropped with a warning.
    """
    buckets: dict[BucketKey, list[BudgetItem]] = {key: [] for key in BucketKey}
    for name, rows in (raw or {}).items():
        key = resolve_bucket_key(name)
        if key is None:
            logger.warning(f"Dropping unknown bucket '{name}'")
            continue
        for row in rows or []:
            if isinstance(row, BudgetItem):
                buckets[key].append(row)
            elif isinstance(row, Mapping):
                try:
                    buckets[key].append(normalize_budget_row(row))
                except ValidationError as exc:
                    logger.warning(f"Dropping invalid row in bucket '{name}': {exc.error_count()} field errors")
            else:
                logger.warning(f"Dropping malformed row in bucket '{name}': {row!r}")

    for key in BucketKey:
        if key is BucketKey.SUBSCRIPTIONS:
            continue
        keep = []
        for item in buckets[key]:
            if SUBSCRIPTION_RE.search(item.category):
                buckets[BucketKey.SUBSCRIPTIONS].append(item)
            else:
                keep.append(item)
        buckets[key] = keep
    return buckets


def transactions_to_budget_items(transactions: Iterable[Transaction]) -> list[BudgetEntry]:
    """Convert parsed transactions into pending budget items filed under their category."""
    return [
        BudgetEntry(
            category_key=t.category_key,
            item=BudgetItem(
                id=t.id,
                category=f"{t.merchant} - {t.transaction_type}",
                est_budget=abs(t.amount),
                actual_cost=abs(t.amount),
                due_date=t.date,
                status="pending",
            ),
        )
        for t in transactions
    ]
