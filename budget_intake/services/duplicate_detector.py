"""Duplicate receipt detection: exact / near / none by merchant, total and date."""

from collections.abc import Iterable

from budget_intake.core.models import DuplicateVerdict, Receipt
from budget_intake.core.text import normalize_merchant_name, normalize_text

TOTAL_TOLERANCE = 0.50
EXACT_SCORE = 1.0
NEAR_SCORE = 0.7


def _merchant_key(receipt: Receipt) -> str:
    return normalize_text(normalize_merchant_name(receipt.merchant))


def detect_duplicate(existing: Receipt, incoming: Receipt, tolerance: float = TOTAL_TOLERANCE) -> DuplicateVerdict:
    """Classify ``incoming`` against ``existing``.

    Same merchant and totals within the tolerance is a near match; the same date on top of that
    makes it exact. An exact match is always near as well.
    """
    same_merchant = _merchant_key(existing) == _merchant_key(incoming)
    same_total = round(abs(existing.total - incoming.total), 2) <= tolerance
    same_date = existing.date == incoming.date
    near = same_merchant and same_total
    exact = near and same_date
    if exact:
        return DuplicateVerdict(exact=True, near=True, score=EXACT_SCORE, reason="Exact match (merchant, date, total)")
    if near:
        return DuplicateVerdict(exact=False, near=True, score=NEAR_SCORE, reason="Near match (merchant + total)")
    return DuplicateVerdict()


def best_duplicate_match(
    existing: Iterable[Receipt], incoming: Receipt, tolerance: float = TOTAL_TOLERANCE
) -> tuple[Receipt, DuplicateVerdict] | None:
    """The existing receipt with the strongest match, or None when nothing matches."""
    best: tuple[Receipt, DuplicateVerdict] | None = None
    for receipt in existing:
        verdict = detect_duplicate(receipt, incoming, tolerance)
        if verdict.score > 0 and (best is None or verdict.score > best[1].score):
            best = (receipt, verdict)
            if verdict.exact:
                break
    return best
