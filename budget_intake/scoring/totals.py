"""Budget totals: income, expenses and per-bucket sums from a bucket map."""

from collections.abc import Iterable, Mapping

from budget_intake.core.buckets import BucketKey
from budget_intake.core.models import BucketTotals, BudgetItem, BudgetTotals

BucketMap = Mapping[str, Iterable[BudgetItem]]


def active_items(buckets: BucketMap, key: str) -> list[BudgetItem]:
    """Items of one bucket, leaving out archived ones."""
    return [item for item in buckets.get(key, None) or [] if not item.archived]


def _bucket_totals(items: list[BudgetItem]) -> BucketTotals:
    est = sum(item.est_budget for item in items)
    actual = sum(item.actual_cost for item in items)
    return BucketTotals(
        est=round(est, 2),
        actual=round(actual, 2),
        diff=round(actual - est, 2),
        pending=sum(1 for item in items if item.status == "pending"),
        paid=sum(1 for item in items if item.status == "paid"),
    )


def compute_totals(buckets: BucketMap) -> BudgetTotals:
    """Sum estimated income against estimated spending in every other bucket."""
    by_bucket = {str(key): _bucket_totals(active_items(buckets, key)) for key in buckets}
    income = by_bucket.get(BucketKey.INCOME.value, BucketTotals()).est
    expenses = sum(t.est for key, t in by_bucket.items() if key != BucketKey.INCOME.value)
    grand = BucketTotals(
        est=round(sum(t.est for t in by_bucket.values()), 2),
        actual=round(sum(t.actual for t in by_bucket.values()), 2),
        pending=sum(t.pending for t in by_bucket.values()),
        paid=sum(t.paid for t in by_bucket.values()),
    )
    grand.diff = round(grand.actual - grand.est, 2)
    return BudgetTotals(
        total_income=round(income, 2),
        total_expenses=round(expenses, 2),
        net_income=round(income - expenses, 2),
        totals_by_bucket=by_bucket,
        grand=grand,
    )
