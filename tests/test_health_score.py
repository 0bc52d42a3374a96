"""Tests for budget totals and the financial health score."""

import math

from budget_intake.core.buckets import BucketKey
from budget_intake.parsers.adapters import normalize_buckets
from budget_intake.scoring.health_score import WEIGHTS, calculate_health_score, health_status
from budget_intake.scoring.totals import compute_totals


def _row(category: str, est: float, actual: float | None = None, **extra: object) -> dict:
    return {"category": category, "estBudget": est, "actualCost": est if actual is None else actual, **extra}


def _score(raw: dict):
    buckets = normalize_buckets(raw)
    totals = compute_totals(buckets)
    return totals, calculate_health_score(totals, buckets)


def test_weights_sum_to_one() -> None:
    """The five component weights add up to 1."""
    if math.fsum(WEIGHTS.values()) != 1.0:
        msg = f"Weights sum to {math.fsum(WEIGHTS.values())}"
        raise AssertionError(msg)


def test_zero_income_budget() -> None:
    """No income floors the ratio components and asks for income first."""
    totals, result = _score({"housing": [_row("Rent", 500)]})
    if totals.total_income != 0 or totals.total_expenses != 500:
        msg = f"Unexpected totals: {totals}"
        raise AssertionError(msg)
    if result.breakdown.income_expense_ratio.score != 0 or result.breakdown.savings_rate.score != 0:
        msg = f"Expected zeroed ratio components, got {result.breakdown}"
        raise AssertionError(msg)
    first = result.recommendations[0]
    if (first.priority, first.category) != ("high", "Income"):
        msg = f"Expected a high-priority income recommendation first, got {first}"
        raise AssertionError(msg)
    if result.metrics.expense_ratio != 0 or result.metrics.dti_ratio != 0:
        msg = f"Expected zero metrics without income, got {result.metrics}"
        raise AssertionError(msg)


def test_overspent_category() -> None:
    """Housing at 35% of income against a 30% ceiling scores about 67."""
    _, result = _score({"income": [_row("Salary", 2000)], "housing": [_row("Rent", 700)]})
    detail = result.category_breakdown["housing"]
    if (detail.status, detail.percentage, detail.score) != ("over", 35, 67):
        msg = f"Unexpected housing detail: {detail}"
        raise AssertionError(msg)
    if detail.recommended != "25-30%":
        msg = f"Unexpected recommended band: {detail.recommended}"
        raise AssertionError(msg)


def test_category_band_statuses() -> None:
    """Spend under the band floor is "under", inside it "optimal", and both keep a full score."""
    _, result = _score(
        {"income": [_row("Salary", 1000)], "food": [_row("Groceries", 120)], "personal": [_row("Gym", 20)]}
    )
    food, personal = result.category_breakdown["food"], result.category_breakdown["personal"]
    if (food.status, food.score, food.recommended) != ("optimal", 100, "10-15%"):
        msg = f"Unexpected food detail: {food}"
        raise AssertionError(msg)
    if (personal.status, personal.score, personal.recommended) != ("under", 100, "5-10%"):
        msg = f"Unexpected personal detail: {personal}"
        raise AssertionError(msg)


def test_healthy_budget_scores_100() -> None:
    """A budget inside every band gets the maximum score and a growth suggestion."""
    _, result = _score(
        {
            "income": [_row("Salary", 5000)],
            "housing": [_row("Rent", 1400)],
            "food": [_row("Groceries", 500)],
        }
    )
    if result.overall_score != 100 or result.status.label != "Healthy":
        msg = f"Expected a perfect score, got {result.overall_score} ({result.status.label})"
        raise AssertionError(msg)
    if [rec.category for rec in result.recommendations] != ["Growth"]:
        msg = f"Expected only the growth suggestion, got {result.recommendations}"
        raise AssertionError(msg)
    if result.breakdown.income_expense_ratio.weight != 30:
        msg = f"Expected weight as a percentage, got {result.breakdown.income_expense_ratio.weight}"
        raise AssertionError(msg)


def test_debt_ratio_ignores_bank_fees() -> None:
    """Card payments count as debt; service fees do not."""
    _, result = _score(
        {
            "income": [_row("Salary", 5000)],
            "banking": [_row("Credit Card Payment", 1000), _row("Monthly Service Fee", 25)],
        }
    )
    if result.metrics.dti_ratio != 0.2 or result.breakdown.debt_ratio.score != 75:
        msg = f"Unexpected debt metrics: {result.metrics.dti_ratio}, {result.breakdown.debt_ratio.score}"
        raise AssertionError(msg)


def test_archived_items_are_ignored() -> None:
    """Archived rows count toward neither totals nor scores."""
    totals, _ = _score({"income": [_row("Salary", 3000)], "misc": [_row("Old TV", 900, archived=True)]})
    if totals.total_expenses != 0 or totals.net_income != 3000:
        msg = f"Expected archived rows to be skipped, got {totals}"
        raise AssertionError(msg)


def test_scores_stay_in_bounds_and_recommendations_are_ordered() -> None:
    """Overall scores stay within 0..100 and recommendations run high to low."""
    budgets = [
        {},
        {"income": [_row("Salary", 1000)], "housing": [_row("Rent", 5000, 9000)]},
        {"income": [_row("Salary", 1000)], "banking": [_row("Loan", 900)], "food": [_row("Food", 10, 500)]},
    ]
    rank = {"high": 0, "medium": 1, "low": 2}
    for raw in budgets:
        _, result = _score(raw)
        if not 0 <= result.overall_score <= 100:
            msg = f"Score out of range: {result.overall_score}"
            raise AssertionError(msg)
        ranks = [rank[rec.priority] for rec in result.recommendations]
        if ranks != sorted(ranks):
            msg = f"Recommendations out of order: {result.recommendations}"
            raise AssertionError(msg)


def test_health_status_bands() -> None:
    """80 and up is Healthy, 60 to 79 Coping, below 60 Vulnerable."""
    cases = {100: "Healthy", 80: "Healthy", 79: "Coping", 60: "Coping", 59: "Vulnerable", 0: "Vulnerable"}
    for score, label in cases.items():
        if health_status(score).label != label:
            msg = f"{score}: expected {label}, got {health_status(score).label}"
            raise AssertionError(msg)


def test_compute_totals_per_bucket() -> None:
    """Per-bucket sums carry est, actual, diff and status counts."""
    totals, _ = _score({"food": [_row("Groceries", 100, 120, status="paid"), _row("Coffee", 20, 0)]})
    food = totals.totals_by_bucket[BucketKey.FOOD.value]
    if (food.est, food.actual, food.diff, food.paid, food.pending) != (120, 120, 0, 1, 1):
        msg = f"Unexpected food totals: {food}"
        raise AssertionError(msg)
