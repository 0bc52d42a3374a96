"""Financial health score: a weighted 0-100 composite of five budget ratios.

Components and weights:
  - income vs expenses (30%): expenses / income
  - savings rate (25%): net income / income
  - debt ratio (20%): non-fee banking payments / income
  - category balance (15%): spend share of core buckets against recommended income bands
  - budget adherence (10%): actual vs estimated spend across items with an estimate

Zero income floors every ratio-based component at 0 instead of dividing by zero. The function is
pure; recording the score in the history log is left to the caller.
"""

import math
import re
from collections.abc import Mapping
from typing import NamedTuple

from budget_intake.core.buckets import BucketKey, bucket_label
from budget_intake.core.models import (
    BudgetTotals,
    CategoryDetail,
    HealthBreakdown,
    HealthMetrics,
    HealthScoreResult,
    HealthStatus,
    Recommendation,
    SubScore,
)
from budget_intake.core.utils import get_logger, round_half_up
from budget_intake.scoring.totals import BucketMap, active_items

logger = get_logger("budget-intake.scoring")

WEIGHTS: dict[str, float] = {
    "income_expense_ratio": 0.30,
    "savings_rate": 0.25,
    "debt_ratio": 0.20,
    "category_balance": 0.15,
    "budget_adherence": 0.10,
}
LABELS: dict[str, str] = {
    "income_expense_ratio": "Income vs Expenses",
    "savings_rate": "Savings Rate",
    "debt_ratio": "Debt Management",
    "category_balance": "Category Balance",
    "budget_adherence": "Budget Adherence",
}

# (upper bound on expenses / income, score); above the last bound scores 20
EXPENSE_RATIO_BANDS = ((0.70, 100), (0.80, 85), (0.90, 70), (1.00, 50))
EXPENSE_RATIO_FLOOR = 20
# (lower bound on net / income, score); any positive rate below scores 30
SAVINGS_RATE_BANDS = ((0.20, 100), (0.15, 90), (0.10, 75), (0.05, 50))
SAVINGS_RATE_POSITIVE = 30
# (upper bound on debt / income, score); above the last bound scores 10
DEBT_RATIO_BANDS = ((0.15, 90), (0.20, 75), (0.30, 50), (0.40, 30))
DEBT_RATIO_FLOOR = 10
# (upper bound on |actual - estimate| / estimate, score); above the last bound scores 30
ADHERENCE_BANDS = ((0.05, 100), (0.10, 90), (0.15, 75), (0.25, 50))
ADHERENCE_FLOOR = 30

FEE_LABEL_RE = re.compile(r"service fee|bank fee", re.IGNORECASE)
OVERSPEND_ALERT_PCT = 35
OVERSPEND_TARGET_PCT = 30
MIN_SAVINGS_TARGET_PCT = 10
SAVINGS_TARGET_STEP_PCT = 5
PRIORITY_ORDER = {"high": 0, "medium": 1, "low": 2}
HEALTHY_MIN_SCORE = 80
COPING_MIN_SCORE = 60
EXPENSE_ALERT_SCORE = 70
SAVINGS_ALERT_SCORE = 75
DEBT_ALERT_SCORE = 75
GROWTH_EXPENSE_SCORE = 85
GROWTH_SAVINGS_SCORE = 75


class Band(NamedTuple):
    """Recommended share of income for a bucket."""

    min: float
    max: float


CATEGORY_BANDS: dict[BucketKey, Band] = {
    BucketKey.HOUSING: Band(0.25, 0.30),
    BucketKey.TRANSPORTATION: Band(0.10, 0.15),
    BucketKey.FOOD: Band(0.10, 0.15),
    BucketKey.PERSONAL: Band(0.05, 0.10),
    BucketKey.HOME_OFFICE: Band(0.02, 0.05),
}


def _clamp(score: float) -> float:
    return max(0.0, min(100.0, score))


def _ratio(part: float, income: float) -> float:
    return part / income if income > 0 else 0.0


def score_income_expense(totals: BudgetTotals) -> float:
    """Score expenses as a share of income."""
    if totals.total_income <= 0:
        return 0.0
    ratio = totals.total_expenses / totals.total_income
    for bound, score in EXPENSE_RATIO_BANDS:
        if ratio <= bound:
            return score
    return EXPENSE_RATIO_FLOOR


def score_savings_rate(totals: BudgetTotals) -> float:
    """Score net income as a share of income."""
    if totals.total_income <= 0:
        return 0.0
    rate = totals.net_income / totals.total_income
    for bound, score in SAVINGS_RATE_BANDS:
        if rate >= bound:
            return score
    return SAVINGS_RATE_POSITIVE if rate > 0 else 0.0


def debt_payments(buckets: BucketMap) -> float:
    """Estimated banking payments that are not plain bank or service fees."""
    return sum(
        item.est_budget
        for item in active_items(buckets, BucketKey.BANKING)
        if not FEE_LABEL_RE.search(item.category)
    )


def score_debt_ratio(totals: BudgetTotals, debt: float) -> float:
    """Score debt payments as a share of income."""
    if totals.total_income <= 0:
        return 0.0
    dti = debt / totals.total_income
    if dti == 0:
        return 100
    for bound, score in DEBT_RATIO_BANDS:
        if dti <= bound:
            return score
    return DEBT_RATIO_FLOOR


def category_balance(totals: BudgetTotals, buckets: BucketMap) -> tuple[float, dict[str, CategoryDetail]]:
    """Mean band score over the core buckets that hold items, plus per-bucket detail."""
    if totals.total_income <= 0:
        return 0.0, {}
    details: dict[str, CategoryDetail] = {}
    scores = []
    for key, band in CATEGORY_BANDS.items():
        items = active_items(buckets, key)
        if not items:
            continue
        pct = sum(item.actual_cost for item in items) / totals.total_income
        score = 100.0 if pct <= band.max else max(0.0, 100 - 200 * (pct - band.max) / band.max)
        if pct > band.max:
            status = "over"
        elif pct < band.min:
            status = "under"
        else:
            status = "optimal"
        details[key.value] = CategoryDetail(
            percentage=int(round_half_up(pct * 100)),
            score=int(round_half_up(score)),
            recommended=f"{round(band.min * 100)}-{round(band.max * 100)}%",
            status=status,
        )
        scores.append(score)
    overall = sum(scores) / len(scores) if scores else 0.0
    return overall, details


def score_budget_adherence(buckets: BucketMap) -> float:
    """Score how closely actual spend tracks the estimates, over items that carry an estimate."""
    estimated = 0.0
    actual = 0.0
    for key in buckets:
        for item in active_items(buckets, key):
            if item.est_budget > 0:
                estimated += item.est_budget
                actual += item.actual_cost
    if estimated == 0:
        return 100
    variance = abs(actual - estimated) / estimated
    for bound, score in ADHERENCE_BANDS:
        if variance <= bound:
            return score
    return ADHERENCE_FLOOR


def health_status(score: int) -> HealthStatus:
    """Band the overall score into Healthy / Coping / Vulnerable."""
    if score >= HEALTHY_MIN_SCORE:
        return HealthStatus(label="Healthy", color="green", message="Great financial health!")
    if score >= COPING_MIN_SCORE:
        return HealthStatus(label="Coping", color="yellow", message="On track, with room to improve")
    return HealthStatus(label="Vulnerable", color="red", message="Needs attention")


def build_recommendations(
    scores: Mapping[str, float], totals: BudgetTotals, details: Mapping[str, CategoryDetail]
) -> list[Recommendation]:
    """Derive recommendations from the subscores, ordered high -> medium -> low."""
    recs: list[Recommendation] = []
    income = totals.total_income

    if income <= 0:
        recs.append(
            Recommendation(
                priority="high",
                category="Income",
                issue="No income recorded for this budget",
                action="Add your income sources so spending can be measured against them",
                impact="+30 points",
            )
        )
    elif scores["income_expense_ratio"] < EXPENSE_ALERT_SCORE:
        recs.append(
            Recommendation(
                priority="high",
                category="Expenses",
                issue=f"Expenses are {round_half_up(totals.total_expenses / income * 100):.0f}% of income",
                action="Reduce spending by 10-15% to create a healthier buffer",
                impact="+15 points",
            )
        )

    if scores["savings_rate"] < SAVINGS_ALERT_SCORE:
        current = int(round_half_up(totals.net_income / income * 100)) if income > 0 and totals.net_income > 0 else 0
        target = max(MIN_SAVINGS_TARGET_PCT, current + SAVINGS_TARGET_STEP_PCT)
        recs.append(
            Recommendation(
                priority="high",
                category="Savings",
                issue=f"Saving only {current}% of income",
                action=f"Increase savings rate to {target}% by automating transfers",
                impact="+20 points",
            )
        )

    if scores["debt_ratio"] < DEBT_ALERT_SCORE:
        recs.append(
            Recommendation(
                priority="medium",
                category="Debt",
                issue="Debt payments are high relative to income",
                action="Focus on paying down high-interest debt first",
                impact="+15 points",
            )
        )

    for key, detail in details.items():
        if detail.status == "over" and detail.percentage > OVERSPEND_ALERT_PCT:
            label = bucket_label(key)
            recs.append(
                Recommendation(
                    priority="medium",
                    category=label,
                    issue=f"{label} is {detail.percentage}% of income (recommended: {detail.recommended})",
                    action=f"Reduce {label.lower()} spending by {detail.percentage - OVERSPEND_TARGET_PCT}% "
                    f"to bring it toward {OVERSPEND_TARGET_PCT}% of income",
                    impact="+10 points",
                )
            )

    if scores["income_expense_ratio"] >= GROWTH_EXPENSE_SCORE and scores["savings_rate"] >= GROWTH_SAVINGS_SCORE:
        recs.append(
            Recommendation(
                priority="low",
                category="Growth",
                issue="Strong financial foundation established",
                action="Consider increasing retirement contributions or investment portfolio",
                impact="Long-term wealth building",
            )
        )

    return sorted(recs, key=lambda rec: PRIORITY_ORDER[rec.priority])


def calculate_health_score(totals: BudgetTotals, buckets: BucketMap) -> HealthScoreResult:
    """Compute the composite score, its breakdown, raw metrics and recommendations."""
    debt = debt_payments(buckets)
    balance, details = category_balance(totals, buckets)
    scores = {
        "income_expense_ratio": score_income_expense(totals),
        "savings_rate": score_savings_rate(totals),
        "debt_ratio": score_debt_ratio(totals, debt),
        "category_balance": balance,
        "budget_adherence": score_budget_adherence(buckets),
    }
    scores = {name: _clamp(value) for name, value in scores.items()}
    overall = int(_clamp(round_half_up(math.fsum(scores[name] * weight for name, weight in WEIGHTS.items()))))
    logger.info(f"Health score {overall} from subscores {scores}")

    breakdown = HealthBreakdown(
        **{
            name: SubScore(
                score=int(round_half_up(scores[name])),
                weight=round(WEIGHTS[name] * 100, 2),
                label=LABELS[name],
            )
            for name in WEIGHTS
        }
    )
    return HealthScoreResult(
        overall_score=overall,
        status=health_status(overall),
        breakdown=breakdown,
        metrics=HealthMetrics(
            expense_ratio=_ratio(totals.total_expenses, totals.total_income),
            savings_rate=_ratio(totals.net_income, totals.total_income),
            dti_ratio=_ratio(debt, totals.total_income),
        ),
        category_breakdown=details,
        recommendations=build_recommendations(scores, totals, details),
    )
