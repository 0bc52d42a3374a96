"""Pydantic models for the budget intake service.

This module defines the records that flow through the ingestion pipeline (raw documents, statement
transactions, receipts), the budget items they become, the user-owned categorization rules, and the
financial health score result. Field names are snake_case in Python and camelCase on the wire.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from budget_intake.core.buckets import BucketKey

Priority = Literal["high", "medium", "low"]
ItemStatus = Literal["pending", "paid"]
BalanceStatus = Literal["under", "over", "optimal"]
DocumentKind = Literal["statement", "receipt"]


class CamelModel(BaseModel):
    """Base model serializing to camelCase while accepting either spelling on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RawDocument(CamelModel):
    """Text produced by the extraction adapter for one scanned file."""

    text: str = ""
    filename: str = ""
    mime_kind: str = ""
    warning: str | None = None


class Transaction(CamelModel):
    """A parsed statement line. Positive amounts are expenses, negative amounts are money in."""

    id: str
    date: str
    merchant: str
    transaction_type: str
    amount: float
    category_key: BucketKey
    category_label: str
    raw_line: str


class StatementSummary(CamelModel):
    """Aggregate view of a parsed statement."""

    total_transactions: int = 0
    total_amount: float = 0.0
    categories: list[str] = Field(default_factory=list)


class StatementParseResult(CamelModel):
    """Transactions parsed from statement text plus the lines that could not be parsed."""

    transactions: list[Transaction] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    summary: StatementSummary = Field(default_factory=StatementSummary)


class ReceiptItem(CamelModel):
    """A line item printed on a receipt."""

    name: str = ""
    category: str = ""
    price: float = 0.0


class ReceiptMeta(CamelModel):
    """Provenance of a receipt record."""

    created_at: str
    source: str = "ocr"


class Receipt(CamelModel):
    """A receipt extracted from unstructured text."""

    id: str
    merchant: str
    date: str
    currency: str = "USD"
    subtotal: float = 0.0
    tax: float = 0.0
    total: float = 0.0
    items: list[ReceiptItem] = Field(default_factory=list)
    meta: ReceiptMeta
    category_key: BucketKey = BucketKey.MISC
    category_label: str = "Misc"


class BudgetItem(CamelModel):
    """A planned or actual budget line item held in a bucket."""

    id: str
    category: str
    est_budget: float = Field(default=0.0, ge=0)
    actual_cost: float = Field(default=0.0, ge=0)
    due_date: str = ""
    status: ItemStatus = "pending"
    archived: bool = False
    note: str = ""


class BudgetEntry(CamelModel):
    """A budget item together with the bucket it should be filed under."""

    category_key: BucketKey
    item: BudgetItem


class CategorizationRule(CamelModel):
    """User-owned rule: keyword -> category, or exact merchant -> default category."""

    match: str | None = None
    category: str | None = None
    merchant: str | None = None
    default_category: str | None = None


class VendorEntry(CamelModel):
    """Built-in vendor knowledge: any of the match terms maps to a bucket."""

    model_config = ConfigDict(frozen=True)

    match_terms: tuple[str, ...]
    category_key: BucketKey
    label: str


class DuplicateVerdict(CamelModel):
    """Outcome of comparing an incoming receipt against an existing one."""

    exact: bool = False
    near: bool = False
    score: float = Field(default=0.0, ge=0, le=1)
    reason: str = "No match"


class BucketTotals(CamelModel):
    """Sums for one bucket (or the grand total)."""

    est: float = 0.0
    actual: float = 0.0
    diff: float = 0.0
    pending: int = 0
    paid: int = 0


class BudgetTotals(CamelModel):
    """Aggregate income, expense and net figures of a budget."""

    total_income: float = 0.0
    total_expenses: float = 0.0
    net_income: float = 0.0
    totals_by_bucket: dict[str, BucketTotals] = Field(default_factory=dict)
    grand: BucketTotals = Field(default_factory=BucketTotals)


class SubScore(CamelModel):
    """One weighted component of the health score."""

    score: int = Field(ge=0, le=100)
    weight: float
    label: str


class HealthBreakdown(CamelModel):
    """The five weighted subscores."""

    income_expense_ratio: SubScore
    savings_rate: SubScore
    debt_ratio: SubScore
    category_balance: SubScore
    budget_adherence: SubScore


class HealthMetrics(CamelModel):
    """Raw ratios behind the subscores (0 when there is no income)."""

    expense_ratio: float = 0.0
    savings_rate: float = 0.0
    dti_ratio: float = 0.0


class CategoryDetail(CamelModel):
    """Spend share of one bucket against its recommended income band."""

    percentage: int
    score: int
    recommended: str
    status: BalanceStatus


class Recommendation(CamelModel):
    """An actionable suggestion derived from the subscores."""

    priority: Priority
    category: str
    issue: str
    action: str
    impact: str


class HealthStatus(CamelModel):
    """Banded reading of the overall score."""

    label: str
    color: str
    message: str


class HealthScoreResult(CamelModel):
    """Composite financial health score with breakdown and recommendations."""

    overall_score: int = Field(ge=0, le=100)
    status: HealthStatus
    breakdown: HealthBreakdown
    metrics: HealthMetrics
    category_breakdown: dict[str, CategoryDetail] = Field(default_factory=dict)
    recommendations: list[Recommendation] = Field(default_factory=list)


class ScoreHistoryEntry(CamelModel):
    """One day's overall score."""

    date: str
    score: int


class JobStatus(BaseModel):
    """Pydantic model representing the status of a document ingestion job."""

    status: str
    kind: str
    created_at: str
    completed_at: str | None = None
    error: str | None = None


class StatementParseRequest(CamelModel):
    """Body of ``POST /statements/parse``."""

    text: str
    year: int | None = None


class BudgetItemsRequest(CamelModel):
    """Body of ``POST /statements/budget-items``."""

    transactions: list[Transaction]


class ReceiptParseRequest(CamelModel):
    """Body of ``POST /receipts/parse``."""

    text: str
    filename: str = ""
    explicit_category: str | None = None


class DuplicateRequest(CamelModel):
    """Body of ``POST /receipts/duplicates``."""

    existing: Receipt
    incoming: Receipt


class BestDuplicateRequest(CamelModel):
    """Body of ``POST /receipts/duplicates/best``."""

    existing: list[Receipt]
    incoming: Receipt


class DuplicateMatch(CamelModel):
    """The strongest match found for an incoming receipt."""

    receipt: Receipt
    verdict: DuplicateVerdict


class ExportRequest(CamelModel):
    """Body of ``POST /receipts/export-csv``."""

    receipts: list[Receipt]


class HealthScoreRequest(CamelModel):
    """Body of ``POST /health-score``: raw budget rows keyed by bucket."""

    buckets: dict[str, list[dict]] = Field(default_factory=dict)


class HealthScoreResponse(CamelModel):
    """A computed score together with the updated history log."""

    result: HealthScoreResult
    totals: BudgetTotals
    history: list[ScoreHistoryEntry]
