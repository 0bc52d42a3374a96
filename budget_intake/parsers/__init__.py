"""Parsers package: statement lines, receipt text and the adapters that turn them into budget items."""

from .adapters import normalize_budget_row, normalize_buckets, transactions_to_budget_items  # noqa: F401
from .receipt_parser import apply_category_rules, parse_receipt_text  # noqa: F401
from .statement_parser import parse_statement_text  # noqa: F401
