"""Scoring package: budget totals, the financial health score and its history log."""

from .health_score import calculate_health_score  # noqa: F401
from .history import append_score_history  # noqa: F401
from .totals import compute_totals  # noqa: F401
