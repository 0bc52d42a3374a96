"""Score history log: one overall score per calendar day, trailing window only.

The log is a plain value. ``append_score_history`` returns a new log and never touches storage;
persisting it is the caller's job.
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta

from budget_intake.core.models import ScoreHistoryEntry
from budget_intake.core.utils import get_logger

logger = get_logger("budget-intake.scoring")

HISTORY_DAYS = 90


def _as_date(value: date | datetime | None) -> date:
    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value


def history_entry(score: int, now: date | datetime | None = None) -> ScoreHistoryEntry:
    """Entry recording ``score`` for the calendar day of ``now``."""
    return ScoreHistoryEntry(date=_as_date(now).isoformat(), score=int(score))


def append_score_history(
    existing: Iterable[ScoreHistoryEntry],
    entry: ScoreHistoryEntry,
    now: date | datetime | None = None,
    days: int = HISTORY_DAYS,
) -> list[ScoreHistoryEntry]:
    """Add ``entry`` (replacing any entry of the same date) and drop entries older than ``days``."""
    cutoff = _as_date(now) - timedelta(days=days)
    by_date: dict[str, ScoreHistoryEntry] = {}
    for item in [*existing, entry]:
        try:
            day = date.fromisoformat(item.date)
        except ValueError:
            logger.warning(f"Dropping history entry with invalid date: {item.date!r}")
            continue
        if day >= cutoff:
            by_date[day.isoformat()] = item.model_copy(update={"date": day.isoformat()})
    return [by_date[key] for key in sorted(by_date)]
