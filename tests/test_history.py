"""Tests for the score history log."""

from datetime import date

from budget_intake.core.models import ScoreHistoryEntry
from budget_intake.scoring.history import append_score_history, history_entry

NOW = date(2024, 6, 30)


def test_same_day_entry_is_replaced() -> None:
    """Scoring twice on one day keeps only the latest score."""
    log = append_score_history([], history_entry(55, NOW), now=NOW)
    log = append_score_history(log, history_entry(72, NOW), now=NOW)
    if log != [ScoreHistoryEntry(date="2024-06-30", score=72)]:
        msg = f"Expected a single updated entry, got {log}"
        raise AssertionError(msg)


def test_old_and_invalid_entries_are_dropped() -> None:
    """Entries outside the window or with unreadable dates fall out; the rest stay sorted."""
    existing = [
        ScoreHistoryEntry(date="2024-06-01", score=60),
        ScoreHistoryEntry(date="2024-01-01", score=40),
        ScoreHistoryEntry(date="not-a-date", score=10),
        ScoreHistoryEntry(date="2024-04-01", score=50),
    ]
    log = append_score_history(existing, history_entry(80, NOW), now=NOW)
    dates = [entry.date for entry in log]
    if dates != ["2024-04-01", "2024-06-01", "2024-06-30"]:
        msg = f"Unexpected history dates: {dates}"
        raise AssertionError(msg)
    if len(existing) != 4:
        msg = "The input log must not be modified"
        raise AssertionError(msg)


def test_custom_window() -> None:
    """A shorter window prunes more aggressively."""
    existing = [ScoreHistoryEntry(date="2024-06-01", score=60)]
    log = append_score_history(existing, history_entry(80, NOW), now=NOW, days=7)
    if [entry.score for entry in log] != [80]:
        msg = f"Expected only today's entry, got {log}"
        raise AssertionError(msg)
