"""SQLAlchemy-backed stores for the user's rule list and the score history log.

Both are read and written wholesale: the rule list is replaced as an ordered array, and the history
log is recomputed by ``append_score_history`` before being saved back.
"""

from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from budget_intake.core.db import CategorizationRuleRow, ScoreHistoryRow
from budget_intake.core.models import CategorizationRule, ScoreHistoryEntry
from budget_intake.core.utils import get_logger

logger = get_logger("budget-intake.stores")


class RuleStore:
    """Ordered categorization rule list persisted in the ``categorization_rules`` table."""

    def __init__(self, session: Session) -> None:
        """Initialize the store with a SQLAlchemy session."""
        self.session = session

    def load(self) -> list[CategorizationRule]:
        """Return the rules in list order."""
        rows = self.session.execute(
            select(
                CategorizationRuleRow.match,
                CategorizationRuleRow.category,
                CategorizationRuleRow.merchant,
                CategorizationRuleRow.default_category,
            ).order_by(CategorizationRuleRow.position)
        )
        return [
            CategorizationRule(
                match=row.match,
                category=row.category,
                merchant=row.merchant,
                default_category=row.default_category,
            )
            for row in rows
        ]

    def replace(self, rules: Iterable[CategorizationRule]) -> list[CategorizationRule]:
        """Replace the whole rule list, keeping the given order."""
        rules = list(rules)
        self.session.execute(delete(CategorizationRuleRow))
        self.session.add_all(
            CategorizationRuleRow(
                position=position,
                match=rule.match,
                category=rule.category,
                merchant=rule.merchant,
                default_category=rule.default_category,
            )
            for position, rule in enumerate(rules)
        )
        self.session.commit()
        logger.info(f"Saved {len(rules)} categorization rules")
        return rules


class HistoryStore:
    """Score history log persisted in the ``score_history`` table."""

    def __init__(self, session: Session) -> None:
        """Initialize the store with a SQLAlchemy session."""
        self.session = session

    def load(self) -> list[ScoreHistoryEntry]:
        """Return the log ordered by date."""
        rows = self.session.execute(select(ScoreHistoryRow.date, ScoreHistoryRow.score).order_by(ScoreHistoryRow.date))
        return [ScoreHistoryEntry(date=row.date, score=row.score) for row in rows]

    def save(self, log: Iterable[ScoreHistoryEntry]) -> None:
        """Overwrite the stored log with ``log``."""
        log = list(log)
        self.session.execute(delete(ScoreHistoryRow))
        self.session.add_all(ScoreHistoryRow(date=entry.date, score=entry.score) for entry in log)
        self.session.commit()
        logger.info(f"Saved score history ({len(log)} entries)")
