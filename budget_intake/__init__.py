"""Budget intake: statement/receipt ingestion, categorization and financial health scoring."""

__version__ = "1.0.0"
