"""Statement line parser: raw bank/card statement text -> signed transaction records.

Two layouts are recognised per line. Tabular lines separate date, description and amount columns
with tabs or runs of two or more spaces; single-line layouts run everything together and are
handled by pulling the leading date and the decimal amounts out of the text. Bad lines never abort
a parse: they are logged and reported in ``errors``.
"""

import re
import uuid
from datetime import date

from budget_intake.classifiers.engine import CategorizationEngine, build_engine
from budget_intake.core.models import StatementParseResult, StatementSummary, Transaction
from budget_intake.core.utils import excerpt, get_logger
from budget_intake.parsers.extractor import (
    INFLECTION,
    detect_transaction_type,
    extract_merchant,
    find_statement_amounts,
    remove_statement_amounts,
)

logger = get_logger("budget-intake.statements")

INVALID_INPUT_ERROR = "Invalid input"
HEADER_RE = re.compile(r"^Date|^Transaction|Deposits/|Withdrawals/|Ending|Check No\.|Description", re.IGNORECASE)
COLUMN_SPLIT_RE = re.compile(r"\t+|\s{2,}")
BARE_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})$")
LEADING_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})(?=\s|$)")
CREDIT_RE = re.compile(
    rf"\b(?:deposit|return|refund|credit){INFLECTION}\b|\bzelle from\b|\btransfer(?:red)? from\b", re.IGNORECASE
)
MIN_BALANCE_CANDIDATES = 3
AMOUNT_MARKS_RE = re.compile(r"[$\s()+-]")


class StatementLineError(ValueError):
    """A statement line that cannot become a transaction."""


def _iso_date(month: str, day: str, year: int) -> str:
    try:
        return date(year, int(month), int(day)).isoformat()
    except ValueError as exc:
        msg = f"Invalid date {month}/{day}"
        raise StatementLineError(msg) from exc


def _build_transaction(
    line: str, date_iso: str, description: str, amount: float, engine: CategorizationEngine
) -> Transaction:
    transaction_type, keyword = detect_transaction_type(description)
    is_credit = bool(CREDIT_RE.search(description))
    merchant = extract_merchant(description, keyword)
    category = engine.categorize_fields(merchant, transaction_type=transaction_type, is_credit=is_credit)
    return Transaction(
        id=f"stmt-{uuid.uuid4().hex[:12]}",
        date=date_iso,
        merchant=merchant,
        transaction_type=transaction_type,
        amount=-amount if is_credit else amount,
        category_key=category.key,
        category_label=category.label,
        raw_line=line,
    )


def _is_amount_only(column: str) -> bool:
    return not AMOUNT_MARKS_RE.sub("", remove_statement_amounts(column))


def parse_tabular_line(line: str, year: int, engine: CategorizationEngine) -> Transaction | None:
    """Parse a column-separated line; None when the columns do not fit the tabular layout."""
    parts = [p.strip() for p in COLUMN_SPLIT_RE.split(line) if p.strip()]
    if len(parts) < 2:
        return None
    date_match = BARE_DATE_RE.match(parts[0])
    if not date_match or _is_amount_only(parts[1]):
        return None
    amounts = [a for part in parts[2:] for a in find_statement_amounts(part)]
    if not amounts:
        return None
    # A trailing running-balance column, when present, comes after the transaction amount.
    date_iso = _iso_date(date_match.group(1), date_match.group(2), year)
    return _build_transaction(line, date_iso, parts[1], amounts[0], engine)


def parse_single_line(line: str, year: int, engine: CategorizationEngine) -> Transaction:
    """Parse a line where date, description and amounts run together."""
    date_match = LEADING_DATE_RE.match(line)
    if not date_match:
        msg = "No leading date"
        raise StatementLineError(msg)
    rest = line[date_match.end() :]
    amounts = find_statement_amounts(rest)
    if not amounts:
        msg = "No amount"
        raise StatementLineError(msg)
    amount = amounts[-2] if len(amounts) >= MIN_BALANCE_CANDIDATES else amounts[0]
    date_iso = _iso_date(date_match.group(1), date_match.group(2), year)
    return _build_transaction(line, date_iso, remove_statement_amounts(rest), amount, engine)


def parse_statement_line(line: str, year: int, engine: CategorizationEngine) -> Transaction:
    """Parse one statement line, trying the tabular layout first."""
    if COLUMN_SPLIT_RE.search(line):
        transaction = parse_tabular_line(line, year, engine)
        if transaction:
            return transaction
    return parse_single_line(line, year, engine)


def _summarize(transactions: list[Transaction]) -> StatementSummary:
    labels = list(dict.fromkeys(t.category_label for t in transactions))
    return StatementSummary(
        total_transactions=len(transactions),
        total_amount=round(sum(abs(t.amount) for t in transactions), 2),
        categories=labels,
    )


def parse_statement_text(
    text: object, year: int | None = None, engine: CategorizationEngine | None = None
) -> StatementParseResult:
    """Parse raw statement text into transactions, per-line errors and a summary.

    Never raises: invalid input yields an empty result with a single error, and each unparsable line
    is reported in ``errors`` with a truncated excerpt.
    """
    if not isinstance(text, str) or not text.strip():
        logger.warning("Statement text is empty or not a string")
        return StatementParseResult(errors=[INVALID_INPUT_ERROR])
    year = year or date.today().year
    engine = engine or build_engine()

    lines = [line.strip() for line in text.splitlines()]
    lines = [line for line in lines if line and not HEADER_RE.search(line)]

    transactions: list[Transaction] = []
    errors: list[str] = []
    for line in lines:
        try:
            transactions.append(parse_statement_line(line, year, engine))
        except StatementLineError as exc:
            logger.warning(f"Skipped statement line ({exc}): {excerpt(line)}")
            errors.append(f"{exc}: {excerpt(line)}")
        except Exception:
            logger.exception(f"Failed to parse statement line: {excerpt(line)}")
            errors.append(f"Failed to parse line: {excerpt(line)}")

    logger.info(f"Parsed {len(transactions)} transactions ({len(errors)} lines skipped)")
    return StatementParseResult(transactions=transactions, errors=errors, summary=_summarize(transactions))
