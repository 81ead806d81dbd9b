"""Service layer for handling expense-related logic."""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Iterable, List, Optional

from models.expense import Expense, ExpenseAnalysis
from services.expense_store import ExpenseStore
from services.validation import (
    ExpenseValidationError,
    parse_date,
    resolve_expense_date,
    validate_expense,
)

logger = logging.getLogger(__name__)

SUMMARY_PERIODS = ("daily", "weekly", "monthly")

# --- Insertion ---

def add_expense(store: ExpenseStore, category: Any, amount: Any, date: Any = None) -> Expense:
    """Validates the input and appends a new expense to the store.

    Raises ExpenseValidationError with the first failing reason.
    """
    reason = validate_expense(category, amount)
    if reason:
        logger.warning(f"Rejected expense (category={category!r}, amount={amount!r}): {reason.value}")
        raise ExpenseValidationError(reason)

    try:
        expense_date = resolve_expense_date(date)
    except ExpenseValidationError:
        logger.warning(f"Rejected expense with unparseable date: {date!r}")
        raise

    expense = store.add(category, amount, expense_date)
    logger.info(f"Added expense #{expense.id}: {expense.category} {expense.amount} on {expense.date}")
    return expense

# --- Querying ---

def filter_expenses(
    records: Iterable[Expense],
    category: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
) -> List[Expense]:
    """Narrows records by exact category and an inclusive date range.

    Order is preserved and the input is left untouched. An unparseable
    bound raises ExpenseValidationError(INVALID_DATE).
    """
    filtered = list(records)

    if category:
        filtered = [e for e in filtered if e.category == category]

    if start_date or end_date:
        start = parse_date(start_date) if start_date else None
        end = parse_date(end_date) if end_date else None
        filtered = [
            e for e in filtered
            if (start is None or parse_date(e.date) >= start)
            and (end is None or parse_date(e.date) <= end)
        ]

    return filtered

# --- Analysis ---

def month_key(date_value: str) -> str:
    """'YYYY-MM' for a stored date, read from its own calendar fields."""
    try:
        parsed = parse_date(date_value)
    except ExpenseValidationError:
        return date_value[:7]
    return f"{parsed.year:04d}-{parsed.month:02d}"


def aggregate_expenses(records: Iterable[Expense]) -> ExpenseAnalysis:
    """Computes per-category totals, the leading category and per-month totals in one pass.

    The leader only changes when a category's running total strictly exceeds
    the current maximum, so on a tie the first category to get there keeps it.
    """
    total_by_category = {}
    monthly_totals = {}
    highest_category = None
    highest_amount = 0

    for e in records:
        total_by_category[e.category] = total_by_category.get(e.category, 0) + e.amount

        if total_by_category[e.category] > highest_amount:
            highest_amount = total_by_category[e.category]
            highest_category = e.category

        month = month_key(e.date)
        monthly_totals[month] = monthly_totals.get(month, 0) + e.amount

    return ExpenseAnalysis(
        total_by_category=total_by_category,
        highest_category=highest_category,
        highest_amount=highest_amount,
        monthly_totals=monthly_totals,
    )

# --- Period summaries ---

def summarize_period(records: Iterable[Expense], period: str, now: Optional[datetime] = None) -> List[Expense]:
    """Selects the expenses that fall in a daily, weekly or monthly window around `now`.

    Unknown periods return every record.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now_utc = now.astimezone(timezone.utc)
    records = list(records)

    if period == "daily":
        today = now_utc.strftime("%Y-%m-%d")
        return [e for e in records if e.date.startswith(today)]
    if period == "weekly":
        week_ago = now_utc - timedelta(days=7)
        return [e for e in records if parse_date(e.date) >= week_ago]
    if period == "monthly":
        current_month = now_utc.strftime("%Y-%m")
        return [e for e in records if e.date.startswith(current_month)]
    return records
