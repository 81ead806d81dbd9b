"""Input validation for expense records."""
import logging
import math
import re
from datetime import datetime, timezone
from enum import Enum
from numbers import Real
from typing import Any, Optional

from models.expense import PREDEFINED_CATEGORIES

logger = logging.getLogger(__name__)

# Extended calendar form only: YYYY-MM-DD, optionally followed by a time and offset
ISO_DATE_PATTERN = re.compile(
    r"\d{4}-\d{2}-\d{2}"
    r"(?:[T ]\d{2}:\d{2}(?::\d{2}(?:[.,]\d+)?)?(?:Z|[+-]\d{2}:?\d{2})?)?"
)


class ValidationReason(str, Enum):
    """Why an expense (or a query bound) was rejected."""
    INVALID_CATEGORY = "Invalid category."
    INVALID_AMOUNT = "Amount must be a positive number."
    INVALID_DATE = "Invalid date format."


class ExpenseValidationError(ValueError):
    """Raised when caller-supplied expense data fails validation."""

    def __init__(self, reason: ValidationReason):
        super().__init__(reason.value)
        self.reason = reason


def validate_expense(category: Any, amount: Any) -> Optional[ValidationReason]:
    """Checks category membership and amount positivity.

    Returns the first failing reason, or None when both are valid.
    """
    if not category or category not in PREDEFINED_CATEGORIES:
        return ValidationReason.INVALID_CATEGORY
    # bool is an int subclass but never a valid amount
    if isinstance(amount, bool) or not isinstance(amount, Real):
        return ValidationReason.INVALID_AMOUNT
    try:
        if not math.isfinite(amount) or amount <= 0:
            return ValidationReason.INVALID_AMOUNT
    except OverflowError:
        # integers too large to fit in a float
        return ValidationReason.INVALID_AMOUNT
    return None


def parse_date(value: Any) -> datetime:
    """Parses an ISO-8601 date or date-time string into an aware datetime.

    Naive values are taken as UTC. Raises ExpenseValidationError(INVALID_DATE)
    for anything that is not a parseable string in the extended
    YYYY-MM-DD[THH:MM[:SS[.fff]]][Z|±HH:MM] form.
    """
    if not isinstance(value, str) or not ISO_DATE_PATTERN.fullmatch(value):
        raise ExpenseValidationError(ValidationReason.INVALID_DATE)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise ExpenseValidationError(ValidationReason.INVALID_DATE)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def now_iso(now: Optional[datetime] = None) -> str:
    """Current UTC instant as 'YYYY-MM-DDTHH:MM:SS.mmmZ'."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def resolve_expense_date(value: Any) -> str:
    """Returns the date string to store for a new expense.

    An absent date defaults to the current instant; a supplied one is
    validated and kept verbatim.
    """
    if value is None:
        return now_iso()
    parse_date(value)
    return value
