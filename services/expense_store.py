"""In-memory, append-only storage for expenses."""
import logging
from typing import Iterator, List

from models.expense import Expense

logger = logging.getLogger(__name__)


class ExpenseStore:
    """Insertion-ordered sequence of expenses.

    Ids come from a counter kept on the store, not from the sequence length.
    Records live for as long as the store does; nothing is persisted.
    """

    def __init__(self):
        self._expenses: List[Expense] = []
        self._last_id = 0

    def add(self, category: str, amount: float, date: str) -> Expense:
        """Appends a new expense and returns it. Inputs must already be validated."""
        self._last_id += 1
        expense = Expense(id=self._last_id, category=category, amount=amount, date=date)
        self._expenses.append(expense)
        logger.debug(f"Stored expense #{expense.id} ({len(self._expenses)} total)")
        return expense

    def all(self) -> List[Expense]:
        """Returns every stored expense in insertion order."""
        return list(self._expenses)

    def __len__(self) -> int:
        return len(self._expenses)

    def __iter__(self) -> Iterator[Expense]:
        return iter(self.all())
