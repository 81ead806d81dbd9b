"""Pydantic models for Expense data"""
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, Optional

# Closed set of categories an expense may be filed under
PREDEFINED_CATEGORIES = ("Food", "Travel", "Shopping", "Bills", "Others")


class Expense(BaseModel):
    """
    Represents a single recorded spending event.
    """
    id: int
    category: str
    amount: float
    date: str  # ISO-8601 string, stored as supplied

    model_config = ConfigDict(frozen=True)


class ExpenseCreate(BaseModel):
    """Incoming payload for a new expense. Fields are left loose so the
    validator can report its own reasons instead of pydantic's."""
    category: Optional[Any] = None
    amount: Optional[Any] = None
    date: Optional[Any] = None


class ExpenseAnalysis(BaseModel):
    """Aggregate totals over a set of expenses."""
    total_by_category: Dict[str, float] = Field(default_factory=dict, alias="totalByCategory")
    highest_category: Optional[str] = Field(default=None, alias="highestCategory")
    highest_amount: float = Field(default=0, alias="highestAmount", exclude=True)
    monthly_totals: Dict[str, float] = Field(default_factory=dict, alias="monthlyTotals")

    model_config = ConfigDict(populate_by_name=True)
