"""API Routes for expenses"""
from fastapi import APIRouter, HTTPException, Depends, Request, Query
from typing import Annotated, Optional
from services import expenses_service
from services.expense_store import ExpenseStore
from services.validation import ExpenseValidationError
from models.expense import ExpenseCreate
from utils.rate_limit import limiter, RATE_LIMIT
import logging

router = APIRouter()
logger = logging.getLogger(__name__)

# --- Dependency Function ---
def get_expense_store(request: Request) -> ExpenseStore:
    """Dependency to get the in-memory expense store from the request state."""
    store = getattr(request.state, "expense_store", None)
    if store is None:
        logger.error("Expense store not found in application state. Was the app started through its lifespan?")
        raise HTTPException(status_code=503, detail="Expense store not available.")
    return store

# Type hint for the dependency
ExpenseStoreDep = Annotated[ExpenseStore, Depends(get_expense_store)]


def _validation_error(e: ExpenseValidationError) -> HTTPException:
    return HTTPException(status_code=400, detail={"status": "error", "error": e.reason.value})

# --- API Routes ---

@router.post("/expenses", status_code=201, summary="Add Expense", description="Validates and records a single expense.")
@limiter.limit(RATE_LIMIT)
async def create_expense(request: Request, payload: ExpenseCreate, store: ExpenseStoreDep):
    """
    Records a new expense. The date is optional and defaults to now.
    """
    logger.info(f"POST /expenses endpoint called with category={payload.category!r} amount={payload.amount!r}")
    try:
        expense = expenses_service.add_expense(store, payload.category, payload.amount, payload.date)
        return {"status": "success", "data": expense.model_dump()}
    except ExpenseValidationError as ve:
        raise _validation_error(ve)
    except Exception as e:
        logger.exception(f"Unexpected error adding expense: {e}")
        raise HTTPException(status_code=500, detail="An unexpected server error occurred while adding the expense.")

@router.get("/expenses", summary="Get Expenses", description="Retrieves expenses, optionally filtered by category and an inclusive date range.")
async def get_expenses(
    store: ExpenseStoreDep,
    category: Optional[str] = Query(None, description="Exact category to match."),
    start_date: Optional[str] = Query(None, alias="startDate", description="Inclusive lower bound (ISO-8601)."),
    end_date: Optional[str] = Query(None, alias="endDate", description="Inclusive upper bound (ISO-8601)."),
):
    """
    Fetches expenses in insertion order, narrowed by the given filters.
    """
    logger.info(f"GET /expenses endpoint called. category={category!r} startDate={start_date!r} endDate={end_date!r}")
    try:
        expenses = expenses_service.filter_expenses(store.all(), category, start_date, end_date)
        return {"status": "success", "data": [e.model_dump() for e in expenses]}
    except ExpenseValidationError as ve:
        logger.warning(f"Rejected expense query with invalid date bound: {ve}")
        raise _validation_error(ve)
    except Exception as e:
        logger.exception(f"Unexpected error fetching expenses: {e}")
        raise HTTPException(status_code=500, detail="An unexpected server error occurred while fetching expenses.")

@router.get("/expenses/analysis", summary="Analyze Expenses", description="Totals by category and month, plus the highest-spending category.")
async def analyze_expenses(store: ExpenseStoreDep):
    logger.info("GET /expenses/analysis endpoint called.")
    try:
        analysis = expenses_service.aggregate_expenses(store.all())
        return {"status": "success", "data": analysis.model_dump(by_alias=True)}
    except Exception as e:
        logger.exception(f"Unexpected error analyzing expenses: {e}")
        raise HTTPException(status_code=500, detail="An unexpected server error occurred while analyzing expenses.")

@router.get("/expenses/summary/{period}", summary="Period Summary", description="Expenses for today, the last 7 days, or the current month.")
async def get_period_summary(period: str, store: ExpenseStoreDep):
    """On-demand version of the scheduled summaries."""
    logger.info(f"GET /expenses/summary/{period} endpoint called.")
    if period not in expenses_service.SUMMARY_PERIODS:
        raise HTTPException(status_code=400, detail=f"Invalid period. Allowed periods: {', '.join(expenses_service.SUMMARY_PERIODS)}")
    try:
        expenses = expenses_service.summarize_period(store.all(), period)
        return {"status": "success", "data": [e.model_dump() for e in expenses]}
    except Exception as e:
        logger.exception(f"Unexpected error summarizing {period} expenses: {e}")
        raise HTTPException(status_code=500, detail=f"An unexpected server error occurred while summarizing {period} expenses.")
