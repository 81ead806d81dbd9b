"""Periodic daily, weekly and monthly expense summaries."""
import asyncio
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from models.expense import Expense
from services.expense_store import ExpenseStore
from services.expenses_service import SUMMARY_PERIODS, summarize_period

logger = logging.getLogger(__name__)

SUNDAY = 6


def next_run_time(period: str, after: datetime) -> datetime:
    """Next fire time strictly after `after`, in the same (local) clock.

    daily: every midnight; weekly: Sunday midnight; monthly: midnight on the 1st.
    """
    midnight = after.replace(hour=0, minute=0, second=0, microsecond=0)

    if period == "daily":
        candidate = midnight
        if candidate <= after:
            candidate += timedelta(days=1)
        return candidate

    if period == "weekly":
        candidate = midnight + timedelta(days=(SUNDAY - after.weekday()) % 7)
        if candidate <= after:
            candidate += timedelta(days=7)
        return candidate

    if period == "monthly":
        candidate = midnight.replace(day=1)
        if candidate <= after:
            if candidate.month == 12:
                candidate = candidate.replace(year=candidate.year + 1, month=1)
            else:
                candidate = candidate.replace(month=candidate.month + 1)
        return candidate

    raise ValueError(f"Unknown summary period: {period}")


async def sleep_until(target: datetime, clock=datetime.now) -> None:
    """Sleeps until the wall clock reaches `target`.

    asyncio.sleep runs on the monotonic clock, so wake-ups are re-checked
    against the wall clock and any remainder is slept again.
    """
    while True:
        remaining = (target - clock()).total_seconds()
        if remaining <= 0:
            return
        await asyncio.sleep(remaining)


def run_summary_job(store: ExpenseStore, period: str, now: Optional[datetime] = None) -> List[Expense]:
    """Builds the summary for one period and reports it through the log."""
    logger.info(f"{period.capitalize()} Summary Generated:")
    expenses = summarize_period(store.all(), period, now)
    logger.info(f"Summary for {period}: {[e.model_dump() for e in expenses]}")
    return expenses


class SummaryScheduler:
    """Runs one background task per summary period on the running event loop."""

    def __init__(self, store: ExpenseStore, periods=SUMMARY_PERIODS):
        self.store = store
        self.periods = tuple(periods)
        self._tasks: Dict[str, asyncio.Task] = {}

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks.values())

    def start(self) -> None:
        """Schedules the periodic tasks. Must be called from inside an event loop."""
        if self.running:
            logger.warning("Summary scheduler already running.")
            return
        for period in self.periods:
            self._tasks[period] = asyncio.create_task(self._run_periodic(period), name=f"{period}-summary")
        logger.info(f"Summary scheduler started for periods: {', '.join(self.periods)}")

    async def stop(self) -> None:
        """Cancels the periodic tasks and waits for them to finish."""
        tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        logger.info("Summary scheduler stopped.")

    async def _run_periodic(self, period: str) -> None:
        while True:
            now = datetime.now()
            next_run = next_run_time(period, now)
            logger.debug(f"Next {period} summary at {next_run.isoformat()}")
            await sleep_until(next_run)
            try:
                run_summary_job(self.store, period)
            except Exception as e:
                logger.exception(f"Failed to generate {period} summary: {e}")
