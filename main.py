"""Main FastAPI application"""
import os
import logging
import logging.config
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from dotenv import load_dotenv
from routes import router as api_router
from services.expense_store import ExpenseStore
from services.summary_scheduler import SummaryScheduler
from utils.rate_limit import limiter, RATE_LIMIT

from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

load_dotenv() # Searches for .env in current dir and parents

HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3001"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_SUMMARY_SCHEDULER = os.getenv("ENABLE_SUMMARY_SCHEDULER", "true").lower() == "true"

# --- Unified Logging Configuration with Rich ---
LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "default": {
            "format": "%(name)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "default": {
            "class": "rich.logging.RichHandler",
            "formatter": "default",
            "level": "DEBUG",
            "rich_tracebacks": True,
            "show_time": True,
            "show_path": False,
            "log_time_format": "%Y-%m-%d %H:%M:%S",
            "markup": False,
        },
    },
    "loggers": {
        "uvicorn": {
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        },
        "uvicorn.error": {
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        },
        "uvicorn.access": {
            "handlers": ["default"],
            "level": "INFO",
            "propagate": False,
        },
        "": { # Root logger for our application
            "handlers": ["default"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}

logging.config.dictConfig(LOGGING_CONFIG)

logger = logging.getLogger(__name__)

# Application state: the store lives here for the process lifetime
app_state = {}

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create the store and the periodic summaries that read it
    app_state["expense_store"] = ExpenseStore()
    logger.info("In-memory expense store created.")
    scheduler = None
    if ENABLE_SUMMARY_SCHEDULER:
        scheduler = SummaryScheduler(app_state["expense_store"])
        scheduler.start()
    else:
        logger.info("Summary scheduler disabled (ENABLE_SUMMARY_SCHEDULER=false).")
    app_state["summary_scheduler"] = scheduler
    logger.info(f"Configuration: RATE_LIMIT = {RATE_LIMIT}, LOG_LEVEL = {LOG_LEVEL}")

    yield # Application runs here

    # Shutdown: nothing is persisted, just stop the background jobs
    if scheduler is not None:
        await scheduler.stop()
    app_state.clear()

app = FastAPI(
    title="Personal Expense Tracker API",
    description="API for recording, querying and summarizing personal expenses.",
    version="0.1.0",
    lifespan=lifespan
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"], # Adjust in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router, tags=["expenses"])

# Make app state accessible via middleware
@app.middleware("http")
async def add_app_state_to_request(request: Request, call_next):
    """Adds the expense store to the request state."""
    request.state.expense_store = app_state.get("expense_store")
    response = await call_next(request)
    return response

if __name__ == "__main__":
    import uvicorn
    logger.info(f"Personal Expense Tracker API is running on port {PORT}")
    uvicorn.run(
        "main:app",
        host=HOST,
        port=PORT,
    )
