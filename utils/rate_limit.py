"""Rate limiting for the expense API, backed by slowapi."""
import os
import logging
from dotenv import load_dotenv
from slowapi import Limiter
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)

load_dotenv() # Searches for .env in current dir and parent dirs

RATE_LIMIT = os.getenv("RATE_LIMIT", "60/minute")
RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"

# In-memory storage, keyed by client address
limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)

if not RATE_LIMIT_ENABLED:
    logger.warning("Rate limiting is disabled (RATE_LIMIT_ENABLED=false).")
