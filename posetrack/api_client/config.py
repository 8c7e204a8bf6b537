"""
Scoring API client configuration (env-friendly).
"""
from typing import Final
import os

# Host only (scheme://ip:port); trailing slash stripped so paths join cleanly
SERVER_BASE_URL: Final = os.getenv("PT_REMOTE_URL", "http://127.0.0.1:8000").rstrip("/")

API_VERSION: Final = os.getenv("PT_API_VERSION", "v1")

CHEATING_SCORE_PATH: Final = f"/api/{API_VERSION}/cheating/score"

DEFAULT_TIMEOUT: Final = float(os.getenv("PT_REMOTE_TIMEOUT", "2"))
CORRELATION_HEADER: Final = "X-Correlation-Id"
IDEMPOTENCY_HEADER: Final = "X-Idempotency-Key"
