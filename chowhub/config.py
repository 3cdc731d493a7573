"""Runtime configuration defaults for the API client, session storage and logging."""

from __future__ import annotations

import os

API_BASE_URL = os.environ.get("CHOWHUB_API_URL", "http://localhost:8080/api")
REQUEST_TIMEOUT_SECONDS = 15.0

DB_PATH = os.environ.get("CHOWHUB_DB_PATH", "data/chowhub.db")
LOG_PATH = os.environ.get("CHOWHUB_LOG_PATH", "/tmp/chowhub-debug.log")

# Used when the restaurant record carries no tax rate.
DEFAULT_TAX_RATE_PERCENT = 13

LOGIN_ROUTE = "/login"
UNAUTHORIZED_ROUTE = "/unauthorized"
MANAGER_ROLE = "manager"
