"""Entry point for the ChowHub order terminal."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from chowhub.api import ApiClient
from chowhub.config import API_BASE_URL, DB_PATH, LOG_PATH
from chowhub.dashboard_app import DashboardApp
from chowhub.persistence import MemorySessionBackend, SqliteSessionBackend
from chowhub.session import SessionStore

logger = logging.getLogger("chowhub")


def configure_logging(log_path: str | Path = LOG_PATH, level: int = logging.DEBUG) -> None:
    """Send package logs to a file; the terminal belongs to the UI."""
    logger.setLevel(level)
    logger.propagate = False
    try:
        path = Path(log_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handler: logging.Handler = logging.FileHandler(path, encoding="utf-8")
    except OSError:
        # Logging must never keep the app from starting.
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)


def build_app(route_restaurant: str | None = None) -> DashboardApp:
    persistent = SqliteSessionBackend(DB_PATH)
    persistent.bootstrap_schema()
    session = SessionStore(persistent, MemorySessionBackend())
    api = ApiClient(session, base_url=API_BASE_URL)
    return DashboardApp(session, api, route_restaurant=route_restaurant)


def main() -> None:
    """Run the Textual application."""
    configure_logging()
    route_restaurant = sys.argv[1] if len(sys.argv) > 1 else None
    app = build_app(route_restaurant)
    logger.info("starting api=%s route=%s", API_BASE_URL, route_restaurant)
    app.run()


if __name__ == "__main__":
    main()
