"""
Entry point for dockpulse.

Loads the configuration, sets up file logging (the terminal belongs to
Textual), and runs the dashboard. Exit status is 0 on a normal quit and 1
when Docker could not be reached at startup.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

from . import get_log_path
from .config import AppConfig, LogConfig, load_config
from .textual_app import DashboardApp

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def setup_logging(log_config: LogConfig) -> str:
    path = log_config.file_path or get_log_path()
    handler = RotatingFileHandler(
        path,
        maxBytes=log_config.max_size_mb * 1024 * 1024,
        backupCount=log_config.backup_count,
        encoding='utf-8',
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    level = getattr(logging, log_config.level.upper(), logging.INFO)
    root.setLevel(level)
    return path


def main(app_config: Optional[AppConfig] = None) -> int:
    app_config = app_config or load_config()
    log_path = setup_logging(app_config.logging)
    logger.info(f"dockpulse started, logging to {log_path}")

    app = DashboardApp(app_config)
    try:
        app.run()
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt caught, exiting...")
    finally:
        app.backend.close()

    if app.dashboard.fatal_error:
        print(f"Error connecting to Docker: {app.dashboard.fatal_error}", file=sys.stderr)
        return 1
    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())
