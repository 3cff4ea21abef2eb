# =============================================================================
# dashh_core/logging/config.py
# Process-wide log setup for the dashboard
# =============================================================================

import logging
import sys
import time
from pathlib import Path
from datetime import date
from typing import List, Optional


LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Relative to the directory `streamlit run` was started from
LOG_DIR = Path("logs")

# Supabase SDK transports log every request at INFO
NOISY_LOGGERS = ("urllib3", "httpx", "httpcore", "hpack", "supabase", "postgrest", "gotrue")


def _daily_log_name() -> str:
    return f"dashh_{date.today().isoformat()}.log"


def _build_handlers(log_to_file: bool, log_filename: Optional[str]) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_to_file:
        LOG_DIR.mkdir(exist_ok=True)
        handlers.append(logging.FileHandler(LOG_DIR / (log_filename or _daily_log_name())))
    return handlers


def setup_logging(
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_filename: Optional[str] = None,
) -> None:
    """
    Route dashh_core logs to stdout and, optionally, a dated file in logs/.

    Called once per server process from the session bootstrap; calling it
    again replaces the root handlers instead of adding more.
    """
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        handlers=_build_handlers(log_to_file, log_filename),
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("dashh_core").info("Logging initialized")


def get_logger(name: str) -> logging.Logger:
    """Module loggers; pass __name__ so records carry the dashh_core path."""
    return logging.getLogger(name)


class LogContext:
    """
    Times a block and logs its outcome under the given operation label.

    Services get one from BaseService.log_operation("File upload").
    Success is logged at DEBUG; an exception is logged at ERROR with its
    traceback and then propagates.
    """

    def __init__(self, logger: logging.Logger, operation: str):
        self.logger = logger
        self.operation = operation
        self.started: Optional[float] = None

    def __enter__(self):
        self.started = time.perf_counter()
        self.logger.debug(f"{self.operation}... started")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - self.started
        if exc_type is not None:
            self.logger.error(
                f"{self.operation}... failed ({elapsed:.2f}s): {exc_val}",
                exc_info=True,
            )
        else:
            self.logger.debug(f"{self.operation}... completed ({elapsed:.2f}s)")
        return False
