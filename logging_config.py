"""
Centralized logging configuration for SlipPrinter.

Every run is stamped with a short run id so that log lines from overlapping
scheduler invocations can be told apart in a shared log file.

Features:
    - Run id in all log messages
    - Console output (always enabled)
    - Rotating file logs (optional, for production)
    - Separate error log for ERROR/CRITICAL messages
    - Helper functions for getting loggers with consistent naming

Log Format:
    2026-02-02 14:45:00 [INFO    ] [3f9a2c1d] slip_printer.app - Window 14:15 -> 14:45
    2026-02-02 14:45:01 [INFO    ] [3f9a2c1d] slip_printer.job.labels - Delivered label-...
    2026-02-02 14:45:02 [WARNING ] [3f9a2c1d] slip_printer.core.sentinel_store - ...

Usage:
    # At startup
    from logging_config import setup_logging, get_logger, set_run_id

    setup_logging(log_level=logging.INFO, log_dir=Path("logs"))
    set_run_id("3f9a2c1d")

    # In modules
    logger = get_logger(__name__)

    # For a delivery job
    job_logger = get_job_logger("packing-slips")
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


APP_NAMESPACE = "slip_printer"

_run_id = "-"


# =============================================================================
# RUN CONTEXT FILTER
# =============================================================================

class RunContextFilter(logging.Filter):
    """
    Logging filter that adds the current run id to all log records.

    The attribute `run_id` is used in the log format string.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = _run_id
        # Never filters anything out, only adds context
        return True


def set_run_id(run_id: str) -> None:
    """
    Set the run id shown in the [run_id] field of every message.

    Args:
        run_id: Identifier of the current invocation
    """
    global _run_id
    _run_id = run_id


# =============================================================================
# LOGGING SETUP
# =============================================================================

def setup_logging(
    app_name: str = APP_NAMESPACE,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """
    Configure application logging with run context.

    This sets up:
    1. Console handler (always enabled)
    2. Rotating file handler (only when log_dir is given)
    3. Error file handler (only when log_dir is given) - ERROR/CRITICAL only
    4. Run context filter - adds the run id to all messages

    Args:
        app_name: Name of the root logger (default: "slip_printer")
        log_level: Minimum log level (default: INFO)
        log_dir: Directory for log files; None disables file logging

    Returns:
        Configured root logger instance
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(log_level)
    logger.propagate = False  # Prevent duplicate logs to root logger

    # Allows re-configuration
    logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)-8s] [%(run_id)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    run_filter = RunContextFilter()

    # ---------------------------------------------------------------------
    # Console Handler (always enabled)
    # ---------------------------------------------------------------------
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(run_filter)
    logger.addHandler(console_handler)

    # ---------------------------------------------------------------------
    # File Handlers (optional)
    # ---------------------------------------------------------------------
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)

        app_log_file = log_dir / f"{app_name}.log"
        file_handler = RotatingFileHandler(
            filename=app_log_file,
            maxBytes=10 * 1024 * 1024,  # 10 MB per file
            backupCount=5,
            encoding="utf-8"
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(run_filter)
        logger.addHandler(file_handler)

        error_log_file = log_dir / f"{app_name}_error.log"
        error_handler = RotatingFileHandler(
            filename=error_log_file,
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8"
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(formatter)
        error_handler.addFilter(run_filter)
        logger.addHandler(error_handler)

        logger.info(f"File logging enabled: {app_log_file}")

    logger.debug(f"Logging configured at level {logging.getLevelName(log_level)}")
    return logger


# =============================================================================
# LOGGER FACTORY FUNCTIONS
# =============================================================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger with the application namespace.

    Args:
        name: Module name (typically __name__)

    Returns:
        Logger instance under "slip_printer"

    Example:
        # In core/sentinel_store.py
        logger = get_logger(__name__)
        # Logger name: "slip_printer.core.sentinel_store"
    """
    if not name.startswith(APP_NAMESPACE):
        name = f"{APP_NAMESPACE}.{name}"

    return logging.getLogger(name)


def get_job_logger(job_name: str) -> logging.Logger:
    """
    Get a logger for one delivery job.

    Args:
        job_name: Job name, e.g. "packing-slips" or "labels"

    Returns:
        Logger named "slip_printer.job.<job_name>"
    """
    return logging.getLogger(f"{APP_NAMESPACE}.job.{job_name}")
