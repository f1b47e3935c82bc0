"""
SlipPrinter - scheduled run entry point.

One invocation is one best-effort pass:
1. Validate settings (exit 2 on ConfigurationError, before any work)
2. Configure logging and stamp the run id
3. Compute the time window from the current time
4. Run the packing-slip job, then the label job
5. Exit 0 when nothing failed, 1 otherwise

Intended to be started by cron (or a systemd timer) every
PRINT_INTERVAL_MINUTES. The scheduler must not start a run while the
previous one is still going.
"""

from __future__ import annotations

import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Optional

from config import Settings, build_settings
from core.exceptions import ConfigurationError
from core.print_sink import CupsPrintSink
from core.sentinel_store import FileSentinelStore
from core.shippo_client import ShippoClient
from logging_config import setup_logging, get_logger, set_run_id
from models.job_result import RunSummary
from modules.layout import LayoutEngine
from modules.pdf_backend import ReportLabMeasurer
from modules.window import compute_window
from services.delivery_service import DeliveryService
from services.jobs import build_label_job, build_packing_slip_job


EXIT_OK = 0
EXIT_ERRORS = 1
EXIT_CONFIGURATION = 2

logger = get_logger(__name__)


def run(settings: Settings, now: Optional[datetime] = None) -> RunSummary:
    """
    Execute one pass for the window containing `now`.

    Args:
        settings: Validated settings
        now: Current instant (default: datetime.now(timezone.utc))

    Returns:
        RunSummary of both jobs
    """
    now = now or datetime.now(timezone.utc)
    window = compute_window(now, settings.interval_minutes, settings.lookback)
    logger.info(f"Window {window} (interval {settings.interval_minutes} min, "
                f"lookback {settings.lookback})")

    client = ShippoClient(
        settings.api_token,
        base_url=settings.api_base_url,
        timeout_seconds=settings.timeout_seconds,
    )
    engine = LayoutEngine(ReportLabMeasurer(), settings.business, settings.logo_path)
    service = DeliveryService(
        store=FileSentinelStore(settings.scratch_dir),
        print_sink=CupsPrintSink(settings.printer_name),
        scratch_dir=settings.scratch_dir,
        sentinel_policy=settings.sentinel_policy,
    )

    jobs = [
        build_packing_slip_job(client, engine, statuses=settings.order_statuses),
        build_label_job(client),
    ]
    return service.run(jobs, window)


def main() -> int:
    """Process entry point; returns the exit code."""
    try:
        settings = build_settings()
    except ConfigurationError as e:
        setup_logging()
        logger.error(f"FATAL: {e}")
        return EXIT_CONFIGURATION

    setup_logging(
        log_level=getattr(logging, settings.log_level, logging.INFO),
        log_dir=settings.log_dir,
    )
    set_run_id(uuid.uuid4().hex[:8])
    logger.info(f"Printing to {settings.printer_name}, scratch dir {settings.scratch_dir}")

    try:
        summary = run(settings)
    except ConfigurationError as e:
        logger.error(f"FATAL: {e}")
        return EXIT_CONFIGURATION

    logger.info("=" * 50)
    for job in summary.jobs:
        line = (f"{job.job_name}: {job.success} delivered, "
                f"{job.skipped} skipped, {job.errors} error(s)")
        if job.job_error:
            line += f" [job failed: {job.job_error}]"
        logger.info(line)
    logger.info(f"Total: {summary.success} delivered, {summary.skipped} skipped, "
                f"{summary.errors} error(s)")
    logger.info("=" * 50)

    return EXIT_ERRORS if summary.errors else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
