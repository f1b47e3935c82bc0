"""
Delivery service: fetch, render, print, mark delivered.

One run executes each delivery job once over the run's time window. Jobs
and records are processed strictly one after another in the calling
thread, which is what makes "check sentinel, then print" safe within a
process. Concurrent invocations are prevented by the external scheduler.

Per-record state machine:

    Fetched -> SentinelCheck -+-> already delivered ---------------> SKIPPED
                              |
                              +-> Acquire -> Submit -> MarkDelivered -> DELIVERED
                              |
                              +-> any step raises ------------------> FAILED

Error isolation:
    - Record errors become a FAILED RecordResult; the batch continues
    - A job error (the fetch failed) is reported once for the whole job;
      the next job still runs

Usage:
    service = DeliveryService(store, print_sink, scratch_dir)
    summary = service.run([packing_slip_job, label_job], window)
    sys.exit(summary.exit_code)
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Protocol, Sequence

from core.exceptions import CleanupWarning, SlipPrinterError
from core.sentinel_store import IdempotencyStore, sentinel_key
from models.job_result import JobSummary, RecordResult, RunSummary
from models.record import Record
from modules.window import TimeWindow
from logging_config import get_logger, get_job_logger


logger = get_logger(__name__)

PENDING_DIR_NAME = "pending"
SENTINEL_POLICY_CONSUME = "consume"
SENTINEL_POLICY_KEEP = "keep"
SENTINEL_POLICIES = (SENTINEL_POLICY_CONSUME, SENTINEL_POLICY_KEEP)


class PrintSink(Protocol):
    def submit(self, file_path: Path) -> str:
        ...


@dataclass(frozen=True)
class DeliveryJob:
    """
    One kind of document to deliver.

    Both jobs share the skip/submit/sentinel flow; they differ only in where
    their records come from and how the document file is obtained.
    """

    name: str
    """Job name used in logs ("packing-slips", "labels")."""

    sentinel_prefix: str
    """First part of the sentinel key ("packing-slip", "label")."""

    fetch: Callable[[TimeWindow], Sequence[Record]]
    """Returns the records of the window. May raise FetchError."""

    acquire: Callable[[Record, Path], object]
    """Writes the printable document of a record to the given path."""


class DeliveryService:
    """
    Runs delivery jobs against a sentinel store and a print sink.

    Attributes:
        store: Idempotency store holding the delivery sentinels
        print_sink: Print queue (anything with submit(path))
        pending_dir: Where documents are written before submission
        consume_sentinels: Remove a sentinel once it has been observed
    """

    def __init__(
        self,
        store: IdempotencyStore,
        print_sink: PrintSink,
        scratch_dir: Path,
        sentinel_policy: str = SENTINEL_POLICY_CONSUME,
    ):
        if sentinel_policy not in SENTINEL_POLICIES:
            raise ValueError(f"Unknown sentinel policy: {sentinel_policy}")

        self.store = store
        self.print_sink = print_sink
        self.pending_dir = Path(scratch_dir) / PENDING_DIR_NAME
        self.consume_sentinels = sentinel_policy == SENTINEL_POLICY_CONSUME

    def key_for(self, job: DeliveryJob, record: Record) -> str:
        return sentinel_key(job.sentinel_prefix, record.identifier, record.timestamp)

    def process_record(self, job: DeliveryJob, record: Record) -> RecordResult:
        """
        Deliver one record at most once.

        Never raises for a failing record; the failure is returned as a
        FAILED RecordResult.
        """
        job_logger = get_job_logger(job.name)
        key = self.key_for(job, record)

        try:
            if self.store.has(key):
                self._consume(key, job_logger)
                job_logger.info(f"Skipped {key} (already delivered)")
                return RecordResult.create_skipped(key)

            document = self.pending_dir / f"{key}.pdf"
            document.parent.mkdir(parents=True, exist_ok=True)
            job.acquire(record, document)
            self.print_sink.submit(document)
            self.store.put(key, document)
        except SlipPrinterError as e:
            job_logger.error(f"Failed {key}: {e}")
            return RecordResult.create_failed(key, e)
        except Exception as e:
            job_logger.exception(f"Failed {key} with unexpected {type(e).__name__}")
            return RecordResult.create_failed(key, e)

        job_logger.info(f"Delivered {key}")
        return RecordResult.create_delivered(key)

    def run_job(self, job: DeliveryJob, window: TimeWindow) -> JobSummary:
        """
        Fetch the records of `window` and deliver each of them.

        A failure before the first record is processed is reported as a
        single job-level error.
        """
        job_logger = get_job_logger(job.name)
        summary = JobSummary(job_name=job.name)

        try:
            records = list(job.fetch(window))
        except Exception as e:
            job_logger.error(f"Job {job.name} failed before processing records: {e}")
            summary.job_error = str(e)
            return summary

        job_logger.info(f"Processing {len(records)} record(s) for {window}")
        for record in records:
            summary.add(self.process_record(job, record))

        job_logger.info(
            f"Job {job.name} done: {summary.success} delivered, "
            f"{summary.skipped} skipped, {summary.errors} error(s)"
        )
        return summary

    def run(self, jobs: Sequence[DeliveryJob], window: TimeWindow) -> RunSummary:
        """Run every job in order over the same window."""
        summaries: List[JobSummary] = [self.run_job(job, window) for job in jobs]
        return RunSummary(jobs=summaries)

    def _consume(self, key: str, job_logger) -> None:
        if not self.consume_sentinels:
            return
        try:
            self.store.remove(key)
        except CleanupWarning as e:
            job_logger.warning(str(e))
