"""
Delivery result data models.

These models carry the outcome of one run:
- RecordResult: what happened to a single record
- JobSummary: counters for one job (packing slips or labels)
- RunSummary: all jobs of the run, mapped to a process exit code
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, List, Optional


class DeliveryOutcome(Enum):
    """
    Outcome of one record.

    Lifecycle:
        Fetched -> SentinelCheck -> (DELIVERED | SKIPPED | FAILED)
    """

    DELIVERED = "delivered"
    """Document was submitted to the print queue."""

    SKIPPED = "skipped"
    """A sentinel showed the record was already delivered."""

    FAILED = "failed"
    """A step raised; the reason is kept on the result."""


@dataclass(frozen=True)
class RecordResult:
    """
    Result of processing one record.

    Returned by DeliveryService.process_record() instead of raising, so the
    job loop only has to aggregate.
    """

    key: str
    """Sentinel key of the record."""

    outcome: DeliveryOutcome
    """What happened."""

    reason: str = ""
    """Failure message (empty unless FAILED)."""

    error_type: str = ""
    """Exception class name (empty unless FAILED)."""

    @classmethod
    def create_delivered(cls, key: str) -> "RecordResult":
        return cls(key=key, outcome=DeliveryOutcome.DELIVERED)

    @classmethod
    def create_skipped(cls, key: str) -> "RecordResult":
        return cls(key=key, outcome=DeliveryOutcome.SKIPPED)

    @classmethod
    def create_failed(cls, key: str, error: BaseException) -> "RecordResult":
        """
        Create a result for a failed record.

        Args:
            key: Sentinel key of the record
            error: The exception that stopped processing

        Returns:
            RecordResult in FAILED state
        """
        return cls(
            key=key,
            outcome=DeliveryOutcome.FAILED,
            reason=str(error),
            error_type=type(error).__name__,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "key": self.key,
            "outcome": self.outcome.value,
            "reason": self.reason,
            "error_type": self.error_type,
        }


@dataclass
class JobSummary:
    """
    Counters for one job.

    A job-level error (the fetch itself failed) is kept separately from the
    per-record errors and counts as one error.
    """

    job_name: str
    """Job name ("packing-slips" or "labels")."""

    results: List[RecordResult] = field(default_factory=list)
    """Per-record results in processing order."""

    job_error: Optional[str] = None
    """Job-level failure message, if the job never reached its records."""

    def add(self, result: RecordResult) -> None:
        self.results.append(result)

    def _count(self, outcome: DeliveryOutcome) -> int:
        return sum(1 for result in self.results if result.outcome is outcome)

    @property
    def success(self) -> int:
        return self._count(DeliveryOutcome.DELIVERED)

    @property
    def skipped(self) -> int:
        return self._count(DeliveryOutcome.SKIPPED)

    @property
    def errors(self) -> int:
        return self._count(DeliveryOutcome.FAILED) + (1 if self.job_error else 0)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "job": self.job_name,
            "success": self.success,
            "skipped": self.skipped,
            "errors": self.errors,
            "job_error": self.job_error,
        }


@dataclass
class RunSummary:
    """All job summaries of one run."""

    jobs: List[JobSummary] = field(default_factory=list)

    @property
    def success(self) -> int:
        return sum(job.success for job in self.jobs)

    @property
    def skipped(self) -> int:
        return sum(job.skipped for job in self.jobs)

    @property
    def errors(self) -> int:
        return sum(job.errors for job in self.jobs)

    @property
    def exit_code(self) -> int:
        """0 when nothing failed, 1 otherwise."""
        return 1 if self.errors else 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "skipped": self.skipped,
            "errors": self.errors,
            "jobs": [job.to_dict() for job in self.jobs],
        }
