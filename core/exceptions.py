"""
Custom exceptions for SlipPrinter.

Exception Hierarchy:
    SlipPrinterError (base)
    ├── ConfigurationError  - Missing/malformed settings (startup failure, exit 2)
    ├── FetchError          - Shippo request failed (aborts the owning job)
    ├── SentinelCheckError  - Sentinel state unknown (record fails)
    ├── RenderError         - Document could not be produced (record fails)
    │   └── LabelDownloadError - Label PDF could not be downloaded
    ├── SubmissionError     - Print queue rejected the job (record fails)
    └── CleanupWarning      - Sentinel could not be removed (logged only)

Usage:
    ConfigurationError stops the run before any work starts.
    FetchError is caught at the job boundary.
    The remaining errors are caught at the record boundary and turned into a
    FAILED outcome (CleanupWarning never changes an outcome).
"""

from typing import Optional, Dict, Any


class SlipPrinterError(Exception):
    """
    Base exception for all SlipPrinter errors.

    All custom exceptions inherit from this class, allowing callers to catch
    all application-specific errors with a single except clause if needed.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# STARTUP ERRORS - Run will not start if these occur
# =============================================================================

class ConfigurationError(SlipPrinterError):
    """
    A required setting is missing or malformed.

    This is a FATAL error - nothing is fetched or printed.

    Typical causes:
    - SHIPPO_API_TOKEN or CUPS_PRINTER_NAME not set
    - PRINT_INTERVAL_MINUTES does not evenly divide a day
    """

    def __init__(self, message: str, setting: Optional[str] = None):
        details = {"setting": setting} if setting else None
        super().__init__(message, details)
        self.setting = setting


# =============================================================================
# JOB ERRORS - The owning job stops, the other job still runs
# =============================================================================

class FetchError(SlipPrinterError):
    """
    The Shippo API could not be read.

    Raised for transport failures, non-2xx responses and undecodable bodies.
    The job that asked for the records reports a single job-level error.
    """

    def __init__(self, resource: str, reason: str, status_code: Optional[int] = None):
        message = f"Failed to fetch {resource} from Shippo: {reason}"
        details: Dict[str, Any] = {"resource": resource}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, details)
        self.resource = resource
        self.status_code = status_code


# =============================================================================
# RECORD ERRORS - Record is marked FAILED, batch continues
# =============================================================================

class SentinelCheckError(SlipPrinterError):
    """
    The sentinel for a record could not be checked.

    Only "not found" means "not delivered". Any other filesystem error leaves
    the delivery state unknown, so the record is failed instead of printed.
    """

    def __init__(self, key: str, reason: str):
        super().__init__(f"Could not check sentinel {key}: {reason}", {"key": key})
        self.key = key


class RenderError(SlipPrinterError):
    """
    The printable document for a record could not be produced.
    """

    def __init__(self, message: str, key: Optional[str] = None,
                 details: Optional[Dict[str, Any]] = None):
        error_details = details or {}
        if key:
            error_details["key"] = key
        super().__init__(message, error_details)
        self.key = key


class LabelDownloadError(RenderError):
    """
    The label PDF could not be downloaded from its remote URL.
    """

    def __init__(self, label_url: str, reason: str, key: Optional[str] = None):
        super().__init__(
            f"Failed to download label: {reason}",
            key=key,
            details={"label_url": label_url},
        )
        self.label_url = label_url


class SubmissionError(SlipPrinterError):
    """
    The print queue did not accept the document.

    Submission is fire-and-forget: this is raised only when `lp` itself
    fails, never for problems at the physical printer.
    """

    def __init__(self, printer_name: str, file_path: str, reason: str,
                 exit_code: Optional[int] = None):
        suffix = f" ({exit_code})" if exit_code is not None else ""
        message = f'Failed to print {file_path} on printer "{printer_name}"{suffix}: {reason}'
        details: Dict[str, Any] = {"printer": printer_name}
        if exit_code is not None:
            details["exit_code"] = exit_code
        super().__init__(message, details)
        self.printer_name = printer_name
        self.file_path = file_path
        self.exit_code = exit_code


class CleanupWarning(SlipPrinterError):
    """
    A consumed sentinel could not be deleted.

    Delivery state was already detected, so this is logged as a warning and
    never turns a DELIVERED or SKIPPED outcome into FAILED.
    """

    def __init__(self, key: str, reason: str):
        super().__init__(f"Could not remove sentinel {key}: {reason}", {"key": key})
        self.key = key
