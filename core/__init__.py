"""
Core module for SlipPrinter.

Contains the infrastructure the delivery pipeline talks to:
- exceptions: Custom exception hierarchy
- sentinel_store: Delivery sentinels (idempotency keys)
- shippo_client: Read-only Shippo API client
- print_sink: CUPS print queue submission
"""

from .exceptions import (
    SlipPrinterError,
    ConfigurationError,
    FetchError,
    SentinelCheckError,
    RenderError,
    LabelDownloadError,
    SubmissionError,
    CleanupWarning,
)
from .sentinel_store import FileSentinelStore, IdempotencyStore, sentinel_key
from .print_sink import CupsPrintSink
from .shippo_client import ShippoClient

__all__ = [
    "SlipPrinterError",
    "ConfigurationError",
    "FetchError",
    "SentinelCheckError",
    "RenderError",
    "LabelDownloadError",
    "SubmissionError",
    "CleanupWarning",
    "FileSentinelStore",
    "IdempotencyStore",
    "sentinel_key",
    "CupsPrintSink",
    "ShippoClient",
]
