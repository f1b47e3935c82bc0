"""
Delivery sentinels for at-most-once printing.

A sentinel is a durable marker meaning "this record's document was already
submitted to the print queue". Runs overlap on purpose (see
modules.window), so every record is checked against the store before
anything is printed.

The store is an idempotency-key capability with three operations:

    has(key)              - was the record delivered?
    put(key, document)    - mark delivered (after submission succeeded)
    remove(key)           - consume the marker

FileSentinelStore keeps one file per key in a scratch directory. When the
submitted document is handed to put(), the document itself becomes the
marker, so the directory doubles as a record of what was printed.

Key format:
    <prefix>-<YYYY-MM-DD>-<sanitized identifier>
    e.g. packing-slip-2026-02-02-_1068_A
"""

from __future__ import annotations

import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Protocol

from core.exceptions import CleanupWarning, SentinelCheckError
from logging_config import get_logger


logger = get_logger(__name__)

SENTINEL_SUFFIX = ".pdf"
UNKNOWN_DATE = "unknown-date"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_identifier(identifier: str) -> str:
    """Replace every character outside [A-Za-z0-9_-] with '_' (one for one)."""
    return _UNSAFE_CHARS.sub("_", identifier)


def sentinel_key(prefix: str, identifier: str, timestamp: Optional[datetime]) -> str:
    """
    Build the sentinel key of a record.

    Args:
        prefix: Document kind ("packing-slip" or "label")
        identifier: Order number / tracking number of the record
        timestamp: Business timestamp of the record, formatted as a UTC date

    Returns:
        Key such as "packing-slip-2026-02-02-_1068_A"
    """
    if timestamp is None:
        date_part = UNKNOWN_DATE
    else:
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        date_part = timestamp.astimezone(timezone.utc).strftime("%Y-%m-%d")
    return f"{prefix}-{date_part}-{sanitize_identifier(identifier)}"


class IdempotencyStore(Protocol):
    """Durable set of delivered record keys."""

    def has(self, key: str) -> bool:
        ...

    def put(self, key: str, document: Optional[Path] = None) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


class FileSentinelStore:
    """
    Sentinel store backed by files in a directory.

    Only a missing file means "not delivered". Any other error while checking
    raises SentinelCheckError, because printing on an unknown state could
    duplicate a job.
    """

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        """Location of the sentinel file for `key`."""
        return self.directory / f"{key}{SENTINEL_SUFFIX}"

    def has(self, key: str) -> bool:
        path = self.path_for(key)
        try:
            path.stat()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise SentinelCheckError(key, e.strerror or str(e)) from e
        return True

    def put(self, key: str, document: Optional[Path] = None) -> None:
        """
        Mark `key` as delivered.

        Args:
            key: Sentinel key
            document: Submitted document; moved into place to become the
                marker. Without it an empty marker file is written.
        """
        path = self.path_for(key)
        if document is not None:
            os.replace(document, path)
        else:
            path.touch()
        logger.debug(f"Wrote sentinel {path.name}")

    def remove(self, key: str) -> None:
        """
        Consume the sentinel for `key`.

        Raises:
            CleanupWarning: If the file exists but cannot be deleted
        """
        path = self.path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            return
        except OSError as e:
            raise CleanupWarning(key, e.strerror or str(e)) from e
        logger.debug(f"Removed sentinel {path.name}")
