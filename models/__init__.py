"""
Data models for SlipPrinter.

This module contains dataclasses for:
- Order, Label: Records fetched from Shippo (frozen)
- Address, LineItem: Parts of an order (frozen)
- RecordResult: Outcome of one record
- JobSummary, RunSummary: Counters for a job and for the whole run
"""

from .record import Address, Label, LineItem, Order, Record
from .job_result import DeliveryOutcome, JobSummary, RecordResult, RunSummary

__all__ = [
    # Record models
    "Address",
    "Label",
    "LineItem",
    "Order",
    "Record",
    # Result models
    "DeliveryOutcome",
    "JobSummary",
    "RecordResult",
    "RunSummary",
]
