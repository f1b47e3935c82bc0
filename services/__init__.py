"""
Services layer for SlipPrinter.

- DeliveryService: per-record sentinel check, acquire, submit, mark
- jobs: the packing-slip and label jobs of a run

Everything runs sequentially in the calling thread.
"""

from .delivery_service import DeliveryJob, DeliveryService
from .jobs import build_label_job, build_packing_slip_job

__all__ = [
    "DeliveryJob",
    "DeliveryService",
    "build_label_job",
    "build_packing_slip_job",
]
