"""
The two delivery jobs of a run.

    packing-slips: orders placed in the window, rendered to 4x6 slips
    labels:        label transactions created in the window, downloaded
                   as PDFs and vetted before printing
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from core.shippo_client import ShippoClient
from models.record import Label, Order
from modules.layout import LayoutEngine
from modules.pdf_analyzer import PDFAnalyzer
from modules.pdf_backend import render_packing_slip
from .delivery_service import DeliveryJob


PACKING_SLIP_JOB = "packing-slips"
LABEL_JOB = "labels"
PACKING_SLIP_PREFIX = "packing-slip"
LABEL_PREFIX = "label"

PAID_STATUS = "PAID"


def build_packing_slip_job(
    client: ShippoClient,
    engine: LayoutEngine,
    statuses: Optional[Sequence[str]] = (PAID_STATUS,),
) -> DeliveryJob:
    """
    Job rendering a packing slip for every order of the window.

    Args:
        client: Shippo client
        engine: Layout engine with a ReportLab measurer
        statuses: Order statuses to print; None prints every status
    """

    def fetch(window):
        return client.list_orders(window, statuses=statuses)

    def acquire(order: Order, path: Path):
        return render_packing_slip(order, path, engine)

    return DeliveryJob(
        name=PACKING_SLIP_JOB,
        sentinel_prefix=PACKING_SLIP_PREFIX,
        fetch=fetch,
        acquire=acquire,
    )


def build_label_job(client: ShippoClient, analyzer: Optional[PDFAnalyzer] = None) -> DeliveryJob:
    """Job downloading and printing every label purchased in the window."""
    analyzer = analyzer or PDFAnalyzer()

    def acquire(label: Label, path: Path):
        client.download_label(label, path)
        return analyzer.require_pages(path)

    return DeliveryJob(
        name=LABEL_JOB,
        sentinel_prefix=LABEL_PREFIX,
        fetch=client.list_label_transactions,
        acquire=acquire,
    )
