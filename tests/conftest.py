"""
Shared fixtures and fakes for the SlipPrinter tests.

The fakes stand in for the collaborators the pipeline and the layout engine
talk to: a text measurer, a drawing sink, a sentinel store and a print queue.
"""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from core.exceptions import SubmissionError
from models.record import Address, LineItem, Order
from modules.layout import BusinessInfo


class FakeMeasurer:
    """Monospaced metrics: half an em per character, 1.25 em per line."""

    def measure(self, text, font, size):
        return len(text) * size * 0.5

    def line_height(self, font, size):
        return size * 1.25


class RecordingSink:
    """Records every drawing operation, grouped by page."""

    def __init__(self):
        self.pages = [[]]
        self.finished = False

    def draw_text(self, text, x, y, font, size, width=None, align="left"):
        self.pages[-1].append(("text", text, x, y, font, size, width, align))

    def draw_line(self, x1, y1, x2, y2, thickness):
        self.pages[-1].append(("line", x1, y1, x2, y2, thickness))

    def draw_image(self, path, x, y, width, height):
        self.pages[-1].append(("image", str(path), x, y, width, height))

    def new_page(self):
        self.pages.append([])

    def finish(self):
        self.finished = True

    def texts(self, page=None):
        pages = self.pages if page is None else [self.pages[page]]
        return [op[1] for ops in pages for op in ops if op[0] == "text"]


class MemoryStore:
    """In-memory idempotency store."""

    def __init__(self):
        self.keys = set()

    def has(self, key):
        return key in self.keys

    def put(self, key, document=None):
        self.keys.add(key)

    def remove(self, key):
        self.keys.discard(key)


class FakePrintSink:
    """Print queue that remembers what it was given."""

    def __init__(self, fail_on=()):
        self.submitted = []
        self.fail_on = set(fail_on)

    def submit(self, file_path):
        path = Path(file_path)
        if path.name in self.fail_on:
            raise SubmissionError("Test_Printer", str(path), "printer is stopped", exit_code=1)
        self.submitted.append((path.name, path.read_bytes()))
        return f"request id is Test_Printer-{len(self.submitted)} (1 file(s))"


@pytest.fixture
def measurer():
    return FakeMeasurer()


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def business():
    return BusinessInfo(
        name="Acme Goods",
        street="1 Warehouse Way",
        city="Seattle",
        state="WA",
        zip="98101",
    )


@pytest.fixture
def sample_order():
    """Order placed 2026-02-02T14:30:00Z with three items."""
    return Order(
        object_id="ord_abc123",
        order_number="#1068",
        placed_at=datetime(2026, 2, 2, 14, 30, tzinfo=timezone.utc),
        to_address=Address(
            name="Jane Doe",
            company="Doe Outfitters",
            street1="500 Pine St",
            street2="Apt 4",
            city="Portland",
            state="OR",
            zip="97204",
            country="US",
        ),
        line_items=(
            LineItem(title="Organic Cotton Tee", variant_title="Size M / Black", quantity=2),
            LineItem(title="Sticker Pack", quantity=1),
            LineItem(title="Canvas Tote Bag", variant_title="Natural", quantity=5),
        ),
        order_status="PAID",
    )


def make_order(number, placed_at, items=1):
    """Small helper for pipeline tests."""
    return Order(
        object_id=f"obj-{number}",
        order_number=number,
        placed_at=placed_at,
        to_address=Address(name="Test Customer"),
        line_items=tuple(LineItem(title=f"Item {i}", quantity=1) for i in range(items)),
    )


@pytest.fixture
def make_sink():
    """Factory for extra sinks within one test."""
    return RecordingSink
