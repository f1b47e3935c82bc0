"""
Packing slip layout engine.

Lays out one order on 4x6 inch pages: a header block (title, business
address, ship-to address next to the order details) followed by the items
table. The table breaks across as many pages as needed; every continuation
page repeats the column header.

The engine never talks to a PDF library directly. It measures text through
a TextMeasurer and draws through a DocumentSink, so the pagination logic can
be exercised with fakes. modules.pdf_backend provides the ReportLab
implementations used in production.

Coordinates are points measured from the TOP-LEFT corner of the page; the
`y` passed to draw_text() is the top of the text line.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Protocol, Sequence

from core.exceptions import RenderError
from models.record import LineItem, Order


# Page dimensions for a 4x6 inch label (72 points per inch)
PAGE_WIDTH = 4 * 72
PAGE_HEIGHT = 6 * 72

MARGIN = 10
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
PRINTABLE_BOTTOM = PAGE_HEIGHT - MARGIN

LOGO_WIDTH = 36
LOGO_HEIGHT = 36
LINE_HEIGHT = 14
SECTION_LINE_HEIGHT = LINE_HEIGHT * 0.8
SECTION_SPACING = 16

FONT_REGULAR = "Helvetica"
FONT_BOLD = "Helvetica-Bold"
FONT_SIZE = 8
VARIANT_FONT_SIZE = 7

ROW_PADDING = 3
HEAVY_RULE = 1.2
THIN_RULE = 0.4
QTY_GAP = 6
VALUE_GAP = 4
# Room for the "(continued)" caption at the top of continuation pages
CONTINUATION_OFFSET = LINE_HEIGHT

ELLIPSIS = "…"
NOT_AVAILABLE = "N/A"

DETAIL_LABELS = ("Order ID:", "Order Date:", "Total Items:")


class TextMeasurer(Protocol):
    """Font metrics used for every layout decision."""

    def measure(self, text: str, font: str, size: float) -> float:
        ...

    def line_height(self, font: str, size: float) -> float:
        ...


class DocumentSink(Protocol):
    """Drawing surface that receives the laid-out document."""

    def draw_text(self, text: str, x: float, y: float, font: str, size: float,
                  width: Optional[float] = None, align: str = "left") -> None:
        ...

    def draw_line(self, x1: float, y1: float, x2: float, y2: float,
                  thickness: float) -> None:
        ...

    def draw_image(self, path: Path, x: float, y: float,
                   width: float, height: float) -> None:
        ...

    def new_page(self) -> None:
        ...

    def finish(self) -> None:
        ...


@dataclass(frozen=True)
class BusinessInfo:
    """Sender block printed under the title."""

    name: str
    street: str
    city: str
    state: str
    zip: str

    @property
    def city_line(self) -> str:
        return format_city_line(self.city, self.state, self.zip)


@dataclass
class LayoutResult:
    """Summary of a rendered document."""

    pages: int = 1
    rows: int = 0
    content_bottoms: List[float] = field(default_factory=list)
    """Lowest y used on each page, in page order."""


def format_city_line(city: str, state: str, zip_code: str) -> str:
    """'City, ST 12345' without stray separators for missing parts."""
    region = " ".join(part for part in (state, zip_code) if part)
    return ", ".join(part for part in (city, region) if part)


def format_order_date(order: Order) -> str:
    """US locale date (M/D/YYYY) of the order in UTC."""
    placed = order.placed_at
    return f"{placed.month}/{placed.day}/{placed.year}"


class LayoutEngine:
    """
    Renders an Order into a DocumentSink.

    Pagination rule: before drawing an item row its height is measured; if
    the row would cross PRINTABLE_BOTTOM a new page is started, the column
    header is re-emitted and the same row is drawn there. The thin separator
    under a row is only drawn when the next row still fits below it, using
    the same fits() test that decides the next page break.
    """

    def __init__(
        self,
        measurer: TextMeasurer,
        business: BusinessInfo,
        logo_path: Optional[Path] = None,
    ) -> None:
        self.measurer = measurer
        self.business = business
        self.logo_path = Path(logo_path) if logo_path else None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self, order: Order, sink: DocumentSink) -> LayoutResult:
        """
        Lay out `order` and finish the document.

        Raises:
            RenderError: If anything fails while drawing or writing
        """
        try:
            result = LayoutResult()
            y = self._render_header(order, sink, MARGIN)
            y = self._render_items(order, sink, y, result)
            result.content_bottoms.append(y)
            sink.finish()
            return result
        except RenderError:
            raise
        except Exception as e:
            raise RenderError(
                f"Failed to render packing slip for order {order.display_number}: {e}",
                details={"order_id": order.object_id},
            ) from e

    def row_height(self, item: LineItem) -> float:
        """Padding + title line + optional variant line + padding."""
        height = ROW_PADDING + self.measurer.line_height(FONT_REGULAR, FONT_SIZE)
        if item.variant_title:
            height += self.measurer.line_height(FONT_REGULAR, VARIANT_FONT_SIZE)
        return height + ROW_PADDING

    def column_header_height(self) -> float:
        return self.measurer.line_height(FONT_BOLD, FONT_SIZE) + ROW_PADDING + HEAVY_RULE

    @staticmethod
    def fits(y: float, height: float) -> bool:
        return y + height <= PRINTABLE_BOTTOM

    def ellipsize(self, text: str, font: str, size: float, max_width: float) -> str:
        """Shorten `text` with a trailing ellipsis until it fits max_width."""
        if self.measurer.measure(text, font, size) <= max_width:
            return text
        if self.measurer.measure(ELLIPSIS, font, size) > max_width:
            return ""
        low, high = 0, len(text)
        # Longest prefix that still fits together with the ellipsis
        while low < high:
            mid = (low + high + 1) // 2
            if self.measurer.measure(text[:mid].rstrip() + ELLIPSIS, font, size) <= max_width:
                low = mid
            else:
                high = mid - 1
        return text[:low].rstrip() + ELLIPSIS

    # ------------------------------------------------------------------
    # Header block
    # ------------------------------------------------------------------

    def _render_header(self, order: Order, sink: DocumentSink, y: float) -> float:
        title = self.ellipsize(
            f"Packing Slip for Order {order.display_number}", FONT_BOLD, FONT_SIZE, CONTENT_WIDTH
        )
        sink.draw_text(title, MARGIN, y, FONT_BOLD, FONT_SIZE, width=CONTENT_WIDTH, align="center")
        y += LINE_HEIGHT + SECTION_SPACING

        y = self._render_business_block(sink, y)
        return self._render_address_and_details(order, sink, y)

    def _render_business_block(self, sink: DocumentSink, y: float) -> float:
        business = self.business
        spacing = SECTION_SPACING / 2
        measure = self.measurer.measure

        # Block is as wide as its widest line
        text_width = max(
            measure(business.name, FONT_BOLD, FONT_SIZE),
            measure(business.street, FONT_REGULAR, FONT_SIZE),
            measure(business.city_line, FONT_REGULAR, FONT_SIZE),
        )
        has_logo = self.logo_path is not None and self.logo_path.exists()
        total_width = text_width + (LOGO_WIDTH + spacing if has_logo else 0)
        start_x = (PAGE_WIDTH - total_width) / 2
        block_top = y

        text_x = start_x
        if has_logo:
            sink.draw_image(self.logo_path, start_x, y, LOGO_WIDTH, LOGO_HEIGHT)
            text_x = start_x + LOGO_WIDTH + spacing
            y += SECTION_LINE_HEIGHT * 0.25  # text sits slightly lower than the logo

        sink.draw_text(business.name, text_x, y, FONT_BOLD, FONT_SIZE)
        y += SECTION_LINE_HEIGHT
        sink.draw_text(business.street, text_x, y, FONT_REGULAR, FONT_SIZE)
        y += SECTION_LINE_HEIGHT
        sink.draw_text(business.city_line, text_x, y, FONT_REGULAR, FONT_SIZE)

        y += LINE_HEIGHT
        if has_logo:
            y = max(y, block_top + LOGO_HEIGHT)
        return y + spacing

    def _render_address_and_details(self, order: Order, sink: DocumentSink, y: float) -> float:
        start_y = y
        midpoint = PAGE_WIDTH / 2
        left_width = midpoint - MARGIN - VALUE_GAP

        # Ship To (left column)
        address = order.to_address
        sink.draw_text("Ship To:", MARGIN, y, FONT_BOLD, FONT_SIZE)
        y += LINE_HEIGHT

        lines = [address.name or NOT_AVAILABLE]
        if address.company:
            lines.append(address.company)
        lines.append(address.street1)
        if address.street2:
            lines.append(address.street2)
        lines.append(format_city_line(address.city, address.state, address.zip))
        lines.append(address.country)

        for index, line in enumerate(lines):
            if index:
                y += SECTION_LINE_HEIGHT
            text = self.ellipsize(line, FONT_REGULAR, FONT_SIZE, left_width)
            sink.draw_text(text, MARGIN, y, FONT_REGULAR, FONT_SIZE)
        ship_to_end = y + LINE_HEIGHT

        # Order details (right column): right-aligned labels, left-aligned values
        label_width = max(
            self.measurer.measure(label, FONT_BOLD, FONT_SIZE) for label in DETAIL_LABELS
        )
        value_x = midpoint + label_width + VALUE_GAP
        value_width = PAGE_WIDTH - MARGIN - value_x

        details = [("Order ID:", order.object_id or NOT_AVAILABLE)]
        if order.placed_at is not None:
            details.append(("Order Date:", format_order_date(order)))
        details.append(("Total Items:", str(order.total_quantity)))

        details_y = start_y
        for label, value in details:
            sink.draw_text(label, midpoint, details_y, FONT_BOLD, FONT_SIZE,
                           width=label_width, align="right")
            text = self.ellipsize(value, FONT_REGULAR, FONT_SIZE, value_width)
            sink.draw_text(text, value_x, details_y, FONT_REGULAR, FONT_SIZE)
            details_y += LINE_HEIGHT

        return max(ship_to_end, details_y) + SECTION_SPACING

    # ------------------------------------------------------------------
    # Items table
    # ------------------------------------------------------------------

    def _render_items(self, order: Order, sink: DocumentSink, y: float,
                      result: LayoutResult) -> float:
        items: Sequence[LineItem] = order.line_items
        heights = [self.row_height(item) for item in items]
        qty_width = max(
            [self.measurer.measure("QTY", FONT_BOLD, FONT_SIZE)]
            + [self.measurer.measure(str(item.quantity), FONT_REGULAR, FONT_SIZE) for item in items]
        )
        title_width = CONTENT_WIDTH - qty_width - QTY_GAP

        first_row = heights[0] if heights else self._empty_row_height()
        if not self.fits(y, self.column_header_height() + first_row):
            y = self._continue_on_new_page(order, sink, y, result)
        else:
            y = self._render_column_header(sink, y)
        at_page_top = True

        if not items:
            sink.draw_text("No items", MARGIN, y + ROW_PADDING, FONT_REGULAR, FONT_SIZE)
            return y + first_row

        last_index = len(items) - 1
        for index, item in enumerate(items):
            # A row taller than a fresh page is drawn anyway instead of looping
            if not at_page_top and not self.fits(y, heights[index]):
                y = self._continue_on_new_page(order, sink, y, result)

            y = self._render_row(item, sink, y, title_width)
            result.rows += 1
            at_page_top = False

            if index < last_index and self.fits(y, heights[index + 1]):
                sink.draw_line(MARGIN, y, PAGE_WIDTH - MARGIN, y, THIN_RULE)

        return y

    def _render_column_header(self, sink: DocumentSink, y: float) -> float:
        sink.draw_text("ITEMS", MARGIN, y, FONT_BOLD, FONT_SIZE)
        sink.draw_text("QTY", MARGIN, y, FONT_BOLD, FONT_SIZE, width=CONTENT_WIDTH, align="right")
        y += self.measurer.line_height(FONT_BOLD, FONT_SIZE) + ROW_PADDING
        sink.draw_line(MARGIN, y, PAGE_WIDTH - MARGIN, y, HEAVY_RULE)
        return y + HEAVY_RULE

    def _continue_on_new_page(self, order: Order, sink: DocumentSink, y: float,
                              result: LayoutResult) -> float:
        result.content_bottoms.append(y)
        sink.new_page()
        result.pages += 1

        caption = self.ellipsize(
            f"Order {order.display_number} (continued)", FONT_REGULAR, FONT_SIZE, CONTENT_WIDTH
        )
        sink.draw_text(caption, MARGIN, MARGIN, FONT_REGULAR, FONT_SIZE,
                       width=CONTENT_WIDTH, align="center")
        return self._render_column_header(sink, MARGIN + CONTINUATION_OFFSET)

    def _render_row(self, item: LineItem, sink: DocumentSink, y: float,
                    title_width: float) -> float:
        text_y = y + ROW_PADDING
        title = self.ellipsize(item.title, FONT_REGULAR, FONT_SIZE, title_width)
        sink.draw_text(title, MARGIN, text_y, FONT_REGULAR, FONT_SIZE)
        sink.draw_text(str(item.quantity), MARGIN, text_y, FONT_REGULAR, FONT_SIZE,
                       width=CONTENT_WIDTH, align="right")
        if item.variant_title:
            text_y += self.measurer.line_height(FONT_REGULAR, FONT_SIZE)
            variant = self.ellipsize(item.variant_title, FONT_REGULAR, VARIANT_FONT_SIZE, title_width)
            sink.draw_text(variant, MARGIN, text_y, FONT_REGULAR, VARIANT_FONT_SIZE)
        return y + self.row_height(item)

    def _empty_row_height(self) -> float:
        return 2 * ROW_PADDING + self.measurer.line_height(FONT_REGULAR, FONT_SIZE)
