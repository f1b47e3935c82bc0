"""ReportLab implementations of the layout engine's measurer and sink."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfgen import canvas

from core.exceptions import RenderError
from models.record import Order
from .layout import PAGE_HEIGHT, PAGE_WIDTH, LayoutEngine, LayoutResult


class ReportLabMeasurer:
    """Text metrics from ReportLab's font tables."""

    def measure(self, text: str, font: str, size: float) -> float:
        return pdfmetrics.stringWidth(text, font, size)

    def line_height(self, font: str, size: float) -> float:
        # getDescent() is negative
        return (pdfmetrics.getAscent(font) - pdfmetrics.getDescent(font)) * size / 1000.0


class ReportLabCanvasSink:
    """
    Draws onto a reportlab canvas.

    Converts the engine's top-left coordinates to ReportLab's bottom-left
    origin. Text `y` is the top of the line, so the baseline sits one ascent
    below it.
    """

    def __init__(
        self,
        output_path: Path,
        page_size: Tuple[float, float] = (PAGE_WIDTH, PAGE_HEIGHT),
        title: str = "",
    ) -> None:
        self.output_path = Path(output_path)
        self.page_width, self.page_height = page_size
        self._canvas = canvas.Canvas(str(self.output_path), pagesize=page_size)
        if title:
            self._canvas.setTitle(title)

    def draw_text(self, text: str, x: float, y: float, font: str, size: float,
                  width: Optional[float] = None, align: str = "left") -> None:
        baseline = self.page_height - y - pdfmetrics.getAscent(font) * size / 1000.0
        self._canvas.setFont(font, size)
        if align == "right" and width is not None:
            self._canvas.drawRightString(x + width, baseline, text)
        elif align == "center" and width is not None:
            self._canvas.drawCentredString(x + width / 2.0, baseline, text)
        else:
            self._canvas.drawString(x, baseline, text)

    def draw_line(self, x1: float, y1: float, x2: float, y2: float,
                  thickness: float) -> None:
        self._canvas.setLineWidth(thickness)
        self._canvas.line(x1, self.page_height - y1, x2, self.page_height - y2)

    def draw_image(self, path: Path, x: float, y: float,
                   width: float, height: float) -> None:
        self._canvas.drawImage(
            str(path), x, self.page_height - y - height,
            width=width, height=height, preserveAspectRatio=True, mask="auto",
        )

    def new_page(self) -> None:
        self._canvas.showPage()

    def finish(self) -> None:
        self._canvas.save()


def render_packing_slip(order: Order, output_path: Path, engine: LayoutEngine) -> LayoutResult:
    """
    Render the packing slip of `order` to a PDF file.

    Args:
        order: Order to render
        output_path: Destination PDF path (parent is created if missing)
        engine: Layout engine built with a ReportLabMeasurer

    Returns:
        LayoutResult with the page count

    Raises:
        RenderError: If the document could not be written
    """
    output_path = Path(output_path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        sink = ReportLabCanvasSink(
            output_path, title=f"Packing Slip {order.display_number}"
        )
    except OSError as e:
        raise RenderError(f"Cannot create {output_path}: {e}") from e
    return engine.render(order, sink)
