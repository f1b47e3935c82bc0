"""Render a packing slip for a built-in sample order (no API, no printer)."""

import sys
from datetime import datetime, timezone
from pathlib import Path

from config import Config
from models.record import Address, LineItem, Order
from modules.layout import BusinessInfo, LayoutEngine
from modules.pdf_analyzer import PDFAnalyzer
from modules.pdf_backend import ReportLabMeasurer, render_packing_slip

SAMPLE_TITLES = [
    "Organic Cotton Tee",
    "Enamel Camp Mug - Limited Edition Forest Print With Extra Long Name",
    "Sticker Pack",
    "Canvas Tote Bag",
    "Wool Beanie",
]


def build_sample_order(item_count: int) -> Order:
    items = tuple(
        LineItem(
            title=SAMPLE_TITLES[i % len(SAMPLE_TITLES)],
            variant_title="Size M / Black" if i % 2 == 0 else "",
            quantity=(i % 3) + 1,
        )
        for i in range(item_count)
    )
    return Order(
        object_id="a1b2c3d4e5f6a7b8c9d0e1f2a3b4c5d6",
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
        line_items=items,
        order_status="PAID",
    )


def main():
    """Write sample-packing-slip.pdf (optional argv[1]: number of items)."""
    item_count = int(sys.argv[1]) if len(sys.argv) > 1 else 3
    output = Path("output") / "sample-packing-slip.pdf"

    business = BusinessInfo(
        name=Config.BUSINESS_NAME,
        street=Config.BUSINESS_STREET,
        city=Config.BUSINESS_CITY,
        state=Config.BUSINESS_STATE,
        zip=Config.BUSINESS_ZIP,
    )
    logo = Path(Config.LOGO_PATH) if Config.LOGO_PATH else None
    engine = LayoutEngine(ReportLabMeasurer(), business, logo)

    try:
        result = render_packing_slip(build_sample_order(item_count), output, engine)
    except Exception as e:
        print(f"ERROR: {e}", file=sys.stderr)
        sys.exit(1)

    info = PDFAnalyzer().analyze(output)
    print(f"SUCCESS: {output} ({result.pages} page(s), {result.rows} item row(s), "
          f"{info['size_kb']} KB)")


if __name__ == "__main__":
    main()
