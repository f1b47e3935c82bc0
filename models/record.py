"""
Record data models.

These models represent the units of work fetched from Shippo for one run:
- Order: a placed order that needs a packing slip
- Label: a purchased shipping label that needs printing

Records are frozen dataclasses. They are built once from the API payload
and only read afterwards by the pipeline and the layout engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Any, Optional, Tuple, Union


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse an ISO 8601 timestamp from the API into an aware UTC datetime.

    Returns None for missing or unparsable values.
    """
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _text(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


@dataclass(frozen=True)
class Address:
    """
    Shipping address of an order.

    Missing fields are empty strings so the layout never prints "None".
    """

    name: str = ""
    company: str = ""
    street1: str = ""
    street2: str = ""
    city: str = ""
    state: str = ""
    zip: str = ""
    country: str = ""

    @property
    def city_line(self) -> str:
        """City, state and zip on one line."""
        return f"{self.city}, {self.state} {self.zip}"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Address":
        """Create from an API address object."""
        data = data or {}
        return cls(
            name=_text(data, "name"),
            company=_text(data, "company"),
            street1=_text(data, "street1"),
            street2=_text(data, "street2"),
            city=_text(data, "city"),
            state=_text(data, "state"),
            zip=_text(data, "zip"),
            country=_text(data, "country"),
        )


@dataclass(frozen=True)
class LineItem:
    """A single ordered product."""

    title: str
    """Product title."""

    variant_title: str = ""
    """Variant (size, color...) or empty string."""

    quantity: int = 0
    """Ordered quantity, never negative."""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LineItem":
        """Create from an API line item, defaulting quantity to 0."""
        try:
            quantity = int(data.get("quantity") or 0)
        except (TypeError, ValueError):
            quantity = 0
        return cls(
            title=_text(data, "title"),
            variant_title=_text(data, "variant_title"),
            quantity=max(quantity, 0),
        )


@dataclass(frozen=True)
class Order:
    """
    A Shippo order that needs a packing slip.

    Lifecycle:
        1. Fetched for the current window
        2. Checked against the sentinel store
        3. Rendered and submitted (or skipped)
    """

    object_id: str
    """Shippo object id."""

    order_number: str = ""
    """Human-readable order number (e.g. "#1068")."""

    placed_at: Optional[datetime] = None
    """When the order was placed (UTC)."""

    to_address: Address = field(default_factory=Address)
    """Destination address."""

    line_items: Tuple[LineItem, ...] = ()
    """Ordered products."""

    order_status: str = ""
    """Shippo order status (PAID, SHIPPED...)."""

    @property
    def display_number(self) -> str:
        """Number shown in the slip title."""
        return self.order_number or self.object_id or "N/A"

    @property
    def identifier(self) -> str:
        """Identifier used to build the sentinel key."""
        return self.order_number or self.object_id or "unknown"

    @property
    def timestamp(self) -> Optional[datetime]:
        """Business timestamp for windowing and keys."""
        return self.placed_at

    @property
    def total_quantity(self) -> int:
        """Sum of all item quantities (not the number of items)."""
        return sum(item.quantity for item in self.line_items)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Order":
        """Create from an API order object."""
        return cls(
            object_id=_text(data, "object_id"),
            order_number=_text(data, "order_number"),
            placed_at=parse_timestamp(data.get("placed_at")),
            to_address=Address.from_dict(data.get("to_address")),
            line_items=tuple(LineItem.from_dict(item) for item in data.get("line_items") or []),
            order_status=_text(data, "order_status"),
        )


@dataclass(frozen=True)
class Label:
    """A purchased shipping label (a Shippo transaction)."""

    object_id: str
    created_at: Optional[datetime] = None
    tracking_number: str = ""
    label_url: str = ""
    status: str = ""

    @property
    def identifier(self) -> str:
        """Identifier used to build the sentinel key."""
        return self.tracking_number or self.object_id or "unknown"

    @property
    def timestamp(self) -> Optional[datetime]:
        """Business timestamp for windowing and keys."""
        return self.created_at

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Label":
        """Create from an API transaction object."""
        return cls(
            object_id=_text(data, "object_id"),
            created_at=parse_timestamp(data.get("object_created")),
            tracking_number=_text(data, "tracking_number"),
            label_url=_text(data, "label_url"),
            status=_text(data, "object_status"),
        )


Record = Union[Order, Label]
