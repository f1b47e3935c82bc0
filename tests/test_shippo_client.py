"""
Unit tests for the Shippo client.

The HTTP session is a MagicMock, so no request leaves the process.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
import requests

from core.exceptions import FetchError, LabelDownloadError
from core.shippo_client import ShippoClient, format_api_timestamp
from models.record import Label
from modules.window import TimeWindow


WINDOW = TimeWindow(
    start=datetime(2026, 2, 2, 14, 0, tzinfo=timezone.utc),
    end=datetime(2026, 2, 2, 14, 30, tzinfo=timezone.utc),
)


def page(results, next_url=None):
    response = MagicMock()
    response.json.return_value = {"results": results, "next": next_url}
    response.raise_for_status.return_value = None
    return response


def order_payload(number, placed_at, status="PAID"):
    return {
        "object_id": f"obj-{number}",
        "order_number": number,
        "placed_at": placed_at,
        "order_status": status,
        "to_address": {"name": "Jane Doe", "city": "Portland"},
        "line_items": [{"title": "Tee", "quantity": 2}],
    }


def transaction_payload(tracking, created, label_url="https://labels.example/l.pdf"):
    return {
        "object_id": f"tx-{tracking}",
        "object_created": created,
        "object_status": "SUCCESS",
        "tracking_number": tracking,
        "label_url": label_url,
    }


@pytest.fixture
def session():
    session = MagicMock()
    session.headers = {}
    return session


@pytest.fixture
def client(session):
    return ShippoClient("shippo_test_abc", session=session)


class TestClientSetup:
    """Construction and headers."""

    def test_token_required(self):
        with pytest.raises(ValueError):
            ShippoClient("")

    def test_auth_header(self, client, session):
        assert session.headers["Authorization"] == "ShippoToken shippo_test_abc"

    def test_timestamp_format(self):
        value = datetime(2026, 2, 2, 14, 0, 5, 123456, tzinfo=timezone.utc)
        assert format_api_timestamp(value) == "2026-02-02T14:00:05.123Z"


class TestListOrders:
    """Order listing, pagination and window filtering."""

    def test_follows_next_until_exhausted(self, client, session):
        session.get.side_effect = [
            page([order_payload("#1", "2026-02-02T14:05:00Z")], next_url="https://api/next"),
            page([order_payload("#2", "2026-02-02T14:10:00Z")], next_url="https://api/next"),
            page([order_payload("#3", "2026-02-02T14:15:00Z")]),
        ]

        orders = client.list_orders(WINDOW, statuses=["PAID"])

        assert [o.order_number for o in orders] == ["#1", "#2", "#3"]
        assert session.get.call_count == 3
        pages = [c.kwargs["params"]["page"] for c in session.get.call_args_list]
        assert pages == [1, 2, 3]

    def test_request_parameters(self, client, session):
        session.get.return_value = page([])

        client.list_orders(WINDOW, statuses=["PAID"])

        args, kwargs = session.get.call_args
        assert args[0] == "https://api.goshippo.com/orders/"
        params = kwargs["params"]
        assert params["start_date"] == "2026-02-02T14:00:00.000Z"
        assert params["end_date"] == "2026-02-02T14:30:00.000Z"
        assert params["order_status[]"] == ["PAID"]
        assert params["results"] == 25
        assert kwargs["timeout"] == 30.0

    def test_all_statuses_sends_no_filter(self, client, session):
        session.get.return_value = page([])

        client.list_orders(WINDOW, statuses=None)

        assert "order_status[]" not in session.get.call_args.kwargs["params"]

    def test_window_is_half_open(self, client, session):
        session.get.return_value = page([
            order_payload("#start", "2026-02-02T14:00:00Z"),
            order_payload("#end", "2026-02-02T14:30:00Z"),
            order_payload("#none", None),
        ])

        orders = client.list_orders(WINDOW)

        assert [o.order_number for o in orders] == ["#start"]

    def test_parses_order_fields(self, client, session):
        session.get.return_value = page([order_payload("#1068", "2026-02-02T14:05:00Z")])

        order = client.list_orders(WINDOW)[0]

        assert order.placed_at == datetime(2026, 2, 2, 14, 5, tzinfo=timezone.utc)
        assert order.to_address.name == "Jane Doe"
        assert order.total_quantity == 2

    def test_http_error_becomes_fetch_error(self, client, session):
        response = MagicMock()
        response.status_code = 401
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            "401 Client Error: Unauthorized", response=response
        )
        session.get.return_value = response

        with pytest.raises(FetchError) as exc_info:
            client.list_orders(WINDOW)
        assert exc_info.value.status_code == 401
        assert "Unauthorized" in str(exc_info.value)

    def test_connection_error_becomes_fetch_error(self, client, session):
        session.get.side_effect = requests.exceptions.ConnectionError("connection refused")

        with pytest.raises(FetchError) as exc_info:
            client.list_orders(WINDOW)
        assert exc_info.value.status_code is None

    def test_invalid_json_becomes_fetch_error(self, client, session):
        response = MagicMock()
        response.json.side_effect = ValueError("Expecting value")
        session.get.return_value = response

        with pytest.raises(FetchError) as exc_info:
            client.list_orders(WINDOW)
        assert "invalid JSON" in str(exc_info.value)

    def test_failure_on_later_page_fails_whole_fetch(self, client, session):
        session.get.side_effect = [
            page([order_payload("#1", "2026-02-02T14:05:00Z")], next_url="https://api/next"),
            requests.exceptions.Timeout("read timed out"),
        ]

        with pytest.raises(FetchError):
            client.list_orders(WINDOW)


class TestListLabels:
    """Transaction listing with newest-first early exit."""

    def test_stops_at_first_older_transaction(self, client, session):
        session.get.side_effect = [
            page([
                transaction_payload("940003", "2026-02-02T14:35:00Z"),
                transaction_payload("940002", "2026-02-02T14:20:00Z"),
            ], next_url="https://api/next"),
            page([
                transaction_payload("940001", "2026-02-02T13:59:59Z"),
                transaction_payload("940000", "2026-02-02T14:10:00Z"),
            ], next_url="https://api/next"),
        ]

        labels = client.list_label_transactions(WINDOW)

        assert [label.tracking_number for label in labels] == ["940002"]
        assert session.get.call_count == 2
        assert session.get.call_args.kwargs["params"]["object_status"] == "SUCCESS"

    def test_skips_transaction_without_label_url(self, client, session):
        session.get.return_value = page([
            transaction_payload("940002", "2026-02-02T14:20:00Z", label_url=""),
            transaction_payload("940001", "2026-02-02T14:10:00Z"),
        ])

        labels = client.list_label_transactions(WINDOW)

        assert [label.tracking_number for label in labels] == ["940001"]


class TestDownloadLabel:
    """Label PDF download."""

    @pytest.fixture
    def label(self):
        return Label(object_id="tx-1", tracking_number="9400111",
                     label_url="https://labels.example/9400111.pdf")

    def test_writes_content(self, client, label, tmp_path):
        response = MagicMock()
        response.content = b"%PDF-1.4 label"
        target = tmp_path / "out" / "label.pdf"

        with patch("core.shippo_client.requests.get", return_value=response) as get:
            client.download_label(label, target)

        get.assert_called_once_with("https://labels.example/9400111.pdf", timeout=30.0)
        assert target.read_bytes() == b"%PDF-1.4 label"

    def test_failure_raises_label_download_error(self, client, label, tmp_path):
        with patch("core.shippo_client.requests.get",
                   side_effect=requests.exceptions.ConnectionError("unreachable")):
            with pytest.raises(LabelDownloadError) as exc_info:
                client.download_label(label, tmp_path / "label.pdf")
        assert exc_info.value.label_url == label.label_url
        assert not (tmp_path / "label.pdf").exists()
