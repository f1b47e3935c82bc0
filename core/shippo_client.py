"""
Shippo REST API client.

Read-only access to the two resources the print run needs:

    - Orders, filtered server-side by placement time and status
    - Transactions (purchased labels), which have no server-side date
      filter: pages are read newest-first and reading stops at the first
      transaction created before the window start

Usage:
    client = ShippoClient(api_token)
    orders = client.list_orders(window, statuses=["PAID"])
    labels = client.list_label_transactions(window)
    client.download_label(labels[0], Path("/tmp/label.pdf"))

Every transport, HTTP status or decoding problem is raised as FetchError.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Any, Iterator, List, Optional, Sequence

import requests

from modules.window import TimeWindow
from models.record import Label, Order
from .exceptions import FetchError, LabelDownloadError


DEFAULT_BASE_URL = "https://api.goshippo.com"
DEFAULT_PAGE_SIZE = 25
DEFAULT_TIMEOUT_SECONDS = 30.0


def format_api_timestamp(value) -> str:
    """ISO 8601 in UTC with a trailing Z, as the API expects."""
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


class ShippoClient:
    """
    Minimal Shippo client built on requests.

    Attributes:
        base_url: API root (without trailing slash)
        page_size: Results requested per page
    """

    def __init__(
        self,
        api_token: str,
        base_url: str = DEFAULT_BASE_URL,
        page_size: int = DEFAULT_PAGE_SIZE,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if not api_token:
            raise ValueError("api_token is required")

        self.base_url = base_url.rstrip("/")
        self.page_size = page_size
        self.timeout_seconds = timeout_seconds
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"ShippoToken {api_token}",
            "Accept": "application/json",
        })
        self._logger = logger or logging.getLogger("slip_printer.core.shippo_client")

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def list_orders(
        self,
        window: TimeWindow,
        statuses: Optional[Sequence[str]] = None,
    ) -> List[Order]:
        """
        Fetch every order placed inside `window`.

        Args:
            window: Placement-time window
            statuses: Order statuses to include; None fetches all statuses

        Returns:
            Orders in API order, restricted to window.contains(placed_at)

        Raises:
            FetchError: If any page cannot be read
        """
        params: Dict[str, Any] = {
            "start_date": format_api_timestamp(window.start),
            "end_date": format_api_timestamp(window.end),
        }
        if statuses:
            params["order_status[]"] = list(statuses)

        orders: List[Order] = []
        for item in self._iter_pages("orders", params):
            order = Order.from_dict(item)
            # end_date is inclusive server-side; the window is half-open
            if window.contains(order.placed_at):
                orders.append(order)
            else:
                self._logger.debug(f"Ignoring order {order.display_number} outside {window}")

        self._logger.info(f"Fetched {len(orders)} order(s) for {window}")
        return orders

    # ------------------------------------------------------------------
    # Labels
    # ------------------------------------------------------------------

    def list_label_transactions(self, window: TimeWindow) -> List[Label]:
        """
        Fetch successful label transactions created inside `window`.

        Raises:
            FetchError: If any page cannot be read
        """
        labels: List[Label] = []
        params = {"object_status": "SUCCESS"}

        for item in self._iter_pages("transactions", params):
            label = Label.from_dict(item)
            created = label.created_at
            if created is not None and created < window.start:
                # Newest first: everything after this is older still
                break
            if not window.contains(created):
                continue
            if not label.label_url:
                self._logger.warning(f"Transaction {label.object_id} has no label URL, skipping")
                continue
            labels.append(label)

        self._logger.info(f"Fetched {len(labels)} label(s) for {window}")
        return labels

    def download_label(self, label: Label, output_path: Path) -> Path:
        """
        Download the label PDF of `label` to `output_path`.

        Raises:
            LabelDownloadError: If the download fails
        """
        self._logger.debug(f"Downloading label {label.identifier} from {label.label_url}")
        try:
            # Label URLs are pre-signed; the API token must not be sent along
            response = requests.get(label.label_url, timeout=self.timeout_seconds)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise LabelDownloadError(label.label_url, str(e)) from e

        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_bytes(response.content)
        return output_path

    # ------------------------------------------------------------------
    # Pagination
    # ------------------------------------------------------------------

    def _iter_pages(self, resource: str, params: Dict[str, Any]) -> Iterator[Dict[str, Any]]:
        """Yield every result of a paginated list endpoint, following `next`."""
        url = f"{self.base_url}/{resource}/"
        page = 1
        while True:
            payload = self._get_json(resource, url, {**params, "page": page, "results": self.page_size})
            results = payload.get("results") or []
            self._logger.debug(f"{resource}: page {page} returned {len(results)} item(s)")
            yield from results
            if not payload.get("next"):
                return
            page += 1

    def _get_json(self, resource: str, url: str, params: Dict[str, Any]) -> Dict[str, Any]:
        try:
            response = self._session.get(url, params=params, timeout=self.timeout_seconds)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else None
            raise FetchError(resource, str(e), status_code=status) from e
        except requests.exceptions.RequestException as e:
            raise FetchError(resource, str(e)) from e
        except ValueError as e:
            raise FetchError(resource, f"invalid JSON response: {e}") from e

        if not isinstance(payload, dict):
            raise FetchError(resource, f"unexpected response type {type(payload).__name__}")
        return payload
