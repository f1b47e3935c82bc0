"""
Tests for the run entry point and its exit codes.

Shippo and CUPS are replaced with mocks; layout, rendering and the sentinel
store are real.
"""

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

import app
from config import Settings
from core.exceptions import ConfigurationError, FetchError
from models.job_result import JobSummary, RecordResult, RunSummary

from conftest import make_order


NOW = datetime(2026, 2, 2, 14, 45, tzinfo=timezone.utc)


@pytest.fixture
def settings(tmp_path, business):
    return Settings(
        api_token="shippo_test_abc",
        api_base_url="https://api.goshippo.com",
        timeout_seconds=30.0,
        printer_name="Brother_QL",
        interval_minutes=15,
        lookback=2,
        include_all_statuses=False,
        sentinel_policy="keep",
        scratch_dir=tmp_path / "scratch",
        business=business,
        logo_path=None,
        log_level="INFO",
        log_dir=None,
    )


@pytest.fixture
def shippo():
    with patch("app.ShippoClient") as client_cls:
        client = client_cls.return_value
        client.list_orders.return_value = [make_order("#1068", datetime(2026, 2, 2, 14, 30, tzinfo=timezone.utc))]
        client.list_label_transactions.return_value = []
        yield client


@pytest.fixture
def cups():
    with patch("app.CupsPrintSink") as sink_cls:
        sink = sink_cls.return_value
        sink.submit.return_value = "request id is Brother_QL-1 (1 file(s))"
        yield sink


class TestRun:
    """One pass over both jobs."""

    def test_prints_new_order(self, settings, shippo, cups):
        summary = app.run(settings, now=NOW)

        assert summary.success == 1
        assert summary.exit_code == 0
        submitted = Path(cups.submit.call_args.args[0])
        assert submitted.name == "packing-slip-2026-02-02-_1068.pdf"
        assert (settings.scratch_dir / "packing-slip-2026-02-02-_1068.pdf").exists()

    def test_window_from_now(self, settings, shippo, cups):
        app.run(settings, now=NOW)

        window = shippo.list_orders.call_args.args[0]
        assert window.start == datetime(2026, 2, 2, 14, 15, tzinfo=timezone.utc)
        assert window.end == NOW
        assert shippo.list_orders.call_args.kwargs["statuses"] == ("PAID",)

    def test_second_run_skips(self, settings, shippo, cups):
        app.run(settings, now=NOW)
        summary = app.run(settings, now=NOW)

        assert summary.skipped == 1
        assert cups.submit.call_count == 1

    def test_label_fetch_failure_keeps_slips(self, settings, shippo, cups):
        shippo.list_label_transactions.side_effect = FetchError("transactions", "timed out")

        summary = app.run(settings, now=NOW)

        assert summary.success == 1
        assert summary.errors == 1
        assert summary.exit_code == 1


class TestMain:
    """Exit codes of the process entry point."""

    @pytest.fixture(autouse=True)
    def quiet_logging(self):
        with patch("app.setup_logging"):
            yield

    def test_configuration_error_exits_2(self):
        with patch("app.build_settings",
                   side_effect=ConfigurationError("CUPS_PRINTER_NAME environment variable is required",
                                                  setting="CUPS_PRINTER_NAME")), \
                patch("app.run") as run:
            assert app.main() == app.EXIT_CONFIGURATION
        run.assert_not_called()

    def test_errors_exit_1(self, settings):
        summary = RunSummary([JobSummary("labels", job_error="Failed to fetch transactions")])
        with patch("app.build_settings", return_value=settings), \
                patch("app.run", return_value=summary):
            assert app.main() == app.EXIT_ERRORS

    def test_clean_run_exits_0(self, settings):
        summary = RunSummary([JobSummary("packing-slips", results=[RecordResult.create_delivered("a")])])
        with patch("app.build_settings", return_value=settings), \
                patch("app.run", return_value=summary):
            assert app.main() == app.EXIT_OK
