"""
Unit tests for CUPS submission.
"""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from core.exceptions import SubmissionError
from core.print_sink import CupsPrintSink


@pytest.fixture
def printer():
    return CupsPrintSink("Brother_QL")


def completed(stdout="", stderr=""):
    result = MagicMock()
    result.stdout = stdout
    result.stderr = stderr
    return result


class TestCupsPrintSink:
    """lp invocation and failure mapping."""

    def test_printer_name_required(self):
        with pytest.raises(ValueError):
            CupsPrintSink("")

    def test_invokes_lp(self, printer, tmp_path):
        document = tmp_path / "slip.pdf"

        with patch("core.print_sink.subprocess.run",
                   return_value=completed("request id is Brother_QL-42 (1 file(s))\n")) as run:
            job_id = printer.submit(document)

        run.assert_called_once_with(
            ["lp", "-d", "Brother_QL", str(document)],
            check=True,
            capture_output=True,
            text=True,
        )
        assert job_id == "request id is Brother_QL-42 (1 file(s))"

    def test_nonzero_exit(self, printer, tmp_path):
        error = subprocess.CalledProcessError(
            1, ["lp"], output="", stderr="lp: The printer or class does not exist.\n"
        )

        with patch("core.print_sink.subprocess.run", side_effect=error):
            with pytest.raises(SubmissionError) as exc_info:
                printer.submit(tmp_path / "slip.pdf")

        assert exc_info.value.exit_code == 1
        assert str(exc_info.value).startswith(
            f'Failed to print {tmp_path / "slip.pdf"} on printer "Brother_QL" (1): '
            "lp: The printer or class does not exist."
        )

    def test_lp_missing(self, printer, tmp_path):
        with patch("core.print_sink.subprocess.run", side_effect=FileNotFoundError("lp")):
            with pytest.raises(SubmissionError) as exc_info:
                printer.submit(tmp_path / "slip.pdf")
        assert "lp not found" in str(exc_info.value)
        assert exc_info.value.exit_code is None

    def test_custom_lp_command(self, tmp_path):
        sink = CupsPrintSink("Brother_QL", lp_command="/usr/local/bin/lp")

        with patch("core.print_sink.subprocess.run", return_value=completed()) as run:
            assert sink.submit(tmp_path / "slip.pdf") == ""

        assert run.call_args.args[0][0] == "/usr/local/bin/lp"
