"""
CUPS print queue submission.

Submission is fire-and-forget: `lp` returns as soon as the job is queued
(it copies the file into the spool), not when the page is printed.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Optional

from .exceptions import SubmissionError


class CupsPrintSink:
    """Submits PDF files to one CUPS printer with `lp`."""

    def __init__(self, printer_name: str, lp_command: str = "lp",
                 logger: Optional[logging.Logger] = None):
        if not printer_name:
            raise ValueError("printer_name is required")
        self.printer_name = printer_name
        self.lp_command = lp_command
        self._logger = logger or logging.getLogger("slip_printer.core.print_sink")

    def submit(self, file_path: Path) -> str:
        """
        Queue `file_path` on the printer.

        Returns:
            CUPS job id line reported by lp (may be empty)

        Raises:
            SubmissionError: If lp is missing or exits non-zero
        """
        try:
            result = subprocess.run(
                [self.lp_command, "-d", self.printer_name, str(file_path)],
                check=True,
                capture_output=True,
                text=True,
            )
        except FileNotFoundError as e:
            raise SubmissionError(self.printer_name, str(file_path),
                                  f"{self.lp_command} not found") from e
        except subprocess.CalledProcessError as e:
            reason = (e.stderr or "").strip() or str(e)
            raise SubmissionError(self.printer_name, str(file_path), reason,
                                  exit_code=e.returncode) from e

        job_id = (result.stdout or "").strip()
        if job_id:
            self._logger.info(f"  CUPS job: {job_id}")
        if (result.stderr or "").strip():
            self._logger.warning(f"  lp warning: {result.stderr.strip()}")
        return job_id
