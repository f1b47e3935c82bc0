"""Lightweight PDF analyzer for vetting documents before they are printed."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Any

from pypdf import PdfReader

from core.exceptions import RenderError


class PDFAnalyzer:
    """Extract minimal metadata, resilient to malformed PDFs."""

    def analyze(self, pdf_path: str | Path) -> Dict[str, Any]:
        path = Path(pdf_path)
        info: Dict[str, Any] = {
            "path": str(path),
            "pages": 0,
            "size_kb": round(path.stat().st_size / 1024, 2) if path.exists() else 0,
            "page_dimensions": [],
        }

        try:
            reader = PdfReader(str(path))
            info["pages"] = len(reader.pages)
            for page in reader.pages:
                width = round(float(page.mediabox.width) / 72, 2)
                height = round(float(page.mediabox.height) / 72, 2)
                info["page_dimensions"].append({"width_in": width, "height_in": height})
        except Exception as exc:
            info["error"] = f"PDF analysis failed: {exc}"

        return info

    def require_pages(self, pdf_path: str | Path) -> Dict[str, Any]:
        """
        Analyze a PDF and reject it when it has no readable pages.

        Raises:
            RenderError: If the file is missing, malformed or empty
        """
        info = self.analyze(pdf_path)
        if info["pages"] < 1:
            reason = info.get("error", "document has no pages")
            raise RenderError(f"Unusable PDF {Path(pdf_path).name}: {reason}",
                              details={"path": info["path"]})
        return info
