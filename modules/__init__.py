"""Helper modules for SlipPrinter."""

__all__ = [
    "layout",
    "pdf_analyzer",
    "pdf_backend",
    "window",
]
