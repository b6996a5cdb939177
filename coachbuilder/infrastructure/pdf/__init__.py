"""PDF rendering of plan documents."""

from .exporter import PdfExporter, PdfExportError, rasterize_document

__all__ = ["PdfExportError", "PdfExporter", "rasterize_document"]
