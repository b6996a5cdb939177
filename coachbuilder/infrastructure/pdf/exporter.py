"""
PDF export for plan documents.

Two steps, mirroring a screenshot-to-PDF flow:
1. Rasterize the document into a PNG at a fixed device scale (Pillow)
2. Embed the bitmap in a single page that is A4 wide and as tall as the
   bitmap's aspect ratio requires, never shorter than A4 (ReportLab)

Nothing is written to disk until both steps succeed.
"""

import io
import logging
from pathlib import Path
from typing import Callable, Optional

from PIL import Image, ImageDraw, ImageFont
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ...core.plans.documents import PlanDocument

logger = logging.getLogger(__name__)

RASTER_SCALE = 2

# A4 at 96 dpi, the width the document is laid out for before scaling
BASE_WIDTH_PX = 794
MARGIN_PX = 40

TITLE_SIZE = 28
HEADING_SIZE = 18
BODY_SIZE = 13

TEXT_COLOR = (17, 24, 39)
MUTED_COLOR = (75, 85, 99)
ACCENT_COLOR = (37, 99, 235)

Rasterizer = Callable[[PlanDocument, int], bytes]


class PdfExportError(Exception):
    """Raised when the rendered document cannot be turned into a PDF."""
    pass


def _font(size: int, scale: int) -> ImageFont.ImageFont:
    return ImageFont.load_default(size=size * scale)


def _wrap(draw: ImageDraw.ImageDraw, text: str, font, max_width: float) -> list[str]:
    """Greedy word wrap by rendered width."""
    words = text.split()
    if not words:
        return [""]

    lines: list[str] = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if draw.textlength(candidate, font=font) <= max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def _layout(document: PlanDocument) -> list[tuple[str, int, tuple[int, int, int], int]]:
    """(text, font size, color, space before) in reading order."""
    items = [(document.title, TITLE_SIZE, ACCENT_COLOR, 0)]
    if document.subtitle:
        items.append((document.subtitle, HEADING_SIZE, TEXT_COLOR, 8))
    if document.details:
        items.append((" | ".join(document.details), BODY_SIZE, MUTED_COLOR, 4))
    if document.byline:
        items.append((document.byline, BODY_SIZE, MUTED_COLOR, 4))

    if document.is_empty and document.empty_message:
        items.append((document.empty_message, BODY_SIZE, MUTED_COLOR, 24))

    for section in document.sections:
        items.append((section.heading, HEADING_SIZE, TEXT_COLOR, 24))
        if section.subheading:
            items.append((section.subheading, BODY_SIZE, MUTED_COLOR, 2))
        for line in section.lines:
            items.append((line, BODY_SIZE, TEXT_COLOR, 4))
    return items


def rasterize_document(document: PlanDocument, scale: int = RASTER_SCALE) -> bytes:
    """Render a document to PNG bytes at the given device scale."""
    width = BASE_WIDTH_PX * scale
    margin = MARGIN_PX * scale
    text_width = width - 2 * margin

    # Measure with a scratch surface first so the final image fits exactly
    scratch = ImageDraw.Draw(Image.new("RGB", (1, 1)))
    rows = []
    height = margin
    for text, size, color, space_before in _layout(document):
        font = _font(size, scale)
        line_height = int(size * scale * 1.4)
        height += space_before * scale
        for line in _wrap(scratch, text, font, text_width):
            rows.append((line, font, color, height))
            height += line_height
    height += margin

    image = Image.new("RGB", (width, height), "white")
    draw = ImageDraw.Draw(image)
    for line, font, color, top in rows:
        draw.text((margin, top), line, font=font, fill=color)

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def page_size_for(image_width: int, image_height: int) -> tuple[float, float]:
    """A4 width, height derived from the bitmap aspect ratio (minimum A4)."""
    page_width, a4_height = A4
    derived = page_width * image_height / image_width
    return page_width, max(a4_height, derived)


class PdfExporter:
    """
    Writes plan documents as single-page PDFs into an output directory.

    Usage:
        exporter = PdfExporter(Path("./out"))
        path = exporter.export(builder.render_document(), builder.pdf_filename)
    """

    def __init__(
        self,
        output_dir: Path,
        rasterizer: Optional[Rasterizer] = None,
        scale: int = RASTER_SCALE,
    ) -> None:
        self._output_dir = Path(output_dir)
        self._rasterize = rasterizer or rasterize_document
        self._scale = scale

    def export(self, document: PlanDocument, filename: str) -> Path:
        """
        Rasterize and save a document.

        Raises:
            PdfExportError: the rasterizer produced no usable image
        """
        png_bytes = self._rasterize(document, self._scale)
        if not png_bytes:
            raise PdfExportError("Rendered image data is empty")

        try:
            image = Image.open(io.BytesIO(png_bytes))
            image.load()
        except (OSError, ValueError) as e:
            raise PdfExportError(f"Rendered image data is invalid: {e}") from e

        image_width, image_height = image.size
        if not image_width or not image_height:
            raise PdfExportError("Rendered image has no size")

        page_width, page_height = page_size_for(image_width, image_height)
        draw_height = page_width * image_height / image_width

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=(page_width, page_height))
        pdf.setTitle(document.title)
        # Anchor to the top edge when the page is padded out to A4
        pdf.drawImage(
            ImageReader(image),
            0,
            page_height - draw_height,
            width=page_width,
            height=draw_height,
        )
        pdf.showPage()
        pdf.save()

        self._output_dir.mkdir(parents=True, exist_ok=True)
        path = self._output_dir / filename
        path.write_bytes(buffer.getvalue())

        logger.info(
            "Exported PDF",
            extra={
                "path": str(path),
                "image_size": [image_width, image_height],
                "page_height": round(page_height, 1),
            }
        )
        return path
