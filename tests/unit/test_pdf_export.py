"""Unit tests for the PDF exporter."""

import io

import pytest
from PIL import Image
from reportlab.lib.pagesizes import A4

from coachbuilder.core.plans import DocumentSection, PlanDocument
from coachbuilder.infrastructure.pdf import PdfExporter, PdfExportError, rasterize_document
from coachbuilder.infrastructure.pdf.exporter import BASE_WIDTH_PX, page_size_for


@pytest.fixture
def document():
    return PlanDocument(
        title="Workout Plan",
        subtitle="Client: Jane Doe",
        details=["Gender: Female", "Age: 28"],
        byline="Coach: Nasr",
        sections=[DocumentSection(heading="1. Barbell Squat", subheading="Legs", lines=["Sets: 3    Reps: 10"])],
    )


class TestRasterize:

    def test_png_at_device_scale(self, document):
        image = Image.open(io.BytesIO(rasterize_document(document, scale=2)))
        assert image.format == "PNG"
        assert image.size[0] == BASE_WIDTH_PX * 2

    def test_long_documents_grow_taller(self, document):
        short = Image.open(io.BytesIO(rasterize_document(document, scale=1)))
        document.sections = document.sections * 30
        tall = Image.open(io.BytesIO(rasterize_document(document, scale=1)))
        assert tall.size[1] > short.size[1]


class TestPageSize:

    def test_short_image_padded_to_a4(self):
        width, height = page_size_for(1000, 100)
        assert (width, height) == A4

    def test_tall_image_extends_page(self):
        width, height = page_size_for(1000, 5000)
        assert width == A4[0]
        assert height == pytest.approx(A4[0] * 5)


class TestPdfExporter:

    def test_writes_pdf(self, tmp_path, document):
        path = PdfExporter(tmp_path / "out").export(document, "Jane-Doe-workout.pdf")

        assert path == tmp_path / "out" / "Jane-Doe-workout.pdf"
        assert path.read_bytes().startswith(b"%PDF")

    def test_empty_image_data(self, tmp_path, document):
        exporter = PdfExporter(tmp_path, rasterizer=lambda doc, scale: b"")

        with pytest.raises(PdfExportError, match="Rendered image data is empty"):
            exporter.export(document, "plan.pdf")

        assert not (tmp_path / "plan.pdf").exists()

    def test_invalid_image_data(self, tmp_path, document):
        exporter = PdfExporter(tmp_path, rasterizer=lambda doc, scale: b"not a png")

        with pytest.raises(PdfExportError):
            exporter.export(document, "plan.pdf")

        assert not (tmp_path / "plan.pdf").exists()
