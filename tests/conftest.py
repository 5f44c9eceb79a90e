import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

LAB_LINES = (
    "Laboratory Report",
    "Glucose 105 mg/dL (70-99)",
    "Total Cholesterol 215 mg/dL (<200)",
    "Vitamin D 19 ng/mL (30-100)",
)


def _pdf(pages: list[list[str]]) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for lines in pages:
        y = 720
        for line in lines:
            c.drawString(72, y, line)
            y -= 18
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes() -> bytes:
    """Generate a minimal single-page PDF with known text content."""
    return _pdf([["Hello PDF World"]])


@pytest.fixture()
def lab_report_pdf_bytes() -> bytes:
    """Single-page lab report with three abnormal values."""
    return _pdf([list(LAB_LINES)])


@pytest.fixture()
def multi_page_pdf_bytes() -> bytes:
    """Generate a two-page PDF with known text on each page."""
    return _pdf([["Page one content"], ["Page two content"]])


@pytest.fixture()
def three_page_pdf_bytes() -> bytes:
    return _pdf([["Hemogram page"], ["Lipid panel page"], ["Hormones page"]])


@pytest.fixture()
def empty_pdf_bytes() -> bytes:
    """Generate a valid PDF with no text content (blank page)."""
    return _pdf([[]])


@pytest.fixture()
def png_bytes() -> bytes:
    """PNG signature followed by padding; enough for signature detection."""
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * 200


@pytest.fixture()
def jpeg_bytes() -> bytes:
    return b"\xff\xd8\xff\xe0" + b"\x00" * 200
