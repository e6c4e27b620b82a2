"""
Pytest configuration and fixtures for the watermark and greeting services.
"""

import shutil
from io import BytesIO
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from reportlab.pdfgen import canvas

from watermark_api.core.config import Settings
from watermark_api.main import create_hello_app, create_watermark_app
from watermark_api.services.pdf_service import WatermarkProcessor


def build_pdf(pages: int = 2, text: str = "Original content") -> bytes:
    """Render a small multi-page PDF with ReportLab."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=(612, 792))
    for number in range(1, pages + 1):
        c.setFont("Helvetica", 18)
        c.drawString(72, 700, f"{text} - page {number}")
        c.showPage()
    c.save()
    return buffer.getvalue()


class RecordingProcessor(WatermarkProcessor):
    """Processor that records its arguments and copies the input unchanged."""

    def __init__(self):
        self.calls = []

    def add_text_watermarks(self, input_path, output_path, pages, on_top, text, description, metadata=None):
        self.calls.append(
            {
                "input_path": Path(input_path),
                "output_path": Path(output_path),
                "pages": list(pages),
                "on_top": on_top,
                "text": text,
                "description": description,
                "metadata": metadata,
            }
        )
        shutil.copyfile(input_path, output_path)


@pytest.fixture
def settings(tmp_path):
    """Settings with the scratch root inside the test's temporary directory."""
    return Settings(base_dir=tmp_path, scratch_dir=tmp_path / "scratch")


@pytest.fixture
def scratch_dir(settings):
    return Path(settings.scratch_dir)


@pytest.fixture
def sample_pdf():
    """A valid two-page PDF document."""
    return build_pdf()


@pytest.fixture
def sample_pdf_path(tmp_path, sample_pdf):
    path = tmp_path / "sample.pdf"
    path.write_bytes(sample_pdf)
    return path


@pytest.fixture
def client(settings):
    """Test client for the watermark service backed by the real processor."""
    return TestClient(create_watermark_app(settings))


@pytest.fixture
def recording_processor():
    return RecordingProcessor()


@pytest.fixture
def recording_client(settings, recording_processor):
    """Test client for the watermark service with a recording processor."""
    return TestClient(create_watermark_app(settings, processor=recording_processor))


@pytest.fixture
def hello_client(settings):
    """Test client for the greeting service."""
    return TestClient(create_hello_app(settings))
