"""Shared fixtures for the parity splitter tests."""

import io
import os
import shutil
import tempfile
from pathlib import Path

import pytest
from pypdf import PdfReader, PdfWriter

# Settings are read at import time, point them at a scratch area first
_WORKDIR = Path(tempfile.mkdtemp(prefix="paritysplit-tests-"))
os.environ["UPLOAD_DIR"] = str(_WORKDIR / "uploads")
os.environ["PUBLIC_DIR"] = str(_WORKDIR / "public")
os.environ["OUTPUT_RETENTION_SECONDS"] = "0"

from fastapi.testclient import TestClient  # noqa: E402

from paritysplit.config import settings  # noqa: E402
from paritysplit.main import app  # noqa: E402
from paritysplit.splitter import ParitySplitter  # noqa: E402


def build_pdf(page_count: int) -> bytes:
    """Blank PDF whose page k (1-indexed) is 100 + k points wide."""
    writer = PdfWriter()
    for k in range(1, page_count + 1):
        writer.add_blank_page(width=100 + k, height=200)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def page_numbers(path: Path) -> list[int]:
    """Recover original 1-indexed page numbers from page widths."""
    reader = PdfReader(path)
    return [round(float(page.mediabox.width)) - 100 for page in reader.pages]


@pytest.fixture
def make_pdf(tmp_path):
    """Write an N-page PDF into a scratch upload dir and return its path."""
    upload_dir = tmp_path / "uploads"
    upload_dir.mkdir()

    def _make(page_count: int, name: str = "input.pdf") -> Path:
        path = upload_dir / name
        path.write_bytes(build_pdf(page_count))
        return path

    return _make


@pytest.fixture
def public_dir(tmp_path) -> Path:
    path = tmp_path / "public"
    path.mkdir()
    return path


@pytest.fixture
def parity_splitter(public_dir) -> ParitySplitter:
    return ParitySplitter(public_dir=public_dir)


@pytest.fixture
def client():
    """TestClient running the app lifespan, with directories emptied afterwards."""
    with TestClient(app) as test_client:
        yield test_client

    for directory in (settings.upload_dir, settings.public_dir):
        shutil.rmtree(directory, ignore_errors=True)
