"""
Pytest configuration and shared fixtures.
"""

from typing import List

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from pdf_chat.services import ChatService, DocumentService, PDFProcessor, VectorService


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests (no external dependencies)")
    config.addinivalue_line("markers", "integration: API tests through the FastAPI test client")


def build_pdf(pages: List[str]) -> bytes:
    """Build a minimal PDF with one line of Helvetica text per page."""
    page_ids = [4 + 2 * i for i in range(len(pages))]
    kids = " ".join(f"{page_id} 0 R" for page_id in page_ids)

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {len(pages)} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for page_id, text in zip(page_ids, pages):
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                "/Resources << /Font << /F1 3 0 R >> >> "
                f"/Contents {page_id + 1} 0 R >>"
            ).encode()
        )
        escaped = text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")
        stream = f"BT /F1 12 Tf 72 720 Td ({escaped}) Tj ET".encode()
        objects.append(
            f"<< /Length {len(stream)} >>\nstream\n".encode() + stream + b"\nendstream"
        )

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += f"{number} 0 obj\n".encode() + body + b"\nendobj\n"

    xref_offset = len(out)
    out += f"xref\n0 {len(objects) + 1}\n".encode()
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += f"{offset:010d} 00000 n \n".encode()
    out += (
        f"trailer\n<< /Size {len(objects) + 1} /Root 1 0 R >>\n"
        f"startxref\n{xref_offset}\n%%EOF\n"
    ).encode()
    return bytes(out)


@pytest.fixture
def pdf_factory():
    """Return the minimal PDF builder."""
    return build_pdf


@pytest.fixture
def sky_pdf() -> bytes:
    """One-page PDF containing a single sentence."""
    return build_pdf(["The sky is blue."])


@pytest.fixture
def corrupt_pdf() -> bytes:
    """Bytes that are not a PDF."""
    return b"this is definitely not a pdf file"


@pytest.fixture
def fake_embeddings() -> DeterministicFakeEmbedding:
    """Embeddings that map identical text to identical vectors."""
    return DeterministicFakeEmbedding(size=32)


@pytest.fixture
def make_document_service(fake_embeddings):
    """Build a DocumentService wired to fakes, answering with the given responses."""

    def _make(responses: List[str]) -> DocumentService:
        return DocumentService(
            pdf_processor=PDFProcessor(),
            vector_service=VectorService(embeddings=fake_embeddings),
            chat_service=ChatService(llm=FakeListChatModel(responses=responses)),
        )

    return _make
