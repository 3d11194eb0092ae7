import struct
import zlib

import pytest
from fastapi.testclient import TestClient

from intake.main import create_app
from intake.models import ScanResult
from intake.scanner import PlaceholderScanBackend, ScanCoordinator, ScanReport
from intake.services.document_upload import DocumentUploadService
from intake.services.image_upload import ImageUploadService
from intake.store import DocumentStore, ImageStore
from intake.tokens import AccessTokenIssuer


PDF_SAMPLE = (
    b"%PDF-1.4\n"
    b"1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
    b"2 0 obj\n<< /Type /Pages /Kids [] /Count 0 >>\nendobj\n"
    b"xref\n0 3\n0000000000 65535 f \n0000000009 00000 n \n0000000058 00000 n \n"
    b"trailer\n<< /Size 3 /Root 1 0 R >>\n"
    b"startxref\n110\n%%EOF\n"
)


def _png_chunk(kind: bytes, data: bytes) -> bytes:
    crc = zlib.crc32(kind + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", crc)


def build_png(
    width: int = 4,
    height: int = 3,
    bit_depth: int = 8,
    color_type: int = 2,
    extra_chunks: bytes = b"",
    payload_size: int = 256,
) -> bytes:
    ihdr = struct.pack(">IIBBBBB", width, height, bit_depth, color_type, 0, 0, 0)
    # level 0 stores the payload, so the file grows with payload_size
    idat = zlib.compress(bytes(i % 251 for i in range(payload_size)), 0)
    return (
        b"\x89PNG\r\n\x1a\n"
        + _png_chunk(b"IHDR", ihdr)
        + extra_chunks
        + _png_chunk(b"IDAT", idat)
        + _png_chunk(b"IEND", b"")
    )


class FixedScanBackend:
    """Scan backend that always reports the given outcome."""

    engine = "fixed"

    def __init__(self, outcome: ScanResult) -> None:
        self.outcome = outcome
        self.calls = 0

    async def scan(self, content: bytes) -> ScanReport:
        self.calls += 1
        return ScanReport(outcome=self.outcome, engine=self.engine, detail="forced")


@pytest.fixture
def fixed_backend():
    return FixedScanBackend


@pytest.fixture
def make_png():
    return build_png


@pytest.fixture
def pdf_bytes():
    return PDF_SAMPLE


@pytest.fixture
def chunks():
    """Turn byte chunks into the async stream the services consume."""

    def _make(*parts: bytes):
        async def _gen():
            for part in parts:
                yield part

        return _gen()

    return _make


@pytest.fixture
def fast_scanner():
    return ScanCoordinator(PlaceholderScanBackend(delay_seconds=0))


@pytest.fixture
def image_store():
    return ImageStore()


@pytest.fixture
def document_store():
    return DocumentStore()


@pytest.fixture
def image_service(image_store):
    return ImageUploadService(image_store)


@pytest.fixture
def document_service(document_store, fast_scanner):
    return DocumentUploadService(document_store, fast_scanner, AccessTokenIssuer())


@pytest.fixture
def app(fast_scanner):
    return create_app(scanner=fast_scanner)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
