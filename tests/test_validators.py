import pytest

from intake.binary import ByteCursor, OutOfBoundsError
from intake.models import CorruptionKind
from intake.validators import (
    PDF_SIGNATURE,
    PNG_SIGNATURE,
    has_pdf_signature,
    has_png_signature,
    inspect_pdf,
    inspect_png,
)


# ─── ByteCursor ──────────────────────────────────────────────────────────────

def test_cursor_reads_big_endian_u32():
    cursor = ByteCursor(b"\x00\x00\x01\x02\xff")
    assert cursor.read_u32_be(0) == 258
    assert cursor.read_u8(4) == 255


def test_cursor_rejects_reads_past_end():
    cursor = ByteCursor(b"\x00\x01\x02")
    with pytest.raises(OutOfBoundsError) as exc:
        cursor.read_u32_be(0)
    assert exc.value.offset == 0
    assert exc.value.length == 3


def test_cursor_rejects_negative_offset():
    with pytest.raises(OutOfBoundsError):
        ByteCursor(b"abcd").read_u8(-1)


# ─── Signatures ──────────────────────────────────────────────────────────────

def test_png_signature_accepts_magic_prefix():
    assert has_png_signature(PNG_SIGNATURE)
    assert has_png_signature(PNG_SIGNATURE + b"anything")


@pytest.mark.parametrize("index", range(len(PNG_SIGNATURE)))
def test_png_signature_rejects_any_flipped_byte(index):
    corrupted = bytearray(PNG_SIGNATURE + b"tail")
    corrupted[index] ^= 0xFF
    assert not has_png_signature(bytes(corrupted))


@pytest.mark.parametrize("length", range(len(PNG_SIGNATURE)))
def test_png_signature_fails_closed_on_short_buffer(length):
    assert not has_png_signature(PNG_SIGNATURE[:length])


def test_pdf_signature_accepts_magic_prefix():
    assert has_pdf_signature(b"%PDF-1.7\n")


@pytest.mark.parametrize("index", range(len(PDF_SIGNATURE)))
def test_pdf_signature_rejects_any_flipped_byte(index):
    corrupted = bytearray(PDF_SIGNATURE + b"1.4")
    corrupted[index] ^= 0x01
    assert not has_pdf_signature(bytes(corrupted))


def test_pdf_signature_fails_closed_on_short_buffer():
    assert not has_pdf_signature(b"%PDF")
    assert not has_pdf_signature(b"")


def test_signatures_do_not_cross_match(make_png, pdf_bytes):
    assert not has_pdf_signature(make_png())
    assert not has_png_signature(pdf_bytes)


# ─── PNG structure ───────────────────────────────────────────────────────────

def test_inspect_png_reads_ihdr_fields(make_png):
    meta = inspect_png(make_png(width=640, height=480, bit_depth=16, color_type=2))
    assert meta.width == 640
    assert meta.height == 480
    assert meta.bit_depth == 16
    assert meta.color_type == 2
    assert meta.has_transparency is False


@pytest.mark.parametrize("color_type", [4, 6])
def test_inspect_png_alpha_color_types_are_transparent(make_png, color_type):
    assert inspect_png(make_png(color_type=color_type)).has_transparency is True


def test_inspect_png_trns_chunk_marks_transparency(make_png):
    png = make_png(color_type=3, extra_chunks=b"\x00\x00\x00\x01tRNS\x00\x00\x00\x00\x00")
    assert inspect_png(png).has_transparency is True


def test_inspect_png_truncated_before_color_type_raises(make_png):
    with pytest.raises(OutOfBoundsError):
        inspect_png(make_png()[:24])


# ─── PDF structure ───────────────────────────────────────────────────────────

def test_inspect_pdf_accepts_well_formed_document(pdf_bytes):
    report = inspect_pdf(pdf_bytes)
    assert report.valid is True
    assert report.corruption is None


def test_inspect_pdf_invalid_header():
    report = inspect_pdf(b"garbage xref trailer startxref %%EOF 1 0 obj")
    assert report.corruption.kind == CorruptionKind.INVALID_HEADER


def test_inspect_pdf_missing_xref_and_trailer_reports_xref_first():
    report = inspect_pdf(b"%PDF-1.4\n1 0 obj\n%%EOF")
    assert report.valid is False
    assert report.corruption.kind == CorruptionKind.BROKEN_XREF


def test_inspect_pdf_missing_trailer(pdf_bytes):
    report = inspect_pdf(pdf_bytes.replace(b"trailer", b"tr4iler"))
    assert report.corruption.kind == CorruptionKind.MISSING_TRAILER


def test_inspect_pdf_missing_startxref(pdf_bytes):
    # removing "startxref" must leave the bare "xref" marker in place
    report = inspect_pdf(pdf_bytes.replace(b"startxref", b"start"))
    assert report.corruption.kind == CorruptionKind.INVALID_STRUCTURE
    assert "startxref" in report.corruption.message


def test_inspect_pdf_missing_eof(pdf_bytes):
    report = inspect_pdf(pdf_bytes.replace(b"%%EOF", b""))
    assert report.corruption.kind == CorruptionKind.INVALID_STRUCTURE
    assert "EOF" in report.corruption.message


def test_inspect_pdf_without_objects():
    report = inspect_pdf(b"%PDF-1.4\nxref\ntrailer\nstartxref\n%%EOF")
    assert report.corruption.kind == CorruptionKind.CORRUPTED_OBJECT


def test_inspect_pdf_tolerates_binary_stream_content(pdf_bytes):
    binary = pdf_bytes.replace(b"endobj\n2 0", b"stream\n\xff\xfe\x80\x00\nendstream\nendobj\n2 0")
    assert inspect_pdf(binary).valid is True


def test_inspect_pdf_unexpected_error_maps_to_other(monkeypatch, pdf_bytes):
    class ExplodingPattern:
        def search(self, _text):
            raise RuntimeError("boom")

    monkeypatch.setattr("intake.validators.PDF_OBJECT_RE", ExplodingPattern())
    report = inspect_pdf(pdf_bytes)
    assert report.valid is False
    assert report.corruption.kind == CorruptionKind.OTHER
