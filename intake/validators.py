"""
Signature and structural checks for the two accepted formats.

Signature checks compare the leading magic bytes only; the declared name and
MIME type are never consulted. Structural checks go one level deeper:
the PNG IHDR fields at fixed offsets, and the markers every PDF must carry.
"""

from dataclasses import dataclass
import logging
import re

from intake.binary import ByteCursor
from intake.models import CorruptionKind, PngMetadata

logger = logging.getLogger("intake.validators")

PNG_SIGNATURE = bytes([0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A])
PDF_SIGNATURE = b"%PDF-"

PNG_WIDTH_OFFSET = 16
PNG_HEIGHT_OFFSET = 20
PNG_BIT_DEPTH_OFFSET = 24
PNG_COLOR_TYPE_OFFSET = 25
PNG_TRANSPARENCY_CHUNK = b"tRNS"

PNG_COLOR_GRAYSCALE = 0
PNG_COLOR_RGB = 2
PNG_COLOR_INDEXED = 3
PNG_COLOR_GRAYSCALE_ALPHA = 4
PNG_COLOR_RGBA = 6

PDF_OBJECT_RE = re.compile(r"\d+\s+\d+\s+obj")


def has_png_signature(content: bytes) -> bool:
    return ByteCursor(content).starts_with(PNG_SIGNATURE)


def has_pdf_signature(content: bytes) -> bool:
    return ByteCursor(content).starts_with(PDF_SIGNATURE)


def inspect_png(content: bytes) -> PngMetadata:
    """
    Read the IHDR fields of a PNG that already passed the signature check.

    Raises OutOfBoundsError when the buffer ends before offset 26.
    """
    cursor = ByteCursor(content)
    width = cursor.read_u32_be(PNG_WIDTH_OFFSET)
    height = cursor.read_u32_be(PNG_HEIGHT_OFFSET)
    bit_depth = cursor.read_u8(PNG_BIT_DEPTH_OFFSET)
    color_type = cursor.read_u8(PNG_COLOR_TYPE_OFFSET)

    if color_type in (PNG_COLOR_GRAYSCALE_ALPHA, PNG_COLOR_RGBA):
        has_transparency = True
    else:
        has_transparency = PNG_TRANSPARENCY_CHUNK in content

    return PngMetadata(
        width=width,
        height=height,
        bit_depth=bit_depth,
        color_type=color_type,
        has_transparency=has_transparency,
    )


@dataclass
class Corruption:
    kind: CorruptionKind
    message: str


@dataclass
class PdfStructureReport:
    valid: bool
    corruption: Corruption | None = None


# Evaluated in order; the first missing marker decides the reported kind.
_PDF_MARKER_CHECKS: tuple[tuple[str, CorruptionKind, str], ...] = (
    ("xref", CorruptionKind.BROKEN_XREF,
     "The cross-reference table (xref) is missing or corrupted"),
    ("trailer", CorruptionKind.MISSING_TRAILER,
     "The PDF trailer is missing"),
    ("startxref", CorruptionKind.INVALID_STRUCTURE,
     "The PDF structure is incomplete (startxref missing)"),
    ("%%EOF", CorruptionKind.INVALID_STRUCTURE,
     "The PDF file is incomplete (EOF marker missing)"),
)


def _failed(kind: CorruptionKind, message: str) -> PdfStructureReport:
    return PdfStructureReport(valid=False, corruption=Corruption(kind=kind, message=message))


def inspect_pdf(content: bytes) -> PdfStructureReport:
    try:
        # latin-1 maps every byte to one character, so binary streams decode cleanly
        text = content.decode("latin-1")

        if not text.startswith(PDF_SIGNATURE.decode("latin-1")):
            return _failed(
                CorruptionKind.INVALID_HEADER,
                "The file does not have a valid PDF header",
            )

        for marker, kind, message in _PDF_MARKER_CHECKS:
            if marker not in text:
                return _failed(kind, message)

        if not PDF_OBJECT_RE.search(text):
            return _failed(
                CorruptionKind.CORRUPTED_OBJECT,
                "The PDF does not contain any valid objects",
            )

        return PdfStructureReport(valid=True)
    except Exception:
        logger.exception("PDF structure analysis failed")
        return _failed(CorruptionKind.OTHER, "The PDF structure could not be validated")
