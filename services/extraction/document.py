"""Invoice document inspection before extraction.

Uses Pillow to identify image formats so the provider can label the upload
correctly; PDFs are recognised by their header.
"""

import base64
import io

from PIL import Image, UnidentifiedImageError


PDF_MIME_TYPE = "application/pdf"


class UnsupportedDocument(ValueError):
    """Document is empty, too large, or not an image/PDF."""


def detect_mime_type(document: bytes) -> str:
    """Detect the MIME type of an uploaded invoice.

    Args:
        document: Raw document bytes

    Returns:
        MIME type such as 'image/jpeg', 'image/png' or 'application/pdf'

    Raises:
        UnsupportedDocument: If the bytes are empty or not a recognised format
    """
    if not document:
        raise UnsupportedDocument("Empty document")

    if document.startswith(b"%PDF-"):
        return PDF_MIME_TYPE

    try:
        with Image.open(io.BytesIO(document)) as image:
            image_format = image.format
    except (UnidentifiedImageError, OSError) as e:
        raise UnsupportedDocument(f"Unrecognised document format: {e}") from e

    mime_type = Image.MIME.get(image_format or "")
    if mime_type is None:
        raise UnsupportedDocument(f"No MIME type known for format {image_format}")
    return mime_type


def validate_document(document: bytes, max_bytes: int) -> str:
    """Check size and format; return the detected MIME type."""
    if len(document) > max_bytes:
        raise UnsupportedDocument(
            f"Document is {len(document)} bytes, limit is {max_bytes} bytes"
        )
    return detect_mime_type(document)


def to_base64(document: bytes) -> str:
    return base64.b64encode(document).decode("ascii")


def to_data_url(document: bytes, mime_type: str) -> str:
    """Inline the document as a data URL for vision APIs."""
    return f"data:{mime_type};base64,{to_base64(document)}"
