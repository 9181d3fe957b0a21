"""
PDF text extraction.
Uses pdfplumber page text only; scanned/image-only PDFs come back as empty text.
"""
from __future__ import annotations

import io
from pathlib import Path
from typing import Union

import pdfplumber
from loguru import logger

from .errors import ExtractionError

PdfSource = Union[str, Path, bytes, bytearray]

PDF_MAGIC = b"%PDF"


def _open_source(source: PdfSource):
    """Return something pdfplumber.open accepts, validating the input first."""
    if isinstance(source, (bytes, bytearray)):
        if not bytes(source[:1024]).lstrip().startswith(PDF_MAGIC):
            raise ExtractionError("Input bytes are not a PDF document")
        return io.BytesIO(bytes(source))

    path = Path(source)
    if not path.exists():
        raise ExtractionError(f"PDF file not found: {path}")
    if path.suffix.lower() != ".pdf":
        raise ExtractionError(f"Not a PDF file: {path.name}")
    return path


def extract_text_from_pdf(source: PdfSource) -> str:
    """
    Extract text from a PDF given a path or raw bytes.
    Pages are joined with blank lines. Raises ExtractionError if the PDF cannot be read.
    """
    handle = _open_source(source)
    text_parts: list[str] = []
    try:
        with pdfplumber.open(handle) as pdf:
            for page in pdf.pages:
                t = page.extract_text()
                if t:
                    text_parts.append(t)
    except Exception as e:
        logger.error(f"PDF text extraction failed: {e}")
        raise ExtractionError(f"Could not extract text from PDF: {e}") from e

    text = "\n\n".join(text_parts)
    if not text.strip():
        logger.warning("PDF has no text layer; no line items can be parsed")
    else:
        logger.debug(f"Extracted {len(text)} characters of PDF text")
    return text
