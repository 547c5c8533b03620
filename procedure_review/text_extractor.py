#!/usr/bin/env python3
"""
Text Extractor for ProcedureReview
==================================
Turns an uploaded PDF or Word document into plain text for analysis.

Paragraph boundaries are kept as blank lines so the sentence/paragraph
heuristics downstream have something to work with. Layout beyond that is
not preserved.
"""

import io
from typing import List

import pdfplumber
from docx import Document as DocxDocument

from .config_logging import (
    get_logger, UnsupportedFormatError, EmptyDocumentError, ExtractionFailureError
)

logger = get_logger('text_extractor')

MIME_PDF = 'application/pdf'
MIME_DOCX = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
MIME_DOC = 'application/msword'

SUPPORTED_MIME_TYPES = (MIME_PDF, MIME_DOCX, MIME_DOC)

EXTENSION_MIME_TYPES = {
    '.pdf': MIME_PDF,
    '.docx': MIME_DOCX,
    '.doc': MIME_DOC,
}

# Compound File Binary header used by pre-2007 .doc files
OLE_SIGNATURE = b'\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1'


def is_supported_mime_type(mime_type: str) -> bool:
    """Check whether the extractor can read this MIME type."""
    return (mime_type or '').lower() in SUPPORTED_MIME_TYPES


def extract_text(data: bytes, mime_type: str) -> str:
    """
    Extract plain text from a document.

    Args:
        data: Raw file bytes
        mime_type: Declared MIME type of the upload

    Returns:
        Extracted text (never empty)

    Raises:
        UnsupportedFormatError: MIME type is not PDF or Word
        ExtractionFailureError: The parser could not read the file
        EmptyDocumentError: The file contained no text
    """
    mime = (mime_type or '').lower()
    if mime not in SUPPORTED_MIME_TYPES:
        raise UnsupportedFormatError(mime_type)

    data = data or b''
    if mime == MIME_PDF:
        text = _extract_pdf(data)
    else:
        text = _extract_word(data, mime)

    if not text or not text.strip():
        raise EmptyDocumentError()

    logger.debug("Text extracted", mime_type=mime, text_length=len(text))
    return text


def _extract_pdf(data: bytes) -> str:
    """Extract text page by page using pdfplumber."""
    pages: List[str] = []
    try:
        with pdfplumber.open(io.BytesIO(data)) as pdf:
            for page in pdf.pages:
                page_text = page.extract_text() or ""
                if page_text.strip():
                    pages.append(page_text.strip())
    except Exception as e:
        raise ExtractionFailureError(f"Failed to read PDF: {e}", mime_type=MIME_PDF) from e

    return '\n\n'.join(pages)


def _extract_word(data: bytes, mime: str) -> str:
    """Extract paragraphs and table cells using python-docx."""
    if data[:len(OLE_SIGNATURE)] == OLE_SIGNATURE:
        raise ExtractionFailureError(
            "Legacy binary Word (.doc) files cannot be read; save the document as .docx and upload again",
            mime_type=mime
        )

    try:
        doc = DocxDocument(io.BytesIO(data))
    except Exception as e:
        raise ExtractionFailureError(f"Failed to read Word document: {e}", mime_type=mime) from e

    blocks: List[str] = []
    for paragraph in doc.paragraphs:
        text = paragraph.text.strip()
        if text:
            blocks.append(text)

    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                blocks.append(' | '.join(cells))

    return '\n\n'.join(blocks)
