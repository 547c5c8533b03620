"""
Shared fixtures for the ProcedureReview test suite.

Documents are built in memory: Word files with python-docx, PDFs with
reportlab.
"""

import io
from typing import Iterable

import pytest
from docx import Document
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from procedure_review.text_extractor import MIME_DOCX, MIME_PDF

# Filler that triggers none of the default checklist rules
NEUTRAL_SENTENCE = "This text describes how the payment files are handled each day by the operations centre. "

COMPLETE_PROCEDURE_PARAGRAPHS = [
    "Payments Reconciliation Procedure",
    "Table of Contents",
    "1. Purpose 2. Scope 3. Responsibilities 4. Procedure 5. Risk Assessment",
    "Document Control",
    "Version: 3",
    "Document Owner: Jane Smith",
    "Prepared by: Mark Evans",
    "Department: Finance Operations",
    "Approval date: 15/03/2024",
    "Next review date: 15 March 2025",
    "Purpose",
    "This procedure explains how the operations team reconciles daily payment files. "
    "It ensures that every payment is matched to a ledger entry. "
    "It also describes how breaks are escalated.",
    "Scope",
    "The procedure applies to all payment files received by the operations centre. "
    "It covers domestic and international payments. "
    "It does not cover card transactions.",
    "Responsibilities",
    "The operations manager is accountable for completing the reconciliation each day. "
    "The senior analyst prepares the reconciliation report. "
    "The finance director reviews exceptions weekly.",
    "Procedure Steps",
    "1. Download the payment file from the secure file server before nine o'clock.",
    "2. Load the file into the reconciliation tool and confirm the record count.",
    "3. Match each payment against the general ledger using the reference number.",
    "4. Investigate every unmatched item and record the reason in the break log.",
    "5. Escalate breaks older than two days to the operations manager.",
    "6. Sign the daily checklist and store it in the shared procedures folder.",
    "Risk Assessment",
    "The risk matrix rates each failure by likelihood and impact. "
    "Missing a payment file is a high risk with severe impact on customers. "
    "Late matching is a medium risk with moderate probability. "
    "Manual keying errors are a low risk with minimal impact.",
    "Records",
    "Break logs are kept for seven years. "
    "Reconciliation reports are stored with the daily checklist. "
    "Auditors can request copies at any time.",
    "Approval",
    "Approved by the head of payments operations after review by compliance.",
]


def docx_bytes(paragraphs: Iterable[str], table_rows: Iterable[Iterable[str]] = ()) -> bytes:
    """Build a .docx file from paragraphs and an optional table."""
    document = Document()
    for paragraph in paragraphs:
        document.add_paragraph(paragraph)
    table_rows = [list(row) for row in table_rows]
    if table_rows:
        table = document.add_table(rows=len(table_rows), cols=len(table_rows[0]))
        for r, row in enumerate(table_rows):
            for c, value in enumerate(row):
                table.cell(r, c).text = value
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()


def pdf_bytes(pages: Iterable[Iterable[str]]) -> bytes:
    """Build a PDF with one list of text lines per page."""
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)
    for lines in pages:
        y = 740
        for line in lines:
            pdf.drawString(72, y, line)
            y -= 16
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def padded(text: str, length: int) -> str:
    """Pad ``text`` with neutral filler to exactly ``length`` characters."""
    while len(text) < length:
        text += NEUTRAL_SENTENCE
    return text[:length]


@pytest.fixture
def complete_text() -> str:
    """Text of a procedure that satisfies every default check."""
    return '\n\n'.join(COMPLETE_PROCEDURE_PARAGRAPHS)


@pytest.fixture
def complete_docx() -> bytes:
    return docx_bytes(COMPLETE_PROCEDURE_PARAGRAPHS)


@pytest.fixture
def short_docx() -> bytes:
    return docx_bytes(["Purpose", "Process payments.", "Owner: Jane Smith"])


@pytest.fixture
def sample_pdf() -> bytes:
    return pdf_bytes([
        ["Purpose", "Owner: Jane Smith", "Review date: 01/06/2024"],
        ["Scope", "Applies to the payments team."],
    ])


@pytest.fixture
def mime_docx() -> str:
    return MIME_DOCX


@pytest.fixture
def mime_pdf() -> str:
    return MIME_PDF


@pytest.fixture
def make_docx():
    return docx_bytes


@pytest.fixture
def make_pdf():
    return pdf_bytes


@pytest.fixture
def pad_text():
    return padded
