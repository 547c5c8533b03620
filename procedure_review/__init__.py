"""
ProcedureReview
===============
Quality analysis for procedure documents.

Extracts text from an uploaded PDF or Word file, scores it against a
weighted checklist of governance sections, pulls out owners, sign-off
dates, departments and roles, rates risk coverage and produces a
prioritised list of improvement recommendations.
"""

from .analyzer import DocumentAnalyzer, analyze_document
from .checklist import DEFAULT_CHECKLIST, build_checklist, load_checklist, score_checklist
from .config_logging import (
    VERSION,
    ProcedureReviewError,
    UnsupportedFormatError,
    EmptyDocumentError,
    ExtractionFailureError,
    ConfigurationError,
)
from .models import (
    AnalysisResult,
    CheckDefinition,
    Priority,
    Recommendation,
)
from .text_extractor import extract_text, SUPPORTED_MIME_TYPES

__version__ = VERSION
__all__ = [
    'DocumentAnalyzer',
    'analyze_document',
    'DEFAULT_CHECKLIST',
    'build_checklist',
    'load_checklist',
    'score_checklist',
    'extract_text',
    'SUPPORTED_MIME_TYPES',
    'AnalysisResult',
    'CheckDefinition',
    'Priority',
    'Recommendation',
    'ProcedureReviewError',
    'UnsupportedFormatError',
    'EmptyDocumentError',
    'ExtractionFailureError',
    'ConfigurationError',
]
