#!/usr/bin/env python3
"""
ProcedureReview Analysis Engine
===============================
Orchestrates text extraction, checklist scoring, entity extraction, risk
rating and recommendations into a single AnalysisResult.

Each stage returns its own immutable result and the engine composes them.
Analysis is a pure function of (bytes, MIME type, checklist): no shared
state, no clocks or randomness in the scoring path.
"""

import json
import mimetypes
import re
import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Union

from .checklist import DEFAULT_CHECKLIST, score_checklist
from .config_logging import (
    VERSION, get_logger, handle_errors, EmptyDocumentError, ProcedureReviewError, StructuredLogger
)
from .entity_extractor import extract_entities
from .models import (
    AnalysisResult, CheckDefinition, ChecklistResult, DocumentStats, Priority,
    Recommendation, ScoreAdjustment
)
from .recommendations import CONTENT_LENGTH, STRUCTURE_BONUS, generate_recommendations
from .risk_rating import estimate_risk
from .text_extractor import EXTENSION_MIME_TYPES, extract_text

__version__ = VERSION

logger = get_logger('analyzer')

SHORT_DOCUMENT_LENGTH = 500
SHORT_DOCUMENT_PENALTY = -30
STRUCTURE_BONUS_POINTS = 10

_SENTENCE_SPLIT = re.compile(r'[.!?]+')
_PARAGRAPH_SPLIT = re.compile(r'\n\s*\n')
_NUMBERED_STEP = re.compile(r'\d+\.\s+')
_BULLET_POINT = re.compile(r'[•\-*]\s+')
_TABLE_ROW = re.compile(r'\|.*\|')
_VERSION_FIELD = re.compile(r'version\s*[:：]\s*\d+', re.IGNORECASE)


def compute_document_stats(text: str) -> DocumentStats:
    """Length, sentence/paragraph counts and formatting signals."""
    sentences = [s for s in _SENTENCE_SPLIT.split(text) if len(s.strip()) > 10]
    paragraphs = [p for p in _PARAGRAPH_SPLIT.split(text) if len(p.strip()) > 50]
    return DocumentStats(
        length=len(text),
        sentence_count=len(sentences),
        paragraph_count=len(paragraphs),
        has_numbered_steps=bool(_NUMBERED_STEP.search(text)),
        has_bullet_points=bool(_BULLET_POINT.search(text)),
        tables_found=len(_TABLE_ROW.findall(text)),
        has_structured_doc_control=bool(_VERSION_FIELD.search(text)),
    )


def compute_adjustments(stats: DocumentStats, checklist_result: ChecklistResult) -> List[ScoreAdjustment]:
    """
    Score adjustments in the order they are applied.

    The short-document penalty and the structure bonus are independent, so
    one document can receive both.
    """
    adjustments = []
    if stats.length < SHORT_DOCUMENT_LENGTH:
        adjustments.append(ScoreAdjustment(CONTENT_LENGTH, SHORT_DOCUMENT_PENALTY))
    if checklist_result.has_risk_assessment and checklist_result.has_document_control:
        adjustments.append(ScoreAdjustment(STRUCTURE_BONUS, STRUCTURE_BONUS_POINTS))
    return adjustments


def apply_adjustments(score: int, adjustments: Sequence[ScoreAdjustment]) -> int:
    """Apply each adjustment in turn, clamping to [0, 100] after every step."""
    for adjustment in adjustments:
        score = max(0, min(100, score + adjustment.delta))
    return max(0, min(100, score))


class DocumentAnalyzer:
    """
    Analyzes procedure documents against a checklist.

    Usage:
        analyzer = DocumentAnalyzer()
        result = analyzer.analyze(data, 'application/pdf')
        result.score, result.to_dict()
    """

    def __init__(self, checklist: Optional[Sequence[CheckDefinition]] = None):
        self.checklist = tuple(checklist) if checklist is not None else DEFAULT_CHECKLIST

    def analyze(self, data: bytes, mime_type: str) -> AnalysisResult:
        """
        Analyze one document.

        Extraction and configuration failures do not propagate: they come
        back as a zero-score result with a single analysis_error
        recommendation, which the upload workflow treats as a rejection.
        """
        StructuredLogger.new_correlation_id()
        logger.info("Starting document analysis", mime_type=mime_type, size_bytes=len(data or b''))

        def run():
            with logger.log_operation('extract_text'):
                text = extract_text(data, mime_type)
            return self._analyze_text(text)

        return self._guarded(run)

    def analyze_text(self, text: str) -> AnalysisResult:
        """Analyze text that has already been extracted."""
        def run():
            if not text or not text.strip():
                raise EmptyDocumentError()
            return self._analyze_text(text)

        return self._guarded(run)

    def _guarded(self, run: Callable[[], AnalysisResult]) -> AnalysisResult:
        try:
            result = run()
        except ProcedureReviewError as e:
            logger.warning(f"Document analysis failed: {e.message}", error_code=e.code)
            return self._error_result(e)

        logger.info("Document analysis completed", score=result.score,
                    found_elements=len(result.found_elements),
                    missing_elements=len(result.missing_elements),
                    recommendations=len(result.ai_recommendations),
                    quality_level=result.summary['qualityLevel'])
        return result

    def _analyze_text(self, text: str) -> AnalysisResult:
        checklist_result = score_checklist(text, self.checklist)
        entities = extract_entities(text)
        risk = estimate_risk(text, checklist_result.has_risk_assessment)
        stats = compute_document_stats(text)

        adjustments = compute_adjustments(stats, checklist_result)
        score = apply_adjustments(checklist_result.score, adjustments)
        recommendations = generate_recommendations(checklist_result, entities, stats, adjustments)

        return AnalysisResult(
            score=score,
            found_elements=checklist_result.found_elements,
            missing_elements=checklist_result.missing_elements,
            has_table_of_contents=checklist_result.has_table_of_contents,
            has_document_control=checklist_result.has_document_control,
            has_risk_assessment=checklist_result.has_risk_assessment,
            entities=entities,
            risk=risk,
            stats=stats,
            ai_recommendations=recommendations,
        )

    def _error_result(self, error: ProcedureReviewError) -> AnalysisResult:
        return AnalysisResult(
            score=0,
            missing_elements=tuple(check.name for check in self.checklist),
            ai_recommendations=(Recommendation(
                type='analysis_error',
                priority=Priority.HIGH,
                message=f"Document analysis failed: {error.message}. "
                        "Please check the file format and try again.",
                impact='Score: 0',
                category='System Error',
            ),),
            error=error.message,
        )

    @handle_errors(logger)
    def analyze_file(self, path: Union[str, Path], mime_type: Optional[str] = None) -> AnalysisResult:
        """Analyze a file on disk, guessing the MIME type from its extension."""
        path = Path(path)
        if mime_type is None:
            mime_type = EXTENSION_MIME_TYPES.get(path.suffix.lower()) or mimetypes.guess_type(path.name)[0]
        return self.analyze(path.read_bytes(), mime_type)


def analyze_document(data: bytes, mime_type: str,
                     checklist: Optional[Sequence[CheckDefinition]] = None) -> AnalysisResult:
    """Analyze a document with the given (or default) checklist."""
    return DocumentAnalyzer(checklist).analyze(data, mime_type)


if __name__ == '__main__':
    if len(sys.argv) < 2:
        print("Usage: python -m procedure_review.analyzer <document.pdf|document.docx>")
        sys.exit(1)
    analysis = DocumentAnalyzer().analyze_file(sys.argv[1])
    print(json.dumps(analysis.to_dict(), indent=2))
