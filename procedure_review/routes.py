"""
Procedure Analysis Flask Routes
===============================
Upload gate in front of the analysis engine: analyzes an uploaded procedure
document and decides whether it meets the minimum quality score.

Storing the procedure record is left to the caller; the response carries
the analysis to persist alongside it.
"""

import time
from functools import wraps
from typing import Any, Dict

from flask import Blueprint, current_app, g, jsonify, request

from .analyzer import DocumentAnalyzer
from .config_logging import (
    VERSION, AppConfig, ProcedureReviewError, StructuredLogger, ValidationError, get_config, get_logger
)
from .models import AnalysisResult

logger = get_logger('routes')

analysis_blueprint = Blueprint('procedure_analysis', __name__)


def evaluate_upload(result: AnalysisResult, minimum_score: int) -> Dict[str, Any]:
    """Acceptance decision for an analyzed upload."""
    accepted = result.score >= minimum_score
    if accepted:
        message = f"Document quality score ({result.score}%) meets the required minimum of {minimum_score}%."
    else:
        message = (f"Document quality score ({result.score}%) is below the required "
                   f"minimum of {minimum_score}%.")
    return {
        'accepted': accepted,
        'minimumScore': minimum_score,
        'message': message,
    }


def _app_config() -> AppConfig:
    return current_app.config.get('PRV_CONFIG') or get_config()


def _analyzer() -> DocumentAnalyzer:
    analyzer = current_app.config.get('PRV_ANALYZER')
    if analyzer is None:
        analyzer = DocumentAnalyzer(_app_config().get_checklist())
        current_app.config['PRV_ANALYZER'] = analyzer
    return analyzer


# =============================================================================
# STANDARDIZED ERROR HANDLING DECORATOR
# =============================================================================

def handle_api_errors(f):
    """Map ProcedureReview errors to JSON error envelopes."""
    @wraps(f)
    def decorated(*args, **kwargs):
        g.correlation_id = StructuredLogger.new_correlation_id()
        start_time = time.time()
        try:
            result = f(*args, **kwargs)

            elapsed = time.time() - start_time
            if elapsed > 5.0:
                logger.warning(f"Slow API call: {f.__name__} took {elapsed:.1f}s")

            return result

        except ProcedureReviewError as e:
            logger.warning(f"{e.code} in {f.__name__}: {e.message}")
            body = e.to_dict()
            body['error']['correlation_id'] = g.correlation_id
            return jsonify(body), e.status_code

    return decorated


# =============================================================================
# ROUTES
# =============================================================================

@analysis_blueprint.route('/api/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok', 'version': VERSION})


@analysis_blueprint.route('/api/procedures/checklist', methods=['GET'])
@handle_api_errors
def get_checklist():
    """Active checklist and acceptance threshold."""
    config = _app_config()
    return jsonify({
        'success': True,
        'checks': [check.to_dict() for check in _analyzer().checklist],
        'minimumScore': config.min_quality_score,
    })


@analysis_blueprint.route('/api/procedures/analyze', methods=['POST'])
@handle_api_errors
def analyze_upload():
    """
    Analyze an uploaded procedure document.

    Form fields:
        file: PDF or Word document

    Returns:
        {success, accepted, minimumScore, message, analysis}
    """
    config = _app_config()

    if 'file' not in request.files:
        raise ValidationError('No file part in request', field='file')

    upload = request.files['file']
    if not upload.filename:
        raise ValidationError('No file selected', field='file')

    data = upload.read(config.max_upload_bytes + 1)
    if len(data) > config.max_upload_bytes:
        raise ValidationError(
            f"File exceeds the upload limit of {config.max_upload_bytes} bytes",
            field='file', max_bytes=config.max_upload_bytes
        )

    result = _analyzer().analyze(data, upload.mimetype)
    decision = evaluate_upload(result, config.min_quality_score)

    logger.info("Upload analyzed", upload_name=upload.filename, score=result.score,
                accepted=decision['accepted'])

    return jsonify({
        'success': True,
        **decision,
        'analysis': result.to_dict(),
    })
