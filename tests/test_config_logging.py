"""
Tests for Configuration & Logging
=================================
Tests for AppConfig, the JSON log formatter and the error types.
"""

import json
import logging
from pathlib import Path

import pytest

from procedure_review.checklist import DEFAULT_CHECKLIST
from procedure_review.config_logging import (
    DEFAULT_MAX_UPLOAD_BYTES, DEFAULT_MIN_QUALITY_SCORE, AppConfig, ConfigurationError,
    EmptyDocumentError, ExtractionFailureError, JsonFormatter, StructuredLogger,
    UnsupportedFormatError, ValidationError, get_config, handle_errors, reset_config
)


@pytest.fixture(autouse=True)
def clean_config():
    reset_config()
    yield
    reset_config()


class TestAppConfig:
    """Tests for AppConfig."""

    def test_defaults(self):
        config = AppConfig()
        assert config.min_quality_score == DEFAULT_MIN_QUALITY_SCORE
        assert config.max_upload_bytes == DEFAULT_MAX_UPLOAD_BYTES
        assert config.checklist_file is None
        assert config.validate() == (True, [])

    def test_from_env(self, monkeypatch, tmp_path):
        checklist = tmp_path / 'checklist.json'
        monkeypatch.setenv('PRV_MIN_QUALITY_SCORE', '80')
        monkeypatch.setenv('PRV_MAX_UPLOAD', '2048')
        monkeypatch.setenv('PRV_CHECKLIST_FILE', str(checklist))
        monkeypatch.setenv('PRV_LOG_FORMAT', 'text')
        monkeypatch.setenv('PRV_PORT', '8080')
        config = AppConfig.from_env()
        assert config.min_quality_score == 80
        assert config.max_upload_bytes == 2048
        assert config.checklist_file == checklist
        assert config.log_format == 'text'
        assert config.port == 8080

    def test_get_config_cached(self, monkeypatch):
        monkeypatch.setenv('PRV_MIN_QUALITY_SCORE', '70')
        assert get_config() is get_config()
        assert get_config().min_quality_score == 70

    def test_production_disables_debug(self, monkeypatch):
        monkeypatch.setenv('PRV_ENV', 'production')
        config = AppConfig(debug=True)
        assert config.debug is False
        assert config.log_level == 'WARNING'

    @pytest.mark.parametrize('kwargs', [
        {'min_quality_score': -1},
        {'min_quality_score': 101},
        {'max_upload_bytes': 0},
        {'max_upload_bytes': 500 * 1024 * 1024},
        {'log_format': 'xml'},
        {'checklist_file': Path('/nonexistent/checklist.json')},
    ])
    def test_validate_rejects(self, kwargs):
        is_valid, errors = AppConfig(**kwargs).validate()
        assert not is_valid
        assert len(errors) == 1

    def test_checklist_default(self):
        assert AppConfig().get_checklist() is DEFAULT_CHECKLIST

    def test_checklist_from_file(self, tmp_path):
        path = tmp_path / 'checklist.json'
        path.write_text(json.dumps({'Scope': {'weight': 1}}), encoding='utf-8')
        checklist = AppConfig(checklist_file=str(path)).get_checklist()
        assert next(c for c in checklist if c.name == 'Scope').weight == 1.0


class TestLogging:
    """Tests for structured logging."""

    def test_json_formatter(self):
        record = logging.LogRecord('analyzer', logging.INFO, __file__, 10, 'Scored %s', ('doc',), None)
        record.correlation_id = 'abc123'
        record.score = 48
        data = json.loads(JsonFormatter().format(record))
        assert data['level'] == 'INFO'
        assert data['logger'] == 'analyzer'
        assert data['message'] == 'Scored doc'
        assert data['correlation_id'] == 'abc123'
        assert data['score'] == 48
        assert 'lineno' not in data

    def test_correlation_id(self):
        correlation_id = StructuredLogger.new_correlation_id()
        assert StructuredLogger.get_correlation_id() == correlation_id

    def test_log_operation_reraises(self):
        logger = StructuredLogger('test_operation', AppConfig(log_to_console=False))
        with pytest.raises(RuntimeError):
            with logger.log_operation('extract'):
                raise RuntimeError('boom')


class TestErrors:
    """Tests for the error hierarchy."""

    def test_unsupported_format(self):
        error = UnsupportedFormatError('image/png')
        assert error.status_code == 415
        body = error.to_dict()
        assert body['success'] is False
        assert body['error']['code'] == 'UNSUPPORTED_FORMAT'
        assert body['error']['details']['mime_type'] == 'image/png'

    def test_codes(self):
        assert EmptyDocumentError().code == 'EMPTY_DOCUMENT'
        assert ExtractionFailureError('bad').code == 'EXTRACTION_FAILURE'
        assert ConfigurationError('bad').status_code == 500
        assert ValidationError('bad', field='file').details == {'field': 'file'}

    def test_handle_errors(self):
        @handle_errors()
        def parse(value):
            return int(value)

        assert parse('3') == 3
        with pytest.raises(ValidationError):
            parse('three')

    def test_handle_errors_passes_domain_errors(self):
        @handle_errors()
        def fail():
            raise EmptyDocumentError()

        with pytest.raises(EmptyDocumentError):
            fail()
