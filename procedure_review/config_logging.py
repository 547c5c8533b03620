#!/usr/bin/env python3
"""
ProcedureReview Configuration & Logging Module
==============================================
Centralized configuration, structured logging, and error types.

Version: reads from version.json
"""

import os
import sys
import json
import logging
import uuid
import time
import functools
from datetime import datetime, timezone
from typing import Optional, Dict, Any, Callable
from pathlib import Path
from dataclasses import dataclass, field
from contextlib import contextmanager
import threading

# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================
DEFAULT_MIN_QUALITY_SCORE = 60      # Minimum score for an upload to be accepted
DEFAULT_MAX_UPLOAD_MB = 10          # Default max upload size in megabytes
MAX_SAFE_UPLOAD_MB = 100            # Maximum safe upload limit in megabytes
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5MB max per log file
LOG_BACKUP_COUNT = 5                # Number of log backup files to keep

# Convert MB to bytes
DEFAULT_MAX_UPLOAD_BYTES = DEFAULT_MAX_UPLOAD_MB * 1024 * 1024
MAX_SAFE_UPLOAD_BYTES = MAX_SAFE_UPLOAD_MB * 1024 * 1024

# =============================================================================
# VERSION - Read from version.json (Single Source of Truth)
# =============================================================================
def _load_version():
    """Load version from version.json file."""
    version_file = Path(__file__).parent / 'version.json'
    try:
        with open(version_file, 'r', encoding='utf-8') as f:
            return json.load(f).get('version', '1.0.0')
    except (OSError, json.JSONDecodeError):
        return '1.0.0'

__version__ = _load_version()
VERSION = __version__
APP_NAME = "ProcedureReview"

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================

@dataclass
class AppConfig:
    """Application configuration with secure defaults."""

    # Server settings
    host: str = "127.0.0.1"  # Localhost only by default
    port: int = 5060
    debug: bool = False

    # Document analysis
    min_quality_score: int = DEFAULT_MIN_QUALITY_SCORE
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    checklist_file: Optional[Path] = None  # JSON overrides for the default checklist

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # Options: json, text
    log_to_file: bool = False
    log_to_console: bool = True
    log_dir: Path = field(default_factory=lambda: Path(__file__).parent / 'logs')

    def __post_init__(self):
        if self.checklist_file is not None:
            self.checklist_file = Path(self.checklist_file)

        # Force debug=False in production environment
        if os.environ.get('PRV_ENV', 'development').lower() == 'production':
            self.debug = False
            self.log_level = "WARNING"

    @classmethod
    def from_env(cls) -> 'AppConfig':
        """Load configuration from environment variables."""
        checklist_file = os.environ.get('PRV_CHECKLIST_FILE')
        kwargs = {}
        if os.environ.get('PRV_LOG_DIR'):
            kwargs['log_dir'] = Path(os.environ['PRV_LOG_DIR'])
        return cls(
            host=os.environ.get('PRV_HOST', '127.0.0.1'),
            port=int(os.environ.get('PRV_PORT', '5060')),
            debug=os.environ.get('PRV_DEBUG', 'false').lower() == 'true',
            min_quality_score=int(os.environ.get('PRV_MIN_QUALITY_SCORE', str(DEFAULT_MIN_QUALITY_SCORE))),
            max_upload_bytes=int(os.environ.get('PRV_MAX_UPLOAD', str(DEFAULT_MAX_UPLOAD_BYTES))),
            checklist_file=Path(checklist_file) if checklist_file else None,
            log_level=os.environ.get('PRV_LOG_LEVEL', 'INFO'),
            log_format=os.environ.get('PRV_LOG_FORMAT', 'json'),
            log_to_file=os.environ.get('PRV_LOG_TO_FILE', 'false').lower() == 'true',
            **kwargs
        )

    def validate(self) -> tuple:
        """Validate configuration and return (is_valid, errors)."""
        errors = []

        if self.debug and os.environ.get('PRV_ENV') == 'production':
            errors.append("Debug mode cannot be enabled in production")

        if not 0 <= self.min_quality_score <= 100:
            errors.append(f"Minimum quality score must be between 0 and 100, got {self.min_quality_score}")

        if self.max_upload_bytes <= 0:
            errors.append("Max upload size must be positive")
        elif self.max_upload_bytes > MAX_SAFE_UPLOAD_BYTES:
            errors.append(f"Max upload size exceeds safe limit ({MAX_SAFE_UPLOAD_MB}MB)")

        if self.checklist_file is not None and not self.checklist_file.is_file():
            errors.append(f"Checklist file not found: {self.checklist_file}")

        if self.log_format not in ('json', 'text'):
            errors.append(f"Invalid log_format: {self.log_format}. Must be 'json' or 'text'")

        return (len(errors) == 0, errors)

    def get_checklist(self):
        """Resolve the checklist this configuration points at."""
        from .checklist import DEFAULT_CHECKLIST, load_checklist
        if self.checklist_file is None:
            return DEFAULT_CHECKLIST
        return load_checklist(self.checklist_file)


# Global config instance
_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Get or create the global configuration."""
    global _config
    if _config is None:
        _config = AppConfig.from_env()
    return _config


def reset_config():
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


# =============================================================================
# STRUCTURED LOGGING
# =============================================================================

class StructuredLogger:
    """Thread-safe structured JSON logger with correlation IDs."""

    _local = threading.local()

    def __init__(self, name: str, config: Optional[AppConfig] = None):
        self.name = name
        self.config = config or get_config()
        self._setup_logger()

    def _setup_logger(self):
        """Configure the underlying Python logger."""
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(getattr(logging, self.config.log_level.upper(), logging.INFO))
        self.logger.handlers.clear()
        self.logger.propagate = False

        if self.config.log_format == 'json':
            formatter = JsonFormatter()
        else:
            formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
            )

        if self.config.log_to_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        # Rotating file handler keeps the log directory bounded
        if self.config.log_to_file:
            from logging.handlers import RotatingFileHandler
            self.config.log_dir.mkdir(parents=True, exist_ok=True)
            log_file = self.config.log_dir / f"{self.name.lower()}.log"
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    @classmethod
    def set_correlation_id(cls, correlation_id: str):
        """Set correlation ID for current thread."""
        cls._local.correlation_id = correlation_id

    @classmethod
    def get_correlation_id(cls) -> str:
        """Get correlation ID for current thread."""
        return getattr(cls._local, 'correlation_id', None) or str(uuid.uuid4())[:8]

    @classmethod
    def new_correlation_id(cls) -> str:
        """Generate and set a new correlation ID."""
        correlation_id = str(uuid.uuid4())[:12]
        cls.set_correlation_id(correlation_id)
        return correlation_id

    def _log(self, level: int, message: str, exc_info: bool = False, **kwargs):
        extra = {'correlation_id': self.get_correlation_id(), **kwargs}
        self.logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log error message with optional exception info."""
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log exception with full traceback."""
        self.error(message, exc_info=True, **kwargs)

    @contextmanager
    def log_operation(self, operation: str, **context):
        """Context manager for logging operation start/end with timing."""
        start_time = time.time()
        self.debug(f"{operation} started", operation=operation, status='started', **context)
        try:
            yield
        except Exception as e:
            duration_ms = (time.time() - start_time) * 1000
            self.warning(f"{operation} failed: {e}", operation=operation, status='failed',
                         duration_ms=round(duration_ms, 2), **context)
            raise
        duration_ms = (time.time() - start_time) * 1000
        self.debug(f"{operation} completed", operation=operation, status='completed',
                   duration_ms=round(duration_ms, 2), **context)


_RESERVED_RECORD_KEYS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'thread', 'threadName', 'exc_info', 'exc_text',
    'message', 'taskName'
))


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['traceback'] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_KEYS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name, get_config())


# =============================================================================
# ERROR HANDLING UTILITIES
# =============================================================================

class ProcedureReviewError(Exception):
    """Base exception for ProcedureReview."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR",
                 status_code: int = 500, details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to API response dict."""
        return {
            'success': False,
            'error': {
                'code': self.code,
                'message': self.message,
                'details': self.details
            }
        }


class ValidationError(ProcedureReviewError):
    """Input validation error."""
    def __init__(self, message: str, field: Optional[str] = None, **kwargs):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400,
                         details={'field': field, **kwargs})


class UnsupportedFormatError(ProcedureReviewError):
    """Declared MIME type is not one the extractor can read."""
    def __init__(self, mime_type: Optional[str], **kwargs):
        super().__init__(f"Unsupported file type: {mime_type}", code="UNSUPPORTED_FORMAT",
                         status_code=415, details={'mime_type': mime_type, **kwargs})


class EmptyDocumentError(ProcedureReviewError):
    """Document opened but contained no extractable text."""
    def __init__(self, message: str = "No text content could be extracted from the document", **kwargs):
        super().__init__(message, code="EMPTY_DOCUMENT", status_code=422, details=kwargs)


class ExtractionFailureError(ProcedureReviewError):
    """Underlying PDF/Word parser failed (corrupt or unreadable file)."""
    def __init__(self, message: str, mime_type: Optional[str] = None, **kwargs):
        super().__init__(message, code="EXTRACTION_FAILURE", status_code=422,
                         details={'mime_type': mime_type, **kwargs})


class ConfigurationError(ProcedureReviewError):
    """Checklist or application configuration is unusable."""
    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="CONFIGURATION_ERROR", status_code=500, details=kwargs)


def handle_errors(logger: Optional[StructuredLogger] = None):
    """Decorator for standardized error handling."""
    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            _logger = logger or get_logger(func.__module__)
            try:
                return func(*args, **kwargs)
            except ProcedureReviewError:
                raise
            except FileNotFoundError as e:
                _logger.error(f"File not found: {e}", exc_info=True)
                raise ValidationError(f"File not found: {e}")
            except ValueError as e:
                _logger.error(f"Validation error: {e}", exc_info=True)
                raise ValidationError(str(e))
        return wrapper
    return decorator
