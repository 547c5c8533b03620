"""
ProcedureReview Flask Application
=================================
App factory for the procedure analysis upload gate.

Run locally:
    python -m procedure_review.app
"""

from typing import Optional

from flask import Flask

from .config_logging import AppConfig, ConfigurationError, get_config, get_logger
from .routes import analysis_blueprint

logger = get_logger('app')


def create_app(config: Optional[AppConfig] = None) -> Flask:
    """Create the Flask app with the analysis blueprint registered."""
    config = config or get_config()
    is_valid, errors = config.validate()
    if not is_valid:
        raise ConfigurationError("Invalid configuration: " + '; '.join(errors), errors=errors)

    app = Flask(__name__)
    app.config['PRV_CONFIG'] = config
    # Leave headroom for multipart framing; the route enforces the exact limit
    app.config['MAX_CONTENT_LENGTH'] = config.max_upload_bytes + 64 * 1024
    app.register_blueprint(analysis_blueprint)

    logger.info("Application created", min_quality_score=config.min_quality_score,
                max_upload_bytes=config.max_upload_bytes)
    return app


if __name__ == '__main__':
    app_config = get_config()
    create_app(app_config).run(host=app_config.host, port=app_config.port, debug=app_config.debug)
