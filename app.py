#!/usr/bin/env python3
"""
Journal Scanner - Flask application proxying OCR and Notion calls for the scanner UI
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask
from flask_cors import CORS

from journal_scanner import extensions
from journal_scanner.blueprints.api_entries import api_entries
from journal_scanner.blueprints.api_proxy import api_proxy
from journal_scanner.blueprints.api_scan import api_scan
from journal_scanner.blueprints.api_settings import api_settings
from journal_scanner.blueprints.main import main
from journal_scanner.commands import register_commands
from journal_scanner.error_handlers import register_error_handlers
from journal_scanner.shared.logging_config import configure_logging, get_project_logger, parse_log_level
from journal_scanner.shared.models import Credentials


PROJECT_ROOT = Path(__file__).parent
MAX_UPLOAD_BYTES = 50 * 1024 * 1024

logger = get_project_logger(__name__)


class Config:
    """Configuration class for Flask app read from environment variables"""

    def __init__(self):
        # Flask configuration
        self.secret_key = self._require_env('SECRET_KEY')
        self.max_content_length = MAX_UPLOAD_BYTES

        # Settings store and credential sourcing
        self.settings_file = os.environ.get('SETTINGS_FILE', 'settings.json')
        self.credential_mode = os.environ.get('CREDENTIAL_MODE', 'stored').strip().lower()
        self.credential_defaults = Credentials(
            notion_token=os.environ.get('NOTION_TOKEN', ''),
            notion_database_id=os.environ.get('NOTION_DATABASE_ID', ''),
            google_api_key=os.environ.get('GOOGLE_API_KEY', ''),
        )

        # Upstream behaviour
        self.demo_ocr_delay = self._float_env('DEMO_OCR_DELAY', 1.5)
        self.session_max_age_hours = self._float_env('SESSION_MAX_AGE_HOURS', 24.0)
        self.upstream_timeout = self._float_env('UPSTREAM_TIMEOUT', 30.0)

        # Development server
        self.host = os.environ.get('HOST', '0.0.0.0')
        self.port = int(os.environ.get('PORT', '3001'))

        # Logging
        try:
            self.log_level = parse_log_level(os.environ.get('LOG_LEVEL', 'INFO'))
        except ValueError as e:
            raise RuntimeError(f"Environment variable LOG_LEVEL is invalid: {e}") from e

    def _require_env(self, var_name: str) -> str:
        """Require environment variable or raise error"""
        value = os.environ.get(var_name)
        if not value:
            raise RuntimeError(f"Required environment variable {var_name} is not set")
        return value

    def _float_env(self, var_name: str, default: float) -> float:
        value = os.environ.get(var_name)
        if value is None or value == '':
            return default
        try:
            return float(value)
        except ValueError as e:
            raise RuntimeError(f"Environment variable {var_name} must be a number, got {value!r}") from e


def create_app(config=None):
    """Application factory"""
    app = Flask(
        __name__,
        template_folder=str(PROJECT_ROOT / 'journal_scanner' / 'templates'),
        static_folder=str(PROJECT_ROOT / 'journal_scanner' / 'static'),
    )

    if config is None:
        config = Config()

    app.config['SECRET_KEY'] = config.secret_key
    app.config['MAX_CONTENT_LENGTH'] = config.max_content_length

    configure_logging(config.log_level)

    CORS(app, resources={r'/api/*': {'origins': '*'}})

    # Settings store, session manager and provider clients
    extensions.init_app(app, config)

    app.register_blueprint(main)
    app.register_blueprint(api_settings)
    app.register_blueprint(api_proxy)
    app.register_blueprint(api_scan)
    app.register_blueprint(api_entries)

    register_error_handlers(app)
    register_commands(app)

    return app


def main_cli():
    """CLI entry point"""
    load_dotenv()
    config = Config()
    app = create_app(config)

    logger.info(f"Journal Scanner proxy running on http://{config.host}:{config.port}")
    logger.info(f"Credential mode: {config.credential_mode}, settings file: {config.settings_file}")

    app.run(debug=False, host=config.host, port=config.port)


if __name__ == '__main__':
    main_cli()
