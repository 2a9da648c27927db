"""
Service wiring for the journal scanner application
"""

from dataclasses import dataclass, field

from flask import current_app

from journal_scanner.services.notion_service import NotionPublisher, PagePublisher
from journal_scanner.services.ocr_service import GoogleVisionRecognizer, TextRecognizer
from journal_scanner.services.settings_service import SettingsStore
from journal_scanner.shared.models import Credentials
from journal_scanner.shared.session_manager import ScanSessionManager


EXTENSION_KEY = 'journal_scanner'
CREDENTIAL_MODES = ('stored', 'request')


@dataclass
class AppServices:
    """Long-lived collaborators shared by all requests"""
    settings_store: SettingsStore
    sessions: ScanSessionManager
    recognizer: TextRecognizer
    publisher: PagePublisher
    credential_mode: str = 'stored'
    credential_defaults: Credentials = field(default_factory=Credentials)


def init_app(app, config):
    """Build the services from config and attach them to the Flask app"""
    if config.credential_mode not in CREDENTIAL_MODES:
        raise RuntimeError(
            f"CREDENTIAL_MODE must be one of {', '.join(CREDENTIAL_MODES)}, got {config.credential_mode!r}"
        )

    services = AppServices(
        settings_store=SettingsStore(config.settings_file),
        sessions=ScanSessionManager(
            demo_delay=config.demo_ocr_delay,
            max_age_hours=config.session_max_age_hours,
        ),
        recognizer=GoogleVisionRecognizer(timeout=config.upstream_timeout),
        publisher=NotionPublisher(timeout=config.upstream_timeout),
        credential_mode=config.credential_mode,
        credential_defaults=config.credential_defaults,
    )
    app.extensions[EXTENSION_KEY] = services
    return services


def get_services() -> AppServices:
    return current_app.extensions[EXTENSION_KEY]
