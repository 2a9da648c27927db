"""
API gateway attaching credentials to OCR and document database calls
"""
from abc import ABC, abstractmethod

from journal_scanner.services.base_service import BaseService
from journal_scanner.services.exceptions import NotConfiguredError, ValidationError
from journal_scanner.services.notion_service import NotionPublisher, PagePublisher
from journal_scanner.services.ocr_service import GoogleVisionRecognizer, TextRecognizer
from journal_scanner.services.settings_service import SettingsStore
from journal_scanner.shared.models import SETTINGS_FIELDS, CreatedPage, Credentials, PageRequest


CREDENTIAL_HEADERS = {
    'notion_token': 'X-Notion-Token',
    'notion_database_id': 'X-Notion-Database-Id',
    'google_api_key': 'X-Google-Api-Key',
}


class CredentialResolver(ABC):
    """Strategy deciding where the credentials for one call come from"""

    @abstractmethod
    def resolve(self) -> Credentials:
        """Return the credentials to use"""


class StoredCredentialResolver(CredentialResolver):
    """Credentials from the settings store, with per-field environment fallbacks"""

    def __init__(self, store: SettingsStore, defaults: Credentials | None = None):
        self.store = store
        self.defaults = defaults or Credentials()

    def resolve(self) -> Credentials:
        stored = self.store.settings
        return Credentials(**{
            name: getattr(stored, name) or getattr(self.defaults, name)
            for name in SETTINGS_FIELDS
        })


class RequestCredentialResolver(CredentialResolver):
    """Credentials supplied with the request, optionally topped up by another resolver"""

    def __init__(self, headers, fallback: CredentialResolver | None = None):
        self.headers = headers
        self.fallback = fallback

    def resolve(self) -> Credentials:
        supplied = {name: (self.headers.get(header) or '').strip()
                    for name, header in CREDENTIAL_HEADERS.items()}
        if self.fallback is not None:
            backup = self.fallback.resolve()
            supplied = {name: value or getattr(backup, name) for name, value in supplied.items()}
        return Credentials(**supplied)


class ApiGateway(BaseService):
    """Forwards OCR and page requests to the external providers"""

    def __init__(self, resolver: CredentialResolver, recognizer: TextRecognizer | None = None,
                 publisher: PagePublisher | None = None):
        super().__init__()
        self.resolver = resolver
        self.recognizer = recognizer or GoogleVisionRecognizer()
        self.publisher = publisher or NotionPublisher()

    @property
    def credentials(self) -> Credentials:
        return self.resolver.resolve()

    def has_ocr_key(self) -> bool:
        return bool(self.credentials.google_api_key)

    def submit_ocr(self, image_base64: str) -> dict:
        """Transcribe an image; returns {'text': ...}"""
        if not image_base64:
            raise ValidationError("No image provided")

        api_key = self.credentials.google_api_key
        if not api_key:
            raise NotConfiguredError("Google Vision API key is not configured")

        text = self.recognizer.transcribe(image_base64, api_key)
        return {'text': text}

    def create_page(self, page: PageRequest) -> CreatedPage:
        credentials = self.credentials
        if not credentials.notion_token or not credentials.notion_database_id:
            raise NotConfiguredError("Notion token and database ID are not configured")

        self.logger.info(f"Creating Notion page '{page.title}' dated {page.date.isoformat()}")
        return self.publisher.create_page(page, credentials.notion_token, credentials.notion_database_id)

    def query_database(self, query: dict, database_id: str | None = None) -> dict:
        credentials = self.credentials
        database_id = database_id or credentials.notion_database_id
        if not credentials.notion_token or not database_id:
            raise NotConfiguredError("Notion token and database ID are not configured")

        return self.publisher.query_database(database_id, query, credentials.notion_token)
