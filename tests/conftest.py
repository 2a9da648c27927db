"""
Pytest configuration and fixtures for the journal scanner
"""

import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from unittest.mock import Mock

import pytest

from app import create_app
from journal_scanner.repositories.entry_log import EntryLog
from journal_scanner.services.settings_service import SettingsStore
from journal_scanner.shared.models import CreatedPage, Credentials
from journal_scanner.shared.scan_workflow import ScanWorkflow


FIXED_NOW = datetime(2026, 3, 14, 9, 30, 0)

# Smallest valid PNG header is enough; nothing decodes the image server-side
PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 16


class BaseTestConfig:
    """Test configuration with a temporary settings file and no demo delay"""

    def __init__(self, settings_file, credential_mode='stored', credential_defaults=None):
        self.secret_key = 'test-secret-key'
        self.max_content_length = 1024 * 1024
        self.settings_file = str(settings_file)
        self.credential_mode = credential_mode
        self.credential_defaults = credential_defaults or Credentials()
        self.demo_ocr_delay = 0
        self.session_max_age_hours = 24
        self.log_level = 'INFO'
        self.upstream_timeout = 5
        self.host = '127.0.0.1'
        self.port = 3001


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture
def settings_file(temp_dir):
    return temp_dir / 'settings.json'


@pytest.fixture
def settings_store(settings_file):
    return SettingsStore(settings_file)


@pytest.fixture
def test_config(settings_file):
    return BaseTestConfig(settings_file)


@pytest.fixture
def app(test_config):
    """Create Flask app for testing"""
    app = create_app(test_config)
    app.config['TESTING'] = True
    return app


@pytest.fixture
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture
def configured_settings():
    return {
        'notion_token': 'secret_abcdefghijklmnopqrstuvwxyz123456',
        'notion_database_id': 'db0123456789abcdef',
        'google_api_key': 'AIzaSyExampleKey0000000000000000wxyz',
    }


@pytest.fixture
def entry_log():
    return EntryLog()


@pytest.fixture
def workflow(entry_log):
    """Workflow with a fixed clock and no demo delay"""
    return ScanWorkflow(entry_log, demo_delay=0, clock=lambda: FIXED_NOW)


@pytest.fixture
def mock_gateway():
    """Gateway double with an OCR key that transcribes two paragraphs"""
    gateway = Mock()
    gateway.has_ocr_key.return_value = True
    gateway.submit_ocr.return_value = {'text': 'Morning walk\n\nSaw a heron by the river.'}
    gateway.create_page.return_value = CreatedPage(id='page-123', url='https://www.notion.so/page-123')
    return gateway
