"""
Settings API blueprint
"""

from flask import Blueprint

from journal_scanner.blueprints.blueprint_utils import json_body
from journal_scanner.extensions import get_services
from journal_scanner.shared.api_response_formatter import APIResponseFormatter
from journal_scanner.shared.logging_config import get_project_logger


logger = get_project_logger(__name__)

api_settings = Blueprint('api_settings', __name__, url_prefix='/api/settings')


@api_settings.route('', methods=['GET'])
def get_settings():
    """Current settings with secrets masked, plus the configured flag"""
    return APIResponseFormatter.success(get_services().settings_store.view())


@api_settings.route('', methods=['PUT'])
def update_settings():
    """Merge a partial settings update; masked or empty values leave fields unchanged"""
    data = json_body()
    if not data:
        return APIResponseFormatter.error('No data provided')

    store = get_services().settings_store
    masked = store.merge(data)
    return APIResponseFormatter.success(
        {'settings': masked, 'configured': store.is_configured()},
        message='Settings saved'
    )
