"""
Pass-through API blueprint forwarding to the OCR and Notion providers
"""

from datetime import date

from flask import Blueprint, jsonify

from journal_scanner.blueprints.blueprint_utils import build_gateway, json_body
from journal_scanner.services.exceptions import ValidationError
from journal_scanner.shared.api_response_formatter import APIResponseFormatter
from journal_scanner.shared.logging_config import get_project_logger
from journal_scanner.shared.models import PageRequest
from journal_scanner.shared.scan_workflow import parse_entry_date
from journal_scanner.shared.text_utils import derive_title, parse_tags


logger = get_project_logger(__name__)

api_proxy = Blueprint('api_proxy', __name__, url_prefix='/api')


@api_proxy.route('/vision', methods=['POST'])
def submit_ocr():
    """Transcribe a base64 image with the OCR provider"""
    data = json_body()
    error_response = APIResponseFormatter.validate_json_request(data, ['image'])
    if error_response:
        return error_response

    result = build_gateway().submit_ocr(data['image'])
    return APIResponseFormatter.success(result)


@api_proxy.route('/notion', methods=['POST'])
def create_page():
    """Create a journal page in the Notion database"""
    data = json_body()
    text = data.get('text', data.get('content'))
    if not isinstance(text, str):
        raise ValidationError("Missing required fields: text")

    entry_date = parse_entry_date(data['date']) if data.get('date') else date.today()
    page = PageRequest(
        title=data.get('title') or derive_title(text, entry_date),
        date=entry_date,
        text=text,
        tags=parse_tags(data.get('tags')),
    )
    created = build_gateway().create_page(page)
    return APIResponseFormatter.success({'id': created.id, 'url': created.url}, status_code=201)


@api_proxy.route('/notion/databases/<database_id>/query', methods=['POST'])
def query_database(database_id):
    """Forward a database query; request headers take precedence over stored credentials"""
    result = build_gateway(request_first=True).query_database(json_body(), database_id)
    return jsonify(result)
