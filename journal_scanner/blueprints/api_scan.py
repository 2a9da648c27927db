"""
Scan workflow API blueprint: one capture-to-submit cycle per browser session
"""

from flask import Blueprint

from journal_scanner.blueprints.blueprint_utils import (
    build_gateway,
    current_scan_session,
    json_body,
    read_uploaded_image,
)
from journal_scanner.shared.api_response_formatter import APIResponseFormatter
from journal_scanner.shared.logging_config import get_project_logger


logger = get_project_logger(__name__)

api_scan = Blueprint('api_scan', __name__, url_prefix='/api/scan')


def _scan_response(snapshot: dict, message: str = ""):
    return APIResponseFormatter.success({'scan': snapshot}, message=message)


@api_scan.route('', methods=['GET'])
def get_scan():
    """Current workflow state"""
    return _scan_response(current_scan_session().workflow.snapshot())


@api_scan.route('/image', methods=['POST'])
def submit_image():
    """Select an image and run OCR on it"""
    file_name, content, mime_type = read_uploaded_image()
    workflow = current_scan_session().workflow
    logger.info(f"Received image '{file_name}' ({len(content)} bytes, {mime_type})")
    return _scan_response(workflow.submit_image(build_gateway(), file_name, content, mime_type))


@api_scan.route('/draft', methods=['PATCH'])
def edit_draft():
    """Edit title, date, tags or transcription of the draft"""
    data = json_body()
    workflow = current_scan_session().workflow
    snapshot = workflow.edit_draft(
        title=data.get('title'),
        date=data.get('date'),
        tags=data.get('tags'),
        text=data.get('text', data.get('ocr_text')),
    )
    return _scan_response(snapshot)


@api_scan.route('/submit', methods=['POST'])
def submit_draft():
    """Send the draft to Notion"""
    workflow = current_scan_session().workflow
    return _scan_response(workflow.submit(build_gateway()))


@api_scan.route('/save', methods=['POST'])
def save_draft():
    """Keep the draft as a local entry without contacting Notion"""
    workflow = current_scan_session().workflow
    return _scan_response(workflow.save_locally())


@api_scan.route('/retry', methods=['POST'])
def retry_step():
    """Retry the failed OCR or submit step"""
    workflow = current_scan_session().workflow
    return _scan_response(workflow.retry(build_gateway()))


@api_scan.route('/reset', methods=['POST'])
def reset_scan():
    """Discard the draft and start a new scan"""
    return _scan_response(current_scan_session().workflow.reset())


@api_scan.route('/dismiss-error', methods=['POST'])
def dismiss_error():
    """Clear the error banner without changing the workflow state"""
    return _scan_response(current_scan_session().workflow.dismiss_error())
