"""
Helpers shared by the blueprints: per-request gateway and scan session lookup
"""
import base64
import binascii

from flask import request, session

from journal_scanner.extensions import get_services
from journal_scanner.services.exceptions import ValidationError
from journal_scanner.services.gateway_service import (
    ApiGateway,
    RequestCredentialResolver,
    StoredCredentialResolver,
)
from journal_scanner.shared.session_manager import ScanSession


SESSION_KEY = 'scan_session_id'


def stored_resolver() -> StoredCredentialResolver:
    services = get_services()
    return StoredCredentialResolver(services.settings_store, services.credential_defaults)


def build_gateway(request_first: bool = False) -> ApiGateway:
    """
    Gateway for the current request.

    In 'request' mode credentials come from the request headers only; in
    'stored' mode from the settings store. request_first layers request headers
    over the stored credentials regardless of mode.
    """
    services = get_services()
    if request_first:
        resolver = RequestCredentialResolver(request.headers, fallback=stored_resolver())
    elif services.credential_mode == 'request':
        resolver = RequestCredentialResolver(request.headers)
    else:
        resolver = stored_resolver()
    return ApiGateway(resolver, recognizer=services.recognizer, publisher=services.publisher)


def current_scan_session() -> ScanSession:
    """Scan session bound to the caller's session cookie, created on first use"""
    sessions = get_services().sessions
    scan_session = sessions.get_or_create(session.get(SESSION_KEY))
    session[SESSION_KEY] = scan_session.id
    return scan_session


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def decode_image_payload(image: str) -> tuple[bytes, str]:
    """Decode a data URI or bare base64 string into (bytes, mime type)"""
    mime_type = 'image/jpeg'
    payload = image.strip()
    if payload.startswith('data:'):
        header, _, payload = payload.partition(',')
        mime_type = header[len('data:'):].split(';', 1)[0] or mime_type
    try:
        return base64.b64decode(payload, validate=True), mime_type
    except (binascii.Error, ValueError) as e:
        raise ValidationError("Image is not valid base64 data") from e


def read_uploaded_image() -> tuple[str, bytes, str]:
    """Image from a multipart 'image' field or a JSON body; returns (file_name, bytes, mime type)"""
    upload = request.files.get('image')
    if upload is not None:
        return upload.filename or 'page', upload.read(), upload.mimetype or ''

    data = json_body()
    image = data.get('image')
    if not isinstance(image, str) or not image:
        raise ValidationError("No image provided")
    content, mime_type = decode_image_payload(image)
    return data.get('file_name') or 'page', content, mime_type
