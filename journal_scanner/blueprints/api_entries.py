"""
Journal entries API blueprint
"""

from flask import Blueprint, request

from journal_scanner.blueprints.blueprint_utils import current_scan_session
from journal_scanner.shared.api_response_formatter import APIResponseFormatter


api_entries = Blueprint('api_entries', __name__, url_prefix='/api/entries')


@api_entries.route('', methods=['GET'])
def list_entries():
    """Entries of this session, most recent first, optionally filtered by ?q="""
    query = request.args.get('q', '')
    include_images = request.args.get('include_images') in ('1', 'true')
    entries = current_scan_session().entry_log.search(query)
    return APIResponseFormatter.success({
        'entries': [entry.to_dict(include_image=include_images) for entry in entries],
        'count': len(entries),
        'query': query,
    })


@api_entries.route('/<entry_id>', methods=['GET'])
def get_entry(entry_id):
    entry = current_scan_session().entry_log.get(entry_id)
    return APIResponseFormatter.success({'entry': entry.to_dict()})
