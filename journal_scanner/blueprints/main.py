"""
Main blueprint for the presentation shell
"""

from flask import Blueprint, jsonify, render_template, request

from journal_scanner.blueprints.blueprint_utils import build_gateway, current_scan_session
from journal_scanner.extensions import get_services
from journal_scanner.services.settings_service import is_configured
from journal_scanner.services.shell_service import build_shell
from journal_scanner.shared.logging_config import get_project_logger


logger = get_project_logger(__name__)

main = Blueprint('main', __name__)


def _shell_model() -> dict:
    configured = is_configured(build_gateway().credentials)
    entry_count = len(current_scan_session().entry_log)
    return build_shell(request.args.get('tab'), configured, entry_count)


@main.route('/')
def index():
    """Single page UI with Scan, Journal and Settings tabs"""
    return render_template('index.html', shell=_shell_model())


@main.route('/api/shell')
def shell():
    """Navigation model for the UI"""
    return jsonify({'success': True, **_shell_model()})


@main.route('/api/status')
def status():
    """Liveness check with the configured flag"""
    services = get_services()
    return jsonify({
        'success': True,
        'status': 'running',
        'configured': is_configured(build_gateway().credentials),
        'credential_mode': services.credential_mode,
    })
