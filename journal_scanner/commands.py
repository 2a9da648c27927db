"""
Flask CLI commands for the journal scanner
"""

import sys

import click
from flask.cli import AppGroup

from journal_scanner.extensions import get_services
from journal_scanner.services.exceptions import StorageError


settings_cli = AppGroup('settings', help='Show or change stored provider credentials.')


@settings_cli.command('show')
def show_settings():
    """Print the stored settings with secrets masked."""
    view = get_services().settings_store.view()
    for name, value in view['settings'].items():
        click.echo(f"{name}: {value or '(not set)'}")
    click.echo(f"configured: {'yes' if view['configured'] else 'no'}")


@settings_cli.command('set')
@click.option('--notion-token', help='Notion integration token')
@click.option('--database-id', 'notion_database_id', help='Notion database ID')
@click.option('--google-api-key', help='Google Cloud Vision API key')
def set_settings(notion_token, notion_database_id, google_api_key):
    """Merge the given values into the stored settings."""
    partial = {
        'notion_token': notion_token,
        'notion_database_id': notion_database_id,
        'google_api_key': google_api_key,
    }
    partial = {name: value for name, value in partial.items() if value is not None}
    if not partial:
        click.echo("❌ Nothing to update - pass at least one option")
        sys.exit(1)

    try:
        masked = get_services().settings_store.merge(partial)
    except StorageError as e:
        click.echo(f"❌ {e}")
        sys.exit(1)

    click.echo("✅ Settings saved")
    for name, value in masked.items():
        click.echo(f"{name}: {value or '(not set)'}")


@settings_cli.command('check')
def check_settings():
    """Exit with status 1 when any credential is missing."""
    if get_services().settings_store.is_configured():
        click.echo("✅ All credentials configured")
    else:
        click.echo("❌ Settings incomplete - scans will run in demo mode")
        sys.exit(1)


def register_commands(app):
    """Register all CLI commands with the Flask app"""
    app.cli.add_command(settings_cli)
