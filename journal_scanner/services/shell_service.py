"""
Presentation shell model: tab navigation and the configuration nudge
"""
from journal_scanner.shared.models import ShellTab


TABS = (
    ('scan', 'Scan'),
    ('entries', 'Journal'),
    ('settings', 'Settings'),
)
DEFAULT_TAB = 'scan'

CONFIG_NUDGE = ("Connect Notion and Google Vision in Settings to save real entries. "
                "Until then scans use demonstration text.")


def build_shell(active_tab: str | None, configured: bool, entry_count: int = 0) -> dict:
    """Derive the navigation state from the requested tab and the settings"""
    tab_ids = [tab_id for tab_id, _ in TABS]
    active = active_tab if active_tab in tab_ids else DEFAULT_TAB

    tabs = [
        ShellTab(
            id=tab_id,
            label=label,
            active=tab_id == active,
            badge=entry_count if tab_id == 'entries' and entry_count else None,
        )
        for tab_id, label in TABS
    ]
    show_nudge = not configured and active != 'settings'
    return {
        'active_tab': active,
        'tabs': [tab.to_dict() for tab in tabs],
        'show_config_nudge': show_nudge,
        'config_nudge': CONFIG_NUDGE if show_nudge else None,
    }
