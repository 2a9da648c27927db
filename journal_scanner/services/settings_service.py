"""
Settings store persisting provider credentials to a local JSON file
"""
import json
import os
import tempfile
import threading
from pathlib import Path

from journal_scanner.services.base_service import BaseService
from journal_scanner.services.exceptions import StorageError
from journal_scanner.shared.models import SETTINGS_FIELDS, Settings


MASK_MARKER = '••••'
MASK_VISIBLE_CHARS = 4

# Fields shown masked, with the vendor prefixes that may stay visible
SECRET_FIELDS = {
    'notion_token': ('ntn_', 'secret_'),
    'google_api_key': ('AIza',),
}


def mask_secret(secret: str, known_prefix: str | None = None) -> str:
    """
    Mask a secret for display.

    Keeps the known prefix when the secret starts with it, otherwise the first
    four characters, then the marker and the last four characters. Empty
    secrets mask to an empty string; secrets that would show every character
    that way mask to the marker alone.
    """
    if not secret:
        return ""
    if known_prefix and secret.startswith(known_prefix):
        head = known_prefix
    else:
        head = secret[:MASK_VISIBLE_CHARS]
    if len(secret) <= len(head) + MASK_VISIBLE_CHARS:
        return MASK_MARKER
    return f"{head}{MASK_MARKER}{secret[-MASK_VISIBLE_CHARS:]}"


def is_masked(value: str) -> bool:
    return MASK_MARKER in value


def is_configured(settings: Settings) -> bool:
    """True when every credential field holds a value"""
    return all(getattr(settings, name) for name in SETTINGS_FIELDS)


def masked_settings(settings: Settings) -> dict:
    """Display form of the settings with secret fields masked"""
    masked = {}
    for name in SETTINGS_FIELDS:
        value = getattr(settings, name)
        if name in SECRET_FIELDS:
            prefix = next((p for p in SECRET_FIELDS[name] if value.startswith(p)), None)
            value = mask_secret(value, prefix)
        masked[name] = value
    return masked


def merge_settings(current: Settings, partial: dict) -> Settings:
    """
    Merge a partial update into current settings.

    A field is replaced only when the incoming value is a non-empty string
    that does not carry the mask marker; anything else keeps the stored value.
    """
    merged = current.to_dict()
    for name in SETTINGS_FIELDS:
        value = partial.get(name)
        if isinstance(value, str):
            value = value.strip()
            if value and not is_masked(value):
                merged[name] = value
    return Settings(**merged)


class SettingsStore(BaseService):
    """Sole owner of the persisted settings"""

    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)
        self._lock = threading.Lock()
        self._settings = self.load()

    @property
    def settings(self) -> Settings:
        with self._lock:
            return self._settings

    def load(self) -> Settings:
        """Read persisted settings, falling back to empty settings on any problem"""
        try:
            with open(self.path, encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            self.logger.info(f"No settings file at {self.path}, starting unconfigured")
            return Settings()
        except (OSError, ValueError) as e:
            self.logger.warning(f"Could not read settings file {self.path}: {e}")
            return Settings()

        if not isinstance(data, dict):
            self.logger.warning(f"Settings file {self.path} does not hold a JSON object, ignoring it")
            return Settings()

        return Settings(**{
            name: data[name] for name in SETTINGS_FIELDS
            if isinstance(data.get(name), str)
        })

    def save(self, settings: Settings):
        """Rewrite the settings file wholesale"""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix='.settings-', suffix='.json')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(settings.to_dict(), f, indent=2)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            self.logger.error(f"Could not write settings file {self.path}: {e}")
            raise StorageError(f"Could not save settings: {e}") from e

    def merge(self, partial: dict) -> dict:
        """Apply a partial update, persist it and return the masked result"""
        with self._lock:
            previous = self._settings
            merged = merge_settings(previous, partial or {})
            self.save(merged)
            self._settings = merged

        changed = [name for name in SETTINGS_FIELDS if getattr(previous, name) != getattr(merged, name)]
        self.logger.info(f"Settings updated ({', '.join(changed) or 'no changes'})")
        return masked_settings(merged)

    def is_configured(self) -> bool:
        return is_configured(self.settings)

    def view(self) -> dict:
        """Masked settings plus the configured flag"""
        settings = self.settings
        return {
            'settings': masked_settings(settings),
            'configured': is_configured(settings),
        }
