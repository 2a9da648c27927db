"""
Shared data models for the journal scanner
"""

from dataclasses import dataclass
from datetime import date, datetime


SETTINGS_FIELDS = ('notion_token', 'notion_database_id', 'google_api_key')


@dataclass(frozen=True)
class Settings:
    """Process-wide credentials, stored unmasked"""
    notion_token: str = ""
    notion_database_id: str = ""
    google_api_key: str = ""

    def to_dict(self) -> dict:
        return {name: getattr(self, name) for name in SETTINGS_FIELDS}


# Credentials share the settings shape; the alias keeps gateway signatures readable
Credentials = Settings


@dataclass(frozen=True)
class Capture:
    """A captured page image held for the session"""
    file_name: str
    image_data: str  # data URI
    captured_at: datetime

    @property
    def image_base64(self) -> str:
        """Base64 payload without the data URI prefix"""
        return self.image_data.split(',', 1)[-1]


@dataclass(frozen=True)
class Draft:
    """The entry under construction while the user reviews the transcription"""
    title: str
    date: date
    tags: tuple[str, ...] = ()
    ocr_text: str = ""
    raw_ocr_text: str = ""

    def to_dict(self) -> dict:
        return {
            'title': self.title,
            'date': self.date.isoformat(),
            'tags': list(self.tags),
            'ocr_text': self.ocr_text,
            'raw_ocr_text': self.raw_ocr_text,
        }


@dataclass(frozen=True)
class PageRequest:
    """Fields sent to the document database when creating a page"""
    title: str
    date: date
    text: str
    tags: tuple[str, ...] = ()


@dataclass(frozen=True)
class CreatedPage:
    """Identifier and browsable url of a page created upstream"""
    id: str
    url: str


@dataclass(frozen=True)
class Entry:
    """A completed journal page; never modified after it is logged"""
    id: str
    title: str
    date: date
    created_at: datetime
    tags: tuple[str, ...] = ()
    ocr_text: str = ""
    raw_ocr_text: str = ""
    image_data: str = ""
    remote_url: str | None = None

    @property
    def tags_text(self) -> str:
        return ", ".join(self.tags)

    def to_dict(self, include_image: bool = True) -> dict:
        data = {
            'id': self.id,
            'title': self.title,
            'date': self.date.isoformat(),
            'tags': list(self.tags),
            'ocr_text': self.ocr_text,
            'raw_ocr_text': self.raw_ocr_text,
            'created_at': self.created_at.isoformat(),
            'remote_url': self.remote_url,
        }
        if include_image:
            data['image_data'] = self.image_data
        return data


@dataclass
class ShellTab:
    """One navigation tab of the presentation shell"""
    id: str
    label: str
    active: bool = False
    badge: int | None = None

    def to_dict(self) -> dict:
        data = {'id': self.id, 'label': self.label, 'active': self.active}
        if self.badge is not None:
            data['badge'] = self.badge
        return data
