"""
Text helpers for turning OCR output into journal entry fields
"""
from __future__ import annotations

from datetime import date


TITLE_MAX_LENGTH = 60
TITLE_ELLIPSIS = "..."

# Notion rejects rich text objects longer than this
RICH_TEXT_LIMIT = 2000


def normalize_newlines(text: str) -> str:
    return text.replace('\r\n', '\n').replace('\r', '\n')


def fallback_title(entry_date: date) -> str:
    return f"Journal Entry — {entry_date.isoformat()}"


def derive_title(text: str, entry_date: date) -> str:
    """
    Build an entry title from the first line of transcribed text.

    Lines longer than 60 characters are cut to 60 and suffixed with "...";
    an empty first line falls back to the dated default title.
    """
    first_line = normalize_newlines(text or "").split('\n', 1)[0].strip()
    if not first_line:
        return fallback_title(entry_date)
    if len(first_line) > TITLE_MAX_LENGTH:
        return first_line[:TITLE_MAX_LENGTH] + TITLE_ELLIPSIS
    return first_line


def parse_tags(raw: str | list | tuple | None) -> tuple[str, ...]:
    """Split comma separated tag input, trimming and dropping empty segments"""
    if raw is None:
        return ()
    parts = raw.split(',') if isinstance(raw, str) else [str(part) for part in raw]
    return tuple(tag for tag in (part.strip() for part in parts) if tag)


def split_paragraphs(text: str) -> list[str]:
    """Split text on blank lines, dropping paragraphs that are empty once trimmed"""
    segments = normalize_newlines(text or "").split('\n\n')
    return [segment.strip() for segment in segments if segment.strip()]


def chunk_text(text: str, limit: int = RICH_TEXT_LIMIT) -> list[str]:
    """Cut text into pieces no longer than limit, preferring whitespace boundaries"""
    chunks = []
    remaining = text
    while len(remaining) > limit:
        cut = remaining.rfind(' ', 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(remaining[:cut])
        remaining = remaining[cut:]
    if remaining or not chunks:
        chunks.append(remaining)
    return chunks
