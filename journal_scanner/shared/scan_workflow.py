"""
Scan workflow driving one capture-to-submit cycle

States run Idle -> Uploading -> Processing -> ReviewReady -> Submitting -> Done.
Failures during upload, OCR or submission land in Failed, which keeps the
capture and draft so the failed step can be retried or the workflow reset.
Each state class carries only the data valid in that state.
"""
import base64
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import ClassVar

from journal_scanner.repositories.entry_log import EntryLog
from journal_scanner.services.exceptions import ConflictError, ServiceError, ValidationError
from journal_scanner.shared.logging_config import get_project_logger
from journal_scanner.shared.models import Capture, Draft, Entry, PageRequest
from journal_scanner.shared.text_utils import derive_title, fallback_title, parse_tags


logger = get_project_logger(__name__)

DEMO_TEXT = """Dear Journal,

Today I tried scanning a handwritten page for the first time. This text is a demonstration because no OCR key is configured yet.

Add a Google Vision API key in Settings to transcribe your own pages."""

STEP_UPLOAD = 'upload'
STEP_OCR = 'ocr'
STEP_SUBMIT = 'submit'


@dataclass(frozen=True)
class Idle:
    name: ClassVar[str] = 'idle'


@dataclass(frozen=True)
class Uploading:
    name: ClassVar[str] = 'uploading'
    file_name: str


@dataclass(frozen=True)
class Processing:
    name: ClassVar[str] = 'processing'
    capture: Capture


@dataclass(frozen=True)
class ReviewReady:
    name: ClassVar[str] = 'review_ready'
    capture: Capture
    draft: Draft


@dataclass(frozen=True)
class Submitting:
    name: ClassVar[str] = 'submitting'
    capture: Capture
    draft: Draft


@dataclass(frozen=True)
class Done:
    name: ClassVar[str] = 'done'
    entry: Entry


@dataclass(frozen=True)
class Failed:
    name: ClassVar[str] = 'error'
    step: str
    file_name: str = ''
    capture: Capture | None = None
    draft: Draft | None = None


WorkflowState = Idle | Uploading | Processing | ReviewReady | Submitting | Done | Failed

# Triggering controls are disabled while one of these is in flight
BUSY_STATES = (Uploading, Processing, Submitting)


def parse_entry_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError as e:
        raise ValidationError(f"Invalid date: {value!r}") from e


def image_to_data_uri(content: bytes, mime_type: str) -> str:
    encoded = base64.b64encode(content).decode('ascii')
    return f"data:{mime_type};base64,{encoded}"


class ScanWorkflow:
    """Controller for one draft; one action in flight at a time"""

    def __init__(self, entry_log: EntryLog, demo_delay: float = 1.5,
                 clock: Callable[[], datetime] = datetime.now):
        self.entry_log = entry_log
        self.demo_delay = demo_delay
        self._clock = clock
        self._lock = threading.RLock()
        self.state: WorkflowState = Idle()
        self.error: str | None = None
        self.notice: str | None = None
        self.history: list[str] = [Idle.name]

    # -- internals ---------------------------------------------------------

    def _transition(self, state: WorkflowState):
        logger.info(f"Scan workflow {self.state.name} -> {state.name}")
        self.state = state
        self.history.append(state.name)

    def _require(self, allowed: tuple, action: str):
        if not isinstance(self.state, allowed):
            raise ConflictError(f"Cannot {action} while the scan is in state '{self.state.name}'")
        return self.state

    def _fail(self, step: str, message: str, file_name: str = '',
              capture: Capture | None = None, draft: Draft | None = None):
        logger.warning(f"Scan step '{step}' failed: {message}")
        self.error = message
        self.notice = None
        if capture is not None:
            file_name = capture.file_name
        self._transition(Failed(step=step, file_name=file_name, capture=capture, draft=draft))

    def _read_image(self, file_name: str, content: bytes, mime_type: str) -> Capture:
        if not content:
            raise ValidationError("The selected file is empty")
        if not (mime_type or '').startswith('image/'):
            raise ValidationError(f"Unsupported file type: {mime_type or 'unknown'}")
        return Capture(
            file_name=file_name or 'page',
            image_data=image_to_data_uri(content, mime_type),
            captured_at=self._clock(),
        )

    def _make_entry(self, entry_id: str, capture: Capture, draft: Draft,
                    remote_url: str | None = None) -> Entry:
        return Entry(
            id=entry_id,
            title=draft.title.strip() or fallback_title(draft.date),
            date=draft.date,
            created_at=capture.captured_at,
            tags=draft.tags,
            ocr_text=draft.ocr_text,
            raw_ocr_text=draft.raw_ocr_text,
            image_data=capture.image_data,
            remote_url=remote_url,
        )

    def _run_ocr(self, gateway, capture: Capture):
        try:
            if gateway.has_ocr_key():
                text = gateway.submit_ocr(capture.image_base64)['text']
            else:
                logger.info("No OCR key configured, using demonstration text")
                time.sleep(self.demo_delay)
                text = DEMO_TEXT
        except ServiceError as e:
            with self._lock:
                self._fail(STEP_OCR, str(e), capture=capture)
            return
        except Exception:
            with self._lock:
                self._fail(STEP_OCR, "Unexpected error while reading the page", capture=capture)
            raise

        entry_date = capture.captured_at.date()
        draft = Draft(
            title=derive_title(text, entry_date),
            date=entry_date,
            ocr_text=text,
            raw_ocr_text=text,
        )
        with self._lock:
            self.notice = "Text extracted. Review and edit before saving."
            self._transition(ReviewReady(capture=capture, draft=draft))

    def _run_submit(self, gateway, capture: Capture, draft: Draft):
        page = PageRequest(
            title=draft.title.strip() or fallback_title(draft.date),
            date=draft.date,
            text=draft.ocr_text,
            tags=draft.tags,
        )
        try:
            created = gateway.create_page(page)
        except ServiceError as e:
            with self._lock:
                self._fail(STEP_SUBMIT, str(e), capture=capture, draft=draft)
            return
        except Exception:
            with self._lock:
                self._fail(STEP_SUBMIT, "Unexpected error while saving to Notion", capture=capture, draft=draft)
            raise

        entry = self._make_entry(created.id, capture, draft, remote_url=created.url)
        with self._lock:
            self.entry_log.append(entry)
            self.notice = "Saved to Notion."
            self._transition(Done(entry=entry))

    # -- actions -----------------------------------------------------------

    def submit_image(self, gateway, file_name: str, content: bytes, mime_type: str) -> dict:
        """Read a selected image and run OCR on it"""
        with self._lock:
            state = self._require((Idle, Failed), 'select an image')
            if isinstance(state, Failed) and state.step != STEP_UPLOAD:
                raise ConflictError("Retry or reset the current scan before selecting another image")
            self.error = None
            self.notice = None
            self._transition(Uploading(file_name=file_name))

        try:
            capture = self._read_image(file_name, content, mime_type)
        except ValidationError as e:
            with self._lock:
                self._fail(STEP_UPLOAD, str(e), file_name=file_name)
            return self.snapshot()

        with self._lock:
            self.notice = "Reading handwriting..."
            self._transition(Processing(capture=capture))

        self._run_ocr(gateway, capture)
        return self.snapshot()

    def edit_draft(self, title=None, date=None, tags=None, text=None) -> dict:
        """Change draft fields; the workflow stays in review"""
        with self._lock:
            state = self._require((ReviewReady,), 'edit the draft')
            changes = {}
            if title is not None:
                changes['title'] = str(title)
            if date is not None:
                changes['date'] = parse_entry_date(date)
            if tags is not None:
                changes['tags'] = parse_tags(tags)
            if text is not None:
                changes['ocr_text'] = str(text)
            self.state = ReviewReady(capture=state.capture, draft=replace(state.draft, **changes))
            return self.snapshot()

    def submit(self, gateway) -> dict:
        """Send the draft to the document database"""
        with self._lock:
            state = self._require((ReviewReady,), 'submit')
            self.error = None
            self.notice = "Sending to Notion..."
            self._transition(Submitting(capture=state.capture, draft=state.draft))

        self._run_submit(gateway, state.capture, state.draft)
        return self.snapshot()

    def save_locally(self) -> dict:
        """Log the draft as an entry without contacting the document database"""
        with self._lock:
            state = self._require((ReviewReady,), 'save')
            entry_id = f"local-{int(self._clock().timestamp() * 1000)}"
            entry = self._make_entry(entry_id, state.capture, state.draft)
            self.entry_log.append(entry)
            self.error = None
            self.notice = "Saved locally."
            self._transition(Done(entry=entry))
            return self.snapshot()

    def retry(self, gateway) -> dict:
        """Run the failed step again with the retained capture and draft"""
        with self._lock:
            state = self._require((Failed,), 'retry')
            if state.step == STEP_OCR:
                self.error = None
                self.notice = "Reading handwriting..."
                self._transition(Processing(capture=state.capture))
            elif state.step == STEP_SUBMIT:
                self.error = None
                self.notice = "Sending to Notion..."
                self._transition(Submitting(capture=state.capture, draft=state.draft))
            else:
                raise ConflictError("Select the image again to retry the upload")

        if state.step == STEP_OCR:
            self._run_ocr(gateway, state.capture)
        else:
            self._run_submit(gateway, state.capture, state.draft)
        return self.snapshot()

    def reset(self) -> dict:
        """Discard the draft and start over"""
        with self._lock:
            if isinstance(self.state, BUSY_STATES):
                raise ConflictError(f"Cannot reset while the scan is in state '{self.state.name}'")
            self.error = None
            self.notice = None
            self._transition(Idle())
            return self.snapshot()

    def dismiss_error(self) -> dict:
        with self._lock:
            self.error = None
            return self.snapshot()

    def snapshot(self) -> dict:
        """Serializable view of the workflow for the UI"""
        with self._lock:
            state = self.state
            capture = getattr(state, 'capture', None)
            draft = getattr(state, 'draft', None)
            entry = getattr(state, 'entry', None)
            file_name = capture.file_name if capture else getattr(state, 'file_name', None) or None
            return {
                'state': state.name,
                'busy': isinstance(state, BUSY_STATES),
                'failed_step': state.step if isinstance(state, Failed) else None,
                'error': self.error,
                'notice': self.notice,
                'file_name': file_name,
                'image_data': capture.image_data if capture else None,
                'draft': draft.to_dict() if draft else None,
                'entry': entry.to_dict(include_image=False) if entry else None,
            }
