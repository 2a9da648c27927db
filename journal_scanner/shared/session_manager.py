"""
Per-browser-session scan workflows and entry logs
"""
import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from journal_scanner.repositories.entry_log import EntryLog
from journal_scanner.shared.logging_config import get_project_logger
from journal_scanner.shared.scan_workflow import BUSY_STATES, ScanWorkflow


logger = get_project_logger(__name__)


@dataclass
class ScanSession:
    """Workflow and entry log belonging to one browser session"""
    id: str
    workflow: ScanWorkflow
    entry_log: EntryLog
    last_seen: datetime = field(default_factory=datetime.now)

    def touch(self):
        self.last_seen = datetime.now()


class ScanSessionManager:
    """Manages scan session lifecycle"""

    def __init__(self, demo_delay: float = 1.5, max_age_hours: float = 24,
                 cleanup_interval: timedelta = timedelta(minutes=10)):
        self.demo_delay = demo_delay
        self.max_age_hours = max_age_hours
        self.cleanup_interval = cleanup_interval
        self._sessions: dict[str, ScanSession] = {}
        self._lock = threading.Lock()
        self._last_cleanup = datetime.now()

    def create_session(self) -> ScanSession:
        # Stale sessions are swept at most once per cleanup_interval
        self.cleanup_if_due()

        session_id = str(uuid.uuid4())
        entry_log = EntryLog()
        session = ScanSession(
            id=session_id,
            workflow=ScanWorkflow(entry_log, demo_delay=self.demo_delay),
            entry_log=entry_log,
        )
        with self._lock:
            self._sessions[session_id] = session

        logger.info(f"Created scan session: {session_id}")
        return session

    def get_session(self, session_id: str | None) -> ScanSession | None:
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
        if session:
            session.touch()
        return session

    def get_or_create(self, session_id: str | None) -> ScanSession:
        return self.get_session(session_id) or self.create_session()

    def cleanup_idle_sessions(self, max_age_hours: float | None = None) -> int:
        """Remove sessions unused for longer than max_age_hours; returns how many"""
        if max_age_hours is None:
            max_age_hours = self.max_age_hours
        cutoff_time = datetime.now() - timedelta(hours=max_age_hours)

        with self._lock:
            self._last_cleanup = datetime.now()
            stale = [
                session_id for session_id, session in self._sessions.items()
                if session.last_seen < cutoff_time
                and not isinstance(session.workflow.state, BUSY_STATES)
            ]
            for session_id in stale:
                del self._sessions[session_id]

        if stale:
            logger.info(f"Cleaned up {len(stale)} idle scan sessions")
        return len(stale)

    def cleanup_if_due(self) -> int:
        """Run cleanup_idle_sessions when the last sweep is older than cleanup_interval"""
        with self._lock:
            due = datetime.now() - self._last_cleanup >= self.cleanup_interval
        return self.cleanup_idle_sessions() if due else 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
