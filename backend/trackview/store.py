import logging
from dataclasses import dataclass, field
from typing import Optional

from fastapi import Request

from trackview.core.errors import SessionNotFoundError
from trackview.core.selection import SelectionState
from trackview.models.snapshot import ActivitySnapshot

logger = logging.getLogger(__name__)


@dataclass
class ActivitySession:
    """One loaded file: its immutable snapshot plus the live selection."""
    snapshot: ActivitySnapshot
    source: str = ""
    selection: SelectionState = field(init=False)

    def __post_init__(self):
        self.selection = SelectionState(self.snapshot)


class SessionStore:
    """In-memory sessions keyed by filename, with one active file.

    Only touched from request handlers running on the event loop, so there
    is a single writer and no locking.
    """

    def __init__(self):
        self._sessions: dict[str, ActivitySession] = {}
        self.active: Optional[str] = None

    def replace(self, loaded: list[tuple[ActivitySnapshot, str]]) -> list[ActivitySession]:
        """Drop every session and install a new batch; the first becomes active.

        `loaded` holds (snapshot, source) pairs that have already decoded
        successfully, so a failed upload never reaches this point. Filenames
        are unique within a batch; the upload route rejects duplicates.
        """
        sessions = {}
        for snapshot, source in loaded:
            sessions[snapshot.filename] = ActivitySession(snapshot=snapshot, source=source)
            logger.info(
                "Loaded %s: %d records, %d GPS points, %d fields",
                snapshot.filename, len(snapshot.records), len(snapshot.gps), len(snapshot.fields),
            )
        self._sessions = sessions
        self.active = next(iter(sessions), None)
        return list(sessions.values())

    def get(self, filename: str) -> ActivitySession:
        session = self._sessions.get(filename)
        if session is None:
            raise SessionNotFoundError(f"No session loaded for {filename}")
        return session

    def activate(self, filename: str) -> ActivitySession:
        session = self.get(filename)
        self.active = filename
        return session

    def names(self) -> list[str]:
        return list(self._sessions)

    def sessions(self) -> list[ActivitySession]:
        return list(self._sessions.values())

    def __len__(self):
        return len(self._sessions)


# Dependency we will use in FastAPI routes
def get_store(request: Request) -> SessionStore:
    return request.app.state.sessions
