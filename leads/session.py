"""
Import session state machine.

An ImportSession is an immutable value. Every change goes through
``apply_event``, which returns a new session or raises InvalidTransition:

    idle -> parsing -> rejected | mapped
    mapped -> mapped            (mapping / dedup edits, gate failures)
    mapped -> uploading -> complete | mapped (with error)
    any -> idle                 (reset)

``rejected`` and ``complete`` accept nothing but a reset.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .fields import LeadField
from .mapping import MappingModel
from .parser import RawRow


class SessionState(Enum):
    IDLE = "idle"
    PARSING = "parsing"
    REJECTED = "rejected"
    MAPPED = "mapped"
    UPLOADING = "uploading"
    COMPLETE = "complete"


class InvalidTransition(ValueError):
    """Raised when an event is not allowed in the session's current state."""
    pass


@dataclass(frozen=True)
class DedupConfig:
    """Duplicate-check scopes forwarded to the ingestion service."""
    campaigns: bool = True
    lists: bool = True
    workspace: bool = True

    def to_dict(self) -> Dict[str, bool]:
        return {
            "campaigns": self.campaigns,
            "lists": self.lists,
            "workspace": self.workspace,
        }


@dataclass(frozen=True)
class ImportSession:
    """Transient state of one file's import attempt."""
    state: SessionState = SessionState.IDLE
    file_name: Optional[str] = None
    file_size_bytes: int = 0
    headers: Tuple[str, ...] = ()
    rows: Tuple[RawRow, ...] = ()
    mapping: MappingModel = field(default_factory=MappingModel)
    dedup: DedupConfig = field(default_factory=DedupConfig)
    error: Optional[str] = None
    result: Any = None
    imported_count: int = 0

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    @property
    def can_upload(self) -> bool:
        return self.state is SessionState.MAPPED and self.mapping.has_email()


# =========================================
# Events
# =========================================


@dataclass(frozen=True)
class FileAccepted:
    file_name: str
    file_size_bytes: int


@dataclass(frozen=True)
class FileRejected:
    message: str


@dataclass(frozen=True)
class Parsed:
    headers: Tuple[str, ...]
    rows: Tuple[RawRow, ...]
    mapping: MappingModel


@dataclass(frozen=True)
class MappingChanged:
    source_column: str
    target_field: Union[LeadField, str]


@dataclass(frozen=True)
class DedupChanged:
    dedup: DedupConfig


@dataclass(frozen=True)
class MappingInvalid:
    message: str


@dataclass(frozen=True)
class UploadStarted:
    pass


@dataclass(frozen=True)
class UploadSucceeded:
    imported_count: int
    result: Any = None


@dataclass(frozen=True)
class UploadFailed:
    message: str


@dataclass(frozen=True)
class Reset:
    pass


Event = Union[
    FileAccepted, FileRejected, Parsed, MappingChanged, DedupChanged,
    MappingInvalid, UploadStarted, UploadSucceeded, UploadFailed, Reset,
]


def _require(session: ImportSession, event, *states: SessionState) -> None:
    if session.state not in states:
        raise InvalidTransition(
            f"{type(event).__name__} not allowed in state {session.state.value!r}"
        )


def apply_event(session: ImportSession, event: Event) -> ImportSession:
    """Return the session that results from ``event``."""
    if isinstance(event, Reset):
        return ImportSession()

    if isinstance(event, FileAccepted):
        _require(session, event, SessionState.IDLE)
        return replace(
            session,
            state=SessionState.PARSING,
            file_name=event.file_name,
            file_size_bytes=event.file_size_bytes,
            error=None,
        )

    if isinstance(event, FileRejected):
        _require(session, event, SessionState.IDLE, SessionState.PARSING)
        # No rows or mapping survive a rejection
        return ImportSession(
            state=SessionState.REJECTED,
            file_name=session.file_name,
            file_size_bytes=session.file_size_bytes,
            error=event.message,
        )

    if isinstance(event, Parsed):
        _require(session, event, SessionState.PARSING)
        return replace(
            session,
            state=SessionState.MAPPED,
            headers=tuple(event.headers),
            rows=tuple(event.rows),
            mapping=event.mapping,
        )

    if isinstance(event, MappingChanged):
        _require(session, event, SessionState.MAPPED)
        return replace(
            session,
            mapping=session.mapping.set_target(event.source_column, event.target_field),
        )

    if isinstance(event, DedupChanged):
        _require(session, event, SessionState.MAPPED)
        return replace(session, dedup=event.dedup)

    if isinstance(event, MappingInvalid):
        _require(session, event, SessionState.MAPPED)
        return replace(session, error=event.message)

    if isinstance(event, UploadStarted):
        _require(session, event, SessionState.MAPPED)
        return replace(session, state=SessionState.UPLOADING, error=None)

    if isinstance(event, UploadSucceeded):
        _require(session, event, SessionState.UPLOADING)
        return replace(
            session,
            state=SessionState.COMPLETE,
            imported_count=event.imported_count,
            result=event.result,
        )

    if isinstance(event, UploadFailed):
        _require(session, event, SessionState.UPLOADING)
        return replace(session, state=SessionState.MAPPED, error=event.message)

    raise TypeError(f"Unknown session event: {event!r}")
