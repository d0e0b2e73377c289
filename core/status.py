from enum import Enum
from typing import Final, Literal


class Status(Enum):
    OPEN = ("open", "status.ready", "○")
    IN_PROGRESS = ("in_progress", "status.active", "◐")
    BLOCKED = ("blocked", "status.blocked", "⊘")
    DEFERRED = ("deferred", "status.deferred", "❄")
    CLOSED = ("closed", "status.closed", "✔")
    UNKNOWN = ("?", "status.unknown", "?")

    @property
    def code(self) -> str:
        return self.value[0]

    @property
    def style(self) -> str:
        return self.value[1]

    @property
    def glyph(self) -> str:
        return self.value[2]

    @classmethod
    def from_string(cls, value: str) -> "Status":
        val = normalize_issue_status(value, allow_unknown=True)
        for status in cls:
            if status.code == val:
                return status
        return cls.UNKNOWN


IssueStatusCode = Literal["open", "in_progress", "blocked", "deferred", "closed"]

_CANONICAL_CODES: Final[frozenset[str]] = frozenset({"open", "in_progress", "blocked", "deferred", "closed"})
_INTERNAL_CODES: Final[frozenset[str]] = frozenset({"tombstone"})


def normalize_issue_status(value: str, *, allow_unknown: bool = False) -> str:
    """Normalize issue status input to the beads status code.

    Canonical statuses: open, in_progress, blocked, deferred, closed.
    Newer backends emit extra values (e.g. "pinned"); with allow_unknown=True
    those are returned lowercased instead of rejected. "tombstone" is internal
    to the tracker and always rejected.
    """
    token = (value or "").strip().lower().replace(" ", "_").replace("-", "_")
    if not token:
        if allow_unknown:
            return token
        raise ValueError("Invalid issue status: blank")
    if token in _INTERNAL_CODES:
        raise ValueError(f"Invalid issue status: {value!r}")
    if token in _CANONICAL_CODES:
        return token
    if allow_unknown:
        return token
    raise ValueError(f"Invalid issue status: {value!r}")


def is_known_status(value: str) -> bool:
    return (value or "").strip().lower() in _CANONICAL_CODES


def is_closed(value: str) -> bool:
    return (value or "").strip().lower() == "closed"


def is_in_progress(value: str) -> bool:
    return (value or "").strip().lower() == "in_progress"


def is_open(value: str) -> bool:
    return (value or "").strip().lower() == "open"
