"""
Domain: timeline (audit trail) events and notes.

Rules implemented here:
- A TimelineEvent is an immutable audit record; once appended to a lead's
  timeline it is never changed or removed.
- A Note is a user-authored remark. When added to a lead it is also
  materialized as a TimelineEvent of type `note`.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from .time import require_utc_timestamp

SYSTEM_AUTHOR = "System"
DEFAULT_AUTHOR = "You"


class TimelineEventType(str, Enum):
    NOTE = "note"
    CALL = "call"
    WHATSAPP = "whatsapp"
    STATUS_CHANGE = "status_change"
    VISIT = "visit"


@dataclass(frozen=True, slots=True)
class TimelineEvent:
    """Immutable audit record on a lead's timeline."""

    id: str
    type: TimelineEventType
    content: str
    created_at: datetime
    user_name: Optional[str] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("created_at", self.created_at)


@dataclass(frozen=True, slots=True)
class Note:
    id: str
    lead_id: str
    content: str
    created_at: datetime
    user_id: Optional[str] = None

    def __post_init__(self) -> None:
        require_utc_timestamp("created_at", self.created_at)

    def as_timeline_event(self, user_name: Optional[str] = DEFAULT_AUTHOR) -> TimelineEvent:
        """The note as it appears on the owning lead's timeline (same id and timestamp)."""

        return TimelineEvent(
            id=self.id,
            type=TimelineEventType.NOTE,
            content=self.content,
            created_at=self.created_at,
            user_name=user_name,
        )


__all__ = [
    "DEFAULT_AUTHOR",
    "Note",
    "SYSTEM_AUTHOR",
    "TimelineEvent",
    "TimelineEventType",
]
