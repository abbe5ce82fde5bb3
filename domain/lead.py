"""
Domain: Lead entity.

Rules implemented here:
- A Lead is a sales prospect uniquely identified by an opaque `id`, immutable once created.
- name, phone and address are required (non-blank); phone is a contact key and is
  not validated for format.
- status is one of the pipeline statuses; source is one of the known channels.
- quote_amount, when present, is a positive currency value.
- The timeline is ordered newest first and is append-only: a Lead instance is frozen,
  and every mutation produces a new instance via `with_changes`.
- created_at is set once; updated_at is refreshed on every mutation.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional, Tuple

from .errors import ValidationError
from .time import require_utc_timestamp
from .timeline import TimelineEvent


class LeadStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    SURVEY_SCHEDULED = "survey_scheduled"
    QUOTED = "quoted"
    NEGOTIATION = "negotiation"
    WON = "won"
    LOST = "lost"


class LeadSource(str, Enum):
    WALK_IN = "walk_in"
    REFERRAL = "referral"
    WEBSITE = "website"
    SOCIAL = "social"
    CAMP = "camp"


def _require_text(name: str, value: Optional[str]) -> None:
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} must not be empty")


@dataclass(frozen=True, slots=True)
class Lead:
    """
    Pure domain entity for a Lead.

    Notes:
    - `assigned_to` is a soft reference to a User id. It is resolved through the user
      directory at read time and may point at a user that no longer exists.
    - `timeline[0]` is always the most recent event.
    """

    id: str
    name: str
    phone: str
    address: str
    status: LeadStatus
    source: LeadSource
    created_at: datetime
    updated_at: datetime
    timeline: Tuple[TimelineEvent, ...] = ()

    email: Optional[str] = None
    assigned_to: Optional[str] = None
    quote_amount: Optional[Decimal] = None
    system_size: Optional[str] = None
    scheduled_visit: Optional[datetime] = None

    def __post_init__(self) -> None:
        _require_text("name", self.name)
        _require_text("phone", self.phone)
        _require_text("address", self.address)
        if not isinstance(self.status, LeadStatus):
            raise ValidationError(f"Invalid status: {self.status!r}")
        if not isinstance(self.source, LeadSource):
            raise ValidationError(f"Invalid source: {self.source!r}")
        if self.quote_amount is not None and self.quote_amount <= 0:
            raise ValidationError("quote_amount must be a positive amount")

        require_utc_timestamp("created_at", self.created_at)
        require_utc_timestamp("updated_at", self.updated_at)
        if self.scheduled_visit is not None:
            require_utc_timestamp("scheduled_visit", self.scheduled_visit)

    @property
    def is_closed(self) -> bool:
        return self.status in (LeadStatus.WON, LeadStatus.LOST)

    def with_changes(
        self,
        *,
        updated_at: datetime,
        events: Tuple[TimelineEvent, ...] = (),
        **fields: Any,
    ) -> "Lead":
        """
        Return a new Lead with `fields` merged in and `events` prepended to the timeline.

        `events` must be given newest first. The original instance is unchanged.
        """

        return replace(
            self,
            timeline=tuple(events) + self.timeline,
            updated_at=updated_at,
            **fields,
        )


__all__ = ["Lead", "LeadSource", "LeadStatus"]
