"""
Lead store (in-memory persistence).

The store is the single owner and sole mutator of lead records. Every mutation
passes through it so the audit-trail rules are enforced in one place:

- a real status change prepends exactly one `status_change` event;
- every mutation refreshes `updated_at` (strictly increasing per lead);
- timeline events are only ever prepended, never changed or removed.

Operations are atomic: all validation happens before the new record is built,
and the record is swapped in under a lock. A failed operation leaves the store
untouched.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol
from uuid import uuid4

from domain.errors import NotFound, ValidationError
from domain.lead import Lead, LeadSource, LeadStatus
from domain.pipeline import can_transition, is_status_change, status_change_message
from domain.time import parse_utc_datetime, utc_now
from domain.timeline import (
    DEFAULT_AUTHOR,
    SYSTEM_AUTHOR,
    Note,
    TimelineEvent,
    TimelineEventType,
)
from repositories.lead_query import DEFAULT_PAGE_SIZE, LeadPage, LeadQueryFilters, query_leads

logger = logging.getLogger(__name__)

DEFAULT_SUMMARY_LENGTH = 50

# Fields a partial update may touch. id, timeline and timestamps are store-owned.
UPDATABLE_FIELDS = frozenset({
    "name",
    "phone",
    "email",
    "address",
    "status",
    "source",
    "assigned_to",
    "quote_amount",
    "system_size",
    "scheduled_visit",
})

_REQUIRED_TEXT_FIELDS = frozenset({"name", "phone", "address"})
_OPTIONAL_TEXT_FIELDS = frozenset({"email", "assigned_to", "system_size"})


@dataclass(frozen=True, slots=True)
class LeadCreate:
    """Input for creating a lead. `notes`, when non-blank, seeds the timeline."""
    name: str
    phone: str
    address: str
    source: LeadSource
    email: Optional[str] = None
    notes: Optional[str] = None


class LeadStore(Protocol):
    """Operations every lead backend offers (in-memory or remote)."""

    def list_leads(
        self, filters: LeadQueryFilters, page: int = 1, limit: int = DEFAULT_PAGE_SIZE
    ) -> LeadPage: ...

    def all_leads(self) -> List[Lead]: ...

    def get_lead(self, lead_id: str) -> Lead: ...

    def create_lead(self, data: LeadCreate) -> Lead: ...

    def update_lead(self, lead_id: str, changes: Mapping[str, Any]) -> Lead: ...

    def add_note(self, lead_id: str, content: str, user_id: Optional[str] = None) -> Note: ...

    def record_notification(self, lead_id: str, audience: str, summary: str) -> None: ...


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _coerce_status(value: Any) -> LeadStatus:
    try:
        return LeadStatus(value)
    except ValueError:
        raise ValidationError(f"Invalid status: {value!r}")


def _coerce_source(value: Any) -> LeadSource:
    try:
        return LeadSource(value)
    except ValueError:
        raise ValidationError(f"Invalid source: {value!r}")


def _coerce_quote(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        amount = Decimal(str(value))
    except InvalidOperation:
        raise ValidationError(f"Invalid quote_amount: {value!r}")
    if not amount.is_finite() or amount <= 0:
        raise ValidationError("quote_amount must be a positive amount")
    return amount


def _coerce_visit(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    try:
        return parse_utc_datetime(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid scheduled_visit: {value!r}")


def normalize_changes(changes: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Validate and coerce a partial update into domain values.

    Raises:
        ValidationError: unknown field, blank required text, or invalid value
    """
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

    normalized: Dict[str, Any] = {}
    for field_name, value in changes.items():
        if field_name in _REQUIRED_TEXT_FIELDS:
            text = _blank_to_none(value)
            if text is None:
                raise ValidationError(f"{field_name} must not be empty")
            normalized[field_name] = text
        elif field_name in _OPTIONAL_TEXT_FIELDS:
            normalized[field_name] = _blank_to_none(value)
        elif field_name == "status":
            normalized[field_name] = _coerce_status(value)
        elif field_name == "source":
            normalized[field_name] = _coerce_source(value)
        elif field_name == "quote_amount":
            normalized[field_name] = _coerce_quote(value)
        elif field_name == "scheduled_visit":
            normalized[field_name] = _coerce_visit(value)
    return normalized


def truncate_summary(summary: str, length: int) -> str:
    text = " ".join(summary.split())
    if len(text) <= length:
        return text
    return text[:length].rstrip() + "..."


def visit_message(visit: datetime) -> str:
    return f"Survey scheduled for {visit.strftime('%b %d, %Y %H:%M')} UTC"


class InMemoryLeadStore:
    """
    Process-lifetime lead store.

    Args:
        leads: Initial records (e.g. demo seed data), kept in the given order
        clock: Source of "now" (UTC); injectable for tests
        id_factory: Source of fresh unique ids for leads, events and notes
        summary_length: Max characters of a notification summary on the timeline
    """

    def __init__(
        self,
        leads: Iterable[Lead] = (),
        *,
        clock: Callable[[], datetime] = utc_now,
        id_factory: Callable[[], str] = lambda: str(uuid4()),
        summary_length: int = DEFAULT_SUMMARY_LENGTH,
    ) -> None:
        if summary_length < 1:
            raise ValueError("summary_length must be >= 1")

        self._clock = clock
        self._new_id = id_factory
        self._summary_length = summary_length
        self._lock = threading.RLock()
        # dict keeps insertion order, which is the tie-break for equal created_at.
        self._leads: Dict[str, Lead] = {}
        for lead in leads:
            if lead.id in self._leads:
                raise ValueError(f"Duplicate lead id: {lead.id}")
            self._leads[lead.id] = lead

    def __len__(self) -> int:
        with self._lock:
            return len(self._leads)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_leads(
        self,
        filters: LeadQueryFilters,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> LeadPage:
        return query_leads(self.all_leads(), filters, page=page, limit=limit)

    def all_leads(self) -> List[Lead]:
        """Snapshot of every lead in insertion order."""
        with self._lock:
            return list(self._leads.values())

    def get_lead(self, lead_id: str) -> Lead:
        with self._lock:
            lead = self._leads.get(lead_id)
        if lead is None:
            raise NotFound(f"Lead not found: {lead_id}")
        return lead

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_lead(self, data: LeadCreate) -> Lead:
        """
        Create a lead with status `new` and a single seed timeline event.

        The seed event is the initial note when one is supplied, otherwise a
        synthetic "Lead created" status_change event.

        Raises:
            ValidationError: blank name/phone/address or unknown source
        """
        fields = normalize_changes({
            "name": data.name,
            "phone": data.phone,
            "address": data.address,
            "source": data.source,
            "email": data.email,
        })
        notes = _blank_to_none(data.notes)

        with self._lock:
            now = self._clock()
            if notes is not None:
                seed = TimelineEvent(
                    id=self._new_id(),
                    type=TimelineEventType.NOTE,
                    content=notes,
                    created_at=now,
                    user_name=DEFAULT_AUTHOR,
                )
            else:
                seed = TimelineEvent(
                    id=self._new_id(),
                    type=TimelineEventType.STATUS_CHANGE,
                    content="Lead created",
                    created_at=now,
                    user_name=SYSTEM_AUTHOR,
                )

            lead = Lead(
                id=self._new_id(),
                status=LeadStatus.NEW,
                created_at=now,
                updated_at=now,
                timeline=(seed,),
                **fields,
            )
            self._leads[lead.id] = lead

        logger.info(
            "Lead created",
            extra={"lead_id": lead.id, "source": lead.source.value},
        )
        return lead

    def update_lead(self, lead_id: str, changes: Mapping[str, Any]) -> Lead:
        """
        Merge the supplied fields into an existing lead.

        Audit entries (newest first):
        - status differs from the current one -> one status_change event
        - scheduled_visit set to a new time -> one visit event, below the status event

        Raises:
            NotFound: no lead has that id
            ValidationError: unknown field or invalid value
        """
        fields = normalize_changes(changes)

        with self._lock:
            current = self.get_lead(lead_id)
            now = self._next_timestamp(current.updated_at)

            events: List[TimelineEvent] = []
            target = fields.get("status", current.status)
            if is_status_change(current.status, target):
                if not can_transition(current.status, target):
                    raise ValidationError(
                        f"Cannot move lead from {current.status.value} to {target.value}"
                    )
                events.append(TimelineEvent(
                    id=self._new_id(),
                    type=TimelineEventType.STATUS_CHANGE,
                    content=status_change_message(target),
                    created_at=now,
                    user_name=DEFAULT_AUTHOR,
                ))

            visit = fields.get("scheduled_visit")
            if visit is not None and visit != current.scheduled_visit:
                events.append(TimelineEvent(
                    id=self._new_id(),
                    type=TimelineEventType.VISIT,
                    content=visit_message(visit),
                    created_at=now,
                    user_name=DEFAULT_AUTHOR,
                ))

            updated = current.with_changes(updated_at=now, events=tuple(events), **fields)
            self._leads[lead_id] = updated

        if current.status != updated.status:
            logger.info(
                "Lead status changed",
                extra={
                    "lead_id": lead_id,
                    "from_status": current.status.value,
                    "to_status": updated.status.value,
                },
            )
        return updated

    def add_note(self, lead_id: str, content: str, user_id: Optional[str] = None) -> Note:
        """
        Add a note to a lead; it also lands at the top of the lead's timeline.

        Raises:
            NotFound: no lead has that id
            ValidationError: content is empty or whitespace-only
        """
        text = _blank_to_none(content)
        if text is None:
            raise ValidationError("Note content must not be empty")

        with self._lock:
            current = self.get_lead(lead_id)
            now = self._next_timestamp(current.updated_at)
            note = Note(
                id=self._new_id(),
                lead_id=lead_id,
                content=text,
                created_at=now,
                user_id=user_id,
            )
            self._leads[lead_id] = current.with_changes(
                updated_at=now,
                events=(note.as_timeline_event(),),
            )

        return note

    def record_notification(self, lead_id: str, audience: str, summary: str) -> None:
        """
        Record a successfully sent WhatsApp message on the lead's timeline.

        Best effort: if the lead no longer exists this is a no-op.
        """
        with self._lock:
            current = self._leads.get(lead_id)
            if current is None:
                logger.warning(
                    "Notification recorded for unknown lead; ignoring",
                    extra={"lead_id": lead_id, "audience": audience},
                )
                return

            now = self._next_timestamp(current.updated_at)
            event = TimelineEvent(
                id=self._new_id(),
                type=TimelineEventType.WHATSAPP,
                content=f'WhatsApp sent to {audience}: "{truncate_summary(summary, self._summary_length)}"',
                created_at=now,
                user_name=DEFAULT_AUTHOR,
            )
            self._leads[lead_id] = current.with_changes(updated_at=now, events=(event,))

    def _next_timestamp(self, previous: datetime) -> datetime:
        """Current time, nudged forward so updated_at strictly increases."""
        now = self._clock()
        if now <= previous:
            return previous + timedelta(microseconds=1)
        return now


__all__ = [
    "DEFAULT_SUMMARY_LENGTH",
    "InMemoryLeadStore",
    "LeadCreate",
    "LeadStore",
    "UPDATABLE_FIELDS",
    "normalize_changes",
    "truncate_summary",
]
