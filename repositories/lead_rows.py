"""
Row mapping between the JSON wire shape and domain objects.

The wire shape is the one the REST contract uses: snake_case keys, ISO-8601
UTC timestamps, optional fields omitted or null. Both the demo seed data and
the remote backend go through these functions.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from domain.lead import Lead, LeadSource, LeadStatus
from domain.time import parse_utc_datetime, to_iso_utc
from domain.timeline import Note, TimelineEvent, TimelineEventType
from domain.user import User, UserRole


def _get_optional(row: Mapping[str, Any], key: str) -> Optional[Any]:
    value = row.get(key)
    if value is None or value == "":
        return None
    return value


def row_to_event(row: Mapping[str, Any]) -> TimelineEvent:
    return TimelineEvent(
        id=str(row["id"]),
        type=TimelineEventType(str(row["type"])),
        content=str(row["content"]),
        created_at=parse_utc_datetime(row["created_at"]),
        user_name=_get_optional(row, "user_name"),
    )


def event_to_row(event: TimelineEvent) -> Dict[str, Any]:
    return {
        "id": event.id,
        "type": event.type.value,
        "content": event.content,
        "created_at": to_iso_utc(event.created_at),
        "user_name": event.user_name,
    }


def row_to_lead(row: Mapping[str, Any]) -> Lead:
    """Convert a wire row into a domain Lead."""

    quote = _get_optional(row, "quote_amount")
    visit = _get_optional(row, "scheduled_visit")

    return Lead(
        # Core identifiers (required)
        id=str(row["id"]),
        name=str(row["name"]),
        phone=str(row["phone"]),
        address=str(row["address"]),
        status=LeadStatus(str(row["status"])),
        source=LeadSource(str(row["source"])),
        created_at=parse_utc_datetime(row["created_at"]),
        updated_at=parse_utc_datetime(row["updated_at"]),
        timeline=tuple(row_to_event(event) for event in row.get("timeline") or ()),

        # Optional fields
        email=_get_optional(row, "email"),
        assigned_to=_get_optional(row, "assigned_to"),
        quote_amount=Decimal(str(quote)) if quote is not None else None,
        system_size=_get_optional(row, "system_size"),
        scheduled_visit=parse_utc_datetime(visit) if visit is not None else None,
    )


def lead_to_row(lead: Lead) -> Dict[str, Any]:
    """Convert a domain Lead to its wire row."""

    return {
        "id": lead.id,
        "name": lead.name,
        "phone": lead.phone,
        "email": lead.email,
        "address": lead.address,
        "status": lead.status.value,
        "source": lead.source.value,
        "assigned_to": lead.assigned_to,
        "quote_amount": float(lead.quote_amount) if lead.quote_amount is not None else None,
        "system_size": lead.system_size,
        "scheduled_visit": to_iso_utc(lead.scheduled_visit) if lead.scheduled_visit else None,
        "timeline": [event_to_row(event) for event in lead.timeline],
        "created_at": to_iso_utc(lead.created_at),
        "updated_at": to_iso_utc(lead.updated_at),
    }


def row_to_note(row: Mapping[str, Any], lead_id: str) -> Note:
    return Note(
        id=str(row["id"]),
        lead_id=str(row.get("lead_id") or lead_id),
        content=str(row["content"]),
        created_at=parse_utc_datetime(row["created_at"]),
        user_id=_get_optional(row, "user_id"),
    )


def row_to_user(row: Mapping[str, Any]) -> User:
    return User(
        id=str(row["id"]),
        name=str(row["name"]),
        email=str(row["email"]),
        role=UserRole(str(row["role"])),
        phone=str(row["phone"]),
    )


__all__ = [
    "event_to_row",
    "lead_to_row",
    "row_to_event",
    "row_to_lead",
    "row_to_note",
    "row_to_user",
]
