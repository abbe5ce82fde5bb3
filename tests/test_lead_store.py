"""
Tests for `repositories/lead_store.py`.

Covers contract rules:
- create_lead starts every lead as `new` with exactly one seed timeline event.
- A real status change prepends exactly one status_change event; a no-op does not.
- updated_at strictly increases on every mutation, even if the clock stands still.
- Timeline entries are only ever prepended.
- Failed operations leave the store untouched.
- Notification records are truncated summaries and tolerate missing leads.
"""

from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from domain.errors import NotFound, ValidationError
from domain.lead import LeadSource, LeadStatus
from domain.timeline import TimelineEventType
from repositories.lead_store import (
    InMemoryLeadStore,
    LeadCreate,
    normalize_changes,
    truncate_summary,
)


def _create(store: InMemoryLeadStore, **overrides):
    fields = dict(name="Test User", phone="919999999999", address="X", source=LeadSource.WEBSITE)
    fields.update(overrides)
    return store.create_lead(LeadCreate(**fields))


# ============================================================================
# create_lead
# ============================================================================

def test_create_lead_without_notes_seeds_lead_created_event(empty_store, clock) -> None:
    lead = _create(empty_store)

    assert lead.status == LeadStatus.NEW
    assert lead.created_at == clock.now
    assert lead.updated_at == lead.created_at
    assert len(lead.timeline) == 1

    seed = lead.timeline[0]
    assert seed.type == TimelineEventType.STATUS_CHANGE
    assert seed.content == "Lead created"
    assert seed.user_name == "System"
    assert seed.created_at == lead.created_at


def test_create_lead_with_notes_seeds_note_event(empty_store) -> None:
    lead = _create(empty_store, notes="Wants 3kW for the roof")

    assert len(lead.timeline) == 1
    assert lead.timeline[0].type == TimelineEventType.NOTE
    assert lead.timeline[0].content == "Wants 3kW for the roof"


def test_create_lead_with_blank_notes_falls_back_to_created_event(empty_store) -> None:
    lead = _create(empty_store, notes="   ")
    assert lead.timeline[0].content == "Lead created"


def test_create_lead_is_retrievable_and_ids_are_unique(empty_store) -> None:
    first = _create(empty_store)
    second = _create(empty_store, name="Other")

    assert first.id != second.id
    assert empty_store.get_lead(first.id) == first
    assert len(empty_store) == 2


@pytest.mark.parametrize("field", ["name", "phone", "address"])
def test_create_lead_rejects_blank_required_field(empty_store, field) -> None:
    with pytest.raises(ValidationError):
        _create(empty_store, **{field: " "})
    assert len(empty_store) == 0


def test_create_lead_rejects_unknown_source(empty_store) -> None:
    with pytest.raises(ValidationError):
        _create(empty_store, source="billboard")
    assert len(empty_store) == 0


def test_create_lead_blank_email_is_stored_as_none(empty_store) -> None:
    assert _create(empty_store, email="").email is None


# ============================================================================
# get_lead
# ============================================================================

def test_get_lead_unknown_id_raises_not_found(seeded_store) -> None:
    with pytest.raises(NotFound):
        seeded_store.get_lead("nonexistent")


# ============================================================================
# update_lead
# ============================================================================

def test_status_change_prepends_one_event(seeded_store, clock) -> None:
    before = seeded_store.get_lead("l1")
    clock.advance(minutes=5)

    after = seeded_store.update_lead("l1", {"status": "contacted"})

    assert after.status == LeadStatus.CONTACTED
    assert len(after.timeline) == len(before.timeline) + 1
    assert after.timeline[1:] == before.timeline
    event = after.timeline[0]
    assert event.type == TimelineEventType.STATUS_CHANGE
    assert event.content == "Status changed to contacted"
    assert event.created_at == after.updated_at
    assert after.updated_at > before.updated_at


def test_same_status_update_adds_no_event(seeded_store) -> None:
    before = seeded_store.get_lead("l1")
    after = seeded_store.update_lead("l1", {"status": "new"})

    assert after.timeline == before.timeline
    assert after.updated_at > before.updated_at


def test_field_only_update_adds_no_event(seeded_store) -> None:
    before = seeded_store.get_lead("l4")
    after = seeded_store.update_lead("l4", {"quote_amount": 300000, "system_size": "6kW On-Grid"})

    assert after.quote_amount == Decimal("300000")
    assert after.system_size == "6kW On-Grid"
    assert after.timeline == before.timeline
    assert after.created_at == before.created_at


def test_updated_at_strictly_increases_with_frozen_clock(empty_store) -> None:
    lead = _create(empty_store)
    stamps = [lead.updated_at]
    for status in ("contacted", "quoted", "won"):
        stamps.append(empty_store.update_lead(lead.id, {"status": status}).updated_at)
    stamps.append(empty_store.add_note(lead.id, "closing call").created_at)

    assert all(a < b for a, b in zip(stamps, stamps[1:]))


def test_scheduling_visit_adds_visit_event_below_status_event(seeded_store) -> None:
    visit = datetime(2024, 1, 25, 9, 30, tzinfo=timezone.utc)
    before = seeded_store.get_lead("l2")

    after = seeded_store.update_lead(
        "l2", {"status": "survey_scheduled", "scheduled_visit": "2024-01-25T09:30:00Z"}
    )

    assert after.scheduled_visit == visit
    assert len(after.timeline) == len(before.timeline) + 2
    assert after.timeline[0].type == TimelineEventType.STATUS_CHANGE
    assert after.timeline[0].content == "Status changed to survey scheduled"
    assert after.timeline[1].type == TimelineEventType.VISIT
    assert after.timeline[1].content == "Survey scheduled for Jan 25, 2024 09:30 UTC"


def test_reopening_a_closed_lead_is_allowed(seeded_store) -> None:
    after = seeded_store.update_lead("l7", {"status": "negotiation"})
    assert after.status == LeadStatus.NEGOTIATION


def test_update_unknown_lead_raises_not_found(seeded_store) -> None:
    with pytest.raises(NotFound):
        seeded_store.update_lead("nonexistent", {"status": "won"})


@pytest.mark.parametrize(
    "changes",
    [
        {"status": "pending"},
        {"source": "billboard"},
        {"name": ""},
        {"quote_amount": -5},
        {"quote_amount": "lots"},
        {"scheduled_visit": "next tuesday"},
        {"timeline": []},
        {"created_at": "2024-01-01T00:00:00Z"},
    ],
)
def test_invalid_update_leaves_lead_unchanged(seeded_store, changes) -> None:
    before = seeded_store.get_lead("l1")
    with pytest.raises(ValidationError):
        seeded_store.update_lead("l1", changes)
    assert seeded_store.get_lead("l1") == before


def test_update_can_clear_optional_fields(seeded_store) -> None:
    after = seeded_store.update_lead("l1", {"email": None, "assigned_to": ""})
    assert after.email is None
    assert after.assigned_to is None


# ============================================================================
# add_note
# ============================================================================

def test_add_note_lands_at_top_of_timeline(seeded_store, clock) -> None:
    clock.advance(minutes=1)
    note = seeded_store.add_note("l3", "Customer asked for net metering details", user_id="u2")
    lead = seeded_store.get_lead("l3")

    assert note.lead_id == "l3"
    assert note.user_id == "u2"
    top = lead.timeline[0]
    assert top.id == note.id
    assert top.type == TimelineEventType.NOTE
    assert top.content == "Customer asked for net metering details"
    assert top.created_at == note.created_at
    assert lead.updated_at == note.created_at


def test_add_note_rejects_blank_content(seeded_store) -> None:
    before = seeded_store.get_lead("l3")
    with pytest.raises(ValidationError):
        seeded_store.add_note("l3", "   ")
    assert seeded_store.get_lead("l3") == before


def test_add_note_unknown_lead_raises_not_found(seeded_store) -> None:
    with pytest.raises(NotFound):
        seeded_store.add_note("nonexistent", "hello")


# ============================================================================
# record_notification
# ============================================================================

def test_record_notification_adds_truncated_whatsapp_event(seeded_store) -> None:
    message = "New lead: Ramesh Kumar (919812345678) — needs follow-up! Please call today."
    seeded_store.record_notification("l1", "owner", message)

    top = seeded_store.get_lead("l1").timeline[0]
    assert top.type == TimelineEventType.WHATSAPP
    assert top.content.startswith('WhatsApp sent to owner: "New lead: Ramesh Kumar')
    assert top.content.endswith('..."')


def test_record_notification_short_message_is_not_ellipsized(seeded_store) -> None:
    seeded_store.record_notification("l1", "customer", "Namaste!")
    assert seeded_store.get_lead("l1").timeline[0].content == 'WhatsApp sent to customer: "Namaste!"'


def test_record_notification_unknown_lead_is_ignored(seeded_store) -> None:
    snapshot = seeded_store.all_leads()
    seeded_store.record_notification("nonexistent", "owner", "hello")
    assert seeded_store.all_leads() == snapshot


# ============================================================================
# helpers
# ============================================================================

def test_truncate_summary() -> None:
    assert truncate_summary("short", 50) == "short"
    assert truncate_summary("a" * 60, 50) == "a" * 50 + "..."
    assert truncate_summary("line one\n  line two", 50) == "line one line two"


def test_normalize_changes_coerces_values() -> None:
    changes = normalize_changes({
        "status": "won",
        "quote_amount": "125000.50",
        "scheduled_visit": "2024-01-20T10:00:00",
        "system_size": "  ",
    })

    assert changes["status"] == LeadStatus.WON
    assert changes["quote_amount"] == Decimal("125000.50")
    assert changes["scheduled_visit"] == datetime(2024, 1, 20, 10, 0, tzinfo=timezone.utc)
    assert changes["system_size"] is None


def test_duplicate_seed_ids_rejected(seeded_store) -> None:
    leads = seeded_store.all_leads()
    with pytest.raises(ValueError):
        InMemoryLeadStore([leads[0], leads[0]])
