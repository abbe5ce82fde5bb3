"""
Tests for `services/notification_service.py`.

Covers contract rules:
- A successful mock send records exactly one whatsapp event on the lead.
- A failed send raises SendFailed and leaves the lead unchanged.
- Invalid audience or empty message is rejected before any send is attempted.
- The HTTP dispatcher maps backend failures onto SendFailed.
"""

from __future__ import annotations

import random

import pytest
import requests

from domain.errors import NetworkError, SendFailed, ValidationError
from domain.timeline import TimelineEventType
from repositories.remote_backend import BackendClient
from services.notification_service import (
    HttpWhatsAppDispatcher,
    MockWhatsAppDispatcher,
    NotificationAudience,
    render_template,
)


class FixedRandom(random.Random):
    def __init__(self, value: float) -> None:
        super().__init__()
        self.value = value

    def random(self) -> float:
        return self.value


def test_successful_send_records_whatsapp_event(seeded_store) -> None:
    dispatcher = MockWhatsAppDispatcher(seeded_store, success_rate=0.9, rng=FixedRandom(0.1))
    before = seeded_store.get_lead("l1")

    result = dispatcher.send("l1", NotificationAudience.OWNER, "Follow up today", to="919876543210")

    after = seeded_store.get_lead("l1")
    assert result.success
    assert result.audience == NotificationAudience.OWNER
    assert result.to == "919876543210"
    assert len(after.timeline) == len(before.timeline) + 1
    assert after.timeline[0].type == TimelineEventType.WHATSAPP
    assert after.timeline[0].content == 'WhatsApp sent to owner: "Follow up today"'


def test_failed_send_raises_and_changes_nothing(seeded_store) -> None:
    dispatcher = MockWhatsAppDispatcher(seeded_store, success_rate=0.9, rng=FixedRandom(0.95))
    before = seeded_store.get_lead("l1")

    with pytest.raises(SendFailed):
        dispatcher.send("l1", NotificationAudience.CUSTOMER, "Namaste")

    assert seeded_store.get_lead("l1") == before


def test_success_rate_bounds(seeded_store) -> None:
    always = MockWhatsAppDispatcher(seeded_store, success_rate=1.0, rng=FixedRandom(0.999))
    never = MockWhatsAppDispatcher(seeded_store, success_rate=0.0, rng=FixedRandom(0.0))

    assert always.send("l2", "customer", "hi").success
    with pytest.raises(SendFailed):
        never.send("l2", "customer", "hi")

    with pytest.raises(ValueError):
        MockWhatsAppDispatcher(seeded_store, success_rate=1.5)


def test_success_rate_is_roughly_honoured(seeded_store) -> None:
    dispatcher = MockWhatsAppDispatcher(seeded_store, success_rate=0.9, rng=random.Random(42))
    outcomes = []
    for _ in range(500):
        try:
            dispatcher.send("l5", NotificationAudience.OWNER, "ping")
            outcomes.append(True)
        except SendFailed:
            outcomes.append(False)

    assert 0.8 < sum(outcomes) / len(outcomes) < 0.97


@pytest.mark.parametrize(
    "audience,message",
    [("manager", "hello"), (NotificationAudience.OWNER, ""), (NotificationAudience.OWNER, "   ")],
)
def test_invalid_send_rejected(seeded_store, audience, message) -> None:
    dispatcher = MockWhatsAppDispatcher(seeded_store, success_rate=1.0)
    before = seeded_store.get_lead("l1")

    with pytest.raises(ValidationError):
        dispatcher.send("l1", audience, message)

    assert seeded_store.get_lead("l1") == before


def test_render_templates(seeded_store) -> None:
    lead = seeded_store.get_lead("l1")

    assert render_template(NotificationAudience.OWNER, lead) == (
        "New lead: Ramesh Kumar (919812345678) — needs follow-up!"
    )
    assert render_template(NotificationAudience.CUSTOMER, lead).startswith(
        "Namaste Ramesh Kumar! Thank you for your interest in Varanasi Solar."
    )


# ============================================================================
# HTTP dispatcher
# ============================================================================

class FakeResponse:
    def __init__(self, status_code: int, body=None) -> None:
        self.status_code = status_code
        self._body = body
        self.text = "" if body is None else str(body)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self):
        if self._body is None:
            raise ValueError("no body")
        return self._body


class FakeSession:
    def __init__(self, response=None, error=None) -> None:
        self.response = response
        self.error = error
        self.calls = []

    def request(self, method, url, params=None, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "params": params, "json": json})
        if self.error is not None:
            raise self.error
        return self.response


def _dispatcher(session: FakeSession) -> HttpWhatsAppDispatcher:
    return HttpWhatsAppDispatcher(BackendClient("http://backend/api/v1", session=session))


def test_http_send_posts_contract_payload() -> None:
    session = FakeSession(FakeResponse(200, {"success": True}))

    result = _dispatcher(session).send("l1", "owner", "hello", to="919876543210")

    assert result.success
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"] == "http://backend/api/v1/whatsapp/send"
    assert call["json"] == {"to": "919876543210", "type": "owner", "message": "hello", "lead_id": "l1"}


@pytest.mark.parametrize(
    "response",
    [FakeResponse(200, {"success": False}), FakeResponse(404, {"detail": "Lead not found"}), FakeResponse(400, {"detail": "bad"})],
)
def test_http_send_failure_maps_to_send_failed(response) -> None:
    with pytest.raises(SendFailed):
        _dispatcher(FakeSession(response)).send("l1", "customer", "hello")


def test_http_send_transport_failure_is_network_error() -> None:
    session = FakeSession(error=requests.ConnectionError("refused"))
    with pytest.raises(NetworkError):
        _dispatcher(session).send("l1", "customer", "hello")
