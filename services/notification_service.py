"""
Notification service for outbound WhatsApp messages tied to a lead.

Every dispatcher honors the same two-outcome contract:
- success: the message is recorded on the lead's timeline and a SendResult is returned;
- failure: SendFailed (or NetworkError in backend mode) is raised and nothing is recorded.

MockWhatsAppDispatcher simulates delivery with a fixed success probability.
HttpWhatsAppDispatcher forwards to a backend's POST /whatsapp/send.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol

from domain.errors import NotFound, SendFailed, ValidationError
from domain.lead import Lead
from repositories.lead_store import LeadStore
from repositories.remote_backend import BackendClient

logger = logging.getLogger(__name__)

DEFAULT_SUCCESS_RATE = 0.9


class NotificationAudience(str, Enum):
    OWNER = "owner"
    CUSTOMER = "customer"


# Variables: {name}, {phone}, {address}
WHATSAPP_TEMPLATES = {
    NotificationAudience.OWNER: "New lead: {name} ({phone}) — needs follow-up!",
    NotificationAudience.CUSTOMER: (
        "Namaste {name}! Thank you for your interest in Varanasi Solar. "
        "We will contact you shortly about your solar installation."
    ),
}


@dataclass(frozen=True, slots=True)
class SendResult:
    success: bool
    lead_id: str
    audience: NotificationAudience
    to: Optional[str] = None


class NotificationDispatcher(Protocol):
    def send(
        self,
        lead_id: str,
        audience: NotificationAudience,
        message: str,
        to: Optional[str] = None,
    ) -> SendResult: ...


def coerce_audience(value: object) -> NotificationAudience:
    try:
        return NotificationAudience(value)
    except ValueError:
        raise ValidationError(f"Invalid audience: {value!r}. Must be 'owner' or 'customer'")


def render_template(audience: NotificationAudience, lead: Lead) -> str:
    """
    Fill the audience's message template with the lead's details.

    Example:
        render_template(NotificationAudience.OWNER, lead)
        # "New lead: Ramesh Kumar (919812345678) — needs follow-up!"
    """
    return WHATSAPP_TEMPLATES[audience].format(
        name=lead.name,
        phone=lead.phone,
        address=lead.address,
    )


def _validate(lead_id: str, audience: object, message: str) -> NotificationAudience:
    if not lead_id:
        raise ValidationError("lead_id must not be empty")
    if not message or not message.strip():
        raise ValidationError("message must not be empty")
    return coerce_audience(audience)


class MockWhatsAppDispatcher:
    """
    Simulated WhatsApp delivery.

    Args:
        store: Lead store that records successful sends
        success_rate: Probability in [0, 1] that a send succeeds
        rng: Random source; inject a seeded random.Random for reproducible runs
    """

    def __init__(
        self,
        store: LeadStore,
        success_rate: float = DEFAULT_SUCCESS_RATE,
        rng: Optional[random.Random] = None,
    ) -> None:
        if not 0.0 <= success_rate <= 1.0:
            raise ValueError("success_rate must be between 0 and 1")
        self._store = store
        self._success_rate = success_rate
        self._rng = rng or random.Random()

    def send(
        self,
        lead_id: str,
        audience: NotificationAudience,
        message: str,
        to: Optional[str] = None,
    ) -> SendResult:
        audience = _validate(lead_id, audience, message)

        if self._rng.random() >= self._success_rate:
            logger.warning(
                "WhatsApp send failed (simulated)",
                extra={"lead_id": lead_id, "audience": audience.value},
            )
            raise SendFailed("Failed to send WhatsApp message")

        self._store.record_notification(lead_id, audience.value, message)
        return SendResult(success=True, lead_id=lead_id, audience=audience, to=to)


class HttpWhatsAppDispatcher:
    """Forwards sends to the backend, which records the timeline entry itself."""

    def __init__(self, client: BackendClient) -> None:
        self._client = client

    def send(
        self,
        lead_id: str,
        audience: NotificationAudience,
        message: str,
        to: Optional[str] = None,
    ) -> SendResult:
        audience = _validate(lead_id, audience, message)
        payload = {
            "to": to,
            "type": audience.value,
            "message": message,
            "lead_id": lead_id,
        }

        # NetworkError from the client propagates unchanged.
        try:
            body = self._client.request("POST", "/whatsapp/send", json=payload)
        except (NotFound, ValidationError) as e:
            raise SendFailed(f"Failed to send WhatsApp message: {e}") from e

        if not isinstance(body, dict) or not body.get("success"):
            raise SendFailed("Failed to send WhatsApp message")
        return SendResult(success=True, lead_id=lead_id, audience=audience, to=to)


__all__ = [
    "DEFAULT_SUCCESS_RATE",
    "HttpWhatsAppDispatcher",
    "MockWhatsAppDispatcher",
    "NotificationAudience",
    "NotificationDispatcher",
    "SendResult",
    "WHATSAPP_TEMPLATES",
    "coerce_audience",
    "render_template",
]
