"""
Lead service: the entry point views use to read and change leads.

Wraps the lead store, the notification dispatcher, the user directory and the
event bus so that every successful mutation is announced on the fan-out:

- create_lead -> `lead:created` with the new Lead
- update_lead / add_note / send_whatsapp -> `lead:updated` with the fresh Lead

Errors from the store and dispatcher propagate unchanged; nothing is published
for a failed operation. A mutation and its announcement run under one service
lock so subscribers see updates in commit order. Re-reading a lead after a
committed note or send is best-effort: if that read fails the change still
stands and is returned, only the announcement is skipped.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional

from domain.errors import LeadCrmError, NotFound
from domain.lead import Lead, LeadStatus
from domain.timeline import Note
from domain.user import User
from repositories.client import Settings, build_backend
from repositories.lead_query import DEFAULT_PAGE_SIZE, LeadPage, LeadQueryFilters, matches
from repositories.lead_store import LeadCreate, LeadStore
from repositories.user_repository import UserDirectory
from services.event_bus import LEAD_CREATED, LEAD_UPDATED, EventBus
from services.notification_service import (
    HttpWhatsAppDispatcher,
    MockWhatsAppDispatcher,
    NotificationAudience,
    NotificationDispatcher,
    SendResult,
    coerce_audience,
    render_template,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LeadDetail:
    """A lead together with its assignee, resolved at read time (None when dangling)."""
    lead: Lead
    assignee: Optional[User]


class LeadService:
    def __init__(
        self,
        store: LeadStore,
        users: UserDirectory,
        dispatcher: NotificationDispatcher,
        bus: EventBus,
        owner_number: str,
    ) -> None:
        self.store = store
        self.users = users
        self.dispatcher = dispatcher
        self.bus = bus
        self.owner_number = owner_number
        self._lock = threading.RLock()

    # Reads

    def list_leads(
        self,
        status: Optional[LeadStatus] = None,
        text: Optional[str] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> LeadPage:
        return self.store.list_leads(
            LeadQueryFilters(status=status, text=text), page=page, limit=limit
        )

    def all_leads(self) -> List[Lead]:
        return self.store.all_leads()

    def export_leads(
        self, status: Optional[LeadStatus] = None, text: Optional[str] = None
    ) -> List[Lead]:
        """Every lead matching the list filters, newest first, unpaginated."""
        filters = LeadQueryFilters(status=status, text=text)
        leads = [lead for lead in self.store.all_leads() if matches(lead, filters)]
        return sorted(leads, key=lambda lead: lead.created_at, reverse=True)

    def get_lead(self, lead_id: str) -> Lead:
        return self.store.get_lead(lead_id)

    def get_lead_detail(self, lead_id: str) -> LeadDetail:
        lead = self.store.get_lead(lead_id)
        return LeadDetail(lead=lead, assignee=self.resolve_assignee(lead))

    def resolve_assignee(self, lead: Lead) -> Optional[User]:
        return self.users.get_user(lead.assigned_to)

    def list_users(self) -> List[User]:
        return self.users.list_users()

    # Writes

    def create_lead(self, data: LeadCreate) -> Lead:
        with self._lock:
            lead = self.store.create_lead(data)
            self.bus.publish(LEAD_CREATED, lead)
        return lead

    def update_lead(self, lead_id: str, changes: Mapping[str, Any]) -> Lead:
        with self._lock:
            lead = self.store.update_lead(lead_id, changes)
            self.bus.publish(LEAD_UPDATED, lead)
        return lead

    def move_to_stage(self, lead_id: str, status: LeadStatus) -> Lead:
        """Kanban move. Callers re-query the board if this raises."""
        return self.update_lead(lead_id, {"status": status})

    def add_note(self, lead_id: str, content: str, user_id: Optional[str] = None) -> Note:
        with self._lock:
            note = self.store.add_note(lead_id, content, user_id=user_id)
            self._announce_update(lead_id)
        return note

    def send_whatsapp(
        self,
        lead_id: str,
        audience: NotificationAudience,
        message: str,
        to: Optional[str] = None,
    ) -> SendResult:
        audience = coerce_audience(audience)
        with self._lock:
            result = self.dispatcher.send(lead_id, audience, message, to=to)
            logger.info(
                "WhatsApp sent",
                extra={"lead_id": lead_id, "audience": audience.value},
            )
            self._announce_update(lead_id)
        return result

    def notify_owner(self, lead_id: str) -> SendResult:
        """Send the owner template about this lead to the configured owner number."""
        lead = self.store.get_lead(lead_id)
        return self.send_whatsapp(
            lead_id,
            NotificationAudience.OWNER,
            render_template(NotificationAudience.OWNER, lead),
            to=self.owner_number,
        )

    def message_customer(self, lead_id: str) -> SendResult:
        """Send the customer welcome template to the lead's own phone."""
        lead = self.store.get_lead(lead_id)
        return self.send_whatsapp(
            lead_id,
            NotificationAudience.CUSTOMER,
            render_template(NotificationAudience.CUSTOMER, lead),
            to=lead.phone,
        )

    def _announce_update(self, lead_id: str) -> None:
        # The change is already committed; a failed re-read only skips the event.
        try:
            lead = self.store.get_lead(lead_id)
        except NotFound:
            logger.info("Changed lead no longer exists", extra={"lead_id": lead_id})
            return
        except LeadCrmError as e:
            logger.warning(
                "Could not refresh lead after change",
                extra={"lead_id": lead_id, "error": str(e)},
            )
            return
        self.bus.publish(LEAD_UPDATED, lead)


def create_lead_service(settings: Settings, bus: EventBus) -> LeadService:
    """
    Wire a LeadService for the configured mode.

    Mock mode pairs the in-memory store with the simulated dispatcher; backend
    mode sends through the same HTTP client the remote store uses.
    """
    backend = build_backend(settings)
    if backend.client is None:
        dispatcher: NotificationDispatcher = MockWhatsAppDispatcher(
            backend.store, success_rate=settings.whatsapp_success_rate
        )
    else:
        dispatcher = HttpWhatsAppDispatcher(backend.client)

    logger.info(
        "Lead service ready",
        extra={"mock_mode": settings.mock_mode, "api_url": settings.api_url},
    )
    return LeadService(
        store=backend.store,
        users=backend.users,
        dispatcher=dispatcher,
        bus=bus,
        owner_number=settings.owner_number,
    )


__all__ = ["LeadDetail", "LeadService", "create_lead_service"]
