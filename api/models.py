"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field

from domain.lead import Lead, LeadSource, LeadStatus
from domain.timeline import Note, TimelineEvent, TimelineEventType
from domain.user import User, UserRole
from services.analytics_service import AnalyticsSummary, PipelineColumn
from services.notification_service import NotificationAudience


# ============================================================================
# User Models
# ============================================================================

class UserResponse(BaseModel):
    """Team member."""
    id: str
    name: str
    email: str
    role: UserRole
    phone: str

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(id=user.id, name=user.name, email=user.email, role=user.role, phone=user.phone)


# ============================================================================
# Lead Models
# ============================================================================

class TimelineEventResponse(BaseModel):
    """Single entry of a lead's timeline."""
    id: str
    type: TimelineEventType
    content: str
    created_at: datetime
    user_name: Optional[str] = None

    @classmethod
    def from_domain(cls, event: TimelineEvent) -> "TimelineEventResponse":
        return cls(
            id=event.id,
            type=event.type,
            content=event.content,
            created_at=event.created_at,
            user_name=event.user_name,
        )


class LeadResponse(BaseModel):
    """Lead with its full timeline (newest first)."""
    id: str
    name: str
    phone: str
    email: Optional[str] = None
    address: str
    status: LeadStatus
    source: LeadSource
    assigned_to: Optional[str] = None
    quote_amount: Optional[float] = None
    system_size: Optional[str] = None
    scheduled_visit: Optional[datetime] = None
    timeline: List[TimelineEventResponse]
    created_at: datetime
    updated_at: datetime

    class Config:
        json_schema_extra = {
            "example": {
                "id": "l1",
                "name": "Ramesh Kumar",
                "phone": "919812345678",
                "email": "ramesh@gmail.com",
                "address": "B-45, Lanka, Varanasi",
                "status": "new",
                "source": "walk_in",
                "assigned_to": "u2",
                "timeline": [
                    {
                        "id": "t1",
                        "type": "status_change",
                        "content": "Lead created",
                        "created_at": "2024-01-15T10:30:00Z",
                        "user_name": "System"
                    }
                ],
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z"
            }
        }

    @classmethod
    def from_domain(cls, lead: Lead) -> "LeadResponse":
        return cls(
            id=lead.id,
            name=lead.name,
            phone=lead.phone,
            email=lead.email,
            address=lead.address,
            status=lead.status,
            source=lead.source,
            assigned_to=lead.assigned_to,
            quote_amount=float(lead.quote_amount) if lead.quote_amount is not None else None,
            system_size=lead.system_size,
            scheduled_visit=lead.scheduled_visit,
            timeline=[TimelineEventResponse.from_domain(event) for event in lead.timeline],
            created_at=lead.created_at,
            updated_at=lead.updated_at,
        )


class LeadDetailResponse(LeadResponse):
    """Lead plus its assignee; `assignee` is null when unassigned or the user is gone."""
    assignee: Optional[UserResponse] = None


class LeadListResponse(BaseModel):
    """Response for lead listing."""
    leads: List[LeadResponse]
    total: int
    page: int
    limit: int

    class Config:
        json_schema_extra = {
            "example": {
                "leads": [],
                "total": 25,
                "page": 2,
                "limit": 20
            }
        }


class LeadCreateRequest(BaseModel):
    """Request to create a lead."""
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1, description="Contact number; not validated for format")
    email: Optional[str] = None
    address: str = Field(..., min_length=1)
    source: LeadSource
    notes: Optional[str] = Field(None, description="Initial note; becomes the first timeline entry")

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Test User",
                "phone": "919999999999",
                "address": "X",
                "source": "website"
            }
        }


class LeadUpdateRequest(BaseModel):
    """Partial update; only fields present in the body are changed."""
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    status: Optional[LeadStatus] = None
    source: Optional[LeadSource] = None
    assigned_to: Optional[str] = None
    quote_amount: Optional[Decimal] = None
    system_size: Optional[str] = None
    scheduled_visit: Optional[datetime] = None

    class Config:
        extra = "forbid"
        json_schema_extra = {
            "example": {
                "status": "quoted",
                "quote_amount": 285000,
                "system_size": "5kW On-Grid"
            }
        }


class StageMoveRequest(BaseModel):
    """Move a lead to another pipeline stage."""
    status: LeadStatus


# ============================================================================
# Note Models
# ============================================================================

class NoteCreateRequest(BaseModel):
    content: str
    user_id: Optional[str] = None


class NoteResponse(BaseModel):
    id: str
    lead_id: str
    content: str
    created_at: datetime
    user_id: Optional[str] = None

    @classmethod
    def from_domain(cls, note: Note) -> "NoteResponse":
        return cls(
            id=note.id,
            lead_id=note.lead_id,
            content=note.content,
            created_at=note.created_at,
            user_id=note.user_id,
        )


# ============================================================================
# WhatsApp Models
# ============================================================================

class WhatsAppSendRequest(BaseModel):
    """Request to send a WhatsApp message about a lead."""
    to: Optional[str] = None
    type: NotificationAudience
    message: str
    lead_id: str

    class Config:
        json_schema_extra = {
            "example": {
                "to": "919876543210",
                "type": "owner",
                "message": "New lead: Ramesh (919xxxxxxxxx) — needs follow-up!",
                "lead_id": "l1"
            }
        }


class WhatsAppSendResponse(BaseModel):
    success: bool


# ============================================================================
# Analytics / Pipeline / Calendar Models
# ============================================================================

class AnalyticsSummaryResponse(BaseModel):
    new_leads_24h: int
    pipeline_total: int
    pending_followups: int
    conversions_month: int

    @classmethod
    def from_domain(cls, summary: AnalyticsSummary) -> "AnalyticsSummaryResponse":
        return cls(
            new_leads_24h=summary.new_leads_24h,
            pipeline_total=summary.pipeline_total,
            pending_followups=summary.pending_followups,
            conversions_month=summary.conversions_month,
        )


class PipelineColumnResponse(BaseModel):
    status: LeadStatus
    label: str
    count: int
    leads: List[LeadResponse]

    @classmethod
    def from_domain(cls, column: PipelineColumn) -> "PipelineColumnResponse":
        return cls(
            status=column.status,
            label=column.label,
            count=column.count,
            leads=[LeadResponse.from_domain(lead) for lead in column.leads],
        )


class PipelineResponse(BaseModel):
    columns: List[PipelineColumnResponse]


class CalendarResponse(BaseModel):
    """Surveys on one day plus every day that has at least one survey."""
    day: date
    visits: List[LeadResponse]
    visit_dates: List[date]


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    detail: str

    class Config:
        json_schema_extra = {
            "example": {
                "detail": "Lead not found: l99"
            }
        }
