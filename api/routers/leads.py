"""
Leads API Endpoints.

Endpoints for listing, reading, creating and updating leads, their notes,
templated WhatsApp sends and the CSV export.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from api.deps import get_lead_service, to_http_exception
from api.models import (
    LeadCreateRequest,
    LeadDetailResponse,
    LeadListResponse,
    LeadResponse,
    LeadUpdateRequest,
    NoteCreateRequest,
    NoteResponse,
    UserResponse,
    WhatsAppSendResponse,
)
from domain.errors import LeadCrmError
from domain.lead import LeadStatus
from repositories.lead_query import DEFAULT_PAGE_SIZE
from repositories.lead_store import LeadCreate
from services.csv_export_service import generate_leads_csv
from services.lead_service import LeadService
from services.notification_service import NotificationAudience

logger = logging.getLogger(__name__)

router = APIRouter()


def _parse_status(status: Optional[str]) -> Optional[LeadStatus]:
    if not status:
        return None
    try:
        return LeadStatus(status)
    except ValueError:
        valid = ", ".join(s.value for s in LeadStatus)
        raise HTTPException(
            status_code=400,
            detail=f"Invalid status. Must be one of {valid}, got '{status}'"
        )


@router.get(
    "/leads",
    response_model=LeadListResponse,
    summary="List Leads",
    description="Newest first, optionally filtered by status and by a name/phone search."
)
def list_leads(
    status: Optional[str] = Query(None, description="Filter by status (e.g., 'new', 'quoted')"),
    q: Optional[str] = Query(None, description="Case-insensitive name match or phone substring"),
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=1000, description="Page size"),
    service: LeadService = Depends(get_lead_service),
):
    """
    Query leads with optional filters.

    **Example usage:**
    - First page of everything: `GET /api/v1/leads`
    - Only new leads: `GET /api/v1/leads?status=new`
    - Search: `GET /api/v1/leads?q=ramesh`
    - Second page of 20: `GET /api/v1/leads?page=2&limit=20`
    """
    try:
        result = service.list_leads(
            status=_parse_status(status), text=q, page=page, limit=limit
        )
        return LeadListResponse(
            leads=[LeadResponse.from_domain(lead) for lead in result.leads],
            total=result.total,
            page=result.page,
            limit=result.limit,
        )

    except HTTPException:
        raise
    except LeadCrmError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to query leads: {str(e)}"
        )


@router.get(
    "/leads/export.csv",
    summary="Export Leads as CSV",
    description="Every lead matching the filters, newest first, as a CSV download.",
    response_class=Response,
)
def export_leads_csv(
    status: Optional[str] = Query(None, description="Filter by status"),
    q: Optional[str] = Query(None, description="Name/phone search"),
    service: LeadService = Depends(get_lead_service),
):
    try:
        leads = service.export_leads(status=_parse_status(status), text=q)
        content = generate_leads_csv(leads)
        logger.info("Leads exported", extra={"row_count": len(leads)})
        return Response(
            content=content,
            media_type="text/csv",
            headers={"Content-Disposition": 'attachment; filename="leads.csv"'},
        )

    except HTTPException:
        raise
    except LeadCrmError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to export leads: {str(e)}"
        )


@router.get(
    "/leads/{lead_id}",
    response_model=LeadDetailResponse,
    summary="Get Lead",
    description="A single lead with its full timeline and resolved assignee."
)
def get_lead(lead_id: str, service: LeadService = Depends(get_lead_service)):
    try:
        detail = service.get_lead_detail(lead_id)
        assignee = UserResponse.from_domain(detail.assignee) if detail.assignee else None
        return LeadDetailResponse(
            **LeadResponse.from_domain(detail.lead).model_dump(),
            assignee=assignee,
        )

    except LeadCrmError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to fetch lead: {str(e)}"
        )


@router.post(
    "/leads",
    response_model=LeadResponse,
    status_code=201,
    summary="Create Lead",
    description="Create a lead with status 'new' and a first timeline entry."
)
def create_lead(request: LeadCreateRequest, service: LeadService = Depends(get_lead_service)):
    """
    Create a new lead.

    If `notes` is given it becomes the first timeline entry; otherwise the
    timeline starts with a "Lead created" status change.
    """
    try:
        lead = service.create_lead(
            LeadCreate(
                name=request.name,
                phone=request.phone,
                email=request.email,
                address=request.address,
                source=request.source,
                notes=request.notes,
            )
        )
        return LeadResponse.from_domain(lead)

    except LeadCrmError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to create lead: {str(e)}"
        )


@router.put(
    "/leads/{lead_id}",
    response_model=LeadResponse,
    summary="Update Lead",
    description="Partial update. A status change is recorded on the timeline."
)
def update_lead(
    lead_id: str,
    request: LeadUpdateRequest,
    service: LeadService = Depends(get_lead_service),
):
    try:
        changes = request.model_dump(exclude_unset=True)
        lead = service.update_lead(lead_id, changes)
        return LeadResponse.from_domain(lead)

    except LeadCrmError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to update lead: {str(e)}"
        )


@router.post(
    "/leads/{lead_id}/notes",
    response_model=NoteResponse,
    status_code=201,
    summary="Add Note",
    description="Append a note to the lead's timeline."
)
def add_note(
    lead_id: str,
    request: NoteCreateRequest,
    service: LeadService = Depends(get_lead_service),
):
    try:
        note = service.add_note(lead_id, request.content, user_id=request.user_id)
        return NoteResponse.from_domain(note)

    except LeadCrmError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to add note: {str(e)}"
        )


@router.post(
    "/leads/{lead_id}/whatsapp/{audience}",
    response_model=WhatsAppSendResponse,
    summary="Send Templated WhatsApp",
    description="Send the owner alert or the customer welcome message for this lead."
)
def send_template(
    lead_id: str,
    audience: NotificationAudience,
    service: LeadService = Depends(get_lead_service),
):
    try:
        if audience == NotificationAudience.OWNER:
            result = service.notify_owner(lead_id)
        else:
            result = service.message_customer(lead_id)
        return WhatsAppSendResponse(success=result.success)

    except LeadCrmError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to send WhatsApp message: {str(e)}"
        )
