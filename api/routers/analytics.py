"""
Dashboard API Endpoints.

Summary KPIs, recent leads, the kanban pipeline and the survey calendar. Every view is
computed from a fresh snapshot of all leads.
"""

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import get_lead_service, to_http_exception
from api.models import (
    AnalyticsSummaryResponse,
    CalendarResponse,
    LeadResponse,
    PipelineColumnResponse,
    PipelineResponse,
    StageMoveRequest,
)
from domain.errors import LeadCrmError
from domain.time import utc_now
from services.analytics_service import (
    pipeline_board,
    recent_leads,
    summarize,
    visit_dates,
    visits_on,
)
from services.lead_service import LeadService

router = APIRouter()


@router.get(
    "/analytics/summary",
    response_model=AnalyticsSummaryResponse,
    summary="Dashboard Summary",
    description="New leads in the last 24 hours, open pipeline size, pending follow-ups and conversions."
)
def get_summary(service: LeadService = Depends(get_lead_service)):
    try:
        summary = summarize(service.all_leads(), utc_now())
        return AnalyticsSummaryResponse.from_domain(summary)

    except LeadCrmError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to compute summary: {str(e)}"
        )


@router.get(
    "/analytics/recent",
    response_model=List[LeadResponse],
    summary="Recent Leads",
    description="The most recently created leads, newest first."
)
def get_recent_leads(
    limit: int = Query(5, ge=1, le=100, description="How many leads to return"),
    service: LeadService = Depends(get_lead_service),
):
    try:
        return [LeadResponse.from_domain(lead) for lead in recent_leads(service.all_leads(), limit=limit)]

    except LeadCrmError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to load recent leads: {str(e)}"
        )


@router.get(
    "/pipeline",
    response_model=PipelineResponse,
    summary="Pipeline Board",
    description="One column per status, in pipeline order."
)
def get_pipeline(service: LeadService = Depends(get_lead_service)):
    try:
        columns = pipeline_board(service.all_leads())
        return PipelineResponse(
            columns=[PipelineColumnResponse.from_domain(column) for column in columns]
        )

    except LeadCrmError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to build pipeline: {str(e)}"
        )


@router.post(
    "/pipeline/{lead_id}/move",
    response_model=LeadResponse,
    summary="Move Lead to Stage",
    description="Drag-and-drop move on the board. Equivalent to updating the lead's status."
)
def move_lead(
    lead_id: str,
    request: StageMoveRequest,
    service: LeadService = Depends(get_lead_service),
):
    try:
        lead = service.move_to_stage(lead_id, request.status)
        return LeadResponse.from_domain(lead)

    except LeadCrmError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to move lead: {str(e)}"
        )


@router.get(
    "/calendar/visits",
    response_model=CalendarResponse,
    summary="Survey Calendar",
    description="Site surveys scheduled on a day (UTC), plus every day that has one."
)
def get_visits(
    day: Optional[date] = Query(None, alias="date", description="Day to show (YYYY-MM-DD); defaults to today"),
    service: LeadService = Depends(get_lead_service),
):
    try:
        leads = service.all_leads()
        selected = day or utc_now().date()
        return CalendarResponse(
            day=selected,
            visits=[LeadResponse.from_domain(lead) for lead in visits_on(leads, selected)],
            visit_dates=visit_dates(leads),
        )

    except LeadCrmError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to load calendar: {str(e)}"
        )
