"""
Read-only views derived from a lead snapshot: dashboard summary, kanban board,
survey calendar and recent activity.

All functions are pure: they take the leads (and "now" where relevant) and
never touch the store.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterable, List

from domain.lead import Lead, LeadStatus
from domain.pipeline import CLOSED_STATUSES, FOLLOW_UP_STATUSES, PIPELINE_STAGES


@dataclass(frozen=True, slots=True)
class AnalyticsSummary:
    """
    Dashboard KPIs.

    new_leads_24h: leads created in the 24 hours before `now`
    pipeline_total: leads not yet won or lost
    pending_followups: leads still new or only contacted
    conversions_month: won leads
    """
    new_leads_24h: int
    pipeline_total: int
    pending_followups: int
    conversions_month: int


@dataclass(frozen=True, slots=True)
class PipelineColumn:
    status: LeadStatus
    label: str
    leads: List[Lead]

    @property
    def count(self) -> int:
        return len(self.leads)


def summarize(leads: Iterable[Lead], now: datetime) -> AnalyticsSummary:
    leads = list(leads)
    since = now - timedelta(hours=24)
    return AnalyticsSummary(
        new_leads_24h=sum(1 for lead in leads if lead.created_at > since),
        pipeline_total=sum(1 for lead in leads if lead.status not in CLOSED_STATUSES),
        pending_followups=sum(1 for lead in leads if lead.status in FOLLOW_UP_STATUSES),
        conversions_month=sum(1 for lead in leads if lead.status == LeadStatus.WON),
    )


def pipeline_board(leads: Iterable[Lead]) -> List[PipelineColumn]:
    """One column per stage in pipeline order; each lead lands in exactly one column."""

    by_status = {stage.status: [] for stage in PIPELINE_STAGES}
    for lead in leads:
        by_status[lead.status].append(lead)
    return [
        PipelineColumn(status=stage.status, label=stage.label, leads=by_status[stage.status])
        for stage in PIPELINE_STAGES
    ]


def visits_on(leads: Iterable[Lead], day: date) -> List[Lead]:
    """Leads with a site survey on `day` (UTC), earliest first."""

    scheduled = [
        lead for lead in leads
        if lead.scheduled_visit is not None and lead.scheduled_visit.date() == day
    ]
    return sorted(scheduled, key=lambda lead: lead.scheduled_visit)


def visit_dates(leads: Iterable[Lead]) -> List[date]:
    return sorted({lead.scheduled_visit.date() for lead in leads if lead.scheduled_visit is not None})


def recent_leads(leads: Iterable[Lead], limit: int = 5) -> List[Lead]:
    return sorted(leads, key=lambda lead: lead.created_at, reverse=True)[:limit]


__all__ = [
    "AnalyticsSummary",
    "PipelineColumn",
    "pipeline_board",
    "recent_leads",
    "summarize",
    "visit_dates",
    "visits_on",
]
