"""
Lead query engine for browsing leads.

Produces a filtered, sorted, paginated view of a lead collection without
mutating it. The same arguments against an unchanged collection always
yield the same page.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from domain.errors import ValidationError
from domain.lead import Lead, LeadStatus

DEFAULT_PAGE_SIZE = 20


@dataclass(frozen=True, slots=True)
class LeadQueryFilters:
    """Filter criteria for lead queries."""
    status: Optional[LeadStatus] = None
    text: Optional[str] = None  # matches name (case-insensitive) or phone (substring)


@dataclass(frozen=True, slots=True)
class LeadPage:
    """
    One page of query results.

    total: number of leads matching the filters before pagination
    """
    leads: List[Lead]
    total: int
    page: int
    limit: int


def matches(lead: Lead, filters: LeadQueryFilters) -> bool:
    if filters.status is not None and lead.status != filters.status:
        return False

    # Whitespace-only text means no filter; otherwise the text is matched as typed.
    text = filters.text or ""
    if text.strip():
        if text.lower() not in lead.name.lower() and text not in lead.phone:
            return False

    return True


def query_leads(
    leads: Iterable[Lead],
    filters: LeadQueryFilters,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> LeadPage:
    """
    Query leads with filters.

    Args:
        leads: Leads in insertion order
        filters: Query filters
        page: 1-based page number
        limit: Page size

    Returns:
        LeadPage; a page past the end has no leads but still reports `total`

    Raises:
        ValidationError: If page or limit is below 1
    """
    if page < 1:
        raise ValidationError(f"page must be >= 1, got {page}")
    if limit < 1:
        raise ValidationError(f"limit must be >= 1, got {limit}")

    filtered = [lead for lead in leads if matches(lead, filters)]

    # sorted() is stable with reverse=True, so ties keep insertion order.
    filtered = sorted(filtered, key=lambda lead: lead.created_at, reverse=True)

    start = (page - 1) * limit
    return LeadPage(
        leads=filtered[start:start + limit],
        total=len(filtered),
        page=page,
        limit=limit,
    )


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "LeadPage",
    "LeadQueryFilters",
    "matches",
    "query_leads",
]
