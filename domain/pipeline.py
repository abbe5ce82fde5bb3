"""
Domain: sales pipeline stages and status transition rules.

The pipeline is the ordered set of statuses a lead moves through, in the order
the kanban board displays them:

    New -> Contacted -> Survey -> Quoted -> Negotiation -> Won | Lost

Transition policy:
- Any status may move to any other status (including reopening a won or lost
  lead). `can_transition` is the single place a stricter table would go.
- Moving a lead to the status it already has is not a transition and produces
  no audit entry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Tuple

from .lead import LeadStatus


@dataclass(frozen=True, slots=True)
class PipelineStage:
    status: LeadStatus
    label: str


PIPELINE_STAGES: Tuple[PipelineStage, ...] = (
    PipelineStage(LeadStatus.NEW, "New"),
    PipelineStage(LeadStatus.CONTACTED, "Contacted"),
    PipelineStage(LeadStatus.SURVEY_SCHEDULED, "Survey"),
    PipelineStage(LeadStatus.QUOTED, "Quoted"),
    PipelineStage(LeadStatus.NEGOTIATION, "Negotiation"),
    PipelineStage(LeadStatus.WON, "Won"),
    PipelineStage(LeadStatus.LOST, "Lost"),
)

CLOSED_STATUSES: FrozenSet[LeadStatus] = frozenset({LeadStatus.WON, LeadStatus.LOST})
FOLLOW_UP_STATUSES: FrozenSet[LeadStatus] = frozenset({LeadStatus.NEW, LeadStatus.CONTACTED})


def stage_label(status: LeadStatus) -> str:
    for stage in PIPELINE_STAGES:
        if stage.status == status:
            return stage.label
    raise ValueError(f"Unknown pipeline status: {status!r}")


def can_transition(current: LeadStatus, target: LeadStatus) -> bool:
    """Whether a lead in `current` may be moved to `target`. Unrestricted."""

    return isinstance(current, LeadStatus) and isinstance(target, LeadStatus)


def is_status_change(current: LeadStatus, target: LeadStatus) -> bool:
    return current != target


def status_change_message(status: LeadStatus) -> str:
    """
    Audit text for a status transition.

    Example:
        status_change_message(LeadStatus.SURVEY_SCHEDULED)
        # "Status changed to survey scheduled"
    """

    return f"Status changed to {status.value.replace('_', ' ')}"


__all__ = [
    "CLOSED_STATUSES",
    "FOLLOW_UP_STATUSES",
    "PIPELINE_STAGES",
    "PipelineStage",
    "can_transition",
    "is_status_change",
    "stage_label",
    "status_change_message",
]
