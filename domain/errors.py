"""
Domain: error taxonomy.

Every failure the core can report is one of these. Callers at the edge
(routers, scripts) translate them into user-facing messages.
"""

from __future__ import annotations


class LeadCrmError(Exception):
    """Base class for all core errors."""


class NotFound(LeadCrmError):
    """An operation referenced a lead or user id that does not exist."""


class ValidationError(LeadCrmError, ValueError):
    """A required field is missing/empty or a value is outside its allowed set."""


class SendFailed(LeadCrmError):
    """An outbound notification was not delivered. No state was changed."""


class NetworkError(LeadCrmError):
    """Backend-mode transport failure (opaque)."""


__all__ = [
    "LeadCrmError",
    "NotFound",
    "ValidationError",
    "SendFailed",
    "NetworkError",
]
