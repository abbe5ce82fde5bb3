"""
Shared router dependencies and error translation.
"""

from fastapi import HTTPException, Request

from domain.errors import LeadCrmError, NetworkError, NotFound, SendFailed, ValidationError
from services.lead_service import LeadService

_STATUS_CODES = {
    NotFound: 404,
    ValidationError: 400,
    SendFailed: 502,
    NetworkError: 503,
}


def get_lead_service(request: Request) -> LeadService:
    return request.app.state.lead_service


def to_http_exception(error: LeadCrmError) -> HTTPException:
    """Map a core error onto the HTTP status the API reports for it."""
    for error_type, status_code in _STATUS_CODES.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))
    return HTTPException(status_code=500, detail=str(error))
