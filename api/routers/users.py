"""
Users API Endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_lead_service, to_http_exception
from api.models import UserResponse
from domain.errors import LeadCrmError
from services.lead_service import LeadService

router = APIRouter()


@router.get(
    "/users",
    response_model=List[UserResponse],
    summary="List Team Members",
)
def list_users(service: LeadService = Depends(get_lead_service)):
    try:
        return [UserResponse.from_domain(user) for user in service.list_users()]

    except LeadCrmError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to list users: {str(e)}"
        )
