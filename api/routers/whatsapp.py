"""
WhatsApp API Endpoints.

Free-form message sends; the outcome is recorded on the lead's timeline.
"""

from fastapi import APIRouter, Depends, HTTPException

from api.deps import get_lead_service, to_http_exception
from api.models import WhatsAppSendRequest, WhatsAppSendResponse
from domain.errors import LeadCrmError
from services.lead_service import LeadService

router = APIRouter()


@router.post(
    "/whatsapp/send",
    response_model=WhatsAppSendResponse,
    summary="Send WhatsApp Message",
    description="Send a message to the owner or the customer about a lead. Fails with 502 when delivery fails."
)
def send_whatsapp(request: WhatsAppSendRequest, service: LeadService = Depends(get_lead_service)):
    """
    Send a WhatsApp message.

    On success a `whatsapp` entry with a shortened copy of the message is
    added to the lead's timeline. A failed send leaves the timeline unchanged.

    **Example request:**
    ```json
    {
      "to": "919876543210",
      "type": "owner",
      "message": "New lead: Ramesh (919812345678) — needs follow-up!",
      "lead_id": "l1"
    }
    ```
    """
    try:
        result = service.send_whatsapp(
            request.lead_id,
            request.type,
            request.message,
            to=request.to,
        )
        return WhatsAppSendResponse(success=result.success)

    except LeadCrmError as e:
        raise to_http_exception(e)
    except Exception as e:
        raise HTTPException(
            status_code=500,
            detail=f"Failed to send WhatsApp message: {str(e)}"
        )
