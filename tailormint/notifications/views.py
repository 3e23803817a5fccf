# module tailormint.notifications.views

"""Endpoints de notification (emails transactionnels).
- POST /notify: envoie un email typé (workflows de suivi de commande, validation tailleur/design)
- GET /notify/test: envoie un order_placed d'exemple pour vérifier la configuration Resend
Sécurité:
- require_user + optional_rate_limit: pas d'envoi anonyme
"""
from typing import Any, Dict, Optional
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from tailormint.exceptions import InvalidRequest
from tailormint.utils.rate_limit import optional_rate_limit
from tailormint.utils.security import require_user
from .service import send_notification
from .templates import NOTIFICATION_TYPES, ORDER_TYPES

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/notify", tags=["Notifications API"])


class NotifyRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str
    recipient_email: EmailStr = Field(alias="recipientEmail")
    recipient_name: str = Field(alias="recipientName", min_length=1)
    order_id: Optional[str] = Field(default=None, alias="orderId")
    reference_id: Optional[str] = Field(default=None, alias="referenceId")
    additional_data: Optional[Dict[str, Any]] = Field(default=None, alias="additionalData")


@router.post("", dependencies=[Depends(optional_rate_limit(times=30, seconds=60))])
def api_notify(req: NotifyRequest, user: dict = Depends(require_user)):
    """Envoie une notification.
    - Types order_*: orderId obligatoire; autres types: referenceId obligatoire
    - 400 si type inconnu ou champ manquant, 500 si l'envoi échoue
    """
    if req.type not in NOTIFICATION_TYPES:
        raise InvalidRequest(f"Unknown notification type: {req.type}")
    if req.type in ORDER_TYPES and not req.order_id:
        raise InvalidRequest("Missing required fields")
    if req.type not in ORDER_TYPES and not req.reference_id:
        raise InvalidRequest("Missing required fields")

    data = send_notification(
        req.type,
        req.recipient_email,
        req.recipient_name,
        order_id=req.order_id,
        reference_id=req.reference_id,
        extra=req.additional_data,
    )
    logger.info("notifications.api_notify type=%s by user_id=%s", req.type, user.get("id"))
    return {"success": True, "data": data}


@router.get("/test", dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def api_notify_test(email: Optional[EmailStr] = None, user: dict = Depends(require_user)):
    if not email:
        raise InvalidRequest("Email parameter is required")
    data = send_notification(
        "order_placed",
        email,
        "Test User",
        order_id="TEST-123",
        extra={"totalAmount": 199.99},
    )
    return {
        "success": True,
        "message": f"Test email sent to {email} using My Tailor Mint notifications",
        "details": data,
    }
