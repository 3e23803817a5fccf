# module tailormint.mailing_list.views
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, field_validator

from tailormint.utils.rate_limit import optional_rate_limit
from . import repository

router = APIRouter(prefix="/api/v1/mailing-list", tags=["Mailing list API"])


class SubscribeRequest(BaseModel):
    email: EmailStr
    firstname: Optional[str] = None
    lastname: Optional[str] = None

    @field_validator("email", mode="before")
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


@router.post("", status_code=201, dependencies=[Depends(optional_rate_limit(times=5, seconds=60))])
def subscribe(req: SubscribeRequest):
    """Inscription newsletter (sans authentification). Réinscription = mise à jour du nom."""
    data = repository.upsert_subscriber(str(req.email), req.firstname, req.lastname)
    return {"success": True, "message": "Successfully subscribed to mailing list", "data": data}
