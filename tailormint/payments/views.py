from typing import Any, Dict

from fastapi import APIRouter, Depends

from tailormint.bag.models import CheckoutRequest
from tailormint.utils.rate_limit import optional_rate_limit
from tailormint.utils.security import require_user
from tailormint.payments import service as payments_service

router = APIRouter(prefix="/api/v1/bag", tags=["Payments API"])

# module tailormint.payments.views
@router.post("/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_checkout_session(req: CheckoutRequest, user: Dict[str, Any] = Depends(require_user)):
    """
    Crée une session Checkout Stripe pour le sac ouvert de l'utilisateur authentifié.
    - Entrée JSON: { "shipping_address": { "street_address", "city", "state", "zip_code", "country"? } }
    - Sécurité: require_user + rate limit (10 req / 60s)
    - Étapes:
      1) Adresse validée par pydantic (400 avant tout appel externe)
      2) Sac ouvert (404) non vide (400)
      3) Prix, line_items, metadata puis session Stripe
    - Réponse: {success, checkout_url, session_id}; le sac reste ouvert
    """
    return payments_service.create_checkout_session(user, req.shipping_address)
