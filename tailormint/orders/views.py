# module tailormint.orders.views

"""Endpoints de l'user story Commandes.
- POST /checkout/verify: page de succès Stripe, réconcilie la session (authentifié, rate-limité)
- POST /stripe/webhook: événements Stripe signés, checkout.session.completed -> réconciliation
- GET /orders, /orders/tailor, /orders/{order_id}: consultation
Idempotence:
- Les deux chemins convergent vers reconciler.reconcile; UNIQUE(bag_id) garantit une seule commande.
"""
from typing import Any, Dict
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from pydantic import BaseModel, Field

from tailormint import config
from tailormint.payments import stripe_client
from tailormint.utils.rate_limit import optional_rate_limit
from tailormint.utils.security import require_tailor, require_user
from . import reconciler
from . import service as orders_service
from .session_guard import ProcessedSessionGuard

logger = logging.getLogger(__name__)
checkout_router = APIRouter(prefix="/api/v1", tags=["Checkout API"])
router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])

COMPLETED_EVENT = "checkout.session.completed"


class VerifySessionRequest(BaseModel):
    session_id: str = Field(min_length=1)


def get_session_guard(request: Request) -> ProcessedSessionGuard:
    """Garde partagé du processus (créé par le lifespan, sinon à la demande)."""
    guard = getattr(request.app.state, "session_guard", None)
    if guard is None:
        guard = ProcessedSessionGuard(window_seconds=config.SESSION_GUARD_WINDOW_SECONDS)
        request.app.state.session_guard = guard
    return guard


@checkout_router.post("/checkout/verify", dependencies=[Depends(optional_rate_limit(times=30, seconds=60))])
def verify_checkout(
    req: VerifySessionRequest,
    user: dict = Depends(require_user),
    guard: ProcessedSessionGuard = Depends(get_session_guard),
):
    """Réconcilie la session après redirection Stripe.
    - Vérifie payment_status='paid' et la propriété (metadata.user_id)
    - Rejouable sans effet: already_existed=True au-delà du premier appel
    - Erreurs: 400 paiement incomplet/sac vide, 403 autre utilisateur, 409 doublon en cours (à réessayer), 500 anomalie ou amont
    """
    return reconciler.reconcile(req.session_id, guard=guard, current_user_id=user.get("id"))


@checkout_router.post("/stripe/webhook", include_in_schema=False)
async def stripe_webhook(request: Request):
    """Webhook Stripe.
    - Signature: Stripe-Signature + STRIPE_WEBHOOK_SECRET (400 si invalide)
    - checkout.session.completed -> reconcile (session signée, pas de retrieve)
    - Autres événements (payment_intent.payment_failed, ...) -> acquittés, ignorés
    Une erreur de réconciliation renvoie un 5xx pour que Stripe réessaie.
    """
    payload = await request.body()
    event = stripe_client.parse_event(payload, request.headers.get("stripe-signature"))
    event_type = event.get("type")
    if event_type != COMPLETED_EVENT:
        logger.info("orders.webhook ignored event type=%s id=%s", event_type, event.get("id"))
        return JSONResponse({"received": True, "ignored": True})

    session = ((event.get("data") or {}).get("object")) or {}
    # reconcile est synchrone (client Supabase bloquant): exécuté hors de la boucle
    result = await run_in_threadpool(reconciler.reconcile, session.get("id"), session=session)
    logger.info("orders.webhook session=%s order_id=%s already_existed=%s",
                session.get("id"), result.get("order_id"), result.get("already_existed"))
    return JSONResponse({"received": True, **result})


@router.get("")
def list_my_orders(user: Dict[str, Any] = Depends(require_user)):
    return {"success": True, "orders": orders_service.list_customer_orders(user.get("id"))}


@router.get("/tailor")
def list_tailor_orders(user: Dict[str, Any] = Depends(require_tailor)):
    return {"success": True, "orders": orders_service.list_tailor_orders(user.get("id"))}


@router.get("/{order_id}")
def get_order(order_id: str, user: Dict[str, Any] = Depends(require_user)):
    return {"success": True, "order": orders_service.get_order_for(user.get("id"), order_id)}
