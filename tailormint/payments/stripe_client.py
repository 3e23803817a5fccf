"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
Les erreurs SDK sont converties en UpstreamError (retryable si réseau).
"""
import logging
from typing import Any, Dict, List

import stripe

from tailormint import config
from tailormint.exceptions import InvalidRequest, UpstreamError

logger = logging.getLogger(__name__)

# module tailormint.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY.
    - Sans clé, on échoue avant tout appel réseau.
    """
    if not config.STRIPE_SECRET_KEY:
        raise UpstreamError("STRIPE_SECRET_KEY missing")
    stripe.api_key = config.STRIPE_SECRET_KEY
    return stripe


def _as_dict(obj: Any) -> Dict[str, Any]:
    # StripeObject -> dict (metadata incluses)
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)


def create_session(
    *,
    line_items: List[Dict[str, Any]],
    success_url: str,
    cancel_url: str,
    metadata: Dict[str, str],
    customer_email: str | None = None,
    allowed_countries: List[str] | None = None,
) -> Dict[str, Any]:
    """
    Crée une session Stripe Checkout (mode payment, carte).
    Retour: dict session (ex: {"id": "cs_test_...", "url": "https://..."})
    """
    require_stripe()
    params: Dict[str, Any] = {
        "line_items": line_items,
        "mode": "payment",
        "payment_method_types": ["card"],
        "success_url": success_url,
        "cancel_url": cancel_url,
        "metadata": metadata,
    }
    if customer_email:
        params["customer_email"] = customer_email
    if allowed_countries:
        params["shipping_address_collection"] = {"allowed_countries": list(allowed_countries)}
    try:
        session = stripe.checkout.Session.create(**params)
    except stripe.APIConnectionError as e:
        raise UpstreamError("checkout initiation failed", retryable=True) from e
    except stripe.StripeError as e:
        raise UpstreamError("checkout initiation failed") from e
    return _as_dict(session)


def get_session(session_id: str) -> Dict[str, Any]:
    """
    Récupère une session Stripe Checkout par son identifiant.
    Retour: dict incluant "id", "payment_status", "amount_total", "metadata".
    """
    require_stripe()
    try:
        session = stripe.checkout.Session.retrieve(session_id)
    except stripe.APIConnectionError as e:
        raise UpstreamError("payment provider unreachable", retryable=True) from e
    except stripe.InvalidRequestError as e:
        raise InvalidRequest("unknown checkout session") from e
    except stripe.StripeError as e:
        raise UpstreamError("payment verification failed", retryable=True) from e
    return _as_dict(session)


def parse_event(payload: bytes, sig_header: str | None) -> Dict[str, Any]:
    """
    Valide un événement Stripe signé (webhook) et le retourne en dict.
    - Signature absente/invalide ou payload illisible -> InvalidRequest (400)
    """
    if not config.STRIPE_WEBHOOK_SECRET:
        raise UpstreamError("STRIPE_WEBHOOK_SECRET missing")
    if not sig_header:
        raise InvalidRequest("missing stripe-signature header")
    try:
        event = stripe.Webhook.construct_event(payload, sig_header, config.STRIPE_WEBHOOK_SECRET)
    except stripe.SignatureVerificationError as e:
        logger.warning("payments.stripe_client invalid webhook signature: %s", e)
        raise InvalidRequest("invalid webhook signature") from e
    except ValueError as e:
        raise InvalidRequest("invalid webhook payload") from e
    return _as_dict(event)
