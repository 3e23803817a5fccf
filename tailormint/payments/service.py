"""
Cas d'usage 'payments': orchestre bag repository, pricing, metadata et stripe.

Aucune écriture locale: le sac reste 'open' jusqu'à la réconciliation.
"""
from typing import Any, Dict
import logging

from tailormint import config
from tailormint.bag import repository as bag_repository
from tailormint.bag.models import ShippingAddress
from tailormint.exceptions import ConflictError, NotFound
from . import pricing
from . import stripe_client
from .metadata import make_metadata

logger = logging.getLogger(__name__)


def checkout_urls() -> Dict[str, str]:
    success_url = f"{config.BASE_URL}{config.CHECKOUT_SUCCESS_PATH}?session_id={{CHECKOUT_SESSION_ID}}"
    cancel_url = f"{config.BASE_URL}{config.CHECKOUT_CANCEL_PATH}"
    return {"success_url": success_url, "cancel_url": cancel_url}


def create_checkout_session(user: Dict[str, Any], shipping_address: ShippingAddress) -> Dict[str, Any]:
    """
    Prépare la session Stripe pour le sac ouvert de l'utilisateur.
    - L'adresse est déjà validée (pydantic) avant tout appel externe
    - 404 si aucun sac ouvert, 400 si sac vide
    - Une ligne Stripe par article (quantité 1)
    """
    user_id = str(user.get("id") or "")
    bag = bag_repository.get_open_bag(user_id)
    if bag is None:
        raise NotFound("No open bag")
    items = bag_repository.list_items(bag["id"], with_design=True)
    if not items:
        raise ConflictError("Your bag is empty")

    priced = pricing.price_bag_items(items)
    metadata = make_metadata(
        bag_id=bag["id"],
        user_id=user_id,
        tailor_id=bag.get("tailor_id") or "",
        shipping_address=shipping_address.model_dump(exclude_none=True),
    )
    session = stripe_client.create_session(
        line_items=pricing.to_line_items(priced, config.CHECKOUT_CURRENCY),
        metadata=metadata,
        customer_email=user.get("email"),
        allowed_countries=config.CHECKOUT_ALLOWED_COUNTRIES,
        **checkout_urls(),
    )
    logger.info(
        "payments.checkout session=%s bag_id=%s items=%s total_minor=%s",
        session.get("id"), bag["id"], len(priced.items), priced.total_minor,
    )
    return {"success": True, "checkout_url": session.get("url"), "session_id": session.get("id")}
