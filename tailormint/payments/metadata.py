"""
Sérialisation/désérialisation des métadonnées Stripe d'un checkout de sac
(bag_id, user_id, tailor_id, shipping_address).
"""
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)

# module tailormint.payments.metadata
@dataclass(frozen=True)
class CheckoutIntent:
    bag_id: str | None
    user_id: str | None
    tailor_id: str | None
    shipping_address: Optional[Dict[str, Any]]


def make_metadata(*, bag_id: str, user_id: str, tailor_id: str, shipping_address: Mapping[str, Any]) -> Dict[str, str]:
    """
    Métadonnées écrites une seule fois à la création de la session.
    Seul canal par lequel la réconciliation apprend quoi créer.
    """
    return {
        "bag_id": str(bag_id),
        "user_id": str(user_id),
        "tailor_id": str(tailor_id),
        "shipping_address": json.dumps(dict(shipping_address), separators=(",", ":")),
    }


def extract_intent(session: Mapping[str, Any]) -> CheckoutIntent:
    """
    Extrait l'intention de commande depuis session["metadata"].
    - Tolérant: adresse illisible -> None (journalisé)
    """
    meta = (session or {}).get("metadata") or {}
    raw_address = meta.get("shipping_address")
    address = None
    if raw_address:
        try:
            address = json.loads(raw_address)
        except (TypeError, ValueError):
            logger.warning("payments.metadata unreadable shipping_address session=%s", (session or {}).get("id"))
    return CheckoutIntent(
        bag_id=meta.get("bag_id") or None,
        user_id=meta.get("user_id") or None,
        tailor_id=meta.get("tailor_id") or None,
        shipping_address=address,
    )
