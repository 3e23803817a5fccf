"""
Réconciliation checkout -> commande.

Transforme une session Stripe payée en exactement une commande (et ses
articles), quel que soit le nombre d'appels: rafraîchissements de la page de
succès, webhook Stripe, ou les deux en parallèle.

Étapes:
  1) garde (consultatif)         6) création de la commande (UNIQUE(bag_id))
  2) vérification du paiement    7) copie des articles
  3) extraction des métadonnées  8) notification (première création seulement)
  4) contrôle d'unicité          9) fermeture du sac
  5) lecture des articles       10) mémorisation dans le garde

Le contrôle d'unicité fait autorité sur l'existence d'une commande par bag_id;
l'état du sac seul ne suffit pas (sac 'checked_out' sans commande = anomalie).
"""
from typing import Any, Dict, List, Mapping, Optional
import logging

from tailormint.auth import repository as auth_repository
from tailormint.bag import repository as bag_repository
from tailormint.exceptions import (
    ConflictError,
    Forbidden,
    InvalidRequest,
    NotFound,
    OrderItemsIncomplete,
    PaymentIncomplete,
    ReconcileAnomaly,
    ReconcileInProgress,
    UpstreamError,
)
from tailormint.notifications import service as notifications_service
from tailormint.payments import pricing, stripe_client
from tailormint.payments.metadata import CheckoutIntent, extract_intent
from . import repository as orders_repository
from .session_guard import COMPLETED, IN_PROGRESS, ProcessedSessionGuard

logger = logging.getLogger(__name__)

ORDER_PENDING = "pending"
SNAPSHOT_FIELDS = (
    "design_id",
    "price",
    "tailor_notes",
    "measurement_id",
    "fabric_idx",
    "color_idx",
    "style_type",
    "fabric_yards",
)


def _outcome(order: Mapping[str, Any], session_id: str, *, already_existed: bool, items_created: int) -> Dict[str, Any]:
    return {
        "success": True,
        "order_id": order.get("id"),
        "already_existed": already_existed,
        "items_created": items_created,
        "session_id": session_id,
    }


def _snapshot(order_id: str, item: Mapping[str, Any]) -> Dict[str, Any]:
    row = {field: item.get(field) for field in SNAPSHOT_FIELDS}
    row["order_id"] = order_id
    row["bag_item_id"] = item.get("id")
    return row


def _ensure_order_items(order: Mapping[str, Any], bag_items: List[Dict[str, Any]], *, fresh: bool) -> int:
    """
    Insère les copies manquantes (par bag_item_id) et retourne le nombre créé.
    Échec -> OrderItemsIncomplete: la commande reste, le prochain appel reprendra ici.
    """
    order_id = order["id"]
    try:
        existing = set() if fresh else {
            str(r.get("bag_item_id")) for r in orders_repository.list_order_items(order_id)
        }
        missing = [_snapshot(order_id, it) for it in bag_items if str(it.get("id")) not in existing]
        inserted = orders_repository.insert_order_items(missing)
    except Exception as e:
        logger.exception("orders.reconcile order items incomplete order_id=%s", order_id)
        raise OrderItemsIncomplete(
            "Order created but its items could not be saved",
            retryable=True,
            context={"order_id": order_id},
        ) from e
    return len(inserted)


def _total_amount(session: Mapping[str, Any], bag_items: List[Dict[str, Any]]) -> float:
    # Prix verrouillé: le montant payé chez Stripe fait foi
    amount_total = session.get("amount_total")
    if amount_total is None:
        amount_total = pricing.price_bag_items(bag_items).total_minor
    return pricing.to_major_units(amount_total)


def _notify_order_placed(order: Mapping[str, Any]) -> None:
    """Best-effort: un échec d'email n'annule jamais la commande."""
    try:
        profiles = auth_repository.get_profiles([order.get("user_id"), order.get("tailor_id")])
        notifications_service.notify_order_parties(
            "order_placed",
            order,
            customer=profiles.get(str(order.get("user_id"))),
            tailor=profiles.get(str(order.get("tailor_id"))),
        )
    except Exception:
        logger.exception("orders.reconcile notification failed order_id=%s", order.get("id"))


def _resume(order: Dict[str, Any], bag_id: str, session_id: str) -> Dict[str, Any]:
    bag_items = bag_repository.list_items(bag_id)
    created = _ensure_order_items(order, bag_items, fresh=False)
    bag_repository.set_bag_status(bag_id, bag_repository.CHECKED_OUT)
    logger.info("orders.reconcile resumed order_id=%s bag_id=%s items_created=%s", order.get("id"), bag_id, created)
    return _outcome(order, session_id, already_existed=True, items_created=created)


def _run(
    session_id: str,
    *,
    session: Optional[Mapping[str, Any]],
    current_user_id: Optional[str],
    notify: bool,
) -> Dict[str, Any]:
    if session is None:
        session = stripe_client.get_session(session_id)
    payment_status = session.get("payment_status") or ""
    if payment_status != "paid":
        raise PaymentIncomplete("Payment not completed", context={"payment_status": payment_status})

    intent: CheckoutIntent = extract_intent(session)
    if not intent.bag_id:
        logger.info("orders.reconcile session=%s has no bag_id, nothing to do", session_id)
        return {"success": True, "message": "not a bag checkout", "session_id": session_id}
    if current_user_id and intent.user_id and str(intent.user_id) != str(current_user_id):
        raise Forbidden("Checkout session belongs to another user")

    bag_id = intent.bag_id
    bag = bag_repository.get_bag(bag_id)
    if bag is None:
        raise NotFound("Bag not found", context={"bag_id": bag_id})

    order = orders_repository.get_order_by_bag(bag_id)
    if bag.get("status") == bag_repository.CHECKED_OUT:
        if order:
            return _outcome(order, session_id, already_existed=True, items_created=0)
        logger.error("ANOMALY bag checked_out without order bag_id=%s session=%s", bag_id, session_id)
        raise ReconcileAnomaly("Bag is checked out but has no order", context={"bag_id": bag_id})
    if order:
        return _resume(order, bag_id, session_id)

    bag_items = bag_repository.list_items(bag_id)
    if not bag_items:
        raise ConflictError("Bag has no items", context={"bag_id": bag_id})

    payload = {
        "user_id": intent.user_id or bag.get("user_id"),
        "tailor_id": intent.tailor_id or bag.get("tailor_id"),
        "status": ORDER_PENDING,
        "total_amount": _total_amount(session, bag_items),
        "shipping_address": intent.shipping_address,
        "bag_id": bag_id,
        "stripe_session_id": session_id,
    }
    try:
        order = orders_repository.insert_order(payload)
    except orders_repository.DuplicateBagOrder:
        winner = orders_repository.get_order_by_bag(bag_id)
        if winner is None:
            raise UpstreamError("order conflict could not be resolved", retryable=True)
        logger.info("orders.reconcile lost race bag_id=%s order_id=%s", bag_id, winner.get("id"))
        return _outcome(winner, session_id, already_existed=True, items_created=0)

    created = _ensure_order_items(order, bag_items, fresh=True)
    logger.info(
        "orders.reconcile created order_id=%s bag_id=%s session=%s items=%s",
        order.get("id"), bag_id, session_id, created,
    )
    if notify:
        _notify_order_placed(order)
    bag_repository.set_bag_status(bag_id, bag_repository.CHECKED_OUT)
    return _outcome(order, session_id, already_existed=False, items_created=created)


def reconcile(
    session_id: str,
    *,
    guard: Optional[ProcessedSessionGuard] = None,
    current_user_id: Optional[str] = None,
    notify: bool = True,
    session: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Réconcilie une session Stripe en commande.
    - guard: garde en mémoire (verify); le webhook n'en passe pas
    - current_user_id: si fourni, doit correspondre à metadata.user_id (sinon 403)
    - session: session déjà signée (webhook), évite un retrieve Stripe
    - même session déjà en cours (garde) -> ReconcileInProgress (409), jamais un succès anticipé
    Retour: {success, order_id, already_existed, items_created, session_id}
    """
    if not session_id:
        raise InvalidRequest("session_id is required")

    if guard is not None:
        state, previous = guard.begin(session_id)
        if state == COMPLETED:
            owner = previous.pop("user_id", None)
            if current_user_id and owner and str(owner) != str(current_user_id):
                raise Forbidden("Checkout session belongs to another user")
            previous.update({"skipped": True, "already_existed": True})
            return previous
        if state == IN_PROGRESS:
            raise ReconcileInProgress("Checkout session is already being processed", context={"session_id": session_id})

    try:
        result = _run(session_id, session=session, current_user_id=current_user_id, notify=notify)
    except Exception:
        if guard is not None:
            guard.discard(session_id)
        raise

    if guard is not None:
        guard.record(session_id, {**result, "user_id": current_user_id})
    return result
