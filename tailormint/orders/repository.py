# module tailormint.orders.repository
from typing import Any, Dict, List, Optional
import logging
from postgrest.exceptions import APIError
import tailormint.infra.supabase_client as supabase_client
from tailormint.exceptions import UpstreamError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
ORDER_WITH_ITEMS = "*, order_items(*)"


class DuplicateBagOrder(Exception):
    """Une commande existe déjà pour ce bag_id (UNIQUE(bag_id), code Postgres 23505)."""

    def __init__(self, bag_id: str):
        super().__init__(bag_id)
        self.bag_id = bag_id


def _error_code(e: APIError) -> Optional[str]:
    code = getattr(e, "code", None)
    if not code and e.args and isinstance(e.args[0], dict):
        code = e.args[0].get("code")
    return str(code) if code else None


def get_order_by_bag(bag_id: str) -> Optional[Dict[str, Any]]:
    """Signal d'existence faisant autorité: au plus une commande par sac."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select("*")
            .eq("bag_id", bag_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.get_order_by_bag failed bag_id=%s", bag_id)
        raise UpstreamError("order lookup failed", retryable=True) from e
    rows = res.data or []
    return rows[0] if rows else None


def insert_order(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insère la commande.
    - Doublon sur bag_id (23505) -> DuplicateBagOrder, l'appelant relit la commande gagnante
    - Autre erreur -> UpstreamError
    """
    try:
        res = supabase_client.get_service_supabase().table("orders").insert(payload).execute()
    except APIError as e:
        if _error_code(e) == UNIQUE_VIOLATION:
            raise DuplicateBagOrder(payload.get("bag_id")) from e
        logger.exception("orders.repository.insert_order failed bag_id=%s", payload.get("bag_id"))
        raise UpstreamError("order creation failed", retryable=True) from e
    except Exception as e:
        logger.exception("orders.repository.insert_order failed bag_id=%s", payload.get("bag_id"))
        raise UpstreamError("order creation failed", retryable=True) from e
    rows = res.data or []
    if not rows:
        raise UpstreamError("order creation failed", retryable=True)
    return rows[0]


def list_order_items(order_id: str) -> List[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("order_items")
            .select("*")
            .eq("order_id", order_id)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.list_order_items failed order_id=%s", order_id)
        raise UpstreamError("order items lookup failed", retryable=True) from e
    return res.data or []


def insert_order_items(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Insertion en un seul appel (tout ou rien côté PostgREST).
    UNIQUE(order_id, bag_item_id): les copies déjà présentes sont ignorées,
    seules les lignes réellement insérées sont retournées.
    """
    if not rows:
        return []
    res = (
        supabase_client.get_service_supabase()
        .table("order_items")
        .upsert(rows, on_conflict="order_id,bag_item_id", ignore_duplicates=True)
        .execute()
    )
    return res.data or []


def list_orders_for_user(user_id: str, limit: int = 100) -> List[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select(ORDER_WITH_ITEMS)
            .eq("user_id", user_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.list_orders_for_user failed user_id=%s", user_id)
        raise UpstreamError("orders lookup failed") from e
    return res.data or []


def list_orders_for_tailor(tailor_id: str, limit: int = 100) -> List[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select(ORDER_WITH_ITEMS)
            .eq("tailor_id", tailor_id)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.list_orders_for_tailor failed tailor_id=%s", tailor_id)
        raise UpstreamError("orders lookup failed") from e
    return res.data or []


def get_order(order_id: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("orders")
            .select(ORDER_WITH_ITEMS)
            .eq("id", order_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("orders.repository.get_order failed order_id=%s", order_id)
        raise UpstreamError("order lookup failed") from e
    rows = res.data or []
    return rows[0] if rows else None
