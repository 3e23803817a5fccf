# module tailormint.bag.repository
"""Accès Supabase aux tables bags / bag_items.

Client service-role: la propriété (user_id) est vérifiée par la couche service.
Toute erreur Supabase remonte en UpstreamError (l'appelant décide du retry).
"""
from typing import Any, Dict, List, Optional
import logging
import tailormint.infra.supabase_client as supabase_client
from tailormint.exceptions import UpstreamError

logger = logging.getLogger(__name__)

OPEN = "open"
CHECKED_OUT = "checked_out"

ITEM_WITH_DESIGN = "*, designs(title, images)"


def _first(res) -> Optional[Dict[str, Any]]:
    rows = res.data or []
    return rows[0] if rows else None


def get_open_bag(user_id: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("bags")
            .select("*")
            .eq("user_id", user_id)
            .eq("status", OPEN)
            .order("created_at", desc=True)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("bag.repository.get_open_bag failed user_id=%s", user_id)
        raise UpstreamError("bag lookup failed") from e
    return _first(res)


def get_bag(bag_id: str) -> Optional[Dict[str, Any]]:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("bags")
            .select("*")
            .eq("id", bag_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        logger.exception("bag.repository.get_bag failed bag_id=%s", bag_id)
        raise UpstreamError("bag lookup failed", retryable=True) from e
    return _first(res)


def create_bag(user_id: str, tailor_id: str) -> Dict[str, Any]:
    payload = {"user_id": user_id, "tailor_id": tailor_id, "status": OPEN}
    try:
        res = supabase_client.get_service_supabase().table("bags").insert(payload).execute()
    except Exception as e:
        logger.exception("bag.repository.create_bag failed user_id=%s", user_id)
        raise UpstreamError("bag creation failed") from e
    row = _first(res)
    if not row:
        raise UpstreamError("bag creation failed")
    return row


def set_bag_status(bag_id: str, status: str) -> None:
    try:
        (
            supabase_client.get_service_supabase()
            .table("bags")
            .update({"status": status})
            .eq("id", bag_id)
            .execute()
        )
    except Exception as e:
        logger.exception("bag.repository.set_bag_status failed bag_id=%s status=%s", bag_id, status)
        raise UpstreamError("bag status update failed", retryable=True) from e


def list_items(bag_id: str, with_design: bool = False) -> List[Dict[str, Any]]:
    """Articles du sac, du plus ancien au plus récent (avec titre/images du design si demandé)."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("bag_items")
            .select(ITEM_WITH_DESIGN if with_design else "*")
            .eq("bag_id", bag_id)
            .order("created_at")
            .execute()
        )
    except Exception as e:
        logger.exception("bag.repository.list_items failed bag_id=%s", bag_id)
        raise UpstreamError("bag items lookup failed", retryable=True) from e
    return res.data or []


def insert_item(payload: Dict[str, Any]) -> Dict[str, Any]:
    try:
        res = supabase_client.get_service_supabase().table("bag_items").insert(payload).execute()
    except Exception as e:
        logger.exception("bag.repository.insert_item failed bag_id=%s", payload.get("bag_id"))
        raise UpstreamError("bag item insert failed") from e
    return _first(res) or payload


def delete_item(bag_id: str, item_id: str) -> bool:
    """Supprime un article s'il appartient au sac donné. Retourne False si rien n'a été supprimé."""
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("bag_items")
            .delete()
            .eq("id", item_id)
            .eq("bag_id", bag_id)
            .execute()
        )
    except Exception as e:
        logger.exception("bag.repository.delete_item failed item_id=%s", item_id)
        raise UpstreamError("bag item delete failed") from e
    return bool(res.data)


def delete_all_items(bag_id: str) -> int:
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("bag_items")
            .delete()
            .eq("bag_id", bag_id)
            .execute()
        )
    except Exception as e:
        logger.exception("bag.repository.delete_all_items failed bag_id=%s", bag_id)
        raise UpstreamError("bag empty failed") from e
    return len(res.data or [])
