"""Couche service des notifications.

send_order_notification / notify_order_parties ne lèvent jamais: le résultat
{success, error?} est journalisé et retourné à l'appelant.
"""
from typing import Any, Dict, Mapping, Optional
import logging

from tailormint.exceptions import NotificationError
from . import email_client
from .templates import build_email

logger = logging.getLogger(__name__)


def display_name(profile: Mapping[str, Any]) -> str:
    return f"{profile.get('firstname') or ''} {profile.get('lastname') or ''}".strip() or "there"


def send_notification(
    type_: str,
    recipient_email: str,
    recipient_name: str,
    *,
    order_id: Optional[str] = None,
    reference_id: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Rend puis envoie l'email. Lève NotificationError si l'envoi échoue."""
    subject, html, text = build_email(type_, recipient_name, order_id, reference_id, extra)
    logger.info("notifications.send type=%s to=%s subject=%s", type_, recipient_email, subject)
    return email_client.send_email(recipient_email, subject, html, text)


def send_order_notification(
    type_: str,
    order: Mapping[str, Any],
    profile: Optional[Mapping[str, Any]],
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    if not profile or not profile.get("email"):
        logger.error("notifications missing email in profile order_id=%s", (order or {}).get("id"))
        return {"success": False, "error": "Missing email address in profile"}
    data = dict(extra or {})
    if order.get("total_amount") is not None and "totalAmount" not in data:
        data["totalAmount"] = order.get("total_amount")
    try:
        send_notification(type_, profile["email"], display_name(profile), order_id=order.get("id"), extra=data)
    except NotificationError as e:
        return {"success": False, "error": e.message}
    except Exception as e:
        logger.exception("notifications.send_order_notification failed order_id=%s", order.get("id"))
        return {"success": False, "error": f"Failed to send notification: {e}"}
    return {"success": True}


def notify_order_parties(
    type_: str,
    order: Mapping[str, Any],
    customer: Optional[Mapping[str, Any]],
    tailor: Optional[Mapping[str, Any]],
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Dict[str, Any]]:
    """
    Notifie le client puis le tailleur.
    Même adresse pour les deux (comptes de test): le rôle est indiqué
    (CUSTOMER / TAILOR) pour distinguer les deux emails.
    """
    same_email = bool(customer and tailor and customer.get("email") and customer.get("email") == tailor.get("email"))
    customer_extra = dict(extra or {})
    tailor_extra = dict(extra or {})
    tailor_extra["audience"] = "tailor"
    if same_email:
        customer_extra["recipientRole"] = "CUSTOMER"
        tailor_extra["recipientRole"] = "TAILOR"
    customer_result = send_order_notification(type_, order, customer, customer_extra)
    tailor_result = send_order_notification(type_, order, tailor, tailor_extra)
    logger.info(
        "notifications.parties order_id=%s customer=%s tailor=%s",
        order.get("id"), customer_result.get("success"), tailor_result.get("success"),
    )
    return {"customer": customer_result, "tailor": tailor_result}
