# module tailormint.notifications.email_client
"""Client Resend minimal (API HTTP via httpx)."""
from typing import Any, Dict, Optional
import logging
import httpx
from tailormint import config
from tailormint.exceptions import NotificationError

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, html: str, text: Optional[str] = None) -> Dict[str, Any]:
    """
    POST https://api.resend.com/emails (Authorization: Bearer RESEND_API_KEY).
    - Retour: corps JSON de Resend (ex: {"id": "..."})
    - Clé absente, erreur réseau ou statut non 2xx -> NotificationError
    """
    if not config.RESEND_API_KEY:
        raise NotificationError("RESEND_API_KEY missing")
    payload: Dict[str, Any] = {
        "from": config.NOTIFY_FROM,
        "to": [to],
        "subject": subject,
        "html": html,
    }
    if text:
        payload["text"] = text
    if config.NOTIFY_REPLY_TO:
        payload["reply_to"] = config.NOTIFY_REPLY_TO
    headers = {
        "Authorization": f"Bearer {config.RESEND_API_KEY}",
        "Content-Type": "application/json",
    }
    try:
        resp = httpx.post(config.RESEND_API_URL, json=payload, headers=headers, timeout=10)
    except httpx.HTTPError as e:
        logger.error("notifications.send_email transport error to=%s: %s", to, e)
        raise NotificationError(f"Email provider unreachable: {e}") from e
    if not 200 <= resp.status_code < 300:
        logger.error("notifications.send_email failed: status=%s body=%s", resp.status_code, resp.text)
        raise NotificationError(f"Failed to send notification: status {resp.status_code}")
    try:
        return resp.json()
    except ValueError:
        return {}
