from typing import Any, Dict, Optional
import logging
import tailormint.infra.supabase_client as supabase_client
from tailormint.exceptions import UpstreamError

logger = logging.getLogger(__name__)


def upsert_subscriber(email: str, firstname: Optional[str], lastname: Optional[str]) -> Dict[str, Any]:
    """Insère ou met à jour (on_conflict=email) l'abonné; retourne la ligne enregistrée."""
    payload = {"email": email, "firstname": firstname or None, "lastname": lastname or None}
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("mailing_list")
            .upsert(payload, on_conflict="email")
            .execute()
        )
    except Exception as e:
        logger.exception("mailing_list.upsert_subscriber failed email=%s", email)
        raise UpstreamError("Failed to subscribe to mailing list") from e
    rows = res.data or []
    return rows[0] if rows else payload
