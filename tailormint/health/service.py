from typing import Any, Dict
import logging
import tailormint.infra.supabase_client as supabase_client
from tailormint.config import SUPABASE_URL, SUPABASE_SERVICE_KEY

logger = logging.getLogger(__name__)


def health_supabase_info() -> Dict[str, Any]:
    """
    Sonde Supabase: configuration présente + une lecture légère (bags, limit 1).
    Ne lève jamais: {"configured", "reachable", "error"?}
    """
    info: Dict[str, Any] = {
        "configured": bool(SUPABASE_URL and SUPABASE_SERVICE_KEY),
        "reachable": False,
    }
    if not info["configured"]:
        return info
    try:
        supabase_client.get_service_supabase().table("bags").select("id").limit(1).execute()
        info["reachable"] = True
    except Exception as e:
        logger.warning("health.supabase probe failed: %s", e)
        info["error"] = str(e)
    return info
