from typing import Any, Dict, List, Optional
import logging
import tailormint.infra.supabase_client as supabase_client

logger = logging.getLogger(__name__)

# --- Auth (supabase.auth.*) ---

def get_user_from_access_token(access_token: str) -> Dict[str, Any]:
    """Récupère et normalise l’utilisateur depuis supabase.auth.get_user(access_token)."""
    res = supabase_client.get_supabase().auth.get_user(access_token)
    user = getattr(res, "user", None) or {}
    if not isinstance(user, dict):
        user = {
            "id": getattr(user, "id", None),
            "email": getattr(user, "email", None),
            "user_metadata": getattr(user, "user_metadata", None),
        }
    return user or {}

# --- Table profiles ---

def get_profile(user_id: str) -> Optional[dict]:
    """
    Profil applicatif (table profiles): email, firstname, lastname, roles.
    - Retour: dict ou None si introuvable/erreur
    """
    if not user_id:
        return None
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("profiles")
            .select("*")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return rows[0] if rows else None
    except Exception:
        logger.exception("auth.repository.get_profile failed user_id=%s", user_id)
        return None

def get_profiles(user_ids: List[str]) -> Dict[str, dict]:
    """Retourne {id: profil} pour plusieurs utilisateurs (un seul aller-retour)."""
    ids = [str(i) for i in user_ids if i]
    if not ids:
        return {}
    try:
        res = (
            supabase_client.get_service_supabase()
            .table("profiles")
            .select("*")
            .in_("id", ids)
            .execute()
        )
        return {str(p.get("id")): p for p in (res.data or [])}
    except Exception:
        logger.exception("auth.repository.get_profiles failed ids=%s", ids)
        return {}
