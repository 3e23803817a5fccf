from typing import Any, Dict, Optional
from .repository import (
    get_user_from_access_token as _repo_get_user_from_token,
    get_profile as _repo_get_profile,
)

TAILOR_ROLE = "tailor"
CUSTOMER_ROLE = "customer"

def determine_roles(profile: Optional[Dict[str, Any]], metadata: Optional[Dict[str, Any]] = None) -> list[str]:
    """
    Rôles de l'utilisateur:
    - priorité à profiles.roles (liste ou chaîne)
    - sinon user_metadata.role, sinon "customer"
    """
    raw = (profile or {}).get("roles")
    if isinstance(raw, str):
        raw = [raw]
    roles = [str(r).lower() for r in (raw or []) if r]
    if not roles:
        meta_role = str((metadata or {}).get("role") or "").lower()
        roles = [meta_role] if meta_role else [CUSTOMER_ROLE]
    return roles

def get_user_from_token(access_token: str) -> Dict[str, Any]:
    """Normalise user issu de supabase.auth.get_user(access_token):
    - Retourne {id, email, metadata, token}
    - Les rôles ne sont résolus qu'à la demande (is_tailor) pour éviter une lecture profil par requête
    """
    raw = _repo_get_user_from_token(access_token)
    return {
        "id": raw.get("id"),
        "email": raw.get("email"),
        "metadata": raw.get("user_metadata") or {},
        "token": access_token,
    }

def is_tailor(user: Dict[str, Any]) -> bool:
    profile = _repo_get_profile(user.get("id"))
    return TAILOR_ROLE in determine_roles(profile, user.get("metadata"))
