from typing import Optional
from supabase import create_client, Client
from tailormint.config import SUPABASE_URL, SUPABASE_ANON, SUPABASE_SERVICE_KEY
from tailormint.exceptions import UpstreamError

_supabase: Optional[Client] = None
_service_supabase: Optional[Client] = None

def get_supabase() -> Client:
    global _supabase
    if _supabase is None:
        if not SUPABASE_URL or not SUPABASE_ANON:
            raise UpstreamError("SUPABASE_URL/SUPABASE_ANON_KEY missing")
        _supabase = create_client(SUPABASE_URL, SUPABASE_ANON)
    return _supabase

def get_service_supabase() -> Client:
    """
    Client service-role (bypass RLS): webhook Stripe et réconciliation.
    """
    global _service_supabase
    if not SUPABASE_SERVICE_KEY:
        raise UpstreamError("SUPABASE_SERVICE_KEY missing for get_service_supabase()")
    if _service_supabase is None:
        _service_supabase = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _service_supabase

def reset_clients() -> None:
    """Oublie les clients mémorisés (changement de config, tests)."""
    global _supabase, _service_supabase
    _supabase = None
    _service_supabase = None
