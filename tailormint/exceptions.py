"""
Taxonomie des erreurs applicatives.

Chaque erreur porte son code HTTP et un code court; les handlers de
tailormint.app_setup.exceptions les transforment en JSON {"error", "code", ...}.
- 400: InvalidRequest, ConflictError (panier vide, autre tailleur, paiement incomplet)
- 401/403/404: AuthenticationRequired, Forbidden, NotFound
- 409: ReconcileInProgress (doublon concurrent, à réessayer)
- 500: UpstreamError (Stripe/Supabase), OrderItemsIncomplete, ReconcileAnomaly
"""
from typing import Any, Dict, Optional


class AppError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, message: str, *, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.message, "code": self.code}
        body.update(self.context)
        return body


class InvalidRequest(AppError):
    status_code = 400
    code = "invalid_request"


class AuthenticationRequired(AppError):
    status_code = 401
    code = "not_authenticated"


class Forbidden(AppError):
    status_code = 403
    code = "forbidden"


class NotFound(AppError):
    status_code = 404
    code = "not_found"


class ConflictError(AppError):
    status_code = 400
    code = "conflict"


class PaymentIncomplete(ConflictError):
    code = "payment_incomplete"


class UpstreamError(AppError):
    """Échec d'un appel Stripe/Supabase. retryable=True: l'appelant peut relancer."""
    code = "upstream_error"

    def __init__(self, message: str, *, retryable: bool = False, context: Optional[Dict[str, Any]] = None):
        super().__init__(message, context=context)
        self.retryable = retryable

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["retryable"] = self.retryable
        return body


class OrderItemsIncomplete(UpstreamError):
    code = "order_items_incomplete"


class ReconcileInProgress(AppError):
    """Même session déjà en cours de réconciliation dans ce processus: le client réessaie."""
    status_code = 409
    code = "reconcile_in_progress"

    def to_dict(self) -> Dict[str, Any]:
        body = super().to_dict()
        body["retryable"] = True
        return body


class ReconcileAnomaly(AppError):
    """Sac checked_out sans commande associée: remédiation manuelle, jamais de recréation aveugle."""
    code = "bag_order_anomaly"


class NotificationError(AppError):
    code = "notification_failed"
