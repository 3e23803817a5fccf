"""Couche service des commandes (lecture).
- Client: ses commandes, plus récentes d'abord, avec leurs articles
- Tailleur: les commandes qui lui sont adressées
- Détail: visible par le client propriétaire ou le tailleur destinataire, 404 sinon
"""
from typing import Any, Dict, List
from tailormint.exceptions import NotFound
from . import repository


def list_customer_orders(user_id: str) -> List[Dict[str, Any]]:
    return repository.list_orders_for_user(user_id)


def list_tailor_orders(tailor_id: str) -> List[Dict[str, Any]]:
    return repository.list_orders_for_tailor(tailor_id)


def get_order_for(user_id: str, order_id: str) -> Dict[str, Any]:
    order = repository.get_order(order_id)
    # 404 plutôt que 403: ne révèle pas l'existence de la commande
    if order is None or str(user_id) not in (str(order.get("user_id")), str(order.get("tailor_id"))):
        raise NotFound("Order not found")
    return order
