"""Couche service du sac (bag).

Un utilisateur a au plus un sac ouvert, et ce sac ne contient que des
articles d'un seul tailleur. Le user_id vient toujours de l'utilisateur
authentifié, jamais du corps de la requête.
"""
from typing import Any, Dict
import logging

from tailormint.bag import repository
from tailormint.bag.models import AddBagItemRequest
from tailormint.exceptions import ConflictError, NotFound
from tailormint.payments import pricing

logger = logging.getLogger(__name__)


def add_item(user_id: str, req: AddBagItemRequest) -> Dict[str, Any]:
    """Ajoute un article configuré au sac ouvert (créé si absent).
    - Sac ouvert d'un autre tailleur (même vide) -> ConflictError, rien n'est écrit
    """
    amount = pricing.item_amount(req.model_dump())
    bag = repository.get_open_bag(user_id)
    if bag is None:
        bag = repository.create_bag(user_id, req.tailor_id)
        logger.info("bag.add_item created bag_id=%s user_id=%s", bag.get("id"), user_id)
    elif str(bag.get("tailor_id")) != req.tailor_id:
        raise ConflictError("Your open bag belongs to another tailor. Please checkout that bag first.")

    payload = req.model_dump(exclude={"tailor_id"})
    payload["bag_id"] = bag["id"]
    payload["price"] = pricing.to_major_units(pricing.to_minor_units(amount))
    item = repository.insert_item(payload)
    return {"success": True, "bag_id": bag["id"], "item": item}


def remove_item(user_id: str, item_id: str) -> Dict[str, Any]:
    bag = repository.get_open_bag(user_id)
    if bag is None or not repository.delete_item(bag["id"], item_id):
        raise NotFound("Bag item not found")
    return {"success": True}


def get_bag(user_id: str) -> Dict[str, Any]:
    bag = repository.get_open_bag(user_id)
    if bag is None:
        return {"success": True, "bag": None, "items": []}
    items = repository.list_items(bag["id"], with_design=True)
    return {"success": True, "bag": bag, "items": items}


def empty_bag(user_id: str) -> Dict[str, Any]:
    """Vide le sac ouvert; le sac lui-même reste 'open'."""
    bag = repository.get_open_bag(user_id)
    if bag is None:
        return {"success": True, "removed": 0}
    removed = repository.delete_all_items(bag["id"])
    return {"success": True, "removed": removed}
