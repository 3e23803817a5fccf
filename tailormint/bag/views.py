# module tailormint.bag.views
"""Endpoints du sac (bag): lecture, ajout, retrait d'article, vidage. Authentification requise."""
from typing import Any, Dict

from fastapi import APIRouter, Depends

from tailormint.utils.rate_limit import optional_rate_limit
from tailormint.utils.security import require_user
from . import service as bag_service
from .models import AddBagItemRequest

router = APIRouter(prefix="/api/v1/bag", tags=["Bag API"])


@router.get("")
def get_bag(user: Dict[str, Any] = Depends(require_user)):
    return bag_service.get_bag(user.get("id"))


@router.delete("")
def empty_bag(user: Dict[str, Any] = Depends(require_user)):
    return bag_service.empty_bag(user.get("id"))


@router.post("/add", dependencies=[Depends(optional_rate_limit(times=30, seconds=60))])
def add_to_bag(req: AddBagItemRequest, user: Dict[str, Any] = Depends(require_user)):
    """Ajoute un article configuré (design, tissu, coupe, métrage, prix).
    - 400 si le sac ouvert contient déjà des articles d'un autre tailleur
    """
    return bag_service.add_item(user.get("id"), req)


@router.delete("/items/{item_id}")
def remove_from_bag(item_id: str, user: Dict[str, Any] = Depends(require_user)):
    return bag_service.remove_item(user.get("id"), item_id)
