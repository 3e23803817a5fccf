"""
Calcul de prix pur (pas de Stripe, pas de DB).

Montant d'un article = stitch_price + yard_price × fabric_yards (0 si absent).
Les montants Stripe sont en centimes: × 100 arrondi au plus proche (demi vers le haut).
Le total est la somme des montants en centimes des articles, jamais un arrondi séparé.
"""
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, Sequence, Tuple

from tailormint.exceptions import InvalidRequest

# module tailormint.payments.pricing
_CENT = Decimal("100")


@dataclass(frozen=True)
class PricedItem:
    bag_item_id: str | None
    unit_amount: int
    name: str
    description: str
    image: str | None = None


@dataclass(frozen=True)
class PricedBag:
    items: List[PricedItem] = field(default_factory=list)

    @property
    def total_minor(self) -> int:
        return sum(i.unit_amount for i in self.items)


def _decimal(value: Any, field_name: str) -> Decimal:
    """Convertit str|int|float|None en Decimal (None -> 0). Refuse les valeurs négatives ou non numériques."""
    if value is None or value == "":
        return Decimal("0")
    if isinstance(value, bool):
        raise InvalidRequest(f"{field_name} must be a number")
    try:
        # str() évite d'hériter des approximations binaires du float
        dec = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidRequest(f"{field_name} must be a number")
    if not dec.is_finite():
        raise InvalidRequest(f"{field_name} must be a number")
    if dec < 0:
        raise InvalidRequest(f"{field_name} must be >= 0")
    return dec


def item_amount(item: Mapping[str, Any]) -> Decimal:
    stitch = _decimal(item.get("stitch_price"), "stitch_price")
    yard_price = _decimal(item.get("yard_price"), "yard_price")
    yards = _decimal(item.get("fabric_yards"), "fabric_yards")
    return stitch + yard_price * yards


def to_minor_units(amount: Decimal) -> int:
    return int((amount * _CENT).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_major_units(minor: int) -> float:
    """Centimes -> unités monétaires (2 décimales), pour les colonnes total_amount/price."""
    return float((Decimal(int(minor)) / _CENT).quantize(Decimal("0.01")))


def item_description(item: Mapping[str, Any]) -> Tuple[str, str]:
    design = item.get("designs") or {}
    title = design.get("title") or "Custom Design"
    style = item.get("style_type") or ""
    name = f"{title} - {style}" if style else title
    yards = item.get("fabric_yards") or 0
    description = f"{yards} yards of fabric, Fabric index: {item.get('fabric_idx')}"
    if item.get("tailor_notes"):
        description += f", Notes: {item['tailor_notes']}"
    return name, description


def _first_image(item: Mapping[str, Any]) -> str | None:
    images = (item.get("designs") or {}).get("images") or []
    return images[0] if images else None


def price_bag_items(items: Sequence[Mapping[str, Any]]) -> PricedBag:
    priced: List[PricedItem] = []
    for item in items or []:
        name, description = item_description(item)
        priced.append(PricedItem(
            bag_item_id=str(item["id"]) if item.get("id") is not None else None,
            unit_amount=to_minor_units(item_amount(item)),
            name=name,
            description=description,
            image=_first_image(item),
        ))
    return PricedBag(items=priced)


def to_line_items(priced: PricedBag, currency: str) -> List[Dict[str, Any]]:
    """
    Construit les line_items Stripe (quantité 1 par article configuré).
    - product_data.images seulement si le design a une image.
    """
    line_items: List[Dict[str, Any]] = []
    for p in priced.items:
        product_data: Dict[str, Any] = {"name": p.name, "description": p.description}
        if p.image:
            product_data["images"] = [p.image]
        line_items.append({
            "quantity": 1,
            "price_data": {
                "currency": currency,
                "unit_amount": p.unit_amount,
                "product_data": product_data,
            },
        })
    return line_items
