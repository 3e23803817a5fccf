import pytest
from pydantic import ValidationError

from tailormint.bag.models import AddBagItemRequest, ShippingAddress


def test_add_request_rejects_bad_values():
    base = {
        "tailor_id": "t1",
        "design_id": "d1",
        "fabric_idx": 0,
        "style_type": "Agbada",
        "fabric_yards": 2,
        "yard_price": 5,
        "stitch_price": 20,
    }
    AddBagItemRequest(**base)
    for field, value in [("fabric_yards", 0), ("yard_price", -1), ("fabric_idx", -1), ("design_id", "  "), ("color_idx", -2)]:
        with pytest.raises(ValidationError):
            AddBagItemRequest(**{**base, field: value})


def test_shipping_address_requires_all_fields():
    ShippingAddress(street_address="1 Main", city="Austin", state="TX", zip_code="73301")
    with pytest.raises(ValidationError):
        ShippingAddress(street_address="1 Main", city=" ", state="TX", zip_code="73301")
    with pytest.raises(ValidationError):
        ShippingAddress(street_address="1 Main", city="Austin", state="TX")
