# module tailormint.bag.models
"""Schémas d'entrée du sac et du checkout (pydantic)."""
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class AddBagItemRequest(BaseModel):
    tailor_id: str = Field(min_length=1)
    design_id: str = Field(min_length=1)
    fabric_idx: int = Field(ge=0)
    color_idx: Optional[int] = Field(default=None, ge=0)
    style_type: str = Field(min_length=1)
    fabric_yards: float = Field(gt=0)
    yard_price: float = Field(ge=0)
    stitch_price: float = Field(ge=0)
    tailor_notes: Optional[str] = None
    measurement_id: Optional[str] = None

    @field_validator("tailor_id", "design_id", "style_type")
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class ShippingAddress(BaseModel):
    street_address: str
    city: str
    state: str
    zip_code: str
    country: Optional[str] = None

    @field_validator("street_address", "city", "state", "zip_code")
    def required(cls, v: str) -> str:
        if not (v or "").strip():
            raise ValueError("is required")
        return v.strip()


class CheckoutRequest(BaseModel):
    shipping_address: ShippingAddress
