"""
Module 'payments' (feature-first): point d'entrée public.
Réunit calcul de prix, metadata Stripe, client Stripe et service de checkout.
"""

from .pricing import item_amount, to_minor_units, to_major_units, item_description, price_bag_items, to_line_items
from .metadata import CheckoutIntent, make_metadata, extract_intent
from .stripe_client import require_stripe, create_session, get_session, parse_event

__all__ = [
    # pricing
    "item_amount",
    "to_minor_units",
    "to_major_units",
    "item_description",
    "price_bag_items",
    "to_line_items",
    # metadata
    "CheckoutIntent",
    "make_metadata",
    "extract_intent",
    # stripe
    "require_stripe",
    "create_session",
    "get_session",
    "parse_event",
]
