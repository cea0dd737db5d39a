"""
Module 'payments' (feature-first): point d'entrée public.
Réunit logique checkout, metadata Stripe, client Stripe et services (checkout + webhook).
"""

from .checkout import to_minor_units, format_minor_units, to_line_items, make_metadata
from .metadata import MetadataError, extract_metadata, extract_completed_checkout
from .stripe_client import require_stripe, create_session, get_session, verify_event
from .service import initiate_checkout, handle_webhook, record_completed_checkout, confirm_checkout_session

__all__ = [
    # checkout
    "to_minor_units",
    "format_minor_units",
    "to_line_items",
    "make_metadata",
    # metadata
    "MetadataError",
    "extract_metadata",
    "extract_completed_checkout",
    # stripe
    "require_stripe",
    "create_session",
    "get_session",
    "verify_event",
    # services
    "initiate_checkout",
    "handle_webhook",
    "record_completed_checkout",
    "confirm_checkout_session",
]
