"""
Module 'orders' (feature-first): point d'entrée public du reporting et de la persistance des commandes.
"""

from .repository import (
    as_ref,
    insert_order,
    new_order,
    get_order_by_payment_id,
    event_orders_pipeline,
    buyer_orders_pipeline,
)
from .service import list_orders_for_event, list_orders_for_buyer, detach_buyer_from_orders

__all__ = [
    # repository
    "as_ref",
    "insert_order",
    "new_order",
    "get_order_by_payment_id",
    "event_orders_pipeline",
    "buyer_orders_pipeline",
    # services
    "list_orders_for_event",
    "list_orders_for_buyer",
    "detach_buyer_from_orders",
]
