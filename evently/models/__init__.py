# Façade "M" (Models): types métier partagés par payments et orders.
from .checkout import CheckoutIntent, CheckoutMetadata, CompletedCheckout
from .orders import (
    Order,
    OrderReportRow,
    OrganizerSummary,
    EventSummary,
    BuyerOrderRow,
    BuyerOrdersPage,
)
from .results import ErrorKind, ServiceError, ServiceResult, WebhookStatus, WebhookResult

__all__ = [
    # checkout
    "CheckoutIntent",
    "CheckoutMetadata",
    "CompletedCheckout",
    # orders
    "Order",
    "OrderReportRow",
    "OrganizerSummary",
    "EventSummary",
    "BuyerOrderRow",
    "BuyerOrdersPage",
    # résultats
    "ErrorKind",
    "ServiceError",
    "ServiceResult",
    "WebhookStatus",
    "WebhookResult",
]
