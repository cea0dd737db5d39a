"""
Logique checkout pure (pas de Stripe, pas de DB).
Conversions montant décimal <-> unités mineures (centimes) et construction de la session.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Optional

from evently.models.checkout import CheckoutIntent, CheckoutMetadata

CENTS = Decimal(100)


# module evently.payments.checkout
def to_minor_units(price: Optional[str], is_free: bool) -> int:
    """
    Montant Stripe en unités mineures.
    - Événement gratuit: 0
    - Sinon: round(price × 100), arrondi au plus proche (demi vers le haut)
    - Soulève ValueError si le prix n'est pas un décimal positif ou nul.
    """
    if is_free:
        return 0
    try:
        amount = Decimal(str(price).strip())
    except (InvalidOperation, TypeError):
        raise ValueError(f"Prix invalide: {price!r}")
    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Prix invalide: {price!r}")
    return int((amount * CENTS).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_minor_units(amount: Optional[int]) -> str:
    """2500 -> '25.00' (montant facturé reconverti en chaîne décimale)."""
    return f"{(Decimal(amount or 0) / CENTS).quantize(Decimal('0.01'))}"


def to_line_items(intent: CheckoutIntent, currency: str) -> List[Dict[str, Any]]:
    """Une ligne Stripe 'price_data' (quantité 1) pour l'événement."""
    return [
        {
            "quantity": 1,
            "price_data": {
                "currency": currency,
                "unit_amount": to_minor_units(intent.price, intent.is_free),
                "product_data": {"name": intent.event_title or "Événement"},
            },
        }
    ]


def make_metadata(intent: CheckoutIntent) -> Dict[str, str]:
    """
    Métadonnées attachées à la session: permettent de relier la notification
    à l'événement et à l'acheteur sans lecture en base à la création.
    """
    return CheckoutMetadata(event_id=intent.event_id, buyer_id=intent.buyer_id).to_stripe()
