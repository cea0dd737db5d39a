"""
Désérialisation des notifications Stripe (checkout.session.completed).
Les métadonnées non typées de Stripe deviennent un CheckoutMetadata validé.
"""
from typing import Any, Dict

from pydantic import ValidationError

from evently.models.checkout import CompletedCheckout


class MetadataError(ValueError):
    """Notification checkout.session.completed inexploitable (id, montant ou metadata manquants)."""


# module evently.payments.metadata
def session_from_event(event: Dict[str, Any]) -> Dict[str, Any]:
    """Retourne event.data.object (la session Checkout), {} si absent."""
    data = (event or {}).get("data") if isinstance(event, dict) else None
    obj = (data or {}).get("object") if isinstance(data, dict) else None
    return obj if isinstance(obj, dict) else {}


def extract_completed_checkout(session: Dict[str, Any]) -> CompletedCheckout:
    """
    Extrait (payment_id, amount_total, metadata{eventId, buyerId}) d'une session Stripe.
    - Échoue (MetadataError) si eventId ou buyerId manque: pas de commande orpheline.
    """
    try:
        return CompletedCheckout(
            payment_id=session.get("id"),
            amount_total=session.get("amount_total"),
            metadata=session.get("metadata") or {},
        )
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise MetadataError(f"Notification incomplète: {', '.join(fields)}") from e


def extract_metadata(event: Dict[str, Any]) -> CompletedCheckout:
    """Raccourci: extract_completed_checkout appliqué à event.data.object."""
    return extract_completed_checkout(session_from_event(event))
