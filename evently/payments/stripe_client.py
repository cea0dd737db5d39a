"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
"""
import logging
from typing import Any, Dict, List, Optional

import stripe

from evently import config

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "stripe-signature"


class SignatureError(ValueError):
    """En-tête Stripe-Signature absent ou ne correspondant pas au corps reçu."""


class PayloadError(ValueError):
    """Corps de notification signé mais illisible (pas un objet JSON)."""


# module evently.payments.stripe_client
def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l'emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY (lu à l'appel).
    - Soulève ConfigurationError si la clé manque.
    """
    if not config.STRIPE_SECRET_KEY:
        raise config.ConfigurationError("STRIPE_SECRET_KEY manquant")
    stripe.api_key = config.STRIPE_SECRET_KEY
    return stripe


def create_session(
    *,
    line_items: List[Dict[str, Any]],
    mode: str,
    success_url: str,
    cancel_url: str,
    metadata: Dict[str, Any],
):
    """
    Crée une session Stripe Checkout.
    - line_items: lignes Stripe (price_data)
    - metadata: {"eventId": "...", "buyerId": "..."}
    Retour: objet session Stripe (attributs id, url).
    """
    require_stripe()
    return stripe.checkout.Session.create(
        line_items=line_items,
        mode=mode,
        success_url=success_url,
        cancel_url=cancel_url,
        metadata=metadata,
    )


def get_session(session_id: str) -> Dict[str, Any]:
    """
    Récupère une session Stripe Checkout par son identifiant.
    Retour: dict session incluant "id", "payment_status", "amount_total", "metadata".
    """
    require_stripe()
    session = stripe.checkout.Session.retrieve(session_id)
    return session.to_dict() if hasattr(session, "to_dict") else dict(session)


def verify_event(payload: bytes, sig_header: Optional[str], secret: Optional[str] = None) -> Dict[str, Any]:
    """
    Valide la signature d'une notification Stripe et construit l'événement (Webhook.construct_event).
    - payload: octets bruts du corps (la signature porte sur ces octets exacts)
    - sig_header: valeur de l'en-tête Stripe-Signature
    - SignatureError si en-tête absent ou signature invalide, PayloadError si le corps est illisible.
    Retour: l'événement sous forme de dict.
    """
    secret = secret if secret is not None else config.STRIPE_WEBHOOK_SECRET
    if not secret:
        raise config.ConfigurationError("STRIPE_WEBHOOK_SECRET manquant")
    if not sig_header:
        raise SignatureError("En-tête Stripe-Signature manquant")
    try:
        event = stripe.Webhook.construct_event(payload, sig_header, secret)
    except stripe.SignatureVerificationError as e:
        raise SignatureError(f"Signature Stripe invalide: {e}") from e
    except ValueError as e:
        raise PayloadError("Payload webhook invalide") from e
    return event.to_dict()
