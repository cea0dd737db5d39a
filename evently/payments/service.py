"""
Cas d'usage 'payments': orchestre checkout, stripe_client, metadata et repository orders.

Webhook: RECEIVED -> SIGNATURE_VERIFIED -> (EVENT_RECOGNIZED | EVENT_IGNORED) -> ORDER_PERSISTED | REJECTED
Chaque opération renvoie un résultat explicite (ServiceResult / WebhookResult).
"""
import logging
from typing import Optional

import stripe
from pymongo.errors import PyMongoError
from starlette.concurrency import run_in_threadpool

from evently import config
from evently.infra.mongo_client import MongoStore
from evently.models.checkout import CheckoutIntent, CompletedCheckout
from evently.models.results import ErrorKind, ServiceResult, WebhookResult
from evently.orders import repository as orders_repo
from . import checkout
from . import stripe_client
from . import metadata as meta

logger = logging.getLogger(__name__)

CHECKOUT_COMPLETED = "checkout.session.completed"


async def initiate_checkout(intent: CheckoutIntent) -> ServiceResult:
    """
    Crée la session Stripe Checkout pour une intention d'achat.
    - Montant: 0 si gratuit, sinon round(price × 100) en unités mineures
    - Metadata {eventId, buyerId} pour relier la notification future
    - Aucun effet en base: rien à compenser en cas d'échec
    - Appel Stripe (HTTP bloquant) exécuté dans le threadpool: la boucle reste libre
    Retour: ServiceResult.ok(url de la page de paiement) ou UPSTREAM/VALIDATION.
    """
    try:
        line_items = checkout.to_line_items(intent, config.CHECKOUT_CURRENCY)
    except ValueError as e:
        logger.warning("payments.initiate_checkout invalid intent event_id=%s: %s", intent.event_id, e)
        return ServiceResult.fail(ErrorKind.VALIDATION, str(e))

    try:
        session = await run_in_threadpool(
            stripe_client.create_session,
            line_items=line_items,
            mode="payment",
            success_url=config.checkout_success_url(),
            cancel_url=config.checkout_cancel_url(),
            metadata=checkout.make_metadata(intent),
        )
    except stripe.StripeError as e:
        logger.exception("payments.initiate_checkout gateway error event_id=%s buyer_id=%s", intent.event_id, intent.buyer_id)
        return ServiceResult.fail(ErrorKind.UPSTREAM, f"Erreur passerelle de paiement: {getattr(e, 'user_message', None) or e}")

    url = getattr(session, "url", None)
    if not url:
        logger.error("payments.initiate_checkout session sans url id=%s", getattr(session, "id", None))
        return ServiceResult.fail(ErrorKind.UPSTREAM, "Session Stripe invalide")
    logger.info("payments.initiate_checkout session=%s event_id=%s buyer_id=%s", getattr(session, "id", None), intent.event_id, intent.buyer_id)
    return ServiceResult.ok(url)


async def record_completed_checkout(store: MongoStore, completed: CompletedCheckout) -> WebhookResult:
    """
    Persiste la commande d'un paiement confirmé (un seul insert).
    - stripeId unique: une relivraison renvoie DUPLICATE avec la commande existante
    - store indisponible: FAILED (UPSTREAM)
    """
    order = orders_repo.new_order(
        payment_id=completed.payment_id,
        event_id=completed.metadata.event_id,
        buyer_id=completed.metadata.buyer_id,
        total_amount=checkout.format_minor_units(completed.amount_total),
    )
    try:
        saved, created = await orders_repo.insert_order(store, order)
    except (PyMongoError, config.ConfigurationError) as e:
        logger.exception("payments.record_completed_checkout store error stripe_id=%s", completed.payment_id)
        return WebhookResult.failed(ErrorKind.UPSTREAM, f"Store indisponible: {e}")

    if not created:
        logger.info("payments.webhook duplicate stripe_id=%s order_id=%s", completed.payment_id, saved.id)
        return WebhookResult.duplicate(saved)
    logger.info(
        "payments.webhook created order_id=%s stripe_id=%s event_id=%s buyer_id=%s total=%s",
        saved.id, saved.external_payment_id, saved.event_ref, saved.buyer_ref, saved.total_amount,
    )
    return WebhookResult.created(saved)


async def handle_webhook(store: MongoStore, payload: bytes, signature: Optional[str]) -> WebhookResult:
    """
    Traite une notification Stripe brute.
    - signature absente/invalide ou corps illisible: REJECTED (400), rien n'est écrit
    - type autre que checkout.session.completed: IGNORED (200)
    - metadata incomplète: REJECTED (400) plutôt qu'une commande aux références vides
    """
    try:
        event = stripe_client.verify_event(payload, signature)
    except stripe_client.SignatureError as e:
        logger.warning("payments.webhook signature rejected: %s", e)
        return WebhookResult.rejected(ErrorKind.SIGNATURE, "Signature Stripe invalide")
    except stripe_client.PayloadError as e:
        logger.warning("payments.webhook payload rejected: %s", e)
        return WebhookResult.rejected(ErrorKind.MALFORMED_PAYLOAD, "Payload webhook invalide")

    event_type = event.get("type")
    if event_type != CHECKOUT_COMPLETED:
        logger.info("payments.webhook ignored type=%s id=%s", event_type, event.get("id"))
        return WebhookResult.ignored(event_type)

    try:
        completed = meta.extract_metadata(event)
    except meta.MetadataError as e:
        logger.warning("payments.webhook rejected event_id=%s: %s", event.get("id"), e)
        return WebhookResult.rejected(ErrorKind.MALFORMED_PAYLOAD, str(e))

    return await record_completed_checkout(store, completed)


async def confirm_checkout_session(store: MongoStore, session_id: str) -> WebhookResult:
    """
    Alternative sans webhook: relit la session Stripe et enregistre la commande si payée.
    Même chemin idempotent que le webhook (stripeId unique).
    """
    session_id = (session_id or "").strip()
    if not session_id:
        return WebhookResult.rejected(ErrorKind.VALIDATION, "session_id manquant")
    try:
        session = await run_in_threadpool(stripe_client.get_session, session_id)
    except stripe.StripeError as e:
        logger.exception("payments.confirm_checkout_session gateway error session_id=%s", session_id)
        return WebhookResult.failed(ErrorKind.UPSTREAM, f"Erreur passerelle de paiement: {e}")

    payment_status = session.get("payment_status") or ""
    if payment_status != "paid":
        return WebhookResult.rejected(ErrorKind.VALIDATION, f"Paiement non confirmé (payment_status={payment_status})")
    try:
        completed = meta.extract_completed_checkout(session)
    except meta.MetadataError as e:
        logger.warning("payments.confirm_checkout_session rejected session_id=%s: %s", session_id, e)
        return WebhookResult.rejected(ErrorKind.MALFORMED_PAYLOAD, str(e))
    return await record_completed_checkout(store, completed)
