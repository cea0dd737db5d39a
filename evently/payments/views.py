import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError
from starlette.status import HTTP_303_SEE_OTHER

from evently.infra.mongo_client import MongoStore, get_store
from evently.models.checkout import CheckoutIntent
from evently.models.results import ErrorKind
from evently.payments import service as payments_service
from evently.payments.stripe_client import SIGNATURE_HEADER

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])


# module evently.payments.views
@router.post("/checkout")
async def create_checkout_session(request: Request):
    """
    Crée une session Checkout Stripe pour un événement et redirige vers la page de paiement.
    - Entrée JSON: {"eventId", "eventTitle", "price", "isFree", "buyerId"}
    - 303 vers l'URL Stripe; 400 si intention invalide; 502 si Stripe échoue
    """
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Corps JSON invalide")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Corps JSON invalide")

    try:
        intent = CheckoutIntent.model_validate(body)
    except ValidationError as e:
        logger.warning("payments.checkout invalid intent: %s", e.errors())
        raise HTTPException(status_code=400, detail="Intention d'achat invalide")

    result = await payments_service.initiate_checkout(intent)
    if not result.success:
        status = 400 if result.error_kind == ErrorKind.VALIDATION else 502
        raise HTTPException(status_code=status, detail=result.error.message)
    return RedirectResponse(url=result.value, status_code=HTTP_303_SEE_OTHER)


@router.post("/webhook", include_in_schema=False)
async def webhook_stripe(request: Request, store: MongoStore = Depends(get_store)):
    """
    Webhook Stripe (Checkout): consomme checkout.session.completed pour créer la commande.
    - Corps brut conservé: la signature porte sur les octets exacts
    - 200: commande créée, doublon acquitté ou type ignoré
    - 400: signature absente/invalide ou payload malformé
    - 503: store indisponible (Stripe relivrera)
    """
    payload = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)
    result = await payments_service.handle_webhook(store, payload, signature)
    return JSONResponse(status_code=result.http_status, content=result.to_response())


@router.get("/confirm")
async def confirm_checkout(session_id: str, store: MongoStore = Depends(get_store)):
    """
    Alternative sans webhook: confirme la session Stripe et enregistre la commande.
    - 400 si paiement non confirmé ou metadata incomplète
    """
    result = await payments_service.confirm_checkout_session(store, session_id)
    return JSONResponse(status_code=result.http_status, content=result.to_response())
