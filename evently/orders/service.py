"""
Cas d'usage 'orders' (reporting organisateur/acheteur).
- list_orders_for_event: commandes d'un événement, filtrables par nom d'acheteur.
- list_orders_for_buyer: commandes d'un acheteur, paginées, événement + organisateur joints.
- detach_buyer_from_orders: appelé par le cycle de vie utilisateur lors d'une suppression de compte.
Chaque opération renvoie un ServiceResult (jamais d'exception métier).
Un document mal formé dans events/users (collections tierces) donne UPSTREAM, comme un store injoignable.
"""
import logging
import math

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from evently.config import ConfigurationError
from evently.infra.mongo_client import MongoStore
from evently.models.orders import BuyerOrdersPage
from evently.models.results import ErrorKind, ServiceResult
from . import repository

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 3


async def list_orders_for_event(store: MongoStore, event_id: str, search_string: str = "") -> ServiceResult:
    """
    Lignes de reporting pour un événement.
    - event_id obligatoire (VALIDATION sinon)
    - search_string vide: toutes les commandes de l'événement
    - tri: createdAt décroissant
    """
    event_id = (event_id or "").strip()
    if not event_id:
        logger.warning("orders.list_orders_for_event rejected: event_id manquant")
        return ServiceResult.fail(ErrorKind.VALIDATION, "Event ID is required")
    try:
        rows = await repository.aggregate_event_orders(store, event_id, (search_string or "").strip())
    except (PyMongoError, ConfigurationError) as e:
        logger.exception("orders.list_orders_for_event failed event_id=%s", event_id)
        return ServiceResult.fail(ErrorKind.UPSTREAM, f"Store indisponible: {e}")
    except ValidationError as e:
        logger.exception("orders.list_orders_for_event document invalide event_id=%s", event_id)
        return ServiceResult.fail(ErrorKind.UPSTREAM, f"Document invalide: {e.error_count()} erreur(s)")
    return ServiceResult.ok(rows)


async def list_orders_for_buyer(store: MongoStore, buyer_id: str, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> ServiceResult:
    """
    Page de commandes d'un acheteur (les plus récentes d'abord).
    - skip = (page - 1) * limit
    - total_pages = ceil(count / limit), calculé sur le même filtre, indépendamment de la page
    - page au-delà de la dernière: data vide et total_pages correct (pas une erreur)
    """
    buyer_id = (buyer_id or "").strip()
    if not buyer_id:
        logger.warning("orders.list_orders_for_buyer rejected: buyer_id manquant")
        return ServiceResult.fail(ErrorKind.VALIDATION, "Buyer ID is required")
    try:
        page = int(page)
        limit = int(limit)
    except (TypeError, ValueError):
        logger.warning("orders.list_orders_for_buyer rejected page=%r limit=%r", page, limit)
        return ServiceResult.fail(ErrorKind.VALIDATION, "page et limit doivent être des entiers")
    if page < 1 or limit < 1:
        logger.warning("orders.list_orders_for_buyer rejected page=%s limit=%s", page, limit)
        return ServiceResult.fail(ErrorKind.VALIDATION, "page et limit doivent être >= 1")

    skip = (page - 1) * limit
    try:
        rows = await repository.find_buyer_orders(store, buyer_id, skip, limit)
        count = await repository.count_buyer_orders(store, buyer_id)
    except (PyMongoError, ConfigurationError) as e:
        logger.exception("orders.list_orders_for_buyer failed buyer_id=%s page=%s", buyer_id, page)
        return ServiceResult.fail(ErrorKind.UPSTREAM, f"Store indisponible: {e}")
    except ValidationError as e:
        logger.exception("orders.list_orders_for_buyer document invalide buyer_id=%s page=%s", buyer_id, page)
        return ServiceResult.fail(ErrorKind.UPSTREAM, f"Document invalide: {e.error_count()} erreur(s)")

    result = BuyerOrdersPage(data=rows, total_pages=math.ceil(count / limit), page=page, limit=limit)
    if result.out_of_range:
        logger.info("orders.list_orders_for_buyer page hors limites page=%s total_pages=%s", page, result.total_pages)
    return ServiceResult.ok(result)


async def detach_buyer_from_orders(store: MongoStore, buyer_id: str) -> ServiceResult:
    """Retire la référence acheteur de ses commandes; renvoie le nombre de commandes modifiées."""
    buyer_id = (buyer_id or "").strip()
    if not buyer_id:
        logger.warning("orders.detach_buyer_from_orders rejected: buyer_id manquant")
        return ServiceResult.fail(ErrorKind.VALIDATION, "Buyer ID is required")
    try:
        modified = await repository.unset_buyer(store, buyer_id)
    except (PyMongoError, ConfigurationError) as e:
        logger.exception("orders.detach_buyer_from_orders failed buyer_id=%s", buyer_id)
        return ServiceResult.fail(ErrorKind.UPSTREAM, f"Store indisponible: {e}")
    logger.info("orders.detach_buyer_from_orders buyer_id=%s modified=%s", buyer_id, modified)
    return ServiceResult.ok(modified)
