"""
Accès aux données pour la feature 'orders' (collection orders + jointures events/users).
Toutes les fonctions reçoivent le MongoStore en premier argument.
Les erreurs du store (PyMongoError) remontent au service, sauf le doublon de stripeId.
"""
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from bson import ObjectId
from pymongo.errors import DuplicateKeyError

from evently.infra.mongo_client import EVENTS, ORDERS, USERS, MongoStore
from evently.models.orders import (
    BuyerOrderRow,
    EventSummary,
    Order,
    OrderReportRow,
    OrganizerSummary,
)

logger = logging.getLogger(__name__)


# module evently.orders.repository
def as_ref(value: Optional[str]) -> Any:
    """
    Convertit un identifiant texte en référence stockable.
    - 24 caractères hexadécimaux: ObjectId (références créées par l'application).
    - Sinon: conservé tel quel (ids externes ou de test).
    """
    if value is None:
        return None
    if isinstance(value, ObjectId):
        return value
    text = str(value)
    return ObjectId(text) if ObjectId.is_valid(text) else text


def _ref_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


def _to_document(order: Order) -> Dict[str, Any]:
    return {
        "stripeId": order.external_payment_id,
        "event": as_ref(order.event_ref),
        "buyer": as_ref(order.buyer_ref),
        "totalAmount": order.total_amount,
        "createdAt": order.created_at,
    }


def _from_document(doc: Dict[str, Any]) -> Order:
    return Order(
        id=_ref_str(doc.get("_id")),
        external_payment_id=doc["stripeId"],
        event_ref=_ref_str(doc.get("event")),
        buyer_ref=_ref_str(doc.get("buyer")),
        total_amount=doc.get("totalAmount") or "0.00",
        created_at=doc["createdAt"],
    )


async def get_order_by_payment_id(store: MongoStore, payment_id: str) -> Optional[Order]:
    orders = await store.collection(ORDERS)
    doc = await orders.find_one({"stripeId": payment_id})
    return _from_document(doc) if doc else None


async def insert_order(store: MongoStore, order: Order) -> Tuple[Order, bool]:
    """
    Insère une commande (un insert_one atomique).
    Retour: (commande, created). created=False si le stripeId existait déjà:
    l'index unique a refusé le doublon et la commande existante est renvoyée.
    """
    orders = await store.collection(ORDERS)
    doc = _to_document(order)
    try:
        res = await orders.insert_one(doc)
    except DuplicateKeyError:
        logger.info("orders.repository.insert_order duplicate stripeId=%s", order.external_payment_id)
        existing = await get_order_by_payment_id(store, order.external_payment_id)
        return (existing or order), False
    return order.model_copy(update={"id": str(res.inserted_id)}), True


def event_orders_pipeline(event_id: str, search_string: str = "") -> List[Dict[str, Any]]:
    """
    Pipeline 'commandes d'un événement'.
    - filtre sur la référence event de la commande (tolère un événement supprimé)
    - jointures acheteur et événement, conservées même si la référence pend
    - nom acheteur = firstName + ' ' + lastName, recherche insensible à la casse
    """
    pipeline: List[Dict[str, Any]] = [
        {"$match": {"event": as_ref(event_id)}},
        {"$lookup": {"from": USERS, "localField": "buyer", "foreignField": "_id", "as": "buyerDoc"}},
        {"$unwind": {"path": "$buyerDoc", "preserveNullAndEmptyArrays": True}},
        {"$lookup": {"from": EVENTS, "localField": "event", "foreignField": "_id", "as": "eventDoc"}},
        {"$unwind": {"path": "$eventDoc", "preserveNullAndEmptyArrays": True}},
        {
            "$project": {
                "_id": 1,
                "totalAmount": 1,
                "createdAt": 1,
                "eventTitle": "$eventDoc.title",
                "eventId": "$event",
                "buyer": {
                    "$concat": [
                        {"$ifNull": ["$buyerDoc.firstName", ""]},
                        " ",
                        {"$ifNull": ["$buyerDoc.lastName", ""]},
                    ]
                },
            }
        },
    ]
    if search_string:
        # Saisie utilisateur: échappée pour rester une recherche de sous-chaîne
        pipeline.append({"$match": {"buyer": {"$regex": re.escape(search_string), "$options": "i"}}})
    pipeline.append({"$sort": {"createdAt": -1}})
    return pipeline


def buyer_orders_pipeline(buyer_id: str, skip: int, limit: int) -> List[Dict[str, Any]]:
    """Pipeline 'commandes d'un acheteur': page triée puis événement et organisateur joints."""
    return [
        {"$match": {"buyer": as_ref(buyer_id)}},
        {"$sort": {"createdAt": -1}},
        {"$skip": skip},
        {"$limit": limit},
        {"$lookup": {"from": EVENTS, "localField": "event", "foreignField": "_id", "as": "eventDoc"}},
        {"$unwind": {"path": "$eventDoc", "preserveNullAndEmptyArrays": True}},
        {"$lookup": {"from": USERS, "localField": "eventDoc.organizer", "foreignField": "_id", "as": "organizerDoc"}},
        {"$unwind": {"path": "$organizerDoc", "preserveNullAndEmptyArrays": True}},
    ]


def _report_row(doc: Dict[str, Any]) -> OrderReportRow:
    buyer = (doc.get("buyer") or "").strip() or None
    return OrderReportRow(
        order_id=str(doc["_id"]),
        total_amount=doc.get("totalAmount") or "0.00",
        created_at=doc["createdAt"],
        event_id=_ref_str(doc.get("eventId")),
        event_title=doc.get("eventTitle"),
        buyer=buyer,
    )


def _organizer(doc: Optional[Dict[str, Any]]) -> Optional[OrganizerSummary]:
    if not doc:
        return None
    return OrganizerSummary(
        id=str(doc["_id"]),
        first_name=doc.get("firstName"),
        last_name=doc.get("lastName"),
    )


def _event_summary(doc: Optional[Dict[str, Any]], organizer: Optional[Dict[str, Any]]) -> Optional[EventSummary]:
    if not doc:
        return None
    price = doc.get("price")
    return EventSummary(
        id=str(doc["_id"]),
        title=doc.get("title"),
        price=None if price is None else str(price),
        is_free=doc.get("isFree"),
        start_date_time=doc.get("startDateTime"),
        end_date_time=doc.get("endDateTime"),
        category=_ref_str(doc.get("category")),
        organizer=_organizer(organizer),
    )


def _buyer_row(doc: Dict[str, Any]) -> BuyerOrderRow:
    return BuyerOrderRow(
        id=str(doc["_id"]),
        external_payment_id=doc["stripeId"],
        total_amount=doc.get("totalAmount") or "0.00",
        created_at=doc["createdAt"],
        buyer_ref=_ref_str(doc.get("buyer")),
        event=_event_summary(doc.get("eventDoc"), doc.get("organizerDoc")),
    )


async def aggregate_event_orders(store: MongoStore, event_id: str, search_string: str = "") -> List[OrderReportRow]:
    orders = await store.collection(ORDERS)
    cursor = await orders.aggregate(event_orders_pipeline(event_id, search_string))
    docs = await cursor.to_list(None)
    return [_report_row(d) for d in docs]


async def find_buyer_orders(store: MongoStore, buyer_id: str, skip: int, limit: int) -> List[BuyerOrderRow]:
    orders = await store.collection(ORDERS)
    cursor = await orders.aggregate(buyer_orders_pipeline(buyer_id, skip, limit))
    docs = await cursor.to_list(None)
    return [_buyer_row(d) for d in docs]


async def count_buyer_orders(store: MongoStore, buyer_id: str) -> int:
    orders = await store.collection(ORDERS)
    return await orders.count_documents({"buyer": as_ref(buyer_id)})


async def unset_buyer(store: MongoStore, buyer_id: str) -> int:
    """Retire la référence acheteur des commandes (suppression de compte): les commandes restent."""
    orders = await store.collection(ORDERS)
    res = await orders.update_many({"buyer": as_ref(buyer_id)}, {"$unset": {"buyer": ""}})
    return int(res.modified_count)


def new_order(*, payment_id: str, event_id: str, buyer_id: str, total_amount: str) -> Order:
    return Order(
        external_payment_id=payment_id,
        event_ref=event_id,
        buyer_ref=buyer_id,
        total_amount=total_amount,
        created_at=datetime.now(timezone.utc),
    )
