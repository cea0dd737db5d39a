from datetime import datetime, timezone

import pytest
from bson import ObjectId

from evently.orders import repository


def test_as_ref_object_id_for_hex_ids():
    oid = ObjectId()
    assert repository.as_ref(str(oid)) == oid
    assert repository.as_ref(oid) is oid


def test_as_ref_keeps_other_ids():
    assert repository.as_ref("E1") == "E1"
    assert repository.as_ref(None) is None


def test_event_pipeline_without_search_has_no_buyer_filter():
    pipeline = repository.event_orders_pipeline("E1")
    assert pipeline[0] == {"$match": {"event": "E1"}}
    assert pipeline[-1] == {"$sort": {"createdAt": -1}}
    assert not any("$match" in stage and "buyer" in stage["$match"] for stage in pipeline)


def test_event_pipeline_escapes_search():
    pipeline = repository.event_orders_pipeline("E1", "a.b(")
    buyer_filter = [s["$match"]["buyer"] for s in pipeline if "$match" in s and "buyer" in s["$match"]]
    assert buyer_filter == [{"$regex": r"a\.b\(", "$options": "i"}]


def test_buyer_pipeline_paginates_before_joins():
    pipeline = repository.buyer_orders_pipeline("U1", skip=3, limit=3)
    stages = [next(iter(s)) for s in pipeline]
    assert stages[:4] == ["$match", "$sort", "$skip", "$limit"]
    assert pipeline[2] == {"$skip": 3}
    assert pipeline[3] == {"$limit": 3}


@pytest.mark.asyncio
async def test_insert_order_duplicate_returns_existing(store, db):
    first = repository.new_order(payment_id="cs_dup", event_id="E1", buyer_id="U1", total_amount="25.00")
    saved, created = await repository.insert_order(store, first)
    assert created
    assert saved.id

    again = repository.new_order(payment_id="cs_dup", event_id="E1", buyer_id="U1", total_amount="25.00")
    existing, created = await repository.insert_order(store, again)
    assert not created
    assert existing.id == saved.id
    assert db["orders"].count_documents({"stripeId": "cs_dup"}) == 1


@pytest.mark.asyncio
async def test_get_order_by_payment_id(store, seeded):
    order = await repository.get_order_by_payment_id(store, "cs_b")
    assert order.buyer_ref == "U2"
    assert order.event_ref == "E1"
    assert await repository.get_order_by_payment_id(store, "cs_missing") is None


def test_new_order_is_timestamped_now():
    before = datetime.now(timezone.utc)
    order = repository.new_order(payment_id="cs_1", event_id="E1", buyer_id="U1", total_amount="0.00")
    assert order.created_at >= before
    assert order.id is None
