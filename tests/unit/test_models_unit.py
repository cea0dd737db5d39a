from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from evently.models import (
    BuyerOrdersPage,
    CheckoutIntent,
    CheckoutMetadata,
    CompletedCheckout,
    ErrorKind,
    Order,
    ServiceResult,
    WebhookResult,
    WebhookStatus,
)


def test_checkout_intent_accepts_camel_case_and_numeric_price():
    intent = CheckoutIntent.model_validate(
        {"eventId": "E1", "eventTitle": "Concert", "price": 25, "isFree": False, "buyerId": "U1"}
    )
    assert intent.event_id == "E1"
    assert intent.buyer_id == "U1"
    assert intent.price == "25"


def test_checkout_intent_free_event_without_price():
    intent = CheckoutIntent(event_id="E1", buyer_id="U1", is_free=True)
    assert intent.price is None


@pytest.mark.parametrize(
    "payload",
    [
        {"eventId": "E1", "price": "10"},                      # buyerId absent
        {"eventId": "  ", "buyerId": "U1", "price": "10"},     # eventId vide
        {"eventId": "E1", "buyerId": "U1"},                    # payant sans prix
        {"eventId": "E1", "buyerId": "U1", "price": "abc"},
        {"eventId": "E1", "buyerId": "U1", "price": "-5"},
    ],
)
def test_checkout_intent_rejects_invalid(payload):
    with pytest.raises(ValidationError):
        CheckoutIntent.model_validate(payload)


def test_checkout_metadata_requires_both_ids():
    with pytest.raises(ValidationError):
        CheckoutMetadata.model_validate({"eventId": "E1"})
    meta = CheckoutMetadata.model_validate({"eventId": "E1", "buyerId": "U1"})
    assert meta.to_stripe() == {"eventId": "E1", "buyerId": "U1"}


def test_completed_checkout_null_amount_is_zero():
    done = CompletedCheckout(payment_id="cs_1", amount_total=None, metadata={"eventId": "E1", "buyerId": "U1"})
    assert done.amount_total == 0


def test_completed_checkout_negative_amount_rejected():
    with pytest.raises(ValidationError):
        CompletedCheckout(payment_id="cs_1", amount_total=-1, metadata={"eventId": "E1", "buyerId": "U1"})


def test_order_public_shape_is_camel_case():
    order = Order(
        id="o1",
        external_payment_id="cs_1",
        event_ref="E1",
        buyer_ref="U1",
        total_amount="25.00",
        created_at=datetime(2024, 5, 1, tzinfo=timezone.utc),
    )
    public = order.to_public()
    assert public["externalPaymentId"] == "cs_1"
    assert public["eventRef"] == "E1"
    assert public["buyerRef"] == "U1"
    assert public["totalAmount"] == "25.00"
    assert "createdAt" in public


def test_order_rejects_negative_total():
    with pytest.raises(ValidationError):
        Order(external_payment_id="cs_1", total_amount="-1.00", created_at=datetime.now(timezone.utc))


def test_buyer_orders_page_out_of_range():
    assert BuyerOrdersPage(data=[], total_pages=2, page=3, limit=3).out_of_range
    assert not BuyerOrdersPage(data=[], total_pages=0, page=1, limit=3).out_of_range


def test_service_result_helpers():
    ok = ServiceResult.ok([1])
    assert ok.success and ok.value == [1] and ok.error_kind is None
    ko = ServiceResult.fail(ErrorKind.VALIDATION, "bad")
    assert not ko.success
    assert ko.error_kind == ErrorKind.VALIDATION
    assert ko.error.message == "bad"


def test_webhook_result_http_mapping():
    assert WebhookResult.ignored("payment_intent.created").http_status == 200
    assert WebhookResult.ignored("payment_intent.created").to_response() == {
        "status": "ignored",
        "type": "payment_intent.created",
    }
    rejected = WebhookResult.rejected(ErrorKind.SIGNATURE, "Signature Stripe invalide")
    assert rejected.status == WebhookStatus.REJECTED
    assert rejected.http_status == 400
    assert rejected.to_response() == {"detail": "Signature Stripe invalide"}
    assert WebhookResult.failed(ErrorKind.UPSTREAM, "down").http_status == 503
