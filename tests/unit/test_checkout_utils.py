import pytest

from evently.models.checkout import CheckoutIntent
from evently.payments import checkout


def _intent(**overrides):
    data = {"eventId": "E1", "eventTitle": "Concert", "price": "25", "isFree": False, "buyerId": "U1"}
    data.update(overrides)
    return CheckoutIntent.model_validate(data)


@pytest.mark.parametrize(
    "price, expected",
    [
        ("25", 2500),
        ("25.00", 2500),
        ("19.99", 1999),
        ("0.005", 1),       # demi-centime arrondi vers le haut
        ("19.995", 2000),
        ("0", 0),
    ],
)
def test_to_minor_units_rounds_to_cents(price, expected):
    assert checkout.to_minor_units(price, is_free=False) == expected


def test_to_minor_units_free_event_ignores_price():
    assert checkout.to_minor_units(None, is_free=True) == 0
    assert checkout.to_minor_units("99.99", is_free=True) == 0


@pytest.mark.parametrize("price", ["abc", "-1", "NaN", "Infinity", None, ""])
def test_to_minor_units_rejects_invalid_price(price):
    with pytest.raises(ValueError):
        checkout.to_minor_units(price, is_free=False)


def test_format_minor_units():
    assert checkout.format_minor_units(2500) == "25.00"
    assert checkout.format_minor_units(1999) == "19.99"
    assert checkout.format_minor_units(0) == "0.00"
    assert checkout.format_minor_units(None) == "0.00"


def test_to_line_items_single_line_quantity_one():
    items = checkout.to_line_items(_intent(), "usd")
    assert len(items) == 1
    line = items[0]
    assert line["quantity"] == 1
    assert line["price_data"]["currency"] == "usd"
    assert line["price_data"]["unit_amount"] == 2500
    assert line["price_data"]["product_data"]["name"] == "Concert"


def test_to_line_items_default_product_name():
    items = checkout.to_line_items(_intent(eventTitle=""), "eur")
    assert items[0]["price_data"]["product_data"]["name"] == "Événement"


def test_make_metadata_carries_event_and_buyer():
    assert checkout.make_metadata(_intent()) == {"eventId": "E1", "buyerId": "U1"}
