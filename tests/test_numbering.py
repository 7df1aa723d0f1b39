import json

import pytest
from django.db import IntegrityError

from apps.orders import services
from apps.orders.models import Order
from apps.orders.numbering import (
    format_order_number,
    last_order_number,
    next_order_number,
    normalize_order_number,
    parse_sequence,
)


def test_first_number_when_no_previous_order():
    assert next_order_number(None) == "AF000001"


def test_sequential_numbers_increase_by_one():
    numbers = []
    last = None
    for _ in range(12):
        last = next_order_number(last)
        numbers.append(last)
    assert [parse_sequence(n) for n in numbers] == list(range(1, 13))
    assert all(n.startswith("AF") and len(n) == 8 for n in numbers)


@pytest.mark.parametrize("last", ["", "XYZ", "AF", "AFabc", "af000010", "AF-000010"])
def test_malformed_last_number_restarts_at_one(last):
    assert next_order_number(last) == "AF000001"


def test_sequence_can_outgrow_width():
    assert next_order_number("AF999999") == "AF1000000"


def test_prefix_and_width_from_settings(settings):
    settings.ORDER_NUMBER_PREFIX = "ZZ"
    settings.ORDER_NUMBER_WIDTH = 4
    assert format_order_number(7) == "ZZ0007"
    assert next_order_number("ZZ0041") == "ZZ0042"


@pytest.mark.parametrize(
    "raw,expected",
    [
        (" #af 000012 ", "AF000012"),
        ("%23AF000012", "AF000012"),
        (["af000003", "ignored"], "AF000003"),
        (12, "12"),
        (None, ""),
        ([], ""),
    ],
)
def test_normalize_order_number(raw, expected):
    assert normalize_order_number(raw) == expected


@pytest.mark.django_db
def test_last_order_number_uses_most_recent():
    assert last_order_number() is None
    for number in ("AF000001", "AF000002"):
        Order.objects.create(
            order_number=number,
            customer_name="Test",
            customer_phone="+393123456789",
            order_type="takeaway",
            subtotal_cents=100,
            total_cents=100,
        )
    assert last_order_number() == "AF000002"


def _taken(number):
    return Order.objects.create(
        order_number=number,
        customer_name="Test",
        customer_phone="+393123456789",
        order_type="takeaway",
        subtotal_cents=100,
        total_cents=100,
    )


@pytest.mark.django_db
def test_colliding_number_is_retried_with_a_fresh_read(monkeypatch, store, order_payload):
    _taken("AF000001")
    reads = []

    def stale_then_fresh():
        reads.append(len(reads))
        return None if len(reads) == 1 else last_order_number()

    monkeypatch.setattr(services, "last_order_number", stale_then_fresh)
    order = services.place_order(order_payload())

    assert order.order_number == "AF000002"
    assert len(reads) == 2
    assert Order.objects.count() == 2
    assert order.items.count() == 1
    assert list(order.status_changes.values_list("status", flat=True)) == ["pending"]


@pytest.mark.django_db
def test_retries_give_up_after_max_attempts(monkeypatch, settings, store, order_payload):
    settings.ORDER_NUMBER_MAX_ATTEMPTS = 3
    _taken("AF000001")
    reads = []

    def always_stale():
        reads.append(1)

    monkeypatch.setattr(services, "last_order_number", always_stale)
    with pytest.raises(IntegrityError):
        services.place_order(order_payload())

    assert len(reads) == 3
    assert Order.objects.count() == 1


@pytest.mark.django_db
def test_exhausted_retries_surface_as_server_error(client, monkeypatch, settings, store, order_payload, captcha_ok):
    settings.ORDER_NUMBER_MAX_ATTEMPTS = 2
    _taken("AF000001")
    monkeypatch.setattr(services, "last_order_number", lambda: None)

    r = client.post(
        "/api/orders",
        data=json.dumps({"captcha_token": "ok", "order": order_payload()}),
        content_type="application/json",
    )

    assert r.status_code == 500
    assert r.json()["error"] == "Errore server"
    assert Order.objects.count() == 1
