import datetime as dt
from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.utils import timezone

from apps.catalog.models import DiscountCode
from apps.orders.pricing import PricedLine, compute_quote, discount_amount_cents, find_applicable_discount


def line(price, qty=1, surcharge=0):
    return PricedLine(product_id=None, name="x", unit_price_cents=price, quantity=qty, addition_unit_cents=surcharge)


def test_line_total_includes_addition_surcharge():
    assert line(850, qty=2, surcharge=150).line_total_cents == 2000


@pytest.mark.django_db
def test_takeaway_has_no_delivery_fee():
    q = compute_quote([line(850, 2)], is_delivery=False, delivery_fee_cents=250, min_order_delivery_cents=1500)
    assert (q.subtotal_cents, q.delivery_fee_cents, q.discount_cents, q.total_cents) == (1700, 0, 0, 1700)


@pytest.mark.django_db
def test_delivery_adds_flat_fee():
    q = compute_quote([line(850, 2)], is_delivery=True, delivery_fee_cents=250, min_order_delivery_cents=1500)
    assert q.total_cents == 1950


@pytest.mark.django_db
def test_delivery_below_minimum_is_rejected():
    with pytest.raises(ValidationError) as exc:
        compute_quote([line(850)], is_delivery=True, delivery_fee_cents=250, min_order_delivery_cents=1500)
    assert exc.value.code == "below_delivery_minimum"
    assert "€15.00" in exc.value.messages[0]


@pytest.mark.django_db
def test_empty_subtotal_is_rejected():
    with pytest.raises(ValidationError) as exc:
        compute_quote([line(0)], is_delivery=False)
    assert exc.value.code == "invalid_total"


@pytest.mark.django_db
def test_percentage_discount_rounds_half_up(make_discount):
    make_discount(code="DIECI", value="10")
    q = compute_quote([line(1005)], is_delivery=False, discount_code="dieci")
    assert q.discount_cents == 101
    assert q.discount_code == "DIECI"
    assert q.total_cents == 904


@pytest.mark.django_db
def test_fixed_discount_value_is_in_euros(make_discount):
    discount = make_discount(code="CINQUE", discount_type=DiscountCode.Type.FIXED, value="5.00")
    assert discount_amount_cents(discount, 2000) == 500
    q = compute_quote([line(2000)], is_delivery=False, discount_code="cinque")
    assert (q.discount_cents, q.total_cents) == (500, 1500)


@pytest.mark.django_db
def test_fixed_discount_rounds_half_up_to_the_cent(make_discount):
    discount = make_discount(code="SPICCI", discount_type=DiscountCode.Type.FIXED, value="1.25")
    assert discount_amount_cents(discount, 2000) == 125


@pytest.mark.django_db
def test_percentage_above_hundred_fails_validation():
    discount = DiscountCode(code="TROPPO", discount_type=DiscountCode.Type.PERCENTAGE, value=Decimal("150"))
    with pytest.raises(ValidationError) as exc:
        discount.full_clean()
    assert "value" in exc.value.message_dict

    DiscountCode(code="MAXI", discount_type=DiscountCode.Type.FIXED, value=Decimal("150")).full_clean()


@pytest.mark.django_db
def test_fixed_discount_is_clamped_to_subtotal(make_discount):
    discount = make_discount(code="MAXI", discount_type=DiscountCode.Type.FIXED, value="50.00")
    assert discount_amount_cents(discount, 1200) == 1200


@pytest.mark.django_db
def test_discount_wiping_out_total_is_rejected(make_discount):
    make_discount(code="GRATIS", discount_type=DiscountCode.Type.FIXED, value="50.00")
    with pytest.raises(ValidationError) as exc:
        compute_quote([line(1200)], is_delivery=False, discount_code="GRATIS")
    assert exc.value.code == "invalid_total"


@pytest.mark.django_db
@pytest.mark.parametrize(
    "kwargs",
    [
        {"is_active": False},
        {"valid_until": timezone.now() - dt.timedelta(days=1)},
        {"valid_from": timezone.now() + dt.timedelta(days=1)},
        {"min_order_cents": 5000},
    ],
)
def test_stale_discount_falls_back_to_no_discount(make_discount, kwargs):
    make_discount(code="VECCHIO", **kwargs)
    q = compute_quote([line(2000)], is_delivery=False, discount_code="VECCHIO")
    assert q.discount_cents == 0
    assert q.discount_code is None
    assert q.total_cents == 2000


@pytest.mark.django_db
def test_unknown_code_is_ignored():
    assert find_applicable_discount("NONESISTE", 2000) is None
    assert find_applicable_discount("", 2000) is None


@pytest.mark.django_db
def test_total_identity_holds_across_carts(make_discount):
    make_discount(code="OTTO", value="8")
    carts = [
        [line(350)],
        [line(850, 3, 150), line(250, 2)],
        [line(1999, 1, 100), line(1, 99)],
    ]
    for lines in carts:
        for is_delivery in (True, False):
            q = compute_quote(
                lines, is_delivery=is_delivery, delivery_fee_cents=250, min_order_delivery_cents=0, discount_code="OTTO"
            )
            assert q.total_cents == q.subtotal_cents + q.delivery_fee_cents - q.discount_cents
            assert q.total_cents > 0
            assert q.discount_cents <= q.subtotal_cents
