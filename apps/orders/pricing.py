"""Line totals, delivery fee, discount resolution and order total.

All amounts are integer cents. Percentages round half-up to the cent.
"""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional

from django.core.exceptions import ValidationError
from django.utils import timezone

from apps.catalog.models import DiscountCode
from apps.common.money import eur_cents


log = logging.getLogger(__name__)


@dataclass
class PricedLine:
    product_id: Optional[str]
    name: str
    unit_price_cents: int
    quantity: int
    addition_unit_cents: int = 0
    addition_ids: list[str] = field(default_factory=list)
    additions_label: str = ""
    note: str = ""

    @property
    def unit_total_cents(self) -> int:
        return self.unit_price_cents + self.addition_unit_cents

    @property
    def line_total_cents(self) -> int:
        return self.unit_total_cents * self.quantity


@dataclass
class Quote:
    subtotal_cents: int
    delivery_fee_cents: int
    discount_cents: int
    total_cents: int
    discount_code: Optional[str] = None


def subtotal_of(lines: Iterable[PricedLine]) -> int:
    return sum(line.line_total_cents for line in lines)


def lookup_discount(code: Optional[str], now: Optional[dt.datetime] = None) -> Optional[DiscountCode]:
    """Active discount for `code` whose validity window contains `now`."""
    normalized = (code or "").strip().upper()
    if not normalized:
        return None
    discount = DiscountCode.objects.filter(code__iexact=normalized).first()
    if discount is None or not discount.is_valid_at(now or timezone.now()):
        return None
    return discount


def find_applicable_discount(
    code: Optional[str], subtotal_cents: int, now: Optional[dt.datetime] = None
) -> Optional[DiscountCode]:
    """Discount to apply at checkout, or None.

    Unknown, inactive, expired and below-threshold codes all resolve to None
    so a stale code never blocks the order.
    """
    if not (code or "").strip():
        return None
    discount = lookup_discount(code, now)
    if discount is None:
        log.info("Discount code %r ignored: not found or outside validity window", code)
        return None
    if subtotal_cents < discount.min_order_cents:
        log.info(
            "Discount code %s ignored: subtotal %s below minimum %s",
            discount.code,
            subtotal_cents,
            discount.min_order_cents,
        )
        return None
    return discount


def discount_amount_cents(discount: DiscountCode, subtotal_cents: int) -> int:
    value = Decimal(discount.value)
    if discount.discount_type == DiscountCode.Type.PERCENTAGE:
        amount = (Decimal(subtotal_cents) * value / Decimal(100)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    elif discount.discount_type == DiscountCode.Type.FIXED:
        # fixed values are euros
        amount = (value * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    else:
        raise ValueError(f"unhandled discount type: {discount.discount_type}")
    return max(0, min(int(amount), subtotal_cents))


def compute_quote(
    lines: Iterable[PricedLine],
    *,
    is_delivery: bool,
    delivery_fee_cents: int = 0,
    min_order_delivery_cents: int = 0,
    discount_code: Optional[str] = None,
    now: Optional[dt.datetime] = None,
) -> Quote:
    subtotal = subtotal_of(lines)
    if subtotal <= 0:
        raise ValidationError("Totale ordine non valido", code="invalid_total")
    if is_delivery and subtotal < min_order_delivery_cents:
        raise ValidationError(
            f"Ordine minimo per la consegna: {eur_cents(min_order_delivery_cents)}",
            code="below_delivery_minimum",
        )

    fee = delivery_fee_cents if is_delivery else 0
    discount = find_applicable_discount(discount_code, subtotal, now)
    discount_cents = discount_amount_cents(discount, subtotal) if discount else 0

    total = subtotal + fee - discount_cents
    if total <= 0:
        raise ValidationError("Totale ordine non valido", code="invalid_total")
    return Quote(
        subtotal_cents=subtotal,
        delivery_fee_cents=fee,
        discount_cents=discount_cents,
        total_cents=total,
        discount_code=discount.code if discount else None,
    )
