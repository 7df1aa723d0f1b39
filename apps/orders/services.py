"""Order intake: validate, price, number and persist a customer order."""
from __future__ import annotations

import datetime as dt
import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from apps.catalog.models import Product
from apps.catalog.sauces import SauceRuleResolver, apply_rule, load_additions
from apps.common.phone import to_e164
from apps.common.text import sanitize_text
from apps.push.api import enqueue_new_order_notification
from apps.store.hours import format_next_open, local_now
from apps.store.models import StoreSettings

from .models import Order, OrderItem, OrderStatusChange
from .numbering import last_order_number, next_order_number
from .pricing import PricedLine, Quote, compute_quote


log = logging.getLogger(__name__)

MAX_CART_LINES = 50
MAX_QUANTITY = 99


@dataclass
class CustomerInfo:
    name: str
    phone: str
    address: str
    order_type: str
    payment_method: Optional[str]
    notes: str
    discount_code: Optional[str]


def clean_customer(data: dict[str, Any]) -> CustomerInfo:
    name = sanitize_text(data.get("customer_name"), 100)
    if len(name) < 2:
        raise ValidationError("Il nome deve contenere almeno 2 caratteri", code="invalid_name")

    try:
        phone = to_e164(str(data.get("customer_phone") or "").strip())
    except ValueError as e:
        raise ValidationError(str(e), code="invalid_phone")

    order_type = str(data.get("order_type") or "").strip()
    if order_type not in Order.OrderType.values:
        raise ValidationError("Tipo di ordine non valido", code="invalid_order_type")
    is_delivery = order_type == Order.OrderType.DELIVERY

    raw_address = str(data.get("customer_address") or "")
    if len(raw_address.strip()) > 500:
        raise ValidationError("Indirizzo troppo lungo", code="invalid_address")
    address = sanitize_text(raw_address, 500)
    if is_delivery and not address:
        raise ValidationError("Indirizzo obbligatorio per la consegna", code="missing_address")

    payment_method = None
    if is_delivery:
        payment_method = str(data.get("payment_method") or "").strip()
        if payment_method not in Order.PaymentMethod.values:
            raise ValidationError("Metodo di pagamento non valido", code="invalid_payment_method")

    raw_notes = str(data.get("notes") or "")
    if len(raw_notes.strip()) > 1000:
        raise ValidationError("Note troppo lunghe", code="invalid_notes")

    return CustomerInfo(
        name=name,
        phone=phone,
        address=address if is_delivery else "",
        order_type=order_type,
        payment_method=payment_method,
        notes=sanitize_text(raw_notes, 1000),
        discount_code=(str(data.get("discount_code") or "").strip().upper() or None),
    )


def ensure_open(store: StoreSettings, now: Optional[dt.datetime] = None) -> None:
    local = local_now(now)
    status = store.ordering_status(local)
    if status.is_open:
        return
    label = format_next_open(status.next_open, local)
    msg = "Ordini chiusi in questo momento"
    if label:
        msg = f"{msg}. Riapriamo {label}"
    raise ValidationError(msg, code="closed")


def _parse_quantity(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ValidationError("Quantità non valida", code="invalid_quantity")
    try:
        qty = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("Quantità non valida", code="invalid_quantity")
    if isinstance(raw, float) and raw != qty:
        raise ValidationError("Quantità non valida", code="invalid_quantity")
    if not 1 <= qty <= MAX_QUANTITY:
        raise ValidationError("Quantità non valida", code="invalid_quantity")
    return qty


def build_lines(raw_items: Any) -> list[PricedLine]:
    """Validate cart lines against live menu state and addition rules."""
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError("Il carrello è vuoto", code="empty_cart")
    if len(raw_items) > MAX_CART_LINES:
        raise ValidationError("Troppi prodotti nel carrello", code="cart_too_large")

    parsed: list[tuple[uuid.UUID, dict[str, Any]]] = []
    for raw in raw_items:
        if not isinstance(raw, dict):
            raise ValidationError("Prodotto non valido", code="invalid_item")
        try:
            product_id = uuid.UUID(str(raw.get("product_id")))
        except (TypeError, ValueError):
            raise ValidationError("Prodotto non valido", code="invalid_item")
        parsed.append((product_id, raw))

    products = {
        p.id: p
        for p in Product.objects.select_related("category").filter(
            id__in={pid for pid, _ in parsed}, available=True
        )
    }
    resolver = SauceRuleResolver()
    lines: list[PricedLine] = []
    for product_id, raw in parsed:
        product = products.get(product_id)
        if product is None:
            raise ValidationError("Un prodotto non è più disponibile", code="product_unavailable")
        quantity = _parse_quantity(raw.get("quantity", 1))
        rule = resolver.resolve(product.category.slug)
        additions = apply_rule(rule, load_additions(raw.get("addition_ids") or []), product_name=product.name)
        lines.append(
            PricedLine(
                product_id=str(product.id),
                name=product.name,
                unit_price_cents=product.price_cents,
                quantity=quantity,
                addition_unit_cents=additions.unit_surcharge_cents,
                addition_ids=additions.addition_ids,
                additions_label=additions.label,
                note=sanitize_text(raw.get("note"), 200),
            )
        )
    return lines


def _persist(customer: CustomerInfo, lines: list[PricedLine], quote: Quote) -> Order:
    attempts = int(getattr(settings, "ORDER_NUMBER_MAX_ATTEMPTS", 5))
    for attempt in range(1, attempts + 1):
        number = next_order_number(last_order_number())
        try:
            with transaction.atomic():
                order = Order.objects.create(
                    order_number=number,
                    customer_name=customer.name,
                    customer_phone=customer.phone,
                    customer_address=customer.address,
                    order_type=customer.order_type,
                    payment_method=customer.payment_method,
                    subtotal_cents=quote.subtotal_cents,
                    delivery_fee_cents=quote.delivery_fee_cents,
                    discount_cents=quote.discount_cents,
                    total_cents=quote.total_cents,
                    discount_code=quote.discount_code,
                    notes=customer.notes,
                )
                OrderItem.objects.bulk_create(
                    [
                        OrderItem(
                            order=order,
                            position=i,
                            product_id=line.product_id,
                            product_name=line.name,
                            unit_price_cents=line.unit_price_cents,
                            quantity=line.quantity,
                            addition_ids=line.addition_ids,
                            addition_unit_cents=line.addition_unit_cents,
                            additions_label=line.additions_label,
                            line_total_cents=line.line_total_cents,
                            note=line.note,
                        )
                        for i, line in enumerate(lines)
                    ]
                )
                OrderStatusChange.objects.create(order=order, status=Order.Status.PENDING, source="intake")
            return order
        except IntegrityError:
            if attempt == attempts:
                raise
            log.warning("Order number %s already taken, retrying (%s/%s)", number, attempt, attempts)
    raise RuntimeError("unreachable")


def place_order(data: dict[str, Any], *, now: Optional[dt.datetime] = None) -> Order:
    """Validate and persist a customer order; raises ValidationError on bad input.

    Checks run in a fixed order: opening hours, customer fields, cart lines
    and addition rules, then pricing. Nothing is written unless all pass.
    """
    store = StoreSettings.load()
    ensure_open(store, now)
    customer = clean_customer(data)
    lines = build_lines(data.get("items"))
    quote = compute_quote(
        lines,
        is_delivery=customer.order_type == Order.OrderType.DELIVERY,
        delivery_fee_cents=store.delivery_fee_cents,
        min_order_delivery_cents=store.min_order_delivery_cents,
        discount_code=customer.discount_code,
        now=now,
    )
    order = _persist(customer, lines, quote)
    log.info("Order %s created: total=%s type=%s", order.order_number, quote.total_cents, order.order_type)
    enqueue_new_order_notification(order.id)
    return order
