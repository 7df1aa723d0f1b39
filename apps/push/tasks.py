import logging
from urllib.parse import quote

from celery import shared_task
from django.conf import settings

from apps.common.money import eur_cents
from apps.orders.models import Order

from . import fcm
from .fanout import fan_out
from .fcm import PushMessage, PushNotConfigured

log = logging.getLogger(__name__)


STATUS_MESSAGES = {
    "confirmed": (
        "Ordine confermato",
        "Il tuo ordine {number} è stato confermato. Stiamo iniziando a prepararlo.",
    ),
    "preparing": ("Ordine in preparazione", "Il tuo ordine {number} è in preparazione."),
    "ready": ("Ordine pronto", "Il rider ha preso l’ordine {number} in consegna."),
    "completed": ("Ordine completato", "Il tuo ordine {number} è stato completato. Grazie!"),
    "cancelled": ("Ordine annullato", "Il tuo ordine {number} è stato annullato."),
}


def admin_order_link(order_number: str) -> str:
    base = getattr(settings, "ADMIN_DASHBOARD_URL", "") or "/admin/dashboard/orders"
    return f"{base}?order={quote(order_number)}"


def customer_order_link(order_number: str) -> str:
    base = (getattr(settings, "PUBLIC_BASE_URL", "") or "").rstrip("/")
    return f"{base}/order/{quote(order_number)}"


def new_order_message(order: Order) -> PushMessage:
    return PushMessage(
        title="Nuovo ordine",
        body=f"Ordine {order.order_number} • {eur_cents(order.total_cents)}",
        click_target=admin_order_link(order.order_number),
        data={
            "order_id": str(order.id),
            "order_number": order.order_number,
            "order_type": order.order_type,
            "total": f"{order.total_cents / 100:.2f}",
            "created_at": order.created_at.isoformat() if order.created_at else "",
        },
    )


def status_message(order_number: str, status: str):
    if status not in STATUS_MESSAGES:
        return None
    title, body = STATUS_MESSAGES[status]
    return PushMessage(
        title=title,
        body=body.format(number=order_number),
        click_target=customer_order_link(order_number),
        data={"order_number": order_number, "status": status},
    )


def _client():
    try:
        return fcm.get_push_client()
    except PushNotConfigured as e:
        log.warning("Push disabled: %s", e)
        return None


@shared_task(ignore_result=True)
def notify_new_order(order_id: str) -> int:
    from .api import admin_tokens

    order = Order.objects.filter(pk=order_id).first()
    if not order:
        log.warning("Order %s not found for new-order push", order_id)
        return 0
    tokens = admin_tokens()
    if not tokens:
        return 0
    client = _client()
    if client is None:
        return 0
    try:
        results = fan_out(tokens, new_order_message(order), client)
    finally:
        client.close()
    return sum(1 for r in results if r.ok)


@shared_task(ignore_result=True)
def notify_order_status(order_id: str, status: str) -> int:
    from .api import customer_tokens

    order = Order.objects.filter(pk=order_id).only("order_number").first()
    if not order:
        log.warning("Order %s not found for status push", order_id)
        return 0
    message = status_message(order.order_number, status)
    if message is None:
        return 0
    tokens = customer_tokens(order.order_number)
    if not tokens:
        return 0
    client = _client()
    if client is None:
        return 0
    try:
        results = fan_out(tokens, message, client)
    finally:
        client.close()
    return sum(1 for r in results if r.ok)
