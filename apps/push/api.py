from __future__ import annotations

import logging
from typing import Optional

from django.db import transaction
from django.utils import timezone

from .models import PushToken
from .tasks import STATUS_MESSAGES, notify_new_order, notify_order_status


log = logging.getLogger(__name__)

ADMIN_TOKEN_LIMIT = 1000


def _on_commit(dispatch) -> None:
    def _safe():
        try:
            dispatch()
        except Exception:
            log.exception("Push dispatch could not be queued")

    transaction.on_commit(_safe)


def enqueue_new_order_notification(order_id) -> None:
    _on_commit(lambda: notify_new_order.delay(str(order_id)))


def enqueue_status_notification(order_id, status: str) -> None:
    if status not in STATUS_MESSAGES:
        return
    _on_commit(lambda: notify_order_status.delay(str(order_id), status))


def customer_tokens(order_number: str) -> list[str]:
    return list(
        PushToken.objects.filter(scope=PushToken.Scope.CUSTOMER, order_number=order_number)
        .values_list("token", flat=True)
    )


def admin_tokens(limit: int = ADMIN_TOKEN_LIMIT) -> list[str]:
    return list(
        PushToken.objects.filter(scope=PushToken.Scope.ADMIN)
        .order_by("-last_seen")
        .values_list("token", flat=True)[:limit]
    )


def register_token(
    token: str,
    *,
    scope: str,
    order_number: str = "",
    user_agent: str = "",
    device_info: str = "",
) -> PushToken:
    obj, created = PushToken.objects.update_or_create(
        scope=scope,
        order_number=order_number,
        token=token,
        defaults={
            "last_seen": timezone.now(),
            "user_agent": (user_agent or "")[:255],
            "device_info": (device_info or "")[:255],
        },
    )
    if created:
        log.info("Registered %s push token %s… order=%s", scope, token[:10], order_number or "-")
    return obj


def unregister_token(token: str, *, scope: str, order_number: Optional[str] = "") -> int:
    deleted, _ = PushToken.objects.filter(scope=scope, order_number=order_number or "", token=token).delete()
    return deleted
