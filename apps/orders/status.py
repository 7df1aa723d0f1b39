"""Order lifecycle: pending -> confirmed -> preparing -> ready -> completed.

`cancelled` is reachable from any non-terminal state. Staff may skip ahead
along the forward path but never move backwards.
"""
from __future__ import annotations

import logging
from typing import Optional

from django.core.exceptions import ValidationError
from django.db import transaction

from apps.push.api import enqueue_status_notification

from .models import Order, OrderStatusChange


log = logging.getLogger(__name__)

Status = Order.Status

FLOW: tuple[str, ...] = (
    Status.PENDING,
    Status.CONFIRMED,
    Status.PREPARING,
    Status.READY,
    Status.COMPLETED,
)
TERMINAL = frozenset({Status.COMPLETED, Status.CANCELLED})


class InvalidTransition(ValidationError):
    pass


def is_terminal(status: str) -> bool:
    return status in TERMINAL


def allowed_transitions(current: str) -> tuple[str, ...]:
    if is_terminal(current) or current not in FLOW:
        return ()
    idx = FLOW.index(current)
    return FLOW[idx + 1:] + (Status.CANCELLED,)


def can_transition(current: str, target: str) -> bool:
    return target in allowed_transitions(current)


def next_status(current: str) -> Optional[str]:
    """The canonical forward step, or None from a terminal/last state."""
    targets = [s for s in allowed_transitions(current) if s != Status.CANCELLED]
    return targets[0] if targets else None


def change_status(order: Order, target: str, *, source: str = "staff", note: str = "") -> Order:
    """Persist a legal transition, then queue the customer notification.

    The notification is only scheduled once the status change has committed;
    a failure while persisting aborts before anything is sent.
    """
    if target not in Status.values:
        raise InvalidTransition("Stato non valido", code="invalid_status")

    with transaction.atomic():
        locked = Order.objects.select_for_update().get(pk=order.pk)
        previous = locked.status
        if not can_transition(previous, target):
            raise InvalidTransition(
                f"Transizione non consentita: {previous} → {target}", code="invalid_transition"
            )
        locked.status = target
        locked.save(update_fields=["status", "updated_at"])
        OrderStatusChange.objects.create(order=locked, status=target, source=source[:32], note=note[:200])
        enqueue_status_notification(locked.id, target)

    order.status = locked.status
    order.updated_at = locked.updated_at
    log.info("Order %s status %s -> %s (%s)", locked.order_number, previous, target, source)
    return order
