from __future__ import annotations

import re
from typing import Any, Optional
from urllib.parse import unquote

from django.conf import settings


def _prefix() -> str:
    return getattr(settings, "ORDER_NUMBER_PREFIX", "AF")


def _width() -> int:
    return int(getattr(settings, "ORDER_NUMBER_WIDTH", 6))


def format_order_number(sequence: int) -> str:
    return f"{_prefix()}{sequence:0{_width()}d}"


def parse_sequence(number: Optional[str]) -> Optional[int]:
    """Numeric suffix of a well-formed order number, else None."""
    if not number:
        return None
    m = re.fullmatch(rf"{re.escape(_prefix())}(\d+)", number)
    if not m:
        return None
    return int(m.group(1))


def next_order_number(last_number: Optional[str]) -> str:
    seq = parse_sequence(last_number)
    return format_order_number(seq + 1 if seq and seq > 0 else 1)


def last_order_number() -> Optional[str]:
    from .models import Order

    return (
        Order.objects.order_by("-created_at", "-order_number")
        .values_list("order_number", flat=True)
        .first()
    )


def normalize_order_number(value: Any) -> str:
    """Canonical form for lookups: '# af 000012' -> 'AF000012'."""
    if isinstance(value, (list, tuple)):
        value = value[0] if value else ""
    if value is None:
        return ""
    raw = unquote(str(value))
    return re.sub(r"\s+", "", raw).upper().lstrip("#")
