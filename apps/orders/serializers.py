from apps.orders.models import Order


def _ts(value):
    return value.isoformat() if value else None


def order_light(order: Order) -> dict:
    return {
        "order_number": order.order_number,
        "status": order.status,
        "updated_at": _ts(order.updated_at),
    }


def order_public(order: Order) -> dict:
    """Customer-facing projection; contact fields are never included."""
    return {
        "order_number": order.order_number,
        "status": order.status,
        "order_type": order.order_type,
        "payment_method": order.payment_method,
        "items": [
            {
                "product_name": item.product_name,
                "quantity": item.quantity,
                "unit_price_cents": item.unit_price_cents,
                "additions_label": item.additions_label,
                "addition_unit_cents": item.addition_unit_cents,
                "line_total_cents": item.line_total_cents,
                "note": item.note,
            }
            for item in order.items.all()
        ],
        "subtotal_cents": order.subtotal_cents,
        "delivery_fee_cents": order.delivery_fee_cents,
        "discount_code": order.discount_code,
        "discount_cents": order.discount_cents,
        "total_cents": order.total_cents,
        "notes": order.notes,
        "created_at": _ts(order.created_at),
        "updated_at": _ts(order.updated_at),
        "timeline": [
            {"status": change.status, "at": _ts(change.created_at)}
            for change in order.status_changes.all()
        ],
    }
