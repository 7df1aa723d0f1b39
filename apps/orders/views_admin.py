import logging
from functools import wraps

from django.db import DatabaseError
from django.http import JsonResponse
from django.views.decorators.http import require_POST

from apps.common.http import json_error, read_json, server_error

from .models import Order
from .status import InvalidTransition, allowed_transitions, change_status

log = logging.getLogger(__name__)


def staff_required(view):
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        user = request.user
        if not (user.is_authenticated and user.is_staff):
            return json_error("Non autorizzato", 401)
        return view(request, *args, **kwargs)

    return wrapper


def _payload(request) -> dict:
    if request.content_type == "application/json":
        return read_json(request)
    return request.POST.dict()


@require_POST
@staff_required
def update_order_status(request, order_id):
    order = Order.objects.filter(pk=order_id).first()
    if order is None:
        return json_error("Ordine non trovato", 404)
    try:
        body = _payload(request)
    except ValueError:
        return json_error("Richiesta non valida", 400)
    status = str(body.get("status") or "").strip()
    if not status:
        return json_error("Dati mancanti", 400)

    try:
        change_status(order, status, source=f"staff:{request.user.get_username()}")
    except InvalidTransition as e:
        return json_error(e.messages[0], 400, code=e.code, allowed=list(allowed_transitions(order.status)))
    except DatabaseError as e:
        log.exception("Status update failed for order %s", order.order_number)
        return server_error(e)
    return JsonResponse({"ok": True, "status": order.status})
