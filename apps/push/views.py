from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from apps.common.http import json_error, rate_limited, read_json
from apps.orders.models import Order
from apps.orders.numbering import normalize_order_number
from apps.orders.views_admin import staff_required

from .api import register_token, unregister_token
from .models import PushToken


def _token_and_order(request):
    body = read_json(request)
    token = str(body.get("token") or "").strip()
    number = normalize_order_number(body.get("order_number"))
    return body, token, number


@csrf_exempt
@require_POST
@rate_limited("push_register")
def register(request):
    try:
        _, token, number = _token_and_order(request)
    except ValueError:
        return json_error("Richiesta non valida", 400)
    if not token or not number:
        return json_error("Dati mancanti", 400)
    if len(token) > 512:
        return json_error("Token non valido", 400)
    if not Order.objects.filter(order_number=number).exists():
        return json_error("Ordine non trovato", 404)
    register_token(
        token,
        scope=PushToken.Scope.CUSTOMER,
        order_number=number,
        user_agent=request.META.get("HTTP_USER_AGENT", ""),
    )
    return JsonResponse({"ok": True})


@csrf_exempt
@require_POST
@rate_limited("push_unregister")
def unregister(request):
    try:
        _, token, number = _token_and_order(request)
    except ValueError:
        return json_error("Richiesta non valida", 400)
    if not token or not number:
        return json_error("Dati mancanti", 400)
    deleted = unregister_token(token, scope=PushToken.Scope.CUSTOMER, order_number=number)
    return JsonResponse({"ok": True, "deleted": deleted})


@require_POST
@staff_required
def admin_register(request):
    try:
        body = read_json(request)
    except ValueError:
        return json_error("Richiesta non valida", 400)
    token = str(body.get("token") or "").strip()
    if not token or len(token) > 512:
        return json_error("Token non valido", 400)
    register_token(
        token,
        scope=PushToken.Scope.ADMIN,
        user_agent=request.META.get("HTTP_USER_AGENT", ""),
        device_info=str(body.get("device_info") or ""),
    )
    return JsonResponse({"ok": True})


@require_POST
@staff_required
def admin_unregister(request):
    try:
        body = read_json(request)
    except ValueError:
        return json_error("Richiesta non valida", 400)
    token = str(body.get("token") or "").strip()
    if not token:
        return json_error("Token non valido", 400)
    deleted = unregister_token(token, scope=PushToken.Scope.ADMIN)
    return JsonResponse({"ok": True, "deleted": deleted})
