from __future__ import annotations

import logging

from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from apps.common.captcha import CaptchaUnavailable, verify_captcha
from apps.common.http import client_ip, json_error, rate_limited, read_json, server_error

from .models import Order
from .numbering import normalize_order_number
from .pricing import discount_amount_cents, lookup_discount
from .serializers import order_light, order_public
from .services import place_order


log = logging.getLogger(__name__)


def _validation_error(e: ValidationError) -> JsonResponse:
    return json_error(e.messages[0], 400, code=getattr(e, "code", None))


@csrf_exempt
@require_POST
@rate_limited("order_create")
def create_order(request):
    try:
        body = read_json(request)
    except ValueError:
        return json_error("Richiesta non valida", 400)

    if getattr(settings, "CAPTCHA_REQUIRED", True):
        token = str(body.get("captcha_token") or "").strip()
        if not token:
            return json_error("Token captcha mancante", 400, code="captcha_missing")
        try:
            result = verify_captcha(token, remote_ip=client_ip(request))
        except CaptchaUnavailable as e:
            return server_error(e)
        if not result.success:
            return json_error("Verifica captcha fallita", 403, code="captcha_failed", details=result.error_codes)

    data = body.get("order")
    if not isinstance(data, dict):
        return json_error("Dati ordine mancanti", 400, code="missing_order")

    try:
        order = place_order(data)
    except ValidationError as e:
        return _validation_error(e)
    except Exception as e:
        log.exception("Order creation failed")
        return server_error(e)
    return JsonResponse({"order_number": order.order_number, "total_cents": order.total_cents}, status=201)


@require_GET
@rate_limited("order_read")
def order_detail(request, order_number: str):
    number = normalize_order_number(order_number)
    order = (
        Order.objects.prefetch_related("items", "status_changes")
        .filter(order_number=number)
        .first()
    )
    if order is None:
        return json_error("Ordine non trovato", 404)
    if request.GET.get("light", "").lower() in ("1", "true", "yes"):
        return JsonResponse(order_light(order))
    return JsonResponse(order_public(order))


@csrf_exempt
@require_POST
@rate_limited("discount_verify")
def verify_discount(request):
    try:
        body = read_json(request)
    except ValueError:
        return json_error("Richiesta non valida", 400)
    code = str(body.get("code") or "").strip()
    if not code:
        return json_error("Codice mancante", 400, code="missing_code")
    subtotal = body.get("subtotal_cents")
    if isinstance(subtotal, bool) or not isinstance(subtotal, int) or subtotal <= 0:
        return json_error("Subtotale non valido", 400, code="invalid_subtotal")

    discount = lookup_discount(code)
    if discount is None:
        return json_error("Codice sconto non valido o scaduto", 404, code="unknown_discount")
    if subtotal < discount.min_order_cents:
        return json_error(
            "Ordine minimo non raggiunto per questo codice",
            400,
            code="below_discount_minimum",
            min_order_cents=discount.min_order_cents,
        )
    return JsonResponse(
        {
            "discount_code": discount.code,
            "discount_type": discount.discount_type,
            "discount_cents": discount_amount_cents(discount, subtotal),
        }
    )
