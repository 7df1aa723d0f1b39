from __future__ import annotations

import json
from functools import wraps
from typing import Any, Optional

from django.conf import settings
from django.http import JsonResponse

from .rate_limit import limiter_for


TOO_MANY_ATTEMPTS = "Troppi tentativi. Riprova più tardi."


def client_ip(request) -> str:
    """Address used to key rate limits and captcha checks.

    Proxy headers are honoured only with TRUST_X_FORWARDED_FOR; the right-most
    X-Forwarded-For hop is the one our own proxy appended.
    """
    if getattr(settings, "TRUST_X_FORWARDED_FOR", False):
        hops = [h.strip() for h in (request.META.get("HTTP_X_FORWARDED_FOR") or "").split(",") if h.strip()]
        if hops:
            return hops[-1]
        real_ip = (request.META.get("HTTP_X_REAL_IP") or "").strip()
        if real_ip:
            return real_ip
    return request.META.get("REMOTE_ADDR") or "unknown"


def read_json(request) -> dict[str, Any]:
    """Decode a JSON object body; raises ValueError on anything else."""
    data = json.loads(request.body.decode("utf-8") or "null")
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    return data


def json_error(message: str, status: int, *, code: Optional[str] = None, **extra) -> JsonResponse:
    body: dict[str, Any] = {"error": message}
    if code:
        body["code"] = code
    body.update(extra)
    return JsonResponse(body, status=status)


def server_error(exc: BaseException) -> JsonResponse:
    details = None
    if settings.DEBUG:
        details = {"name": type(exc).__name__, "message": str(exc)}
    return json_error("Errore server", 500, details=details)


def rate_limited(name: str):
    """Throttle a view per client IP using the limiter configured for `name`.

    Every response (allowed or not) carries the X-RateLimit-* headers.
    """

    def decorator(view):
        @wraps(view)
        def wrapper(request, *args, **kwargs):
            result = limiter_for(name).allow(client_ip(request))
            if not result.allowed:
                resp = json_error(TOO_MANY_ATTEMPTS, 429)
            else:
                resp = view(request, *args, **kwargs)
            for header, value in result.headers().items():
                resp[header] = value
            return resp

        return wrapper

    return decorator
