from __future__ import annotations

import logging
from dataclasses import dataclass, field

import requests
from django.conf import settings


log = logging.getLogger(__name__)

VERIFY_URL = "https://www.google.com/recaptcha/api/siteverify"


class CaptchaUnavailable(Exception):
    """The verification service could not be reached or is not configured."""


@dataclass
class CaptchaResult:
    success: bool
    error_codes: list[str] = field(default_factory=list)


def verify_captcha(token: str, *, remote_ip: str | None = None) -> CaptchaResult:
    secret = getattr(settings, "RECAPTCHA_SECRET_KEY", "")
    if not secret:
        raise CaptchaUnavailable("RECAPTCHA_SECRET_KEY not configured")
    data = {"secret": secret, "response": token}
    if remote_ip:
        data["remoteip"] = remote_ip
    url = getattr(settings, "RECAPTCHA_VERIFY_URL", VERIFY_URL)
    timeout = getattr(settings, "CAPTCHA_TIMEOUT_SECONDS", 5)
    try:
        resp = requests.post(url, data=data, timeout=timeout)
        resp.raise_for_status()
        body = resp.json()
    except (requests.RequestException, ValueError) as e:
        log.warning("Captcha verification failed upstream: %s", e)
        raise CaptchaUnavailable(str(e)) from e
    return CaptchaResult(
        success=bool(body.get("success")),
        error_codes=list(body.get("error-codes") or []),
    )
