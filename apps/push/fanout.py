"""Deliver one message to many device tokens and prune dead ones."""
from __future__ import annotations

import logging
from typing import Iterable, Protocol

from django.db import DatabaseError

from .fcm import DeliveryResult, PushAuthError, PushMessage
from .models import PushToken


log = logging.getLogger(__name__)

# provider error fragments meaning the token will never work again
INVALID_TOKEN_SIGNATURES = ("unregistered", "not-registered", "not_registered")


class PushClient(Protocol):
    def send(self, token: str, message: PushMessage) -> DeliveryResult: ...


def _short(token: str) -> str:
    return f"{token[:10]}…"


def is_permanently_invalid(result: DeliveryResult) -> bool:
    if result.ok:
        return False
    if result.http_status == 404:
        return True
    error = (result.error or "").lower()
    return any(sig in error for sig in INVALID_TOKEN_SIGNATURES)


def send(tokens: Iterable[str], message: PushMessage, client: PushClient) -> list[DeliveryResult]:
    """One dispatch per distinct token; each outcome is independent."""
    unique = list(dict.fromkeys(t for t in tokens if t))
    results: list[DeliveryResult] = []
    for i, token in enumerate(unique):
        try:
            result = client.send(token, message)
        except PushAuthError as e:
            log.warning("Push provider authentication failed: %s", e)
            results.extend(DeliveryResult(token=t, ok=False, error=f"auth: {e}") for t in unique[i:])
            break
        except Exception as e:
            log.warning("Push to %s raised: %s", _short(token), e)
            result = DeliveryResult(token=token, ok=False, error=str(e))
        if not result.ok:
            log.warning("Push to %s failed status=%s error=%s", _short(token), result.http_status, (result.error or "")[:200])
        results.append(result)
    return results


def prune_invalid(results: Iterable[DeliveryResult]) -> list[str]:
    """Delete every permanently invalid token in a single batch."""
    invalid = sorted({r.token for r in results if is_permanently_invalid(r)})
    if invalid:
        deleted, _ = PushToken.objects.filter(token__in=invalid).delete()
        log.info("Pruned %s invalid push token(s) (%s rows)", len(invalid), deleted)
    return invalid


def fan_out(tokens: Iterable[str], message: PushMessage, client: PushClient) -> list[DeliveryResult]:
    results = send(tokens, message, client)
    try:
        prune_invalid(results)
    except DatabaseError:
        log.exception("Push token cleanup failed")
    sent = sum(1 for r in results if r.ok)
    log.info("Push fan-out %r: sent=%s failed=%s", message.title, sent, len(results) - sent)
    return results
