import pytest
import requests

from apps.common.captcha import CaptchaUnavailable, verify_captcha
from apps.common.http import client_ip
from apps.common.money import eur_cents
from apps.common.phone import to_e164
from apps.common.text import sanitize_text


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status_code = status

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code}")

    def json(self):
        return self.payload


def test_captcha_success_posts_secret_with_timeout(monkeypatch, settings):
    settings.CAPTCHA_TIMEOUT_SECONDS = 3
    seen = {}

    def fake_post(url, data, timeout):
        seen.update(url=url, data=data, timeout=timeout)
        return FakeResponse({"success": True})

    monkeypatch.setattr("apps.common.captcha.requests.post", fake_post)
    assert verify_captcha("tok", remote_ip="10.0.0.1").success is True
    assert seen["url"] == settings.RECAPTCHA_VERIFY_URL
    assert seen["data"] == {"secret": "test-secret", "response": "tok", "remoteip": "10.0.0.1"}
    assert seen["timeout"] == 3


def test_captcha_failure_reports_error_codes(monkeypatch):
    monkeypatch.setattr(
        "apps.common.captcha.requests.post",
        lambda *a, **kw: FakeResponse({"success": False, "error-codes": ["invalid-input-response"]}),
    )
    result = verify_captcha("bad")
    assert result.success is False
    assert result.error_codes == ["invalid-input-response"]


def test_captcha_timeout_is_unavailable(monkeypatch):
    def timeout(*a, **kw):
        raise requests.Timeout("read timed out")

    monkeypatch.setattr("apps.common.captcha.requests.post", timeout)
    with pytest.raises(CaptchaUnavailable):
        verify_captcha("tok")


def test_captcha_without_secret_is_unavailable(settings):
    settings.RECAPTCHA_SECRET_KEY = ""
    with pytest.raises(CaptchaUnavailable):
        verify_captcha("tok")


def test_client_ip_ignores_proxy_headers_by_default(rf, settings):
    settings.TRUST_X_FORWARDED_FOR = False
    request = rf.get("/", HTTP_X_FORWARDED_FOR="1.1.1.1", HTTP_X_REAL_IP="2.2.2.2")
    assert client_ip(request) == "127.0.0.1"


def test_client_ip_uses_last_forwarded_hop_behind_trusted_proxy(rf, settings):
    settings.TRUST_X_FORWARDED_FOR = True
    assert client_ip(rf.get("/", HTTP_X_FORWARDED_FOR="6.6.6.6, 1.1.1.1")) == "1.1.1.1"
    assert client_ip(rf.get("/", HTTP_X_REAL_IP="2.2.2.2")) == "2.2.2.2"
    assert client_ip(rf.get("/")) == "127.0.0.1"


def test_sanitize_text():
    assert sanitize_text("  <script>ciao</script>  ") == "scriptciao/script"
    assert sanitize_text("abcdef", max_length=3) == "abc"
    assert sanitize_text(None) == ""


def test_to_e164():
    assert to_e164("312 345 6789") == "+393123456789"
    with pytest.raises(ValueError):
        to_e164("12")


def test_eur_cents():
    assert eur_cents(1250) == "€12.50"
    assert eur_cents(5) == "€0.05"
