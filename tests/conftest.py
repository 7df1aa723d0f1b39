from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model

from apps.catalog.models import Addition, AdditionCategoryRule, Category, DiscountCode, Product, SauceMode
from apps.common.captcha import CaptchaResult
from apps.common.rate_limit import _memory_store
from apps.push.fcm import DeliveryResult
from apps.store.models import StoreSettings


PHONE = "+39 312 345 6789"


@pytest.fixture(autouse=True)
def _reset_rate_limits():
    _memory_store.clear()
    yield
    _memory_store.clear()


@pytest.fixture
def staff_user(db):
    User = get_user_model()
    return User.objects.create_user(username="cucina", password="pwd123", is_staff=True)


@pytest.fixture
def staff_client(client, staff_user):
    client.force_login(staff_user)
    return client


@pytest.fixture
def store(db):
    return StoreSettings.objects.create(
        key="default",
        name="Amico Fritto",
        delivery_fee_cents=250,
        min_order_delivery_cents=1500,
    )


@pytest.fixture
def menu(db):
    """Burgers fall back to paid sauces, fries keep one free sauce, drinks take none."""
    burgers = Category.objects.create(name="Burger", slug="burgers")
    fritti = Category.objects.create(name="Fritti", slug="fritti")
    bevande = Category.objects.create(name="Bevande", slug="bevande")
    AdditionCategoryRule.objects.create(category=bevande, sauce_mode=SauceMode.NONE, max_sauces=0)
    return {
        "burger": Product.objects.create(category=burgers, name="Classic Burger", price_cents=850),
        "fries": Product.objects.create(category=fritti, name="Patatine", price_cents=350),
        "cola": Product.objects.create(category=bevande, name="Cola", price_cents=250),
        "off": Product.objects.create(category=fritti, name="Olive ascolane", price_cents=500, available=False),
    }


@pytest.fixture
def additions(db):
    return {
        "ketchup": Addition.objects.create(type=Addition.Type.SAUCE, name="Ketchup"),
        "maionese": Addition.objects.create(type=Addition.Type.SAUCE, name="Maionese"),
        "bbq": Addition.objects.create(type=Addition.Type.SAUCE, name="BBQ"),
        "aioli": Addition.objects.create(type=Addition.Type.SAUCE, name="Aioli"),
        "bacon": Addition.objects.create(type=Addition.Type.EXTRA, name="Bacon", price_cents=100),
        "old": Addition.objects.create(type=Addition.Type.SAUCE, name="Senape", is_active=False),
    }


@pytest.fixture
def make_discount(db):
    def _make(code="BENVENUTO", discount_type=DiscountCode.Type.PERCENTAGE, value="10", **kw):
        return DiscountCode.objects.create(code=code, discount_type=discount_type, value=Decimal(value), **kw)

    return _make


@pytest.fixture
def order_payload(menu):
    def _payload(**overrides):
        data = {
            "customer_name": "Giulia Rossi",
            "customer_phone": PHONE,
            "customer_address": "Via Roma 1, Milano",
            "order_type": "delivery",
            "payment_method": "cash",
            "notes": "Citofono Rossi",
            "items": [{"product_id": str(menu["burger"].id), "quantity": 2}],
        }
        data.update(overrides)
        return data

    return _payload


@pytest.fixture
def captcha_ok(monkeypatch):
    calls = []

    def _verify(token, *, remote_ip=None):
        calls.append((token, remote_ip))
        return CaptchaResult(success=True)

    monkeypatch.setattr("apps.orders.views_public.verify_captcha", _verify)
    return calls


class FakePushClient:
    """Records sends; per-token canned failures as (status, error)."""

    def __init__(self, failures=None):
        self.failures = failures or {}
        self.sent = []
        self.closed = False

    def send(self, token, message):
        self.sent.append((token, message))
        if token in self.failures:
            status, error = self.failures[token]
            return DeliveryResult(token=token, ok=False, http_status=status, error=error)
        return DeliveryResult(token=token, ok=True, http_status=200)

    def close(self):
        self.closed = True


@pytest.fixture
def push_client(monkeypatch):
    fake = FakePushClient()
    monkeypatch.setattr("apps.push.fcm.get_push_client", lambda: fake)
    return fake
