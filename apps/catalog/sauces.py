"""Per-category sauce/extra policy and line-item addition validation."""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

from django.conf import settings
from django.core.exceptions import ValidationError

from .models import Addition, AdditionCategoryRule, SauceMode


MAX_SAUCES_CAP = 10


@dataclass(frozen=True)
class SauceRule:
    mode: SauceMode
    max_sauces: int
    sauce_price_cents: int


DEFAULT_RULE = SauceRule(SauceMode.FREE_SINGLE, 1, 0)


def _to_int(value: Any, fallback: int) -> int:
    try:
        return int(round(float(value)))
    except (TypeError, ValueError):
        return fallback


def normalize_rule(mode: Any, max_sauces: Any = None, sauce_price_cents: Any = None) -> SauceRule:
    try:
        mode = SauceMode(mode)
    except ValueError:
        mode = DEFAULT_RULE.mode
    max_n = max(0, min(MAX_SAUCES_CAP, _to_int(max_sauces, DEFAULT_RULE.max_sauces)))
    price = max(0, _to_int(sauce_price_cents, DEFAULT_RULE.sauce_price_cents))

    if mode == SauceMode.NONE:
        return SauceRule(mode, 0, 0)
    if mode == SauceMode.FREE_SINGLE:
        return SauceRule(mode, 1, 0)
    if mode == SauceMode.PAID_MULTI:
        return SauceRule(mode, max(1, max_n), price)
    raise ValueError(f"unhandled sauce mode: {mode}")


def fallback_rule(category_slug: Optional[str]) -> SauceRule:
    slug = (category_slug or "").strip().lower()
    if "mini" in slug or "burger" in slug:
        price = int(getattr(settings, "SAUCE_FALLBACK_PRICE_CENTS", 50))
        return SauceRule(SauceMode.PAID_MULTI, 3, price)
    return DEFAULT_RULE


class SauceRuleResolver:
    """Resolve the sauce rule for a category slug, memoized per instance.

    An active stored rule wins; otherwise the slug-pattern fallback applies.
    """

    def __init__(self) -> None:
        self._cache: dict[str, SauceRule] = {}

    def resolve(self, category_slug: str) -> SauceRule:
        if category_slug in self._cache:
            return self._cache[category_slug]
        row = (
            AdditionCategoryRule.objects.filter(category__slug=category_slug, is_active=True)
            .only("sauce_mode", "max_sauces", "sauce_price_cents")
            .first()
        )
        if row is not None:
            rule = normalize_rule(row.sauce_mode, row.max_sauces, row.sauce_price_cents)
        else:
            rule = fallback_rule(category_slug)
        self._cache[category_slug] = rule
        return rule


def resolve_rule(category_slug: str) -> SauceRule:
    return SauceRuleResolver().resolve(category_slug)


@dataclass
class ResolvedAdditions:
    sauces: list[Addition] = field(default_factory=list)
    extras: list[Addition] = field(default_factory=list)
    unit_surcharge_cents: int = 0
    label: str = ""

    @property
    def addition_ids(self) -> list[str]:
        return [str(a.id) for a in self.sauces + self.extras]


def load_additions(raw_ids: Iterable[Any]) -> list[Addition]:
    """Active additions for the given ids, in request order, deduplicated.

    Ids that are malformed or do not match an active addition are dropped.
    """
    ids: list[uuid.UUID] = []
    for raw in raw_ids or []:
        try:
            value = uuid.UUID(str(raw))
        except (TypeError, ValueError):
            continue
        if value not in ids:
            ids.append(value)
    if not ids:
        return []
    found = {a.id: a for a in Addition.objects.filter(id__in=ids, is_active=True)}
    return [found[i] for i in ids if i in found]


def build_label(sauces: list[Addition], extras: list[Addition]) -> str:
    parts = []
    if sauces:
        parts.append("Salse: " + ", ".join(a.name for a in sauces))
    if extras:
        parts.append("Extra: " + ", ".join(a.name for a in extras))
    return " · ".join(parts)


def apply_rule(rule: SauceRule, additions: list[Addition], *, product_name: str = "") -> ResolvedAdditions:
    sauces = [a for a in additions if a.type == Addition.Type.SAUCE]
    extras = [a for a in additions if a.type == Addition.Type.EXTRA]
    prefix = f"{product_name}: " if product_name else ""
    count = len(sauces)

    if rule.mode == SauceMode.NONE:
        if count:
            raise ValidationError(f"{prefix}salse non disponibili per questo prodotto", code="sauces_not_allowed")
        sauce_cents = 0
    elif rule.mode == SauceMode.FREE_SINGLE:
        if count > 1:
            raise ValidationError(f"{prefix}puoi scegliere una sola salsa", code="too_many_sauces")
        sauce_cents = 0
    elif rule.mode == SauceMode.PAID_MULTI:
        if count > rule.max_sauces:
            raise ValidationError(
                f"{prefix}puoi scegliere al massimo {rule.max_sauces} salse", code="too_many_sauces"
            )
        sauce_cents = count * rule.sauce_price_cents
    else:
        raise ValueError(f"unhandled sauce mode: {rule.mode}")

    extras_cents = sum(int(a.price_cents or 0) for a in extras)
    return ResolvedAdditions(
        sauces=sauces,
        extras=extras,
        unit_surcharge_cents=sauce_cents + extras_cents,
        label=build_label(sauces, extras),
    )
