import pytest
from django.core.exceptions import ValidationError

from apps.catalog.models import AdditionCategoryRule, Category, SauceMode
from apps.catalog.sauces import (
    DEFAULT_RULE,
    SauceRule,
    SauceRuleResolver,
    apply_rule,
    fallback_rule,
    load_additions,
    normalize_rule,
)


@pytest.mark.parametrize(
    "mode,max_sauces,price,expected",
    [
        ("none", 5, 100, SauceRule(SauceMode.NONE, 0, 0)),
        ("free_single", 5, 100, SauceRule(SauceMode.FREE_SINGLE, 1, 0)),
        ("paid_multi", 0, -5, SauceRule(SauceMode.PAID_MULTI, 1, 0)),
        ("paid_multi", 20, 49.6, SauceRule(SauceMode.PAID_MULTI, 10, 50)),
        ("paid_multi", "3", "75", SauceRule(SauceMode.PAID_MULTI, 3, 75)),
        ("bogus", 3, 75, DEFAULT_RULE),
    ],
)
def test_normalize_rule(mode, max_sauces, price, expected):
    assert normalize_rule(mode, max_sauces, price) == expected


def test_fallback_rule_by_slug(settings):
    settings.SAUCE_FALLBACK_PRICE_CENTS = 50
    assert fallback_rule("mini-fritti") == SauceRule(SauceMode.PAID_MULTI, 3, 50)
    assert fallback_rule("Burgers") == SauceRule(SauceMode.PAID_MULTI, 3, 50)
    assert fallback_rule("fritti") == DEFAULT_RULE
    assert fallback_rule(None) == DEFAULT_RULE


@pytest.mark.django_db
def test_stored_active_rule_wins_over_fallback():
    cat = Category.objects.create(name="Burger", slug="burgers")
    AdditionCategoryRule.objects.create(category=cat, sauce_mode=SauceMode.NONE)
    assert SauceRuleResolver().resolve("burgers").mode == SauceMode.NONE


@pytest.mark.django_db
def test_inactive_rule_falls_back():
    cat = Category.objects.create(name="Fritti", slug="fritti")
    AdditionCategoryRule.objects.create(
        category=cat, sauce_mode=SauceMode.PAID_MULTI, max_sauces=5, sauce_price_cents=80, is_active=False
    )
    assert SauceRuleResolver().resolve("fritti") == DEFAULT_RULE


@pytest.mark.django_db
def test_resolver_memoizes_per_instance(django_assert_num_queries):
    resolver = SauceRuleResolver()
    with django_assert_num_queries(1):
        resolver.resolve("fritti")
        resolver.resolve("fritti")


@pytest.mark.django_db
def test_free_single_allows_one_sauce_for_free(additions):
    rule = SauceRule(SauceMode.FREE_SINGLE, 1, 0)
    one = apply_rule(rule, [additions["ketchup"]])
    assert one.unit_surcharge_cents == 0

    with pytest.raises(ValidationError) as exc:
        apply_rule(rule, [additions["ketchup"], additions["maionese"]], product_name="Patatine")
    assert exc.value.code == "too_many_sauces"
    assert "Patatine" in exc.value.messages[0]


@pytest.mark.django_db
def test_paid_multi_charges_per_sauce_up_to_max(additions):
    rule = SauceRule(SauceMode.PAID_MULTI, 3, 50)
    three = [additions["ketchup"], additions["maionese"], additions["bbq"]]
    assert apply_rule(rule, three).unit_surcharge_cents == 150

    with pytest.raises(ValidationError) as exc:
        apply_rule(rule, three + [additions["aioli"]])
    assert exc.value.code == "too_many_sauces"


@pytest.mark.django_db
def test_none_mode_rejects_sauces_but_prices_extras(additions):
    rule = SauceRule(SauceMode.NONE, 0, 0)
    with pytest.raises(ValidationError) as exc:
        apply_rule(rule, [additions["ketchup"]])
    assert exc.value.code == "sauces_not_allowed"

    resolved = apply_rule(rule, [additions["bacon"]])
    assert resolved.unit_surcharge_cents == 100
    assert resolved.label == "Extra: Bacon"


@pytest.mark.django_db
def test_extras_always_add_their_price(additions):
    rule = SauceRule(SauceMode.PAID_MULTI, 3, 50)
    resolved = apply_rule(rule, [additions["bbq"], additions["bacon"]])
    assert resolved.unit_surcharge_cents == 150
    assert resolved.label == "Salse: BBQ · Extra: Bacon"
    assert resolved.addition_ids == [str(additions["bbq"].id), str(additions["bacon"].id)]


@pytest.mark.django_db
def test_load_additions_drops_unknown_inactive_and_duplicates(additions):
    ids = [
        str(additions["bbq"].id),
        "not-a-uuid",
        str(additions["old"].id),
        str(additions["bbq"].id),
        "00000000-0000-0000-0000-000000000000",
        str(additions["ketchup"].id),
    ]
    loaded = load_additions(ids)
    assert [a.name for a in loaded] == ["BBQ", "Ketchup"]
    assert load_additions(None) == []
