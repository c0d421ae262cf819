"""
Shared fixtures for shipping rule tests.

make_rule / make_item are factory fixtures: call them with only the fields a
test cares about.
"""

from decimal import Decimal

import pytest

from shipping_rules.models import (
    Address,
    CartItem,
    DeliveryEstimate,
    PackageLimits,
    Pricing,
    Product,
    ShippingRule,
    WeightTier,
)


def build_rule(
    rule_id="R1",
    coverage=("national",),
    base_price="80",
    tiers=None,
    cost_per_extra_kg="10",
    max_weight_kg=20.0,
    max_items=10,
    min_days=3,
    max_days=5,
    active=True,
    free=False,
    threshold=None,
    name=None,
    cost_per_extra_item="0",
) -> ShippingRule:
    """ShippingRule with test-friendly defaults (flat 80, national)."""
    tier_records = tuple(
        WeightTier(min_kg=lo, max_kg=hi, price=Decimal(str(price)))
        for lo, hi, price in (tiers or ())
    )
    return ShippingRule(
        id=rule_id,
        name=name or rule_id,
        coverage=frozenset(coverage),
        package_limits=PackageLimits(max_weight_kg=max_weight_kg, max_items=max_items),
        pricing=Pricing(
            base_price=None if base_price is None else Decimal(str(base_price)),
            tiers=tier_records,
            cost_per_extra_kg=Decimal(str(cost_per_extra_kg)),
            cost_per_extra_item=Decimal(str(cost_per_extra_item)),
        ),
        delivery_estimate=DeliveryEstimate(min_days=min_days, max_days=max_days),
        active=active,
        free_shipping_unconditional=free,
        free_shipping_threshold=None if threshold is None else Decimal(str(threshold)),
    )


def build_item(product_id="P1", weight=1.0, price="10", rule_ids=("R1",), quantity=1) -> CartItem:
    product = Product(
        id=product_id,
        weight=weight,
        price=Decimal(str(price)),
        rule_ids=frozenset(rule_ids),
    )
    return CartItem(product=product, quantity=quantity)


@pytest.fixture
def make_rule():
    return build_rule


@pytest.fixture
def make_item():
    return build_item


@pytest.fixture
def cdmx_address():
    """Mexico City address inside the 01000-01999 range."""
    return Address(zip="01500", state="Ciudad de México", city="Ciudad de México")


@pytest.fixture
def puebla_address():
    return Address(zip="72000", state="Puebla", city="Puebla")
