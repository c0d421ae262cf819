"""
Unit Tests for Package Pricing

Tests flat and tiered package prices, overflow rounding, broken tier
fallback and free-shipping overrides.

Run with: pytest shipping_rules/tests/test_pricing.py -v
"""

import logging
from decimal import Decimal

import polars as pl
import pytest

from shipping_rules.errors import RuleDocumentError
from shipping_rules.models import Package
from shipping_rules.pipeline.pricing import (
    FREE_THRESHOLD,
    FREE_UNCONDITIONAL,
    price_all,
    price_frame,
    price_package,
    price_rule,
    tiers_frame,
)


TIERS = [(0, 5, "60"), (5, 10, "90"), (10, 20, "150")]


def package(weight_grams: int, item_count: int = 1) -> Package:
    return Package(entries=(), weight_grams=weight_grams, item_count=item_count)


@pytest.fixture
def tiered_rule(make_rule):
    """0-5 kg $60, 5-10 kg $90, 10-20 kg $150, $10 per extra kg."""
    return make_rule(base_price=None, tiers=TIERS, cost_per_extra_kg="10")


@pytest.fixture
def flat_rule(make_rule):
    """Flat $80, 20 kg ceiling, $10 per extra kg."""
    return make_rule(base_price="80", max_weight_kg=20, cost_per_extra_kg="10")


# =============================================================================
# FLAT PRICING TESTS
# =============================================================================

class TestFlatPricing:
    """Tests for flat base-price rules."""

    def test_base_price(self, flat_rule):
        assert price_package(package(2000), flat_rule) == Decimal("80.00")

    def test_weight_ignored_within_limit(self, flat_rule):
        assert price_package(package(20000), flat_rule) == Decimal("80.00")

    def test_oversize_unit_surcharged(self, flat_rule):
        """25 kg unit over a 20 kg ceiling: 80 + 5 x 10."""
        assert price_package(package(25000), flat_rule) == Decimal("130.00")

    def test_oversize_rounds_up(self, flat_rule):
        """0.5 kg over the ceiling bills as a full kg."""
        assert price_package(package(20500), flat_rule) == Decimal("90.00")

    def test_missing_base_price_raises(self, make_rule):
        rule = make_rule(base_price=None)
        with pytest.raises(RuleDocumentError):
            price_package(package(1000), rule)


# =============================================================================
# TIERED PRICING TESTS
# =============================================================================

class TestTieredPricing:
    """Tests for weight tier lookup."""

    @pytest.mark.parametrize("weight_grams,expected", [
        (0, "60.00"),
        (4999, "60.00"),
        (5000, "90.00"),        # Lower bound inclusive
        (9999, "90.00"),
        (10000, "150.00"),
        (19999, "150.00"),
    ])
    def test_tier_lookup(self, tiered_rule, weight_grams, expected):
        assert price_package(package(weight_grams), tiered_rule) == Decimal(expected)

    def test_top_max_no_overflow(self, tiered_rule):
        """Exactly at the top max: top price, zero started kg above it."""
        assert price_package(package(20000), tiered_rule) == Decimal("150.00")

    def test_overflow_rounds_up(self, tiered_rule):
        assert price_package(package(20001), tiered_rule) == Decimal("160.00")
        assert price_package(package(21500), tiered_rule) == Decimal("170.00")

    def test_every_weight_in_range_priced_by_a_tier(self, tiered_rule):
        """Every weight in [0, top max) resolves to exactly one tier price."""
        tier_prices = {Decimal(p) for _, _, p in TIERS}
        packages = [package(g) for g in range(0, 20000, 250)]
        priced = price_rule(packages, tiered_rule, 0)

        assert len(priced.packages) == len(packages)
        assert all(p.price in tier_prices for p in priced.packages)

    def test_overflow_monotonic(self, tiered_rule):
        """Above the top max, price never drops and rises with each whole kg."""
        weights = range(20000, 30001, 250)
        prices = [price_package(package(g), tiered_rule) for g in weights]
        assert prices == sorted(prices)

        steps = [price_package(package(20001 + 1000 * k), tiered_rule) for k in range(5)]
        assert all(later > earlier for earlier, later in zip(steps, steps[1:]))

    def test_package_order_preserved(self, tiered_rule):
        packages = [package(12000), package(1000), package(7000)]
        priced = price_rule(packages, tiered_rule, 0)
        assert [p.price for p in priced.packages] == [
            Decimal("150.00"), Decimal("60.00"), Decimal("90.00"),
        ]

    def test_tiers_frame_in_grams_and_cents(self, tiered_rule):
        df = tiers_frame(tiered_rule)
        assert df["min_grams"].to_list() == [0, 5000, 10000]
        assert df["max_grams"].to_list() == [5000, 10000, 20000]
        assert df["tier_price_cents"].to_list() == [6000, 9000, 15000]


# =============================================================================
# EXTRA ITEM COST TESTS
# =============================================================================

class TestExtraItemCost:
    """Units after the first in a package pay cost_per_extra_item."""

    def test_first_unit_included(self, make_rule):
        rule = make_rule(base_price="80", cost_per_extra_item="5")
        assert price_package(package(1000, item_count=1), rule) == Decimal("80.00")

    def test_each_further_unit_charged(self, make_rule):
        """3 units: 80 + 2 x 5."""
        rule = make_rule(base_price="80", cost_per_extra_item="5")
        assert price_package(package(3000, item_count=3), rule) == Decimal("90.00")

    def test_added_to_tier_price(self, make_rule):
        rule = make_rule(base_price=None, tiers=TIERS, cost_per_extra_item="2.50")
        assert price_package(package(6000, item_count=4), rule) == Decimal("97.50")

    def test_charged_per_package(self, make_rule):
        rule = make_rule(base_price="80", cost_per_extra_item="5")
        result = price_rule([package(10000, item_count=10), package(5000, item_count=5)], rule, 0)
        assert [p.price for p in result.packages] == [Decimal("125.00"), Decimal("100.00")]
        assert result.total == Decimal("225.00")

    def test_zero_by_default(self, flat_rule):
        assert price_package(package(3000, item_count=3), flat_rule) == Decimal("80.00")

    def test_free_rule_still_zero(self, make_rule):
        rule = make_rule(base_price="80", cost_per_extra_item="5", threshold="100")
        result = price_rule([package(3000, item_count=3)], rule, 10000)
        assert result.total == Decimal("0.00")
        assert result.packages[0].price == Decimal("0.00")

    def test_column_in_frame(self, make_rule):
        rule = make_rule(base_price="80", cost_per_extra_item="5")
        df, _ = price_frame(
            pl.DataFrame({"package_index": [0], "weight_grams": [3000], "item_count": [3]}),
            rule,
        )
        assert df["cost_extra_items"].to_list() == [1000]
        assert df["cost_package"].to_list() == [9000]


# =============================================================================
# BROKEN TIER TESTS
# =============================================================================

class TestBrokenTiers:
    """Tiers with gaps or overlaps degrade instead of failing."""

    def test_gap_falls_back_to_weight_from_zero(self, make_rule):
        """3.2 kg under broken tiers: 4 started kg x $10."""
        rule = make_rule(base_price=None, tiers=[(0, 5, "60"), (6, 10, "90")])
        result = price_rule([package(3200)], rule, 0)

        assert result.total == Decimal("40.00")
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].code == "invalid_weight_tiers"
        assert result.diagnostics[0].rule_id == "R1"
        assert "gap" in result.diagnostics[0].message

    def test_overlap_reported(self, make_rule):
        rule = make_rule(base_price=None, tiers=[(0, 5, "60"), (4, 10, "90")])
        result = price_rule([package(1000)], rule, 0)
        assert "overlap" in result.diagnostics[0].message

    def test_warning_logged(self, make_rule, caplog):
        rule = make_rule(base_price=None, tiers=[(1, 5, "60")])
        with caplog.at_level(logging.WARNING, logger="shipping_rules.pipeline.pricing"):
            price_rule([package(1000)], rule, 0)
        assert "invalid weight tiers" in caplog.text

    def test_valid_tiers_no_diagnostics(self, tiered_rule):
        assert price_rule([package(1000)], tiered_rule, 0).diagnostics == ()


# =============================================================================
# AGGREGATE AND FREE SHIPPING TESTS
# =============================================================================

class TestPriceAll:
    """Tests for rule totals and free-shipping overrides."""

    def test_sum_of_packages(self, flat_rule):
        total = price_all([package(20000), package(10000)], flat_rule, Decimal("750"))
        assert total == Decimal("160.00")

    def test_unconditional_free(self, make_rule):
        rule = make_rule(base_price="80", free=True)
        result = price_rule([package(1000), package(1000)], rule, 0)

        assert result.total == Decimal("0.00")
        assert result.is_free
        assert result.free_reason == FREE_UNCONDITIONAL
        assert [p.price for p in result.packages] == [Decimal("0.00"), Decimal("0.00")]

    def test_threshold_met(self, make_rule):
        rule = make_rule(base_price="80", threshold="700")
        assert price_all([package(1000)], rule, Decimal("750")) == Decimal("0.00")

    def test_threshold_exact_boundary(self, make_rule):
        """Subtotal equal to the threshold ships free."""
        rule = make_rule(base_price="80", threshold="700")
        result = price_rule([package(1000)], rule, 70000)
        assert result.total == Decimal("0.00")
        assert result.free_reason == FREE_THRESHOLD

    def test_threshold_one_cent_below(self, make_rule):
        rule = make_rule(base_price="80", threshold="700")
        assert price_all([package(1000)], rule, Decimal("699.99")) == Decimal("80.00")

    def test_zero_price_is_free(self, make_rule):
        rule = make_rule(base_price="0")
        result = price_rule([package(1000)], rule, 0)
        assert result.is_free
        assert result.free_reason is None

    def test_no_float_drift(self, make_rule):
        """100 packages at $0.10 add up to exactly $10.00."""
        rule = make_rule(base_price="0.10")
        total = price_all([package(100)] * 100, rule, 0)
        assert total == Decimal("10.00")
