"""
Pricing Engine

Prices the packages of one rule and applies free-shipping overrides.

PER PACKAGE
-----------
    Flat      - base_price. A package above the rule's weight ceiling (only a
                single oversize unit can be) adds cost_per_extra_kg per
                started kg above the ceiling.
    Tiered    - price of the tier with min <= weight < max. At or above the
                top tier's max: top price + cost_per_extra_kg per started kg
                above that max.
    Broken    - tiers that violate contiguity are not trusted at all:
                cost_per_extra_kg per started kg from zero, plus a Diagnostic.

Overflow always rounds up to the next whole kg.

Every package then adds cost_per_extra_item for each unit after its first
(the first unit is covered by the package price).

PER RULE
--------
    total = sum of package prices, then
        free_shipping_unconditional                 -> 0
        qualifying_subtotal >= free_shipping_threshold -> 0
    qualifying_subtotal counts only the eligible items shipping under the rule.

Packages are priced as a DataFrame: one row per package, cross-joined with the
tier table and filtered to the matching bracket. Money is integer cents.
"""

import logging
from decimal import Decimal
from typing import NamedTuple

import polars as pl

from ..errors import RuleDocumentError
from ..models import Diagnostic, Package, ShippingRule
from ..money import from_cents, to_cents, to_grams
from ..rules.validation import check_tiers
from .columns import AFTER_PRICING


logger = logging.getLogger(__name__)


FREE_UNCONDITIONAL = "unconditional"
FREE_THRESHOLD = "threshold"


class RulePricing(NamedTuple):
    """Priced packages and total for one rule."""
    packages: tuple[Package, ...]
    total_cents: int
    is_free: bool
    free_reason: str | None
    diagnostics: tuple[Diagnostic, ...] = ()

    @property
    def total(self) -> Decimal:
        return from_cents(self.total_cents)


# =============================================================================
# MAIN ENTRY POINTS
# =============================================================================

def price_package(package: Package, rule: ShippingRule) -> Decimal:
    """Price of a single package under a rule (no free-shipping override)."""
    df, _ = price_frame(_package_frame([package]), rule)
    return from_cents(df["cost_package"][0])


def price_all(packages: list[Package], rule: ShippingRule, qualifying_subtotal) -> Decimal:
    """
    Total shipping cost of a rule's packages, after free-shipping overrides.

    Args:
        packages: Packages built for the rule
        rule: The rule
        qualifying_subtotal: Subtotal of the eligible items shipping under
            this rule (currency units)
    """
    return price_rule(packages, rule, to_cents(qualifying_subtotal)).total


def price_rule(
    packages: list[Package],
    rule: ShippingRule,
    qualifying_subtotal_cents: int,
) -> RulePricing:
    """
    Price every package of a rule, aggregate, and apply free shipping.

    When free shipping applies, package prices are zeroed as well so that
    package prices always add up to the total.

    Returns:
        RulePricing with priced packages, total, free flag/reason and any
        diagnostics raised while pricing
    """
    if not packages:
        return RulePricing((), 0, rule.free_shipping_unconditional, None)

    df, diagnostics = price_frame(_package_frame(packages), rule)
    total_cents = int(df["cost_package"].sum())

    free_reason = _free_reason(rule, qualifying_subtotal_cents)
    if free_reason is not None:
        costs = [0] * len(packages)
        total_cents = 0
    else:
        costs = df["cost_package"].to_list()

    priced = tuple(
        package._replace(price_cents=int(cost)) for package, cost in zip(packages, costs)
    )
    return RulePricing(
        packages=priced,
        total_cents=total_cents,
        is_free=free_reason is not None or total_cents == 0,
        free_reason=free_reason,
        diagnostics=tuple(diagnostics),
    )


def _free_reason(rule: ShippingRule, qualifying_subtotal_cents: int) -> str | None:
    if rule.free_shipping_unconditional:
        return FREE_UNCONDITIONAL
    threshold = rule.free_shipping_threshold
    if threshold is not None and qualifying_subtotal_cents >= to_cents(threshold):
        return FREE_THRESHOLD
    return None


# =============================================================================
# PRICING FRAME
# =============================================================================

def _package_frame(packages: list[Package]) -> pl.DataFrame:
    return pl.DataFrame(
        {
            "package_index": list(range(len(packages))),
            "weight_grams": [p.weight_grams for p in packages],
            "item_count": [p.item_count for p in packages],
        },
        schema={"package_index": pl.Int64, "weight_grams": pl.Int64, "item_count": pl.Int64},
    )


def tiers_frame(rule: ShippingRule) -> pl.DataFrame:
    """Weight tiers as a DataFrame (grams and cents)."""
    tiers = rule.pricing.tiers
    return pl.DataFrame(
        {
            "min_grams": [to_grams(t.min_kg) for t in tiers],
            "max_grams": [to_grams(t.max_kg) for t in tiers],
            "tier_price_cents": [to_cents(t.price) for t in tiers],
        },
        schema={"min_grams": pl.Int64, "max_grams": pl.Int64, "tier_price_cents": pl.Int64},
    )


def price_frame(df: pl.DataFrame, rule: ShippingRule) -> tuple[pl.DataFrame, list[Diagnostic]]:
    """
    Add pricing columns to a package frame.

    Args:
        df: Frame with package_index, weight_grams, item_count
        rule: Rule whose pricing applies

    Returns:
        (frame with cost_base, overflow_kg, cost_overflow, cost_extra_items,
        cost_package, diagnostics)
    """
    diagnostics = []
    pricing = rule.pricing

    if not pricing.is_tiered:
        df = _apply_flat_price(df, rule)
    else:
        tier_errors = check_tiers(pricing.tiers)
        if tier_errors:
            diagnostic = Diagnostic(
                rule_id=rule.id,
                code="invalid_weight_tiers",
                message="; ".join(tier_errors),
            )
            logger.warning(
                "Rule %s has invalid weight tiers (%s); pricing by weight from zero",
                rule.id, diagnostic.message,
            )
            diagnostics.append(diagnostic)
            df = _apply_fallback_price(df)
        else:
            df = _lookup_tier_price(df, rule)

    df = _apply_overflow_cost(df, rule)
    df = _apply_extra_item_cost(df, rule)
    df = df.with_columns(
        (pl.col("cost_base") + pl.col("cost_overflow") + pl.col("cost_extra_items"))
        .alias("cost_package")
    )
    return df.select(AFTER_PRICING), diagnostics


def _ceil_kg(grams: pl.Expr) -> pl.Expr:
    """Started kg in a (possibly negative) gram amount; negatives become 0."""
    return (grams.clip(lower_bound=0) + 999) // 1000


def _apply_flat_price(df: pl.DataFrame, rule: ShippingRule) -> pl.DataFrame:
    """Flat base price; oversize single-unit packages pay for the excess."""
    if rule.pricing.base_price is None:
        raise RuleDocumentError(f"Rule '{rule.id}' has flat pricing without base_price")
    base_cents = to_cents(rule.pricing.base_price)
    max_grams = to_grams(rule.package_limits.max_weight_kg)

    return df.with_columns([
        pl.lit(base_cents, dtype=pl.Int64).alias("cost_base"),
        _ceil_kg(pl.col("weight_grams") - max_grams).alias("overflow_kg"),
    ])


def _apply_fallback_price(df: pl.DataFrame) -> pl.DataFrame:
    """Broken tiers: every started kg is overflow."""
    return df.with_columns([
        pl.lit(0, dtype=pl.Int64).alias("cost_base"),
        _ceil_kg(pl.col("weight_grams")).alias("overflow_kg"),
    ])


def _lookup_tier_price(df: pl.DataFrame, rule: ShippingRule) -> pl.DataFrame:
    """
    Look up the tier price by weight bracket.

    Packages at or above the top tier's max match no bracket; they get the
    top tier price plus overflow.
    """
    tiers = tiers_frame(rule)
    top = tiers.row(tiers.height - 1, named=True)

    matched = (
        df.select(["package_index", "weight_grams"])
        .join(tiers, how="cross")
        .filter(
            (pl.col("weight_grams") >= pl.col("min_grams")) &
            (pl.col("weight_grams") < pl.col("max_grams"))
        )
        .select(["package_index", "tier_price_cents"])
    )

    df = (
        df
        .join(matched, on="package_index", how="left")
        .sort("package_index")
    )

    return df.with_columns([
        pl.coalesce([pl.col("tier_price_cents"), pl.lit(top["tier_price_cents"])])
        .cast(pl.Int64)
        .alias("cost_base"),

        pl.when(pl.col("tier_price_cents").is_null())
        .then(_ceil_kg(pl.col("weight_grams") - top["max_grams"]))
        .otherwise(pl.lit(0))
        .cast(pl.Int64)
        .alias("overflow_kg"),
    ]).drop("tier_price_cents")


def _apply_overflow_cost(df: pl.DataFrame, rule: ShippingRule) -> pl.DataFrame:
    per_kg_cents = to_cents(rule.pricing.cost_per_extra_kg)
    return df.with_columns(
        (pl.col("overflow_kg") * per_kg_cents).cast(pl.Int64).alias("cost_overflow")
    )


def _apply_extra_item_cost(df: pl.DataFrame, rule: ShippingRule) -> pl.DataFrame:
    """Units after the first in a package pay cost_per_extra_item each."""
    per_item_cents = to_cents(rule.pricing.cost_per_extra_item)
    return df.with_columns(
        ((pl.col("item_count") - 1).clip(lower_bound=0) * per_item_cents)
        .cast(pl.Int64)
        .alias("cost_extra_items")
    )
