"""
Option Aggregator

Turns eligible item groups into sorted, priced shipping options.

    subtotal   = sum(price * quantity) over eligible items only
    options    = one per winning-rule group: build packages, then price them
                 against the subtotal of that group's own items
    sort       = free first, then total cost, then delivery min_days
    selection  = previous rule if still offered, else the first option,
                 else None (caller blocks checkout)

Ineligible items never reach the subtotal or any option's cost. They are
passed through untouched so the caller can decide between blocking checkout
and shipping a reduced order.
"""

from typing import NamedTuple

import polars as pl

from ..models import CartItem, Diagnostic, ItemWithRule, ShippingOption
from ..money import from_cents, to_cents
from .columns import OPTION_REPORT_COLS, PACKAGE_REPORT_COLS
from .packaging import build_packages
from .pricing import price_rule


class AggregatedOptions(NamedTuple):
    options: tuple[ShippingOption, ...]
    selected_option: ShippingOption | None
    ineligible_items: tuple[CartItem, ...]
    subtotal_cents: int
    diagnostics: tuple[Diagnostic, ...] = ()


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def aggregate_options(
    groups: dict[str, list[ItemWithRule]],
    unshippable_items: list[CartItem],
    previous_rule_id: str | None = None,
) -> AggregatedOptions:
    """
    Build, sort and select shipping options.

    Args:
        groups: Eligible items keyed by winning rule id (see group_by_rule)
        unshippable_items: Items no rule covers
        previous_rule_id: Rule id of the option the customer had selected

    Returns:
        AggregatedOptions
    """
    eligible_items = [entry.item for entries in groups.values() for entry in entries]
    subtotal_cents = calculate_subtotal(eligible_items)

    options = []
    diagnostics = []
    for entries in groups.values():
        group_subtotal_cents = calculate_subtotal([entry.item for entry in entries])
        option, rule_diagnostics = _build_option(entries, group_subtotal_cents)
        options.append(option)
        diagnostics.extend(rule_diagnostics)

    options = sort_options(options)

    return AggregatedOptions(
        options=tuple(options),
        selected_option=select_default(options, previous_rule_id),
        ineligible_items=tuple(unshippable_items),
        subtotal_cents=subtotal_cents,
        diagnostics=tuple(diagnostics),
    )


def calculate_subtotal(items: list[CartItem]) -> int:
    """Sum of price * quantity, in cents."""
    return sum(to_cents(item.product.price) * int(item.quantity) for item in items)


def _build_option(entries: list[ItemWithRule], group_subtotal_cents: int):
    rule = entries[0].rule
    items = [entry.item for entry in entries]

    packages = build_packages(items, rule)
    pricing = price_rule(packages, rule, group_subtotal_cents)

    option = ShippingOption(
        rule_id=rule.id,
        name=rule.name,
        packages=pricing.packages,
        total_cost=pricing.total,
        is_free=pricing.is_free,
        delivery_estimate=rule.delivery_estimate,
        items=tuple(items),
        free_reason=pricing.free_reason,
    )
    return option, pricing.diagnostics


# =============================================================================
# SORTING AND SELECTION
# =============================================================================

def sort_options(options: list[ShippingOption]) -> list[ShippingOption]:
    """
    Free options first (however many packages), then cheapest, then fastest.

    The sort is stable, so full ties keep group order.
    """
    return sorted(
        options,
        key=lambda o: (not o.is_free, o.total_cost, o.delivery_estimate.min_days),
    )


def select_default(
    options: list[ShippingOption],
    previous_rule_id: str | None = None,
) -> ShippingOption | None:
    """Keep the previous selection if still offered, else take the first option."""
    if not options:
        return None
    if previous_rule_id is not None:
        for option in options:
            if option.rule_id == previous_rule_id:
                return option
    return options[0]


# =============================================================================
# REPORT FRAMES
# =============================================================================

def options_frame(
    options: list[ShippingOption],
    selected_option: ShippingOption | None = None,
) -> pl.DataFrame:
    """One row per option, in display order."""
    selected_id = selected_option.rule_id if selected_option is not None else None
    rows = [
        {
            "rank": rank,
            "rule_id": o.rule_id,
            "name": o.name,
            "package_count": len(o.packages),
            "item_count": sum(p.item_count for p in o.packages),
            "total_weight_kg": round(sum(p.weight_grams for p in o.packages) / 1000, 3),
            "total_cost": float(o.total_cost),
            "is_free": o.is_free,
            "free_reason": o.free_reason,
            "min_days": o.delivery_estimate.min_days,
            "max_days": o.delivery_estimate.max_days,
            "selected": o.rule_id == selected_id,
        }
        for rank, o in enumerate(options, start=1)
    ]
    schema = {
        "rank": pl.Int64,
        "rule_id": pl.Utf8,
        "name": pl.Utf8,
        "package_count": pl.Int64,
        "item_count": pl.Int64,
        "total_weight_kg": pl.Float64,
        "total_cost": pl.Float64,
        "is_free": pl.Boolean,
        "free_reason": pl.Utf8,
        "min_days": pl.Int64,
        "max_days": pl.Int64,
        "selected": pl.Boolean,
    }
    return pl.DataFrame(rows, schema=schema).select(OPTION_REPORT_COLS)


def packages_frame(options: list[ShippingOption]) -> pl.DataFrame:
    """One row per (package, product slice) across all options."""
    rows = [
        {
            "rule_id": o.rule_id,
            "package_index": index,
            "product_id": entry.product.id,
            "quantity": entry.quantity,
            "package_weight_kg": package.total_weight,
            "package_price": float(from_cents(package.price_cents or 0)),
        }
        for o in options
        for index, package in enumerate(o.packages)
        for entry in package.entries
    ]
    schema = {
        "rule_id": pl.Utf8,
        "package_index": pl.Int64,
        "product_id": pl.Utf8,
        "quantity": pl.Int64,
        "package_weight_kg": pl.Float64,
        "package_price": pl.Float64,
    }
    return pl.DataFrame(rows, schema=schema).select(PACKAGE_REPORT_COLS)
