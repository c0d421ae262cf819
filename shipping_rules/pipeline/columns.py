"""
Column Schema Definitions

Documents the columns of every DataFrame the pipeline builds. Money columns
are integer cents, weights are whole grams, unless the name says otherwise.
"""


# =============================================================================
# PRICING FRAME (pricing.py)
# =============================================================================

PACKAGE_INPUT_COLS = [
    "package_index",        # Opening order within the rule (0-based)
    "weight_grams",         # Total package weight
    "item_count",           # Units in the package
]

TIER_COLS = [
    "min_grams",            # Tier lower bound (inclusive)
    "max_grams",            # Tier upper bound (exclusive)
    "tier_price_cents",     # Tier price
]

PRICING_COLS = [
    "cost_base",            # Flat base price, tier price, or top tier price on overflow
    "overflow_kg",          # Started kg above the top tier (or above the package limit)
    "cost_overflow",        # overflow_kg * cost_per_extra_kg
    "cost_extra_items",     # (item_count - 1) * cost_per_extra_item
    "cost_package",         # cost_base + cost_overflow + cost_extra_items
]

AFTER_PRICING = PACKAGE_INPUT_COLS + PRICING_COLS


# =============================================================================
# REPORT FRAMES (options.py)
# =============================================================================

OPTION_REPORT_COLS = [
    "rank",                 # Position after sorting (1 = first shown)
    "rule_id",
    "name",
    "package_count",
    "item_count",           # Units covered by the option
    "total_weight_kg",
    "total_cost",           # Currency units (float, display only)
    "is_free",
    "free_reason",          # "unconditional", "threshold" or null
    "min_days",
    "max_days",
    "selected",             # True for the default selection
]

PACKAGE_REPORT_COLS = [
    "rule_id",
    "package_index",
    "product_id",
    "quantity",
    "package_weight_kg",
    "package_price",        # Currency units (float, display only)
]
