"""
Shipping Resolution

Cart, address and rules in; sorted shipping options out. The engine does no
I/O: callers load the snapshots beforehand and pass them by value, so the same
inputs always produce the same packages, prices and default selection.

INPUTS
------
    cart_items          - CartItem list (products carry their rule_ids)
    address             - Address (zip and/or state required)
    rules               - ShippingRule list, active or not (filtered here);
                          raw rule documents (dicts) are normalized first
    previous_rule_id    - Rule of the option the customer had selected
                          (kept selected if still offered)

OUTPUT
------
    ShippingResolution:
        options             - sorted, free first then cheapest then fastest
        selected_option     - default selection, None if nothing can ship
        ineligible_items    - items no rule covers for this address
        subtotal            - eligible items only
        diagnostics         - non-fatal rule problems (e.g. broken tiers)
        is_complete         - False for empty cart / address without zip+state
        calculator_version

USAGE
-----
    from shipping_rules import resolve_shipping
    result = resolve_shipping(cart_items, address, rules)
"""

import logging
from decimal import Decimal

from .data.reference import DEFAULTS, RuleDefaults
from .models import Address, CartItem, ShippingResolution, ShippingRule
from .money import from_cents
from .pipeline import aggregate_options, filter_eligible, group_by_rule, is_resolvable
from .rules import rule_from_document
from .version import VERSION


logger = logging.getLogger(__name__)


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def resolve_shipping(
    cart_items: list[CartItem],
    address: Address | None,
    rules: list[ShippingRule],
    previous_rule_id: str | None = None,
    defaults: RuleDefaults = DEFAULTS,
) -> ShippingResolution:
    """
    Resolve shipping options for a cart and destination.

    Never raises for business conditions: no coverage, no options, empty cart
    and incomplete address all come back as data. Raises RuleDocumentError
    only when a rule is missing required numeric data.

    Args:
        cart_items: Cart snapshot
        address: Destination snapshot
        rules: Rule snapshot
        previous_rule_id: Previously selected rule id, if any
        defaults: Fallback limits, overflow cost and delivery times used
            when rules are passed as raw documents (dicts)

    Returns:
        ShippingResolution
    """
    cart_items = list(cart_items or [])
    rules = _coerce_rules(rules or [], defaults)

    if not cart_items or not is_resolvable(address):
        logger.info(
            "Incomplete shipping input (%d items, address %s)",
            len(cart_items), "missing" if not is_resolvable(address) else "ok",
        )
        return _incomplete()

    # Phase 1: Winning rule per item
    eligible, ineligible = filter_eligible(cart_items, address, rules)

    # Phase 2: Group by winning rule
    groups = group_by_rule(eligible)

    # Phase 3: Package, price, sort, select
    aggregated = aggregate_options(groups, ineligible, previous_rule_id)

    if ineligible:
        logger.info(
            "%d of %d cart items cannot ship to %s",
            len(ineligible), len(cart_items), address.zip or address.state,
        )

    return ShippingResolution(
        options=aggregated.options,
        selected_option=aggregated.selected_option,
        ineligible_items=aggregated.ineligible_items,
        subtotal=from_cents(aggregated.subtotal_cents),
        diagnostics=aggregated.diagnostics,
        is_complete=True,
        calculator_version=VERSION,
    )


def _coerce_rules(rules, defaults: RuleDefaults) -> list[ShippingRule]:
    """Accept built rules and raw rule documents side by side."""
    return [
        rule if isinstance(rule, ShippingRule) else rule_from_document(rule, defaults)
        for rule in rules
    ]


def _incomplete() -> ShippingResolution:
    """Neutral result for input that cannot be resolved yet."""
    return ShippingResolution(
        options=(),
        selected_option=None,
        ineligible_items=(),
        subtotal=Decimal("0.00"),
        diagnostics=(),
        is_complete=False,
        calculator_version=VERSION,
    )


__all__ = [
    "resolve_shipping",
]
