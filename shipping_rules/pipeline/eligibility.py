"""
Rule Eligibility Filter

Maps each cart item to the rule it ships under, or marks it ineligible.

PER ITEM
--------
    1. Candidates = rules listed in product.rule_ids (in the order of the
       full rule list)
    2. Keep candidates whose coverage matches the address (inactive rules
       never match)
    3. No survivors -> ineligible (surfaced to the caller, never dropped)
    4. Otherwise pick the winning rule

WINNING RULE
------------
Sort key, first difference wins:
    1. Unconditional free shipping first
    2. More specific coverage (ZIP > STATE > NATIONAL)
    3. Lower reference price (flat base price, or lowest tier price)
    4. Earlier position in the full rule list

Selection is per item: two items of one cart can win different rules.
"""

import logging

from ..models import Address, CartItem, ItemWithRule, ShippingRule
from .coverage import resolve_coverage


logger = logging.getLogger(__name__)


def filter_eligible(
    cart_items: list[CartItem],
    address: Address,
    rules: list[ShippingRule],
) -> tuple[list[ItemWithRule], list[CartItem]]:
    """
    Partition cart items into eligible (with winning rule) and ineligible.

    Args:
        cart_items: Cart snapshot
        address: Destination
        rules: All rules, in administration order

    Returns:
        (eligible, ineligible), both in cart order
    """
    positions = {}
    for position, rule in enumerate(rules):
        positions.setdefault(rule.id, position)

    eligible = []
    ineligible = []

    for item in cart_items:
        winner = _select_rule(item, address, rules, positions)
        if winner is None:
            logger.debug("Item %s has no applicable rule", item.product.id)
            ineligible.append(item)
        else:
            logger.debug(
                "Item %s ships under rule %s (%s)",
                item.product.id, winner.rule.id, winner.match.rank.name,
            )
            eligible.append(winner)

    return eligible, ineligible


def _select_rule(
    item: CartItem,
    address: Address,
    rules: list[ShippingRule],
    positions: dict[str, int],
) -> ItemWithRule | None:
    """Winning rule for one item, or None if no assigned rule applies."""
    assigned = item.product.rule_ids
    if not assigned:
        return None

    candidates = []
    for position, rule in enumerate(rules):
        # Duplicate ids: first listed wins
        if rule.id not in assigned or positions[rule.id] != position:
            continue
        match = resolve_coverage(rule, address)
        if match is not None:
            candidates.append(ItemWithRule(item, rule, match))

    if not candidates:
        return None

    return min(candidates, key=lambda c: _rank_key(c, positions))


def _rank_key(candidate: ItemWithRule, positions: dict[str, int]) -> tuple:
    rule = candidate.rule
    return (
        not rule.free_shipping_unconditional,
        -int(candidate.match.rank),
        rule.pricing.reference_price,
        positions[rule.id],
    )


def group_by_rule(eligible: list[ItemWithRule]) -> dict[str, list[ItemWithRule]]:
    """
    Group eligible items by winning rule id.

    Groups appear in the order their first item appears in the cart.
    """
    groups = {}
    for entry in eligible:
        groups.setdefault(entry.rule.id, []).append(entry)
    return groups
