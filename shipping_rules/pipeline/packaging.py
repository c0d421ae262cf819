"""
Package Builder

Consolidates the items won by one rule into physical packages.

ALGORITHM (heaviest-first greedy)
---------------------------------
    1. Expand every cart line into single units (quantity 3 -> 3 units);
       limits apply per physical package, not per cart line
    2. Sort units by weight, heaviest first (stable: equal weights keep
       cart order)
    3. Put each unit in the first open package where
           weight + unit <= max_weight  AND  count + 1 <= max_items
       otherwise open a new package

A unit heavier than max_weight on its own still gets its own package; the
pricing stage surcharges the overflow.

Packages are returned in opening order. Identical input always produces
identical packages, which keeps quoted prices stable between page loads.

Weights are compared in whole grams.
"""

from ..models import CartItem, Package, PackageEntry, ShippingRule
from ..money import to_grams


class _OpenPackage:
    """Mutable package used only while packing."""

    def __init__(self):
        self.units = []
        self.weight_grams = 0

    def admits(self, unit_grams: int, max_grams: int, max_items: int) -> bool:
        return (
            self.weight_grams + unit_grams <= max_grams and
            len(self.units) + 1 <= max_items
        )

    def add(self, product, unit_grams: int) -> None:
        self.units.append(product)
        self.weight_grams += unit_grams

    def freeze(self) -> Package:
        # One quantity slice per product, in first-packed order
        quantities = {}
        products = {}
        for product in self.units:
            quantities[product.id] = quantities.get(product.id, 0) + 1
            products.setdefault(product.id, product)
        entries = tuple(
            PackageEntry(products[pid], qty) for pid, qty in quantities.items()
        )
        return Package(
            entries=entries,
            weight_grams=self.weight_grams,
            item_count=len(self.units),
        )


def expand_units(items: list[CartItem]) -> list[tuple]:
    """
    One (product, unit_grams) pair per physical unit, heaviest first.
    """
    units = []
    for item in items:
        unit_grams = to_grams(item.product.weight)
        units.extend((item.product, unit_grams) for _ in range(max(int(item.quantity), 0)))
    units.sort(key=lambda u: u[1], reverse=True)
    return units


def build_packages(items: list[CartItem], rule: ShippingRule) -> list[Package]:
    """
    Pack items into packages under the rule's weight and item ceilings.

    Args:
        items: Cart items assigned to this rule
        rule: Winning rule (its package_limits are used)

    Returns:
        Unpriced packages in opening order
    """
    max_grams = to_grams(rule.package_limits.max_weight_kg)
    max_items = max(int(rule.package_limits.max_items), 1)

    open_packages = []
    for product, unit_grams in expand_units(items):
        target = next(
            (p for p in open_packages if p.admits(unit_grams, max_grams, max_items)),
            None,
        )
        if target is None:
            target = _OpenPackage()
            open_packages.append(target)
        target.add(product, unit_grams)

    return [p.freeze() for p in open_packages]
