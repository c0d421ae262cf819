"""
Domain Records

Immutable inputs and outputs of one resolution. Everything here is a
NamedTuple (or a tuple of them), so a resolution can never mutate the
snapshots it was given.

INPUTS (supplied by collaborators)
----------------------------------
    Address         - Destination (zip, state name, city, colonia)
    Product         - Catalog snapshot (weight kg, price, assigned rule ids)
    CartItem        - (product, quantity)
    ShippingRule    - Coverage, limits, pricing, free-shipping policy

OUTPUTS (engine-created, live for one call)
-------------------------------------------
    Package             - Consolidated units for one rule
    ShippingOption      - One priced option per winning rule
    ShippingResolution  - Sorted options, default selection, ineligible items
"""

from decimal import Decimal
from enum import IntEnum
from typing import NamedTuple

from .money import from_cents, grams_to_kg


# =============================================================================
# INPUTS
# =============================================================================

class Address(NamedTuple):
    """Destination address. Only zip and state take part in coverage."""
    zip: str = ""
    state: str = ""
    city: str = ""
    colonia: str | None = None


class Product(NamedTuple):
    """
    Product snapshot.

    rule_ids is the set of rules the product may ship under. An empty set
    means the product is unshippable, never "any rule applies".
    """
    id: str
    weight: float
    price: Decimal
    rule_ids: frozenset[str] = frozenset()
    name: str | None = None


class CartItem(NamedTuple):
    product: Product
    quantity: int = 1


# =============================================================================
# SHIPPING RULE
# =============================================================================

class WeightTier(NamedTuple):
    """Weight band [min_kg, max_kg) with a flat price."""
    min_kg: float
    max_kg: float
    price: Decimal


class Pricing(NamedTuple):
    """
    Package pricing policy.

    Flat when tiers is empty (base_price per package). Tiered otherwise, with
    cost_per_extra_kg charged per started kg above the highest tier.
    cost_per_extra_item is charged per unit after the first in each package.
    """
    base_price: Decimal | None = None
    tiers: tuple[WeightTier, ...] = ()
    cost_per_extra_kg: Decimal = Decimal("0")
    cost_per_extra_item: Decimal = Decimal("0")

    @property
    def is_tiered(self) -> bool:
        return len(self.tiers) > 0

    @property
    def reference_price(self) -> Decimal:
        """Price used to rank rules: base price, or the lowest tier price."""
        if self.is_tiered:
            return min(t.price for t in self.tiers)
        return self.base_price if self.base_price is not None else Decimal("0")


class PackageLimits(NamedTuple):
    max_weight_kg: float
    max_items: int


class DeliveryEstimate(NamedTuple):
    min_days: int
    max_days: int


class ShippingRule(NamedTuple):
    """
    Shipping rule.

    coverage tokens:
        "national"      - whole country
        "state_<ABBR>"  - one state, e.g. "state_PUE"
        "01500"         - one zip
        "01000-01999"   - inclusive zip range
    """
    id: str
    name: str
    coverage: frozenset[str]
    package_limits: PackageLimits
    pricing: Pricing
    delivery_estimate: DeliveryEstimate
    active: bool = True
    free_shipping_unconditional: bool = False
    free_shipping_threshold: Decimal | None = None


# =============================================================================
# COVERAGE
# =============================================================================

class CoverageRank(IntEnum):
    """Match specificity. Higher wins."""
    NATIONAL = 1
    STATE = 2
    ZIP = 3


class CoverageMatch(NamedTuple):
    rank: CoverageRank
    token: str


class ItemWithRule(NamedTuple):
    """An eligible cart item and the rule it won."""
    item: CartItem
    rule: ShippingRule
    match: CoverageMatch


# =============================================================================
# OUTPUTS
# =============================================================================

class PackageEntry(NamedTuple):
    """A quantity slice of one product inside a package."""
    product: Product
    quantity: int


class Package(NamedTuple):
    """
    Physical package.

    Weight is carried in whole grams and price in cents; total_weight and
    price expose them in kg and currency units.
    """
    entries: tuple[PackageEntry, ...]
    weight_grams: int
    item_count: int
    price_cents: int | None = None

    @property
    def total_weight(self) -> float:
        return grams_to_kg(self.weight_grams)

    @property
    def price(self) -> Decimal | None:
        if self.price_cents is None:
            return None
        return from_cents(self.price_cents)


class ShippingOption(NamedTuple):
    rule_id: str
    name: str
    packages: tuple[Package, ...]
    total_cost: Decimal
    is_free: bool
    delivery_estimate: DeliveryEstimate
    items: tuple[CartItem, ...]
    free_reason: str | None = None


class Diagnostic(NamedTuple):
    """Non-fatal problem found while resolving (e.g. broken weight tiers)."""
    rule_id: str
    code: str
    message: str


class ShippingResolution(NamedTuple):
    """
    Result of resolve_shipping().

    is_complete is False when the input could not be resolved at all (empty
    cart, address without zip and state); the shape is the same either way.
    """
    options: tuple[ShippingOption, ...]
    selected_option: ShippingOption | None
    ineligible_items: tuple[CartItem, ...]
    subtotal: Decimal
    diagnostics: tuple[Diagnostic, ...] = ()
    is_complete: bool = True
    calculator_version: str = ""
