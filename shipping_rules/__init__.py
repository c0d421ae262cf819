"""
Shipping Rules

Resolves shipping options for a cart: which rule each item ships under,
how items consolidate into packages, and what each option costs.

Structure:
    - calculate_shipping.py: resolve_shipping() entry point
    - rules/: rule documents, coverage tokens, admin-time validation
    - pipeline/: coverage, eligibility, packaging, pricing, options
    - data/: reference tables, defaults, cart loader
    - scripts/: command-line calculator
"""

from .calculate_shipping import resolve_shipping
from .errors import ShippingRuleError, ConfigurationError, RuleDocumentError
from .models import (
    Address,
    Product,
    CartItem,
    WeightTier,
    Pricing,
    PackageLimits,
    DeliveryEstimate,
    ShippingRule,
    Package,
    PackageEntry,
    ShippingOption,
    ShippingResolution,
    Diagnostic,
)
from .version import VERSION

__all__ = [
    "resolve_shipping",
    "VERSION",
    # Errors
    "ShippingRuleError",
    "ConfigurationError",
    "RuleDocumentError",
    # Records
    "Address",
    "Product",
    "CartItem",
    "WeightTier",
    "Pricing",
    "PackageLimits",
    "DeliveryEstimate",
    "ShippingRule",
    "Package",
    "PackageEntry",
    "ShippingOption",
    "ShippingResolution",
    "Diagnostic",
]
