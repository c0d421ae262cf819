"""
Pipeline Package

The five stages of a resolution, leaf first:
- coverage: does a rule cover an address, and how specifically
- eligibility: winning rule per cart item, ineligible items
- packaging: heaviest-first consolidation into packages
- pricing: package prices, rule totals, free-shipping overrides
- options: subtotal, one option per rule, sorting, default selection
"""

from .coverage import resolve_coverage, address_state, is_resolvable
from .eligibility import filter_eligible, group_by_rule
from .packaging import build_packages
from .pricing import price_package, price_all, price_rule
from .options import (
    aggregate_options,
    calculate_subtotal,
    sort_options,
    select_default,
    options_frame,
    packages_frame,
)

__all__ = [
    "resolve_coverage",
    "address_state",
    "is_resolvable",
    "filter_eligible",
    "group_by_rule",
    "build_packages",
    "price_package",
    "price_all",
    "price_rule",
    "aggregate_options",
    "calculate_subtotal",
    "sort_options",
    "select_default",
    "options_frame",
    "packages_frame",
]
