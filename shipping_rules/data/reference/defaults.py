"""
Rule Defaults

Fallback values for rule documents that omit package limits, overflow cost or
delivery times. Passed explicitly through the API (never read as a hidden
global) so callers and tests can vary them.
"""

from decimal import Decimal
from typing import NamedTuple


class RuleDefaults(NamedTuple):
    max_weight_kg: float = 20.0                 # Per physical package
    max_items: int = 10                         # Units per physical package
    cost_per_extra_kg: Decimal = Decimal("10")  # Per started kg over the limit
    min_days: int = 3                           # Business days
    max_days: int = 7


DEFAULTS = RuleDefaults()
