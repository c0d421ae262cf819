"""
Rule Validation

Admin-time checks for shipping rules. check_rule() collects every problem;
validate_rule() raises ConfigurationError listing them all.

The resolver never raises for these. A rule with broken weight tiers is still
priced (see pipeline/pricing.py) and reported as a Diagnostic.
"""

from ..data.reference import state_from_zip
from ..errors import ConfigurationError
from ..models import ShippingRule, WeightTier
from ..money import to_grams
from .tokens import parse_token


# =============================================================================
# WEIGHT TIERS
# =============================================================================

def check_tiers(tiers: tuple[WeightTier, ...]) -> list[str]:
    """
    Check the weight tier contiguity invariant.

    Tiers must be sorted by min, start at 0, have max > min, and each max
    must equal the next min (no gaps, no overlaps).
    """
    errors = []
    if not tiers:
        return errors

    bounds = [(to_grams(t.min_kg), to_grams(t.max_kg)) for t in tiers]

    if bounds[0][0] != 0:
        errors.append(f"first tier starts at {tiers[0].min_kg} kg, expected 0")

    for i, (lower, upper) in enumerate(bounds):
        if upper <= lower:
            errors.append(f"tier {i + 1} has max {tiers[i].max_kg} <= min {tiers[i].min_kg}")
        if tiers[i].price < 0:
            errors.append(f"tier {i + 1} has negative price {tiers[i].price}")

    for i in range(len(bounds) - 1):
        upper, next_lower = bounds[i][1], bounds[i + 1][0]
        if next_lower < bounds[i][0]:
            errors.append(f"tiers not sorted by min at tier {i + 2}")
        elif next_lower > upper:
            errors.append(
                f"gap between tier {i + 1} (max {tiers[i].max_kg}) "
                f"and tier {i + 2} (min {tiers[i + 1].min_kg})"
            )
        elif next_lower < upper:
            errors.append(
                f"overlap between tier {i + 1} (max {tiers[i].max_kg}) "
                f"and tier {i + 2} (min {tiers[i + 1].min_kg})"
            )

    return errors


# =============================================================================
# COVERAGE
# =============================================================================

def check_coverage(coverage: frozenset[str]) -> list[str]:
    """
    Check coverage tokens.

    - at least one token
    - every token is national, state_<ABBR>, a 5-digit zip or a zip range
    - national is the only token when present
    - no state listed twice
    - ranges have start <= end
    - no literal zip already covered by a state token of the same rule
    """
    if not coverage:
        return ["coverage is empty"]

    errors = []
    tokens = [parse_token(t) for t in sorted(coverage)]

    for token in tokens:
        if token.kind == "invalid":
            errors.append(f"invalid coverage token '{token.raw}'")
        elif token.kind == "range" and token.start > token.end:
            errors.append(f"zip range '{token.raw}' has start after end")

    if any(t.kind == "national" for t in tokens) and len(tokens) > 1:
        errors.append("national coverage must not be combined with other tokens")

    states = [t.value for t in tokens if t.kind == "state"]
    for abbr in sorted({s for s in states if states.count(s) > 1}):
        errors.append(f"state {abbr} listed more than once")

    for token in tokens:
        if token.kind == "zip":
            abbr = state_from_zip(token.value)
            if abbr and abbr in states:
                errors.append(f"zip {token.value} is already covered by state {abbr}")

    return errors


# =============================================================================
# RULE
# =============================================================================

def check_rule(rule: ShippingRule) -> list[str]:
    """All configuration problems of a rule (empty list if valid)."""
    errors = []

    errors.extend(check_coverage(rule.coverage))
    errors.extend(check_tiers(rule.pricing.tiers))

    if not rule.pricing.is_tiered and rule.pricing.base_price is None:
        errors.append("flat pricing requires base_price")
    if rule.pricing.base_price is not None and rule.pricing.base_price < 0:
        errors.append("base_price must not be negative")
    if rule.pricing.cost_per_extra_kg < 0:
        errors.append("cost_per_extra_kg must not be negative")
    if rule.pricing.cost_per_extra_item < 0:
        errors.append("cost_per_extra_item must not be negative")

    limits = rule.package_limits
    if limits.max_weight_kg <= 0:
        errors.append("max_weight_kg must be positive")
    if limits.max_items < 1:
        errors.append("max_items must be at least 1")

    estimate = rule.delivery_estimate
    if estimate.min_days < 0:
        errors.append("min_days must not be negative")
    if estimate.max_days < estimate.min_days:
        errors.append("max_days must not be less than min_days")

    if rule.free_shipping_threshold is not None and rule.free_shipping_threshold < 0:
        errors.append("free_shipping_threshold must not be negative")

    return errors


def validate_rule(rule: ShippingRule) -> None:
    """
    Validate a rule.

    Raises:
        ConfigurationError: Listing every problem found
    """
    errors = check_rule(rule)
    if errors:
        raise ConfigurationError(
            f"Shipping rule '{rule.id}' configuration errors:\n  " + "\n  ".join(errors)
        )


def validate_rules(rules: list[ShippingRule]) -> None:
    """
    Validate a rule set (each rule, plus unique ids).

    Raises:
        ConfigurationError: Listing every problem found across all rules
    """
    errors = []
    seen = set()
    for rule in rules:
        if rule.id in seen:
            errors.append(f"{rule.id}: duplicate rule id")
        seen.add(rule.id)
        errors.extend(f"{rule.id}: {e}" for e in check_rule(rule))

    if errors:
        raise ConfigurationError("Shipping rule configuration errors:\n  " + "\n  ".join(errors))
