"""
Coverage Resolver

Decides whether one rule geographically covers one address, and how
specifically.

PRECEDENCE
----------
    ZIP       - literal zip token, or zip inside an inclusive "start-end" range
    STATE     - "state_<ABBR>" token for the address's state
    NATIONAL  - "national" token

A rule reports its most specific match. Ranks are compared across candidate
rules for the same item (see eligibility.py), never within one rule.

STATE LOOKUP
------------
The address state name is translated through the state table. When the name
is missing or unknown, the state is derived from the zip's two-digit prefix.
"""

from ..data.reference import state_abbreviation, state_from_zip
from ..models import Address, CoverageMatch, CoverageRank, ShippingRule
from ..rules.tokens import parse_token


# =============================================================================
# ADDRESS HELPERS
# =============================================================================

def address_state(address: Address) -> str | None:
    """State abbreviation for an address (name lookup, then zip prefix)."""
    return state_abbreviation(address.state) or state_from_zip(address.zip)


def is_resolvable(address: Address | None) -> bool:
    """An address needs at least a zip or a state to be matched at all."""
    if address is None:
        return False
    return bool((address.zip or "").strip() or (address.state or "").strip())


# =============================================================================
# RESOLVER
# =============================================================================

def resolve_coverage(rule: ShippingRule, address: Address) -> CoverageMatch | None:
    """
    Most specific coverage match of a rule for an address.

    Args:
        rule: Shipping rule
        address: Destination

    Returns:
        CoverageMatch with rank ZIP, STATE or NATIONAL, or None when the rule
        does not apply (inactive, or no token covers the address)
    """
    if not rule.active:
        return None

    tokens = [parse_token(t) for t in sorted(rule.coverage)]
    zip_code = (address.zip or "").strip()

    # ZIP: literal, then range
    if zip_code:
        for token in tokens:
            if token.kind == "zip" and token.value == zip_code:
                return CoverageMatch(CoverageRank.ZIP, token.raw)
        if len(zip_code) == 5 and zip_code.isdigit():
            zip_number = int(zip_code)
            for token in tokens:
                if token.kind == "range" and token.start <= zip_number <= token.end:
                    return CoverageMatch(CoverageRank.ZIP, token.raw)

    # STATE
    abbr = address_state(address)
    if abbr:
        for token in tokens:
            if token.kind == "state" and token.value == abbr:
                return CoverageMatch(CoverageRank.STATE, token.raw)

    # NATIONAL
    for token in tokens:
        if token.kind == "national":
            return CoverageMatch(CoverageRank.NATIONAL, token.raw)

    return None
