"""
Unit Tests for Coverage Resolution

Tests coverage token parsing, state lookup and match precedence.

Run with: pytest shipping_rules/tests/test_coverage.py -v
"""

import pytest

from shipping_rules.data.reference import state_abbreviation, state_from_zip
from shipping_rules.models import Address, CoverageRank
from shipping_rules.pipeline.coverage import address_state, is_resolvable, resolve_coverage
from shipping_rules.rules.tokens import parse_token


# =============================================================================
# TOKEN TESTS
# =============================================================================

class TestParseToken:
    """Tests for coverage token classification."""

    def test_national(self):
        assert parse_token("national").kind == "national"

    def test_national_case_insensitive(self):
        assert parse_token("National").kind == "national"

    def test_state_upper_cased(self):
        token = parse_token("state_pue")
        assert token.kind == "state"
        assert token.value == "PUE"

    def test_literal_zip(self):
        token = parse_token("01500")
        assert token.kind == "zip"
        assert token.value == "01500"

    def test_range(self):
        token = parse_token("01000-01999")
        assert token.kind == "range"
        assert (token.start, token.end) == (1000, 1999)

    @pytest.mark.parametrize("raw", ["", "state_", "1500", "abcde", "01000-", "01000-1999"])
    def test_invalid(self, raw):
        """Anything that is not one of the four shapes is invalid."""
        assert parse_token(raw).kind == "invalid"


# =============================================================================
# STATE LOOKUP TESTS
# =============================================================================

class TestStateLookup:
    """Tests for state name and zip prefix lookup."""

    def test_name_with_accent(self):
        assert state_abbreviation("Querétaro") == "QUE"

    def test_name_without_accent(self):
        """Accents and case are ignored."""
        assert state_abbreviation("queretaro") == "QUE"
        assert state_abbreviation("  NUEVO LEON ") == "NLE"

    def test_alias(self):
        assert state_abbreviation("CDMX") == "CMX"
        assert state_abbreviation("Distrito Federal") == "CMX"

    def test_abbreviation_accepted(self):
        assert state_abbreviation("pue") == "PUE"

    def test_unknown_name(self):
        assert state_abbreviation("Atlantis") is None
        assert state_abbreviation("") is None
        assert state_abbreviation(None) is None

    def test_zip_prefix(self):
        assert state_from_zip("72000") == "PUE"
        assert state_from_zip("01500") == "CMX"
        assert state_from_zip("61000") == "MIC"

    def test_zip_prefix_invalid(self):
        assert state_from_zip("") is None
        assert state_from_zip("X1") is None

    def test_address_state_prefers_name(self):
        """State name wins over the zip prefix."""
        address = Address(zip="72000", state="Tlaxcala")
        assert address_state(address) == "TLA"

    def test_address_state_falls_back_to_zip(self):
        address = Address(zip="72000", state="Atlantis")
        assert address_state(address) == "PUE"


# =============================================================================
# RESOLVER TESTS
# =============================================================================

class TestResolveCoverage:
    """Tests for resolve_coverage."""

    def test_literal_zip_match(self, make_rule, cdmx_address):
        rule = make_rule(coverage=["01500"])
        match = resolve_coverage(rule, cdmx_address)
        assert match.rank == CoverageRank.ZIP
        assert match.token == "01500"

    def test_range_match(self, make_rule, cdmx_address):
        rule = make_rule(coverage=["01000-01999"])
        assert resolve_coverage(rule, cdmx_address).rank == CoverageRank.ZIP

    def test_range_inclusive_bounds(self, make_rule):
        rule = make_rule(coverage=["01000-01999"])
        assert resolve_coverage(rule, Address(zip="01000")) is not None
        assert resolve_coverage(rule, Address(zip="01999")) is not None
        assert resolve_coverage(rule, Address(zip="02000")) is None

    def test_short_zip_not_in_range(self, make_rule):
        """A 4-digit zip is not read as a number inside a 5-digit range."""
        rule = make_rule(coverage=["01000-01999"])
        assert resolve_coverage(rule, Address(zip="1500")) is None
        assert resolve_coverage(rule, Address(zip="001500")) is None

    def test_state_match(self, make_rule, puebla_address):
        rule = make_rule(coverage=["state_PUE"])
        assert resolve_coverage(rule, puebla_address).rank == CoverageRank.STATE

    def test_state_match_from_zip_only(self, make_rule):
        """No state name: the zip prefix identifies the state."""
        rule = make_rule(coverage=["state_PUE"])
        assert resolve_coverage(rule, Address(zip="72500")).rank == CoverageRank.STATE

    def test_national_match(self, make_rule, puebla_address):
        rule = make_rule(coverage=["national"])
        assert resolve_coverage(rule, puebla_address).rank == CoverageRank.NATIONAL

    def test_most_specific_token_reported(self, make_rule, puebla_address):
        rule = make_rule(coverage=["state_PUE", "72000"])
        assert resolve_coverage(rule, puebla_address).rank == CoverageRank.ZIP

    def test_no_match(self, make_rule, cdmx_address):
        rule = make_rule(coverage=["state_PUE", "72000-72999"])
        assert resolve_coverage(rule, cdmx_address) is None

    def test_inactive_never_matches(self, make_rule, cdmx_address):
        rule = make_rule(coverage=["national"], active=False)
        assert resolve_coverage(rule, cdmx_address) is None

    def test_rank_ordering(self):
        assert CoverageRank.ZIP > CoverageRank.STATE > CoverageRank.NATIONAL


class TestIsResolvable:
    """Tests for address completeness."""

    def test_zip_only(self):
        assert is_resolvable(Address(zip="01500"))

    def test_state_only(self):
        assert is_resolvable(Address(state="Puebla"))

    def test_missing_both(self):
        assert not is_resolvable(Address(city="Puebla"))
        assert not is_resolvable(Address(zip="  ", state=""))

    def test_none(self):
        assert not is_resolvable(None)
