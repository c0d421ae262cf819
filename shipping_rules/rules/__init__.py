"""
Rules Package

Building shipping rules from stored documents and validating them.
"""

from .tokens import CoverageToken, parse_token
from .validation import check_tiers, check_coverage, check_rule, validate_rule, validate_rules
from .documents import (
    rule_from_document,
    rules_from_documents,
    load_rules,
    normalize_token,
    parse_delivery_text,
)

__all__ = [
    "CoverageToken",
    "parse_token",
    "check_tiers",
    "check_coverage",
    "check_rule",
    "validate_rule",
    "validate_rules",
    "rule_from_document",
    "rules_from_documents",
    "load_rules",
    "normalize_token",
    "parse_delivery_text",
]
