"""
Shipping Rule Errors

Exceptional conditions only. "No rule applies" and "nothing can ship" are
normal outcomes and are returned as data, never raised.
"""


class ShippingRuleError(ValueError):
    """Base class for broken rule data."""


class ConfigurationError(ShippingRuleError):
    """
    A rule violates a configuration invariant (weight tier contiguity,
    malformed coverage tokens).

    Raised by validate_rule() at rule-administration time. During resolution
    the engine degrades instead and reports a Diagnostic.
    """


class RuleDocumentError(ShippingRuleError):
    """A rule is missing a required numeric field or holds a non-numeric one."""
