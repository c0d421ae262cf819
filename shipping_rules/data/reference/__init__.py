"""
Reference Data

Static tables and fallback configuration used by the pipeline.
"""

from .defaults import RuleDefaults, DEFAULTS
from .states import (
    STATE_ABBREVIATIONS,
    ZIP_PREFIXES,
    STATE_PREFIX,
    NATIONAL_TOKEN,
    state_abbreviation,
    state_from_zip,
)

__all__ = [
    "RuleDefaults",
    "DEFAULTS",
    "STATE_ABBREVIATIONS",
    "ZIP_PREFIXES",
    "STATE_PREFIX",
    "NATIONAL_TOKEN",
    "state_abbreviation",
    "state_from_zip",
]
