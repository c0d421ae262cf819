"""
Coverage Tokens

Parsing of the raw coverage strings stored on a rule.

    "national"      -> kind "national"
    "state_PUE"     -> kind "state", value "PUE"
    "01500"         -> kind "zip", value "01500"
    "01000-01999"   -> kind "range", start 1000, end 1999
    anything else   -> kind "invalid"
"""

from typing import NamedTuple

from ..data.reference import NATIONAL_TOKEN, STATE_PREFIX


class CoverageToken(NamedTuple):
    kind: str
    raw: str
    value: str = ""
    start: int = 0
    end: int = 0


def _is_zip(value: str) -> bool:
    return len(value) == 5 and value.isdigit()


def parse_token(token: str) -> CoverageToken:
    """Classify a raw coverage token."""
    text = str(token).strip()
    lowered = text.lower()

    if lowered == NATIONAL_TOKEN:
        return CoverageToken("national", text)

    if lowered.startswith(STATE_PREFIX):
        abbr = text[len(STATE_PREFIX):].strip().upper()
        return CoverageToken("state", text, value=abbr) if abbr else CoverageToken("invalid", text)

    if _is_zip(text):
        return CoverageToken("zip", text, value=text)

    if "-" in text:
        start, _, end = (part.strip() for part in text.partition("-"))
        if _is_zip(start) and _is_zip(end):
            return CoverageToken("range", text, start=int(start), end=int(end))

    return CoverageToken("invalid", text)
