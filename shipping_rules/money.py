"""
Money Helpers

All engine arithmetic runs on integer cents. Amounts are converted once on the
way in (to_cents) and once on the way out (from_cents), so summing many
packages never accumulates float drift.
"""

from decimal import Decimal, ROUND_HALF_UP, InvalidOperation

from .errors import RuleDocumentError


CENT = Decimal("0.01")


def to_cents(amount) -> int:
    """
    Convert an amount (int, float, str or Decimal) to integer cents.

    Floats go through str() first so 0.1 becomes exactly 10 cents.

    Raises:
        RuleDocumentError: If the amount is not numeric or too large to represent
    """
    if isinstance(amount, bool):
        raise RuleDocumentError(f"Amount must be numeric, got {amount!r}")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except (InvalidOperation, ValueError) as e:
        raise RuleDocumentError(f"Amount must be numeric, got {amount!r}") from e
    if not value.is_finite():
        raise RuleDocumentError(f"Amount must be finite, got {amount!r}")
    try:
        return int(value.quantize(CENT, rounding=ROUND_HALF_UP) * 100)
    except InvalidOperation as e:
        raise RuleDocumentError(f"Amount out of range, got {amount!r}") from e


def from_cents(cents: int) -> Decimal:
    """Integer cents back to a two-place Decimal."""
    return (Decimal(int(cents)) / 100).quantize(CENT)


def to_grams(weight_kg) -> int:
    """
    Convert a weight in kg to whole grams.

    Package limits are compared in grams so that 10 x 0.1 kg is exactly 1 kg.
    """
    if isinstance(weight_kg, bool):
        raise RuleDocumentError(f"Weight must be numeric, got {weight_kg!r}")
    try:
        value = Decimal(str(weight_kg).strip())
    except (InvalidOperation, ValueError) as e:
        raise RuleDocumentError(f"Weight must be numeric, got {weight_kg!r}") from e
    if not value.is_finite():
        raise RuleDocumentError(f"Weight must be finite, got {weight_kg!r}")
    try:
        return int((value * 1000).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    except InvalidOperation as e:
        raise RuleDocumentError(f"Weight out of range, got {weight_kg!r}") from e


def grams_to_kg(grams: int) -> float:
    return round(grams / 1000, 3)
