"""
Money helpers.

Amounts are stored and added as integer minor units (cents) so repeated
additions never drift. The API speaks decimals with at most two fractional
digits; conversion happens only at the schema boundary.
"""

from decimal import Decimal, InvalidOperation

CENT = Decimal("0.01")


def to_cents(amount: Decimal | int | str) -> int:
    """
    Convert a decimal amount to integer cents.

    Raises ValueError when the amount has more than two fractional digits
    or is not a finite number.
    """
    try:
        value = Decimal(amount)
    except InvalidOperation as exc:
        raise ValueError(f"Invalid money amount: {amount!r}") from exc
    if not value.is_finite():
        raise ValueError(f"Invalid money amount: {amount!r}")
    quantized = value.quantize(CENT)
    if quantized != value:
        raise ValueError(f"Money amounts allow at most two decimal places: {amount!r}")
    return int(quantized * 100)


def from_cents(cents: int) -> Decimal:
    """Convert integer cents back to a two-place Decimal."""
    return (Decimal(cents) / 100).quantize(CENT)
