"""
Fixed-point money helpers.

Amounts are stored as integers scaled by 10,000 so that
100.00 display units is stored as 1,000,000. Conversion
happens once at the API boundary.
"""

from decimal import Decimal, ROUND_HALF_UP

SCALE = 10_000
_QUANTUM = Decimal("0.0001")


def to_fixed(value: Decimal | int | str) -> int:
    """Convert a display-unit amount to its stored integer form."""
    amount = Decimal(str(value)).quantize(_QUANTUM, rounding=ROUND_HALF_UP)
    return int(amount * SCALE)


def from_fixed(value: int) -> Decimal:
    """Convert a stored integer back to display units."""
    return (Decimal(value) / SCALE).quantize(_QUANTUM)


def scaled_product(a: int, b: int) -> int:
    """
    Multiply two fixed-point values, e.g. shares x price.

    Rounds half away from zero to the nearest stored unit.
    """
    product = Decimal(a) * Decimal(b) / SCALE
    return int(product.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def scaled_quotient(a: int, b: int) -> int:
    """Divide two fixed-point values, e.g. total cost / shares."""
    quotient = Decimal(a) * SCALE / Decimal(b)
    return int(quotient.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
