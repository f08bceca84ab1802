"""Scaled-integer arithmetic for VS and USDC amounts.

All amounts and balances are int micro-units (1 unit = 1_000_000 micro).
No float in money paths. Decimal is used only to parse/format at the API edge.
"""

from decimal import Decimal, InvalidOperation

MICRO = 1_000_000
BPS = 10_000

# VS -> USDC conversion: 0.00002 USDC per VS, as an exact fraction
VS_TO_USDC_NUM = 2
VS_TO_USDC_DEN = 100_000


def to_micro(value: Decimal | int | str) -> int:
    """Convert a decimal amount to micro-units. Rejects sub-micro precision."""
    try:
        dec = Decimal(str(value))
    except InvalidOperation as e:
        raise ValueError(f"Not a decimal amount: {value!r}") from e
    if not dec.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    scaled = dec * MICRO
    if scaled != scaled.to_integral_value():
        raise ValueError(f"Amount has more than 6 decimal places: {value!r}")
    return int(scaled)


def micro_to_display(micro: int) -> str:
    """Format micro-units: 3204 -> '0.003204', -1500000 -> '-1.500000'."""
    sign = "-" if micro < 0 else ""
    abs_micro = -micro if micro < 0 else micro
    return f"{sign}{abs_micro // MICRO:,}.{abs_micro % MICRO:06d}"


def vs_to_usdc(vs_micro_num: int, den: int = 1) -> int:
    """Convert (vs_micro_num / den) VS micro to USDC micro, rounded down.

    Taking a numerator/denominator pair lets callers fold their own ratio
    into a single floor division so rounding happens exactly once.
    """
    return (vs_micro_num * VS_TO_USDC_NUM) // (den * VS_TO_USDC_DEN)


def pro_rata(amount: int, part: int, whole: int) -> int:
    """amount * part / whole, rounded down. 0 when whole is 0."""
    if whole <= 0 or part <= 0 or amount <= 0:
        return 0
    return (amount * part) // whole
