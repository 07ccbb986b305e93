"""Fixed-point formatting for raw token amounts."""

from __future__ import annotations


def format_units(amount: int | str, decimals: int = 18) -> str:
    """Render a raw integer amount as a decimal string with `decimals` places.

    Trailing zeros of the fractional part are trimmed but at least one digit
    is kept, so whole values render as "N.0".

    >>> format_units(1_500_000, 6)
    '1.5'
    >>> format_units(10**18)
    '1.0'
    """
    value = int(amount)
    if decimals < 0:
        raise ValueError(f"decimals must be >= 0, got {decimals}")
    sign = "-" if value < 0 else ""
    whole, frac = divmod(abs(value), 10**decimals)
    frac_str = str(frac).rjust(decimals, "0").rstrip("0") if decimals else ""
    return f"{sign}{whole}.{frac_str or '0'}"
