"""Bit and rounding arithmetic on non-negative integers."""

__all__ = [
    "msb",
    "lsb",
    "round_down",
    "round_up",
    "round_down_pow2",
    "round_up_pow2",
]


def _require_unsigned(x: int, name: str = "x") -> None:
    if x < 0:
        raise ValueError(f"{name} must be non-negative, got {x}")


def msb(x: int) -> int:
    """Return the index of the most significant one bit in `x`, plus one.

    Returns 0 if `x == 0`.
    """
    _require_unsigned(x)
    return x.bit_length()


def lsb(x: int) -> int:
    """Return the index of the least significant one bit in `x`, plus one.

    Returns 0 if `x == 0`. Negative values use two's complement bits.
    """
    return (x & -x).bit_length()


def round_down(x: int, m: int) -> int:
    """Round `x` down to the nearest multiple of `m`."""
    _require_unsigned(x)
    if m <= 0:
        raise ValueError(f"m must be positive, got {m}")
    return x - (x % m)


def round_up(x: int, m: int) -> int:
    """Round `x` up to the nearest multiple of `m`."""
    _require_unsigned(x)
    if m <= 0:
        raise ValueError(f"m must be positive, got {m}")
    return round_down(x + m - 1, m)


def round_down_pow2(x: int) -> int:
    """Return the largest power of 2 less than or equal to `x` (0 for 0)."""
    _require_unsigned(x)
    return 1 << (msb(x) - 1) if x else 0


def round_up_pow2(x: int) -> int:
    """Return the smallest power of 2 greater than or equal to `x` (0 for 0)."""
    _require_unsigned(x)
    return 1 << msb(x - 1) if x else 0