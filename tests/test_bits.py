import pytest

from syskit61.bits import (
    lsb,
    msb,
    round_down,
    round_down_pow2,
    round_up,
    round_up_pow2,
)


@pytest.mark.parametrize(
    "x, expected",
    [(0, 0), (1, 1), (2, 2), (3, 2), (0x1FABC, 17), (0x1FFFF, 17)],
)
def test_msb_values(x, expected):
    assert msb(x) == expected


@pytest.mark.parametrize(
    "x, expected",
    [(0, 0), (1, 1), (2, 2), (3, 2), (0x1FABC, 0x10000)],
)
def test_round_down_pow2_values(x, expected):
    assert round_down_pow2(x) == expected


@pytest.mark.parametrize(
    "x, expected",
    [(0, 0), (1, 1), (2, 2), (3, 4), (0x1FABC, 0x20000), (0x1FFFF, 0x20000)],
)
def test_round_up_pow2_values(x, expected):
    assert round_up_pow2(x) == expected


def test_lsb_zero():
    assert lsb(0) == 0


@pytest.mark.parametrize("x", [1, 2, 6, 0x1FABC, 0x80000000, 12345678])
def test_lsb_identifies_lowest_set_bit(x):
    n = lsb(x)
    assert (x >> (n - 1)) & 1 == 1
    assert x & ((1 << (n - 1)) - 1) == 0


def test_lsb_negative_uses_twos_complement():
    assert lsb(-1) == lsb(1)


@pytest.mark.parametrize("x", [1, 5, 64, 0x1FABC, 2**40 + 3])
def test_msb_bounds(x):
    n = msb(x)
    assert 1 << (n - 1) <= x < 1 << n


def test_msb_negative_rejected():
    with pytest.raises(ValueError):
        msb(-5)


@pytest.mark.parametrize("x", [0, 1, 7, 8, 9, 4095, 4096, 4097, 100000])
@pytest.mark.parametrize("m", [1, 8, 4096, 10])
def test_round_down_up_invariants(x, m):
    down = round_down(x, m)
    up = round_up(x, m)
    assert down % m == 0
    assert up % m == 0
    assert down <= x < down + m
    assert up - m < x <= up


def test_round_on_multiple_is_identity():
    assert round_down(8192, 4096) == 8192
    assert round_up(8192, 4096) == 8192


def test_round_rejects_bad_arguments():
    with pytest.raises(ValueError):
        round_down(-1, 8)
    with pytest.raises(ValueError):
        round_up(5, 0)


@pytest.mark.parametrize("x", [1, 3, 5, 17, 1000, 2**33 + 1])
def test_pow2_rounding_bracket(x):
    down = round_down_pow2(x)
    up = round_up_pow2(x)
    assert down & (down - 1) == 0
    assert up & (up - 1) == 0
    assert down <= x <= up
    assert up < 2 * x or x == up
    assert x < 2 * down