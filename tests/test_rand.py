import pytest

from syskit61.rand import (
    RAND_MAX,
    DEFAULT_SEED,
    Mt19937,
    RandEngine,
    bounded_rand,
    rand,
    rand_range,
    srand,
    uniform_int,
)


def test_mt19937_first_output_default_seed():
    assert Mt19937()() == 3499211612


def test_mt19937_ten_thousandth_output():
    engine = Mt19937()
    value = None
    for _ in range(10000):
        value = engine()
    assert value == 4123659995


def test_mt19937_reseed_reproduces_sequence():
    engine = Mt19937(83419)
    first = [engine() for _ in range(700)]
    engine.seed(83419)
    assert [engine() for _ in range(700)] == first


def test_mt19937_outputs_32_bit():
    engine = Mt19937(1)
    assert all(0 <= engine() <= 0xFFFFFFFF for _ in range(1000))


def test_rand_engine_default_state_doubles_seed():
    engine = RandEngine()
    assert engine.state == (DEFAULT_SEED << 32) | DEFAULT_SEED


def test_rand_engine_large_seed_used_directly():
    engine = RandEngine(1 << 40)
    assert engine.state == 1 << 40


def test_rand_engine_rejects_negative_seed():
    with pytest.raises(ValueError):
        RandEngine(-1)


def test_rand_engine_values_within_range():
    engine = RandEngine(7)
    assert all(0 <= engine() <= RAND_MAX for _ in range(1000))


def test_rand_engine_is_deterministic():
    a, b = RandEngine(42), RandEngine(42)
    assert [a() for _ in range(50)] == [b() for _ in range(50)]


def test_rand_engine_randint_bounds():
    engine = RandEngine(3)
    values = [engine.randint(-5, 5) for _ in range(2000)]
    assert min(values) == -5
    assert max(values) == 5


def test_bounded_rand_single_value():
    assert bounded_rand(RandEngine(), 9, 9) == 9


def test_bounded_rand_rejects_inverted_range():
    with pytest.raises(ValueError):
        bounded_rand(RandEngine(), 3, 2)


def test_bounded_rand_rejects_too_wide_range():
    with pytest.raises(ValueError):
        bounded_rand(RandEngine(), 0, RAND_MAX + 1)


def test_global_rand_matches_engine_after_srand():
    srand(5)
    engine = RandEngine(5)
    assert [rand() for _ in range(20)] == [engine() for _ in range(20)]


def test_rand_range_after_srand_matches_engine():
    srand(11)
    engine = RandEngine(11)
    got = [rand_range(0, 99) for _ in range(50)]
    assert got == [engine.randint(0, 99) for _ in range(50)]
    assert all(0 <= v <= 99 for v in got)


def test_uniform_int_full_range_returns_raw_output():
    assert uniform_int(Mt19937(), 0, 0xFFFFFFFF) == 3499211612


def test_uniform_int_small_range_bounds():
    engine = Mt19937(83419)
    values = [uniform_int(engine, 1, 6) for _ in range(3000)]
    assert set(values) == {1, 2, 3, 4, 5, 6}


def test_uniform_int_large_range_within_bounds():
    engine = Mt19937(2)
    high = (1 << 50) + 123
    values = [uniform_int(engine, 10, high) for _ in range(200)]
    assert all(10 <= v <= high for v in values)
    assert max(values) > 1 << 40


def test_uniform_int_with_rand_engine():
    engine = RandEngine(8)
    values = [uniform_int(engine, 0, 3) for _ in range(500)]
    assert set(values) == {0, 1, 2, 3}


def test_uniform_int_degenerate_range():
    assert uniform_int(Mt19937(), 17, 17) == 17


def test_uniform_int_rejects_inverted_range():
    with pytest.raises(ValueError):
        uniform_int(Mt19937(), 5, 4)