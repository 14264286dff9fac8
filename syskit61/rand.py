"""Pseudorandom number generators and integer distributions.

`RandEngine` is a 64-bit linear congruential generator producing 31-bit
values; `Mt19937` is the standard 32-bit Mersenne Twister. `bounded_rand`
maps an engine of range ``[0, RAND_MAX]`` onto an inclusive interval.
`uniform_int` follows the algorithm of the common C++ library
``uniform_int_distribution``.
"""

import threading
from typing import Callable, List

__all__ = [
    "RAND_MAX",
    "RandEngine",
    "Mt19937",
    "bounded_rand",
    "uniform_int",
    "rand",
    "srand",
    "rand_range",
]

RAND_MAX = 0x7FFFFFFF
DEFAULT_SEED = 819234718

_MASK32 = 0xFFFFFFFF
_MASK64 = (1 << 64) - 1
_MULTIPLIER = 6364136223846793005


class RandEngine:
    """A `rand`-style generator that keeps its state in the object."""

    min = 0
    max = RAND_MAX

    def __init__(self, seed: int = DEFAULT_SEED) -> None:
        self.state = 0
        self.seed(seed)

    def seed(self, value: int) -> None:
        """Reseed the engine.

        A value that fits in 32 bits is repeated into both halves of the
        64-bit state; a larger value becomes the state directly.
        """
        if value < 0:
            raise ValueError(f"seed must be non-negative, got {value}")
        if value <= _MASK32:
            self.state = (value << 32) | value
        else:
            self.state = value & _MASK64

    def __call__(self) -> int:
        """Return the next value in ``[0, RAND_MAX]``."""
        self.state = (self.state * _MULTIPLIER + 1) & _MASK64
        return (self.state >> 33) & RAND_MAX

    def randint(self, low: int, high: int) -> int:
        """Return a value roughly evenly distributed in ``[low, high]``."""
        return bounded_rand(self, low, high)


class Mt19937:
    """The 32-bit Mersenne Twister generator."""

    min = 0
    max = _MASK32

    _N = 624
    _M = 397
    _DEFAULT_SEED = 5489

    def __init__(self, seed: int = _DEFAULT_SEED) -> None:
        self._mt: List[int] = []
        self._index = self._N
        self.seed(seed)

    def seed(self, value: int) -> None:
        """Reinitialise the state from a 32-bit seed."""
        state = [value & _MASK32]
        for i in range(1, self._N):
            prev = state[-1]
            state.append((1812433253 * (prev ^ (prev >> 30)) + i) & _MASK32)
        self._mt = state
        self._index = self._N

    def _twist(self) -> None:
        mt = self._mt
        n, m = self._N, self._M
        for i in range(n):
            y = (mt[i] & 0x80000000) | (mt[(i + 1) % n] & 0x7FFFFFFF)
            value = mt[(i + m) % n] ^ (y >> 1)
            if y & 1:
                value ^= 0x9908B0DF
            mt[i] = value
        self._index = 0

    def __call__(self) -> int:
        """Return the next 32-bit value."""
        if self._index >= self._N:
            self._twist()
        y = self._mt[self._index]
        self._index += 1
        y ^= y >> 11
        y ^= (y << 7) & 0x9D2C5680
        y ^= (y << 15) & 0xEFC60000
        y ^= y >> 18
        return y & _MASK32


def bounded_rand(engine: Callable[[], int], low: int, high: int) -> int:
    """Map an engine of range ``[0, RAND_MAX]`` onto ``[low, high]``.

    Requires ``low <= high`` and ``high - low <= RAND_MAX``.
    """
    if low > high:
        raise ValueError(f"low ({low}) must not exceed high ({high})")
    if high - low > RAND_MAX:
        raise ValueError("range is larger than RAND_MAX")
    amount = high - low + 1
    per = (RAND_MAX + 1) // amount
    bound = per * amount
    while True:
        r = engine()
        if r < bound:
            return low + r // per


def _nearly_divisionless(engine: Callable[[], int], range_: int) -> int:
    product = engine() * range_
    low = product & _MASK32
    if low < range_:
        threshold = (-range_ & _MASK32) % range_
        while low < threshold:
            product = engine() * range_
            low = product & _MASK32
    return product >> 32


def _uniform_offset(engine, urange: int) -> int:
    urngmin = engine.min
    urngrange = engine.max - urngmin
    if urngrange > urange:
        uerange = urange + 1
        if urngrange == _MASK32:
            return _nearly_divisionless(lambda: engine() - urngmin, uerange)
        scaling = urngrange // uerange
        past = uerange * scaling
        while True:
            ret = engine() - urngmin
            if ret < past:
                return ret // scaling
    if urngrange < urange:
        while True:
            step = urngrange + 1
            tmp = step * _uniform_offset(engine, urange // step)
            ret = tmp + (engine() - urngmin)
            if tmp <= ret <= urange:
                return ret
    return engine() - urngmin


def uniform_int(engine, low: int, high: int) -> int:
    """Return an integer uniformly distributed in ``[low, high]``.

    `engine` must be callable and carry `min` and `max` attributes giving
    its output range.
    """
    if low > high:
        raise ValueError(f"low ({low}) must not exceed high ({high})")
    return low + _uniform_offset(engine, high - low)


class _GlobalRand:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._engine = RandEngine()
        self._seeded = False

    def seed(self, seed: int) -> None:
        with self._lock:
            self._engine.state = ((seed & _MASK32) << 32) | (seed & _MASK32)
            self._seeded = True

    def __call__(self) -> int:
        with self._lock:
            if not self._seeded:
                self._engine.seed(DEFAULT_SEED)
                self._seeded = True
            return self._engine()


_global_rand = _GlobalRand()


def rand() -> int:
    """Return the next value of the shared generator, in ``[0, RAND_MAX]``."""
    return _global_rand()


def srand(seed: int) -> None:
    """Seed the shared generator with a 32-bit value."""
    _global_rand.seed(seed)


def rand_range(low: int, high: int) -> int:
    """Return a shared-generator value roughly evenly spread in ``[low, high]``."""
    return bounded_rand(rand, low, high)