"""Maurer's universal statistical test for random byte streams."""

import getopt
import math
import os
import sys
from dataclasses import dataclass
from typing import BinaryIO, List, Optional

from .args import parse_size
from .fileutil import stdio_open_check

__all__ = ["InsufficientDataError", "MaurerResult", "maurer_test", "main"]

EXPECTED = 7.1836656
MIN_SAMPLES = 256 * 1024
_CHUNK = 1 << 16


class InsufficientDataError(ValueError):
    """Raised when the input is too short for a meaningful test."""


@dataclass(frozen=True)
class MaurerResult:
    """The test statistic and the acceptance interval around its expectation."""

    statistic: float
    lower: float
    upper: float
    samples: int

    @property
    def too_low(self) -> bool:
        return self.statistic < self.lower

    @property
    def too_high(self) -> bool:
        return self.statistic > self.upper

    @property
    def passed(self) -> bool:
        return not (self.too_low or self.too_high)


def maurer_test(
    stream: BinaryIO, file_size: Optional[int] = None, init_size: int = 4096
) -> MaurerResult:
    """Run the test on up to `file_size` bytes of `stream`.

    The first `init_size` bytes only initialise the table of last positions.
    Raises InsufficientDataError if fewer than 262144 bytes remain after that.
    """
    if init_size <= 0:
        raise ValueError("init_size must be positive")
    table = [0] * 256
    pos = 0
    total = 0.0
    log = math.log
    while file_size is None or pos < file_size:
        want = _CHUNK if file_size is None else min(_CHUNK, file_size - pos)
        chunk = stream.read(want)
        if not chunk:
            break
        for ch in chunk:
            if pos >= init_size:
                total += log(pos - table[ch])
            table[ch] = pos
            pos += 1

    samples = pos - init_size
    if samples < MIN_SAMPLES:
        raise InsufficientDataError("Not enough data to test randomness")
    statistic = (total / samples) / math.log(2.0)
    c = 0.6 + 0.53333333333333333 * samples ** -0.375
    sigma = c * math.sqrt(3.238 / samples)
    return MaurerResult(
        statistic=statistic,
        lower=EXPECTED - 3.30 * sigma,
        upper=EXPECTED + 3.30 * sigma,
        samples=samples,
    )


def _usage(program: str) -> int:
    sys.stderr.write(
        f"Usage: {program} [OPTIONS] [FILE]\nOptions:\n"
        "    -i FILE       Read input from FILE\n"
        "    -s SIZE       Set size read\n"
        "    -q SIZE       Set test initialization size\n"
    )
    return 1


def main(argv: Optional[List[str]] = None) -> int:
    """Test a file (or standard input) for randomness; return the exit status.

    Returns 0 if the test passes, 1 if it fails or on a usage error, and 2
    if there is not enough data.
    """
    program = "randcheck61"
    if argv is None:
        argv = sys.argv[1:]
    try:
        options, rest = getopt.gnu_getopt(list(argv), "i:s:q:")
    except getopt.GetoptError:
        return _usage(program)

    input_files: List[str] = []
    file_size: Optional[int] = None
    init_size = 4096
    for opt, value in options:
        if opt == "-s":
            size = parse_size(value)
            if size is None:
                return _usage(program)
            file_size = size
        elif opt == "-q":
            size = parse_size(value)
            if not size:
                return _usage(program)
            init_size = size
        elif opt == "-i":
            input_files.append(value)
    input_files.extend(rest)
    if not input_files:
        input_files.append("-")
    if len(input_files) != 1:
        return _usage(program)

    name = input_files[0]
    if name == "-":
        stream = sys.stdin.buffer
        display = "<stdin>"
        owned = False
    else:
        stream = stdio_open_check(name, os.O_RDONLY)
        display = name
        owned = True
    try:
        result = maurer_test(stream, file_size, init_size)
    except InsufficientDataError:
        print(f"{display}: Not enough data to test randomness")
        return 2
    finally:
        if owned:
            stream.close()

    if result.too_low:
        print(f"{display}: Test parameter {result.statistic:g} too low")
        return 1
    if result.too_high:
        print(f"{display}: Test parameter {result.statistic:g} too high")
        return 1
    return 0