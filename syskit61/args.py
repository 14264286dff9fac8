"""Command-line options shared by the file-copying commands."""

import getopt
import os
import re
import signal
import sys
import time
from typing import List, Optional

from .fileutil import monotonic_timestamp
from .rand import Mt19937

__all__ = ["UsageError", "Io61Args", "parse_size"]

SIZE_MAX = (1 << 64) - 1
DEFAULT_SEED = 5489

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")
_DEC_DIGITS = re.compile(r"[0-9]+")
_FLOAT_PREFIX = re.compile(r"[0-9]+(?:\.[0-9]*)?|\.[0-9]+")
_FLOAT_FULL = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_SUFFIXES = {"k": 1024, "m": 1024 * 1024, "g": 1024 * 1024 * 1024}
_LIMIT_NOTE = "* Run this test in Docker or on the grading server.\n"


class UsageError(Exception):
    """Raised when the command line is not valid; the message is the usage text."""


def parse_size(text: str) -> Optional[int]:
    """Parse a size such as ``4096``, ``0x1000``, ``1.5k`` or ``2m``.

    Returns None if `text` is not a valid size. Exponents are not accepted.
    """
    hexadecimal = len(text) >= 2 and text[0] == "0" and text[1] in "xX"
    if hexadecimal:
        digits = _HEX_DIGITS.match(text, 2).group()
        ptr = 2 + len(digits)
        value = int(digits, 16) if digits else 0
    elif text[:1].isascii() and text[:1].isdigit():
        digits = _DEC_DIGITS.match(text).group()
        ptr = len(digits)
        value = int(digits)
    else:
        ptr = 0
        value = 0

    if ptr == 0 and text.startswith("."):
        pass
    elif ptr == 0 or value > SIZE_MAX:
        return None
    elif ptr == len(text):
        return value

    if hexadecimal:
        fv = float(value)
    else:
        match = _FLOAT_PREFIX.match(text)
        if match is None or "e" in text or "E" in text:
            return None
        fv = float(match.group())
        ptr = match.end()

    if ptr != len(text):
        multiplier = _SUFFIXES.get(text[ptr].lower())
        if multiplier is None or ptr + 1 != len(text):
            return None
        fv *= multiplier

    if round(fv) != fv or fv > SIZE_MAX:
        return None
    return int(fv)


def _parse_float(text: str) -> Optional[float]:
    if _FLOAT_FULL.fullmatch(text) is None:
        return None
    return float(text)


def _apply_as_limit(limit: int) -> None:
    try:
        import resource
    except ImportError:
        resource = None
    if resource is None or sys.platform == "darwin" or not hasattr(resource, "RLIMIT_AS"):
        print(f"\n*** MEMORY LIMIT IGNORED ***\n\n{_LIMIT_NOTE}", file=sys.stderr)
        return
    try:
        resource.setrlimit(resource.RLIMIT_AS, (limit, limit))
    except (OSError, ValueError) as exc:
        print(f"\n*** MEMORY LIMIT IGNORED *** {exc}\n\n{_LIMIT_NOTE}", file=sys.stderr)


def _set_pipe_size(fd: int, size: int) -> None:
    try:
        import fcntl
    except ImportError:
        return
    op = getattr(fcntl, "F_SETPIPE_SZ", None)
    if op is None:
        return
    try:
        fcntl.fcntl(fd, op, size)
    except OSError:
        pass


class Io61Args:
    """Options accepted by a command, described by a getopt-style string.

    A ``#`` in `opts` allows several input files; ``##`` also allows
    several output files.
    """

    def __init__(self, opts: str, block_size: int = 0) -> None:
        self.opts = opts
        self.file_size: Optional[int] = None
        self.block_size = block_size
        self.max_block_size = block_size
        self.initial_offset = 0
        self.stride = 1024
        self.read_lines = False
        self.read_bytewise = False
        self.write_bytewise = False
        self.flush = False
        self.quiet = False
        self.exponential = False
        self.yield_count = 0
        self.hint = False
        self.as_limit = 0
        self.output_file: Optional[str] = None
        self.input_file: Optional[str] = None
        self.input_files: List[Optional[str]] = []
        self.output_files: List[Optional[str]] = []
        self.program_name = ""
        self.engine = Mt19937()
        self.seed = DEFAULT_SEED
        self.delay = 0.0
        self.pipebuf_size = 0
        self.nonblocking = False

    def set_block_size(self, bs: int) -> "Io61Args":
        """Set both the block size and the maximum block size."""
        self.block_size = self.max_block_size = bs
        return self

    def set_seed(self, seed: int) -> "Io61Args":
        """Seed the random engine and remember the seed."""
        self.engine.seed(seed)
        self.seed = seed
        return self

    def _size(self, value: str, nonzero: bool = False) -> int:
        size = parse_size(value)
        if size is None or (nonzero and size == 0):
            raise UsageError(self.usage())
        return size

    def _float(self, value: str) -> float:
        result = _parse_float(value)
        if result is None:
            raise UsageError(self.usage())
        return result

    def parse(self, argv: List[str]) -> "Io61Args":
        """Parse `argv` (program name first). Raises UsageError if invalid."""
        self.program_name = argv[0] if argv else ""
        bs = self.block_size
        max_bs = self.max_block_size
        alarm_interval = 0.0

        try:
            options, rest = getopt.gnu_getopt(list(argv[1:]), self.opts.replace("#", ""))
        except getopt.GetoptError:
            raise UsageError(self.usage()) from None

        for opt, value in options:
            ch = opt[1]
            if ch == "s":
                self.file_size = self._size(value)
            elif ch == "b":
                bs = self._size(value, nonzero=True)
            elif ch == "B":
                max_bs = self._size(value, nonzero=True)
            elif ch == "R":
                self.read_bytewise = True
            elif ch == "W":
                self.write_bytewise = True
            elif ch == "t":
                self.stride = self._size(value, nonzero=True)
            elif ch == "l":
                self.read_lines = True
            elif ch == "F":
                self.flush = True
            elif ch == "X":
                self.exponential = True
            elif ch == "y":
                self.yield_count += 1
            elif ch == "H":
                self.hint = True
            elif ch == "K":
                self.nonblocking = True
            elif ch == "q":
                self.quiet = True
            elif ch == "i":
                self.input_files.append(value)
            elif ch == "o":
                self.output_files.append(value)
            elif ch == "p":
                self.initial_offset = self._size(value)
            elif ch == "r":
                self.engine.seed(self._size(value))
            elif ch == "D":
                self.delay = self._float(value)
            elif ch == "a":
                alarm_interval = self._float(value)
            elif ch == "P":
                self.pipebuf_size = self._size(value)
            elif ch == "A":
                self.as_limit = self._size(value)
            else:
                raise UsageError(self.usage())

        self.input_files.extend(rest)
        if not self.input_files:
            self.input_files.append(None)
        elif len(self.input_files) == 1:
            self.input_file = self.input_files[0]
        elif "#" not in self.opts:
            raise UsageError(self.usage())

        if not self.output_files:
            self.output_files.append(None)
        elif len(self.output_files) == 1:
            self.output_file = self.output_files[0]
        elif "##" not in self.opts:
            raise UsageError(self.usage())

        self.block_size = bs
        self.max_block_size = max(bs, max_bs)

        if alarm_interval > 0:
            signal.signal(signal.SIGALRM, lambda signo, frame: None)
            signal.setitimer(signal.ITIMER_REAL, alarm_interval, alarm_interval)

        if self.as_limit > 0:
            _apply_as_limit(self.as_limit)

        return self

    def usage(self) -> str:
        """Return the usage message for the options this command accepts."""
        more = "..." if "#" in self.opts else ""
        lines = [f"Usage: {self.program_name} [OPTIONS] [FILE]{more}", "Options:"]
        if self.block_size:
            b_line = f"    -b BLOCKSIZE  Set block size (default {self.block_size})"
        else:
            b_line = "    -b BLOCKSIZE  Set block size"
        if self.max_block_size:
            big_b_line = f"    -B BLOCKSIZE  Set max block size (default {self.max_block_size})"
        else:
            big_b_line = "    -B BLOCKSIZE  Set max block size"
        table = [
            ("i", "    -i FILE       Read input from FILE"),
            ("o", "    -o FILE       Write output to FILE"),
            ("q", "    -q            Ignore errors"),
            ("s", "    -s SIZE       Set size written"),
            ("b", b_line),
            ("B", big_b_line),
            ("t", f"    -t STRIDE     Set stride (default {self.stride})"),
            ("p", "    -p POS        Set initial file position"),
            ("l", "    -l            Read by lines"),
            ("R", "    -R            Read bytewise, not blocks"),
            ("W", "    -W            Write bytewise, not blocks"),
            ("F", "    -F            Flush after each write"),
            ("y", "    -y            Yield after each write"),
            ("H", "    -H            Supply hints to library"),
            ("X", "    -X            Use powers of two for block sizes"),
            ("P", "    -P BUFSIZ     Set input pipe buffer size on Linux"),
            ("A", "    -A ASLIMIT    Set address space limit on Linux"),
            ("r", f"    -r            Set random seed (default {self.seed})"),
            ("D", "    -D DELAY      Delay before starting"),
            ("a", "    -a TIME       Set interval timer"),
        ]
        lines.extend(text for ch, text in table if ch in self.opts)
        return "\n".join(lines) + "\n"

    def after_open(self, f=None) -> None:
        """Apply per-file options (``-P``, ``-K``) to `f`, then any start delay.

        `f` may be a descriptor, an object with `fileno`, or None.
        """
        if f is not None:
            fd = f if isinstance(f, int) else f.fileno()
            if self.pipebuf_size > 0:
                _set_pipe_size(fd, self.pipebuf_size)
            if self.nonblocking:
                try:
                    os.set_blocking(fd, False)
                except OSError:
                    pass
        if self.delay > 0:
            now = monotonic_timestamp()
            end = now + self.delay
            while now < end:
                time.sleep(end - now)
                now = monotonic_timestamp()
            self.delay = 0.0

    def after_write(self, f) -> None:
        """Flush `f` if ``-F`` was given, then pause if ``-y`` was given.

        A plain descriptor is never flushed.
        """
        if self.flush and not isinstance(f, int):
            f.flush()
        if self.yield_count > 0:
            time.sleep(self.yield_count / 1e6)