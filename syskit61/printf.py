"""A small printf engine that sends formatted characters to a printer.

Supported conversions are ``%d %i %u %x %X %p %s %c %C`` and ``%%``, with the
flags ``# 0 - space + '``, field width, precision (``*`` takes an argument)
and the length modifiers ``l t z h``. Without ``l`` integers are taken as
32-bit values; with it, as 64-bit values. ``%C`` sets the printer's colour
from an argument and prints nothing.
"""

import operator
from abc import ABC, abstractmethod
from enum import IntFlag
from typing import Iterable, Iterator, Optional, Tuple

__all__ = [
    "COLOR_GRAY",
    "Printer",
    "StringPrinter",
    "snprintf",
    "format_string",
]

COLOR_GRAY = 0x0700

_FLAG_CHARS = "#0- +'"
_UPPER_DIGITS = "0123456789ABCDEF"
_LOWER_DIGITS = "0123456789abcdef"
_MASK32 = 0xFFFFFFFF
_MASK64 = (1 << 64) - 1


class _Flag(IntFlag):
    ALT = 1 << 0
    ZERO = 1 << 1
    LEFTJUSTIFY = 1 << 2
    SPACEPOSITIVE = 1 << 3
    PLUSPOSITIVE = 1 << 4
    THOUSANDS = 1 << 5
    NUMERIC = 1 << 6
    SIGNED = 1 << 7
    NEGATIVE = 1 << 8
    ALT2 = 1 << 9


def _next_arg(args: Iterator):
    try:
        return next(args)
    except StopIteration:
        raise TypeError("not enough arguments for format string") from None


def _wrap_signed(x: int, bits: int) -> int:
    x &= (1 << bits) - 1
    if x >= 1 << (bits - 1):
        x -= 1 << bits
    return x


def _cstr(s: str) -> str:
    return s.split("\0", 1)[0]


def _print_number(val: int, base: int, thousands: bool) -> str:
    digits = _UPPER_DIGITS
    if base < 0:
        digits = _LOWER_DIGITS
        base = -base
    group = 3 if base == 10 else 4
    separator = "," if base == 10 else "'"
    out = []
    count = 0
    while True:
        if thousands and count == group:
            out.append(separator)
            count = 0
        else:
            out.append(digits[val % base])
            val //= base
            count += 1
        if val == 0:
            break
    return "".join(reversed(out))


class Printer(ABC):
    """Base class of formatted output sinks; subclasses define `putc`."""

    color: int = COLOR_GRAY

    @abstractmethod
    def putc(self, c: int) -> None:
        """Emit the character with code `c`."""

    def printf(self, fmt: str, *args) -> None:
        """Format `args` according to `fmt` and emit the result."""
        self.vprintf(fmt, args)

    def vprintf(self, fmt: str, args: Iterable) -> None:
        """Format the values from the iterable `args` according to `fmt`."""
        it = iter(args)
        n = len(fmt)
        i = 0
        while i < n:
            if fmt[i] != "%":
                self.putc(ord(fmt[i]))
                i += 1
                continue
            i += 1

            flags = _Flag(0)
            while i < n and fmt[i] in _FLAG_CHARS:
                flags |= _Flag(1 << _FLAG_CHARS.index(fmt[i]))
                i += 1

            width = -1
            if i < n and "1" <= fmt[i] <= "9":
                width = 0
                while i < n and fmt[i].isdigit() and fmt[i].isascii():
                    width = 10 * width + ord(fmt[i]) - ord("0")
                    i += 1
            elif i < n and fmt[i] == "*":
                width = operator.index(_next_arg(it))
                i += 1

            precision = -1
            if i < n and fmt[i] == ".":
                i += 1
                if i < n and "0" <= fmt[i] <= "9":
                    precision = 0
                    while i < n and "0" <= fmt[i] <= "9":
                        precision = 10 * precision + ord(fmt[i]) - ord("0")
                        i += 1
                elif i < n and fmt[i] == "*":
                    precision = operator.index(_next_arg(it))
                    i += 1
                precision = max(precision, 0)

            long_arg = False
            if i < n and fmt[i] in "ltz":
                long_arg = True
                i += 1
            elif i < n and fmt[i] == "h":
                i += 1

            conv: Optional[str] = fmt[i] if i < n else None
            i += 1
            base = 10
            num = 0
            data = ""
            bits = 64 if long_arg else 32

            if conv in ("d", "i"):
                x = _wrap_signed(operator.index(_next_arg(it)), bits)
                if x < 0:
                    flags |= _Flag.NEGATIVE
                    num = -x
                else:
                    num = x
                flags |= _Flag.NUMERIC | _Flag.SIGNED
            elif conv in ("u", "x", "X"):
                num = operator.index(_next_arg(it)) & ((1 << bits) - 1)
                flags |= _Flag.NUMERIC
                if conv == "x":
                    base = -16
                elif conv == "X":
                    base = 16
            elif conv == "p":
                num = operator.index(_next_arg(it)) & _MASK64
                base = -16
                flags |= _Flag.ALT | _Flag.ALT2 | _Flag.NUMERIC
            elif conv == "s":
                arg = _next_arg(it)
                if isinstance(arg, (bytes, bytearray)):
                    arg = bytes(arg).decode("latin-1")
                data = _cstr(str(arg))
            elif conv == "C":
                self.color = operator.index(_next_arg(it))
                continue
            elif conv == "c":
                arg = _next_arg(it)
                code = ord(arg[0]) if isinstance(arg, str) and arg else operator.index(arg) if not isinstance(arg, str) else 0
                code &= 0xFF
                data = chr(code) if code else ""
            else:
                data = conv if conv is not None else "%"

            if flags & _Flag.NUMERIC:
                data = _print_number(num, base, bool(flags & _Flag.THOUSANDS))

            prefix = ""
            if (flags & _Flag.NUMERIC) and (flags & _Flag.SIGNED):
                if flags & _Flag.NEGATIVE:
                    prefix = "-"
                elif flags & _Flag.PLUSPOSITIVE:
                    prefix = "+"
                elif flags & _Flag.SPACEPOSITIVE:
                    prefix = " "
            elif (
                (flags & _Flag.NUMERIC)
                and (flags & _Flag.ALT)
                and base in (16, -16)
                and (num or (flags & _Flag.ALT2))
            ):
                prefix = "0x" if base == -16 else "0X"

            if precision >= 0 and not (flags & _Flag.NUMERIC):
                data = data[:precision]
            datalen = len(data)

            if (flags & _Flag.NUMERIC) and precision >= 0:
                zeros = max(precision - datalen, 0)
            elif (
                (flags & _Flag.NUMERIC)
                and (flags & _Flag.ZERO)
                and not (flags & _Flag.LEFTJUSTIFY)
                and datalen + len(prefix) < width
            ):
                zeros = width - datalen - len(prefix)
            else:
                zeros = 0

            width -= datalen + zeros + len(prefix)
            left = bool(flags & _Flag.LEFTJUSTIFY)
            pieces = []
            if not left and width > 0:
                pieces.append(" " * width)
                width = 0
            pieces.append(prefix)
            pieces.append("0" * zeros)
            pieces.append(data)
            if width > 0:
                pieces.append(" " * width)
            for ch in "".join(pieces):
                self.putc(ord(ch))


class StringPrinter(Printer):
    """A printer that collects output into a string of limited size.

    With `size` None the output is unlimited. Otherwise at most
    ``size - 1`` characters are kept, as room is left for a terminator;
    `count` always gives the full number of characters produced.
    """

    def __init__(self, size: Optional[int] = None) -> None:
        if size is not None and size < 0:
            raise ValueError(f"size must be non-negative, got {size}")
        self.size = size
        self.count = 0
        self._chars: list = []

    def putc(self, c: int) -> None:
        """Store the character if there is room, and count it."""
        if self.size is None or len(self._chars) < self.size:
            self._chars.append(chr(c))
        self.count += 1

    def getvalue(self) -> str:
        """Return the text kept so far."""
        if self.size is None:
            return "".join(self._chars)
        if self.size == 0:
            return ""
        return "".join(self._chars[: self.size - 1])


def snprintf(size: int, fmt: str, *args) -> Tuple[str, int]:
    """Format into a buffer of `size` characters.

    Returns the kept text (at most ``size - 1`` characters) and the length
    the full output would have had.
    """
    printer = StringPrinter(size)
    printer.vprintf(fmt, args)
    return printer.getvalue(), printer.count


def format_string(fmt: str, *args) -> str:
    """Format `args` according to `fmt` and return the whole result."""
    printer = StringPrinter()
    printer.vprintf(fmt, args)
    return printer.getvalue()