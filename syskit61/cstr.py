"""C-string helpers: character traits, comparisons, searches and integer parsing.

Strings are treated as NUL-terminated: anything after a ``"\\0"`` is ignored.
"""

from typing import Optional, Tuple, Union

__all__ = [
    "FromCharsError",
    "isspace",
    "isdigit",
    "islower",
    "isupper",
    "isalpha",
    "isalnum",
    "tolower",
    "toupper",
    "strcmp",
    "strncmp",
    "strcasecmp",
    "strncasecmp",
    "strchr",
    "strstr",
    "from_chars",
    "to_chars",
    "strtol",
    "strtoul",
]

ULONG_MAX = (1 << 64) - 1
_LONG_LIMIT = 1 << 63

Char = Union[int, str]


class FromCharsError(ValueError):
    """Raised when an integer cannot be parsed.

    `kind` is ``"invalid"`` when no digits were found and ``"range"`` when the
    value does not fit; `position` is where parsing stopped.
    """

    def __init__(self, kind: str, position: int) -> None:
        super().__init__(f"{kind} integer at position {position}")
        self.kind = kind
        self.position = position


def _code(c: Char) -> int:
    if isinstance(c, str):
        if len(c) != 1:
            raise TypeError("expected a single character")
        return ord(c)
    return c


def _cstr(s: str) -> str:
    return s.split("\0", 1)[0]


def _at(text: str, i: int) -> str:
    return text[i] if i < len(text) else "\0"


def isspace(c: Char) -> bool:
    """Return True for tab, newline, vertical tab, form feed, CR and space."""
    c = _code(c)
    return 9 <= c <= 13 or c == 32


def isdigit(c: Char) -> bool:
    """Return True for ASCII decimal digits."""
    return 0 <= _code(c) - ord("0") < 10


def islower(c: Char) -> bool:
    """Return True for ASCII lower-case letters."""
    return 0 <= _code(c) - ord("a") < 26


def isupper(c: Char) -> bool:
    """Return True for ASCII upper-case letters."""
    return 0 <= _code(c) - ord("A") < 26


def isalpha(c: Char) -> bool:
    """Return True for ASCII letters."""
    c = _code(c)
    return c >= 0 and 0 <= (c | 0x20) - ord("a") < 26


def isalnum(c: Char) -> bool:
    """Return True for ASCII letters and digits."""
    return isalpha(c) or isdigit(c)


def tolower(c: Char) -> Char:
    """Lower-case an ASCII letter; other characters are returned unchanged."""
    code = _code(c)
    result = code + ord("a") - ord("A") if isupper(code) else code
    return chr(result) if isinstance(c, str) else result


def toupper(c: Char) -> Char:
    """Upper-case an ASCII letter; other characters are returned unchanged."""
    code = _code(c)
    result = code + ord("A") - ord("a") if islower(code) else code
    return chr(result) if isinstance(c, str) else result


def _compare(a: str, b: str) -> int:
    return (a > b) - (a < b)


def _lower(s: str) -> str:
    return "".join(tolower(ch) for ch in s)


def strcmp(a: str, b: str) -> int:
    """Compare two strings; return -1, 0 or 1."""
    return _compare(_cstr(a), _cstr(b))


def strncmp(a: str, b: str, n: int) -> int:
    """Compare at most `n` characters of two strings; return -1, 0 or 1."""
    return _compare(_cstr(a)[:n], _cstr(b)[:n])


def strcasecmp(a: str, b: str) -> int:
    """Compare two strings ignoring ASCII case; return -1, 0 or 1."""
    return _compare(_lower(_cstr(a)), _lower(_cstr(b)))


def strncasecmp(a: str, b: str, n: int) -> int:
    """Compare at most `n` characters ignoring ASCII case."""
    return _compare(_lower(_cstr(a)[:n]), _lower(_cstr(b)[:n]))


def strchr(s: str, c: Char) -> Optional[int]:
    """Return the index of the first `c` in `s`, or None.

    Searching for NUL finds the terminator, at index ``len`` of the string.
    """
    s = _cstr(s)
    code = _code(c)
    if code == 0:
        return len(s)
    index = s.find(chr(code))
    return None if index < 0 else index


def strstr(haystack: str, needle: str) -> Optional[int]:
    """Return the index of the first occurrence of `needle`, or None."""
    index = _cstr(haystack).find(_cstr(needle))
    return None if index < 0 else index


def _digit(ch: str, base: int) -> Optional[int]:
    c = ord(ch)
    if ord("0") <= c < ord("0") + base:
        return c - ord("0")
    if ord("a") <= c < ord("a") + base - 10:
        return c - ord("a") + 10
    if ord("A") <= c < ord("A") + base - 10:
        return c - ord("A") + 10
    return None


def _parse_unsigned(text: str, start: int, base: int) -> Tuple[int, int, bool]:
    """Consume digits from `start`; return (value, end, overflowed)."""
    x = 0
    overflow = False
    pos = start
    while pos < len(text):
        digit = _digit(text[pos], base)
        if digit is None:
            break
        if x > (ULONG_MAX - digit) // base:
            overflow = True
        else:
            x = x * base + digit
        pos += 1
    return x, pos, overflow


def from_chars(text: str, base: int = 10, signed: bool = False) -> Tuple[int, int]:
    """Parse an integer at the start of `text`.

    Returns ``(value, end)`` where `end` is the index after the last digit.
    Values are limited to 64 bits (signed if `signed` is true).
    Raises FromCharsError when there are no digits or the value is out of range.
    """
    text = _cstr(text)
    if not signed:
        x, end, overflow = _parse_unsigned(text, 0, base)
        if end == 0:
            raise FromCharsError("invalid", 0)
        if overflow:
            raise FromCharsError("range", end)
        return x, end

    negative = text.startswith("-")
    start = int(negative)
    x, end, overflow = _parse_unsigned(text, start, base)
    if end == start:
        raise FromCharsError("invalid", 0)
    if overflow or x > _LONG_LIMIT - (not negative):
        raise FromCharsError("range", end)
    return (-x if negative else x), end


def to_chars(value: int, base: int = 10, limit: Optional[int] = None) -> str:
    """Format `value` in `base` with lower-case digits.

    Raises OverflowError if the result is longer than `limit` characters
    or the value does not fit in 64 bits.
    """
    if not 2 <= base <= 36:
        raise ValueError(f"base must be between 2 and 36, got {base}")
    if not -_LONG_LIMIT <= value <= ULONG_MAX:
        raise OverflowError(f"value {value} does not fit in 64 bits")
    magnitude = -value if value < 0 else value
    digits = []
    while True:
        magnitude, d = divmod(magnitude, base)
        digits.append(chr(ord("0") + d) if d < 10 else chr(ord("a") + d - 10))
        if magnitude == 0:
            break
    result = ("-" if value < 0 else "") + "".join(reversed(digits))
    if limit is not None and len(result) > limit:
        raise OverflowError(f"{len(result)} characters do not fit in {limit}")
    return result


def _fix_base(text: str, t: int, base: int) -> Tuple[int, int]:
    first, second = _at(text, t), _at(text, t + 1)
    if base == 0:
        if first == "0":
            if second in "xX" and second != "\0":
                return 16, t + 2
            if second in "oO" and second != "\0":
                return 8, t + 2
            if second in "bB" and second != "\0":
                return 2, t + 2
            return 8, t
        return 10, t
    if base == 16 and first == "0" and second in ("x", "X"):
        return 16, t + 2
    return base, t


def _strto_prefix(text: str, base: int) -> Tuple[bool, int, int, int, bool]:
    t = 0
    while t < len(text) and isspace(text[t]):
        t += 1
    negative = _at(text, t) == "-"
    if negative or _at(text, t) == "+":
        t += 1
    base, t = _fix_base(text, t, base)
    x, end, overflow = _parse_unsigned(text, t, base)
    if end == t:
        return negative, 0, 0, 0, False
    return negative, x, end, base, overflow


def strtoul(text: str, base: int = 0) -> Tuple[int, int]:
    """Parse an unsigned long like C ``strtoul``; return ``(value, end)``.

    Base 0 recognises ``0x``, ``0o``, ``0b`` and leading-zero octal prefixes.
    Overflow yields the maximum 64-bit value; a leading ``-`` negates modulo 2**64.
    If nothing could be parsed, returns ``(0, 0)``.
    """
    text = _cstr(text)
    negative, x, end, _, overflow = _strto_prefix(text, base)
    if overflow:
        x = ULONG_MAX
    return ((-x) & ULONG_MAX if negative else x), end


def strtol(text: str, base: int = 0) -> Tuple[int, int]:
    """Parse a signed long like C ``strtol``; return ``(value, end)``.

    Out-of-range values are clamped to the 64-bit signed limits.
    If nothing could be parsed, returns ``(0, 0)``.
    """
    text = _cstr(text)
    negative, x, end, _, overflow = _strto_prefix(text, base)
    bound = _LONG_LIMIT - (not negative)
    if overflow or x > bound:
        x = bound
    return (-x if negative else x), end