import pytest

from syskit61.cstr import (
    FromCharsError,
    from_chars,
    isalnum,
    isalpha,
    isdigit,
    islower,
    isspace,
    isupper,
    strcasecmp,
    strchr,
    strcmp,
    strncasecmp,
    strncmp,
    strstr,
    strtol,
    strtoul,
    to_chars,
    tolower,
    toupper,
)

ULONG_MAX = 2**64 - 1


def test_isspace_set():
    spaces = {c for c in range(256) if isspace(c)}
    assert spaces == {9, 10, 11, 12, 13, 32}


def test_character_classes_match_ascii():
    for c in range(256):
        ch = chr(c)
        ascii_ch = c < 128
        assert isdigit(c) == (ascii_ch and ch.isdigit())
        assert islower(c) == (ascii_ch and ch.islower())
        assert isupper(c) == (ascii_ch and ch.isupper())
        assert isalpha(c) == (ascii_ch and ch.isalpha())
        assert isalnum(c) == (ascii_ch and ch.isalnum())


def test_negative_codes_are_not_classified():
    assert not isdigit(-1)
    assert not isalpha(-1)
    assert not islower(-200)


def test_case_conversion():
    assert tolower("Q") == "q"
    assert toupper("q") == "Q"
    assert tolower(ord("Z")) == ord("z")
    assert tolower("5") == "5"
    assert toupper("\u00e9") == "\u00e9"


def test_case_conversion_rejects_multichar():
    with pytest.raises(TypeError):
        tolower("ab")


@pytest.mark.parametrize(
    "a, b",
    [("abc", "abd"), ("ab", "abc"), ("", "a"), ("A", "a"), ("abc", "abc")],
)
def test_strcmp_agrees_with_ordering(a, b):
    r = strcmp(a, b)
    assert r in (-1, 0, 1)
    assert (r < 0) == (a < b)
    assert (r == 0) == (a == b)
    assert strcmp(b, a) == -r


def test_strcmp_stops_at_nul():
    assert strcmp("abc\0xyz", "abc\0def") == 0
    assert strcmp("ab\0", "ab") == 0


def test_strncmp_limits_length():
    assert strncmp("abcdef", "abcxyz", 3) == 0
    assert strncmp("abcdef", "abcxyz", 4) < 0
    assert strncmp("zzz", "aaa", 0) == 0


def test_strcasecmp():
    assert strcasecmp("HeLLo", "hello") == 0
    assert strcasecmp("apple", "BANANA") < 0
    assert strcasecmp("b", "A") > 0
    assert strncasecmp("HELLOworld", "helloWORLD!", 10) == 0
    assert strncasecmp("HELLOworld", "helloWORLD!", 11) < 0


def test_strchr():
    s = "hello"
    assert strchr(s, "l") == s.index("l")
    assert strchr(s, ord("o")) == s.index("o")
    assert strchr(s, "z") is None
    assert strchr(s, 0) == len(s)
    assert strchr("ab\0cd", "c") is None


def test_strstr():
    hs = "the quick brown fox"
    assert strstr(hs, "quick") == hs.find("quick")
    assert strstr(hs, "") == 0
    assert strstr(hs, "cat") is None
    assert strstr("", "") == 0
    assert strstr("ab\0cd", "cd") is None


@pytest.mark.parametrize("value", [0, 1, 9, 10, 255, 4096, 2**32, ULONG_MAX])
@pytest.mark.parametrize("base", [2, 8, 10, 16, 36])
def test_unsigned_round_trip(value, base):
    text = to_chars(value, base)
    assert from_chars(text, base) == (value, len(text))


@pytest.mark.parametrize("value", [0, -1, 42, -42, 2**63 - 1, -(2**63)])
@pytest.mark.parametrize("base", [2, 10, 16])
def test_signed_round_trip(value, base):
    text = to_chars(value, base)
    assert from_chars(text, base, signed=True) == (value, len(text))


def test_from_chars_stops_at_non_digit():
    value, end = from_chars("123abc", 10)
    assert end == 3
    assert to_chars(value) == "123"


def test_from_chars_invalid():
    with pytest.raises(FromCharsError) as info:
        from_chars("xyz", 10)
    assert info.value.kind == "invalid"
    assert info.value.position == 0
    with pytest.raises(FromCharsError) as info:
        from_chars("-", 10, signed=True)
    assert info.value.kind == "invalid"


def test_from_chars_range():
    text = "1" * 25
    with pytest.raises(FromCharsError) as info:
        from_chars(text, 10)
    assert info.value.kind == "range"
    assert info.value.position == len(text)
    too_big = to_chars(2**63)
    with pytest.raises(FromCharsError) as info:
        from_chars(too_big, 10, signed=True)
    assert info.value.kind == "range"


def test_from_chars_signed_minimum_accepted():
    text = "-" + to_chars(2**63)
    assert from_chars(text, 10, signed=True) == (-(2**63), len(text))


def test_to_chars_limit():
    text = to_chars(ULONG_MAX, 16)
    assert to_chars(ULONG_MAX, 16, limit=len(text)) == text
    with pytest.raises(OverflowError):
        to_chars(ULONG_MAX, 16, limit=len(text) - 1)
    with pytest.raises(OverflowError):
        to_chars(-5, 10, limit=0)


def test_to_chars_rejects_bad_input():
    with pytest.raises(ValueError):
        to_chars(10, 1)
    with pytest.raises(OverflowError):
        to_chars(2**64)


@pytest.mark.parametrize("value", [0, 7, 255, 123456789, 2**40])
def test_strtoul_prefixes(value):
    for text, expected_end in [
        (f"0x{value:x}", None),
        (f"0X{value:X}", None),
        (f"0b{value:b}", None),
        (f"0o{value:o}", None),
        (f"0{value:o}", None),
        (f"{value}", None),
    ]:
        if text.startswith("0") and not text[1:2].isalpha() and value and text != f"0{value:o}":
            continue
        result, end = strtoul(text)
        if text == f"{value}" and value and str(value)[0] == "0":
            continue
        if text == f"{value}" and str(value).startswith("0") is False:
            assert result == value
        if text != f"{value}":
            assert result == value
        assert end == len(text)


def test_strtoul_explicit_base_and_spaces():
    assert strtoul("  +777", 8) == (0o777, len("  +777"))
    assert strtoul("0xff", 16) == (0xFF, 4)
    assert strtoul("\t42 rest", 10)[1] == len("\t42")


def test_strtoul_negative_wraps():
    value, end = strtoul("  -5")
    assert (value + 5) % 2**64 == 0
    assert end == len("  -5")


def test_strtoul_overflow_saturates():
    text = "9" * 30
    assert strtoul(text) == (ULONG_MAX, len(text))


def test_strtoul_invalid_returns_start():
    assert strtoul("   hello") == (0, 0)
    assert strtoul("0x") == (0, 0)


def test_strtol_clamps():
    big = "9" * 30
    assert strtol(big) == (2**63 - 1, len(big))
    assert strtol("-" + big) == (-(2**63), len(big) + 1)
    over = to_chars(2**63)
    assert strtol(over, 10) == (2**63 - 1, len(over))
    assert strtol("-" + over, 10) == (-(2**63), len(over) + 1)


@pytest.mark.parametrize("value", [0, 1, -1, 1000, -1000, 2**62])
def test_strtol_round_trip(value):
    text = to_chars(value, 10)
    assert strtol(text, 10) == (value, len(text))
    hex_text = ("-" if value < 0 else "") + "0x" + to_chars(abs(value), 16)
    assert strtol(hex_text) == (value, len(hex_text))


def test_strtol_stops_at_nul():
    assert strtol("12\x0034", 10) == (12, 2)