"""Helpers for opening files and copying data byte by byte."""

import os
import sys
import time
from typing import BinaryIO, Optional

from .io61 import Io61File

__all__ = [
    "fd_open_check",
    "stdio_open_check",
    "monotonic_timestamp",
    "read_bytewise",
    "write_bytewise",
]

_O_ACCMODE = getattr(os, "O_ACCMODE", 3)


def fd_open_check(filename: Optional[str], mode: int) -> int:
    """Open `filename` and return its descriptor.

    With no filename, returns 0 for reading or 1 otherwise. Prints a
    message and exits with status 1 if the file cannot be opened.
    """
    if filename is None:
        return 0 if (mode & _O_ACCMODE) == os.O_RDONLY else 1
    try:
        return os.open(filename, mode, 0o666)
    except OSError as exc:
        print(f"{filename}: {exc.strerror}", file=sys.stderr)
        sys.exit(1)


def stdio_open_check(filename: Optional[str], mode: int) -> BinaryIO:
    """Like `fd_open_check`, but return a buffered binary file object."""
    fd = fd_open_check(filename, mode)
    access = mode & _O_ACCMODE
    if filename is None:
        return sys.stdin.buffer if access == os.O_RDONLY else sys.stdout.buffer
    if access == os.O_RDONLY:
        modestr = "rb"
    elif access == os.O_WRONLY:
        modestr = "wb"
    else:
        modestr = "r+b"
    return os.fdopen(fd, modestr)


def monotonic_timestamp() -> float:
    """Return the current monotonic time in seconds."""
    return time.monotonic()


def read_bytewise(f: Io61File, size: int) -> bytes:
    """Read up to `size` bytes one `readc` call at a time.

    Stops early at end of file or on an error.
    """
    out = bytearray()
    while len(out) < size:
        try:
            ch = f.readc()
        except OSError:
            break
        if ch is None:
            break
        out.append(ch)
    return bytes(out)


def write_bytewise(f: Io61File, data: bytes) -> int:
    """Write `data` one `writec` call at a time; return the bytes written.

    Stops early on an error.
    """
    written = 0
    for byte in data:
        try:
            f.writec(byte)
        except OSError:
            break
        written += 1
    return written