"""Unbuffered file wrapper that reads and writes one byte per system call."""

import os
import stat
import sys
from typing import Optional

__all__ = ["Io61File", "fdopen", "open_check"]

_O_ACCMODE = getattr(os, "O_ACCMODE", 3)


class Io61File:
    """A file descriptor opened for reading (O_RDONLY) or writing (O_WRONLY)."""

    def __init__(self, fd: int, mode: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid file descriptor {fd}")
        self.fd = fd
        self.mode = mode

    def readc(self) -> Optional[int]:
        """Read one byte and return it, or None at end of file.

        Raises OSError on error.
        """
        data = os.read(self.fd, 1)
        return data[0] if data else None

    def read(self, size: int) -> bytes:
        """Read up to `size` bytes.

        Returns fewer bytes at end of file, or when an error follows some
        bytes already read. Raises OSError if an error comes before any byte.
        """
        out = bytearray()
        while len(out) < size:
            try:
                ch = self.readc()
            except OSError:
                if not out:
                    raise
                break
            if ch is None:
                break
            out.append(ch)
        return bytes(out)

    def writec(self, c: int) -> None:
        """Write one byte (`c` taken modulo 256). Raises OSError on error."""
        if os.write(self.fd, bytes([c & 0xFF])) != 1:
            raise OSError("short write")

    def write(self, data: bytes) -> int:
        """Write `data` and return the number of bytes written.

        An error after some bytes gives a short count; an error before any
        byte raises OSError.
        """
        written = 0
        for byte in data:
            try:
                self.writec(byte)
            except OSError:
                if written == 0:
                    raise
                break
            written += 1
        return written

    def flush(self) -> None:
        """Write out cached data; nothing is cached, so this does nothing."""

    def seek(self, offset: int) -> None:
        """Move the file position to `offset`. Raises OSError on failure."""
        os.lseek(self.fd, offset, os.SEEK_SET)

    def close(self) -> None:
        """Flush and close the descriptor."""
        if self.fd < 0:
            return
        self.flush()
        fd, self.fd = self.fd, -1
        os.close(fd)

    def fileno(self) -> int:
        """Return the underlying file descriptor."""
        return self.fd

    def filesize(self) -> Optional[int]:
        """Return the size in bytes, or None if the file is not a regular file."""
        try:
            st = os.fstat(self.fd)
        except OSError:
            return None
        if not stat.S_ISREG(st.st_mode):
            return None
        return st.st_size

    def __enter__(self) -> "Io61File":
        return self

    def __exit__(self, *args) -> None:
        self.close()


def fdopen(fd: int, mode: int) -> Io61File:
    """Wrap file descriptor `fd`, opened with access mode `mode`."""
    return Io61File(fd, mode)


def open_check(filename: Optional[str], mode: int) -> Io61File:
    """Open `filename`, or standard input/output when it is None.

    Prints a message and exits with status 1 if the file cannot be opened.
    """
    if filename is not None:
        try:
            fd = os.open(filename, mode, 0o666)
        except OSError as exc:
            print(f"{filename}: {exc.strerror}", file=sys.stderr)
            sys.exit(1)
    elif (mode & _O_ACCMODE) == os.O_RDONLY:
        fd = 0
    else:
        fd = 1
    return fdopen(fd, mode & _O_ACCMODE)