"""Commands that copy files with non-sequential access patterns."""

import math
import os
import sys
from contextlib import ExitStack
from typing import List, Optional

from .args import Io61Args, UsageError
from .fileutil import read_bytewise, write_bytewise
from .io61 import Io61File, open_check
from .rand import uniform_int

__all__ = [
    "stridecat61",
    "wstridecat61",
    "shufflecat61",
    "endorder61",
    "varblockcat61",
    "scattergather61",
    "read_line",
    "read_block",
]

_WRITE_TRUNC = os.O_WRONLY | os.O_CREAT | os.O_TRUNC
_SIZE_MASK = (1 << 64) - 1
_SHUFFLE_SEED = 83419
_MAX_SHUFFLE_BLOCKS = 30 << 20


def _parse(program: str, opts: str, argv, block_size: int = 0, seed: Optional[int] = None):
    if argv is None:
        argv = sys.argv[1:]
    args = Io61Args(opts, block_size)
    if seed is not None:
        args.set_seed(seed)
    try:
        return args.parse([program, *argv])
    except UsageError as exc:
        sys.stderr.write(str(exc))
        return None


def _fail(message: str) -> int:
    print(message, file=sys.stderr)
    return 1


def _read(args: Io61Args, f: Io61File, size: int) -> bytes:
    if args.read_bytewise:
        return read_bytewise(f, size)
    try:
        return f.read(size)
    except OSError:
        return b""


def _write(args: Io61Args, f: Io61File, data: bytes) -> int:
    if args.write_bytewise:
        written = write_bytewise(f, data)
    else:
        written = f.write(data)
    if written != len(data):
        raise OSError(f"short write: {written} of {len(data)} bytes")
    return written


def _seekable(f: Io61File) -> bool:
    try:
        f.seek(0)
    except OSError:
        return False
    return True


def _file_size(args: Io61Args, inf: Io61File) -> Optional[int]:
    return args.file_size if args.file_size is not None else inf.filesize()


def _next_stride(args: Io61Args, pos: int, size: int) -> int:
    pos += args.stride
    if pos >= size:
        pos = pos % args.stride + args.block_size
    return pos


def stridecat61(argv: Optional[List[str]] = None) -> int:
    """Read the input in a strided pattern and write the blocks sequentially."""
    args = _parse("stridecat61", "b:t:s:o:p:A:RW", argv, 1)
    if args is None:
        return 1
    with open_check(args.input_file, os.O_RDONLY) as inf:
        if not _seekable(inf):
            return _fail("stridecat61: input file is not seekable")
        with open_check(args.output_file, _WRITE_TRUNC) as outf:
            size = _file_size(args, inf)
            if size is None:
                return _fail("stridecat61: can't get size of input file")
            pos = args.initial_offset
            written = 0
            while written < size:
                inf.seek(pos)
                block = min(args.block_size, size - pos)
                if block <= 0:
                    break
                data = _read(args, inf, block)
                if not data:
                    break
                written += _write(args, outf, data)
                args.after_write(outf)
                pos = _next_stride(args, pos, size)
    return 0


def wstridecat61(argv: Optional[List[str]] = None) -> int:
    """Read the input sequentially and write its blocks in a strided pattern."""
    args = _parse("wstridecat61", "b:t:s:o:p:A:RW", argv, 1)
    if args is None:
        return 1
    with open_check(args.input_file, os.O_RDONLY) as inf, open_check(
        args.output_file, _WRITE_TRUNC
    ) as outf:
        if not _seekable(outf):
            return _fail("wstridecat61: output file is not seekable")
        size = _file_size(args, inf)
        if size is None:
            return _fail("wstridecat61: need `-s SIZE` argument")
        pos = args.initial_offset
        written = 0
        while written < size:
            outf.seek(pos)
            block = min(args.block_size, size - pos)
            if block <= 0:
                break
            data = _read(args, inf, block)
            if not data:
                break
            written += _write(args, outf, data)
            args.after_write(outf)
            pos = _next_stride(args, pos, size)
    return 0


def shufflecat61(argv: Optional[List[str]] = None) -> int:
    """Copy blocks in random order, each to the offset it was read from."""
    args = _parse("shufflecat61", "b:r:s:o:i:A:", argv, 4096, _SHUFFLE_SEED)
    if args is None:
        return 1
    with open_check(args.input_file, os.O_RDONLY) as inf:
        if not _seekable(inf):
            return _fail("shufflecat61: input file is not seekable")
        with open_check(args.output_file, _WRITE_TRUNC) as outf:
            if not _seekable(outf):
                return _fail("shufflecat61: output file is not seekable")
            size = _file_size(args, inf)
            if size is None:
                return _fail("shufflecat61: can't get size of input file")
            nblocks = size // args.block_size
            if nblocks > _MAX_SHUFFLE_BLOCKS:
                return _fail("shufflecat61: file too large")
            if nblocks * args.block_size != size:
                return _fail("shufflecat61: input file size not a multiple of block size")

            # The index range stays fixed at the initial block count.
            last_index = nblocks - 1
            blockpos = list(range(nblocks))
            while nblocks != 0:
                index = uniform_int(args.engine, 0, last_index)
                pos = blockpos[index] * args.block_size
                blockpos[index] = blockpos[nblocks - 1]
                nblocks -= 1

                inf.seek(pos)
                try:
                    data = inf.read(args.block_size)
                except OSError:
                    break
                if not data:
                    break
                outf.seek(pos)
                _write(args, outf, data)
                args.after_write(outf)
    return 0


def endorder61(argv: Optional[List[str]] = None) -> int:
    """Copy random blocks, reading 16 bytes of an end-of-file table before each."""
    args = _parse("endorder61", "b:B:s:i:o:r:A:RW", argv, 1024, _SHUFFLE_SEED)
    if args is None:
        return 1
    with open_check(args.input_file, os.O_RDONLY) as inf:
        if not _seekable(inf):
            return _fail("endorder61: input file is not seekable")
        with open_check(args.output_file, _WRITE_TRUNC) as outf:
            size = _file_size(args, inf)
            if size is None or size <= 0:
                return _fail("endorder61: can't get size of input file")

            bs = args.block_size
            end_block = 16 * ((size - 1) // bs + 1)
            end_offset = (((size - end_block) & _SIZE_MASK) // bs) * bs
            end_pos = end_offset

            written = 0
            while written < size:
                inf.seek(end_pos)
                try:
                    table = inf.read(16)
                except OSError:
                    table = b""
                if len(table) == 16:
                    end_pos += 16

                block = uniform_int(args.engine, args.block_size, args.max_block_size)
                block = min(block, size - written)
                if block < end_offset:
                    pos = uniform_int(args.engine, 0, end_offset - block)
                else:
                    pos = 0

                inf.seek(pos)
                data = _read(args, inf, block)
                if not data:
                    break
                written += _write(args, outf, data)
                args.after_write(outf)
    return 0


def varblockcat61(argv: Optional[List[str]] = None) -> int:
    """Copy in blocks of random size; one-byte blocks use `readc`/`writec`."""
    args = _parse("varblockcat61", "b:r:o:i:XRW", argv, 4096, _SHUFFLE_SEED)
    if args is None:
        return 1
    if args.exponential:
        low, high = 0, math.ceil(math.log2(args.block_size))
    else:
        low, high = 1, args.block_size
    with open_check(args.input_file, os.O_RDONLY) as inf, open_check(
        args.output_file, _WRITE_TRUNC
    ) as outf:
        while True:
            size = uniform_int(args.engine, low, high)
            if args.exponential:
                size = min(1 << size, args.block_size)

            if size == 1:
                try:
                    ch = inf.readc()
                except OSError:
                    ch = None
                data = bytes([ch]) if ch is not None else b""
            else:
                data = _read(args, inf, size)
            if not data:
                break

            if size == 1:
                try:
                    outf.writec(data[0])
                except OSError as exc:
                    raise OSError("short write: 0 of 1 bytes") from exc
            else:
                _write(args, outf, data)
            args.after_write(outf)
    return 0


def read_line(f: Io61File, size: int) -> bytes:
    """Read up to `size` bytes, stopping after a newline or at end of file."""
    out = bytearray()
    while len(out) < size:
        try:
            ch = f.readc()
        except OSError:
            break
        if ch is None:
            break
        out.append(ch)
        if ch == ord("\n"):
            break
    return bytes(out)


def read_block(f: Io61File, size: int) -> bytes:
    """Read until `size` bytes are collected or the file ends.

    An error raised before any byte is read propagates; a later error
    ends the block early.
    """
    out = bytearray()
    while len(out) < size:
        try:
            data = f.read(size - len(out))
        except OSError:
            if not out:
                raise
            break
        if not data:
            break
        out += data
    return bytes(out)


def scattergather61(argv: Optional[List[str]] = None) -> int:
    """Copy blocks round-robin from several inputs to several outputs."""
    args = _parse("scattergather61", "b:i:o:l##", argv, 1)
    if args is None:
        return 1
    infs: List[Io61File] = []
    try:
        for filename in args.input_files:
            infs.append(open_check(filename, os.O_RDONLY))
        with ExitStack() as stack:
            outfs = [
                stack.enter_context(open_check(filename, _WRITE_TRUNC))
                for filename in args.output_files
            ]
            ini = -1
            outi = 0
            while infs:
                ini = (ini + 1) % len(infs)
                if args.read_lines:
                    data = read_line(infs[ini], args.block_size)
                else:
                    try:
                        data = read_block(infs[ini], args.block_size)
                    except OSError:
                        data = b""
                if not data:
                    infs.pop(ini).close()
                    ini -= 1
                else:
                    written = outfs[outi].write(data)
                    if written != len(data):
                        raise OSError(f"short write: {written} of {len(data)} bytes")
                    outi = (outi + 1) % len(outfs)
    finally:
        for f in infs:
            f.close()
    return 0