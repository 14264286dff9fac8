"""Run a pipeline of commands connected by loopback TCP sockets.

Usage: ``socketpipe [-P BUFSIZE] CMD1 ARG... "|" CMD2 ARG...``
"""

import os
import re
import socket
import struct
import subprocess
import sys
from typing import List, Optional, Sequence, Tuple

__all__ = ["parse_options", "split_commands", "run_pipeline", "main"]

USAGE = 'Usage: ./socketpipe CMD1 ARG... "|" CMD2 ARG...\n'
INT_MAX = (1 << 31) - 1
_ULONG_MASK = (1 << 64) - 1
_NUMBER = re.compile(r"\s*([+-]?)(0[xX][0-9a-fA-F]+|0[0-7]*|[1-9][0-9]*)")


def _parse_ulong(text: str) -> Optional[int]:
    """Parse `text` as a whole C unsigned long in base 0, or return None."""
    match = _NUMBER.fullmatch(text)
    if match is None:
        return None
    sign, digits = match.groups()
    if digits[:2] in ("0x", "0X"):
        value = int(digits[2:], 16)
    elif digits.startswith("0"):
        value = int(digits, 8)
    else:
        value = int(digits)
    if value > _ULONG_MASK:
        value = _ULONG_MASK
    if sign == "-":
        value = -value & _ULONG_MASK
    return value


def parse_options(argv: Sequence[str]) -> Tuple[int, List[str]]:
    """Split off a leading ``-P BUFSIZE`` option.

    Returns the socket buffer size (0 if not given) and the remaining
    arguments. Raises ValueError with the usage text if the arguments are
    not valid.
    """
    args = list(argv)
    sockbuf = 0
    if args and args[0].startswith("-P"):
        if len(args[0]) > 2:
            bufarg: Optional[str] = args[0][2:]
            args = args[1:]
        else:
            bufarg = args[1] if len(args) > 1 else None
            args = args[2:]
        if bufarg is None:
            raise ValueError(USAGE)
        value = _parse_ulong(bufarg)
        if value is None or value > INT_MAX:
            raise ValueError(USAGE)
        sockbuf = value
    if not args:
        raise ValueError(USAGE)
    return sockbuf, args


def split_commands(args: Sequence[str]) -> List[List[str]]:
    """Split `args` at each ``|`` into commands; raise ValueError on an empty one."""
    commands: List[List[str]] = [[]]
    for arg in args:
        if arg == "|":
            commands.append([])
        else:
            commands[-1].append(arg)
    if any(not command for command in commands):
        raise ValueError(USAGE)
    return commands


def _socket_channel(sockbuf: int) -> Tuple[socket.socket, socket.socket]:
    """Return a connected (reader, writer) pair of one-way loopback sockets."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as listener:
        listener.bind(("127.0.0.1", 0))
        listener.listen(2)
        reader = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        reader.connect(listener.getsockname())
        writer, _ = listener.accept()
    reader.shutdown(socket.SHUT_WR)
    writer.shutdown(socket.SHUT_RD)
    if sockbuf:
        writer.setsockopt(socket.SOL_SOCKET, socket.SO_SNDBUF, sockbuf)
        reader.setsockopt(socket.SOL_SOCKET, socket.SO_RCVBUF, sockbuf)
        timeout = struct.pack("@ll", 0, 1000)
        writer.setsockopt(socket.SOL_SOCKET, socket.SO_SNDTIMEO, timeout)
        reader.setsockopt(socket.SOL_SOCKET, socket.SO_RCVTIMEO, timeout)
    return reader, writer


def _start(command: List[str], stdin, stdout) -> Optional[subprocess.Popen]:
    try:
        return subprocess.Popen(command, stdin=stdin, stdout=stdout)
    except OSError as exc:
        print(f"{command[0]}: {exc.strerror or exc}", file=sys.stderr)
        return None


def run_pipeline(commands: Sequence[List[str]], sockbuf: int = 0) -> int:
    """Run `commands`, each reading from the socket the previous one writes.

    The first command reads standard input and the last writes standard
    output. Returns the exit status of the last command (1 if it could not
    be started).
    """
    if not commands or any(not command for command in commands):
        raise ValueError(USAGE)
    children: List[subprocess.Popen] = []
    last_reader: Optional[socket.socket] = None
    status = 1
    try:
        for index, command in enumerate(commands):
            last = index == len(commands) - 1
            stdin = last_reader.fileno() if last_reader is not None else None
            if last:
                child = _start(command, stdin, None)
                if last_reader is not None:
                    last_reader.close()
                    last_reader = None
                if child is not None:
                    status = child.wait()
                break
            reader, writer = _socket_channel(sockbuf)
            try:
                child = _start(command, stdin, writer.fileno())
            finally:
                writer.close()
                if last_reader is not None:
                    last_reader.close()
            last_reader = reader
            if child is not None:
                children.append(child)
    finally:
        if last_reader is not None:
            last_reader.close()
        for child in children:
            child.wait()
    return status


def main(argv: Optional[List[str]] = None) -> int:
    """Run the command line; return the last command's status, or 1 on misuse."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        sockbuf, rest = parse_options(argv)
        commands = split_commands(rest)
    except ValueError as exc:
        sys.stderr.write(str(exc))
        return 1
    return run_pipeline(commands, sockbuf)


if __name__ == "__main__":
    sys.exit(main())