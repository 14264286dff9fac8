"""Tokenizing and navigating shell command lines.

A command line is a list of conditionals separated by ``;`` or ``&``; a
conditional is a list of pipelines separated by ``&&`` or ``||``; a pipeline
is a list of commands separated by ``|``. Parsers describe a region of the
line and step from one element to the next.
"""

import copy
import os
import signal
from enum import IntEnum
from typing import Iterator, Optional, Tuple

__all__ = [
    "TokenType",
    "ShellTokenizer",
    "ShellParser",
    "CommandLineParser",
    "ConditionalParser",
    "PipelineParser",
    "CommandParser",
    "claim_foreground",
    "set_signal_handler",
]

_SPACE = " \t\n\v\f\r"
_DIGITS = "0123456789"
_SPECIAL = "<>&|;()#"


class TokenType(IntEnum):
    """Kinds of token on a command line."""

    OTHER = -1
    NORMAL = 0
    REDIRECT_OP = 1
    SEQUENCE = 2
    EOL = 3
    BACKGROUND = 4
    PIPE = 5
    AND = 6
    OR = 7
    LPAREN = 8
    RPAREN = 9


_MASK_CONDITIONAL = (
    (1 << TokenType.SEQUENCE) | (1 << TokenType.EOL) | (1 << TokenType.BACKGROUND)
)
_MASK_PIPELINE = _MASK_CONDITIONAL | (1 << TokenType.AND) | (1 << TokenType.OR)
_MASK_COMMAND = _MASK_PIPELINE | (1 << TokenType.PIPE)

_ONE_CHAR_OPS = {
    ";": TokenType.SEQUENCE,
    "&": TokenType.BACKGROUND,
    "|": TokenType.PIPE,
    "(": TokenType.LPAREN,
    ")": TokenType.RPAREN,
}


def _skip_shell_space(text: str, pos: int, end: int) -> int:
    while pos != end and text[pos] in _SPACE:
        pos += 1
    if pos != end and text[pos] == "#":
        pos = end
    return pos


class ShellTokenizer:
    """Walks the tokens of ``text[start:end]``."""

    def __init__(self, text: str, start: int = 0, end: Optional[int] = None) -> None:
        self._text = text
        self._s = start
        self._end = len(text) if end is None else end
        self._len = 0
        self._type = TokenType.EOL
        self._quoted = False
        self.advance()

    @property
    def type(self) -> TokenType:
        """The current token's type."""
        return self._type

    @property
    def quoted(self) -> bool:
        """True if the current token contains quotes or escapes."""
        return self._quoted

    @property
    def position(self) -> int:
        """Index of the current token in the text."""
        return self._s

    def advance(self) -> None:
        """Move to the next token."""
        text, end = self._text, self._end
        s = _skip_shell_space(text, self._s + self._len, end)
        self._s = s
        self._len = 0
        self._quoted = False
        if s == end:
            self._type = TokenType.EOL
            return

        p = s
        while p != end and text[p] in _DIGITS:
            p += 1
        if p != end and text[p] in "<>":
            p += 1
            if p != end and text[p] == ">":
                p += 1
            else:
                while p != end and text[p] in _DIGITS:
                    p += 1
            self._type = TokenType.REDIRECT_OP
        elif p == s and text[p] in "&|" and p + 1 != end and text[p + 1] == text[p]:
            self._type = TokenType.AND if text[p] == "&" else TokenType.OR
            p += 2
        elif p == s and text[p] in _SPECIAL:
            self._type = _ONE_CHAR_OPS.get(text[p], TokenType.OTHER)
            p += 1
        else:
            self._type = TokenType.NORMAL
            curquote = ""
            while p != end and (
                curquote or (text[p] not in _SPACE and text[p] not in _SPECIAL)
            ):
                c = text[p]
                if c in "\"'" and not curquote:
                    curquote = c
                    self._quoted = True
                elif c == curquote:
                    curquote = ""
                elif c == "\\" and p + 1 != end and curquote != "'":
                    self._quoted = True
                    p += 1
                p += 1
        self._len = p - s

    def empty(self) -> bool:
        """True if no tokens remain."""
        return self._s == self._end

    def __bool__(self) -> bool:
        return not self.empty()

    def value(self) -> str:
        """The current token with quotes and escapes removed."""
        raw = self._text[self._s : self._s + self._len]
        if not self._quoted:
            return raw
        out = []
        curquote = ""
        pos = 0
        n = len(raw)
        while pos < n:
            c = raw[pos]
            if c in "\"'" and not curquote:
                curquote = c
            elif c == curquote:
                curquote = ""
            elif c == "\\" and pos + 1 < n and curquote != "'":
                out.append(raw[pos + 1])
                pos += 1
            else:
                out.append(c)
            pos += 1
        return "".join(out)

    def type_name(self) -> str:
        """The current token's type as a name such as ``TYPE_PIPE``."""
        return f"TYPE_{self._type.name}"

    def __iter__(self) -> Iterator[Tuple[TokenType, str]]:
        """Yield ``(type, value)`` for each remaining token, leaving self unchanged."""
        it = copy.copy(self)
        while not it.empty():
            yield it.type, it.value()
            it.advance()

    def __eq__(self, other) -> bool:
        if isinstance(other, ShellTokenizer):
            return self._s == other._s and self._end == other._end
        if isinstance(other, ShellParser):
            return self._s == other._s and self._end == other._stop
        return NotImplemented

    def __repr__(self) -> str:
        return f"ShellTokenizer({self._text[self._s:self._end]!r})"


class ShellParser:
    """A region ``text[start:stop]`` of a command line that ends at `end`."""

    def __init__(
        self,
        text: str,
        start: int = 0,
        stop: Optional[int] = None,
        end: Optional[int] = None,
    ) -> None:
        if stop is None and end is None:
            stop = end = len(text)
        elif end is None:
            end = stop
        elif stop is None:
            stop = end
        self._text = text
        self._stop = stop
        self._end = end
        self._s = _skip_shell_space(text, start, stop)

    def empty(self) -> bool:
        """True if the region is empty."""
        return self._s == self._stop

    def __bool__(self) -> bool:
        return not self.empty()

    def region(self) -> str:
        """The text of the region."""
        return self._text[self._s : self._stop]

    def next_op(self) -> TokenType:
        """The type of the operator token just after the region."""
        return ShellTokenizer(self._text, self._stop, self._end).type

    def next_op_name(self) -> str:
        """The name of the operator token just after the region."""
        return ShellTokenizer(self._text, self._stop, self._end).type_name()

    def token_begin(self) -> ShellTokenizer:
        """A tokenizer over the region."""
        return ShellTokenizer(self._text, self._s, self._stop)

    def tokens(self) -> list:
        """The ``(type, value)`` pairs of the region's tokens."""
        return list(self.token_begin())

    def end(self) -> "ShellParser":
        """An empty parser positioned at the end of the region."""
        return type(self)(self._text, self._stop, self._stop, self._end)

    def _first_delimited(self, mask: int, cls):
        it = ShellTokenizer(self._text, self._s, self._stop)
        while it.type >= 0 and not (mask & (1 << it.type)):
            it.advance()
        stop = it._s
        while stop > self._s and self._text[stop - 1] in _SPACE:
            stop -= 1
        return cls(self._text, self._s, stop, self._stop)

    def _next_delimited(self, mask: int) -> None:
        it = ShellTokenizer(self._text, self._stop, self._end)
        if it.type >= 0 and (mask & (1 << it.type)):
            it.advance()
        self._s = it._s
        while it.type >= 0 and not (mask & (1 << it.type)):
            it.advance()
        stop = it._s
        while stop > self._s and self._text[stop - 1] in _SPACE:
            stop -= 1
        self._stop = stop

    def __eq__(self, other) -> bool:
        if isinstance(other, ShellParser):
            return self._s == other._s and self._stop == other._stop
        if isinstance(other, ShellTokenizer):
            return self._s == other._s and self._stop == other._end
        return NotImplemented

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.region()!r})"


class _Stepping(ShellParser):
    def advance(self) -> None:  # pragma: no cover - overridden
        raise NotImplementedError

    def __iter__(self):
        """Yield this element and each following one while they are non-empty."""
        p = copy.copy(self)
        while not p.empty():
            yield copy.copy(p)
            p.advance()


class CommandParser(_Stepping):
    """A single command."""

    def advance(self) -> None:
        """Move to the next command of the pipeline."""
        self._next_delimited(_MASK_COMMAND)


class PipelineParser(_Stepping):
    """A pipeline of commands."""

    def command_begin(self) -> CommandParser:
        """The first command of the pipeline."""
        return self._first_delimited(_MASK_COMMAND, CommandParser)

    def advance(self) -> None:
        """Move to the next pipeline of the conditional."""
        self._next_delimited(_MASK_PIPELINE)


class ConditionalParser(_Stepping):
    """A chain of pipelines joined by ``&&`` and ``||``."""

    def pipeline_begin(self) -> PipelineParser:
        """The first pipeline of the conditional."""
        return self._first_delimited(_MASK_PIPELINE, PipelineParser)

    def command_begin(self) -> CommandParser:
        """The first command of the conditional."""
        return self._first_delimited(_MASK_COMMAND, CommandParser)

    def advance(self) -> None:
        """Move to the next conditional of the command line."""
        self._next_delimited(_MASK_CONDITIONAL)


class CommandLineParser(ShellParser):
    """A whole command line."""

    def conditional_begin(self) -> ConditionalParser:
        """The first conditional of the line."""
        return self._first_delimited(_MASK_CONDITIONAL, ConditionalParser)

    def pipeline_begin(self) -> PipelineParser:
        """The first pipeline of the line."""
        return self._first_delimited(_MASK_PIPELINE, PipelineParser)

    def command_begin(self) -> CommandParser:
        """The first command of the line."""
        return self._first_delimited(_MASK_COMMAND, CommandParser)


class _Foreground:
    def __init__(self) -> None:
        self.ttyfd = -1
        self.owns_foreground = False
        self.shell_pgid = -1

    def claim(self, pgid: int) -> int:
        if self.ttyfd < 0:
            import fcntl

            fd = os.open("/dev/tty", os.O_RDWR)
            try:
                self.ttyfd = fcntl.fcntl(fd, fcntl.F_DUPFD, 10)
            finally:
                os.close(fd)
            os.set_inheritable(self.ttyfd, False)
            self.shell_pgid = os.getpgrp()
            self.owns_foreground = self.shell_pgid == os.tcgetpgrp(self.ttyfd)
        if not self.owns_foreground:
            return 0
        os.tcsetpgrp(self.ttyfd, pgid if pgid else self.shell_pgid)
        return 0


_foreground = _Foreground()


def claim_foreground(pgid: int) -> int:
    """Make `pgid` (or the shell's own group, if 0) the terminal's foreground group.

    Does nothing unless the shell owned the foreground when first called.
    Returns 0; raises OSError on failure.
    """
    return _foreground.claim(pgid)


def set_signal_handler(signo: int, handler):
    """Install `handler` for `signo` and return the previous handler."""
    return signal.signal(signo, handler)