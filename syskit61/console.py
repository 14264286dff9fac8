"""An in-memory 80x25 text console with colour cells and ANSI colour escapes.

Each cell holds a character in its low byte and a colour in bits 8-15
(foreground in bits 8-11, background in bits 12-15).
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List

from .printf import COLOR_GRAY, Printer

__all__ = [
    "CONSOLE_COLUMNS",
    "CONSOLE_ROWS",
    "END_CPOS",
    "COLOR_GRAY",
    "COLOR_WHITE",
    "COLOR_ERROR",
    "COLOR_SUCCESS",
    "CS_NORMAL",
    "CS_WHITE",
    "CS_RED",
    "CS_YELLOW",
    "CS_GREEN",
    "CS_CYAN",
    "CS_BLUE",
    "CS_PURPLE",
    "CS_ERROR",
    "CS_SUCCESS",
    "CS_ECHO",
    "cpos",
    "ScrollMode",
    "Console",
    "AnsiEscapeBuffer",
    "ConsolePrinter",
    "console_puts",
    "console_printf",
]

CONSOLE_COLUMNS = 80
CONSOLE_ROWS = 25
END_CPOS = CONSOLE_ROWS * CONSOLE_COLUMNS

COLOR_WHITE = 0x0F00
COLOR_ERROR = 0xCF00
COLOR_SUCCESS = 0x0A00

CS_NORMAL = "\x1b[m"
CS_WHITE = "\x1b[1m"
CS_RED = "\x1b[91m"
CS_YELLOW = "\x1b[93m"
CS_GREEN = "\x1b[32m"
CS_CYAN = "\x1b[96m"
CS_BLUE = "\x1b[94m"
CS_PURPLE = "\x1b[35m"
CS_ERROR = "\x1b[41;1m"
CS_SUCCESS = "\x1b[32;1m"
CS_ECHO = "\x1b[36m"

_ESC = 0x1B
_ESCAPE_LIMIT = 12
_COLORMAP = (0, 4, 2, 6, 1, 5, 3, 7)


def cpos(row: int, col: int) -> int:
    """Return the cell position of `row`, `col`."""
    return row * CONSOLE_COLUMNS + col


class ScrollMode(IntEnum):
    """What a console printer does when it runs off the end of the screen."""

    OFF = 0
    ON = 1
    BLANK = 2


class Console:
    """The screen cells and the cursor position."""

    def __init__(self) -> None:
        self.cells: List[int] = [0] * END_CPOS
        self.cursorpos = 0

    def clear(self) -> None:
        """Fill the screen with gray spaces and move the cursor home."""
        self.cells[:] = [ord(" ") | COLOR_GRAY] * END_CPOS
        self.cursorpos = 0

    def line_is_blank(self, row: int) -> bool:
        """Return True if `row` holds only spaces or NULs on a black background."""
        start = row * CONSOLE_COLUMNS
        return all(
            (cell & 0xF0DF) == 0 for cell in self.cells[start : start + CONSOLE_COLUMNS]
        )

    def text(self) -> str:
        """Return the screen's characters, one line per row, trailing blanks removed."""
        rows = []
        for row in range(CONSOLE_ROWS):
            start = row * CONSOLE_COLUMNS
            chars = (
                chr(cell & 0xFF) if cell & 0xFF else " "
                for cell in self.cells[start : start + CONSOLE_COLUMNS]
            )
            rows.append("".join(chars).rstrip())
        return "\n".join(rows)


@dataclass
class AnsiEscapeBuffer:
    """Collects ``ESC [ ... m`` sequences and turns them into colour changes."""

    buf: List[int] = field(default_factory=list)
    length: int = 0

    def putc(self, c: int, printer: Printer) -> bool:
        """Offer `c` to the buffer; return True if it was consumed."""
        if self.length < 0 or (self.length == 0 and c != _ESC):
            return False
        self._putc_impl(c, printer)
        return True

    def flush(self, printer: Printer) -> None:
        """Send any buffered characters to `printer` as ordinary output."""
        if self.length <= 0:
            return
        pending = self.buf[: self.length]
        self.length = -1
        for ch in pending:
            printer.putc(ch)
        self.buf.clear()
        self.length = 0

    def _putc_impl(self, c: int, printer: Printer) -> None:
        del self.buf[self.length :]
        self.buf.append(c)
        self.length += 1
        ch = chr(c)
        if (
            self.length == 1
            or (self.length == 2 and ch == "[")
            or (
                2 < self.length < _ESCAPE_LIMIT
                and (("0" <= ch <= "9") or ch == ";")
            )
        ):
            return

        if ch != "m":
            self.flush(printer)
            return

        x = 0
        printer.color = COLOR_GRAY
        for code in self.buf[2 : self.length]:
            if ord("0") <= code <= ord("9"):
                x = x * 10 + code - ord("0")
                continue
            color = printer.color
            if x == 0:
                color = COLOR_GRAY
            elif x == 1:
                color |= 0x0800
            elif x == 2:
                color &= ~0x0800
            elif x == 7:
                color = ((color >> 4) | (color << 4)) & 0xFF00
            elif 30 <= x <= 37:
                color = (color & 0xF000) | (_COLORMAP[x - 30] << 8)
            elif 40 <= x <= 47:
                color = (color & 0x0F00) | (_COLORMAP[x - 40] << 12)
            elif 90 <= x <= 97:
                color = (color & 0xF000) | (_COLORMAP[x - 90] << 8) | 0x0800
            elif 100 <= x <= 107:
                color = (color & 0x0F00) | (_COLORMAP[x - 100] << 12) | 0x8000
            printer.color = color
            x = 0
        self.buf.clear()
        self.length = 0


class ConsolePrinter(Printer):
    """A printer that writes into a `Console`, scrolling as configured."""

    def __init__(self, console: Console, cpos: int, scroll_mode: int) -> None:
        self.console = console
        self.scroll_mode = ScrollMode(int(scroll_mode))
        self.scroll_blank = -1
        self.ebuf = AnsiEscapeBuffer()
        self.color = COLOR_GRAY
        if cpos < 0:
            self.cell = console.cursorpos
        elif cpos <= END_CPOS:
            self.cell = cpos
        else:
            self.cell = 0

    def scroll(self) -> None:
        """Make room at the bottom of the screen, or wrap to the top."""
        if self.cell < END_CPOS:
            raise RuntimeError("scroll called before the end of the screen")
        if self.scroll_mode == ScrollMode.OFF:
            self.cell = 0
            return
        console = self.console
        if self.scroll_mode == ScrollMode.BLANK and self.scroll_blank < 0:
            row = CONSOLE_ROWS - 1
            while row > 0 and not console.line_is_blank(row - 1):
                row -= 1
            while row > 0 and console.line_is_blank(row - 1):
                row -= 1
            self.scroll_blank = row
        elif self.scroll_blank > 0 and not console.line_is_blank(self.scroll_blank):
            self.scroll_blank = 0
        start = self.scroll_blank * CONSOLE_COLUMNS if self.scroll_blank > 0 else 0
        last_row = END_CPOS - CONSOLE_COLUMNS
        console.cells[start:last_row] = console.cells[start + CONSOLE_COLUMNS : END_CPOS]
        console.cells[last_row:END_CPOS] = [0] * CONSOLE_COLUMNS
        self.cell -= CONSOLE_COLUMNS

    def move_cursor(self) -> None:
        """Flush pending escape characters and put the cursor at the current cell."""
        self.ebuf.flush(self)
        self.console.cursorpos = self.cell

    def putc(self, c: int) -> None:
        """Write one character, interpreting newlines and colour escapes."""
        c &= 0xFF
        if self.ebuf.putc(c, self):
            return
        while self.cell >= END_CPOS:
            self.scroll()
        cells = self.console.cells
        if c == ord("\n"):
            pos = self.cell % CONSOLE_COLUMNS
            fill = CONSOLE_COLUMNS - pos
            cells[self.cell : self.cell + fill] = [ord(" ") | self.color] * fill
            self.cell += fill
        else:
            cells[self.cell] = c | self.color
            self.cell += 1


def console_puts(console: Console, cpos: int, color: int, text: str) -> int:
    """Write `text` at `cpos` (or at the cursor if negative) in `color`.

    Returns the final cell position; a negative `cpos` also moves the cursor.
    """
    printer = ConsolePrinter(console, cpos, ScrollMode.ON if cpos < 0 else ScrollMode.OFF)
    printer.color = color
    for ch in text:
        printer.putc(ord(ch))
    if cpos < 0:
        printer.move_cursor()
    return printer.cell


def console_printf(console: Console, cpos: int, fmt: str, *args) -> int:
    """Print formatted text at `cpos` (or at the cursor if negative).

    Returns the final cell position; a negative `cpos` also moves the cursor.
    """
    printer = ConsolePrinter(console, cpos, ScrollMode.ON if cpos < 0 else ScrollMode.OFF)
    printer.vprintf(fmt, args)
    if cpos < 0:
        printer.move_cursor()
    return printer.cell