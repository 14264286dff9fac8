# syskit61

A small systems-programming toolkit in pure Python, with no dependencies
outside the standard library.

## Modules

- **`syskit61.bits`**: `msb`, `lsb`, `round_down`, `round_up`,
  `round_down_pow2` and `round_up_pow2` on non-negative integers.
- **`syskit61.cstr`**: C-style character tests (`isspace`, `isdigit`,
  `isalpha`, `tolower`, ...), NUL-terminated string comparison and search
  (`strcmp`, `strncmp`, `strcasecmp`, `strncasecmp`, `strchr`, `strstr`),
  and 64-bit integer parsing and formatting (`from_chars`, `to_chars`,
  `strtol`, `strtoul`). `from_chars` raises `FromCharsError` (with `kind`
  `"invalid"` or `"range"` and a `position`); `to_chars` raises
  `OverflowError` when the result does not fit.
- **`syskit61.rand`**: `RandEngine`, a 64-bit linear congruential generator
  giving values in `[0, RAND_MAX]`; `Mt19937`, the 32-bit Mersenne Twister;
  `bounded_rand` and `uniform_int` to draw integers in an inclusive range;
  and a shared generator behind `rand`, `srand` and `rand_range`.
- **`syskit61.printf`**: a printf engine. `Printer` is the base class (define
  `putc`), `StringPrinter` collects output, `snprintf(size, fmt, *args)`
  returns the kept text and the full length, and `format_string` returns the
  whole result. Conversions `%d %i %u %x %X %p %s %c %C %%`, the flags
  `# 0 - space + '`, width, precision (`*` reads an argument) and the length
  modifiers `l t z h` are supported.
- **`syskit61.console`**: an in-memory 80×25 `Console` of colour cells, a
  `ConsolePrinter` that understands `ESC [ ... m` colour escapes and the
  scroll modes of `ScrollMode`, and `console_puts` / `console_printf`.
- **`syskit61.io61`**: `Io61File`, an unbuffered wrapper on a file
  descriptor that makes one system call per byte (`readc`, `read`, `writec`,
  `write`, `seek`, `flush`, `filesize`, `close`); it is a context manager.
  `readc` returns `None` at end of file and errors raise `OSError`.
  `open_check` opens a file (or standard input/output for `None`) and exits
  with status 1 if it cannot.
- **`syskit61.fileutil`**: `fd_open_check`, `stdio_open_check`,
  `monotonic_timestamp`, `read_bytewise` and `write_bytewise`.
- **`syskit61.args`**: `Io61Args`, the option parser shared by the copy
  commands, `parse_size` (accepts `4096`, `0x1000`, `1.5k`, `2m`, `1g`) and
  `UsageError`.
- **`syskit61.shuffle`**: copy commands with non-sequential access patterns
  (`stridecat61`, `wstridecat61`, `shufflecat61`, `endorder61`,
  `varblockcat61`, `scattergather61`) and the helpers `read_line` and
  `read_block`.
- **`syskit61.shparse`**: a shell tokenizer (`ShellTokenizer`, `TokenType`)
  and region parsers (`CommandLineParser`, `ConditionalParser`,
  `PipelineParser`, `CommandParser`), plus `claim_foreground` and
  `set_signal_handler`.
- **`syskit61.randcheck`**: Maurer's universal statistical test
  (`maurer_test`, returning a `MaurerResult`).
- **`syskit61.socketpipe`**: runs commands joined by loopback TCP sockets.

## Installation

```
pip install syskit61
```

## Examples

```python
from syskit61.bits import msb, round_up_pow2
from syskit61.printf import format_string, snprintf

msb(0x1FABC)                               # 17
round_up_pow2(3)                           # 4
format_string("%5d|%-4s|%#x", 42, "ab", 255)   # '   42|ab  |0xff'
snprintf(4, "%d", 12345)                   # ('123', 5)
```

Tokenizing and splitting a shell command line:

```python
from syskit61.shparse import CommandLineParser, ShellTokenizer

for token_type, value in ShellTokenizer("echo 'hello world' > out.txt && ls"):
    print(token_type.name, value)

line = CommandLineParser("echo a && echo b; ls")
for conditional in line.conditional_begin():
    print(conditional.region())            # 'echo a && echo b', then 'ls'
```

Reading a file through `Io61File`:

```python
import os
from syskit61.io61 import open_check

with open_check("input.bin", os.O_RDONLY) as f:
    first = f.read(16)
    size = f.filesize()
```

## Commands

Copy commands (each accepts `-o OUTFILE` and reads the input file given as
an argument, or standard input; run one with no valid options to see its
usage text):

```
stridecat61 -b 1 -t 1024 -o out.bin input.bin
wstridecat61 -b 1 -t 1024 -o out.bin input.bin
shufflecat61 -b 4096 -r 7 -o out.bin input.bin
endorder61 -b 1024 -B 4096 -o out.bin input.bin
varblockcat61 -b 4096 -o out.bin input.bin
scattergather61 -b 1 -i a.txt -i b.txt -o x.txt -o y.txt
```

`shufflecat61` needs an input whose size is a multiple of the block size.

Check a file for randomness. The exit status is 0 when it passes, 1 when it
fails and 2 when there is too little data:

```
randcheck61 -s 1m random.bin
```

Run commands joined by socket "pipes"; `-P` sets the socket buffer size:

```
socketpipe -P 4096 cat input.txt "|" wc -c
```

## What it does not do

- `syskit61.shparse` only tokenizes and splits command lines; the package
  has no shell that runs them.
- There are no plain sequential or reverse-order copy commands; the copy
  commands provided are those in `syskit61.shuffle`.
- `Io61File` does no caching: `flush` has nothing to do, and every byte is
  its own system call.

## Running the tests

```
pip install syskit61[test]
pytest
```