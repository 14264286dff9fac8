"""Systems-programming toolkit: string and number helpers, printf, a text console, unbuffered files with copy commands, shell parsing, socket pipelines and a randomness test."""

__version__ = "0.1.0"

__all__ = [
    "args",
    "bits",
    "console",
    "cstr",
    "fileutil",
    "io61",
    "printf",
    "rand",
    "randcheck",
    "shparse",
    "shuffle",
    "socketpipe",
]