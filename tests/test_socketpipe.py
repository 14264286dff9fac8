import sys

import pytest

from syskit61.socketpipe import main, parse_options, run_pipeline, split_commands


def test_parse_options_without_buffer():
    assert parse_options(["cat", "file"]) == (0, ["cat", "file"])


def test_parse_options_attached_buffer():
    assert parse_options(["-P4096", "cat"]) == (4096, ["cat"])


def test_parse_options_separate_buffer_hex():
    assert parse_options(["-P", "0x10", "cat", "|", "wc"]) == (16, ["cat", "|", "wc"])


def test_parse_options_octal():
    assert parse_options(["-P010", "cat"])[0] == 8


@pytest.mark.parametrize(
    "argv",
    [[], ["-P"], ["-P", "100"], ["-Pabc", "cat"], ["-P12x", "cat"], ["-P", str(2**31), "cat"]],
)
def test_parse_options_errors(argv):
    with pytest.raises(ValueError):
        parse_options(argv)


def test_split_commands():
    assert split_commands(["a", "b", "|", "c"]) == [["a", "b"], ["c"]]
    assert split_commands(["a"]) == [["a"]]


@pytest.mark.parametrize("args", [["|", "a"], ["a", "|"], ["a", "|", "|", "b"], []])
def test_split_commands_empty_command(args):
    with pytest.raises(ValueError):
        split_commands(args)


def test_run_pipeline_transfers_data(capfd):
    producer = [sys.executable, "-c", "import sys; sys.stdout.write('hello')"]
    consumer = [
        sys.executable,
        "-c",
        "import sys; sys.stdout.write(sys.stdin.read().upper())",
    ]
    status = run_pipeline([producer, consumer], 0)
    out = capfd.readouterr().out
    assert status == 0
    assert out == "HELLO"


def test_run_pipeline_returns_last_status():
    first = [sys.executable, "-c", "pass"]
    last = [sys.executable, "-c", "import sys; sys.exit(3)"]
    assert run_pipeline([first, last], 0) == 3


def test_run_pipeline_missing_last_command():
    assert run_pipeline([["/nonexistent/definitely-not-here"]], 0) == 1


def test_main_usage_error(capfd):
    assert main(["a", "|"]) == 1
    assert "Usage" in capfd.readouterr().err