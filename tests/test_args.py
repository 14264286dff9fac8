import pytest

from syskit61.args import Io61Args, UsageError, parse_size
from syskit61.rand import Mt19937


@pytest.mark.parametrize(
    "text, expected",
    [
        ("4096", 4096),
        ("0x400", 1024),
        ("1k", 1024),
        ("1.5k", 1536),
        (".5k", 512),
        ("2m", 2 * 1024 * 1024),
    ],
)
def test_parse_size_valid(text, expected):
    assert parse_size(text) == expected


@pytest.mark.parametrize("text", ["", "abc", "1e3", "1.5", "1kb", "1q", "-5"])
def test_parse_size_invalid(text):
    assert parse_size(text) is None


def test_parse_size_too_large():
    assert parse_size("99999999999999999999999") is None


def test_parse_block_size_and_input():
    args = Io61Args("b:o:i:", 4096).parse(["prog", "-b", "512", "in.txt"])
    assert args.block_size == 512
    assert args.max_block_size == 4096
    assert args.input_file == "in.txt"
    assert args.input_files == ["in.txt"]
    assert args.output_files == [None]
    assert args.program_name == "prog"


def test_parse_defaults_leave_files_unset():
    args = Io61Args("s:o:i:").parse(["prog"])
    assert args.input_file is None
    assert args.output_file is None
    assert args.file_size is None
    assert args.input_files == [None]


def test_parse_flags():
    args = Io61Args("s:o:i:FyRW").parse(["prog", "-F", "-y", "-y", "-R", "-s", "10", "-o", "out"])
    assert args.flush is True
    assert args.yield_count == 2
    assert args.read_bytewise is True
    assert args.write_bytewise is False
    assert args.file_size == 10
    assert args.output_file == "out"


def test_options_after_positional_are_parsed():
    args = Io61Args("s:o:i:").parse(["prog", "in", "-s", "7"])
    assert args.input_file == "in"
    assert args.file_size == 7


def test_unknown_option_is_usage_error():
    with pytest.raises(UsageError):
        Io61Args("s:o:i:").parse(["prog", "-z"])


def test_zero_block_size_is_usage_error():
    with pytest.raises(UsageError):
        Io61Args("b:", 4096).parse(["prog", "-b", "0"])


def test_bad_size_is_usage_error():
    with pytest.raises(UsageError):
        Io61Args("s:").parse(["prog", "-s", "lots"])


def test_two_inputs_need_hash():
    with pytest.raises(UsageError):
        Io61Args("i:o:").parse(["prog", "a", "b"])


def test_two_outputs_need_double_hash():
    with pytest.raises(UsageError):
        Io61Args("i:o:#").parse(["prog", "-o", "a", "-o", "b"])


def test_many_files_allowed_with_double_hash():
    args = Io61Args("b:i:o:l##", 1).parse(["prog", "-i", "a", "-i", "b", "-o", "c", "-o", "d"])
    assert args.input_files == ["a", "b"]
    assert args.output_files == ["c", "d"]
    assert args.input_file is None
    assert args.output_file is None


def test_delay_option():
    args = Io61Args("D:").parse(["prog", "-D", "0.5"])
    assert args.delay == 0.5


def test_bad_delay_is_usage_error():
    with pytest.raises(UsageError):
        Io61Args("D:").parse(["prog", "-D", "soon"])


def test_usage_message_lists_options():
    args = Io61Args("b:o:", 4096)
    with pytest.raises(UsageError) as info:
        args.parse(["blockcat61", "-x"])
    message = str(info.value)
    assert message.startswith("Usage: blockcat61 [OPTIONS] [FILE]\n")
    assert "-b BLOCKSIZE  Set block size (default 4096)" in message
    assert "-o FILE       Write output to FILE" in message
    assert "-i FILE" not in message


def test_usage_marks_multiple_files():
    args = Io61Args("i:#")
    args.program_name = "gather"
    assert args.usage().startswith("Usage: gather [OPTIONS] [FILE]...")


def test_set_seed_matches_engine():
    args = Io61Args("r:").set_seed(83419)
    assert args.seed == 83419
    expected = Mt19937(83419)
    assert [args.engine() for _ in range(3)] == [expected() for _ in range(3)]


def test_seed_option_reseeds_engine():
    args = Io61Args("r:").parse(["prog", "-r", "7"])
    assert args.engine() == Mt19937(7)()


def test_set_block_size_sets_both():
    args = Io61Args("b:").set_block_size(256)
    assert (args.block_size, args.max_block_size) == (256, 256)


def test_max_block_size_never_below_block_size():
    args = Io61Args("b:B:", 16).parse(["prog", "-b", "64", "-B", "32"])
    assert args.block_size == 64
    assert args.max_block_size == 64


class _FlushRecorder:
    def __init__(self):
        self.flushes = 0

    def flush(self):
        self.flushes += 1


def test_after_write_flushes_when_requested():
    args = Io61Args("F").parse(["prog", "-F"])
    sink = _FlushRecorder()
    args.after_write(sink)
    args.after_write(sink)
    assert sink.flushes == 2


def test_after_write_without_flush_option():
    args = Io61Args("F").parse(["prog"])
    sink = _FlushRecorder()
    args.after_write(sink)
    assert sink.flushes == 0


def test_after_open_consumes_delay():
    args = Io61Args("D:").parse(["prog", "-D", "0.01"])
    args.after_open()
    assert args.delay == 0