import pytest

from log_parser import parse_line, parse_log, parse_pointer


def test_parse_pointer_formats():
    assert parse_pointer("0x1000") == 0x1000
    assert parse_pointer("1000") == 0x1000
    assert parse_pointer("0XdeadBEEF") == 0xDEADBEEF
    assert parse_pointer("(nil)") == 0

    with pytest.raises(ValueError):
        parse_pointer("nope")


def test_malloc_record():
    record = parse_line(1, "malloc(16) -> 0x1000:0x10 0x20\n")
    assert record == {
        "kind": "malloc",
        "line": 1,
        "size": 16,
        "address": 0x1000,
        "call_stack": ["0x10", "0x20"],
    }


def test_malloc_returning_nil():
    record = parse_line(4, "malloc(0) -> (nil):4005d0")
    assert record["kind"] == "malloc"
    assert record["address"] == 0
    assert record["call_stack"] == ["4005d0"]


def test_claim_free_and_realloc_records():
    claim = parse_line(2, "claim(0x1000):0x30")
    assert claim["kind"] == "claim"
    assert claim["address"] == 0x1000
    assert claim["call_stack"] == ["0x30"]

    free = parse_line(3, "free(0x1000):0x40 (nil)")
    assert free["kind"] == "free"
    assert free["call_stack"] == ["0x40", "(nil)"]

    realloc = parse_line(5, "realloc(0x1000, 64) -> 0x2000:0x50")
    assert realloc["kind"] == "realloc"
    assert realloc["old_address"] == 0x1000
    assert realloc["address"] == 0x2000
    assert realloc["size"] == 64


def test_empty_call_stack():
    record = parse_line(1, "free(0x1000):")
    assert record["kind"] == "free"
    assert record["call_stack"] == []


def test_segment_record_with_file():
    record = parse_line(7, "segment: 7f0000-7f1000 00002000 r-xp /usr/lib/libfoo.so")
    assert record == {
        "kind": "segment",
        "line": 7,
        "start": 0x7F0000,
        "end": 0x7F1000,
        "page_offset": 0x2000,
        "perms": "r-xp",
        "file": "/usr/lib/libfoo.so",
    }


def test_anonymous_segment():
    record = parse_line(8, "segment: 0x1000-0x2000 0x0 rw-p ")
    assert record["kind"] == "segment"
    assert record["file"] == ""


def test_unknown_line_is_syntax_record():
    record = parse_line(9, "calloc(4, 4) -> 0x1000:0x10")
    assert record == {"kind": "syntax", "line": 9, "text": "calloc(4, 4) -> 0x1000:0x10"}


def test_parse_log_numbers_lines_and_skips_blanks():
    lines = ["malloc(1) -> 0x10:0x1\n", "\n", "garbage\n", "free(0x10):0x2\n"]
    records = list(parse_log(lines))

    assert [r["kind"] for r in records] == ["malloc", "syntax", "free"]
    assert [r["line"] for r in records] == [1, 3, 4]
