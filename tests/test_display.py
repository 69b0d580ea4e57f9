from display import display_anomaly, display_leak_report, format_address


def _block(base, size, line, stack):
    return {"base": base, "size": size, "origin_line": line, "call_stack": stack}


def test_format_address_pads_to_eight_digits():
    assert format_address(0x2000) == "0x00002000"
    assert format_address(0x7FFFDEADBEEF) == "0x7fffdeadbeef"


def test_in_use_allocation_shows_both_blocks(recording_console):
    anomaly = {
        "kind": "in_use_allocation",
        "line": 2,
        "address": 0x1000,
        "call_stack": ["0x20"],
        "blocks": [_block(0x1000, 16, 1, ["0x10"]), _block(0x1000, 64, 2, ["0x20"])],
    }
    display_anomaly(anomaly, "in-use address returned by allocator", recording_console)

    out = recording_console.file.getvalue()
    assert "line 2: in-use address returned by allocator 0x00001000" in out
    assert "previous: 16 bytes at 0x00001000 from line 1" in out
    assert "new: 64 bytes at 0x00001000 from line 2" in out


def test_bad_claim_shows_raw_stack(recording_console):
    anomaly = {
        "kind": "bad_claim",
        "line": 4,
        "address": 0x3000,
        "call_stack": ["0x30", "(nil)"],
        "blocks": [],
    }
    display_anomaly(anomaly, "claim asserted on not-in-use block", recording_console)

    out = recording_console.file.getvalue()
    assert "claim asserted on not-in-use block 0x00003000" in out
    assert "0x30 (nil)" in out


def test_empty_report_prints_nothing(recording_console):
    display_leak_report({"total_bytes": 0, "total_blocks": 0, "groups": []}, recording_console)
    assert recording_console.file.getvalue() == ""


def test_leak_report_layout(recording_console):
    report = {
        "total_bytes": 40,
        "total_blocks": 2,
        "groups": [{
            "signature": ("0x10: main (m.c:3)",),
            "bytes": 40,
            "block_count": 2,
            "listed": [_block(0x1000, 16, 1, ["0x10"])],
            "unlisted": 1,
            "frames": ["0x10: main (m.c:3)"],
        }],
    }
    display_leak_report(report, recording_console)

    out = recording_console.file.getvalue()
    assert "40 bytes in 2 blocks leaked from 1 sites" in out
    assert "16 bytes at 0x00001000 from line 1" in out
    assert "... and 1 more blocks" in out
    assert "0x10: main (m.c:3)" in out
