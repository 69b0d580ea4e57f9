from section_index import SectionIndex, parse_section_table
from tool_runner import ToolError

OBJDUMP_OUTPUT = """
/usr/lib/libfoo.so:     file format elf64-x86-64

Sections:
Idx Name          Size      VMA               LMA               File off  Algn
  0 .note.gnu.build-id 00000024  00000000000001c8  00000000000001c8  000001c8  2**2
                  CONTENTS, ALLOC, LOAD, READONLY, DATA
 10 .text         00001b52  0000000000001100  0000000000001100  00001100  2**4
                  CONTENTS, ALLOC, LOAD, READONLY, CODE
  9 .plt          00000020  0000000000001000  0000000000001000  00001000  2**4
                  CONTENTS, ALLOC, LOAD, READONLY, CODE
"""


def test_parse_section_table_sorted_by_offset():
    sections = parse_section_table(OBJDUMP_OUTPUT)

    assert sections == [
        {"start": 0x1C8, "end": 0x1C8 + 0x24, "name": ".note.gnu.build-id"},
        {"start": 0x1000, "end": 0x1020, "name": ".plt"},
        {"start": 0x1100, "end": 0x1100 + 0x1B52, "name": ".text"},
    ]


def test_lookup_and_single_dump_per_file():
    calls = []

    def dump(tool, file, timeout=10.0):
        calls.append((tool, file))
        return OBJDUMP_OUTPUT

    index = SectionIndex("objdump", dump=dump)

    assert index.lookup("/usr/lib/libfoo.so", 0x1200)["name"] == ".text"
    assert index.lookup("/usr/lib/libfoo.so", 0x1000)["name"] == ".plt"
    assert index.lookup("/usr/lib/libfoo.so", 0x1050) is None
    assert index.lookup("/usr/lib/libfoo.so", 0x10) is None
    assert len(index.sections_for("/usr/lib/libfoo.so")) == 3

    assert calls == [("objdump", "/usr/lib/libfoo.so")]


def test_failed_dump_degrades_to_empty_table():
    def dump(tool, file, timeout=10.0):
        raise ToolError("objdump exited with status 1")

    index = SectionIndex("objdump", dump=dump)

    assert index.lookup("/missing.so", 0x100) is None
    assert index.sections_for("/missing.so") == []
    assert "/missing.so" in index.failures
