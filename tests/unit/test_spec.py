"""
Unit tests for the spec reader.
"""

import pytest

from spicy.errors import ParseError
from spicy.spec import Segment, Wave, parse_spec

SIMPLE_SPEC = """
beginseg
\tname "code"
\tflags BOOT OBJECT
\tentry boot
\tstack bootStack + STACKSIZE
\tinclude "codesegment.o"
\tinclude "rspboot.o"
endseg

beginseg
\tname "assets"
\tflags RAW
\taddress 0x80200000
\tinclude "assets/tiles.bin"
endseg

beginwave
\tname "game"
\tinclude "code"
\tinclude "assets"
endwave
"""


class TestParseSpec:
    """Test suite for parse_spec."""

    def test_segments(self):
        spec = parse_spec(SIMPLE_SPEC)

        code = spec.segments["code"]
        assert code.flags == ("BOOT", "OBJECT")
        assert code.entry == "boot"
        assert code.stack == "bootStack + STACKSIZE"
        assert code.includes == ["codesegment.o", "rspboot.o"]
        assert code.is_boot
        assert not code.is_raw

        assets = spec.segments["assets"]
        assert assets.is_raw
        assert assets.attributes == {"address": "0x80200000"}

    def test_waves(self):
        spec = parse_spec(SIMPLE_SPEC)

        assert [w.name for w in spec.waves] == ["game"]
        wave = spec.waves[0]
        assert [s.name for s in wave.segments] == ["code", "assets"]
        assert [s.name for s in wave.raw_segments] == ["assets"]
        assert wave.boot_segment.name == "code"

    def test_waves_keep_file_order(self):
        text = SIMPLE_SPEC + """
beginwave
\tname "alpha"
\tinclude "code"
endwave
"""
        spec = parse_spec(text)

        assert [w.name for w in spec.waves] == ["game", "alpha"]

    def test_empty_spec(self):
        spec = parse_spec("")

        assert spec.waves == []
        assert spec.segments == {}

    def test_quoted_include_with_spaces(self):
        spec = parse_spec('beginseg\nname "a"\ninclude "my file.o"\nendseg\n')

        assert spec.segments["a"].includes == ["my file.o"]

    def test_unknown_segment_in_wave(self):
        text = 'beginwave\nname "w"\ninclude "missing"\nendwave\n'

        with pytest.raises(ParseError, match="unknown segment 'missing'"):
            parse_spec(text)

    @pytest.mark.parametrize("text,message", [
        ("beginseg\nname \"a\"\n", "unterminated segment"),
        ("beginwave\nname \"w\"\n", "unterminated wave"),
        ("endseg\n", "endseg without beginseg"),
        ("endwave\n", "endwave without beginwave"),
        ("beginseg\nbeginseg\n", "nested beginseg"),
        ("beginseg\nendseg\n", "segment has no name"),
        ("name \"a\"\n", "outside of a block"),
        ("beginwave\nname \"w\"\nflags RAW\nendwave\n", "unknown wave directive"),
        ("beginseg\nname \"a\nendseg\n", "line 2"),
    ])
    def test_malformed(self, text, message):
        with pytest.raises(ParseError, match=message):
            parse_spec(text)

    def test_duplicate_segment(self):
        text = 'beginseg\nname "a"\nendseg\nbeginseg\nname "a"\nendseg\n'

        with pytest.raises(ParseError, match="duplicate segment"):
            parse_spec(text)


class TestWave:
    """Test suite for Wave helpers."""

    def test_boot_segment_falls_back_to_entry(self):
        wave = Wave("w", [Segment("data"), Segment("code", entry="main")])

        assert wave.boot_segment.name == "code"

    def test_no_boot_segment(self):
        assert Wave("w", [Segment("data")]).boot_segment is None
