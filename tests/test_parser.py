"""Tests for parse() and parse_cstring()."""

from textwrap import dedent

import pytest

from flatini import ParseError, RangeError, parse, parse_cstring
from flatini.parser import IniCursor


class TestParseBasics:
    """Test well-formed input."""

    def test_empty(self):
        assert len(parse("")) == 0
        assert len(parse(b"")) == 0

    def test_blank_lines_and_comments_only(self):
        doc = parse("\n\r\n   \t\n; nothing here\n  ; nor here")

        assert len(doc) == 0

    def test_main_section(self):
        doc = parse("a=b")

        assert len(doc) == 1
        assert doc.has_section("")
        assert len(doc[""]) == 1
        assert doc[""].has_value("a")
        assert doc[""]["a"] == "b"

    def test_section(self):
        doc = parse("[s]\na=b")

        assert len(doc) == 1
        assert doc.has_section("s")
        assert not doc.has_section("")
        assert doc["s"].to_dict() == {"a": "b"}

    def test_comments(self):
        doc = parse("[s];aa\na=b; bb")

        assert len(doc) == 1
        assert doc["s"].to_dict() == {"a": "b"}

    def test_no_header_goes_to_default(self):
        doc = parse("a=1\nb=2\r\nc=3\r")

        assert list(doc) == [""]
        assert doc[""].to_dict() == {"a": "1", "b": "2", "c": "3"}

    def test_reassign_keeps_last(self):
        doc = parse("a=1\na=2")

        assert doc[""].to_dict() == {"a": "2"}

    def test_trims_spaces_and_tabs(self):
        doc = parse("[ \tsect ion\t ]  \n\t key name \t=\t some value \t\n")

        assert list(doc) == ["sect ion"]
        assert doc["sect ion"].to_dict() == {"key name": "some value"}

    def test_empty_value(self):
        doc = parse("a=\nb =  ; comment")

        assert doc[""].to_dict() == {"a": "", "b": ""}

    def test_key_without_equals(self):
        doc = parse("flag\nother ; comment")

        assert doc[""].to_dict() == {"flag": "", "other": ""}

    def test_empty_section_is_kept(self):
        doc = parse("[empty]\n[full]\na=b\n")

        assert list(doc) == ["empty", "full"]
        assert len(doc["empty"]) == 0

    def test_repeated_header_reenters_section(self):
        doc = parse(dedent("""
            [s]
            a = 1
            [t]
            x = y
            [s]
            b = 2
            """))

        assert doc["s"].to_dict() == {"a": "1", "b": "2"}
        assert doc["t"].to_dict() == {"x": "y"}

    def test_default_pairs_then_sections(self):
        doc = parse(dedent("""
            ; leading comment
            top = level

            [b]
            k = v   ; trailing
            [a]
            k = w
            """))

        assert list(doc) == ["", "a", "b"]
        assert doc[""]["top"] == "level"
        assert doc["a"]["k"] == "w"
        assert doc["b"]["k"] == "v"

    def test_header_at_eof(self):
        doc = parse("a=b\n[last]  ")

        assert list(doc) == ["", "last"]

    def test_special_chars_in_values(self):
        doc = parse("path = C:\\games[1]\\x\nurl = http://host/?q")

        assert doc[""]["path"] == "C:\\games[1]\\x"
        assert doc[""]["url"] == "http://host/?q"

    def test_result_access_is_read_only(self):
        doc = parse("[s]\na=b")

        with pytest.raises(RangeError):
            doc["t"]
        with pytest.raises(RangeError):
            doc["s"]["missing"]


class TestParseUnicode:
    """Test non-ASCII text and raw byte input."""

    def test_unicode_text(self):
        doc = parse("[š]\nā=ē")

        assert len(doc) == 1
        assert doc["š"].to_dict() == {"ā": "ē"}

    def test_unicode_bytes(self):
        doc = parse("[š]\nā=ē".encode("utf-8"))

        assert doc["š"].to_dict() == {"ā": "ē"}

    def test_byte_sequences(self):
        for data in (b"a=b", bytearray(b"a=b"), memoryview(b"a=b"),
                     [ord("a"), ord("="), ord("b")], iter(b"a=b")):
            doc = parse(data)
            assert doc[""].to_dict() == {"a": "b"}

    def test_char_sequence(self):
        doc = parse(["[", "s", "]", "\n", "a", "=", "b"])

        assert doc["s"].to_dict() == {"a": "b"}

    def test_invalid_utf8_is_preserved(self):
        doc = parse(b"k=\xff\xfe")

        value = doc[""]["k"]
        assert value.encode("utf-8", "surrogateescape") == b"\xff\xfe"

    def test_other_encoding(self):
        doc = parse("[é]\nà=ü".encode("latin-1"), encoding="latin-1")

        assert doc["é"].to_dict() == {"à": "ü"}

    def test_gbk_trail_bytes_are_not_syntax(self):
        """乚 is 0x81 0x5D in gbk, the trail byte being `]`."""
        doc = parse("[乚]\n名=乚\n".encode("gbk"), encoding="gbk")

        assert list(doc) == ["乚"]
        assert doc["乚"].to_dict() == {"名": "乚"}

    @pytest.mark.parametrize("codec", ["utf-16", "utf-16-le", "utf-32"])
    def test_wide_encodings(self, codec):
        doc = parse("[s]\na=b\n".encode(codec), encoding=codec)

        assert list(doc) == ["s"]
        assert doc["s"].to_dict() == {"a": "b"}

    def test_utf8_sig_encoding(self):
        doc = parse(b"\xef\xbb\xbfa=\xc4\x93", encoding="utf-8-sig")

        assert doc[""].to_dict() == {"a": "ē"}

    def test_unknown_encoding(self):
        with pytest.raises(LookupError):
            parse(b"a=b", encoding="no-such-codec")

    def test_bom_is_skipped(self):
        for data in (b"\xef\xbb\xbfa=b", "\ufeffa=b"):
            doc = parse(data)
            assert list(doc[""]) == ["a"]
            assert doc[""]["a"] == "b"

    def test_bom_before_section(self):
        doc = parse(b"\xef\xbb\xbf[s]\na=b")

        assert list(doc) == ["s"]

    def test_partial_bom_is_content(self):
        doc = parse(b"\xef\xbba=b", encoding="latin-1")

        assert list(doc[""]) == ["\xef\xbba"]

    def test_unsupported_input(self):
        with pytest.raises(TypeError):
            parse(42)
        with pytest.raises(TypeError):
            parse([1, "a"])
        with pytest.raises(ValueError):
            parse([300])


class TestParseErrors:
    """Test that malformed input aborts the whole parse."""

    @pytest.mark.parametrize(
        "text, reason",
        [
            ("[s", "Unexpected end of section"),
            ("[s\na=b", "Unexpected end of section"),
            ("[s;c]", "Unexpected comment"),
            ("[s] x", "Unexpected character after section"),
            ("[s]]", "Unexpected character after section"),
            ("a==b", "Unexpected character"),
            ("a=b=c", "Unexpected character"),
            ("[  ]", "Invalid section name"),
            ("[]\n", "Invalid section name"),
            ("=b", "Invalid key name"),
            ("  = b ; c", "Invalid key name"),
            ("=;comment", "Invalid key name"),
        ],
    )
    def test_malformed(self, text, reason):
        with pytest.raises(ParseError) as excinfo:
            parse(text)

        assert excinfo.value.reason == reason

    def test_error_position(self):
        with pytest.raises(ParseError) as excinfo:
            parse("a=b\n[ok]\nc==d")

        err = excinfo.value
        assert err.line == 3
        assert err.column == 3
        assert err.offset == 11
        assert str(err) == "Unexpected character (line 3, column 3)"

    def test_bom_not_counted_in_offset(self):
        with pytest.raises(ParseError) as excinfo:
            parse(b"\xef\xbb\xbfa==b")

        assert excinfo.value.offset == 2
        assert excinfo.value.column == 3

    def test_parse_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse("[s")

    def test_error_after_valid_content(self):
        """Nothing is salvaged from before the failure."""
        with pytest.raises(ParseError):
            parse("[good]\na=b\n[bad")


class TestParseCString:
    """Test the NUL-terminated boundary wrapper."""

    def test_stops_at_nul(self):
        doc = parse_cstring(b"a=b\0c=d")

        assert doc[""].to_dict() == {"a": "b"}

    def test_text_and_no_nul(self):
        assert parse_cstring("a=b\0[broken")[""]["a"] == "b"
        assert parse_cstring(bytearray(b"[s]\nk=v"))["s"]["k"] == "v"
        assert parse_cstring(memoryview(b"x=y\0"))[""]["x"] == "y"

    def test_leading_nul_is_empty(self):
        assert len(parse_cstring(b"\0a=b")) == 0


class TestIniCursor:
    """Test the char cursor the scanner walks with."""

    def test_walk_and_reset(self):
        cursor = IniCursor("ab\nc")
        seen = []
        while not cursor.exhausted:
            seen.append(cursor.current)
            cursor.next()

        assert seen == ["a", "b", "\n", "c"]
        assert str(cursor) == "line 2, column 2"

        cursor.reset_seek()
        assert cursor.current == "a"
        assert cursor.offset == 0
        assert str(cursor) == "line 1, column 1"

    def test_start_skips_prefix(self):
        cursor = IniCursor("\ufeffx", 1)

        assert cursor.current == "x"
        assert cursor.offset == 0

    def test_error_carries_position(self):
        cursor = IniCursor("a\nbc")
        for _ in range(3):
            cursor.next()

        err = cursor.error("Invalid key name")
        assert (err.line, err.column, err.offset) == (2, 2, 3)
        assert err.reason == "Invalid key name"
