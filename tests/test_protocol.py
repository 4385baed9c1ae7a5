"""
Tests for the tracker wire codec.

Covers:
- Argument encoding and decoding
- Request line serialization
- Reply classification (OK / ERR / malformed)
"""

from __future__ import annotations

import pytest

from mogile_client.tracker.errors import MalformedReplyError, PayloadParseError, TrackerReplyError
from mogile_client.tracker.protocol import (
    decode_args,
    decode_line,
    encode_args,
    encode_request,
    parse_reply,
)

# =============================================================================
# ARGUMENT CODEC
# =============================================================================


class TestArgumentCodec:
    """Tests for encode_args / decode_args."""

    def test_keys_are_sorted(self) -> None:
        assert encode_args({"key": "a", "domain": "d"}) == "domain=d&key=a"

    def test_multiple_values_keep_order(self) -> None:
        assert encode_args({"path": ["b", "a"]}) == "path=b&path=a"

    def test_special_characters_escaped(self) -> None:
        assert encode_args({"key": "a b&c=d/é"}) == "key=a+b%26c%3Dd%2F%C3%A9"

    def test_empty_mapping(self) -> None:
        assert encode_args({}) == ""

    @pytest.mark.parametrize("value", [b"ab", bytearray(b"ab"), 7, None, ["ok", 3]])
    def test_rejects_non_str_values(self, value) -> None:
        with pytest.raises(TypeError, match="'key'"):
            encode_args({"key": value})

    def test_accepts_tuple_of_str(self) -> None:
        assert encode_args({"path": ("a", "b")}) == "path=a&path=b"

    @pytest.mark.parametrize(
        "args",
        [
            {
                "domain": ["media"],
                "key": ["photos/2024 trip/cat & dog.jpg"],
                "path": ["http://10.0.0.5:7500/dev1/0/000/001.fid", "x=y"],
                "empty": [""],
                "unicode": ["ünïcödé ✓"],
            },
            {"": ["value"]},
            {"": [""]},
            {"a&b": ["1"], "c=d": ["2"], "e+f": ["3"], "100%": ["4"]},
            {"key": ["a&b", "c=d", "e+f", "100%", "%41"]},
            {"path": ["p3", "p1", "p2", "p1"]},
            {"sp ace": [" leading", "trailing "], "semi;colon": ["x;y"]},
        ],
    )
    def test_decode_is_inverse_of_encode(self, args) -> None:
        assert decode_args(encode_args(args)) == args

    def test_decode_repeated_keys_accumulate(self) -> None:
        assert decode_args("a=1&b=2&a=3") == {"a": ["1", "3"], "b": ["2"]}

    def test_decode_key_without_value(self) -> None:
        assert decode_args("flag&a=1") == {"flag": [""], "a": ["1"]}

    def test_decode_skips_empty_fields(self) -> None:
        assert decode_args("") == {}
        assert decode_args("a=1&&b=2") == {"a": ["1"], "b": ["2"]}

    def test_decode_bad_escape(self) -> None:
        with pytest.raises(PayloadParseError):
            decode_args("a=%zz")

    def test_decode_truncated_escape(self) -> None:
        with pytest.raises(PayloadParseError):
            decode_args("a=1%2")

    def test_decode_invalid_utf8(self) -> None:
        with pytest.raises(PayloadParseError):
            decode_args("a=%ff%fe")

    def test_decode_rejects_semicolon(self) -> None:
        with pytest.raises(PayloadParseError):
            decode_args("a=1;b=2")


# =============================================================================
# REQUEST LINES
# =============================================================================


class TestEncodeRequest:
    """Tests for request serialization."""

    def test_request_line(self) -> None:
        line = encode_request("get_paths", {"key": "k", "domain": "d"})
        assert line == b"get_paths domain=d&key=k\r\n"

    def test_request_without_args(self) -> None:
        assert encode_request("noop", {}) == b"noop \r\n"


# =============================================================================
# REPLY CLASSIFICATION
# =============================================================================


class TestParseReply:
    """Tests for reply line classification."""

    def test_ok_reply(self) -> None:
        assert parse_reply("OK a=1&b=2\r\n") == {"a": ["1"], "b": ["2"]}

    def test_ok_reply_empty_payload(self) -> None:
        assert parse_reply("OK \r\n") == {}

    def test_ok_reply_with_bad_payload(self) -> None:
        with pytest.raises(PayloadParseError):
            parse_reply("OK a=%g1\r\n")

    def test_err_reply(self) -> None:
        with pytest.raises(TrackerReplyError) as exc_info:
            parse_reply("ERR unknown_key some text\r\n")
        assert exc_info.value.code == "unknown_key"
        assert exc_info.value.message == "some text"
        assert str(exc_info.value) == "mogilefsd:unknown_key"

    def test_err_reply_with_empty_text(self) -> None:
        with pytest.raises(TrackerReplyError) as exc_info:
            parse_reply("ERR no_domain \r\n")
        assert exc_info.value.code == "no_domain"
        assert exc_info.value.message == ""

    def test_err_without_text_separator_is_malformed(self) -> None:
        """The error code must be followed by a space."""
        with pytest.raises(MalformedReplyError):
            parse_reply("ERR no_domain\r\n")

    def test_ok_without_crlf_is_malformed(self) -> None:
        """OK must span the whole line including CRLF."""
        with pytest.raises(MalformedReplyError):
            parse_reply("OK a=1\n")

    def test_garbage_is_malformed(self) -> None:
        with pytest.raises(MalformedReplyError) as exc_info:
            parse_reply("garbage\r\n")
        assert exc_info.value.line == "garbage\r\n"

    def test_lowercase_ok_is_malformed(self) -> None:
        with pytest.raises(MalformedReplyError):
            parse_reply("ok a=1\r\n")

    def test_blame_flags(self) -> None:
        assert MalformedReplyError("x").blames_tracker is True
        assert TrackerReplyError("x").blames_tracker is False
        assert PayloadParseError("x").blames_tracker is False


class TestDecodeLine:
    """Tests for raw reply decoding."""

    def test_utf8(self) -> None:
        assert decode_line("OK key=é\r\n".encode()) == "OK key=é\r\n"

    def test_invalid_utf8_is_kept_for_classification(self) -> None:
        assert decode_line(b"OK \xff\r\n").startswith("OK ")

    def test_err_with_invalid_utf8_text(self) -> None:
        with pytest.raises(TrackerReplyError) as exc_info:
            parse_reply(decode_line(b"ERR unknown_key caf\xe9\r\n"))
        assert exc_info.value.code == "unknown_key"
        assert exc_info.value.message == "caf\ufffd"

    def test_ok_with_invalid_utf8_payload(self) -> None:
        with pytest.raises(PayloadParseError):
            parse_reply(decode_line(b"OK path=\xff\r\n"))

    def test_garbage_with_invalid_utf8_is_malformed(self) -> None:
        with pytest.raises(MalformedReplyError) as exc_info:
            parse_reply(decode_line(b"gar\xffbage\r\n"))
        assert exc_info.value.line == "gar\ufffdbage\r\n"
