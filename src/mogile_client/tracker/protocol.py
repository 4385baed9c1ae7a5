"""
MogileFS tracker wire protocol.

Requests and replies are single CRLF-terminated text lines:

    request:  <COMMAND> <urlencoded-args>\\r\\n
    success:  OK <urlencoded-args>\\r\\n
    failure:  ERR <code> <free text>\\r\\n

Arguments are multi-valued mappings (``dict[str, list[str]]``). Keys are
encoded in sorted order so that identical arguments always produce the
same request line.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from urllib.parse import quote_plus, unquote_plus

from .errors import MalformedReplyError, PayloadParseError, TrackerReplyError

LINE_TERMINATOR = "\r\n"
ENCODING = "utf-8"

CMD_GET_PATHS = "get_paths"
CMD_RENAME = "rename"
CMD_DELETE = "delete"
CMD_FILE_DEBUG = "file_debug"
CMD_CREATE_OPEN = "create_open"
CMD_CREATE_CLOSE = "create_close"

# Success must span the whole line, failure only needs a matching prefix.
OK_PATTERN = re.compile(r"^OK (.*)\r\n\Z")
ERR_PATTERN = re.compile(r"^ERR (\S+) ")

_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")

ArgValue = str | Iterable[str]
Args = Mapping[str, ArgValue]
Values = dict[str, list[str]]


def _as_list(key: str, value: ArgValue) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (bytes, bytearray)) or not isinstance(value, Iterable):
        raise TypeError(
            f"argument {key!r} must be a str or an iterable of str, not {type(value).__name__}"
        )
    values = list(value)
    for item in values:
        if not isinstance(item, str):
            raise TypeError(f"argument {key!r} has a non-str value: {item!r}")
    return values


def encode_args(args: Args) -> str:
    """Encode an argument mapping as a query string, keys sorted."""
    parts = []
    for key in sorted(args):
        escaped_key = quote_plus(key)
        for value in _as_list(key, args[key]):
            parts.append(f"{escaped_key}={quote_plus(value)}")
    return "&".join(parts)


def decode_args(query: str) -> Values:
    """Decode a query string into a multi-valued mapping.

    Repeated keys accumulate their values in order. A key without ``=``
    maps to an empty string.

    Raises:
        PayloadParseError: On a ``;`` separator, a malformed percent-escape,
            or when the field bytes are not valid UTF-8.
    """
    values: Values = {}
    for field in query.split("&"):
        if not field:
            continue
        if ";" in field:
            raise PayloadParseError(f"invalid semicolon separator in {field!r}")
        if _BAD_ESCAPE.search(field):
            raise PayloadParseError(f"invalid escape in {field!r}")
        key, _, value = field.partition("=")
        try:
            # Undecodable raw bytes survive decode_line as lone surrogates.
            field.encode(ENCODING)
            key = unquote_plus(key, encoding=ENCODING, errors="strict")
            value = unquote_plus(value, encoding=ENCODING, errors="strict")
        except UnicodeError as e:
            raise PayloadParseError(f"invalid encoding in {field!r}") from e
        values.setdefault(key, []).append(value)
    return values


def encode_request(command: str, args: Args) -> bytes:
    """Serialize a command and its arguments into a request line."""
    return f"{command} {encode_args(args)}{LINE_TERMINATOR}".encode(ENCODING)


def decode_line(raw: bytes) -> str:
    """Decode a raw reply line without losing bytes.

    Bytes that are not valid UTF-8 become lone surrogates, so the line can
    still be classified. Only the payload of an ``OK`` reply is decoded
    strictly, by ``decode_args``.
    """
    return raw.decode(ENCODING, errors="surrogateescape")


def _lenient(text: str) -> str:
    return text.encode(ENCODING, errors="surrogateescape").decode(ENCODING, errors="replace")


def parse_reply(line: str) -> Values:
    """Classify a reply line and return its decoded payload.

    Raises:
        TrackerReplyError: The tracker answered ``ERR <code> ...``.
        PayloadParseError: The tracker answered ``OK`` with an undecodable payload.
        MalformedReplyError: The line matches neither reply shape.
    """
    ok = OK_PATTERN.match(line)
    if ok is not None:
        return decode_args(ok.group(1))

    fail = ERR_PATTERN.match(line)
    if fail is not None:
        message = line[fail.end():].rstrip("\r\n")
        raise TrackerReplyError(_lenient(fail.group(1)), _lenient(message))

    raise MalformedReplyError(_lenient(line))
