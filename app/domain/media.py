from __future__ import annotations

import codecs
import mimetypes
import re
from enum import Enum

from .paths import extension

__all__ = [
    "Classification",
    "InvalidMediaTypeError",
    "SNIFF_BYTES",
    "OCTET_STREAM",
    "guess_media_type",
    "is_text_media_type",
    "looks_like_text",
    "classify",
    "content_type_header",
    "parse_media_type",
    "accept_override",
]

# Bytes inspected when classifying file-backed resources
SNIFF_BYTES = 8192
OCTET_STREAM = "application/octet-stream"

# Config formats the stdlib table misses or maps inconsistently across platforms.
_EXTRA_TYPES = {
    "yml": "application/yaml",
    "yaml": "application/yaml",
    "properties": "text/plain",
    "md": "text/markdown",
    "toml": "application/toml",
}

_TEXT_APPLICATION_TYPES = {
    "application/json",
    "application/xml",
    "application/yaml",
    "application/toml",
    "application/javascript",
    "application/x-sh",
}

_MEDIA_TYPE_RE = re.compile(r"^[A-Za-z0-9][\w!#$&^.+-]*/[A-Za-z0-9][\w!#$&^.+-]*$")


class Classification(str, Enum):
    text = "text"
    binary = "binary"


class InvalidMediaTypeError(ValueError):
    code: str = "invalid_media_type"


def guess_media_type(path: str) -> str | None:
    """Guess a media type from the path's extension, or None if unknown."""
    ext = extension(path)
    if ext in _EXTRA_TYPES:
        return _EXTRA_TYPES[ext]
    guessed, _ = mimetypes.guess_type(f"x.{ext}" if ext else path, strict=False)
    return guessed


def is_text_media_type(media_type: str) -> bool:
    return (
        media_type.startswith("text/")
        or media_type in _TEXT_APPLICATION_TYPES
        or media_type.endswith("+json")
        or media_type.endswith("+xml")
    )


def looks_like_text(sample: bytes, *, complete: bool = True) -> bool:
    """Return True only if `sample` is provably UTF-8 text.

    When `complete` is False the sample is a prefix of a longer payload and a
    multibyte sequence cut at the end is not counted as a decode failure.
    """
    if b"\x00" in sample:
        return False
    decoder = codecs.getincrementaldecoder("utf-8")(errors="strict")
    try:
        decoder.decode(sample, final=complete)
    except UnicodeDecodeError:
        return False
    return True


def classify(path: str, sample: bytes, *, complete: bool = True) -> tuple[Classification, str]:
    """Classify a payload as text or binary and pick its media type.

    The result only feeds response headers; the payload itself is never
    transcoded.
    """
    guessed = guess_media_type(path)
    if guessed is not None and not is_text_media_type(guessed):
        return Classification.binary, guessed

    if looks_like_text(sample, complete=complete):
        return Classification.text, guessed or "text/plain"
    # Text-like extension or unknown, but the bytes are not provably text.
    return Classification.binary, OCTET_STREAM


def content_type_header(classification: Classification, media_type: str) -> str:
    if classification is Classification.text and "charset=" not in media_type.lower():
        return f"{media_type}; charset=utf-8"
    return media_type


def parse_media_type(value: str) -> str:
    """Validate an explicitly requested media type and return it stripped.

    Parameters after ";" (e.g. charset) are kept verbatim.
    """
    raw = value.strip()
    if not (raw.isascii() and raw.isprintable()):
        raise InvalidMediaTypeError("media type must be printable ASCII")
    base = raw.split(";", 1)[0].strip()
    if not _MEDIA_TYPE_RE.match(base):
        raise InvalidMediaTypeError(f"not a concrete media type: {value!r}")
    return raw


def accept_override(accept: str | None) -> str | None:
    """Return the Accept header's media type if it names exactly one concrete type.

    Lists, wildcards and malformed values yield None so the resource's own
    classification applies.
    """
    if not accept or "," in accept or "*" in accept:
        return None
    try:
        return parse_media_type(accept.split(";", 1)[0])
    except InvalidMediaTypeError:
        return None
