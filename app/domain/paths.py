from __future__ import annotations

import re

__all__ = [
    "InvalidResourcePathError",
    "normalize_resource_path",
    "extension",
]

# C0 control characters and DEL; NUL included.
_CONTROL_RE = re.compile(r"[\x00-\x1f\x7f]")


class InvalidResourcePathError(ValueError):
    """Raised when a requested resource path cannot be served safely."""

    code: str = "invalid_path"


def normalize_resource_path(path: str) -> str:
    """Deterministically normalize a resource path.

    Rules:
    - Strip leading/trailing slashes.
    - Collapse repeated slashes.
    - Keep the original case of every segment, extension included.

    Raises:
        InvalidResourcePathError: if the path is empty, contains control
        characters or backslashes, or has a "." or ".." segment.
    """
    if not isinstance(path, str) or not path:
        raise InvalidResourcePathError("resource path must be a non-empty string")

    if _CONTROL_RE.search(path):
        raise InvalidResourcePathError("resource path contains control characters")
    if "\\" in path:
        raise InvalidResourcePathError("resource path contains a backslash")

    p = re.sub(r"/+", "/", path).strip("/")
    if p == "":
        raise InvalidResourcePathError("resource path resolves to empty after normalization")

    for segment in p.split("/"):
        if segment in (".", ".."):
            raise InvalidResourcePathError("resource path contains a relative segment")
    return p


def extension(path: str) -> str:
    """Return the lowercased file extension (without the dot) or empty string."""
    name = normalize_resource_path(path).rpartition("/")[2]
    stem, dot, ext = name.rpartition(".")
    # ".profile" style names have no extension
    return ext.lower() if dot and stem else ""
