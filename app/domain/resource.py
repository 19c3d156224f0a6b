from __future__ import annotations

import hashlib
from dataclasses import dataclass
from pathlib import Path

from .media import SNIFF_BYTES, Classification, classify, content_type_header
from .paths import normalize_resource_path

__all__ = [
    "ResourceError",
    "ResourceNotFoundError",
    "ResourceReadError",
    "Resource",
    "etag_for",
]


# ------------------------
# Errors
# ------------------------
class ResourceError(Exception):
    """Base class for resource lookup/read errors.

    The `code` attribute is the stable machine code surfaced by the API.
    """

    code: str = "resource_error"

    def __init__(self, path: str, message: str | None = None) -> None:
        self.path = path
        super().__init__(message or path)


class ResourceNotFoundError(ResourceError):
    code = "not_found"


class ResourceReadError(ResourceError):
    code = "read_failed"


# ------------------------
# Schema
# ------------------------
@dataclass(frozen=True)
class Resource:
    """A named byte payload.

    Exactly one of `data` (in memory) or `source` (file read per request) is
    set. `classification` and `media_type` only describe the payload; `read()`
    always returns the stored bytes untouched.
    """

    path: str
    classification: Classification
    media_type: str
    size: int
    data: bytes | None = None
    source: Path | None = None

    @classmethod
    def from_bytes(cls, path: str, data: bytes) -> Resource:
        rp = normalize_resource_path(path)
        classification, media_type = classify(rp, data)
        return cls(
            path=rp,
            classification=classification,
            media_type=media_type,
            size=len(data),
            data=bytes(data),
        )

    @classmethod
    def from_file(cls, path: str, source: Path) -> Resource:
        """Describe a file without keeping its bytes; raises OSError if unreadable."""
        rp = normalize_resource_path(path)
        size = source.stat().st_size
        with source.open("rb") as fh:
            sample = fh.read(SNIFF_BYTES)
        classification, media_type = classify(rp, sample, complete=len(sample) >= size)
        return cls(
            path=rp,
            classification=classification,
            media_type=media_type,
            size=size,
            source=source,
        )

    @property
    def content_type(self) -> str:
        return content_type_header(self.classification, self.media_type)

    def read(self) -> bytes:
        """Return the payload bytes.

        Raises:
            ResourceReadError: if the backing file cannot be read in full or
            no longer has the size recorded at load time.
        """
        if self.data is not None:
            return self.data
        if self.source is None:
            raise ResourceReadError(self.path, "resource has no payload")
        try:
            data = self.source.read_bytes()
        except OSError as e:
            raise ResourceReadError(self.path, f"cannot read backing file: {e}") from e
        if len(data) != self.size:
            raise ResourceReadError(
                self.path, f"backing file size changed: expected {self.size}, got {len(data)}"
            )
        return data


def etag_for(data: bytes) -> str:
    """Return a strong, quoted ETag derived from the payload's SHA-256."""
    return f'"{hashlib.sha256(data).hexdigest()}"'
