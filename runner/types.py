from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class Fetched:
    """Outcome of fetching one fixture from the server."""

    path: str
    expected_sha256: str
    expected_size: int
    status_codes: list[int] = field(default_factory=list)
    actual_sha256: list[str] = field(default_factory=list)
    elapsed_ms: list[float] = field(default_factory=list)
    content_type: str | None = None

    @property
    def matched(self) -> bool:
        return bool(self.actual_sha256) and all(
            code == 200 and digest == self.expected_sha256
            for code, digest in zip(self.status_codes, self.actual_sha256, strict=True)
        )


class SmokeError(RuntimeError):
    """Raised when the smoke flow cannot proceed (e.g., health never ready)."""


class FixtureError(SmokeError):
    """Raised when the local fixture tree is missing or empty."""


class FetchError(SmokeError):
    """Raised when fetching a single resource fails after retries."""
