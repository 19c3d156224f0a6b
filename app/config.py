from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel

__all__ = [
    "Settings",
    "parse_bool",
    "get_settings",
]

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class Settings(BaseModel):
    """Runtime configuration read from the environment."""

    resource_root: Path = Path("fixtures")
    preload: bool = True
    app_version: str = "0.1.0"


def parse_bool(name: str, raw: str) -> bool:
    val = raw.strip().lower()
    if val in _TRUE:
        return True
    if val in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


def get_settings() -> Settings:
    """Build settings from RESOURCE_ROOT, RESOURCE_PRELOAD and APP_VERSION.

    LOG_LEVEL is read by the logging setup itself.
    """
    return Settings(
        resource_root=Path(os.getenv("RESOURCE_ROOT", "fixtures")),
        preload=parse_bool("RESOURCE_PRELOAD", os.getenv("RESOURCE_PRELOAD", "true")),
        app_version=os.getenv("APP_VERSION", "0.1.0"),
    )
