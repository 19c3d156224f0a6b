from pathlib import Path

import pytest

from app.config import get_settings, parse_bool


def test_defaults(monkeypatch):
    for name in ("RESOURCE_ROOT", "RESOURCE_PRELOAD", "APP_VERSION"):
        monkeypatch.delenv(name, raising=False)
    s = get_settings()
    assert s.resource_root == Path("fixtures")
    assert s.preload is True
    assert s.app_version == "0.1.0"


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("RESOURCE_ROOT", str(tmp_path))
    monkeypatch.setenv("RESOURCE_PRELOAD", "off")
    monkeypatch.setenv("APP_VERSION", "9.9.9")
    s = get_settings()
    assert s.resource_root == tmp_path
    assert s.preload is False
    assert s.app_version == "9.9.9"


@pytest.mark.parametrize("raw, val", [("1", True), ("YES", True), (" false ", False), ("0", False)])
def test_parse_bool(raw, val):
    assert parse_bool("X", raw) is val


def test_parse_bool_rejects_garbage(monkeypatch):
    monkeypatch.setenv("RESOURCE_PRELOAD", "sometimes")
    with pytest.raises(ValueError, match="RESOURCE_PRELOAD"):
        get_settings()
