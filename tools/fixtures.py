#!/usr/bin/env python3
"""Write the deterministic fixture tree served by the app and checked by the runner.

The text fixture holds non-ASCII UTF-8; the binary fixtures hold byte
sequences that are invalid UTF-8, so any decode/re-encode on the way out
changes them.
"""
from __future__ import annotations

import base64
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
FX = ROOT / "fixtures"

# Deterministic 1x1 PNG (transparent) via base64, to avoid external deps
_PNG_1x1 = base64.b64decode(
    b"iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8/x8AAwMCAO6wZSYAAAAASUVORK5CYII="
)

# SOI + JFIF APP0 header, every byte value once, EOI. Not a decodable image,
# but framed like one and guaranteed to fail strict UTF-8 decoding.
_JPEG_FRAMED = (
    b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
    + bytes(range(256))
    + b"\xff\xd9"
)

_TEXT_UTF8 = "Zażółć gęślą jaźń\nПривет, мир\n日本語のテキスト\n€ ✓\n".encode()

_CONTENT = {
    "txt": _TEXT_UTF8,
    "jpg": _JPEG_FRAMED,
    "png": _PNG_1x1,
    "yml": b"server:\n  port: 8888\ngreeting: \"${GREETING:hello}\"\n",
    "properties": b"app.name=demo\napp.motd=caf\xc3\xa9 ${user}\n",
    "json": b"{\n  \"ok\": true\n}\n",
    "bin": bytes([0x00, 0x80, 0xFE, 0xFF, 0xC3, 0x28, 0x0D, 0x0A, 0x0A]),
}

# (relative path, bytes)
FILES = [
    ("foo/bar/text.txt", _CONTENT["txt"]),
    ("foo/bar/rm.jpg", _CONTENT["jpg"]),
    ("foo/bar/pixel.png", _CONTENT["png"]),
    ("foo/application.yml", _CONTENT["yml"]),
    ("foo/app.properties", _CONTENT["properties"]),
    ("config.json", _CONTENT["json"]),
    ("blobs/crlf-and-nul.bin", _CONTENT["bin"]),
]


def write_fixtures(target: Path = FX) -> list[Path]:
    """Write FILES under `target` and return the written paths."""
    written: list[Path] = []
    for rel, data in FILES:
        path = target / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        written.append(path)
    return written


def main() -> None:
    written = write_fixtures(FX)
    print("Created fixtures:")
    for p in written:
        print(" -", p.relative_to(ROOT))
    if len(written) != len(FILES):
        raise SystemExit(f"Expected {len(FILES)} fixtures, found {len(written)}")


if __name__ == "__main__":
    main()
