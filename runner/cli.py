from __future__ import annotations

import argparse
import os
from pathlib import Path


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse CLI arguments for the smoke runner."""
    parser = argparse.ArgumentParser(description="Byte-exact resource smoke runner")
    parser.add_argument("--base-url", default=os.getenv("BASE_URL", "http://127.0.0.1:8000"))
    parser.add_argument("--fixtures", default=str(Path(__file__).resolve().parents[1] / "fixtures"))
    parser.add_argument("--timeout", type=float, default=20.0, help="seconds to wait for /health")
    parser.add_argument(
        "--repeat", type=int, default=2, help="GETs per fixture; every response must match"
    )
    parser.add_argument(
        "--accept",
        default=None,
        help="Accept header to send, e.g. application/octet-stream",
    )
    args = parser.parse_args(argv)
    if args.repeat < 1:
        parser.error("--repeat must be >= 1")
    return args
