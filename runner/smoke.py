#!/usr/bin/env python3
"""Smoke runner checking that a live server returns fixture bytes unchanged.

Steps:
- wait for server health
- collect the local fixture tree
- GET every fixture `repeat` times concurrently
- emit a compact summary and exit code (0 only if every response matched)
"""
from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import httpx

from app.logging_conf import get_logger, setup_logging
from runner.cli import parse_args
from runner.client import fetch_all, wait_for_health
from runner.utils import collect_fixtures, summarize

setup_logging()
logger = get_logger("runner")


async def run_smoke(
    *,
    base_url: str,
    fixtures_dir: Path,
    repeat: int = 2,
    accept: str | None = None,
    timeout_s: float = 20.0,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    served = await wait_for_health(base_url, timeout_s, transport=transport)
    fixtures = collect_fixtures(fixtures_dir)
    if served != len(fixtures):
        logger.warning(
            "runner.count_mismatch",
            extra={"event": "count_mismatch", "served": served, "local": len(fixtures)},
        )
    fetched = await fetch_all(
        base_url, fixtures, repeat=repeat, accept=accept, transport=transport
    )
    summary, exit_code = summarize(fetched)
    logger.info("runner.summary", extra=summary)
    return exit_code


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv if argv is not None else sys.argv[1:])
    code = asyncio.run(
        run_smoke(
            base_url=args.base_url,
            fixtures_dir=Path(args.fixtures),
            repeat=args.repeat,
            accept=args.accept,
            timeout_s=args.timeout,
        )
    )
    raise SystemExit(code)


if __name__ == "__main__":
    main()
