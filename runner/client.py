from __future__ import annotations

import asyncio
import time
from pathlib import Path
from urllib.parse import quote

import httpx

from app.logging_conf import get_logger
from runner.types import Fetched, FetchError, SmokeError
from runner.utils import sha256_hex

logger = get_logger("runner.client")


async def wait_for_health(
    base_url: str,
    timeout_s: float = 20.0,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    """Ping /health until it returns ok and return the server's resource count.

    Raises SmokeError when health is not confirmed within `timeout_s`.
    """
    deadline = time.monotonic() + timeout_s
    async with httpx.AsyncClient(base_url=base_url, timeout=5.0, transport=transport) as client:
        while time.monotonic() < deadline:
            try:
                r = await client.get("/health")
                body = r.json() if r.status_code == 200 else {}
                if body.get("ok") is True:
                    logger.info(
                        "health.ok",
                        extra={"event": "health_ok", "resources": body.get("resources")},
                    )
                    return int(body.get("resources", 0))
            except (httpx.HTTPError, ValueError):
                pass
            await asyncio.sleep(0.25)
    raise SmokeError("Health check did not pass within timeout")


async def _get_bytes(
    client: httpx.AsyncClient, url: str, headers: dict[str, str], *, retries: int
) -> httpx.Response:
    last_err: Exception | None = None
    for attempt in range(retries):
        try:
            return await client.get(url, headers=headers)
        except httpx.HTTPError as e:  # pragma: no cover - network flakiness
            last_err = e
            logger.warning(
                "fetch.retry",
                extra={"event": "fetch_retry", "url": url, "attempt": attempt + 1, "error": str(e)},
            )
    raise FetchError(f"GET {url} failed: {last_err}")


async def fetch_one(
    client: httpx.AsyncClient,
    resource_path: str,
    local: Path,
    *,
    repeat: int = 1,
    accept: str | None = None,
    retries: int = 2,
) -> Fetched:
    """GET one resource `repeat` times and record digests of the raw response bytes.

    - Compares against the local file's bytes, never a decoded string
    - Transport errors are retried; HTTP error statuses are recorded, not raised
    """
    expected = local.read_bytes()
    result = Fetched(
        path=resource_path,
        expected_sha256=sha256_hex(expected),
        expected_size=len(expected),
    )
    url = "/" + quote(resource_path, safe="/")
    headers = {"Accept": accept} if accept else {}
    for _ in range(repeat):
        start = time.perf_counter()
        r = await _get_bytes(client, url, headers, retries=retries)
        result.elapsed_ms.append((time.perf_counter() - start) * 1000.0)
        result.status_codes.append(r.status_code)
        result.actual_sha256.append(sha256_hex(r.content))
        result.content_type = r.headers.get("content-type")

    level = "info" if result.matched else "warning"
    getattr(logger, level)(
        "fetch.done",
        extra={
            "event": "fetch_done",
            "resource_path": resource_path,
            "matched": result.matched,
            "status_codes": result.status_codes,
            "size": len(expected),
        },
    )
    return result


async def fetch_all(
    base_url: str,
    fixtures: dict[str, Path],
    *,
    repeat: int = 1,
    accept: str | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[Fetched]:
    """Fetch every fixture concurrently.

    A fixture whose fetch raised is reported as an unmatched result so it is
    never dropped from the summary.
    """
    async with httpx.AsyncClient(base_url=base_url, timeout=30.0, transport=transport) as client:
        tasks = [
            fetch_one(client, rp, local, repeat=repeat, accept=accept)
            for rp, local in fixtures.items()
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

    fetched: list[Fetched] = []
    for (rp, local), res in zip(fixtures.items(), results, strict=True):
        if isinstance(res, Exception):
            logger.error(
                "fetch.failed",
                extra={"event": "fetch_failed", "resource_path": rp, "error": str(res)},
            )
            try:
                data = local.read_bytes()
            except OSError:
                # unreadable fixture: no expectation to record
                fetched.append(Fetched(path=rp, expected_sha256="", expected_size=0))
                continue
            fetched.append(Fetched(path=rp, expected_sha256=sha256_hex(data), expected_size=len(data)))
            continue
        fetched.append(res)
    return fetched
