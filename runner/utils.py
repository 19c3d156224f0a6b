from __future__ import annotations

import hashlib
from pathlib import Path

from app.domain.paths import extension
from runner.types import Fetched, FixtureError


def percentile(values: list[float], p: float) -> float:
    """Compute the p-th percentile using linear interpolation."""
    if not values:
        return 0.0
    s = sorted(values)
    k = (len(s) - 1) * p
    f = int(k)
    c = min(f + 1, len(s) - 1)
    if f == c:
        return s[f]
    d0 = s[f] * (c - k)
    d1 = s[c] * (k - f)
    return d0 + d1


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def collect_fixtures(fixtures_dir: Path) -> dict[str, Path]:
    """Map resource path (POSIX, relative to the tree) -> local file.

    Hidden entries are skipped, mirroring what the server loads.
    """
    if not fixtures_dir.is_dir():
        raise FixtureError(f"fixtures directory not found: {fixtures_dir}")
    out: dict[str, Path] = {}
    for p in sorted(fixtures_dir.rglob("*")):
        rel = p.relative_to(fixtures_dir)
        if not p.is_file() or any(part.startswith(".") for part in rel.parts):
            continue
        out[rel.as_posix()] = p
    if not out:
        raise FixtureError(f"no fixture files under {fixtures_dir}")
    return out


def summarize(fetched: list[Fetched]) -> tuple[dict, int]:
    """Compute a summary dict and an exit code from fetch results."""
    durations_ms: list[float] = []
    per_ext: dict[str, dict[str, int]] = {}
    failures_detail: list[dict] = []
    matched = 0

    for f in fetched:
        ext = extension(f.path) or "(none)"
        per_ext.setdefault(ext, {"matched": 0, "mismatched": 0})
        durations_ms.extend(f.elapsed_ms)
        if f.matched:
            matched += 1
            per_ext[ext]["matched"] += 1
            continue
        per_ext[ext]["mismatched"] += 1
        failures_detail.append(
            {
                "path": f.path,
                "status_codes": f.status_codes,
                "expected_sha256": f.expected_sha256,
                "actual_sha256": sorted(set(f.actual_sha256)),
                "content_type": f.content_type,
            }
        )

    summary = {
        "component": "runner",
        "event": "summary",
        "fetched": len(fetched),
        "matched_count": matched,
        "mismatched_count": len(fetched) - matched,
        "timings": {
            "avg_ms": round(sum(durations_ms) / len(durations_ms), 2) if durations_ms else 0.0,
            "p95_ms": round(percentile(durations_ms, 0.95), 2),
            "max_ms": round(max(durations_ms), 2) if durations_ms else 0.0,
        },
        "per_extension": per_ext,
        "failures": failures_detail,
    }
    exit_code = 0 if (fetched and matched == len(fetched)) else 1
    return summary, exit_code
