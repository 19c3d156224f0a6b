from __future__ import annotations

import os
from collections.abc import Iterator, Mapping
from pathlib import Path
from types import MappingProxyType

from ..logging_conf import get_logger
from .paths import InvalidResourcePathError, normalize_resource_path
from .resource import Resource, ResourceNotFoundError

__all__ = [
    "StoreLoadError",
    "Store",
]

logger = get_logger("domain.store")


class StoreLoadError(RuntimeError):
    code: str = "store_load_failed"


class Store(Mapping[str, Resource]):
    """Read-only mapping of normalized path -> Resource.

    The backing dict is built once and only exposed through a mapping proxy,
    so concurrent readers need no locking.
    """

    def __init__(self, resources: Mapping[str, Resource] | None = None) -> None:
        self._resources: Mapping[str, Resource] = MappingProxyType(dict(resources or {}))

    # Mapping protocol
    def __getitem__(self, path: str) -> Resource:
        return self._resources[path]

    def __iter__(self) -> Iterator[str]:
        return iter(self._resources)

    def __len__(self) -> int:
        return len(self._resources)

    def __repr__(self) -> str:
        return f"Store({len(self)} resources)"

    def lookup(self, path: str) -> Resource:
        """Return the resource stored under an already-normalized path."""
        try:
            return self._resources[path]
        except KeyError:
            raise ResourceNotFoundError(path) from None

    # ------------------------
    # Population
    # ------------------------

    @classmethod
    def from_mapping(cls, items: Mapping[str, bytes]) -> Store:
        """Build a store from in-memory path -> bytes pairs.

        Raises InvalidResourcePathError for unusable keys and ValueError when
        two keys normalize to the same path.
        """
        resources: dict[str, Resource] = {}
        for path, data in items.items():
            res = Resource.from_bytes(path, data)
            if res.path in resources:
                raise ValueError(f"duplicate resource path after normalization: {res.path}")
            resources[res.path] = res
        return cls(resources)

    @classmethod
    def from_directory(cls, root: str | os.PathLike[str], *, preload: bool = True) -> Store:
        """Load every regular file under `root`.

        - Keys are POSIX paths relative to `root`
        - Hidden entries, symlinks leaving `root`, invalid or non-UTF-8 names
          and unreadable files are skipped with a warning
        - `preload=False` keeps only metadata; bytes are read per request
        """
        base = Path(root)
        if not base.is_dir():
            raise StoreLoadError(f"resource root is not a directory: {base}")
        base = base.resolve()

        resources: dict[str, Resource] = {}
        for dirpath, dirnames, filenames in os.walk(base, followlinks=False):
            dirnames[:] = sorted(d for d in dirnames if not d.startswith("."))
            for name in sorted(filenames):
                if name.startswith("."):
                    continue
                file_path = Path(dirpath) / name
                rel = file_path.relative_to(base).as_posix()
                res = _load_one(base, rel, file_path, preload=preload)
                if res is not None:
                    resources[res.path] = res

        logger.info(
            "store.loaded",
            extra={
                "event": "store_loaded",
                "root": str(base),
                "count": len(resources),
                "preload": preload,
            },
        )
        return cls(resources)


def _skip(rel: str, reason: str) -> None:
    # Undecodable names arrive surrogate-escaped; log them printable.
    shown = rel.encode("utf-8", "backslashreplace").decode("utf-8")
    logger.warning("store.skip", extra={"event": "store_skip", "path": shown, "reason": reason})


def _load_one(base: Path, rel: str, file_path: Path, *, preload: bool) -> Resource | None:
    try:
        rel.encode("utf-8")
    except UnicodeEncodeError:
        _skip(rel, "name is not valid UTF-8")
        return None
    try:
        normalize_resource_path(rel)
    except InvalidResourcePathError as e:
        _skip(rel, str(e))
        return None

    resolved = file_path.resolve()
    if not resolved.is_relative_to(base):
        _skip(rel, "resolves outside resource root")
        return None
    if not resolved.is_file():
        _skip(rel, "not a regular file")
        return None

    try:
        if preload:
            return Resource.from_bytes(rel, resolved.read_bytes())
        return Resource.from_file(rel, resolved)
    except OSError as e:
        _skip(rel, f"unreadable: {e}")
        return None
