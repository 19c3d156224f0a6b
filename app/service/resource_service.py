from __future__ import annotations

from dataclasses import dataclass

from ..domain.media import Classification, accept_override, parse_media_type
from ..domain.paths import normalize_resource_path
from ..domain.resource import ResourceReadError, etag_for
from ..domain.store import Store
from ..logging_conf import get_logger

logger = get_logger("service.resources")


@dataclass(frozen=True)
class ServedResource:
    """Everything the HTTP layer needs to answer a GET for one resource."""

    path: str
    body: bytes
    content_type: str
    classification: Classification
    etag: str


# ------------------------
# Use-cases
# ------------------------

def resolve_content_type(
    default: str, *, content_type: str | None = None, accept: str | None = None
) -> str:
    """Pick the Content-Type: explicit query option, then a concrete Accept, then default.

    Raises InvalidMediaTypeError if `content_type` is given but malformed.
    """
    if content_type is not None:
        return parse_media_type(content_type)
    return accept_override(accept) or default


def serve_resource(
    store: Store,
    raw_path: str,
    *,
    content_type: str | None = None,
    accept: str | None = None,
) -> ServedResource:
    """Look up `raw_path` and return its exact stored bytes.

    Raises:
        InvalidResourcePathError: malformed path (traversal, control chars).
        InvalidMediaTypeError: malformed `content_type` override.
        ResourceNotFoundError: nothing stored under the path.
        ResourceReadError: the backing payload could not be read in full.
    """
    rp = normalize_resource_path(raw_path)
    resource = store.lookup(rp)
    ctype = resolve_content_type(resource.content_type, content_type=content_type, accept=accept)

    try:
        body = resource.read()
    except ResourceReadError as e:
        logger.error(
            "resource.read_failed",
            exc_info=True,
            extra={"event": "resource_read_failed", "resource_path": rp, "error": str(e)},
        )
        raise

    logger.info(
        "resource.served",
        extra={
            "event": "resource_served",
            "resource_path": rp,
            "classification": resource.classification.value,
            "size": len(body),
            "content_type": ctype,
        },
    )
    return ServedResource(
        path=rp,
        body=body,
        content_type=ctype,
        classification=resource.classification,
        etag=etag_for(body),
    )


def list_resources(store: Store) -> list[dict]:
    """Return metadata for every stored resource, sorted by path."""
    return [
        {
            "path": res.path,
            "classification": res.classification,
            "media_type": res.media_type,
            "size": res.size,
        }
        for res in sorted(store.values(), key=lambda r: r.path)
    ]
