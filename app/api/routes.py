from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.concurrency import run_in_threadpool

from ..domain.media import InvalidMediaTypeError
from ..domain.paths import InvalidResourcePathError
from ..domain.resource import ResourceNotFoundError, ResourceReadError
from ..domain.store import Store
from ..logging_conf import get_logger
from ..service import resource_service
from .models import ErrorDetail, ResourceInfo, ResourceListResponse

router = APIRouter()
logger = get_logger("api")


def _etag_matches(if_none_match: str | None, etag: str) -> bool:
    """Weak comparison as If-None-Match requires; "*" matches any current resource."""
    if not if_none_match:
        return False
    for tag in if_none_match.split(","):
        tag = tag.strip()
        if tag == "*" or tag.removeprefix("W/") == etag:
            return True
    return False


def get_store(request: Request) -> Store:
    """Return the store attached to the app at startup."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "error_code": "store_unavailable",
                "error_message": "resource store not loaded",
            },
        )
    return store


@router.get(
    "/_resources",
    response_model=ResourceListResponse,
    summary="List stored resources (metadata only)",
)
async def list_resources(store: Store = Depends(get_store)) -> ResourceListResponse:
    """Return path, classification, media type and size for every resource."""
    items = resource_service.list_resources(store)
    return ResourceListResponse(items=[ResourceInfo(**it) for it in items])


@router.get(
    "/{resource_path:path}",
    summary="Fetch a resource's exact bytes",
    response_class=Response,
    responses={
        200: {"content": {"application/octet-stream": {}}},
        304: {"description": "If-None-Match matched the current ETag"},
        400: {"model": ErrorDetail},
        404: {"description": "No resource under this path (empty body)"},
        500: {"model": ErrorDetail},
    },
)
async def get_resource(
    resource_path: str,
    request: Request,
    content_type: str | None = Query(
        None, description="Override the response Content-Type, e.g. application/octet-stream"
    ),
    store: Store = Depends(get_store),
) -> Response:
    """Return the stored payload byte-for-byte.

    - Content-Type comes from the resource's classification unless the
      `content_type` query option or a single concrete Accept type overrides it
    - The body is never decoded, re-encoded or placeholder-substituted
    """
    try:
        served = await run_in_threadpool(
            resource_service.serve_resource,
            store,
            resource_path,
            content_type=content_type,
            accept=request.headers.get("accept"),
        )
    except (InvalidResourcePathError, InvalidMediaTypeError) as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error_code": e.code, "error_message": str(e)},
        )
    except ResourceNotFoundError:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    except ResourceReadError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error_code": e.code, "error_message": f"cannot read resource {e.path}"},
        )

    headers = {"ETag": served.etag, "X-Resource-Classification": served.classification.value}
    if _etag_matches(request.headers.get("if-none-match"), served.etag):
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)
    # Set verbatim; media_type= would let Starlette append a charset to text/* overrides.
    headers["Content-Type"] = served.content_type
    return Response(content=served.body, headers=headers)
