"""Offline cache endpoints and the intercepted asset route."""

import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from fastapi import Request as HttpRequest
from fastapi import Response as HttpResponse
from starlette.background import BackgroundTask

from todo_list.api.models import ControlMessage, UpdateCacheRequest
from todo_list.errors import NetworkFailureError
from todo_list.factory import create_cache_controller, get_cache_storage, get_fetcher, get_registry
from todo_list.offline.messages import Request

logger = logging.getLogger(__name__)

router = APIRouter()

# Hop-by-hop and client-specific headers are not forwarded upstream
_FORWARDED_HEADERS = {"accept", "accept-language", "content-type", "if-none-match"}


@router.get("/offline/status")
async def offline_status() -> dict[str, Any]:
    """Controller states and cache bucket names."""
    status = get_registry().status()
    status["caches"] = get_cache_storage().keys()
    return status


@router.post("/offline/message")
async def post_message(message: ControlMessage) -> dict[str, Any]:
    """Forward a control message (SKIP_WAITING) to the controllers."""
    registry = get_registry()
    await registry.post_message(message.model_dump())
    return registry.status()


@router.post("/offline/update")
async def update_cache(request: UpdateCacheRequest) -> dict[str, Any]:
    """Install a controller for a new cache version.

    Returns:
        Registry status after install (the new version may be active or waiting)
    """
    registry = get_registry()
    state = await registry.register(create_cache_controller(request.version))
    logger.info(f"Cache version {request.version} -> {state.value}")
    status = registry.status()
    status["caches"] = get_cache_storage().keys()
    return status


async def serve_asset(request: HttpRequest, path: str) -> HttpResponse:
    """Answer an application asset request through the active cache controller.

    Requests the controller does not handle (non-GET) go straight to the network.
    """
    url = request.url.path
    if request.url.query:
        url += "?" + request.url.query
    headers = {k: v for k, v in request.headers.items() if k.lower() in _FORWARDED_HEADERS}
    body = await request.body()
    asset_request = Request(url=url, method=request.method, headers=headers, body=body)

    registry = get_registry()
    if registry.active is None:
        raise HTTPException(status_code=503, detail="Offline cache is not active")

    response, event = await registry.dispatch(asset_request)
    if response is None:
        try:
            response = await get_fetcher().fetch(asset_request)
        except NetworkFailureError as e:
            raise HTTPException(status_code=502, detail=str(e)) from e

    return HttpResponse(
        content=response.read(),
        status_code=response.status,
        headers=response.headers,
        background=BackgroundTask(event.settled),
    )
