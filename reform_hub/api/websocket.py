"""WebSocket endpoint for live, abort-on-supersede search.

Every message the client sends is a new search request.  Each connection
owns one :class:`SearchSession`, so a new request cancels whatever search
that connection still has running, and only the latest result is pushed
back.  Superseded requests produce no message at all.

# ─── MESSAGE FORMAT ───────────────────────────────────────────────────
#
#   client -> server
#     {"request_id": "7", "query": "bail", "filters": {"themes": ["Courts"]},
#      "limit": 20}
#
#   server -> client
#     {"request_id": "7", "resources": [...], "facets": {...}}
#     {"request_id": "7", "error": "..."}          (malformed request)
#     {"request_id": null, "error": "..."}         (frame is not JSON)
#
# Tags and themes in ``facets`` are re-ranked per result; ``types`` are
# captured from the first result of the connection and then frozen.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

import asyncio
import contextlib
import json
from typing import Any

import structlog
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from reform_hub.api.schemas import SearchSocketRequest, SearchSocketResponse
from reform_hub.services.search_service import SearchService
from reform_hub.services.search_session import SearchSession
from reform_hub.utils.errors import ReformHubError
from reform_hub.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def _log_task_failure(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        _logger.error("websocket_task_failed", error=str(exc), error_type=type(exc).__name__)


async def _handle_request(
    websocket: WebSocket,
    session: SearchSession,
    request: SearchSocketRequest,
) -> None:
    try:
        outcome = await session.submit(
            request.request_id, request.query, request.filters, request.limit
        )
    except ReformHubError as exc:
        _logger.error("websocket_search_failed", request_id=request.request_id, error=str(exc))
        with contextlib.suppress(WebSocketDisconnect, RuntimeError):
            await websocket.send_json({"request_id": request.request_id, "error": exc.message})
        return
    if outcome is None:
        return
    message = SearchSocketResponse(
        request_id=outcome.request_id,
        resources=outcome.resources,
        facets=outcome.facets,
    )
    # The client may have gone away while the search ran.
    with contextlib.suppress(WebSocketDisconnect, RuntimeError):
        await websocket.send_json(message.model_dump(mode="json", by_alias=True))


async def websocket_search(websocket: WebSocket) -> None:
    """Serve search requests for one client until it disconnects."""
    service: SearchService = websocket.app.state.search_service
    session = SearchSession(service)
    tasks: set[asyncio.Task[None]] = set()

    await websocket.accept()
    _logger.info("websocket_connected")

    try:
        while True:
            frame = await websocket.receive_text()
            try:
                payload: Any = json.loads(frame)
            except ValueError:
                await websocket.send_json(
                    {"request_id": None, "error": "Message is not valid JSON"}
                )
                continue
            try:
                request = SearchSocketRequest.model_validate(payload)
            except ValidationError as exc:
                request_id = payload.get("request_id") if isinstance(payload, dict) else None
                await websocket.send_json({"request_id": request_id, "error": str(exc)})
                continue

            task = asyncio.create_task(_handle_request(websocket, session, request))
            tasks.add(task)
            task.add_done_callback(tasks.discard)
            task.add_done_callback(_log_task_failure)

    except WebSocketDisconnect:
        _logger.info("websocket_disconnected")

    finally:
        session.cancel()
        for task in tasks:
            task.cancel()
        _logger.debug("websocket_search_cleaned_up", pending=len(tasks))
