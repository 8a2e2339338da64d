"""Server-Sent Events stream of price, NAV and reload events."""

import json
import logging
from typing import AsyncIterator, Awaitable, Callable

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from portfolio_helper.api.deps import get_app_context
from portfolio_helper.app_context import AppContext
from portfolio_helper.domain.events import UpdateEvent, event_payload
from portfolio_helper.services import UpdateBroadcaster

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["stream"])

KEEPALIVE_FRAME = ":keepalive\n\n"


def format_sse(event: UpdateEvent) -> str:
    return f"data: {json.dumps(event_payload(event))}\n\n"


async def sse_frames(
    broadcaster: UpdateBroadcaster,
    keepalive_seconds: float,
    is_disconnected: Callable[[], Awaitable[bool]],
) -> AsyncIterator[str]:
    """
    Yield SSE frames for one subscriber until it disconnects.

    The subscription is opened on the first frame, so a response that is
    never iterated holds none. A keepalive comment goes out first and after
    every idle ``keepalive_seconds``. The subscription is always closed on
    exit.
    """
    subscription = broadcaster.subscribe()
    try:
        yield KEEPALIVE_FRAME
        while not subscription.closed:
            if await is_disconnected():
                break
            event = await subscription.next_event(timeout=keepalive_seconds)
            if event is None:
                if subscription.closed:
                    break
                yield KEEPALIVE_FRAME
                continue
            yield format_sse(event)
    finally:
        subscription.close()
        logger.debug("Stream client disconnected")


@router.get("/prices/stream")
async def stream_prices(
    request: Request,
    context: AppContext = Depends(get_app_context),
) -> StreamingResponse:
    frames = sse_frames(context.broadcaster, context.settings.stream_keepalive_seconds, request.is_disconnected)
    return StreamingResponse(
        frames,
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
