"""Response relay: hand the upstream answer back to the caller.

Streaming responses are forwarded chunk by chunk once httpx has undone any
content encoding. No buffering, no reframing of SSE events. When the
caller goes away the upstream stream is closed so the LLM connection does
not linger.
"""

import asyncio
from typing import AsyncIterator

import httpx
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from chat_relay.infrastructure.logging.logger import logger
from chat_relay.providers.base import UpstreamStream


SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


async def relay_stream(upstream: UpstreamStream) -> AsyncIterator[bytes]:
    """Yield upstream chunks as they arrive, closing upstream on exit."""

    try:
        async for chunk in upstream.aiter_bytes():
            yield chunk
    except (GeneratorExit, asyncio.CancelledError):
        logger.info("Client disconnected, cancelling upstream stream")
        raise
    except httpx.HTTPError as e:
        logger.error("Upstream stream failed", extra={"extra": {"error": str(e)}})
        raise
    finally:
        # shielded so a cancelled request scope still closes the connection
        await asyncio.shield(upstream.aclose())


def stream_response(upstream: UpstreamStream) -> StreamingResponse:
    return StreamingResponse(
        relay_stream(upstream),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
        # covers a disconnect before the first chunk was pulled
        background=BackgroundTask(upstream.aclose),
    )
