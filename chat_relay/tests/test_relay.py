import asyncio

from chat_relay.api.relay import relay_stream, stream_response


class FakeUpstream:
    def __init__(self, chunks):
        self._chunks = list(chunks)
        self.close_calls = 0

    async def aiter_bytes(self):
        for c in self._chunks:
            yield c

    async def aclose(self):
        self.close_calls += 1


def test_relay_forwards_chunks_unmodified():
    chunks = [b"data: {\"a\": 1}\n\n", b"data: {\"b\"", b": 2}\n\n", b"data: [DONE]\n\n"]
    upstream = FakeUpstream(chunks)

    async def scenario():
        return [c async for c in relay_stream(upstream)]

    assert asyncio.run(scenario()) == chunks
    assert upstream.close_calls == 1


def test_client_disconnect_cancels_upstream():
    upstream = FakeUpstream([b"data: 1\n\n", b"data: 2\n\n", b"data: 3\n\n"])

    async def scenario():
        gen = relay_stream(upstream)
        first = await gen.__anext__()
        # caller goes away mid-stream
        await gen.aclose()
        return first

    assert asyncio.run(scenario()) == b"data: 1\n\n"
    assert upstream.close_calls == 1


def test_stream_response_headers():
    resp = stream_response(FakeUpstream([]))
    assert resp.media_type == "text/event-stream"
    assert resp.headers["cache-control"] == "no-cache"
    assert resp.headers["connection"] == "keep-alive"
