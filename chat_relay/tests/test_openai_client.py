import asyncio
import gzip

import httpx
import pytest

from chat_relay.api.relay import stream_response
from chat_relay.domain.exceptions import ApiError, ConfigurationError, NetworkError, UpstreamTimeoutError
from chat_relay.domain.models import OutboundRequest
from chat_relay.providers.openai_client import OpenAIClient


class SettingsStub:
    openai_api_key = "sk-test-0123456789"
    openai_base_url = "https://llm.local/v1"
    llm_timeout = 1.0


def _req(**kw):
    return OutboundRequest(model="gpt-5", messages=[{"role": "user", "content": "hi"}], **kw)


class Resp:
    def __init__(self, status_code=200, data=None, text=""):
        self.status_code = status_code
        self._data = data
        self.text = text

    def json(self):
        if self._data is None:
            raise ValueError("not json")
        return self._data


class StreamResp(Resp):
    def __init__(self, chunks, status_code=200, data=None, text=""):
        super().__init__(status_code, data, text)
        self._chunks = list(chunks)
        self.closed = False
        self.read = False

    async def aiter_bytes(self):
        for c in self._chunks:
            yield c

    async def aread(self):
        self.read = True
        return self.text.encode()

    async def aclose(self):
        self.closed = True


def make_client(captured, resp=None, exc=None):
    class Client:
        def __init__(self, *a, **kw):
            captured["timeout"] = kw.get("timeout")
            captured["closed"] = False

        async def __aenter__(self):
            return self

        async def __aexit__(self, *a):
            return False

        async def post(self, url, json=None, headers=None, **_):
            captured["url"] = url
            captured["payload"] = json
            captured["headers"] = headers
            if exc is not None:
                raise exc
            return resp

        def build_request(self, method, url, json=None, headers=None, **_):
            captured["url"] = url
            captured["payload"] = json
            return (method, url)

        async def send(self, request, stream=False):
            captured["stream"] = stream
            if exc is not None:
                raise exc
            return resp

        async def aclose(self):
            captured["closed"] = True

    return Client


def test_chat_returns_upstream_json_verbatim(monkeypatch):
    captured = {}
    upstream = {"id": "chatcmpl-1", "choices": [{"message": {"role": "assistant", "content": "ok"}}]}
    monkeypatch.setattr("httpx.AsyncClient", make_client(captured, resp=Resp(200, upstream)))
    data = asyncio.run(OpenAIClient(SettingsStub()).chat(_req()))
    assert data == upstream
    assert captured["url"] == "https://llm.local/v1/chat/completions"
    assert captured["headers"]["Authorization"] == "Bearer sk-test-0123456789"
    assert captured["timeout"] == 1.0
    assert "tools" not in captured["payload"]


def test_chat_upstream_error_carries_body_and_status(monkeypatch):
    body = {"error": {"message": "Invalid model", "type": "invalid_request_error"}}
    monkeypatch.setattr("httpx.AsyncClient", make_client({}, resp=Resp(400, body, text="Invalid model")))
    with pytest.raises(ApiError) as exc:
        asyncio.run(OpenAIClient(SettingsStub()).chat(_req()))
    assert exc.value.http_status == 400
    assert exc.value.body == body


def test_chat_upstream_non_json_error_is_wrapped(monkeypatch):
    monkeypatch.setattr("httpx.AsyncClient", make_client({}, resp=Resp(502, None, text="Bad Gateway")))
    with pytest.raises(ApiError) as exc:
        asyncio.run(OpenAIClient(SettingsStub()).chat(_req()))
    assert exc.value.http_status == 502
    assert exc.value.body == {"error": "Bad Gateway"}


def test_chat_missing_api_key_never_calls_upstream(monkeypatch):
    captured = {}
    monkeypatch.setattr("httpx.AsyncClient", make_client(captured, resp=Resp(200, {})))

    class NoKey(SettingsStub):
        openai_api_key = None

    with pytest.raises(ConfigurationError) as exc:
        asyncio.run(OpenAIClient(NoKey()).chat(_req()))
    assert exc.value.http_status == 500
    assert captured == {}


def test_chat_network_and_timeout_errors(monkeypatch):
    monkeypatch.setattr("httpx.AsyncClient", make_client({}, exc=httpx.ConnectError("refused")))
    with pytest.raises(NetworkError):
        asyncio.run(OpenAIClient(SettingsStub()).chat(_req()))

    monkeypatch.setattr("httpx.AsyncClient", make_client({}, exc=httpx.ReadTimeout("slow")))
    with pytest.raises(UpstreamTimeoutError) as exc:
        asyncio.run(OpenAIClient(SettingsStub()).chat(_req()))
    assert exc.value.http_status == 504


def test_chat_stream_yields_raw_chunks_and_closes(monkeypatch):
    captured = {}
    chunks = [b'data: {"choices": [{"delta": {"content": "hel"}}]}\n\n', b"data: [DONE]\n\n"]
    resp = StreamResp(chunks)
    monkeypatch.setattr("httpx.AsyncClient", make_client(captured, resp=resp))

    async def scenario():
        stream = await OpenAIClient(SettingsStub()).chat_stream(_req(stream=True))
        got = [c async for c in stream.aiter_bytes()]
        await stream.aclose()
        await stream.aclose()
        return got

    assert asyncio.run(scenario()) == chunks
    assert captured["stream"] is True
    assert captured["payload"]["stream"] is True
    assert resp.closed
    assert captured["closed"]


def test_chat_stream_error_status_raises_before_streaming(monkeypatch):
    captured = {}
    resp = StreamResp([], status_code=401, data={"error": {"message": "bad key"}}, text="bad key")
    monkeypatch.setattr("httpx.AsyncClient", make_client(captured, resp=resp))
    with pytest.raises(ApiError) as exc:
        asyncio.run(OpenAIClient(SettingsStub()).chat_stream(_req(stream=True)))
    assert exc.value.http_status == 401
    assert exc.value.body == {"error": {"message": "bad key"}}
    assert resp.read and resp.closed
    assert captured["closed"]


_RealAsyncClient = httpx.AsyncClient


def test_chat_stream_relays_decoded_gzip_body(monkeypatch):
    sse = b'data: {"choices": [{"delta": {"content": "hi"}}]}\n\ndata: [DONE]\n\n'
    compressed = gzip.compress(sse)

    class GzipBody(httpx.AsyncByteStream):
        async def __aiter__(self):
            yield compressed[:12]
            yield compressed[12:]

    def handler(request):
        return httpx.Response(
            200,
            headers={"content-encoding": "gzip", "content-type": "text/event-stream"},
            stream=GzipBody(),
        )

    def client_factory(*a, **kw):
        kw["transport"] = httpx.MockTransport(handler)
        return _RealAsyncClient(*a, **kw)

    monkeypatch.setattr("httpx.AsyncClient", client_factory)

    async def scenario():
        upstream = await OpenAIClient(SettingsStub()).chat_stream(_req(stream=True))
        resp = stream_response(upstream)
        body = b"".join([c async for c in resp.body_iterator])
        return upstream, resp, body

    upstream, resp, body = asyncio.run(scenario())
    assert body == sse
    assert "content-encoding" not in resp.headers
    assert upstream.closed
