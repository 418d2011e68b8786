"""OpenAI Provider 适配器。

本模块负责：

1. 接收已组装好的 OutboundRequest。
2. 以服务端持有的 API 密钥调用 {base_url}/chat/completions。
3. 处理网络异常、超时与上游非 2xx 响应。
4. 非流式：返回上游 JSON；流式：返回 OpenAIStream，由 relay 层逐块转发。

这里不解析也不改写上游的响应内容，中继只做透传。
"""

from typing import Any, AsyncIterator, Dict

import httpx

from chat_relay.config.settings import settings
from chat_relay.domain.exceptions import ApiError, ConfigurationError, NetworkError, UpstreamTimeoutError
from chat_relay.domain.models import OutboundRequest
from chat_relay.infrastructure.logging.logger import logger


DEFAULT_BASE_URL = "https://api.openai.com/v1"


class OpenAIStream:
    """包装一条打开中的上游流式响应。

    aclose() 会同时关闭响应与底层 AsyncClient，调用方断开连接时由 relay 层触发。
    """

    def __init__(self, client: httpx.AsyncClient, response: httpx.Response):
        self._client = client
        self._response = response
        self.closed = False

    async def aiter_bytes(self) -> AsyncIterator[bytes]:
        # 按 Content-Encoding 解压后的字节，SSE 事件本身不做重组
        async for chunk in self._response.aiter_bytes():
            yield chunk

    async def aclose(self) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            await self._response.aclose()
        finally:
            await self._client.aclose()


class OpenAIClient:
    """OpenAI chat completions 客户端实现。"""

    name = "openai"

    def __init__(self, cfg=settings):
        # Settings 里包含 base_url、api_key、超时等配置
        self._settings = cfg

    # ---- 非流式 ----

    async def chat(self, req: OutboundRequest) -> Dict[str, Any]:
        self._require_api_key()
        payload = req.to_payload()
        self._log_call(req)
        try:
            async with httpx.AsyncClient(timeout=self._settings.llm_timeout, trust_env=False) as client:
                resp = await client.post(self._url(), json=payload, headers=self._headers())
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError(code="LLM_TIMEOUT", message="LLM request timed out") from e
        except httpx.RequestError as e:
            raise NetworkError(code="NETWORK_ERROR", message=str(e)) from e
        if not 200 <= resp.status_code < 300:
            raise self._api_error(resp)
        return resp.json()

    # ---- 流式 ----

    async def chat_stream(self, req: OutboundRequest) -> OpenAIStream:
        """打开上游流式响应；状态码非 2xx 时先读完错误体再抛出 ApiError。"""

        self._require_api_key()
        payload = req.to_payload()
        self._log_call(req)
        client = httpx.AsyncClient(timeout=self._settings.llm_timeout, trust_env=False)
        try:
            request = client.build_request("POST", self._url(), json=payload, headers=self._headers())
            resp = await client.send(request, stream=True)
        except httpx.TimeoutException as e:
            await client.aclose()
            raise UpstreamTimeoutError(code="LLM_TIMEOUT", message="LLM request timed out") from e
        except httpx.RequestError as e:
            await client.aclose()
            raise NetworkError(code="NETWORK_ERROR", message=str(e)) from e

        if not 200 <= resp.status_code < 300:
            try:
                await resp.aread()
                raise self._api_error(resp)
            finally:
                await resp.aclose()
                await client.aclose()
        return OpenAIStream(client, resp)

    # ---- 辅助方法 ----

    def _require_api_key(self) -> None:
        if not getattr(self._settings, "openai_api_key", None):
            # 配置缺失走 ConfigurationError，请求不会到达上游
            raise ConfigurationError(code="MISSING_API_KEY", message="OpenAI API key not configured")

    def _url(self) -> str:
        base = getattr(self._settings, "openai_base_url", None) or DEFAULT_BASE_URL
        return f"{base}/chat/completions"

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._settings.openai_api_key}",
            "Content-Type": "application/json",
        }

    @staticmethod
    def _api_error(resp: httpx.Response) -> ApiError:
        """把上游错误响应包装为 ApiError，body 尽量保持上游 JSON 原样。"""

        try:
            body = resp.json()
        except ValueError:
            body = {"error": resp.text}
        logger.error(
            "LLM API returned error status",
            extra={"extra": {"status": resp.status_code}},
        )
        return ApiError(
            code="API_ERROR",
            message=resp.text,
            http_status=resp.status_code,
            body=body,
        )

    def _log_call(self, req: OutboundRequest) -> None:
        logger.info(
            "Calling LLM API",
            extra={"extra": {
                "model": req.model,
                "messages": len(req.messages or []),
                "tools": len(req.tools),
                "stream": req.stream,
            }},
        )
