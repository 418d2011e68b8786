"""Provider 抽象接口。

ChatRelayService 不直接依赖具体厂商的 HTTP 调用，而是依赖此协议：

- chat(req): 非流式调用，返回上游响应 JSON（原样，不做转换）。
- chat_stream(req): 流式调用，返回可逐块读取、可取消的 UpstreamStream。

上游返回非 2xx 时两者都抛出 ApiError，其 body 为上游错误体。
"""

from typing import Any, AsyncIterator, Dict, Protocol

from chat_relay.domain.models import OutboundRequest


class UpstreamStream(Protocol):
    """一条进行中的上游字节流。"""

    def aiter_bytes(self) -> AsyncIterator[bytes]:
        ...

    async def aclose(self) -> None:
        """终止上游连接，可重复调用。"""

        ...


class ProviderClient(Protocol):
    """LLM Provider 客户端协议。"""

    name: str

    async def chat(self, req: OutboundRequest) -> Dict[str, Any]:
        ...

    async def chat_stream(self, req: OutboundRequest) -> UpstreamStream:
        ...
