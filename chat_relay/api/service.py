"""对外 API 服务模块。

ChatRelayService 串起一次请求的完整管线：

    鉴权 -> 工具格式化 / 请求组装 -> 调用 LLM -> 转发响应

服务本身不保存任何跨请求的可变状态；只持有启动时加载的配置与 system prompt。
"""

from typing import Optional

from fastapi.responses import JSONResponse, Response

from chat_relay.api.relay import stream_response
from chat_relay.api.schemas import ChatCompletionBody
from chat_relay.auth.gate import AuthGate
from chat_relay.config.settings import settings
from chat_relay.pipeline.composer import compose_request
from chat_relay.prompts import load_system_prompt
from chat_relay.providers import create_provider
from chat_relay.providers.base import ProviderClient


class ChatRelayService:
    """聊天补全中继服务。

    Args:
        cfg: 配置对象，默认使用全局 settings。
        auth_gate: 鉴权闸门，默认按配置创建 AuthGate。
        provider: LLM Provider，默认 OpenAIClient。
        system_prompt: system prompt 文本，默认从配置/内置文件加载。
    """

    def __init__(
        self,
        cfg=settings,
        auth_gate: Optional[AuthGate] = None,
        provider: Optional[ProviderClient] = None,
        system_prompt: Optional[str] = None,
    ):
        self._settings = cfg
        self.auth_gate = auth_gate or AuthGate(cfg)
        self.provider = provider or create_provider(cfg)
        if system_prompt is None:
            system_prompt = load_system_prompt(getattr(cfg, "system_prompt_path", None))
        self.system_prompt = system_prompt

    async def handle(self, body: ChatCompletionBody, authorization: Optional[str]) -> Response:
        """处理一次 chat completions 请求。

        鉴权在任何 LLM 调用之前完成；非流式返回上游 JSON 原样，
        流式返回 text/event-stream 透传。

        Raises:
            各种 domain.exceptions 中定义的异常
        """

        await self.auth_gate.authorize(authorization)

        req = compose_request(
            body.messages,
            body.tools,
            system_prompt=self.system_prompt,
            default_model=self._settings.default_model,
            model=body.model,
            stream=bool(body.stream),
            include_system_prompt=bool(body.include_system_prompt),
        )

        if not req.stream:
            data = await self.provider.chat(req)
            return JSONResponse(data)

        upstream = await self.provider.chat_stream(req)
        return stream_response(upstream)
