"""请求级数据模型。

本模块定义了中继管线内部共享的数据结构：

- ChatMessage: 调用方传入的单条消息，按原样透传（dict）。
- FormattedTool: 转换为 LLM function-calling 格式后的工具描述。
- AuthResult: 鉴权服务的校验结果，每个请求重新获取，不缓存。
- OutboundRequest: 发往 LLM 上游的完整请求体。

所有对象只在单个请求内存在，响应发送后即丢弃。
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional


# 调用方消息按原样透传，额外字段（tool_calls、tool_call_id 等）不做改动
ChatMessage = Dict[str, Any]

# 已规范化的工具描述：{"type": "function", "function": {...}}
FormattedTool = Dict[str, Any]

# 固定的补全 token 上限，调用方不可配置
MAX_COMPLETION_TOKENS = 4000


@dataclass
class AuthResult:
    """鉴权服务返回的校验结果。"""

    is_valid: bool
    is_free_trial: bool

    @classmethod
    def from_payload(cls, data: Any) -> "AuthResult":
        if not isinstance(data, dict):
            return cls(is_valid=False, is_free_trial=False)
        return cls(
            is_valid=bool(data.get("isValid")),
            is_free_trial=bool(data.get("isFreeTrial")),
        )


@dataclass
class OutboundRequest:
    """发往 LLM 上游的请求。

    - tools 为空时，to_payload() 不输出 tools 与 tool_choice 两个字段，
      而不是输出空数组或 null。
    - max_completion_tokens 固定为 MAX_COMPLETION_TOKENS。
    """

    model: str
    messages: List[ChatMessage]
    stream: bool = False
    tools: List[FormattedTool] = field(default_factory=list)
    tool_choice: Optional[Literal["auto"]] = None
    max_completion_tokens: int = MAX_COMPLETION_TOKENS

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.model,
            "messages": self.messages,
        }
        if self.tools:
            payload["tools"] = self.tools
            payload["tool_choice"] = self.tool_choice or "auto"
        payload["max_completion_tokens"] = self.max_completion_tokens
        payload["stream"] = self.stream
        return payload
