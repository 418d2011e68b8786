"""工具数据结构定义。

ToolDescriptor 描述调用方希望 LLM 能够调用的一项能力，
每个请求由调用方构造，不做持久化。
"""

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class ToolDescriptor:
    """调用方提供的工具描述。

    - name: 原样透传，本地不做校验（缺失时由上游拒绝）。
    - description: 可选，缺省时由 formatter 生成 "Execute <name>"。
    - input_schema: 可选的参数 schema（对应请求中的 inputSchema）。
    """

    name: Any
    description: Optional[str] = None
    input_schema: Any = None

    @classmethod
    def from_payload(cls, data: Any) -> "ToolDescriptor":
        if not isinstance(data, dict):
            return cls(name=None)
        return cls(
            name=data.get("name"),
            description=data.get("description"),
            input_schema=data.get("inputSchema"),
        )
