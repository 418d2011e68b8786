"""把调用方的工具列表转换为 LLM function tool 格式。"""

from typing import Any, List

from chat_relay.domain.models import FormattedTool
from chat_relay.tools.definitions import ToolDescriptor
from chat_relay.tools.schema import normalize_schema


def format_tool(descriptor: ToolDescriptor) -> FormattedTool:
    """把单个 ToolDescriptor 转成 {"type": "function", "function": {...}}。"""

    return {
        "type": "function",
        "function": {
            "name": descriptor.name,
            "description": descriptor.description or f"Execute {descriptor.name}",
            "parameters": normalize_schema(descriptor.input_schema),
        },
    }


def format_tools(tools: Any) -> List[FormattedTool]:
    """格式化工具列表，保持输入顺序；None 或非列表输入返回空列表。"""

    if not isinstance(tools, list):
        return []
    return [format_tool(ToolDescriptor.from_payload(t)) for t in tools]
