"""Outbound request assembly."""

from typing import Any, List, Optional

from chat_relay.domain.models import ChatMessage, OutboundRequest
from chat_relay.tools.formatter import format_tools


def inject_system_prompt(
    messages: Optional[List[ChatMessage]],
    system_prompt: str,
    include_system_prompt: bool = True,
) -> Optional[List[ChatMessage]]:
    """Prepend the system prompt unless the first message already is one.

    Only ``messages[0]`` is inspected; a system message further down does
    not suppress injection. Empty or missing message lists pass through.
    """

    if not include_system_prompt or not messages:
        return messages
    first = messages[0]
    if isinstance(first, dict) and first.get("role") == "system":
        return messages
    return [{"role": "system", "content": system_prompt}, *messages]


def compose_request(
    messages: Optional[List[ChatMessage]],
    tools: Any,
    *,
    system_prompt: str,
    default_model: str,
    model: Optional[str] = None,
    stream: bool = False,
    include_system_prompt: bool = True,
) -> OutboundRequest:
    """Build the OutboundRequest sent to the LLM API."""

    formatted = format_tools(tools)
    return OutboundRequest(
        model=default_model if model is None else model,
        messages=inject_system_prompt(messages, system_prompt, include_system_prompt),
        stream=stream,
        tools=formatted,
        tool_choice="auto" if formatted else None,
    )
