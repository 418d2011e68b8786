"""HTTP request bodies."""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ChatCompletionBody(BaseModel):
    """Body of ``POST /api/chat/completions``.

    Messages and tools are kept as raw JSON; the relay forwards messages
    verbatim and normalizes tools itself.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    messages: Optional[List[Any]] = None
    tools: Any = None
    model: Optional[str] = None
    stream: Optional[bool] = False
    include_system_prompt: Optional[bool] = Field(default=True, alias="includeSystemPrompt")
