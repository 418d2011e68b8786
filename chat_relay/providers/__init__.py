"""LLM Provider 集成层。

该包下的模块负责：
- 定义 Provider 抽象接口 (base)。
- 提供 OpenAI chat completions 的具体实现 (openai_client)。
"""

from chat_relay.config.settings import settings
from chat_relay.providers.base import ProviderClient
from chat_relay.providers.openai_client import OpenAIClient


def create_provider(cfg=None) -> ProviderClient:
    """根据配置创建 Provider 实例，默认使用全局 settings。"""

    return OpenAIClient(cfg or settings)
