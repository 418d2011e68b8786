"""系统提示词加载工具。

默认从本目录读取 Revit 助手的 system prompt 文本；
配置了 system_prompt_path 时改为读取该文件。
提示词在应用启动时加载一次，之后作为只读值注入每个请求。
"""

from pathlib import Path
from typing import Optional


PROMPTS_DIR = Path(__file__).resolve().parent
DEFAULT_PROMPT_FILE = PROMPTS_DIR / "revit_assistant_system.md"


def load_system_prompt(path: Optional[str] = None) -> str:
    """加载 system prompt 文本。

    Args:
        path: 可选的提示词文件路径，为空时使用内置文件。
    """

    fname = Path(path).expanduser() if path else DEFAULT_PROMPT_FILE
    return fname.read_text(encoding="utf-8").rstrip()
