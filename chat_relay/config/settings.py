"""配置管理模块。

支持从环境变量、.env 以及 config.yaml 加载配置。
配置在进程启动时加载一次，之后只读。
"""

import os
import warnings
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_config_from_yaml() -> Dict[str, Any]:
    """从 config.yaml 加载配置（若存在）。"""
    candidates = []
    explicit = os.getenv("RELAY_CONFIG_FILE")
    if explicit:
        candidates.append(Path(explicit).expanduser())
    candidates.extend([
        Path.cwd() / "config.yaml",
        Path(__file__).resolve().parents[2] / "config.yaml",
    ])

    seen: set[Path] = set()
    for path in candidates:
        if not path or path in seen:
            continue
        seen.add(path)
        try:
            if path.exists():
                data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
                if isinstance(data, dict):
                    return data
                warnings.warn(f"Config file {path} is not a mapping, ignored")
        except (OSError, yaml.YAMLError) as exc:
            warnings.warn(f"Failed to read config file {path}: {exc}")
    return {}


class Settings(BaseSettings):
    """中继服务配置（使用 Pydantic）。"""

    # ---- 服务监听 ----
    host: str = Field(default="0.0.0.0", description="监听地址")
    port: int = Field(default=3002, ge=1, le=65535, description="监听端口")

    # ---- LLM 上游 ----
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API 密钥")
    openai_base_url: str = Field(
        default="https://api.openai.com/v1",
        description="OpenAI 兼容接口的基础URL",
    )
    default_model: str = Field(default="gpt-5", description="调用方未指定 model 时使用的模型")
    llm_timeout: float = Field(default=300.0, gt=0, description="LLM 请求超时时间（秒）")

    # ---- 鉴权服务 ----
    auth_service_url: str = Field(
        default="http://localhost:3000",
        description="鉴权服务基础URL，校验地址为 {url}/api/auth/validate",
    )
    auth_timeout: float = Field(default=10.0, gt=0, description="鉴权请求超时时间（秒）")

    # ---- 提示词 ----
    system_prompt_path: Optional[str] = Field(
        default=None,
        description="自定义 system prompt 文件路径，为空时使用内置提示词",
    )

    # ---- HTTP 层 ----
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="允许的跨域来源")
    max_body_bytes: int = Field(default=50 * 1024 * 1024, ge=1, description="请求体大小上限（字节）")
    expose_error_details: bool = Field(
        default=False,
        description="未处理异常时是否把异常信息返回给调用方",
    )

    # ---- 日志 ----
    log_dir: str = Field(default="logs", description="日志目录")
    log_redact_content: bool = Field(default=False, description="是否截断日志内容")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @staticmethod
    def _config_source() -> Dict[str, Any]:
        return _load_config_from_yaml()

    @field_validator("openai_base_url", "auth_service_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("openai_api_key")
    @classmethod
    def validate_api_key(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        if v and len(v) < 10:
            raise ValueError("API key seems too short")
        return v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            cls._config_source,
            file_secret_settings,
        )


settings = Settings()
