"""统一业务异常模型。

请求管线中抛出的业务级错误都继承自 BusinessError，
由 API 层的异常处理器统一转换成 `{"error": message}` JSON 响应。
所有错误对当前请求都是终止性的，任何一层都不做重试。
"""

from typing import Any, Optional


class BusinessError(Exception):
    """业务异常基类。

    Attributes:
        code: 机器可读错误码（如 "INVALID_TOKEN"）。
        message: 返回给调用方的错误信息。
        http_status: 映射到 HTTP 时使用的状态码，默认 400。
        extra: 其他补充字段（例如上游状态码）。
    """

    def __init__(self, code: str, message: str, http_status: int = 400, **extra):
        self.code = code
        self.message = message
        self.http_status = http_status
        self.extra = extra
        super().__init__(message)


class AuthError(BusinessError):
    """调用方令牌缺失、无效或订阅未激活（401/403）。"""


class AuthServiceError(BusinessError):
    """鉴权服务不可达或返回非 2xx，按失败关闭处理（401/500）。"""


class ConfigurationError(BusinessError):
    """服务端配置缺失，例如未设置 LLM API 密钥。"""

    def __init__(self, code: str, message: str, http_status: int = 500, **extra):
        super().__init__(code, message, http_status, **extra)


class NetworkError(BusinessError):
    """调用 LLM 上游时的网络层错误，例如连接失败。"""

    def __init__(self, code: str, message: str, http_status: int = 502, **extra):
        super().__init__(code, message, http_status, **extra)


class UpstreamTimeoutError(BusinessError):
    """鉴权服务或 LLM 上游在配置的超时时间内未响应。"""

    def __init__(self, code: str, message: str, http_status: int = 504, **extra):
        super().__init__(code, message, http_status, **extra)


class ApiError(BusinessError):
    """LLM 上游返回非 2xx 时抛出，body 为原样转发给调用方的错误体。"""

    def __init__(self, code: str, message: str, http_status: int = 502, body: Optional[Any] = None, **extra):
        self.body = body
        super().__init__(code, message, http_status, **extra)


class ValidationError(BusinessError):
    """调用方请求参数校验失败。"""


class SchemaValidationError(ValidationError):
    """工具参数 schema 嵌套层级超过上限。"""
