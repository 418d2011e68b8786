"""鉴权闸门。

在任何付费的 LLM 调用之前，先把调用方的 bearer token 交给外部鉴权服务校验：

1. Authorization 头缺失：直接 401，不发起任何网络请求。
2. 调用 {auth_service_url}/api/auth/validate，网络失败按失败关闭处理（500）。
3. 鉴权服务返回非 2xx：401。
4. isValid 为假：401；isValid 为真但 isFreeTrial 为假：403。

结果每个请求重新获取，不缓存，也不重试。
"""

import re
from typing import Optional

import httpx

from chat_relay.config.settings import settings
from chat_relay.domain.exceptions import AuthError, AuthServiceError, UpstreamTimeoutError
from chat_relay.domain.models import AuthResult
from chat_relay.infrastructure.logging.logger import logger


VALIDATE_PATH = "/api/auth/validate"

_BEARER_PREFIX = re.compile(r"^Bearer\s+", re.IGNORECASE)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """从 Authorization 头中取出 token（去掉大小写不敏感的 "Bearer " 前缀）。"""

    if not authorization:
        raise AuthError(code="MISSING_TOKEN", message="No authorization token provided", http_status=401)
    return _BEARER_PREFIX.sub("", authorization, count=1)


class AuthGate:
    """外部鉴权服务客户端。"""

    def __init__(self, cfg=settings):
        self._settings = cfg

    async def authorize(self, authorization: Optional[str]) -> AuthResult:
        """校验 Authorization 头，只有 isValid 与 isFreeTrial 都为真时才返回。"""

        token = extract_bearer_token(authorization)
        result = await self.validate(token)
        if not result.is_valid:
            raise AuthError(code="INVALID_TOKEN", message="Invalid token", http_status=401)
        if not result.is_free_trial:
            raise AuthError(
                code="SUBSCRIPTION_REQUIRED",
                message="Subscription required (Free trial expired or not active)",
                http_status=403,
            )
        return result

    async def validate(self, token: str) -> AuthResult:
        """调用鉴权服务并解析 AuthResult。"""

        url = f"{self._settings.auth_service_url}{VALIDATE_PATH}"
        logger.info("Validating token with auth service", extra={"extra": {"auth_url": url}})
        try:
            async with httpx.AsyncClient(timeout=self._settings.auth_timeout, trust_env=False) as client:
                resp = await client.post(
                    url,
                    json={"token": token},
                    headers={
                        "Accept": "application/json",
                        "Content-Type": "application/json",
                    },
                )
        except httpx.TimeoutException as e:
            logger.error("Auth service timed out", extra={"extra": {"error": str(e)}})
            raise UpstreamTimeoutError(code="AUTH_TIMEOUT", message="Authentication check timed out")
        except httpx.RequestError as e:
            logger.error("Authentication service error", extra={"extra": {"error": str(e)}})
            raise AuthServiceError(code="AUTH_UNAVAILABLE", message="Authentication check failed", http_status=500)

        if not 200 <= resp.status_code < 300:
            logger.error(
                "Auth service returned error status",
                extra={"extra": {"status": resp.status_code}},
            )
            raise AuthServiceError(
                code="AUTH_REQUEST_FAILED",
                message="Token validation request failed",
                http_status=401,
                upstream_status=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            logger.error("Auth service returned malformed body", extra={"extra": {"error": str(e)}})
            raise AuthServiceError(code="AUTH_BAD_RESPONSE", message="Authentication check failed", http_status=500)

        result = AuthResult.from_payload(data)
        logger.info(
            "Validation response",
            extra={"extra": {"is_valid": result.is_valid, "is_free_trial": result.is_free_trial}},
        )
        return result
