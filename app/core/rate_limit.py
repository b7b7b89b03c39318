"""请求限流（固定窗口，按客户端地址计数）

基于 limits 的 FixedWindowRateLimiter，以 FastAPI 依赖的形式挂在路由上，
这样管理后台的限流会先于登录态校验执行，未登录请求同样计数。

两个互相独立的实例：
- admin_rate_limit: 管理后台，固定 50 次 / 15 分钟，不读取系统设置
- consultation_rate_limit: 聊天与咨询共享同一计数器，
  参数在启动时从系统设置读取一次（修改后需重启生效）
"""

import math
import time
from typing import TYPE_CHECKING

from fastapi import Request, status
from limits import RateLimitItem, RateLimitItemPerSecond
from limits.aio.storage import MemoryStorage
from limits.aio.strategies import FixedWindowRateLimiter

from app.core.errors import AppError
from app.core.logging import get_logger

if TYPE_CHECKING:
    from app.services.config_cache import ConfigCache

logger = get_logger("rate_limit")

ADMIN_MAX_REQUESTS = 50
ADMIN_WINDOW_SECONDS = 15 * 60
ADMIN_MESSAGE = "Muitas solicitações do painel administrativo. Tente novamente em 15 minutos."

DEFAULT_CHAT_MAX_REQUESTS = 10
DEFAULT_CHAT_WINDOW_MINUTES = 1


def chat_limit_message(window_minutes: int) -> str:
    """聊天限流提示语（分钟数随配置变化）"""
    unit = "minuto" if window_minutes == 1 else "minutos"
    return f"Muitas solicitações. Tente novamente em {window_minutes} {unit}."


def client_key(request: Request) -> str:
    """限流键：客户端地址"""
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


class RateLimitGate:
    """固定窗口限流器

    每个 key 独立计数；窗口内超过 max_requests 的请求返回 429，
    并带上 Retry-After（距窗口重置的秒数）。
    """

    def __init__(self, scope: str, max_requests: int, window_seconds: int, message: str):
        self.scope = scope
        self._storage = MemoryStorage()
        self._limiter = FixedWindowRateLimiter(self._storage)
        self.message = message
        self._item: RateLimitItem = RateLimitItemPerSecond(max_requests, window_seconds)

    @property
    def max_requests(self) -> int:
        return self._item.amount

    @property
    def window_seconds(self) -> int:
        return self._item.get_expiry()

    def configure(self, max_requests: int, window_seconds: int, message: str | None = None) -> None:
        """更新限额（仅在启动阶段调用）"""
        if max_requests < 1 or window_seconds < 1:
            raise ValueError(f"无效的限流参数: max={max_requests}, window={window_seconds}")
        self._item = RateLimitItemPerSecond(max_requests, window_seconds)
        if message is not None:
            self.message = message
        logger.info(
            "限流参数已配置",
            scope=self.scope,
            max_requests=max_requests,
            window_seconds=window_seconds,
        )

    async def reset(self) -> None:
        """清空所有计数"""
        await self._storage.reset()

    async def hit(self, key: str) -> int | None:
        """记录一次请求

        Returns:
            None 表示放行；否则为建议的 Retry-After 秒数
        """
        if await self._limiter.hit(self._item, self.scope, key):
            return None

        stats = await self._limiter.get_window_stats(self._item, self.scope, key)
        return max(1, math.ceil(stats.reset_time - time.time()))

    async def __call__(self, request: Request) -> None:
        key = client_key(request)
        retry_after = await self.hit(key)
        if retry_after is None:
            return

        logger.warning(
            "请求被限流",
            scope=self.scope,
            client=key,
            path=request.url.path,
            retry_after=retry_after,
        )
        raise AppError(
            code="rate_limited",
            message=self.message,
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            headers={"Retry-After": str(retry_after)},
        )


admin_rate_limit = RateLimitGate(
    scope="admin",
    max_requests=ADMIN_MAX_REQUESTS,
    window_seconds=ADMIN_WINDOW_SECONDS,
    message=ADMIN_MESSAGE,
)

consultation_rate_limit = RateLimitGate(
    scope="consultation",
    max_requests=DEFAULT_CHAT_MAX_REQUESTS,
    window_seconds=DEFAULT_CHAT_WINDOW_MINUTES * 60,
    message=chat_limit_message(DEFAULT_CHAT_WINDOW_MINUTES),
)


async def configure_consultation_limit(cache: "ConfigCache") -> None:
    """启动时从系统设置读取聊天/咨询限流参数（只读一次）"""
    max_requests = await cache.get_int("rate_limit_requests", DEFAULT_CHAT_MAX_REQUESTS)
    window_minutes = await cache.get_int("rate_limit_minutes", DEFAULT_CHAT_WINDOW_MINUTES)

    if max_requests < 1 or window_minutes < 1:
        logger.warning(
            "限流设置无效，使用默认值",
            max_requests=max_requests,
            window_minutes=window_minutes,
        )
        max_requests, window_minutes = DEFAULT_CHAT_MAX_REQUESTS, DEFAULT_CHAT_WINDOW_MINUTES

    consultation_rate_limit.configure(
        max_requests,
        window_minutes * 60,
        chat_limit_message(window_minutes),
    )
