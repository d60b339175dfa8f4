# persona_chat/llm/retry.py
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from persona_chat.exceptions import GenerationException, RateLimitedException

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """생성 호출 재시도 정책

    - rate limit: 지수 백오프로 max_rate_limit_attempts 회까지
    - timeout / unavailable: max_transient_attempts 회까지
    - 재시도 불가 오류(InvalidRequest): 즉시 실패
    시도 횟수는 전체 호출 횟수 기준이며, 마지막 오류 종류의 한도와 비교한다.
    """
    max_rate_limit_attempts: int = 4
    max_transient_attempts: int = 2
    base_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 8.0

    def max_attempts_for(self, error: GenerationException) -> int:
        if isinstance(error, RateLimitedException):
            return self.max_rate_limit_attempts
        if not error.retryable:
            return 1
        return self.max_transient_attempts

    def delay_for(self, attempt: int, error: Optional[GenerationException] = None) -> float:
        """attempt번째 실패 후 대기 시간 (서버 retry_after 이상, max_delay 이하)"""
        delay = self.base_delay * (self.multiplier ** (attempt - 1))
        retry_after = getattr(error, "retry_after", None)
        if retry_after:
            delay = max(delay, retry_after)
        return min(delay, self.max_delay)

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> T:
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation()
            except GenerationException as error:
                limit = self.max_attempts_for(error)
                if attempt >= limit:
                    if limit > 1:
                        logger.error(f"Giving up after {attempt} attempts: {error.__class__.__name__}")
                    raise
                delay = self.delay_for(attempt, error)
                logger.warning(
                    f"Attempt {attempt}/{limit} failed ({error.__class__.__name__}), retrying in {delay:.2f}s"
                )
                await sleep(delay)
