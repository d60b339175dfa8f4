# tests/llm/test_retry_policy.py
import pytest

from persona_chat.exceptions import (
    GenerationTimeoutException,
    GenerationUnavailableException,
    InvalidGenerationRequestException,
    RateLimitedException,
)
from persona_chat.llm.retry import RetryPolicy


class FlakyOperation:
    """처음 n번은 실패하고 이후 성공하는 작업"""

    def __init__(self, failures):
        self.failures = list(failures)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return "ok"


class SleepRecorder:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


class TestRetryPolicy:
    """재시도 정책 경계 테스트"""

    async def test_rate_limit_succeeds_on_last_attempt(self):
        # given: 최대 4회 중 3번 실패
        policy = RetryPolicy(max_rate_limit_attempts=4)
        operation = FlakyOperation([RateLimitedException("429")] * 3)

        # when
        result = await policy.run(operation, sleep=SleepRecorder())

        # then
        assert result == "ok"
        assert operation.calls == 4

    async def test_rate_limit_gives_up_after_max_attempts(self):
        policy = RetryPolicy(max_rate_limit_attempts=4)
        operation = FlakyOperation([RateLimitedException("429")] * 5)

        with pytest.raises(RateLimitedException):
            await policy.run(operation, sleep=SleepRecorder())

        assert operation.calls == 4

    async def test_transient_limit(self):
        policy = RetryPolicy(max_transient_attempts=2)
        operation = FlakyOperation([GenerationTimeoutException("t")] * 3)

        with pytest.raises(GenerationTimeoutException):
            await policy.run(operation, sleep=SleepRecorder())

        assert operation.calls == 2

    async def test_transient_succeeds_within_limit(self):
        policy = RetryPolicy(max_transient_attempts=2)
        operation = FlakyOperation([GenerationUnavailableException("503")])

        assert await policy.run(operation, sleep=SleepRecorder()) == "ok"
        assert operation.calls == 2

    async def test_invalid_request_not_retried(self):
        policy = RetryPolicy()
        sleep = SleepRecorder()
        operation = FlakyOperation([InvalidGenerationRequestException("401")])

        with pytest.raises(InvalidGenerationRequestException):
            await policy.run(operation, sleep=sleep)

        assert operation.calls == 1
        assert sleep.delays == []

    async def test_exponential_backoff(self):
        policy = RetryPolicy(max_rate_limit_attempts=4, base_delay=1.0, multiplier=2.0, max_delay=8.0)
        sleep = SleepRecorder()
        operation = FlakyOperation([RateLimitedException("429")] * 3)

        await policy.run(operation, sleep=sleep)

        assert sleep.delays == [1.0, 2.0, 4.0]

    def test_delay_respects_retry_after_and_cap(self):
        policy = RetryPolicy(base_delay=1.0, max_delay=8.0)

        assert policy.delay_for(1, RateLimitedException("429", retry_after=3.5)) == 3.5
        assert policy.delay_for(1, RateLimitedException("429", retry_after=30)) == 8.0
        assert policy.delay_for(10) == 8.0

    def test_max_attempts_for(self):
        policy = RetryPolicy(max_rate_limit_attempts=4, max_transient_attempts=2)

        assert policy.max_attempts_for(RateLimitedException("429")) == 4
        assert policy.max_attempts_for(GenerationTimeoutException("t")) == 2
        assert policy.max_attempts_for(InvalidGenerationRequestException("bad")) == 1
