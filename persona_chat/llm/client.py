# persona_chat/llm/client.py
import asyncio
import logging
import re
from typing import Any, Optional

import httpx
import openai

from persona_chat.exceptions import (
    GenerationException,
    GenerationTimeoutException,
    GenerationUnavailableException,
    InvalidGenerationRequestException,
    RateLimitedException,
)
from persona_chat.logger import mask_key
from persona_chat.prompt.domains import Prompt
from .key_pool import ApiKeyPool
from .provider import ChatModelProvider

logger = logging.getLogger(__name__)

RATE_LIMIT_MARKERS = ("rate limit", "resource_exhausted", "resource exhausted", "quota", "too many requests")
RETRY_DELAY_PATTERN = re.compile(r"retry\s+(?:in|after)\s+([\d.]+)\s*s", re.IGNORECASE)
RETRY_DELAY_BUFFER = 0.5
INVALID_REQUEST_STATUSES = (400, 401, 403, 404, 422)


def extract_retry_delay(message: str) -> Optional[float]:
    """'retry in 2.9s' 형태의 서버 힌트 (초 + 버퍼)"""
    match = RETRY_DELAY_PATTERN.search(message)
    if not match:
        return None
    try:
        return float(match.group(1)) + RETRY_DELAY_BUFFER
    except ValueError:
        return None


def _status_code(error: Exception) -> Optional[int]:
    for attr in ("status_code", "code"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    response = getattr(error, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def classify_error(error: Exception) -> GenerationException:
    """벤더 SDK 예외 → 생성 오류 분류"""
    if isinstance(error, GenerationException):
        return error

    message = str(error) or error.__class__.__name__
    if isinstance(error, (asyncio.TimeoutError, openai.APITimeoutError, httpx.TimeoutException)):
        return GenerationTimeoutException(f"Generation request timed out: {message}")

    status = _status_code(error)
    lowered = message.lower()
    if (
        isinstance(error, openai.RateLimitError)
        or status == 429
        or any(marker in lowered for marker in RATE_LIMIT_MARKERS)
    ):
        return RateLimitedException(f"Rate limited: {message}", retry_after=extract_retry_delay(message))

    if isinstance(error, (openai.AuthenticationError, openai.PermissionDeniedError, openai.BadRequestError)) or (
        status in INVALID_REQUEST_STATUSES
    ):
        return InvalidGenerationRequestException(f"Generation request rejected: {message}")

    return GenerationUnavailableException(f"Generation service unavailable: {message}")


def extract_text(content: Any) -> str:
    """모델 응답 content (문자열 또는 part 목록)에서 텍스트 추출"""
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(part.get("text", ""))
        return "".join(parts)
    return ""


class LLMClient:
    """생성 API 단일 호출 (재시도 없음)"""

    def __init__(self, provider: ChatModelProvider, key_pool: ApiKeyPool):
        self._provider = provider
        self._key_pool = key_pool

    @property
    def configured(self) -> bool:
        return len(self._key_pool) > 0

    @property
    def model_name(self) -> str:
        return self._provider.model_name

    def key_statuses(self) -> list:
        return self._key_pool.statuses()

    async def generate(self, prompt: Prompt) -> str:
        api_key = self._key_pool.acquire()
        if api_key is None:
            raise GenerationUnavailableException("No API keys configured")

        model = self._provider.get(api_key)
        logger.info(f"Calling {self._provider.model_name} with key {mask_key(api_key)}")
        try:
            response = await model.ainvoke(prompt.to_messages())
        except Exception as e:
            error = classify_error(e)
            if isinstance(error, RateLimitedException):
                self._key_pool.mark_rate_limited(api_key, error.retry_after)
            logger.warning(f"Generation failed with key {mask_key(api_key)}: {error.__class__.__name__}")
            raise error from e

        text = extract_text(response.content)
        if not text.strip():
            raise GenerationUnavailableException("Empty response from model")

        self._key_pool.mark_success(api_key)
        return text
