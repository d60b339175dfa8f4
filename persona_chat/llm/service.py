# persona_chat/llm/service.py
import asyncio
import logging
from typing import Any, Dict, Optional

from persona_chat.exceptions import GenerationTimeoutException
from persona_chat.prompt.domains import Prompt
from .client import LLMClient
from .retry import RetryPolicy

logger = logging.getLogger(__name__)


class LLMService:
    """LLM 비즈니스 서비스 - 재시도 정책 + 데드라인"""

    def __init__(self, client: LLMClient, retry_policy: RetryPolicy):
        self._client = client
        self._retry_policy = retry_policy

    @property
    def configured(self) -> bool:
        return self._client.configured

    @property
    def model_name(self) -> str:
        return self._client.model_name

    async def generate(self, prompt: Prompt, deadline: Optional[float] = None) -> str:
        """프롬프트로 답변 생성

        deadline(초)을 넘기면 진행 중인 호출을 취소하고 GenerationTimeoutException.
        호출자 취소는 그대로 전파되어 이후 재시도도 하지 않는다.
        """
        run = self._retry_policy.run(lambda: self._client.generate(prompt))
        if deadline is None:
            return await run
        try:
            return await asyncio.wait_for(run, timeout=deadline)
        except asyncio.TimeoutError as e:
            logger.warning(f"Generation deadline of {deadline}s exceeded")
            raise GenerationTimeoutException(f"Generation exceeded deadline of {deadline}s") from e

    def health(self) -> Dict[str, Any]:
        return {
            "configured": self.configured,
            "model": self.model_name,
            "api_keys": self._client.key_statuses(),
        }
