# persona_chat/llm/container.py
import httpx
from dependency_injector import containers, providers

from .client import LLMClient
from .key_pool import ApiKeyPool
from .provider import ChatModelProvider
from .retry import RetryPolicy
from .service import LLMService
from .settings import LLMSettings


class LLMContainer(containers.DeclarativeContainer):
    """LLM 모듈 DI Container"""

    # === Settings ===
    settings = providers.Singleton(LLMSettings)

    # === 외부 연결 ===
    http_client = providers.Singleton(httpx.AsyncClient, timeout=settings.provided.REQUEST_TIMEOUT)

    provider = providers.Singleton(
        ChatModelProvider,
        settings=settings,
        http_client=http_client,
    )

    key_pool = providers.Singleton(
        ApiKeyPool,
        keys=settings.provided.api_keys,
        cooldown=settings.provided.KEY_COOLDOWN_SECONDS,
    )

    # === Client / 재시도 정책 ===
    client = providers.Singleton(LLMClient, provider=provider, key_pool=key_pool)

    retry_policy = providers.Singleton(
        RetryPolicy,
        max_rate_limit_attempts=settings.provided.RETRY_MAX_RATE_LIMIT_ATTEMPTS,
        max_transient_attempts=settings.provided.RETRY_MAX_TRANSIENT_ATTEMPTS,
        base_delay=settings.provided.RETRY_BASE_DELAY,
        max_delay=settings.provided.RETRY_MAX_DELAY,
    )

    # === Main Service ===
    service = providers.Singleton(LLMService, client=client, retry_policy=retry_policy)


def create_llm_container() -> LLMContainer:
    return LLMContainer()
