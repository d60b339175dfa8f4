# persona_chat/llm/__init__.py
from .client import LLMClient, classify_error
from .key_pool import ApiKeyPool
from .retry import RetryPolicy
from .service import LLMService
from .settings import LLMSettings
from .container import create_llm_container

__all__ = [
    "LLMClient",
    "ApiKeyPool",
    "RetryPolicy",
    "LLMService",
    "LLMSettings",
    "classify_error",
    "create_llm_container",
]
