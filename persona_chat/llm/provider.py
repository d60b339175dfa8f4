"""
채팅 모델 Provider
API 키 단위로 LangChain 채팅 모델을 만들어 캐시한다.
재시도는 RetryPolicy가 담당하므로 벤더 SDK의 자체 재시도는 끈다.
"""
from typing import Dict

import httpx
from langchain_core.language_models.chat_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI

from .settings import LLMSettings


class ChatModelProvider:
    """API 키로 모델 인스턴스를 돌려주는 Provider

    - httpx.AsyncClient를 공유 (OpenAI 호환 모델의 커넥션 풀 재사용)
    - 키별 모델 인스턴스 캐싱
    """
    def __init__(self, settings: LLMSettings, http_client: httpx.AsyncClient):
        self.settings = settings
        self.async_client = http_client
        self.cache: Dict[str, BaseChatModel] = {}

    @property
    def model_name(self) -> str:
        return self.settings.LLM_MODEL

    def get(self, api_key: str) -> BaseChatModel:
        """키로 인스턴스 반환. 없으면 생성 후 캐시"""
        if api_key in self.cache:
            return self.cache[api_key]

        if self.settings.LLM_PROVIDER == "google":
            model = ChatGoogleGenerativeAI(
                model=self.settings.LLM_MODEL,
                google_api_key=api_key,
                temperature=self.settings.temperature,
                max_tokens=self.settings.max_tokens,
                timeout=self.settings.REQUEST_TIMEOUT,
                max_retries=0,
            )
        else:
            kwargs = {
                "model": self.settings.LLM_MODEL,
                "api_key": api_key,
                "temperature": self.settings.temperature,
                "max_tokens": self.settings.max_tokens,
                "timeout": self.settings.REQUEST_TIMEOUT,
                "max_retries": 0,
                "http_async_client": self.async_client,
            }
            if self.settings.LLM_BASE_URL:
                kwargs["base_url"] = self.settings.LLM_BASE_URL
            model = ChatOpenAI(**kwargs)

        self.cache[api_key] = model
        return model

    async def aclose(self):
        """리소스 정리"""
        await self.async_client.aclose()
