"""
LLM 설정 클래스
Gemini(기본) 또는 OpenAI 호환 엔드포인트
"""
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class LLMSettings(BaseSettings):
    """LLM 관련 설정"""

    # === 모델 ===
    LLM_PROVIDER: Literal["google", "openai"] = Field(default="google", description="생성 API 벤더")
    LLM_MODEL: str = Field(default="gemini-2.0-flash", description="모델 이름")
    LLM_BASE_URL: str = Field(default="", description="OpenAI 호환 서버 주소 (선택)")

    # === API 키 (여러 개면 rate limit 시 순환) ===
    GEMINI_API_KEYS: str = Field(default="", description="쉼표로 구분한 Gemini API 키 목록")
    GEMINI_API_KEY: str = Field(default="", description="단일 Gemini API 키")
    OPENAI_API_KEY: str = Field(default="", description="OpenAI API 키")
    KEY_COOLDOWN_SECONDS: float = Field(default=60.0, ge=0, description="rate limit 걸린 키 대기 시간")

    # === 생성 옵션 ===
    temperature: float = Field(default=0.7, description="LLM 창의성 수준")
    max_tokens: int = Field(default=1024, description="최대 출력 토큰 수")
    REQUEST_TIMEOUT: float = Field(default=30.0, gt=0, description="단일 요청 타임아웃 (초)")

    # === 재시도 정책 ===
    RETRY_MAX_RATE_LIMIT_ATTEMPTS: int = Field(default=4, ge=1, le=10)
    RETRY_MAX_TRANSIENT_ATTEMPTS: int = Field(default=2, ge=1, le=10)
    RETRY_BASE_DELAY: float = Field(default=1.0, ge=0)
    RETRY_MAX_DELAY: float = Field(default=8.0, ge=0)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_ignore_empty": True,
        "extra": "ignore",
    }

    @property
    def api_keys(self) -> List[str]:
        """벤더에 맞는 API 키 목록"""
        if self.LLM_PROVIDER == "openai":
            return [self.OPENAI_API_KEY] if self.OPENAI_API_KEY else []
        if self.GEMINI_API_KEYS:
            return [key.strip() for key in self.GEMINI_API_KEYS.split(",") if key.strip()]
        return [self.GEMINI_API_KEY] if self.GEMINI_API_KEY else []
