# persona_chat/prompt/settings.py
from pydantic import Field
from pydantic_settings import BaseSettings


class PromptSettings(BaseSettings):
    """프롬프트 크기 제한"""

    MAX_HISTORY_MESSAGES: int = Field(default=10, ge=0, le=100, description="프롬프트에 넣을 최근 대화 수")
    MAX_PROMPT_CHARS: int = Field(default=12000, ge=500, description="프롬프트 전체 문자 수 한도")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_ignore_empty": True,
        "extra": "ignore",
    }
