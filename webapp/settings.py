# webapp/settings.py
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    """웹 애플리케이션 설정"""

    LOG_LEVEL: str = Field(default="INFO", description="루트 로그 레벨")
    CORS_ORIGINS: List[str] = Field(default=["*"], description="허용할 CORS origin 목록")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_ignore_empty": True,
        "extra": "ignore",
    }
