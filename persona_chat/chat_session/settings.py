# persona_chat/chat_session/settings.py
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class ChatSessionSettings(BaseSettings):
    """세션 저장소 설정"""

    SESSION_BACKEND: Literal["memory", "json"] = Field(default="memory", description="세션 저장소 종류")
    CHAT_HISTORY_FILE: Path = Field(default=Path("data") / "chat-history.json", description="json 저장소 파일")
    MAX_PAGE_SIZE: int = Field(default=100, ge=1, le=1000, description="관리자 목록 최대 페이지 크기")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_ignore_empty": True,
        "extra": "ignore",
    }
