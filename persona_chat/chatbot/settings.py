"""
챗봇 설정 클래스
"""
from pydantic import Field
from pydantic_settings import BaseSettings


class ChatbotSettings(BaseSettings):
    """채팅 요청 처리 관련 설정"""

    MAX_MESSAGE_LENGTH: int = Field(default=1000, ge=1, description="사용자 메시지 최대 길이")
    RAG_TOP_K: int = Field(default=5, ge=1, le=10, description="프롬프트에 넣을 검색 결과 수")
    FALLBACK_TOP_K: int = Field(default=3, ge=1, le=10, description="지식 기반 대체 답변에 쓸 스니펫 수")
    FALLBACK_EXCERPT_CHARS: int = Field(default=600, ge=50, description="대체 답변 스니펫당 최대 길이")
    REQUEST_DEADLINE_SECONDS: float = Field(default=60.0, gt=0, description="답변 생성 전체 데드라인 (초)")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_ignore_empty": True,
        "extra": "ignore",
    }
