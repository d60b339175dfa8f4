# persona_chat/knowledge/settings.py
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

DEFAULT_KNOWLEDGE_FILE = Path(__file__).parent / "data" / "knowledge.json"


class KnowledgeSettings(BaseSettings):
    """지식 베이스 / 검색 설정"""

    KNOWLEDGE_FILE: Path = Field(default=DEFAULT_KNOWLEDGE_FILE, description="지식 스니펫 JSON 파일")

    # === 벡터 검색 (선택) ===
    EMBEDDING_PROVIDER: Literal["none", "google", "openai"] = Field(
        default="none", description="none이면 키워드 검색만 사용"
    )
    EMBEDDING_MODEL: str = Field(default="models/text-embedding-004")
    EMBEDDING_API_KEY: str = Field(default="", description="임베딩 API 키")
    EMBEDDING_CACHE_FILE: Path = Field(
        default=Path("data") / "embeddings-cache.json",
        description="스니펫 임베딩 캐시 (재시작 시 재계산 방지)",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_ignore_empty": True,
        "extra": "ignore",
    }
