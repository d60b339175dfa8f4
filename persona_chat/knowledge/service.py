# persona_chat/knowledge/service.py
import logging
from typing import Dict, List, Optional

from langchain_core.embeddings import Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings
from langchain_openai import OpenAIEmbeddings

from persona_chat.exceptions import RetrievalUnavailableException
from .domains import ScoredSnippet
from .repository import KnowledgeRepository
from .retriever import KeywordRetriever, VectorRetriever
from .settings import KnowledgeSettings

logger = logging.getLogger(__name__)


def create_embeddings(settings: KnowledgeSettings) -> Optional[Embeddings]:
    """설정에 맞는 임베딩 모델 생성 (none이면 None)"""
    if settings.EMBEDDING_PROVIDER == "google":
        return GoogleGenerativeAIEmbeddings(
            model=settings.EMBEDDING_MODEL,
            google_api_key=settings.EMBEDDING_API_KEY,
        )
    if settings.EMBEDDING_PROVIDER == "openai":
        return OpenAIEmbeddings(
            model=settings.EMBEDDING_MODEL,
            api_key=settings.EMBEDDING_API_KEY,
        )
    return None


class RetrievalService:
    """지식 검색 서비스 - 벡터 검색 우선, 실패하면 키워드 검색"""

    def __init__(
        self,
        repository: KnowledgeRepository,
        keyword_retriever: KeywordRetriever,
        vector_retriever: Optional[VectorRetriever] = None,
    ):
        self._repository = repository
        self._keyword_retriever = keyword_retriever
        self._vector_retriever = vector_retriever
        self._initialized = False

    async def initialize(self) -> None:
        """벡터 색인 준비. 실패해도 키워드 검색으로 계속 동작"""
        if self._initialized:
            return
        if self._vector_retriever is not None:
            try:
                indexed = await self._vector_retriever.index()
                logger.info(f"Vector retrieval ready: {indexed} snippets indexed")
            except RetrievalUnavailableException as e:
                logger.warning(f"Vector retrieval disabled, using keyword search: {e.message}")
        self._initialized = True

    async def retrieve(self, query: str, k: int = 5) -> List[ScoredSnippet]:
        """상위 k개 관련 스니펫 검색"""
        if self._repository.count() == 0:
            logger.warning("Knowledge store is empty")
            return []

        if self._vector_retriever is not None and self._vector_retriever.ready:
            try:
                results = await self._vector_retriever.retrieve(query, k)
                if results:
                    self._log_results(query, results)
                    return results
                logger.info("Vector search returned no results, falling back to keyword search")
            except RetrievalUnavailableException as e:
                logger.warning(f"Vector retrieval failed, falling back to keyword search: {e.message}")

        results = await self._keyword_retriever.retrieve(query, k)
        self._log_results(query, results)
        return results

    def status(self) -> Dict[str, object]:
        """헬스체크용 상태"""
        vector_ready = self._vector_retriever is not None and self._vector_retriever.ready
        return {
            "initialized": self._initialized,
            "document_count": self._repository.count(),
            "mode": "vector" if vector_ready else "keyword",
        }

    def _log_results(self, query: str, results: List[ScoredSnippet]) -> None:
        logger.info(f"Retrieved {len(results)} snippets for: {query[:50]!r}")
        for i, result in enumerate(results, start=1):
            logger.debug(f"   {i}. [{result.score:.3f}] {result.snippet.title}")
