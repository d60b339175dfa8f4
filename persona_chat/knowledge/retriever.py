"""
지식 검색기
키워드 기반 검색(기본)과 임베딩 기반 벡터 검색(선택)
"""
import hashlib
import json
import logging
import re
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Sequence

import numpy as np
from langchain_core.embeddings import Embeddings

from persona_chat.exceptions import InvalidRequestException, RetrievalUnavailableException
from persona_chat.storage import atomic_write_text
from .domains import KnowledgeSnippet, ScoredSnippet
from .repository import KnowledgeRepository

logger = logging.getLogger(__name__)

MAX_TOP_K = 10

STOP_WORDS = frozenset({
    "a", "an", "and", "are", "as", "at", "be", "been", "but", "by", "can", "could",
    "did", "do", "does", "for", "from", "had", "has", "have", "he", "her", "his",
    "how", "i", "if", "in", "into", "is", "it", "its", "me", "my", "of", "on", "or",
    "our", "she", "so", "tell", "than", "that", "the", "their", "them", "then",
    "there", "these", "they", "this", "to", "us", "was", "we", "were", "what",
    "when", "where", "which", "who", "why", "will", "with", "would", "you", "your",
})

_WORD = re.compile(r"\w+")


def validate_query(query: str, k: int) -> None:
    """검색 입력 검증"""
    if not query or not query.strip():
        raise InvalidRequestException("Query must not be empty")
    if not 1 <= k <= MAX_TOP_K:
        raise InvalidRequestException(f"k must be between 1 and {MAX_TOP_K}")


def _normalize(token: str) -> str:
    # 간단한 복수형 처리: projects -> project
    if len(token) > 3 and token.endswith("s") and not token.endswith("ss"):
        return token[:-1]
    return token


def tokenize(text: str) -> FrozenSet[str]:
    """소문자 단어 집합 (불용어, 한 글자 토큰 제외)"""
    return frozenset(
        _normalize(token)
        for token in _WORD.findall(text.lower())
        if len(token) > 1 and token not in STOP_WORDS
    )


def cosine_scores(matrix: np.ndarray, query: Sequence[float]) -> np.ndarray:
    """행렬의 각 행과 질의 벡터의 코사인 유사도 (-1 ~ 1). 영벡터는 0"""
    query_vector = np.asarray(query, dtype=float)
    if matrix.ndim != 2 or matrix.shape[1] != query_vector.shape[0]:
        raise ValueError(f"Vector dimensions differ: {matrix.shape} vs {query_vector.shape}")
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query_vector)
    dots = matrix @ query_vector
    return np.divide(dots, norms, out=np.zeros_like(dots), where=norms > 0)


def rank(results: List[ScoredSnippet], k: int) -> List[ScoredSnippet]:
    """점수 내림차순 상위 k개. 동점은 저장소 삽입 순서 유지 (안정 정렬)"""
    return sorted(results, key=lambda r: r.score, reverse=True)[:k]


class KeywordRetriever:
    """키워드 매칭 검색기 - 외부 의존성 없음"""

    CONTENT_WEIGHT = 1.0
    METADATA_WEIGHT = 0.5

    def __init__(self, repository: KnowledgeRepository):
        self._repository = repository
        self._index = [
            (
                snippet,
                tokenize(snippet.content),
                tokenize(" ".join((snippet.title, snippet.type) + tuple(snippet.tags))),
            )
            for snippet in repository.all()
        ]

    def score(self, terms: FrozenSet[str], content_terms: FrozenSet[str], meta_terms: FrozenSet[str]) -> float:
        return (
            self.CONTENT_WEIGHT * len(terms & content_terms)
            + self.METADATA_WEIGHT * len(terms & meta_terms)
        )

    async def retrieve(self, query: str, k: int = 5) -> List[ScoredSnippet]:
        validate_query(query, k)
        terms = tokenize(query)
        if not terms or not self._index:
            return []

        results = []
        for snippet, content_terms, meta_terms in self._index:
            score = self.score(terms, content_terms, meta_terms)
            if score > 0:
                results.append(ScoredSnippet(snippet=snippet, score=score))
        return rank(results, k)


class VectorRetriever:
    """임베딩 코사인 유사도 검색기

    스니펫 임베딩은 index() 시 계산하고 JSON 캐시에 저장한다.
    캐시 항목은 내용 해시로 검증하므로 스니펫이 바뀌면 다시 계산된다.
    색인은 저장소 순서대로 쌓은 (스니펫 수 x 차원) numpy 행렬이다.
    """

    def __init__(
        self,
        repository: KnowledgeRepository,
        embeddings: Embeddings,
        cache_file: Optional[Path] = None,
    ):
        self._repository = repository
        self._embeddings = embeddings
        self._cache_file = Path(cache_file) if cache_file else None
        self._snippets: List[KnowledgeSnippet] = []
        self._matrix: Optional[np.ndarray] = None

    @property
    def ready(self) -> bool:
        return self._matrix is not None and len(self._snippets) > 0

    async def index(self) -> int:
        """모든 스니펫 임베딩 준비 - 색인된 스니펫 수 반환"""
        cache = self._load_cache()
        snippets = self._repository.all()
        missing = [s for s in snippets if cache.get(s.id, {}).get("hash") != self._hash(s)]

        if missing:
            logger.info(f"Embedding {len(missing)} snippets (cached: {len(snippets) - len(missing)})")
            try:
                vectors = await self._embeddings.aembed_documents([s.content for s in missing])
            except Exception as e:
                raise RetrievalUnavailableException(f"Embedding backend unavailable: {e}") from e
            for snippet, vector in zip(missing, vectors):
                cache[snippet.id] = {"hash": self._hash(snippet), "embedding": [float(x) for x in vector]}
            self._save_cache(cache)

        indexed = [s for s in snippets if s.id in cache]
        if not indexed:
            self._snippets, self._matrix = [], None
            return 0
        try:
            matrix = np.vstack([np.asarray(cache[s.id]["embedding"], dtype=float) for s in indexed])
        except ValueError as e:
            raise RetrievalUnavailableException(f"Embeddings have inconsistent dimensions: {e}") from e
        self._snippets, self._matrix = indexed, matrix
        logger.info(f"Built vector index with {len(indexed)} vectors (dim={matrix.shape[1]})")
        return len(indexed)

    async def retrieve(self, query: str, k: int = 5) -> List[ScoredSnippet]:
        validate_query(query, k)
        if not self.ready:
            return []

        try:
            query_vector = await self._embeddings.aembed_query(query)
        except Exception as e:
            raise RetrievalUnavailableException(f"Query embedding failed: {e}") from e

        try:
            scores = cosine_scores(self._matrix, query_vector)
        except ValueError as e:
            raise RetrievalUnavailableException(f"Query embedding does not match the index: {e}") from e

        # 안정 정렬이므로 동점은 저장소 순서 유지
        top = np.argsort(-scores, kind="stable")[:k]
        return [ScoredSnippet(snippet=self._snippets[i], score=float(scores[i])) for i in top]

    @staticmethod
    def _hash(snippet: KnowledgeSnippet) -> str:
        return hashlib.sha256(snippet.content.encode("utf-8")).hexdigest()

    def _load_cache(self) -> Dict[str, dict]:
        if not self._cache_file or not self._cache_file.exists():
            return {}
        try:
            return json.loads(self._cache_file.read_text(encoding="utf-8"))
        except ValueError as e:
            logger.warning(f"Ignoring unreadable embedding cache {self._cache_file}: {e}")
            return {}

    def _save_cache(self, cache: Dict[str, dict]) -> None:
        if not self._cache_file:
            return
        try:
            atomic_write_text(self._cache_file, json.dumps(cache))
            logger.info(f"Saved {len(cache)} embeddings to {self._cache_file}")
        except OSError as e:
            logger.warning(f"Failed to save embedding cache: {e}")
