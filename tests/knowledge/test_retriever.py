# tests/knowledge/test_retriever.py
import json

import numpy as np
import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding, Embeddings

from persona_chat.exceptions import InvalidRequestException, RetrievalUnavailableException
from persona_chat.knowledge.domains import KnowledgeSnippet
from persona_chat.knowledge.repository import KnowledgeRepository
from persona_chat.knowledge.retriever import (
    MAX_TOP_K,
    KeywordRetriever,
    VectorRetriever,
    cosine_scores,
    tokenize,
)


class FailingEmbeddings(DeterministicFakeEmbedding):
    async def aembed_documents(self, texts):
        raise ConnectionError("embedding backend down")


class ConstantEmbeddings(Embeddings):
    """모든 텍스트를 같은 벡터로 임베딩"""

    def __init__(self, vector):
        self.vector = list(vector)

    def embed_documents(self, texts):
        return [list(self.vector) for _ in texts]

    def embed_query(self, text):
        return list(self.vector)


class TestTokenize:
    """토큰화 테스트"""

    def test_drops_stop_words_and_short_tokens(self):
        assert tokenize("What is a robot?") == frozenset({"robot"})

    def test_normalizes_plurals(self):
        assert tokenize("projects") == tokenize("project")
        assert "class" in tokenize("class")


class TestCosineScores:

    def test_scores_every_row(self):
        matrix = np.array([[1.0, 2.0], [-1.0, -2.0], [2.0, -1.0]])

        scores = cosine_scores(matrix, [1.0, 2.0])

        assert scores.tolist() == pytest.approx([1.0, -1.0, 0.0])

    def test_zero_vectors_score_zero(self):
        matrix = np.array([[0.0, 0.0], [1.0, 0.0]])

        assert cosine_scores(matrix, [1.0, 0.0]).tolist() == pytest.approx([0.0, 1.0])
        assert cosine_scores(matrix, [0.0, 0.0]).tolist() == [0.0, 0.0]

    def test_dimension_mismatch(self):
        with pytest.raises(ValueError):
            cosine_scores(np.array([[1.0]]), [1.0, 2.0])


class TestKeywordRetriever:
    """키워드 검색 테스트"""

    async def test_results_bounded_and_sorted(self, knowledge_repository):
        # given
        retriever = KeywordRetriever(knowledge_repository)

        # when
        results = await retriever.retrieve("robotics LLM projects PyTorch", k=2)

        # then
        assert len(results) <= 2
        scores = [result.score for result in results]
        assert scores == sorted(scores, reverse=True)

    async def test_content_match_ranks_first(self, knowledge_repository):
        retriever = KeywordRetriever(knowledge_repository)

        results = await retriever.retrieve("ROS2 robot", k=3)

        assert results[0].snippet.id == "project-robot"

    async def test_deterministic(self, knowledge_repository):
        retriever = KeywordRetriever(knowledge_repository)

        first = await retriever.retrieve("LLM projects", k=5)
        second = await retriever.retrieve("LLM projects", k=5)

        assert [r.snippet.id for r in first] == [r.snippet.id for r in second]

    async def test_ties_keep_insertion_order(self):
        snippets = [
            KnowledgeSnippet(id=f"s{i}", title=f"Snippet {i}", content="python developer")
            for i in range(3)
        ]
        retriever = KeywordRetriever(KnowledgeRepository(snippets))

        results = await retriever.retrieve("python", k=3)

        assert [r.snippet.id for r in results] == ["s0", "s1", "s2"]

    async def test_no_matches(self, knowledge_repository):
        retriever = KeywordRetriever(knowledge_repository)

        assert await retriever.retrieve("quantum chemistry", k=5) == []

    async def test_empty_store(self):
        retriever = KeywordRetriever(KnowledgeRepository())

        assert await retriever.retrieve("anything", k=5) == []

    @pytest.mark.parametrize("query, k", [("", 5), ("   ", 5), ("robot", 0), ("robot", MAX_TOP_K + 1)])
    async def test_invalid_input(self, knowledge_repository, query, k):
        retriever = KeywordRetriever(knowledge_repository)

        with pytest.raises(InvalidRequestException):
            await retriever.retrieve(query, k=k)


class TestVectorRetriever:
    """벡터 검색 테스트"""

    async def test_index_and_retrieve(self, knowledge_repository, tmp_path):
        # given
        retriever = VectorRetriever(
            knowledge_repository,
            DeterministicFakeEmbedding(size=16),
            cache_file=tmp_path / "cache.json",
        )

        # when
        indexed = await retriever.index()
        results = await retriever.retrieve("ROS2 robot", k=3)

        # then
        assert indexed == knowledge_repository.count()
        assert retriever.ready
        assert len(results) == 3
        scores = [result.score for result in results]
        assert scores == sorted(scores, reverse=True)
        assert all(-1.0 <= score <= 1.0 for score in scores)

    async def test_exact_content_scores_highest(self, knowledge_repository, tmp_path):
        retriever = VectorRetriever(knowledge_repository, DeterministicFakeEmbedding(size=16))
        await retriever.index()
        target = knowledge_repository.get("skill-vision")

        results = await retriever.retrieve(target.content, k=1)

        assert results[0].snippet.id == "skill-vision"
        assert results[0].score == pytest.approx(1.0)

    async def test_cache_is_reused(self, knowledge_repository, tmp_path):
        cache_file = tmp_path / "cache.json"
        await VectorRetriever(knowledge_repository, DeterministicFakeEmbedding(size=16), cache_file).index()

        # 캐시가 있으면 임베딩 API를 호출하지 않는다
        retriever = VectorRetriever(knowledge_repository, FailingEmbeddings(size=16), cache_file)
        indexed = await retriever.index()

        assert cache_file.exists()
        assert indexed == knowledge_repository.count()

    async def test_index_failure(self, knowledge_repository):
        retriever = VectorRetriever(knowledge_repository, FailingEmbeddings(size=16))

        with pytest.raises(RetrievalUnavailableException):
            await retriever.index()
        assert not retriever.ready

    async def test_not_indexed_returns_empty(self, knowledge_repository):
        retriever = VectorRetriever(knowledge_repository, DeterministicFakeEmbedding(size=16))

        assert await retriever.retrieve("robot", k=3) == []

    async def test_ties_keep_insertion_order(self):
        snippets = [KnowledgeSnippet(id=f"s{i}", title=f"Snippet {i}", content=f"text {i}") for i in range(4)]
        retriever = VectorRetriever(KnowledgeRepository(snippets), ConstantEmbeddings([0.6, 0.8]))
        await retriever.index()

        results = await retriever.retrieve("anything", k=3)

        assert [r.snippet.id for r in results] == ["s0", "s1", "s2"]
        assert all(r.score == pytest.approx(1.0) for r in results)

    async def test_query_dimension_mismatch(self, knowledge_repository):
        retriever = VectorRetriever(knowledge_repository, DeterministicFakeEmbedding(size=16))
        await retriever.index()
        retriever._embeddings = DeterministicFakeEmbedding(size=8)

        with pytest.raises(RetrievalUnavailableException):
            await retriever.retrieve("robot", k=3)

    async def test_cache_written_atomically(self, knowledge_repository, tmp_path):
        cache_file = tmp_path / "cache" / "embeddings.json"

        await VectorRetriever(knowledge_repository, DeterministicFakeEmbedding(size=16), cache_file).index()

        cache = json.loads(cache_file.read_text(encoding="utf-8"))
        assert set(cache) == {s.id for s in knowledge_repository.all()}
        assert [p.name for p in cache_file.parent.iterdir()] == ["embeddings.json"]
