# persona_chat/knowledge/container.py
from dependency_injector import containers, providers

from .repository import KnowledgeRepository
from .retriever import KeywordRetriever, VectorRetriever
from .service import RetrievalService, create_embeddings
from .settings import KnowledgeSettings


def _create_vector_retriever(repository, embeddings, settings: KnowledgeSettings):
    if embeddings is None:
        return None
    return VectorRetriever(repository, embeddings, cache_file=settings.EMBEDDING_CACHE_FILE)


class KnowledgeContainer(containers.DeclarativeContainer):
    """Knowledge 모듈 DI Container"""

    # === Settings ===
    settings = providers.Singleton(KnowledgeSettings)

    # === Repository 계층 ===
    repository = providers.Singleton(
        KnowledgeRepository.from_file,
        path=settings.provided.KNOWLEDGE_FILE,
    )

    # === Retriever ===
    embeddings = providers.Singleton(create_embeddings, settings=settings)

    keyword_retriever = providers.Singleton(KeywordRetriever, repository=repository)

    vector_retriever = providers.Singleton(
        _create_vector_retriever,
        repository=repository,
        embeddings=embeddings,
        settings=settings,
    )

    # === Service 계층 ===
    service = providers.Singleton(
        RetrievalService,
        repository=repository,
        keyword_retriever=keyword_retriever,
        vector_retriever=vector_retriever,
    )


def create_knowledge_container() -> KnowledgeContainer:
    return KnowledgeContainer()
