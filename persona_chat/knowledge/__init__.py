# persona_chat/knowledge/__init__.py
from .domains import KnowledgeSnippet, ScoredSnippet
from .repository import KnowledgeRepository
from .retriever import KeywordRetriever, VectorRetriever
from .service import RetrievalService
from .container import create_knowledge_container

__all__ = [
    "KnowledgeSnippet",
    "ScoredSnippet",
    "KnowledgeRepository",
    "KeywordRetriever",
    "VectorRetriever",
    "RetrievalService",
    "create_knowledge_container",
]
