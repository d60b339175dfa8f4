# persona_chat/chatbot/domains.py
from dataclasses import dataclass
from enum import Enum


class ReplySource(str, Enum):
    """답변 출처"""
    RAG = "rag"
    LLM = "llm"
    QUICK_RESPONSE = "quick-response"
    KNOWLEDGE_FALLBACK = "knowledge-fallback"
    ERROR = "error"


@dataclass(frozen=True)
class ChatReply:
    """채팅 한 턴의 결과"""
    session_id: str
    reply: str
    source: ReplySource
    rag_used: bool = False
