# persona_chat/chat_session/__init__.py
from .domains import ChatSession, ChatMessage, MessageDraft, SessionPage, SessionSummary
from .service import ChatSessionService
from .container import create_chat_session_container

__all__ = [
    "ChatSession",
    "ChatMessage",
    "MessageDraft",
    "SessionPage",
    "SessionSummary",
    "ChatSessionService",
    "create_chat_session_container",
]
