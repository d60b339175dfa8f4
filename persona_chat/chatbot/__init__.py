# persona_chat/chatbot/__init__.py
from .domains import ChatReply, ReplySource
from .service import ChatbotService
from .settings import ChatbotSettings
from .container import create_chatbot_container

__all__ = [
    "ChatReply",
    "ReplySource",
    "ChatbotService",
    "ChatbotSettings",
    "create_chatbot_container",
]
