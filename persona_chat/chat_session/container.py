# persona_chat/chat_session/container.py
from dependency_injector import containers, providers

from .repository import InMemoryChatSessionRepository, JsonFileChatSessionRepository
from .service import ChatSessionService
from .settings import ChatSessionSettings


class ChatSessionContainer(containers.DeclarativeContainer):
    """Chat Session 모듈 DI Container"""

    settings = providers.Singleton(ChatSessionSettings)

    # === Repository 계층 (외부 노출 금지) ===
    repository = providers.Selector(
        settings.provided.SESSION_BACKEND,
        memory=providers.Singleton(InMemoryChatSessionRepository),
        json=providers.Singleton(
            JsonFileChatSessionRepository,
            path=settings.provided.CHAT_HISTORY_FILE,
        ),
    )

    # === Service 계층 (유일한 외부 인터페이스) ===
    service = providers.Singleton(
        ChatSessionService,
        repository=repository,
        max_page_size=settings.provided.MAX_PAGE_SIZE,
    )


def create_chat_session_container() -> ChatSessionContainer:
    """Chat Session Container 생성"""
    return ChatSessionContainer()
