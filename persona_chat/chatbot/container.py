# persona_chat/chatbot/container.py
from dependency_injector import containers, providers

from persona_chat.prompt.assembler import PromptAssembler
from persona_chat.prompt.settings import PromptSettings
from .service import ChatbotService
from .settings import ChatbotSettings


class ChatbotContainer(containers.DeclarativeContainer):
    """Chatbot 모듈 DI Container"""

    # === 외부 의존성 ===
    chat_session_service = providers.Dependency()
    retrieval_service = providers.Dependency()
    persona_repository = providers.Dependency()
    llm_service = providers.Dependency()

    # === Settings ===
    settings = providers.Singleton(ChatbotSettings)
    prompt_settings = providers.Singleton(PromptSettings)

    # === 프롬프트 조립 ===
    prompt_assembler = providers.Singleton(
        PromptAssembler,
        max_history_messages=prompt_settings.provided.MAX_HISTORY_MESSAGES,
        max_prompt_chars=prompt_settings.provided.MAX_PROMPT_CHARS,
    )

    # === Service 계층 ===
    service = providers.Singleton(
        ChatbotService,
        chat_session_service=chat_session_service,
        retrieval_service=retrieval_service,
        persona_repository=persona_repository,
        prompt_assembler=prompt_assembler,
        llm_service=llm_service,
        settings=settings,
    )


def create_chatbot_container() -> ChatbotContainer:
    """Chatbot Container 생성"""
    return ChatbotContainer()
