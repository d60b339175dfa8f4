# webapp/container.py
import logging
from typing import Optional

from dependency_injector import containers, providers

# 모듈별 Container import만
from persona_chat.chat_session.container import ChatSessionContainer, create_chat_session_container
from persona_chat.chatbot.container import ChatbotContainer, create_chatbot_container
from persona_chat.knowledge.container import KnowledgeContainer, create_knowledge_container
from persona_chat.llm.container import LLMContainer, create_llm_container
from persona_chat.persona.container import PersonaContainer, create_persona_container
from webapp.settings import AppSettings

logger = logging.getLogger(__name__)


class PersonaChatContainer(containers.DeclarativeContainer):
    """페르소나 챗 애플리케이션 컨테이너"""

    settings = providers.Singleton(AppSettings)

    # === Module Containers ===
    knowledge_container = providers.DependenciesContainer()
    persona_container = providers.DependenciesContainer()
    llm_container = providers.DependenciesContainer()
    chat_session_container = providers.DependenciesContainer()
    chatbot_container = providers.DependenciesContainer()

    # === Service Layer ===
    retrieval_service = providers.Singleton(
        lambda container: container.service(),
        container=knowledge_container,
    )

    llm_provider = providers.Singleton(
        lambda container: container.provider(),
        container=llm_container,
    )

    chat_session_service = providers.Singleton(
        lambda container: container.service(),
        container=chat_session_container,
    )

    chatbot_service = providers.Singleton(
        lambda container: container.service(),
        container=chatbot_container,
    )


def create_container(
    knowledge_container: Optional[KnowledgeContainer] = None,
    persona_container: Optional[PersonaContainer] = None,
    llm_container: Optional[LLMContainer] = None,
    chat_session_container: Optional[ChatSessionContainer] = None,
    chatbot_container: Optional[ChatbotContainer] = None,
) -> PersonaChatContainer:
    """컨테이너 생성 및 초기화 (테스트에서는 모듈 컨테이너를 바꿔 끼울 수 있음)"""
    container = PersonaChatContainer()

    # 모듈별 Container 생성
    knowledge_container = knowledge_container or create_knowledge_container()
    persona_container = persona_container or create_persona_container()
    llm_container = llm_container or create_llm_container()
    chat_session_container = chat_session_container or create_chat_session_container()
    chatbot_container = chatbot_container or create_chatbot_container()

    # Container 간 의존성 주입
    chatbot_container.chat_session_service.override(chat_session_container.service)
    chatbot_container.retrieval_service.override(knowledge_container.service)
    chatbot_container.persona_repository.override(persona_container.repository)
    chatbot_container.llm_service.override(llm_container.service)

    # Container 등록
    container.knowledge_container.override(knowledge_container)
    container.persona_container.override(persona_container)
    container.llm_container.override(llm_container)
    container.chat_session_container.override(chat_session_container)
    container.chatbot_container.override(chatbot_container)

    logger.info("Application container created")
    return container
