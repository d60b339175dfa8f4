# tests/conftest.py
import logging
from typing import List

import pytest

from persona_chat.chat_session.repository import InMemoryChatSessionRepository
from persona_chat.chat_session.service import ChatSessionService
from persona_chat.chatbot.service import ChatbotService
from persona_chat.chatbot.settings import ChatbotSettings
from persona_chat.knowledge.domains import KnowledgeSnippet
from persona_chat.knowledge.repository import KnowledgeRepository
from persona_chat.knowledge.retriever import KeywordRetriever
from persona_chat.knowledge.service import RetrievalService
from persona_chat.persona.domains import PersonaConfig, QuickResponse
from persona_chat.persona.repository import PersonaRepository
from persona_chat.prompt.assembler import PromptAssembler

from fakes import make_llm_service


@pytest.fixture(scope="session", autouse=True)
def initialize_test_logger():
    """테스트 로거 초기화"""
    logger = logging.getLogger()
    logger.setLevel("INFO")
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        fmt="[%(levelname)5s][%(filename)s:%(lineno)s] %(message)s",
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


# === Domain Object Fixtures ===
@pytest.fixture
def sample_snippets() -> List[KnowledgeSnippet]:
    return [
        KnowledgeSnippet(
            id="project-robot",
            title="Indoor Navigation Robot",
            type="project",
            tags=("ROS2", "Robotics"),
            content="Built an autonomous indoor robot with ROS2 and LiDAR SLAM.",
        ),
        KnowledgeSnippet(
            id="project-copilot",
            title="Clinical Copilot",
            type="project",
            tags=("RAG", "LLM"),
            content="Retrieval-augmented assistant for clinicians built with FastAPI and LLMs.",
        ),
        KnowledgeSnippet(
            id="skill-vision",
            title="Computer Vision",
            type="skill",
            tags=("PyTorch",),
            content="Computer vision with PyTorch and YOLO for real-time detection.",
        ),
        KnowledgeSnippet(
            id="experience-freelance",
            title="Freelance AI Engineer",
            type="experience",
            content="Freelance work delivering LLM and robotics projects for startups.",
        ),
    ]


@pytest.fixture
def sample_persona() -> PersonaConfig:
    return PersonaConfig(
        name="Test Persona",
        instructions="You are a helpful portfolio assistant.",
        acknowledgement="Understood.",
        default_reply="Please try again later.",
        quick_responses=[
            QuickResponse(name="greeting", pattern=r"^\s*(hi|hello)\b", response="Hello from the quick table!"),
            QuickResponse(name="booking", pattern=r"\b(book|call)\b", response="Book a call below."),
        ],
    )


# === Repository Fixtures ===
@pytest.fixture
def knowledge_repository(sample_snippets) -> KnowledgeRepository:
    return KnowledgeRepository(sample_snippets)


@pytest.fixture
def persona_repository(sample_persona) -> PersonaRepository:
    return PersonaRepository(sample_persona)


@pytest.fixture
def chat_session_repository() -> InMemoryChatSessionRepository:
    return InMemoryChatSessionRepository()


# === Service Fixtures ===
@pytest.fixture
def chat_session_service(chat_session_repository) -> ChatSessionService:
    return ChatSessionService(repository=chat_session_repository)


@pytest.fixture
def retrieval_service(knowledge_repository) -> RetrievalService:
    return RetrievalService(
        repository=knowledge_repository,
        keyword_retriever=KeywordRetriever(knowledge_repository),
    )


@pytest.fixture
def chatbot_settings() -> ChatbotSettings:
    return ChatbotSettings(REQUEST_DEADLINE_SECONDS=5.0)


@pytest.fixture
def make_chatbot_service(chat_session_service, retrieval_service, persona_repository, chatbot_settings):
    """스크립트를 받아 ChatbotService와 모델을 만드는 팩토리"""

    def _make(script, keys=("test-key-0001",)):
        llm_service, model = make_llm_service(script, keys=keys)
        service = ChatbotService(
            chat_session_service=chat_session_service,
            retrieval_service=retrieval_service,
            persona_repository=persona_repository,
            prompt_assembler=PromptAssembler(),
            llm_service=llm_service,
            settings=chatbot_settings,
        )
        return service, model

    return _make
