# persona_chat/chatbot/service.py
import logging
from typing import List, Optional, Sequence, Tuple

from persona_chat.chat_session.domains import ChatMessage, ChatSession, MessageDraft
from persona_chat.chat_session.service import ChatSessionService
from persona_chat.exceptions import (
    ChatbotServiceException,
    GenerationException,
    InvalidRequestException,
    RetrievalUnavailableException,
    SessionNotFoundException,
)
from persona_chat.knowledge.domains import KnowledgeSnippet
from persona_chat.knowledge.service import RetrievalService
from persona_chat.llm.service import LLMService
from persona_chat.persona.domains import PersonaConfig
from persona_chat.persona.repository import PersonaRepository
from persona_chat.prompt.assembler import PromptAssembler
from .domains import ChatReply, ReplySource
from .settings import ChatbotSettings

logger = logging.getLogger(__name__)

FALLBACK_INTRO = "I can't reach my language model right now, but here is what I found in my knowledge base:"


class ChatbotService:
    """채팅 한 턴 처리 - 검색, 프롬프트 조립, 생성, 대체 답변, 저장

    세션/지식/페르소나/LLM 서비스를 조합할 뿐 직접 상태를 갖지 않는다.
    재시도는 LLMService에 맡긴다.
    """

    def __init__(
        self,
        chat_session_service: ChatSessionService,
        retrieval_service: RetrievalService,
        persona_repository: PersonaRepository,
        prompt_assembler: PromptAssembler,
        llm_service: LLMService,
        settings: ChatbotSettings,
    ):
        self._session_service = chat_session_service
        self._retrieval_service = retrieval_service
        self._persona_repository = persona_repository
        self._prompt_assembler = prompt_assembler
        self._llm_service = llm_service
        self._settings = settings

    # === 핵심 채팅 처리 ===
    async def chat(
        self,
        message: str,
        session_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        offline_mode: bool = False,
    ) -> ChatReply:
        """사용자 메시지 하나에 대한 답변 생성 후 세션에 기록

        새 세션은 답변이 준비된 뒤 메시지와 함께 만든다.
        생성 요청이 거절되면 아무것도 저장하지 않는다.
        """
        message = self._validate_message(message)
        session = await self._find_session(session_id)
        logger.info(f"Chat request - session_id: {session.id if session else 'new'}, offline: {offline_mode}")

        snippets = await self._retrieve_context(message)
        persona = self._persona_repository.get_persona()
        history = session.messages if session else []

        if offline_mode:
            reply, source = self._fallback_reply(persona, message, snippets)
        else:
            reply, source = await self._generate_reply(persona, history, snippets, message)

        drafts = [
            MessageDraft(role="user", content=message),
            MessageDraft(role="assistant", content=reply, source=source.value),
        ]
        stored_session_id = await self._store_exchange(session, drafts, ip_address, user_agent)
        logger.info(f"Chat reply stored - session_id: {stored_session_id}, source: {source.value}")

        return ChatReply(
            session_id=stored_session_id,
            reply=reply,
            source=source,
            rag_used=source == ReplySource.RAG,
        )

    def health(self) -> dict:
        """헬스체크 - 생성 가능 여부와 검색 상태"""
        llm = self._llm_service.health()
        return {
            "status": "ok",
            "mode": "llm" if llm["configured"] else "fallback",
            "model": llm["model"],
            "api_keys": llm["api_keys"],
            "retrieval": self._retrieval_service.status(),
        }

    # === 내부 단계 ===
    def _validate_message(self, message: str) -> str:
        if message is None or not message.strip():
            raise InvalidRequestException("Message must not be empty")
        if len(message) > self._settings.MAX_MESSAGE_LENGTH:
            raise InvalidRequestException(
                f"Message must be at most {self._settings.MAX_MESSAGE_LENGTH} characters"
            )
        return message.strip()

    async def _find_session(self, session_id: Optional[str]) -> Optional[ChatSession]:
        if not session_id:
            return None
        try:
            return await self._session_service.get_session(session_id)
        except SessionNotFoundException:
            logger.info(f"Unknown session {session_id}, starting a new one")
            return None

    async def _store_exchange(
        self,
        session: Optional[ChatSession],
        drafts: Sequence[MessageDraft],
        ip_address: Optional[str],
        user_agent: Optional[str],
    ) -> str:
        """메시지 쌍 저장 - 저장된 세션 ID 반환"""
        if session is not None:
            try:
                await self._session_service.append_messages(session.id, drafts)
                return session.id
            except SessionNotFoundException:
                logger.warning(f"Session {session.id} was deleted during the request, starting a new one")

        created = await self._session_service.create_session(
            ip_address=ip_address, user_agent=user_agent, drafts=drafts
        )
        return created.id

    async def _retrieve_context(self, message: str) -> List[KnowledgeSnippet]:
        try:
            results = await self._retrieval_service.retrieve(message, self._settings.RAG_TOP_K)
        except RetrievalUnavailableException as e:
            logger.warning(f"Retrieval unavailable, continuing without context: {e.message}")
            return []
        return [result.snippet for result in results]

    async def _generate_reply(
        self,
        persona: PersonaConfig,
        history: Sequence[ChatMessage],
        snippets: List[KnowledgeSnippet],
        message: str,
    ) -> Tuple[str, ReplySource]:
        prompt = self._prompt_assembler.assemble(persona, snippets, history, message)
        try:
            reply = await self._llm_service.generate(prompt, deadline=self._settings.REQUEST_DEADLINE_SECONDS)
        except GenerationException as e:
            if not e.retryable:
                logger.error(f"Generation request rejected: {e.message}")
                raise ChatbotServiceException("The language model rejected the request") from e
            logger.warning(f"Generation failed ({e.__class__.__name__}), using fallback reply")
            return self._fallback_reply(persona, message, snippets)

        source = ReplySource.RAG if prompt.context else ReplySource.LLM
        return reply, source

    def _fallback_reply(
        self, persona: PersonaConfig, message: str, snippets: Sequence[KnowledgeSnippet]
    ) -> Tuple[str, ReplySource]:
        """빠른 답변 → 지식 발췌 → 기본 답변 순서"""
        quick_response = persona.match_quick_response(message)
        if quick_response:
            logger.info(f"Fallback: quick response '{quick_response.name}'")
            return quick_response.response, ReplySource.QUICK_RESPONSE

        if snippets:
            logger.info(f"Fallback: knowledge excerpt from {min(len(snippets), self._settings.FALLBACK_TOP_K)} snippets")
            return self._knowledge_excerpt(snippets), ReplySource.KNOWLEDGE_FALLBACK

        logger.info("Fallback: default reply")
        return persona.default_reply, ReplySource.ERROR

    def _knowledge_excerpt(self, snippets: Sequence[KnowledgeSnippet]) -> str:
        limit = self._settings.FALLBACK_EXCERPT_CHARS
        blocks = []
        for snippet in snippets[:self._settings.FALLBACK_TOP_K]:
            content = snippet.content.strip()
            if len(content) > limit:
                content = content[:limit] + "..."
            blocks.append(f"**{snippet.title}**\n{content}")
        return FALLBACK_INTRO + "\n\n" + "\n\n---\n\n".join(blocks)
