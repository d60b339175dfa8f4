# persona_chat/chat_session/service.py
import asyncio
import contextlib
import logging
import weakref
from datetime import timedelta
from typing import List, Optional, Sequence

from persona_chat.exceptions import InvalidRequestException, SessionNotFoundException
from .domains import MESSAGE_ROLES, ChatMessage, ChatSession, MessageDraft, SessionPage, utcnow
from .repository import ChatSessionRepository

logger = logging.getLogger(__name__)


class ChatSessionService:
    """채팅 세션 관리 서비스 - 세션/메시지 생명주기 전담

    같은 세션에 대한 쓰기는 세션별 락으로 직렬화하고,
    서로 다른 세션은 동시에 처리된다.
    """

    def __init__(self, repository: ChatSessionRepository, max_page_size: int = 100):
        self._repository = repository
        self._max_page_size = max_page_size
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    # === 세션 생명주기 관리 ===
    async def create_session(
        self,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        drafts: Sequence[MessageDraft] = (),
    ) -> ChatSession:
        """새 채팅 세션 시작. drafts가 있으면 첫 메시지와 함께 한 번에 저장"""
        self._validate_drafts(drafts, allow_empty=True)
        session = ChatSession.new(ip_address=ip_address, user_agent=user_agent)
        if drafts:
            session = session.with_messages(drafts, utcnow())
        await asyncio.shield(self._repository.save(session))
        logger.info(f"New session started: {session.id} ({session.message_count} messages)")
        return session

    async def get_session(self, session_id: str) -> ChatSession:
        """세션 조회 (메시지 포함)"""
        session = await self._repository.find_by_id(session_id)
        if not session:
            raise SessionNotFoundException(f"Session {session_id} not found")
        return session

    async def delete_session(self, session_id: str) -> None:
        """세션과 모든 메시지 삭제. 없는 세션이면 매번 SessionNotFoundException"""
        async with self._lock_for(session_id):
            deleted = await asyncio.shield(self._repository.delete(session_id))
        if not deleted:
            raise SessionNotFoundException(f"Session {session_id} not found")
        logger.info(f"Session deleted: {session_id}")

    async def delete_sessions_older_than(self, days: int) -> int:
        """마지막 활동이 days일 이전인 세션 일괄 삭제

        만료 후보 세션의 락을 모두 잡은 뒤 삭제하므로 진행 중인 추가가 끝난 세션은
        다시 판단된다 (새 메시지가 들어왔으면 남는다).
        """
        if days < 0:
            raise InvalidRequestException("olderThanDays must be zero or positive")
        cutoff = utcnow() - timedelta(days=days)
        candidates = sorted(s.id for s in await self._repository.find_all() if s.last_message_at < cutoff)

        async with contextlib.AsyncExitStack() as stack:
            for session_id in candidates:
                await stack.enter_async_context(self._lock_for(session_id))
            deleted = await asyncio.shield(self._repository.delete_where_last_message_before(cutoff))

        logger.info(f"Deleted {deleted} sessions inactive since {cutoff.isoformat()}")
        return deleted

    async def count_sessions(self) -> int:
        return await self._repository.count()

    # === 메시지 관리 ===
    async def append_message(
        self, session_id: str, role: str, content: str, source: Optional[str] = None
    ) -> ChatMessage:
        """메시지 하나 추가"""
        messages = await self.append_messages(session_id, [MessageDraft(role=role, content=content, source=source)])
        return messages[0]

    async def append_messages(self, session_id: str, drafts: Sequence[MessageDraft]) -> List[ChatMessage]:
        """여러 메시지를 한 번에 추가 - 전부 저장되거나 하나도 저장되지 않음"""
        self._validate_drafts(drafts)

        async with self._lock_for(session_id):
            session = await self.get_session(session_id)
            updated = session.with_messages(drafts, utcnow())
            # 호출자가 취소되어도 저장은 끝까지 진행
            await asyncio.shield(self._repository.save(updated))

        return updated.messages[-len(drafts):]

    @staticmethod
    def _validate_drafts(drafts: Sequence[MessageDraft], allow_empty: bool = False) -> None:
        if not drafts and not allow_empty:
            raise InvalidRequestException("At least one message is required")
        for draft in drafts:
            if draft.role not in MESSAGE_ROLES:
                raise InvalidRequestException(f"Invalid message role: {draft.role}")

    async def get_messages(self, session_id: str) -> List[ChatMessage]:
        """세션의 메시지 목록 (대화 순서)"""
        session = await self.get_session(session_id)
        return session.messages

    # === 관리자 조회 ===
    async def list_sessions(self, page: int = 1, page_size: int = 20) -> SessionPage:
        """최근 활동 순 세션 요약 목록"""
        if page < 1:
            raise InvalidRequestException("page must be 1 or greater")
        if not 1 <= page_size <= self._max_page_size:
            raise InvalidRequestException(f"limit must be between 1 and {self._max_page_size}")

        sessions = await self._repository.find_all()
        sessions.sort(key=lambda s: s.last_message_at, reverse=True)

        start = (page - 1) * page_size
        summaries = [session.summary() for session in sessions[start:start + page_size]]
        return SessionPage(sessions=summaries, total=len(sessions), page=page, page_size=page_size)
