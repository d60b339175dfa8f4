# persona_chat/chat_session/repository.py
import abc
import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from persona_chat.exceptions import ChatHistoryCorruptedException
from persona_chat.storage import atomic_write_text
from .domains import ChatSession

logger = logging.getLogger(__name__)


class ChatSessionRepository(abc.ABC):
    """채팅 세션 저장소 인터페이스 - 세션과 메시지의 유일한 소유자"""

    @abc.abstractmethod
    async def save(self, session: ChatSession) -> None:
        """세션 저장 (전체 교체)"""

    @abc.abstractmethod
    async def find_by_id(self, session_id: str) -> Optional[ChatSession]:
        """ID로 세션 조회 (복사본)"""

    @abc.abstractmethod
    async def find_all(self) -> List[ChatSession]:
        """모든 세션 조회 (복사본)"""

    @abc.abstractmethod
    async def delete(self, session_id: str) -> bool:
        """세션 삭제 (메시지 포함). 없으면 False"""

    @abc.abstractmethod
    async def delete_where_last_message_before(self, cutoff: datetime) -> int:
        """마지막 메시지가 cutoff보다 이전인 세션 일괄 삭제 - 삭제 수 반환"""

    @abc.abstractmethod
    async def count(self) -> int:
        """세션 수"""


class InMemoryChatSessionRepository(ChatSessionRepository):
    """메모리 저장소 - 테스트 및 기본값"""

    def __init__(self):
        self._sessions: Dict[str, ChatSession] = {}

    async def save(self, session: ChatSession) -> None:
        self._sessions[session.id] = session.copy()

    async def find_by_id(self, session_id: str) -> Optional[ChatSession]:
        session = self._sessions.get(session_id)
        return session.copy() if session else None

    async def find_all(self) -> List[ChatSession]:
        return [session.copy() for session in self._sessions.values()]

    async def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    async def delete_where_last_message_before(self, cutoff: datetime) -> int:
        expired = [sid for sid, s in self._sessions.items() if s.last_message_at < cutoff]
        for session_id in expired:
            del self._sessions[session_id]
        return len(expired)

    async def count(self) -> int:
        return len(self._sessions)


class JsonFileChatSessionRepository(ChatSessionRepository):
    """JSON 파일 저장소 ({"sessions": [...]}, 최근 활동 순)

    쓰기는 임시 파일 + rename으로 원자적으로 처리하고,
    파일 쓰기가 성공한 뒤에만 메모리 상태를 교체한다.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._sessions: Optional[Dict[str, ChatSession]] = None
        self._lock = asyncio.Lock()

    async def save(self, session: ChatSession) -> None:
        async with self._lock:
            sessions = dict(await self._load())
            sessions[session.id] = session.copy()
            await self._commit(sessions)

    async def find_by_id(self, session_id: str) -> Optional[ChatSession]:
        sessions = await self._load()
        session = sessions.get(session_id)
        return session.copy() if session else None

    async def find_all(self) -> List[ChatSession]:
        sessions = await self._load()
        return [session.copy() for session in sessions.values()]

    async def delete(self, session_id: str) -> bool:
        async with self._lock:
            sessions = dict(await self._load())
            if sessions.pop(session_id, None) is None:
                return False
            await self._commit(sessions)
            return True

    async def delete_where_last_message_before(self, cutoff: datetime) -> int:
        async with self._lock:
            current = await self._load()
            sessions = {sid: s for sid, s in current.items() if s.last_message_at >= cutoff}
            deleted = len(current) - len(sessions)
            if deleted:
                await self._commit(sessions)
            return deleted

    async def count(self) -> int:
        return len(await self._load())

    # === 파일 I/O ===
    async def _load(self) -> Dict[str, ChatSession]:
        if self._sessions is None:
            self._sessions = await asyncio.to_thread(self._read_file)
        return self._sessions

    def _read_file(self) -> Dict[str, ChatSession]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            sessions = [ChatSession.from_dict(item) for item in data.get("sessions", [])]
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise ChatHistoryCorruptedException(f"Chat history file {self._path} is unreadable: {e}") from e
        logger.info(f"Loaded {len(sessions)} chat sessions from {self._path}")
        return {session.id: session for session in sessions}

    async def _commit(self, sessions: Dict[str, ChatSession]) -> None:
        await asyncio.to_thread(self._write_file, sessions)
        self._sessions = sessions

    def _write_file(self, sessions: Dict[str, ChatSession]) -> None:
        ordered = sorted(sessions.values(), key=lambda s: s.last_message_at, reverse=True)
        payload = json.dumps({"sessions": [s.to_dict() for s in ordered]}, ensure_ascii=False, indent=2)
        atomic_write_text(self._path, payload)
