# persona_chat/chat_session/domains.py
import math
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Literal, Optional, Sequence

MessageRole = Literal["user", "assistant"]
MESSAGE_ROLES = ("user", "assistant")
PREVIEW_LENGTH = 100


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class MessageDraft:
    """저장 전 메시지 (id, timestamp는 저장소가 부여)"""
    role: MessageRole
    content: str
    source: Optional[str] = None


@dataclass(frozen=True)
class ChatMessage:
    """채팅 메시지 - 한 번 생성되면 변경되지 않음"""
    id: str
    role: MessageRole
    content: str
    timestamp: datetime
    source: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.source:
            data["source"] = self.source
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ChatMessage":
        return ChatMessage(
            id=data["id"],
            role=data["role"],
            content=data["content"],
            timestamp=_parse_datetime(data["timestamp"]),
            source=data.get("source"),
        )


@dataclass(frozen=True)
class SessionSummary:
    """관리자 목록용 세션 요약 (메시지 본문 제외)"""
    id: str
    started_at: datetime
    last_message_at: datetime
    ip_address: Optional[str]
    user_agent: Optional[str]
    message_count: int
    preview: str


@dataclass
class ChatSession:
    """방문자 한 명과의 대화"""
    id: str
    started_at: datetime
    last_message_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    messages: List[ChatMessage] = field(default_factory=list)

    @property
    def message_count(self) -> int:
        return len(self.messages)

    @staticmethod
    def new(ip_address: Optional[str] = None, user_agent: Optional[str] = None) -> "ChatSession":
        """새 세션 생성"""
        now = utcnow()
        return ChatSession(
            id=f"session-{uuid.uuid4().hex}",
            started_at=now,
            last_message_at=now,
            ip_address=ip_address,
            user_agent=user_agent,
        )

    def copy(self) -> "ChatSession":
        # 메시지는 불변이므로 리스트만 복사
        return replace(self, messages=list(self.messages))

    def with_messages(self, drafts: Sequence[MessageDraft], now: datetime) -> "ChatSession":
        """메시지를 덧붙인 새 세션 반환. 세션 내 timestamp는 항상 증가"""
        messages = list(self.messages)
        floor = messages[-1].timestamp if messages else None
        for draft in drafts:
            timestamp = now if floor is None or now > floor else floor + timedelta(microseconds=1)
            messages.append(ChatMessage(
                id=uuid.uuid4().hex,
                role=draft.role,
                content=draft.content,
                timestamp=timestamp,
                source=draft.source,
            ))
            floor = timestamp
        last_message_at = max(self.last_message_at, floor) if floor else self.last_message_at
        return replace(self, messages=messages, last_message_at=last_message_at)

    def summary(self) -> SessionSummary:
        if self.messages:
            preview = self.messages[-1].content[:PREVIEW_LENGTH]
        else:
            preview = "No messages"
        return SessionSummary(
            id=self.id,
            started_at=self.started_at,
            last_message_at=self.last_message_at,
            ip_address=self.ip_address,
            user_agent=self.user_agent,
            message_count=self.message_count,
            preview=preview,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "startedAt": self.started_at.isoformat(),
            "lastMessageAt": self.last_message_at.isoformat(),
            "userAgent": self.user_agent,
            "ipAddress": self.ip_address,
            "messageCount": self.message_count,
            "messages": [message.to_dict() for message in self.messages],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "ChatSession":
        return ChatSession(
            id=data["id"],
            started_at=_parse_datetime(data["startedAt"]),
            last_message_at=_parse_datetime(data["lastMessageAt"]),
            ip_address=data.get("ipAddress"),
            user_agent=data.get("userAgent"),
            messages=[ChatMessage.from_dict(item) for item in data.get("messages", [])],
        )


@dataclass(frozen=True)
class SessionPage:
    """세션 목록 한 페이지"""
    sessions: List[SessionSummary]
    total: int
    page: int
    page_size: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size) if self.page_size else 0
