# webapp/dtos.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from persona_chat.chat_session.domains import ChatMessage, ChatSession, SessionPage, SessionSummary
from persona_chat.chatbot.domains import ChatReply


class CamelModel(BaseModel):
    """FastAPI의 모든 Request, Response 모델에 CamelCase를 적용"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ===== 채팅 관련 DTO =====
class ChatRequest(CamelModel):
    """채팅 요청 DTO

    메시지 내용 검증(빈 값, 길이)은 ChatbotService가 400으로 처리한다.
    """
    message: str = Field(description="사용자 메시지", examples=["What projects have you built?"])
    session_id: Optional[str] = Field(None, description="이전 응답의 세션 ID", examples=["session-3f2a..."])
    offline_mode: bool = Field(False, description="생성 API를 건너뛰고 대체 답변만 사용")


class ChatResponse(CamelModel):
    """채팅 응답 DTO"""
    session_id: str = Field(description="세션 ID")
    reply: str = Field(description="답변")
    source: str = Field(description="답변 출처", examples=["rag"])
    rag: bool = Field(description="검색 컨텍스트로 생성했는지 여부")

    @staticmethod
    def from_domain(reply: ChatReply) -> "ChatResponse":
        return ChatResponse(
            session_id=reply.session_id,
            reply=reply.reply,
            source=reply.source.value,
            rag=reply.rag_used,
        )


class HealthDTO(CamelModel):
    """헬스체크 DTO"""
    status: str = Field(description="서비스 상태", examples=["ok"])
    mode: str = Field(description="llm 또는 fallback")
    model: str = Field(description="설정된 모델 이름")
    api_keys: List[Dict[str, Any]] = Field(default_factory=list, description="API 키 상태 (마스킹)")
    retrieval: Dict[str, Any] = Field(default_factory=dict, description="검색 상태")


# ===== 세션 관련 DTO =====
class MessageDTO(CamelModel):
    """메시지 DTO"""
    id: str
    role: str
    content: str
    timestamp: datetime
    source: Optional[str] = None

    @staticmethod
    def from_domain(message: ChatMessage) -> "MessageDTO":
        return MessageDTO(
            id=message.id,
            role=message.role,
            content=message.content,
            timestamp=message.timestamp,
            source=message.source,
        )


class SessionSummaryDTO(CamelModel):
    """세션 요약 DTO"""
    id: str
    started_at: datetime
    last_message_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    message_count: int = Field(ge=0)
    preview: str

    @staticmethod
    def from_domain(summary: SessionSummary) -> "SessionSummaryDTO":
        return SessionSummaryDTO(
            id=summary.id,
            started_at=summary.started_at,
            last_message_at=summary.last_message_at,
            ip_address=summary.ip_address,
            user_agent=summary.user_agent,
            message_count=summary.message_count,
            preview=summary.preview,
        )


class SessionDTO(CamelModel):
    """세션 상세 DTO (메시지 포함)"""
    id: str
    started_at: datetime
    last_message_at: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    message_count: int = Field(ge=0)
    messages: List[MessageDTO] = Field(default_factory=list)

    @staticmethod
    def from_domain(session: ChatSession) -> "SessionDTO":
        return SessionDTO(
            id=session.id,
            started_at=session.started_at,
            last_message_at=session.last_message_at,
            ip_address=session.ip_address,
            user_agent=session.user_agent,
            message_count=session.message_count,
            messages=[MessageDTO.from_domain(message) for message in session.messages],
        )


class SessionDetailDTO(CamelModel):
    """관리자 세션 상세 응답"""
    session: SessionDTO


class SessionListDTO(CamelModel):
    """관리자 세션 목록 응답"""
    sessions: List[SessionSummaryDTO] = Field(default_factory=list)
    total: int = Field(ge=0)
    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total_pages: int = Field(ge=0)

    @staticmethod
    def from_domain(page: SessionPage) -> "SessionListDTO":
        return SessionListDTO(
            sessions=[SessionSummaryDTO.from_domain(summary) for summary in page.sessions],
            total=page.total,
            page=page.page,
            limit=page.page_size,
            total_pages=page.total_pages,
        )


class DeleteResultDTO(CamelModel):
    """삭제 결과 DTO"""
    success: bool = True
    deleted_count: int = Field(ge=0)
    remaining_count: int = Field(ge=0)
