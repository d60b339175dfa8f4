# webapp/routers/admin.py
import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, Query

from persona_chat.exceptions import InvalidRequestException
from webapp.dependency import get_chat_session_service
from webapp.dtos import DeleteResultDTO, SessionDetailDTO, SessionDTO, SessionListDTO

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/chat-history",
    response_model=Union[SessionDetailDTO, SessionListDTO],
    response_model_by_alias=True,
    summary="채팅 기록 조회",
    description="sessionId가 있으면 세션 상세, 없으면 최근 활동 순 세션 목록을 돌려줍니다.",
)
async def get_chat_history(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    page: int = Query(1),
    limit: int = Query(20),
    chat_session_service = Depends(get_chat_session_service),
) -> Union[SessionDetailDTO, SessionListDTO]:
    """채팅 기록 조회"""
    if session_id:
        session = await chat_session_service.get_session(session_id)
        return SessionDetailDTO(session=SessionDTO.from_domain(session))

    result = await chat_session_service.list_sessions(page=page, page_size=limit)
    return SessionListDTO.from_domain(result)


@router.delete(
    "/chat-history",
    response_model=DeleteResultDTO,
    response_model_by_alias=True,
    summary="채팅 기록 삭제",
    description="sessionId로 세션 하나, olderThanDays로 오래된 세션을 일괄 삭제합니다.",
)
async def delete_chat_history(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    older_than_days: Optional[int] = Query(None, alias="olderThanDays"),
    chat_session_service = Depends(get_chat_session_service),
) -> DeleteResultDTO:
    """채팅 기록 삭제"""
    if session_id:
        await chat_session_service.delete_session(session_id)
        deleted = 1
    elif older_than_days is not None:
        deleted = await chat_session_service.delete_sessions_older_than(older_than_days)
    else:
        raise InvalidRequestException("Either sessionId or olderThanDays is required")

    remaining = await chat_session_service.count_sessions()
    logger.info(f"Admin delete - deleted: {deleted}, remaining: {remaining}")
    return DeleteResultDTO(deleted_count=deleted, remaining_count=remaining)
