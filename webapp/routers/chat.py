# webapp/routers/chat.py
import logging

from fastapi import APIRouter, Depends

from webapp.dependency import get_chatbot_service, get_client_ip, get_user_agent
from webapp.dtos import ChatRequest, ChatResponse, HealthDTO

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/chat",
    response_model=ChatResponse,
    response_model_by_alias=True,
    summary="채팅",
    description="방문자 메시지에 페르소나로 답변하고 세션에 기록합니다.",
)
async def chat(
    request: ChatRequest,
    ip_address: str = Depends(get_client_ip),
    user_agent: str = Depends(get_user_agent),
    chatbot_service = Depends(get_chatbot_service),
) -> ChatResponse:
    """채팅"""
    reply = await chatbot_service.chat(
        message=request.message,
        session_id=request.session_id,
        ip_address=ip_address,
        user_agent=user_agent,
        offline_mode=request.offline_mode,
    )
    return ChatResponse.from_domain(reply)


@router.get(
    "/chat",
    response_model=HealthDTO,
    response_model_by_alias=True,
    summary="헬스체크",
)
async def health(
    chatbot_service = Depends(get_chatbot_service),
) -> HealthDTO:
    """생성 모드, 모델, 키 상태, 검색 상태"""
    return HealthDTO(**chatbot_service.health())
