# webapp/dependency.py
from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Request

from webapp.container import PersonaChatContainer


# === 핵심 서비스 의존성만 ===
@inject
def get_chatbot_service(
    service = Depends(Provide[PersonaChatContainer.chatbot_service])
):
    """챗봇 서비스 의존성"""
    return service


@inject
def get_chat_session_service(
    service = Depends(Provide[PersonaChatContainer.chat_session_service])
):
    """채팅 세션 서비스 의존성"""
    return service


# === 요청 정보 ===
def get_client_ip(request: Request) -> str:
    """X-Forwarded-For(첫 번째) → X-Real-IP → 소켓 주소 순서"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client:
        return request.client.host
    return "unknown"


def get_user_agent(request: Request) -> str:
    return request.headers.get("user-agent", "unknown")
