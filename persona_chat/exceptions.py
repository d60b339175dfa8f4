# persona_chat/exceptions.py
from typing import Optional


class PersonaChatException(Exception):
    """기본 예외 클래스"""
    def __init__(self, message):
        super().__init__(message)
        self.message = message


# 클라이언트 측 예외 (4xx)
class ClientException(PersonaChatException):
    """클라이언트 측 오류"""

class InvalidRequestException(ClientException):
    """클라이언트로부터 잘못된 요청이 왔을 때 (빈 메시지, 너무 긴 메시지, 잘못된 페이지 등)"""

class NotFoundException(ClientException):
    """요청한 데이터를 찾지 못했을 때"""

class SessionNotFoundException(NotFoundException):
    """세션을 찾을 수 없을 때"""


# 서버 측 오류 (5xx)
class ServerException(PersonaChatException):
    """서버 측 오류"""

class KnowledgeLoadException(ServerException):
    """지식 베이스 파일을 읽을 수 없을 때"""

class ChatHistoryCorruptedException(ServerException):
    """채팅 기록 파일을 해석할 수 없을 때"""

class RetrievalUnavailableException(ServerException):
    """지식 저장소/벡터 백엔드에 접근할 수 없을 때"""

class ChatbotServiceException(ServerException):
    """챗봇 서비스 오류"""


# 생성 API 오류
class GenerationException(ServerException):
    """외부 생성 API 호출 실패의 공통 부모"""
    retryable = True

class RateLimitedException(GenerationException):
    """429 / 할당량 초과"""
    def __init__(self, message, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after

class GenerationTimeoutException(GenerationException):
    """요청 타임아웃 또는 데드라인 초과"""

class GenerationUnavailableException(GenerationException):
    """네트워크 오류, 5xx, 빈 응답"""

class InvalidGenerationRequestException(GenerationException):
    """인증 실패, 잘못된 요청 - 재시도 불가"""
    retryable = False
