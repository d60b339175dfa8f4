# webapp/main.py
import logging
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from persona_chat.exceptions import (
    ClientException,
    GenerationException,
    NotFoundException,
    PersonaChatException,
    ServerException,
)
from persona_chat.logger import setup_logging
from webapp.container import PersonaChatContainer, create_container
from webapp.routers import admin, chat

logger = logging.getLogger(__name__)


def _setup_lifespan(container: PersonaChatContainer):
    """애플리케이션 생명주기 설정"""
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Setting up Persona Chat application")
        app.container = container
        await container.retrieval_service().initialize()
        yield
        logger.info("Tearing down Persona Chat application")
        await container.llm_provider().aclose()
    return lifespan


def _create_fastapi_app(lifespan_manager) -> FastAPI:
    """FastAPI 앱 인스턴스 생성"""
    return FastAPI(
        title="Persona Chat API",
        description="A retrieval-augmented portfolio assistant that answers as the site owner.",
        version="1.0.0",
        openapi_url="/api/openapi.json",
        docs_url="/api/docs",
        lifespan=lifespan_manager,
        generate_unique_id_function=lambda route: route.name,
    )


def _setup_container_and_wiring(container: Optional[PersonaChatContainer]) -> PersonaChatContainer:
    """DI 컨테이너 설정 및 와이어링"""
    container = container or create_container()
    container.wire(modules=["webapp.dependency", "webapp.routers.chat", "webapp.routers.admin"])
    return container


def get_trace_id() -> str:
    """trace ID 생성"""
    return str(uuid.uuid4())[:8]


def _error_response(status_code: int, message, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "message": message,
            "code": code,
            "trace_id": get_trace_id(),
        },
    )


def _validation_errors(exc: RequestValidationError) -> list:
    # ctx에 예외 객체가 들어있을 수 있어 JSON으로 바로 못 보냄
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", ""), "type": error.get("type", "")}
        for error in exc.errors()
    ]


def _setup_exception_handlers(app: FastAPI) -> None:
    """예외 → HTTP 상태 코드 매핑"""

    @app.exception_handler(NotFoundException)
    async def not_found_exception_handler(request: Request, exc: NotFoundException):
        logger.warning(f"Not found: {exc.message}")
        return _error_response(404, exc.message, exc.__class__.__name__)

    @app.exception_handler(ClientException)
    async def client_exception_handler(request: Request, exc: ClientException):
        logger.warning(f"Client exception: {exc.message}")
        return _error_response(400, exc.message, exc.__class__.__name__)

    @app.exception_handler(GenerationException)
    async def generation_exception_handler(request: Request, exc: GenerationException):
        logger.error(f"Generation exception: {exc.message}")
        return _error_response(503, exc.message, exc.__class__.__name__)

    @app.exception_handler(ServerException)
    async def server_exception_handler(request: Request, exc: ServerException):
        logger.error(f"Server exception: {exc.message}", exc_info=True)
        return _error_response(500, exc.message, exc.__class__.__name__)

    @app.exception_handler(PersonaChatException)
    async def persona_chat_exception_handler(request: Request, exc: PersonaChatException):
        logger.error(f"Unhandled application exception: {exc.message}", exc_info=True)
        return _error_response(500, exc.message, exc.__class__.__name__)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error: {exc.errors()}")
        return _error_response(422, _validation_errors(exc), exc.__class__.__name__)

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unexpected exception: {str(exc)}", exc_info=True)
        return _error_response(500, "Internal server error occurred", exc.__class__.__name__)


def create_app(container: Optional[PersonaChatContainer] = None) -> FastAPI:
    """애플리케이션 생성 및 설정"""
    # 컨테이너 설정
    container = _setup_container_and_wiring(container)
    settings = container.settings()
    setup_logging(settings.LOG_LEVEL)

    # 생명주기 관리자 설정
    lifespan_manager = _setup_lifespan(container)

    # FastAPI 앱 생성
    app = _create_fastapi_app(lifespan_manager)
    app.container = container

    # 라우터 등록
    app.include_router(chat.router, prefix="/api", tags=["chat"])
    app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

    # 미들웨어
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _setup_exception_handlers(app)

    @app.get("/")
    def read_root():
        return {"message": "Welcome to the Persona Chat API"}

    return app


# FastAPI 앱 인스턴스
app = create_app()
