# tests/webapp/test_api.py
import pytest
from dependency_injector import providers
from httpx import ASGITransport, AsyncClient

from persona_chat.chat_session.container import create_chat_session_container
from persona_chat.chat_session.settings import ChatSessionSettings
from persona_chat.llm.container import create_llm_container
from persona_chat.llm.retry import RetryPolicy
from persona_chat.llm.settings import LLMSettings
from webapp.container import create_container
from webapp.main import create_app

from fakes import FakeModelProvider, ScriptedChatModel, StatusError


def build_app(script):
    """스크립트 모델을 쓰는 앱과 컨테이너"""
    llm_container = create_llm_container()
    llm_container.settings.override(providers.Object(LLMSettings(LLM_PROVIDER="google", GEMINI_API_KEY="test-key-0001")))
    llm_container.provider.override(providers.Object(FakeModelProvider(ScriptedChatModel(script))))
    llm_container.retry_policy.override(providers.Object(RetryPolicy(base_delay=0.0, max_delay=0.0)))

    chat_session_container = create_chat_session_container()
    chat_session_container.settings.override(providers.Object(ChatSessionSettings(SESSION_BACKEND="memory")))

    container = create_container(llm_container=llm_container, chat_session_container=chat_session_container)
    return create_app(container), container


@pytest.fixture
async def api():
    app, container = build_app(["Jordan built a ROS2 indoor navigation robot."])
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client, container


class TestChatAPI:
    """POST /api/chat, GET /api/chat"""

    async def test_chat_end_to_end(self, api):
        # given
        client, container = api

        # when
        response = await client.post(
            "/api/chat",
            json={"message": "Tell me about the ROS2 robot"},
            headers={"X-Forwarded-For": "203.0.113.7, 10.0.0.1", "User-Agent": "pytest-agent"},
        )

        # then
        assert response.status_code == 200
        body = response.json()
        assert body["reply"] == "Jordan built a ROS2 indoor navigation robot."
        assert body["source"] == "rag"
        assert body["rag"] is True

        session = await container.chat_session_service().get_session(body["sessionId"])
        assert session.message_count == 2
        assert session.ip_address == "203.0.113.7"
        assert session.user_agent == "pytest-agent"

    async def test_real_ip_header(self, api):
        client, container = api

        response = await client.post("/api/chat", json={"message": "hello"}, headers={"X-Real-IP": "198.51.100.2"})

        session = await container.chat_session_service().get_session(response.json()["sessionId"])
        assert session.ip_address == "198.51.100.2"

    async def test_empty_message(self, api):
        client, _ = api

        response = await client.post("/api/chat", json={"message": "   "})

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "InvalidRequestException"
        assert body["trace_id"]

    async def test_missing_message(self, api):
        client, _ = api

        response = await client.post("/api/chat", json={"sessionId": "abc"})

        assert response.status_code == 422

    async def test_health(self, api):
        client, _ = api

        response = await client.get("/api/chat")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["mode"] == "llm"
        assert body["apiKeys"][0]["masked"] == "...0001"
        assert body["retrieval"]["document_count"] > 0

    async def test_rate_limited_fallback(self):
        app, _ = build_app([StatusError("429 quota exceeded", 429)] * 4)

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/api/chat", json={"message": "hello!"})

        assert response.status_code == 200
        assert response.json()["source"] == "quick-response"
        assert response.json()["rag"] is False

    async def test_rejected_generation(self):
        app, _ = build_app([StatusError("401 invalid api key", 401)])

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/api/chat", json={"message": "quantum chemistry?"})

        assert response.status_code == 500
        assert response.json()["code"] == "ChatbotServiceException"


class TestAdminAPI:
    """GET/DELETE /api/admin/chat-history"""

    async def test_list_pagination(self, api):
        # given
        client, container = api
        sessions = container.chat_session_service()
        for _ in range(25):
            await sessions.create_session()

        # when
        response = await client.get("/api/admin/chat-history", params={"page": 2, "limit": 20})

        # then
        assert response.status_code == 200
        body = response.json()
        assert len(body["sessions"]) == 5
        assert body["total"] == 25
        assert body["page"] == 2
        assert body["limit"] == 20
        assert body["totalPages"] == 2
        assert {"id", "startedAt", "lastMessageAt", "messageCount", "preview"} <= set(body["sessions"][0])

    async def test_invalid_page(self, api):
        client, _ = api

        response = await client.get("/api/admin/chat-history", params={"page": 0})

        assert response.status_code == 400

    async def test_session_detail(self, api):
        client, _ = api
        chat = (await client.post("/api/chat", json={"message": "ROS2 robot?"})).json()

        response = await client.get("/api/admin/chat-history", params={"sessionId": chat["sessionId"]})

        assert response.status_code == 200
        session = response.json()["session"]
        assert session["id"] == chat["sessionId"]
        assert session["messageCount"] == 2
        assert [m["role"] for m in session["messages"]] == ["user", "assistant"]

    async def test_session_detail_not_found(self, api):
        client, _ = api

        response = await client.get("/api/admin/chat-history", params={"sessionId": "session-missing"})

        assert response.status_code == 404
        assert response.json()["code"] == "SessionNotFoundException"

    async def test_delete_session(self, api):
        # given
        client, container = api
        sessions = container.chat_session_service()
        target = await sessions.create_session()
        await sessions.create_session()

        # when
        response = await client.delete("/api/admin/chat-history", params={"sessionId": target.id})

        # then
        assert response.status_code == 200
        assert response.json() == {"success": True, "deletedCount": 1, "remainingCount": 1}

        again = await client.delete("/api/admin/chat-history", params={"sessionId": target.id})
        assert again.status_code == 404

    async def test_delete_older_than_days(self, api):
        client, container = api
        sessions = container.chat_session_service()
        for _ in range(3):
            await sessions.create_session()

        response = await client.delete("/api/admin/chat-history", params={"olderThanDays": 0})

        assert response.status_code == 200
        assert response.json()["deletedCount"] == 3
        assert response.json()["remainingCount"] == 0

    async def test_delete_requires_a_filter(self, api):
        client, _ = api

        response = await client.delete("/api/admin/chat-history")

        assert response.status_code == 400
