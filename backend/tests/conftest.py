"""
Shared fixtures for the test suite.

Key design decisions:
- Uses respx to mock all Coze API calls (no real HTTP).
- The handler gets a fixed RelaySettings and a recording no-op sleep,
  so polling tests run instantly and can assert on the waits.
"""
import pytest
import respx
import httpx

from coze_relay.config import RelaySettings, StaticSettingsProvider
from coze_relay.services.relay import ChatRelayHandler

COZE_BASE = "https://api.coze.test"
CHAT_ID = "chat-001"
CONVERSATION_ID = "conv-001"


# ── Canned Coze payloads ──


def envelope(data=None, code=0, msg=None):
    body = {"code": code, "data": data}
    if msg is not None:
        body["msg"] = msg
    return body


def chat_data(status):
    return {
        "id": CHAT_ID,
        "conversation_id": CONVERSATION_ID,
        "bot_id": "bot-123",
        "status": status,
        "created_at": 1718000000,
    }


def chat_response(status):
    return httpx.Response(200, json=envelope(chat_data(status)))


def message(role, type_, content):
    return {
        "id": f"msg-{content}",
        "conversation_id": CONVERSATION_ID,
        "chat_id": CHAT_ID,
        "role": role,
        "type": type_,
        "content": content,
        "content_type": "text",
    }


def status_sequence(*statuses):
    """respx side effect returning one retrieve response per status, in order."""
    return [chat_response(s) for s in statuses]


# ── Fixtures ──


@pytest.fixture
def settings():
    return RelaySettings(api_token="test-token", bot_id="bot-123", base_url=COZE_BASE)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def handler(settings, sleeps):
    async def fake_sleep(seconds):
        sleeps.append(seconds)

    return ChatRelayHandler(StaticSettingsProvider(settings), sleep=fake_sleep)


@pytest.fixture
def coze_api():
    """Intercept all HTTP calls to the Coze API. Routes are named create / retrieve / list."""
    with respx.mock(base_url=COZE_BASE, assert_all_called=False) as router:
        router.post("/v3/chat", name="create").mock(return_value=chat_response("completed"))
        router.get("/v3/chat/retrieve", name="retrieve").mock(return_value=chat_response("completed"))
        router.get("/v3/chat/message/list", name="list").mock(
            return_value=httpx.Response(200, json=envelope([message("assistant", "answer", "Hello!")]))
        )
        yield router
