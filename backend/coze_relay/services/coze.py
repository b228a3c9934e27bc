"""
Coze v3 chat API client.
"""
import logging
from typing import Any, Dict, List

import httpx

from coze_relay.config import RelaySettings
from coze_relay.errors import CozeAPIError
from coze_relay.models.coze import ChatMessage, ChatSession, CozeEnvelope

log = logging.getLogger("coze")


class CozeClient:
    """Async HTTP client for the three Coze chat operations the relay uses."""

    def __init__(self, settings: RelaySettings):
        self.base_url = settings.base_url
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=settings.timeout_s,
            headers={
                "Authorization": f"Bearer {settings.api_token}",
                "Content-Type": "application/json",
            },
        )

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self) -> "CozeClient":
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def _request(self, method: str, endpoint: str, **kwargs) -> CozeEnvelope:
        response = await self.client.request(method, endpoint, **kwargs)

        try:
            payload = response.json()
        except ValueError:
            if response.is_error:
                raise CozeAPIError(response.status_code, http_status=response.status_code)
            raise

        if not isinstance(payload, dict) or "code" not in payload:
            if response.is_error:
                raise CozeAPIError(response.status_code, http_status=response.status_code)
            raise ValueError(f"Unexpected payload from {endpoint}: missing 'code'")

        envelope = CozeEnvelope.model_validate(payload)
        if envelope.code != 0:
            log.warning("Coze %s %s returned code %s: %s", method, endpoint, envelope.code, envelope.msg)
            raise CozeAPIError(envelope.code, envelope.msg, http_status=response.status_code)
        return envelope

    @staticmethod
    def _chat_params(chat_id: str, conversation_id: str) -> Dict[str, str]:
        return {"chat_id": chat_id, "conversation_id": conversation_id}

    async def create_chat(self, bot_id: str, user_id: str, message: str) -> ChatSession:
        body: Dict[str, Any] = {
            "bot_id": bot_id,
            "user_id": user_id,
            "stream": False,
            "auto_save_history": True,
            "additional_messages": [
                {
                    "role": "user",
                    "content": message,
                    "content_type": "text",
                },
            ],
        }
        envelope = await self._request("POST", "/v3/chat", json=body)
        return ChatSession.model_validate(envelope.data)

    async def retrieve_chat(self, chat_id: str, conversation_id: str) -> ChatSession:
        envelope = await self._request(
            "GET", "/v3/chat/retrieve", params=self._chat_params(chat_id, conversation_id)
        )
        return ChatSession.model_validate(envelope.data)

    async def list_messages(self, chat_id: str, conversation_id: str) -> List[ChatMessage]:
        envelope = await self._request(
            "GET", "/v3/chat/message/list", params=self._chat_params(chat_id, conversation_id)
        )
        items = envelope.data
        if not isinstance(items, list):
            raise ValueError("Unexpected message list payload")
        return [ChatMessage.model_validate(m) for m in items]
