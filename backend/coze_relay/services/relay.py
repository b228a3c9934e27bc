"""
Chat relay orchestration.

One inbound message becomes three Coze calls:

    create chat → poll retrieve until not in_progress → list messages

The handler is the only place errors are turned into responses; nothing
raised below it reaches the route.
"""
import time
import uuid
import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from tenacity import AsyncRetrying, retry_if_result, stop_after_attempt, wait_fixed

from coze_relay.config import RelaySettings, SettingsProvider
from coze_relay.errors import (
    CozeAPIError,
    IncompleteChat,
    InternalError,
    InvalidRequest,
    Misconfigured,
    MethodNotAllowed,
    RelayError,
    UpstreamError,
)
from coze_relay.models.chat import InboundRequest, RelayResponse
from coze_relay.models.coze import STATUS_COMPLETED, STATUS_IN_PROGRESS, ChatMessage, ChatSession
from coze_relay.services.coze import CozeClient

log = logging.getLogger("relay")

ClientFactory = Callable[[RelaySettings], CozeClient]
Sleep = Callable[[float], Awaitable[None]]


def new_user_id(prefix: str) -> str:
    """Synthetic per-request user id: millisecond timestamp plus a random suffix."""
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


def extract_reply(messages: List[ChatMessage]) -> str:
    """Content of the last assistant answer, or "" when there is none."""
    answers = [m for m in messages if m.is_answer]
    return answers[-1].content if answers else ""


def _still_running(status: str) -> bool:
    return status == STATUS_IN_PROGRESS


def _last_status(retry_state) -> str:
    # Attempts exhausted: hand back the last observed status instead of raising RetryError.
    return retry_state.outcome.result()


class ChatRelayHandler:
    """Relays a single user message to the configured Coze bot."""

    def __init__(
        self,
        settings_provider: SettingsProvider,
        client_factory: ClientFactory = CozeClient,
        sleep: Sleep = asyncio.sleep,
    ):
        self.settings_provider = settings_provider
        self.client_factory = client_factory
        self.sleep = sleep

    async def handle(self, request: InboundRequest) -> RelayResponse:
        try:
            return await self._relay(request)
        except RelayError as e:
            if e.status_code >= 500:
                log.warning("Chat relay failed: %s", e.message)
            return e.to_response()
        except Exception:
            log.exception("Coze chat error")
            return InternalError().to_response()

    # ── Validation ──

    @staticmethod
    def _validate(request: InboundRequest) -> str:
        if request.method.upper() != "POST":
            raise MethodNotAllowed()

        body = request.body if isinstance(request.body, dict) else {}
        message = body.get("message")
        if not isinstance(message, str) or not message:
            raise InvalidRequest()
        return message

    def _load_settings(self) -> RelaySettings:
        settings = self.settings_provider.get_settings()
        if not settings.is_configured:
            raise Misconfigured()
        return settings

    # ── Orchestration ──

    async def _relay(self, request: InboundRequest) -> RelayResponse:
        message = self._validate(request)
        settings = self._load_settings()

        async with self.client_factory(settings) as client:
            session = await self._create(client, settings, message)
            status = await self._wait_for_completion(client, session, settings)

            if status != STATUS_COMPLETED:
                raise IncompleteChat(status)

            messages = await self._list(client, session)

        reply = extract_reply(messages)
        log.info("Chat %s completed, reply of %d chars", session.id, len(reply))
        return RelayResponse(status_code=200, body={"reply": reply})

    async def _create(self, client: CozeClient, settings: RelaySettings, message: str) -> ChatSession:
        try:
            session = await client.create_chat(
                bot_id=settings.bot_id,
                user_id=new_user_id(settings.user_id_prefix),
                message=message,
            )
        except CozeAPIError as e:
            raise UpstreamError(e.msg or "Failed to start Coze chat") from e

        log.info(
            "Created chat %s (conversation %s), status=%s",
            session.id, session.conversation_id, session.status,
        )
        return session

    async def _poll(self, client: CozeClient, session: ChatSession) -> str:
        try:
            polled = await client.retrieve_chat(session.id, session.conversation_id)
        except CozeAPIError as e:
            raise UpstreamError(e.msg or "Error while polling Coze chat") from e
        log.debug("Chat %s status=%s", session.id, polled.status)
        return polled.status

    async def _wait_for_completion(
        self, client: CozeClient, session: ChatSession, settings: RelaySettings
    ) -> Optional[str]:
        """
        Poll while the chat is in progress, at most `max_poll_attempts` times,
        waiting `poll_interval_s` before every poll. Returns the last status seen.
        """
        if not _still_running(session.status) or settings.max_poll_attempts <= 0:
            return session.status

        await self.sleep(settings.poll_interval_s)
        retrying = AsyncRetrying(
            sleep=self.sleep,
            stop=stop_after_attempt(settings.max_poll_attempts),
            wait=wait_fixed(settings.poll_interval_s),
            retry=retry_if_result(_still_running),
            retry_error_callback=_last_status,
        )
        return await retrying(self._poll, client, session)

    async def _list(self, client: CozeClient, session: ChatSession) -> List[ChatMessage]:
        try:
            return await client.list_messages(session.id, session.conversation_id)
        except CozeAPIError as e:
            raise UpstreamError(e.msg or "Failed to fetch chat messages") from e
