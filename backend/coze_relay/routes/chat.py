"""
Chat API route: thin adapter between FastAPI and ChatRelayHandler.
"""
import json
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from coze_relay.config import EnvSettingsProvider
from coze_relay.models.chat import InboundRequest
from coze_relay.services.relay import ChatRelayHandler

router = APIRouter()

_handler = ChatRelayHandler(EnvSettingsProvider())


def get_relay_handler() -> ChatRelayHandler:
    return _handler


async def _read_json(raw_request: Request):
    """Decoded JSON body, or None when the body is empty or not JSON."""
    raw = await raw_request.body()
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


# Non-POST methods are routed here too so the handler answers them with its own 405 body.
@router.api_route("/chat", methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"])
async def chat_endpoint(
    raw_request: Request,
    handler: ChatRelayHandler = Depends(get_relay_handler),
):
    """Relay {"message": ...} to the Coze bot and return {"reply": ...}."""
    inbound = InboundRequest(method=raw_request.method, body=await _read_json(raw_request))
    result = await handler.handle(inbound)
    return JSONResponse(content=result.body, status_code=result.status_code)
