"""
Inbound request / outbound response models for the relay endpoint.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class InboundRequest(BaseModel):
    """What the handler needs from an HTTP request: its method and decoded JSON body."""
    method: str
    body: Optional[Any] = None


class RelayResponse(BaseModel):
    """Normalized handler result, rendered verbatim by the route."""
    status_code: int
    body: Dict[str, Any] = Field(default_factory=dict)
