"""
Pydantic models for the Coze v3 chat API payloads.

Only the fields the relay reads are declared; everything else the
service sends back is ignored.
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"

ROLE_ASSISTANT = "assistant"
TYPE_ANSWER = "answer"


class CozeEnvelope(BaseModel):
    """Wrapper every Coze v3 endpoint returns: {code, msg, data}."""
    model_config = ConfigDict(extra="ignore")

    code: int
    msg: Optional[str] = None
    data: Any = None


class ChatSession(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    conversation_id: str
    status: str


class ChatMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: str
    type: Optional[str] = None
    content: str = ""

    @property
    def is_answer(self) -> bool:
        return self.role == ROLE_ASSISTANT and self.type == TYPE_ANSWER
