"""
Defines the core Pydantic data models for the application.

These models are the data contract between the store, the engine and the
layout. Messages serialize to the persisted ``{id, role, content, ts}`` shape.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# --- Constants ---
USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
SYSTEM_ROLE = "system"
Role = Literal[USER_ROLE, ASSISTANT_ROLE]

MESSAGE_EVENT = "message"
RESET_EVENT = "reset"
TYPING_EVENT = "typing"
EventKind = Literal[MESSAGE_EVENT, RESET_EVENT, TYPING_EVENT]


# --- Models ---
class ChatMessage(BaseModel):
    """Represents a single, immutable message within a conversation."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    role: Role
    content: str
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), alias="ts"
    )

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        # Stored timestamps without an offset are UTC.
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Conversation(BaseModel):
    """The ordered sequence of messages of one chat session."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    messages: List[ChatMessage] = Field(default_factory=list)


class EngineEvent(BaseModel):
    """Something the engine did that a renderer may want to project."""

    kind: EventKind
    message: Optional[ChatMessage] = None
    typing: bool = False
