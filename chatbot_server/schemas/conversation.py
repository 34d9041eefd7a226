from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field


class Reference(BaseModel):
    url: str
    title: str


class Message(BaseModel):
    id: str
    role: str
    content: str
    content_for_llm: Optional[str] = None
    references: List[Reference] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class Conversation(BaseModel):
    id: str
    messages: List[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MessageRequest(BaseModel):
    message: str = Field(min_length=1)


class MessageResponse(BaseModel):
    """Assistant reply returned to the client, without the LLM-only prompt."""
    id: str
    role: str
    content: str
    references: List[Reference] = Field(default_factory=list)
    created_at: datetime


class ConversationResponse(BaseModel):
    id: str
    messages: List[MessageResponse] = Field(default_factory=list)
    created_at: datetime
