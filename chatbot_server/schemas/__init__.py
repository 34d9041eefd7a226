"""
Schema and Data Models module.

This module contains Pydantic models shared by the services and the API:
- content: embedded content chunks and retrieval pipeline values
- conversation: persisted conversations and the HTTP request/response bodies
"""

from .content import (
    EmbeddedContent,
    FindNearestNeighborsOptions,
    EmbedResult,
    PreprocessedQuery,
    RerankResult,
    FindContentResult,
)
from .conversation import (
    Reference,
    Message,
    Conversation,
    MessageRequest,
    MessageResponse,
    ConversationResponse,
)

__all__ = [
    "EmbeddedContent",
    "FindNearestNeighborsOptions",
    "EmbedResult",
    "PreprocessedQuery",
    "RerankResult",
    "FindContentResult",
    "Reference",
    "Message",
    "Conversation",
    "MessageRequest",
    "MessageResponse",
    "ConversationResponse",
]
