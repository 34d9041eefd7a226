"""
API Routes module.

This module contains the FastAPI route handlers:
- conversations: create and read conversations, answer user messages with RAG
"""

from .conversations import ConversationsRouterConfig, make_conversations_router

__all__ = [
    "ConversationsRouterConfig",
    "make_conversations_router",
]
