"""
Services module for the chatbot server.

This module contains the RAG building blocks and external service integrations:
- embedding_client / ollama_client: base embedding and chat models over HTTP
- adapters: convert base models into Embedder and ChatLlm
- content_store: MongoDB Atlas Vector Search over embedded content
- find_content: preprocess -> search -> rerank retrieval pipeline
- prompting: user prompt assembly and the system prompt
- conversations: MongoDB conversation persistence
"""

from .adapters import Embedder, ChatLlm, to_embedder, to_chat_llm
from .content_store import MongoDbEmbeddedContentStore
from .find_content import (
    FindContentPipeline,
    make_default_find_content,
    with_reranker,
    with_query_preprocessor,
)
from .prompting import make_user_message, make_rag_generate_user_prompt, SYSTEM_PROMPT
from .conversations import MongoDbConversationsService

__all__ = [
    "Embedder",
    "ChatLlm",
    "to_embedder",
    "to_chat_llm",
    "MongoDbEmbeddedContentStore",
    "FindContentPipeline",
    "make_default_find_content",
    "with_reranker",
    "with_query_preprocessor",
    "make_user_message",
    "make_rag_generate_user_prompt",
    "SYSTEM_PROMPT",
    "MongoDbConversationsService",
]
