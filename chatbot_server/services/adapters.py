"""
Adapters from base models to the interfaces the RAG pipeline expects.

A base embedding model only has to provide `async embed_query(text)`; a base
chat model provides `async chat(messages)` and `async describe()`. Anything
they raise reaches callers as AdapterError with the original cause chained.
"""
import asyncio
import logging
from typing import Any, Dict, List, Protocol

from chatbot_server.core.config import MODEL_ADAPTER_TIMEOUT_S
from chatbot_server.core.errors import AdapterError
from chatbot_server.schemas.content import EmbedResult
from chatbot_server.services.embedding_client import EmbeddingServiceModel
from chatbot_server.services.ollama_client import OllamaChatModel

logger = logging.getLogger(__name__)


class BaseEmbeddingModel(Protocol):
    async def embed_query(self, text: str) -> List[float]: ...


class BaseChatModel(Protocol):
    async def chat(self, messages: List[Dict[str, str]]) -> str: ...

    async def describe(self) -> Dict[str, Any]: ...


class Embedder:
    """Turns text into a vector using a base embedding model."""

    def __init__(self, base: BaseEmbeddingModel):
        self._base = base

    async def embed(self, text: str) -> EmbedResult:
        try:
            vector = await self._base.embed_query(text)
        except Exception as e:
            raise AdapterError(f"Embedding model failed: {e}") from e
        return EmbedResult(embedding=list(vector))


class ChatLlm:
    """Produces an assistant reply for a message history."""

    def __init__(self, base: BaseChatModel, metadata: Dict[str, Any]):
        self._base = base
        self.metadata = metadata

    async def answer_question_awaited(self, messages: List[Dict[str, str]]) -> Dict[str, str]:
        try:
            content = await self._base.chat(messages)
        except Exception as e:
            raise AdapterError(f"Chat model failed: {e}") from e
        return {"role": "assistant", "content": content}


def get_embedding_model() -> EmbeddingServiceModel:
    """Embedding-service client at EMBEDDING_SERVICE_URL."""
    return EmbeddingServiceModel()


def get_model_class() -> OllamaChatModel:
    """Ollama chat client for OLLAMA_MODEL at OLLAMA_BASE_URL."""
    return OllamaChatModel()


def to_embedder(base: BaseEmbeddingModel) -> Embedder:
    return Embedder(base)


async def to_chat_llm(base: BaseChatModel, timeout: float = MODEL_ADAPTER_TIMEOUT_S) -> ChatLlm:
    """
    Wrap a base chat model once its metadata handshake completes.

    Raises:
        AdapterError: the handshake failed or took longer than `timeout` seconds.
    """
    try:
        metadata = await asyncio.wait_for(base.describe(), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise AdapterError(f"Chat model handshake timed out after {timeout}s") from e
    except Exception as e:
        raise AdapterError(f"Chat model handshake failed: {e}") from e

    if metadata.get("available") is False:
        logger.warning(f"Model {metadata.get('model_name')} is not available on the server yet")
    logger.info(f"Chat model ready: {metadata}")
    return ChatLlm(base, metadata)
