import httpx
from typing import List, Optional

from chatbot_server.core.config import EMBEDDING_SERVICE_URL


class EmbeddingServiceModel:
    """
    Base embedding model backed by an external embedding service.

    The service accepts {"texts": [...]} on POST /embed and answers with a
    batch response whose `vectors` field holds one vector per input text.
    """

    def __init__(
        self,
        base_url: str = EMBEDDING_SERVICE_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def embed_documents(self, texts: List[str]) -> List[List[float]]:
        """Call the embedding service and return one vector per text."""
        payload = {"texts": texts, "source": "user_prompt"}

        async with httpx.AsyncClient(transport=self._transport) as client:
            resp = await client.post(f"{self.base_url}/embed", json=payload, timeout=self.timeout)
            resp.raise_for_status()
            data = resp.json()

        vectors = data.get("vectors") or []
        if len(vectors) != len(texts):
            raise RuntimeError(
                f"Embedding service returned {len(vectors)} vectors for {len(texts)} texts"
            )
        return vectors

    async def embed_query(self, text: str) -> List[float]:
        """Return a single embedding vector for a query."""
        vectors = await self.embed_documents([text])
        return vectors[0]
