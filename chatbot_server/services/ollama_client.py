"""
Ollama chat model used as the base LLM.

Requires Ollama to be running locally (default: http://localhost:11434)
or set OLLAMA_BASE_URL environment variable.
"""
import httpx
from typing import Any, Dict, List, Optional

from chatbot_server.core.config import OLLAMA_BASE_URL, OLLAMA_MODEL


class OllamaChatModel:
    """Thin client over Ollama's chat and model-listing APIs."""

    def __init__(
        self,
        base_url: str = OLLAMA_BASE_URL,
        model: str = OLLAMA_MODEL,
        temperature: float = 0.7,
        timeout: float = 120.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.temperature = temperature
        self.timeout = timeout
        self._transport = transport

    async def chat(self, messages: List[Dict[str, str]]) -> str:
        """
        Generate a chat completion using Ollama's chat API.

        Args:
            messages: List of message dicts with "role" and "content"

        Returns:
            Generated response text
        """
        url = f"{self.base_url}/api/chat"

        payload = {
            "model": self.model,
            "messages": messages,
            "options": {"temperature": self.temperature},
            "stream": False
        }

        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(url, json=payload, timeout=self.timeout)
                response.raise_for_status()
                data = response.json()
                return data.get("message", {}).get("content", "")

        except httpx.ConnectError as e:
            raise ConnectionError(
                f"Cannot connect to Ollama at {self.base_url}. "
                "Please ensure Ollama is running."
            ) from e
        except httpx.HTTPStatusError as e:
            raise RuntimeError(f"Ollama API error: {e.response.text}") from e

    async def list_models(self) -> List[str]:
        """List available Ollama models."""
        url = f"{self.base_url}/api/tags"

        async with httpx.AsyncClient(transport=self._transport) as client:
            response = await client.get(url, timeout=10.0)
            response.raise_for_status()
            data = response.json()
            models = data.get("models", [])
            return [m.get("name", m.get("model")) for m in models]

    async def describe(self) -> Dict[str, Any]:
        """Handshake with the server: report the configured model and whether it is pulled."""
        available = await self.list_models()
        return {
            "model_name": self.model,
            "provider": "ollama",
            "available": self.model in available,
        }
