"""
In-memory stand-ins for MongoDB and the base models.

They mirror only the slice of the PyMongo async API the server uses:
awaitable insert_one/find_one/update_one/aggregate/command/close.
"""
import asyncio
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from chatbot_server.schemas.content import EmbeddedContent

REQUIRED_KEYS = ("MONGODB_CONNECTION_URI", "MONGODB_DATABASE_NAME", "VECTOR_SEARCH_INDEX_NAME")


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]) -> None:
        self._docs = docs

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        return [dict(d) for d in self._docs]


class FakeCollection:
    def __init__(self, search_results: Optional[List[Dict[str, Any]]] = None) -> None:
        self.docs: Dict[str, Dict[str, Any]] = {}
        self.search_results = search_results or []
        self.pipelines: List[List[Dict[str, Any]]] = []

    async def insert_one(self, doc: Dict[str, Any]) -> SimpleNamespace:
        self.docs[doc["_id"]] = dict(doc)
        return SimpleNamespace(inserted_id=doc["_id"])

    async def find_one(self, query: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        doc = self.docs.get(query["_id"])
        return dict(doc) if doc is not None else None

    async def update_one(self, query: Dict[str, Any], update: Dict[str, Any]) -> SimpleNamespace:
        doc = self.docs.get(query["_id"])
        if doc is None:
            return SimpleNamespace(matched_count=0, modified_count=0)
        for field, value in update["$push"].items():
            doc.setdefault(field, []).append(value)
        return SimpleNamespace(matched_count=1, modified_count=1)

    async def aggregate(self, pipeline: List[Dict[str, Any]]) -> FakeCursor:
        self.pipelines.append(pipeline)
        return FakeCursor(self.search_results)


class FakeDatabase:
    def __init__(self, ping_error: Optional[Exception] = None) -> None:
        self.collections: Dict[str, FakeCollection] = {}
        self.ping_error = ping_error
        self.commands: List[str] = []

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection())

    async def command(self, name: str) -> Dict[str, Any]:
        self.commands.append(name)
        if self.ping_error is not None:
            raise self.ping_error
        return {"ok": 1}


class FakeMongoClient:
    instances: List["FakeMongoClient"] = []

    def __init__(self, uri: str = "mongodb://fake", ping_error: Optional[Exception] = None) -> None:
        self.uri = uri
        self.databases: Dict[str, FakeDatabase] = {}
        self.admin = FakeDatabase(ping_error=ping_error)
        self.ping_error = ping_error
        self.closed = False
        FakeMongoClient.instances.append(self)

    def __getitem__(self, name: str) -> FakeDatabase:
        return self.databases.setdefault(name, FakeDatabase(ping_error=self.ping_error))

    async def close(self) -> None:
        self.closed = True


class FakeEmbeddingModel:
    def __init__(self, vector: Optional[List[float]] = None, error: Optional[Exception] = None) -> None:
        self.vector = vector or [0.1, 0.2, 0.3]
        self.error = error
        self.queries: List[str] = []

    async def embed_query(self, text: str) -> List[float]:
        self.queries.append(text)
        if self.error is not None:
            raise self.error
        return self.vector


class FakeChatModel:
    def __init__(
        self,
        reply: str = "Atlas is MongoDB's cloud database.",
        error: Optional[Exception] = None,
        delay: float = 0.0,
    ) -> None:
        self.reply = reply
        self.error = error
        self.delay = delay
        self.calls: List[List[Dict[str, str]]] = []

    async def chat(self, messages: List[Dict[str, str]]) -> str:
        self.calls.append(messages)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.reply

    async def describe(self) -> Dict[str, Any]:
        return {"model_name": "fake-model", "provider": "fake", "available": True}


class FakeStore:
    """Nearest-neighbour store returning a fixed list of chunks."""

    def __init__(
        self,
        content: Optional[List[EmbeddedContent]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.content = content or []
        self.error = error
        self.vectors: List[List[float]] = []
        self.closed = False

    async def find_nearest_neighbors(self, vector, options) -> List[EmbeddedContent]:
        self.vectors.append(vector)
        if self.error is not None:
            raise self.error
        return list(self.content)

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def chunks() -> List[EmbeddedContent]:
    return [
        EmbeddedContent(
            text="MongoDB is a database.",
            source_name="docs",
            url="https://example.com/mongodb",
            score=0.95,
        ),
        EmbeddedContent(
            text="Atlas is the cloud offering.",
            source_name="docs",
            url="https://example.com/atlas",
            metadata={"pageTitle": "Atlas"},
            score=0.93,
        ),
    ]


@pytest.fixture
def clean_env(monkeypatch):
    for key in REQUIRED_KEYS + ("PORT",):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def env_file(tmp_path, clean_env):
    path = tmp_path / ".env"
    path.write_text(
        "MONGODB_CONNECTION_URI=mongodb://localhost:27017\n"
        "MONGODB_DATABASE_NAME=chatbot\n"
        "VECTOR_SEARCH_INDEX_NAME=vector_index\n"
    )
    return path


@pytest.fixture(autouse=True)
def _reset_fake_clients():
    FakeMongoClient.instances.clear()
    yield
    FakeMongoClient.instances.clear()
