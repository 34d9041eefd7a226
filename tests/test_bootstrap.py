"""
Tests for startup wiring.

Scenarios:
- A bad env file fails before any MongoDB client is created
- A good env file yields a fully wired context (fake Mongo + fake models)
- An unreachable deployment surfaces as StoreConnectionError

Run:
  pytest -q tests/test_bootstrap.py
"""
import asyncio

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from chatbot_server import bootstrap
from chatbot_server.core.errors import ConfigError, StoreConnectionError
from chatbot_server.services import content_store

from conftest import FakeChatModel, FakeEmbeddingModel, FakeMongoClient


@pytest.fixture
def fake_backends(monkeypatch):
    chat_model = FakeChatModel()
    monkeypatch.setattr(bootstrap, "AsyncMongoClient", FakeMongoClient)
    monkeypatch.setattr(content_store, "AsyncMongoClient", FakeMongoClient)
    monkeypatch.setattr(bootstrap, "get_model_class", lambda: chat_model)
    monkeypatch.setattr(bootstrap, "get_embedding_model", lambda: FakeEmbeddingModel())
    return chat_model


def test_missing_env_file_fails_before_connecting(tmp_path, clean_env, fake_backends) -> None:
    with pytest.raises(ConfigError, match="not found"):
        asyncio.run(bootstrap.build_context(tmp_path / "missing.env"))

    assert FakeMongoClient.instances == []


def test_missing_key_fails_before_connecting(tmp_path, clean_env, fake_backends) -> None:
    path = tmp_path / ".env"
    path.write_text("MONGODB_CONNECTION_URI=mongodb://localhost:27017\n")

    with pytest.raises(ConfigError, match="MONGODB_DATABASE_NAME"):
        asyncio.run(bootstrap.build_context(path))

    assert FakeMongoClient.instances == []


def test_build_context_wires_everything(env_file, fake_backends) -> None:
    context = asyncio.run(bootstrap.build_context(env_file))

    assert context.port == 9000
    assert context.config.database_name == "chatbot"
    assert context.http_server is None

    # one client for the content store, one for conversations
    assert len(FakeMongoClient.instances) == 2
    assert all(c.uri == "mongodb://localhost:27017" for c in FakeMongoClient.instances)
    assert context.mongodb is FakeMongoClient.instances[1]
    assert context.embedded_content_store.client is FakeMongoClient.instances[0]

    app_config = context.app_config
    assert app_config.max_request_timeout_ms == 30000
    assert app_config.serve_static_site is True

    router_config = app_config.conversations_router_config
    assert router_config.system_prompt["role"] == "system"
    assert router_config.llm.metadata["model_name"] == "fake-model"


def test_build_context_reads_port(env_file, fake_backends, monkeypatch) -> None:
    monkeypatch.setenv("PORT", "8123")

    context = asyncio.run(bootstrap.build_context(env_file))

    assert context.port == 8123


def test_unreachable_database_is_store_connection_error(env_file, fake_backends, monkeypatch) -> None:
    def unreachable(uri):
        return FakeMongoClient(uri, ping_error=ServerSelectionTimeoutError("no servers"))

    monkeypatch.setattr(content_store, "AsyncMongoClient", unreachable)

    with pytest.raises(StoreConnectionError, match="no servers"):
        asyncio.run(bootstrap.build_context(env_file))


def test_build_context_reads_port_from_env_file(env_file, fake_backends) -> None:
    env_file.write_text(env_file.read_text() + "PORT=8123\n")

    context = asyncio.run(bootstrap.build_context(env_file))

    assert context.port == 8123
