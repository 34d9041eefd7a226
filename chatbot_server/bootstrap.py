"""
Startup wiring: turn an env file into everything the server needs.

The steps run strictly in order since each one consumes the previous result.
Nothing here opens a network connection before the env file is validated.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import uvicorn
from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from chatbot_server.api.conversations import ConversationsRouterConfig
from chatbot_server.core.config import ConnectionConfig, get_port, load_env_vars
from chatbot_server.core.errors import StoreConnectionError
from chatbot_server.main import AppConfig
from chatbot_server.schemas.content import FindNearestNeighborsOptions
from chatbot_server.services.adapters import (
    get_embedding_model,
    get_model_class,
    to_chat_llm,
    to_embedder,
)
from chatbot_server.services.content_store import MongoDbEmbeddedContentStore
from chatbot_server.services.conversations import MongoDbConversationsService
from chatbot_server.services.find_content import (
    make_default_find_content,
    noop_preprocessor,
    noop_reranker,
    with_query_preprocessor,
    with_reranker,
)
from chatbot_server.services.prompting import (
    SYSTEM_PROMPT,
    make_rag_generate_user_prompt,
    make_user_message,
)

logger = logging.getLogger(__name__)

# 0.9 suits OpenAI's text-embedding-ada-002; other embedding models may need a lower value.
MIN_SCORE = 0.9
NEAREST_NEIGHBORS_K = 5


@dataclass
class BootstrapContext:
    """Resources owned by the server for the lifetime of the process."""
    config: ConnectionConfig
    port: int
    mongodb: AsyncMongoClient
    embedded_content_store: MongoDbEmbeddedContentStore
    app_config: AppConfig
    http_server: Optional[uvicorn.Server] = None


async def _ping(mongodb: AsyncMongoClient, database_name: str) -> None:
    try:
        await mongodb[database_name].command("ping")
    except PyMongoError as e:
        raise StoreConnectionError(f"Cannot reach conversations database {database_name}: {e}") from e


async def build_context(env_path: str | Path) -> BootstrapContext:
    config = load_env_vars(env_path)
    port = get_port(env_path)

    model = get_model_class()
    embedding_model = get_embedding_model()

    embedded_content_store = MongoDbEmbeddedContentStore(
        connection_uri=config.connection_uri,
        database_name=config.database_name,
    )
    await embedded_content_store.connect()

    embedder = to_embedder(embedding_model)
    llm = await to_chat_llm(model)

    find_content = make_default_find_content(
        embedder=embedder,
        store=embedded_content_store,
        options=FindNearestNeighborsOptions(
            k=NEAREST_NEIGHBORS_K,
            path="embedding",
            index_name=config.vector_index_name,
            min_score=MIN_SCORE,
        ),
    )
    find_content = with_reranker(find_content, noop_reranker)
    find_content = with_query_preprocessor(find_content, noop_preprocessor)
    logger.info(f"Retrieval stages: {find_content.stage_names}")

    generate_user_prompt = make_rag_generate_user_prompt(
        find_content=find_content,
        make_user_message=make_user_message,
    )

    mongodb = AsyncMongoClient(config.connection_uri)
    await _ping(mongodb, config.database_name)
    conversations = MongoDbConversationsService(mongodb[config.database_name])

    app_config = AppConfig(
        conversations_router_config=ConversationsRouterConfig(
            llm=llm,
            conversations=conversations,
            generate_user_prompt=generate_user_prompt,
            system_prompt=SYSTEM_PROMPT,
        ),
        max_request_timeout_ms=30000,
        serve_static_site=True,
    )

    return BootstrapContext(
        config=config,
        port=port,
        mongodb=mongodb,
        embedded_content_store=embedded_content_store,
        app_config=app_config,
    )
