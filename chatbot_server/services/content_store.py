import logging
from typing import Any, Dict, List, Optional

from pymongo import AsyncMongoClient
from pymongo.errors import PyMongoError

from chatbot_server.core.errors import StoreConnectionError
from chatbot_server.schemas.content import EmbeddedContent, FindNearestNeighborsOptions

logger = logging.getLogger(__name__)

EMBEDDED_CONTENT_COLLECTION = "embedded_content"


# -------------------------
# EMBEDDED CONTENT STORE
# -------------------------

class MongoDbEmbeddedContentStore:
    """
    Handle to the collection of embedded content chunks.

    Chunks are written by a separate ingest process; this store only reads
    them back through Atlas Vector Search. It owns its MongoClient.
    """

    def __init__(
        self,
        connection_uri: str,
        database_name: str,
        collection_name: str = EMBEDDED_CONTENT_COLLECTION,
        client: Optional[AsyncMongoClient] = None,
    ):
        self.client = client if client is not None else AsyncMongoClient(connection_uri)
        self.database_name = database_name
        self.collection = self.client[database_name][collection_name]

    async def connect(self) -> None:
        """Ping the deployment so a bad URI fails at startup instead of on first query."""
        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            raise StoreConnectionError(f"Cannot reach content store database {self.database_name}: {e}") from e
        logger.info(f"Content store connected to database {self.database_name}")

    def _pipeline(self, vector: List[float], options: FindNearestNeighborsOptions) -> List[Dict[str, Any]]:
        vector_search: Dict[str, Any] = {
            "index": options.index_name,
            "path": options.path,
            "queryVector": vector,
            "numCandidates": options.k * 15,
            "limit": options.k,
        }
        # $vectorSearch rejects an empty filter document
        if options.filter:
            vector_search["filter"] = options.filter

        return [
            {"$vectorSearch": vector_search},
            {"$addFields": {"score": {"$meta": "vectorSearchScore"}}},
            {"$project": {options.path: 0}},
        ]

    async def find_nearest_neighbors(
        self,
        vector: List[float],
        options: FindNearestNeighborsOptions,
    ) -> List[EmbeddedContent]:
        """Return up to k chunks nearest to `vector`, dropping those scoring below min_score."""
        cursor = await self.collection.aggregate(self._pipeline(vector, options))
        docs = await cursor.to_list()

        results = []
        for doc in docs:
            score = doc.get("score")
            if score is None or score < options.min_score:
                continue
            doc.pop("_id", None)
            results.append(EmbeddedContent.model_validate(doc))

        logger.debug(f"Vector search returned {len(docs)} chunks, kept {len(results)} (min_score={options.min_score})")
        return results

    async def close(self) -> None:
        try:
            await self.client.close()
        except PyMongoError as e:
            raise StoreConnectionError(f"Failed to close content store: {e}") from e
        logger.info("Content store connection closed")
