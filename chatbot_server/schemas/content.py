from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EmbeddedContent(BaseModel):
    """
    One chunk of a source page, stored with its embedding.

    Field names are camelCase in MongoDB (sourceName, chunkIndex) and
    snake_case in Python.
    """
    model_config = ConfigDict(populate_by_name=True)

    text: str
    source_name: str = Field(default="", alias="sourceName")
    url: str = ""
    tokens: int = 0
    embedding: List[float] = Field(default_factory=list)
    chunk_index: Optional[int] = Field(default=None, alias="chunkIndex")
    updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Dict[str, Any] = Field(default_factory=dict)
    score: Optional[float] = None


class FindNearestNeighborsOptions(BaseModel):
    k: int = 5
    path: str = "embedding"
    index_name: str
    min_score: float = 0.9
    filter: Dict[str, Any] = Field(default_factory=dict)


class EmbedResult(BaseModel):
    embedding: List[float]


class PreprocessedQuery(BaseModel):
    preprocessed_query: str
    reject_query: bool = False


class RerankResult(BaseModel):
    results: List[EmbeddedContent]


class FindContentResult(BaseModel):
    query_embedding: List[float] = Field(default_factory=list)
    content: List[EmbeddedContent] = Field(default_factory=list)
    rejected: bool = False
