"""
Retrieval pipeline: preprocess the query, search the content store, rerank.

A FindContentPipeline is an ordered list of named stages. Wrapping a pipeline
with a reranker or a preprocessor returns a new pipeline with the stage
added; the run order is always preprocessors, then search, then rerankers.
"""
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Protocol

from chatbot_server.schemas.content import (
    EmbeddedContent,
    FindContentResult,
    FindNearestNeighborsOptions,
    PreprocessedQuery,
    RerankResult,
)
from chatbot_server.services.adapters import Embedder

logger = logging.getLogger(__name__)

QueryPreprocessor = Callable[[str], Awaitable[PreprocessedQuery]]
Reranker = Callable[[str, List[EmbeddedContent]], Awaitable[RerankResult]]


class NearestNeighborsStore(Protocol):
    async def find_nearest_neighbors(
        self, vector: List[float], options: FindNearestNeighborsOptions
    ) -> List[EmbeddedContent]: ...


async def noop_preprocessor(query: str) -> PreprocessedQuery:
    return PreprocessedQuery(preprocessed_query=query)


async def noop_reranker(query: str, results: List[EmbeddedContent]) -> RerankResult:
    return RerankResult(results=results)


@dataclass
class SearchStage:
    """Embed the query and run a nearest-neighbour search."""
    embedder: Embedder
    store: NearestNeighborsStore
    options: FindNearestNeighborsOptions
    name: str = "search"

    async def __call__(self, query: str) -> FindContentResult:
        embed_result = await self.embedder.embed(query)
        content = await self.store.find_nearest_neighbors(embed_result.embedding, self.options)
        return FindContentResult(query_embedding=embed_result.embedding, content=content)


@dataclass
class FindContentPipeline:
    search: SearchStage
    preprocessors: List[QueryPreprocessor] = field(default_factory=list)
    rerankers: List[Reranker] = field(default_factory=list)

    @property
    def stage_names(self) -> List[str]:
        names = [f"preprocess:{getattr(p, '__name__', type(p).__name__)}" for p in self.preprocessors]
        names.append(self.search.name)
        names += [f"rerank:{getattr(r, '__name__', type(r).__name__)}" for r in self.rerankers]
        return names

    async def __call__(self, query: str) -> FindContentResult:
        for preprocess in self.preprocessors:
            preprocessed = await preprocess(query)
            if preprocessed.reject_query:
                logger.info("Query rejected by preprocessor")
                return FindContentResult(rejected=True)
            query = preprocessed.preprocessed_query

        result = await self.search(query)

        content = result.content
        for rerank in self.rerankers:
            reranked = await rerank(query, content)
            if not isinstance(reranked.results, list):
                raise TypeError("Reranker must return a list of results")
            content = reranked.results

        logger.debug(f"Found {len(content)} chunks via stages {self.stage_names}")
        return FindContentResult(query_embedding=result.query_embedding, content=content)


def make_default_find_content(
    embedder: Embedder,
    store: NearestNeighborsStore,
    options: FindNearestNeighborsOptions,
) -> FindContentPipeline:
    return FindContentPipeline(search=SearchStage(embedder=embedder, store=store, options=options))


def with_reranker(find_content: FindContentPipeline, reranker: Reranker) -> FindContentPipeline:
    return FindContentPipeline(
        search=find_content.search,
        preprocessors=list(find_content.preprocessors),
        rerankers=[*find_content.rerankers, reranker],
    )


def with_query_preprocessor(
    find_content: FindContentPipeline,
    preprocessor: QueryPreprocessor,
) -> FindContentPipeline:
    return FindContentPipeline(
        search=find_content.search,
        preprocessors=[*find_content.preprocessors, preprocessor],
        rerankers=list(find_content.rerankers),
    )
