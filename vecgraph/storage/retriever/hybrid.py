"""
Hybrid Similarity Search
========================

Ranks namespace chunks by a blend of direct query similarity and similarity
propagated along the SIMILAR_TO KNN graph.

Core algorithm:
1. Empty namespace -> empty result, no embedding, no query
2. Embed the query
3. Engine: cosine(chunk, query) for non-excluded chunks, keep >= threshold
4. Engine: walk SIMILAR_TO up to knn_depth hops over edges >= threshold,
   path similarity = product of edge weights
5. combined = alpha * direct + (1-alpha) * mean(path similarities)
6. Keep combined >= threshold, rank descending, return top_n

Cosine similarity and traversal run inside Neo4j (GDS); only the blend and
the ranking happen here.
"""

import time
import structlog
from typing import Any, Dict, Iterable, List, Optional, Sequence

from vecgraph.config import MAX_KNN_DEPTH, SearchSettings
from vecgraph.errors import EmbeddingError, VectorStoreError
from vecgraph.storage.graph import cypher
from vecgraph.storage.graph.connection import Neo4jConnection, fetch_all
from vecgraph.storage.models import deserialize_metadata, validate_namespace
from vecgraph.storage.namespace import NamespaceStore
from vecgraph.storage.retriever.models import ScoredChunk, SearchResult
from vecgraph.storage.vectors.base import BaseEmbedder, coerce_vector

log = structlog.get_logger()


class HybridSimilaritySearch:
    """
    Graph-augmented similarity search over a namespace.

    Flow:
        Query -> embed -> direct cosine (Neo4j)
                              |
                 SIMILAR_TO paths up to knn_depth (Neo4j)
                              |
            combined = alpha * direct + (1-alpha) * avg(path)
                              |
                      ranked top_n results

    Example:
        >>> search = HybridSimilaritySearch(connection, store)
        >>> result = await search.search("acme", "what is a contract?", embedder)
        >>> result.context_texts[0]
    """

    def __init__(
        self,
        connection: Neo4jConnection,
        store: NamespaceStore,
        settings: Optional[SearchSettings] = None
    ):
        self.connection = connection
        self.store = store
        self.settings = settings or SearchSettings()

        log.info(
            f"HybridSimilaritySearch initialized - "
            f"alpha={self.settings.alpha}, "
            f"threshold={self.settings.similarity_threshold}, "
            f"knn_depth={self.settings.knn_depth}"
        )

    async def search(
        self,
        namespace: str,
        query_text: str,
        embedder: BaseEmbedder,
        threshold: Optional[float] = None,
        top_n: Optional[int] = None,
        exclude_doc_ids: Optional[Iterable[str]] = (),
        knn_depth: Optional[int] = None
    ) -> SearchResult:
        """
        Perform hybrid similarity search.

        Never raises: any failure is returned as an empty SearchResult carrying
        `error` and an explanatory `message`.

        Args:
            namespace: Namespace to search
            query_text: Natural language query
            embedder: Provider used to embed the query
            threshold: Minimum direct similarity, edge weight and combined score
            top_n: Maximum results
            exclude_doc_ids: Documents to leave out
            knn_depth: Maximum SIMILAR_TO hops (0 = plain cosine)

        Returns:
            SearchResult with texts, sources and scores sorted by combined score
        """
        threshold = self.settings.similarity_threshold if threshold is None else threshold
        top_n = self.settings.top_n if top_n is None else top_n
        knn_depth = self.settings.knn_depth if knn_depth is None else knn_depth

        try:
            validate_namespace(namespace)
            self._validate_parameters(threshold, top_n, knn_depth)

            if await self.store.count(namespace) == 0:
                log.debug(f"Search::No chunks found in namespace {namespace}")
                return SearchResult.empty(f"No chunks found in namespace {namespace}")

            try:
                query_vector = coerce_vector(await embedder.embed(query_text))
            except VectorStoreError:
                raise
            except Exception as e:
                raise EmbeddingError(f"Could not embed query: {e}") from e

            started = time.perf_counter()
            candidates = await self._fetch_candidates(
                namespace, query_vector, threshold, list(exclude_doc_ids or ()), knn_depth
            )
            ranked = self._rank(candidates, threshold, top_n)
            elapsed_ms = (time.perf_counter() - started) * 1000

            log.info(
                f"Search::returned {len(ranked)} results from {len(candidates)} candidates",
                namespace=namespace,
                execution_ms=round(elapsed_ms, 2),
            )

        except (VectorStoreError, ValueError) as e:
            log.error(f"Search::Similarity search failed - {e}", namespace=namespace)
            return SearchResult.empty(
                f"Similarity search failed for namespace {namespace}",
                error=str(e),
            )
        except Exception as e:
            log.error(
                f"Search::Unexpected failure - {e}", namespace=namespace, exc_info=True
            )
            return SearchResult.empty(
                f"Similarity search failed for namespace {namespace}",
                error=str(e),
            )

        if not ranked:
            return SearchResult.empty(
                f"No results found for namespace {namespace} "
                f"above similarity threshold {threshold}"
            )
        return SearchResult.from_chunks(ranked)

    def _validate_parameters(self, threshold: float, top_n: int, knn_depth: int) -> None:
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            raise ValueError(f"threshold must be a number, got {threshold!r}")
        if not 0 <= threshold <= 1:
            raise ValueError(f"threshold must be in [0, 1], got {threshold}")
        if not isinstance(top_n, int) or top_n < 1:
            raise ValueError(f"top_n must be a positive integer, got {top_n!r}")
        if not isinstance(knn_depth, int) or not 0 <= knn_depth <= MAX_KNN_DEPTH:
            raise ValueError(f"knn_depth must be in [0, {MAX_KNN_DEPTH}], got {knn_depth!r}")

    async def _fetch_candidates(
        self,
        namespace: str,
        query_vector: List[float],
        threshold: float,
        exclude_doc_ids: List[str],
        knn_depth: int
    ) -> List[ScoredChunk]:
        """Steps 3-4: direct similarity and path similarities, computed by the engine."""
        statement = cypher.hybrid_similarity_statement(knn_depth)
        async with self.connection.session() as session:
            records = await fetch_all(
                session,
                statement,
                {
                    "namespace": namespace,
                    "queryVector": query_vector,
                    "threshold": threshold,
                    "excludeDocIds": exclude_doc_ids,
                },
            )
        return [self._to_candidate(record) for record in records]

    def _to_candidate(self, record: Dict[str, Any]) -> ScoredChunk:
        paths = [float(p) for p in (record.get("pathSimilarities") or []) if p is not None]
        candidate = ScoredChunk(
            chunk_id=record.get("chunkId") or "",
            doc_id=record.get("docId") or "",
            text=record.get("contextText") or "",
            metadata=deserialize_metadata(record.get("metadata")),
            direct_similarity=float(record["directSimilarity"]),
            path_similarities=paths,
        )
        candidate.combined_score = self._combine_scores(
            candidate.direct_similarity, candidate.average_path_similarity
        )
        return candidate

    def _combine_scores(self, direct_similarity: float, path_similarity: float) -> float:
        """
        Step 5: combine direct and graph-propagated similarity.

        Formula:
            combined = alpha * direct + (1-alpha) * avg_path
        """
        return (
            self.settings.alpha * direct_similarity +
            (1 - self.settings.alpha) * path_similarity
        )

    def _rank(
        self,
        candidates: Sequence[ScoredChunk],
        threshold: float,
        top_n: int
    ) -> List[ScoredChunk]:
        """Step 6: filter by combined score, sort descending, cut to top_n."""
        kept = [c for c in candidates if c.combined_score >= threshold]
        kept.sort(key=lambda c: (-c.combined_score, c.chunk_id))
        return kept[:top_n]
