"""
Vector database service for managing embeddings and similarity search.
"""

from typing import List, Dict, Any, Optional, Tuple
from uuid import uuid4
from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    Distance,
    Filter,
    HasIdCondition,
    PointStruct,
    VectorParams,
)
from langchain_core.documents import Document
from langchain_core.embeddings import Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings

from ..config import settings
from ..exceptions import UpstreamServiceError
from ..models import QueryMatch
from ..utils import (
    measure_time,
    generate_point_id,
    log_processing_info,
    handle_processing_error
)
import logging

logger = logging.getLogger(__name__)


class VectorService:
    """Service for embedding chunks and querying the vector index."""

    def __init__(
        self,
        embeddings: Optional[Embeddings] = None,
        client: Optional[AsyncQdrantClient] = None
    ):
        """
        Initialize the vector service.

        Args:
            embeddings: Embedding model, defaults to Google Generative AI
            client: Qdrant client to use for every request instead of the
                one selected by the ``vector_store`` setting
        """
        self.embeddings = embeddings or self._initialize_embeddings()
        self._client = client
        self._owns_client = client is None

    def _initialize_embeddings(self) -> GoogleGenerativeAIEmbeddings:
        """Initialize Google Generative AI embeddings."""
        embeddings = GoogleGenerativeAIEmbeddings(
            model=settings.google_embedding_model,
            google_api_key=settings.google_api_key
        )

        log_processing_info("Embeddings initialized", {
            "model": settings.google_embedding_model
        })

        return embeddings

    def _initialize_qdrant_client(self) -> AsyncQdrantClient:
        """Initialize the remote Qdrant client."""
        client = AsyncQdrantClient(
            url=settings.qdrant_url,
            api_key=settings.qdrant_api_key
        )

        log_processing_info("Qdrant client initialized", {
            "url": settings.qdrant_url,
            "has_api_key": bool(settings.qdrant_api_key)
        })

        return client

    def _acquire_client(self) -> Tuple[AsyncQdrantClient, str, bool, bool]:
        """
        Pick the client and collection for one request.

        Returns:
            Tuple of (client, collection_name, close_after_request,
            drop_collection_after_request)
        """
        if self._client is None and settings.vector_store == "qdrant":
            self._client = self._initialize_qdrant_client()

        if self._client is not None:
            if settings.vector_store == "qdrant":
                return self._client, settings.qdrant_collection, False, False
            # Per-request collection on a shared client
            return self._client, f"{settings.qdrant_collection}-{uuid4().hex[:12]}", False, True

        # In-memory index scoped to this request
        client = AsyncQdrantClient(location=":memory:")
        return client, f"{settings.qdrant_collection}-{uuid4().hex[:12]}", True, False

    async def embed_chunks(self, chunks: List[Document]) -> List[List[float]]:
        """
        Embed every chunk. Any failure aborts the whole batch.

        Raises:
            UpstreamServiceError: If the embedding call fails or returns a
                different number of vectors than chunks
        """
        texts = [chunk.page_content for chunk in chunks]
        try:
            vectors = await self.embeddings.aembed_documents(texts)
        except Exception as e:
            error_info = handle_processing_error(
                "chunk_embedding", e, {"chunk_count": len(texts)}
            )
            raise UpstreamServiceError(
                "embeddings", f"Failed to embed document chunks: {error_info['error_message']}"
            ) from e

        if len(vectors) != len(texts):
            raise UpstreamServiceError(
                "embeddings",
                f"Embedding service returned {len(vectors)} vectors for {len(texts)} chunks"
            )

        return vectors

    async def embed_query(self, question: str) -> List[float]:
        """Embed the user's question."""
        try:
            return await self.embeddings.aembed_query(question)
        except Exception as e:
            error_info = handle_processing_error(
                "query_embedding", e, {"question_length": len(question)}
            )
            raise UpstreamServiceError(
                "embeddings", f"Failed to embed question: {error_info['error_message']}"
            ) from e

    async def ensure_collection(self, client: AsyncQdrantClient, collection_name: str, dimension: int) -> bool:
        """
        Create the collection if it does not exist yet.

        A create that loses a race with another request (the collection
        appeared in between) counts as already existing.

        Returns:
            True if created, False if it already existed
        """
        try:
            if await client.collection_exists(collection_name):
                return False
        except Exception as e:
            error_info = handle_processing_error(
                "collection_check", e, {"collection_name": collection_name}
            )
            raise UpstreamServiceError(
                "vector_index",
                f"Failed to check collection {collection_name}: {error_info['error_message']}"
            ) from e

        try:
            await client.create_collection(
                collection_name=collection_name,
                vectors_config=VectorParams(size=dimension, distance=Distance.COSINE)
            )
        except Exception as e:
            try:
                created_elsewhere = await client.collection_exists(collection_name)
            except Exception:
                created_elsewhere = False
            if created_elsewhere:
                logger.info(f"Collection {collection_name} was created concurrently: {e}")
                return False

            error_info = handle_processing_error(
                "collection_creation", e, {"collection_name": collection_name}
            )
            raise UpstreamServiceError(
                "vector_index",
                f"Failed to create collection {collection_name}: {error_info['error_message']}"
            ) from e

        log_processing_info("Collection created", {
            "collection_name": collection_name,
            "vector_dimension": dimension
        })
        return True

    async def _drop_collection(self, client: AsyncQdrantClient, collection_name: str) -> None:
        """Delete a per-request collection; failures are only logged."""
        try:
            await client.delete_collection(collection_name)
        except Exception as e:
            handle_processing_error("collection_deletion", e, {"collection_name": collection_name})

    async def store_embeddings(
        self,
        client: AsyncQdrantClient,
        collection_name: str,
        chunks: List[Document],
        vectors: List[List[float]]
    ) -> List[str]:
        """
        Upsert chunk vectors in sequential batches.

        Batches written before a failure stay in the index.

        Returns:
            Point ids written, in chunk order
        """
        points = []
        for i, (chunk, vector) in enumerate(zip(chunks, vectors)):
            source = chunk.metadata.get('source', 'unknown')
            points.append(PointStruct(
                id=chunk.metadata.get('chunk_id') or generate_point_id(source, i),
                vector=vector,
                payload={
                    'chunk_text': chunk.page_content,
                    'source_document_id': source,
                    'page': chunk.metadata.get('page'),
                    'chunk_index': chunk.metadata.get('chunk_index', i),
                }
            ))

        batch_size = settings.index_batch_size
        stored = 0
        for offset in range(0, len(points), batch_size):
            batch = points[offset:offset + batch_size]
            try:
                await client.upsert(collection_name=collection_name, points=batch, wait=True)
            except Exception as e:
                error_info = handle_processing_error(
                    "document_storage",
                    e,
                    {
                        "collection_name": collection_name,
                        "stored": stored,
                        "total": len(points)
                    }
                )
                raise UpstreamServiceError(
                    "vector_index",
                    f"Failed to store chunks after {stored} of {len(points)} were indexed: "
                    f"{error_info['error_message']}"
                ) from e
            stored += len(batch)

        log_processing_info("Chunks stored successfully", {
            "collection_name": collection_name,
            "chunk_count": stored,
            "batches": -(-stored // batch_size)
        })

        return [str(point.id) for point in points]

    async def search_by_vector(
        self,
        client: AsyncQdrantClient,
        collection_name: str,
        query_vector: List[float],
        point_ids: List[str],
        k: int
    ) -> List[QueryMatch]:
        """Run one nearest-neighbour query limited to the given points."""
        try:
            response = await client.query_points(
                collection_name=collection_name,
                query=query_vector,
                query_filter=Filter(must=[HasIdCondition(has_id=point_ids)]),
                limit=k,
                with_payload=True
            )
        except Exception as e:
            error_info = handle_processing_error(
                "similarity_search",
                e,
                {"collection_name": collection_name, "k": k}
            )
            raise UpstreamServiceError(
                "vector_index", f"Failed to search similar chunks: {error_info['error_message']}"
            ) from e

        matches = [
            QueryMatch(
                text=point.payload.get('chunk_text', ''),
                source_document_id=point.payload.get('source_document_id', 'unknown'),
                score=point.score,
                page=point.payload.get('page')
            )
            for point in response.points
        ]
        matches.sort(key=lambda match: match.score, reverse=True)
        return matches[:k]

    @measure_time
    async def retrieve(self, chunks: List[Document], question: str, k: Optional[int] = None) -> List[QueryMatch]:
        """
        Index the chunks and return the top-k matches for the question.

        Args:
            chunks: All chunks of the request
            question: User's question
            k: Number of matches to return

        Returns:
            Matches ordered by descending similarity
        """
        if k is None:
            k = settings.similarity_search_k

        if not chunks:
            return []

        vectors = await self.embed_chunks(chunks)
        query_vector = await self.embed_query(question)

        client, collection_name, close_after, drop_after = self._acquire_client()
        try:
            await self.ensure_collection(client, collection_name, len(vectors[0]))
            point_ids = await self.store_embeddings(client, collection_name, chunks, vectors)
            matches = await self.search_by_vector(client, collection_name, query_vector, point_ids, k)
        finally:
            if drop_after:
                await self._drop_collection(client, collection_name)
            if close_after:
                await client.close()

        log_processing_info("Similarity search completed", {
            "collection_name": collection_name,
            "query_length": len(question),
            "results_count": len(matches),
            "k": k
        })

        return matches

    async def health_check(self) -> Dict[str, Any]:
        """
        Perform health check on the vector service.

        Returns:
            Dictionary with health status information
        """
        if settings.vector_store == "memory" and self._client is None:
            return {
                "status": "healthy",
                "vector_store": "memory",
                "embedding_model": settings.google_embedding_model
            }

        try:
            client = self._acquire_client()[0]
            collections = await client.get_collections()

            return {
                "status": "healthy",
                "vector_store": settings.vector_store,
                "collections_count": len(collections.collections),
                "embedding_model": settings.google_embedding_model
            }

        except Exception as e:
            handle_processing_error("health_check", e)
            return {
                "status": "unhealthy",
                "vector_store": settings.vector_store,
                "error": str(e)
            }

    async def close(self) -> None:
        """Close the shared remote client, if one was opened."""
        if self._client is not None and self._owns_client:
            await self._client.close()
            self._client = None
