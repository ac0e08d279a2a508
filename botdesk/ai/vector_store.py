"""
Vector Store Service
Chunk storage and similarity search on a shared Qdrant collection

Architecture:
- One collection for all tenants, isolated by payload filters
  (document_id, chunk_id, user_id are keyword-indexed)
- Point ids are generated here; caller chunk ids live in the payload
- Collection setup runs once per process and every operation waits on it
"""

import asyncio
import logging
from functools import lru_cache
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import (
    Distance,
    Filter,
    FilterSelector,
    PayloadSchemaType,
    PointStruct,
    VectorParams,
)

from botdesk.ai.base import BaseEmbeddingService
from botdesk.ai.factory import get_embedding_service
from botdesk.ai.filters import Scope, build_chunk_filter, build_document_filter
from botdesk.config import settings
from botdesk.core.exceptions import BadRequestError
from botdesk.models.usage_event import UsageEventType
from botdesk.services.usage_events_service import UsageEventsService, get_usage_events_service
from botdesk.utils.dates import utcnow
from botdesk.utils.text import count_words

logger = logging.getLogger(__name__)

INDEXED_FIELDS = ("document_id", "chunk_id", "user_id")
SCROLL_PAGE_SIZE = 1000


def payload_to_chunk(payload: Dict[str, Any], include_counts: bool = True) -> Dict[str, Any]:
    """Shape a point payload as a chunk; counts are derived, never stored"""
    text = payload.get("text") or ""
    metadata = {
        "document_id": payload.get("document_id"),
        "user_id": payload.get("user_id"),
        "created_at": payload.get("created_at"),
    }
    if include_counts:
        metadata["character_count"] = len(text)
        metadata["word_count"] = count_words(text)

    return {
        "chunk_id": payload.get("chunk_id"),
        "document_id": payload.get("document_id"),
        "content": text,
        "chunk_index": payload.get("chunk_index") or 0,
        "metadata": metadata,
    }


class VectorStoreService:
    """
    Gateway to the vector collection

    All public operations await a single memoized initialization. If it
    fails, every waiting caller receives the same error.
    """

    def __init__(
        self,
        client: Optional[AsyncQdrantClient] = None,
        embedding_service: Optional[BaseEmbeddingService] = None,
        usage_events: Optional[UsageEventsService] = None,
        collection_name: Optional[str] = None
    ):
        self.client = client or AsyncQdrantClient(
            url=settings.QDRANT_URL,
            api_key=settings.QDRANT_API_KEY or None
        )
        self.embedding_service = embedding_service or get_embedding_service()
        self.usage_events = usage_events or get_usage_events_service()
        self.collection_name = collection_name or settings.QDRANT_COLLECTION_NAME
        self._init_task: Optional[asyncio.Task] = None

    def get_client(self) -> AsyncQdrantClient:
        return self.client

    async def initialize_collection(self) -> None:
        """Create the collection on first call; later calls wait on the same run"""
        if self._init_task is None:
            self._init_task = asyncio.get_running_loop().create_task(self._create_collection())
        # Shield so one cancelled caller does not cancel setup for the others
        await asyncio.shield(self._init_task)

    async def _create_collection(self) -> None:
        try:
            if await self.client.collection_exists(self.collection_name):
                logger.info(f"Collection already exists: {self.collection_name}")
                return

            vector_size = self.embedding_service.get_dimensions()
            logger.info(f"Creating collection {self.collection_name} with vector size {vector_size}")

            await self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=VectorParams(size=vector_size, distance=Distance.COSINE),
            )

            for field in INDEXED_FIELDS:
                await self.client.create_payload_index(
                    collection_name=self.collection_name,
                    field_name=field,
                    field_schema=PayloadSchemaType.KEYWORD,
                )

            logger.info(f"Collection created: {self.collection_name}")
        except Exception as e:
            logger.error(f"Error initializing collection {self.collection_name}: {e}")
            raise

    async def index_documents(
        self,
        texts: List[str],
        metadata: List[Dict[str, Any]]
    ) -> Dict[str, Any]:
        """
        Embed and store chunk texts

        Args:
            texts: Chunk texts
            metadata: One payload dict per text (document_id, user_id,
                chunk_id, chunk_index, ...)

        Returns:
            {"indexed_count": int, "ids": [point ids]}
        """
        await self.initialize_collection()

        if len(texts) != len(metadata):
            raise BadRequestError(
                f"Got {len(texts)} texts but {len(metadata)} metadata entries"
            )
        if not texts:
            return {"indexed_count": 0, "ids": []}

        logger.info(
            f"Indexing {len(texts)} texts for documents "
            f"{sorted({str(m.get('document_id')) for m in metadata})}"
        )

        vectors = await self.embedding_service.embed_documents(texts)
        created_at = utcnow().isoformat()

        points = [
            PointStruct(
                id=str(uuid4()),
                vector=vector,
                payload={**meta, "text": text, "created_at": created_at},
            )
            for text, vector, meta in zip(texts, vectors, metadata)
        ]

        await self.client.upsert(
            collection_name=self.collection_name,
            points=points,
            wait=True,
        )

        ids = [point.id for point in points]
        logger.info(f"Indexing complete: {len(ids)} points upserted")

        self._track_index_usage(texts, metadata)

        return {"indexed_count": len(ids), "ids": ids}

    def _track_index_usage(self, texts: List[str], metadata: List[Dict[str, Any]]) -> None:
        try:
            user_id = metadata[0].get("user_id") if metadata else None
            if not user_id:
                logger.warning("Skipping usage tracking: user_id not found in metadata")
                return

            total_tokens = sum(self.embedding_service.count_tokens(text) for text in texts)
            self.usage_events.create_event(
                user_id,
                self.embedding_service.get_model_name(),
                self.embedding_service.get_provider_name(),
                total_tokens,
                UsageEventType.CREATE_DOCUMENT_INDEX,
            )
        except Exception as e:
            logger.error(f"Error tracking indexing usage: {e}")

    async def delete_documents(self, scope: Scope) -> None:
        """
        Delete every point of one document or a set of documents

        Deleting a scope with no points succeeds.
        """
        await self.initialize_collection()

        points_filter = build_document_filter(scope)
        logger.info(f"Deleting points for documents: {scope}")

        await self.client.delete(
            collection_name=self.collection_name,
            points_selector=FilterSelector(filter=points_filter),
            wait=True,
        )

    async def _scroll_all(self, points_filter: Filter) -> List[Any]:
        points = []
        offset = None
        while True:
            batch, offset = await self.client.scroll(
                collection_name=self.collection_name,
                scroll_filter=points_filter,
                limit=SCROLL_PAGE_SIZE,
                offset=offset,
                with_payload=True,
                with_vectors=False,
            )
            points.extend(batch)
            if offset is None:
                return points

    async def get_chunks_by_document_id(self, document_id: Scope) -> List[Dict[str, Any]]:
        """All chunks of a document, ordered by chunk_index"""
        await self.initialize_collection()

        points = await self._scroll_all(build_document_filter(document_id))
        chunks = [payload_to_chunk(point.payload or {}) for point in points]
        chunks.sort(key=lambda chunk: chunk["chunk_index"])

        logger.info(f"Retrieved {len(chunks)} chunks for document {document_id}")
        return chunks

    async def get_chunks_by_ids(
        self,
        chunk_ids: Sequence[str],
        document_scope: Optional[Scope] = None
    ) -> List[Dict[str, Any]]:
        """
        Batch lookup by chunk id

        Order is unspecified; callers re-associate by chunk_id. Ids that
        no longer exist, or fall outside document_scope, are simply absent.
        """
        if not chunk_ids:
            return []

        await self.initialize_collection()

        points = await self._scroll_all(build_chunk_filter(chunk_ids, document_scope))
        return [payload_to_chunk(point.payload or {}) for point in points]

    async def search(
        self,
        query_vector: List[float],
        points_filter: Filter,
        limit: int = None
    ) -> List[Dict[str, Any]]:
        """
        Similarity search restricted by a filter from botdesk.ai.filters

        Returns:
            Chunks in rank order, each with its similarity score
        """
        await self.initialize_collection()

        response = await self.client.query_points(
            collection_name=self.collection_name,
            query=query_vector,
            query_filter=points_filter,
            limit=limit or settings.RAG_TOP_K,
            with_payload=True,
        )

        results = []
        for point in response.points:
            chunk = payload_to_chunk(point.payload or {}, include_counts=False)
            chunk["score"] = point.score
            results.append(chunk)
        return results


@lru_cache(maxsize=1)
def get_vector_store_service() -> VectorStoreService:
    """
    Get singleton VectorStoreService instance

    One client and one initialization per process
    """
    return VectorStoreService()
