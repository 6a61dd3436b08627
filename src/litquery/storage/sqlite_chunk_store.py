"""SQLite-backed chunk store with fused vector + lexical top-K search."""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass
from datetime import datetime, timezone

import aiosqlite
import numpy as np

from litquery.exceptions import ConfigurationError, PersistenceError
from litquery.keyword_search.bm25_index import BM25Index
from litquery.models.domain import ChunkMetadata, FusionWeights, ScoredChunk, StoredChunk
from litquery.observability.logger import get_logger
from litquery.scoring.fusion import fused_score, normalize_lexical
from litquery.storage.migrations import initialize_chunk_db

logger = get_logger("chunk_store")


@dataclass
class _CorpusIndex:
    chunk_ids: list[str]
    contents: list[str]
    metadata: list[ChunkMetadata]
    unit_vectors: np.ndarray
    bm25: BM25Index


class SQLiteChunkStore:
    """Chunks are insert-only; per-corpus search indexes are rebuilt lazily after inserts."""

    def __init__(self, db_path: str, lexical_normalizer: float = 10.0) -> None:
        self._db_path = db_path
        self._lexical_normalizer = lexical_normalizer
        self._indexes: dict[str, _CorpusIndex] = {}
        self._build_lock = asyncio.Lock()

    async def initialize(self) -> None:
        try:
            await initialize_chunk_db(self._db_path)
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to initialize chunk store: {e}") from e

    async def add_chunks(self, chunks: list[StoredChunk]) -> int:
        """Insert chunks; existing chunk ids are left untouched. Returns rows inserted."""
        if not chunks:
            return 0
        try:
            async with aiosqlite.connect(self._db_path) as db:
                before = db.total_changes
                await db.executemany(
                    "INSERT OR IGNORE INTO chunks "
                    "(chunk_id, corpus_id, content, embedding, metadata, created_at) "
                    "VALUES (?, ?, ?, ?, ?, ?)",
                    [
                        (
                            c.chunk_id,
                            c.corpus_id,
                            c.content,
                            json.dumps(c.embedding),
                            json.dumps(c.metadata.to_dict()),
                            c.created_at.isoformat(),
                        )
                        for c in chunks
                    ],
                )
                await db.commit()
                inserted = db.total_changes - before
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to store chunks: {e}") from e

        for corpus_id in {c.corpus_id for c in chunks}:
            self._indexes.pop(corpus_id, None)
        logger.info("chunks_added", count=inserted)
        return inserted

    async def get_chunks(self, corpus_id: str) -> list[StoredChunk]:
        try:
            async with aiosqlite.connect(self._db_path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(
                    "SELECT * FROM chunks WHERE corpus_id = ? ORDER BY rowid",
                    (corpus_id,),
                ) as cursor:
                    rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to read chunks for {corpus_id}: {e}") from e
        return [self._row_to_chunk(row) for row in rows]

    async def count_chunks(self, corpus_id: str | None = None) -> int:
        sql = "SELECT COUNT(*) FROM chunks"
        args: tuple = ()
        if corpus_id is not None:
            sql += " WHERE corpus_id = ?"
            args = (corpus_id,)
        try:
            async with aiosqlite.connect(self._db_path) as db:
                async with db.execute(sql, args) as cursor:
                    row = await cursor.fetchone()
                    return row[0] if row else 0
        except aiosqlite.Error as e:
            raise PersistenceError(f"Failed to count chunks: {e}") from e

    async def top_k_by_fused_score(
        self,
        corpus_id: str,
        query_vector: list[float],
        lexical_query: str,
        weights: FusionWeights,
        limit: int,
        max_distance: float,
    ) -> list[ScoredChunk]:
        """Chunks that match the lexical query or lie within ``max_distance``
        cosine distance, ordered by fused score descending."""
        index = await self._get_index(corpus_id)
        if not index.chunk_ids:
            return []
        return await asyncio.to_thread(
            self._search, index, query_vector, lexical_query, weights, limit, max_distance
        )

    async def _get_index(self, corpus_id: str) -> _CorpusIndex:
        index = self._indexes.get(corpus_id)
        if index is not None:
            return index
        async with self._build_lock:
            index = self._indexes.get(corpus_id)
            if index is None:
                chunks = await self.get_chunks(corpus_id)
                index = await asyncio.to_thread(self._build_index, chunks)
                self._indexes[corpus_id] = index
                logger.info("corpus_index_built", corpus_id=corpus_id, size=len(chunks))
        return index

    @staticmethod
    def _build_index(chunks: list[StoredChunk]) -> _CorpusIndex:
        bm25 = BM25Index()
        bm25.build([c.content for c in chunks])
        if chunks:
            matrix = np.asarray([c.embedding for c in chunks], dtype=np.float32)
            norms = np.linalg.norm(matrix, axis=1, keepdims=True)
            norms[norms == 0] = 1.0
            unit = matrix / norms
        else:
            unit = np.zeros((0, 0), dtype=np.float32)
        return _CorpusIndex(
            chunk_ids=[c.chunk_id for c in chunks],
            contents=[c.content for c in chunks],
            metadata=[c.metadata for c in chunks],
            unit_vectors=unit,
            bm25=bm25,
        )

    def _search(
        self,
        index: _CorpusIndex,
        query_vector: list[float],
        lexical_query: str,
        weights: FusionWeights,
        limit: int,
        max_distance: float,
    ) -> list[ScoredChunk]:
        query = np.asarray(query_vector, dtype=np.float32)
        if query.shape[0] != index.unit_vectors.shape[1]:
            raise ConfigurationError(
                f"Query vector has {query.shape[0]} dimensions, "
                f"corpus embeddings have {index.unit_vectors.shape[1]}"
            )
        norm = float(np.linalg.norm(query))
        similarities = index.unit_vectors @ (query / norm if norm else query)
        distances = 1.0 - similarities
        lexical_raw = index.bm25.scores(lexical_query)
        lexical_hits = index.bm25.matches(lexical_query)

        matches = np.flatnonzero(lexical_hits | (distances < max_distance))
        results = []
        for i in matches:
            vector_score = float(similarities[i])
            lexical_score = normalize_lexical(float(lexical_raw[i]), self._lexical_normalizer)
            results.append(
                ScoredChunk(
                    chunk_id=index.chunk_ids[i],
                    content=index.contents[i],
                    metadata=index.metadata[i],
                    vector_score=vector_score,
                    lexical_score=lexical_score,
                    fused_score=fused_score(vector_score, lexical_score, weights),
                )
            )
        results.sort(key=lambda r: r.fused_score, reverse=True)
        return results[:limit]

    @staticmethod
    def _row_to_chunk(row: aiosqlite.Row) -> StoredChunk:
        return StoredChunk(
            chunk_id=row["chunk_id"],
            corpus_id=row["corpus_id"],
            content=row["content"],
            embedding=json.loads(row["embedding"]),
            metadata=ChunkMetadata.from_raw(row["metadata"]),
            created_at=datetime.fromisoformat(row["created_at"]).astimezone(timezone.utc),
        )
