"""Load a JSON file of chunks into the chunk store.

Each entry needs ``content`` and ``metadata``; ``chunk_id`` and ``embedding``
are optional. Missing embeddings are computed with the corpus's model.

Usage:
    python scripts/seed_corpus.py --corpus pin1-cancer chunks.json
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
import uuid
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from litquery.api.app import load_corpora
from litquery.config.settings import Settings
from litquery.embeddings.openai_embedder import OpenAIEmbedder
from litquery.models.domain import ChunkMetadata, StoredChunk
from litquery.observability.logger import setup_logging
from litquery.storage.sqlite_chunk_store import SQLiteChunkStore


def chunk_id_for(corpus_id: str, entry: dict, metadata: ChunkMetadata) -> str:
    if entry.get("chunk_id"):
        return str(entry["chunk_id"])
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{corpus_id}/{metadata.pmid}/{entry['content']}"))


async def main(corpus_id: str, path: Path) -> None:
    settings = Settings()
    setup_logging(settings.log_level)
    corpus = load_corpora(settings).resolve(corpus_id)

    Path(settings.chunk_db_path).parent.mkdir(parents=True, exist_ok=True)
    store = SQLiteChunkStore(settings.chunk_db_path)
    await store.initialize()
    embedder = OpenAIEmbedder(
        api_key=settings.upstream_api_key,
        base_url=settings.upstream_base_url,
        timeout_seconds=settings.upstream_timeout_seconds,
    )

    with open(path) as f:
        entries = json.load(f)

    chunks = []
    for i, entry in enumerate(entries):
        metadata = ChunkMetadata.from_raw(entry.get("metadata"))
        embedding = entry.get("embedding") or await embedder.embed(
            entry["content"], corpus.embedding_model
        )
        if len(embedding) != corpus.dimensions:
            print(f"Skipping entry {i}: {len(embedding)} dimensions, expected {corpus.dimensions}")
            continue
        chunks.append(
            StoredChunk(
                chunk_id=chunk_id_for(corpus_id, entry, metadata),
                corpus_id=corpus_id,
                content=entry["content"],
                embedding=embedding,
                metadata=metadata,
            )
        )
        if (i + 1) % 100 == 0:
            print(f"  Prepared {i + 1}/{len(entries)} chunks")

    inserted = await store.add_chunks(chunks)
    print(f"\nSeeded {inserted} new chunks into {corpus_id}")
    print(f"Corpus now holds {await store.count_chunks(corpus_id)} chunks")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed a corpus from a JSON chunk file")
    parser.add_argument("path", type=Path, help="JSON list of chunk entries")
    parser.add_argument("--corpus", required=True, help="Corpus id to load into")
    args = parser.parse_args()
    asyncio.run(main(args.corpus, args.path))
