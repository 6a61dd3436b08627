"""Idempotent database schema creation."""

from __future__ import annotations

import aiosqlite

CHUNKS_TABLE = """
CREATE TABLE IF NOT EXISTS chunks (
    chunk_id TEXT PRIMARY KEY,
    corpus_id TEXT NOT NULL,
    content TEXT NOT NULL,
    embedding TEXT NOT NULL,
    metadata TEXT NOT NULL DEFAULT '{}',
    created_at TEXT NOT NULL
)
"""

CHUNKS_CORPUS_INDEX = """
CREATE INDEX IF NOT EXISTS idx_chunks_corpus_id ON chunks(corpus_id)
"""

QUERY_JOBS_TABLE = """
CREATE TABLE IF NOT EXISTS query_jobs (
    job_id TEXT PRIMARY KEY,
    status TEXT NOT NULL DEFAULT 'pending'
        CHECK (status IN ('pending', 'processing', 'completed', 'failed')),
    progress TEXT,
    params TEXT NOT NULL,
    response TEXT,
    sources TEXT,
    all_matching_chunks TEXT,
    confidence INTEGER,
    verified INTEGER NOT NULL DEFAULT 0,
    error TEXT,
    created_at TEXT NOT NULL,
    started_at TEXT,
    completed_at TEXT,
    expires_at TEXT NOT NULL,
    CHECK (expires_at > created_at)
)
"""

QUERY_JOBS_STATUS_INDEX = """
CREATE INDEX IF NOT EXISTS idx_query_jobs_status ON query_jobs(status)
"""

QUERY_JOBS_EXPIRES_INDEX = """
CREATE INDEX IF NOT EXISTS idx_query_jobs_expires_at ON query_jobs(expires_at)
"""


async def initialize_chunk_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(CHUNKS_TABLE)
        await db.execute(CHUNKS_CORPUS_INDEX)
        await db.commit()


async def initialize_job_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(QUERY_JOBS_TABLE)
        await db.execute(QUERY_JOBS_STATUS_INDEX)
        await db.execute(QUERY_JOBS_EXPIRES_INDEX)
        await db.commit()
