"""Knowledge chunk storage and similarity search.

Global chunks (is_global=1, admin-curated) are visible to everyone;
user chunks only to their owner.
"""

import logging
from pathlib import Path
from typing import Optional

import numpy as np

from ..config import Config
from ..database import DatabaseError, get_db_connection
from ..utils.openai_embeddings import get_generator
from ..utils.vector_store import decode_embedding, rank_by_similarity

logger = logging.getLogger(__name__)

CONTEXT_LIMIT = 6
CONTEXT_THRESHOLD = 0.45


def _aggregate_sources(rows) -> list[dict]:
    """Collapse chunk rows (newest first) into one entry per source."""
    sources: dict[str, dict] = {}
    for row in rows:
        entry = sources.get(row["source_name"])
        if entry:
            entry["chunkCount"] += 1
        else:
            sources[row["source_name"]] = {
                "sourceName": row["source_name"],
                "sourceType": row["source_type"],
                "chunkCount": 1,
                "createdAt": row["created_at"],
            }
    return list(sources.values())


class KnowledgeRepository:
    """Repository for knowledge chunks and their embeddings."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    def insert_chunks(self, rows: list[dict]) -> int:
        """Insert prepared chunk rows in one transaction. Returns the row count."""
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.executemany(
                """
                INSERT INTO knowledge_chunks
                (id, user_id, source_name, source_type, chunk_index, section_title,
                 content, token_count, embedding, is_global, created_at)
                VALUES (:id, :user_id, :source_name, :source_type, :chunk_index, :section_title,
                        :content, :token_count, :embedding, :is_global, :created_at)
                """,
                rows
            )
            conn.commit()
        return len(rows)

    def delete_source(self, user_id: str, source_name: str) -> int:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM knowledge_chunks WHERE user_id = ? AND source_name = ? AND is_global = 0",
                (user_id, source_name)
            )
            conn.commit()
            return cursor.rowcount

    def delete_global_source(self, source_name: str) -> int:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM knowledge_chunks WHERE is_global = 1 AND source_name = ?",
                (source_name,)
            )
            conn.commit()
            return cursor.rowcount

    def list_sources(self, user_id: str) -> list[dict]:
        """Sources uploaded by a user, newest first."""
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT source_name, source_type, created_at FROM knowledge_chunks
                WHERE user_id = ? AND is_global = 0
                ORDER BY created_at DESC
                """,
                (user_id,)
            )
            return _aggregate_sources(cursor.fetchall())

    def list_global_sources(self) -> list[dict]:
        """Admin-curated sources, newest first."""
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT source_name, source_type, created_at FROM knowledge_chunks
                WHERE is_global = 1
                ORDER BY created_at DESC
                """
            )
            return _aggregate_sources(cursor.fetchall())

    def has_global_chunks(self) -> bool:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT 1 FROM knowledge_chunks WHERE is_global = 1 LIMIT 1")
            return cursor.fetchone() is not None

    def has_user_chunks(self, user_id: str) -> bool:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT 1 FROM knowledge_chunks WHERE user_id = ? AND is_global = 0 LIMIT 1",
                (user_id,)
            )
            return cursor.fetchone() is not None

    def load_embeddings(self, user_id: Optional[str] = None) -> tuple[list[dict], Optional[np.ndarray]]:
        """Load searchable chunks and their embedding matrix.

        Returns global chunks plus the user's own chunks. Without a
        user only global chunks are returned.

        Returns:
            (chunk metadata list, embedding matrix or None when empty)
        """
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, source_name, section_title, content, embedding
                FROM knowledge_chunks
                WHERE embedding IS NOT NULL
                  AND (is_global = 1 OR (user_id = ? AND is_global = 0))
                ORDER BY source_name, chunk_index
                """,
                (user_id,)
            )
            rows = cursor.fetchall()

        if not rows:
            return [], None

        chunks = [
            {
                "id": row["id"],
                "sourceName": row["source_name"],
                "sectionTitle": row["section_title"],
                "chunkText": row["content"],
            }
            for row in rows
        ]
        matrix = np.vstack([decode_embedding(row["embedding"]) for row in rows])
        return chunks, matrix


def search_knowledge(
    user_id: Optional[str],
    query: str,
    limit: int = Config.KNOWLEDGE_SEARCH_LIMIT,
    threshold: float = Config.KNOWLEDGE_SEARCH_THRESHOLD,
    db_path: Optional[Path] = None,
) -> list[dict]:
    """Rank global and user chunks against a query.

    Returns:
        Chunks with id, sourceName, sectionTitle, chunkText and
        similarity (3 decimals); [] if the store cannot be read
    """
    query_embedding = get_generator().generate(query)

    try:
        chunks, matrix = KnowledgeRepository(db_path).load_embeddings(user_id)
    except DatabaseError as e:
        logger.error(f"Knowledge search failed: {e}")
        return []

    if matrix is None:
        return []

    ranked = rank_by_similarity(query_embedding, matrix, limit=limit, threshold=threshold)
    return [
        {**chunks[index], "similarity": round(score, 3)}
        for index, score in ranked
    ]


def format_knowledge_context(chunks: list[dict]) -> str:
    """Render search results as a prompt block."""
    if not chunks:
        return ""

    formatted = []
    for i, chunk in enumerate(chunks, 1):
        if chunk.get("sectionTitle"):
            source = f"[{chunk['sourceName']} - {chunk['sectionTitle']}]"
        else:
            source = f"[{chunk['sourceName']}]"
        formatted.append(f"{i}. {source}\n{chunk['chunkText']}")

    body = "\n\n".join(formatted)
    return (
        "\n=== DESIGN KNOWLEDGE LIBRARY ===\n"
        "The following design principles come from curated reference materials. "
        "Apply them when generating code.\n\n"
        f"{body}\n"
        "=== END KNOWLEDGE ===\n"
    )


def get_knowledge_context(user_id: Optional[str], query: str, db_path: Optional[Path] = None) -> str:
    """Knowledge block for an LLM prompt, or "" when nothing is indexed."""
    repo = KnowledgeRepository(db_path)
    has_user_chunks = bool(user_id) and repo.has_user_chunks(user_id)
    if not repo.has_global_chunks() and not has_user_chunks:
        return ""

    chunks = search_knowledge(user_id, query, CONTEXT_LIMIT, CONTEXT_THRESHOLD, db_path=db_path)
    return format_knowledge_context(chunks)
