"""Design pattern library with embedding search."""

import json
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import numpy as np

from ..database import get_db_connection
from ..utils.vector_store import decode_embedding, encode_embedding, rank_by_similarity

logger = logging.getLogger(__name__)

PATTERN_CATEGORIES = (
    "landing-page",
    "dashboard",
    "e-commerce",
    "portfolio",
    "blog",
    "saas",
    "marketing",
    "mobile-app",
    "documentation",
    "social-media",
    "news",
    "corporate",
)


def build_search_text(pattern: dict) -> str:
    """Flatten a pattern into the text that gets embedded."""
    parts = [
        pattern.get("name", ""),
        pattern.get("description", ""),
        f"Category: {pattern.get('category', '')}",
        f"Tags: {', '.join(pattern.get('tags') or [])}",
    ]

    tokens = pattern.get("tokens") or {}
    if tokens.get("colors"):
        parts.append(f"Color scheme: {tokens.get('colorScheme') or 'light'}")
        parts.append(f"Primary color: {tokens['colors'].get('primary')}")

    families = (tokens.get("typography") or {}).get("fontFamilies")
    if families:
        parts.append(f"Fonts: {families.get('primary')}, {families.get('heading')}")

    return ". ".join(parts)


def _row_to_pattern(row, similarity: Optional[float] = None) -> dict:
    pattern = {
        "id": row["id"],
        "name": row["name"],
        "description": row["description"],
        "category": row["category"],
        "tags": json.loads(row["tags_json"]) if row["tags_json"] else [],
        "sourceUrl": row["source_url"],
        "tokens": json.loads(row["tokens_json"]) if row["tokens_json"] else {},
    }
    if row["screenshot_url"]:
        pattern["screenshotUrl"] = row["screenshot_url"]
    if similarity is not None:
        pattern["similarity"] = round(similarity, 3)
    return pattern


class DesignPatternRepository:
    """Repository for curated design patterns."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    def upsert(self, pattern: dict, embedding: np.ndarray) -> str:
        """Insert or replace a pattern keyed on its source URL."""
        now = datetime.now(timezone.utc).isoformat()
        tokens = pattern.get("tokens") or {}
        families = (tokens.get("typography") or {}).get("fontFamilies") or {}

        values = (
            pattern["name"],
            pattern.get("description"),
            pattern.get("category"),
            json.dumps(pattern.get("tags") or []),
            tokens.get("colorScheme"),
            (tokens.get("colors") or {}).get("primary"),
            json.dumps([f for f in (families.get("primary"), families.get("heading")) if f]),
            json.dumps(tokens),
            pattern.get("screenshot_url"),
            encode_embedding(embedding),
        )

        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT id FROM design_patterns WHERE source_url = ?",
                (pattern["source_url"],)
            )
            existing = cursor.fetchone()

            if existing:
                pattern_id = existing["id"]
                cursor.execute(
                    """
                    UPDATE design_patterns
                    SET name = ?, description = ?, category = ?, tags_json = ?, color_scheme = ?,
                        primary_color = ?, fonts_json = ?, tokens_json = ?, screenshot_url = ?,
                        embedding = ?, updated_at = ?
                    WHERE id = ?
                    """,
                    (*values, now, pattern_id)
                )
            else:
                pattern_id = str(uuid.uuid4())
                cursor.execute(
                    """
                    INSERT INTO design_patterns
                    (name, description, category, tags_json, color_scheme, primary_color,
                     fonts_json, tokens_json, screenshot_url, embedding,
                     id, source_url, created_at, updated_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (*values, pattern_id, pattern["source_url"], now, now)
                )
            conn.commit()

        return pattern_id

    def search(
        self,
        query_embedding: np.ndarray,
        limit: int = 10,
        threshold: float = 0.5,
        category: Optional[str] = None,
        tags: Optional[list[str]] = None,
    ) -> list[dict]:
        """Rank stored patterns against a query embedding.

        A category filter is exact; a tags filter keeps patterns that
        share at least one tag with the query.
        """
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            if category:
                cursor.execute(
                    "SELECT * FROM design_patterns WHERE embedding IS NOT NULL AND category = ?",
                    (category,)
                )
            else:
                cursor.execute("SELECT * FROM design_patterns WHERE embedding IS NOT NULL")
            rows = cursor.fetchall()

        if tags:
            wanted = {tag.lower() for tag in tags}
            rows = [
                row for row in rows
                if wanted & {tag.lower() for tag in json.loads(row["tags_json"] or "[]")}
            ]

        if not rows:
            return []

        matrix = np.vstack([decode_embedding(row["embedding"]) for row in rows])
        ranked = rank_by_similarity(query_embedding, matrix, limit=limit, threshold=threshold)
        return [_row_to_pattern(rows[index], score) for index, score in ranked]

    def count(self) -> int:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) as count FROM design_patterns")
            return cursor.fetchone()["count"]
