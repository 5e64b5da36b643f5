"""API key generation, storage and validation.

Keys look like ``de_live_<64 hex>``. Only the sha256 hash and a short
display prefix are stored; the plaintext key is returned once at
creation time.
"""

from __future__ import annotations

import hashlib
import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

from ..config import Config
from ..database import get_db_connection

logger = logging.getLogger(__name__)

KEY_PREFIX = "de_live_"
DISPLAY_PREFIX_LENGTH = 12
RATE_LIMIT_WINDOW = timedelta(seconds=60)


@dataclass
class ApiKeyValidation:
    """Result of validating a presented API key."""

    valid: bool
    key_id: Optional[str] = None
    user_id: Optional[str] = None
    rate_limit: Optional[int] = None
    error: Optional[str] = None
    reason: Optional[str] = None

    @classmethod
    def rejected(cls, error: str, reason: str, key_id: Optional[str] = None) -> "ApiKeyValidation":
        return cls(valid=False, key_id=key_id, error=error, reason=reason)


def hash_api_key(key: str) -> str:
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


def generate_api_key() -> dict:
    """Create a new random key with its hash and display prefix."""
    key = f"{KEY_PREFIX}{secrets.token_hex(32)}"
    return {
        "key": key,
        "hash": hash_api_key(key),
        "prefix": key[:DISPLAY_PREFIX_LENGTH],
    }


class ApiKeyRepository:
    """Repository for API key records."""

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = db_path

    def create(
        self,
        user_id: str,
        name: str = "Default",
        rate_limit: Optional[int] = None,
        expires_at: Optional[str] = None,
    ) -> dict:
        """Create a key for a user.

        Returns:
            Dict with id, key (plaintext, shown once), prefix and name
        """
        generated = generate_api_key()
        key_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc).isoformat()

        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO api_keys
                (id, user_id, key_hash, key_prefix, name, is_active, rate_limit, expires_at, created_at)
                VALUES (?, ?, ?, ?, ?, 1, ?, ?, ?)
                """,
                (key_id, user_id, generated["hash"], generated["prefix"], name,
                 rate_limit or Config.DEFAULT_RATE_LIMIT, expires_at, now)
            )
            conn.commit()

        logger.info(f"Created API key {generated['prefix']}... for user {user_id}")
        return {
            "id": key_id,
            "key": generated["key"],
            "prefix": generated["prefix"],
            "name": name,
        }

    def list(self, user_id: str) -> list[dict]:
        """List a user's keys without their hashes, newest first."""
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                SELECT id, key_prefix, name, is_active, rate_limit, expires_at, last_used_at, created_at
                FROM api_keys WHERE user_id = ?
                ORDER BY created_at DESC
                """,
                (user_id,)
            )
            return [dict(row) for row in cursor.fetchall()]

    def list_ids(self, user_id: str) -> list[str]:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT id FROM api_keys WHERE user_id = ?", (user_id,))
            return [row["id"] for row in cursor.fetchall()]

    def revoke(self, key_id: str, user_id: str) -> bool:
        """Deactivate a key. Returns False if the user owns no such key."""
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE api_keys SET is_active = 0 WHERE id = ? AND user_id = ?",
                (key_id, user_id)
            )
            conn.commit()
            return cursor.rowcount > 0

    def find_by_hash(self, key_hash: str) -> Optional[dict]:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM api_keys WHERE key_hash = ?", (key_hash,))
            row = cursor.fetchone()
            return dict(row) if row else None

    def recent_usage_count(self, key_id: str, since: str) -> int:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) as count FROM usage_logs WHERE api_key_id = ? AND created_at >= ?",
                (key_id, since)
            )
            return cursor.fetchone()["count"]

    def touch(self, key_id: str) -> None:
        with get_db_connection(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE api_keys SET last_used_at = ? WHERE id = ?",
                (datetime.now(timezone.utc).isoformat(), key_id)
            )
            conn.commit()


def _is_expired(expires_at: Optional[str], now: datetime) -> bool:
    if not expires_at:
        return False
    expiry = datetime.fromisoformat(expires_at)
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return expiry < now


def validate_api_key(api_key: Optional[str], db_path: Optional[Path] = None) -> ApiKeyValidation:
    """Check a presented key.

    Checks run in order: format, existence, active flag, expiry and
    the per-minute rate limit. A valid key has its last_used_at bumped.
    """
    if not api_key or not api_key.startswith(KEY_PREFIX):
        return ApiKeyValidation.rejected("Invalid API key format", "format")

    repo = ApiKeyRepository(db_path)
    record = repo.find_by_hash(hash_api_key(api_key))
    if not record:
        return ApiKeyValidation.rejected("API key not found", "not_found")

    if not record["is_active"]:
        return ApiKeyValidation.rejected("API key is deactivated", "inactive", record["id"])

    now = datetime.now(timezone.utc)
    if _is_expired(record["expires_at"], now):
        return ApiKeyValidation.rejected("API key has expired", "expired", record["id"])

    rate_limit = record["rate_limit"] or Config.DEFAULT_RATE_LIMIT
    window_start = (now - RATE_LIMIT_WINDOW).isoformat()
    if repo.recent_usage_count(record["id"], window_start) >= rate_limit:
        return ApiKeyValidation.rejected("Rate limit exceeded", "rate_limited", record["id"])

    repo.touch(record["id"])

    return ApiKeyValidation(
        valid=True,
        key_id=record["id"],
        user_id=record["user_id"],
        rate_limit=rate_limit,
    )


def get_key_owner(api_key: Optional[str], db_path: Optional[Path] = None) -> Optional[str]:
    """User id behind an active key, without rate-limit bookkeeping."""
    if not api_key or not api_key.startswith(KEY_PREFIX):
        return None
    record = ApiKeyRepository(db_path).find_by_hash(hash_api_key(api_key))
    if not record or not record["is_active"]:
        return None
    return record["user_id"]
