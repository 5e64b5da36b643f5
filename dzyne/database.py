"""
Database connection management with context managers
SQLite store for profiles, keys, usage, knowledge chunks and patterns
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional, Union

from .config import Config
from .errors import DzyneError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

class DatabaseError(DzyneError):
    """Custom exception for database errors"""
    pass

@contextmanager
def get_db_connection(db_path: Optional[PathLike] = None) -> Generator[sqlite3.Connection, None, None]:
    """
    Context manager for database connections

    Usage:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM design_profiles")

    Args:
        db_path: Optional database path override. Uses Config.DB_PATH if None.

    Yields:
        sqlite3.Connection: Database connection with Row factory

    Raises:
        DatabaseError: If connection fails
    """
    conn = None
    try:
        conn = sqlite3.connect(str(db_path or Config.DB_PATH), timeout=10)
        conn.row_factory = sqlite3.Row
        yield conn
    except sqlite3.Error as e:
        raise DatabaseError(f"Database connection error: {str(e)}")
    finally:
        if conn:
            conn.close()

def execute_query(query: str, params: tuple = (), db_path: Optional[PathLike] = None) -> list[sqlite3.Row]:
    """
    Execute a SELECT query and return results

    Raises:
        DatabaseError: If query fails
    """
    try:
        with get_db_connection(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()
    except sqlite3.Error as e:
        raise DatabaseError(f"Query execution failed: {str(e)}")

def execute_single(query: str, params: tuple = (), db_path: Optional[PathLike] = None) -> sqlite3.Row | None:
    """
    Execute a SELECT query and return single result

    Raises:
        DatabaseError: If query fails
    """
    try:
        with get_db_connection(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchone()
    except sqlite3.Error as e:
        raise DatabaseError(f"Query execution failed: {str(e)}")

HEALTH_TABLES = (
    "users",
    "design_profiles",
    "api_keys",
    "usage_logs",
    "knowledge_chunks",
    "design_patterns",
    "subscriptions",
)

def check_database_health(db_path: Optional[PathLike] = None) -> dict:
    """
    Check database health and return row counts per table

    Returns:
        Dictionary with database statistics
    """
    try:
        with get_db_connection(db_path) as conn:
            cursor = conn.cursor()
            counts = {}
            for table in HEALTH_TABLES:
                cursor.execute(f"SELECT COUNT(*) as count FROM {table}")
                counts[table] = cursor.fetchone()['count']

            return {
                "status": "healthy",
                **counts,
            }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }


def _add_column_if_missing(cursor, table: str, column: str, col_type: str) -> bool:
    """Add a column to a table if it doesn't exist. Returns True if added."""
    try:
        cursor.execute(f"ALTER TABLE {table} ADD COLUMN {column} {col_type}")
        return True
    except sqlite3.OperationalError:
        return False


SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT UNIQUE,
        name TEXT,
        stripe_customer_id TEXT,
        created_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS design_profiles (
        id TEXT PRIMARY KEY,
        user_id TEXT,
        project_name TEXT NOT NULL UNIQUE,
        source_url TEXT,
        tokens_json TEXT NOT NULL,
        components_json TEXT,
        tailwind_config_json TEXT,
        css_variables TEXT,
        tags_json TEXT,
        created_at TEXT,
        updated_at TEXT,
        FOREIGN KEY (user_id) REFERENCES users(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS api_keys (
        id TEXT PRIMARY KEY,
        user_id TEXT NOT NULL,
        key_hash TEXT NOT NULL UNIQUE,
        key_prefix TEXT NOT NULL,
        name TEXT DEFAULT 'Default',
        is_active INTEGER DEFAULT 1,
        rate_limit INTEGER,
        expires_at TEXT,
        last_used_at TEXT,
        created_at TEXT,
        FOREIGN KEY (user_id) REFERENCES users(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS usage_logs (
        id TEXT PRIMARY KEY,
        api_key_id TEXT,
        tool_name TEXT NOT NULL,
        latency_ms INTEGER,
        status TEXT NOT NULL,
        input_params TEXT,
        response_size INTEGER,
        error_message TEXT,
        created_at TEXT,
        FOREIGN KEY (api_key_id) REFERENCES api_keys(id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS knowledge_chunks (
        id TEXT PRIMARY KEY,
        user_id TEXT,
        source_name TEXT NOT NULL,
        source_type TEXT,
        chunk_index INTEGER NOT NULL,
        section_title TEXT,
        content TEXT NOT NULL,
        token_count INTEGER,
        embedding BLOB,
        is_global INTEGER DEFAULT 0,
        created_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS design_patterns (
        id TEXT PRIMARY KEY,
        name TEXT NOT NULL,
        description TEXT,
        category TEXT,
        tags_json TEXT,
        source_url TEXT UNIQUE,
        color_scheme TEXT,
        primary_color TEXT,
        fonts_json TEXT,
        tokens_json TEXT,
        screenshot_url TEXT,
        embedding BLOB,
        created_at TEXT,
        updated_at TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS subscriptions (
        id TEXT PRIMARY KEY,
        user_id TEXT,
        stripe_customer_id TEXT NOT NULL UNIQUE,
        stripe_subscription_id TEXT,
        status TEXT,
        tier TEXT DEFAULT 'free',
        current_period_end TEXT,
        updated_at TEXT
    )
    """,
]

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_profiles_user ON design_profiles(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_profiles_updated ON design_profiles(updated_at)",
    "CREATE INDEX IF NOT EXISTS idx_keys_user ON api_keys(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_usage_key_time ON usage_logs(api_key_id, created_at)",
    "CREATE INDEX IF NOT EXISTS idx_chunks_user_source ON knowledge_chunks(user_id, source_name)",
    "CREATE INDEX IF NOT EXISTS idx_chunks_global ON knowledge_chunks(is_global)",
    "CREATE INDEX IF NOT EXISTS idx_patterns_category ON design_patterns(category)",
]


def ensure_schema(db_path: Optional[PathLike] = None) -> None:
    """Ensure all tables and indexes exist.

    Idempotent, safe to call on every server startup. Creates the
    database directory when it is missing.
    """
    path = Path(db_path or Config.DB_PATH)
    path.parent.mkdir(parents=True, exist_ok=True)

    with get_db_connection(path) as conn:
        cursor = conn.cursor()
        for statement in SCHEMA:
            cursor.execute(statement)
        for statement in INDEXES:
            cursor.execute(statement)

        added = []
        # Columns introduced after the first release
        if _add_column_if_missing(cursor, "design_profiles", "tags_json", "TEXT"):
            added.append("design_profiles.tags_json")
        if _add_column_if_missing(cursor, "design_patterns", "screenshot_url", "TEXT"):
            added.append("design_patterns.screenshot_url")

        conn.commit()

    if added:
        logger.info(f"Schema updated: {', '.join(added)}")
    else:
        logger.debug("Schema up to date")
