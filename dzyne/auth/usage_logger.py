"""Per-call usage logging for MCP tools."""

import functools
import json
import logging
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from ..config import Config
from ..database import DatabaseError, get_db_connection
from .api_keys import validate_api_key

logger = logging.getLogger(__name__)

USAGE_STATUSES = ("success", "error", "rate_limited")


def log_tool_usage(
    api_key_id: Optional[str],
    tool_name: str,
    latency_ms: int,
    status: str,
    input_params: Optional[dict] = None,
    response_size: Optional[int] = None,
    error_message: Optional[str] = None,
    db_path: Optional[Path] = None,
) -> Optional[str]:
    """Record one tool call. Returns the log id, or None if the write failed."""
    if status not in USAGE_STATUSES:
        raise ValueError(f"Unknown usage status: {status}")

    log_id = str(uuid.uuid4())
    try:
        with get_db_connection(db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO usage_logs
                (id, api_key_id, tool_name, latency_ms, status, input_params,
                 response_size, error_message, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    log_id,
                    api_key_id,
                    tool_name,
                    latency_ms,
                    status,
                    json.dumps(input_params, default=str) if input_params else None,
                    response_size or None,
                    error_message or None,
                    datetime.now(timezone.utc).isoformat(),
                )
            )
            conn.commit()
    except DatabaseError as e:
        logger.error(f"Failed to log usage: {e}")
        return None

    return log_id


def tracked(tool_name: str) -> Callable:
    """Decorator that authenticates and meters an MCP tool.

    With DZYNE_API_KEY configured, every call validates the key first
    and is logged as success or error afterwards. A result dict that
    carries an "error" key counts as an error. Without a configured
    key the tool runs untracked.

    Usage:
        @mcp.tool()
        @tracked("search_patterns")
        def search_patterns(query: str) -> dict: ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs) -> Any:
            if not Config.API_KEY:
                return func(*args, **kwargs)

            validation = validate_api_key(Config.API_KEY)
            if not validation.valid:
                if validation.reason == "rate_limited":
                    log_tool_usage(
                        validation.key_id, tool_name, 0, "rate_limited",
                        input_params=kwargs, error_message=validation.error,
                    )
                logger.warning(f"{tool_name} rejected: {validation.error}")
                return {"error": validation.error}

            start = time.perf_counter()
            result = func(*args, **kwargs)
            latency_ms = int((time.perf_counter() - start) * 1000)

            is_error = isinstance(result, dict) and "error" in result
            log_tool_usage(
                validation.key_id,
                tool_name,
                latency_ms,
                "error" if is_error else "success",
                input_params=kwargs,
                response_size=len(json.dumps(result, default=str)),
                error_message=str(result["error"]) if is_error else None,
            )
            return result

        return wrapper

    return decorator
