"""
Input validation utilities
Shared checks used by tools and CLI commands
"""

import re
from urllib.parse import urlparse

from ..errors import ValidationError

PROJECT_NAME_PATTERN = re.compile(r'^[\w][\w .\-]{0,99}$')

def validate_project_name(project_name: str) -> str:
    """
    Validate a design profile project name

    Raises:
        ValidationError: If the name is empty or malformed
    """
    if not project_name or not project_name.strip():
        raise ValidationError("Project name cannot be empty")

    project_name = project_name.strip()

    if not PROJECT_NAME_PATTERN.match(project_name):
        raise ValidationError(
            f"Invalid project name: {project_name!r} "
            "(letters, digits, spaces, dots, dashes; max 100 characters)"
        )

    return project_name

def validate_url(url: str) -> str:
    """
    Validate an http(s) URL, adding https:// when the scheme is missing

    Raises:
        ValidationError: If the URL has no host
    """
    if not url or not url.strip():
        raise ValidationError("URL cannot be empty")

    url = url.strip()
    if not url.startswith(("http://", "https://")):
        url = f"https://{url}"

    parsed = urlparse(url)
    if not parsed.netloc or "." not in parsed.netloc:
        raise ValidationError(f"Invalid URL: {url}")

    return url

def validate_search_query(query: str, max_length: int = 500) -> str:
    """
    Validate and sanitize search query

    Raises:
        ValidationError: If query is invalid
    """
    if not query or not query.strip():
        raise ValidationError("Search query cannot be empty")

    query = query.strip()

    if len(query) < 2:
        raise ValidationError("Search query must be at least 2 characters")

    if len(query) > max_length:
        raise ValidationError(f"Search query too long (max: {max_length} characters)")

    return query

def validate_limit(limit: int, max_limit: int = 50) -> int:
    """
    Validate result limit

    Raises:
        ValidationError: If limit is invalid
    """
    if limit < 1:
        raise ValidationError("Limit must be positive")

    if max_limit and limit > max_limit:
        raise ValidationError(f"Limit too large (max: {max_limit})")

    return limit

def validate_threshold(threshold: float) -> float:
    if not 0.0 <= threshold <= 1.0:
        raise ValidationError(f"Threshold must be between 0 and 1, got {threshold}")
    return threshold
