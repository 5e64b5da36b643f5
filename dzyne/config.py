"""
Configuration management for the dzyne MCP server
Environment-based configuration, read once at import time
"""

import os
from pathlib import Path

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _split_csv(value: str) -> list[str]:
    return [item.strip().lower() for item in value.split(",") if item.strip()]


def _mask(secret: str) -> str:
    if not secret:
        return "(not set)"
    return secret[:8] + "..." if len(secret) > 8 else "***"


class Config:
    """Server configuration with environment variable support"""

    # Server metadata
    SERVER_NAME: str = os.getenv("MCP_SERVER_NAME", "dzyne")
    SERVER_VERSION: str = os.getenv("MCP_SERVER_VERSION", "0.1.0")

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    ENABLE_LOGGING: bool = os.getenv("ENABLE_LOGGING", "true").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "").upper()

    # Transport
    TRANSPORT: str = os.getenv("MCP_TRANSPORT", "stdio")
    HOST: str = os.getenv("MCP_HOST", "127.0.0.1")
    PORT: int = int(os.getenv("MCP_PORT", "8000"))

    # Storage
    _DEFAULT_DB = str(Path.home() / ".dzyne" / "dzyne.db")
    DB_PATH: Path = Path(os.getenv("DZYNE_DB_PATH", _DEFAULT_DB))

    # OpenAI
    OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "")
    OPENAI_CHAT_MODEL: str = os.getenv("OPENAI_CHAT_MODEL", "gpt-4o")
    OPENAI_EMBEDDING_MODEL: str = os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small")
    EMBEDDING_DIMENSIONS: int = int(os.getenv("EMBEDDING_DIMENSIONS", "1536"))

    # Firecrawl
    FIRECRAWL_API_KEY: str = os.getenv("FIRECRAWL_API_KEY", "")
    FIRECRAWL_API_URL: str = os.getenv("FIRECRAWL_API_URL", "https://api.firecrawl.dev")
    SCRAPE_TIMEOUT_MS: int = int(os.getenv("SCRAPE_TIMEOUT_MS", "30000"))

    # Stripe
    STRIPE_SECRET_KEY: str = os.getenv("STRIPE_SECRET_KEY", "")
    STRIPE_WEBHOOK_SECRET: str = os.getenv("STRIPE_WEBHOOK_SECRET", "")
    STRIPE_METER_EVENT: str = os.getenv("STRIPE_METER_EVENT", "designengine_api_call")

    # Access
    ADMIN_EMAILS: list[str] = _split_csv(os.getenv("ADMIN_EMAILS", ""))
    API_KEY: str = os.getenv("DZYNE_API_KEY", "")
    DEFAULT_RATE_LIMIT: int = int(os.getenv("DEFAULT_RATE_LIMIT", "60"))

    # Knowledge search
    KNOWLEDGE_SEARCH_LIMIT: int = int(os.getenv("KNOWLEDGE_SEARCH_LIMIT", "8"))
    KNOWLEDGE_SEARCH_THRESHOLD: float = float(os.getenv("KNOWLEDGE_SEARCH_THRESHOLD", "0.45"))
    EMBED_BATCH_SIZE: int = int(os.getenv("EMBED_BATCH_SIZE", "20"))
    EMBED_BATCH_DELAY: float = float(os.getenv("EMBED_BATCH_DELAY", "0.2"))

    @classmethod
    def validate(cls) -> bool:
        """Validate configuration"""
        errors = []

        if not cls.DB_PATH.parent.exists():
            errors.append(f"Database directory not found: {cls.DB_PATH.parent}")

        if not 0.0 <= cls.KNOWLEDGE_SEARCH_THRESHOLD <= 1.0:
            errors.append(
                f"KNOWLEDGE_SEARCH_THRESHOLD must be between 0 and 1, got {cls.KNOWLEDGE_SEARCH_THRESHOLD}"
            )

        if cls.EMBED_BATCH_SIZE < 1:
            errors.append(f"EMBED_BATCH_SIZE must be positive, got {cls.EMBED_BATCH_SIZE}")

        if cls.TRANSPORT not in ("stdio", "streamable-http"):
            errors.append(f"MCP_TRANSPORT must be stdio or streamable-http, got {cls.TRANSPORT}")

        if cls.API_KEY and not cls.API_KEY.startswith("de_live_"):
            errors.append("DZYNE_API_KEY must start with 'de_live_'")

        if cls.LOG_LEVEL and cls.LOG_LEVEL not in LOG_LEVELS:
            errors.append(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {cls.LOG_LEVEL}")

        if errors:
            raise ValueError("Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors))

        return True

    @classmethod
    def display(cls) -> str:
        """Display configuration (for debugging)"""
        return f"""
dzyne Server Configuration
==========================
Server: {cls.SERVER_NAME} v{cls.SERVER_VERSION}
Environment: {cls.ENVIRONMENT}
Debug: {cls.DEBUG}
Log level: {cls.LOG_LEVEL or ('DEBUG' if cls.DEBUG else 'INFO')}
Transport: {cls.TRANSPORT} ({cls.HOST}:{cls.PORT})

Storage:
  Database: {cls.DB_PATH}

Providers:
  OpenAI key: {_mask(cls.OPENAI_API_KEY)}
  Chat model: {cls.OPENAI_CHAT_MODEL}
  Embedding model: {cls.OPENAI_EMBEDDING_MODEL} ({cls.EMBEDDING_DIMENSIONS} dims)
  Firecrawl key: {_mask(cls.FIRECRAWL_API_KEY)}
  Stripe key: {_mask(cls.STRIPE_SECRET_KEY)}

Access:
  API key: {_mask(cls.API_KEY)}
  Admins: {len(cls.ADMIN_EMAILS)}

Knowledge:
  Search limit: {cls.KNOWLEDGE_SEARCH_LIMIT}
  Search threshold: {cls.KNOWLEDGE_SEARCH_THRESHOLD}
  Embed batch size: {cls.EMBED_BATCH_SIZE}
==========================
"""
