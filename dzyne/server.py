"""
dzyne MCP Server
Design profiles, pattern search, knowledge retrieval and design review
tools for AI coding assistants

Architecture:
- Modular tool registration (one register_* per tool group)
- Tool arguments validated with pydantic schemas
- API-key metering through the tracked decorator
- Logging to stderr, stdout is reserved for the stdio transport
"""

from typing import Optional

from mcp.server.fastmcp import FastMCP

from .config import Config
from .database import check_database_health, ensure_schema
from .design.patterns import DesignPatternRepository
from .knowledge.retrieval import KnowledgeRepository
from .tools.generation_tools import register_generation_tools
from .tools.knowledge_tools import register_knowledge_tools
from .tools.pattern_tools import register_pattern_tools
from .tools.profile_tools import register_profile_tools
from .tools.review_tools import register_review_tools
from .tools.scaffold_tools import register_scaffold_tools
from .tools.typography_tools import register_typography_tools
from .utils.logging import logger

TRANSPORTS = ("stdio", "streamable-http")


def create_server() -> FastMCP:
    """
    Create and configure the MCP server

    Returns:
        Configured FastMCP server instance
    """
    # Schema first: it creates the database directory that validate() checks
    ensure_schema()

    try:
        Config.validate()
        if Config.DEBUG:
            logger.info(Config.display())
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        raise

    health = check_database_health()
    if health["status"] != "healthy":
        logger.error(f"Database unhealthy: {health.get('error')}")
        raise RuntimeError(f"Database health check failed: {health.get('error')}")

    logger.info(f"Database healthy: {health['design_profiles']} profiles, "
                f"{health['knowledge_chunks']} knowledge chunks, "
                f"{health['design_patterns']} patterns")

    if not Config.API_KEY:
        logger.warning("DZYNE_API_KEY not set: tool calls will not be metered")

    mcp = FastMCP(Config.SERVER_NAME, host=Config.HOST, port=Config.PORT)

    logger.info("Registering tools...")
    register_profile_tools(mcp)  # get_design_profile, ingest_design + profile resource
    register_knowledge_tools(mcp)
    register_pattern_tools(mcp)
    register_typography_tools(mcp)
    register_generation_tools(mcp)  # convert_design, generate_theme_variants
    register_scaffold_tools(mcp)  # pages, layouts, component libraries, responsive rules
    register_review_tools(mcp)  # consistency, diff, improvements, redesign

    @mcp.tool()
    def get_server_health() -> dict:
        """Get server health for monitoring and debugging

        Returns:
            Dictionary with server name and version, database status with
            row counts per table, knowledge and pattern availability, and
            which upstream providers are configured
        """
        try:
            database = check_database_health()
            knowledge = KnowledgeRepository()
            return {
                "server": Config.SERVER_NAME,
                "version": Config.SERVER_VERSION,
                "status": "healthy" if database["status"] == "healthy" else "degraded",
                "database": database,
                "knowledge": {
                    "hasGlobalChunks": knowledge.has_global_chunks(),
                    "globalSources": len(knowledge.list_global_sources()),
                },
                "patterns": DesignPatternRepository().count(),
                "providers": {
                    "openai": bool(Config.OPENAI_API_KEY),
                    "firecrawl": bool(Config.FIRECRAWL_API_KEY),
                    "stripe": bool(Config.STRIPE_SECRET_KEY),
                },
                "metered": bool(Config.API_KEY),
            }
        except Exception as e:
            logger.error(f"Server health error: {e}", exc_info=True)
            return {"status": "unhealthy", "error": str(e)}

    @mcp.prompt()
    def design_session(project_name: str, task: str) -> str:
        """Start an on-brand coding session for a project

        Args:
            project_name: Design profile to work from
            task: What you are about to build
        """
        return f"""# Design Session: {project_name}

## Your Task
{task}

## Workflow

### Step 1: Load the design system
Call `get_design_profile("{project_name}")` and keep its tokens for the whole session.

### Step 2: Ground decisions in theory
Call `query_design_knowledge("<question about {task}>", project_name="{project_name}")`
for any layout, color or typography decision you are unsure about.

### Step 3: Build
Use only the profile's CSS variables or Tailwind theme. No hardcoded colors.

### Step 4: Verify
Run `check_design_consistency(<your code>, project_name="{project_name}")` and apply
every high-severity fix before presenting the result.
"""

    logger.info(f"Server '{Config.SERVER_NAME}' v{Config.SERVER_VERSION} ready")
    return mcp


def main(transport: Optional[str] = None):
    """Main entry point"""
    transport = transport or Config.TRANSPORT
    if transport not in TRANSPORTS:
        raise ValueError(f"Unknown transport: {transport}. Use one of: {', '.join(TRANSPORTS)}")

    try:
        mcp = create_server()
        logger.info(f"Starting {transport} transport")
        mcp.run(transport=transport)
    except Exception as e:
        logger.critical(f"Server failed to start: {e}")
        raise


if __name__ == "__main__":
    main()
