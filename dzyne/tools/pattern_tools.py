"""
Design pattern search tool
Semantic search across ingested reference designs
"""

from pathlib import Path
from typing import TYPE_CHECKING, Optional

from ..auth.usage_logger import tracked
from ..design.patterns import DesignPatternRepository
from ..schemas.tool_schemas import PatternSearchInput
from ..utils.logging import logger
from ..utils.openai_embeddings import get_generator

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP


def search_design_patterns(
    query: str,
    category: Optional[str] = None,
    tags: Optional[list[str]] = None,
    limit: int = 10,
    threshold: float = 0.5,
    db_path: Optional[Path] = None,
) -> dict:
    """Embed a query and rank stored patterns against it.

    Returns:
        Dictionary with patterns, query and totalResults
    """
    query_embedding = get_generator().generate(query)
    patterns = DesignPatternRepository(db_path).search(
        query_embedding,
        limit=limit,
        threshold=threshold,
        category=category,
        tags=tags,
    )
    return {
        "patterns": patterns,
        "query": query,
        "totalResults": len(patterns),
    }


def register_pattern_tools(mcp: "FastMCP") -> None:
    """Register pattern search tools"""

    @mcp.tool()
    @tracked("search_patterns")
    def search_patterns(
        query: str,
        category: str = None,
        tags: list[str] = None,
        limit: int = 10,
        threshold: float = 0.5,
    ) -> dict:
        """Semantic search across ingested design patterns

        Returns matching patterns ranked by vector similarity, each with
        its full design tokens.

        Args:
            query: Natural language query (e.g., "dark fintech landing page with gradient mesh")
            category: Optional filter: landing-page, dashboard, e-commerce,
                portfolio, blog, saas, marketing, mobile-app, documentation,
                social-media, news, corporate
            tags: Keep patterns matching any of these tags
            limit: Maximum results (1-50, default: 10)
            threshold: Minimum similarity 0.0-1.0 (default: 0.5)

        Returns:
            Dictionary with patterns (id, name, description, category, tags,
            sourceUrl, tokens, similarity), query and totalResults
        """
        try:
            try:
                validated = PatternSearchInput(
                    query=query, category=category, tags=tags, limit=limit, threshold=threshold
                )
            except Exception as e:
                return {"error": f"Invalid input: {e}"}

            result = search_design_patterns(
                validated.query,
                category=validated.category,
                tags=validated.tags,
                limit=validated.limit,
                threshold=validated.threshold,
            )

            if result["totalResults"] == 0:
                return {
                    "query": validated.query,
                    "totalResults": 0,
                    "patterns": [],
                    "message": "No design patterns matched your query. Try broadening "
                               "your search or lowering the similarity threshold.",
                }

            logger.info(f"Pattern search returned {result['totalResults']} results")
            return result

        except Exception as e:
            logger.error(f"search_patterns error: {e}", exc_info=True)
            return {"error": str(e)}
