"""
Knowledge base tools
Search uploaded design references (textbooks, style guides)
"""

from typing import TYPE_CHECKING

from ..auth.api_keys import get_key_owner
from ..auth.usage_logger import tracked
from ..config import Config
from ..design.profiles import DesignProfileRepository
from ..knowledge.retrieval import format_knowledge_context, search_knowledge
from ..schemas.tool_schemas import KnowledgeQueryInput
from ..utils.logging import logger

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

QUERY_THRESHOLD = 0.4


def _resolve_user(project_name: str = None) -> str | None:
    """Caller identity: API key owner, then project owner, then latest profile owner."""
    user_id = get_key_owner(Config.API_KEY)
    if user_id:
        return user_id

    profiles = DesignProfileRepository()
    if project_name:
        user_id = profiles.get_user_id(project_name)
    return user_id or profiles.get_user_id()


def register_knowledge_tools(mcp: "FastMCP") -> None:
    """Register knowledge base tools"""

    @mcp.tool()
    @tracked("query_design_knowledge")
    def query_design_knowledge(query: str, project_name: str = None, limit: int = 8) -> dict:
        """Search the design knowledge base for principles relevant to a question

        Returns excerpts from uploaded textbooks, style guides and
        reference docs with source citations. Use this to ground design
        decisions in established theory.

        Args:
            query: Design question (e.g., "what makes good color contrast?")
            project_name: Project whose owner's knowledge base to search
            limit: Number of results (1-15, default: 8)

        Returns:
            Dictionary with results (source, section, content, relevance),
            formattedContext ready for a prompt, and instructions
        """
        try:
            try:
                validated = KnowledgeQueryInput(query=query, project_name=project_name, limit=limit)
            except Exception as e:
                return {"error": f"Invalid input: {e}"}

            user_id = _resolve_user(validated.project_name)
            if not user_id:
                return {
                    "error": "No design profile found. Create a design profile first, "
                             "then upload knowledge documents with `dzyne knowledge upload`."
                }

            chunks = search_knowledge(user_id, validated.query, validated.limit, QUERY_THRESHOLD)

            if not chunks:
                return {
                    "query": validated.query,
                    "results": [],
                    "message": "No relevant knowledge found. Upload design textbooks or "
                               "reference docs with `dzyne knowledge upload` to build your knowledge base.",
                }

            logger.info(f"Knowledge query matched {len(chunks)} chunks")
            return {
                "query": validated.query,
                "resultCount": len(chunks),
                "results": [
                    {
                        "source": chunk["sourceName"],
                        "section": chunk["sectionTitle"],
                        "content": chunk["chunkText"],
                        "relevance": chunk["similarity"],
                    }
                    for chunk in chunks
                ],
                "formattedContext": format_knowledge_context(chunks),
                "instructions": "Apply these design principles to your current task. "
                                "Cite the source when making design decisions based on this knowledge.",
            }

        except Exception as e:
            logger.error(f"query_design_knowledge error: {e}", exc_info=True)
            return {"error": str(e)}
