"""
Design profile tools
Load a stored profile, or create one by crawling a reference site
"""

import json
from typing import TYPE_CHECKING

from ..auth.api_keys import get_key_owner
from ..auth.usage_logger import tracked
from ..config import Config
from ..database import DatabaseError
from ..design.profiles import DesignProfileRepository
from ..design.tokens import (
    extract_design_tokens,
    tokens_to_css_variables,
    tokens_to_tailwind_config,
)
from ..firecrawl.ingest import ingest_design_from_url
from ..firecrawl.parse_content import parse_content_from_html
from ..schemas.tool_schemas import IngestDesignInput, ProjectInput
from ..utils.logging import logger

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

PROFILE_INSTRUCTIONS = (
    "Use these tokens for ALL styling in this session. Colors must match exactly. "
    "Use the CSS variables or Tailwind config; do not hardcode arbitrary values."
)
INGEST_HINT = 'Example: ingest_design(url="https://example.com", project_name="my-project")'


def _profile_payload(profile: dict) -> dict:
    return {
        "found": True,
        "profileId": profile["id"],
        "projectName": profile["project_name"],
        "sourceUrl": profile["source_url"],
        "updatedAt": profile["updated_at"],
        "tokens": profile["tokens"],
        "components": profile["components"],
        "tailwindConfig": profile["tailwind_config"],
        "cssVariables": profile["css_variables"],
        "instructions": PROFILE_INSTRUCTIONS,
    }


def register_profile_tools(mcp: "FastMCP") -> None:
    """
    Register design profile tools and the profile resource

    Args:
        mcp: FastMCP server instance
    """

    @mcp.tool()
    @tracked("get_design_profile")
    def get_design_profile(project_name: str = None) -> dict:
        """Load a persistent design profile for an AI coding session

        Returns the stored design tokens, component patterns, Tailwind
        config and CSS variables so every generated file stays on-brand.

        Args:
            project_name: Project to look up. If omitted, returns the most
                recently updated profile.

        Returns:
            Dictionary with found=True and the profile, or found=False
            with a message and a hint on creating one
        """
        try:
            try:
                validated = ProjectInput(project_name=project_name)
            except Exception as e:
                return {"error": f"Invalid input: {e}"}

            profile = DesignProfileRepository().get(validated.project_name)

            if not profile:
                if validated.project_name:
                    message = (
                        f'No design profile found for project "{validated.project_name}". '
                        "Run the ingest_design tool first with this project name and a URL to crawl."
                    )
                else:
                    message = (
                        "No design profiles found. Run the ingest_design tool "
                        "with a project name and URL to create one."
                    )
                return {"found": False, "message": message, "hint": INGEST_HINT}

            logger.info(f"Loaded design profile '{profile['project_name']}'")
            return _profile_payload(profile)

        except DatabaseError as e:
            logger.error(f"Database error in get_design_profile: {e}")
            return {"error": f"Database error: {e}"}
        except Exception as e:
            logger.error(f"get_design_profile error: {e}", exc_info=True)
            return {"error": str(e)}

    @mcp.tool()
    @tracked("ingest_design")
    def ingest_design(url: str, project_name: str, tags: list[str] = None) -> dict:
        """Crawl a website and save its design tokens as a project profile

        Extracts colors, typography, spacing and shadows, renders them as
        CSS variables and a Tailwind theme, and stores the result under
        the project name. Re-ingesting a project replaces its tokens.

        Args:
            url: Website to analyze (e.g., "https://linear.app")
            project_name: Name to store the profile under
            tags: Optional tags for categorization

        Returns:
            Dictionary with profileId, tokens, cssVariables, tailwindConfig
            and a summary of the page content

        Examples:
            ingest_design("https://stripe.com", "payments-app")
            ingest_design("linear.app", "my-saas", tags=["saas", "dark"])
        """
        try:
            try:
                validated = IngestDesignInput(url=url, project_name=project_name, tags=tags or [])
            except Exception as e:
                return {"error": f"Invalid input: {e}"}

            result = ingest_design_from_url(
                validated.url,
                include_screenshot=True,
                include_markdown=True,
                include_html=True,
            )
            if not result.success:
                return {"error": f"Failed to scrape {validated.url}: {result.error}"}
            if not result.branding:
                return {"error": f"No branding data could be extracted from {validated.url}"}

            tokens = extract_design_tokens(result.branding, validated.url)
            css_variables = tokens_to_css_variables(tokens)
            tailwind_config = tokens_to_tailwind_config(tokens)
            components = result.branding.get("components")

            profile_id = DesignProfileRepository().save(
                validated.project_name,
                tokens,
                components=components,
                tailwind_config=tailwind_config,
                css_variables=css_variables,
                source_url=validated.url,
                user_id=get_key_owner(Config.API_KEY),
                tags=validated.tags,
            )

            content = parse_content_from_html(result.html, validated.url) if result.html else None
            summary = {
                "headline": content.headline if content else "",
                "description": content.description if content else "",
                "navItems": content.nav_items if content else [],
                "logo": (content.logo if content else "") or result.branding.get("logo", ""),
                "imageCount": len(content.site_images) if content else 0,
                "markdownWords": len(result.markdown.split()) if result.markdown else 0,
                "hasScreenshot": bool(result.screenshot),
            }

            logger.info(f"Ingested {validated.url} into profile '{validated.project_name}'")
            return {
                "success": True,
                "profileId": profile_id,
                "projectName": validated.project_name,
                "sourceUrl": validated.url,
                "tags": validated.tags,
                "tokens": tokens,
                "cssVariables": css_variables,
                "tailwindConfig": tailwind_config,
                "components": components,
                "contentSummary": summary,
                "screenshot": result.screenshot,
            }

        except DatabaseError as e:
            logger.error(f"Database error in ingest_design: {e}")
            return {"error": f"Database error: {e}"}
        except Exception as e:
            logger.error(f"ingest_design error: {e}", exc_info=True)
            return {"error": str(e)}

    @mcp.resource("dzyne://profile/{project_name}")
    def profile_resource(project_name: str) -> str:
        """Design profile for a project as JSON"""
        try:
            profile = DesignProfileRepository().get(project_name)
            if not profile:
                return json.dumps({"found": False, "projectName": project_name})
            return json.dumps(_profile_payload(profile), indent=2)
        except Exception as e:
            logger.error(f"Error in profile resource: {e}", exc_info=True)
            return json.dumps({"error": str(e)})
