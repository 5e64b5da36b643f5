"""Typography pairing tool"""

from typing import TYPE_CHECKING

from ..auth.usage_logger import tracked
from ..design.typography import pair_typography as pair_fonts
from ..schemas.tool_schemas import TypographyInput
from ..utils.logging import logger

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP


def register_typography_tools(mcp: "FastMCP") -> None:
    """Register typography tools"""

    @mcp.tool()
    @tracked("pair_typography")
    def pair_typography(primary_font: str = None, mood: str = None, use_case: str = None) -> dict:
        """Suggest a heading/body font pairing with a modular type scale

        Args:
            primary_font: Font you want to keep (e.g., "Playfair Display")
            mood: Free-text mood (e.g., "calm and trustworthy", "bold startup")
            use_case: website, app, documentation, marketing or editorial

        Returns:
            Dictionary with heading, body, type scale, CSS variables, a
            ready-to-paste CSS block, rationale and three alternatives

        Examples:
            pair_typography(mood="luxury editorial")
            pair_typography(primary_font="Inter", use_case="documentation")
        """
        try:
            try:
                validated = TypographyInput(primary_font=primary_font, mood=mood, use_case=use_case)
            except Exception as e:
                return {"error": f"Invalid input: {e}"}

            result = pair_fonts(validated.primary_font, validated.mood, validated.use_case)
            logger.info(f"Paired {result['heading']} / {result['body']} ({result['language']})")
            return result

        except Exception as e:
            logger.error(f"pair_typography error: {e}", exc_info=True)
            return {"error": str(e)}
