"""Design audit of a live site, used to show what a new design system fixes."""

import json
import logging
from typing import Optional

from .design.knowledge_prompt import DESIGN_KNOWLEDGE_PROMPT
from .firecrawl.ingest import ingest_design_from_url, normalize_url
from .utils.llm import get_llm

logger = logging.getLogger(__name__)

MAX_HTML_CHARS = 25000

AUDIT_CATEGORIES = (
    "accessibility", "whitespace", "hierarchy", "contrast",
    "responsive", "consistency", "typography", "color-theory",
)

AUDIT_SYSTEM_PROMPT = """You are an expert UI/UX design auditor with deep knowledge of design conventions and accessibility standards.

{knowledge}

Analyze the CURRENT HTML/CSS of a website. Identify design convention violations, accessibility issues and areas for improvement. Reference exact colors, sizes, spacing values and elements.

Frame each violation in terms of an established principle such as the 60/30/10 rule, WCAG contrast, a typographic scale, whitespace rhythm or visual hierarchy.{tokens_context}

Return ONLY valid JSON:
{{
  "overallScore": 0-100,
  "improvements": [
    {{
      "category": "{categories}",
      "severity": "high|medium|low",
      "issue": "specific problem found in the current site",
      "suggestion": "actionable fix, referencing the new design tokens when given",
      "impact": "why this matters for users and business"
    }}
  ],
  "quickWins": ["top 3 highest-impact changes the new design system addresses"]
}}

Order improvements by severity, high first. Include 5-10 improvements."""


def audit_site(url: str, tokens: Optional[dict] = None) -> dict:
    """Score a site's current design and list improvements.

    Args:
        url: Site to audit; https:// is assumed when no scheme is given
        tokens: Optional new design tokens the user is migrating to

    Returns:
        Dictionary with success, url, overallScore, improvements and
        quickWins, or success=False with an error message
    """
    normalized = normalize_url(url)

    try:
        ingestion = ingest_design_from_url(
            normalized,
            include_screenshot=False,
            include_markdown=False,
            include_html=True,
        )
        if not ingestion.success or not ingestion.html:
            return {"success": False, "error": "Could not fetch the site for analysis."}

        tokens_context = ""
        if tokens:
            tokens_context = (
                "\n\nThe user's NEW design tokens (what they are migrating TO):\n"
                + json.dumps(tokens, indent=2)
            )

        system_prompt = AUDIT_SYSTEM_PROMPT.format(
            knowledge=DESIGN_KNOWLEDGE_PROMPT,
            tokens_context=tokens_context,
            categories="|".join(AUDIT_CATEGORIES),
        )
        user_prompt = (
            f"Audit this page ({normalized}):\n\n"
            f"```html\n{ingestion.html[:MAX_HTML_CHARS]}\n```"
        )

        result = get_llm().complete_json(system_prompt, user_prompt, temperature=0.3, max_tokens=8000)

        return {
            "success": True,
            "url": normalized,
            "overallScore": result.get("overallScore", 0),
            "improvements": result.get("improvements") or [],
            "quickWins": result.get("quickWins") or [],
        }

    except Exception as e:
        logger.error(f"Audit failed for {normalized}: {e}", exc_info=True)
        return {"success": False, "error": str(e) or "Audit failed"}
