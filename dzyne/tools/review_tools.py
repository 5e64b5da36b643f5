"""
Design review tools
Consistency checks, design diffs, improvement suggestions and CSS-only
redesigns, all grounded in the stored design profile and knowledge base
"""

from typing import TYPE_CHECKING
from urllib.parse import urlparse

from ..auth.usage_logger import tracked
from ..design.knowledge_prompt import get_design_system_prompt
from ..design.profiles import DesignProfileRepository, build_full_context_prompt, profile_to_context_prompt
from ..errors import IngestionError
from ..firecrawl.ingest import ingest_design_from_url
from ..firecrawl.parse_content import parse_content_from_html
from ..knowledge.retrieval import get_knowledge_context
from ..schemas.tool_schemas import (
    REDESIGN_FOCUS_AREAS,
    ConsistencyInput,
    DesignDiffInput,
    RedesignPageInput,
    SuggestImprovementsInput,
)
from ..utils.llm import get_llm
from ..utils.logging import logger

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

MAX_DIFF_CHARS = 15000
MAX_ANALYSIS_CHARS = 30000
MAX_REDESIGN_CHARS = 60000

REDESIGN_KNOWLEDGE_QUERY = "typography hierarchy spacing whitespace font pairing weight contrast accessibility"

NO_PROFILE_HINT = 'Example: ingest_design(url="https://your-site.com", project_name="my-project")'

CONSISTENCY_PROMPT = """You are a design system auditor. You compare code against a design system and find inconsistencies.

{context}

Compare the component code against these design tokens. Report EVERY deviation with severity, element, problem and the exact fix, then provide corrected code.

=== HARDCODED VALUE DETECTION ===
1. Hardcoded hex colors (#xxx, #xxxxxx, #xxxxxxxx) are severity "high". Colors MUST use CSS custom properties (var(--color-*)).
2. Hardcoded rgba() values encoding a palette color are severity "high". Use color-mix(in srgb, var(--color-*) N%, transparent).
3. Generic Tailwind color utilities (bg-gray-*, text-slate-*, bg-blue-*) that map to no profile token are severity "high".
4. Inline font-family strings not wrapped in a CSS variable are severity "medium".
5. Pixel spacing off the 8px grid is severity "medium".
6. correctedCode must replace ALL hardcoded hex/rgba values with the matching CSS variable.

Return ONLY valid JSON:
{{
  "consistent": boolean,
  "issues": [
    {{
      "severity": "high" | "medium" | "low",
      "element": "button, card, text, ...",
      "problem": "specific description of the mismatch",
      "fix": "exact change, including the CSS variable name to use"
    }}
  ],
  "correctedCode": "the COMPLETE component code with every fix applied",
  "summary": "one-line summary of consistency status"
}}"""

DIFF_PROMPT = """You are a design QA engineer comparing two implementations for visual differences.

{context}Compare the SOURCE (expected reference design) against the TARGET (actual implementation). Find every visual difference.

Categorize each difference as colors, typography, spacing, layout, components, borders or shadows.

Severity guide:
- high: brand colors wrong, fonts wrong, layout structure different
- medium: spacing off, border-radius different, shadow intensity
- low: minor spacing tweaks, subtle shade differences

Return ONLY valid JSON:
{{
  "identical": false,
  "overallDrift": "none|minimal|moderate|significant|major",
  "differences": [
    {{
      "category": "colors|typography|spacing|layout|components|borders|shadows",
      "element": "button, heading, card, nav, ...",
      "source": "what the source has",
      "target": "what the target has",
      "severity": "high|medium|low"
    }}
  ],
  "summary": "one-paragraph summary of the overall drift",
  "fixPatch": "the code or class changes needed to make target match source"
}}"""

IMPROVEMENTS_PROMPT = """You are an expert UI/UX design auditor and accessibility consultant.

{context}{focus}

Analyze the provided content and return specific, actionable improvements.

Accessibility: WCAG contrast (AA needs 4.5:1 for normal text, 3:1 for large text), ARIA attributes, keyboard navigation.
Hierarchy: heading sizes, font weights, color emphasis, section spacing.
Whitespace: padding, margins, breathing room.
Responsive: layout adaptation on mobile and tablet.
Animation: subtle micro-interactions that improve UX.
Consistency: agreement with the design profile tokens, when provided.

Return ONLY valid JSON:
{{
  "overallScore": 0-100,
  "improvements": [
    {{
      "category": "accessibility|whitespace|hierarchy|contrast|responsive|animation|consistency",
      "severity": "high|medium|low",
      "issue": "specific description of the problem",
      "suggestion": "specific fix",
      "impact": "why this matters",
      "codeFix": "exact CSS/class/code change"
    }}
  ],
  "quickWins": ["top 3 changes with the biggest visual impact"],
  "correctedCode": "the full corrected code (only when component code was given)"
}}

Order improvements by severity, high first."""

REDESIGN_PROMPT = """You are a senior design consultant performing a surgical redesign of an existing website.

CORE RULE: Do NOT change the HTML structure, content, images or layout. Generate ONLY a CSS override stylesheet that makes the existing page look better by fixing foundational design issues. Same brand, same content, better typography, spacing and hierarchy.

{knowledge}
{profile_context}
{branding}

{focus}

{colors}

ANALYSIS PROCESS:
1. Identify every semantic section (nav, hero, product grid, testimonials, CTA, footer)
2. Note the fonts, sizes, weights, spacing and colors each section uses
3. Identify violations of design principles: weak hierarchy, inconsistent spacing, poor font pairing, low contrast
4. Generate a COMPLETE replacement stylesheet that fixes them
5. Recommend Google Fonts replacements with weights and rationale

STYLESHEET REQUIREMENTS:
- Selectors that match the existing HTML structure
- Override font-family, font-size, font-weight, line-height, letter-spacing, padding and margin
- An 8px spacing grid (multiples of 0.5rem)
- A typographic scale with a 1.25 or 1.333 ratio
- Heading weights decrease with size (h1 bold, h2 semibold, h3 medium)
- Body text 16-18px, line-height 1.5-1.7, max-width around 65ch
- Subtle transitions on hover states
- @import for Google Fonts at the top

Return ONLY valid JSON:
{{
  "critique": {{
    "summary": "2-3 sentence overview of the main design issues",
    "issues": [
      {{"section": "string", "problem": "string", "severity": "high|medium|low", "principle": "the design principle violated"}}
    ]
  }},
  "recommendations": {{
    "typography": {{
      "heading": {{"family": "Google Font name", "weights": [400, 700], "rationale": "why this font"}},
      "body": {{"family": "Google Font name", "weights": [400, 500, 600], "rationale": "why this font"}}
    }},
    "spacingBaseUnit": "8px",
    "keyChanges": ["the most impactful changes"]
  }},
  "redesignedCss": "the full stylesheet as one string, @import first",
  "googleFontsLink": "<link> tag for the recommended fonts",
  "sectionBreakdown": [
    {{"section": "Section name", "changes": ["what changed and why"]}}
  ]
}}"""

PRESERVE_COLORS_RULE = (
    "PRESERVE the existing brand colors. Do NOT change hues. Only fix contrast ratios that fail "
    "WCAG AA (4.5:1 body, 3:1 large text) by adjusting lightness or opacity, keeping the palette recognizable."
)
REFINE_COLORS_RULE = "You may refine colors if the current palette has issues, but explain the rationale."


def is_url(value: str) -> bool:
    parsed = urlparse(value.strip())
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def resolve_content(value: str) -> str:
    """Scrape a URL to its HTML (or markdown); return code unchanged."""
    if not is_url(value):
        return value
    result = ingest_design_from_url(
        value.strip(), include_screenshot=False, include_markdown=True, include_html=True
    )
    if not result.success:
        raise IngestionError(f"Failed to scrape {value}: {result.error}", url=value)
    return result.html or result.markdown or ""


def branding_summary(branding: dict) -> str:
    """One block describing the scraped brand, for the redesign prompt."""
    colors = branding["colors"]
    typography = branding["typography"]
    families = typography["fontFamilies"]
    sizes = typography["fontSizes"]
    weights = typography["fontWeights"]
    personality = branding.get("personality") or {}
    return (
        "CURRENT BRAND ANALYSIS:\n"
        f"Colors: primary={colors['primary']}, secondary={colors['secondary']}, accent={colors['accent']}, "
        f"bg={colors['background']}, text={colors['textPrimary']}\n"
        f'Fonts: heading="{families["heading"]}", body="{families["primary"]}"\n'
        f"Font sizes: h1={sizes['h1']}, h2={sizes['h2']}, body={sizes['body']}\n"
        f"Weights: regular={weights['regular']}, medium={weights['medium']}, bold={weights['bold']}\n"
        f"Border radius: {branding['spacing']['borderRadius']}\n"
        f"Personality: {personality.get('tone') or 'unknown'} / {personality.get('energy') or 'unknown'}"
    )


def register_review_tools(mcp: "FastMCP") -> None:
    """Register design review tools"""

    @mcp.tool()
    @tracked("check_design_consistency")
    def check_design_consistency(component_code: str, project_name: str = None) -> dict:
        """Compare component code against a stored design profile

        Args:
            component_code: JSX/TSX, HTML or CSS to check
            project_name: Profile to check against (latest when omitted)

        Returns:
            Dictionary with consistent, issueCount, issues (severity,
            element, problem, fix), correctedCode and summary
        """
        try:
            try:
                validated = ConsistencyInput(component_code=component_code, project_name=project_name)
            except Exception as e:
                return {"error": f"Invalid input: {e}"}

            profile = DesignProfileRepository().get(validated.project_name)
            if not profile:
                return {
                    "error": "No design profile found. Run ingest_design first to create one.",
                    "hint": NO_PROFILE_HINT,
                }

            context = build_full_context_prompt(profile, "checking design consistency of component code")
            result = get_llm().complete_json(
                CONSISTENCY_PROMPT.format(context=context),
                f"Check this code for design consistency:\n\n```\n{validated.component_code}\n```",
                temperature=0.2,
                max_tokens=8000,
            )

            issues = result.get("issues") or []
            return {
                "projectName": profile["project_name"],
                "consistent": result.get("consistent", False),
                "issueCount": len(issues),
                "issues": issues,
                "correctedCode": result.get("correctedCode") or validated.component_code,
                "summary": result.get("summary") or "",
            }

        except Exception as e:
            logger.error(f"check_design_consistency error: {e}", exc_info=True)
            return {"error": str(e)}

    @mcp.tool()
    @tracked("design_diff")
    def design_diff(source: str, target: str, project_name: str = None) -> dict:
        """Compare two designs and report the drift between them

        Either side may be a URL (scraped first) or component code.

        Args:
            source: The expected design, as a URL or code
            target: The actual implementation, as a URL or code
            project_name: Optional profile for extra context

        Returns:
            Dictionary with overallDrift, differences by category with
            severity, summary and a fixPatch
        """
        try:
            try:
                validated = DesignDiffInput(source=source, target=target, project_name=project_name)
            except Exception as e:
                return {"error": f"Invalid input: {e}"}

            source_content = resolve_content(validated.source)
            target_content = resolve_content(validated.target)

            profile = DesignProfileRepository().get(validated.project_name)
            context = ""
            if profile:
                context = build_full_context_prompt(profile, "comparing design implementations for drift") + "\n\n"

            result = get_llm().complete_json(
                DIFF_PROMPT.format(context=context),
                "Compare these two designs:\n\n"
                f"--- SOURCE (expected) ---\n{source_content[:MAX_DIFF_CHARS]}\n\n"
                f"--- TARGET (actual) ---\n{target_content[:MAX_DIFF_CHARS]}",
                temperature=0.2,
                max_tokens=12000,
            )

            differences = result.get("differences") or []
            return {
                "projectName": profile["project_name"] if profile else None,
                "sourceIsUrl": is_url(validated.source),
                "targetIsUrl": is_url(validated.target),
                "identical": result.get("identical", False),
                "overallDrift": result.get("overallDrift") or "unknown",
                "differenceCount": len(differences),
                "differences": differences,
                "summary": result.get("summary") or "",
                "fixPatch": result.get("fixPatch") or "",
            }

        except Exception as e:
            logger.error(f"design_diff error: {e}", exc_info=True)
            return {"error": str(e)}

    @mcp.tool()
    @tracked("suggest_improvements")
    def suggest_improvements(
        url: str = None,
        component_code: str = None,
        project_name: str = None,
        focus_areas: list[str] = None,
    ) -> dict:
        """Suggest design improvements for a page or component

        Args:
            url: Page to analyze
            component_code: Component code to analyze (used when no url)
            project_name: Optional profile for context
            focus_areas: Any of accessibility, whitespace, hierarchy,
                contrast, responsive, animation, consistency, all
                (default: ["all"])

        Returns:
            Dictionary with overallScore, improvements, quickWins and,
            for component code, correctedCode
        """
        try:
            try:
                validated = SuggestImprovementsInput(
                    url=url,
                    component_code=component_code,
                    project_name=project_name,
                    focus_areas=focus_areas or ["all"],
                )
            except Exception as e:
                return {"error": f"Invalid input: {e}"}

            content = validated.component_code or ""
            if validated.url:
                result = ingest_design_from_url(
                    validated.url, include_screenshot=False, include_markdown=True, include_html=True
                )
                if not result.success:
                    return {"error": f"Failed to scrape URL: {result.error}"}
                content = result.html or result.markdown or ""

            profile = DesignProfileRepository().get(validated.project_name)
            context = build_full_context_prompt(profile, "suggesting design improvements") + "\n\n" if profile else ""

            if "all" in validated.focus_areas:
                focus = ("Analyze ALL areas: accessibility, whitespace, visual hierarchy, contrast, "
                         "responsive behavior, animation opportunities and design consistency.")
            else:
                focus = f"Focus on: {', '.join(validated.focus_areas)}"

            subject = f"page ({validated.url})" if validated.url else "component"
            result = get_llm().complete_json(
                IMPROVEMENTS_PROMPT.format(context=context, focus=focus),
                f"Analyze this {subject}:\n\n```\n{content[:MAX_ANALYSIS_CHARS]}\n```",
                temperature=0.3,
                max_tokens=12000,
            )

            return {
                "projectName": profile["project_name"] if profile else None,
                "sourceUrl": validated.url,
                "overallScore": result.get("overallScore", 0),
                "improvements": result.get("improvements") or [],
                "quickWins": result.get("quickWins") or [],
                "correctedCode": result.get("correctedCode") or None,
            }

        except Exception as e:
            logger.error(f"suggest_improvements error: {e}", exc_info=True)
            return {"error": str(e)}

    @mcp.tool()
    @tracked("redesign_page")
    def redesign_page(
        url: str,
        project_name: str = None,
        preserve_colors: bool = True,
        focus_areas: list[str] = None,
    ) -> dict:
        """Generate a CSS-only redesign of an existing page

        Crawls the page and returns an override stylesheet that improves
        typography, spacing, hierarchy and contrast while keeping the
        content, images and layout untouched.

        Args:
            url: Page to redesign
            project_name: Optional profile for extra brand context
            preserve_colors: Keep the brand palette and only fix contrast
                (default: True)
            focus_areas: Any of typography, spacing, hierarchy, contrast,
                whitespace (default: all)

        Returns:
            Dictionary with critique, recommendations, redesignedCss,
            googleFontsLink, sectionBreakdown, the current branding and
            the page's images
        """
        try:
            try:
                validated = RedesignPageInput(
                    url=url,
                    project_name=project_name,
                    preserve_colors=preserve_colors,
                    focus_areas=focus_areas or list(REDESIGN_FOCUS_AREAS),
                )
            except Exception as e:
                return {"error": f"Invalid input: {e}"}

            crawl = ingest_design_from_url(validated.url, include_screenshot=True, include_html=True)
            if not crawl.success or not crawl.html:
                return {"error": f"Failed to crawl {validated.url}: {crawl.error or 'No HTML returned'}"}

            profile = DesignProfileRepository().get(validated.project_name) if validated.project_name else None
            profile_context = (
                f"ADDITIONAL DESIGN PROFILE CONTEXT:\n{profile_to_context_prompt(profile)}" if profile else ""
            )
            knowledge = get_design_system_prompt(
                get_knowledge_context(profile.get("user_id") if profile else None, REDESIGN_KNOWLEDGE_QUERY)
            )

            if set(validated.focus_areas) != set(REDESIGN_FOCUS_AREAS):
                focus = f"Focus ONLY on these areas: {', '.join(validated.focus_areas)}."
            else:
                focus = "Address all areas: typography, spacing, hierarchy, contrast and whitespace."

            result = get_llm().complete_json(
                REDESIGN_PROMPT.format(
                    knowledge=knowledge,
                    profile_context=profile_context,
                    branding=branding_summary(crawl.branding) if crawl.branding else "No branding data extracted.",
                    focus=focus,
                    colors=PRESERVE_COLORS_RULE if validated.preserve_colors else REFINE_COLORS_RULE,
                ),
                f"Redesign this page: {validated.url}\n\nHere is the full HTML of the page:\n\n"
                f"{crawl.html[:MAX_REDESIGN_CHARS]}\n\nGenerate the surgical CSS redesign now.",
                temperature=0.3,
                max_tokens=16000,
            )

            branding = crawl.branding
            return {
                "url": validated.url,
                "projectName": profile["project_name"] if profile else None,
                "preserveColors": validated.preserve_colors,
                "focusAreas": validated.focus_areas,
                "originalImages": parse_content_from_html(crawl.html, validated.url).site_images,
                "fullPageScreenshot": crawl.screenshot,
                "currentBranding": {
                    "colors": branding["colors"],
                    "fonts": branding["typography"]["fontFamilies"],
                    "fontSizes": branding["typography"]["fontSizes"],
                } if branding else None,
                "critique": result.get("critique") or {},
                "recommendations": result.get("recommendations") or {},
                "redesignedCss": result.get("redesignedCss") or "",
                "googleFontsLink": result.get("googleFontsLink") or "",
                "sectionBreakdown": result.get("sectionBreakdown") or [],
            }

        except Exception as e:
            logger.error(f"redesign_page error: {e}", exc_info=True)
            return {"error": str(e), "url": url}
