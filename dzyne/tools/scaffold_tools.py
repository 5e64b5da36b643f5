"""
Scaffolding tools
Pages, layout shells, component libraries and responsive rulesets,
all styled from a stored design profile
"""

from typing import TYPE_CHECKING

from ..auth.usage_logger import tracked
from ..design.profiles import (
    DesignProfileRepository,
    build_full_context_prompt,
    profile_to_context_prompt,
)
from ..firecrawl.ingest import ingest_design_from_url
from ..schemas.tool_schemas import (
    ComponentLibraryInput,
    GenerateLayoutInput,
    GeneratePageInput,
    ResponsiveRulesInput,
)
from ..utils.llm import get_llm
from ..utils.logging import logger

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

NO_PROFILE_HINT = 'Example: ingest_design(url="https://your-site.com", project_name="my-project")'
MAX_SITE_CHARS = 20000

ALL_COMPONENTS = [
    "Button", "Card", "Input", "Select", "Textarea", "Modal", "Badge",
    "Table", "Avatar", "Alert", "Tabs", "Dropdown", "Tooltip",
    "Breadcrumb", "Pagination",
]

PAGE_FRAMEWORKS = {
    "react_tailwind": "a React function component with TypeScript and Tailwind CSS. Export it as default.",
    "nextjs": ("a Next.js App Router page component. Export metadata, prefer server components and "
               "name the main file page.tsx. Also generate a loading.tsx skeleton."),
    "html_css": "a standalone HTML page with embedded CSS.",
}

LAYOUT_FRAMEWORKS = {
    "react_tailwind": "React function components with TypeScript and Tailwind CSS.",
    "nextjs": ("a Next.js App Router layout.tsx with TypeScript and Tailwind CSS. layout.tsx accepts "
               "{children}; add \"use client\" only to interactive pieces."),
    "html_css": "standalone HTML with embedded CSS and semantic HTML5 elements.",
}

LIBRARY_FRAMEWORKS = {
    "react_tailwind": ("React function components with TypeScript and Tailwind CSS classes. "
                       "Export each component by name."),
    "react_css": ("React function components with TypeScript and CSS modules, one .module.css "
                  "file per component."),
    "html_css": "plain HTML with embedded CSS. Each component is a reusable snippet with a <style> block.",
    "vue_tailwind": "Vue 3 single-file components using <script setup lang=\"ts\"> and Tailwind CSS classes.",
}

LIBRARY_EXTENSIONS = {
    "react_tailwind": ".tsx",
    "react_css": ".tsx",
    "html_css": ".html",
    "vue_tailwind": ".vue",
}

PAGE_PROMPT = """You are a senior full-stack engineer building production pages.

{context}

Generate {framework_guide}

REQUIREMENTS:
- Use ONLY the design tokens above, never generic Tailwind colors such as bg-blue-500
- Import shared components (Button, Card, Input, Modal, Badge, Table, Avatar, Alert, Tabs) from "@/components/ui"; assume they exist and match the design system
- {sample_data}
- Fully responsive, mobile-first
- Semantic HTML and proper accessibility
{extra}
Return ONLY valid JSON:
{{
  "files": [
    {{"filename": "page.tsx", "code": "complete file content"}},
    {{"filename": "loading.tsx", "code": "loading skeleton content"}}
  ],
  "dependencies": ["npm packages needed beyond the standard stack"],
  "notes": "brief implementation notes for the agent"
}}"""

LAYOUT_PROMPT = """You are a senior frontend architect building layout systems.

{context}

Generate a "{layout_type}" layout using {framework_guide}

Features to include: {features}

REQUIREMENTS:
- Use ONLY the design tokens above for colors, fonts, spacing, border radius and shadows
- Responsive: the sidebar collapses to a mobile drawer on small screens and the top nav adapts
- Include a {{children}} placeholder for page content
- Accessibility: nav landmarks, a skip link, aria-expanded on the mobile menu
- Split into logical files (layout, sidebar, topbar, mobile drawer) and keep each file complete

Return ONLY valid JSON:
{{
  "files": [
    {{"filename": "layout.tsx", "code": "complete file"}},
    {{"filename": "Sidebar.tsx", "code": "complete file"}}
  ],
  "usage": "example of using this layout from a page component"
}}

Only include files the layout type needs. A marketing layout might not need Sidebar.tsx."""

LIBRARY_PROMPT = """You are a senior UI engineer building a design-system component library.

{context}

Generate {framework_guide}

For EACH component include:
- A full TypeScript props interface (or the framework's equivalent)
- All standard variants (Button: primary, secondary, ghost, danger; Alert: info, success, warning, error; Badge: default, outline)
- Accessibility attributes and keyboard handling
- Responsive behavior where it applies
- ONLY the design tokens above for colors, fonts, spacing, border radius and shadows

Return ONLY valid JSON:
{{
  "components": [
    {{"name": "ComponentName", "filename": "ComponentName{extension}", "code": "complete file content"}}
  ],
  "indexFile": "barrel export file content",
  "tailwindConfig": "tailwind.config.ts theme.extend additions these components need",
  "cssVariables": "CSS custom properties to add to globals.css"
}}

Generate these components: {components}"""

RESPONSIVE_PROMPT = """You are a responsive design architect.

{context}
{site_context}

Generate a complete responsive ruleset for this project that defines how every common UI element adapts across breakpoints.

Return ONLY valid JSON:
{{
  "breakpoints": {{"sm": "640px", "md": "768px", "lg": "1024px", "xl": "1280px"}},
  "rules": [
    {{
      "element": "navigation",
      "desktop": "Horizontal nav with all links visible",
      "tablet": "Hamburger menu with slide-out drawer",
      "mobile": "Bottom nav bar with 4 key items",
      "classes": {{"desktop": "lg:flex lg:items-center lg:gap-8", "tablet": "md:hidden", "mobile": "fixed bottom-0 inset-x-0 flex justify-around py-2"}}
    }}
  ],
  "typographyScale": {{
    "h1": {{"desktop": "text-5xl", "tablet": "text-4xl", "mobile": "text-3xl"}},
    "body": {{"desktop": "text-base", "tablet": "text-base", "mobile": "text-sm"}}
  }},
  "spacingScale": {{
    "sectionPadding": {{"desktop": "py-24 px-8", "tablet": "py-16 px-6", "mobile": "py-12 px-4"}},
    "cardGap": {{"desktop": "gap-8", "tablet": "gap-6", "mobile": "gap-4"}}
  }},
  "tailwindScreenConfig": "complete screens config for tailwind.config.ts"
}}

Include at least 8 element rules covering navigation, grid, sidebar, hero, cards, tables, modals, forms, images and footer."""


def _no_profile() -> dict:
    return {
        "error": "No design profile found. Run ingest_design first.",
        "hint": NO_PROFILE_HINT,
    }


def register_scaffold_tools(mcp: "FastMCP") -> None:
    """Register page, layout, component library and responsive tools"""

    @mcp.tool()
    @tracked("generate_page")
    def generate_page(
        project_name: str,
        page_type: str,
        description: str = None,
        framework: str = "nextjs",
        include_sample_data: bool = True,
    ) -> dict:
        """Generate a complete page component styled with a design profile

        Args:
            project_name: Profile used for styling
            page_type: landing, pricing, about, contact, dashboard, settings,
                profile, analytics, table_view, form, auth_login, auth_signup,
                blog_list, blog_post, docs, 404 or empty_state
            description: Extra requirements for the page
            framework: react_tailwind, nextjs or html_css (default: nextjs)
            include_sample_data: Include realistic typed mock data (default: True)

        Returns:
            Dictionary with files (filename, code), dependencies and notes

        Examples:
            generate_page(project_name="my-saas", page_type="pricing")
        """
        try:
            try:
                validated = GeneratePageInput(
                    project_name=project_name,
                    page_type=page_type,
                    description=description,
                    framework=framework,
                    include_sample_data=include_sample_data,
                )
            except Exception as e:
                return {"error": f"Invalid input: {e}"}

            profile = DesignProfileRepository().get(validated.project_name)
            if not profile:
                return _no_profile()

            sample_data = (
                "Include realistic sample data with proper TypeScript types"
                if validated.include_sample_data
                else "Use placeholder comments for data, no hardcoded sample data"
            )
            extra = f"- Additional requirements: {validated.description}\n" if validated.description else ""
            user_prompt = f'Generate a "{validated.page_type}" page for project "{profile["project_name"]}".'
            if validated.description:
                user_prompt += f" Context: {validated.description}"

            result = get_llm().complete_json(
                PAGE_PROMPT.format(
                    context=build_full_context_prompt(profile, "generating a complete page component"),
                    framework_guide=PAGE_FRAMEWORKS[validated.framework],
                    sample_data=sample_data,
                    extra=extra,
                ),
                user_prompt,
                temperature=0.3,
                max_tokens=16000,
            )

            files = result.get("files") or []
            logger.info(f"generate_page produced {len(files)} files for {validated.page_type}")
            return {
                "projectName": profile["project_name"],
                "pageType": validated.page_type,
                "framework": validated.framework,
                "files": files,
                "dependencies": result.get("dependencies") or [],
                "notes": result.get("notes") or "",
            }

        except Exception as e:
            logger.error(f"generate_page error: {e}", exc_info=True)
            return {"error": str(e)}

    @mcp.tool()
    @tracked("generate_layout")
    def generate_layout(
        project_name: str,
        layout_type: str,
        features: list[str] = None,
        framework: str = "nextjs",
    ) -> dict:
        """Generate a layout shell (nav, sidebar, content area, footer)

        Args:
            project_name: Profile used for styling
            layout_type: dashboard_sidebar, dashboard_topnav, marketing,
                docs_sidebar, blog, minimal or split_panel
            features: Any of search, user_menu, notifications, breadcrumbs,
                footer, mobile_drawer
            framework: react_tailwind, nextjs or html_css (default: nextjs)

        Returns:
            Dictionary with files (filename, code) and a usage example
        """
        try:
            try:
                validated = GenerateLayoutInput(
                    project_name=project_name,
                    layout_type=layout_type,
                    features=features or [],
                    framework=framework,
                )
            except Exception as e:
                return {"error": f"Invalid input: {e}"}

            profile = DesignProfileRepository().get(validated.project_name)
            if not profile:
                return _no_profile()

            feature_list = ", ".join(validated.features) or "none specified"
            result = get_llm().complete_json(
                LAYOUT_PROMPT.format(
                    context=build_full_context_prompt(profile, "generating page layout structure"),
                    layout_type=validated.layout_type,
                    framework_guide=LAYOUT_FRAMEWORKS[validated.framework],
                    features=feature_list,
                ),
                f'Generate a "{validated.layout_type}" layout for "{profile["project_name"]}" '
                f"with features: {feature_list}",
                temperature=0.3,
                max_tokens=16000,
            )

            return {
                "projectName": profile["project_name"],
                "layoutType": validated.layout_type,
                "features": validated.features,
                "files": result.get("files") or [],
                "usage": result.get("usage") or "",
            }

        except Exception as e:
            logger.error(f"generate_layout error: {e}", exc_info=True)
            return {"error": str(e)}

    @mcp.tool()
    @tracked("generate_component_library")
    def generate_component_library(
        project_name: str,
        framework: str = "react_tailwind",
        components: list[str] = None,
    ) -> dict:
        """Generate styled base components from a design profile

        Each component comes with typed props and its standard variants.

        Args:
            project_name: Profile used for styling
            framework: react_tailwind, react_css, html_css or vue_tailwind
                (default: react_tailwind)
            components: Component names to generate; all fifteen base
                components when omitted

        Returns:
            Dictionary with components (name, filename, code), a barrel
            index file, Tailwind additions and CSS variables
        """
        try:
            try:
                validated = ComponentLibraryInput(
                    project_name=project_name,
                    framework=framework,
                    components=components or [],
                )
            except Exception as e:
                return {"error": f"Invalid input: {e}"}

            profile = DesignProfileRepository().get(validated.project_name)
            if not profile:
                return _no_profile()

            component_list = ", ".join(validated.components or ALL_COMPONENTS)
            result = get_llm().complete_json(
                LIBRARY_PROMPT.format(
                    context=profile_to_context_prompt(profile),
                    framework_guide=LIBRARY_FRAMEWORKS[validated.framework],
                    extension=LIBRARY_EXTENSIONS[validated.framework],
                    components=component_list,
                ),
                f'Generate the complete component library for project "{profile["project_name"]}" '
                f"using the {validated.framework} framework. Components: {component_list}",
                temperature=0.3,
                max_tokens=16000,
            )

            generated = result.get("components") or []
            logger.info(f"generate_component_library produced {len(generated)} components")
            return {
                "projectName": profile["project_name"],
                "framework": validated.framework,
                "components": generated,
                "indexFile": result.get("indexFile") or "",
                "tailwindConfig": result.get("tailwindConfig") or "",
                "cssVariables": result.get("cssVariables") or "",
            }

        except Exception as e:
            logger.error(f"generate_component_library error: {e}", exc_info=True)
            return {"error": str(e)}

    @mcp.tool()
    @tracked("generate_responsive_rules")
    def generate_responsive_rules(project_name: str, url: str = None) -> dict:
        """Generate breakpoints and per-element responsive behavior

        Args:
            project_name: Profile the rules are built for
            url: Existing site to analyze for current responsive behavior

        Returns:
            Dictionary with breakpoints, element rules, typography and
            spacing scales and a Tailwind screens config
        """
        try:
            try:
                validated = ResponsiveRulesInput(project_name=project_name, url=url)
            except Exception as e:
                return {"error": f"Invalid input: {e}"}

            profile = DesignProfileRepository().get(validated.project_name)
            if not profile:
                return _no_profile()

            site_context = ""
            if validated.url:
                scraped = ingest_design_from_url(
                    validated.url, include_screenshot=False, include_markdown=True, include_html=True
                )
                if scraped.success:
                    site_html = (scraped.html or scraped.markdown or "")[:MAX_SITE_CHARS]
                    site_context = f"\nExisting site HTML to analyze for responsive patterns:\n{site_html}"
                else:
                    # Rules are still useful without the live site
                    logger.warning(f"generate_responsive_rules could not scrape {validated.url}: {scraped.error}")

            user_prompt = f'Generate responsive rules for "{profile["project_name"]}".'
            if validated.url:
                user_prompt += f" Analyze existing responsive behavior at {validated.url}."

            result = get_llm().complete_json(
                RESPONSIVE_PROMPT.format(
                    context=profile_to_context_prompt(profile),
                    site_context=site_context,
                ),
                user_prompt,
                temperature=0.3,
                max_tokens=12000,
            )

            return {
                "projectName": profile["project_name"],
                "breakpoints": result.get("breakpoints") or {},
                "rules": result.get("rules") or [],
                "typographyScale": result.get("typographyScale") or {},
                "spacingScale": result.get("spacingScale") or {},
                "tailwindScreenConfig": result.get("tailwindScreenConfig") or "",
            }

        except Exception as e:
            logger.error(f"generate_responsive_rules error: {e}", exc_info=True)
            return {"error": str(e)}
