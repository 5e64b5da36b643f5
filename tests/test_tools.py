"""Tests for the MCP tool functions, called directly."""

import json
from unittest.mock import MagicMock, patch

import pytest

from conftest import capture_tools, fake_generator, unit_vector
from dzyne.design.patterns import DesignPatternRepository
from dzyne.design.profiles import DesignProfileRepository
from dzyne.design.tokens import extract_design_tokens
from dzyne.firecrawl.ingest import IngestionResult, to_branding_response
from dzyne.knowledge.retrieval import KnowledgeRepository
from dzyne.tools.generation_tools import register_generation_tools
from dzyne.tools.knowledge_tools import register_knowledge_tools
from dzyne.tools.pattern_tools import register_pattern_tools
from dzyne.tools.profile_tools import register_profile_tools
from dzyne.tools.review_tools import branding_summary, is_url, register_review_tools
from dzyne.tools.scaffold_tools import ALL_COMPONENTS, register_scaffold_tools
from dzyne.tools.typography_tools import register_typography_tools
from dzyne.utils.vector_store import encode_embedding

BRANDING = {
    "colorScheme": "dark",
    "logo": "https://acme.io/logo.svg",
    "colors": {"primary": "#635BFF", "background": "#0A2540"},
    "components": {"buttonPrimary": {"background": "#635BFF"}},
}


@pytest.fixture
def profile(db_path):
    tokens = extract_design_tokens(BRANDING, "https://acme.io")
    DesignProfileRepository(db_path).save("acme", tokens, css_variables=":root {}",
                                          source_url="https://acme.io", user_id="alice")
    return DesignProfileRepository(db_path).get("acme")


def fake_llm(reply: dict) -> MagicMock:
    llm = MagicMock()
    llm.complete_json.return_value = reply
    return llm


class TestProfileTools:
    @pytest.fixture
    def tools(self):
        return capture_tools(register_profile_tools)

    def test_profile_found(self, tools, profile):
        result = tools["get_design_profile"](project_name="acme")

        assert result["found"] is True
        assert result["projectName"] == "acme"
        assert result["tokens"]["colors"]["primary"] == "#635BFF"
        assert "instructions" in result

    def test_latest_profile_when_unnamed(self, tools, profile):
        assert tools["get_design_profile"]()["projectName"] == "acme"

    def test_profile_not_found(self, tools, db_path):
        result = tools["get_design_profile"](project_name="ghost")

        assert result["found"] is False
        assert '"ghost"' in result["message"]
        assert "ingest_design" in result["hint"]

    def test_invalid_project_name(self, tools, db_path):
        assert tools["get_design_profile"](project_name="../etc")["error"].startswith("Invalid input")

    def test_ingest_design_saves_profile(self, tools, db_path):
        scraped = IngestionResult(
            success=True,
            url="https://acme.io",
            branding=BRANDING,
            markdown="Ship faster with Acme",
            html="<html><body><h1>Ship faster</h1><p>Payments for builders.</p></body></html>",
            screenshot="https://cdn.example.com/shot.png",
        )

        with patch("dzyne.tools.profile_tools.ingest_design_from_url", return_value=scraped) as ingest:
            result = tools["ingest_design"](url="acme.io", project_name="acme", tags=[" SaaS "])

        assert ingest.call_args.args[0] == "https://acme.io"
        assert result["success"] is True
        assert result["tags"] == ["saas"]
        assert "--color-primary" in result["cssVariables"]
        assert result["contentSummary"]["headline"] == "Ship faster"
        assert result["contentSummary"]["markdownWords"] == 4
        assert result["contentSummary"]["hasScreenshot"] is True
        stored = DesignProfileRepository(db_path).get("acme")
        assert stored["id"] == result["profileId"]
        assert stored["source_url"] == "https://acme.io"
        assert stored["components"] == BRANDING["components"]

    def test_ingest_design_scrape_failure(self, tools, db_path):
        failed = IngestionResult(success=False, url="https://acme.io", error="HTTP 500")

        with patch("dzyne.tools.profile_tools.ingest_design_from_url", return_value=failed):
            result = tools["ingest_design"](url="https://acme.io", project_name="acme")

        assert result == {"error": "Failed to scrape https://acme.io: HTTP 500"}
        assert DesignProfileRepository(db_path).get("acme") is None

    def test_ingest_design_invalid_url(self, tools, db_path):
        assert tools["ingest_design"](url="localhost", project_name="acme")["error"].startswith("Invalid input")

    def test_profile_resource(self, tools, profile):
        payload = json.loads(tools["profile_resource"]("acme"))
        missing = json.loads(tools["profile_resource"]("ghost"))

        assert payload["profileId"] == profile["id"]
        assert missing == {"found": False, "projectName": "ghost"}


class TestKnowledgeTool:
    @pytest.fixture
    def tools(self):
        return capture_tools(register_knowledge_tools)

    def test_requires_a_user(self, tools, db_path):
        assert "No design profile found" in tools["query_design_knowledge"](query="contrast")["error"]

    def test_no_results(self, tools, profile):
        with patch("dzyne.knowledge.retrieval.get_generator", return_value=fake_generator()):
            result = tools["query_design_knowledge"](query="contrast", project_name="acme")

        assert result["results"] == []
        assert "dzyne knowledge upload" in result["message"]

    def test_results_for_profile_owner(self, tools, profile, db_path):
        KnowledgeRepository(db_path).insert_chunks([{
            "id": "c1",
            "user_id": "alice",
            "source_name": "Contrast Guide",
            "source_type": "md",
            "chunk_index": 0,
            "section_title": "WCAG",
            "content": "Body text needs 4.5:1 contrast.",
            "token_count": 8,
            "embedding": encode_embedding(unit_vector(1.0)),
            "is_global": 0,
            "created_at": "2026-01-01T00:00:00+00:00",
        }])

        with patch("dzyne.knowledge.retrieval.get_generator", return_value=fake_generator()):
            result = tools["query_design_knowledge"](query="contrast", project_name="acme")

        assert result["resultCount"] == 1
        assert result["results"][0] == {
            "source": "Contrast Guide",
            "section": "WCAG",
            "content": "Body text needs 4.5:1 contrast.",
            "relevance": 1.0,
        }
        assert "[Contrast Guide - WCAG]" in result["formattedContext"]

    def test_limit_out_of_range(self, tools, db_path):
        assert tools["query_design_knowledge"](query="contrast", limit=99)["error"].startswith("Invalid input")


class TestPatternTool:
    @pytest.fixture
    def tools(self):
        return capture_tools(register_pattern_tools)

    def test_search_patterns(self, tools, db_path):
        DesignPatternRepository(db_path).upsert({
            "name": "Stripe Hero",
            "description": "Gradient hero",
            "category": "landing-page",
            "tags": ["gradient"],
            "source_url": "https://stripe.com",
            "tokens": {"colors": {"primary": "#635BFF"}},
        }, unit_vector(1.0))

        with patch("dzyne.tools.pattern_tools.get_generator", return_value=fake_generator()):
            result = tools["search_patterns"](query="gradient landing page", category="landing-page")

        assert result["totalResults"] == 1
        assert result["patterns"][0]["name"] == "Stripe Hero"
        assert result["query"] == "gradient landing page"

    def test_no_matches_message(self, tools, db_path):
        with patch("dzyne.tools.pattern_tools.get_generator", return_value=fake_generator()):
            result = tools["search_patterns"](query="anything")

        assert result["totalResults"] == 0
        assert "lowering the similarity threshold" in result["message"]

    def test_unknown_category(self, tools, db_path):
        assert tools["search_patterns"](query="x", category="spaceship")["error"].startswith("Invalid input")


class TestTypographyTool:
    def test_pairing(self):
        tools = capture_tools(register_typography_tools)

        result = tools["pair_typography"](mood="luxury", use_case="editorial")

        assert result["language"] == "luxury"
        assert result["useCase"] == "editorial"
        assert len(result["alternatives"]) == 3

    def test_bad_use_case(self):
        tools = capture_tools(register_typography_tools)

        assert tools["pair_typography"](use_case="billboard")["error"].startswith("Invalid input")


class TestReviewTools:
    @pytest.fixture
    def tools(self):
        return capture_tools(register_review_tools)

    def test_is_url(self):
        assert is_url("https://stripe.com")
        assert not is_url("<button class='btn'>Go</button>")

    def test_consistency_requires_profile(self, tools, db_path):
        result = tools["check_design_consistency"](component_code="<button/>")

        assert "No design profile" in result["error"]

    def test_consistency(self, tools, profile):
        llm = fake_llm({"consistent": False, "issues": [{"severity": "high"}], "summary": "1 issue"})

        with patch("dzyne.tools.review_tools.get_llm", return_value=llm):
            result = tools["check_design_consistency"](component_code="<button style='color:#f00'/>",
                                                       project_name="acme")

        assert result["issueCount"] == 1
        assert result["correctedCode"] == "<button style='color:#f00'/>"
        system_prompt = llm.complete_json.call_args.args[0]
        assert 'DESIGN SYSTEM CONTEXT (project: "acme")' in system_prompt

    def test_diff_scrapes_urls(self, tools, db_path):
        scraped = IngestionResult(success=True, url="https://stripe.com", html="<h1>Stripe</h1>")
        llm = fake_llm({"overallDrift": "moderate", "differences": [{"category": "colors"}]})

        with patch("dzyne.tools.review_tools.ingest_design_from_url", return_value=scraped) as ingest, \
                patch("dzyne.tools.review_tools.get_llm", return_value=llm):
            result = tools["design_diff"](source="https://stripe.com", target="<h1>Mine</h1>")

        ingest.assert_called_once()
        assert result["sourceIsUrl"] is True
        assert result["targetIsUrl"] is False
        assert result["overallDrift"] == "moderate"
        assert result["differenceCount"] == 1
        user_prompt = llm.complete_json.call_args.args[1]
        assert "<h1>Stripe</h1>" in user_prompt
        assert "<h1>Mine</h1>" in user_prompt

    def test_diff_scrape_failure(self, tools, db_path):
        failed = IngestionResult(success=False, url="https://stripe.com", error="timeout")

        with patch("dzyne.tools.review_tools.ingest_design_from_url", return_value=failed):
            result = tools["design_diff"](source="https://stripe.com", target="<div/>")

        assert "timeout" in result["error"]

    def test_improvements_need_input(self, tools, db_path):
        assert "url or component_code" in tools["suggest_improvements"]()["error"]

    def test_improvements_focus(self, tools, db_path):
        llm = fake_llm({"overallScore": 72, "improvements": [], "quickWins": ["bigger CTA"]})

        with patch("dzyne.tools.review_tools.get_llm", return_value=llm):
            result = tools["suggest_improvements"](component_code="<main/>", focus_areas=["contrast"])

        assert result["overallScore"] == 72
        assert result["quickWins"] == ["bigger CTA"]
        assert "Focus on: contrast" in llm.complete_json.call_args.args[0]

    def test_llm_errors_are_returned(self, tools, profile):
        llm = MagicMock()
        llm.complete_json.side_effect = RuntimeError("model overloaded")

        with patch("dzyne.tools.review_tools.get_llm", return_value=llm):
            result = tools["check_design_consistency"](component_code="<a/>", project_name="acme")

        assert result == {"error": "model overloaded"}

    def test_branding_summary(self):
        summary = branding_summary(to_branding_response(BRANDING))

        assert "primary=#635BFF" in summary
        assert "bg=#0A2540" in summary
        assert "Weights: regular=400, medium=500, bold=700" in summary
        assert summary.endswith("Personality: unknown / unknown")

    def test_redesign_page(self, tools, profile):
        crawled = IngestionResult(
            success=True,
            url="https://acme.io",
            html='<nav><a href="/pricing">Pricing</a></nav><h1>Acme</h1><img src="/hero.jpg">',
            branding=to_branding_response(BRANDING),
            screenshot="https://cdn.firecrawl.dev/acme.png",
        )
        llm = fake_llm({
            "critique": {"summary": "Weak hierarchy", "issues": [{"section": "hero", "severity": "high"}]},
            "redesignedCss": "@import url(x); h1 { font-weight: 700; }",
            "sectionBreakdown": [{"section": "Hero", "changes": ["bolder h1"]}],
        })

        with patch("dzyne.tools.review_tools.ingest_design_from_url", return_value=crawled) as ingest, \
                patch("dzyne.tools.review_tools.get_knowledge_context", return_value="KNOWLEDGE") as knowledge, \
                patch("dzyne.tools.review_tools.get_llm", return_value=llm):
            result = tools["redesign_page"](url="acme.io", project_name="acme", focus_areas=["typography"])

        ingest.assert_called_once_with("https://acme.io", include_screenshot=True, include_html=True)
        assert knowledge.call_args.args[0] == "alice"
        assert result["projectName"] == "acme"
        assert result["focusAreas"] == ["typography"]
        assert result["originalImages"] == ["https://acme.io/hero.jpg"]
        assert result["fullPageScreenshot"] == "https://cdn.firecrawl.dev/acme.png"
        assert result["currentBranding"]["colors"]["primary"] == "#635BFF"
        assert result["critique"]["summary"] == "Weak hierarchy"
        assert result["redesignedCss"].startswith("@import")
        assert result["googleFontsLink"] == ""
        system_prompt, user_prompt = llm.complete_json.call_args.args
        assert "Focus ONLY on these areas: typography." in system_prompt
        assert "PRESERVE the existing brand colors" in system_prompt
        assert 'DESIGN SYSTEM CONTEXT (project: "acme")' in system_prompt
        assert "KNOWLEDGE" in system_prompt
        assert "<h1>Acme</h1>" in user_prompt

    def test_redesign_defaults_cover_all_areas(self, tools, db_path):
        crawled = IngestionResult(success=True, url="https://acme.io", html="<h1>Acme</h1>")
        llm = fake_llm({})

        with patch("dzyne.tools.review_tools.ingest_design_from_url", return_value=crawled), \
                patch("dzyne.tools.review_tools.get_llm", return_value=llm):
            result = tools["redesign_page"](url="https://acme.io", preserve_colors=False)

        assert result["focusAreas"] == ["typography", "spacing", "hierarchy", "contrast", "whitespace"]
        assert result["currentBranding"] is None
        assert result["projectName"] is None
        system_prompt = llm.complete_json.call_args.args[0]
        assert "Address all areas" in system_prompt
        assert "No branding data extracted." in system_prompt
        assert "You may refine colors" in system_prompt

    def test_redesign_crawl_failure(self, tools, db_path):
        failed = IngestionResult(success=False, url="https://acme.io", error="HTTP 403")

        with patch("dzyne.tools.review_tools.ingest_design_from_url", return_value=failed):
            result = tools["redesign_page"](url="https://acme.io")

        assert result == {"error": "Failed to crawl https://acme.io: HTTP 403"}

    def test_redesign_llm_failure_keeps_url(self, tools, db_path):
        crawled = IngestionResult(success=True, url="https://acme.io", html="<h1>Acme</h1>")
        llm = MagicMock()
        llm.complete_json.side_effect = RuntimeError("context length exceeded")

        with patch("dzyne.tools.review_tools.ingest_design_from_url", return_value=crawled), \
                patch("dzyne.tools.review_tools.get_llm", return_value=llm):
            result = tools["redesign_page"](url="https://acme.io")

        assert result == {"error": "context length exceeded", "url": "https://acme.io"}

    def test_redesign_unknown_focus(self, tools, db_path):
        result = tools["redesign_page"](url="https://acme.io", focus_areas=["animation"])

        assert result["error"].startswith("Invalid input")


class TestScaffoldTools:
    @pytest.fixture
    def tools(self):
        return capture_tools(register_scaffold_tools)

    def test_page(self, tools, profile):
        llm = fake_llm({
            "files": [{"filename": "page.tsx", "code": "export default function Page() {}"}],
            "dependencies": ["date-fns"],
        })

        with patch("dzyne.tools.scaffold_tools.get_llm", return_value=llm):
            result = tools["generate_page"](project_name="acme", page_type="pricing",
                                            description="three tiers with a yearly toggle")

        assert result["pageType"] == "pricing"
        assert result["framework"] == "nextjs"
        assert result["files"][0]["filename"] == "page.tsx"
        assert result["dependencies"] == ["date-fns"]
        assert result["notes"] == ""
        system_prompt, user_prompt = llm.complete_json.call_args.args
        assert "Next.js App Router page component" in system_prompt
        assert "realistic sample data" in system_prompt
        assert "Additional requirements: three tiers with a yearly toggle" in system_prompt
        assert user_prompt == ('Generate a "pricing" page for project "acme". '
                               "Context: three tiers with a yearly toggle")

    def test_page_without_sample_data(self, tools, profile):
        llm = fake_llm({"files": []})

        with patch("dzyne.tools.scaffold_tools.get_llm", return_value=llm):
            tools["generate_page"](project_name="acme", page_type="404", framework="html_css",
                                   include_sample_data=False)

        system_prompt = llm.complete_json.call_args.args[0]
        assert "standalone HTML page" in system_prompt
        assert "placeholder comments" in system_prompt
        assert "Additional requirements" not in system_prompt

    def test_page_rejects_unknown_type(self, tools, profile):
        assert tools["generate_page"](project_name="acme", page_type="casino")["error"].startswith("Invalid input")

    def test_page_without_profile(self, tools, db_path):
        result = tools["generate_page"](project_name="ghost", page_type="landing")

        assert "No design profile" in result["error"]
        assert "ingest_design" in result["hint"]

    def test_layout(self, tools, profile):
        llm = fake_llm({"files": [{"filename": "layout.tsx", "code": "..."}], "usage": "wrap pages"})

        with patch("dzyne.tools.scaffold_tools.get_llm", return_value=llm):
            result = tools["generate_layout"](project_name="acme", layout_type="dashboard_sidebar",
                                              features=["search", "search", "notifications"])

        assert result["layoutType"] == "dashboard_sidebar"
        assert result["features"] == ["search", "notifications"]
        assert result["usage"] == "wrap pages"
        system_prompt, user_prompt = llm.complete_json.call_args.args
        assert "Features to include: search, notifications" in system_prompt
        assert "{children}" in system_prompt
        assert user_prompt.endswith("with features: search, notifications")

    def test_layout_without_features(self, tools, profile):
        llm = fake_llm({})

        with patch("dzyne.tools.scaffold_tools.get_llm", return_value=llm):
            result = tools["generate_layout"](project_name="acme", layout_type="minimal")

        assert result["files"] == []
        assert "Features to include: none specified" in llm.complete_json.call_args.args[0]

    def test_layout_rejects_unknown_feature(self, tools, profile):
        result = tools["generate_layout"](project_name="acme", layout_type="marketing", features=["chat"])

        assert result["error"].startswith("Invalid input")

    def test_component_library_defaults_to_all(self, tools, profile):
        llm = fake_llm({"components": [{"name": "Button"}], "indexFile": "export * from './Button'"})

        with patch("dzyne.tools.scaffold_tools.get_llm", return_value=llm):
            result = tools["generate_component_library"](project_name="acme")

        assert result["framework"] == "react_tailwind"
        assert result["components"] == [{"name": "Button"}]
        assert result["tailwindConfig"] == ""
        system_prompt = llm.complete_json.call_args.args[0]
        assert f"Generate these components: {', '.join(ALL_COMPONENTS)}" in system_prompt
        assert "ComponentName.tsx" in system_prompt

    def test_component_library_subset(self, tools, profile):
        llm = fake_llm({})

        with patch("dzyne.tools.scaffold_tools.get_llm", return_value=llm):
            tools["generate_component_library"](project_name="acme", framework="vue_tailwind",
                                                components=[" Button ", "Tabs", "", "Button"])

        system_prompt, user_prompt = llm.complete_json.call_args.args
        assert "Generate these components: Button, Tabs" in system_prompt
        assert "ComponentName.vue" in system_prompt
        assert "using the vue_tailwind framework" in user_prompt

    def test_responsive_rules_with_site(self, tools, profile):
        scraped = IngestionResult(success=True, url="https://acme.io", html="<nav class='menu'></nav>")
        llm = fake_llm({"breakpoints": {"md": "768px"}, "rules": [{"element": "navigation"}]})

        with patch("dzyne.tools.scaffold_tools.ingest_design_from_url", return_value=scraped) as ingest, \
                patch("dzyne.tools.scaffold_tools.get_llm", return_value=llm):
            result = tools["generate_responsive_rules"](project_name="acme", url="acme.io")

        ingest.assert_called_once_with("https://acme.io", include_screenshot=False,
                                       include_markdown=True, include_html=True)
        assert result["breakpoints"] == {"md": "768px"}
        assert result["rules"] == [{"element": "navigation"}]
        assert result["typographyScale"] == {}
        system_prompt, user_prompt = llm.complete_json.call_args.args
        assert "<nav class='menu'></nav>" in system_prompt
        assert user_prompt.endswith("Analyze existing responsive behavior at https://acme.io.")

    def test_responsive_rules_survive_scrape_failure(self, tools, profile):
        failed = IngestionResult(success=False, url="https://acme.io", error="timeout")
        llm = fake_llm({"rules": []})

        with patch("dzyne.tools.scaffold_tools.ingest_design_from_url", return_value=failed), \
                patch("dzyne.tools.scaffold_tools.get_llm", return_value=llm):
            result = tools["generate_responsive_rules"](project_name="acme", url="https://acme.io")

        assert result["projectName"] == "acme"
        assert "Existing site HTML" not in llm.complete_json.call_args.args[0]

    def test_llm_errors_are_returned(self, tools, profile):
        llm = MagicMock()
        llm.complete_json.side_effect = RuntimeError("rate limited")

        with patch("dzyne.tools.scaffold_tools.get_llm", return_value=llm):
            result = tools["generate_component_library"](project_name="acme")

        assert result == {"error": "rate limited"}


class TestGenerationTools:
    @pytest.fixture
    def tools(self):
        return capture_tools(register_generation_tools)

    def test_convert_from_profile(self, tools, profile):
        llm = fake_llm({"files": [{"path": "Hero.tsx", "content": "export {}"}], "usage": "copy"})

        with patch("dzyne.tools.generation_tools.get_llm", return_value=llm):
            result = tools["convert_design"](project_name="acme", output_format="react", responsive=False)

        assert result["projectName"] == "acme"
        assert result["fileCount"] == 1
        assert "no breakpoints" in llm.complete_json.call_args.args[0]

    def test_convert_from_raw_tokens(self, tools, db_path):
        llm = fake_llm({"files": []})

        with patch("dzyne.tools.generation_tools.get_llm", return_value=llm):
            result = tools["convert_design"](tokens='{"colors": {"primary": "#0f766e"}}', output_format="vue")

        assert result["projectName"] is None
        assert "#0f766e" in llm.complete_json.call_args.args[0]

    def test_convert_bad_tokens(self, tools, db_path):
        assert "valid JSON" in tools["convert_design"](tokens="{not json")["error"]

    def test_convert_unknown_format(self, tools, db_path):
        assert tools["convert_design"](tokens="{}", output_format="angular")["error"].startswith("Invalid input")

    def test_convert_without_profile(self, tools, db_path):
        assert "No design profile" in tools["convert_design"]()["error"]

    def test_theme_variants(self, tools, profile):
        llm = fake_llm({"variants": {"dark": {"cssVariables": "[data-theme=dark] {}"}}, "toggleCode": "x"})

        with patch("dzyne.tools.generation_tools.get_llm", return_value=llm):
            result = tools["generate_theme_variants"](project_name="acme", variants=["dark", "dark", "muted"])

        assert result["baseTheme"] == "light"
        assert "dark" in result["variants"]
        assert llm.complete_json.call_args.args[1].endswith("dark, muted")

    def test_theme_variants_rejects_unknown(self, tools, profile):
        result = tools["generate_theme_variants"](project_name="acme", variants=["neon"])

        assert result["error"].startswith("Invalid input")
