"""Tests for design profile storage, prompt building and the pattern library."""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from conftest import unit_vector
from dzyne.design.knowledge_prompt import DESIGN_KNOWLEDGE_PROMPT, get_design_system_prompt
from dzyne.design.patterns import PATTERN_CATEGORIES, DesignPatternRepository, build_search_text
from dzyne.design.profiles import (
    DesignProfileRepository,
    build_full_context_prompt,
    profile_to_context_prompt,
)
from dzyne.design.tokens import extract_design_tokens

STRIPE_PATTERN = {
    "name": "Stripe Hero Pattern",
    "description": "Gradient mesh background with a prominent CTA.",
    "category": "landing-page",
    "tags": ["gradient", "dark-theme", "fintech"],
    "source_url": "https://stripe.com",
    "tokens": {
        "colorScheme": "dark",
        "colors": {"primary": "#635BFF"},
        "typography": {"fontFamilies": {"primary": "Inter", "heading": "Inter"}},
    },
}


class TestDesignProfileRepository:
    def test_save_and_get(self, db_path):
        repo = DesignProfileRepository(db_path)
        tokens = extract_design_tokens({}, "https://x.io")

        profile_id = repo.save("my-saas", tokens, css_variables=":root {}", source_url="https://x.io",
                               user_id="alice", tags=["saas"])
        profile = repo.get("my-saas")

        assert profile["id"] == profile_id
        assert profile["tokens"]["colors"]["primary"] == "#3b82f6"
        assert profile["tags"] == ["saas"]
        assert profile["components"] is None
        assert repo.get_user_id("my-saas") == "alice"

    def test_resave_updates_and_keeps_owner(self, db_path):
        repo = DesignProfileRepository(db_path)
        first = repo.save("brand", {"colors": {"primary": "#000000"}}, user_id="alice")

        second = repo.save("brand", {"colors": {"primary": "#ffffff"}})

        assert first == second
        profile = repo.get("brand")
        assert profile["tokens"]["colors"]["primary"] == "#ffffff"
        assert profile["user_id"] == "alice"
        assert len(repo.list()) == 1

    def test_latest_profile_without_name(self, db_path):
        repo = DesignProfileRepository(db_path)
        repo.save("old", {"colors": {}})
        repo.save("new", {"colors": {}})

        assert repo.get()["project_name"] == "new"
        assert repo.get("missing") is None

    def test_list_by_user_and_delete(self, db_path):
        repo = DesignProfileRepository(db_path)
        repo.save("a", {}, user_id="alice")
        repo.save("b", {}, user_id="bob")

        assert [p["project_name"] for p in repo.list("alice")] == ["a"]
        assert not repo.delete("a", user_id="bob")
        assert repo.delete("a")
        assert repo.get("a") is None


class TestPrompts:
    def test_system_prompt(self):
        assert get_design_system_prompt() == DESIGN_KNOWLEDGE_PROMPT
        assert get_design_system_prompt("CTX").endswith("\n\nCTX")

    def test_profile_context(self):
        profile = {
            "project_name": "brand",
            "tokens": {"colors": {"primary": "#123456"}},
            "components": {"button": {}},
            "css_variables": ":root { --x: 1; }",
        }

        prompt = profile_to_context_prompt(profile)

        assert 'DESIGN SYSTEM CONTEXT (project: "brand")' in prompt
        assert '"primary": "#123456"' in prompt
        assert "Component Patterns:" in prompt
        assert "CSS Variables:\n:root { --x: 1; }" in prompt

    def test_full_context_appends_knowledge(self, db_path):
        profile = {"project_name": "brand", "tokens": {}, "user_id": "alice"}

        with patch("dzyne.design.profiles.get_knowledge_context", return_value="\nKNOWLEDGE\n") as knowledge:
            prompt = build_full_context_prompt(profile, "build a pricing table")

        knowledge.assert_called_once_with("alice", "build a pricing table")
        assert prompt.startswith(DESIGN_KNOWLEDGE_PROMPT)
        assert prompt.endswith("KNOWLEDGE\n")

    def test_full_context_without_knowledge(self, db_path):
        prompt = build_full_context_prompt(None, "anything")

        assert prompt == DESIGN_KNOWLEDGE_PROMPT


class TestPatterns:
    def test_search_text(self):
        text = build_search_text(STRIPE_PATTERN)

        assert text.startswith("Stripe Hero Pattern. Gradient mesh")
        assert "Category: landing-page" in text
        assert "Tags: gradient, dark-theme, fintech" in text
        assert "Color scheme: dark" in text
        assert "Fonts: Inter, Inter" in text

    def test_upsert_is_keyed_on_source_url(self, db_path):
        repo = DesignPatternRepository(db_path)

        first = repo.upsert(STRIPE_PATTERN, unit_vector(1.0))
        second = repo.upsert({**STRIPE_PATTERN, "name": "Stripe Hero v2"}, unit_vector(1.0))

        assert first == second
        assert repo.count() == 1

    def test_search_filters(self, db_path):
        repo = DesignPatternRepository(db_path)
        repo.upsert(STRIPE_PATTERN, unit_vector(1.0))
        repo.upsert({**STRIPE_PATTERN, "name": "Linear", "category": "dashboard", "tags": ["purple"],
                     "source_url": "https://linear.app"}, unit_vector(0.8, 0.6))
        repo.upsert({**STRIPE_PATTERN, "name": "Medium", "category": "blog", "tags": ["serif"],
                     "source_url": "https://medium.com"}, unit_vector(0.0, 1.0))

        ranked = repo.search(unit_vector(1.0), threshold=0.5)
        assert [p["name"] for p in ranked] == ["Stripe Hero Pattern", "Linear"]
        assert ranked[1]["similarity"] == pytest.approx(0.8, abs=1e-3)
        assert ranked[0]["tokens"]["colors"]["primary"] == "#635BFF"

        assert [p["name"] for p in repo.search(unit_vector(1.0), threshold=0.0, category="blog")] == ["Medium"]
        assert [p["name"] for p in repo.search(unit_vector(1.0), threshold=0.0, tags=["PURPLE"])] == ["Linear"]
        assert repo.search(unit_vector(1.0), category="portfolio") == []


def test_bundled_seed_patterns_are_well_formed():
    seed_file = Path(__file__).resolve().parent.parent / "scripts" / "seed_patterns.json"
    seeds = json.loads(seed_file.read_text())

    assert len(seeds) >= 100
    assert len({p["source_url"] for p in seeds}) == len(seeds)
    assert {p["category"] for p in seeds} == set(PATTERN_CATEGORIES)
    for pattern in seeds:
        assert pattern["name"]
        assert pattern["category"] in PATTERN_CATEGORIES
        assert build_search_text(pattern)
        assert pattern["tokens"]["colorScheme"] in ("light", "dark")
        assert pattern["tokens"]["colors"]["primary"].startswith("#")
