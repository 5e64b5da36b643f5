"""Tests for the live site audit."""

from unittest.mock import MagicMock, patch

from dzyne.audit import audit_site
from dzyne.firecrawl.ingest import IngestionResult


def _scraped(html="<h1>Old site</h1>"):
    return IngestionResult(success=True, url="https://old.example.com", html=html)


def test_audit_scores_site():
    llm = MagicMock()
    llm.complete_json.return_value = {
        "overallScore": 54,
        "improvements": [{"category": "contrast", "severity": "high", "issue": "Grey on grey"}],
        "quickWins": ["Darken body text"],
    }

    with patch("dzyne.audit.ingest_design_from_url", return_value=_scraped()) as ingest, \
            patch("dzyne.audit.get_llm", return_value=llm):
        result = audit_site("old.example.com", tokens={"colors": {"primary": "#1B365D"}})

    assert ingest.call_args.args[0] == "https://old.example.com"
    assert result["success"] is True
    assert result["overallScore"] == 54
    assert result["quickWins"] == ["Darken body text"]
    system_prompt, user_prompt = llm.complete_json.call_args.args
    assert "migrating TO" in system_prompt
    assert "#1B365D" in system_prompt
    assert "<h1>Old site</h1>" in user_prompt


def test_audit_without_html():
    failed = IngestionResult(success=False, url="https://down.example.com", error="HTTP 503")

    with patch("dzyne.audit.ingest_design_from_url", return_value=failed):
        result = audit_site("https://down.example.com")

    assert result == {"success": False, "error": "Could not fetch the site for analysis."}


def test_audit_llm_failure():
    llm = MagicMock()
    llm.complete_json.side_effect = RuntimeError("bad gateway")

    with patch("dzyne.audit.ingest_design_from_url", return_value=_scraped()), \
            patch("dzyne.audit.get_llm", return_value=llm):
        result = audit_site("https://old.example.com")

    assert result == {"success": False, "error": "bad gateway"}
