"""Shared test fixtures and helpers."""

from unittest.mock import MagicMock

import numpy as np
import pytest

from dzyne.config import Config
from dzyne.database import ensure_schema


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep tests away from real keys and metering."""
    monkeypatch.setattr(Config, "API_KEY", "")
    monkeypatch.setattr(Config, "OPENAI_API_KEY", "sk-test")
    monkeypatch.setattr(Config, "FIRECRAWL_API_KEY", "fc-test")
    monkeypatch.setattr(Config, "ADMIN_EMAILS", ["admin@dzyne.dev"])
    monkeypatch.setattr(Config, "EMBED_BATCH_DELAY", 0)


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    path = tmp_path / "dzyne.db"
    monkeypatch.setattr(Config, "DB_PATH", path)
    ensure_schema(path)
    return path


def unit_vector(*values: float, dim: int = 8) -> np.ndarray:
    """Small embedding with the given leading components."""
    vec = np.zeros(dim, dtype=np.float32)
    vec[:len(values)] = values
    return vec


def fake_generator(vector: np.ndarray = None) -> MagicMock:
    """Embedding generator returning a fixed vector (or one row per text)."""
    vector = unit_vector(1.0) if vector is None else vector
    generator = MagicMock()
    generator.generate.return_value = vector
    generator.generate_batch.side_effect = lambda texts: np.vstack([vector] * len(texts))
    return generator


def capture_tools(register) -> dict:
    """Run a register_* function against a fake FastMCP and return its tools by name."""
    tools = {}

    def collect(*args, **kwargs):
        def decorator(fn):
            tools[fn.__name__] = fn
            return fn
        return decorator

    mcp = MagicMock()
    mcp.tool.side_effect = collect
    mcp.resource.side_effect = collect
    mcp.prompt.side_effect = collect
    register(mcp)
    return tools
