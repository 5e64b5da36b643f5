"""Tests for knowledge storage, search and document upload."""

from unittest.mock import patch

import numpy as np
import pytest

from conftest import fake_generator, unit_vector
from dzyne.auth.users import UserRepository
from dzyne.config import Config
from dzyne.errors import ApiKeyError, KnowledgeError
from dzyne.knowledge.ingest import upload_document
from dzyne.knowledge.retrieval import (
    KnowledgeRepository,
    format_knowledge_context,
    get_knowledge_context,
    search_knowledge,
)
from dzyne.utils.vector_store import encode_embedding

DOCUMENT = (
    "# Color Theory\n"
    "The 60/30/10 rule balances dominant, secondary and accent colors across a layout. "
    "Accent colors should be reserved for calls to action and active states.\n"
)


def _row(chunk_id, source, vector, user_id=None, is_global=False, section=None):
    return {
        "id": chunk_id,
        "user_id": user_id,
        "source_name": source,
        "source_type": "md",
        "chunk_index": 0,
        "section_title": section,
        "content": f"content of {chunk_id}",
        "token_count": 4,
        "embedding": encode_embedding(vector),
        "is_global": 1 if is_global else 0,
        "created_at": "2026-01-01T00:00:00+00:00",
    }


@pytest.fixture
def seeded(db_path):
    repo = KnowledgeRepository(db_path)
    repo.insert_chunks([
        _row("g1", "Refactoring UI", unit_vector(1.0), is_global=True, section="Color"),
        _row("u1", "My Guide", unit_vector(0.9, 0.1), user_id="alice"),
        _row("u2", "My Guide", unit_vector(0.0, 1.0), user_id="alice"),
        _row("b1", "Bob Notes", unit_vector(1.0), user_id="bob"),
    ])
    return repo


class TestKnowledgeRepository:
    def test_sources(self, seeded):
        assert seeded.list_sources("alice") == [
            {"sourceName": "My Guide", "sourceType": "md", "chunkCount": 2,
             "createdAt": "2026-01-01T00:00:00+00:00"},
        ]
        assert [s["sourceName"] for s in seeded.list_global_sources()] == ["Refactoring UI"]
        assert seeded.has_global_chunks()
        assert seeded.has_user_chunks("bob")
        assert not seeded.has_user_chunks("carol")

    def test_load_embeddings_scopes_to_user(self, seeded):
        chunks, matrix = seeded.load_embeddings("alice")

        assert {c["id"] for c in chunks} == {"g1", "u1", "u2"}
        assert matrix.shape == (3, 8)

    def test_load_embeddings_without_user_is_global_only(self, seeded):
        chunks, _ = seeded.load_embeddings(None)

        assert [c["id"] for c in chunks] == ["g1"]

    def test_delete_scoping(self, seeded):
        assert seeded.delete_source("alice", "Refactoring UI") == 0
        assert seeded.delete_source("alice", "My Guide") == 2
        assert seeded.delete_global_source("Refactoring UI") == 1
        assert not seeded.has_global_chunks()


class TestSearch:
    def test_search_ranks_visible_chunks(self, seeded, db_path):
        with patch("dzyne.knowledge.retrieval.get_generator", return_value=fake_generator()):
            results = search_knowledge("alice", "accent colors", limit=5, threshold=0.5, db_path=db_path)

        assert [r["id"] for r in results] == ["g1", "u1"]
        assert results[0]["similarity"] == 1.0
        assert results[0]["sectionTitle"] == "Color"

    def test_search_empty_store(self, db_path):
        with patch("dzyne.knowledge.retrieval.get_generator", return_value=fake_generator()):
            assert search_knowledge("alice", "anything", db_path=db_path) == []

    def test_embedding_errors_propagate(self, seeded, db_path):
        generator = fake_generator()
        generator.generate.side_effect = RuntimeError("openai down")

        with patch("dzyne.knowledge.retrieval.get_generator", return_value=generator):
            with pytest.raises(RuntimeError):
                search_knowledge("alice", "anything", db_path=db_path)

    def test_context_skips_embedding_when_nothing_indexed(self, db_path):
        with patch("dzyne.knowledge.retrieval.get_generator") as get_gen:
            assert get_knowledge_context("alice", "task", db_path) == ""

        get_gen.assert_not_called()

    def test_context_block(self, seeded, db_path):
        with patch("dzyne.knowledge.retrieval.get_generator", return_value=fake_generator()):
            context = get_knowledge_context("bob", "color rules", db_path)

        assert "=== DESIGN KNOWLEDGE LIBRARY ===" in context
        assert "[Refactoring UI - Color]" in context
        assert "[Bob Notes]" in context

    def test_format_empty(self):
        assert format_knowledge_context([]) == ""


class TestUpload:
    def test_upload_markdown(self, db_path):
        generator = fake_generator()

        with patch("dzyne.knowledge.ingest.get_generator", return_value=generator):
            result = upload_document(DOCUMENT.encode(), "color.md", "alice", db_path=db_path)

        assert result == {
            "source_name": "color.md",
            "file_type": "md",
            "total_chunks": 1,
            "inserted_chunks": 1,
            "is_global": False,
        }
        sources = KnowledgeRepository(db_path).list_sources("alice")
        assert sources[0]["chunkCount"] == 1

    def test_reupload_replaces_chunks(self, db_path):
        with patch("dzyne.knowledge.ingest.get_generator", return_value=fake_generator()):
            upload_document(DOCUMENT.encode(), "color.md", "alice", db_path=db_path)
            upload_document(DOCUMENT.encode(), "color.md", "alice", db_path=db_path)

        assert KnowledgeRepository(db_path).list_sources("alice")[0]["chunkCount"] == 1

    def test_batches_with_delay(self, db_path, monkeypatch):
        monkeypatch.setattr(Config, "EMBED_BATCH_SIZE", 1)
        text = "\n\n".join(
            " ".join(f"Paragraph {p} sentence {s} covers grid alignment and rhythm." for s in range(60))
            for p in range(3)
        )
        generator = fake_generator()

        with patch("dzyne.knowledge.ingest.get_generator", return_value=generator), \
                patch("dzyne.knowledge.ingest.time.sleep") as sleep:
            result = upload_document(text.encode(), "grids.txt", "alice", db_path=db_path)

        total = result["total_chunks"]
        assert total > 1
        assert generator.generate_batch.call_count == total
        assert sleep.call_count == total - 1

    def test_failed_batch_is_skipped(self, db_path):
        generator = fake_generator()
        generator.generate_batch.side_effect = RuntimeError("rate limited")

        with patch("dzyne.knowledge.ingest.get_generator", return_value=generator):
            result = upload_document(DOCUMENT.encode(), "color.md", "alice", db_path=db_path)

        assert result["inserted_chunks"] == 0
        assert result["total_chunks"] == 1

    def test_unsupported_type(self, db_path):
        with pytest.raises(KnowledgeError, match="Accepted: .pdf, .txt, .md, .epub"):
            upload_document(b"data", "deck.pptx", "alice", db_path=db_path)

    def test_empty_document(self, db_path):
        with pytest.raises(KnowledgeError, match="No content"):
            upload_document(b"tiny", "empty.txt", "alice", db_path=db_path)

    def test_global_upload_requires_admin(self, db_path):
        users = UserRepository(db_path)
        member = users.create("member@example.com")
        admin = users.create("admin@dzyne.dev")

        with pytest.raises(ApiKeyError):
            upload_document(DOCUMENT.encode(), "color.md", member, is_global=True, db_path=db_path)

        with patch("dzyne.knowledge.ingest.get_generator", return_value=fake_generator()):
            result = upload_document(DOCUMENT.encode(), "color.md", admin, source_name="Color 101",
                                     is_global=True, db_path=db_path)

        assert result["is_global"] is True
        assert KnowledgeRepository(db_path).list_global_sources()[0]["sourceName"] == "Color 101"


def test_embedding_matrix_dtype(seeded):
    _, matrix = seeded.load_embeddings("alice")

    assert matrix.dtype == np.float32
