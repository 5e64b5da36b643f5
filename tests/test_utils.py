"""Tests for embeddings, vector ranking, the chat wrapper and validators."""

from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from dzyne.errors import LLMResponseError, ValidationError
from dzyne.utils.llm import DesignLLM
from dzyne.utils.openai_embeddings import OpenAIEmbeddingGenerator
from dzyne.utils.validators import (
    validate_limit,
    validate_project_name,
    validate_search_query,
    validate_threshold,
    validate_url,
)
from dzyne.utils.vector_store import (
    batch_cosine_similarity,
    cosine_similarity,
    decode_embedding,
    encode_embedding,
    rank_by_similarity,
)


@pytest.fixture
def fake_encoding():
    encoding = MagicMock()
    encoding.encode.side_effect = lambda text: text.split()
    encoding.decode.side_effect = lambda tokens: " ".join(tokens)
    with patch("dzyne.utils.openai_embeddings._get_encoding", return_value=encoding):
        yield encoding


class TestOpenAIEmbeddingGenerator:
    def test_generate_single(self, fake_encoding):
        mock_response = MagicMock()
        mock_response.data = [MagicMock(embedding=[0.1] * 1536)]

        with patch("dzyne.utils.openai_embeddings.openai") as mock_openai:
            mock_openai.OpenAI.return_value.embeddings.create.return_value = mock_response
            gen = OpenAIEmbeddingGenerator()
            result = gen.generate("hello world")

        assert isinstance(result, np.ndarray)
        assert result.shape == (1536,)
        assert result.dtype == np.float32

    def test_generate_empty_raises(self):
        gen = OpenAIEmbeddingGenerator.__new__(OpenAIEmbeddingGenerator)
        gen._client = MagicMock()

        with pytest.raises(ValueError):
            gen.generate("   ")

    def test_large_batch_splits(self, fake_encoding):
        def create(model, input, dimensions):
            response = MagicMock()
            response.data = [MagicMock(embedding=[0.5] * 4) for _ in input]
            return response

        with patch("dzyne.utils.openai_embeddings.openai") as mock_openai:
            client = mock_openai.OpenAI.return_value
            client.embeddings.create.side_effect = create

            gen = OpenAIEmbeddingGenerator(max_batch_size=2)
            result = gen.generate_batch(["a", "b", "c", "d", "e"])

        assert result.shape == (5, 4)
        assert client.embeddings.create.call_count == 3

    def test_long_text_truncated(self, fake_encoding):
        assert OpenAIEmbeddingGenerator._truncate("word " * 9000).count("word") == 8191


class TestVectorStore:
    def test_blob_roundtrip_keeps_float32(self):
        vec = np.array([0.1, 0.2, 0.3])

        restored = decode_embedding(encode_embedding(vec))

        assert restored.dtype == np.float32
        np.testing.assert_allclose(restored, vec, rtol=1e-6)

    def test_cosine_similarity(self):
        assert cosine_similarity(np.array([1.0, 0.0]), np.array([2.0, 0.0])) == pytest.approx(1.0)
        assert cosine_similarity(np.array([1.0, 0.0]), np.array([0.0, 0.0])) == 0.0

    def test_cosine_dimension_mismatch(self):
        with pytest.raises(ValueError):
            cosine_similarity(np.ones(2), np.ones(3))

    def test_batch_zero_rows_score_zero(self):
        scores = batch_cosine_similarity(np.array([1.0, 0.0]), np.array([[1.0, 0.0], [0.0, 0.0]]))

        np.testing.assert_allclose(scores, [1.0, 0.0])

    def test_rank_applies_threshold_and_limit(self):
        vectors = np.array([[1.0, 0.0], [0.0, 1.0], [0.8, 0.6], [0.6, 0.8]])

        ranked = rank_by_similarity(np.array([1.0, 0.0]), vectors, limit=2, threshold=0.5)

        assert [index for index, _ in ranked] == [0, 2]
        assert ranked[1][1] == pytest.approx(0.8)

    def test_rank_empty_and_bad_limit(self):
        assert rank_by_similarity(np.ones(2), np.empty((0, 2))) == []
        with pytest.raises(ValueError):
            rank_by_similarity(np.ones(2), np.ones((1, 2)), limit=0)


def _chat_response(content):
    response = MagicMock()
    response.choices = [MagicMock(message=MagicMock(content=content))]
    return response


class TestDesignLLM:
    def _llm(self, content):
        with patch("dzyne.utils.llm.OpenAI") as mock_openai:
            mock_openai.return_value.chat.completions.create.return_value = _chat_response(content)
            llm = DesignLLM(api_key="sk-test", model="gpt-test")
        return llm

    def test_complete_json(self):
        llm = self._llm('{"consistent": true}')

        assert llm.complete_json("system", "user") == {"consistent": True}
        kwargs = llm._client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["response_format"] == {"type": "json_object"}

    def test_strips_markdown_fences(self):
        llm = self._llm('```json\n{"score": 80}\n```')

        assert llm.complete_json("s", "u") == {"score": 80}

    def test_empty_reply_raises(self):
        with pytest.raises(LLMResponseError, match="No response"):
            self._llm("").complete_json("s", "u")

    def test_invalid_json_raises(self):
        with pytest.raises(LLMResponseError):
            self._llm("not json").complete_json("s", "u")

    def test_non_object_raises(self):
        with pytest.raises(LLMResponseError, match="not a JSON object"):
            self._llm("[1, 2]").complete_json("s", "u")


class TestValidators:
    def test_project_name(self):
        assert validate_project_name("  my-saas v2 ") == "my-saas v2"
        with pytest.raises(ValidationError):
            validate_project_name("")
        with pytest.raises(ValidationError):
            validate_project_name("bad/name")

    def test_url(self):
        assert validate_url("linear.app") == "https://linear.app"
        with pytest.raises(ValidationError):
            validate_url("localhost")

    def test_query_limit_threshold(self):
        assert validate_search_query("  contrast ") == "contrast"
        with pytest.raises(ValidationError):
            validate_search_query("a")
        with pytest.raises(ValidationError):
            validate_limit(0)
        with pytest.raises(ValidationError):
            validate_limit(51)
        with pytest.raises(ValidationError):
            validate_threshold(1.2)
