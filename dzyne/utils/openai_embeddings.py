"""OpenAI embedding generation for knowledge and pattern search.

Wraps the OpenAI embeddings API with batching support. Every vector
stored by dzyne comes from here, so query and document embeddings
always share a model and dimension.
"""

import logging

import numpy as np
import openai
import tiktoken

from ..config import Config

logger = logging.getLogger(__name__)

MODEL = Config.OPENAI_EMBEDDING_MODEL
DIMENSIONS = Config.EMBEDDING_DIMENSIONS
MAX_TOKENS = 8191  # text-embedding-3-small per-text token limit
MAX_BATCH_SIZE = 100

# Lazy-loaded tokenizer
_encoding = None


def _get_encoding():
    global _encoding
    if _encoding is None:
        _encoding = tiktoken.encoding_for_model(MODEL)
    return _encoding


class OpenAIEmbeddingGenerator:
    """Generate embeddings using OpenAI text-embedding-3-small.

    generate(text) -> ndarray, generate_batch(texts) -> ndarray.
    """

    def __init__(self, max_batch_size: int = MAX_BATCH_SIZE):
        self._client = openai.OpenAI(api_key=Config.OPENAI_API_KEY or None)
        self._max_batch_size = max_batch_size

    @staticmethod
    def _truncate(text: str) -> str:
        """Truncate text to stay within the model's token limit."""
        enc = _get_encoding()
        tokens = enc.encode(text)
        if len(tokens) <= MAX_TOKENS:
            return text
        logger.warning(f"Truncating text from {len(tokens)} to {MAX_TOKENS} tokens")
        return enc.decode(tokens[:MAX_TOKENS])

    def _embed(self, batch: list[str]) -> list[np.ndarray]:
        response = self._client.embeddings.create(
            model=MODEL,
            input=batch,
            dimensions=DIMENSIONS,
        )
        return [np.array(item.embedding, dtype=np.float32) for item in response.data]

    def generate(self, text: str) -> np.ndarray:
        """Generate embedding for a single text."""
        if not text or not text.strip():
            raise ValueError("Cannot generate embedding for empty text")

        return self._embed([self._truncate(text)])[0]

    def generate_batch(self, texts: list[str]) -> np.ndarray:
        """Generate embeddings for multiple texts, in requests of at most max_batch_size."""
        if not texts:
            raise ValueError("Cannot generate embeddings for empty list")

        all_embeddings: list[np.ndarray] = []
        prepared = [self._truncate(text) for text in texts]

        for start in range(0, len(prepared), self._max_batch_size):
            all_embeddings.extend(self._embed(prepared[start:start + self._max_batch_size]))

        return np.vstack(all_embeddings)

    @property
    def dimension(self) -> int:
        return DIMENSIONS


# Shared generator for tools and ingestion
_generator = None


def get_generator() -> OpenAIEmbeddingGenerator:
    global _generator
    if _generator is None:
        _generator = OpenAIEmbeddingGenerator()
    return _generator
