"""Vector similarity utilities for knowledge and pattern search

Embeddings are persisted as np.save BLOBs and ranked in memory
with cosine similarity.
"""

import io
import logging
from typing import List, Tuple

import numpy as np

logger = logging.getLogger(__name__)

def encode_embedding(vector: np.ndarray) -> bytes:
    """Serialize a vector to np.save bytes for a BLOB column."""
    buffer = io.BytesIO()
    np.save(buffer, np.asarray(vector, dtype=np.float32))
    return buffer.getvalue()

def decode_embedding(blob: bytes) -> np.ndarray:
    """Load a vector written by encode_embedding."""
    return np.load(io.BytesIO(blob))

def cosine_similarity(vec1: np.ndarray, vec2: np.ndarray) -> float:
    """Calculate cosine similarity between two vectors

    Raises:
        ValueError: If vectors have different dimensions
    """
    if vec1.shape != vec2.shape:
        raise ValueError(f"Vector dimensions don't match: {vec1.shape} vs {vec2.shape}")

    norm1 = np.linalg.norm(vec1)
    norm2 = np.linalg.norm(vec2)

    if norm1 == 0 or norm2 == 0:
        return 0.0

    return float(np.dot(vec1, vec2) / (norm1 * norm2))

def batch_cosine_similarity(query_vec: np.ndarray, vectors: np.ndarray) -> np.ndarray:
    """Calculate cosine similarity between query and multiple vectors efficiently

    Args:
        query_vec: Query vector (1D array)
        vectors: Matrix of vectors to compare against (2D array)

    Returns:
        Array of similarity scores; zero-norm rows and queries score 0

    Raises:
        ValueError: If dimensions don't match
    """
    if len(query_vec.shape) != 1:
        raise ValueError(f"Query vector must be 1D, got shape {query_vec.shape}")

    if len(vectors.shape) != 2:
        raise ValueError(f"Vectors must be 2D matrix, got shape {vectors.shape}")

    if query_vec.shape[0] != vectors.shape[1]:
        raise ValueError(
            f"Dimension mismatch: query {query_vec.shape[0]} vs vectors {vectors.shape[1]}"
        )

    query_norm = np.linalg.norm(query_vec)
    if query_norm == 0:
        return np.zeros(vectors.shape[0], dtype=np.float32)

    norms = np.linalg.norm(vectors, axis=1, keepdims=True)
    # Avoid division by zero
    norms = np.where(norms == 0, 1, norms)

    return np.dot(vectors / norms, query_vec / query_norm)

def rank_by_similarity(
    query_vec: np.ndarray,
    vectors: np.ndarray,
    limit: int = 10,
    threshold: float = 0.0
) -> List[Tuple[int, float]]:
    """Rank vectors against a query

    Args:
        query_vec: Query vector
        vectors: Matrix of vectors to search
        limit: Maximum number of results
        threshold: Minimum similarity to keep

    Returns:
        List of (index, similarity) tuples, sorted by similarity (descending)
    """
    if limit < 1:
        raise ValueError(f"limit must be >= 1, got {limit}")

    if vectors.shape[0] == 0:
        return []

    similarities = batch_cosine_similarity(query_vec, vectors)

    candidates = np.where(similarities >= threshold)[0]
    if len(candidates) == 0:
        return []

    order = np.argsort(similarities[candidates])[::-1][:limit]

    results = [
        (int(candidates[i]), float(similarities[candidates[i]]))
        for i in order
    ]

    logger.debug(f"Ranked {vectors.shape[0]} vectors, kept {len(results)} >= {threshold}")
    return results
