"""Upload pipeline: parse, chunk, embed and store a document."""

import logging
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..auth.admin import require_admin
from ..auth.users import UserRepository
from ..config import Config
from ..errors import KnowledgeError
from ..utils.openai_embeddings import get_generator
from ..utils.vector_store import encode_embedding
from .chunker import SUPPORTED_TYPES, TextChunk, detect_file_type, parse_and_chunk
from .retrieval import KnowledgeRepository

logger = logging.getLogger(__name__)

EMBED_INPUT_CHARS = 2000


def _chunk_rows(
    batch: list[TextChunk],
    embeddings,
    user_id: str,
    source_name: str,
    file_type: str,
    is_global: bool,
) -> list[dict]:
    now = datetime.now(timezone.utc).isoformat()
    return [
        {
            "id": str(uuid.uuid4()),
            "user_id": user_id,
            "source_name": source_name,
            "source_type": file_type,
            "chunk_index": chunk.index,
            "section_title": chunk.section_title,
            "content": chunk.text,
            "token_count": chunk.token_count,
            "embedding": encode_embedding(embedding),
            "is_global": 1 if is_global else 0,
            "created_at": now,
        }
        for chunk, embedding in zip(batch, embeddings)
    ]


def upload_document(
    data: bytes,
    filename: str,
    user_id: str,
    source_name: Optional[str] = None,
    mime_type: Optional[str] = None,
    is_global: bool = False,
    db_path: Optional[Path] = None,
) -> dict:
    """Index a document into the knowledge base.

    Re-uploading a source replaces its previous chunks. Global uploads
    require the user to be an admin.

    Args:
        data: Raw file bytes
        filename: Original filename, used for type detection and as the
            default source name
        user_id: Uploading user
        source_name: Display name for the source
        mime_type: Optional MIME type, preferred over the extension
        is_global: Store as an admin-curated source visible to all users

    Returns:
        Dictionary with source_name, file_type, total_chunks, inserted_chunks

    Raises:
        KnowledgeError: Unsupported type or no extractable content
        ApiKeyError: Global upload by a non-admin
    """
    file_type = detect_file_type(filename, mime_type)
    if not file_type:
        raise KnowledgeError(
            f"Unsupported file type. Accepted: {', '.join('.' + t for t in SUPPORTED_TYPES)}"
        )

    if is_global:
        require_admin(UserRepository(db_path).get(user_id))

    source_name = source_name or Path(filename).name or "Untitled"

    chunks = parse_and_chunk(data, file_type)
    if not chunks:
        raise KnowledgeError("No content could be extracted from the file")

    repo = KnowledgeRepository(db_path)
    if is_global:
        removed = repo.delete_global_source(source_name)
    else:
        removed = repo.delete_source(user_id, source_name)
    if removed:
        logger.info(f"Replaced {removed} existing chunks for '{source_name}'")

    generator = get_generator()
    batch_size = Config.EMBED_BATCH_SIZE
    inserted = 0

    for start in range(0, len(chunks), batch_size):
        batch = chunks[start:start + batch_size]
        try:
            embeddings = generator.generate_batch(
                [chunk.text[:EMBED_INPUT_CHARS] for chunk in batch]
            )
            rows = _chunk_rows(batch, embeddings, user_id, source_name, file_type, is_global)
            inserted += repo.insert_chunks(rows)
        except Exception as e:
            logger.error(f"Batch at offset {start} failed for '{source_name}': {e}", exc_info=True)

        if start + batch_size < len(chunks):
            time.sleep(Config.EMBED_BATCH_DELAY)

    logger.info(f"Indexed '{source_name}': {inserted}/{len(chunks)} chunks ({file_type})")

    return {
        "source_name": source_name,
        "file_type": file_type,
        "total_chunks": len(chunks),
        "inserted_chunks": inserted,
        "is_global": is_global,
    }
