"""Sentence-window chunker for uploaded design documents.

Text is accumulated line by line. Once the buffer reaches the target
size it is re-split into sentences and emitted in windows of at most
MAX_CHUNK_SIZE estimated tokens, carrying the last sentences of each
window into the next one for context continuity.
"""

import logging
import math
import os
import re
import tempfile
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional

import ebooklib
import pypdf
from pypdf.errors import PdfReadError
from bs4 import BeautifulSoup
from ebooklib import epub

from ..errors import KnowledgeError

logger = logging.getLogger(__name__)

TARGET_CHUNK_SIZE = 600
MAX_CHUNK_SIZE = 900
OVERLAP_SENTENCES = 2
MIN_CHUNK_CHARS = 50

SUPPORTED_TYPES = ("pdf", "txt", "md", "epub")

MIME_TYPES = {
    "application/pdf": "pdf",
    "text/plain": "txt",
    "text/markdown": "md",
    "application/epub+zip": "epub",
}

EXTENSIONS = {
    ".pdf": "pdf",
    ".txt": "txt",
    ".md": "md",
    ".markdown": "md",
    ".epub": "epub",
}

_SENTENCE_BOUNDARY = re.compile(r'(?<=[.!?])\s+(?=[A-Z])')
_MARKDOWN_HEADING = re.compile(r'^#{1,4}\s+')
_CAPS_HEADING = re.compile(r'^[A-Z][A-Z\s:\u2014\-]{4,}$')
_NUMBERED_HEADING = re.compile(r'^\d+\.\s+[A-Z]')


@dataclass
class TextChunk:
    text: str
    index: int
    section_title: Optional[str]
    token_count: int


def estimate_tokens(text: str) -> int:
    """Rough token count: 1.3 tokens per whitespace-separated word."""
    return math.ceil(len(re.split(r'\s+', text)) * 1.3)


def split_into_sentences(text: str) -> list[str]:
    return [s for s in _SENTENCE_BOUNDARY.split(text) if s.strip()]


def detect_section_title(line: str) -> Optional[str]:
    """Return the heading text if the line looks like a section title."""
    trimmed = line.strip()
    if len(trimmed) > 120 or len(trimmed) < 3:
        return None

    if _MARKDOWN_HEADING.match(trimmed):
        return re.sub(r'^#+\s*', '', trimmed)

    if _CAPS_HEADING.match(trimmed):
        return trimmed

    if _NUMBERED_HEADING.match(trimmed) and len(trimmed) < 80:
        return trimmed

    return None


def chunk_text(text: str) -> list[TextChunk]:
    """Split text into overlapping sentence windows.

    Each chunk keeps the most recent section title seen before it was
    emitted. Chunks of MIN_CHUNK_CHARS characters or fewer are dropped.
    """
    chunks: list[TextChunk] = []
    current_section = None
    buffer = ""
    chunk_index = 0

    for line in text.split("\n"):
        heading = detect_section_title(line)
        if heading:
            current_section = heading

        buffer += line + "\n"
        if estimate_tokens(buffer) < TARGET_CHUNK_SIZE:
            continue

        window: list[str] = []
        window_tokens = 0

        for sentence in split_into_sentences(buffer.strip()):
            sentence_tokens = estimate_tokens(sentence)
            if window_tokens + sentence_tokens > MAX_CHUNK_SIZE and window:
                chunk = " ".join(window).strip()
                if len(chunk) > MIN_CHUNK_CHARS:
                    chunks.append(TextChunk(
                        text=chunk,
                        index=chunk_index,
                        section_title=current_section,
                        token_count=estimate_tokens(chunk),
                    ))
                    chunk_index += 1

                window = window[-OVERLAP_SENTENCES:]
                window_tokens = estimate_tokens(" ".join(window))

            window.append(sentence)
            window_tokens += sentence_tokens

        buffer = " ".join(window) + "\n"

    remainder = buffer.strip()
    if len(remainder) > MIN_CHUNK_CHARS:
        chunks.append(TextChunk(
            text=remainder,
            index=chunk_index,
            section_title=current_section,
            token_count=estimate_tokens(remainder),
        ))

    return chunks


def parse_pdf(data: bytes) -> str:
    """Extract text from every page of a PDF.

    Image-only PDFs have no extractable text and raise KnowledgeError.
    """
    try:
        reader = pypdf.PdfReader(BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except PdfReadError as e:
        raise KnowledgeError(f"Could not read PDF: {e}")

    text = "\n".join(pages)
    if not text.strip():
        raise KnowledgeError(
            "No text could be extracted from this PDF. "
            "The file may contain only images without readable text."
        )
    return text


def _html_to_text(html: bytes) -> tuple[str, Optional[str]]:
    soup = BeautifulSoup(html, "html.parser")
    heading = soup.find(["h1", "h2"])
    text = re.sub(r'\s+', ' ', soup.get_text(" ")).strip()
    return text, heading.get_text(strip=True) if heading else None


def parse_epub(data: bytes) -> str:
    """Extract chapter text in spine order, prefixing each with its title."""
    fd, tmp_path = tempfile.mkstemp(suffix=".epub")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        try:
            book = epub.read_epub(tmp_path)
        except (epub.EpubException, KeyError, ValueError, OSError) as e:
            raise KnowledgeError(f"Could not read EPUB: {e}")
    finally:
        Path(tmp_path).unlink(missing_ok=True)

    chapters = []
    for item_id, _linear in book.spine:
        item = book.get_item_with_id(item_id)
        if item is None or item.get_type() != ebooklib.ITEM_DOCUMENT:
            continue
        text, heading = _html_to_text(item.get_content())
        if len(text) <= 20:
            continue
        title = getattr(item, "title", None) or heading
        chapters.append(f"## {title}\n\n{text}" if title else text)

    if not chapters:
        raise KnowledgeError("No readable chapters found in this EPUB file.")

    return "\n\n".join(chapters)


def parse_and_chunk(data: bytes, file_type: str) -> list[TextChunk]:
    """Parse a document of the given type and chunk its text.

    Raises:
        KnowledgeError: For unsupported types or unreadable documents
    """
    if file_type == "pdf":
        raw_text = parse_pdf(data)
    elif file_type == "epub":
        raw_text = parse_epub(data)
    elif file_type in ("md", "txt"):
        raw_text = data.decode("utf-8", errors="replace")
    else:
        raise KnowledgeError(f"Unsupported file type: {file_type}")

    raw_text = raw_text.replace("\r\n", "\n")
    raw_text = re.sub(r'\n{3,}', '\n\n', raw_text)

    chunks = chunk_text(raw_text)
    logger.debug(f"Chunked {file_type} document into {len(chunks)} chunks")
    return chunks


def detect_file_type(filename: str, mime_type: Optional[str] = None) -> Optional[str]:
    """Map a MIME type or file extension to a supported document type."""
    if mime_type and mime_type in MIME_TYPES:
        return MIME_TYPES[mime_type]
    return EXTENSIONS.get(Path(filename or "").suffix.lower())
