"""Tests for document parsing and chunking."""

import pytest

from dzyne.errors import KnowledgeError
from dzyne.knowledge.chunker import (
    MAX_CHUNK_SIZE,
    chunk_text,
    detect_file_type,
    detect_section_title,
    estimate_tokens,
    parse_and_chunk,
    parse_pdf,
    split_into_sentences,
)


def _long_text(sentences: int = 300) -> str:
    return " ".join(
        f"Sentence number {i} explains how spacing creates rhythm in layouts."
        for i in range(sentences)
    )


def test_estimate_tokens():
    assert estimate_tokens("one two three") == 4
    assert estimate_tokens("word " * 10) == 15


def test_split_into_sentences():
    text = "Color matters. Type matters too! Does spacing? yes it does."

    assert split_into_sentences(text) == ["Color matters.", "Type matters too!", "Does spacing? yes it does."]


@pytest.mark.parametrize("line,expected", [
    ("## Color Theory", "Color Theory"),
    ("CHAPTER ONE: GRIDS", "CHAPTER ONE: GRIDS"),
    ("3. Visual Hierarchy", "3. Visual Hierarchy"),
    ("Just a normal sentence about design.", None),
    ("ab", None),
])
def test_detect_section_title(line, expected):
    assert detect_section_title(line) == expected


def test_short_text_single_chunk():
    text = "# Intro\nGood typography establishes hierarchy and improves readability for everyone."

    chunks = chunk_text(text)

    assert len(chunks) == 1
    assert chunks[0].index == 0
    assert chunks[0].section_title == "Intro"


def test_tiny_text_dropped():
    assert chunk_text("Too short.") == []


def test_long_text_windows_overlap():
    chunks = chunk_text(_long_text())

    assert len(chunks) > 1
    assert [c.index for c in chunks] == list(range(len(chunks)))
    assert all(c.token_count <= MAX_CHUNK_SIZE + 20 for c in chunks)
    # Last sentences of one window open the next
    tail = chunks[0].text.split(". ")[-1]
    assert tail.rstrip(".") in chunks[1].text


def test_section_title_carried_forward():
    text = "## Whitespace\n" + _long_text(200)

    chunks = chunk_text(text)

    assert all(c.section_title == "Whitespace" for c in chunks)


def test_parse_and_chunk_markdown():
    data = ("# Grid Systems\n\n\n\n" + _long_text(20)).encode("utf-8")

    chunks = parse_and_chunk(data, "md")

    assert chunks
    assert chunks[0].section_title == "Grid Systems"


def test_parse_and_chunk_unsupported():
    with pytest.raises(KnowledgeError, match="Unsupported"):
        parse_and_chunk(b"data", "docx")


def test_parse_pdf_rejects_garbage():
    with pytest.raises(KnowledgeError):
        parse_pdf(b"not a pdf at all")


@pytest.mark.parametrize("filename,mime,expected", [
    ("book.pdf", None, "pdf"),
    ("notes.MD", None, "md"),
    ("guide.markdown", None, "md"),
    ("novel.epub", None, "epub"),
    ("upload.bin", "text/plain", "txt"),
    ("slides.pptx", None, None),
])
def test_detect_file_type(filename, mime, expected):
    assert detect_file_type(filename, mime) == expected
