"""Display metadata for a document: title, preview, word count, reading time."""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel

from granola_md.classify import is_empty_document
from granola_md.extract import (
    decode_entities,
    extract_text,
    normalize_whitespace,
    strip_markdown,
    tree_text,
)
from granola_md.models import DocumentRecord
from granola_md.tree import parse_tree

PREVIEW_LENGTH = 150
TITLE_LENGTH = 100
WORDS_PER_MINUTE = 200
NO_CONTENT = "No content available"


class DocumentMetadata(BaseModel):
    id: str
    title: str
    created_at: str | None = None
    updated_at: str | None = None
    preview: str
    word_count: int = 0
    reading_time: int = 1
    is_empty: bool = True


def extract_metadata(doc: Any) -> DocumentMetadata:
    record = DocumentRecord.from_raw(doc)
    text = _plain_text(record)
    words = len(text.split())

    return DocumentMetadata(
        id=record.id,
        title=display_title(record.title),
        created_at=record.created_at,
        updated_at=record.updated_at,
        preview=make_preview(text),
        word_count=words,
        reading_time=max(1, math.ceil(words / WORDS_PER_MINUTE)),
        is_empty=is_empty_document(record),
    )


def display_title(title: str | None) -> str:
    title = normalize_whitespace(decode_entities(title or ""))
    if not title:
        return "Untitled Document"
    return title[:TITLE_LENGTH].rstrip()


def make_preview(text: str, length: int = PREVIEW_LENGTH) -> str:
    if not text:
        return NO_CONTENT
    if len(text) <= length:
        return text
    return text[:length].rstrip() + "..."


def _plain_text(record: DocumentRecord) -> str:
    # cheapest source first
    if record.notes_plain and record.notes_plain.strip():
        return normalize_whitespace(decode_entities(record.notes_plain))
    if record.notes_markdown and record.notes_markdown.strip():
        return strip_markdown(record.notes_markdown)
    notes = parse_tree(record.notes)
    text = tree_text(notes) if notes is not None else ""
    return text or normalize_whitespace(extract_text(record.panel_content))
