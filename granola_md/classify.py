"""Emptiness classification for Granola document records.

A record carries up to four renderings of the same note and they often
disagree. The cascade below decides whether any of them holds user text:

1. ``last_viewed_panel.content``, the freshest user-facing signal. Text
   here means "not empty" no matter what the timestamps say.
2. ``notes_plain``, ``notes_markdown`` (trimmed) and the ``notes`` tree.
3. Otherwise the document is empty.

Matching ``created_at``/``updated_at`` is reported by ``analyze_document`` as a
corroborating hint but never changes the answer.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from granola_md.extract import has_visible_text, tree_text
from granola_md.models import ContentAnalysis, ContentSource, DocumentRecord
from granola_md.tree import MAX_DEPTH, parse_tree

logger = logging.getLogger(__name__)


def is_empty_document(doc: Any, max_depth: int = MAX_DEPTH) -> bool:
    """Return True when no content field of ``doc`` holds visible text.

    Accepts a DocumentRecord or a raw mapping. Never raises.
    """
    record = DocumentRecord.from_raw(doc)

    if has_visible_text(record.panel_content, max_depth=max_depth):
        return False

    if _has_text(record.notes_plain) or _has_text(record.notes_markdown):
        return False

    # notes only count as a node tree; a raw string there is malformed
    notes = parse_tree(record.notes, max_depth=max_depth)
    if notes is not None and tree_text(notes):
        return False

    return True


def analyze_document(doc: Any, max_depth: int = MAX_DEPTH) -> ContentAnalysis:
    """Report which content sources a record offers and why it is (not) empty."""
    record = DocumentRecord.from_raw(doc)
    sources: list[ContentSource] = []
    warnings: list[str] = []

    if not record.id:
        warnings.append("Document missing required id field")

    if not record.created_at:
        warnings.append("Document missing created_at timestamp")
    elif parse_timestamp(record.created_at) is None:
        warnings.append(f"Invalid created_at date format: {record.created_at}")

    panel = record.panel_content
    if isinstance(panel, str):
        if panel.strip():
            sources.append("last_viewed_panel_html")
    elif parse_tree(panel, max_depth=max_depth) is not None:
        sources.append("last_viewed_panel_prosemirror")

    if parse_tree(record.notes, max_depth=max_depth) is not None:
        sources.append("notes_prosemirror")
    if _has_text(record.notes_markdown):
        sources.append("notes_markdown")
    if _has_text(record.notes_plain):
        sources.append("notes_plain")

    if not sources:
        warnings.append("No valid content sources detected in document")

    is_empty = is_empty_document(record, max_depth=max_depth)
    same_dates = bool(record.created_at) and record.created_at == record.updated_at

    analysis = ContentAnalysis(
        document_id=record.id,
        available_sources=sources,
        is_empty=is_empty,
        created_equals_updated=same_dates,
        is_truly_empty=is_empty and same_dates,
        warnings=warnings,
    )
    logger.debug(
        "Analyzed %s: empty=%s sources=%s warnings=%s",
        record.id or "<no id>",
        analysis.is_empty,
        ", ".join(sources) or "-",
        "; ".join(warnings) or "-",
    )
    return analysis


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 timestamp (``Z`` suffix allowed); None if unusable."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def _has_text(value: str | None) -> bool:
    return bool(value and value.strip())
