"""Document record -> vault note (filename, frontmatter, body)."""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from granola_md.classify import analyze_document, parse_timestamp
from granola_md.config.models import GranolaMdConfig
from granola_md.converter.attendees import attendee_tags
from granola_md.converter.html import HtmlConverter
from granola_md.converter.markdown import escape_text, to_markdown
from granola_md.errors import DocumentValidationError
from granola_md.extract import decode_entities, extract_text, strip_html
from granola_md.models import ConvertedNote, DocumentRecord, NoteFrontmatter
from granola_md.transform import ActionItemsToTasks, FrontmatterInjector, TransformPipeline

logger = logging.getLogger(__name__)

GRANOLA_URL = "https://notes.granola.ai/d/{id}"
INVALID_DATE = "INVALID-DATE"

_UNSAFE_FILENAME_RE = re.compile(r'[<>:"/\\|?*&,;]')

_DATE_FORMATS = {
    "YYYY-MM-DD": "%Y-%m-%d",
    "MM-DD-YYYY": "%m-%d-%Y",
    "DD-MM-YYYY": "%d-%m-%Y",
    "YYYY.MM.DD": "%Y.%m.%d",
}

_PRIORITIES = {
    "panel_first": ("panel", "notes", "notes_markdown", "notes_plain"),
    "notes_first": ("notes", "notes_markdown", "notes_plain", "panel"),
    "panel_only": ("panel",),
    "notes_only": ("notes", "notes_markdown", "notes_plain"),
}

PLACEHOLDER_TEMPLATE = """\
# {title}

*This document appears to have no extractable content from the Granola API.*

*Possible causes:*
- Content exists in Granola but wasn't included in the API response
- Document was created but never had content added
- Sync issue between Granola desktop app and API

*To fix: Check the original document in Granola and manually copy content if needed.*

---
*Document ID: {id}*
*Created: {created}*
*Updated: {updated}*"""


class NoteConverter:
    """Builds the note payload for one document record."""

    def __init__(
        self,
        config: GranolaMdConfig | None = None,
        html_converter: HtmlConverter | None = None,
    ) -> None:
        self.config = config or GranolaMdConfig()
        self.html_converter = html_converter or HtmlConverter()

        self.pipeline = TransformPipeline()
        if self.config.action_items.convert_to_tasks:
            self.pipeline.add(ActionItemsToTasks(self.config.action_items))
        self.pipeline.add(FrontmatterInjector())

    # -- Public API --

    def convert(self, doc: Any) -> ConvertedNote:
        record = DocumentRecord.from_raw(doc)
        if not record.id:
            raise DocumentValidationError("Document missing required id field")

        body, source = self.render_body(record)

        is_truly_empty = False
        if not body.strip():
            analysis = analyze_document(record, max_depth=self.config.content.max_depth)
            is_truly_empty = analysis.is_truly_empty
            logger.warning(
                "No content extracted for document %s (%r); writing placeholder",
                record.id,
                record.title,
            )
            body = self.placeholder(record)
            source = "none"

        frontmatter = self.build_frontmatter(record)
        content = self.pipeline.apply(body, frontmatter.to_yaml_dict())

        return ConvertedNote(
            filename=self.build_filename(record),
            content=content,
            frontmatter=frontmatter,
            document_id=record.id,
            content_source=source,
            is_truly_empty=is_truly_empty,
        )

    def render_body(self, record: DocumentRecord) -> tuple[str, str]:
        """Return the first non-empty body in priority order and its source name."""
        readers: dict[str, Callable[[DocumentRecord], tuple[str, str]]] = {
            "panel": self._from_panel,
            "notes": self._from_notes,
            "notes_markdown": self._from_notes_markdown,
            "notes_plain": self._from_notes_plain,
        }
        for key in _PRIORITIES[self.config.content.content_priority]:
            body, source = readers[key](record)
            if body.strip():
                logger.debug("Document %s: using %s", record.id, source)
                return body, source
        return "", "none"

    def build_frontmatter(self, record: DocumentRecord) -> NoteFrontmatter:
        content = self.config.content
        frontmatter = NoteFrontmatter(created=record.created_at)

        if content.include_enhanced_frontmatter:
            frontmatter.id = record.id
            frontmatter.title = decode_entities(record.title or "Untitled")
            frontmatter.updated = record.updated_at

        if content.include_granola_url:
            frontmatter.granola_url = GRANOLA_URL.format(id=record.id)

        if self.config.attendee_tags.enabled:
            frontmatter.tags = attendee_tags(record.people, self.config.attendee_tags)

        return frontmatter

    def build_filename(self, record: DocumentRecord) -> str:
        content = self.config.content
        title = sanitize_filename(
            decode_entities(record.title or f"Untitled-{record.id}"),
            self.config.import_.max_filename_length,
        ) or f"Untitled-{record.id}"

        created = parse_timestamp(record.created_at)

        if not content.use_custom_filename_template:
            if content.date_prefix_format == "none":
                return f"{title}.md"
            return f"{format_date(created, content.date_prefix_format)} - {title}.md"

        updated = parse_timestamp(record.updated_at)
        created_date = format_date(created, content.date_prefix_format)
        updated_date = format_date(updated, content.date_prefix_format)
        created_time = format_time(created)
        updated_time = format_time(updated)

        # longer names first so {created_date} does not eat {created_datetime}
        name = content.filename_template or "{created_date} - {title}"
        for key, value in (
            ("{created_datetime}", f"{created_date}_{created_time}"),
            ("{updated_datetime}", f"{updated_date}_{updated_time}"),
            ("{created_date}", created_date),
            ("{updated_date}", updated_date),
            ("{created_time}", created_time),
            ("{updated_time}", updated_time),
            ("{title}", title),
            ("{id}", record.id),
        ):
            name = name.replace(key, value)

        name = sanitize_filename(name) or title
        return f"{name}.md"

    def placeholder(self, record: DocumentRecord) -> str:
        return PLACEHOLDER_TEMPLATE.format(
            title=escape_text(decode_entities(record.title or "Untitled")),
            id=record.id,
            created=record.created_at or "unknown",
            updated=record.updated_at or "unknown",
        )

    # ------------------------------------------------------------------
    # Content sources
    # ------------------------------------------------------------------

    def _from_panel(self, record: DocumentRecord) -> tuple[str, str]:
        panel = record.panel_content
        if isinstance(panel, str):
            markdown = self.html_converter.convert(panel)
            if markdown is None:
                markdown = strip_html(panel)
            return markdown, "last_viewed_panel_html"
        return self._from_tree(panel), "last_viewed_panel_prosemirror"

    def _from_notes(self, record: DocumentRecord) -> tuple[str, str]:
        return self._from_tree(record.notes), "notes_prosemirror"

    def _from_notes_markdown(self, record: DocumentRecord) -> tuple[str, str]:
        return decode_entities(record.notes_markdown or "").strip(), "notes_markdown"

    def _from_notes_plain(self, record: DocumentRecord) -> tuple[str, str]:
        return decode_entities(record.notes_plain or "").strip(), "notes_plain"

    def _from_tree(self, value: Any) -> str:
        max_depth = self.config.content.max_depth
        markdown = to_markdown(value, max_depth=max_depth)
        if markdown.strip():
            return markdown
        # trees of unknown node types can still carry text
        return escape_text(extract_text(value, max_depth=max_depth)) if isinstance(value, Mapping) else ""


# ---------------------------------------------------------------------------
# Filename helpers
# ---------------------------------------------------------------------------


def sanitize_filename(name: str, max_length: int = 100) -> str:
    """Replace path-hostile characters and collapse whitespace and dashes."""
    name = _UNSAFE_FILENAME_RE.sub("-", name)
    name = re.sub(r"\s+", " ", name)
    name = re.sub(r"-+", "-", name)
    return name.strip()[:max_length].strip()


def format_date(value: datetime | None, fmt: str) -> str:
    if value is None:
        return INVALID_DATE
    pattern = _DATE_FORMATS.get(fmt)
    if pattern is None:
        return ""
    return value.strftime(pattern)


def format_time(value: datetime | None) -> str:
    if value is None:
        return INVALID_DATE
    return value.strftime("%H-%M-%S")
