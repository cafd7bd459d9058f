"""Pydantic models for document records and conversion results."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

ContentSource = Literal[
    "last_viewed_panel_html",
    "last_viewed_panel_prosemirror",
    "notes_prosemirror",
    "notes_markdown",
    "notes_plain",
]


class LastViewedPanel(BaseModel):
    """Envelope around the most recently viewed panel's content."""

    model_config = ConfigDict(extra="allow", frozen=True)

    content: Any = None


class DocumentRecord(BaseModel):
    """A Granola document as returned by the API.

    Every field is optional and wrong-typed values are dropped to ``None``:
    the four content fields are redundant renderings of the same note and any
    subset may be missing.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    id: str = ""
    title: str | None = None
    created_at: str | None = None
    updated_at: str | None = None
    user_id: str | None = None
    notes: Any = None
    notes_plain: str | None = None
    notes_markdown: str | None = None
    last_viewed_panel: LastViewedPanel | None = None
    people: Any = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return ""

    @field_validator(
        "title", "created_at", "updated_at", "user_id", "notes_plain", "notes_markdown",
        mode="before",
    )
    @classmethod
    def _str_or_none(cls, value: Any) -> str | None:
        return value if isinstance(value, str) else None

    @field_validator("last_viewed_panel", mode="before")
    @classmethod
    def _panel_or_none(cls, value: Any) -> Any:
        if isinstance(value, Mapping):
            return _str_keys(value)
        if isinstance(value, LastViewedPanel):
            return value
        return None

    @classmethod
    def from_raw(cls, value: Any) -> DocumentRecord:
        """Build a record from whatever the API handed us. Never raises."""
        if isinstance(value, DocumentRecord):
            return value
        if not isinstance(value, Mapping):
            return cls()
        try:
            return cls.model_validate(_str_keys(value))
        except ValidationError:
            logger.warning("Unusable document record; treating it as empty", exc_info=True)
            return cls()

    @property
    def panel_content(self) -> Any:
        return self.last_viewed_panel.content if self.last_viewed_panel else None


class ContentAnalysis(BaseModel):
    """Which content fields of a record carry text, plus date signals."""

    document_id: str
    available_sources: list[ContentSource] = Field(default_factory=list)
    is_empty: bool = True
    created_equals_updated: bool = False
    is_truly_empty: bool = False
    warnings: list[str] = Field(default_factory=list)


class NoteFrontmatter(BaseModel):
    """YAML frontmatter written at the top of every note."""

    id: str | None = None
    title: str | None = None
    created: str | None = None
    updated: str | None = None
    source: str = "Granola"
    granola_url: str | None = None
    tags: list[str] = Field(default_factory=list)

    def to_yaml_dict(self) -> dict[str, Any]:
        """Ordered mapping of the fields that are set."""
        data: dict[str, Any] = {}
        for key in ("id", "title", "created", "updated", "source", "granola_url"):
            value = getattr(self, key)
            if value:
                data[key] = value
        if self.tags:
            data["tags"] = [tag.removeprefix("#") for tag in self.tags]
        return data


class ConvertedNote(BaseModel):
    """Payload handed to the vault writer."""

    filename: str
    content: str
    frontmatter: NoteFrontmatter
    document_id: str = ""
    content_source: str = "none"
    is_truly_empty: bool = False


class SyncError(BaseModel):
    document_id: str
    title: str = ""
    error: str


class SyncReport(BaseModel):
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    skipped: int = 0
    empty: int = 0
    errors: list[SyncError] = []
    duration: float = 0.0

    @property
    def processed(self) -> int:
        return self.created + self.updated + self.unchanged + self.skipped + self.empty


def _str_keys(value: Mapping) -> dict[str, Any]:
    """Keep string keys only; a JSON object has no others."""
    return {key: item for key, item in value.items() if isinstance(key, str)}
