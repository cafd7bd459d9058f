"""granola-md — Granola notes to plain text and Markdown."""

from granola_md.classify import analyze_document, is_empty_document
from granola_md.converter import NoteConverter, to_markdown
from granola_md.extract import extract_text

__version__ = "0.1.0"

__all__ = [
    "NoteConverter",
    "analyze_document",
    "extract_text",
    "is_empty_document",
    "to_markdown",
]
