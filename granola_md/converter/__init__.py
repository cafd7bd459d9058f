"""Markdown rendering for node trees and whole document records."""

from .html import HtmlConverter
from .markdown import MarkdownConverter, escape_text, to_markdown
from .note import NoteConverter, sanitize_filename

__all__ = [
    "HtmlConverter",
    "MarkdownConverter",
    "NoteConverter",
    "escape_text",
    "sanitize_filename",
    "to_markdown",
]
