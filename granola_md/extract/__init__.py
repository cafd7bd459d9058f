"""Content extraction — plain text from strings, HTML and node trees."""

from granola_md.extract.html import (
    decode_entities,
    looks_like_html,
    normalize_whitespace,
    strip_html,
    strip_markdown,
)
from granola_md.extract.text import extract_text, has_visible_text, tree_text

__all__ = [
    "decode_entities",
    "extract_text",
    "has_visible_text",
    "looks_like_html",
    "normalize_whitespace",
    "strip_html",
    "strip_markdown",
    "tree_text",
]
