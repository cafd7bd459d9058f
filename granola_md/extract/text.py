"""Plain-text extraction from strings, HTML fragments and node trees."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from granola_md.extract.html import looks_like_html, normalize_whitespace, strip_html
from granola_md.tree import MAX_DEPTH, ContainerNode, iter_text, parse_tree

logger = logging.getLogger(__name__)


def extract_text(value: Any, max_depth: int = MAX_DEPTH) -> str:
    """Flatten any content value to plain text.

    * ``None`` and unsupported shapes give ``""``.
    * Strings without tag spans come back untouched.
    * Strings with tag spans are stripped, entity-decoded and collapsed.
    * Node trees give their text runs joined by one space, collapsed and
      trimmed.

    Never raises.
    """
    if value is None:
        return ""
    try:
        if isinstance(value, str):
            return strip_html(value) if looks_like_html(value) else value
        if isinstance(value, (Mapping, ContainerNode)):
            root = parse_tree(value, max_depth=max_depth)
            if root is None:
                return ""
            return tree_text(root)
    except Exception:
        logger.warning("Text extraction failed; treating value as empty", exc_info=True)
    return ""


def tree_text(root: ContainerNode) -> str:
    """Join every text run under ``root`` with a space and normalize."""
    return normalize_whitespace(" ".join(iter_text(root)))


def has_visible_text(value: Any, max_depth: int = MAX_DEPTH) -> bool:
    """True when ``value`` extracts to anything besides whitespace."""
    return bool(extract_text(value, max_depth=max_depth).strip())
