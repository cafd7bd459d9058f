"""String-level helpers: HTML stripping, entity decoding, Markdown flattening."""

from __future__ import annotations

import html
import re

_TAG_RE = re.compile(r"<[^>]*>")
_TAG_LIKE_RE = re.compile(r"<[^<>]*>")
_WHITESPACE_RE = re.compile(r"\s+")

# Markdown flattening
_FENCE_RE = re.compile(r"^[ \t]*(?:```|~~~).*$", re.MULTILINE)
_RULE_RE = re.compile(r"^[ \t]*([-*_])(?:[ \t]*\1){2,}[ \t]*$", re.MULTILINE)
_BLOCK_PREFIX_RE = re.compile(
    r"^[ \t]*(?:>[ \t]?)*[ \t]*"
    r"(?:#{1,6}[ \t]+|(?:[-*+]|\d+[.)])[ \t]+(?:\[[ xX]\](?:[ \t]+|$))?)?",
    re.MULTILINE,
)
_LINK_RE = re.compile(r"(?<!\\)!?\[([^\]]*)\]\([^)]*\)")
_EMPHASIS_RE = re.compile(r"(?<!\\)[*_`]+")
_ESCAPE_RE = re.compile(r"\\([\\`*_{}\[\]()#+\-.!>|~=])")


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space and trim."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def looks_like_html(text: str) -> bool:
    return bool(_TAG_LIKE_RE.search(text))


def decode_entities(text: str) -> str:
    """Decode HTML5 named and numeric entities.

    ``&nbsp;`` becomes a regular space so titles and filenames stay plain.
    """
    if "&" not in text:
        return text
    return html.unescape(text).replace("\xa0", " ")


def strip_html(text: str) -> str:
    """Drop tag spans, decode entities, collapse whitespace.

    Tags are replaced by a space before decoding, so an encoded ``&lt;b&gt;``
    survives as literal text.
    """
    without_tags = _TAG_RE.sub(" ", text)
    return normalize_whitespace(decode_entities(without_tags))


def strip_markdown(markdown: str) -> str:
    """Re-read Markdown as plain text.

    Removes fences, horizontal rules, line-leading block markers (headings,
    list bullets, task boxes, quotes), link targets and unescaped emphasis
    characters, then resolves backslash escapes and character entities.
    Escaped characters are always kept, which makes this the inverse of the
    converter's escaping.
    """
    if not markdown:
        return ""
    text = _FENCE_RE.sub("", markdown)
    text = _RULE_RE.sub("", text)
    text = _BLOCK_PREFIX_RE.sub("", text)
    text = _LINK_RE.sub(r"\1", text)
    text = _EMPHASIS_RE.sub("", text)
    text = _ESCAPE_RE.sub(r"\1", text)
    return normalize_whitespace(decode_entities(text))
