"""Node tree to Markdown conversion.

Each block node renders to a string without surrounding blank lines; blocks
are joined with one blank line. Inline content is rendered line by line so
hard breaks, escaping and indentation stay consistent across paragraphs,
headings, list items and quotes.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from granola_md.tree import MAX_DEPTH, ContainerNode, LeafNode, Node, TextNode, parse_tree

logger = logging.getLogger(__name__)

HARD_BREAK = "  \n"

_INLINE_ESCAPE_RE = re.compile(r"([\\`*_\[\]])")
_LINE_START_RE = re.compile(r"^(#{1,6}(?=\s|$)|~{3}|[>+=-]|\d+(?=[.)]))")

_LIST_TYPES = {"bulletList", "orderedList", "taskList"}
_ITEM_TYPES = {"listItem", "taskItem"}
_INLINE_LEAVES = {"hardBreak"}


def to_markdown(root: Any, max_depth: int = MAX_DEPTH) -> str:
    """Render a document tree (raw mapping or parsed node) as Markdown.

    Malformed or empty trees give ``""``. Never raises.
    """
    try:
        tree = parse_tree(root, max_depth=max_depth)
        if tree is None:
            return ""
        return MarkdownConverter().convert(tree)
    except Exception:
        logger.warning("Markdown conversion failed; returning empty body", exc_info=True)
        return ""


def escape_text(text: str) -> str:
    """Make literal text safe to embed in Markdown.

    Inline syntax characters are backslash-escaped. ``&`` and ``<`` become
    ``&amp;`` and ``&lt;`` so entity-like text and tag-like text stay literal
    instead of turning into HTML.
    """
    text = text.replace("&", "&amp;").replace("<", "&lt;")
    return _INLINE_ESCAPE_RE.sub(r"\\\1", text)


def escape_line_start(line: str) -> str:
    """Escape a leading marker that would turn ``line`` into a block."""
    return _LINE_START_RE.sub(_escape_marker, line, count=1)


def _escape_marker(match: re.Match) -> str:
    marker = match.group(1)
    if marker[0].isdigit():
        return f"{marker}\\"
    return f"\\{marker}"


@dataclass
class _Line:
    text: str = ""
    hard: bool = False


class MarkdownConverter:
    """Dispatches on node type; unknown types fall back to their children."""

    def __init__(self) -> None:
        self._blocks: dict[str, Callable[[ContainerNode], str]] = {
            "doc": self._render_children,
            "paragraph": self._paragraph,
            "heading": self._heading,
            "bulletList": self._list,
            "orderedList": self._list,
            "taskList": self._list,
            "blockquote": self._blockquote,
            "codeBlock": self._code_block,
        }

    def convert(self, root: ContainerNode) -> str:
        return self._render_children(root)

    # ------------------------------------------------------------------
    # Block dispatch
    # ------------------------------------------------------------------

    def render_block(self, node: Node) -> str:
        if isinstance(node, TextNode):
            return self._inline_block([node])
        if isinstance(node, LeafNode):
            if node.type == "horizontalRule":
                return "---"
            return ""

        handler = self._blocks.get(node.type)
        if handler is not None:
            return handler(node)
        if node.type in _ITEM_TYPES:
            return self._list(ContainerNode(type="bulletList", content=(node,)))
        return self._unknown(node)

    def _render_children(self, node: ContainerNode) -> str:
        """Render children as blocks, grouping stray inline runs into paragraphs."""
        blocks: list[str] = []
        pending: list[Node] = []

        def flush() -> None:
            if pending:
                blocks.append(self._inline_block(pending))
                pending.clear()

        for child in node.content:
            if _is_inline(child):
                pending.append(child)
                continue
            flush()
            blocks.append(self.render_block(child))
        flush()

        return "\n\n".join(block for block in blocks if block)

    def _unknown(self, node: ContainerNode) -> str:
        if node.content and all(_is_inline(child) for child in node.content):
            return self._inline_block(list(node.content))
        return self._render_children(node)

    # ------------------------------------------------------------------
    # Block handlers
    # ------------------------------------------------------------------

    def _paragraph(self, node: ContainerNode) -> str:
        return self._inline_block(list(node.content))

    def _heading(self, node: ContainerNode) -> str:
        text = self._inline_block(list(node.content))
        if not text:
            return ""
        # headings cannot span lines
        text = " ".join(line.rstrip() for line in text.split("\n"))
        return f"{'#' * _heading_level(node.attrs)} {text}"

    def _list(self, node: ContainerNode) -> str:
        number = _start_number(node.attrs)
        lines: list[str] = []
        for child in node.content:
            if isinstance(child, ContainerNode) and child.type in _LIST_TYPES:
                # a list directly inside a list: treat as nested under the previous item
                nested = self.render_block(child)
                if nested:
                    lines.append(_indent(nested, "  "))
                continue

            marker = self._marker(node, child, number)
            item = self._list_item(child, marker)
            if item:
                lines.append(item)
                number += 1
        return "\n".join(lines)

    def _marker(self, parent: ContainerNode, item: Node, number: int) -> str:
        if parent.type == "orderedList":
            return f"{number}. "
        if parent.type == "taskList" or getattr(item, "type", "") == "taskItem":
            checked = isinstance(item, ContainerNode) and bool(item.attrs.get("checked"))
            return "- [x] " if checked else "- [ ] "
        return "- "

    def _list_item(self, item: Node, marker: str) -> str:
        if not isinstance(item, ContainerNode):
            text = self._inline_block([item]) if isinstance(item, TextNode) else ""
            return f"{marker}{text}" if text else ""

        # the first paragraph (or leading inline run) becomes the item line
        children = list(item.content)
        head: list[Node] = []
        if children and isinstance(children[0], ContainerNode) and children[0].type == "paragraph":
            head = list(children.pop(0).content)
        else:
            while children and _is_inline(children[0]):
                head.append(children.pop(0))

        first = self._inline_block(head)
        rest = self._render_children(ContainerNode(type="listItem", content=tuple(children)))

        if not first and not rest:
            return ""

        # task boxes align continuation lines with the bullet, not the box
        continuation = " " * (2 if marker.startswith("- ") else len(marker))
        lines = [f"{marker}{_indent(first, continuation).lstrip()}".rstrip()]
        if rest:
            lines.append(_indent(rest, continuation))
        return "\n".join(lines)

    def _blockquote(self, node: ContainerNode) -> str:
        body = self._render_children(node)
        if not body:
            return ""
        return "\n".join(f"> {line}".rstrip() for line in body.split("\n"))

    def _code_block(self, node: ContainerNode) -> str:
        language = node.attrs.get("language")
        language = language if isinstance(language, str) else ""
        code = "".join(_raw_text(node)).rstrip("\n")
        fence = "````" if "```" in code else "```"
        return f"{fence}{language}\n{code}\n{fence}"

    # ------------------------------------------------------------------
    # Inline rendering
    # ------------------------------------------------------------------

    def _inline_block(self, nodes: list[Node]) -> str:
        """Render inline nodes to escaped lines joined by soft or hard breaks."""
        lines = [_Line()]
        for node in nodes:
            self._inline(node, lines)

        kept = [line for line in lines if line.text.strip()]
        parts: list[str] = []
        for index, line in enumerate(kept):
            parts.append(escape_line_start(line.text.strip()))
            if index < len(kept) - 1:
                parts.append(HARD_BREAK if line.hard else "\n")
        return "".join(parts)

    def _inline(self, node: Node, lines: list[_Line]) -> None:
        if isinstance(node, TextNode):
            segments = node.text.split("\n")
            for index, segment in enumerate(segments):
                if index:
                    lines.append(_Line())
                _append_run(lines[-1], escape_text(segment))
        elif isinstance(node, LeafNode):
            if node.type in _INLINE_LEAVES:
                lines[-1].hard = True
                lines.append(_Line())
        else:
            for child in node.content:
                self._inline(child, lines)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _is_inline(node: Node) -> bool:
    if isinstance(node, TextNode):
        return True
    return isinstance(node, LeafNode) and node.type in _INLINE_LEAVES


def _append_run(line: _Line, run: str) -> None:
    """Concatenate a run, keeping words apart when neither side has a space."""
    if not run:
        return
    if line.text and not line.text[-1].isspace() and not run[0].isspace():
        line.text += " "
    line.text += run


def _indent(text: str, prefix: str) -> str:
    return "\n".join(f"{prefix}{line}" if line else line for line in text.split("\n"))


def _raw_text(node: Node) -> list[str]:
    if isinstance(node, TextNode):
        return [node.text]
    if isinstance(node, LeafNode):
        return ["\n"] if node.type in _INLINE_LEAVES else []
    runs: list[str] = []
    for child in node.content:
        runs.extend(_raw_text(child))
    return runs


def _heading_level(attrs: Mapping[str, Any]) -> int:
    level = attrs.get("level")
    try:
        level = int(level)
    except (TypeError, ValueError):
        return 1
    return min(max(level, 1), 6)


def _start_number(attrs: Mapping[str, Any]) -> int:
    for key in ("start", "order"):
        value = attrs.get(key)
        if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
            return value
    return 1
