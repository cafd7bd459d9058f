"""Node tree model for Granola's ProseMirror-style document JSON.

Raw API payloads are parsed into three frozen variants:

* ``TextNode``: a leaf carrying a ``text`` string
* ``ContainerNode``: an ordered sequence of child nodes
* ``LeafNode``: neither text nor children (``hardBreak``,
  ``horizontalRule``, or a malformed node)

Parsing is tolerant: wrong-typed fields are dropped rather than rejected, and
subtrees deeper than ``max_depth`` (itself capped at ``MAX_DEPTH_LIMIT``) are
cut off so adversarial payloads cannot exhaust the stack.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

logger = logging.getLogger(__name__)

MAX_DEPTH = 100
# upper bound for any requested max_depth
MAX_DEPTH_LIMIT = 200


@dataclass(frozen=True)
class TextNode:
    text: str
    type: str = "text"


@dataclass(frozen=True)
class ContainerNode:
    type: str
    content: tuple[Node, ...] = ()
    attrs: dict[str, Any] = field(default_factory=dict, compare=False)


@dataclass(frozen=True)
class LeafNode:
    type: str
    attrs: dict[str, Any] = field(default_factory=dict, compare=False)


Node = Union[TextNode, ContainerNode, LeafNode]


def parse_tree(value: Any, max_depth: int = MAX_DEPTH) -> ContainerNode | None:
    """Parse a document root.

    The root must be a mapping whose ``content`` is a list; anything else
    (a bare string, a non-list ``content``, an empty mapping) yields None.
    """
    if isinstance(value, ContainerNode):
        return value
    if not isinstance(value, Mapping) or not isinstance(value.get("content"), list):
        return None

    state = _ParseState(max_depth)
    node_type = value.get("type")
    return ContainerNode(
        type=node_type if isinstance(node_type, str) and node_type else "doc",
        content=state.children(value["content"], 1),
        attrs=_attrs(value),
    )


def iter_text(node: Node) -> Iterator[str]:
    """Yield text runs in document order without recursion."""
    stack: list[Node] = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, TextNode):
            yield current.text
        elif isinstance(current, ContainerNode):
            stack.extend(reversed(current.content))


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------


class _ParseState:
    """Carries the depth ceiling and warns at most once per parse."""

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max(1, min(max_depth, MAX_DEPTH_LIMIT))
        self.truncated = False

    def parse(self, raw: Any, depth: int) -> Node | None:
        if not isinstance(raw, Mapping):
            return None

        node_type = raw.get("type")
        if not isinstance(node_type, str):
            node_type = ""

        text = raw.get("text")
        content = raw.get("content")
        has_children = isinstance(content, list)

        if isinstance(text, str) and (text or not has_children):
            return TextNode(text=text, type=node_type or "text")

        if has_children:
            return ContainerNode(
                type=node_type,
                content=self.children(content, depth + 1),
                attrs=_attrs(raw),
            )

        return LeafNode(type=node_type, attrs=_attrs(raw))

    def children(self, items: list, depth: int) -> tuple[Node, ...]:
        if depth > self.max_depth:
            if not self.truncated:
                self.truncated = True
                logger.warning(
                    "Node tree deeper than %d levels; dropping nested content",
                    self.max_depth,
                )
            return ()

        parsed = (self.parse(item, depth) for item in items)
        return tuple(node for node in parsed if node is not None)


def _attrs(raw: Mapping) -> dict[str, Any]:
    attrs = raw.get("attrs")
    return dict(attrs) if isinstance(attrs, Mapping) else {}
