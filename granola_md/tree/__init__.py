"""Node tree model shared by the extractor and the Markdown converter."""

from granola_md.tree.nodes import (
    MAX_DEPTH,
    MAX_DEPTH_LIMIT,
    ContainerNode,
    LeafNode,
    Node,
    TextNode,
    iter_text,
    parse_tree,
)

__all__ = [
    "ContainerNode",
    "LeafNode",
    "MAX_DEPTH",
    "MAX_DEPTH_LIMIT",
    "Node",
    "TextNode",
    "iter_text",
    "parse_tree",
]
