"""Tests for granola_md.converter.markdown — node tree to Markdown."""

from unittest.mock import patch

import pytest

from granola_md.converter import MarkdownConverter, to_markdown
from granola_md.converter.markdown import escape_line_start, escape_text
from granola_md.extract import extract_text, strip_markdown
from granola_md.tree import parse_tree


def _doc(*blocks):
    return {"type": "doc", "content": list(blocks)}


def _p(*texts):
    return {"type": "paragraph", "content": [{"type": "text", "text": t} for t in texts]}


def _h(level, text):
    return {"type": "heading", "attrs": {"level": level}, "content": [{"type": "text", "text": text}]}


def _item(*blocks, type="listItem", **attrs):
    node = {"type": type, "content": list(blocks)}
    if attrs:
        node["attrs"] = attrs
    return node


# ---------------------------------------------------------------------------
# Block structure
# ---------------------------------------------------------------------------


class TestBlocks:
    def test_meeting_notes(self, meeting_tree):
        assert to_markdown(meeting_tree) == (
            "# Weekly sync\n\n"
            "Discussed the Q3 roadmap.\n\n"
            "## Action Items\n\n"
            "- Ship the importer\n"
            "- Review filenames"
        )

    def test_heading_levels_clamped(self):
        assert to_markdown(_doc(_h(9, "deep"))) == "###### deep"
        assert to_markdown(_doc(_h(0, "low"))) == "# low"
        assert to_markdown(_doc({"type": "heading", "content": [{"type": "text", "text": "x"}]})) == "# x"

    def test_empty_blocks_dropped(self):
        tree = _doc({"type": "paragraph"}, _p("a"), _p(""), _h(2, "  "))
        assert to_markdown(tree) == "a"

    def test_horizontal_rule(self):
        assert to_markdown(_doc(_p("a"), {"type": "horizontalRule"}, _p("b"))) == "a\n\n---\n\nb"

    def test_hard_break(self):
        tree = _doc({
            "type": "paragraph",
            "content": [{"type": "text", "text": "a"}, {"type": "hardBreak"}, {"type": "text", "text": "b"}],
        })
        assert to_markdown(tree) == "a  \nb"

    def test_code_block_is_verbatim(self):
        tree = _doc({
            "type": "codeBlock",
            "attrs": {"language": "python"},
            "content": [{"type": "text", "text": "x = 1\n*y* = [2]"}],
        })
        assert to_markdown(tree) == "```python\nx = 1\n*y* = [2]\n```"

    def test_blockquote(self):
        tree = _doc({"type": "blockquote", "content": [_p("one"), _p("two")]})
        assert to_markdown(tree) == "> one\n>\n> two"

    def test_no_trailing_newline(self, meeting_tree):
        assert not to_markdown(meeting_tree).endswith("\n")


class TestLists:
    def test_ordered_start(self):
        tree = _doc({"type": "orderedList", "attrs": {"start": 3}, "content": [_item(_p("a")), _item(_p("b"))]})
        assert to_markdown(tree) == "3. a\n4. b"

    def test_ordered_order_attr(self):
        tree = _doc({"type": "orderedList", "attrs": {"order": 2}, "content": [_item(_p("a"))]})
        assert to_markdown(tree) == "2. a"

    def test_nested_bullets(self):
        inner = {"type": "bulletList", "content": [_item(_p("b"))]}
        tree = _doc({"type": "bulletList", "content": [_item(_p("a"), inner), _item(_p("c"))]})
        assert to_markdown(tree) == "- a\n  - b\n- c"

    def test_nested_under_ordered(self):
        inner = {"type": "bulletList", "content": [_item(_p("b"))]}
        tree = _doc({"type": "orderedList", "content": [_item(_p("a"), inner)]})
        assert to_markdown(tree) == "1. a\n   - b"

    def test_task_list(self):
        tree = _doc({
            "type": "taskList",
            "content": [
                _item(_p("done"), type="taskItem", checked=True),
                _item(_p("todo"), type="taskItem", checked=False),
            ],
        })
        assert to_markdown(tree) == "- [x] done\n- [ ] todo"

    def test_empty_items_dropped(self):
        tree = _doc({"type": "bulletList", "content": [_item(_p("")), _item(_p("a"))]})
        assert to_markdown(tree) == "- a"

    def test_item_text_is_escaped(self):
        tree = _doc({"type": "bulletList", "content": [_item(_p("- nested-looking"))]})
        assert to_markdown(tree) == "- \\- nested-looking"


# ---------------------------------------------------------------------------
# Inline text
# ---------------------------------------------------------------------------


class TestInline:
    def test_runs_get_separating_space(self):
        assert to_markdown(_doc(_p("Hello", "world"))) == "Hello world"

    def test_runs_with_own_space_not_doubled(self):
        assert to_markdown(_doc(_p("Hello ", "world"))) == "Hello world"

    def test_marks_are_ignored(self):
        tree = _doc({
            "type": "paragraph",
            "content": [{"type": "text", "text": "bold", "marks": [{"type": "bold"}]}],
        })
        assert to_markdown(tree) == "bold"

    def test_inline_syntax_escaped(self):
        assert to_markdown(_doc(_p("2 * 3 = [6] `x` a_b"))) == r"2 \* 3 = \[6\] \`x\` a\_b"

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("# not a heading", r"\# not a heading"),
            ("#hashtag", "#hashtag"),
            ("- not a bullet", r"\- not a bullet"),
            ("+ plus", r"\+ plus"),
            ("> not a quote", r"\> not a quote"),
            ("1. not a list", r"1\. not a list"),
            ("2) nor this", r"2\) nor this"),
            ("~~~ fence", r"\~~~ fence"),
        ],
    )
    def test_line_start_markers_escaped(self, text, expected):
        assert to_markdown(_doc(_p(text))) == expected

    def test_soft_newlines_in_text(self):
        assert to_markdown(_doc(_p("one\n- two"))) == "one\n\\- two"

    def test_entities_stay_literal(self):
        assert to_markdown(_doc(_p("a &amp; b"))) == "a &amp;amp; b"

    def test_tags_stay_literal(self):
        assert to_markdown(_doc(_p("use the <div> element"))) == "use the &lt;div> element"

    def test_escape_helpers(self):
        assert escape_text("[a]*b*") == r"\[a\]\*b\*"
        assert escape_text("AT&T <b>") == "AT&amp;T &lt;b>"
        assert escape_line_start("10. ten") == r"10\. ten"
        assert escape_line_start("plain") == "plain"


# ---------------------------------------------------------------------------
# Robustness
# ---------------------------------------------------------------------------


class TestRobustness:
    @pytest.mark.parametrize("value", [None, "", "<p>x</p>", 5, [], {}, {"type": "doc", "content": "x"}])
    def test_malformed_roots(self, value):
        assert to_markdown(value) == ""

    def test_unknown_container_renders_children(self):
        tree = _doc({"type": "callout", "content": [_p("inside")]})
        assert to_markdown(tree) == "inside"

    def test_unknown_inline_container(self):
        tree = _doc({
            "type": "paragraph",
            "content": [
                {"type": "text", "text": "hi"},
                {"type": "mention", "content": [{"type": "text", "text": "@ana"}]},
            ],
        })
        assert to_markdown(tree) == "hi @ana"

    def test_unknown_leaf_dropped(self):
        assert to_markdown(_doc({"type": "image", "attrs": {"src": "x.png"}}, _p("a"))) == "a"

    def test_tables_degrade_to_text(self):
        cell = {"type": "tableCell", "content": [_p("c1")]}
        tree = _doc({"type": "table", "content": [{"type": "tableRow", "content": [cell]}]})
        assert to_markdown(tree) == "c1"

    def test_deep_tree_keeps_shallow_content(self):
        node = {"type": "text", "text": "deep"}
        for _ in range(3000):
            node = {"type": "blockquote", "content": [node]}
        assert to_markdown(_doc(_p("top"), node)) == "top"

    def test_raised_ceiling_is_capped(self):
        node = {"type": "text", "text": "deep"}
        for _ in range(400):
            node = {"type": "blockquote", "content": [node]}
        assert to_markdown(_doc(_p("top"), node), max_depth=1000) == "top"

    def test_nesting_within_ceiling_rendered(self):
        node = {"type": "text", "text": "deep"}
        for _ in range(50):
            node = {"type": "blockquote", "content": [node]}
        assert to_markdown(_doc(node)) == "> " * 50 + "deep"

    def test_internal_error_degrades_to_empty(self, meeting_tree):
        with patch.object(MarkdownConverter, "convert", side_effect=RuntimeError("boom")):
            assert to_markdown(meeting_tree) == ""

    def test_deterministic(self, meeting_tree):
        assert to_markdown(meeting_tree) == to_markdown(meeting_tree)

    def test_accepts_parsed_tree(self, meeting_tree):
        assert to_markdown(parse_tree(meeting_tree)) == to_markdown(meeting_tree)

    def test_input_not_mutated(self, meeting_tree):
        snapshot = repr(meeting_tree)
        to_markdown(meeting_tree)
        assert repr(meeting_tree) == snapshot


# ---------------------------------------------------------------------------
# Round trip with the extractor
# ---------------------------------------------------------------------------

TRICKY = [
    "Cost: 5 * 3 = 15",
    "- not a list",
    "# hash",
    "[link](https://x.io)",
    "under_score and `code`",
    "back\\slash \\* star",
    "1. numbered",
    "> quote",
    "~~~ tilde",
    "***",
    "a  b",
    "use the <div> element",
    "a &amp; b",
    "AT&T <b>bold</b> &lt;x&gt;",
    "&nbsp; and &#39;",
]


class TestRoundTrip:
    def test_tag_and_entity_text_survive(self):
        tree = _doc(_p("use the <div> element"), _p("a &amp; b"))
        md = to_markdown(tree)
        assert extract_text(md) == md
        assert strip_markdown(extract_text(md)) == "use the <div> element a &amp; b"
        assert extract_text(tree) == "use the <div> element a &amp; b"

    def test_markdown_is_stable_under_extraction(self):
        md = to_markdown(_doc(*[_p(t) for t in TRICKY]))
        assert extract_text(md) == md

    def test_strip_markdown_recovers_text(self):
        tree = _doc(_h(2, "Title * star"), *[_p(t) for t in TRICKY])
        md = to_markdown(tree)
        assert strip_markdown(extract_text(md)) == extract_text(tree)

    @pytest.mark.parametrize("text", TRICKY)
    def test_each_paragraph(self, text):
        tree = _doc(_p(text))
        assert strip_markdown(to_markdown(tree)) == extract_text(tree)
