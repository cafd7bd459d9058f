"""Tests for granola_md.converter.html — HtmlConverter."""

from unittest.mock import MagicMock

from granola_md.converter import HtmlConverter


class TestHtmlConverter:
    def test_converts_headings_and_lists(self):
        markdown = HtmlConverter().convert("<h2>Decisions</h2><ul><li>Ship it</li></ul>")
        assert "## Decisions" in markdown
        assert "Ship it" in markdown

    def test_blank_input(self):
        assert HtmlConverter().convert("") is None
        assert HtmlConverter().convert("   ") is None

    def test_failure_returns_none(self, caplog):
        converter = HtmlConverter()
        broken = MagicMock()
        broken.convert_stream.side_effect = RuntimeError("boom")
        converter.__dict__["_md"] = broken

        assert converter.convert("<p>text</p>") is None
        assert "HTML conversion failed" in caplog.text

    def test_empty_output_returns_none(self):
        converter = HtmlConverter()
        stub = MagicMock()
        stub.convert_stream.return_value.markdown = "  \n"
        converter.__dict__["_md"] = stub

        assert converter.convert("<p></p>") is None
