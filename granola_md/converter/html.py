"""Panel HTML to Markdown, wrapping MarkItDown."""

from __future__ import annotations

import io
import logging
from functools import cached_property

from markitdown import MarkItDown

logger = logging.getLogger(__name__)


class HtmlConverter:
    """Converts HTML fragments to Markdown. Returns None on any error."""

    @cached_property
    def _md(self) -> MarkItDown:
        return MarkItDown(enable_plugins=False)

    def convert(self, html: str) -> str | None:
        if not html or not html.strip():
            return None

        try:
            result = self._md.convert_stream(io.BytesIO(html.encode("utf-8")), file_extension=".html")
            markdown = result.markdown
        except Exception:
            logger.warning("HTML conversion failed", exc_info=True)
            return None

        markdown = (markdown or "").strip()
        return markdown or None
