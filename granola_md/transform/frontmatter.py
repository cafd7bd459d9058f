"""Prepends the YAML frontmatter block to a note body."""

from collections.abc import Mapping
from typing import Any

import yaml

from .pipeline import Transform


class FrontmatterInjector(Transform):
    name = "frontmatter"

    def apply(self, content: str, metadata: Mapping[str, Any]) -> str:
        if not metadata:
            return content

        dumped = yaml.dump(dict(metadata), default_flow_style=False, sort_keys=False, allow_unicode=True)
        return f"---\n{dumped}---\n\n{content}"
