"""TransformPipeline — rewrites a rendered note body on its way to the vault."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any

logger = logging.getLogger(__name__)


class Transform(ABC):
    """One rewrite step over a note body.

    ``metadata`` is the note's frontmatter mapping (``NoteFrontmatter.to_yaml_dict``).
    """

    name = "transform"

    @abstractmethod
    def apply(self, content: str, metadata: Mapping[str, Any]) -> str:
        ...


class TransformPipeline:
    """Runs transforms in insertion order; each sees the previous one's output."""

    def __init__(self, transforms: Iterable[Transform] = ()):
        self.transforms = list(transforms)

    def add(self, transform: Transform) -> TransformPipeline:
        self.transforms.append(transform)
        return self

    def apply(self, content: str, metadata: Mapping[str, Any]) -> str:
        for transform in self.transforms:
            content = transform.apply(content, metadata)
            logger.debug("%s -> %d chars", transform.name, len(content))
        return content

    def __len__(self) -> int:
        return len(self.transforms)
