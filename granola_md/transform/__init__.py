"""Transform pipeline applied to a note body before it is written."""

from .pipeline import Transform, TransformPipeline
from .action_items import ActionItemsToTasks
from .frontmatter import FrontmatterInjector

__all__ = [
    "Transform",
    "TransformPipeline",
    "ActionItemsToTasks",
    "FrontmatterInjector",
]
