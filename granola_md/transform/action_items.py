"""Turns bullets under an action-items header into Markdown tasks."""

import logging
import re
from collections.abc import Mapping
from typing import Any

from granola_md.config.models import ActionItemsConfig

from .pipeline import Transform

logger = logging.getLogger(__name__)

_KEYWORDS = r"(action\s*items?|actions?|tasks?|to-?dos?|to\s+dos?|follow-?\s*ups?|next\s+steps?)"

ACTION_HEADER_PATTERNS = [
    # "## Action Items", "### Next steps for Q3"
    re.compile(rf"^#{{1,6}}\s+.*\b{_KEYWORDS}\b.*$", re.IGNORECASE),
    # "Action Items", "Follow-ups"
    re.compile(rf"^{_KEYWORDS}\b.*$", re.IGNORECASE),
    # "Meeting outcome: follow-ups"
    re.compile(rf"^.*:\s*{_KEYWORDS}\b.*$", re.IGNORECASE),
]

_HEADING_RE = re.compile(r"^#{1,6}\s")
_BULLET_RE = re.compile(r"^(\s*)[-*] (.*)$")
_TASK_RE = re.compile(r"^\s*[-*] \[[ xX]\]( |$)")


def is_action_header(line: str) -> bool:
    stripped = line.strip()
    if _BULLET_RE.match(stripped):
        return False
    return any(pattern.match(stripped) for pattern in ACTION_HEADER_PATTERNS)


class ActionItemsToTasks(Transform):
    """Rewrites ``- item`` as ``- [ ] item`` inside action-item sections.

    A section starts at a matching header and runs until the next Markdown
    heading that is not itself an action-items header.
    """

    name = "action_items"

    def __init__(self, config: ActionItemsConfig):
        self.config = config

    def apply(self, content: str, metadata: Mapping[str, Any]) -> str:
        if not content.strip():
            return content

        out: list[str] = []
        in_section = False
        converted = 0

        for line in content.split("\n"):
            if is_action_header(line):
                in_section = True
                out.append(line)
                continue

            if in_section and _HEADING_RE.match(line.strip()):
                in_section = False

            bullet = _BULLET_RE.match(line)
            if in_section and bullet and not _TASK_RE.match(line):
                indent, text = bullet.groups()
                out.append(f"{indent}- [ ] {text}")
                converted += 1
                continue

            out.append(line)

        if converted and self.config.add_task_tag and self.config.task_tag_name:
            out.extend(["", self.config.task_tag_name])

        if converted:
            logger.debug("Converted %d action items to tasks", converted)
        return "\n".join(out)
